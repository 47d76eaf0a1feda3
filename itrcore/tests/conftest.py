"""
Shared fixtures for itrcore tests.

ManualScheduler replaces real timers: callbacks only run when a test calls
advance(), so debounce behaviour is checked without sleeping.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import pytest

from itrcore.storage.record_store import RecordStore
from itrcore.storage.substrate import MemorySubstrate

STORE_KEY = "itr-data"
AUTOSAVE_DELAY = 5.0


@dataclass
class ManualTimer:
    when: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for AsyncioScheduler."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (t for t in self.timers if not t.cancelled and t.when <= self.now),
            key=lambda t: t.when,
        )
        for timer in due:
            self.timers.remove(timer)
            timer.callback()


class RecordingSubstrate(MemorySubstrate):
    """MemorySubstrate that remembers every value written."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        super().__init__(quota_bytes)
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self.writes.append(value)


@pytest.fixture
def substrate() -> RecordingSubstrate:
    return RecordingSubstrate()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store(substrate: RecordingSubstrate, scheduler: ManualScheduler) -> RecordStore:
    return RecordStore(substrate, scheduler=scheduler, key=STORE_KEY, autosave_delay=AUTOSAVE_DELAY)
