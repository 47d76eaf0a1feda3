"""
scheduler.py — Injectable delay scheduler for debounced autosave.

A scheduler is anything with call_later(delay_seconds, callback) returning a
handle that has cancel(). asyncio's own loop.call_later / TimerHandle pair
already has this shape, so AsyncioScheduler is a thin pass-through.

Tests inject a manual scheduler and advance time themselves.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class AsyncioScheduler:
    """
    Schedules callbacks on an asyncio event loop (single-threaded, cooperative).
    With loop=None the running loop is looked up on every call, so the
    scheduler must be used from inside a coroutine or loop callback.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


__all__ = ["Cancellable", "Scheduler", "AsyncioScheduler"]
