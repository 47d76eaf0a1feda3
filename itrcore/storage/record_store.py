"""
record_store.py — RecordStore: the canonical ITR snapshot and its persistence.

One instance per process, built at startup and passed explicitly to whoever
needs it (form layer, summary step, CLI). No module-level instance.

The snapshot is a plain JSON-compatible dict keyed by section name
(personalDetails / incomeDetails / deductions / taxSummary). Any subset of
sections may be absent. It is stored as one JSON document under one key.

Behaviour:
  - save():      shallow merge over the persisted snapshot — a section in the
                 partial REPLACES the stored section wholesale (no deep merge)
  - auto_save(): debounced save; each call cancels the pending one, so only the
                 latest partial in a debounce window is ever written
  - subscribers are notified synchronously, only after the substrate accepted
                 the write (or delete)
  - no operation raises on substrate failure or malformed stored text — failures
                 are logged and reported through the return value

Logs only key and section names, never section contents (PAN, amounts).
"""
from __future__ import annotations

import copy
import itertools
import json
import logging
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel

from itrcore.config import settings
from itrcore.records.schemas import Section
from itrcore.storage.scheduler import AsyncioScheduler, Cancellable, Scheduler
from itrcore.storage.substrate import KeyValueSubstrate, StorageError

logger = logging.getLogger(__name__)

Snapshot = dict[str, Any]
Subscriber = Callable[[Snapshot], None]
PartialSnapshot = Union[Mapping[Any, Any], BaseModel]


class StoreState(str, Enum):
    uninitialized = "uninitialized"
    loaded = "loaded"


def _section_key(key: Any) -> str:
    return key.value if isinstance(key, Section) else str(key)


def _to_snapshot(partial: PartialSnapshot) -> Snapshot:
    """
    Normalise a partial snapshot to a plain dict keyed by section name.

    A pydantic model (e.g. RecordSnapshot) contributes only the sections that
    were explicitly set on it; each of those sections is dumped in full.
    """
    if isinstance(partial, BaseModel):
        fields = type(partial).model_fields
        dumped = partial.model_dump(mode="json", by_alias=True)
        keys = {fields[name].alias or name for name in partial.model_fields_set}
        return {key: value for key, value in dumped.items() if key in keys}

    return {
        _section_key(key): value.model_dump(mode="json", by_alias=True) if isinstance(value, BaseModel) else value
        for key, value in partial.items()
    }


class RecordStore:
    """
    Merge-save / debounced-autosave / pub-sub store over a key-to-text substrate.

    Args:
        substrate: persistence backend (MemorySubstrate, FileSubstrate, RedisSubstrate, ...)
        scheduler: delay scheduler for auto_save(); defaults to AsyncioScheduler()
        key: substrate key holding the snapshot; defaults to settings.storage_key
        autosave_delay: debounce window in seconds; defaults to settings.autosave_delay_ms / 1000
    """

    def __init__(
        self,
        substrate: KeyValueSubstrate,
        scheduler: Optional[Scheduler] = None,
        key: Optional[str] = None,
        autosave_delay: Optional[float] = None,
    ) -> None:
        self.substrate = substrate
        self.scheduler = scheduler or AsyncioScheduler()
        self.key = key or settings.storage_key
        self.autosave_delay = (
            settings.autosave_delay_seconds if autosave_delay is None else autosave_delay
        )
        self.state = StoreState.uninitialized
        self._subscribers: dict[int, Subscriber] = {}
        self._tokens = itertools.count()
        self._pending: Optional[Cancellable] = None

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load(self) -> Snapshot:
        """
        Read and decode the persisted snapshot.
        Returns {} when nothing is stored, the stored text is not a JSON object,
        or the substrate read fails.
        """
        self.state = StoreState.loaded
        try:
            return self._read()
        except StorageError as exc:
            logger.error("Failed to load snapshot key=%s: %s", self.key, exc)
            return {}

    def _read(self) -> Snapshot:
        """Like load(), but a substrate failure raises StorageError."""
        raw = self.substrate.get(self.key)
        if raw is None:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring malformed snapshot key=%s: %s", self.key, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring non-object snapshot key=%s type=%s", self.key, type(data).__name__)
            return {}
        return data

    def section(self, name: Section | str) -> Optional[Any]:
        """One section of the persisted snapshot, or None if absent."""
        return self.load().get(_section_key(name))

    def has_data(self) -> bool:
        """True if any section holds a non-null value."""
        return any(value is not None for value in self.load().values())

    def completion_status(self) -> dict[str, bool]:
        """Per-section presence flags. Presence, not validity, is the criterion."""
        snapshot = self.load()
        return {section.value: snapshot.get(section.value) is not None for section in Section}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, partial: PartialSnapshot) -> bool:
        """
        Shallow-merge `partial` over the persisted snapshot, write it back and
        notify subscribers with the merged snapshot.

        Returns False (after logging) if the substrate could not be read or
        rejected the write; the persisted snapshot is then unchanged and no
        subscriber is notified.
        """
        update = _to_snapshot(partial)
        self.state = StoreState.loaded
        try:
            merged = {**self._read(), **update}
            self.substrate.set(self.key, json.dumps(merged, ensure_ascii=False))
        except (StorageError, TypeError, ValueError) as exc:
            logger.error("Failed to save sections=%s key=%s: %s", sorted(update), self.key, exc)
            return False

        logger.debug("Saved sections=%s key=%s", sorted(update), self.key)
        self._notify(merged)
        return True

    def auto_save(self, partial: PartialSnapshot) -> None:
        """
        Debounced save(). Restarts the delay on every call; when the delay
        elapses only the most recent partial is saved. Earlier partials are
        discarded, not merged into it.

        The default AsyncioScheduler needs a running event loop; synchronous
        hosts must pass their own scheduler to the constructor.
        """
        update = copy.deepcopy(_to_snapshot(partial))
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self.scheduler.call_later(self.autosave_delay, lambda: self._flush_autosave(update))

    def _flush_autosave(self, update: Snapshot) -> None:
        self._pending = None
        self.save(update)

    def clear(self) -> bool:
        """Delete the persisted snapshot and notify subscribers with {}."""
        try:
            self.substrate.delete(self.key)
        except StorageError as exc:
            logger.error("Failed to clear snapshot key=%s: %s", self.key, exc)
            return False
        logger.info("Cleared snapshot key=%s", self.key)
        self._notify({})
        return True

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register `callback` for every successful save() or clear().
        Returns a function that deregisters it; calling it twice is harmless.
        """
        token = next(self._tokens)
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def _notify(self, snapshot: Snapshot) -> None:
        for callback in list(self._subscribers.values()):
            try:
                callback(copy.deepcopy(snapshot))
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export(self) -> str:
        """The full snapshot as indented, key-sorted JSON."""
        return json.dumps(self.load(), indent=2, sort_keys=True, ensure_ascii=False)

    def import_data(self, text: str) -> bool:
        """
        Parse a backup produced by export() and save() it over the current
        snapshot. Malformed text (or a document that is not a JSON object)
        leaves the store untouched and returns False.
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as exc:
            logger.error("Failed to import data: %s", exc)
            return False
        if not isinstance(data, dict):
            logger.error("Failed to import data: expected a JSON object, got %s", type(data).__name__)
            return False
        return self.save(data)


__all__ = ["RecordStore", "StoreState", "Snapshot"]
