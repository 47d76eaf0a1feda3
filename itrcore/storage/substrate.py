"""
substrate.py — Key-to-text persistence substrates for the RecordStore.

Every substrate exposes the same three synchronous, whole-value operations:
  get(key)        → str | None
  set(key, value) → None
  delete(key)     → None

Failures of any kind surface as StorageError so the store has exactly one
exception type to catch.

Implementations:
  - MemorySubstrate   dict-backed, optional byte quota (tests, ephemeral use)
  - FileSubstrate     one <key>.json file per key, atomic replace on write
  - RedisSubstrate    sync redis-py client, optional TTL

Logs only key names — never stored values (they carry PAN and amounts).
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Protocol

import redis

from itrcore.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A substrate rejected a read, write or delete."""


class KeyValueSubstrate(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class MemorySubstrate:
    """
    Dict-backed substrate.
    quota_bytes, when set, caps the total UTF-8 size of all stored values; a write
    that would exceed it raises StorageError and leaves the old value in place.
    """

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self._data: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageError(f"Quota of {self.quota_bytes} bytes exceeded writing key={key}")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


# ---------------------------------------------------------------------------
# File
# ---------------------------------------------------------------------------

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileSubstrate:
    """
    Stores each key as <directory>/<key>.json.
    Writes go to a temp file in the same directory followed by os.replace(),
    so a reader sees either the old document or the new one, never a torn write.
    """

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read key={key}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write key={key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete key={key}: {exc}") from exc


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

class RedisSubstrate:
    """
    Substrate over a synchronous redis.Redis client created with decode_responses=True.
    ttl_seconds=None stores without expiry; otherwise every write resets the TTL.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: Optional[int] = None) -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as exc:
            raise StorageError(f"Redis GET failed key={key}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            if self.ttl_seconds:
                self.client.setex(key, self.ttl_seconds, value)
            else:
                self.client.set(key, value)
        except redis.RedisError as exc:
            raise StorageError(f"Redis SET failed key={key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as exc:
            raise StorageError(f"Redis DEL failed key={key}: {exc}") from exc


def create_redis_substrate(
    url: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
) -> RedisSubstrate:
    """
    Build a RedisSubstrate from a URL (defaults to settings.redis_url).
    Verifies connectivity with PING before returning.
    """
    client = redis.Redis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    client.ping()
    logger.info("Redis substrate connected at %s", url or settings.redis_url)
    return RedisSubstrate(client, ttl_seconds=ttl_seconds)


__all__ = [
    "StorageError",
    "KeyValueSubstrate",
    "MemorySubstrate",
    "FileSubstrate",
    "RedisSubstrate",
    "create_redis_substrate",
]
