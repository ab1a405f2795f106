"""
Key-value stores with lazily checked expiry.

Entries are written as a JSON envelope that records when they go stale:

    {"expires_at": "2026-10-19T12:00:00+00:00", "payload": "<snapshot>"}

The backing key outlives its TTL (see CACHE_RETENTION_S) so a stale
snapshot is still readable; whether to trust it is the caller's decision.
"""

import asyncio
import hashlib
import json
import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Protocol

from geocontacts.infrastructure.observability.logging import get_logger
from geocontacts.services.redis_client import FastRedisClient

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class CacheStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str, ttl_s: int) -> bool: ...

    async def is_expired(self, key: str) -> bool: ...


def encode_entry(value: str, ttl_s: int, now: datetime) -> str:
    expires_at = now + timedelta(seconds=ttl_s)
    return json.dumps({"expires_at": expires_at.isoformat(), "payload": value})


def decode_entry(raw: str | None) -> tuple[str, datetime] | None:
    """Return (payload, expires_at), or None when the envelope is missing or unreadable."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
        payload = data["payload"]
        expires_at = datetime.fromisoformat(data["expires_at"])
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("Discarding unreadable cache entry", error=str(e))
        return None

    if not isinstance(payload, str):
        return None
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    return payload, expires_at


class RedisCacheStore:
    """CacheStore over the pooled Redis client."""

    def __init__(self, client: FastRedisClient, retention_s: int, clock: Clock = utc_now):
        self.client = client
        self.retention_s = retention_s
        self.clock = clock

    async def get(self, key: str) -> str | None:
        entry = decode_entry(await self.client.get(key))
        return entry[0] if entry else None

    async def put(self, key: str, value: str, ttl_s: int) -> bool:
        raw = encode_entry(value, ttl_s, self.clock())
        # Keep the key around past its TTL for offline readers
        return await self.client.set_with_ttl(key, raw, max(ttl_s, self.retention_s))

    async def is_expired(self, key: str) -> bool:
        entry = decode_entry(await self.client.get(key))
        if entry is None:
            return True
        return self.clock() >= entry[1]


class FileCacheStore:
    """CacheStore persisting one JSON file per key under a local directory."""

    def __init__(self, cache_dir: os.PathLike | str, clock: Clock = utc_now):
        self.cache_dir = Path(cache_dir)
        self.clock = clock

    def _path_for_key(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def _read(self, key: str) -> str | None:
        path = self._path_for_key(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Cache file read failed", key=key[:30], error=str(e))
            return None

    def _write(self, key: str, raw: str) -> bool:
        path = self._path_for_key(key)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".tmp")
            tmp_path.write_text(raw, encoding="utf-8")
            tmp_path.replace(path)
            return True
        except OSError as e:
            logger.error("Cache file write failed", key=key[:30], error=str(e))
            return False

    async def get(self, key: str) -> str | None:
        entry = decode_entry(await asyncio.to_thread(self._read, key))
        return entry[0] if entry else None

    async def put(self, key: str, value: str, ttl_s: int) -> bool:
        raw = encode_entry(value, ttl_s, self.clock())
        return await asyncio.to_thread(self._write, key, raw)

    async def is_expired(self, key: str) -> bool:
        entry = decode_entry(await asyncio.to_thread(self._read, key))
        if entry is None:
            return True
        return self.clock() >= entry[1]
