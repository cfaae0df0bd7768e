"""In-memory TTL cache for rendered images.

Rendered badge/certificate bytes are cached per request signature
(identifier, format, raw query string). Each entry carries its own TTL,
fixed when it is stored. Expired entries are dropped lazily on read and
swept periodically by a background task started in the app lifespan.

Note: Cache is per-worker/replica, not shared across instances, and is
never invalidated when the underlying record changes. Entries go stale for
at most one TTL after an edit.

Capacity is unbounded; the key space is bounded by
identifiers x formats x distinct override query strings.
"""

import asyncio
import logging
import math
import threading
import time
from collections.abc import Callable
from typing import NamedTuple

from cachetools import TLRUCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
DEFAULT_SWEEP_INTERVAL_SECONDS = 60


class _Entry(NamedTuple):
    value: bytes
    ttl: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class ResponseCache:
    """Thread-safe key -> bytes cache with per-entry expiry.

    ``cachetools`` caches are not thread-safe on their own; every map access
    goes through ``self._lock``. Rendering never happens under the lock.
    """

    def __init__(self, timer: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._items: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=math.inf, ttu=_time_to_use, timer=timer
        )

    def get(self, key: str) -> bytes | None:
        """Return cached bytes, or None when missing or expired."""
        with self._lock:
            entry = self._items.get(key)
        return entry.value if entry is not None else None

    def set(
        self, key: str, value: bytes, ttl: float | None = DEFAULT_TTL_SECONDS
    ) -> None:
        """Store value for ``ttl`` seconds.

        ``None`` or a non-positive TTL means the entry never expires.
        """
        forever = ttl is None or ttl <= 0
        entry = _Entry(value, math.inf if forever else float(ttl))
        with self._lock:
            self._items[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def expire(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        with self._lock:
            return len(self._items.expire())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def build_cache_key(
    commit_id: str, fmt: str, raw_query: str, outlook: str = "badge"
) -> str:
    """Key for one request signature, e.g. ``badge:softcat:png:style=flat``."""
    return f"{outlook}:{commit_id}:{fmt}:{raw_query}"


async def cache_sweep_loop(
    cache: ResponseCache,
    interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
) -> None:
    """Background loop that sweeps expired entries on a timer.

    Runs forever until cancelled. Independent of read/write traffic.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = cache.expire()
            if removed:
                logger.debug(
                    "image_cache.swept",
                    extra={"removed": removed, "remaining": len(cache)},
                )
        except Exception:
            logger.exception("image_cache.sweep.failed")
