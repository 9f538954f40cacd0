"""In-memory translation cache with per-entry expiry."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60  # 24 小时（秒）

# 写入后条目数为该值的倍数时清理过期项
SWEEP_EVERY = 100


@dataclass
class CacheEntry:
    value: str
    expires_at: float


def cache_key(engine: str, text: str) -> str:
    """Cache key for a text under an engine. Case and whitespace sensitive."""
    return f"{engine}:{text}"


class TranslationCache:
    """
    Process-lifetime key/value store with expiry.

    Expired entries are evicted lazily when read, and swept in bulk
    whenever a write leaves the store at a multiple of 100 entries.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                # 过期即删除
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        if ttl is None:
            ttl = self.default_ttl
        with self._lock:
            self._entries[key] = CacheEntry(value, self._clock() + ttl)
            if len(self._entries) % SWEEP_EVERY == 0:
                self._sweep()

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def _sweep(self) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
