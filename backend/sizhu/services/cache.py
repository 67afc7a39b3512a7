# backend/sizhu/services/cache.py
"""命盤快取

以輸入時刻為鍵記憶推算結果：
- 存活時間 (TTL) 由設定決定，時鐘由外部注入以便測試
- 並行請求下，同一個鍵最多只計算一次
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Hashable, Optional

from sizhu.config import settings


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float


@dataclass
class KeyLock:
    """單一鍵的計算鎖與等待中的請求數"""
    lock: threading.Lock = field(default_factory=threading.Lock)
    waiters: int = 0


class ChartCache:
    """具存活時間的記憶體快取

    Attributes:
        ttl: 存活秒數
        clock: 回傳目前時間（秒）的函式，預設為 time.monotonic
    """

    def __init__(self, ttl: float, clock: Optional[Callable[[], float]] = None):
        if ttl <= 0:
            raise ValueError(f"ttl 必須大於 0: {ttl}")
        self.ttl = ttl
        self.clock = clock or time.monotonic
        self._entries: dict[Hashable, CacheEntry] = {}
        self._key_locks: dict[Hashable, KeyLock] = {}
        self._lock = threading.Lock()

    def _fresh(self, key: Hashable) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= self.ttl:
            del self._entries[key]
            return None
        return entry

    def get(self, key: Hashable) -> Optional[Any]:
        """取得未過期的值，不存在則返回 None"""
        with self._lock:
            entry = self._fresh(key)
        return entry.value if entry is not None else None

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> tuple[Any, bool]:
        """取得快取值，不存在時計算並存入

        計算失敗時例外直接往上拋，不會存入快取。

        Returns:
            (值, 是否命中快取)
        """
        with self._lock:
            entry = self._fresh(key)
            if entry is not None:
                logger.debug("快取命中: %s", key)
                return entry.value, True
            key_lock = self._key_locks.setdefault(key, KeyLock())
            key_lock.waiters += 1

        try:
            with key_lock.lock:
                # 等待期間可能已由其他請求算好
                with self._lock:
                    entry = self._fresh(key)
                if entry is not None:
                    return entry.value, True

                logger.debug("快取未命中: %s", key)
                value = compute()
                with self._lock:
                    self._entries[key] = CacheEntry(value=value, stored_at=self.clock())
        finally:
            # 仍有請求在等待時保留這把鎖
            with self._lock:
                key_lock.waiters -= 1
                if key_lock.waiters == 0:
                    del self._key_locks[key]
        return value, False

    def clear(self) -> int:
        """清除所有快取

        Returns:
            清除的筆數
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("已清除 %d 筆快取", count)
        return count

    @property
    def size(self) -> int:
        """未過期的快取筆數"""
        with self._lock:
            now = self.clock()
            return sum(1 for e in self._entries.values() if now - e.stored_at < self.ttl)


@lru_cache
def get_chart_cache() -> ChartCache:
    """取得共用的命盤快取"""
    return ChartCache(ttl=settings.cache_ttl_seconds)
