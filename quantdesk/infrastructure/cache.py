"""
缓存系统 - 吸收突发请求

提供：
- 内存缓存（TTL + 可选容量上限）
- 惰性过期：读取时发现过期即驱逐
- 可注入时钟，便于测试过期逻辑
- 缓存命中率统计
"""

from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Generic, Optional, TypeVar

from quantdesk.ports.interfaces import ClockPort


T = TypeVar('T')

AGGREGATOR_CACHE_TTL = 60    # 服务端聚合缓存（秒）
CLIENT_CACHE_TTL = 30        # 客户端缓存（秒）


def build_cache_key(operation: str, *parts: Any) -> str:
    """
    生成确定性的缓存键

    Examples:
        build_cache_key("quote", "005930") -> "quote:005930"
        build_cache_key("history", "AAPL", "1mo") -> "history:AAPL:1mo"
    """
    return ":".join([operation] + [str(part) for part in parts if part is not None])


@dataclass
class CacheEntry(Generic[T]):
    """缓存条目，写入后不可变"""
    value: T
    written_at: float


@dataclass
class CacheStats:
    """缓存统计"""
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """命中率"""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """转为字典"""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "hit_rate": round(self.hit_rate * 100, 2),
        }


class TTLCache(Generic[T]):
    """
    TTL 缓存实现

    支持：
    - 固定 TTL，now - written_at >= ttl 即视为过期
    - 可选最大容量（超出时驱逐最久未使用的条目）
    - 线程安全
    - 统计信息
    """

    def __init__(
        self,
        ttl: float = AGGREGATOR_CACHE_TTL,
        clock: Optional[ClockPort] = None,
        max_size: Optional[int] = None,
    ):
        """
        初始化缓存

        Args:
            ttl: 过期时间（秒）
            clock: 时钟，默认使用系统单调时钟
            max_size: 最大条目数，None 表示不限制
        """
        if clock is None:
            # 延迟导入，避免基础设施层与适配器层循环依赖
            from quantdesk.adapters.system_clock_adapter import SystemClockAdapter
            clock = SystemClockAdapter()

        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._cache: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = RLock()
        self._stats = CacheStats()

    def get(self, key: str) -> Optional[T]:
        """
        获取缓存值

        Args:
            key: 缓存键

        Returns:
            缓存值，不存在或已过期时返回 None
        """
        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self._stats.misses += 1
                return None

            if self._clock.now() - entry.written_at >= self.ttl:
                del self._cache[key]
                self._stats.misses += 1
                self._stats.size = len(self._cache)
                return None

            self._cache.move_to_end(key)
            self._stats.hits += 1
            return entry.value

    def set(self, key: str, value: T) -> None:
        """
        设置缓存值，已存在的键整体覆盖

        Args:
            key: 缓存键
            value: 缓存值
        """
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            if self.max_size is not None:
                while len(self._cache) >= self.max_size:
                    self._cache.popitem(last=False)
                    self._stats.evictions += 1

            self._cache[key] = CacheEntry(value=value, written_at=self._clock.now())
            self._stats.size = len(self._cache)

    def delete(self, key: str) -> bool:
        """删除缓存条目"""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                self._stats.size = len(self._cache)
                return True
            return False

    def clear(self) -> None:
        """清空缓存"""
        with self._lock:
            self._cache.clear()
            self._stats.size = 0

    def cleanup_expired(self) -> int:
        """
        清理过期条目

        Returns:
            清理的条目数
        """
        with self._lock:
            now = self._clock.now()
            expired_keys = [
                k for k, v in self._cache.items()
                if now - v.written_at >= self.ttl
            ]
            for key in expired_keys:
                del self._cache[key]

            self._stats.size = len(self._cache)
            return len(expired_keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def stats(self) -> CacheStats:
        """获取统计信息"""
        with self._lock:
            self._stats.size = len(self._cache)
            return self._stats

    def get_stats_dict(self) -> Dict[str, Any]:
        """获取统计信息字典"""
        return self.stats.to_dict()
