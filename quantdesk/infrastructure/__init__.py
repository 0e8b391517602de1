"""
基础设施层 - 横切关注点

提供日志、缓存、并发、错误处理等基础服务。

包含：
- logging: 结构化日志系统
- errors: 错误定义和错误边界
- cache: TTL 缓存
- concurrency: 并行扇出与协作取消
"""

from quantdesk.infrastructure.logging import (
    setup_logging,
    get_logger,
    LogContext,
    log_performance,
    StructuredFormatter,
    SimpleFormatter,
)
from quantdesk.infrastructure.errors import (
    QuantDeskError,
    ValidationError,
    OperationCancelledError,
    ErrorHandler,
    error_boundary,
)
from quantdesk.infrastructure.cache import (
    AGGREGATOR_CACHE_TTL,
    CLIENT_CACHE_TTL,
    CacheStats,
    TTLCache,
    build_cache_key,
)
from quantdesk.infrastructure.concurrency import (
    CancellationToken,
    check_cancelled,
    chunked,
    fan_out,
)

__all__ = [
    # 日志
    "setup_logging",
    "get_logger",
    "LogContext",
    "log_performance",
    "StructuredFormatter",
    "SimpleFormatter",
    # 错误
    "QuantDeskError",
    "ValidationError",
    "OperationCancelledError",
    "ErrorHandler",
    "error_boundary",
    # 缓存
    "AGGREGATOR_CACHE_TTL",
    "CLIENT_CACHE_TTL",
    "CacheStats",
    "TTLCache",
    "build_cache_key",
    # 并发
    "CancellationToken",
    "check_cancelled",
    "chunked",
    "fan_out",
]
