"""
错误处理 - 统一错误定义和处理

提供：
- 业务异常类层次
- 错误码定义
- 错误边界：聚合器操作永不向调用方抛出
"""

from typing import Optional, Dict, Any, Callable
from functools import wraps
import logging

from quantdesk.domain.models import ErrorCode
from quantdesk.ports.interfaces import DataUnavailableError, UpstreamTimeoutError


logger = logging.getLogger(__name__)


# ==================== 异常类层次 ====================

class QuantDeskError(Exception):
    """QuantDesk 基础异常"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(QuantDeskError):
    """请求参数验证错误"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_INPUT,
            details={"field": field} if field else {}
        )


class OperationCancelledError(QuantDeskError):
    """操作已被取消"""

    def __init__(self, operation: str = "unknown"):
        super().__init__(
            message=f"操作 '{operation}' 已取消",
            error_code=ErrorCode.CANCELLED,
            details={"operation": operation}
        )


# ==================== 错误处理工具 ====================

class ErrorHandler:
    """错误处理器"""

    @staticmethod
    def handle_exception(
        e: Exception,
        context: Optional[str] = None
    ) -> QuantDeskError:
        """
        将异常转换为 QuantDeskError

        Args:
            e: 原始异常
            context: 上下文信息

        Returns:
            QuantDeskError: 标准化的错误
        """
        if isinstance(e, QuantDeskError):
            return e

        error_message = str(e)
        if context:
            error_message = f"[{context}] {error_message}"

        if isinstance(e, UpstreamTimeoutError):
            return QuantDeskError(error_message, ErrorCode.TIMEOUT, {"source": e.source})

        if isinstance(e, DataUnavailableError):
            return QuantDeskError(error_message, ErrorCode.DATA_UNAVAILABLE, {"source": e.source})

        return QuantDeskError(
            message=error_message,
            error_code=ErrorCode.INTERNAL_ERROR,
            details={"original_type": type(e).__name__}
        )


def error_boundary(
    default: Any = None,
    reraise: bool = False,
    context: Optional[str] = None
):
    """
    错误边界装饰器

    Args:
        default: 失败时返回的默认值；可调用对象会在每次失败时调用以生成新值
        reraise: 是否重新抛出异常
        context: 上下文信息
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except OperationCancelledError as e:
                logger.info(f"操作已取消: {e.message}")
                if reraise:
                    raise
            except Exception as e:
                error = ErrorHandler.handle_exception(e, context or func.__name__)
                logger.error(f"错误边界捕获: {error.message}", exc_info=True)
                if reraise:
                    raise error from e
            return default() if callable(default) else default
        return wrapper
    return decorator
