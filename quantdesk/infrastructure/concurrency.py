"""
并发工具 - 扇出请求与协作取消

- fan_out: 并行执行一组调用并等待全部完成，单个失败记为 None
- chunked: 按固定大小切分批次
- CancellationToken: 协作式取消令牌
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from threading import Event
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from quantdesk.infrastructure.errors import OperationCancelledError


logger = logging.getLogger(__name__)

T = TypeVar('T')


class CancellationToken:
    """
    协作式取消令牌

    调用方在请求被新请求取代时调用 cancel()；
    适配器在每次上游请求前调用 raise_if_cancelled()。
    """

    def __init__(self):
        self._event = Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str = "unknown") -> None:
        if self._event.is_set():
            raise OperationCancelledError(operation)


def check_cancelled(token: Optional[CancellationToken], operation: str) -> None:
    """令牌可选时的便捷检查"""
    if token is not None:
        token.raise_if_cancelled(operation)


def fan_out(
    calls: Dict[str, Callable[[], Any]],
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """
    并行执行多个无参调用，等待全部完成

    单个调用抛出的异常会被记录并以 None 代替，不会让整个汇合失败；
    取消异常除外，它会在全部调用结束后重新抛出。

    Args:
        calls: 名称 -> 调用
        max_workers: 最大线程数，默认与调用数相同

    Returns:
        名称 -> 结果（失败为 None）
    """
    if not calls:
        return {}

    results: Dict[str, Any] = {}
    cancelled: Optional[OperationCancelledError] = None

    with ThreadPoolExecutor(max_workers=max_workers or len(calls)) as executor:
        futures = {name: executor.submit(call) for name, call in calls.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except OperationCancelledError as e:
                cancelled = e
                results[name] = None
            except Exception as e:
                logger.warning(f"并行调用 {name} 失败: {e}")
                results[name] = None

    if cancelled is not None:
        raise cancelled
    return results


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """按固定大小切分序列"""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
