"""
Infrastructure 层测试 - 日志、错误处理、并发、HTTP 客户端
"""

import json
import logging
import threading
import time
import pytest
from unittest.mock import Mock

import requests

from quantdesk.adapters.http_client import HttpClient
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
from quantdesk.infrastructure.concurrency import (
    CancellationToken,
    check_cancelled,
    chunked,
    fan_out,
)
from quantdesk.domain.models import ErrorCode
from quantdesk.ports.interfaces import DataUnavailableError, UpstreamTimeoutError


def make_record(msg="Test message", **extra):
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogging:
    """日志系统测试"""

    def test_get_logger(self):
        """测试获取 logger"""
        logger = get_logger("test")
        assert isinstance(logger, logging.Logger)

    def test_structured_formatter(self):
        """测试结构化格式化器"""
        record = make_record(symbol="AAPL", cache="hit", extra_data={"requested": 3})

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Test message"
        assert data["symbol"] == "AAPL"
        assert data["cache"] == "hit"
        assert data["data"] == {"requested": 3}
        assert "request_id" not in data

    def test_simple_formatter(self):
        """测试简单格式化器"""
        formatted = SimpleFormatter().format(make_record())
        assert "Test message" in formatted

    def test_setup_logging(self):
        root = setup_logging(level="DEBUG", json_format=True)
        try:
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
            assert logging.getLogger("urllib3").level == logging.WARNING
        finally:
            setup_logging(level="INFO")

    def test_log_context(self):
        """测试日志上下文"""
        logger = get_logger("test_context")
        with LogContext(logger=logger, operation="get_all", request_id="test-123", symbol="AAPL") as ctx:
            assert ctx.operation == "get_all"
            assert ctx.extra == {"symbol": "AAPL"}

    def test_log_context_reraises(self):
        logger = get_logger("test_context")
        with pytest.raises(ValueError):
            with LogContext(logger=logger, operation="failing"):
                raise ValueError("boom")

    def test_log_performance_decorator(self):
        """测试性能日志装饰器"""
        logger = get_logger("test_perf")

        @log_performance(logger)
        def quick_function():
            return "done"

        assert quick_function() == "done"


class TestErrors:
    """错误类测试"""

    def test_quantdesk_error(self):
        error = QuantDeskError("失败", ErrorCode.DATA_UNAVAILABLE, {"source": "Yahoo Finance"})

        assert error.to_dict() == {
            "error_code": "data_unavailable",
            "message": "失败",
            "details": {"source": "Yahoo Finance"},
        }

    def test_validation_error(self):
        error = ValidationError("Symbol is required", field="symbol")

        assert error.error_code == ErrorCode.INVALID_INPUT
        assert error.details == {"field": "symbol"}

    def test_operation_cancelled_error(self):
        error = OperationCancelledError("fetch_quote")
        assert error.error_code == ErrorCode.CANCELLED

    def test_handle_timeout_exception(self):
        error = ErrorHandler.handle_exception(UpstreamTimeoutError("slow", source="Naver Finance"))

        assert error.error_code == ErrorCode.TIMEOUT
        assert error.details == {"source": "Naver Finance"}

    def test_handle_data_unavailable(self):
        error = ErrorHandler.handle_exception(DataUnavailableError("404"), context="get_quote")

        assert error.error_code == ErrorCode.DATA_UNAVAILABLE
        assert error.message.startswith("[get_quote]")

    def test_handle_generic_exception(self):
        error = ErrorHandler.handle_exception(KeyError("x"))

        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details["original_type"] == "KeyError"

    def test_handle_quantdesk_error_passthrough(self):
        original = ValidationError("bad")
        assert ErrorHandler.handle_exception(original) is original

    def test_error_boundary_success(self):
        @error_boundary(default=None)
        def ok():
            return 1

        assert ok() == 1

    def test_error_boundary_failure(self):
        @error_boundary(default=list)
        def broken():
            raise RuntimeError("boom")

        first = broken()
        second = broken()
        assert first == []
        assert first is not second

    def test_error_boundary_cancelled(self):
        @error_boundary(default="fallback")
        def cancelled():
            raise OperationCancelledError("op")

        assert cancelled() == "fallback"

    def test_error_boundary_reraise(self):
        @error_boundary(reraise=True)
        def broken():
            raise RuntimeError("boom")

        with pytest.raises(QuantDeskError):
            broken()


class TestConcurrency:
    """并发工具测试"""

    def test_fan_out_runs_in_parallel(self):
        barrier = threading.Barrier(3, timeout=2)

        def wait(value):
            barrier.wait()
            return value

        results = fan_out({name: (lambda name=name: wait(name)) for name in ("a", "b", "c")})

        assert results == {"a": "a", "b": "b", "c": "c"}

    def test_fan_out_failures_become_none(self):
        def broken():
            raise RuntimeError("boom")

        assert fan_out({"ok": lambda: 1, "bad": broken}) == {"ok": 1, "bad": None}

    def test_fan_out_waits_for_all_then_raises_cancelled(self):
        finished = []

        def slow():
            time.sleep(0.05)
            finished.append("slow")
            return 1

        def cancelled():
            raise OperationCancelledError("op")

        with pytest.raises(OperationCancelledError):
            fan_out({"cancelled": cancelled, "slow": slow})
        assert finished == ["slow"]

    def test_fan_out_empty(self):
        assert fan_out({}) == {}

    def test_chunked(self):
        assert list(chunked([1, 2, 3, 4, 5, 6, 7], 5)) == [[1, 2, 3, 4, 5], [6, 7]]
        assert list(chunked([], 5)) == []
        with pytest.raises(ValueError):
            list(chunked([1], 0))

    def test_cancellation_token(self):
        token = CancellationToken()
        check_cancelled(token, "op")
        check_cancelled(None, "op")

        token.cancel()

        assert token.cancelled
        with pytest.raises(OperationCancelledError):
            check_cancelled(token, "op")


class TestHttpClient:
    """HTTP 客户端异常映射测试"""

    def _client(self, session):
        return HttpClient("https://example.com/", source="Test", timeout=2.0, session=session)

    def test_get_json(self, response_factory):
        session = Mock()
        session.get.return_value = response_factory({"ok": True})

        assert self._client(session).get_json("/path", {"q": "x"}) == {"ok": True}
        session.get.assert_called_once_with(
            "https://example.com/path", params={"q": "x"}, headers={}, timeout=2.0,
        )

    def test_timeout(self):
        session = Mock()
        session.get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(UpstreamTimeoutError):
            self._client(session).get_json("/path")

    def test_http_error(self, response_factory):
        session = Mock()
        session.get.return_value = response_factory(None, status=503)

        with pytest.raises(DataUnavailableError, match="503"):
            self._client(session).get_json("/path")

    def test_invalid_json(self, response_factory):
        response = response_factory()
        response.json.side_effect = ValueError("Expecting value")
        session = Mock()
        session.get.return_value = response

        with pytest.raises(DataUnavailableError):
            self._client(session).get_json("/path")

    def test_cancelled_while_waiting_discards_response(self, response_factory):
        token = CancellationToken()
        session = Mock()

        def slow_get(url, params=None, headers=None, timeout=None):
            token.cancel()
            return response_factory({"ok": True})

        session.get.side_effect = slow_get

        with pytest.raises(OperationCancelledError):
            self._client(session).get_json("/path", token=token)
        session.get.assert_called_once()
