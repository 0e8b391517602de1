"""
请求参数校验

校验失败抛出 ValidationError，消息直接作为 400 响应的 error 字段返回。
"""

from typing import List, Optional

from quantdesk.domain.models import Period
from quantdesk.domain.symbols import MAX_BATCH_SYMBOLS, is_valid_symbol, sanitize_symbols
from quantdesk.infrastructure.errors import ValidationError
from quantdesk.orchestrator.aggregator import MAX_QUERY_LENGTH


VALID_ACTIONS = ("quote", "quotes", "history", "news", "search", "all", "decision")
DEFAULT_ACTION = "quote"


class RequestValidator:
    """stock-data 接口的参数校验"""

    @staticmethod
    def action(value: Optional[str]) -> str:
        action = value or DEFAULT_ACTION
        if action not in VALID_ACTIONS:
            raise ValidationError("Invalid action", field="action")
        return action

    @staticmethod
    def symbol(value: Optional[str]) -> str:
        if not value:
            raise ValidationError("Symbol is required", field="symbol")
        if not is_valid_symbol(value):
            raise ValidationError("Invalid symbol format", field="symbol")
        return value

    @staticmethod
    def symbols(value: Optional[str], limit: int = MAX_BATCH_SYMBOLS) -> List[str]:
        """逗号分隔的代码列表，不合法的条目被丢弃"""
        if not value:
            raise ValidationError("Symbols are required", field="symbols")
        cleaned = sanitize_symbols(value.split(","), limit)
        if not cleaned:
            raise ValidationError("No valid symbols provided", field="symbols")
        return cleaned

    @staticmethod
    def query(value: Optional[str]) -> str:
        if not value:
            raise ValidationError("Query is required", field="query")
        if len(value) > MAX_QUERY_LENGTH or not value.strip():
            raise ValidationError("Invalid query format", field="query")
        return value.strip()

    @staticmethod
    def period(value: Optional[str]) -> Period:
        return Period.parse(value)
