"""
领域模型层 - 核心业务实体和值对象

包含：
- Quote: 股票行情
- HistoricalPoint: 历史 K 线数据点
- NewsItem: 新闻条目
- Metrics / AgentDecision: 评分输入与决策
- symbols: 代码规范化与市场分类
"""

from quantdesk.domain.models import (
    AgentDecision,
    DEFAULT_PERIOD,
    ErrorCode,
    Fundamentals,
    HistoricalPoint,
    Metrics,
    NewsItem,
    Period,
    Quote,
    SearchResult,
    Signal,
    StockEvaluation,
    StockSnapshot,
)
from quantdesk.domain.symbols import (
    Market,
    base_symbol,
    classify_market,
    is_krx_symbol,
    is_valid_symbol,
    korean_name,
    provider_symbol,
    sanitize_symbols,
)

__all__ = [
    "AgentDecision",
    "DEFAULT_PERIOD",
    "ErrorCode",
    "Fundamentals",
    "HistoricalPoint",
    "Metrics",
    "NewsItem",
    "Period",
    "Quote",
    "SearchResult",
    "Signal",
    "StockEvaluation",
    "StockSnapshot",
    "Market",
    "base_symbol",
    "classify_market",
    "is_krx_symbol",
    "is_valid_symbol",
    "korean_name",
    "provider_symbol",
    "sanitize_symbols",
]
