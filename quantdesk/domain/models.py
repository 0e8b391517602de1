"""
核心领域模型 - 行情、历史、新闻与决策实体

设计原则：
1. 不可变性：使用 frozen=True 确保模型不可变
2. 部分数据合法：所有基本面字段独立可选，缺失不是错误
3. 可序列化：to_dict() 输出与 HTTP 契约一致的 camelCase 结构
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple


# ==================== 枚举类型 ====================

class Signal(str, Enum):
    """交易信号"""
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"


class Period(str, Enum):
    """历史数据周期"""
    ONE_DAY = "1d"
    FIVE_DAYS = "5d"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    SIX_MONTHS = "6mo"
    ONE_YEAR = "1y"
    TWO_YEARS = "2y"
    FIVE_YEARS = "5y"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Period":
        """解析周期，无效或缺失时回落到 1mo"""
        try:
            return cls(value)
        except ValueError:
            return cls.ONE_MONTH


DEFAULT_PERIOD = Period.ONE_MONTH


class ErrorCode(str, Enum):
    """错误码"""
    SUCCESS = "success"
    INVALID_INPUT = "invalid_input"
    DATA_UNAVAILABLE = "data_unavailable"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    INTERNAL_ERROR = "internal_error"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """去掉值为 None 的可选字段"""
    return {k: v for k, v in data.items() if v is not None}


# ==================== 值对象 ====================

@dataclass(frozen=True)
class Quote:
    """
    股票行情

    change = price - previous_close；
    previous_close 为 0 或缺失时 change_percent 为 0。
    """
    symbol: str                             # 基础代码（已去除市场后缀）
    name: str
    price: float
    change: float
    change_percent: float
    currency: str = "USD"
    name_kr: Optional[str] = None           # 本地化名称
    previous_close: Optional[float] = None
    market_cap: Optional[float] = None
    volume: Optional[float] = None
    day_high: Optional[float] = None
    day_low: Optional[float] = None
    fifty_two_week_high: Optional[float] = None
    fifty_two_week_low: Optional[float] = None
    pe: Optional[float] = None
    pbr: Optional[float] = None
    eps: Optional[float] = None
    roe: Optional[float] = None             # 百分比
    dividend_yield: Optional[float] = None  # 百分比
    beta: Optional[float] = None

    @staticmethod
    def price_change(price: float, previous_close: float) -> Tuple[float, float]:
        """计算 (change, change_percent)"""
        change = price - previous_close
        if not previous_close:
            return change, 0.0
        return change, change / previous_close * 100

    def missing_fundamentals(self) -> List[str]:
        """返回仍缺失的核心估值字段"""
        return [
            name for name in ("pe", "pbr", "eps", "roe")
            if getattr(self, name) is None
        ]

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于 JSON 序列化）"""
        return _compact({
            "symbol": self.symbol,
            "name": self.name,
            "nameKr": self.name_kr,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "currency": self.currency,
            "previousClose": self.previous_close,
            "marketCap": self.market_cap,
            "volume": self.volume,
            "dayHigh": self.day_high,
            "dayLow": self.day_low,
            "fiftyTwoWeekHigh": self.fifty_two_week_high,
            "fiftyTwoWeekLow": self.fifty_two_week_low,
            "pe": self.pe,
            "pbr": self.pbr,
            "eps": self.eps,
            "roe": self.roe,
            "dividendYield": self.dividend_yield,
            "beta": self.beta,
        })


@dataclass(frozen=True)
class HistoricalPoint:
    """单个交易日的 OHLCV 数据"""
    date: str       # 日期标签，如 "3/14"
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class NewsItem:
    """新闻条目"""
    title: str
    link: str
    publisher: str
    published_at: datetime
    thumbnail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        published = self.published_at.isoformat().replace("+00:00", "Z")
        return _compact({
            "title": self.title,
            "link": self.link,
            "publisher": self.publisher,
            "publishedAt": published,
            "thumbnail": self.thumbnail,
        })


@dataclass(frozen=True)
class SearchResult:
    """代码搜索结果"""
    symbol: str
    name: str
    type: str = "EQUITY"

    def to_dict(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "name": self.name, "type": self.type}


@dataclass(frozen=True)
class Fundamentals:
    """补充数据源提供的基本面指标"""
    pe: Optional[float] = None
    pbr: Optional[float] = None
    eps: Optional[float] = None
    roe: Optional[float] = None
    dividend_yield: Optional[float] = None
    name: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is None
            for name in ("pe", "pbr", "eps", "roe", "dividend_yield", "name")
        )


@dataclass(frozen=True)
class StockSnapshot:
    """单只股票的组合数据（行情 + 历史 + 新闻）"""
    quote: Optional[Quote] = None
    history: List[HistoricalPoint] = field(default_factory=list)
    news: List[NewsItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quote": self.quote.to_dict() if self.quote else None,
            "history": [point.to_dict() for point in self.history],
            "news": [item.to_dict() for item in self.news],
        }


# ==================== 评分模型 ====================

@dataclass(frozen=True)
class Metrics:
    """评分输入，0 表示未知而非差"""
    per: float = 0.0
    pbr: float = 0.0
    roe: float = 0.0
    momentum: float = 50.0
    eps: float = 0.0
    dividend_yield: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per": self.per,
            "pbr": self.pbr,
            "roe": self.roe,
            "momentum": self.momentum,
            "eps": self.eps,
            "dividendYield": self.dividend_yield,
        }


@dataclass(frozen=True)
class AgentDecision:
    """买入/持有/卖出决策"""
    signal: Signal
    quant_score: int
    sentiment_score: int
    final_score: int
    confidence: int
    reasoning: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signal": self.signal.value,
            "quantScore": self.quant_score,
            "sentimentScore": self.sentiment_score,
            "finalScore": self.final_score,
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
        }


@dataclass(frozen=True)
class StockEvaluation:
    """组合数据 + 指标 + 决策"""
    snapshot: StockSnapshot
    metrics: Optional[Metrics] = None
    decision: Optional[AgentDecision] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.snapshot.to_dict()
        data["metrics"] = self.metrics.to_dict() if self.metrics else None
        data["decision"] = self.decision.to_dict() if self.decision else None
        return data
