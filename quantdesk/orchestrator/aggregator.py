"""
行情聚合器 - 统一数据获取入口

设计原则：
1. 先查缓存：命中直接返回，未命中才访问上游
2. 只缓存成功且非空的结果，失败不会被缓存
3. 错误隔离：任何异常都降级为空值，不向调用方抛出
4. 地区补充：主数据源缺少基本面时，按市场查找补充数据源，只填补缺口
5. 列表结果以元组写入缓存，每次返回新的列表，调用方修改不影响缓存
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Union

from quantdesk.domain.models import (
    DEFAULT_PERIOD,
    Fundamentals,
    HistoricalPoint,
    NewsItem,
    Period,
    Quote,
    SearchResult,
    StockSnapshot,
)
from quantdesk.domain.symbols import MAX_BATCH_SYMBOLS, Market, base_symbol, sanitize_symbols
from quantdesk.infrastructure.cache import AGGREGATOR_CACHE_TTL, TTLCache, build_cache_key
from quantdesk.infrastructure.concurrency import CancellationToken, chunked, fan_out
from quantdesk.infrastructure.errors import OperationCancelledError, error_boundary
from quantdesk.infrastructure.logging import LogContext
from quantdesk.orchestrator.fallbacks import FundamentalsFallbackRegistry
from quantdesk.ports.interfaces import FundamentalsPort, QuoteProviderPort


logger = logging.getLogger(__name__)

BATCH_CHUNK_SIZE = 5
MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100

# 补充数据源可以填补的字段
FILLABLE_FIELDS = ("pe", "pbr", "eps", "roe", "dividend_yield")


def merge_fundamentals(quote: Quote, fundamentals: Fundamentals) -> Quote:
    """
    用补充数据填补行情中仍然缺失的字段

    主数据源已有的值永远不会被覆盖。
    """
    updates = {}
    for name in FILLABLE_FIELDS:
        value = getattr(fundamentals, name)
        if getattr(quote, name) is None and value is not None:
            updates[name] = value
    if quote.name_kr is None and fundamentals.name:
        updates["name_kr"] = fundamentals.name
    return replace(quote, **updates) if updates else quote


class Aggregator:
    """
    行情聚合器

    职责：
    1. 缓存检查与写入
    2. 调用主数据源（必要时并行）
    3. 韩国股票基本面补充
    4. 批量请求分块
    """

    def __init__(
        self,
        quote_provider: QuoteProviderPort,
        cache: TTLCache,
        fallbacks: Optional[FundamentalsFallbackRegistry] = None,
        batch_chunk_size: int = BATCH_CHUNK_SIZE,
        max_batch_symbols: int = MAX_BATCH_SYMBOLS,
    ):
        """
        Args:
            quote_provider: 主数据源
            cache: 聚合器缓存（与客户端缓存是两个实例）
            fallbacks: 地区补充数据源注册表
            batch_chunk_size: 批量请求每块的并发数
            max_batch_symbols: 批量请求最多处理的代码数
        """
        self.provider = quote_provider
        self.cache = cache
        self.fallbacks = fallbacks or FundamentalsFallbackRegistry()
        self.batch_chunk_size = batch_chunk_size
        self.max_batch_symbols = max_batch_symbols

    # ==================== 单只行情 ====================

    @error_boundary(default=None, context="get_quote")
    def get_quote(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> Optional[Quote]:
        """获取单只股票行情，缺失的基本面由地区补充数据源填补"""
        key = build_cache_key("quote", base_symbol(symbol))
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"缓存命中 {key}", extra={'cache': 'hit', 'symbol': symbol})
            return cached

        quote = self.provider.fetch_quote(symbol, token)
        if quote is None:
            logger.info(f"无行情数据: {symbol}", extra={'symbol': symbol})
            return None

        quote = self._fill_fundamentals(quote, token)
        self.cache.set(key, quote)
        return quote

    def _fill_fundamentals(
        self,
        quote: Quote,
        token: Optional[CancellationToken],
    ) -> Quote:
        if not quote.missing_fundamentals():
            return quote

        port = self.fallbacks.resolve(quote.symbol)
        if port is None:
            return quote

        fundamentals = self._get_fundamentals(port, quote.symbol, token)
        if fundamentals is None:
            return quote
        return merge_fundamentals(quote, fundamentals)

    def _get_fundamentals(
        self,
        port: FundamentalsPort,
        symbol: str,
        token: Optional[CancellationToken],
    ) -> Optional[Fundamentals]:
        key = build_cache_key("fundamentals", base_symbol(symbol))
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            fundamentals = port.fetch_fundamentals(symbol, token)
        except OperationCancelledError:
            raise
        except Exception as e:
            # 补充数据源失败不影响主行情
            logger.warning(f"基本面补充失败 {symbol}: {e}", extra={'symbol': symbol})
            return None

        if fundamentals is not None:
            self.cache.set(key, fundamentals)
        return fundamentals

    # ==================== 批量行情 ====================

    @error_boundary(default=list, context="get_quotes_batch")
    def get_quotes_batch(
        self,
        symbols: Sequence[str],
        token: Optional[CancellationToken] = None,
    ) -> List[Quote]:
        """
        批量获取行情

        缓存命中的直接使用；未命中的按块顺序请求，块内并行。
        结果保持输入顺序，无数据的代码被丢弃。
        """
        requested = sanitize_symbols(symbols, self.max_batch_symbols)
        found: Dict[str, Quote] = {}
        misses: List[str] = []

        for symbol in requested:
            base = base_symbol(symbol)
            cached = self.cache.get(build_cache_key("quote", base))
            if cached is not None:
                found[base] = cached
            else:
                misses.append(symbol)

        with LogContext(logger, "get_quotes_batch", requested=len(requested), cached=len(found)):
            for chunk in chunked(misses, self.batch_chunk_size):
                if token is not None and token.cancelled:
                    logger.info("批量请求已取消，停止请求剩余分块")
                    break
                results = fan_out({
                    symbol: (lambda symbol=symbol: self.get_quote(symbol, token))
                    for symbol in chunk
                })
                for symbol, quote in results.items():
                    if quote is not None:
                        found[base_symbol(symbol)] = quote

        return [found[base_symbol(s)] for s in requested if base_symbol(s) in found]

    # ==================== 历史 / 新闻 / 搜索 ====================

    @error_boundary(default=list, context="get_history")
    def get_history(
        self,
        symbol: str,
        period: Union[str, Period] = DEFAULT_PERIOD,
        token: Optional[CancellationToken] = None,
    ) -> List[HistoricalPoint]:
        period = Period.parse(period)
        key = build_cache_key("history", base_symbol(symbol), period.value)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        history = self.provider.fetch_history(symbol, period.value, token)
        if history:
            self.cache.set(key, tuple(history))
        return list(history or [])

    @error_boundary(default=list, context="get_news")
    def get_news(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> List[NewsItem]:
        key = build_cache_key("news", base_symbol(symbol))
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        news = self.provider.fetch_news(symbol, token)
        if news:
            self.cache.set(key, tuple(news))
        return list(news or [])

    @error_boundary(default=list, context="search")
    def search(
        self,
        query: str,
        token: Optional[CancellationToken] = None,
    ) -> List[SearchResult]:
        """搜索股票，少于 2 个字符的查询不访问上游"""
        query = (query or "").strip()[:MAX_QUERY_LENGTH]
        if len(query) < MIN_QUERY_LENGTH:
            return []

        key = build_cache_key("search", query.lower())
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        results = self.provider.search(query, token)
        if results:
            self.cache.set(key, tuple(results))
        return list(results or [])

    # ==================== 组合 ====================

    @error_boundary(default=StockSnapshot, context="get_all")
    def get_all(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> StockSnapshot:
        """并行获取行情、一个月历史和新闻，部分为空时仍返回组合结果"""
        with LogContext(logger, "get_all", symbol=symbol):
            results = fan_out({
                "quote": lambda: self.get_quote(symbol, token),
                "history": lambda: self.get_history(symbol, DEFAULT_PERIOD, token),
                "news": lambda: self.get_news(symbol, token),
            })
        return StockSnapshot(
            quote=results["quote"],
            history=results["history"] or [],
            news=results["news"] or [],
        )


# 工厂函数：按配置组装默认的数据源与缓存
def create_aggregator(
    cache_ttl: float = AGGREGATOR_CACHE_TTL,
    cache_max_entries: Optional[int] = None,
    timeout: Optional[float] = None,
    batch_chunk_size: int = BATCH_CHUNK_SIZE,
    max_batch_symbols: int = MAX_BATCH_SYMBOLS,
    yahoo_base_url: Optional[str] = None,
    naver_base_url: Optional[str] = None,
) -> Aggregator:
    """
    创建 Aggregator 实例

    主数据源为 Yahoo Finance，韩国市场注册 Naver 证券作为基本面补充。
    """
    from quantdesk.adapters.http_client import DEFAULT_TIMEOUT
    from quantdesk.adapters.naver_adapter import NaverFundamentalsAdapter
    from quantdesk.adapters.yahoo_adapter import YahooFinanceAdapter

    timeout = timeout or DEFAULT_TIMEOUT
    fallbacks = FundamentalsFallbackRegistry()
    fallbacks.register(
        Market.KRX,
        NaverFundamentalsAdapter(timeout=timeout, base_url=naver_base_url),
    )

    return Aggregator(
        quote_provider=YahooFinanceAdapter(timeout=timeout, base_url=yahoo_base_url),
        cache=TTLCache(ttl=cache_ttl, max_size=cache_max_entries),
        fallbacks=fallbacks,
        batch_chunk_size=batch_chunk_size,
        max_batch_symbols=max_batch_symbols,
    )
