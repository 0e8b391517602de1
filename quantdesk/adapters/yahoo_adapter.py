"""
Yahoo Finance 适配器 - 实现 QuoteProviderPort

从 Yahoo Finance 的公开 JSON 接口获取行情、历史、新闻和搜索结果，
并转换为领域模型。

行情由三个并行请求合并：
- chart：价格、昨收、日内区间、52 周区间（必需）
- quoteSummary：估值/盈利能力指标、beta、市值（尽力而为）
- v7 quote：同一批字段的备用来源（尽力而为）
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from quantdesk.adapters.extractors import (
    as_number,
    dig,
    first_present,
    percent,
    raw,
    resolve_fields,
    text,
)
from quantdesk.adapters.http_client import DEFAULT_TIMEOUT, HttpClient, encode_path_segment
from quantdesk.domain.models import (
    HistoricalPoint,
    NewsItem,
    Period,
    Quote,
    SearchResult,
)
from quantdesk.domain.symbols import base_symbol, korean_name, provider_symbol
from quantdesk.infrastructure.concurrency import CancellationToken, fan_out
from quantdesk.ports.interfaces import DataUnavailableError, QuoteProviderPort


logger = logging.getLogger(__name__)

NEWS_LIMIT = 5
SEARCH_QUOTES_COUNT = 10
SEARCH_NEWS_COUNT = 10


@dataclass
class QuoteSources:
    """一次行情请求的三个原始数据源（已解包到 result[0]）"""
    meta: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)
    simple: Dict[str, Any] = field(default_factory=dict)


# 每个字段的提取优先级：quoteSummary -> v7 quote -> chart meta
QUOTE_FIELD_RULES = {
    "name": (
        lambda s: text(dig(s.summary, "price", "shortName")),
        lambda s: text(dig(s.summary, "price", "longName")),
        lambda s: text(s.simple.get("shortName")),
        lambda s: text(s.simple.get("longName")),
        lambda s: text(s.meta.get("shortName")),
        lambda s: text(s.meta.get("longName")),
    ),
    "currency": (
        lambda s: text(dig(s.summary, "price", "currency")),
        lambda s: text(s.simple.get("currency")),
        lambda s: text(s.meta.get("currency")),
    ),
    "market_cap": (
        lambda s: raw(dig(s.summary, "price", "marketCap")),
        lambda s: raw(dig(s.summary, "summaryDetail", "marketCap")),
        lambda s: as_number(s.simple.get("marketCap")),
        lambda s: as_number(s.meta.get("marketCap")),
    ),
    "volume": (
        lambda s: raw(dig(s.summary, "price", "regularMarketVolume")),
        lambda s: raw(dig(s.summary, "summaryDetail", "volume")),
        lambda s: as_number(s.simple.get("regularMarketVolume")),
        lambda s: as_number(s.meta.get("regularMarketVolume")),
    ),
    "day_high": (
        lambda s: raw(dig(s.summary, "price", "regularMarketDayHigh")),
        lambda s: raw(dig(s.summary, "summaryDetail", "dayHigh")),
        lambda s: as_number(s.simple.get("regularMarketDayHigh")),
        lambda s: as_number(s.meta.get("regularMarketDayHigh")),
    ),
    "day_low": (
        lambda s: raw(dig(s.summary, "price", "regularMarketDayLow")),
        lambda s: raw(dig(s.summary, "summaryDetail", "dayLow")),
        lambda s: as_number(s.simple.get("regularMarketDayLow")),
        lambda s: as_number(s.meta.get("regularMarketDayLow")),
    ),
    "fifty_two_week_high": (
        lambda s: raw(dig(s.summary, "summaryDetail", "fiftyTwoWeekHigh")),
        lambda s: as_number(s.simple.get("fiftyTwoWeekHigh")),
        lambda s: as_number(s.meta.get("fiftyTwoWeekHigh")),
    ),
    "fifty_two_week_low": (
        lambda s: raw(dig(s.summary, "summaryDetail", "fiftyTwoWeekLow")),
        lambda s: as_number(s.simple.get("fiftyTwoWeekLow")),
        lambda s: as_number(s.meta.get("fiftyTwoWeekLow")),
    ),
    "pe": (
        lambda s: raw(dig(s.summary, "summaryDetail", "trailingPE")),
        lambda s: raw(dig(s.summary, "defaultKeyStatistics", "trailingPE")),
        lambda s: as_number(s.simple.get("trailingPE")),
    ),
    "pbr": (
        lambda s: raw(dig(s.summary, "summaryDetail", "priceToBook")),
        lambda s: raw(dig(s.summary, "defaultKeyStatistics", "priceToBook")),
        lambda s: as_number(s.simple.get("priceToBook")),
    ),
    "eps": (
        lambda s: raw(dig(s.summary, "defaultKeyStatistics", "trailingEps")),
        lambda s: as_number(s.simple.get("epsTrailingTwelveMonths")),
    ),
    "roe": (
        lambda s: percent(raw(dig(s.summary, "financialData", "returnOnEquity"))),
    ),
    "dividend_yield": (
        lambda s: percent(raw(dig(s.summary, "summaryDetail", "dividendYield"))),
        lambda s: percent(as_number(s.simple.get("trailingAnnualDividendYield"))),
        lambda s: percent(as_number(s.simple.get("dividendYield"))),
    ),
    "beta": (
        lambda s: raw(dig(s.summary, "summaryDetail", "beta")),
        lambda s: raw(dig(s.summary, "defaultKeyStatistics", "beta")),
        lambda s: as_number(s.simple.get("beta")),
    ),
}


class YahooFinanceAdapter(QuoteProviderPort):
    """
    Yahoo Finance 数据适配器

    实现 QuoteProviderPort 接口。所有出站请求使用数据源代码
    （韩国 6 位代码追加 .KS），返回的 symbol 统一为基础代码。
    """

    BASE_URL = "https://query1.finance.yahoo.com"
    USER_AGENT = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    SUMMARY_MODULES = "price,summaryDetail,defaultKeyStatistics,financialData"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        初始化适配器

        Args:
            timeout: 单次请求超时（秒）
            base_url: 接口根地址（可选，默认官方地址）
            session: 可选的 requests.Session
        """
        self.source = "Yahoo Finance"
        self.http = HttpClient(
            base_url=base_url or self.BASE_URL,
            source=self.source,
            headers={
                'User-Agent': self.USER_AGENT,
                'Accept': 'application/json',
                'Accept-Language': 'en-US,en;q=0.9,ko-KR;q=0.8,ko;q=0.7',
                'Referer': 'https://finance.yahoo.com/',
            },
            timeout=timeout,
            session=session,
        )

    def _get_optional(
        self,
        path: str,
        params: Dict[str, Any],
        token: Optional[CancellationToken],
        label: str,
    ) -> Optional[Any]:
        """请求可选数据源，失败时记录并返回 None"""
        try:
            return self.http.get_json(path, params, token)
        except DataUnavailableError as e:
            logger.warning(f"{label} 不可用: {e}")
            return None

    # ==================== 行情 ====================

    def fetch_quote(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> Optional[Quote]:
        """获取合并后的行情"""
        yahoo_symbol = provider_symbol(symbol)
        encoded = encode_path_segment(yahoo_symbol)

        responses = fan_out({
            "chart": lambda: self._get_optional(
                f"/v8/finance/chart/{encoded}",
                {"interval": "1d", "range": "5d"},
                token,
                f"chart {yahoo_symbol}",
            ),
            "summary": lambda: self._get_optional(
                f"/v10/finance/quoteSummary/{encoded}",
                {"modules": self.SUMMARY_MODULES},
                token,
                f"quoteSummary {yahoo_symbol}",
            ),
            "simple": lambda: self._get_optional(
                "/v7/finance/quote",
                {"symbols": yahoo_symbol},
                token,
                f"v7 quote {yahoo_symbol}",
            ),
        })

        chart = dig(responses["chart"], "chart", "result", 0)
        if not isinstance(chart, dict):
            logger.error(f"没有 {yahoo_symbol} 的图表数据")
            return None

        sources = QuoteSources(
            meta=chart.get("meta") or {},
            summary=dig(responses["summary"], "quoteSummary", "result", 0) or {},
            simple=dig(responses["simple"], "quoteResponse", "result", 0) or {},
        )
        closes = [
            close for close in (dig(chart, "indicators", "quote", 0, "close") or [])
            if as_number(close) is not None
        ]
        return self._build_quote(symbol, sources, closes)

    def _build_quote(
        self,
        symbol: str,
        sources: QuoteSources,
        closes: List[float],
    ) -> Quote:
        """按优先级合并三个数据源"""
        base = base_symbol(symbol)
        meta = sources.meta

        price = first_present([
            as_number(meta.get("regularMarketPrice")),
            float(closes[-1]) if closes else None,
        ]) or 0.0
        previous_close = first_present([
            as_number(meta.get("chartPreviousClose")),
            as_number(meta.get("previousClose")),
            float(closes[-2]) if len(closes) >= 2 else None,
        ])
        if previous_close is None:
            previous_close = price
        change, change_percent = Quote.price_change(price, previous_close)

        fields = resolve_fields(QUOTE_FIELD_RULES, sources)

        return Quote(
            symbol=base,
            name=fields.pop("name") or text(meta.get("symbol")) or base,
            name_kr=korean_name(base),
            price=price,
            change=change,
            change_percent=change_percent,
            currency=fields.pop("currency") or "USD",
            previous_close=previous_close,
            **fields,
        )

    # ==================== 历史 ====================

    def fetch_history(
        self,
        symbol: str,
        period: Period,
        token: Optional[CancellationToken] = None,
    ) -> List[HistoricalPoint]:
        """获取日线数据，收盘价或时间戳为空的行会被丢弃"""
        yahoo_symbol = provider_symbol(symbol)
        data = self._get_optional(
            f"/v8/finance/chart/{encode_path_segment(yahoo_symbol)}",
            {"interval": "1d", "range": Period.parse(period).value},
            token,
            f"history {yahoo_symbol}",
        )
        result = dig(data, "chart", "result", 0)
        if not isinstance(result, dict):
            return []

        try:
            return self._parse_history(result)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"解析 {yahoo_symbol} 历史数据失败: {e}")
            return []

    @staticmethod
    def _parse_history(result: Dict[str, Any]) -> List[HistoricalPoint]:
        timestamps = result.get("timestamp") or []
        quotes = dig(result, "indicators", "quote", 0) or {}

        def value_at(column: str, index: int) -> Optional[float]:
            return as_number(dig(quotes, column, index))

        history = []
        for index, timestamp in enumerate(timestamps):
            close = value_at("close", index)
            seconds = as_number(timestamp)
            if close is None or seconds is None:
                continue
            day = datetime.fromtimestamp(seconds, tz=timezone.utc)
            history.append(HistoricalPoint(
                date=f"{day.month}/{day.day}",
                open=value_at("open", index) or 0.0,
                high=value_at("high", index) or 0.0,
                low=value_at("low", index) or 0.0,
                close=close,
                volume=value_at("volume", index) or 0.0,
            ))
        return history

    # ==================== 新闻 ====================

    def fetch_news(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> List[NewsItem]:
        """获取最新的至多 5 条新闻"""
        yahoo_symbol = provider_symbol(symbol)
        data = self._get_optional(
            "/v1/finance/search",
            {"q": yahoo_symbol, "newsCount": SEARCH_NEWS_COUNT, "quotesCount": 0},
            token,
            f"news {yahoo_symbol}",
        )
        articles = [a for a in (dig(data, "news") or []) if isinstance(a, dict)]
        articles.sort(key=lambda a: as_number(a.get("providerPublishTime")) or 0, reverse=True)

        news_items = []
        for article in articles[:NEWS_LIMIT]:
            published = as_number(article.get("providerPublishTime")) or 0
            news_items.append(NewsItem(
                title=article.get("title") or "",
                link=article.get("link") or "",
                publisher=article.get("publisher") or "",
                published_at=datetime.fromtimestamp(published, tz=timezone.utc),
                thumbnail=text(dig(article, "thumbnail", "resolutions", 0, "url")),
            ))
        return news_items

    # ==================== 搜索 ====================

    def search(
        self,
        query: str,
        token: Optional[CancellationToken] = None,
    ) -> List[SearchResult]:
        """搜索股票，仅保留 EQUITY 类型"""
        data = self._get_optional(
            "/v1/finance/search",
            {"q": query, "quotesCount": SEARCH_QUOTES_COUNT, "newsCount": 0},
            token,
            f"search '{query}'",
        )

        results = []
        for item in dig(data, "quotes") or []:
            if not isinstance(item, dict) or item.get("quoteType") != "EQUITY":
                continue
            symbol = text(item.get("symbol"))
            if symbol is None:
                continue
            results.append(SearchResult(
                symbol=symbol,
                name=text(item.get("shortname")) or text(item.get("longname")) or symbol,
                type="EQUITY",
            ))
        return results
