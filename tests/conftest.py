"""
测试配置 - pytest 配置和公共 fixtures
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

import requests

from quantdesk.domain.models import (
    Fundamentals,
    HistoricalPoint,
    NewsItem,
    Quote,
    SearchResult,
)
from quantdesk.infrastructure.cache import TTLCache
from quantdesk.orchestrator import Aggregator, FundamentalsFallbackRegistry
from quantdesk.ports.interfaces import ClockPort


# ==================== 工具 ====================

class FakeClock(ClockPort):
    """可手动推进的时钟"""

    def __init__(self, start: float = 1000.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def make_response(payload=None, status: int = 200):
    """模拟 requests.Response"""
    response = Mock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def make_session(routes: dict):
    """
    按 URL 片段分发的模拟 Session

    routes: URL 片段 -> 响应载荷 / Response / 异常
    未匹配的 URL 返回 404。
    """
    session = Mock()

    def dispatch(url, params=None, headers=None, timeout=None):
        for fragment, result in routes.items():
            if fragment in url:
                if isinstance(result, Exception):
                    raise result
                if isinstance(result, Mock):
                    return result
                return make_response(result)
        return make_response(None, status=404)

    session.get.side_effect = dispatch
    return session


# ==================== 原始载荷 ====================

@pytest.fixture
def chart_payload():
    """chart 接口响应（5 个交易日）"""
    return {
        "chart": {
            "result": [{
                "meta": {
                    "symbol": "AAPL",
                    "currency": "USD",
                    "regularMarketPrice": 110.0,
                    "chartPreviousClose": 100.0,
                    "regularMarketDayHigh": 111.0,
                    "regularMarketDayLow": 108.5,
                    "fiftyTwoWeekHigh": 150.0,
                    "fiftyTwoWeekLow": 90.0,
                    "regularMarketVolume": 1000,
                    "longName": "Apple Inc. (chart)",
                },
                "timestamp": [1704153600, 1704240000, 1704326400, 1704412800, 1704672000],
                "indicators": {
                    "quote": [{
                        "open": [100.0, 101.0, 102.0, 103.0, 104.0],
                        "high": [101.0, 102.0, 103.0, 104.0, 105.0],
                        "low": [99.0, 100.0, 101.0, 102.0, 103.0],
                        "close": [100.5, 101.5, 102.5, 103.5, 109.0],
                        "volume": [500, 600, 700, 800, 900],
                    }]
                },
            }]
        }
    }


@pytest.fixture
def summary_payload():
    """quoteSummary 接口响应"""
    return {
        "quoteSummary": {
            "result": [{
                "price": {
                    "shortName": "Apple Inc.",
                    "currency": "USD",
                    "marketCap": {"raw": 2800000000000, "fmt": "2.8T"},
                    "regularMarketVolume": {"raw": 55000000},
                },
                "summaryDetail": {
                    "trailingPE": {"raw": 12.0, "fmt": "12.00"},
                    "dividendYield": {"raw": 0.005},
                    "beta": {"raw": 1.25},
                },
                "defaultKeyStatistics": {
                    "priceToBook": {"raw": 1.1},
                    "trailingEps": {"raw": 6.5},
                },
                "financialData": {
                    "returnOnEquity": {"raw": 0.25},
                },
            }]
        }
    }


@pytest.fixture
def simple_payload():
    """v7 quote 接口响应"""
    return {
        "quoteResponse": {
            "result": [{
                "symbol": "AAPL",
                "shortName": "Apple (v7)",
                "trailingPE": 99.0,
                "priceToBook": 9.9,
                "epsTrailingTwelveMonths": 9.0,
            }]
        }
    }


# ==================== 领域对象 ====================

@pytest.fixture
def sample_quote():
    """模拟行情"""
    return Quote(
        symbol="AAPL",
        name="Apple Inc.",
        price=110.0,
        change=10.0,
        change_percent=10.0,
        currency="USD",
        previous_close=100.0,
        pe=12.0,
        pbr=1.1,
        eps=6.5,
        roe=25.0,
    )


@pytest.fixture
def krx_quote():
    """缺少基本面的韩国股票行情"""
    return Quote(
        symbol="005930",
        name="Samsung Electronics",
        name_kr="삼성전자",
        price=70000.0,
        change=700.0,
        change_percent=1.01,
        currency="KRW",
        previous_close=69300.0,
        pe=12.0,
    )


@pytest.fixture
def sample_history():
    """模拟历史数据"""
    return [
        HistoricalPoint(date="1/2", open=99.0, high=101.0, low=98.0, close=100.0, volume=1000),
        HistoricalPoint(date="1/3", open=100.0, high=103.0, low=99.0, close=102.0, volume=1200),
        HistoricalPoint(date="1/4", open=102.0, high=111.0, low=101.0, close=110.0, volume=1500),
    ]


@pytest.fixture
def sample_news():
    """模拟新闻列表"""
    return [
        NewsItem(
            title="Apple stock rises on earnings beat",
            link="https://example.com/news/1",
            publisher="MarketWatch",
            published_at=datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def sample_search_results():
    return [SearchResult(symbol="AAPL", name="Apple Inc.")]


# ==================== 端口与组件 ====================

@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    """60 秒 TTL 的聚合器缓存"""
    return TTLCache(ttl=60, clock=fake_clock)


@pytest.fixture
def mock_quote_provider(sample_quote, sample_history, sample_news, sample_search_results):
    """模拟主数据源"""
    port = Mock()
    port.fetch_quote.side_effect = lambda symbol, token=None: Quote(
        symbol=symbol.replace(".KS", ""),
        name=f"{symbol} Corp",
        price=10.0,
        change=0.0,
        change_percent=0.0,
    ) if symbol != "AAPL" else sample_quote
    port.fetch_history.return_value = sample_history
    port.fetch_news.return_value = sample_news
    port.search.return_value = sample_search_results
    return port


@pytest.fixture
def mock_fundamentals_port():
    """模拟韩国基本面补充数据源"""
    port = Mock()
    port.fetch_fundamentals.return_value = Fundamentals(
        pe=99.0,
        pbr=1.3,
        eps=5000.0,
        roe=9.5,
        dividend_yield=2.1,
        name="삼성전자(네이버)",
    )
    return port


@pytest.fixture
def aggregator(mock_quote_provider, cache):
    """不带补充数据源的聚合器"""
    return Aggregator(quote_provider=mock_quote_provider, cache=cache)


@pytest.fixture
def krx_aggregator(mock_quote_provider, mock_fundamentals_port, cache):
    """注册了韩国补充数据源的聚合器"""
    from quantdesk.domain.symbols import Market

    fallbacks = FundamentalsFallbackRegistry()
    fallbacks.register(Market.KRX, mock_fundamentals_port)
    return Aggregator(
        quote_provider=mock_quote_provider,
        cache=cache,
        fallbacks=fallbacks,
    )


@pytest.fixture
def session_factory():
    """按 URL 片段构造模拟 Session"""
    return make_session


@pytest.fixture
def response_factory():
    return make_response
