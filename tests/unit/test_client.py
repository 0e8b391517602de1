"""
stock-data 客户端测试 - 独立缓存、请求取代、降级
"""

import pytest
from unittest.mock import Mock

import requests

from quantdesk.client import StockDataClient
from quantdesk.infrastructure.cache import TTLCache


BASE_URL = "https://api.example.com/stock-data"


@pytest.fixture
def client_cache(fake_clock):
    return TTLCache(ttl=30, clock=fake_clock)


def make_client(session, cache, **kwargs):
    return StockDataClient(BASE_URL, session=session, cache=cache, timeout=1.0, **kwargs)


class TestStockDataClient:

    def test_quote_cached_for_thirty_seconds(self, response_factory, client_cache, fake_clock):
        session = Mock()
        session.get.return_value = response_factory({"symbol": "AAPL", "price": 1.0})
        client = make_client(session, client_cache)

        assert client.get_quote("AAPL") == {"symbol": "AAPL", "price": 1.0}
        fake_clock.advance(29)
        client.get_quote("AAPL")
        assert session.get.call_count == 1

        fake_clock.advance(2)
        client.get_quote("AAPL")
        assert session.get.call_count == 2
        assert session.get.call_args.kwargs["params"] == {"action": "quote", "symbol": "AAPL"}

    def test_quotes_cache_key_sorted(self, response_factory, client_cache):
        session = Mock()
        session.get.return_value = response_factory([{"symbol": "A"}, {"symbol": "B"}])
        client = make_client(session, client_cache)

        client.get_quotes(["B", "A"])
        client.get_quotes(["A", "B"])

        assert session.get.call_count == 1
        assert client_cache.get("quotes:A,B") is not None
        assert session.get.call_args.kwargs["params"]["symbols"] == "B,A"

    def test_empty_quotes_skips_request(self, client_cache):
        session = Mock()
        assert make_client(session, client_cache).get_quotes([]) == []
        session.get.assert_not_called()

    def test_history_key_includes_period(self, response_factory, client_cache):
        session = Mock()
        session.get.return_value = response_factory([{"date": "1/2", "close": 1.0}])
        client = make_client(session, client_cache)

        client.get_history("AAPL", "3mo")

        assert client_cache.get("history:AAPL:3mo") is not None

    def test_search_short_query(self, client_cache):
        session = Mock()
        client = make_client(session, client_cache)

        assert client.search_stocks("a") == []
        assert client.search_stocks("") == []
        session.get.assert_not_called()

    def test_search_key_lowercase(self, response_factory, client_cache):
        session = Mock()
        session.get.return_value = response_factory([{"symbol": "AAPL", "name": "Apple Inc."}])
        client = make_client(session, client_cache)

        client.search_stocks("Apple")
        client.search_stocks("APPLE")

        assert session.get.call_count == 1

    def test_failures_degrade(self, response_factory, client_cache):
        session = Mock()
        session.get.return_value = response_factory(None, status=500)
        client = make_client(session, client_cache)

        assert client.get_quote("AAPL") is None
        assert client.get_news("AAPL") == []
        assert client.get_history("AAPL") == []
        assert client.get_all("AAPL") == {"quote": None, "history": [], "news": []}
        assert len(client_cache) == 0

    def test_network_error_degrades(self, client_cache):
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("offline")

        assert make_client(session, client_cache).get_quotes(["AAPL"]) == []

    def test_superseded_response_discarded(self, response_factory, client_cache):
        """响应返回前开始了新请求，旧响应被丢弃且不写缓存"""
        session = Mock()
        client = make_client(session, client_cache)

        def first_request(url, params=None, headers=None, timeout=None):
            session.get.side_effect = None
            session.get.return_value = response_factory([{"title": "MSFT news"}])
            client.get_news("MSFT")
            return response_factory({"symbol": "AAPL"})

        session.get.side_effect = first_request

        assert client.get_quote("AAPL") is None
        assert client_cache.get("quote:AAPL") is None
        assert client_cache.get("news:MSFT") == [{"title": "MSFT news"}]

    def test_authorization_header(self, response_factory, client_cache):
        session = Mock()
        session.get.return_value = response_factory({"symbol": "AAPL"})

        make_client(session, client_cache, api_key="secret").get_quote("AAPL")

        assert session.get.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"

    def test_independent_of_aggregator_cache(self, response_factory):
        session = Mock()
        session.get.return_value = response_factory({"symbol": "AAPL"})

        client = StockDataClient(BASE_URL, session=session)

        assert client.cache.ttl == 30

    def test_caller_mutation_does_not_leak_into_cache(self, response_factory, client_cache):
        session = Mock()
        session.get.return_value = response_factory([{"title": "AAPL news"}])
        client = make_client(session, client_cache)

        first = client.get_news("AAPL")
        first[0]["title"] = "changed"
        first.clear()

        assert client.get_news("AAPL") == [{"title": "AAPL news"}]
        assert session.get.call_count == 1
