"""
stock-data 接口的客户端

- 自带 30 秒 TTL 缓存，与服务端聚合器缓存相互独立；缓存中保存副本
- 发起新请求时取消上一个仍在进行的请求，被取代的响应直接丢弃
- 任何失败都记录日志并降级为空值
"""

import copy
import logging
from threading import Lock
from typing import Any, Dict, List, Optional

import requests

from quantdesk.adapters.http_client import DEFAULT_TIMEOUT, HttpClient
from quantdesk.domain.models import DEFAULT_PERIOD, Period
from quantdesk.infrastructure.cache import CLIENT_CACHE_TTL, TTLCache, build_cache_key
from quantdesk.infrastructure.concurrency import CancellationToken
from quantdesk.infrastructure.errors import OperationCancelledError
from quantdesk.ports.interfaces import DataUnavailableError


logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


class StockDataClient:
    """
    stock-data 客户端

    返回值为接口的 JSON 结构（dict / list），不做二次转换。
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        cache: Optional[TTLCache] = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: Optional[str] = None,
    ):
        """
        Args:
            base_url: stock-data 接口的完整地址
            session: 可选的 requests.Session
            cache: 客户端缓存，默认 30 秒 TTL
            timeout: 单次请求超时（秒）
            api_key: 可选的 Bearer 令牌
        """
        headers = {'Content-Type': 'application/json'}
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'

        self.http = HttpClient(
            base_url=base_url,
            source="stock-data",
            headers=headers,
            timeout=timeout,
            session=session,
        )
        self.cache = cache if cache is not None else TTLCache(ttl=CLIENT_CACHE_TTL)
        self._current: Optional[CancellationToken] = None
        self._lock = Lock()

    def _supersede(self) -> CancellationToken:
        """取消上一个请求并登记新的令牌"""
        token = CancellationToken()
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = token
        return token

    def _fetch(self, params: Dict[str, Any], cache_key: str) -> Any:
        """
        缓存优先的请求

        Raises:
            DataUnavailableError: 请求失败
        """
        cached = self.cache.get(cache_key)
        if cached is not None:
            return copy.deepcopy(cached)

        token = self._supersede()
        try:
            data = self.http.get_json("", params, token)
        except OperationCancelledError:
            return None

        if token.cancelled:
            logger.debug(f"请求已被取代，丢弃响应: {cache_key}")
            return None

        if data:
            self.cache.set(cache_key, copy.deepcopy(data))
        return data

    def get_quote(self, symbol: str) -> Optional[Dict[str, Any]]:
        try:
            return self._fetch(
                {"action": "quote", "symbol": symbol},
                build_cache_key("quote", symbol),
            )
        except DataUnavailableError as e:
            logger.error(f"获取行情失败 {symbol}: {e}")
            return None

    def get_quotes(self, symbols: List[str]) -> List[Dict[str, Any]]:
        if not symbols:
            return []
        try:
            data = self._fetch(
                {"action": "quotes", "symbols": ",".join(symbols)},
                build_cache_key("quotes", ",".join(sorted(symbols))),
            )
        except DataUnavailableError as e:
            logger.error(f"批量获取行情失败: {e}")
            return []
        return data or []

    def get_history(self, symbol: str, period: str = DEFAULT_PERIOD.value) -> List[Dict[str, Any]]:
        period = Period.parse(period).value
        try:
            data = self._fetch(
                {"action": "history", "symbol": symbol, "period": period},
                build_cache_key("history", symbol, period),
            )
        except DataUnavailableError as e:
            logger.error(f"获取历史数据失败 {symbol}: {e}")
            return []
        return data or []

    def get_news(self, symbol: str) -> List[Dict[str, Any]]:
        try:
            data = self._fetch(
                {"action": "news", "symbol": symbol},
                build_cache_key("news", symbol),
            )
        except DataUnavailableError as e:
            logger.error(f"获取新闻失败 {symbol}: {e}")
            return []
        return data or []

    def search_stocks(self, query: str) -> List[Dict[str, Any]]:
        """少于 2 个字符的查询不发请求"""
        if not query or len(query) < MIN_QUERY_LENGTH:
            return []
        try:
            data = self._fetch(
                {"action": "search", "query": query},
                build_cache_key("search", query.lower()),
            )
        except DataUnavailableError as e:
            logger.error(f"搜索失败 '{query}': {e}")
            return []
        return data or []

    def get_all(self, symbol: str) -> Dict[str, Any]:
        """行情 + 历史 + 新闻，失败时返回空的组合结构"""
        empty = {"quote": None, "history": [], "news": []}
        try:
            data = self._fetch(
                {"action": "all", "symbol": symbol},
                build_cache_key("all", symbol),
            )
        except DataUnavailableError as e:
            logger.error(f"获取组合数据失败 {symbol}: {e}")
            return empty
        return data or empty

    def close(self) -> None:
        self.http.close()
