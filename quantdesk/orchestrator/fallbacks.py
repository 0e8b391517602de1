"""
地区补充数据源注册表

按代码所属市场查找基本面补充数据源。
新增地区数据源时只需注册，不涉及聚合器的合并逻辑。
"""

from threading import Lock
from typing import Callable, Dict, Optional

from quantdesk.domain.symbols import Market, classify_market
from quantdesk.ports.interfaces import FundamentalsPort


class FundamentalsFallbackRegistry:
    """市场 -> 基本面补充数据源"""

    def __init__(self, classifier: Callable[[str], Market] = classify_market):
        self._classifier = classifier
        self._sources: Dict[Market, FundamentalsPort] = {}
        self._lock = Lock()

    def register(self, market: Market, port: FundamentalsPort) -> None:
        with self._lock:
            self._sources[market] = port

    def resolve(self, symbol: str) -> Optional[FundamentalsPort]:
        """返回该代码所属市场的补充数据源，没有时返回 None"""
        with self._lock:
            return self._sources.get(self._classifier(symbol))

    def markets(self) -> list:
        with self._lock:
            return list(self._sources)
