"""
适配器层 - 端口接口的具体实现

将外部服务（Yahoo Finance、Naver 证券）适配为标准的端口接口。

包含：
- YahooFinanceAdapter: 行情/历史/新闻/搜索主数据源
- NaverFundamentalsAdapter: 韩国股票基本面补充数据源
- SystemClockAdapter: 系统时钟
- HttpClient: 带超时的 JSON 客户端
"""

from quantdesk.adapters.http_client import HttpClient
from quantdesk.adapters.naver_adapter import NaverFundamentalsAdapter
from quantdesk.adapters.system_clock_adapter import SystemClockAdapter
from quantdesk.adapters.yahoo_adapter import YahooFinanceAdapter

__all__ = [
    "HttpClient",
    "NaverFundamentalsAdapter",
    "SystemClockAdapter",
    "YahooFinanceAdapter",
]
