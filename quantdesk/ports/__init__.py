"""
端口层 - 定义与外部世界交互的接口

包含：
- QuoteProviderPort: 行情/历史/新闻/搜索接口
- FundamentalsPort: 基本面补充数据接口
- ClockPort: 时钟接口
"""

from quantdesk.ports.interfaces import (
    ClockPort,
    DataUnavailableError,
    FundamentalsPort,
    PortError,
    QuoteProviderPort,
    UpstreamTimeoutError,
)

__all__ = [
    "ClockPort",
    "DataUnavailableError",
    "FundamentalsPort",
    "PortError",
    "QuoteProviderPort",
    "UpstreamTimeoutError",
]
