"""
编排层 - 数据聚合

负责：
1. 缓存检查与写入
2. 主数据源调用与并行扇出
3. 地区基本面补充
4. 批量分块

包含：
- Aggregator: 行情聚合器
- FundamentalsFallbackRegistry: 市场 -> 补充数据源
- create_aggregator: 工厂函数
"""

from quantdesk.orchestrator.fallbacks import FundamentalsFallbackRegistry
from quantdesk.orchestrator.aggregator import Aggregator, create_aggregator, merge_fundamentals

__all__ = [
    "Aggregator",
    "FundamentalsFallbackRegistry",
    "create_aggregator",
    "merge_fundamentals",
]
