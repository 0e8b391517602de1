"""
端口接口定义 - 依赖倒置的核心

聚合器只依赖这些接口，具体实现由适配器层提供。

设计原则：
1. 接口隔离：行情、基本面、时钟各自独立
2. 软失败：数据源不可用时返回 None / 空列表，而不是向上抛出
3. 异常抽象：适配器内部使用标准异常类型标记上游失败
"""

from abc import ABC, abstractmethod
from typing import Optional, List, TYPE_CHECKING

from quantdesk.domain.models import (
    Fundamentals,
    HistoricalPoint,
    NewsItem,
    Period,
    Quote,
    SearchResult,
)

if TYPE_CHECKING:
    from quantdesk.infrastructure.concurrency import CancellationToken


# ==================== 异常定义 ====================

class PortError(Exception):
    """端口层基础异常"""
    def __init__(self, message: str, source: str = "unknown"):
        self.message = message
        self.source = source
        super().__init__(f"[{source}] {message}")


class DataUnavailableError(PortError):
    """上游不可用、返回非 2xx 或无法解析"""
    pass


class UpstreamTimeoutError(DataUnavailableError):
    """上游请求超时"""
    pass


# ==================== 端口接口 ====================

class QuoteProviderPort(ABC):
    """主数据源端口 - 行情、历史、新闻、搜索"""

    @abstractmethod
    def fetch_quote(
        self,
        symbol: str,
        token: Optional["CancellationToken"] = None,
    ) -> Optional[Quote]:
        """
        获取合并后的行情

        Args:
            symbol: 股票代码（基础形式或带后缀均可）
            token: 协作取消令牌

        Returns:
            Quote，必需的图表数据不可用时返回 None
        """
        pass

    @abstractmethod
    def fetch_history(
        self,
        symbol: str,
        period: Period,
        token: Optional["CancellationToken"] = None,
    ) -> List[HistoricalPoint]:
        """获取按时间排序的日线数据，失败时返回空列表"""
        pass

    @abstractmethod
    def fetch_news(
        self,
        symbol: str,
        token: Optional["CancellationToken"] = None,
    ) -> List[NewsItem]:
        """获取最新新闻（最多 5 条）"""
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        token: Optional["CancellationToken"] = None,
    ) -> List[SearchResult]:
        """按关键字搜索股票，仅返回 EQUITY 类型"""
        pass


class FundamentalsPort(ABC):
    """基本面补充数据源端口"""

    @abstractmethod
    def fetch_fundamentals(
        self,
        symbol: str,
        token: Optional["CancellationToken"] = None,
    ) -> Optional[Fundamentals]:
        """
        获取基本面指标

        Returns:
            Fundamentals，全部缺失时返回 None
        """
        pass


class ClockPort(ABC):
    """时钟端口"""

    @abstractmethod
    def now(self) -> float:
        """当前时间（秒），用于缓存过期判断"""
        pass
