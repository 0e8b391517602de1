"""
依赖注入 - FastAPI 依赖配置

集中管理所有服务的创建和注入，
确保单一实例和正确的生命周期管理。
"""

from functools import lru_cache
from typing import List, Optional
import os

from dotenv import load_dotenv

from quantdesk.adapters.naver_adapter import NaverFundamentalsAdapter
from quantdesk.adapters.yahoo_adapter import YahooFinanceAdapter
from quantdesk.infrastructure.cache import TTLCache
from quantdesk.orchestrator import Aggregator, create_aggregator
from quantdesk.use_cases import EvaluateStockUseCase


load_dotenv()


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() == 'true'


# 配置类
class Settings:
    """应用配置，取自环境变量（支持 .env 文件）"""

    def __init__(self):
        # 基本配置
        self.APP_NAME: str = os.getenv('APP_NAME', 'QuantDesk API')
        self.APP_VERSION: str = os.getenv('APP_VERSION', '1.0.0')
        self.DEBUG: bool = _env_bool('DEBUG')

        # 服务配置
        self.HOST: str = os.getenv('HOST', '0.0.0.0')
        self.PORT: int = int(os.getenv('PORT', '8000'))

        # CORS 配置
        self.CORS_ORIGINS: List[str] = os.getenv('CORS_ORIGINS', '*').split(',')

        # 日志配置
        self.LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_JSON: bool = _env_bool('LOG_JSON')

        # 缓存配置
        self.CACHE_TTL_SECONDS: float = float(os.getenv('CACHE_TTL_SECONDS', '60'))
        self.CACHE_MAX_ENTRIES: int = int(os.getenv('CACHE_MAX_ENTRIES', '1024'))

        # 上游配置
        self.UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv('UPSTREAM_TIMEOUT_SECONDS', '8'))
        self.BATCH_CHUNK_SIZE: int = int(os.getenv('BATCH_CHUNK_SIZE', '5'))
        self.MAX_BATCH_SYMBOLS: int = int(os.getenv('MAX_BATCH_SYMBOLS', '20'))
        self.YAHOO_BASE_URL: str = os.getenv('YAHOO_BASE_URL', YahooFinanceAdapter.BASE_URL)
        self.NAVER_BASE_URL: str = os.getenv('NAVER_BASE_URL', NaverFundamentalsAdapter.BASE_URL)


@lru_cache()
def get_settings() -> Settings:
    """获取应用配置"""
    return Settings()


class ServiceContainer:
    """
    服务容器 - 管理所有服务实例

    采用单例模式确保缓存与连接池在请求之间复用
    """

    _instance: Optional['ServiceContainer'] = None
    _initialized: bool = False

    def __new__(cls, settings: Optional[Settings] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings: Optional[Settings] = None):
        if self._initialized:
            return

        settings = settings or get_settings()

        # 初始化聚合器（数据源、地区补充与缓存）
        self._aggregator = create_aggregator(
            cache_ttl=settings.CACHE_TTL_SECONDS,
            cache_max_entries=settings.CACHE_MAX_ENTRIES,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            batch_chunk_size=settings.BATCH_CHUNK_SIZE,
            max_batch_symbols=settings.MAX_BATCH_SYMBOLS,
            yahoo_base_url=settings.YAHOO_BASE_URL,
            naver_base_url=settings.NAVER_BASE_URL,
        )
        self._evaluate = EvaluateStockUseCase(self._aggregator)

        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """丢弃单例（测试用）"""
        cls._instance = None
        cls._initialized = False

    @property
    def aggregator(self) -> Aggregator:
        """获取聚合器实例"""
        return self._aggregator

    @property
    def cache(self) -> TTLCache:
        """获取聚合器缓存"""
        return self._aggregator.cache

    @property
    def evaluate_use_case(self) -> EvaluateStockUseCase:
        """获取股票评估用例"""
        return self._evaluate


@lru_cache()
def get_service_container() -> ServiceContainer:
    """
    获取服务容器单例

    使用 lru_cache 确保只创建一次
    """
    return ServiceContainer()


def get_aggregator() -> Aggregator:
    """FastAPI 依赖：获取聚合器"""
    return get_service_container().aggregator


def get_cache() -> TTLCache:
    """FastAPI 依赖：获取聚合器缓存"""
    return get_service_container().cache


def get_evaluate_use_case() -> EvaluateStockUseCase:
    """FastAPI 依赖：获取股票评估用例"""
    return get_service_container().evaluate_use_case
