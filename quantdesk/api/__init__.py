"""
API 层 - FastAPI 路由定义

包含：
- /stock-data, /api/v1/stock-data: 行情数据入口
- /health: 健康检查（含缓存统计）
- /ready, /live: Kubernetes 探针
"""

from quantdesk.api.main import app, create_app
from quantdesk.api.schemas import ErrorResponse, HealthResponse
from quantdesk.api.dependencies import (
    get_aggregator,
    get_cache,
    get_evaluate_use_case,
    get_settings,
    ServiceContainer,
    Settings,
)

__all__ = [
    # 应用
    "app",
    "create_app",
    # 响应模型
    "ErrorResponse",
    "HealthResponse",
    # 依赖
    "get_aggregator",
    "get_cache",
    "get_evaluate_use_case",
    "get_settings",
    "ServiceContainer",
    "Settings",
]
