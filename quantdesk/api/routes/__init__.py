"""
路由包初始化
"""

from quantdesk.api.routes.health import router as health_router
from quantdesk.api.routes.stock_data import router as stock_data_router

__all__ = [
    "health_router",
    "stock_data_router",
]
