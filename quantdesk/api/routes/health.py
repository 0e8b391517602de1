"""
健康检查路由 - 系统状态监控 API
"""

from fastapi import APIRouter, Depends
from datetime import datetime

from quantdesk.api.schemas import HealthResponse
from quantdesk.api.dependencies import get_cache, get_settings, Settings
from quantdesk.infrastructure.cache import TTLCache


router = APIRouter(tags=["Health"])


@router.get(
    "/",
    summary="API 根节点",
    description="返回欢迎信息和 API 基本信息"
)
async def root(settings: Settings = Depends(get_settings)):
    """API 根节点"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="健康检查",
    description="检查服务状态并返回聚合器缓存统计"
)
def health_check(
    cache: TTLCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """健康检查"""
    components = {}

    try:
        stats = cache.get_stats_dict()
        components["cache"] = "healthy"
    except Exception:
        stats = None
        components["cache"] = "unhealthy"

    overall_status = "healthy" if all(
        v == "healthy" for v in components.values()
    ) else "degraded"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(),
        version=settings.APP_VERSION,
        components=components,
        cache=stats,
    )


@router.get(
    "/ready",
    summary="就绪检查",
    description="检查服务是否准备好接收请求（用于 Kubernetes 就绪探针）"
)
async def readiness_check():
    """就绪检查"""
    return {"ready": True}


@router.get(
    "/live",
    summary="存活检查",
    description="检查服务是否存活（用于 Kubernetes 存活探针）"
)
async def liveness_check():
    """存活检查"""
    return {"alive": True}
