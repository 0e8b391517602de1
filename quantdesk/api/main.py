"""
QuantDesk API - 主应用入口

特性：
- 单一 stock-data 入口，按 action 分发
- 聚合器缓存（60 秒 TTL）
- 统一的 400 / 500 错误结构，内部错误细节只写入服务端日志
- 请求日志与请求 ID
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time
import uuid
import logging

from quantdesk.api.routes import health_router, stock_data_router
from quantdesk.api.dependencies import get_settings, get_service_container
from quantdesk.api.schemas import ErrorResponse
from quantdesk.infrastructure.errors import ValidationError
from quantdesk.infrastructure.logging import setup_logging


logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to fetch stock data"

# 浏览器客户端会附带的请求头
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("QuantDesk API 正在启动...")

    # 预热服务容器
    try:
        get_service_container()
        logger.info("服务容器初始化完成")
    except Exception as e:
        logger.error(f"服务容器初始化失败: {e}")

    yield

    logger.info("QuantDesk API 正在关闭...")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
# QuantDesk API

公开行情数据聚合服务：行情、历史、新闻、股票搜索，
以及基于估值与动量指标的 BUY / HOLD / SELL 参考决策。

决策仅供参考，不构成投资建议。

## 快速开始

```python
import requests

response = requests.get(
    "http://localhost:8000/stock-data",
    params={"action": "quote", "symbol": "AAPL"},
)
print(response.json()["price"])
```
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    # 请求日志中间件
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        # 生成请求 ID
        request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)

        logger.info(
            f"[{request_id}] {request.method} {request.url.path} "
            f"action={request.query_params.get('action', 'quote')}",
            extra={'request_id': request_id},
        )

        try:
            response = await call_next(request)

            duration = (time.time() - start_time) * 1000
            logger.info(
                f"[{request_id}] 完成 {response.status_code} - {duration:.2f}ms",
                extra={'request_id': request_id, 'duration_ms': duration},
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.2f}ms"

            return response

        except Exception as e:
            duration = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] 错误 - {duration:.2f}ms - {str(e)}",
                extra={'request_id': request_id, 'duration_ms': duration},
            )
            raise

    # 参数校验失败
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        logger.info(f"参数校验失败: {exc.message}")
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=exc.message).model_dump(),
        )

    # 全局异常处理
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"未处理的异常: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=GENERIC_ERROR).model_dump(),
        )

    # 注册路由
    app.include_router(health_router)
    app.include_router(stock_data_router)

    return app


# 创建应用实例
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "quantdesk.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
