"""
行情数据路由 - 单一入口按 action 分发

action: quote | quotes | history | news | search | all | decision（默认 quote）
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from typing import Any, Optional

from quantdesk.api.dependencies import get_aggregator, get_evaluate_use_case
from quantdesk.api.schemas import ErrorResponse
from quantdesk.api.validation import RequestValidator
from quantdesk.orchestrator import Aggregator
from quantdesk.use_cases import EvaluateStockUseCase


router = APIRouter(tags=["Stock Data"])


def serialize(value: Any) -> Any:
    """领域模型 -> JSON 兼容结构"""
    if value is None:
        return None
    if isinstance(value, list):
        return [item.to_dict() for item in value]
    return value.to_dict()


@router.get(
    "/stock-data",
    responses={
        400: {"model": ErrorResponse, "description": "参数缺失或不合法"},
        500: {"model": ErrorResponse, "description": "服务器内部错误"},
    },
    summary="行情数据",
    description="""
    统一行情接口，按 action 参数分发：

    - quote：单只行情（symbol）
    - quotes：批量行情（symbols，逗号分隔，最多 20 个）
    - history：历史日线（symbol, period）
    - news：最新新闻（symbol）
    - search：股票搜索（query）
    - all：行情 + 一个月历史 + 新闻（symbol）
    - decision：all 的结果加上评分指标与 BUY/HOLD/SELL 决策（symbol）
    """
)
@router.get("/api/v1/stock-data", include_in_schema=False)
def stock_data(
    action: Optional[str] = Query(default=None, description="操作类型，默认 quote"),
    symbol: Optional[str] = Query(default=None, description="股票代码"),
    symbols: Optional[str] = Query(default=None, description="逗号分隔的股票代码"),
    query: Optional[str] = Query(default=None, description="搜索关键词"),
    period: Optional[str] = Query(default=None, description="历史周期，默认 1mo"),
    aggregator: Aggregator = Depends(get_aggregator),
    evaluate: EvaluateStockUseCase = Depends(get_evaluate_use_case),
) -> JSONResponse:
    """按 action 分发到聚合器"""
    action = RequestValidator.action(action)

    if action == "quote":
        result = aggregator.get_quote(RequestValidator.symbol(symbol))
    elif action == "quotes":
        result = aggregator.get_quotes_batch(RequestValidator.symbols(symbols))
    elif action == "history":
        result = aggregator.get_history(
            RequestValidator.symbol(symbol),
            RequestValidator.period(period),
        )
    elif action == "news":
        result = aggregator.get_news(RequestValidator.symbol(symbol))
    elif action == "search":
        result = aggregator.search(RequestValidator.query(query))
    elif action == "all":
        result = aggregator.get_all(RequestValidator.symbol(symbol))
    else:
        result = evaluate.execute(RequestValidator.symbol(symbol))

    return JSONResponse(content=serialize(result))
