"""
用例层 - 评分与评估

包含：
- score_metrics: 评分引擎
- compute_momentum / metrics_from_quote: 指标推导
- EvaluateStockUseCase: 股票评估
"""

from quantdesk.use_cases.scoring import (
    LIVE_WEIGHTS,
    SENTIMENT_SERIES_WEIGHTS,
    ScoringWeights,
    score_metrics,
)
from quantdesk.use_cases.metrics import compute_momentum, metrics_from_quote
from quantdesk.use_cases.evaluate_stock import EvaluateStockUseCase

__all__ = [
    "LIVE_WEIGHTS",
    "SENTIMENT_SERIES_WEIGHTS",
    "ScoringWeights",
    "score_metrics",
    "compute_momentum",
    "metrics_from_quote",
    "EvaluateStockUseCase",
]
