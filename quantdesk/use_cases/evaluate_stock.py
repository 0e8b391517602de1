"""
股票评估用例 - 组合数据 + 指标 + 决策
"""

import logging
import random
from typing import Optional

from quantdesk.domain.models import StockEvaluation
from quantdesk.infrastructure.concurrency import CancellationToken
from quantdesk.infrastructure.logging import log_performance
from quantdesk.orchestrator.aggregator import Aggregator
from quantdesk.use_cases.base import UseCase
from quantdesk.use_cases.metrics import metrics_from_quote
from quantdesk.use_cases.scoring import LIVE_WEIGHTS, ScoringWeights, score_metrics


logger = logging.getLogger(__name__)


class EvaluateStockUseCase(UseCase[StockEvaluation]):
    """
    股票评估用例

    获取行情、一个月历史和新闻，推导评分指标并生成决策。
    决策每次重新计算，不做持久化。
    """

    def __init__(
        self,
        aggregator: Aggregator,
        weights: ScoringWeights = LIVE_WEIGHTS,
        rng: Optional[random.Random] = None,
    ):
        self.aggregator = aggregator
        self.weights = weights
        self.rng = rng

    @log_performance(logger)
    def execute(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> StockEvaluation:
        """
        执行评估

        Args:
            symbol: 股票代码
            token: 取消令牌

        Returns:
            StockEvaluation: 没有行情时 metrics 与 decision 为空
        """
        snapshot = self.aggregator.get_all(symbol, token)
        if snapshot.quote is None:
            return StockEvaluation(snapshot=snapshot)

        metrics = metrics_from_quote(snapshot.quote, snapshot.history)
        decision = score_metrics(metrics, self.weights, rng=self.rng)
        logger.info(
            f"{snapshot.quote.symbol} 决策: {decision.signal.value} "
            f"(final={decision.final_score}, confidence={decision.confidence})",
            extra={'symbol': snapshot.quote.symbol},
        )
        return StockEvaluation(snapshot=snapshot, metrics=metrics, decision=decision)
