"""
评分引擎 - 由估值与动量指标生成 BUY / HOLD / SELL 决策

纯函数：相同的指标与随机源总是得到相同的决策。

权重方案按数据来源区分，不能混用：
- LIVE_WEIGHTS：实时指标，情绪分由动量代替（默认）
- SENTIMENT_SERIES_WEIGHTS：有独立情绪序列时使用
"""

import math
import random
from dataclasses import dataclass
from typing import List, Optional

from quantdesk.domain.models import AgentDecision, Metrics, Signal


BUY_THRESHOLD = 65
SELL_THRESHOLD = 40
BUY_MAX_CONFIDENCE = 90
SELL_MAX_CONFIDENCE = 85
HOLD_BASE_CONFIDENCE = 50
HOLD_CONFIDENCE_SPREAD = 20


@dataclass(frozen=True)
class ScoringWeights:
    """量化分与情绪分的混合权重"""
    quant: float
    sentiment: float


LIVE_WEIGHTS = ScoringWeights(quant=0.7, sentiment=0.3)
SENTIMENT_SERIES_WEIGHTS = ScoringWeights(quant=0.6, sentiment=0.4)


def round_half_up(value: float) -> int:
    """四舍五入（.5 向上），先消除浮点误差"""
    return int(math.floor(round(value, 6) + 0.5))


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return min(high, max(low, value))


def quant_score(metrics: Metrics) -> int:
    """
    量化分：基准 50，按估值、盈利能力、动量、股息加减分，限制在 [0, 100]

    指标为 0 表示未知，不参与估值加分。
    """
    score = 50

    # PER
    if 0 < metrics.per < 15:
        score += 15
    elif metrics.per > 30:
        score -= 10

    # PBR
    if 0 < metrics.pbr < 1.5:
        score += 10
    elif metrics.pbr > 3:
        score -= 5

    # ROE
    if metrics.roe > 15:
        score += 15
    elif metrics.roe > 8:
        score += 5

    # 动量
    if metrics.momentum > 70:
        score += 10
    elif metrics.momentum < 40:
        score -= 10

    # 股息
    if metrics.dividend_yield > 2:
        score += 5

    return int(clamp(score))


def _buy_reasons(metrics: Metrics) -> List[str]:
    reasons = []
    if 0 < metrics.per < 15:
        reasons.append(f"PE of {metrics.per:.1f}x suggests the stock is undervalued.")
    if metrics.roe > 15:
        reasons.append(f"ROE of {metrics.roe:.1f}% shows strong capital efficiency.")
    if metrics.momentum > 60:
        reasons.append("Recent price momentum is positive.")
    return reasons or ["Overall indicators point to a buy signal."]


def _hold_reasons(metrics: Metrics) -> List[str]:
    if metrics.per > 0:
        valuation = f"PE of {metrics.per:.1f}x and PBR of {metrics.pbr:.2f}x are within a fair range."
    else:
        valuation = "Valuation data is still being confirmed."
    return [
        "Waiting at the current price level is appropriate.",
        valuation,
        "Further monitoring is recommended.",
    ]


def _sell_reasons(metrics: Metrics) -> List[str]:
    reasons = []
    if metrics.per > 30:
        reasons.append(f"PE of {metrics.per:.1f}x suggests the stock is overvalued.")
    if metrics.momentum < 40:
        reasons.append("Price momentum is weakening.")
    return reasons or ["Overall indicators point to a sell signal."]


def score_metrics(
    metrics: Metrics,
    weights: ScoringWeights = LIVE_WEIGHTS,
    sentiment_score: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> AgentDecision:
    """
    计算决策

    Args:
        metrics: 评分指标
        weights: 权重方案
        sentiment_score: 独立情绪分；缺省时以动量代替
        rng: HOLD 置信度抖动所用的随机源，传入带种子的实例可复现结果

    Returns:
        AgentDecision: 信号、各项分数、置信度与理由
    """
    quant = quant_score(metrics)
    sentiment = round_half_up(metrics.momentum if sentiment_score is None else sentiment_score)
    final = round_half_up(quant * weights.quant + sentiment * weights.sentiment)

    if final >= BUY_THRESHOLD:
        signal = Signal.BUY
        confidence = min(BUY_MAX_CONFIDENCE, final + 10)
        reasoning = _buy_reasons(metrics)
    elif final >= SELL_THRESHOLD:
        signal = Signal.HOLD
        jitter = (rng or random).random() * HOLD_CONFIDENCE_SPREAD
        confidence = HOLD_BASE_CONFIDENCE + jitter
        reasoning = _hold_reasons(metrics)
    else:
        signal = Signal.SELL
        confidence = min(SELL_MAX_CONFIDENCE, 100 - final)
        reasoning = _sell_reasons(metrics)

    return AgentDecision(
        signal=signal,
        quant_score=quant,
        sentiment_score=sentiment,
        final_score=final,
        confidence=round_half_up(confidence),
        reasoning=reasoning,
    )
