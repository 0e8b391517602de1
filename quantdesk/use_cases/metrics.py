"""
评分指标推导

动量由最近一段收盘价的涨跌幅换算：50 + 2 × 涨跌幅(%)，限制在 [0, 100]。
"""

from typing import Sequence

from quantdesk.domain.models import HistoricalPoint, Metrics, Quote
from quantdesk.use_cases.scoring import clamp, round_half_up


NEUTRAL_MOMENTUM = 50


def compute_momentum(history: Sequence[HistoricalPoint]) -> int:
    if len(history) < 2:
        return NEUTRAL_MOMENTUM

    first = history[0].close
    last = history[-1].close
    if not first:
        return NEUTRAL_MOMENTUM

    change_percent = (last - first) / first * 100
    return round_half_up(clamp(NEUTRAL_MOMENTUM + change_percent * 2))


def metrics_from_quote(quote: Quote, history: Sequence[HistoricalPoint]) -> Metrics:
    """缺失的基本面记为 0（未知）"""
    return Metrics(
        per=quote.pe or 0.0,
        pbr=quote.pbr or 0.0,
        roe=quote.roe or 0.0,
        momentum=compute_momentum(history),
        eps=quote.eps or 0.0,
        dividend_yield=quote.dividend_yield or 0.0,
    )
