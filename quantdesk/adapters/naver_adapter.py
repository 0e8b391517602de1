"""
Naver 证券适配器 - 实现 FundamentalsPort

为韩国股票（6 位数字代码）补充 PER / PBR / EPS / ROE / 股息率。
三个接口并行请求：basic、integration、indicator。

每个指标按以下顺序取第一个有效值：
1. basic 响应中的直接字段
2. integration.totalInfos 中 code 匹配的条目（不区分大小写）
3. integration.investmentIndicator 结构化指标块
4. indicator 年度序列中最新的一条
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from quantdesk.adapters.extractors import dig, parse_number, resolve_fields, text
from quantdesk.adapters.http_client import DEFAULT_TIMEOUT, HttpClient, encode_path_segment
from quantdesk.domain.models import Fundamentals
from quantdesk.domain.symbols import base_symbol, is_krx_symbol
from quantdesk.infrastructure.concurrency import CancellationToken, fan_out
from quantdesk.ports.interfaces import DataUnavailableError, FundamentalsPort


logger = logging.getLogger(__name__)


@dataclass
class NaverSources:
    """三个接口的原始响应"""
    basic: Dict[str, Any] = field(default_factory=dict)
    integration: Dict[str, Any] = field(default_factory=dict)
    indicator: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_infos(self) -> List[Dict[str, Any]]:
        infos = self.integration.get("totalInfos")
        return [info for info in infos if isinstance(info, dict)] if isinstance(infos, list) else []

    @property
    def latest_indicator(self) -> Dict[str, Any]:
        series = self.indicator.get("annual") or self.indicator.get("yearly")
        if isinstance(series, list) and series and isinstance(series[-1], dict):
            return series[-1]
        return {}


# 指标 -> (直接字段名, totalInfos 中可接受的 code)
METRIC_KEYS = {
    "pe": ("per", ("per",)),
    "pbr": ("pbr", ("pbr",)),
    "eps": ("eps", ("eps",)),
    "roe": ("roe", ("roe",)),
    "dividend_yield": ("dividendYield", ("dividendyield", "dividend_yield")),
}


def total_info_value(sources: NaverSources, codes: tuple) -> Optional[float]:
    """在 totalInfos 中查找 code 匹配且数值有效的条目"""
    for info in sources.total_infos:
        code = str(info.get("code") or "").lower()
        if code in codes:
            value = parse_number(info.get("value"))
            if value is not None:
                return value
    return None


def _metric_rules(key: str, codes: tuple) -> tuple:
    return (
        lambda s: parse_number(s.basic.get(key)),
        lambda s: total_info_value(s, codes),
        lambda s: parse_number(dig(s.integration, "investmentIndicator", key)),
        lambda s: parse_number(s.latest_indicator.get(key)),
    )


FUNDAMENTAL_FIELD_RULES = {
    metric: _metric_rules(key, codes)
    for metric, (key, codes) in METRIC_KEYS.items()
}
FUNDAMENTAL_FIELD_RULES["name"] = (
    lambda s: text(s.basic.get("stockName")),
)


class NaverFundamentalsAdapter(FundamentalsPort):
    """
    Naver 证券基本面适配器

    只作为缺口补充来源使用，不覆盖主数据源已有的值。
    """

    BASE_URL = "https://m.stock.naver.com/api/stock"
    USER_AGENT = (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) "
        "AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/16.0 Mobile/15E148 Safari/604.1"
    )

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.source = "Naver Finance"
        self.http = HttpClient(
            base_url=base_url or self.BASE_URL,
            source=self.source,
            headers={
                'User-Agent': self.USER_AGENT,
                'Accept': 'application/json',
                'Referer': 'https://m.stock.naver.com/',
            },
            timeout=timeout,
            session=session,
        )

    def _get_section(
        self,
        code: str,
        section: str,
        token: Optional[CancellationToken],
    ) -> Dict[str, Any]:
        try:
            data = self.http.get_json(f"/{encode_path_segment(code)}/{section}", token=token)
        except DataUnavailableError as e:
            logger.warning(f"Naver {section} 不可用: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def fetch_fundamentals(
        self,
        symbol: str,
        token: Optional[CancellationToken] = None,
    ) -> Optional[Fundamentals]:
        """获取韩国股票的基本面指标"""
        if not is_krx_symbol(symbol):
            return None

        code = base_symbol(symbol)
        responses = fan_out({
            section: (lambda section=section: self._get_section(code, section, token))
            for section in ("basic", "integration", "indicator")
        })
        sources = NaverSources(
            basic=responses["basic"] or {},
            integration=responses["integration"] or {},
            indicator=responses["indicator"] or {},
        )

        fundamentals = Fundamentals(**resolve_fields(FUNDAMENTAL_FIELD_RULES, sources))
        logger.info(f"Naver 基本面 {code}: {fundamentals}")
        return None if fundamentals.is_empty() else fundamentals
