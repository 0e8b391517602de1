"""
股票代码规范化

- 基础代码（base symbol）：去除 .KS / .KQ 后缀，用作缓存键和返回值
- 数据源代码（provider symbol）：主数据源要求的形式，6 位数字代码追加 .KS
"""

import re
from enum import Enum
from typing import Iterable, List, Optional


REGIONAL_SUFFIXES = (".KS", ".KQ")
KRX_SUFFIX = ".KS"

_KRX_CODE = re.compile(r"^\d{6}$")

# 主要韩国上市公司的本地化名称
KOREAN_NAMES = {
    "005930": "삼성전자",
    "000660": "SK하이닉스",
    "373220": "LG에너지솔루션",
    "035420": "네이버",
    "035720": "카카오",
    "006400": "삼성SDI",
    "207940": "삼성바이오로직스",
    "068270": "셀트리온",
    "105560": "KB금융",
    "055550": "신한지주",
    "066570": "LG전자",
    "051910": "LG화학",
    "017670": "SK텔레콤",
    "030200": "KT",
    "003550": "LG",
    "012330": "현대모비스",
    "005380": "현대차",
    "000270": "기아",
    "028260": "삼성물산",
    "096770": "SK이노베이션",
}


class Market(str, Enum):
    """代码所属市场"""
    KRX = "krx"         # 韩国交易所（6 位数字代码）
    GLOBAL = "global"


def base_symbol(symbol: str) -> str:
    """去除地区后缀"""
    for suffix in REGIONAL_SUFFIXES:
        symbol = symbol.replace(suffix, "")
    return symbol


def is_krx_symbol(symbol: str) -> bool:
    """是否为 6 位数字的韩国股票代码"""
    return bool(_KRX_CODE.match(base_symbol(symbol)))


def provider_symbol(symbol: str) -> str:
    """转换为主数据源所需的代码形式"""
    base = base_symbol(symbol)
    if _KRX_CODE.match(base):
        return base + KRX_SUFFIX
    return symbol


def classify_market(symbol: str) -> Market:
    return Market.KRX if is_krx_symbol(symbol) else Market.GLOBAL


def korean_name(symbol: str) -> Optional[str]:
    return KOREAN_NAMES.get(base_symbol(symbol))


# ==================== 输入校验 ====================

MAX_SYMBOL_LENGTH = 20
MAX_BATCH_SYMBOLS = 20

_SYMBOL_PATTERN = re.compile(r"[A-Z0-9.]+", re.IGNORECASE)


def is_valid_symbol(symbol: Optional[str]) -> bool:
    """字母数字加点号，长度不超过 20"""
    if not symbol or len(symbol) > MAX_SYMBOL_LENGTH:
        return False
    return bool(_SYMBOL_PATTERN.fullmatch(symbol))


def sanitize_symbols(symbols: Iterable[str], limit: int = MAX_BATCH_SYMBOLS) -> List[str]:
    """
    清理批量代码列表

    去除空白、丢弃不合法的代码、按基础代码去重，最多保留 limit 个。
    """
    seen = set()
    cleaned = []
    for symbol in symbols:
        symbol = (symbol or "").strip()
        if not is_valid_symbol(symbol):
            continue
        base = base_symbol(symbol)
        if base in seen:
            continue
        seen.add(base)
        cleaned.append(symbol)
        if len(cleaned) >= limit:
            break
    return cleaned
