"""
字段提取器 - "第一个非缺失值" 合并

每个字段对应一组有序的提取函数，每个函数从数据源中取出一个可选值；
resolve_fields 依次调用并取第一个非 None 的结果。
优先级因此集中声明在一处，可单独测试。
"""

import re
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, TypeVar


S = TypeVar('S')
T = TypeVar('T')

Extractor = Callable[[S], Optional[Any]]

_MISSING_MARKERS = {"", "-", "N/A"}
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")


def first_present(values: Iterable[Optional[T]]) -> Optional[T]:
    """返回第一个非 None 的值（惰性迭代）"""
    for value in values:
        if value is not None:
            return value
    return None


def resolve_fields(
    rules: Dict[str, Sequence[Extractor]],
    sources: S,
) -> Dict[str, Any]:
    """按规则表为每个字段取第一个非缺失值"""
    return {
        name: first_present(extract(sources) for extract in extractors)
        for name, extractors in rules.items()
    }


def dig(data: Any, *path: Any) -> Any:
    """
    安全地按路径取嵌套值

    路径元素为 str 时按字典键访问，为 int 时按列表下标访问；
    任一层缺失或类型不符时返回 None。
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def as_number(value: Any) -> Optional[float]:
    """数值原样转为 float，其他类型视为缺失"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def raw(value: Any) -> Optional[float]:
    """解析 {"raw": 1.23, "fmt": "1.23"} 形式的值"""
    if isinstance(value, dict):
        return as_number(value.get("raw"))
    return as_number(value)


def parse_number(value: Any) -> Optional[float]:
    """
    解析展示用的数值字符串

    去掉千分位逗号后取开头的数字部分，如 "1,234원" -> 1234.0、"8.6%" -> 8.6；
    "-"、"N/A"、空串或不以数字开头的字符串视为缺失（而不是 0）。
    """
    number = as_number(value)
    if number is not None:
        return number
    if not isinstance(value, str):
        return None

    text = value.replace(",", "").strip()
    if text in _MISSING_MARKERS:
        return None

    match = _LEADING_NUMBER.match(text)
    return float(match.group(0)) if match else None


def text(value: Any) -> Optional[str]:
    """非空字符串"""
    if isinstance(value, str) and value.strip():
        return value
    return None


def percent(value: Optional[float]) -> Optional[float]:
    """比例转百分比"""
    return value * 100 if value is not None else None
