"""
字段提取器测试
"""

import pytest

from quantdesk.adapters.extractors import (
    as_number,
    dig,
    first_present,
    parse_number,
    percent,
    raw,
    resolve_fields,
    text,
)


class TestFirstPresent:

    def test_returns_first_non_none(self):
        assert first_present([None, 0, 5]) == 0

    def test_all_absent(self):
        assert first_present([None, None]) is None

    def test_is_lazy(self):
        calls = []

        def values():
            calls.append(1)
            yield 1
            calls.append(2)
            yield 2

        assert first_present(values()) == 1
        assert calls == [1]


class TestResolveFields:

    def test_precedence_follows_rule_order(self):
        rules = {
            "pe": (lambda s: s.get("summary"), lambda s: s.get("simple")),
            "beta": (lambda s: s.get("missing"),),
        }
        resolved = resolve_fields(rules, {"summary": None, "simple": 20.0})
        assert resolved == {"pe": 20.0, "beta": None}


class TestDig:

    def test_nested_path(self):
        data = {"chart": {"result": [{"meta": {"price": 1}}]}}
        assert dig(data, "chart", "result", 0, "meta", "price") == 1

    @pytest.mark.parametrize("path", [
        ("chart", "result", 1),
        ("chart", "missing", 0),
        ("chart", "result", "meta"),
    ])
    def test_missing_paths(self, path):
        data = {"chart": {"result": [{"meta": {}}]}}
        assert dig(data, *path) is None

    def test_none_input(self):
        assert dig(None, "a") is None


class TestNumbers:

    def test_as_number_rejects_bool_and_strings(self):
        assert as_number(True) is None
        assert as_number("12") is None
        assert as_number(3) == 3.0

    def test_raw(self):
        assert raw({"raw": 12.5, "fmt": "12.50"}) == 12.5
        assert raw({"fmt": "12.50"}) is None
        assert raw(7) == 7.0

    @pytest.mark.parametrize("value,expected", [
        ("1,234", 1234.0),
        ("12.34배", 12.34),
        ("8.6%", 8.6),
        ("-3.5", -3.5),
        (15, 15.0),
    ])
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", ["-", "N/A", "", "  ", "abc", None, {}])
    def test_parse_number_absent_markers(self, value):
        assert parse_number(value) is None

    def test_percent(self):
        assert percent(0.25) == pytest.approx(25.0)
        assert percent(None) is None

    def test_text(self):
        assert text("Apple") == "Apple"
        assert text("  ") is None
        assert text(3) is None
