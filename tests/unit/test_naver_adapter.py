"""
Naver 证券适配器测试 - 指标回退顺序与缺失值处理
"""

import pytest

from quantdesk.adapters.naver_adapter import NaverFundamentalsAdapter, NaverSources, total_info_value


def make_adapter(session):
    return NaverFundamentalsAdapter(timeout=1.0, session=session)


class TestFetchFundamentals:
    """基本面补充测试"""

    def test_non_krx_symbol_skipped(self, session_factory):
        session = session_factory({})

        assert make_adapter(session).fetch_fundamentals("AAPL") is None
        session.get.assert_not_called()

    def test_basic_fields_win(self, session_factory):
        session = session_factory({
            "/005930/basic": {"stockName": "삼성전자", "per": "12.34", "pbr": "1.10"},
            "/005930/integration": {"totalInfos": [
                {"code": "per", "value": "99.00배"},
                {"code": "eps", "value": "4,950원"},
            ]},
            "/005930/indicator": {"annual": [{"roe": "5.0"}, {"roe": "8.6", "dividendYield": "2.1%"}]},
        })

        fundamentals = make_adapter(session).fetch_fundamentals("005930.KS")

        assert fundamentals.pe == 12.34
        assert fundamentals.pbr == 1.10
        assert fundamentals.eps == 4950.0
        assert fundamentals.roe == 8.6
        assert fundamentals.dividend_yield == 2.1
        assert fundamentals.name == "삼성전자"

    def test_investment_indicator_block(self, session_factory):
        session = session_factory({
            "/000660/basic": {"per": "-"},
            "/000660/integration": {"investmentIndicator": {"per": "7.5", "roe": "N/A"}},
        })

        fundamentals = make_adapter(session).fetch_fundamentals("000660")

        assert fundamentals.pe == 7.5
        assert fundamentals.roe is None

    def test_placeholders_are_absent_not_zero(self, session_factory):
        session = session_factory({
            "/005930/basic": {"per": "-", "pbr": "N/A", "eps": ""},
        })

        assert make_adapter(session).fetch_fundamentals("005930") is None

    def test_all_sections_requested_in_parallel(self, session_factory):
        session = session_factory({})

        make_adapter(session).fetch_fundamentals("005930")

        urls = sorted(c.args[0] for c in session.get.call_args_list)
        assert urls == [
            "https://m.stock.naver.com/api/stock/005930/basic",
            "https://m.stock.naver.com/api/stock/005930/indicator",
            "https://m.stock.naver.com/api/stock/005930/integration",
        ]


class TestNaverSources:

    def test_total_info_code_case_insensitive(self):
        sources = NaverSources(integration={"totalInfos": [
            {"code": "DIVIDENDYIELD", "value": "3.2%"},
            {"code": "dividend_yield", "value": "9.9%"},
        ]})
        assert total_info_value(sources, ("dividendyield", "dividend_yield")) == 3.2

    def test_total_info_skips_unparsable(self):
        sources = NaverSources(integration={"totalInfos": [
            {"code": "per", "value": "-"},
            {"code": "PER", "value": "10.5배"},
        ]})
        assert total_info_value(sources, ("per",)) == 10.5

    @pytest.mark.parametrize("indicator,expected", [
        ({"annual": [{"roe": "1"}, {"roe": "2"}]}, {"roe": "2"}),
        ({"yearly": [{"roe": "3"}]}, {"roe": "3"}),
        ({"annual": []}, {}),
        ({}, {}),
    ])
    def test_latest_indicator(self, indicator, expected):
        assert NaverSources(indicator=indicator).latest_indicator == expected
