"""
Portfolio Metrics, Rounding and Ranking Tests
Shared arithmetic used by every pipeline.
"""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from wealth_advisor.exceptions import InvalidPortfolioState
from wealth_advisor.tools.portfolio_metrics import (
    compute_equity_percentage,
    compute_target_equity_percentage,
    months_until,
    require_portfolio_value,
)
from wealth_advisor.tools.ranking import (
    by_abs_impact_desc,
    by_exposure_desc,
    by_priority_then_impact,
)
from wealth_advisor.tools.rounding import round_half_up, round_half_up_int

from tests.fixtures.conftest import make_context, make_fund, make_stock


class TestTargetEquity:

    @pytest.mark.behavior
    @pytest.mark.parametrize("age,risk,expected", [
        (30, "moderate", 70),
        (30, "aggressive", 85),
        (30, "conservative", 50),
        (10, "moderate", 80),
        (15, "aggressive", 85),
        (70, "moderate", 40),
        (70, "conservative", 30),
        (55, "conservative", 30),
        (45, "aggressive", 70),
    ])
    def test_target(self, age, risk, expected):
        assert compute_target_equity_percentage(age, risk) == expected


class TestEquityPercentage:

    @pytest.mark.behavior
    def test_funds_count_seventy_percent(self):
        ctx = make_context(
            stocks=[make_stock("TCS", 50_000)],
            funds=[make_fund("Some Fund", 50_000)],
        )
        assert compute_equity_percentage(ctx.summary) == pytest.approx(85.0)

    @pytest.mark.behavior
    def test_empty_portfolio(self):
        assert compute_equity_percentage(make_context().summary) == 0.0


class TestRequirePortfolioValue:

    @pytest.mark.behavior
    def test_empty_portfolio_returns_zero(self):
        assert require_portfolio_value(make_context()) == 0

    @pytest.mark.behavior
    def test_holdings_with_zero_value_raise(self):
        ctx = make_context(stocks=[make_stock("TCS", 0)])
        with pytest.raises(InvalidPortfolioState, match="holdings present"):
            require_portfolio_value(ctx)

    @pytest.mark.behavior
    def test_positive_total(self):
        ctx = make_context(stocks=[make_stock("TCS", 1234)])
        assert require_portfolio_value(ctx) == 1234


class TestMonthsUntil:

    @pytest.mark.behavior
    def test_no_date(self):
        assert months_until(None, date(2026, 1, 1)) == 0

    @pytest.mark.behavior
    def test_past_date_clamped(self):
        assert months_until(date(2020, 1, 1), date(2026, 1, 1)) == 0

    @pytest.mark.behavior
    def test_thirty_day_months(self):
        today = date(2026, 1, 1)
        assert months_until(date(2026, 1, 31), today) == 1
        # 45 days is 1.5 months, rounded half up
        assert months_until(date(2026, 2, 15), today) == 2
        assert months_until(date(2026, 1, 15), today) == 0


class TestRounding:

    @pytest.mark.schema
    @pytest.mark.parametrize("value,ndigits,expected", [
        (2.5, 0, 3.0),
        (3.5, 0, 4.0),
        (-2.5, 0, -3.0),
        (0.125, 2, 0.13),
        (1.2345, 2, 1.23),
        (0.0, 2, 0.0),
    ])
    def test_round_half_up(self, value, ndigits, expected):
        assert round_half_up(value, ndigits) == pytest.approx(expected)

    @pytest.mark.schema
    def test_round_half_up_int(self):
        assert round_half_up_int(20.5) == 21
        assert isinstance(round_half_up_int(20.4), int)


class TestRanking:

    @pytest.mark.schema
    def test_priority_then_impact(self):
        items = [
            SimpleNamespace(priority="low", impact_score=99),
            SimpleNamespace(priority="high", impact_score=10),
            SimpleNamespace(priority="medium", impact_score=50),
            SimpleNamespace(priority="high", impact_score=80),
        ]
        ordered = sorted(items, key=by_priority_then_impact)
        assert [(i.priority, i.impact_score) for i in ordered] == [
            ("high", 80), ("high", 10), ("medium", 50), ("low", 99),
        ]

    @pytest.mark.schema
    def test_exposure_desc_reads_either_field(self):
        items = [SimpleNamespace(percentage=5), SimpleNamespace(user_exposure=20)]
        ordered = sorted(items, key=by_exposure_desc)
        assert ordered[0].user_exposure == 20

    @pytest.mark.schema
    def test_abs_impact(self):
        items = [SimpleNamespace(impact=100), SimpleNamespace(impact=-300), SimpleNamespace(impact=50)]
        assert [i.impact for i in sorted(items, key=by_abs_impact_desc)] == [-300, 100, 50]
