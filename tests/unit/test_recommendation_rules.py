"""
Portfolio Advisor Tool Tests
Level 2: Each analyzer against hand-built portfolios.
Level 3: Thresholds (strictly greater than), ranking and truncation.
"""

from __future__ import annotations

import pytest

from wealth_advisor.config.reference_data import REBALANCE_BUCKETS
from wealth_advisor.exceptions import InvalidPortfolioState
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.tools.recommendation_rules import (
    analyze_asset_allocation,
    analyze_fund_performance,
    analyze_goal_progress,
    analyze_sector_concentration,
    analyze_stock_concentration,
    calculate_rebalance_data,
    generate_recommendations,
    rank_recommendations,
)

from tests.fixtures.conftest import (
    TODAY,
    make_context,
    make_fund,
    make_goal,
    make_stock,
    sample_context,
)


def _sector_context(banking_value: float, rest_value: float, age: int = 30):
    """One Banking stock worth banking_value; the rest held in a plain fund."""
    return make_context(
        stocks=[make_stock("HDFCBANK", banking_value, "Banking")],
        funds=[make_fund("Plain Fund", rest_value)],
        age=age,
    )


# ---------------------------------------------------------------------------
# Asset allocation
# ---------------------------------------------------------------------------

class TestAssetAllocation:

    @pytest.mark.behavior
    def test_young_aggressive_underweight_equity(self):
        # equity 50% from a supplied summary, target 85 for age 30 aggressive
        ctx = UserContext.model_validate({
            "portfolio": {
                "stocks": [make_stock("TCS", 50_000)],
                "summary": {
                    "total_current_value": 100_000,
                    "asset_allocation": {
                        "stocks": {"value": 50_000, "percentage": 50.0},
                        "mutual_funds": {"value": 0, "percentage": 0.0},
                    },
                },
            },
            "user_profile": {"age": 30},
            "investment_profile": {"risk_tolerance": "aggressive"},
        })
        recs = analyze_asset_allocation(ctx)
        assert len(recs) == 1
        rec = recs[0]
        assert rec.type == "add"
        assert rec.recommended_allocation == 85
        assert rec.current_allocation == 50
        assert rec.priority == "high"
        assert rec.impact_score == 100
        assert rec.title == "Increase Equity Allocation"
        assert rec.timeframe == "2-4 weeks"
        assert rec.risk_level == "medium"
        assert rec.id == "asset_allocation_increase"

    @pytest.mark.behavior
    def test_overweight_equity_reduce(self):
        # all stocks, age 60 moderate -> target 40, deviation 60
        ctx = make_context(stocks=[make_stock("TCS", 10_000)], age=60)
        rec = analyze_asset_allocation(ctx)[0]
        assert rec.type == "reduce"
        assert rec.title == "Reduce Equity Allocation"
        assert rec.current_allocation == 100
        assert rec.recommended_allocation == 40
        assert rec.risk_level == "low"
        assert "Reduce portfolio volatility" in rec.reasoning

    @pytest.mark.behavior
    def test_within_ten_points_no_rec(self):
        # 70% stocks + 30% funds -> equity 91; target 80 at age 20 moderate: gap 11
        ctx = make_context(stocks=[make_stock("TCS", 70)], funds=[make_fund("F", 30)], age=20)
        assert len(analyze_asset_allocation(ctx)) == 1
        # 60% stocks + 40% funds -> equity 88; gap 8
        ctx = make_context(stocks=[make_stock("TCS", 60)], funds=[make_fund("F", 40)], age=20)
        assert analyze_asset_allocation(ctx) == []

    @pytest.mark.behavior
    def test_medium_priority_between_ten_and_twenty(self):
        # equity 85, target 70 at age 30 moderate -> gap 15
        ctx = make_context(stocks=[make_stock("TCS", 50)], funds=[make_fund("F", 50)], age=30)
        rec = analyze_asset_allocation(ctx)[0]
        assert rec.priority == "medium"
        assert rec.timeframe == "1-3 months"
        assert rec.impact_score == pytest.approx(60.0)

    @pytest.mark.behavior
    def test_empty_portfolio_suggests_increase(self):
        recs = analyze_asset_allocation(make_context())
        assert len(recs) == 1
        assert recs[0].type == "add"
        assert recs[0].current_allocation == 0


# ---------------------------------------------------------------------------
# Sector concentration
# ---------------------------------------------------------------------------

class TestSectorConcentration:

    @pytest.mark.behavior
    def test_exactly_twenty_percent_no_rec(self):
        assert analyze_sector_concentration(_sector_context(20_000, 80_000)) == []

    @pytest.mark.behavior
    def test_just_above_twenty_percent(self):
        recs = analyze_sector_concentration(_sector_context(20_100, 79_900))
        assert len(recs) == 1
        assert recs[0].current_allocation == 20

    @pytest.mark.behavior
    def test_banking_at_twenty_five(self):
        rec = analyze_sector_concentration(_sector_context(25_000, 75_000))[0]
        assert rec.id == "sector_concentration_banking"
        assert rec.title == "Reduce Banking Sector Concentration"
        assert rec.current_allocation == 25
        assert rec.recommended_allocation == 18
        assert rec.priority == "medium"
        assert rec.impact_score == pytest.approx(75.0)
        assert rec.timeframe == "1-2 months"
        assert "HDFCBANK" in rec.description

    @pytest.mark.behavior
    def test_above_thirty_is_high(self):
        rec = analyze_sector_concentration(_sector_context(40_000, 60_000))[0]
        assert rec.priority == "high"
        assert rec.impact_score == 100
        assert rec.timeframe == "1-2 weeks"

    @pytest.mark.behavior
    def test_slug_id(self):
        ctx = make_context(stocks=[make_stock("RELIANCE", 50_000, "Oil & Gas")],
                           funds=[make_fund("F", 50_000)])
        assert analyze_sector_concentration(ctx)[0].id == "sector_concentration_oil_gas"

    @pytest.mark.behavior
    def test_no_stocks(self):
        assert analyze_sector_concentration(make_context(funds=[make_fund("F", 100)])) == []


# ---------------------------------------------------------------------------
# Stock concentration
# ---------------------------------------------------------------------------

class TestStockConcentration:

    @pytest.mark.behavior
    def test_ten_percent_no_rec(self):
        ctx = make_context(stocks=[make_stock("TCS", 10_000)], funds=[make_fund("F", 90_000)])
        assert analyze_stock_concentration(ctx) == []

    @pytest.mark.behavior
    def test_twelve_percent_medium(self):
        ctx = make_context(stocks=[make_stock("TCS", 12_000)], funds=[make_fund("F", 88_000)])
        rec = analyze_stock_concentration(ctx)[0]
        assert rec.id == "stock_concentration_tcs"
        assert rec.priority == "medium"
        assert rec.current_allocation == 12
        assert rec.recommended_allocation == 8
        assert rec.amount_suggestion == 4_000
        assert rec.impact_score == pytest.approx(60.0)

    @pytest.mark.behavior
    def test_twenty_percent_high(self):
        ctx = make_context(stocks=[make_stock("TCS", 20_000)], funds=[make_fund("F", 80_000)])
        rec = analyze_stock_concentration(ctx)[0]
        assert rec.priority == "high"
        assert rec.impact_score == 100
        assert rec.amount_suggestion == 12_000

    @pytest.mark.behavior
    def test_exchange_lines_merged_into_one_position(self):
        ctx = make_context(
            stocks=[
                make_stock("RELIANCE", 7_000, exchange="NSE"),
                make_stock("RELIANCE-EQ", 7_000, exchange="BSE"),
            ],
            funds=[make_fund("F", 86_000)],
        )
        recs = analyze_stock_concentration(ctx)
        assert [r.id for r in recs] == ["stock_concentration_reliance"]
        assert recs[0].current_allocation == 14
        assert recs[0].amount_suggestion == 6_000
        assert recs[0].title == "Reduce RELIANCE Position Size"

    @pytest.mark.behavior
    def test_zero_value_portfolio_raises(self):
        with pytest.raises(InvalidPortfolioState):
            analyze_stock_concentration(make_context(stocks=[make_stock("TCS", 0)]))


# ---------------------------------------------------------------------------
# Fund performance
# ---------------------------------------------------------------------------

class TestFundPerformance:

    @pytest.mark.behavior
    def test_underperformer_reviewed(self):
        ctx = make_context(funds=[
            make_fund("SBI Bluechip Fund - Direct Growth", 61_800, invested=60_000, scheme_code="SBI-BC"),
        ])
        rec = analyze_fund_performance(ctx)[0]
        assert rec.id == "fund_performance_sbi_bc"
        assert rec.title == "Review Large Cap Fund Performance"
        assert rec.priority == "medium"
        assert rec.current_allocation == pytest.approx(3.0)
        assert rec.recommended_allocation == 12
        assert rec.impact_score == pytest.approx(54.0)
        assert rec.timeframe == "3-6 months"
        assert "SBI Bluechip Fund fund is underperforming" in rec.description

    @pytest.mark.behavior
    def test_negative_return_is_high(self):
        ctx = make_context(funds=[make_fund("Axis Midcap Fund", 54_000, invested=60_000)])
        rec = analyze_fund_performance(ctx)[0]
        assert rec.priority == "high"
        assert rec.timeframe == "2-4 weeks"
        assert rec.impact_score == pytest.approx(100.0)
        assert "has negative returns" in rec.description

    @pytest.mark.behavior
    def test_small_investment_skipped(self):
        ctx = make_context(funds=[make_fund("Axis Midcap Fund", 40_000, invested=50_000)])
        assert analyze_fund_performance(ctx) == []

    @pytest.mark.behavior
    def test_unknown_return_skipped(self):
        ctx = make_context(funds=[make_fund("Axis Midcap Fund", 60_000, invested=0)])
        assert analyze_fund_performance(ctx) == []

    @pytest.mark.behavior
    def test_expense_ratio(self):
        ctx = make_context(funds=[
            make_fund("Kotak Something", 10_000, expense_ratio=1.0),
            make_fund("Expensive Fund", 10_000, expense_ratio=1.8, scheme_code="EXP"),
        ])
        recs = analyze_fund_performance(ctx)
        assert len(recs) == 1
        rec = recs[0]
        assert rec.id == "fund_expense_exp"
        assert rec.title == "Switch to Lower Cost Mutual Fund"
        assert rec.impact_score == 60
        assert rec.source == "fund_performance"
        assert "1.8%" in rec.description

    @pytest.mark.behavior
    def test_underperformers_before_expense(self):
        ctx = make_context(funds=[
            make_fund("Costly Fund", 10_000, expense_ratio=2.0, scheme_code="A"),
            make_fund("Weak Fund", 61_000, invested=60_000, scheme_code="B"),
        ])
        assert [r.id for r in analyze_fund_performance(ctx)] == ["fund_performance_b", "fund_expense_a"]


# ---------------------------------------------------------------------------
# Goal progress
# ---------------------------------------------------------------------------

class TestGoalProgress:

    @pytest.mark.behavior
    def test_behind_high_priority_goal(self):
        # 20% done, 1,20,000 left over 12 months
        goal = make_goal("house", 150_000, 30_000, target_date="2027-10-13")
        recs = analyze_goal_progress(make_context(goals=[goal]), TODAY)
        assert len(recs) == 1
        rec = recs[0]
        assert rec.id == "goal_behind_house"
        assert rec.type == "goal_based"
        assert rec.priority == "high"
        assert rec.impact_score == 85
        assert rec.amount_suggestion == 5_000
        assert rec.timeframe == "Immediate"
        assert "12 months left" in rec.reasoning[0]

    @pytest.mark.behavior
    def test_behind_but_too_close_no_rec(self):
        goal = make_goal("house", 150_000, 30_000, target_date="2027-03-01")
        assert analyze_goal_progress(make_context(goals=[goal]), TODAY) == []

    @pytest.mark.behavior
    def test_behind_medium_priority_no_rec(self):
        goal = make_goal("car", 150_000, 30_000, target_date="2030-01-01", priority="medium")
        assert analyze_goal_progress(make_context(goals=[goal]), TODAY) == []

    @pytest.mark.behavior
    def test_no_target_date_never_behind(self):
        goal = make_goal("house", 150_000, 30_000)
        assert analyze_goal_progress(make_context(goals=[goal]), TODAY) == []

    @pytest.mark.behavior
    def test_final_push(self):
        goal = make_goal("trip", 100_000, 90_000, priority="low")
        rec = analyze_goal_progress(make_context(goals=[goal]), TODAY)[0]
        assert rec.id == "goal_final_push_trip"
        assert rec.priority == "medium"
        assert rec.impact_score == 75
        assert rec.amount_suggestion == 10_000
        assert "10K" in rec.description

    @pytest.mark.behavior
    def test_completed_goal_ignored(self):
        goal = make_goal("trip", 100_000, 100_000)
        assert analyze_goal_progress(make_context(goals=[goal]), TODAY) == []


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

class TestRanking:

    def _crowded_context(self):
        """Many concentrated stocks and an overweight equity sleeve."""
        stocks = [
            make_stock("TCS", 12_000, "Information Technology"),
            make_stock("INFY", 12_000, "Information Technology"),
            make_stock("HDFCBANK", 12_000, "Banking"),
            make_stock("ICICIBANK", 12_000, "Banking"),
            make_stock("RELIANCE", 12_000, "Oil & Gas"),
            make_stock("ONGC", 12_000, "Oil & Gas"),
            make_stock("ITC", 14_000, "FMCG"),
            make_stock("NESTLEIND", 14_000, "FMCG"),
        ]
        return make_context(stocks=stocks, age=60)

    @pytest.mark.behavior
    def test_truncated_to_eight_and_sorted(self):
        candidates = generate_recommendations(self._crowded_context(), TODAY)
        assert len(candidates) > 8
        ranked = rank_recommendations(candidates)
        assert len(ranked) == 8
        keys = [({"high": 3, "medium": 2, "low": 1}[r.priority], r.impact_score) for r in ranked]
        assert keys == sorted(keys, reverse=True)

    @pytest.mark.behavior
    def test_ties_keep_analyzer_order(self):
        ranked = rank_recommendations(generate_recommendations(self._crowded_context(), TODAY))
        assert ranked[0].id == "asset_allocation_reduce"
        tied = [r.id for r in ranked if r.impact_score == pytest.approx(72.0)]
        assert tied == [
            "sector_concentration_information_technology",
            "sector_concentration_banking",
            "sector_concentration_oil_gas",
        ]

    @pytest.mark.behavior
    def test_sample_candidates(self):
        recs = generate_recommendations(sample_context(), TODAY)
        assert [r.id for r in recs] == ["asset_allocation_reduce", "goal_behind_house_down_payment"]

    @pytest.mark.behavior
    def test_candidate_ids_unique(self):
        # the same scheme held in two folios
        funds = [
            make_fund("Costly Fund - Regular", 50_000, scheme_code="COSTLY", expense_ratio=1.8),
            make_fund("Costly Fund - Regular", 50_000, scheme_code="COSTLY", expense_ratio=1.9),
        ]
        recs = generate_recommendations(make_context(funds=funds), TODAY)
        ids = [r.id for r in recs]
        assert ids.count("fund_expense_costly") == 1
        assert len(ids) == len(set(ids))
        assert "1.8%" in recs[ids.index("fund_expense_costly")].description


# ---------------------------------------------------------------------------
# Rebalance
# ---------------------------------------------------------------------------

class TestRebalanceData:

    @pytest.mark.behavior
    def test_buckets(self):
        ctx = make_context(
            stocks=[make_stock("TCS", 40_000)],
            funds=[
                make_fund("A", 20_000, category="Mid Cap Fund"),
                make_fund("B", 20_000, category="Corporate Bond Fund"),
                make_fund("C", 20_000, category="Hybrid Fund"),
            ],
        )
        snap = calculate_rebalance_data(ctx)
        assert set(snap.current) == set(REBALANCE_BUCKETS)
        assert snap.current["Large Cap"] == 40 + 14
        assert snap.current["Mid Cap"] == 20
        assert snap.current["Debt"] == 20
        assert snap.current["Small Cap"] == 0
        assert snap.recommended["Debt"] == 22
        assert snap.difference["Debt"] == 2

    @pytest.mark.behavior
    @pytest.mark.parametrize("risk", ["conservative", "moderate", "aggressive"])
    def test_profiles_sum_to_100(self, risk):
        snap = calculate_rebalance_data(make_context(risk=risk))
        assert sum(snap.recommended.values()) == 100

    @pytest.mark.behavior
    def test_empty_portfolio_all_zero(self):
        snap = calculate_rebalance_data(make_context(risk="aggressive"))
        assert all(v == 0 for v in snap.current.values())
        assert snap.difference == snap.recommended
