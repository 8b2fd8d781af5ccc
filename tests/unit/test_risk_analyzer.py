"""
Risk Officer Tool Tests
Level 2: Component scores, factor bands, VaR, stress scenarios, radar.
Level 3: Guards and boundary behaviour (strict thresholds, clamps).
"""

from __future__ import annotations

import pytest

from wealth_advisor.exceptions import InvalidPortfolioState
from wealth_advisor.tools.recommendation_rules import calculate_rebalance_data
from wealth_advisor.tools.risk_analyzer import (
    calculate_credit_risk,
    calculate_currency_risk,
    calculate_risk_metrics,
    calculate_var_analysis,
    calculate_volatility_risk,
    generate_radar_data,
    generate_risk_factors,
    generate_stress_scenarios,
)

from tests.fixtures.conftest import make_context, make_fund, make_stock, sample_context


def _small_cap_heavy_context():
    """IT 40%, Banking 20%, one small cap fund 40% of 100,000."""
    return make_context(
        stocks=[
            make_stock("TCS", 30_000, "Information Technology"),
            make_stock("HDFCBANK", 20_000, "Banking"),
            make_stock("INFY", 10_000, "Information Technology"),
        ],
        funds=[make_fund("Nippon India Small Cap Fund", 40_000)],
    )


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

class TestRiskMetrics:

    @pytest.mark.behavior
    def test_component_scores(self):
        m = calculate_risk_metrics(_small_cap_heavy_context())
        # largest 40 -> 40, top3 90 -> 30
        assert m.concentration_risk == 70
        # IT 40% x 2
        assert m.sector_risk == 80
        # 30 + small cap 15 + 3 stocks x 5
        assert m.volatility_score == 60
        assert m.credit_risk == 20
        # max(10, 0 - 10) + 40 x 0.5
        assert m.liquidity_risk == 30
        assert m.currency_risk == 0
        assert m.overall_score == 43
        assert m.risk_level == "moderate"

    @pytest.mark.behavior
    def test_empty_portfolio(self):
        m = calculate_risk_metrics(make_context())
        assert m.concentration_risk == 0
        assert m.sector_risk == 0
        assert m.volatility_score == 30
        assert m.liquidity_risk == 30
        assert m.overall_score == 13
        assert m.risk_level == "conservative"

    @pytest.mark.behavior
    def test_zero_value_portfolio_raises(self):
        with pytest.raises(InvalidPortfolioState):
            calculate_risk_metrics(make_context(funds=[make_fund("F", 0)]))

    @pytest.mark.behavior
    def test_sample_scores_in_range(self):
        m = calculate_risk_metrics(sample_context())
        for value in m.model_dump().values():
            if isinstance(value, int):
                assert 0 <= value <= 100


class TestComponentHelpers:

    @pytest.mark.behavior
    def test_volatility_mid_cap_and_return_spread(self):
        stocks = [
            make_stock("TCS", 100),
            make_stock("INFY", 100, avg_purchase_price=80),
        ]
        funds = [make_fund("Axis Midcap Fund", 100)]
        ctx = make_context(stocks=stocks, funds=funds)
        # 30 + mid 10 + 2 stocks x 5 + spread 25 -> 15
        assert calculate_volatility_risk(ctx.stocks, ctx.mutual_funds) == 65

    @pytest.mark.behavior
    def test_volatility_capped(self):
        funds = [make_fund(f"Small Cap Fund {i}", 100, category="Small Cap Fund") for i in range(6)]
        ctx = make_context(funds=funds)
        assert calculate_volatility_risk(ctx.stocks, ctx.mutual_funds) == 100

    @pytest.mark.behavior
    @pytest.mark.parametrize("ratio,expected", [(None, 25), (0.6, 25), (0.7, 40), (0.9, 50)])
    def test_credit_bands(self, ratio, expected):
        ctx = make_context(funds=[make_fund("Bond Fund", 100, category="Debt Fund", expense_ratio=ratio)])
        assert calculate_credit_risk(ctx.mutual_funds) == expected

    @pytest.mark.behavior
    def test_credit_without_debt_funds(self):
        ctx = make_context(funds=[make_fund("SBI Bluechip Fund", 100)])
        assert calculate_credit_risk(ctx.mutual_funds) == 20

    @pytest.mark.behavior
    def test_gilt_and_liquid_funds_count_as_debt(self):
        ctx = make_context(funds=[
            make_fund("Nippon India Gilt Fund - Direct Growth", 50_000, expense_ratio=0.95),
            make_fund("HDFC Liquid Fund - Direct Growth", 50_000, expense_ratio=0.95),
        ])
        assert [f.category for f in ctx.mutual_funds] == ["Gilt Fund", "Liquid Fund"]
        assert calculate_credit_risk(ctx.mutual_funds) == 50
        assert calculate_rebalance_data(ctx).current["Debt"] == 100

    @pytest.mark.behavior
    def test_currency_doubles_international_share(self):
        ctx = make_context(
            stocks=[make_stock("TCS", 90_000)],
            funds=[make_fund("Global Fund", 10_000, category="International Fund")],
        )
        assert calculate_currency_risk(ctx.mutual_funds, 100_000) == 20


# ---------------------------------------------------------------------------
# Factors & radar
# ---------------------------------------------------------------------------

class TestRiskFactors:

    @pytest.mark.behavior
    def test_bands(self):
        ctx = _small_cap_heavy_context()
        factors = generate_risk_factors(ctx, calculate_risk_metrics(ctx))
        assert [f.name for f in factors] == [
            "Portfolio Concentration",
            "Sector Allocation",
            "Market Cap Risk",
            "Credit Quality",
            "Liquidity Profile",
        ]
        status = {f.name: f.status for f in factors}
        assert status["Portfolio Concentration"] == "high"
        assert status["Sector Allocation"] == "high"
        assert status["Market Cap Risk"] == "high"
        assert status["Credit Quality"] == "good"
        # 30 is not above the moderate band
        assert status["Liquidity Profile"] == "good"

    @pytest.mark.behavior
    def test_market_cap_score_is_small_cap_share_tripled(self):
        ctx = make_context(
            stocks=[make_stock("TCS", 90_000)],
            funds=[make_fund("Small Cap Fund", 10_000, category="Small Cap Fund")],
        )
        market_cap = generate_risk_factors(ctx, calculate_risk_metrics(ctx))[2]
        assert market_cap.score == pytest.approx(30.0)
        assert market_cap.status == "good"

    @pytest.mark.behavior
    def test_radar_optimal(self):
        ctx = _small_cap_heavy_context()
        radar = generate_radar_data(generate_risk_factors(ctx, calculate_risk_metrics(ctx)))
        assert [p.category for p in radar] == ["Portfolio", "Sector", "Market", "Credit", "Liquidity"]
        assert [p.current for p in radar] == [70, 80, 100, 20, 30]
        assert [p.optimal for p in radar] == [30, 30, 30, 20, 30]

    @pytest.mark.behavior
    def test_radar_middle_band(self):
        ctx = make_context(funds=[make_fund("Bond Fund", 100, category="Debt Fund", expense_ratio=0.9)])
        factors = generate_risk_factors(ctx, calculate_risk_metrics(ctx))
        credit = generate_radar_data(factors)[3]
        assert credit.current == 50
        assert credit.optimal == 25


# ---------------------------------------------------------------------------
# VaR & stress
# ---------------------------------------------------------------------------

class TestVaR:

    @pytest.mark.behavior
    def test_all_stock_portfolio(self):
        var = calculate_var_analysis(make_context(stocks=[make_stock("TCS", 10_000)]))
        # volatility 20%
        assert var.daily_var_95 == pytest.approx(2.07)
        assert var.daily_var_99 == pytest.approx(2.94)
        assert var.monthly_var_95 == pytest.approx(9.50)
        assert var.max_drawdown == pytest.approx(16.0)
        assert var.beta == pytest.approx(1.11)
        assert var.sharpe_ratio == pytest.approx(-0.325, abs=0.01)

    @pytest.mark.behavior
    def test_empty_portfolio_floor(self):
        var = calculate_var_analysis(make_context())
        assert var.max_drawdown == pytest.approx(5.0)
        assert var.beta == pytest.approx(0.28)
        assert var.daily_var_99 >= var.daily_var_95


class TestStressScenarios:

    @pytest.mark.behavior
    def test_all_stocks(self):
        scenarios = generate_stress_scenarios(make_context(stocks=[make_stock("TCS", 100)]))
        assert [s.scenario for s in scenarios] == [
            "Market Crash (-30%)",
            "Sector Rotation Impact",
            "Interest Rate Hike (+200bps)",
            "Currency Devaluation (-15%)",
            "Inflation Spike (>7%)",
        ]
        assert [s.impact for s in scenarios] == pytest.approx([-0.30, -0.15, -0.05, -0.05, -0.08])

    @pytest.mark.behavior
    def test_all_funds(self):
        scenarios = generate_stress_scenarios(make_context(funds=[make_fund("F", 100)]))
        assert [s.impact for s in scenarios] == pytest.approx([-0.25, 0.0, -0.08, 0.0, -0.06])

    @pytest.mark.behavior
    def test_impacts_never_positive(self):
        for s in generate_stress_scenarios(sample_context()):
            assert s.impact <= 0
            assert s.probability
