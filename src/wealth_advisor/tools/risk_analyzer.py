"""
Risk Officer Tool: Portfolio Risk Analyzer
Six component risk scores (0-100, higher is riskier), factor commentary,
parametric VaR, stress scenarios and radar data.

All percentages are of total portfolio value. Scores are heuristics over
the holdings; nothing here uses price history.
"""

from __future__ import annotations

import logging
import math
from statistics import mean
from typing import List, Sequence, Tuple

from wealth_advisor.config.constants import (
    MARKET_VOLATILITY,
    RISK_BASE_ANNUAL_VOLATILITY,
    RISK_DEBT_VOLATILITY,
    RISK_FREE_RATE,
    RISK_LEVEL_AGGRESSIVE_ABOVE,
    RISK_LEVEL_MODERATE_ABOVE,
    TRADING_DAYS_PER_MONTH,
    TRADING_DAYS_PER_YEAR,
    Z_SCORE_95,
    Z_SCORE_99,
)
from wealth_advisor.config.reference_data import DEBT_CATEGORY_KEYWORDS
from wealth_advisor.schemas.portfolio_input import (
    ASSET_CLASS_MUTUAL_FUNDS,
    ASSET_CLASS_STOCKS,
    MutualFundHolding,
    StockHolding,
    UserContext,
)
from wealth_advisor.schemas.risk_output import (
    RadarPoint,
    RiskFactor,
    RiskMetrics,
    StressScenario,
    VaRAnalysis,
)
from wealth_advisor.tools.portfolio_metrics import require_portfolio_value
from wealth_advisor.tools.rounding import round_half_up, round_half_up_int
from wealth_advisor.tools.sector_exposure import compute_sector_exposure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

DEFAULT_DEBT_EXPENSE_RATIO = 0.5


def _category_has(fund: MutualFundHolding, *keywords: str) -> bool:
    name = (fund.category or "").lower()
    return any(k in name for k in keywords)


def _share(value: float, total: float) -> float:
    return value / total * 100 if total > 0 else 0.0


def _small_cap_pct(funds: Sequence[MutualFundHolding], total: float) -> float:
    return _share(sum(f.current_value for f in funds if _category_has(f, "small")), total)


def _risk_level(score: int) -> str:
    if score > RISK_LEVEL_AGGRESSIVE_ABOVE:
        return "aggressive"
    if score > RISK_LEVEL_MODERATE_ABOVE:
        return "moderate"
    return "conservative"


def _total_return_pct(ctx: UserContext) -> float:
    invested = ctx.summary.total_investment
    if invested <= 0:
        return 0.0
    return (ctx.summary.total_current_value - invested) / invested * 100


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------

def calculate_concentration_risk(
    stocks: Sequence[StockHolding],
    funds: Sequence[MutualFundHolding],
    total: float,
) -> int:
    """Largest holding and top-3 share, each banded."""
    shares = sorted(
        (_share(h.current_value, total) for h in [*stocks, *funds]),
        reverse=True,
    )
    largest = shares[0] if shares else 0.0
    top3 = sum(shares[:3])

    score = 0
    if largest > 25:
        score += 40
    elif largest > 15:
        score += 25
    elif largest > 10:
        score += 15

    if top3 > 60:
        score += 30
    elif top3 > 40:
        score += 20
    elif top3 > 30:
        score += 10
    return min(100, score)


def calculate_sector_risk(stocks: Sequence[StockHolding], total: float) -> int:
    """Twice the largest sector share."""
    exposures = compute_sector_exposure(list(stocks), total)
    largest = max((e.percentage for e in exposures.values()), default=0.0)
    return min(100, round_half_up_int(largest * 2))


def calculate_volatility_risk(
    stocks: Sequence[StockHolding],
    funds: Sequence[MutualFundHolding],
) -> int:
    """Base 30, plus small/mid cap funds, direct stocks and return dispersion."""
    score = 30.0
    score += 15 * sum(1 for f in funds if _category_has(f, "small"))
    score += 10 * sum(1 for f in funds if _category_has(f, "mid"))
    score += min(len(stocks) * 5, 25)

    returns = [s.gain_loss_percentage for s in stocks]
    returns += [f.gain_loss_percentage for f in funds if f.gain_loss_percentage is not None]
    if returns:
        spread = max(returns) - min(returns)
        if spread > 30:
            score += 20
        elif spread > 20:
            score += 15
        elif spread > 10:
            score += 10
    return min(100, round_half_up_int(score))


def calculate_credit_risk(funds: Sequence[MutualFundHolding]) -> int:
    """Debt funds with higher expense ratios read as riskier credit."""
    debt = [f for f in funds if _category_has(f, *DEBT_CATEGORY_KEYWORDS)]
    if not debt:
        return 20

    avg_expense = mean(
        f.expense_ratio if f.expense_ratio else DEFAULT_DEBT_EXPENSE_RATIO for f in debt
    )
    score = 25
    if avg_expense > 0.6:
        score += 15
    if avg_expense > 0.8:
        score += 10
    return min(100, score)


def calculate_liquidity_risk(
    stocks: Sequence[StockHolding],
    funds: Sequence[MutualFundHolding],
    total: float,
) -> int:
    stock_pct = _share(sum(s.current_value for s in stocks), total)
    score = max(0.0, 40 - stock_pct)
    score = max(10.0, score - 10)
    score += _small_cap_pct(funds, total) * 0.5
    return min(100, round_half_up_int(score))


def calculate_currency_risk(funds: Sequence[MutualFundHolding], total: float) -> int:
    intl = sum(f.current_value for f in funds if _category_has(f, "international"))
    return min(100, round_half_up_int(_share(intl, total) * 2))


def calculate_risk_metrics(ctx: UserContext) -> RiskMetrics:
    """
    Component scores and their rounded mean.

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    total = require_portfolio_value(ctx)
    stocks, funds = ctx.stocks, ctx.mutual_funds

    concentration = calculate_concentration_risk(stocks, funds, total)
    sector = calculate_sector_risk(stocks, total)
    volatility = calculate_volatility_risk(stocks, funds)
    credit = calculate_credit_risk(funds)
    liquidity = calculate_liquidity_risk(stocks, funds, total)
    currency = calculate_currency_risk(funds, total)

    overall = round_half_up_int(
        (concentration + sector + volatility + credit + liquidity + currency) / 6
    )
    return RiskMetrics(
        overall_score=overall,
        risk_level=_risk_level(overall),
        volatility_score=volatility,
        concentration_risk=concentration,
        sector_risk=sector,
        credit_risk=credit,
        liquidity_risk=liquidity,
        currency_risk=currency,
    )


# ---------------------------------------------------------------------------
# Factors
# ---------------------------------------------------------------------------

# (high_above, moderate_above, {status: (description, recommendation)})
_FACTOR_TEXT = {
    "Portfolio Concentration": (60, 30, {
        "high": ("High concentration in few holdings increases portfolio risk",
                 "Consider diversifying by reducing large positions and adding more holdings"),
        "moderate": ("Moderate concentration risk - some holdings are significantly large",
                     "Monitor large positions and consider gradual rebalancing"),
        "good": ("Well diversified portfolio with balanced position sizes",
                 "Current allocation is optimal"),
    }),
    "Sector Allocation": (50, 30, {
        "high": ("High exposure to single sector creates concentration risk",
                 "Diversify across sectors to reduce single-sector dependency"),
        "moderate": ("Moderate sector concentration - one sector dominates portfolio",
                     "Consider reducing exposure to dominant sector"),
        "good": ("Good sector diversification across multiple industries",
                 "Continue maintaining balanced sector allocation"),
    }),
    "Market Cap Risk": (30, 20, {
        "high": ("High small-cap exposure increases volatility risk",
                 "Consider reducing small-cap allocation below 20%"),
        "moderate": ("Moderate small-cap exposure - monitor for volatility",
                     "Small-cap exposure is at upper limit, consider rebalancing"),
        "good": ("Balanced allocation across market capitalizations",
                 "Current market cap allocation is appropriate"),
    }),
    "Credit Quality": (50, 30, {
        "high": ("Debt funds may have credit quality concerns",
                 "Review debt fund credit quality and consider AAA-rated funds"),
        "moderate": ("Moderate credit risk in debt allocation",
                     "Monitor debt fund performance closely"),
        "good": ("High quality debt funds with good credit ratings",
                 "Maintain current credit quality standards"),
    }),
    "Liquidity Profile": (50, 30, {
        "high": ("Lower liquidity due to small-cap heavy allocation",
                 "Increase allocation to large-cap and liquid funds"),
        "moderate": ("Moderate liquidity with some illiquid holdings",
                     "Maintain some allocation to liquid funds"),
        "good": ("High liquidity portfolio suitable for emergency needs",
                 "Excellent liquidity for emergencies"),
    }),
}


def _factor(name: str, score: float, banded_on: float) -> RiskFactor:
    high_above, moderate_above, text = _FACTOR_TEXT[name]
    if banded_on > high_above:
        status = "high"
    elif banded_on > moderate_above:
        status = "moderate"
    else:
        status = "good"
    description, recommendation = text[status]
    return RiskFactor(
        name=name,
        score=score,
        status=status,
        description=description,
        recommendation=recommendation,
    )


def generate_risk_factors(ctx: UserContext, metrics: RiskMetrics) -> List[RiskFactor]:
    """Five factors; market cap is banded on small-cap share, the rest on their score."""
    total = require_portfolio_value(ctx)
    small_cap = _small_cap_pct(ctx.mutual_funds, total)
    return [
        _factor("Portfolio Concentration", metrics.concentration_risk, metrics.concentration_risk),
        _factor("Sector Allocation", metrics.sector_risk, metrics.sector_risk),
        _factor("Market Cap Risk", min(100.0, small_cap * 3), small_cap),
        _factor("Credit Quality", metrics.credit_risk, metrics.credit_risk),
        _factor("Liquidity Profile", metrics.liquidity_risk, metrics.liquidity_risk),
    ]


# ---------------------------------------------------------------------------
# VaR & stress
# ---------------------------------------------------------------------------

def calculate_var_analysis(ctx: UserContext) -> VaRAnalysis:
    """
    Parametric VaR from an assumed volatility.

    Annual volatility = 15% x stock share + 5%. Daily VaR scales by
    sqrt(252), monthly by sqrt(21). Max drawdown is 0.8 x volatility,
    clamped to [5, 25].
    """
    stock_pct = ctx.summary.allocation_pct(ASSET_CLASS_STOCKS)
    volatility = RISK_BASE_ANNUAL_VOLATILITY * stock_pct / 100 + RISK_DEBT_VOLATILITY

    daily = volatility / math.sqrt(TRADING_DAYS_PER_YEAR)
    daily_95 = daily * Z_SCORE_95
    daily_99 = daily * Z_SCORE_99
    monthly_95 = daily_95 * math.sqrt(TRADING_DAYS_PER_MONTH)
    max_drawdown = min(25.0, max(5.0, volatility * 0.8))
    sharpe = (_total_return_pct(ctx) - RISK_FREE_RATE) / volatility if volatility > 0 else 0.0

    return VaRAnalysis(
        daily_var_95=round_half_up(daily_95, 2),
        daily_var_99=round_half_up(daily_99, 2),
        monthly_var_95=round_half_up(monthly_95, 2),
        max_drawdown=round_half_up(max_drawdown, 2),
        sharpe_ratio=round_half_up(sharpe, 2),
        beta=round_half_up(volatility / MARKET_VOLATILITY, 2),
    )


# (name, probability, stock weight, fund weight)
_STRESS_SCENARIOS: Tuple[Tuple[str, str, float, float], ...] = (
    ("Market Crash (-30%)", "Low (2-5%)", 0.30, 0.25),
    ("Sector Rotation Impact", "Medium (15-20%)", 0.15, 0.0),
    ("Interest Rate Hike (+200bps)", "High (30-40%)", 0.05, 0.08),
    ("Currency Devaluation (-15%)", "Medium (10-15%)", 0.05, 0.0),
    ("Inflation Spike (>7%)", "Medium (20-25%)", 0.08, 0.06),
)


def generate_stress_scenarios(ctx: UserContext) -> List[StressScenario]:
    """Loss per scenario as a weighted sum of the stock and fund shares."""
    stock_pct = ctx.summary.allocation_pct(ASSET_CLASS_STOCKS)
    fund_pct = ctx.summary.allocation_pct(ASSET_CLASS_MUTUAL_FUNDS)
    scenarios = []
    for name, probability, stock_w, fund_w in _STRESS_SCENARIOS:
        loss = (stock_pct * stock_w + fund_pct * fund_w) * 0.01
        scenarios.append(StressScenario(
            scenario=name,
            impact=-round_half_up(loss, 2),
            probability=probability,
        ))
    return scenarios


def generate_radar_data(factors: List[RiskFactor]) -> List[RadarPoint]:
    """Radar axes from factor names; optimal caps risky factors at 30 / 25."""
    points = []
    for factor in factors:
        if factor.score > 50:
            optimal = 30.0
        elif factor.score > 30:
            optimal = 25.0
        else:
            optimal = factor.score
        points.append(RadarPoint(
            category=factor.name.split(" ")[0],
            current=factor.score,
            optimal=optimal,
        ))
    return points
