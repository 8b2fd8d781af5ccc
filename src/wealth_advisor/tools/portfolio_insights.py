"""
Risk Officer Tool: Personalized Insights
Nine rule families (overall performance, stocks, sectors, mutual funds,
asset classes, goals, age fit, portfolio size, diversification) that turn
the user context into short insight cards.

Families run in that order and the list is cut to MAX_INSIGHTS in rule
order, so earlier families win when the cap bites. Holdings-based families
are skipped for an empty portfolio; goal insights still apply.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from wealth_advisor.config.constants import (
    FUND_EXPENSE_RATIO_LIMIT,
    INSIGHT_ASSET_CRITICAL,
    INSIGHT_ASSET_HIGH,
    INSIGHT_FEW_ASSET_CLASSES,
    INSIGHT_FUND_LAGGARD_RETURN,
    INSIGHT_FUND_LAGGARD_TARGET,
    INSIGHT_FUND_WINNER_RETURN,
    INSIGHT_GOAL_ALMOST_PROGRESS,
    INSIGHT_GOAL_BEHIND_PROGRESS,
    INSIGHT_GOAL_CRITICAL_PROGRESS,
    INSIGHT_GROWING_PORTFOLIO_MAX,
    INSIGHT_GROWING_PORTFOLIO_MIN,
    INSIGHT_INTERNATIONAL_TARGET,
    INSIGHT_INTERNATIONAL_TRIGGER,
    INSIGHT_IT_SECTOR_LIMIT,
    INSIGHT_LOW_COST_EXPENSE_RATIO,
    INSIGHT_MANY_ASSET_CLASSES,
    INSIGHT_POSITION_LIMIT,
    INSIGHT_POSITION_TARGET,
    INSIGHT_RETURN_EXCEPTIONAL,
    INSIGHT_RETURN_MODERATE,
    INSIGHT_RETURN_POOR,
    INSIGHT_RETURN_STRONG,
    INSIGHT_SECTOR_DOMINANT,
    INSIGHT_SECTOR_TARGET,
    INSIGHT_SENIOR_AGE,
    INSIGHT_SENIOR_EQUITY_CEILING,
    INSIGHT_SENIOR_EQUITY_TARGET,
    INSIGHT_SIP_BENCHMARK,
    INSIGHT_SIP_DISCIPLINE,
    INSIGHT_SMALL_PORTFOLIO,
    INSIGHT_STOCK_LAGGARD_RETURN,
    INSIGHT_STOCK_WINNER_RETURN,
    INSIGHT_YOUNG_AGE,
    INSIGHT_YOUNG_EQUITY_FLOOR,
    INSIGHT_YOUNG_EQUITY_TARGET,
    MAX_INSIGHTS,
)
from wealth_advisor.schemas.insights_output import Insight, InsightData
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.tools.portfolio_metrics import (
    compute_equity_percentage,
    months_until,
    require_portfolio_value,
)
from wealth_advisor.tools.ranking import slugify
from wealth_advisor.tools.recommendation_rules import merged_positions
from wealth_advisor.tools.rounding import round_half_up, round_half_up_int
from wealth_advisor.tools.sector_exposure import compute_sector_exposure

logger = logging.getLogger(__name__)

IT_SECTOR = "Information Technology"
INTERNATIONAL_CLASS = "international"


def _pct(value: float) -> str:
    return f"{round_half_up(value, 1):.1f}%"


def _signed_pct(value: float) -> str:
    return f"+{_pct(value)}" if value >= 0 else _pct(value)


def _rupees(value: float) -> str:
    return f"₹{round_half_up_int(value):,}"


def _short_scheme_name(scheme_name: str) -> str:
    return scheme_name.split(" - ")[0]


def _asset_class_name(key: str) -> str:
    """'mutual_funds' -> 'Mutual Funds'."""
    return key.replace("_", " ").title()


def _total_return_pct(ctx: UserContext) -> Optional[float]:
    invested = ctx.summary.total_investment
    if invested <= 0:
        return None
    return (ctx.summary.total_current_value - invested) / invested * 100


# ---------------------------------------------------------------------------
# Rule families
# ---------------------------------------------------------------------------

def performance_insights(ctx: UserContext) -> List[Insight]:
    """One insight for the overall return band; nothing between 5% and 8%."""
    total_return = _total_return_pct(ctx)
    if total_return is None:
        return []
    current = _pct(total_return)

    if total_return > INSIGHT_RETURN_EXCEPTIONAL:
        return [Insight(
            id="performance_exceptional",
            type="performance",
            title="Exceptional Portfolio Performance",
            description=(
                f"Outstanding! Your portfolio has generated {current} returns, "
                "significantly outperforming market benchmarks."
            ),
            impact="high",
            confidence=92,
            actionable=False,
            data=InsightData(
                current_value=current,
                target_value=_pct(INSIGHT_RETURN_EXCEPTIONAL),
                change=_signed_pct(total_return - INSIGHT_RETURN_EXCEPTIONAL),
            ),
            source="performance",
        )]
    if total_return > INSIGHT_RETURN_STRONG:
        return [Insight(
            id="performance_strong",
            type="performance",
            title="Strong Portfolio Performance",
            description=(
                f"Great job! Your portfolio has delivered {current} returns, "
                "beating most market indices and mutual fund benchmarks."
            ),
            impact="high",
            confidence=87,
            actionable=False,
            data=InsightData(
                current_value=current,
                target_value=_pct(INSIGHT_RETURN_STRONG),
                change=_signed_pct(total_return - INSIGHT_RETURN_STRONG),
            ),
            source="performance",
        )]
    if total_return > INSIGHT_RETURN_MODERATE:
        return [Insight(
            id="performance_moderate",
            type="performance",
            title="Moderate Portfolio Performance",
            description=(
                f"Your portfolio has generated {current} returns, which is decent "
                "but has room for improvement."
            ),
            impact="medium",
            confidence=78,
            actionable=True,
            recommendation=(
                "Review underperforming investments and consider rebalancing "
                "towards growth-oriented assets."
            ),
            source="performance",
        )]
    if total_return < INSIGHT_RETURN_POOR:
        return [Insight(
            id="performance_poor",
            type="warning",
            title="Portfolio Performance Needs Attention",
            description=(
                f"Your portfolio returns of {current} are below market expectations "
                "and need a strategic review."
            ),
            impact="high",
            confidence=89,
            actionable=True,
            recommendation=(
                "Consider switching to better-performing funds, review expense "
                "ratios, and optimize asset allocation."
            ),
            data=InsightData(
                current_value=current,
                target_value=_pct(INSIGHT_RETURN_MODERATE),
                change=_signed_pct(total_return - INSIGHT_RETURN_MODERATE),
            ),
            source="performance",
        )]
    return []


def stock_insights(ctx: UserContext, total_value: float) -> List[Insight]:
    """Top performer, worst laggard, and every merged position above 12%."""
    if not ctx.stocks:
        return []
    insights: List[Insight] = []

    ranked = sorted(ctx.stocks, key=lambda s: s.gain_loss_percentage, reverse=True)
    best, worst = ranked[0], ranked[-1]

    if best.gain_loss_percentage > INSIGHT_STOCK_WINNER_RETURN:
        insights.append(Insight(
            id=f"stock_winner_{slugify(best.symbol)}",
            type="performance",
            title=f"{best.symbol} Delivering Strong Returns",
            description=(
                f"{best.company_name} is your top performer with "
                f"{_pct(best.gain_loss_percentage)} returns, contributing "
                f"{_rupees(best.gain_loss)} to your portfolio gains."
            ),
            impact="high",
            confidence=88,
            actionable=False,
            data=InsightData(
                current_value=_pct(best.gain_loss_percentage),
                target_value=_pct(INSIGHT_STOCK_WINNER_RETURN),
                change=_signed_pct(best.gain_loss_percentage - INSIGHT_STOCK_WINNER_RETURN),
            ),
            source="stock",
        ))

    if worst.gain_loss_percentage < INSIGHT_STOCK_LAGGARD_RETURN:
        insights.append(Insight(
            id=f"stock_laggard_{slugify(worst.symbol)}",
            type="warning",
            title=f"{worst.symbol} Underperforming Portfolio",
            description=(
                f"{worst.company_name} is down {_pct(abs(worst.gain_loss_percentage))}, "
                f"a loss of {_rupees(abs(worst.gain_loss))}. Monitor closely for recovery signs."
            ),
            impact="medium",
            confidence=82,
            actionable=True,
            recommendation=(
                f"Review {worst.company_name}'s fundamentals and recent news. If the "
                "outlook remains weak, consider booking losses and reallocating."
            ),
            data=InsightData(
                current_value=_pct(worst.gain_loss_percentage),
                target_value="0%",
                change=_pct(worst.gain_loss_percentage),
            ),
            source="stock",
        ))

    for position in merged_positions(ctx.stocks):
        share = position.current_value / total_value * 100
        if share <= INSIGHT_POSITION_LIMIT:
            continue
        insights.append(Insight(
            id=f"stock_position_{slugify(position.symbol)}",
            type="risk",
            title=f"High Concentration Risk in {position.symbol}",
            description=(
                f"{position.company_name} represents {_pct(share)} of your "
                "portfolio, creating single-stock concentration risk."
            ),
            impact="medium",
            confidence=85,
            actionable=True,
            recommendation=(
                f"Consider reducing {position.symbol} to below {INSIGHT_POSITION_TARGET}% "
                "of the portfolio through partial profit booking or by adding other holdings."
            ),
            data=InsightData(
                current_value=_pct(share),
                target_value=f"{INSIGHT_POSITION_TARGET}%",
                change=_signed_pct(INSIGHT_POSITION_TARGET - share),
            ),
            source="stock",
        ))
    return insights


def sector_insights(ctx: UserContext, total_value: float) -> List[Insight]:
    """Dominant sector above 25% of the portfolio, and IT above 20%."""
    exposures = compute_sector_exposure(ctx.stocks, total_value)
    if not exposures:
        return []
    insights: List[Insight] = []

    dominant = max(exposures.values(), key=lambda e: e.percentage)
    if dominant.percentage > INSIGHT_SECTOR_DOMINANT:
        insights.append(Insight(
            id=f"sector_concentration_{slugify(dominant.sector)}",
            type="risk",
            title=f"Over-Concentration in {dominant.sector} Sector",
            description=(
                f"Your {dominant.sector} exposure is {_pct(dominant.percentage)} through "
                f"{', '.join(dominant.symbols)}. This creates sector-specific risk."
            ),
            impact="medium",
            confidence=80,
            actionable=True,
            recommendation=(
                f"Reduce {dominant.sector} exposure and add holdings in Healthcare, "
                "FMCG or Pharma."
            ),
            data=InsightData(
                current_value=_pct(dominant.percentage),
                target_value=f"{INSIGHT_SECTOR_TARGET}%",
                change=_signed_pct(INSIGHT_SECTOR_TARGET - dominant.percentage),
            ),
            source="sector",
        ))

    it_sector = exposures.get(IT_SECTOR)
    if it_sector is not None and it_sector.percentage > INSIGHT_IT_SECTOR_LIMIT:
        insights.append(Insight(
            id="sector_it_exposure",
            type="market",
            title="IT Sector Concentration Risk",
            description=(
                f"Your IT allocation of {_pct(it_sector.percentage)} through "
                f"{', '.join(it_sector.symbols)} is exposed to global demand "
                "slowdowns and currency swings."
            ),
            impact="medium",
            confidence=78,
            actionable=True,
            recommendation=(
                "Consider trimming IT and adding defensive sectors like FMCG, "
                "Pharma and Utilities."
            ),
            source="sector",
        ))
    return insights


def mutual_fund_insights(ctx: UserContext) -> List[Insight]:
    """Best and worst fund by return, SIP discipline, and the first costly fund."""
    funds = ctx.mutual_funds
    if not funds:
        return []
    insights: List[Insight] = []

    # Funds bought without an investment amount have no known return.
    ranked = sorted(
        (f for f in funds if f.gain_loss_percentage is not None),
        key=lambda f: f.gain_loss_percentage,
        reverse=True,
    )
    if ranked:
        best, worst = ranked[0], ranked[-1]
        if best.gain_loss_percentage > INSIGHT_FUND_WINNER_RETURN:
            insights.append(Insight(
                id=f"fund_winner_{slugify(best.scheme_code)}",
                type="performance",
                title=f"{best.category} Outperforming",
                description=(
                    f"Your {_short_scheme_name(best.scheme_name)} fund is delivering "
                    f"{_pct(best.gain_loss_percentage)} returns, well ahead of its benchmark."
                ),
                impact="high",
                confidence=87,
                actionable=True,
                recommendation=(
                    f"Consider increasing the SIP in this fund from "
                    f"{_rupees(best.sip_amount)} to compound the outperformance."
                ),
                data=InsightData(
                    current_value=_pct(best.gain_loss_percentage),
                    target_value=_pct(INSIGHT_FUND_WINNER_RETURN),
                    change=_signed_pct(best.gain_loss_percentage - INSIGHT_FUND_WINNER_RETURN),
                ),
                source="mutual_fund",
            ))
        if worst.gain_loss_percentage < INSIGHT_FUND_LAGGARD_RETURN:
            insights.append(Insight(
                id=f"fund_laggard_{slugify(worst.scheme_code)}",
                type="warning",
                title=f"{worst.category} Underperforming",
                description=(
                    f"Your {_short_scheme_name(worst.scheme_name)} fund is down "
                    f"{_pct(abs(worst.gain_loss_percentage))} and may need review."
                ),
                impact="medium",
                confidence=83,
                actionable=True,
                recommendation=(
                    f"Review the fund manager's record and consider a better-performing "
                    f"{worst.category} alternative with a lower expense ratio."
                ),
                data=InsightData(
                    current_value=_pct(worst.gain_loss_percentage),
                    target_value=_pct(INSIGHT_FUND_LAGGARD_TARGET),
                    change=_pct(worst.gain_loss_percentage),
                ),
                source="mutual_fund",
            ))

    total_sip = sum(f.sip_amount for f in funds)
    if total_sip > INSIGHT_SIP_DISCIPLINE:
        sip_funds = sum(1 for f in funds if f.sip_amount > 0)
        insights.append(Insight(
            id="sip_discipline",
            type="performance",
            title="Excellent SIP Discipline",
            description=(
                f"Your total SIP commitment of {_rupees(total_sip)}/month across "
                f"{sip_funds} funds shows excellent investment discipline."
            ),
            impact="high",
            confidence=92,
            actionable=False,
            data=InsightData(
                current_value=_rupees(total_sip),
                target_value=_rupees(INSIGHT_SIP_BENCHMARK),
                change=f"+{_rupees(total_sip - INSIGHT_SIP_BENCHMARK)}",
            ),
            source="mutual_fund",
        ))

    costly = next(
        (f for f in funds if (f.expense_ratio or 0) > FUND_EXPENSE_RATIO_LIMIT),
        None,
    )
    if costly is not None:
        insights.append(Insight(
            id=f"fund_expense_{slugify(costly.scheme_code)}",
            type="opportunity",
            title="High Expense Ratio Impact",
            description=(
                f"Your {_short_scheme_name(costly.scheme_name)} fund has a "
                f"{costly.expense_ratio}% expense ratio, which drags on long-term returns."
            ),
            impact="medium",
            confidence=78,
            actionable=True,
            recommendation=(
                "Consider direct plans or funds with expense ratios below "
                f"{INSIGHT_LOW_COST_EXPENSE_RATIO}% to save on costs over time."
            ),
            source="mutual_fund",
        ))
    return insights


def asset_allocation_insights(ctx: UserContext) -> List[Insight]:
    """
    Concentration bands per held asset class, plus missing international.

    The international insight appears once, when no class or fund is
    international and some class holds more than 20%.
    """
    allocation = {
        key: entry for key, entry in ctx.summary.asset_allocation.items() if entry.value > 0
    }
    insights: List[Insight] = []

    for key, entry in allocation.items():
        name = _asset_class_name(key)
        share = entry.percentage
        if share > INSIGHT_ASSET_CRITICAL:
            insights.append(Insight(
                id=f"asset_critical_{slugify(key)}",
                type="warning",
                title=f"Critical Over-Concentration in {name}",
                description=(
                    f"{name} represents {_pct(share)} of your portfolio, creating "
                    "extreme concentration risk."
                ),
                impact="high",
                confidence=95,
                actionable=True,
                recommendation=(
                    f"Reduce {name} to below 60% by diversifying into other asset classes."
                ),
                data=InsightData(
                    current_value=_pct(share),
                    target_value="60%",
                    change=_signed_pct(60 - share),
                ),
                source="asset_allocation",
            ))
        elif share > INSIGHT_ASSET_HIGH:
            insights.append(Insight(
                id=f"asset_high_{slugify(key)}",
                type="risk",
                title=f"High Concentration Risk in {name}",
                description=(
                    f"{name} comprises {_pct(share)} of your portfolio, above recommended "
                    "limits for riding out market volatility."
                ),
                impact="medium",
                confidence=85,
                actionable=True,
                recommendation=(
                    f"Gradually bring {name} into the 50-60% range and diversify into "
                    "complementary asset classes."
                ),
                data=InsightData(
                    current_value=_pct(share),
                    target_value="55%",
                    change=_signed_pct(55 - share),
                ),
                source="asset_allocation",
            ))

    has_international = INTERNATIONAL_CLASS in allocation or any(
        "international" in f.category.lower() for f in ctx.mutual_funds
    )
    if not has_international and any(
        e.percentage > INSIGHT_INTERNATIONAL_TRIGGER for e in allocation.values()
    ):
        insights.append(Insight(
            id="international_missing",
            type="opportunity",
            title="Missing International Diversification",
            description=(
                "Your portfolio lacks international exposure, missing global growth "
                "and currency diversification."
            ),
            impact="medium",
            confidence=82,
            actionable=True,
            recommendation=(
                "Consider allocating 10-15% to international equity funds or ETFs."
            ),
            data=InsightData(
                current_value="0%",
                target_value=f"{INSIGHT_INTERNATIONAL_TARGET}%",
                change=f"+{INSIGHT_INTERNATIONAL_TARGET}%",
            ),
            source="asset_allocation",
        ))
    return insights


def goal_insights(ctx: UserContext, today: date) -> List[Insight]:
    """Critical and behind bands for high-priority goals; nearly done for any goal."""
    insights: List[Insight] = []
    for goal in ctx.goals:
        progress = goal.progress_percentage
        remaining = goal.remaining_amount
        months = months_until(goal.target_date, today)
        required_monthly = remaining / max(months, 1)
        amounts = dict(
            current_value=_rupees(goal.current_amount),
            target_value=_rupees(goal.target_amount),
        )

        if progress < INSIGHT_GOAL_CRITICAL_PROGRESS and goal.priority == "high":
            insights.append(Insight(
                id=f"goal_critical_{slugify(goal.id)}",
                type="warning",
                title=f"{goal.name} Severely Behind Schedule",
                description=(
                    f"Your {goal.name} goal is only {_pct(progress)} complete with "
                    f"{months} months remaining."
                ),
                impact="high",
                confidence=95,
                actionable=True,
                recommendation=(
                    f"Increase monthly investment to {_rupees(required_monthly)} or "
                    "reassess the goal timeline and target amount."
                ),
                data=InsightData(**amounts, change=f"{_rupees(remaining)} needed"),
                source="goal",
            ))
        elif progress < INSIGHT_GOAL_BEHIND_PROGRESS and goal.priority == "high":
            deadline = (
                f"your {goal.target_date.year} target" if goal.target_date else "your target"
            )
            insights.append(Insight(
                id=f"goal_behind_{slugify(goal.id)}",
                type="goal",
                title=f"{goal.name} Needs More Attention",
                description=(
                    f"Your {goal.name} goal is {_pct(progress)} complete. To meet "
                    f"{deadline}, consider increasing monthly contributions."
                ),
                impact="high",
                confidence=88,
                actionable=True,
                recommendation=(
                    f"Increase monthly allocation to {_rupees(required_monthly)} to stay on track."
                ),
                data=InsightData(**amounts, change=f"{_rupees(remaining)} remaining"),
                source="goal",
            ))
        elif INSIGHT_GOAL_ALMOST_PROGRESS < progress < 100:
            insights.append(Insight(
                id=f"goal_almost_{slugify(goal.id)}",
                type="performance",
                title=f"{goal.name} Almost Achieved!",
                description=(
                    f"Excellent progress! Your {goal.name} goal is {_pct(progress)} complete."
                ),
                impact="high",
                confidence=92,
                actionable=False,
                data=InsightData(**amounts, change=f"Only {_rupees(remaining)} remaining!"),
                source="goal",
            ))
    return insights


def age_insights(ctx: UserContext) -> List[Insight]:
    """Equity share too low for a young investor or too high near retirement."""
    age = ctx.age
    equity = compute_equity_percentage(ctx.summary)

    if age < INSIGHT_YOUNG_AGE and equity < INSIGHT_YOUNG_EQUITY_FLOOR:
        return [Insight(
            id="age_equity_low",
            type="opportunity",
            title="Conservative Allocation for Young Investor",
            description=(
                f"At {age}, your {_pct(equity)} equity allocation may be too "
                "conservative for long-term wealth creation."
            ),
            impact="medium",
            confidence=80,
            actionable=True,
            recommendation="Consider raising equity allocation to 70-80% for long-term growth.",
            data=InsightData(
                current_value=_pct(equity),
                target_value=f"{INSIGHT_YOUNG_EQUITY_TARGET}%",
                change=_signed_pct(INSIGHT_YOUNG_EQUITY_TARGET - equity),
            ),
            source="age",
        )]
    if age > INSIGHT_SENIOR_AGE and equity > INSIGHT_SENIOR_EQUITY_CEILING:
        return [Insight(
            id="age_equity_high",
            type="risk",
            title="High Risk for Pre-Retirement Age",
            description=(
                f"At {age}, your {_pct(equity)} equity allocation may be too "
                "aggressive as you approach retirement."
            ),
            impact="medium",
            confidence=83,
            actionable=True,
            recommendation=(
                "Gradually shift to a 60-40 or 50-50 equity-debt split for capital preservation."
            ),
            data=InsightData(
                current_value=_pct(equity),
                target_value=f"{INSIGHT_SENIOR_EQUITY_TARGET}%",
                change=_signed_pct(INSIGHT_SENIOR_EQUITY_TARGET - equity),
            ),
            source="age",
        )]
    return []


def portfolio_size_insights(total_value: float) -> List[Insight]:
    """Starter portfolios under 1L, and the 10L-50L accumulation band."""
    if total_value < INSIGHT_SMALL_PORTFOLIO:
        return [Insight(
            id="portfolio_small",
            type="opportunity",
            title="Building Your Wealth Foundation",
            description=(
                f"Your current portfolio value of {_rupees(total_value)} is a good start. "
                "Consistent SIPs will accelerate wealth building."
            ),
            impact="medium",
            confidence=85,
            actionable=True,
            recommendation="Increase SIP amounts and keep investing steadily to reach the ₹5L milestone.",
            source="portfolio_size",
        )]
    if INSIGHT_GROWING_PORTFOLIO_MIN < total_value < INSIGHT_GROWING_PORTFOLIO_MAX:
        return [Insight(
            id="portfolio_growing",
            type="performance",
            title="Strong Wealth Accumulation Progress",
            description=(
                f"Impressive! Your portfolio of ₹{total_value / 100_000:.1f}L shows "
                "excellent wealth building discipline."
            ),
            impact="high",
            confidence=88,
            actionable=False,
            source="portfolio_size",
        )]
    return []


def diversification_insights(ctx: UserContext) -> List[Insight]:
    """Fewer than three held asset classes, or five and more."""
    count = sum(1 for e in ctx.summary.asset_allocation.values() if e.value > 0)
    if count < INSIGHT_FEW_ASSET_CLASSES:
        return [Insight(
            id="diversification_low",
            type="risk",
            title="Insufficient Portfolio Diversification",
            description=(
                f"Your portfolio is spread across only {count} asset "
                f"{'class' if count == 1 else 'classes'}, which increases concentration risk."
            ),
            impact="medium",
            confidence=87,
            actionable=True,
            recommendation=(
                "Add international equity, gold and debt funds to spread overall portfolio risk."
            ),
            source="diversification",
        )]
    if count >= INSIGHT_MANY_ASSET_CLASSES:
        return [Insight(
            id="diversification_good",
            type="performance",
            title="Excellent Portfolio Diversification",
            description=(
                f"Great diversification across {count} asset classes! This balance "
                "manages risk while keeping growth potential."
            ),
            impact="medium",
            confidence=85,
            actionable=False,
            source="diversification",
        )]
    return []


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def generate_personalized_insights(
    ctx: UserContext,
    today: Optional[date] = None,
) -> List[Insight]:
    """
    Run every rule family and keep the first MAX_INSIGHTS insights.

    Args:
        ctx: User context.
        today: Reference date for goal timelines; defaults to today.

    Returns:
        Insights in rule-family order, ids unique.

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    today = today or date.today()
    total_value = require_portfolio_value(ctx)

    candidates: List[Insight] = []
    if ctx.has_holdings:
        candidates += performance_insights(ctx)
        candidates += stock_insights(ctx, total_value)
        candidates += sector_insights(ctx, total_value)
        candidates += mutual_fund_insights(ctx)
        candidates += asset_allocation_insights(ctx)
    candidates += goal_insights(ctx, today)
    if ctx.has_holdings:
        candidates += age_insights(ctx)
        candidates += portfolio_size_insights(total_value)
        candidates += diversification_insights(ctx)

    insights: List[Insight] = []
    seen: set[str] = set()
    for insight in candidates:
        if insight.id in seen:
            logger.warning(f"Dropping duplicate insight {insight.id}")
            continue
        seen.add(insight.id)
        insights.append(insight)

    if len(insights) > MAX_INSIGHTS:
        logger.debug(f"Insights capped: {len(insights)} -> {MAX_INSIGHTS}")
    return insights[:MAX_INSIGHTS]
