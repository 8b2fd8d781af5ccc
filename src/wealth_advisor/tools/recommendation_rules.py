"""
Portfolio Advisor Tool: Recommendation Rules
Five independent analyzers (asset allocation, sector concentration, stock
concentration, fund performance, goal progress), the ranking step, and the
bucket-level rebalance snapshot.

Every analyzer is a pure function of the user context (plus `today` for
goal dates) and returns an empty list when it has nothing to look at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from wealth_advisor.config.constants import (
    ALLOCATION_DEVIATION_THRESHOLD,
    ALLOCATION_HIGH_PRIORITY_DEVIATION,
    ALLOCATION_IMPACT_MULTIPLIER,
    FUND_EXPENSE_IMPACT,
    FUND_EXPENSE_RATIO_LIMIT,
    FUND_IMPACT_BASE,
    FUND_IMPACT_MULTIPLIER,
    FUND_REVIEW_MIN_INVESTMENT,
    FUND_TARGET_RETURN,
    FUND_UNDERPERFORMANCE_RETURN,
    GOAL_BEHIND_IMPACT,
    GOAL_BEHIND_MIN_MONTHS,
    GOAL_BEHIND_PROGRESS,
    GOAL_FINAL_PUSH_IMPACT,
    GOAL_FINAL_PUSH_PROGRESS,
    MAX_RECOMMENDATIONS,
    SECTOR_CONCENTRATION_HIGH,
    SECTOR_CONCENTRATION_LIMIT,
    SECTOR_IMPACT_MULTIPLIER,
    SECTOR_TARGET_ALLOCATION,
    STOCK_CONCENTRATION_HIGH,
    STOCK_CONCENTRATION_LIMIT,
    STOCK_IMPACT_MULTIPLIER,
    STOCK_TARGET_ALLOCATION,
)
from wealth_advisor.config.reference_data import (
    FUND_BUCKET_KEYWORDS,
    MIXED_FUND_LARGE_CAP_SHARE,
    REBALANCE_BUCKETS,
    TARGET_ALLOCATION_PROFILES,
    UNKNOWN_FUND_CATEGORY,
)
from wealth_advisor.schemas.portfolio_input import StockHolding, UserContext
from wealth_advisor.schemas.recommendation_output import (
    RebalanceSnapshot,
    Recommendation,
)
from wealth_advisor.tools.portfolio_metrics import (
    compute_equity_percentage,
    compute_target_equity_percentage,
    months_until,
    require_portfolio_value,
)
from wealth_advisor.tools.ranking import by_priority_then_impact, slugify
from wealth_advisor.tools.rounding import round_half_up_int
from wealth_advisor.tools.sector_classifier import base_symbol
from wealth_advisor.tools.sector_exposure import compute_sector_exposure

logger = logging.getLogger(__name__)


def _fund_label(category: str) -> str:
    """'Large Cap Fund' -> 'Large Cap'; unclassified funds read as 'Mutual'."""
    if not category or category == UNKNOWN_FUND_CATEGORY:
        return "Mutual"
    return category[:-5] if category.endswith(" Fund") else category


def _short_scheme_name(scheme_name: str) -> str:
    return (scheme_name or "mutual").split(" - ")[0]


@dataclass
class StockPosition:
    symbol: str
    company_name: str
    current_value: float


def merged_positions(stocks: List[StockHolding]) -> List[StockPosition]:
    """One position per base symbol, in order of first appearance."""
    positions: Dict[str, StockPosition] = {}
    for stock in stocks:
        key = base_symbol(stock.symbol)
        if key in positions:
            positions[key].current_value += stock.current_value
        else:
            name = stock.company_name if stock.company_name != stock.symbol else key
            positions[key] = StockPosition(key, name, stock.current_value)
    return list(positions.values())


# ---------------------------------------------------------------------------
# Analyzers
# ---------------------------------------------------------------------------

def analyze_asset_allocation(ctx: UserContext) -> List[Recommendation]:
    """Compare equity share with the age/risk target; act on gaps over 10 points."""
    target = compute_target_equity_percentage(ctx.age, ctx.risk_tolerance)
    current = compute_equity_percentage(ctx.summary)
    diff = abs(current - target)

    if diff <= ALLOCATION_DEVIATION_THRESHOLD:
        return []

    reduce = current > target
    action = "reduce" if reduce else "increase"
    urgent = diff > ALLOCATION_HIGH_PRIORITY_DEVIATION

    return [Recommendation(
        id=f"asset_allocation_{action}",
        type="reduce" if reduce else "add",
        title=f"{'Reduce' if reduce else 'Increase'} Equity Allocation",
        description=(
            f"Your equity allocation of {current:.1f}% "
            f"{'exceeds' if reduce else 'is below'} the recommended {target}% "
            f"for your age and risk profile."
        ),
        priority="high" if urgent else "medium",
        impact_score=min(100, diff * ALLOCATION_IMPACT_MULTIPLIER),
        current_allocation=round_half_up_int(current),
        recommended_allocation=target,
        timeframe="2-4 weeks" if urgent else "1-3 months",
        reasoning=[
            f"Age-appropriate allocation for {ctx.age} years old",
            f"Matches {ctx.risk_tolerance} risk tolerance",
            "Reduce portfolio volatility" if reduce else "Enhance growth potential",
        ],
        risk_level="low" if reduce else "medium",
        source="asset_allocation",
    )]


def analyze_sector_concentration(ctx: UserContext) -> List[Recommendation]:
    """Flag sectors above 20% of total portfolio value."""
    if not ctx.stocks:
        return []
    total = require_portfolio_value(ctx)
    exposures = compute_sector_exposure(ctx.stocks, total)

    recs: List[Recommendation] = []
    for sector, exposure in exposures.items():
        pct = exposure.percentage
        if pct <= SECTOR_CONCENTRATION_LIMIT:
            continue
        high = pct > SECTOR_CONCENTRATION_HIGH
        recs.append(Recommendation(
            id=f"sector_concentration_{slugify(sector)}",
            type="reduce",
            title=f"Reduce {sector} Sector Concentration",
            description=(
                f"Your {sector} exposure is {pct:.1f}% through "
                f"{', '.join(exposure.symbols)}. Consider reducing to below "
                f"{SECTOR_CONCENTRATION_LIMIT:g}% to minimize sector-specific risk."
            ),
            priority="high" if high else "medium",
            impact_score=min(100, pct * SECTOR_IMPACT_MULTIPLIER),
            current_allocation=round_half_up_int(pct),
            recommended_allocation=SECTOR_TARGET_ALLOCATION,
            timeframe="1-2 weeks" if high else "1-2 months",
            reasoning=[
                "Sector concentration creates single-point-of-failure risk",
                "Diversification across sectors improves risk-adjusted returns",
                f"{sector} sector may face specific regulatory or economic challenges",
            ],
            risk_level="medium",
            source="sector_concentration",
        ))
    return recs


def analyze_stock_concentration(ctx: UserContext) -> List[Recommendation]:
    """
    Flag single stocks above 10% of total portfolio value.

    Lines for the same company (e.g. NSE and BSE, or an -EQ series suffix)
    are merged into one position first.
    """
    if not ctx.stocks:
        return []
    total = require_portfolio_value(ctx)

    recs: List[Recommendation] = []
    for stock in merged_positions(ctx.stocks):
        pct = stock.current_value / total * 100
        if pct <= STOCK_CONCENTRATION_LIMIT:
            continue
        high = pct > STOCK_CONCENTRATION_HIGH
        recs.append(Recommendation(
            id=f"stock_concentration_{slugify(stock.symbol)}",
            type="reduce",
            title=f"Reduce {stock.symbol} Position Size",
            description=(
                f"{stock.company_name} represents {pct:.1f}% of your portfolio, "
                f"creating concentration risk. Consider reducing to below "
                f"{STOCK_TARGET_ALLOCATION}%."
            ),
            priority="high" if high else "medium",
            impact_score=min(100, pct * STOCK_IMPACT_MULTIPLIER),
            current_allocation=round_half_up_int(pct),
            recommended_allocation=STOCK_TARGET_ALLOCATION,
            amount_suggestion=round_half_up_int((pct - STOCK_TARGET_ALLOCATION) * total / 100),
            timeframe="1-2 weeks" if high else "1-2 months",
            reasoning=[
                "Single stock concentration increases portfolio volatility",
                "Idiosyncratic risk from company-specific events",
                "Opportunity to diversify into other quality stocks",
            ],
            risk_level="medium",
            source="stock_concentration",
        ))
    return recs


def analyze_fund_performance(ctx: UserContext) -> List[Recommendation]:
    """
    Review low-return funds with a meaningful investment, then flag
    expensive funds. Underperformers come first, in holding order.
    """
    recs: List[Recommendation] = []

    for fund in ctx.mutual_funds:
        g = fund.gain_loss_percentage
        if g is None or g >= FUND_UNDERPERFORMANCE_RETURN:
            continue
        if fund.investment_amount <= FUND_REVIEW_MIN_INVESTMENT:
            continue
        negative = g < 0
        recs.append(Recommendation(
            id=f"fund_performance_{slugify(fund.scheme_code)}",
            type="reduce",
            title=f"Review {_fund_label(fund.category)} Fund Performance",
            description=(
                f"Your {_short_scheme_name(fund.scheme_name)} fund "
                f"{'has negative returns' if negative else 'is underperforming'} "
                f"at {g:.1f}%. Consider switching to better alternatives."
            ),
            priority="high" if negative else "medium",
            impact_score=min(100, abs(g) * FUND_IMPACT_MULTIPLIER + FUND_IMPACT_BASE),
            current_allocation=g,
            recommended_allocation=FUND_TARGET_RETURN,
            timeframe="2-4 weeks" if negative else "3-6 months",
            reasoning=[
                f"Current returns of {g:.1f}% are below expectations",
                "Opportunity cost of staying in underperforming fund",
                "Better-performing alternatives available in same category",
            ],
            risk_level="low",
            source="fund_performance",
        ))

    for fund in ctx.mutual_funds:
        ratio = fund.expense_ratio or 0.0
        if ratio <= FUND_EXPENSE_RATIO_LIMIT:
            continue
        recs.append(Recommendation(
            id=f"fund_expense_{slugify(fund.scheme_code)}",
            type="reduce",
            title=f"Switch to Lower Cost {_fund_label(fund.category)} Fund",
            description=(
                f"Your {_short_scheme_name(fund.scheme_name)} fund has a high "
                f"expense ratio of {ratio:g}%. Consider switching to direct plans "
                f"or lower-cost alternatives."
            ),
            priority="medium",
            impact_score=FUND_EXPENSE_IMPACT,
            timeframe="1-3 months",
            reasoning=[
                f"High expense ratio of {ratio:g}% reduces long-term returns",
                "Direct plans typically have 0.5-1% lower expense ratios",
                "Cost savings compound significantly over time",
            ],
            risk_level="low",
            source="fund_performance",
        ))

    return recs


def analyze_goal_progress(
    ctx: UserContext,
    today: Optional[date] = None,
) -> List[Recommendation]:
    """
    Accelerate high priority goals that are behind; nudge nearly complete goals.

    Args:
        ctx: User context.
        today: Reference date for months remaining; defaults to date.today().
    """
    today = today or date.today()
    recs: List[Recommendation] = []

    for goal in ctx.goals:
        months = months_until(goal.target_date, today)
        remaining = goal.remaining_amount
        required_monthly = remaining / max(months, 1)
        progress = goal.progress_percentage

        if (
            progress < GOAL_BEHIND_PROGRESS
            and goal.priority == "high"
            and months > GOAL_BEHIND_MIN_MONTHS
        ):
            extra = round_half_up_int(required_monthly / 2)
            recs.append(Recommendation(
                id=f"goal_behind_{slugify(goal.id)}",
                type="goal_based",
                title=f"Accelerate {goal.name} Savings",
                description=(
                    f"Your {goal.name} goal needs ₹{remaining / 100_000:.1f}L more. "
                    f"Consider increasing monthly allocation by ₹{extra:,}."
                ),
                priority="high",
                impact_score=GOAL_BEHIND_IMPACT,
                amount_suggestion=extra,
                timeframe="Immediate",
                reasoning=[
                    f"Only {progress:.1f}% complete with {months} months left",
                    "Early action provides compounding advantage",
                    "Meeting this goal is crucial for financial security",
                ],
                risk_level="low",
                source="goal_progress",
            ))

        if GOAL_FINAL_PUSH_PROGRESS < progress < 100:
            recs.append(Recommendation(
                id=f"goal_final_push_{slugify(goal.id)}",
                type="goal_based",
                title=f"Final Push for {goal.name}",
                description=(
                    f"You're {progress:.1f}% there! Just ₹{remaining / 1000:.0f}K "
                    f"more needed. Consider a lump sum or increased SIP to complete "
                    f"this goal."
                ),
                priority="medium",
                impact_score=GOAL_FINAL_PUSH_IMPACT,
                amount_suggestion=round_half_up_int(remaining),
                timeframe="1-2 months",
                reasoning=[
                    "Goal is very close to completion",
                    "Momentum advantage of achieving first goal",
                    "Can redirect funds to other goals once completed",
                ],
                risk_level="low",
                source="goal_progress",
            ))

    return recs


# ---------------------------------------------------------------------------
# Ranking & rebalance
# ---------------------------------------------------------------------------

def rank_recommendations(
    recommendations: List[Recommendation],
    limit: int = MAX_RECOMMENDATIONS,
) -> List[Recommendation]:
    """Priority (high first), then impact descending; stable for ties; truncated."""
    return sorted(recommendations, key=by_priority_then_impact)[:limit]


def generate_recommendations(
    ctx: UserContext,
    today: Optional[date] = None,
) -> List[Recommendation]:
    """
    All analyzers, concatenated in a fixed order, before ranking.

    Ids are unique: when two candidates share one (the same scheme held in
    two folios, a repeated goal id) the first is kept.
    """
    recs: List[Recommendation] = []
    recs.extend(analyze_asset_allocation(ctx))
    recs.extend(analyze_sector_concentration(ctx))
    recs.extend(analyze_stock_concentration(ctx))
    recs.extend(analyze_fund_performance(ctx))
    recs.extend(analyze_goal_progress(ctx, today))

    unique: Dict[str, Recommendation] = {}
    for rec in recs:
        if rec.id in unique:
            logger.warning(f"Dropping duplicate recommendation {rec.id}")
            continue
        unique[rec.id] = rec
    return list(unique.values())


def _fund_bucket(category: str) -> Optional[str]:
    name = (category or "").lower()
    for keywords, bucket in FUND_BUCKET_KEYWORDS:
        if any(k in name for k in keywords):
            return bucket
    return None


def calculate_rebalance_data(ctx: UserContext) -> RebalanceSnapshot:
    """
    Current vs target share per bucket.

    Stocks count as large cap. Funds go to the bucket their category names;
    other funds count MIXED_FUND_LARGE_CAP_SHARE of their value as large cap.
    With no holdings every current share is 0.
    """
    total = require_portfolio_value(ctx)
    values: Dict[str, float] = {bucket: 0.0 for bucket in REBALANCE_BUCKETS}

    for stock in ctx.stocks:
        values["Large Cap"] += stock.current_value

    for fund in ctx.mutual_funds:
        bucket = _fund_bucket(fund.category)
        if bucket is None:
            values["Large Cap"] += fund.current_value * MIXED_FUND_LARGE_CAP_SHARE
        else:
            values[bucket] += fund.current_value

    current = {
        bucket: round_half_up_int(value / total * 100) if total > 0 else 0
        for bucket, value in values.items()
    }
    recommended = dict(TARGET_ALLOCATION_PROFILES[ctx.risk_tolerance])
    difference = {b: recommended[b] - current[b] for b in REBALANCE_BUCKETS}

    return RebalanceSnapshot(current=current, recommended=recommended, difference=difference)
