"""
Risk Officer Tool: Portfolio Health Scores
Dashboard scores derived from returns, asset-class spread and goal progress.
The risk score is taken from the risk analysis so both views agree.
"""

from __future__ import annotations

import logging

from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.schemas.risk_output import PortfolioScores
from wealth_advisor.tools.rounding import round_half_up_int

logger = logging.getLogger(__name__)


def _clamp(value: float) -> int:
    return max(0, min(100, round_half_up_int(value)))


def _return_band_points(total_return: float) -> int:
    if total_return > 15:
        return 25
    if total_return > 12:
        return 20
    if total_return > 8:
        return 15
    if total_return > 5:
        return 10
    if total_return < 0:
        return -20
    return 0


def compute_portfolio_scores(ctx: UserContext, overall_risk: int) -> PortfolioScores:
    """
    Portfolio, diversification and risk scores (0-100) plus a market outlook.

    Asset classes count only when they hold value, so a derived summary with
    an empty mutual fund sleeve counts one class, not two.

    Args:
        ctx: User context.
        overall_risk: RiskMetrics.overall_score from the risk analysis.
    """
    summary = ctx.summary
    invested = summary.total_investment
    total_return = (
        (summary.total_current_value - invested) / invested * 100 if invested > 0 else 0.0
    )
    held_classes = [e for e in summary.asset_allocation.values() if e.value > 0]
    asset_count = len(held_classes)

    portfolio_score = 50 + _return_band_points(total_return)
    if asset_count >= 4:
        portfolio_score += 10
    elif asset_count >= 3:
        portfolio_score += 5
    else:
        portfolio_score -= 10

    completed = sum(1 for g in ctx.goals if g.progress_percentage >= 100)
    on_track = sum(1 for g in ctx.goals if 50 <= g.progress_percentage < 100)
    portfolio_score += completed * 5 + on_track * 2

    diversification = 40 + min(asset_count * 15, 40)
    for entry in held_classes:
        if entry.percentage > 80:
            diversification -= 30
        elif entry.percentage > 60:
            diversification -= 15
        elif entry.percentage < 10:
            diversification += 5

    if total_return > 15:
        outlook = "bullish"
    elif total_return < 0:
        outlook = "bearish"
    else:
        outlook = "neutral"

    return PortfolioScores(
        portfolio_score=_clamp(portfolio_score),
        risk_score=_clamp(overall_risk),
        diversification_score=_clamp(diversification),
        market_outlook=outlook,
    )
