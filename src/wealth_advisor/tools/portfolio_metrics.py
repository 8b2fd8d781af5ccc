"""
Shared portfolio arithmetic: value guard, equity share, age/risk target,
months-to-goal. Used by the market, recommendation and risk pipelines.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from wealth_advisor.config.constants import (
    AGGRESSIVE_EQUITY_BONUS,
    AGGRESSIVE_EQUITY_CAP,
    CONSERVATIVE_EQUITY_FLOOR,
    CONSERVATIVE_EQUITY_PENALTY,
    DAYS_PER_MONTH,
    EQUITY_TARGET_CEILING,
    EQUITY_TARGET_FLOOR,
    MUTUAL_FUND_EQUITY_SHARE,
)
from wealth_advisor.exceptions import InvalidPortfolioState
from wealth_advisor.schemas.portfolio_input import (
    ASSET_CLASS_MUTUAL_FUNDS,
    ASSET_CLASS_STOCKS,
    PortfolioSummary,
    UserContext,
    compute_portfolio_summary,
)
from wealth_advisor.tools.rounding import round_half_up_int

logger = logging.getLogger(__name__)

__all__ = [
    "compute_equity_percentage",
    "compute_portfolio_summary",
    "compute_target_equity_percentage",
    "months_until",
    "require_portfolio_value",
]


def require_portfolio_value(ctx: UserContext) -> float:
    """
    Total current value, guarded for use as a denominator.

    Returns:
        The total, which may be 0 only when there are no holdings.

    Raises:
        InvalidPortfolioState: holdings are present but the total is <= 0.
    """
    total = ctx.summary.total_current_value
    if ctx.has_holdings and total <= 0:
        count = len(ctx.stocks) + len(ctx.mutual_funds)
        raise InvalidPortfolioState(
            f"{count} holdings present but total_current_value is {total}"
        )
    return total


def compute_equity_percentage(summary: PortfolioSummary) -> float:
    """Stock share plus the assumed equity share of mutual funds."""
    return (
        summary.allocation_pct(ASSET_CLASS_STOCKS)
        + summary.allocation_pct(ASSET_CLASS_MUTUAL_FUNDS) * MUTUAL_FUND_EQUITY_SHARE
    )


def compute_target_equity_percentage(age: int, risk_tolerance: str) -> int:
    """
    Age rule of thumb (100 - age) clamped to [40, 80], then risk-adjusted.

    Aggressive adds 15 up to 85; conservative removes 20 down to 30.
    """
    target = max(EQUITY_TARGET_FLOOR, min(EQUITY_TARGET_CEILING, 100 - age))
    if risk_tolerance == "aggressive":
        target = min(AGGRESSIVE_EQUITY_CAP, target + AGGRESSIVE_EQUITY_BONUS)
    elif risk_tolerance == "conservative":
        target = max(CONSERVATIVE_EQUITY_FLOOR, target - CONSERVATIVE_EQUITY_PENALTY)
    return target


def months_until(target_date: Optional[date], today: date) -> int:
    """Whole 30-day months from today to target_date, never negative."""
    if target_date is None:
        return 0
    days = (target_date - today).days
    return max(0, round_half_up_int(days / DAYS_PER_MONTH))
