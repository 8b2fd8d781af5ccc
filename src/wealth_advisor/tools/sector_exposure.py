"""
Sector Exposure Calculator
Groups directly held stocks by sector and expresses each sector as a share
of the whole portfolio (percentage) and of the stock sleeve
(equity_percentage). Mutual funds are not looked through.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from pydantic import BaseModel, Field

from wealth_advisor.config.constants import UNKNOWN_SECTOR
from wealth_advisor.exceptions import InvalidPortfolioState
from wealth_advisor.schemas.portfolio_input import StockHolding

logger = logging.getLogger(__name__)


class SectorExposure(BaseModel):
    """Aggregate of the stocks held in one sector."""

    sector: str
    value: float = Field(0.0, description="Sum of current values")
    percentage: float = Field(0.0, description="Share of total portfolio value (%)")
    equity_percentage: float = Field(0.0, description="Share of aggregate stock value (%)")
    symbols: List[str] = Field(default_factory=list)


def compute_sector_exposure(
    stocks: List[StockHolding],
    total_value: float,
) -> Dict[str, SectorExposure]:
    """
    Aggregate stocks by sector, in order of first appearance.

    Args:
        stocks: Stock holdings; a blank sector counts as "Other".
        total_value: Total portfolio value (stocks and funds).

    Returns:
        Sector name -> SectorExposure. Empty when there are no stocks.

    Raises:
        InvalidPortfolioState: stocks are present but total_value <= 0.
    """
    if not stocks:
        return {}
    if total_value <= 0:
        raise InvalidPortfolioState(
            f"{len(stocks)} stocks present but total portfolio value is {total_value}"
        )

    exposures: Dict[str, SectorExposure] = {}
    for stock in stocks:
        sector = stock.sector or UNKNOWN_SECTOR
        entry = exposures.setdefault(sector, SectorExposure(sector=sector))
        entry.value += stock.current_value
        entry.symbols.append(stock.symbol)

    stock_total = sum(e.value for e in exposures.values())
    for entry in exposures.values():
        entry.percentage = entry.value / total_value * 100
        entry.equity_percentage = entry.value / stock_total * 100 if stock_total > 0 else 0.0

    logger.debug(
        f"Sector exposure: {len(exposures)} sectors across {len(stocks)} stocks"
    )
    return exposures
