"""
Holding classifiers: stock -> sector, fund -> category and fund house.
Static keyword tables only; no network lookups.
"""

from __future__ import annotations

import logging

from wealth_advisor.config.constants import UNKNOWN_SECTOR
from wealth_advisor.config.reference_data import (
    FUND_CATEGORY_RULES,
    FUND_HOUSE_KEYWORDS,
    KNOWN_SECTORS,
    UNKNOWN_FUND_CATEGORY,
    UNKNOWN_FUND_HOUSE,
)

logger = logging.getLogger(__name__)


def base_symbol(symbol: str) -> str:
    """Strip the exchange series suffix: 'RELIANCE-EQ' -> 'RELIANCE'."""
    return symbol.strip().upper().split("-")[0]


def classify_sector(symbol: str) -> str:
    """
    Look up the sector for an NSE symbol.

    Returns:
        Sector name, or "Other" for symbols not in the static map.
    """
    if not symbol:
        return UNKNOWN_SECTOR
    sector = KNOWN_SECTORS.get(base_symbol(symbol))
    if sector is None:
        logger.debug(f"No sector mapping for {symbol}, using {UNKNOWN_SECTOR}")
        return UNKNOWN_SECTOR
    return sector


def classify_fund_category(scheme_name: str) -> str:
    """First matching keyword rule wins; rules are ordered most specific first."""
    name = (scheme_name or "").lower()
    for keyword_groups, category in FUND_CATEGORY_RULES:
        for group in keyword_groups:
            if all(word in name for word in group):
                return category
    return UNKNOWN_FUND_CATEGORY


def classify_fund_house(scheme_name: str) -> str:
    name = (scheme_name or "").upper()
    for keyword, house in FUND_HOUSE_KEYWORDS.items():
        if keyword in name:
            return house
    return UNKNOWN_FUND_HOUSE
