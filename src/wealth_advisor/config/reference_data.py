"""
Static reference tables for the Wealth Advisor engine.

Sector outlooks, the symbol -> sector map, fund keyword classifiers,
target allocation profiles, news templates and the index snapshot.
Everything here is built once at import time and exposed read-only
(MappingProxyType / tuples / frozen dataclasses).

The sector table is the single source of sector movements: both the sector
commentary and the portfolio impact read performance from SECTOR_OUTLOOKS.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional


# ---------------------------------------------------------------------------
# Record types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SectorOutlook:
    """Daily performance and house view for one sector."""

    performance: float
    outlook: str
    recommendation: str
    reasoning: str


@dataclass(frozen=True)
class NewsTemplate:
    """Headline shown when the user holds a matching sector or fund category."""

    title: str
    impact: str
    source: str
    relevance: str
    sectors: tuple[str, ...] = ()
    fund_category_keyword: Optional[str] = None
    reason: str = ""


@dataclass(frozen=True)
class IndexQuote:
    value: float
    change: float
    change_percent: float


# ---------------------------------------------------------------------------
# Sector outlooks
# ---------------------------------------------------------------------------

SECTOR_OUTLOOKS: Mapping[str, SectorOutlook] = MappingProxyType({
    "Information Technology": SectorOutlook(
        1.6, "bullish", "Strong Buy",
        "AI adoption driving growth, strong export demand",
    ),
    "Banking": SectorOutlook(
        -0.3, "neutral", "Hold",
        "Credit growth slowing, NPA concerns persist",
    ),
    "Oil & Gas": SectorOutlook(
        2.1, "bullish", "Buy",
        "Refining margins improving, stable crude prices",
    ),
    "FMCG": SectorOutlook(
        -0.5, "bearish", "Sell",
        "Rural demand weakness, margin pressure",
    ),
    "Healthcare": SectorOutlook(
        0.8, "bullish", "Buy",
        "Generic drug demand stable, export growth",
    ),
    "Financial Services": SectorOutlook(
        -0.2, "neutral", "Hold",
        "Interest rate cycle peaking, asset quality stable",
    ),
    "Telecom": SectorOutlook(
        1.2, "bullish", "Buy",
        "5G rollout driving capex, ARPU improvement",
    ),
    "Chemicals": SectorOutlook(
        0.3, "neutral", "Hold",
        "China +1 benefit offset by pricing pressure",
    ),
    "Textiles": SectorOutlook(
        -1.2, "bearish", "Sell",
        "Global demand slowdown, cotton price volatility",
    ),
    "Retail": SectorOutlook(
        0.9, "bullish", "Buy",
        "Festive season demand, omnichannel growth",
    ),
})

NEUTRAL_OUTLOOK = "neutral"
NEUTRAL_RECOMMENDATION = "Hold"
NEUTRAL_REASONING = "Mixed sector fundamentals"


# ---------------------------------------------------------------------------
# Symbol -> sector
# ---------------------------------------------------------------------------

# NSE base symbols (exchange suffixes such as -EQ / -BE are stripped first).
KNOWN_SECTORS: Mapping[str, str] = MappingProxyType({
    # Information Technology
    "TCS": "Information Technology", "INFY": "Information Technology",
    "WIPRO": "Information Technology", "HCLTECH": "Information Technology",
    "TECHM": "Information Technology",
    # Banking
    "HDFCBANK": "Banking", "ICICIBANK": "Banking", "SBIN": "Banking",
    "AXISBANK": "Banking", "KOTAKBANK": "Banking",
    # Oil & Gas
    "RELIANCE": "Oil & Gas", "ONGC": "Oil & Gas", "BPCL": "Oil & Gas",
    "IOC": "Oil & Gas",
    # FMCG
    "HINDUNILVR": "FMCG", "ITC": "FMCG", "NESTLEIND": "FMCG",
    "BRITANNIA": "FMCG",
    # Financial Services
    "BAJFINANCE": "Financial Services", "BAJAJFINSV": "Financial Services",
    # Others
    "LT": "Construction",
    "ULTRACEMCO": "Cement",
    "ASIANPAINT": "Paints",
    "MARUTI": "Automobile", "M&M": "Automobile", "TATAMOTORS": "Automobile",
})


# ---------------------------------------------------------------------------
# Fund classifiers
# ---------------------------------------------------------------------------

# Ordered: the first rule with a matching keyword group wins, so the more
# specific categories come first. A group matches when all its words appear
# in the lower-cased scheme name.
FUND_CATEGORY_RULES: tuple[tuple[tuple[tuple[str, ...], ...], str], ...] = (
    ((("elss",), ("tax saver",)), "ELSS"),
    ((("liquid",),), "Liquid Fund"),
    ((("ultra short",), ("money market",)), "Ultra Short Duration Fund"),
    ((("short", "duration"),), "Short Duration Fund"),
    ((("medium", "duration"),), "Medium Duration Fund"),
    ((("long", "duration"),), "Long Duration Fund"),
    ((("gilt",), ("government",)), "Gilt Fund"),
    ((("corporate bond",), ("credit",)), "Corporate Bond Fund"),
    ((("debt",), ("bond",)), "Debt Fund"),
    ((("aggressive hybrid",),), "Aggressive Hybrid Fund"),
    ((("conservative hybrid",),), "Conservative Hybrid Fund"),
    ((("balanced",), ("hybrid",)), "Hybrid Fund"),
    ((("large cap",), ("largecap",), ("bluechip",)), "Large Cap Fund"),
    ((("mid cap",), ("midcap",)), "Mid Cap Fund"),
    ((("small cap",), ("smallcap",)), "Small Cap Fund"),
    ((("multi cap",), ("multicap",)), "Multi Cap Fund"),
    ((("flexi cap",), ("flexicap",)), "Flexi Cap Fund"),
    ((("sectoral",), ("thematic",)), "Sectoral/Thematic Fund"),
    ((("index",), ("nifty",), ("sensex",)), "Index Fund"),
    ((("equity",),), "Equity Fund"),
    ((("international",), ("global",)), "International Fund"),
)

UNKNOWN_FUND_CATEGORY = "Other"

# Checked in order against the upper-cased scheme name.
FUND_HOUSE_KEYWORDS: Mapping[str, str] = MappingProxyType({
    "SBI": "SBI Mutual Fund",
    "HDFC": "HDFC Mutual Fund",
    "ICICI": "ICICI Prudential Mutual Fund",
    "AXIS": "Axis Mutual Fund",
    "KOTAK": "Kotak Mutual Fund",
    "NIPPON": "Nippon India Mutual Fund",
    "ADITYA BIRLA": "Aditya Birla Sun Life Mutual Fund",
    "BIRLA SUN LIFE": "Aditya Birla Sun Life Mutual Fund",
    "UTI": "UTI Mutual Fund",
    "DSP": "DSP Mutual Fund",
    "FRANKLIN": "Franklin Templeton Mutual Fund",
    "INVESCO": "Invesco Mutual Fund",
    "MIRAE": "Mirae Asset Mutual Fund",
    "TATA": "Tata Mutual Fund",
    "RELIANCE": "Reliance Mutual Fund",
    "MAHINDRA": "Mahindra Mutual Fund",
    "L&T": "L&T Mutual Fund",
    "MOTILAL": "Motilal Oswal Mutual Fund",
    "EDELWEISS": "Edelweiss Mutual Fund",
    "CANARA": "Canara Robeco Mutual Fund",
    "ROBECO": "Canara Robeco Mutual Fund",
    "BARODA": "Baroda BNP Paribas Mutual Fund",
    "BNP PARIBAS": "Baroda BNP Paribas Mutual Fund",
})

UNKNOWN_FUND_HOUSE = "Unknown Fund House"


# ---------------------------------------------------------------------------
# Rebalance buckets and target profiles
# ---------------------------------------------------------------------------

REBALANCE_BUCKETS: tuple[str, ...] = (
    "Large Cap", "Mid Cap", "Small Cap", "Debt", "International", "Gold",
)

# Category keywords that mark a fund as debt; shared by the rebalance
# buckets and the credit risk score.
DEBT_CATEGORY_KEYWORDS: tuple[str, ...] = (
    "debt", "bond", "duration", "liquid", "gilt", "money market",
)

# Fund category keyword -> bucket, checked in order; unmatched funds count
# MIXED_FUND_LARGE_CAP_SHARE of their value as large cap and the rest is
# left out of the buckets.
FUND_BUCKET_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("large",), "Large Cap"),
    (("mid",), "Mid Cap"),
    (("small",), "Small Cap"),
    (DEBT_CATEGORY_KEYWORDS, "Debt"),
    (("international",), "International"),
    (("gold",), "Gold"),
)

MIXED_FUND_LARGE_CAP_SHARE = 0.7

TARGET_ALLOCATION_PROFILES: Mapping[str, Mapping[str, int]] = MappingProxyType({
    "aggressive": MappingProxyType({
        "Large Cap": 35, "Mid Cap": 25, "Small Cap": 15,
        "Debt": 15, "International": 8, "Gold": 2,
    }),
    "conservative": MappingProxyType({
        "Large Cap": 40, "Mid Cap": 15, "Small Cap": 5,
        "Debt": 30, "International": 5, "Gold": 5,
    }),
    "moderate": MappingProxyType({
        "Large Cap": 38, "Mid Cap": 20, "Small Cap": 10,
        "Debt": 22, "International": 7, "Gold": 3,
    }),
})


# ---------------------------------------------------------------------------
# Market commentary
# ---------------------------------------------------------------------------

STATIC_SENTIMENT_FACTORS: tuple[str, ...] = (
    "Strong corporate earnings growth",
    "Stable inflation and interest rates",
    "Positive foreign institutional investor flows",
)

GENERIC_HEADLINE = NewsTemplate(
    title="Indian markets show resilience amid global volatility",
    impact="positive",
    source="Economic Times",
    relevance="high",
)

# Sector templates list the held symbols in their reason; fund templates
# use the reason verbatim.
NEWS_TEMPLATES: tuple[NewsTemplate, ...] = (
    NewsTemplate(
        title="IT sector shows strong Q3 results, AI adoption accelerating",
        impact="positive",
        source="Moneycontrol",
        relevance="high",
        sectors=("Information Technology",),
        reason="You hold IT stocks",
    ),
    NewsTemplate(
        title="RBI maintains accommodative stance, banking sector relief",
        impact="positive",
        source="Business Standard",
        relevance="high",
        sectors=("Banking", "Financial Services"),
        reason="You hold banking/financial stocks",
    ),
    NewsTemplate(
        title="Crude oil prices stabilize, refining margins improve",
        impact="positive",
        source="Reuters",
        relevance="medium",
        sectors=("Oil & Gas",),
        reason="You hold oil & gas stocks",
    ),
    NewsTemplate(
        title="Global markets show resilience, USD strengthening",
        impact="positive",
        source="Financial Express",
        relevance="medium",
        fund_category_keyword="international",
        reason="You hold international funds",
    ),
    NewsTemplate(
        title="Debt market outlook stable with rate cycle peaking",
        impact="neutral",
        source="Mint",
        relevance="medium",
        fund_category_keyword="debt",
        reason="You hold debt funds",
    ),
)

# Index snapshot shown alongside the analysis; not a live quote.
MARKET_INDICES: Mapping[str, IndexQuote] = MappingProxyType({
    "nifty50": IndexQuote(19856.50, 245.30, 1.25),
    "sensex": IndexQuote(66598.20, 823.45, 1.25),
    "nifty_bank": IndexQuote(44234.10, -156.80, -0.35),
    "nifty_it": IndexQuote(29567.30, 467.20, 1.60),
})
