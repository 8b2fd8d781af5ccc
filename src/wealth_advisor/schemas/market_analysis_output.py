"""
Market Analyst: Output Schema
Wealth Advisor Engine

Output contract for the personalized market analysis: sector commentary
weighted by the user's exposure, rupee impact of today's sector moves,
a sentiment score, holdings-aware headlines and an illustrative chart.
"""

from __future__ import annotations

import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_OUTLOOKS = ("bullish", "neutral", "bearish")
VALID_SECTOR_CALLS = ("Strong Buy", "Buy", "Hold", "Sell")
VALID_TRENDS = ("bullish", "neutral", "bearish")
VALID_NEWS_IMPACTS = ("positive", "neutral", "negative")
VALID_RELEVANCE = ("high", "medium", "low")


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class SectorAnalysis(BaseModel):
    """House view on one sector the user holds."""

    name: str = Field(..., min_length=1)
    user_exposure: float = Field(..., description="Sector share of total portfolio value (%)")
    performance: float = Field(..., description="Today's sector move (%)")
    outlook: str = Field(...)
    recommendation: str = Field(...)
    reasoning: str = Field(...)
    stocks_held: str = Field("", description="Comma separated symbols")
    impact_on_portfolio: float = Field(..., description="user_exposure x performance / 100")

    @field_validator("outlook")
    @classmethod
    def validate_outlook(cls, v: str) -> str:
        if v not in VALID_OUTLOOKS:
            raise ValueError(f"outlook must be one of {VALID_OUTLOOKS}, got '{v}'")
        return v

    @field_validator("recommendation")
    @classmethod
    def validate_recommendation(cls, v: str) -> str:
        if v not in VALID_SECTOR_CALLS:
            raise ValueError(f"recommendation must be one of {VALID_SECTOR_CALLS}, got '{v}'")
        return v


class SectorImpact(BaseModel):
    sector: str
    movement: float
    impact: float
    value: float


class PortfolioImpact(BaseModel):
    """Rupee effect of today's sector moves on the stock holdings."""

    total_impact: float = 0.0
    positive_impact: float = Field(0.0, ge=0)
    negative_impact: float = Field(0.0, ge=0)
    sector_impacts: List[SectorImpact] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_total(self) -> "PortfolioImpact":
        expected = self.positive_impact - self.negative_impact
        if abs(self.total_impact - expected) > 0.01:
            raise ValueError(
                f"total_impact {self.total_impact} != positive - negative ({expected})"
            )
        return self


class MarketSentiment(BaseModel):
    score: int = Field(..., ge=0, le=100)
    trend: str = Field(...)
    factors: List[str] = Field(default_factory=list, max_length=4)

    @field_validator("trend")
    @classmethod
    def validate_trend(cls, v: str) -> str:
        if v not in VALID_TRENDS:
            raise ValueError(f"trend must be one of {VALID_TRENDS}, got '{v}'")
        return v


class NewsItem(BaseModel):
    title: str = Field(..., min_length=1)
    impact: str = Field(...)
    source: str = Field(...)
    relevance: str = Field(...)
    reason: Optional[str] = None

    @field_validator("impact")
    @classmethod
    def validate_impact(cls, v: str) -> str:
        if v not in VALID_NEWS_IMPACTS:
            raise ValueError(f"impact must be one of {VALID_NEWS_IMPACTS}, got '{v}'")
        return v

    @field_validator("relevance")
    @classmethod
    def validate_relevance(cls, v: str) -> str:
        if v not in VALID_RELEVANCE:
            raise ValueError(f"relevance must be one of {VALID_RELEVANCE}, got '{v}'")
        return v


class ChartPoint(BaseModel):
    """One day of the simulated benchmark / portfolio series."""

    date: datetime.date
    nifty: int
    sensex: int
    portfolio: float


class MarketIndex(BaseModel):
    value: float
    change: float
    change_percent: float


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class MarketAnalysisOutput(BaseModel):
    """Complete personalized market analysis for one user."""

    indices: Dict[str, MarketIndex] = Field(default_factory=dict)
    sectors: List[SectorAnalysis] = Field(default_factory=list)
    market_sentiment: MarketSentiment
    portfolio_impact: PortfolioImpact
    chart_data: List[ChartPoint] = Field(default_factory=list)
    synthetic: bool = Field(
        True,
        description="chart_data is an illustrative random walk, not historical prices",
    )
    news_summary: List[NewsItem] = Field(default_factory=list, max_length=5)
    analysis_date: str = Field(...)
    user_specific: bool = True

    @model_validator(mode="after")
    def validate_sector_order(self) -> "MarketAnalysisOutput":
        """Sectors must be ordered by exposure, largest first."""
        exposures = [s.user_exposure for s in self.sectors]
        if exposures != sorted(exposures, reverse=True):
            raise ValueError("sectors must be sorted by user_exposure descending")
        return self
