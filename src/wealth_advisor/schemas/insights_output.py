"""
Portfolio Insights: Output Schema
Wealth Advisor Engine

Output contract for the personalized insights shown next to the portfolio
health scores: one card per observation about performance, holdings,
allocation, goals, age fit, portfolio size and diversification.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from wealth_advisor.config.constants import MAX_INSIGHTS
from wealth_advisor.schemas.risk_output import PortfolioScores


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_INSIGHT_TYPES = ("performance", "warning", "risk", "market", "opportunity", "goal")
VALID_INSIGHT_IMPACTS = ("high", "medium", "low")
VALID_INSIGHT_SOURCES = (
    "performance",
    "stock",
    "sector",
    "mutual_fund",
    "asset_allocation",
    "goal",
    "age",
    "portfolio_size",
    "diversification",
)


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class InsightData(BaseModel):
    """Display figures for an insight card, already formatted."""

    current_value: str = Field(..., min_length=1)
    target_value: str = Field(..., min_length=1)
    change: str = Field(..., min_length=1)


class Insight(BaseModel):
    """One personalized observation about the user's portfolio."""

    id: str = Field(..., min_length=1, description="Stable id: <rule>_<subject>")
    type: str = Field(...)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=10)
    impact: str = Field(...)
    confidence: int = Field(..., ge=0, le=100)
    actionable: bool = Field(...)
    recommendation: Optional[str] = None
    data: Optional[InsightData] = None
    source: str = Field(..., description="Rule family that produced the insight")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in VALID_INSIGHT_TYPES:
            raise ValueError(f"type must be one of {VALID_INSIGHT_TYPES}, got '{v}'")
        return v

    @field_validator("impact")
    @classmethod
    def validate_impact(cls, v: str) -> str:
        if v not in VALID_INSIGHT_IMPACTS:
            raise ValueError(f"impact must be one of {VALID_INSIGHT_IMPACTS}, got '{v}'")
        return v

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if v not in VALID_INSIGHT_SOURCES:
            raise ValueError(f"source must be one of {VALID_INSIGHT_SOURCES}, got '{v}'")
        return v

    @model_validator(mode="after")
    def actionable_needs_recommendation(self) -> "Insight":
        if self.actionable and not self.recommendation:
            raise ValueError(f"actionable insight {self.id} must carry a recommendation")
        return self


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class PortfolioInsightsOutput(BaseModel):
    """Personalized insights paired with the portfolio health scores."""

    insights: List[Insight] = Field(default_factory=list, max_length=MAX_INSIGHTS)
    scores: PortfolioScores
    analysis_date: str = Field(...)
    next_review_date: str = Field(...)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "PortfolioInsightsOutput":
        ids = [i.id for i in self.insights]
        if len(ids) != len(set(ids)):
            raise ValueError(f"insight ids must be unique, got {ids}")
        return self
