"""
Portfolio Advisor: Output Schema
Wealth Advisor Engine

Output contract for the recommendation engine: at most eight ranked,
actionable recommendations plus a bucket-level rebalance snapshot.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from wealth_advisor.config.constants import MAX_RECOMMENDATIONS, PRIORITY_ORDER
from wealth_advisor.config.reference_data import REBALANCE_BUCKETS


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_REC_TYPES = ("reduce", "add", "goal_based")
VALID_PRIORITIES = ("high", "medium", "low")
VALID_RISK_LEVELS = ("low", "medium", "high")
VALID_SOURCES = (
    "asset_allocation",
    "sector_concentration",
    "stock_concentration",
    "fund_performance",
    "goal_progress",
)
VALID_SUMMARY_SOURCES = ("llm", "deterministic")


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class Recommendation(BaseModel):
    """One actionable suggestion produced by an analyzer."""

    id: str = Field(..., min_length=1, description="<analyzer>_<subject>, stable across runs")
    type: str = Field(...)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: str = Field(...)
    impact_score: float = Field(..., ge=0, le=100)
    current_allocation: Optional[float] = None
    recommended_allocation: Optional[float] = None
    amount_suggestion: Optional[int] = None
    timeframe: str = Field(...)
    reasoning: List[str] = Field(default_factory=list)
    risk_level: str = Field("low")
    source: str = Field(...)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in VALID_REC_TYPES:
            raise ValueError(f"type must be one of {VALID_REC_TYPES}, got '{v}'")
        return v

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        if v not in VALID_PRIORITIES:
            raise ValueError(f"priority must be one of {VALID_PRIORITIES}, got '{v}'")
        return v

    @field_validator("risk_level")
    @classmethod
    def validate_risk_level(cls, v: str) -> str:
        if v not in VALID_RISK_LEVELS:
            raise ValueError(f"risk_level must be one of {VALID_RISK_LEVELS}, got '{v}'")
        return v

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if v not in VALID_SOURCES:
            raise ValueError(f"source must be one of {VALID_SOURCES}, got '{v}'")
        return v


class RebalanceSnapshot(BaseModel):
    """Current vs recommended share (%) per allocation bucket."""

    current: Dict[str, int] = Field(default_factory=dict)
    recommended: Dict[str, int] = Field(default_factory=dict)
    difference: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_buckets(self) -> "RebalanceSnapshot":
        expected = set(REBALANCE_BUCKETS)
        for label, mapping in (
            ("current", self.current),
            ("recommended", self.recommended),
            ("difference", self.difference),
        ):
            if set(mapping) != expected:
                raise ValueError(f"{label} buckets {sorted(mapping)} != {sorted(expected)}")
        for bucket in REBALANCE_BUCKETS:
            if self.difference[bucket] != self.recommended[bucket] - self.current[bucket]:
                raise ValueError(f"difference for {bucket} must equal recommended - current")
        return self


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class RecommendationOutput(BaseModel):
    """Ranked recommendations for one user."""

    recommendations: List[Recommendation] = Field(
        default_factory=list, max_length=MAX_RECOMMENDATIONS,
    )
    total_candidates: int = Field(0, ge=0, description="Recommendations before truncation")
    rebalance_data: RebalanceSnapshot
    summary: str = Field(..., min_length=1)
    summary_source: str = Field("deterministic")
    analysis_date: str = Field(...)
    next_review_date: str = Field(...)

    @field_validator("summary_source")
    @classmethod
    def validate_summary_source(cls, v: str) -> str:
        if v not in VALID_SUMMARY_SOURCES:
            raise ValueError(f"summary_source must be one of {VALID_SUMMARY_SOURCES}, got '{v}'")
        return v

    @model_validator(mode="after")
    def validate_ranking(self) -> "RecommendationOutput":
        """Priority descending, then impact descending; ids unique."""
        keys = [(PRIORITY_ORDER[r.priority], r.impact_score) for r in self.recommendations]
        if keys != sorted(keys, reverse=True):
            raise ValueError("recommendations must be sorted by priority then impact_score")
        ids = [r.id for r in self.recommendations]
        if len(ids) != len(set(ids)):
            raise ValueError(f"recommendation ids must be unique, got {ids}")
        if self.total_candidates < len(self.recommendations):
            raise ValueError("total_candidates cannot be less than the returned recommendations")
        return self
