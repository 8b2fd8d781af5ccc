"""
Risk Officer: Output Schema
Wealth Advisor Engine

Output contract for the risk analysis: six component scores, factor
commentary, parametric VaR, stress scenarios, radar data, and the
portfolio health scores shown on the dashboard.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_RISK_LEVELS = ("conservative", "moderate", "aggressive")
VALID_FACTOR_STATUS = ("good", "moderate", "high")
VALID_MARKET_OUTLOOKS = ("bullish", "neutral", "bearish")

FACTOR_NAMES: tuple[str, ...] = (
    "Portfolio Concentration",
    "Sector Allocation",
    "Market Cap Risk",
    "Credit Quality",
    "Liquidity Profile",
)

STRESS_SCENARIO_NAMES: tuple[str, ...] = (
    "Market Crash (-30%)",
    "Sector Rotation Impact",
    "Interest Rate Hike (+200bps)",
    "Currency Devaluation (-15%)",
    "Inflation Spike (>7%)",
)


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class RiskMetrics(BaseModel):
    """Component risk scores (0-100, higher is riskier) and their mean."""

    overall_score: int = Field(..., ge=0, le=100)
    risk_level: str = Field(...)
    volatility_score: int = Field(..., ge=0, le=100)
    concentration_risk: int = Field(..., ge=0, le=100)
    sector_risk: int = Field(..., ge=0, le=100)
    credit_risk: int = Field(..., ge=0, le=100)
    liquidity_risk: int = Field(..., ge=0, le=100)
    currency_risk: int = Field(..., ge=0, le=100)

    @field_validator("risk_level")
    @classmethod
    def validate_risk_level(cls, v: str) -> str:
        if v not in VALID_RISK_LEVELS:
            raise ValueError(f"risk_level must be one of {VALID_RISK_LEVELS}, got '{v}'")
        return v


class RiskFactor(BaseModel):
    name: str = Field(...)
    score: float = Field(..., ge=0, le=100)
    status: str = Field(...)
    description: str = Field(..., min_length=10)
    recommendation: str = Field(..., min_length=10)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if v not in FACTOR_NAMES:
            raise ValueError(f"factor name '{v}' not in {FACTOR_NAMES}")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in VALID_FACTOR_STATUS:
            raise ValueError(f"status must be one of {VALID_FACTOR_STATUS}, got '{v}'")
        return v


class VaRAnalysis(BaseModel):
    """Parametric (normal) value-at-risk, as % of portfolio value."""

    daily_var_95: float = Field(..., ge=0)
    daily_var_99: float = Field(..., ge=0)
    monthly_var_95: float = Field(..., ge=0)
    max_drawdown: float = Field(..., ge=5, le=25)
    sharpe_ratio: float
    beta: float = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_confidence_order(self) -> "VaRAnalysis":
        if self.daily_var_99 < self.daily_var_95:
            raise ValueError("99% VaR cannot be smaller than 95% VaR")
        return self


class StressScenario(BaseModel):
    """One stress scenario; impact is the fractional portfolio loss (negative)."""

    scenario: str = Field(...)
    impact: float = Field(..., le=0)
    probability: str = Field(..., min_length=1)

    @field_validator("scenario")
    @classmethod
    def validate_scenario(cls, v: str) -> str:
        if v not in STRESS_SCENARIO_NAMES:
            raise ValueError(f"scenario '{v}' not in {STRESS_SCENARIO_NAMES}")
        return v


class RadarPoint(BaseModel):
    category: str = Field(..., min_length=1)
    current: float = Field(..., ge=0, le=100)
    optimal: float = Field(..., ge=0, le=100)


class PortfolioScores(BaseModel):
    """Dashboard health scores, all clamped to 0-100."""

    portfolio_score: int = Field(..., ge=0, le=100)
    risk_score: int = Field(..., ge=0, le=100)
    diversification_score: int = Field(..., ge=0, le=100)
    market_outlook: str = Field(...)

    @field_validator("market_outlook")
    @classmethod
    def validate_outlook(cls, v: str) -> str:
        if v not in VALID_MARKET_OUTLOOKS:
            raise ValueError(f"market_outlook must be one of {VALID_MARKET_OUTLOOKS}, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class RiskAnalysisOutput(BaseModel):
    """Complete risk analysis for one user."""

    metrics: RiskMetrics
    factors: List[RiskFactor] = Field(..., min_length=len(FACTOR_NAMES), max_length=len(FACTOR_NAMES))
    var_analysis: VaRAnalysis
    stress_test: List[StressScenario] = Field(
        ..., min_length=len(STRESS_SCENARIO_NAMES), max_length=len(STRESS_SCENARIO_NAMES),
    )
    radar_data: List[RadarPoint] = Field(default_factory=list)
    scores: PortfolioScores
    analysis_date: str = Field(...)

    @model_validator(mode="after")
    def validate_consistency(self) -> "RiskAnalysisOutput":
        if self.scores.risk_score != self.metrics.overall_score:
            raise ValueError("scores.risk_score must equal metrics.overall_score")
        if len(self.radar_data) != len(self.factors):
            raise ValueError("radar_data must have one point per risk factor")
        return self
