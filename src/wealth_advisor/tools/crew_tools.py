"""
crewAI tool wrappers around the deterministic pipelines.

Imported lazily by the agent builders, only after they have checked that
crewAI is installed (pip install wealth-advisor[agents]).
"""

from __future__ import annotations

import json
import logging

from crewai.tools import BaseTool
from pydantic import BaseModel, Field

from wealth_advisor.agents.market_analyst import run_market_analysis_pipeline
from wealth_advisor.agents.portfolio_advisor import run_recommendation_pipeline
from wealth_advisor.agents.risk_officer import run_insights_pipeline, run_risk_pipeline
from wealth_advisor.tools.portfolio_reader import parse_user_context

logger = logging.getLogger(__name__)


class UserContextInput(BaseModel):
    user_context_json: str = Field(
        ..., description="User context JSON: portfolio, user_profile, investment_profile, financial_goals",
    )


class MarketAnalysisTool(BaseTool):
    """Personalized market analysis for one user context."""

    name: str = "market_analysis"
    description: str = (
        "Analyze today's sector moves against the user's holdings: sector "
        "exposure and outlook, rupee impact, sentiment, relevant headlines"
    )
    args_schema: type[BaseModel] = UserContextInput

    def _run(self, user_context_json: str) -> str:
        ctx = parse_user_context(json.loads(user_context_json))
        return run_market_analysis_pipeline(ctx).model_dump_json(indent=2)


class RecommendationTool(BaseTool):
    """Ranked rebalancing recommendations for one user context."""

    name: str = "portfolio_recommendations"
    description: str = (
        "Produce up to 8 ranked recommendations (asset allocation, sector and "
        "stock concentration, fund performance, goal progress) and a "
        "rebalance snapshot"
    )
    args_schema: type[BaseModel] = UserContextInput

    def _run(self, user_context_json: str) -> str:
        ctx = parse_user_context(json.loads(user_context_json))
        return run_recommendation_pipeline(ctx).model_dump_json(indent=2)


class RiskAnalysisTool(BaseTool):
    """Risk scores, VaR and stress scenarios for one user context."""

    name: str = "risk_analysis"
    description: str = (
        "Score concentration, sector, volatility, credit, liquidity and "
        "currency risk; estimate VaR; run five stress scenarios"
    )
    args_schema: type[BaseModel] = UserContextInput

    def _run(self, user_context_json: str) -> str:
        ctx = parse_user_context(json.loads(user_context_json))
        return run_risk_pipeline(ctx).model_dump_json(indent=2)


class PortfolioInsightsTool(BaseTool):
    """Personalized insight cards and dashboard scores for one user context."""

    name: str = "portfolio_insights"
    description: str = (
        "Produce up to 12 personalized insights on returns, holdings, "
        "allocation, goals, age fit and diversification, with the "
        "portfolio health scores"
    )
    args_schema: type[BaseModel] = UserContextInput

    def _run(self, user_context_json: str) -> str:
        ctx = parse_user_context(json.loads(user_context_json))
        return run_insights_pipeline(ctx).model_dump_json(indent=2)
