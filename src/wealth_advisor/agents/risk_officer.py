"""
Risk Officer
Wealth Advisor Engine

Receives a UserContext.
Produces RiskAnalysisOutput with:
- Six component risk scores and an overall level
- Five risk factors with status and guidance
- Parametric VaR, drawdown, Sharpe and beta
- Five stress scenarios
- Radar data and dashboard health scores

Also produces PortfolioInsightsOutput: up to 12 personalized insight
cards next to the same dashboard scores.

This agent measures and explains risk. It never sizes trades.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

try:
    from crewai import Agent, Task
    HAS_CREWAI = True
except ImportError:
    HAS_CREWAI = False
    Agent = None  # type: ignore
    Task = None  # type: ignore

from wealth_advisor.config.constants import NEXT_REVIEW_DAYS
from wealth_advisor.schemas.insights_output import PortfolioInsightsOutput
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.schemas.risk_output import RiskAnalysisOutput
from wealth_advisor.tools.portfolio_insights import generate_personalized_insights
from wealth_advisor.tools.portfolio_scorer import compute_portfolio_scores
from wealth_advisor.tools.risk_analyzer import (
    calculate_risk_metrics,
    calculate_var_analysis,
    generate_radar_data,
    generate_risk_factors,
    generate_stress_scenarios,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CrewAI Agent Builder
# ---------------------------------------------------------------------------

def build_risk_officer_agent() -> "Agent":
    """Create the Risk Officer Agent. Requires crewai."""
    if not HAS_CREWAI:
        raise ImportError("crewai is required for agentic mode. pip install wealth-advisor[agents]")
    from wealth_advisor.tools.crew_tools import PortfolioInsightsTool, RiskAnalysisTool

    return Agent(
        role="Portfolio Risk Officer",
        goal=(
            "Measure how concentrated, volatile and illiquid this investor's "
            "portfolio is, and how it would fare under market stress."
        ),
        backstory=(
            "You ran risk for a mid-sized Indian AMC through 2008 and 2020. "
            "You report numbers plainly and flag the one or two risks that "
            "matter most."
        ),
        tools=[RiskAnalysisTool(), PortfolioInsightsTool()],
        verbose=True,
        allow_delegation=False,
        max_iter=5,
        temperature=0.2,
    )


def build_risk_task(
    agent: "Agent",
    user_context_json: str = "",
) -> "Task":
    """Create the Risk Analysis task. Requires crewai."""
    if not HAS_CREWAI:
        raise ImportError("crewai is required for agentic mode. pip install wealth-advisor[agents]")
    return Task(
        description=f"""Assess portfolio risk for this investor.

STEPS:
1. Score concentration, sector, volatility, credit, liquidity, currency risk
2. Report the overall score and risk level
3. Explain the factors rated moderate or high
4. Report VaR (daily 95/99, monthly 95), drawdown, Sharpe and beta
5. Summarize the worst stress scenario

User context:
{user_context_json}
""",
        expected_output=(
            "JSON with metrics, factors, var_analysis, stress_test, radar_data, "
            "scores, analysis_date."
        ),
        agent=agent,
    )


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_risk_pipeline(
    ctx: UserContext,
    today: Optional[date] = None,
) -> RiskAnalysisOutput:
    """
    Run the deterministic risk analysis pipeline without LLM.

    Args:
        ctx: Validated user context.
        today: Analysis date; defaults to today.

    Returns:
        Validated RiskAnalysisOutput

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    logger.info("[Risk Officer] Running risk analysis pipeline ...")
    today = today or date.today()

    # Step 1: Component scores
    metrics = calculate_risk_metrics(ctx)

    # Step 2: Factors and radar
    factors = generate_risk_factors(ctx, metrics)
    radar = generate_radar_data(factors)

    # Step 3: VaR and stress
    var_analysis = calculate_var_analysis(ctx)
    stress = generate_stress_scenarios(ctx)

    # Step 4: Dashboard scores share the overall risk score
    scores = compute_portfolio_scores(ctx, metrics.overall_score)

    output = RiskAnalysisOutput(
        metrics=metrics,
        factors=factors,
        var_analysis=var_analysis,
        stress_test=stress,
        radar_data=radar,
        scores=scores,
        analysis_date=today.isoformat(),
    )

    flagged = [f.name for f in factors if f.status == "high"]
    logger.info(
        f"[Risk Officer] Done - overall={metrics.overall_score} ({metrics.risk_level}), "
        f"VaR95={var_analysis.daily_var_95}%, high factors={flagged or 'none'}"
    )
    return output


def run_insights_pipeline(
    ctx: UserContext,
    today: Optional[date] = None,
) -> PortfolioInsightsOutput:
    """
    Personalized insights plus the dashboard scores, without LLM.

    Args:
        ctx: Validated user context.
        today: Analysis date and goal reference date; defaults to today.

    Returns:
        Validated PortfolioInsightsOutput

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    logger.info("[Risk Officer] Running insights pipeline ...")
    today = today or date.today()

    # Step 1: Scores share the overall risk score with the risk report
    metrics = calculate_risk_metrics(ctx)
    scores = compute_portfolio_scores(ctx, metrics.overall_score)

    # Step 2: Rule families, capped
    insights = generate_personalized_insights(ctx, today)

    output = PortfolioInsightsOutput(
        insights=insights,
        scores=scores,
        analysis_date=today.isoformat(),
        next_review_date=(today + timedelta(days=NEXT_REVIEW_DAYS)).isoformat(),
    )

    actionable = sum(1 for i in insights if i.actionable)
    logger.info(
        f"[Risk Officer] Done - {len(insights)} insights ({actionable} actionable), "
        f"portfolio score={scores.portfolio_score}"
    )
    return output
