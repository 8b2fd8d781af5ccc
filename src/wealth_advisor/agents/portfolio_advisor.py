"""
Portfolio Advisor
Wealth Advisor Engine

Receives a UserContext.
Produces RecommendationOutput with:
- Up to 8 ranked recommendations from five analyzers
- Rebalance snapshot (current vs target per bucket)
- Summary (LLM narrative when enabled, deterministic otherwise)

This agent advises. It never places trades.
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
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.schemas.recommendation_output import RecommendationOutput
from wealth_advisor.tools.insight_narrative import (
    build_insight_summary,
    generate_insight_narrative_llm,
)
from wealth_advisor.tools.recommendation_rules import (
    calculate_rebalance_data,
    generate_recommendations,
    rank_recommendations,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CrewAI Agent Builder
# ---------------------------------------------------------------------------

def build_portfolio_advisor_agent() -> "Agent":
    """Create the Portfolio Advisor Agent. Requires crewai."""
    if not HAS_CREWAI:
        raise ImportError("crewai is required for agentic mode. pip install wealth-advisor[agents]")
    from wealth_advisor.tools.crew_tools import RecommendationTool

    return Agent(
        role="Portfolio Advisor",
        goal=(
            "Give this investor a short, ranked list of changes that bring the "
            "portfolio in line with their age, risk tolerance and goals."
        ),
        backstory=(
            "You are a fee-only advisor for salaried Indian investors. You "
            "prefer a few high-impact actions over long checklists and you "
            "always explain the reason behind each change."
        ),
        tools=[RecommendationTool()],
        verbose=True,
        allow_delegation=False,
        max_iter=5,
        temperature=0.3,
    )


def build_recommendation_task(
    agent: "Agent",
    user_context_json: str = "",
) -> "Task":
    """Create the Recommendation task. Requires crewai."""
    if not HAS_CREWAI:
        raise ImportError("crewai is required for agentic mode. pip install wealth-advisor[agents]")
    return Task(
        description=f"""Recommend portfolio changes for this investor.

ANALYZERS:
1. Asset allocation (equity vs age/risk target, act on gaps over 10 points)
2. Sector concentration (over 20% of portfolio)
3. Stock concentration (over 10% of portfolio)
4. Fund performance (low returns, high expense ratios)
5. Goal progress (behind schedule, nearly complete)

THEN:
- Rank by priority then impact, keep the top 8
- Show the rebalance snapshot across the six buckets
- Summarize what to do first

User context:
{user_context_json}
""",
        expected_output=(
            "JSON with recommendations, total_candidates, rebalance_data, "
            "summary, summary_source, analysis_date, next_review_date."
        ),
        agent=agent,
    )


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_recommendation_pipeline(
    ctx: UserContext,
    today: Optional[date] = None,
    use_llm: bool = False,
) -> RecommendationOutput:
    """
    Run the recommendation pipeline.

    Args:
        ctx: Validated user context.
        today: Reference date for goal timelines and the review date.
        use_llm: Try an LLM narrative for the summary; falls back to the
            deterministic summary on any failure.

    Returns:
        Validated RecommendationOutput

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    logger.info("[Portfolio Advisor] Running recommendation pipeline ...")
    today = today or date.today()

    # Step 1: Run all analyzers and rank
    candidates = generate_recommendations(ctx, today)
    ranked = rank_recommendations(candidates)

    # Step 2: Rebalance snapshot
    rebalance = calculate_rebalance_data(ctx)

    # Step 3: Summary
    summary = None
    summary_source = "deterministic"
    if use_llm:
        summary = generate_insight_narrative_llm(ranked, ctx)
        if summary:
            summary_source = "llm"
    if not summary:
        summary = build_insight_summary(ranked, ctx)

    output = RecommendationOutput(
        recommendations=ranked,
        total_candidates=len(candidates),
        rebalance_data=rebalance,
        summary=summary,
        summary_source=summary_source,
        analysis_date=today.isoformat(),
        next_review_date=(today + timedelta(days=NEXT_REVIEW_DAYS)).isoformat(),
    )

    high = sum(1 for r in ranked if r.priority == "high")
    logger.info(
        f"[Portfolio Advisor] Done - {len(ranked)}/{len(candidates)} recommendations, "
        f"{high} high priority, summary={summary_source}"
    )
    return output
