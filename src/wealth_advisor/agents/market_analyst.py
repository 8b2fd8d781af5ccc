"""
Market Analyst
Wealth Advisor Engine

Receives a UserContext.
Produces MarketAnalysisOutput with:
- Sector commentary ordered by the user's exposure
- Rupee impact of today's sector moves
- Portfolio-aware sentiment
- Holdings-matched headlines
- Synthetic 30-day benchmark chart (flagged, never historical)

This agent comments on markets. It never recommends trades.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Optional

try:
    from crewai import Agent, Task
    HAS_CREWAI = True
except ImportError:
    HAS_CREWAI = False
    Agent = None  # type: ignore
    Task = None  # type: ignore

from wealth_advisor.config.constants import CHART_SEED_DEFAULT
from wealth_advisor.schemas.market_analysis_output import MarketAnalysisOutput
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.tools.market_analyzer import (
    calculate_portfolio_impact,
    generate_chart_data,
    generate_market_sentiment,
    generate_personalized_news,
    generate_sector_analysis,
    market_indices,
    sector_movements,
)
from wealth_advisor.tools.portfolio_metrics import require_portfolio_value
from wealth_advisor.tools.sector_exposure import compute_sector_exposure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CrewAI Agent Builder
# ---------------------------------------------------------------------------

def build_market_analyst_agent() -> "Agent":
    """Create the Market Analyst Agent. Requires crewai."""
    if not HAS_CREWAI:
        raise ImportError("crewai is required for agentic mode. pip install wealth-advisor[agents]")
    from wealth_advisor.tools.crew_tools import MarketAnalysisTool

    return Agent(
        role="Indian Equity Market Analyst",
        goal=(
            "Explain how today's sector moves affect this investor's actual "
            "holdings: which sectors they are exposed to, what moved, and the "
            "rupee impact on their portfolio."
        ),
        backstory=(
            "You have covered NSE sectors for fifteen years and write for retail "
            "investors. You tie every market comment to what the reader owns "
            "and never present simulated charts as real history."
        ),
        tools=[MarketAnalysisTool()],
        verbose=True,
        allow_delegation=False,
        max_iter=5,
        temperature=0.3,
    )


def build_market_analysis_task(
    agent: "Agent",
    user_context_json: str = "",
) -> "Task":
    """Create the Market Analysis task. Requires crewai."""
    if not HAS_CREWAI:
        raise ImportError("crewai is required for agentic mode. pip install wealth-advisor[agents]")
    return Task(
        description=f"""Produce a personalized market analysis for this investor.

STEPS:
1. Run the market_analysis tool on the user context
2. Summarize the sectors with the largest exposure and their outlook
3. State the net rupee impact of today's sector moves
4. Report sentiment score and trend with its factors
5. List the headlines relevant to the holdings

User context:
{user_context_json}
""",
        expected_output=(
            "JSON with indices, sectors, market_sentiment, portfolio_impact, "
            "chart_data, synthetic, news_summary, analysis_date, user_specific."
        ),
        agent=agent,
    )


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_market_analysis_pipeline(
    ctx: UserContext,
    seed: int = CHART_SEED_DEFAULT,
    today: Optional[date] = None,
    unknown_sector_rng: Optional[random.Random] = None,
) -> MarketAnalysisOutput:
    """
    Run the deterministic market analysis pipeline without LLM.

    Args:
        ctx: Validated user context.
        seed: Seed for the synthetic chart walk.
        today: Analysis date; the chart ends the day before. Defaults to today.
        unknown_sector_rng: Draws moves for sectors missing from the outlook
            table; without it those sectors move 0%.

    Returns:
        Validated MarketAnalysisOutput

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    logger.info("[Market Analyst] Running market analysis pipeline ...")
    today = today or date.today()

    # Step 1: Resolve sector moves once for commentary and impact
    total = require_portfolio_value(ctx)
    exposures = compute_sector_exposure(ctx.stocks, total)
    movements = sector_movements(exposures, unknown_sector_rng)

    # Step 2: Sector commentary and rupee impact
    sectors = generate_sector_analysis(ctx, movements=movements)
    impact = calculate_portfolio_impact(ctx, movements=movements)

    # Step 3: Sentiment and headlines
    sentiment = generate_market_sentiment(ctx)
    news = generate_personalized_news(ctx)

    # Step 4: Synthetic chart
    chart = generate_chart_data(ctx, random.Random(seed), today)

    output = MarketAnalysisOutput(
        indices=market_indices(),
        sectors=sectors,
        market_sentiment=sentiment,
        portfolio_impact=impact,
        chart_data=chart,
        synthetic=True,
        news_summary=news,
        analysis_date=today.isoformat(),
        user_specific=True,
    )

    logger.info(
        f"[Market Analyst] Done - {len(sectors)} sectors, "
        f"impact={impact.total_impact:+,.0f}, sentiment={sentiment.score} "
        f"({sentiment.trend}), {len(news)} headlines"
    )
    return output
