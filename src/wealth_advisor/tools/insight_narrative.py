"""
Portfolio Advisor Tool: Insight Narrative
Short plain-language summary of the ranked recommendations.

Dual path: a deterministic summary is always available; an LLM narrative
is attempted only when asked for and ANTHROPIC_API_KEY is set, and any
failure falls back to the deterministic text.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from wealth_advisor.config.constants import LLM_MODEL_DEFAULT, LLM_TIMEOUT_SEC
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.schemas.recommendation_output import Recommendation
from wealth_advisor.tools.token_tracker import track as track_tokens

logger = logging.getLogger(__name__)

MODEL_ENV_VAR = "WEALTH_ADVISOR_LLM_MODEL"
API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"
MIN_NARRATIVE_CHARS = 80
MAX_NARRATIVE_CHARS = 1500


# ---------------------------------------------------------------------------
# Deterministic summary
# ---------------------------------------------------------------------------

def build_insight_summary(
    recommendations: List[Recommendation],
    ctx: UserContext,
) -> str:
    """One paragraph naming the action count and the top two actions."""
    if not recommendations:
        return (
            f"No changes needed right now: your portfolio is in line with a "
            f"{ctx.risk_tolerance} profile for age {ctx.age}."
        )

    high = sum(1 for r in recommendations if r.priority == "high")
    count = len(recommendations)
    lead = f"{count} recommendation{'s' if count != 1 else ''}"
    if high:
        lead += f", {high} high priority"
    top = "; ".join(r.title for r in recommendations[:2])
    return f"{lead}. Start with: {top}."


# ---------------------------------------------------------------------------
# LLM narrative
# ---------------------------------------------------------------------------

_NARRATIVE_PROMPT_TEMPLATE = """\
You are a financial advisor writing for an Indian retail investor.

Investor: age {age}, {risk_tolerance} risk tolerance.
Portfolio value: INR {total_value:,.0f} (return {return_pct:.1f}%).

Ranked recommendations:
{recommendations}

Write one short paragraph (60-150 words) explaining what to do first and why.
Do not invent numbers that are not listed above.

Return ONLY the paragraph text, no markdown and no bullet points.
"""


def _format_recommendations(recommendations: List[Recommendation]) -> str:
    return "\n".join(
        f"{i}. [{r.priority}] {r.title}: {r.description}"
        for i, r in enumerate(recommendations, start=1)
    )


def generate_insight_narrative_llm(
    recommendations: List[Recommendation],
    ctx: UserContext,
    model: Optional[str] = None,
) -> Optional[str]:
    """
    Ask the LLM for a narrative over the ranked recommendations.

    Args:
        recommendations: Ranked recommendations (already truncated).
        ctx: User context, for the investor profile lines.
        model: Anthropic model ID; defaults to $WEALTH_ADVISOR_LLM_MODEL or
            LLM_MODEL_DEFAULT.

    Returns:
        Narrative text, or None when unavailable (no key, SDK missing,
        API error, or a reply too short to use).
    """
    if not recommendations:
        return None
    api_key = os.environ.get(API_KEY_ENV_VAR)
    if not api_key:
        logger.info(f"{API_KEY_ENV_VAR} not set, using deterministic summary")
        return None
    model = model or os.environ.get(MODEL_ENV_VAR) or LLM_MODEL_DEFAULT

    try:
        import anthropic
        client = anthropic.Anthropic(api_key=api_key, timeout=LLM_TIMEOUT_SEC)

        prompt = _NARRATIVE_PROMPT_TEMPLATE.format(
            age=ctx.age,
            risk_tolerance=ctx.risk_tolerance,
            total_value=ctx.summary.total_current_value,
            return_pct=ctx.summary.gain_loss_percentage,
            recommendations=_format_recommendations(recommendations),
        )

        response = client.messages.create(
            model=model,
            max_tokens=512,
            messages=[{"role": "user", "content": prompt}],
        )
        track_tokens("generate_insight_narrative_llm", response, model)
        text = response.content[0].text.strip() if response.content else ""

        if len(text) < MIN_NARRATIVE_CHARS:
            logger.warning(f"LLM insight narrative too short ({len(text)} chars)")
            return None
        if len(text) > MAX_NARRATIVE_CHARS:
            text = text[:MAX_NARRATIVE_CHARS]

        logger.info(f"LLM insight narrative generated: {len(text)} chars")
        return text

    except ImportError:
        logger.warning("anthropic SDK not installed, skipping LLM insight narrative")
        return None
    except Exception as e:
        logger.warning(f"LLM insight narrative error: {e}")
        return None
