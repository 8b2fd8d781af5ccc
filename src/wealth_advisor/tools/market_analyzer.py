"""
Market Analyst Tool: Personalized Market Analysis
Sector commentary, rupee impact, sentiment, headlines and an illustrative
benchmark chart, all weighted by what the user actually holds.

Sector movements come from the static SECTOR_OUTLOOKS table. Sectors
missing from the table move by UNKNOWN_SECTOR_PERFORMANCE, or by a draw
from an injected random.Random when the caller supplies one.
"""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from wealth_advisor.config.constants import (
    CHART_DAYS,
    CHART_MAX_DAILY_MOVE_PCT,
    CHART_NIFTY_BASE,
    CHART_PORTFOLIO_BASE,
    CHART_PORTFOLIO_BETA,
    CHART_PORTFOLIO_NOISE_PCT,
    CHART_SEED_DEFAULT,
    CHART_SENSEX_BASE,
    MAX_NEWS_ITEMS,
    MAX_SENTIMENT_FACTORS,
    SENTIMENT_AGGRESSIVE_DELTA,
    SENTIMENT_BASE_SCORE,
    SENTIMENT_BEARISH_BELOW,
    SENTIMENT_BULLISH_ABOVE,
    SENTIMENT_CONSERVATIVE_DELTA,
    SENTIMENT_HIGH_EQUITY_DELTA,
    SENTIMENT_HIGH_EQUITY_THRESHOLD,
    SENTIMENT_LOW_EQUITY_DELTA,
    SENTIMENT_LOW_EQUITY_THRESHOLD,
    UNKNOWN_SECTOR_PERFORMANCE,
)
from wealth_advisor.config.reference_data import (
    GENERIC_HEADLINE,
    MARKET_INDICES,
    NEUTRAL_OUTLOOK,
    NEUTRAL_REASONING,
    NEUTRAL_RECOMMENDATION,
    NEWS_TEMPLATES,
    SECTOR_OUTLOOKS,
    STATIC_SENTIMENT_FACTORS,
    NewsTemplate,
)
from wealth_advisor.schemas.market_analysis_output import (
    ChartPoint,
    MarketIndex,
    MarketSentiment,
    NewsItem,
    PortfolioImpact,
    SectorAnalysis,
    SectorImpact,
)
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.tools.portfolio_metrics import (
    compute_equity_percentage,
    require_portfolio_value,
)
from wealth_advisor.tools.ranking import by_abs_impact_desc, by_exposure_desc
from wealth_advisor.tools.rounding import round_half_up, round_half_up_int
from wealth_advisor.tools.sector_exposure import compute_sector_exposure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sector movements
# ---------------------------------------------------------------------------

def sector_movements(
    sectors: Iterable[str],
    rng: Optional[random.Random] = None,
) -> Dict[str, float]:
    """
    Today's move (%) for each sector.

    Resolve once per request and pass the result to both
    generate_sector_analysis and calculate_portfolio_impact so an unknown
    sector moves by the same amount in both.
    """
    movements: Dict[str, float] = {}
    for sector in sectors:
        if sector in movements:
            continue
        outlook = SECTOR_OUTLOOKS.get(sector)
        if outlook is not None:
            movements[sector] = outlook.performance
        elif rng is not None:
            movements[sector] = rng.uniform(-1.0, 1.0)
        else:
            movements[sector] = UNKNOWN_SECTOR_PERFORMANCE
    return movements


def generate_sector_analysis(
    ctx: UserContext,
    rng: Optional[random.Random] = None,
    movements: Optional[Dict[str, float]] = None,
) -> List[SectorAnalysis]:
    """
    One record per sector the user holds, largest exposure first.

    Args:
        ctx: User context.
        rng: Source for unknown-sector moves when movements is not given.
        movements: Pre-resolved sector moves from sector_movements().

    Raises:
        InvalidPortfolioState: holdings present with non-positive total value.
    """
    total = require_portfolio_value(ctx)
    exposures = compute_sector_exposure(ctx.stocks, total)
    if movements is None:
        movements = sector_movements(exposures, rng)

    records: List[SectorAnalysis] = []
    for sector, exposure in exposures.items():
        outlook = SECTOR_OUTLOOKS.get(sector)
        performance = movements.get(sector, UNKNOWN_SECTOR_PERFORMANCE)
        records.append(SectorAnalysis(
            name=sector,
            user_exposure=exposure.percentage,
            performance=performance,
            outlook=outlook.outlook if outlook else NEUTRAL_OUTLOOK,
            recommendation=outlook.recommendation if outlook else NEUTRAL_RECOMMENDATION,
            reasoning=outlook.reasoning if outlook else NEUTRAL_REASONING,
            stocks_held=", ".join(exposure.symbols),
            impact_on_portfolio=exposure.percentage * performance / 100,
        ))

    return sorted(records, key=by_exposure_desc)


def calculate_portfolio_impact(
    ctx: UserContext,
    movements: Optional[Dict[str, float]] = None,
) -> PortfolioImpact:
    """
    Rupee effect of today's sector moves on the stock sleeve.

    total_impact = positive_impact - negative_impact; sector impacts are
    ordered by absolute size.
    """
    total = require_portfolio_value(ctx)
    exposures = compute_sector_exposure(ctx.stocks, total)
    if movements is None:
        movements = sector_movements(exposures)

    positive = 0.0
    negative = 0.0
    impacts: List[SectorImpact] = []
    for sector, exposure in exposures.items():
        movement = movements.get(sector, UNKNOWN_SECTOR_PERFORMANCE)
        impact = exposure.value * movement / 100
        if impact > 0:
            positive += impact
        else:
            negative += abs(impact)
        impacts.append(SectorImpact(
            sector=sector, movement=movement, impact=impact, value=exposure.value,
        ))

    return PortfolioImpact(
        total_impact=positive - negative,
        positive_impact=positive,
        negative_impact=negative,
        sector_impacts=sorted(impacts, key=by_abs_impact_desc),
    )


# ---------------------------------------------------------------------------
# Sentiment & news
# ---------------------------------------------------------------------------

def generate_market_sentiment(ctx: UserContext) -> MarketSentiment:
    """Base 65, nudged by equity share and risk tolerance, clamped to 0-100."""
    equity_pct = compute_equity_percentage(ctx.summary)
    score = SENTIMENT_BASE_SCORE
    factors: List[str] = []

    if equity_pct > SENTIMENT_HIGH_EQUITY_THRESHOLD:
        score += SENTIMENT_HIGH_EQUITY_DELTA
        factors.append("High equity exposure benefits from market rally")
    elif equity_pct < SENTIMENT_LOW_EQUITY_THRESHOLD:
        score += SENTIMENT_LOW_EQUITY_DELTA
        factors.append("Conservative allocation limits upside participation")

    if ctx.risk_tolerance == "aggressive":
        score += SENTIMENT_AGGRESSIVE_DELTA
        factors.append("Aggressive risk profile aligns with market momentum")
    elif ctx.risk_tolerance == "conservative":
        score += SENTIMENT_CONSERVATIVE_DELTA
        factors.append("Conservative approach provides downside protection")

    factors.extend(STATIC_SENTIMENT_FACTORS)
    score = min(100, max(0, score))

    if score > SENTIMENT_BULLISH_ABOVE:
        trend = "bullish"
    elif score < SENTIMENT_BEARISH_BELOW:
        trend = "bearish"
    else:
        trend = "neutral"

    return MarketSentiment(score=score, trend=trend, factors=factors[:MAX_SENTIMENT_FACTORS])


def _news_item(template: NewsTemplate, reason: Optional[str] = None) -> NewsItem:
    return NewsItem(
        title=template.title,
        impact=template.impact,
        source=template.source,
        relevance=template.relevance,
        reason=reason,
    )


def generate_personalized_news(ctx: UserContext) -> List[NewsItem]:
    """Generic headline first, then templates matching held sectors and fund categories."""
    news = [_news_item(GENERIC_HEADLINE)]

    for template in NEWS_TEMPLATES:
        if template.sectors:
            held = [s.symbol for s in ctx.stocks if s.sector in template.sectors]
            if held:
                news.append(_news_item(template, f"{template.reason}: {', '.join(held)}"))
        elif template.fund_category_keyword:
            keyword = template.fund_category_keyword
            if any(keyword in f.category.lower() for f in ctx.mutual_funds):
                news.append(_news_item(template, template.reason))

    return news[:MAX_NEWS_ITEMS]


def market_indices() -> Dict[str, MarketIndex]:
    """Static index snapshot; not a live quote."""
    return {
        name: MarketIndex(
            value=quote.value, change=quote.change, change_percent=quote.change_percent,
        )
        for name, quote in MARKET_INDICES.items()
    }


# ---------------------------------------------------------------------------
# Synthetic chart
# ---------------------------------------------------------------------------

def generate_chart_data(
    ctx: UserContext,
    rng: Optional[random.Random] = None,
    end_date: Optional[date] = None,
) -> List[ChartPoint]:
    """
    Illustrative 30-day random walk for Nifty, Sensex and a portfolio index.

    This is a simulation for display, not historical data. Nifty and Sensex
    share one daily move drawn uniformly from +/-1%; the portfolio index
    (base 100) follows with beta 1.1 plus +/-0.25% noise. The series ends
    the day before end_date. The walk does not depend on ctx holdings.

    Args:
        ctx: User context (kept for a uniform tool signature).
        rng: Seeded generator; defaults to random.Random(42).
        end_date: Defaults to today.
    """
    rng = rng if rng is not None else random.Random(CHART_SEED_DEFAULT)
    end_date = end_date or date.today()
    start = end_date - timedelta(days=CHART_DAYS)

    nifty = CHART_NIFTY_BASE
    sensex = CHART_SENSEX_BASE
    portfolio = CHART_PORTFOLIO_BASE
    points: List[ChartPoint] = []

    for i in range(CHART_DAYS):
        move = (rng.random() - 0.5) * 2 * CHART_MAX_DAILY_MOVE_PCT
        nifty *= 1 + move / 100
        sensex *= 1 + move / 100

        noise = (rng.random() - 0.5) * 2 * CHART_PORTFOLIO_NOISE_PCT
        portfolio *= 1 + (move * CHART_PORTFOLIO_BETA + noise) / 100

        points.append(ChartPoint(
            date=start + timedelta(days=i),
            nifty=round_half_up_int(nifty),
            sensex=round_half_up_int(sensex),
            portfolio=round_half_up(portfolio, 2),
        ))

    logger.debug(f"Synthetic chart: {len(points)} points for {len(ctx.stocks)} stocks")
    return points
