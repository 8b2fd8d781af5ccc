"""
Centralized configuration for the Wealth Advisor engine.

This module defines all magic numbers, thresholds, and configuration values
used by the market analysis, recommendation and risk pipelines. Centralizing
these values makes decision boundaries easy to find and tune.
"""

# ============================================================================
# USER PROFILE DEFAULTS
# ============================================================================

DEFAULT_AGE = 30
"""Age assumed when the user profile does not carry one"""

DEFAULT_RISK_TOLERANCE = "moderate"
"""Risk tolerance assumed when the investment profile does not carry one"""

VALID_RISK_TOLERANCES = ("conservative", "moderate", "aggressive")
"""Accepted risk tolerance tiers"""

UNKNOWN_SECTOR = "Other"
"""Sector bucket for holdings without a known sector"""

# ============================================================================
# EQUITY ALLOCATION TARGETS
# ============================================================================
# Rule of thumb: target equity % = 100 - age, clamped, then risk-adjusted.

EQUITY_TARGET_FLOOR = 40
"""Lowest age-based equity target (%)"""

EQUITY_TARGET_CEILING = 80
"""Highest age-based equity target (%)"""

AGGRESSIVE_EQUITY_BONUS = 15
"""Equity points added for an aggressive risk tolerance"""

AGGRESSIVE_EQUITY_CAP = 85
"""Equity target cap after the aggressive bonus (%)"""

CONSERVATIVE_EQUITY_PENALTY = 20
"""Equity points removed for a conservative risk tolerance"""

CONSERVATIVE_EQUITY_FLOOR = 30
"""Equity target floor after the conservative penalty (%)"""

MUTUAL_FUND_EQUITY_SHARE = 0.7
"""Fraction of mutual fund value treated as equity exposure"""

ALLOCATION_DEVIATION_THRESHOLD = 10
"""Equity deviation (% points) above which a recommendation is emitted"""

ALLOCATION_HIGH_PRIORITY_DEVIATION = 20
"""Equity deviation (% points) above which the recommendation is high priority"""

ALLOCATION_IMPACT_MULTIPLIER = 4
"""Impact score per point of equity deviation"""

# ============================================================================
# CONCENTRATION LIMITS
# ============================================================================

SECTOR_CONCENTRATION_LIMIT = 20.0
"""Sector share of portfolio (%) above which a reduce recommendation fires"""

SECTOR_CONCENTRATION_HIGH = 30.0
"""Sector share (%) above which the recommendation is high priority"""

SECTOR_TARGET_ALLOCATION = 18
"""Sector share (%) recommended after trimming"""

SECTOR_IMPACT_MULTIPLIER = 3
"""Impact score per point of sector share"""

STOCK_CONCENTRATION_LIMIT = 10.0
"""Single stock share of portfolio (%) above which a reduce recommendation fires"""

STOCK_CONCENTRATION_HIGH = 15.0
"""Single stock share (%) above which the recommendation is high priority"""

STOCK_TARGET_ALLOCATION = 8
"""Single stock share (%) recommended after trimming"""

STOCK_IMPACT_MULTIPLIER = 5
"""Impact score per point of single stock share"""

# ============================================================================
# FUND REVIEW THRESHOLDS
# ============================================================================

FUND_UNDERPERFORMANCE_RETURN = 5.0
"""Fund gain/loss % below which performance is reviewed"""

FUND_REVIEW_MIN_INVESTMENT = 50_000
"""Minimum invested amount (INR) for a performance review"""

FUND_TARGET_RETURN = 12
"""Return (%) a replacement fund is expected to deliver"""

FUND_IMPACT_MULTIPLIER = 8
"""Impact score per point of fund gain/loss"""

FUND_IMPACT_BASE = 30
"""Impact score floor added to every fund review"""

FUND_EXPENSE_RATIO_LIMIT = 1.0
"""Expense ratio (%) above which a lower-cost switch is suggested"""

FUND_EXPENSE_IMPACT = 60
"""Flat impact score for a lower-cost switch"""

# ============================================================================
# GOAL PROGRESS
# ============================================================================

GOAL_BEHIND_PROGRESS = 30.0
"""Progress (%) below which a high priority goal is behind schedule"""

GOAL_BEHIND_MIN_MONTHS = 6
"""Months remaining above which acceleration is still worthwhile"""

GOAL_BEHIND_IMPACT = 85
"""Impact score for an accelerate-savings recommendation"""

GOAL_FINAL_PUSH_PROGRESS = 85.0
"""Progress (%) above which a goal gets a final-push recommendation"""

GOAL_FINAL_PUSH_IMPACT = 75
"""Impact score for a final-push recommendation"""

DAYS_PER_MONTH = 30
"""Days per month used when counting months to a goal date"""

# ============================================================================
# RANKING
# ============================================================================

MAX_RECOMMENDATIONS = 8
"""Maximum recommendations returned after ranking"""

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
"""Sort weight per priority (higher sorts first)"""

NEXT_REVIEW_DAYS = 30
"""Days until the recommendations should be reviewed again"""

# ============================================================================
# MARKET SENTIMENT
# ============================================================================

SENTIMENT_BASE_SCORE = 65
"""Sentiment score before portfolio adjustments"""

SENTIMENT_HIGH_EQUITY_THRESHOLD = 70
"""Equity % above which the portfolio benefits from a rally"""

SENTIMENT_LOW_EQUITY_THRESHOLD = 40
"""Equity % below which upside participation is limited"""

SENTIMENT_HIGH_EQUITY_DELTA = 10
"""Score added for high equity exposure"""

SENTIMENT_LOW_EQUITY_DELTA = -5
"""Score added for low equity exposure"""

SENTIMENT_AGGRESSIVE_DELTA = 5
"""Score added for an aggressive risk tolerance"""

SENTIMENT_CONSERVATIVE_DELTA = -5
"""Score added for a conservative risk tolerance"""

SENTIMENT_BULLISH_ABOVE = 70
"""Scores above this are bullish"""

SENTIMENT_BEARISH_BELOW = 50
"""Scores below this are bearish"""

MAX_SENTIMENT_FACTORS = 4
"""Maximum factors listed with the sentiment"""

MAX_NEWS_ITEMS = 5
"""Maximum personalized news items"""

# ============================================================================
# SYNTHETIC CHART SERIES
# ============================================================================
# Illustrative random walk only. Never presented as historical data.

CHART_DAYS = 30
"""Number of daily points in the synthetic chart"""

CHART_SEED_DEFAULT = 42
"""Default seed for the chart random walk"""

CHART_NIFTY_BASE = 19350.0
"""Nifty 50 starting level for the random walk"""

CHART_SENSEX_BASE = 65000.0
"""Sensex starting level for the random walk"""

CHART_PORTFOLIO_BASE = 100.0
"""Portfolio index starting level"""

CHART_MAX_DAILY_MOVE_PCT = 1.0
"""Largest absolute benchmark move per day (%)"""

CHART_PORTFOLIO_BETA = 1.1
"""Portfolio sensitivity to the benchmark move"""

CHART_PORTFOLIO_NOISE_PCT = 0.25
"""Largest absolute idiosyncratic portfolio move per day (%)"""

UNKNOWN_SECTOR_PERFORMANCE = 0.0
"""Performance (%) used for sectors missing from the reference table"""

# ============================================================================
# RISK ANALYSIS
# ============================================================================

RISK_BASE_ANNUAL_VOLATILITY = 15.0
"""Annual equity volatility (%) used for VaR"""

RISK_DEBT_VOLATILITY = 5.0
"""Volatility (%) added for the non-equity sleeve"""

RISK_FREE_RATE = 6.5
"""Indian risk-free rate (%) for the Sharpe ratio"""

MARKET_VOLATILITY = 18.0
"""Nifty annual volatility (%) for beta"""

TRADING_DAYS_PER_YEAR = 252
"""Trading days per year"""

TRADING_DAYS_PER_MONTH = 21
"""Trading days per month"""

Z_SCORE_95 = 1.645
"""One-tailed z-score at 95% confidence"""

Z_SCORE_99 = 2.33
"""One-tailed z-score at 99% confidence"""

RISK_LEVEL_AGGRESSIVE_ABOVE = 70
"""Overall risk scores above this are aggressive"""

RISK_LEVEL_MODERATE_ABOVE = 40
"""Overall risk scores above this are moderate"""

# ============================================================================
# PERSONALIZED INSIGHTS
# ============================================================================

MAX_INSIGHTS = 12
"""Maximum insights returned, in rule order"""

INSIGHT_RETURN_EXCEPTIONAL = 15.0
"""Portfolio return (%) above which performance is exceptional"""

INSIGHT_RETURN_STRONG = 12.0
"""Portfolio return (%) above which performance is strong"""

INSIGHT_RETURN_MODERATE = 8.0
"""Portfolio return (%) above which performance is moderate"""

INSIGHT_RETURN_POOR = 5.0
"""Portfolio return (%) below which performance needs attention"""

INSIGHT_STOCK_WINNER_RETURN = 8.0
"""Best stock return (%) above which it is called out as a winner"""

INSIGHT_STOCK_LAGGARD_RETURN = -3.0
"""Worst stock return (%) below which it is called out as a laggard"""

INSIGHT_POSITION_LIMIT = 12.0
"""Single stock share (%) above which a concentration insight fires"""

INSIGHT_POSITION_TARGET = 8
"""Single stock share (%) suggested after trimming"""

INSIGHT_SECTOR_DOMINANT = 25.0
"""Largest sector share (%) above which an over-concentration insight fires"""

INSIGHT_SECTOR_TARGET = 20
"""Sector share (%) suggested after trimming"""

INSIGHT_IT_SECTOR_LIMIT = 20.0
"""Information Technology share (%) above which the IT insight fires"""

INSIGHT_FUND_WINNER_RETURN = 12.0
"""Best fund return (%) above which it is called out as outperforming"""

INSIGHT_FUND_LAGGARD_RETURN = 0.0
"""Worst fund return (%) below which it is called out as underperforming"""

INSIGHT_FUND_LAGGARD_TARGET = 8.0
"""Return (%) an underperforming fund is compared against"""

INSIGHT_SIP_DISCIPLINE = 20_000
"""Total monthly SIP (INR) above which SIP discipline is praised"""

INSIGHT_SIP_BENCHMARK = 15_000
"""Monthly SIP (INR) shown as the benchmark for SIP discipline"""

INSIGHT_LOW_COST_EXPENSE_RATIO = 0.75
"""Expense ratio (%) suggested when switching away from a costly fund"""

INSIGHT_ASSET_CRITICAL = 80.0
"""Asset class share (%) above which concentration is critical"""

INSIGHT_ASSET_HIGH = 70.0
"""Asset class share (%) above which concentration is high"""

INSIGHT_INTERNATIONAL_TRIGGER = 20.0
"""Asset class share (%) above which missing international exposure is noted"""

INSIGHT_INTERNATIONAL_TARGET = 12
"""International allocation (%) suggested"""

INSIGHT_GOAL_CRITICAL_PROGRESS = 25.0
"""Progress (%) below which a high priority goal is severely behind"""

INSIGHT_GOAL_BEHIND_PROGRESS = 50.0
"""Progress (%) below which a high priority goal needs attention"""

INSIGHT_GOAL_ALMOST_PROGRESS = 90.0
"""Progress (%) above which a goal is almost achieved"""

INSIGHT_YOUNG_AGE = 35
"""Ages below this are young investors"""

INSIGHT_YOUNG_EQUITY_FLOOR = 60.0
"""Equity (%) below which a young investor is too conservative"""

INSIGHT_YOUNG_EQUITY_TARGET = 75
"""Equity (%) suggested for a young investor"""

INSIGHT_SENIOR_AGE = 50
"""Ages above this are pre-retirement investors"""

INSIGHT_SENIOR_EQUITY_CEILING = 70.0
"""Equity (%) above which a pre-retirement investor is too aggressive"""

INSIGHT_SENIOR_EQUITY_TARGET = 60
"""Equity (%) suggested for a pre-retirement investor"""

INSIGHT_SMALL_PORTFOLIO = 100_000
"""Portfolio value (INR) below which the portfolio is just starting out"""

INSIGHT_GROWING_PORTFOLIO_MIN = 1_000_000
"""Portfolio value (INR) above which wealth accumulation is praised"""

INSIGHT_GROWING_PORTFOLIO_MAX = 5_000_000
"""Portfolio value (INR) below which wealth accumulation is praised"""

INSIGHT_FEW_ASSET_CLASSES = 3
"""Held asset classes below this count as poorly diversified"""

INSIGHT_MANY_ASSET_CLASSES = 5
"""Held asset classes at or above this count as well diversified"""

# ============================================================================
# LLM & LOGGING
# ============================================================================

LLM_MODEL_DEFAULT = "claude-haiku-4-5-20251001"
"""Anthropic model used for the optional insight narrative"""

LLM_TIMEOUT_SEC = 60.0
"""Timeout for a single LLM call"""

LOG_LEVEL_DEFAULT = "INFO"
"""Default logging level"""

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
"""Log line format used by the command line pipeline"""
