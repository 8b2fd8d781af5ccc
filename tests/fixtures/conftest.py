"""
Shared test fixtures for the Wealth Advisor tests.
Provides a realistic sample investor, holding builders and file helpers.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from wealth_advisor.schemas.portfolio_input import UserContext

FIXTURES_DIR = Path(__file__).parent
REPO_ROOT = FIXTURES_DIR.parent.parent
SAMPLE_CONTEXT_FILE = REPO_ROOT / "data" / "sample_user_context.json"

# Fixed reference date so goal timelines do not drift with the calendar.
TODAY = date(2026, 10, 18)


# Five NSE stocks, 97,770 INR current value in total
SAMPLE_STOCKS = [
    {"symbol": "INFY", "company_name": "Infosys Limited", "quantity": 15, "avg_purchase_price": 1450, "current_price": 1520, "sector": "Information Technology"},
    {"symbol": "HDFCBANK", "company_name": "HDFC Bank Limited", "quantity": 8, "avg_purchase_price": 1680, "current_price": 1750, "sector": "Banking"},
    {"symbol": "RELIANCE", "company_name": "Reliance Industries Limited", "quantity": 6, "avg_purchase_price": 2800, "current_price": 2920, "sector": "Oil & Gas"},
    {"symbol": "TCS", "company_name": "Tata Consultancy Services", "quantity": 5, "avg_purchase_price": 3850, "current_price": 4100, "sector": "Information Technology"},
    {"symbol": "BAJFINANCE", "company_name": "Bajaj Finance Limited", "quantity": 3, "avg_purchase_price": 7200, "current_price": 7650, "sector": "Financial Services"},
]

SAMPLE_FUNDS = [
    {"scheme_name": "SBI Bluechip Fund - Direct Growth", "scheme_code": "SBI-BC-DG", "units": 450.75, "nav": 78.50, "investment_amount": 32000, "category": "Large Cap", "expense_ratio": 0.65, "sip_amount": 8000},
    {"scheme_name": "Axis Midcap Fund - Direct Growth", "scheme_code": "AXIS-MC-DG", "units": 380.25, "nav": 65.20, "investment_amount": 22000, "category": "Mid Cap", "expense_ratio": 0.85, "sip_amount": 5000},
    {"scheme_name": "Mirae Asset Large & Midcap Fund - Direct Growth", "scheme_code": "MIRAE-LM-DG", "units": 285.60, "nav": 125.80, "investment_amount": 30000, "category": "Large & Mid Cap", "expense_ratio": 0.75, "sip_amount": 7000},
    {"scheme_name": "HDFC Hybrid Equity Fund - Direct Growth", "scheme_code": "HDFC-HE-DG", "units": 320.90, "nav": 95.60, "investment_amount": 28000, "category": "Hybrid", "expense_ratio": 0.68, "sip_amount": 6000},
    {"scheme_name": "Parag Parikh Flexi Cap Fund - Direct Growth", "scheme_code": "PPFAS-FC-DG", "units": 180.45, "nav": 78.90, "investment_amount": 12000, "category": "Flexi Cap", "expense_ratio": 0.72, "sip_amount": 3000},
]

SAMPLE_GOALS = [
    {"id": "emergency_fund", "name": "Emergency Fund", "priority": "High", "target_amount": 600000, "current_amount": 350000, "target_date": "2027-06-30"},
    {"id": "house_down_payment", "name": "House Down Payment", "priority": "High", "target_amount": 1500000, "current_amount": 425000, "target_date": "2029-12-31"},
    {"id": "retirement_planning", "name": "Retirement Corpus", "priority": "Medium", "target_amount": 50000000, "current_amount": 785000, "target_date": "2051-06-01"},
    {"id": "vacation_fund", "name": "Europe Vacation", "priority": "Low", "target_amount": 400000, "current_amount": 125000, "target_date": "2027-06-30"},
]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_stock(symbol: str, value: float, sector: Optional[str] = None, **overrides: Any) -> dict:
    """Stock dict worth `value` INR (1 share at `value`), bought at cost."""
    stock = {
        "symbol": symbol,
        "quantity": 1,
        "avg_purchase_price": value,
        "current_price": value,
    }
    if sector is not None:
        stock["sector"] = sector
    stock.update(overrides)
    return stock


def make_fund(
    scheme_name: str,
    value: float,
    invested: Optional[float] = None,
    category: Optional[str] = None,
    **overrides: Any,
) -> dict:
    """Fund dict with current_value `value` and investment `invested` (default: value)."""
    fund = {
        "scheme_name": scheme_name,
        "current_value": value,
        "investment_amount": value if invested is None else invested,
    }
    if category is not None:
        fund["category"] = category
    fund.update(overrides)
    return fund


def make_goal(goal_id: str, target: float, current: float,
              target_date: Optional[str] = None, priority: str = "high") -> dict:
    return {
        "id": goal_id,
        "name": goal_id.replace("_", " ").title(),
        "target_amount": target,
        "current_amount": current,
        "target_date": target_date,
        "priority": priority,
    }


def make_context(
    stocks: Optional[list[dict]] = None,
    funds: Optional[list[dict]] = None,
    goals: Optional[list[dict]] = None,
    age: Optional[int] = 30,
    risk: Optional[str] = "moderate",
) -> UserContext:
    return UserContext.model_validate({
        "portfolio": {"stocks": stocks or [], "mutual_funds": funds or []},
        "user_profile": {"age": age},
        "investment_profile": {"risk_tolerance": risk},
        "financial_goals": {"goals": goals or []},
    })


def sample_context(age: int = 28, risk: str = "moderate") -> UserContext:
    """The bundled sample investor: 5 stocks, 5 funds, 4 goals."""
    return make_context(SAMPLE_STOCKS, SAMPLE_FUNDS, SAMPLE_GOALS, age=age, risk=risk)


def sample_context_dict() -> dict:
    return json.loads(SAMPLE_CONTEXT_FILE.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Holdings export helpers
# ---------------------------------------------------------------------------

_EXPORT_COLUMN_MAP = {
    "symbol": "Symbol",
    "quantity": "Qty",
    "avg_purchase_price": "Avg Price",
    "current_price": "LTP",
    "scheme_name": "Scheme Name",
    "units": "Units",
    "nav": "NAV",
    "investment_amount": "Invested",
    "expense_ratio": "Expense Ratio",
}


def create_holdings_csv(filepath: Path, rows: list[dict]) -> Path:
    """Write a broker-style holdings CSV using export column headers."""
    df = pd.DataFrame(rows)
    df = df.rename(columns={k: v for k, v in _EXPORT_COLUMN_MAP.items() if k in df.columns})
    df.to_csv(filepath, index=False)
    return filepath


def create_holdings_xlsx(filepath: Path, rows: list[dict]) -> Path:
    df = pd.DataFrame(rows)
    df = df.rename(columns={k: v for k, v in _EXPORT_COLUMN_MAP.items() if k in df.columns})
    df.to_excel(filepath, index=False, engine="openpyxl")
    return filepath
