"""
User Context: Input Schema
Wealth Advisor Engine

Input contract shared by every pipeline: holdings, portfolio summary,
user/investment profile and financial goals. Missing arrays default to
empty, missing numbers to 0, age to 30 and risk tolerance to "moderate".
Derived holding values (current value, gain/loss) are filled in when the
caller only supplies quantities and prices.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from wealth_advisor.config.constants import (
    DEFAULT_AGE,
    DEFAULT_RISK_TOLERANCE,
    VALID_RISK_TOLERANCES,
)
from wealth_advisor.tools.sector_classifier import (
    classify_fund_category,
    classify_fund_house,
    classify_sector,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_GOAL_PRIORITIES = ("high", "medium", "low")

ASSET_CLASS_STOCKS = "stocks"
ASSET_CLASS_MUTUAL_FUNDS = "mutual_funds"


def _num(value: Any) -> float:
    """None -> 0.0, anything else through float()."""
    if value is None or value == "":
        return 0.0
    return float(value)


# ---------------------------------------------------------------------------
# Holdings
# ---------------------------------------------------------------------------

class StockHolding(BaseModel):
    """A directly held equity position."""

    symbol: str = Field(..., min_length=1)
    company_name: str = Field("")
    sector: str = Field("")
    quantity: float = Field(0.0, ge=0)
    avg_purchase_price: float = Field(0.0, ge=0)
    current_price: float = Field(0.0, ge=0)
    investment_amount: float = Field(0.0)
    current_value: float = Field(0.0)
    gain_loss: float = Field(0.0)
    gain_loss_percentage: float = Field(0.0)
    exchange: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def derive_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        symbol = str(data.get("symbol") or "").strip().upper()
        data["symbol"] = symbol

        quantity = _num(data.get("quantity"))
        avg_price = _num(data.get("avg_purchase_price"))
        price = _num(data.get("current_price"))

        if data.get("investment_amount") is None:
            data["investment_amount"] = quantity * avg_price
        if data.get("current_value") is None:
            data["current_value"] = quantity * price

        invested = _num(data["investment_amount"])
        value = _num(data["current_value"])
        if data.get("gain_loss") is None:
            data["gain_loss"] = value - invested
        if data.get("gain_loss_percentage") is None:
            data["gain_loss_percentage"] = (
                round(_num(data["gain_loss"]) / invested * 100, 2) if invested > 0 else 0.0
            )

        if not data.get("company_name"):
            data["company_name"] = symbol
        if not data.get("sector") and symbol:
            data["sector"] = classify_sector(symbol)
        return data


class MutualFundHolding(BaseModel):
    """A mutual fund position; category and fund house classified from the name."""

    scheme_name: str = Field(..., min_length=1)
    scheme_code: str = Field("")
    units: float = Field(0.0, ge=0)
    nav: float = Field(0.0, ge=0)
    investment_amount: float = Field(0.0)
    current_value: float = Field(0.0)
    gain_loss: float = Field(0.0)
    gain_loss_percentage: Optional[float] = None
    category: str = Field("")
    fund_house: str = Field("")
    expense_ratio: Optional[float] = Field(None, ge=0)
    sip_amount: float = Field(0.0, ge=0, description="Monthly SIP (INR)")

    @model_validator(mode="before")
    @classmethod
    def derive_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        name = str(data.get("scheme_name") or "").strip()
        data["scheme_name"] = name

        if data.get("current_value") is None:
            data["current_value"] = _num(data.get("units")) * _num(data.get("nav"))
        if data.get("investment_amount") is None:
            data["investment_amount"] = 0.0

        invested = _num(data["investment_amount"])
        value = _num(data["current_value"])
        if data.get("gain_loss") is None:
            data["gain_loss"] = value - invested if invested > 0 else 0.0
        if data.get("gain_loss_percentage") is None and invested > 0:
            data["gain_loss_percentage"] = round((value - invested) / invested * 100, 2)

        if data.get("sip_amount") is None:
            data["sip_amount"] = 0.0

        if not data.get("scheme_code"):
            data["scheme_code"] = name
        if not data.get("category") and name:
            data["category"] = classify_fund_category(name)
        if not data.get("fund_house") and name:
            data["fund_house"] = classify_fund_house(name)
        return data


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

class AssetAllocationEntry(BaseModel):
    value: float = Field(0.0)
    percentage: float = Field(0.0)


class PortfolioSummary(BaseModel):
    """Totals and asset-class split; recomputed each pass, never persisted."""

    total_investment: float = Field(0.0)
    total_current_value: float = Field(0.0)
    total_gain_loss: float = Field(0.0)
    gain_loss_percentage: float = Field(0.0)
    asset_allocation: Dict[str, AssetAllocationEntry] = Field(default_factory=dict)

    @field_validator("asset_allocation", mode="before")
    @classmethod
    def default_allocation(cls, v: Any) -> Any:
        return {} if v is None else v

    def allocation_pct(self, asset_class: str) -> float:
        """Percentage for one asset class, 0 when absent."""
        entry = self.asset_allocation.get(asset_class)
        return entry.percentage if entry is not None else 0.0


def compute_portfolio_summary(
    stocks: List[StockHolding],
    mutual_funds: List[MutualFundHolding],
) -> PortfolioSummary:
    """
    Derive totals and the stocks / mutual_funds allocation from holdings.

    Percentages are 0 for an empty portfolio rather than undefined.
    """
    stock_invested = sum(s.investment_amount for s in stocks)
    stock_value = sum(s.current_value for s in stocks)
    fund_invested = sum(f.investment_amount for f in mutual_funds)
    fund_value = sum(f.current_value for f in mutual_funds)

    total_invested = stock_invested + fund_invested
    total_value = stock_value + fund_value
    gain_loss = total_value - total_invested

    def _pct(part: float) -> float:
        return round(part / total_value * 100, 2) if total_value > 0 else 0.0

    return PortfolioSummary(
        total_investment=total_invested,
        total_current_value=total_value,
        total_gain_loss=gain_loss,
        gain_loss_percentage=round(gain_loss / total_invested * 100, 2) if total_invested > 0 else 0.0,
        asset_allocation={
            ASSET_CLASS_STOCKS: AssetAllocationEntry(value=stock_value, percentage=_pct(stock_value)),
            ASSET_CLASS_MUTUAL_FUNDS: AssetAllocationEntry(value=fund_value, percentage=_pct(fund_value)),
        },
    )


class Portfolio(BaseModel):
    stocks: List[StockHolding] = Field(default_factory=list)
    mutual_funds: List[MutualFundHolding] = Field(default_factory=list)
    summary: Optional[PortfolioSummary] = None

    @field_validator("stocks", "mutual_funds", mode="before")
    @classmethod
    def default_lists(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def fill_summary(self) -> "Portfolio":
        """Derive the summary, or the fields of it the caller omitted."""
        derived = compute_portfolio_summary(self.stocks, self.mutual_funds)
        if self.summary is None:
            self.summary = derived
            return self

        summary = self.summary
        supplied = set(summary.model_fields_set)
        for name in ("total_investment", "total_current_value"):
            if name not in supplied:
                setattr(summary, name, getattr(derived, name))
        if "total_gain_loss" not in supplied:
            summary.total_gain_loss = summary.total_current_value - summary.total_investment
        if "gain_loss_percentage" not in supplied:
            invested = summary.total_investment
            summary.gain_loss_percentage = (
                round(summary.total_gain_loss / invested * 100, 2) if invested > 0 else 0.0
            )
        if not summary.asset_allocation:
            summary.asset_allocation = derived.asset_allocation
        return self


# ---------------------------------------------------------------------------
# Profile & goals
# ---------------------------------------------------------------------------

class UserProfile(BaseModel):
    name: Optional[str] = None
    age: int = Field(DEFAULT_AGE, ge=0, le=120)

    @field_validator("age", mode="before")
    @classmethod
    def default_age(cls, v: Any) -> Any:
        return DEFAULT_AGE if v is None else v


class InvestmentProfile(BaseModel):
    risk_tolerance: str = Field(DEFAULT_RISK_TOLERANCE)
    investment_horizon: Optional[str] = None

    @field_validator("risk_tolerance", mode="before")
    @classmethod
    def normalize_risk_tolerance(cls, v: Any) -> str:
        if v is None or str(v).strip() == "":
            return DEFAULT_RISK_TOLERANCE
        value = str(v).strip().lower()
        if value not in VALID_RISK_TOLERANCES:
            raise ValueError(
                f"risk_tolerance must be one of {VALID_RISK_TOLERANCES}, got '{v}'"
            )
        return value


class Goal(BaseModel):
    """A financial goal; owned by the goals subsystem, read-only here."""

    id: str = Field(...)
    name: str = Field(..., min_length=1)
    target_amount: float = Field(0.0, ge=0)
    current_amount: float = Field(0.0, ge=0)
    target_date: Optional[date] = None
    priority: str = Field("medium")
    progress_percentage: float = Field(0.0)
    category: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> str:
        return str(v)

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> str:
        value = "medium" if v is None else str(v).strip().lower()
        if value not in VALID_GOAL_PRIORITIES:
            raise ValueError(f"priority must be one of {VALID_GOAL_PRIORITIES}, got '{v}'")
        return value

    @model_validator(mode="before")
    @classmethod
    def derive_progress(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("progress_percentage") is None:
            data = dict(data)
            target = _num(data.get("target_amount"))
            current = _num(data.get("current_amount"))
            data["progress_percentage"] = current / target * 100 if target > 0 else 0.0
        return data

    @property
    def remaining_amount(self) -> float:
        return self.target_amount - self.current_amount


class FinancialGoals(BaseModel):
    goals: List[Goal] = Field(default_factory=list)

    @field_validator("goals", mode="before")
    @classmethod
    def default_goals(cls, v: Any) -> Any:
        return [] if v is None else v


# ---------------------------------------------------------------------------
# Top-level Input
# ---------------------------------------------------------------------------

class UserContext(BaseModel):
    """Everything the engines read for one user, for one request."""

    portfolio: Portfolio = Field(default_factory=Portfolio)
    user_profile: UserProfile = Field(default_factory=UserProfile)
    investment_profile: InvestmentProfile = Field(default_factory=InvestmentProfile)
    financial_goals: FinancialGoals = Field(default_factory=FinancialGoals)

    @field_validator(
        "portfolio", "user_profile", "investment_profile", "financial_goals",
        mode="before",
    )
    @classmethod
    def default_sections(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def stocks(self) -> List[StockHolding]:
        return self.portfolio.stocks

    @property
    def mutual_funds(self) -> List[MutualFundHolding]:
        return self.portfolio.mutual_funds

    @property
    def summary(self) -> PortfolioSummary:
        # Portfolio.fill_summary guarantees a summary after validation.
        return self.portfolio.summary  # type: ignore[return-value]

    @property
    def goals(self) -> List[Goal]:
        return self.financial_goals.goals

    @property
    def age(self) -> int:
        return self.user_profile.age

    @property
    def risk_tolerance(self) -> str:
        return self.investment_profile.risk_tolerance

    @property
    def has_holdings(self) -> bool:
        return bool(self.portfolio.stocks or self.portfolio.mutual_funds)
