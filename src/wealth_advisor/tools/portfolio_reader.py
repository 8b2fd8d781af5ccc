"""
Portfolio Reader
Load a user context from JSON, or build holdings from a CSV / Excel
holdings export.

Table rows with a scheme name become mutual funds; rows with a symbol
become stocks. A row that fails to parse is skipped and recorded as a
ProcessingError instead of aborting the whole import.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import pydantic

from wealth_advisor.exceptions import (
    ClassificationError,
    ErrorSeverity,
    HoldingsReadError,
    InputValidationError,
    ProcessingError,
    wrap_exception_as_processing_error,
)
from wealth_advisor.schemas.portfolio_input import (
    MutualFundHolding,
    StockHolding,
    UserContext,
)

logger = logging.getLogger(__name__)

SUPPORTED_TABLE_SUFFIXES = (".csv", ".xlsx", ".xls")

# Export headers vary by broker / registrar; first alias present wins.
COLUMN_ALIASES: dict[str, list[str]] = {
    "symbol": ["Symbol", "Tradingsymbol", "Trading Symbol", "Instrument", "Ticker"],
    "company_name": ["Company Name", "Company", "Name of Security"],
    "sector": ["Sector", "Industry"],
    "exchange": ["Exchange"],
    "quantity": ["Quantity", "Qty", "Qty.", "Shares"],
    "avg_purchase_price": ["Avg Price", "Avg. cost", "Average Price", "Avg Cost", "Buy Price"],
    "current_price": ["LTP", "Current Price", "Last Price", "Market Price"],
    "scheme_name": ["Scheme Name", "Fund Name", "Scheme", "Fund"],
    "scheme_code": ["Scheme Code", "ISIN", "AMFI Code"],
    "units": ["Units", "Balance Units"],
    "nav": ["NAV", "Current NAV"],
    "category": ["Category", "Fund Category"],
    "expense_ratio": ["Expense Ratio", "TER"],
    "sip_amount": ["SIP Amount", "SIP", "Monthly SIP"],
    "investment_amount": ["Invested", "Investment Amount", "Cost Value", "Invested Value"],
    "current_value": ["Current Value", "Market Value", "Cur. val", "Present Value"],
    "gain_loss_percentage": ["Gain %", "Returns %", "P&L %", "Net chg."],
}

STOCK_FIELDS = (
    "symbol", "company_name", "sector", "exchange", "quantity",
    "avg_purchase_price", "current_price", "investment_amount",
    "current_value", "gain_loss_percentage",
)
FUND_FIELDS = (
    "scheme_name", "scheme_code", "units", "nav", "category", "expense_ratio",
    "sip_amount", "investment_amount", "current_value", "gain_loss_percentage",
)
NUMERIC_FIELDS = {
    "quantity", "avg_purchase_price", "current_price", "units", "nav",
    "expense_ratio", "sip_amount", "investment_amount", "current_value",
    "gain_loss_percentage",
}


@dataclass
class HoldingsTable:
    """Result of a holdings import."""

    stocks: list[StockHolding] = field(default_factory=list)
    mutual_funds: list[MutualFundHolding] = field(default_factory=list)
    errors: list[ProcessingError] = field(default_factory=list)
    source_file: str = ""


# ---------------------------------------------------------------------------
# JSON user context
# ---------------------------------------------------------------------------

def _validation_message(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_user_context(data: Any) -> UserContext:
    """
    Validate a decoded user context.

    Raises:
        InputValidationError: the data does not match the schema.
    """
    if data is None:
        data = {}
    try:
        return UserContext.model_validate(data)
    except pydantic.ValidationError as e:
        raise InputValidationError(_validation_message(e)) from e


def load_user_context(path: str | Path) -> UserContext:
    """
    Read and validate a user context JSON file.

    Raises:
        HoldingsReadError: the file cannot be opened.
        InputValidationError: the file is not JSON or fails validation.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise HoldingsReadError(f"Unable to open {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputValidationError(f"{path.name} is not valid JSON: {e}") from e

    ctx = parse_user_context(data)
    logger.info(
        f"Loaded user context from {path.name}: {len(ctx.stocks)} stocks, "
        f"{len(ctx.mutual_funds)} funds, {len(ctx.goals)} goals"
    )
    return ctx


# ---------------------------------------------------------------------------
# Holdings table
# ---------------------------------------------------------------------------

def _find_column(df: pd.DataFrame, target: str) -> Optional[str]:
    """Column in df matching a known alias (exact, then case-insensitive)."""
    aliases = COLUMN_ALIASES.get(target, [target])
    lowered = {str(col).strip().lower(): col for col in df.columns}
    for alias in [target, *aliases]:
        if alias in df.columns:
            return alias
        col = lowered.get(alias.lower())
        if col is not None:
            return col
    return None


def _cell(row: pd.Series, column: Optional[str], numeric: bool) -> Any:
    if column is None:
        return None
    value = row[column]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
        if numeric:
            value = value.replace(",", "").replace("%", "").replace("₹", "")
    # numpy scalars from pandas become plain Python values here
    if numeric:
        return float(value)
    # codes in a column with blanks are parsed as floats: 500325.0 -> "500325"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_TABLE_SUFFIXES:
        raise HoldingsReadError(
            f"Unsupported holdings file type '{suffix}', expected one of {SUPPORTED_TABLE_SUFFIXES}"
        )
    try:
        if suffix == ".csv":
            return pd.read_csv(path)
        return pd.read_excel(path, engine="openpyxl")
    except (OSError, ValueError) as e:
        raise HoldingsReadError(f"Unable to read {path.name}: {e}") from e


def read_holdings_table(path: str | Path) -> HoldingsTable:
    """
    Read a CSV / XLSX holdings export into stock and fund holdings.

    Returns:
        HoldingsTable with parsed holdings and one ProcessingError per
        skipped row.

    Raises:
        HoldingsReadError: the file cannot be read or has no usable columns.
    """
    path = Path(path)
    df = _read_frame(path)
    columns = {name: _find_column(df, name) for name in COLUMN_ALIASES}

    if columns["symbol"] is None and columns["scheme_name"] is None:
        raise HoldingsReadError(
            f"{path.name} has neither a symbol nor a scheme name column "
            f"(columns: {list(df.columns)})"
        )

    result = HoldingsTable(source_file=path.name)
    for idx, row in df.iterrows():
        row_number = int(idx) + 2  # header is row 1
        try:
            values = {
                name: _cell(row, col, name in NUMERIC_FIELDS)
                for name, col in columns.items()
            }
            if values.get("scheme_name"):
                result.mutual_funds.append(MutualFundHolding.model_validate(
                    {k: values[k] for k in FUND_FIELDS if values.get(k) is not None}
                ))
            elif values.get("symbol"):
                result.stocks.append(StockHolding.model_validate(
                    {k: values[k] for k in STOCK_FIELDS if values.get(k) is not None}
                ))
            else:
                raise ClassificationError(
                    f"Row {row_number} has neither symbol nor scheme name"
                )
        except (ValueError, TypeError, ClassificationError) as e:
            # pydantic.ValidationError is a ValueError subclass
            error = wrap_exception_as_processing_error(
                e,
                file_name=path.name,
                error_type="ROW_PARSE_ERROR",
                severity=ErrorSeverity.WARNING,
                context={"row": row_number},
            )
            result.errors.append(error)
            logger.warning(f"Skipping row {row_number} in {path.name}: {e}")

    logger.info(
        f"Read {path.name}: {len(result.stocks)} stocks, "
        f"{len(result.mutual_funds)} funds, {len(result.errors)} rows skipped"
    )
    return result


def build_user_context(
    table: HoldingsTable,
    age: Optional[int] = None,
    risk_tolerance: Optional[str] = None,
    goals: Optional[list[dict]] = None,
) -> UserContext:
    """Wrap imported holdings in a UserContext; the summary is derived."""
    return parse_user_context({
        "portfolio": {
            "stocks": [s.model_dump() for s in table.stocks],
            "mutual_funds": [f.model_dump() for f in table.mutual_funds],
        },
        "user_profile": {"age": age},
        "investment_profile": {"risk_tolerance": risk_tolerance},
        "financial_goals": {"goals": goals or []},
    })
