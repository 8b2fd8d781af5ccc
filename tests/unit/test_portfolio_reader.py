"""
Portfolio Reader Tests
Level 1: JSON user context loading and validation errors.
Level 2: CSV / XLSX holdings exports, column aliases, skipped rows.
"""

from __future__ import annotations

import json

import pytest

from wealth_advisor.exceptions import (
    ErrorSeverity,
    HoldingsReadError,
    InputValidationError,
)
from wealth_advisor.tools.portfolio_reader import (
    HoldingsTable,
    build_user_context,
    load_user_context,
    parse_user_context,
    read_holdings_table,
)

from tests.fixtures.conftest import (
    SAMPLE_CONTEXT_FILE,
    create_holdings_csv,
    create_holdings_xlsx,
)

STOCK_ROW = {"symbol": "TCS", "quantity": 5, "avg_purchase_price": 3850, "current_price": 4100}
FUND_ROW = {
    "scheme_name": "SBI Bluechip Fund - Direct Growth",
    "units": 100,
    "nav": 78.5,
    "investment_amount": 7000,
}


# ---------------------------------------------------------------------------
# JSON user context
# ---------------------------------------------------------------------------

class TestLoadUserContext:

    @pytest.mark.schema
    def test_sample_file(self):
        ctx = load_user_context(SAMPLE_CONTEXT_FILE)
        assert len(ctx.stocks) == 5
        assert len(ctx.mutual_funds) == 5
        assert len(ctx.goals) == 4
        assert ctx.age == 28
        assert ctx.risk_tolerance == "moderate"

    @pytest.mark.schema
    def test_missing_file(self, tmp_path):
        with pytest.raises(HoldingsReadError, match="Unable to open"):
            load_user_context(tmp_path / "nope.json")

    @pytest.mark.schema
    def test_invalid_json(self, tmp_path):
        path = tmp_path / "ctx.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InputValidationError, match="not valid JSON"):
            load_user_context(path)

    @pytest.mark.schema
    def test_schema_mismatch(self, tmp_path):
        path = tmp_path / "ctx.json"
        path.write_text(json.dumps({"investment_profile": {"risk_tolerance": "yolo"}}), encoding="utf-8")
        with pytest.raises(InputValidationError, match="risk_tolerance"):
            load_user_context(path)

    @pytest.mark.schema
    def test_parse_none_gives_defaults(self):
        ctx = parse_user_context(None)
        assert ctx.age == 30
        assert ctx.risk_tolerance == "moderate"
        assert not ctx.has_holdings


# ---------------------------------------------------------------------------
# Holdings table
# ---------------------------------------------------------------------------

class TestReadHoldingsTable:

    @pytest.mark.behavior
    def test_csv_stocks_and_funds(self, tmp_path):
        path = create_holdings_csv(tmp_path / "holdings.csv", [STOCK_ROW, FUND_ROW])
        table = read_holdings_table(path)
        assert table.source_file == "holdings.csv"
        assert table.errors == []

        stock = table.stocks[0]
        assert stock.symbol == "TCS"
        assert stock.current_value == pytest.approx(20_500)
        assert stock.sector == "Information Technology"

        fund = table.mutual_funds[0]
        assert fund.current_value == pytest.approx(7_850)
        assert fund.category == "Large Cap Fund"
        assert fund.fund_house == "SBI Mutual Fund"

    @pytest.mark.behavior
    def test_xlsx(self, tmp_path):
        path = create_holdings_xlsx(tmp_path / "holdings.xlsx", [STOCK_ROW, FUND_ROW])
        table = read_holdings_table(path)
        assert len(table.stocks) == 1
        assert len(table.mutual_funds) == 1

    @pytest.mark.behavior
    def test_bad_rows_skipped_with_row_numbers(self, tmp_path):
        rows = [
            STOCK_ROW,
            {"symbol": "INFY", "quantity": "abc", "avg_purchase_price": 1450, "current_price": 1520},
            {"symbol": None, "quantity": 3},
            {"symbol": "HDFCBANK", "quantity": -1, "avg_purchase_price": 1, "current_price": 1},
        ]
        table = read_holdings_table(create_holdings_csv(tmp_path / "h.csv", rows))
        assert [s.symbol for s in table.stocks] == ["TCS"]
        assert [e.context["row"] for e in table.errors] == [3, 4, 5]
        for error in table.errors:
            assert error.error_type == "ROW_PARSE_ERROR"
            assert error.severity == ErrorSeverity.WARNING
            assert error.file_name == "h.csv"

    @pytest.mark.behavior
    def test_aliases_case_insensitive_and_currency_text(self, tmp_path):
        path = tmp_path / "broker.csv"
        path.write_text(
            'TRADINGSYMBOL,Qty.,Avg. cost,ltp\n'
            'RELIANCE,"1,000","₹2,800.00",2920\n',
            encoding="utf-8",
        )
        stock = read_holdings_table(path).stocks[0]
        assert stock.symbol == "RELIANCE"
        assert stock.quantity == 1000
        assert stock.avg_purchase_price == pytest.approx(2800.0)
        assert stock.current_value == pytest.approx(2_920_000)

    @pytest.mark.behavior
    def test_numeric_codes_read_as_text(self, tmp_path):
        # blanks in each code column make pandas parse the codes as floats
        rows = [
            {"symbol": 500325, "quantity": 2, "avg_purchase_price": 2800, "current_price": 2920},
            {**FUND_ROW, "scheme_code": 119551},
        ]
        table = read_holdings_table(create_holdings_csv(tmp_path / "bse.csv", rows))
        assert table.errors == []
        assert table.stocks[0].symbol == "500325"
        assert table.mutual_funds[0].scheme_code == "119551"

    @pytest.mark.behavior
    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(HoldingsReadError, match="Unsupported"):
            read_holdings_table(tmp_path / "holdings.txt")

    @pytest.mark.behavior
    def test_missing_file(self, tmp_path):
        with pytest.raises(HoldingsReadError, match="Unable to read"):
            read_holdings_table(tmp_path / "missing.csv")

    @pytest.mark.behavior
    def test_no_usable_columns(self, tmp_path):
        path = tmp_path / "junk.csv"
        path.write_text("Foo,Bar\n1,2\n", encoding="utf-8")
        with pytest.raises(HoldingsReadError, match="neither a symbol nor a scheme name"):
            read_holdings_table(path)


class TestBuildUserContext:

    @pytest.mark.behavior
    def test_defaults_and_summary(self, tmp_path):
        table = read_holdings_table(create_holdings_csv(tmp_path / "h.csv", [STOCK_ROW, FUND_ROW]))
        ctx = build_user_context(table)
        assert ctx.age == 30
        assert ctx.risk_tolerance == "moderate"
        assert ctx.summary.total_current_value == pytest.approx(28_350)

    @pytest.mark.behavior
    def test_profile_and_goals(self):
        goals = [{"id": "car", "name": "Car", "target_amount": 500_000, "current_amount": 100_000}]
        ctx = build_user_context(HoldingsTable(), age=52, risk_tolerance="Aggressive", goals=goals)
        assert ctx.age == 52
        assert ctx.risk_tolerance == "aggressive"
        assert ctx.goals[0].progress_percentage == pytest.approx(20.0)

    @pytest.mark.behavior
    def test_invalid_risk(self):
        with pytest.raises(InputValidationError):
            build_user_context(HoldingsTable(), risk_tolerance="reckless")
