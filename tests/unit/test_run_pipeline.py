"""
Command Line Pipeline Tests
End-to-end run over the sample investor and a holdings export, snapshot
reload, Excel workbooks, argument parsing and log level configuration.
"""

from __future__ import annotations

import logging
from datetime import date

import pytest
from openpyxl import load_workbook

import run_pipeline
from wealth_advisor.exceptions import EnvConfigError
from wealth_advisor.schemas.recommendation_output import RecommendationOutput
from wealth_advisor.tools.token_tracker import tracker

from tests.fixtures.conftest import SAMPLE_CONTEXT_FILE, TODAY, create_holdings_csv


@pytest.fixture(autouse=True)
def clean_tracker():
    tracker.reset()
    yield
    tracker.reset()


@pytest.mark.integration
class TestMain:

    def test_sample_run_writes_reports(self, tmp_path):
        results = run_pipeline.main(
            context_path=str(SAMPLE_CONTEXT_FILE), output_dir=str(tmp_path), today=TODAY,
        )
        assert set(results) == {"market", "recommendations", "risk", "insights"}

        for name in (
            "market_analysis.json", "recommendations.json",
            "risk_analysis.json", "portfolio_insights.json",
        ):
            assert (tmp_path / "snapshots" / name).exists()

        market_book = load_workbook(tmp_path / "market_analysis_2026-10-18.xlsx")
        assert market_book.sheetnames == [
            "Summary", "Indices", "Sectors", "Portfolio Impact", "News", "Chart (synthetic)",
        ]
        rec_book = load_workbook(tmp_path / "recommendations_2026-10-18.xlsx")
        assert rec_book.sheetnames == ["Summary", "Recommendations", "Rebalance"]
        risk_book = load_workbook(tmp_path / "risk_analysis_2026-10-18.xlsx")
        assert risk_book.sheetnames == ["Summary", "Risk Factors", "Stress Tests", "Radar"]
        insights_book = load_workbook(tmp_path / "portfolio_insights_2026-10-18.xlsx")
        assert insights_book.sheetnames == ["Summary", "Insights"]

        # no LLM calls, no token report
        assert not (tmp_path / "token_usage.xlsx").exists()

    def test_snapshot_reloads(self, tmp_path):
        results = run_pipeline.main(
            context_path=str(SAMPLE_CONTEXT_FILE), output_dir=str(tmp_path), today=TODAY,
        )
        restored = run_pipeline.load_snapshot("recommendations", tmp_path / "snapshots")
        assert isinstance(restored, RecommendationOutput)
        assert restored == results["recommendations"]

        insights = run_pipeline.load_snapshot("insights", tmp_path / "snapshots")
        assert insights == results["insights"]

    def test_holdings_export(self, tmp_path):
        holdings = create_holdings_csv(tmp_path / "holdings.csv", [
            {"symbol": "TCS", "quantity": 5, "avg_purchase_price": 3850, "current_price": 4100},
            {"scheme_name": "Axis Midcap Fund - Direct Growth", "units": 100, "nav": 65.2,
             "investment_amount": 6000},
        ])
        results = run_pipeline.main(
            holdings_path=str(holdings), age=41, risk="conservative",
            output_dir=str(tmp_path / "out"), today=TODAY,
        )
        rec = results["recommendations"]
        assert rec.rebalance_data.recommended["Debt"] == 30
        assert (tmp_path / "out" / "risk_analysis_2026-10-18.xlsx").exists()

    def test_token_report_written_after_llm_call(self, tmp_path):
        class _Usage:
            input_tokens = 400
            output_tokens = 100

        class _Response:
            usage = _Usage()

        tracker.track("generate_insight_narrative_llm", _Response(), "claude-haiku-4-5")
        path = run_pipeline._write_token_usage_excel(tmp_path)
        book = load_workbook(path)
        assert book.sheetnames == ["Summary", "By Component", "By Function"]


class TestParseArgs:

    def test_defaults(self):
        args = run_pipeline.parse_args([])
        assert args.context is None
        assert args.holdings is None
        assert args.output == "output"
        assert args.seed == 42
        assert args.llm is False
        assert args.today is None

    def test_holdings_options(self):
        args = run_pipeline.parse_args([
            "--holdings", "h.xlsx", "--age", "41", "--risk", "aggressive",
            "--today", "2026-10-18", "--llm",
        ])
        assert args.holdings == "h.xlsx"
        assert args.age == 41
        assert args.risk == "aggressive"
        assert args.today == date(2026, 10, 18)
        assert args.llm is True

    def test_context_and_holdings_exclusive(self):
        with pytest.raises(SystemExit):
            run_pipeline.parse_args(["--context", "a.json", "--holdings", "b.csv"])

    def test_bad_risk_rejected(self):
        with pytest.raises(SystemExit):
            run_pipeline.parse_args(["--risk", "reckless"])


class TestConfigureLogging:

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("WEALTH_ADVISOR_LOG_LEVEL", "debug")
        assert run_pipeline.configure_logging() == logging.DEBUG

    def test_default_level(self, monkeypatch):
        monkeypatch.delenv("WEALTH_ADVISOR_LOG_LEVEL", raising=False)
        assert run_pipeline.configure_logging() == logging.INFO

    def test_unknown_level(self, monkeypatch):
        monkeypatch.setenv("WEALTH_ADVISOR_LOG_LEVEL", "LOUD")
        with pytest.raises(EnvConfigError):
            run_pipeline.configure_logging()
