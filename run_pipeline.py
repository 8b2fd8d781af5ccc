"""Run the Wealth Advisor pipelines for one investor and write the reports.

Usage:
    python run_pipeline.py                                   # bundled sample investor
    python run_pipeline.py --context data/me.json            # user context JSON
    python run_pipeline.py --holdings holdings.xlsx --age 41 --risk conservative
    python run_pipeline.py --llm --today 2026-10-18 --output results
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Type

sys.path.insert(0, str(Path(__file__).parent / "src"))

from dotenv import load_dotenv
load_dotenv()

import pandas as pd
from openpyxl.styles import Font, PatternFill
from pydantic import BaseModel

from wealth_advisor.agents.market_analyst import run_market_analysis_pipeline
from wealth_advisor.agents.portfolio_advisor import run_recommendation_pipeline
from wealth_advisor.agents.risk_officer import run_insights_pipeline, run_risk_pipeline
from wealth_advisor.config.constants import (
    CHART_SEED_DEFAULT,
    LLM_MODEL_DEFAULT,
    LOG_FORMAT,
    LOG_LEVEL_DEFAULT,
    VALID_RISK_TOLERANCES,
)
from wealth_advisor.exceptions import EnvConfigError, OutputWriteError
from wealth_advisor.schemas.insights_output import PortfolioInsightsOutput
from wealth_advisor.schemas.market_analysis_output import MarketAnalysisOutput
from wealth_advisor.schemas.portfolio_input import UserContext
from wealth_advisor.schemas.recommendation_output import RecommendationOutput
from wealth_advisor.schemas.risk_output import RiskAnalysisOutput
from wealth_advisor.tools.portfolio_reader import (
    build_user_context,
    load_user_context,
    read_holdings_table,
)
from wealth_advisor.tools.token_tracker import tracker as token_tracker

logger = logging.getLogger("run_pipeline")

DEFAULT_CONTEXT = Path(__file__).parent / "data" / "sample_user_context.json"


# ---------------------------------------------------------------------------
# Report Registry: maps report name to snapshot metadata
# ---------------------------------------------------------------------------

@dataclass
class ReportSpec:
    name: str
    output_type: Type[BaseModel]
    snapshot_file: str


REPORT_REGISTRY: dict[str, ReportSpec] = {
    "market":          ReportSpec("market",          MarketAnalysisOutput, "market_analysis.json"),
    "recommendations": ReportSpec("recommendations", RecommendationOutput, "recommendations.json"),
    "risk":            ReportSpec("risk",            RiskAnalysisOutput,   "risk_analysis.json"),
    "insights":        ReportSpec("insights",        PortfolioInsightsOutput, "portfolio_insights.json"),
}


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def configure_logging() -> int:
    """Configure the root logger from WEALTH_ADVISOR_LOG_LEVEL."""
    name = os.environ.get("WEALTH_ADVISOR_LOG_LEVEL", LOG_LEVEL_DEFAULT).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise EnvConfigError(f"WEALTH_ADVISOR_LOG_LEVEL='{name}' is not a logging level")
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level


# ---------------------------------------------------------------------------
# Snapshot Save
# ---------------------------------------------------------------------------

def _save_snapshot(output: BaseModel, report: str, snapshots_dir: Path) -> Path:
    """Save a report as a JSON snapshot."""
    spec = REPORT_REGISTRY[report]
    filepath = snapshots_dir / spec.snapshot_file
    try:
        filepath.write_text(output.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"Cannot write {filepath}: {e}") from e
    return filepath


def load_snapshot(report: str, snapshots_dir: Path) -> BaseModel:
    """Load a report back from its JSON snapshot."""
    spec = REPORT_REGISTRY[report]
    filepath = snapshots_dir / spec.snapshot_file
    return spec.output_type.model_validate_json(filepath.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Wealth Advisor: market analysis, recommendations, risk and insights for one investor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  python run_pipeline.py                                     sample investor
  python run_pipeline.py --context data/me.json              your own context
  python run_pipeline.py --holdings holdings.csv --age 41    broker export
  python run_pipeline.py --llm                               LLM summary (needs ANTHROPIC_API_KEY)
""",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--context", default=None,
        help=f"User context JSON (default: {DEFAULT_CONTEXT.relative_to(Path(__file__).parent)})",
    )
    source.add_argument(
        "--holdings", default=None,
        help="CSV / Excel holdings export instead of a context JSON",
    )
    parser.add_argument(
        "--age", type=int, default=None,
        help="Investor age, used with --holdings",
    )
    parser.add_argument(
        "--risk", default=None, choices=VALID_RISK_TOLERANCES,
        help="Risk tolerance, used with --holdings",
    )
    parser.add_argument(
        "--output", default="output",
        help="Output directory (default: output)",
    )
    parser.add_argument(
        "--seed", type=int, default=CHART_SEED_DEFAULT,
        help=f"Seed for the synthetic chart (default: {CHART_SEED_DEFAULT})",
    )
    parser.add_argument(
        "--llm", action="store_true", default=False,
        help="Write the recommendation summary with an LLM when available",
    )
    parser.add_argument(
        "--today", type=date.fromisoformat, default=None,
        help="Analysis date as YYYY-MM-DD (default: today)",
    )
    return parser.parse_args(argv)


def _load_context(
    context_path: Optional[str],
    holdings_path: Optional[str],
    age: Optional[int],
    risk: Optional[str],
) -> UserContext:
    if holdings_path:
        table = read_holdings_table(holdings_path)
        for err in table.errors:
            logger.warning(f"Skipped row {err.context.get('row')}: {err.message}")
        print(f"[Input] {table.source_file}: {len(table.stocks)} stocks, "
              f"{len(table.mutual_funds)} funds, {len(table.errors)} rows skipped")
        return build_user_context(table, age=age, risk_tolerance=risk)

    ctx = load_user_context(context_path or DEFAULT_CONTEXT)
    print(f"[Input] {context_path or DEFAULT_CONTEXT}: {len(ctx.stocks)} stocks, "
          f"{len(ctx.mutual_funds)} funds, {len(ctx.goals)} goals")
    return ctx


# ---------------------------------------------------------------------------
# Excel Writers
# ---------------------------------------------------------------------------

_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(start_color="B8CCE4", end_color="B8CCE4", fill_type="solid")
_GREEN = PatternFill(start_color="90EE90", end_color="90EE90", fill_type="solid")
_YELLOW = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
_RED = PatternFill(start_color="FF6B6B", end_color="FF6B6B", fill_type="solid")


def _style_sheet(ws, max_width: int = 40) -> None:
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
    for col in ws.columns:
        max_len = max(len(str(c.value or "")) for c in col)
        ws.column_dimensions[col[0].column_letter].width = min(max_len + 3, max_width)


def _color_column(ws, header: str, fills: dict[str, PatternFill]) -> None:
    """Fill cells of the named column by their value."""
    col_idx = None
    for cell in ws[1]:
        if cell.value == header:
            col_idx = cell.column
            break
    if col_idx is None:
        return
    for row_idx in range(2, ws.max_row + 1):
        cell = ws.cell(row=row_idx, column=col_idx)
        fill = fills.get(str(cell.value))
        if fill is not None:
            cell.fill = fill


def _write_workbook(filepath: Path, sheets: list[tuple[str, pd.DataFrame]],
                    colors: Optional[dict[str, tuple[str, dict[str, PatternFill]]]] = None) -> Path:
    """Write named DataFrames to one workbook; empty frames are skipped."""
    colors = colors or {}
    try:
        with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
            for sheet_name, df in sheets:
                if df.empty:
                    continue
                df.to_excel(writer, sheet_name=sheet_name, index=False)
                ws = writer.sheets[sheet_name]
                _style_sheet(ws)
                if sheet_name in colors:
                    header, fills = colors[sheet_name]
                    _color_column(ws, header, fills)
    except OSError as e:
        raise OutputWriteError(f"Cannot write {filepath.name}: {e}") from e
    return filepath


def _write_market_excel(market: MarketAnalysisOutput, out_path: Path) -> Path:
    """Write the market analysis to its own Excel file."""
    filepath = out_path / f"market_analysis_{market.analysis_date}.xlsx"

    s = market.market_sentiment
    pi = market.portfolio_impact
    summary_rows = [
        {"Field": "Analysis Date", "Value": market.analysis_date},
        {"Field": "Sentiment Score", "Value": s.score},
        {"Field": "Trend", "Value": s.trend},
        {"Field": "Sentiment Factors", "Value": "; ".join(s.factors)},
        {"Field": "", "Value": ""},
        {"Field": "Total Impact (INR)", "Value": pi.total_impact},
        {"Field": "Positive Impact (INR)", "Value": pi.positive_impact},
        {"Field": "Negative Impact (INR)", "Value": pi.negative_impact},
        {"Field": "", "Value": ""},
        {"Field": "Chart Data", "Value": "Synthetic (illustrative only)" if market.synthetic else "Historical"},
    ]

    index_rows = [
        {"Index": name, "Value": idx.value, "Change": idx.change, "Change %": idx.change_percent}
        for name, idx in market.indices.items()
    ]

    sector_rows = [
        {
            "Sector": sa.name,
            "Exposure %": sa.user_exposure,
            "Performance %": sa.performance,
            "Outlook": sa.outlook,
            "Call": sa.recommendation,
            "Impact %": sa.impact_on_portfolio,
            "Stocks Held": sa.stocks_held,
            "Reasoning": sa.reasoning,
        }
        for sa in market.sectors
    ]

    impact_rows = [
        {"Sector": si.sector, "Movement %": si.movement, "Value (INR)": si.value, "Impact (INR)": si.impact}
        for si in pi.sector_impacts
    ]

    news_rows = [
        {"Headline": n.title, "Impact": n.impact, "Relevance": n.relevance,
         "Source": n.source, "Why": n.reason or ""}
        for n in market.news_summary
    ]

    chart_rows = [
        {"Date": p.date.isoformat(), "Nifty 50": p.nifty, "Sensex": p.sensex, "Portfolio": p.portfolio}
        for p in market.chart_data
    ]

    outlook_fills = {"bullish": _GREEN, "neutral": _YELLOW, "bearish": _RED}
    return _write_workbook(
        filepath,
        [
            ("Summary", pd.DataFrame(summary_rows)),
            ("Indices", pd.DataFrame(index_rows)),
            ("Sectors", pd.DataFrame(sector_rows)),
            ("Portfolio Impact", pd.DataFrame(impact_rows)),
            ("News", pd.DataFrame(news_rows)),
            ("Chart (synthetic)", pd.DataFrame(chart_rows)),
        ],
        colors={"Sectors": ("Outlook", outlook_fills)},
    )


def _write_recommendation_excel(recs: RecommendationOutput, out_path: Path) -> Path:
    """Write the recommendations to their own Excel file."""
    filepath = out_path / f"recommendations_{recs.analysis_date}.xlsx"

    summary_rows = [
        {"Field": "Analysis Date", "Value": recs.analysis_date},
        {"Field": "Next Review", "Value": recs.next_review_date},
        {"Field": "Recommendations", "Value": f"{len(recs.recommendations)} of {recs.total_candidates}"},
        {"Field": "Summary Source", "Value": recs.summary_source},
        {"Field": "", "Value": ""},
        {"Field": "Summary", "Value": recs.summary},
    ]

    rec_rows = [
        {
            "Rank": rank,
            "Priority": r.priority,
            "Impact": r.impact_score,
            "Type": r.type,
            "Title": r.title,
            "Current %": r.current_allocation,
            "Recommended %": r.recommended_allocation,
            "Amount (INR)": r.amount_suggestion,
            "Timeframe": r.timeframe,
            "Risk": r.risk_level,
            "Source": r.source,
            "Description": r.description,
            "Reasoning": "; ".join(r.reasoning),
        }
        for rank, r in enumerate(recs.recommendations, start=1)
    ]

    rb = recs.rebalance_data
    rebalance_rows = [
        {
            "Bucket": bucket,
            "Current %": rb.current[bucket],
            "Recommended %": rb.recommended[bucket],
            "Difference": rb.difference[bucket],
        }
        for bucket in rb.current
    ]

    priority_fills = {"high": _RED, "medium": _YELLOW, "low": _GREEN}
    return _write_workbook(
        filepath,
        [
            ("Summary", pd.DataFrame(summary_rows)),
            ("Recommendations", pd.DataFrame(rec_rows)),
            ("Rebalance", pd.DataFrame(rebalance_rows)),
        ],
        colors={"Recommendations": ("Priority", priority_fills)},
    )


def _write_risk_excel(risk: RiskAnalysisOutput, out_path: Path) -> Path:
    """Write the risk analysis to its own Excel file."""
    filepath = out_path / f"risk_analysis_{risk.analysis_date}.xlsx"

    m = risk.metrics
    v = risk.var_analysis
    sc = risk.scores
    summary_rows = [
        {"Field": "Analysis Date", "Value": risk.analysis_date},
        {"Field": "Overall Risk", "Value": f"{m.overall_score}/100 ({m.risk_level})"},
        {"Field": "", "Value": ""},
        {"Field": "--- Component Scores ---", "Value": ""},
        {"Field": "Concentration", "Value": m.concentration_risk},
        {"Field": "Sector", "Value": m.sector_risk},
        {"Field": "Volatility", "Value": m.volatility_score},
        {"Field": "Credit", "Value": m.credit_risk},
        {"Field": "Liquidity", "Value": m.liquidity_risk},
        {"Field": "Currency", "Value": m.currency_risk},
        {"Field": "", "Value": ""},
        {"Field": "--- Value at Risk ---", "Value": ""},
        {"Field": "Daily VaR 95%", "Value": v.daily_var_95},
        {"Field": "Daily VaR 99%", "Value": v.daily_var_99},
        {"Field": "Monthly VaR 95%", "Value": v.monthly_var_95},
        {"Field": "Max Drawdown %", "Value": v.max_drawdown},
        {"Field": "Sharpe Ratio", "Value": v.sharpe_ratio},
        {"Field": "Beta", "Value": v.beta},
        {"Field": "", "Value": ""},
        {"Field": "--- Portfolio Scores ---", "Value": ""},
        {"Field": "Portfolio Score", "Value": sc.portfolio_score},
        {"Field": "Diversification Score", "Value": sc.diversification_score},
        {"Field": "Market Outlook", "Value": sc.market_outlook},
    ]

    factor_rows = [
        {"Factor": f.name, "Score": f.score, "Status": f.status,
         "Description": f.description, "Recommendation": f.recommendation}
        for f in risk.factors
    ]

    stress_rows = [
        {"Scenario": s.scenario, "Impact %": round(s.impact * 100, 2), "Probability": s.probability}
        for s in risk.stress_test
    ]

    radar_rows = [
        {"Category": p.category, "Current": p.current, "Optimal": p.optimal}
        for p in risk.radar_data
    ]

    status_fills = {"good": _GREEN, "moderate": _YELLOW, "high": _RED}
    return _write_workbook(
        filepath,
        [
            ("Summary", pd.DataFrame(summary_rows)),
            ("Risk Factors", pd.DataFrame(factor_rows)),
            ("Stress Tests", pd.DataFrame(stress_rows)),
            ("Radar", pd.DataFrame(radar_rows)),
        ],
        colors={"Risk Factors": ("Status", status_fills)},
    )


def _write_insights_excel(insights: PortfolioInsightsOutput, out_path: Path) -> Path:
    """Write the personalized insights to their own Excel file."""
    filepath = out_path / f"portfolio_insights_{insights.analysis_date}.xlsx"

    sc = insights.scores
    summary_rows = [
        {"Field": "Analysis Date", "Value": insights.analysis_date},
        {"Field": "Next Review", "Value": insights.next_review_date},
        {"Field": "Insights", "Value": len(insights.insights)},
        {"Field": "Actionable", "Value": sum(1 for i in insights.insights if i.actionable)},
        {"Field": "", "Value": ""},
        {"Field": "--- Portfolio Scores ---", "Value": ""},
        {"Field": "Portfolio Score", "Value": sc.portfolio_score},
        {"Field": "Risk Score", "Value": sc.risk_score},
        {"Field": "Diversification Score", "Value": sc.diversification_score},
        {"Field": "Market Outlook", "Value": sc.market_outlook},
    ]

    insight_rows = [
        {
            "Impact": i.impact,
            "Type": i.type,
            "Source": i.source,
            "Title": i.title,
            "Confidence": i.confidence,
            "Current": i.data.current_value if i.data else "",
            "Target": i.data.target_value if i.data else "",
            "Change": i.data.change if i.data else "",
            "Description": i.description,
            "Recommendation": i.recommendation or "",
        }
        for i in insights.insights
    ]

    impact_fills = {"high": _RED, "medium": _YELLOW, "low": _GREEN}
    return _write_workbook(
        filepath,
        [
            ("Summary", pd.DataFrame(summary_rows)),
            ("Insights", pd.DataFrame(insight_rows)),
        ],
        colors={"Insights": ("Impact", impact_fills)},
    )


def _write_token_usage_excel(output_dir: Path) -> str | None:
    """Write token usage report to Excel if any LLM calls were tracked."""
    if not token_tracker.has_records:
        return None

    filepath = output_dir / "token_usage.xlsx"
    summary = token_tracker.get_summary()
    model = os.environ.get("WEALTH_ADVISOR_LLM_MODEL", LLM_MODEL_DEFAULT)

    summary_data = [
        {"Metric": "Total Input Tokens", "Value": f"{summary['total_input_tokens']:,}"},
        {"Metric": "Total Output Tokens", "Value": f"{summary['total_output_tokens']:,}"},
        {"Metric": "Total Tokens", "Value": f"{summary['total_tokens']:,}"},
        {"Metric": "Estimated Cost ($)", "Value": f"${summary['estimated_cost_usd']:.4f}"},
        {"Metric": "Number of LLM Calls", "Value": str(summary["num_calls"])},
        {"Metric": "Model", "Value": model},
        {"Metric": "Pipeline Run Date", "Value": str(date.today())},
    ]

    def _rows(groups: list[dict], labels: tuple[str, ...]) -> list[dict]:
        rows = [
            {
                **{label.title(): g[label] for label in labels},
                "Input Tokens": g["input_tokens"],
                "Output Tokens": g["output_tokens"],
                "Total Tokens": g["total_tokens"],
                "Cost ($)": g["cost_usd"],
                "Calls": g["calls"],
            }
            for g in groups
        ]
        # Totals row
        rows.append({
            **{label.title(): ("TOTAL" if i == 0 else "") for i, label in enumerate(labels)},
            "Input Tokens": summary["total_input_tokens"],
            "Output Tokens": summary["total_output_tokens"],
            "Total Tokens": summary["total_tokens"],
            "Cost ($)": summary["estimated_cost_usd"],
            "Calls": summary["num_calls"],
        })
        return rows

    component_rows = _rows(token_tracker.get_by_component(), ("component",))
    function_rows = _rows(token_tracker.get_by_function(), ("component", "function"))

    try:
        with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
            pd.DataFrame(summary_data).to_excel(writer, sheet_name="Summary", index=False)
            _style_sheet(writer.sheets["Summary"], max_width=25)

            for sheet_name, rows in (("By Component", component_rows), ("By Function", function_rows)):
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
                ws = writer.sheets[sheet_name]
                _style_sheet(ws)
                # Bold totals row
                for cell in ws[len(rows) + 1]:
                    cell.font = Font(bold=True)
                for cell in ws[1]:
                    if cell.value == "Cost ($)":
                        for row in range(2, len(rows) + 2):
                            ws.cell(row=row, column=cell.column).number_format = "$#,##0.0000"
                    elif cell.value in ("Input Tokens", "Output Tokens", "Total Tokens", "Calls"):
                        for row in range(2, len(rows) + 2):
                            ws.cell(row=row, column=cell.column).number_format = "#,##0"
    except OSError as e:
        raise OutputWriteError(f"Cannot write {filepath.name}: {e}") from e

    return str(filepath)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(
    context_path: Optional[str] = None,
    holdings_path: Optional[str] = None,
    age: Optional[int] = None,
    risk: Optional[str] = None,
    output_dir: str = "output",
    seed: int = CHART_SEED_DEFAULT,
    use_llm: bool = False,
    today: Optional[date] = None,
) -> dict[str, BaseModel]:
    today = today or date.today()
    out_path = Path(output_dir)
    snapshots_dir = out_path / "snapshots"
    try:
        snapshots_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(f"Cannot create output directory {out_path}: {e}") from e

    ctx = _load_context(context_path, holdings_path, age, risk)

    # ===== Market Analyst =====
    market_output = run_market_analysis_pipeline(ctx, seed=seed, today=today)
    _save_snapshot(market_output, "market", snapshots_dir)
    market_file = _write_market_excel(market_output, out_path)
    print(f"[Market Analyst] Saved: {market_file}")

    # ===== Portfolio Advisor =====
    rec_output = run_recommendation_pipeline(ctx, today=today, use_llm=use_llm)
    _save_snapshot(rec_output, "recommendations", snapshots_dir)
    rec_file = _write_recommendation_excel(rec_output, out_path)
    print(f"[Portfolio Advisor] Saved: {rec_file}")

    # ===== Risk Officer =====
    risk_output = run_risk_pipeline(ctx, today=today)
    _save_snapshot(risk_output, "risk", snapshots_dir)
    risk_file = _write_risk_excel(risk_output, out_path)
    print(f"[Risk Officer] Saved: {risk_file}")

    insights_output = run_insights_pipeline(ctx, today=today)
    _save_snapshot(insights_output, "insights", snapshots_dir)
    insights_file = _write_insights_excel(insights_output, out_path)
    print(f"[Risk Officer] Saved: {insights_file}")

    # ===== Token Usage Report =====
    token_file = _write_token_usage_excel(out_path)
    if token_file:
        summary = token_tracker.get_summary()
        print(f"\n[Tokens] {summary['num_calls']} LLM calls, "
              f"{summary['total_tokens']:,} tokens, "
              f"${summary['estimated_cost_usd']:.4f}")
        print(f"[Tokens] Saved: {token_file}")

    print(f"\nOutput directory: {out_path}/")
    return {
        "market": market_output,
        "recommendations": rec_output,
        "risk": risk_output,
        "insights": insights_output,
    }


if __name__ == "__main__":
    args = parse_args()
    configure_logging()
    main(
        context_path=args.context,
        holdings_path=args.holdings,
        age=args.age,
        risk=args.risk,
        output_dir=args.output,
        seed=args.seed,
        use_llm=args.llm,
        today=args.today,
    )
