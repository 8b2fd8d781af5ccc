"""
Agentic Mode Tests
Builders refuse to run without crewai; the crewai tools wrap the
deterministic pipelines and return their JSON.
"""

from __future__ import annotations

import json

import pytest

from wealth_advisor.agents import market_analyst, portfolio_advisor, risk_officer

from tests.fixtures.conftest import sample_context_dict


class TestBuildersWithoutCrewai:

    @pytest.mark.schema
    @pytest.mark.parametrize("module,builder", [
        (market_analyst, "build_market_analyst_agent"),
        (portfolio_advisor, "build_portfolio_advisor_agent"),
        (risk_officer, "build_risk_officer_agent"),
    ])
    def test_agent_builder_requires_crewai(self, monkeypatch, module, builder):
        monkeypatch.setattr(module, "HAS_CREWAI", False)
        with pytest.raises(ImportError, match="crewai is required"):
            getattr(module, builder)()

    @pytest.mark.schema
    @pytest.mark.parametrize("module,builder", [
        (market_analyst, "build_market_analysis_task"),
        (portfolio_advisor, "build_recommendation_task"),
        (risk_officer, "build_risk_task"),
    ])
    def test_task_builder_requires_crewai(self, monkeypatch, module, builder):
        monkeypatch.setattr(module, "HAS_CREWAI", False)
        with pytest.raises(ImportError, match="crewai is required"):
            getattr(module, builder)(None)


class TestCrewTools:

    @pytest.fixture
    def crew_tools(self):
        pytest.importorskip("crewai")
        from wealth_advisor.tools import crew_tools
        return crew_tools

    @pytest.mark.schema
    def test_market_tool(self, crew_tools):
        result = json.loads(crew_tools.MarketAnalysisTool()._run(json.dumps(sample_context_dict())))
        assert result["synthetic"] is True
        assert len(result["chart_data"]) == 30

    @pytest.mark.schema
    def test_recommendation_tool(self, crew_tools):
        result = json.loads(crew_tools.RecommendationTool()._run(json.dumps(sample_context_dict())))
        assert result["summary_source"] == "deterministic"
        assert len(result["recommendations"]) <= 8

    @pytest.mark.schema
    def test_risk_tool(self, crew_tools):
        result = json.loads(crew_tools.RiskAnalysisTool()._run(json.dumps(sample_context_dict())))
        assert result["scores"]["risk_score"] == result["metrics"]["overall_score"]

    @pytest.mark.schema
    def test_insights_tool(self, crew_tools):
        result = json.loads(crew_tools.PortfolioInsightsTool()._run(json.dumps(sample_context_dict())))
        assert 0 < len(result["insights"]) <= 12
        assert "portfolio_score" in result["scores"]

    @pytest.mark.schema
    def test_tool_names(self, crew_tools):
        assert crew_tools.MarketAnalysisTool().name == "market_analysis"
        assert crew_tools.RecommendationTool().name == "portfolio_recommendations"
        assert crew_tools.RiskAnalysisTool().name == "risk_analysis"
        assert crew_tools.PortfolioInsightsTool().name == "portfolio_insights"
