"""Tests for natural-language UFA query handling."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.sba_guide import get_major_sba_programs
from app.services.ufa_query_handler import (
    FUNDING_OPTIONS_FALLBACK,
    GENERAL_FALLBACK,
    OUTER_ERROR_MESSAGE,
    UFAQueryHandler,
    determine_guidance_categories,
    process_ufa_query,
)

READY_PROFILE = {
    "has_business_plan": True,
    "has_financial_statements": True,
    "credit_score": 720,
    "has_collateral": True,
    "years_experience": 5,
    "owner_equity_percent": 25,
}

ANALYSIS_OK = {
    "ok": True,
    "analysis": {
        "expertStrategies": [
            {
                "title": "Strategic Foundation Portfolio Development",
                "priority": "high",
                "timeline": "18-24 months",
                "potential_return": 1_200_000,
                "description": "Build diversified foundation funding base with relationship focus",
            }
        ]
    },
}


@pytest.fixture
def sba():
    integrator = MagicMock()
    integrator.load_programs.return_value = get_major_sba_programs()
    return integrator


@pytest.fixture
def grants():
    return MagicMock()


@pytest.fixture
def handler(sba, grants):
    return UFAQueryHandler(sba_integrator=sba, grants_integrator=grants)


class TestGuidanceCategories:
    @pytest.mark.parametrize(
        "query,stage,expected",
        [
            ("how do I start", "established", ["business_planning", "business_formation"]),
            ("anything", "startup", ["business_planning", "business_formation"]),
            ("we want to grow", "established", ["growth_strategies", "business_operations"]),
            ("need a loan", "established", ["funding_strategies", "financial_planning"]),
            ("anything", "established", ["business_planning", "funding_strategies"]),
        ],
    )
    def test_categories(self, query, stage, expected):
        assert determine_guidance_categories(query, stage) == expected


class TestSBALoans:
    @pytest.mark.asyncio
    async def test_lists_loan_programs(self, handler):
        result = await handler.process_query("tenant-1", "Tell me about SBA loans")

        assert result["success"] is True
        assert result["data"]["queryType"] == "sba_loans"
        assert [p["name"] for p in result["data"]["programs"]] == ["SBA 7(a) Loan Program", "SBA 504 Loan Program"]
        assert "**1. SBA 7(a) Loan Program**" in result["message"]
        assert "• Success Rate: Medium" in result["message"]
        assert "• Success Rate: Lower" in result["message"]
        assert result["data"]["recommendations"][0]["next_steps"] == ["Strong credit history", "Solid business plan"]

    @pytest.mark.asyncio
    async def test_failure_falls_back(self, handler, sba):
        sba.load_programs.side_effect = RuntimeError("db down")

        result = await handler.process_query("tenant-1", "microloan options")

        assert result["success"] is False
        assert result["fallback"] is True


class TestSBAGuidance:
    @pytest.mark.asyncio
    async def test_guidance_with_callouts(self, handler, sba):
        sba.load_knowledge.return_value = {
            "business_planning": {
                "description": "Strategic business planning and startup guidance",
                "insights": [{"content": "Write a plan before you seek money"}],
                "strategic_recommendations": [{"action": "Use SBA business plan templates"}],
            }
        }

        result = await handler.process_query("tenant-1", "How to start a business?")

        assert result["data"]["queryType"] == "sba_guidance"
        assert len(result["data"]["guidance"]) == 1
        assert "**Strategic business planning and startup guidance**" in result["message"]
        assert "💡 Key Points:" in result["message"]
        assert "• Use SBA business plan templates" in result["message"]


class TestFederalGrants:
    @pytest.mark.asyncio
    async def test_basics_and_insights(self, handler, grants):
        grants.load_knowledge.return_value = {
            "fundamentals": {"description": "Core grant knowledge and concepts"},
            "federal_strategy": {"insights": [{"content": "Focus on two or three agencies"}]},
        }

        result = await handler.process_query("tenant-1", "Any federal grant programs?")

        assert result["data"]["queryType"] == "federal_grants"
        assert "**Federal Grant Basics:**\nCore grant knowledge and concepts" in result["message"]
        assert "• Focus on two or three agencies..." in result["message"]

    @pytest.mark.asyncio
    async def test_grant_process_shares_handler(self, handler, grants):
        grants.load_knowledge.return_value = {}

        result = await handler.process_query("tenant-1", "What is the grant process?")

        assert result["data"]["queryType"] == "federal_grants"


class TestReadiness:
    @pytest.mark.asyncio
    async def test_ready_profile(self, handler):
        result = await handler.process_query("tenant-1", "Am I ready for funding?", user_profile=READY_PROFILE)

        assert result["data"]["queryType"] == "readiness_check"
        assert "**Overall Readiness: High**" in result["message"]
        assert "**Score: 100/100**" in result["message"]

    @pytest.mark.asyncio
    async def test_next_steps_use_readiness(self, handler):
        result = await handler.process_query("tenant-1", "What should I do now?")

        assert result["data"]["readiness"]["level"] == "Low"


class TestAnalysisBackedAnswers:
    @pytest.mark.asyncio
    async def test_funding_options(self, handler):
        with patch(
            "app.services.ufa_query_handler.run_expert_funding_analysis", AsyncMock(return_value=ANALYSIS_OK)
        ) as run:
            result = await handler.process_query("tenant-1", "Where can I find capital?", user_profile={"a": 1})

        run.assert_awaited_once_with("tenant-1", {"a": 1})
        assert result["data"]["queryType"] == "funding_options"
        assert "• Potential Impact: $1,200,000" in result["message"]

    @pytest.mark.asyncio
    async def test_funding_options_fallback(self, handler):
        with patch(
            "app.services.ufa_query_handler.run_expert_funding_analysis", AsyncMock(return_value={"ok": False})
        ):
            result = await handler.process_query("tenant-1", "financing ideas")

        assert result == {"success": False, "message": FUNDING_OPTIONS_FALLBACK, "fallback": True}

    @pytest.mark.asyncio
    async def test_general(self, handler):
        with patch(
            "app.services.ufa_query_handler.run_expert_funding_analysis", AsyncMock(return_value=ANALYSIS_OK)
        ):
            result = await handler.process_query("tenant-1", "hello there")

        assert result["data"]["queryType"] == "general"
        assert result["message"].startswith(
            "I've analyzed your funding situation. Build diversified foundation funding base"
        )

    @pytest.mark.asyncio
    async def test_general_fallback(self, handler):
        with patch(
            "app.services.ufa_query_handler.run_expert_funding_analysis", AsyncMock(return_value={"ok": False})
        ):
            result = await handler.process_query("tenant-1", "hello there")

        assert result["success"] is True
        assert result["message"] == GENERAL_FALLBACK
        assert result["data"] == {"queryType": "general_fallback"}


class TestErrors:
    @pytest.mark.asyncio
    async def test_unexpected_error(self, handler):
        with patch("app.services.ufa_query_handler.classify_query", side_effect=RuntimeError("boom")):
            result = await handler.process_query("tenant-1", "anything")

        assert result == {"success": False, "message": OUTER_ERROR_MESSAGE, "error": "boom"}


@pytest.mark.asyncio
async def test_process_ufa_query_passes_user_profile():
    with (
        patch("app.services.ufa_query_handler.SBABusinessGuideIntegrator"),
        patch("app.services.ufa_query_handler.GrantsGovLearningIntegrator"),
        patch(
            "app.services.ufa_query_handler.run_expert_funding_analysis", AsyncMock(return_value={"ok": False})
        ) as run,
    ):
        await process_ufa_query("tenant-1", "hello", {"userProfile": {"business_age_years": 3}})

    run.assert_awaited_once_with("tenant-1", {"business_age_years": 3})
