"""Tests for the SBA-enhanced strategist."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.sba_guide import SBABusinessGuideIntegrator, get_major_sba_programs
from app.core.sba_strategy import (
    DEFAULT_ORG_PROFILE,
    UFAExpertStrategistWithSBA,
    assess_program_readiness_alignment,
    estimate_preparation_time,
    generate_sba_implementation_timeline,
    generate_sba_strategic_recommendations,
    get_stage_specific_guidance,
    process_sba_programs,
)

STARTUP_PROFILE = {
    "business_stage": "startup",
    "sba_loan_readiness": 70,
    "innovation_focus": True,
    "overall_readiness": 65,
}


@pytest.fixture
def integrator():
    integrator = SBABusinessGuideIntegrator(use_browser=False)
    integrator.programs = {p["name"]: p for p in get_major_sba_programs()}
    return integrator


@pytest.fixture
def startup_programs(integrator):
    return integrator.find_relevant_sba_programs(STARTUP_PROFILE)


class TestProgramMatching:
    def test_startup_matches_sorted_by_strategic_value(self, startup_programs):
        names = [p["name"] for p in startup_programs]
        assert names == ["SBA 7(a) Loan Program", "SBIR/STTR Programs", "SBA Microloans"]

    def test_default_profile_stage_has_no_major_program(self, integrator):
        assert integrator.find_relevant_sba_programs(DEFAULT_ORG_PROFILE) == []


class TestStrategicRecommendations:
    def test_loan_and_innovation(self, startup_programs):
        recs = generate_sba_strategic_recommendations(startup_programs, STARTUP_PROFILE)

        assert [r["category"] for r in recs] == ["sba_loans", "innovation_funding"]
        loan = recs[0]
        assert loan["title"] == "Strategic SBA 7(a) Loan Program Application"
        assert loan["timeline"] == "12 weeks"
        assert loan["potential_return"] == 5_000_000
        assert loan["success_probability"] == 60
        assert loan["investment_required"] == 25_000

    def test_low_loan_readiness_skips_loan(self, startup_programs):
        profile = {**STARTUP_PROFILE, "sba_loan_readiness": 59}
        recs = generate_sba_strategic_recommendations(startup_programs, profile)

        assert [r["category"] for r in recs] == ["innovation_funding"]

    def test_no_innovation_focus(self, startup_programs):
        profile = {**STARTUP_PROFILE, "innovation_focus": False}
        recs = generate_sba_strategic_recommendations(startup_programs, profile)

        assert [r["category"] for r in recs] == ["sba_loans"]


class TestReadinessAndTimeline:
    def test_preparation_time_floor(self):
        assert estimate_preparation_time({"application_complexity": 2}, {"overall_readiness": 65}) == 30
        assert estimate_preparation_time({"application_complexity": 5}, {"overall_readiness": 65}) == 117.5
        # Missing values default to complexity 3 and readiness 60
        assert estimate_preparation_time({}, {}) == 60

    def test_alignment_levels(self, startup_programs):
        alignment = assess_program_readiness_alignment(startup_programs, STARTUP_PROFILE)

        assert alignment["SBA 7(a) Loan Program"]["readiness_level"] == "medium"
        assert alignment["SBIR/STTR Programs"]["score"] == 50
        assert alignment["SBIR/STTR Programs"]["readiness_level"] == "low"
        assert alignment["SBA Microloans"]["score"] == 70

    def test_implementation_timeline_buckets(self, startup_programs):
        timeline = generate_sba_implementation_timeline(startup_programs, STARTUP_PROFILE)

        assert [a["program"] for a in timeline["immediate_actions"]] == ["SBA Microloans"]
        assert timeline["immediate_actions"][0]["deadline"] == "Rolling basis"
        assert [a["program"] for a in timeline["short_term"]] == ["SBA 7(a) Loan Program"]
        assert [a["program"] for a in timeline["medium_term"]] == ["SBIR/STTR Programs"]
        assert timeline["long_term"] == []

    def test_process_programs(self, startup_programs):
        summary = process_sba_programs(startup_programs, STARTUP_PROFILE)

        # 7(a) $5M + SBIR $1.75M + Microloans $50k
        assert summary["totalAvailable"] == 6_800_000
        assert summary["programCount"] == 3
        assert len(summary["categories"]["loan_programs"]) == 1
        assert summary["categories"]["investment_programs"] == []
        assert summary["dataSource"] == "SBA.gov Programs + Business Guide"

    def test_unknown_stage_guidance_falls_back(self):
        guidance = get_stage_specific_guidance({"business_stage": "unknown"})
        assert guidance["timeline"] == "3-9 months for growth funding"


class TestStrategistWithSBA:
    def test_disabled_returns_base_landscape(self, integrator):
        strategist = UFAExpertStrategistWithSBA(
            "tenant-1", sba_integrator=integrator, use_sba_intelligence=False
        )
        landscape = strategist.analyze_funding_landscape(STARTUP_PROFILE)

        assert "sbaIntelligence" not in landscape
        assert "sba_programs" not in landscape["channelAnalysis"]

    def test_enabled_blends_sba_channel(self, integrator):
        strategist = UFAExpertStrategistWithSBA(
            "tenant-1", sba_integrator=integrator, use_sba_intelligence=True
        )
        landscape = strategist.analyze_funding_landscape(STARTUP_PROFILE)

        assert landscape["dataQuality"] == "LIVE+SBA"
        assert landscape["channelAnalysis"]["sba_programs"]["programCount"] == 3
        assert "sba_readiness" in landscape["channelAnalysis"]
        assert len(landscape["sbaIntelligence"]["recommended_programs"]) == 3

    def test_sba_channel_counts_as_opportunity(self, integrator):
        strategist = UFAExpertStrategistWithSBA(
            "tenant-1",
            analysis_timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc),
            sba_integrator=integrator,
            use_sba_intelligence=True,
        )
        analysis = strategist.run_analysis(STARTUP_PROFILE)
        ids = [o["id"] for o in analysis["opportunities"]["medium_priority"]]

        assert "gen_sba_programs" in ids
        assert "gen_sba_readiness" not in ids
        assert analysis["opportunities"]["total_opportunities"] == 12

    def test_enhancement_failure_keeps_base(self, integrator):
        integrator.find_relevant_sba_programs = MagicMock(side_effect=RuntimeError("boom"))
        strategist = UFAExpertStrategistWithSBA(
            "tenant-1", sba_integrator=integrator, use_sba_intelligence=True
        )
        landscape = strategist.analyze_funding_landscape(STARTUP_PROFILE)

        assert "sbaIntelligence" not in landscape
        assert "federal_grants" in landscape["channelAnalysis"]

    @pytest.mark.asyncio
    async def test_initialize_builds_knowledge_base(self, integrator):
        integrator.build_sba_knowledge_base = AsyncMock(return_value={"success": True})
        strategist = UFAExpertStrategistWithSBA(
            "tenant-1", sba_integrator=integrator, use_sba_intelligence=True
        )

        assert await strategist.initialize_sba_intelligence() == {"success": True}
        integrator.build_sba_knowledge_base.assert_awaited_once()
