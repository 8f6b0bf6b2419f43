"""Tests for grants.gov learning content processing."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.grants_gov_learning import (
    GrantsGovLearningIntegrator,
    categorize_content,
    extract_actionable_insights,
    generate_strategic_recommendations,
    process_into_ufa_intelligence,
    scraping_method_used,
)

SECTION_HTML = """
<div class="content-section">
  <h2>Grant Policies</h2>
  <p>Applicants must register in SAM before they apply. Read carefully.</p>
  <p class="note">Registration can take several weeks</p>
</div>
<div class="content-section"><p>No heading here</p></div>
"""


def _item(content, tips=None, category="compliance_requirements"):
    return {"category": category, "title": "Policies", "content": content, "tips": tips or []}


class TestCategorize:
    def test_known_sections(self):
        assert categorize_content("/learn-grants/grant-policies") == "compliance_requirements"
        assert categorize_content("/learn-grants/application-submission-tips") == "success_tactics"

    def test_unknown_section(self):
        assert categorize_content("/search") == "general"


class TestInsights:
    def test_first_rule_wins(self):
        # Mentions both a deadline and a requirement; timing is checked first
        insights = extract_actionable_insights(_item("You must submit before the deadline closes"))

        assert [i["type"] for i in insights] == ["timing_strategy"]
        assert insights[0]["priority"] == "high"

    def test_compliance_and_best_practice(self):
        content = "Applicants must register in SAM first. Applicants should review past awards."
        insights = extract_actionable_insights(_item(content))

        assert [i["type"] for i in insights] == ["compliance_requirement", "best_practice"]
        assert insights[0]["priority"] == "critical"
        assert insights[1]["content"] == "Applicants should review past awards"

    def test_short_sentences_and_tips(self):
        insights = extract_actionable_insights(_item("You must apply. ", tips=["Short", "Start two months early"]))

        assert insights == [
            {
                "type": "expert_tip",
                "content": "Start two months early",
                "category": "compliance_requirements",
                "priority": "high",
                "source": "grants.gov",
            }
        ]


class TestRecommendations:
    def test_only_levels_with_insights(self):
        recs = generate_strategic_recommendations([{"priority": "critical"}], "compliance_requirements")

        assert len(recs) == 1
        assert recs[0]["title"] == "COMPLIANCE REQUIREMENTS: Critical Compliance Requirements"
        assert recs[0]["description"] == "1 critical requirements identified from Grants.gov guidance"

    def test_none_without_insights(self):
        assert generate_strategic_recommendations([], "fundamentals") == []

    def test_process_adds_applications_for_mapped_categories(self):
        items = [
            _item("Eligibility criteria vary by agency and program type", category="opportunity_identification"),
            _item("Something unrelated to any category", category="general"),
        ]
        intelligence = process_into_ufa_intelligence(items)

        bucket = intelligence["opportunity_identification"]
        assert len(intelligence) == 7
        assert bucket["insights"][0]["type"] == "eligibility_intelligence"
        assert bucket["applications"][0]["ufa_feature"] == "Opportunity Matching Algorithm"
        assert bucket["strategic_recommendations"][0]["priority"] == "high"
        assert intelligence["fundamentals"]["applications"] == []


class TestIntegrator:
    @pytest.fixture
    def integrator(self):
        return GrantsGovLearningIntegrator(use_browser=False)

    @pytest.mark.asyncio
    async def test_plain_http_section(self, integrator):
        with patch("app.core.grants_gov_learning.fetch_html", AsyncMock(return_value=SECTION_HTML)):
            items = await integrator.scrape_learning_section("/learn-grants/grant-policies")

        assert len(items) == 1
        assert items[0]["category"] == "compliance_requirements"
        assert items[0]["tips"] == ["Registration can take several weeks"]
        assert items[0]["scraping_method"] == "traditional"
        assert items[0]["source_url"] == "https://www.grants.gov/learn-grants/grant-policies"

    @pytest.mark.asyncio
    async def test_browser_failure_falls_back_to_http(self):
        integrator = GrantsGovLearningIntegrator(use_browser=True)
        with (
            patch.object(integrator, "scrape_section_with_browser", AsyncMock(side_effect=RuntimeError("no chromium"))),
            patch("app.core.grants_gov_learning.fetch_html", AsyncMock(return_value=SECTION_HTML)),
        ):
            items = await integrator.scrape_learning_section("/learn-grants/grant-policies")

        assert items[0]["scraping_method"] == "traditional"

    @pytest.mark.asyncio
    async def test_http_error_yields_empty(self, integrator):
        with patch("app.core.grants_gov_learning.fetch_html", AsyncMock(side_effect=RuntimeError("down"))):
            assert await integrator.scrape_learning_section("/learn-grants/grant-policies") == []

    @pytest.mark.asyncio
    async def test_build_knowledge_base(self, integrator):
        with (
            patch("app.core.grants_gov_learning.fetch_html", AsyncMock(return_value=SECTION_HTML)),
            patch("app.core.grants_gov_learning.upsert_grants_knowledge") as upsert,
        ):
            result = await integrator.build_ufa_knowledge_base()

        assert result["success"] is True
        # One block per learning section
        assert result["total_resources"] == 8
        assert result["scraping_method"] == "traditional"
        assert upsert.call_count == 7

    @pytest.mark.asyncio
    async def test_store_failure_still_succeeds(self, integrator):
        with (
            patch("app.core.grants_gov_learning.fetch_html", AsyncMock(return_value=SECTION_HTML)),
            patch("app.core.grants_gov_learning.upsert_grants_knowledge", side_effect=RuntimeError("db")),
        ):
            result = await integrator.build_ufa_knowledge_base()

        assert result["success"] is True
        assert "compliance_requirements" in integrator.knowledge_base

    def test_enhance_application_strategy(self, integrator):
        integrator.knowledge_base = {
            "application_guidance": {
                "insights": [
                    {"type": "compliance_requirement", "content": "Budget must match narrative", "priority": "critical"},
                    {"type": "best_practice", "content": "Use plain language", "priority": "medium"},
                ],
                "applications": [{"ufa_feature": "Application Quality Assessment"}],
                "strategic_recommendations": [{"title": "APPLICATION GUIDANCE: Critical Compliance Requirements"}],
            },
            "process_intelligence": {
                "insights": [{"type": "timing_strategy", "content": "Start six weeks before the deadline"}],
            },
        }

        enhanced = integrator.enhance_application_strategy({"title": "Federal plan"})

        assert enhanced["title"] == "Federal plan"
        assert [i["content"] for i in enhanced["grants_gov_best_practices"]] == ["Use plain language"]
        assert enhanced["compliance_checklist"][0]["status"] == "pending_verification"
        assert enhanced["timing_optimization"]["critical_milestones"] == ["Start six weeks before the deadline"]
        assert enhanced["quality_enhancement"]["quality_features"] == ["Application Quality Assessment"]

    def test_compliance_requirements(self, integrator):
        integrator.knowledge_base = {
            "compliance_requirements": {
                "insights": [
                    {"type": "compliance_requirement", "content": "Register in SAM", "priority": "critical"},
                    {"type": "expert_tip", "content": "Start early", "priority": "high"},
                ]
            }
        }

        assert integrator.extract_compliance_requirements() == [
            {"requirement": "Register in SAM", "priority": "critical", "verification_needed": True}
        ]

    @pytest.mark.asyncio
    async def test_build_reports_fallback_when_browser_pages_fail(self):
        integrator = GrantsGovLearningIntegrator(use_browser=True)
        browser = MagicMock(start=AsyncMock(), close=AsyncMock())
        with (
            patch("app.core.grants_gov_learning.BrowserSession", return_value=browser),
            patch.object(integrator, "scrape_section_with_browser", AsyncMock(side_effect=RuntimeError("timeout"))),
            patch("app.core.grants_gov_learning.fetch_html", AsyncMock(return_value=SECTION_HTML)),
            patch("app.core.grants_gov_learning.upsert_grants_knowledge"),
        ):
            result = await integrator.build_ufa_knowledge_base()

        assert result["success"] is True
        assert result["scraping_method"] == "traditional"
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_build_reports_mixed_methods(self):
        integrator = GrantsGovLearningIntegrator(use_browser=True)
        browser = MagicMock(start=AsyncMock(), close=AsyncMock())

        async def browser_except_basics(section_path):
            if section_path == "/learn-grants/grant-basics":
                raise RuntimeError("timeout")
            return [
                {"title": "Rendered", "content": "Browser text", "category": "fundamentals", "scraping_method": "browser"}
            ]

        with (
            patch("app.core.grants_gov_learning.BrowserSession", return_value=browser),
            patch.object(integrator, "scrape_section_with_browser", AsyncMock(side_effect=browser_except_basics)),
            patch("app.core.grants_gov_learning.fetch_html", AsyncMock(return_value=SECTION_HTML)),
            patch("app.core.grants_gov_learning.upsert_grants_knowledge"),
        ):
            result = await integrator.build_ufa_knowledge_base()

        assert result["scraping_method"] == "mixed"


def test_scraping_method_used():
    assert scraping_method_used([{"scraping_method": "browser"}]) == "browser"
    assert scraping_method_used([{"scraping_method": "browser"}, {"scraping_method": "traditional"}]) == "mixed"
    assert scraping_method_used([{"scraping_method": "traditional"}]) == "traditional"
    assert scraping_method_used([]) == "traditional"
