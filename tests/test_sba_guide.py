"""Tests for SBA business guide parsing, program matching and the integrator."""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.sba_guide import (
    SBABusinessGuideIntegrator,
    assess_amount_match,
    assess_funding_relevance,
    assess_purpose_match,
    calculate_preparation_timeline,
    calculate_success_probability,
    categorize_sba_content,
    classify_program_type,
    extract_funding_amount,
    generate_sba_strategic_pathways,
    get_major_sba_programs,
    identify_business_stage,
    parse_program_cards,
    process_into_ufa_intelligence,
)

PROGRAMS_HTML = """
<html><body>
  <div class="program-card">
    <h3>Community Advantage Loans</h3>
    <p>Guaranteed loans for startup businesses in underserved markets. Collateral may be required.</p>
    <span class="amount">Up to $350,000</span>
    <a href="/funding-programs/loans/community-advantage">Learn more</a>
  </div>
  <div class="program-card"><h3>Heading only</h3></div>
</body></html>
"""

GUIDE_HTML = """
<div class="guide-content">
  <h2>Fund your business</h2>
  <p>Loans and grants help.</p>
  <div class="callout">Check SBA lenders first</div>
</div>
"""

SEVEN_A = get_major_sba_programs()[0]


class TestClassifiers:
    def test_categorize_first_fragment_wins(self):
        path = "/business-guide/launch-your-business/register-your-business"
        assert categorize_sba_content(path) == "business_formation"
        assert categorize_sba_content("/about") == "general_business"

    def test_business_stage(self):
        assert identify_business_stage("/business-guide/grow-your-business") == "growth"
        assert identify_business_stage("/about") == "all_stages"

    def test_funding_relevance(self):
        assert assess_funding_relevance("Funding", "loan or grant") == "high"
        assert assess_funding_relevance("Cash flow", "tips") == "medium"
        assert assess_funding_relevance("Hours", "open daily") == "low"

    @pytest.mark.parametrize(
        "name,description,expected",
        [
            ("Community Advantage Loans", "", "loan_program"),
            ("Growth Accelerator Fund", "award for accelerators", "grant_program"),
            ("Disaster Assistance", "emergency relief", "disaster_relief"),
            ("Export Help", "international trade", "export_assistance"),
            ("Counseling", "free advice", "general_support"),
        ],
    )
    def test_program_type(self, name, description, expected):
        assert classify_program_type(name, description) == expected


class TestExtractFundingAmount:
    def test_millions(self):
        assert extract_funding_amount("Up to $5.5 million") == 5_500_000

    def test_dollars(self):
        assert extract_funding_amount("Up to $50,000") == 50_000

    def test_millions_take_precedence(self):
        assert extract_funding_amount("Phase I: up to $275,000, Phase II: up to $1.75 million") == 1_750_000

    def test_missing(self):
        assert extract_funding_amount(None) is None
        assert extract_funding_amount("varies") is None


class TestParseProgramCards:
    def test_parses_complete_cards_only(self):
        programs = parse_program_cards(PROGRAMS_HTML)

        assert len(programs) == 1
        program = programs[0]
        assert program["name"] == "Community Advantage Loans"
        assert program["program_type"] == "loan_program"
        assert program["business_stage_fit"] == ["startup"]
        assert program["strategic_value"] == 2
        assert program["application_complexity"] == 2
        assert program["success_factors"] == ["Adequate collateral", "Market validation"]
        assert program["funding_amounts"] == "Up to $350,000"
        assert program["link"] == "https://www.sba.gov/funding-programs/loans/community-advantage"


class TestMatchingAndScoring:
    def test_amount_match_allows_twenty_percent(self):
        assert assess_amount_match(SEVEN_A, {"funding_amount": 6_000_000}) is True
        assert assess_amount_match(SEVEN_A, {"funding_amount": 6_000_001}) is False

    def test_amount_match_without_opportunity(self):
        assert assess_amount_match(SEVEN_A, None) is True

    def test_purpose_match(self):
        assert assess_purpose_match(SEVEN_A, None) is False
        assert assess_purpose_match(SEVEN_A, {"title": "New equipment purchase"}) is True
        assert assess_purpose_match(SEVEN_A, {"title": "Marketing campaign"}) is False

    def test_success_probability_is_clamped(self):
        profile = {"business_stage": "startup", "funding_readiness": {"readiness_level": "high"}}
        easy = {"business_stage_fit": ["startup"], "application_complexity": 2}
        hard = {"business_stage_fit": [], "application_complexity": 5}

        assert calculate_success_probability(easy, profile) == 90
        assert calculate_success_probability(hard, {"funding_readiness": {"readiness_level": "low"}}) == 30

    def test_preparation_timeline(self):
        low = {"funding_readiness": {"readiness_level": "low"}}
        assert calculate_preparation_timeline(SEVEN_A, low) == "20 weeks"
        assert calculate_preparation_timeline(SEVEN_A, {}) == "12 weeks"

    def test_pathways_ranked_by_probability_times_value(self):
        pathways = generate_sba_strategic_pathways({"business_stage": "growth"}, get_major_sba_programs())

        assert pathways[0]["program_name"] == "SBA 7(a) Loan Program"
        assert pathways[0]["strategic_approach"].startswith("Focus on SBA 7(a) Loan Program as primary")
        assert len(pathways) == 4


class TestProcessIntelligence:
    def test_groups_into_seven_categories(self):
        item = {
            "category": "funding_strategies",
            "title": "Loans",
            "content": "You should consider an SBA loan before other credit. Short.",
            "callouts": ["Talk to a lender early"],
            "business_stage": "all_stages",
            "funding_relevance": "high",
        }
        ignored = {**item, "category": "legal_structure"}

        intelligence = process_into_ufa_intelligence([item, ignored])
        funding = intelligence["funding_strategies"]

        assert len(intelligence) == 7
        assert [i["type"] for i in funding["insights"]] == ["loan_guidance", "sba_guidance"]
        assert funding["funding_applications"][0]["ufa_feature"] == "SBA Loan Program Matching"
        assert len(funding["ufa_integrations"]) == 1
        assert funding["strategic_recommendations"][0]["title"] == "Explore SBA Loan Programs"
        assert intelligence["growth_strategies"]["strategic_recommendations"][0]["title"] == (
            "Leverage growth_strategies Insights"
        )


class TestIntegrator:
    @pytest.fixture
    def integrator(self):
        return SBABusinessGuideIntegrator(use_browser=False)

    @pytest.mark.asyncio
    async def test_scrape_section(self, integrator):
        with patch("app.core.sba_guide.fetch_html", AsyncMock(return_value=GUIDE_HTML)):
            items = await integrator.scrape_sba_section("/business-guide/fund-your-business")

        assert len(items) == 1
        assert items[0]["category"] == "funding_strategies"
        assert items[0]["callouts"] == ["Check SBA lenders first"]
        assert items[0]["funding_relevance"] == "medium"
        assert items[0]["source_url"] == "https://www.sba.gov/business-guide/fund-your-business"

    @pytest.mark.asyncio
    async def test_scrape_section_error_is_empty(self, integrator):
        with patch("app.core.sba_guide.fetch_html", AsyncMock(side_effect=RuntimeError("down"))):
            assert await integrator.scrape_sba_section("/business-guide/fund-your-business") == []

    @pytest.mark.asyncio
    async def test_funding_programs_add_major_programs(self, integrator):
        with patch("app.core.sba_guide.fetch_html", AsyncMock(return_value=PROGRAMS_HTML)):
            programs = await integrator.extract_sba_funding_programs()

        assert len(programs) == 5
        assert programs[0]["name"] == "Community Advantage Loans"

    @pytest.mark.asyncio
    async def test_funding_programs_fall_back_on_error(self, integrator):
        with patch("app.core.sba_guide.fetch_html", AsyncMock(side_effect=RuntimeError("down"))):
            programs = await integrator.extract_sba_funding_programs()

        assert [p["name"] for p in programs] == [p["name"] for p in get_major_sba_programs()]

    def test_store_failure_keeps_memory_copy(self, integrator):
        intelligence = {"funding_strategies": {"description": "x", "insights": []}}
        with patch("app.core.sba_guide.upsert_sba_knowledge", side_effect=RuntimeError("db down")):
            stored = integrator.store_sba_knowledge_base(intelligence, get_major_sba_programs())

        assert stored is False
        assert integrator.knowledge_base == intelligence
        assert len(integrator.programs) == 4

    def test_load_programs_falls_back_to_major(self, integrator):
        with patch("app.core.sba_guide.list_sba_programs", side_effect=RuntimeError("db down")):
            programs = integrator.load_programs()

        assert len(programs) == 4

    def test_load_knowledge_from_store(self, integrator):
        rows = [{"category": "funding_strategies", "insights": []}]
        with patch("app.core.sba_guide.list_sba_knowledge", return_value=rows):
            knowledge = integrator.load_knowledge()

        assert list(knowledge) == ["funding_strategies"]

    @pytest.mark.asyncio
    async def test_build_knowledge_base(self, integrator):
        item = {
            "category": "funding_strategies",
            "title": "Loans",
            "content": "Capital is important for every business owner.",
            "callouts": [],
            "business_stage": "all_stages",
            "funding_relevance": "high",
        }
        with (
            patch.object(integrator, "scrape_sba_business_guide", AsyncMock(return_value=[item])),
            patch("app.core.sba_guide.fetch_html", AsyncMock(side_effect=RuntimeError("down"))),
            patch("app.core.sba_guide.upsert_sba_knowledge") as upsert_knowledge,
            patch("app.core.sba_guide.upsert_sba_program") as upsert_program,
        ):
            result = await integrator.build_sba_knowledge_base()

        assert result["success"] is True
        assert result["funding_programs"] == 4
        assert result["total_resources"] == 1
        assert len(result["content_categories"]) == 7
        assert upsert_knowledge.call_count == 7
        assert upsert_program.call_count == 4

    @pytest.mark.asyncio
    async def test_build_knowledge_base_never_raises(self, integrator):
        with patch.object(
            integrator, "scrape_sba_business_guide", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            result = await integrator.build_sba_knowledge_base()

        assert result == {"success": False, "error": "boom"}

    def test_enhanced_recommendations(self, integrator):
        integrator.programs = {p["name"]: p for p in get_major_sba_programs()}
        integrator.knowledge_base = {
            "funding_strategies": {"insights": [{"content": "a"}], "ufa_integrations": [{"x": 1}]}
        }

        result = integrator.get_sba_enhanced_recommendations({"business_stage": "growth"})

        assert [p["name"] for p in result["sba_programs"]] == ["SBA 7(a) Loan Program", "SBA 504 Loan Program"]
        assert result["business_guidance"] == {"insights": [{"content": "a"}], "integrations": [{"x": 1}]}
        assert "score" in result["readiness_assessment"]
