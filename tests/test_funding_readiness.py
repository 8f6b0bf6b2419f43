"""Tests for additive funding readiness scoring."""

from app.core.funding_readiness import (
    assess_funding_readiness,
    assess_sba_funding_readiness,
    determine_business_stage,
)

READY_PROFILE = {
    "has_business_plan": True,
    "has_financial_statements": True,
    "credit_score": 720,
    "has_collateral": True,
    "years_experience": 5,
    "owner_equity_percent": 25,
}


class TestAssessFundingReadiness:
    def test_fully_ready(self):
        result = assess_funding_readiness(READY_PROFILE)

        assert result["score"] == 100
        assert result["level"] == "High"
        assert result["recommendations"] == []
        assert all(f.startswith("✅") for f in result["factors"])

    def test_empty_profile(self):
        result = assess_funding_readiness(None)

        assert result["score"] == 0
        assert result["level"] == "Low"
        assert len(result["factors"]) == 6
        # Collateral has no recommendation
        assert len(result["recommendations"]) == 5

    def test_thresholds_are_strict(self):
        profile = {**READY_PROFILE, "credit_score": 650, "years_experience": 2, "owner_equity_percent": 20}
        result = assess_funding_readiness(profile)

        assert result["score"] == 50
        assert "❌ Credit improvement needed" in result["factors"]

    def test_medium_level_boundary(self):
        profile = {**READY_PROFILE, "has_business_plan": False, "credit_score": 600}
        result = assess_funding_readiness(profile)

        assert result["score"] == 60
        assert result["level"] == "Medium"


class TestAssessSbaFundingReadiness:
    def test_level_thresholds_are_exclusive(self):
        profile = {**READY_PROFILE, "has_business_plan": False}
        result = assess_sba_funding_readiness(profile)

        assert result["score"] == 80
        assert result["level"] == "medium"

    def test_low_score_adds_counseling(self):
        result = assess_sba_funding_readiness({})

        assert result["level"] == "low"
        assert result["recommendations"][0].startswith("Focus on fundamental business documentation")
        assert "Consider SBA business counseling resources and SCORE mentoring" in result["recommendations"]
        # Only criteria with SBA wording produce a missing factor
        assert result["factors"] == [
            "Business plan needed",
            "Financial statements needed",
            "Credit improvement recommended",
            "Additional equity investment recommended",
        ]


def test_determine_business_stage():
    assert determine_business_stage(None) == "startup"
    assert determine_business_stage({"business_age_years": 1}) == "startup"
    assert determine_business_stage({"business_age_years": 3}) == "established"
    assert determine_business_stage({"business_age_years": 5}) == "growth"
