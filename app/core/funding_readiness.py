"""Additive funding readiness scoring.

Two flavours share the same criteria and weights:

- ``assess_funding_readiness`` backs the chat assistant (✅/❌ factor lines, Title-case level)
- ``assess_sba_funding_readiness`` backs SBA program matching (lower-case level, SBA wording)
"""

from typing import Any

# (criterion, points) in scoring order
READINESS_WEIGHTS: list[tuple[str, int]] = [
    ("business_plan", 20),
    ("financial_statements", 15),
    ("credit", 20),
    ("collateral", 15),
    ("experience", 15),
    ("owner_equity", 15),
]

MIN_CREDIT_SCORE = 650
MIN_YEARS_EXPERIENCE = 2
MIN_OWNER_EQUITY_PERCENT = 20


def _criteria_met(profile: dict[str, Any]) -> dict[str, bool]:
    return {
        "business_plan": bool(profile.get("has_business_plan")),
        "financial_statements": bool(profile.get("has_financial_statements")),
        "credit": (profile.get("credit_score") or 0) > MIN_CREDIT_SCORE,
        "collateral": bool(profile.get("has_collateral")),
        "experience": (profile.get("years_experience") or 0) > MIN_YEARS_EXPERIENCE,
        "owner_equity": (profile.get("owner_equity_percent") or 0) > MIN_OWNER_EQUITY_PERCENT,
    }


_CHAT_TEXT: dict[str, tuple[str, str, str | None]] = {
    "business_plan": (
        "✅ Business plan completed",
        "❌ Business plan needed",
        "Develop a comprehensive business plan",
    ),
    "financial_statements": (
        "✅ Financial statements prepared",
        "❌ Financial statements needed",
        "Prepare 3 years of financial statements",
    ),
    "credit": (
        "✅ Good credit score",
        "❌ Credit improvement needed",
        "Work on improving credit score",
    ),
    "collateral": ("✅ Collateral available", "❌ Collateral assessment needed", None),
    "experience": (
        "✅ Industry experience demonstrated",
        "❌ More experience needed",
        "Gain relevant industry experience",
    ),
    "owner_equity": (
        "✅ Adequate owner equity",
        "❌ Additional equity needed",
        "Increase owner equity investment",
    ),
}


def assess_funding_readiness(profile: dict[str, Any] | None) -> dict[str, Any]:
    """
    Score a business profile for general funding readiness.

    Args:
        profile: Dict with has_business_plan, has_financial_statements, credit_score,
            has_collateral, years_experience, owner_equity_percent

    Returns:
        Dict with score (0-100), level (High/Medium/Low), factors, recommendations
    """
    met = _criteria_met(profile or {})
    score = 0
    factors: list[str] = []
    recommendations: list[str] = []

    for criterion, points in READINESS_WEIGHTS:
        ok_text, missing_text, recommendation = _CHAT_TEXT[criterion]
        if met[criterion]:
            score += points
            factors.append(ok_text)
        else:
            factors.append(missing_text)
            if recommendation:
                recommendations.append(recommendation)

    if score >= 80:
        level = "High"
    elif score >= 60:
        level = "Medium"
    else:
        level = "Low"

    return {
        "score": score,
        "level": level,
        "factors": factors,
        "recommendations": recommendations,
    }


_SBA_TEXT: dict[str, tuple[str, str | None]] = {
    "business_plan": ("Business plan available", "Business plan needed"),
    "financial_statements": ("Financial statements current", "Financial statements needed"),
    "credit": ("Credit score acceptable", "Credit improvement recommended"),
    "collateral": ("Collateral available", None),
    "experience": ("Industry experience demonstrated", None),
    "owner_equity": ("Adequate owner equity", "Additional equity investment recommended"),
}

_SBA_RECOMMENDATIONS: dict[str, str] = {
    "business_plan": "Develop comprehensive business plan using SBA templates and guidance",
    "financial_statements": "Prepare 3 years of financial statements and projections",
    "credit": "Work on improving personal and business credit scores",
}


def assess_sba_funding_readiness(profile: dict[str, Any] | None) -> dict[str, Any]:
    """Score a profile against typical SBA lender expectations."""
    met = _criteria_met(profile or {})
    score = 0
    factors: list[str] = []

    for criterion, points in READINESS_WEIGHTS:
        ok_text, missing_text = _SBA_TEXT[criterion]
        if met[criterion]:
            score += points
            factors.append(ok_text)
        elif missing_text:
            factors.append(missing_text)

    if score > 80:
        level = "high"
    elif score > 60:
        level = "medium"
    else:
        level = "low"

    recommendations: list[str] = []
    if score < 60:
        recommendations.append(
            "Focus on fundamental business documentation before pursuing SBA funding"
        )
        recommendations.append("Consider SBA business counseling resources and SCORE mentoring")
    for criterion, text in _SBA_RECOMMENDATIONS.items():
        if not met[criterion]:
            recommendations.append(text)

    return {
        "score": score,
        "level": level,
        "factors": factors,
        "recommendations": recommendations,
    }


def determine_business_stage(profile: dict[str, Any] | None) -> str:
    """Bucket a profile into startup / established / growth by business age."""
    age = (profile or {}).get("business_age_years")
    if age is None or age < 2:
        return "startup"
    if age < 5:
        return "established"
    return "growth"
