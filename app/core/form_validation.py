"""Completeness and quality checks for a filled-in application form."""

import re
from typing import Any

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DOLLAR_RE = re.compile(r"\$[\d,]+")
_TIMEFRAME_RE = re.compile(r"\d+\s*(month|year|week|day)", re.IGNORECASE)
_PLACEHOLDER_MARKERS = ("lorem ipsum", "[placeholder]", "todo:")
_PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


def _is_blank(value: Any) -> bool:
    return value is None or value is False or str(value).strip() == ""


def _is_number(value: Any) -> bool:
    try:
        float(str(value).strip())
    except ValueError:
        return False
    return True


def calculate_completion_score(
    completed_form: dict[str, Any] | None, requirements: dict[str, dict[str, Any]] | None
) -> float:
    """
    Weighted completion: 70% filled-field ratio, 30% quality ratio.

    Quality points per filled field: minLength met +0.5, numeric number field +0.3,
    valid email +0.3, more than 10 characters +0.2.
    """
    if requirements is None or completed_form is None:
        return 0.0
    if not requirements:
        return 1.0

    total = len(requirements)
    filled = 0
    quality = 0.0

    for field_name, requirement in requirements.items():
        value = completed_form.get(field_name)
        if _is_blank(value):
            continue
        filled += 1
        text = str(value)
        min_length = requirement.get("minLength")
        if min_length and len(text) >= min_length:
            quality += 0.5
        if requirement.get("type") == "number" and _is_number(value):
            quality += 0.3
        if requirement.get("type") == "email" and EMAIL_RE.match(text):
            quality += 0.3
        if len(text) > 10:
            quality += 0.2

    completion_ratio = filled / total
    quality_ratio = min(quality / total, 1)
    return completion_ratio * 0.7 + quality_ratio * 0.3


def identify_missing_fields(
    completed_form: dict[str, Any], requirements: dict[str, dict[str, Any]]
) -> list[dict[str, Any]]:
    """Required fields left blank, highest priority first."""
    missing = [
        {
            "field": field_name,
            "label": requirement.get("label") or field_name,
            "type": requirement.get("type"),
            "priority": requirement.get("priority") or "medium",
        }
        for field_name, requirement in requirements.items()
        if requirement.get("required") and _is_blank(completed_form.get(field_name))
    ]
    return sorted(missing, key=lambda m: _PRIORITY_ORDER.get(m["priority"], 0), reverse=True)


def identify_quality_issues(completed_form: dict[str, Any]) -> list[dict[str, str]]:
    issues = []
    for field_name, value in completed_form.items():
        if _is_blank(value):
            continue
        text = str(value)

        if len(text) < 10 and "description" in field_name:
            issues.append(
                {
                    "field": field_name,
                    "type": "too_short",
                    "message": "Description appears too brief for a comprehensive response",
                }
            )

        lowered = text.lower()
        if any(marker in lowered for marker in _PLACEHOLDER_MARKERS):
            issues.append(
                {
                    "field": field_name,
                    "type": "placeholder",
                    "message": "Field contains placeholder text that needs to be replaced",
                }
            )

        words = text.split(" ")
        if len(words) > 5 and len({w.lower() for w in words}) < len(words) * 0.5:
            issues.append(
                {
                    "field": field_name,
                    "type": "repetitive",
                    "message": "Content appears repetitive and may need revision",
                }
            )
    return issues


def generate_improvement_suggestions(completed_form: dict[str, Any]) -> list[dict[str, str]]:
    suggestions = []
    for field_name, value in completed_form.items():
        if _is_blank(value):
            continue
        text = str(value)
        name = field_name.lower()

        if "budget" in name and not _DOLLAR_RE.search(text):
            suggestions.append(
                {
                    "field": field_name,
                    "type": "format",
                    "message": "Consider including specific dollar amounts for budget items",
                }
            )
        if "impact" in name and len(text) < 100:
            suggestions.append(
                {
                    "field": field_name,
                    "type": "expand",
                    "message": "Impact statements are more compelling with specific metrics and outcomes",
                }
            )
        if "timeline" in name and not _TIMEFRAME_RE.search(text):
            suggestions.append(
                {
                    "field": field_name,
                    "type": "detail",
                    "message": "Include specific timeframes (months, years) for timeline clarity",
                }
            )
    return suggestions


def validate_form_completion(
    completed_form: dict[str, Any] | None, requirements: dict[str, dict[str, Any]] | None
) -> dict[str, Any]:
    """
    Score a completed form against its field requirements.

    Args:
        completed_form: field id -> entered value
        requirements: field id -> {required, type, label, minLength, priority}

    Returns:
        Dict with completionScore, missingFields, qualityIssues, suggestions, readinessLevel
        (draft, review-ready or submission-ready)
    """
    form = completed_form or {}
    reqs = requirements or {}

    score = calculate_completion_score(completed_form, requirements)
    missing = identify_missing_fields(form, reqs)

    readiness = "draft"
    if score > 0.9 and not missing:
        readiness = "submission-ready"
    elif score > 0.7 and len(missing) < 3:
        readiness = "review-ready"

    return {
        "completionScore": round(score, 4),
        "missingFields": missing,
        "qualityIssues": identify_quality_issues(form),
        "suggestions": generate_improvement_suggestions(form),
        "readinessLevel": readiness,
    }
