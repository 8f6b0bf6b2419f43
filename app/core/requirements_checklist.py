"""Scoring and consolidation helpers for funding document analyses."""

from typing import Any

REQUIREMENT_CATEGORIES: list[tuple[str, tuple[str, ...]]] = [
    ("documentation", ("document", "form", "report")),
    ("eligibility", ("eligible", "qualify")),
    ("technical", ("technical", "specification")),
    ("financial", ("budget", "financial", "cost")),
    ("compliance", ("compliance", "regulation")),
]


def calculate_confidence(analysis: dict[str, Any]) -> float:
    """
    Estimate how complete a document analysis is.

    Starts at 0.5 and adds 0.1 for each populated element: title, sponsor,
    deadlines, funding amount, eligibility, required documents, evaluation criteria.
    """
    score = 0.5

    key_info = analysis.get("keyInformation") or {}
    if key_info.get("title"):
        score += 0.1
    if key_info.get("sponsor"):
        score += 0.1
    if key_info.get("deadlines"):
        score += 0.1
    if key_info.get("fundingAmount"):
        score += 0.1

    requirements = analysis.get("requirements") or {}
    if requirements.get("eligibility"):
        score += 0.1
    if requirements.get("documents"):
        score += 0.1
    if analysis.get("evaluationCriteria"):
        score += 0.1

    return round(min(score, 1.0), 2)


def categorize_requirements(requirements: list[str]) -> dict[str, list[str]]:
    categories: dict[str, list[str]] = {name: [] for name, _ in REQUIREMENT_CATEGORIES}
    categories["other"] = []

    for requirement in requirements:
        lowered = requirement.lower()
        for name, keywords in REQUIREMENT_CATEGORIES:
            if any(k in lowered for k in keywords):
                categories[name].append(requirement)
                break
        else:
            categories["other"].append(requirement)
    return categories


def consolidate_requirements(analyses: list[dict[str, Any]]) -> dict[str, Any]:
    """Union the document, eligibility and technical requirements across analyses."""
    seen: dict[str, None] = {}
    for analysis in analyses:
        requirements = analysis.get("requirements") or {}
        for key in ("documents", "eligibility", "technical"):
            for item in requirements.get(key) or []:
                if isinstance(item, str):
                    seen.setdefault(item, None)

    unique = list(seen)
    return {
        "total": len(unique),
        "requirements": unique,
        "categories": categorize_requirements(unique),
    }
