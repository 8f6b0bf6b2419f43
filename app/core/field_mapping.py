"""Map grant form field names onto applicant profile properties.

Field names arrive from AI-detected form structures ("Applicant Organization Name",
"federal_tax_id", "Contact Phone #") and are normalised before matching against an
ordered table of patterns. The first pattern that matches decides the property;
more specific patterns therefore sit above the generic ones they overlap with.
"""

import re
from typing import Any

from app.core.logging import get_logger

logger = get_logger(__name__)

# (pattern, profile property) in priority order
FIELD_PROFILE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(ein|tax id|tin|federal id|employer identification)\b"), "tax_id"),
    (re.compile(r"\b(duns|uei|unique entity)\b"), "duns_uei_number"),
    (re.compile(r"\bsam\b|\bsam gov\b"), "sam_gov_status"),
    (re.compile(r"\b(incorporat\w*|formation) (date|year)\b|\bdate (of )?incorporat"), "date_incorporated"),
    (re.compile(r"\bstate of (incorporation|formation)\b|\bincorporat\w* state\b"), "state_incorporated"),
    (re.compile(r"\b(organization|organisation|agency|company|applicant|entity) type\b"), "organization_type"),
    (
        re.compile(r"\b(legal name|organization name|organisation name|applicant name|company name|agency name|entity name|nonprofit name|business name)\b"),
        "organization_name",
    ),
    (re.compile(r"^(organization|organisation|applicant|company|agency)$"), "organization_name"),
    (re.compile(r"\be ?mail\b"), "email"),
    (re.compile(r"\b(phone|telephone|tel|mobile|cell)\b"), "phone"),
    (re.compile(r"\b(fax)\b"), "fax"),
    (re.compile(r"\b(contact|authorized|representative|director|signatory) (person|name|official)\b"), "full_name"),
    (re.compile(r"\b(executive director|project director|principal investigator|your name|full name)\b"), "full_name"),
    (re.compile(r"\b(website|web site|url|homepage)\b"), "website"),
    (re.compile(r"\b(address line 2|suite|apt|unit)\b"), "address_line2"),
    (re.compile(r"\b(street|mailing address|address line 1|address)\b"), "address_line1"),
    (re.compile(r"\bcity\b|\btown\b"), "city"),
    (re.compile(r"\b(zip|postal)( code)?\b"), "zip_code"),
    (re.compile(r"\bcounty\b"), "county"),
    (re.compile(r"\bstate\b"), "state"),
    (re.compile(r"\bmission\b"), "mission_statement"),
    (re.compile(r"\b(years in (operation|business)|year founded|founded|established)\b"), "years_in_operation"),
    (re.compile(r"\b(staff|employees|fte|full time)\b"), "full_time_staff"),
    (re.compile(r"\bboard (size|members)\b"), "board_size"),
    (re.compile(r"\b(annual|operating|organizational) (budget|revenue)\b"), "annual_budget"),
    (re.compile(r"\bindirect cost\b"), "indirect_cost_rate"),
    (re.compile(r"\baudit\b"), "audit_status"),
    (re.compile(r"\b(project|program) (title|name)\b"), "project_name"),
    (re.compile(r"\b(project|program) (description|summary|narrative|abstract)\b"), "project_description"),
    (
        re.compile(r"\b(amount requested|request amount|requested amount|funding request|grant amount|total request)\b"),
        "funding_request_amount",
    ),
    (re.compile(r"\b(total project (budget|cost)|project budget)\b"), "total_project_budget"),
    (re.compile(r"\b(target population|population served|beneficiaries)\b"), "target_population"),
    (re.compile(r"\b(people served|number served|participants)\b"), "estimated_people_served"),
    (re.compile(r"\b(project location|service area|project site)\b"), "project_location"),
    (re.compile(r"\b(start date|project start|begin date)\b"), "proposed_start_date"),
    (re.compile(r"\b(project duration|project period|grant period|duration)\b"), "project_duration"),
    (re.compile(r"\b(outcomes|expected results|impact)\b"), "key_outcomes"),
]

# Properties that live on the project rather than the organization profile
PROJECT_PROPERTIES = {
    "project_name",
    "project_description",
    "funding_request_amount",
    "total_project_budget",
    "target_population",
    "estimated_people_served",
    "project_location",
    "proposed_start_date",
    "project_duration",
}

_PROJECT_ALIASES = {
    "project_name": "name",
    "project_description": "description",
}


def clean_field_name(field_name: str) -> str:
    """Lowercase, turn separators into spaces, collapse whitespace."""
    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", field_name or "")
    cleaned = re.sub(r"[^a-z0-9]+", " ", spaced.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def map_field_to_user_profile(field_name: str) -> str | None:
    """
    Resolve a form field name to the profile property that should fill it.

    Args:
        field_name: Raw field id or label

    Returns:
        Profile property name, or None when no pattern matches
    """
    cleaned = clean_field_name(field_name)
    if not cleaned:
        return None
    for pattern, prop in FIELD_PROFILE_PATTERNS:
        if pattern.search(cleaned):
            return prop
    return None


def get_profile_value(
    profile: dict[str, Any], field_name: str, project: dict[str, Any] | None = None
) -> Any:
    """Return the profile (or project) value for a form field, if one is known."""
    prop = map_field_to_user_profile(field_name)
    if prop is None:
        return None

    if prop in PROJECT_PROPERTIES and project:
        value = project.get(prop)
        if value in (None, "") and prop in _PROJECT_ALIASES:
            value = project.get(_PROJECT_ALIASES[prop])
        if value not in (None, ""):
            return value

    value = profile.get(prop)
    return None if value in (None, "", []) else value


def autofill_fields(
    fields: list[dict[str, Any]],
    profile: dict[str, Any],
    project: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a field id -> value map for every field the profile can answer.

    Each field is matched by its id first, then by its label.
    """
    filled: dict[str, Any] = {}
    for field in fields:
        field_id = field.get("id") or field.get("name")
        if not field_id:
            continue
        value = get_profile_value(profile, field_id, project)
        if value is None and field.get("label"):
            value = get_profile_value(profile, field["label"], project)
        if value is not None:
            filled[field_id] = value

    logger.debug(f"Autofilled {len(filled)}/{len(fields)} fields from profile")
    return filled
