"""Pattern-based grant form structure detection.

Works without an LLM: scans extracted document text for the labels most grant
applications share and for explicit input markup (checkboxes, signature lines).
The result has the same shape the AI extraction chain returns so the two can be
merged, with AI fields winning on conflicts.
"""

import re
from datetime import datetime, timezone
from typing import Any

from app.core.logging import get_logger

logger = get_logger(__name__)

UNIVERSAL_FORM_PATTERNS: dict[str, dict[str, Any]] = {
    "organization": {
        "patterns": [
            r"organization\s*name",
            r"applicant\s*organization",
            r"entity\s*name",
            r"institution\s*name",
            r"company\s*name",
            r"agency\s*name",
        ],
        "type": "text",
        "section": "applicant_info",
    },
    "contact_person": {
        "patterns": [
            r"contact\s*person",
            r"principal\s*investigator",
            r"project\s*director",
            r"authorized\s*representative",
            r"primary\s*contact",
        ],
        "type": "text",
        "section": "contact_info",
    },
    "email": {
        "patterns": [r"email\s*address", r"e-mail", r"electronic\s*mail"],
        "type": "email",
        "section": "contact_info",
    },
    "phone": {
        "patterns": [r"phone\s*number", r"telephone", r"contact\s*number"],
        "type": "tel",
        "section": "contact_info",
    },
    "address": {
        "patterns": [
            r"mailing\s*address",
            r"street\s*address",
            r"physical\s*address",
            r"organization\s*address",
        ],
        "type": "textarea",
        "section": "contact_info",
    },
    "project_title": {
        "patterns": [
            r"project\s*title",
            r"program\s*title",
            r"grant\s*title",
            r"proposal\s*title",
            r"application\s*title",
        ],
        "type": "text",
        "section": "project_info",
    },
    "project_description": {
        "patterns": [
            r"project\s*description",
            r"program\s*description",
            r"project\s*summary",
            r"abstract",
            r"overview",
        ],
        "type": "textarea",
        "section": "project_info",
    },
    "requested_amount": {
        "patterns": [
            r"requested\s*amount",
            r"funding\s*amount",
            r"grant\s*amount",
            r"total\s*budget",
            r"project\s*cost",
            r"amount\s*requested",
        ],
        "type": "currency",
        "section": "budget_info",
    },
    "project_period": {
        "patterns": [
            r"project\s*period",
            r"grant\s*period",
            r"performance\s*period",
            r"project\s*duration",
        ],
        "type": "text",
        "section": "project_info",
    },
    "start_date": {
        "patterns": [r"start\s*date", r"begin\s*date", r"commencement\s*date", r"project\s*start"],
        "type": "date",
        "section": "project_info",
    },
    "end_date": {
        "patterns": [r"end\s*date", r"completion\s*date", r"finish\s*date", r"project\s*end"],
        "type": "date",
        "section": "project_info",
    },
    "tax_exempt_status": {
        "patterns": [
            r"tax\s*exempt",
            r"501\(c\)\(3\)",
            r"nonprofit\s*status",
            r"tax\s*id",
            r"\bein\b",
            r"federal\s*id",
        ],
        "type": "text",
        "section": "eligibility",
    },
    "statement_of_need": {
        "patterns": [
            r"statement\s*of\s*need",
            r"needs\s*assessment",
            r"problem\s*statement",
            r"community\s*need",
        ],
        "type": "textarea",
        "section": "narrative",
    },
    "project_goals": {
        "patterns": [r"project\s*goals", r"objectives", r"outcomes", r"goals\s*and\s*objectives"],
        "type": "textarea",
        "section": "narrative",
    },
    "methodology": {
        "patterns": [
            r"methodology",
            r"approach",
            r"implementation\s*plan",
            r"work\s*plan",
            r"activities",
        ],
        "type": "textarea",
        "section": "narrative",
    },
    "evaluation": {
        "patterns": [
            r"evaluation",
            r"assessment\s*plan",
            r"measurement",
            r"metrics",
            r"success\s*indicators",
        ],
        "type": "textarea",
        "section": "narrative",
    },
    "sustainability": {
        "patterns": [
            r"sustainability",
            r"long.term\s*plan",
            r"continuation",
            r"future\s*funding",
        ],
        "type": "textarea",
        "section": "narrative",
    },
}

SECTION_ORDER = {
    "applicant_info": 1,
    "contact_info": 2,
    "project_info": 3,
    "budget_info": 4,
    "narrative": 5,
    "eligibility": 6,
    "additional_info": 7,
    "certification": 8,
}

FIELD_VALIDATION = {
    "email": {"pattern": r"^[^\s@]+@[^\s@]+\.[^\s@]+$", "message": "Please enter a valid email address"},
    "currency": {
        "pattern": r"^\$?\d{1,3}(,\d{3})*(\.\d{2})?$",
        "message": "Please enter a valid dollar amount",
    },
    "tel": {
        "pattern": r"^\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}$",
        "message": "Please enter a valid phone number",
    },
    "date": {"pattern": r"^\d{2}/\d{2}/\d{4}$", "message": "Please enter date in MM/DD/YYYY format"},
}

_PLACEHOLDERS = {
    "email": "Enter email address",
    "tel": "Enter phone number",
    "currency": "Enter dollar amount",
    "date": "MM/DD/YYYY",
}

_TEXT_PLACEHOLDERS = {
    "organization": "Enter your organization name",
    "contact_person": "Enter contact person name",
    "project_title": "Enter your project title",
}

_TITLE_PATTERNS = [
    re.compile(r"^([^.\n]{5,60})\s*(application|grant|proposal|form)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"(application|grant|proposal)\s*for\s*([^.\n]{5,60})", re.IGNORECASE),
    re.compile(r"([^.\n]{5,60})\s*(funding|grant|award)\s*(application|request)", re.IGNORECASE),
]

_CHECKBOX_RE = re.compile(r"(?:\[\s*\]|☐)\s*([^\n\r]+)")


def _title_case(snake: str) -> str:
    return snake.replace("_", " ").title()


def is_field_required(field_name: str, text: str) -> bool:
    """True when the label is starred or marked required near its occurrence."""
    label = field_name.replace("_", r"\s*")
    required_patterns = [
        rf"{label}.*\*",
        rf"\*.*{label}",
        rf"{label}.*(required|mandatory)",
    ]
    return any(re.search(p, text, re.IGNORECASE) for p in required_patterns)


def generate_placeholder(field_name: str, field_type: str) -> str:
    if field_type == "text":
        return _TEXT_PLACEHOLDERS.get(field_name, "Enter information")
    if field_type == "textarea":
        return f"Enter your {field_name.replace('_', ' ')}"
    return _PLACEHOLDERS.get(field_type, "Enter information")


def extract_form_title(content: str) -> str | None:
    """Look for a form title in the first ten lines of the document."""
    first_lines = "\n".join(content.split("\n")[:10])
    for pattern in _TITLE_PATTERNS:
        match = pattern.search(first_lines)
        if match:
            groups = [g for g in match.groups() if g]
            if pattern is _TITLE_PATTERNS[1]:
                return match.group(2).strip()
            return (groups[0] if groups else match.group(0)).strip()
    return None


def extract_explicit_fields(text: str) -> dict[str, dict[str, Any]]:
    """Detect checkbox options and signature blocks written into the form text."""
    fields: dict[str, dict[str, Any]] = {}

    for index, match in enumerate(_CHECKBOX_RE.finditer(text)):
        label = match.group(1).strip()
        if len(label) > 3:
            fields[f"checkbox_{index}"] = {
                "label": label,
                "type": "checkbox",
                "section": "additional_info",
                "required": False,
            }

    lowered = text.lower()
    if "signature" in lowered or "signed by" in lowered:
        fields["signature"] = {
            "label": "Authorized Signature",
            "type": "text",
            "section": "certification",
            "required": True,
            "placeholder": "Enter name of authorized signatory",
        }
        fields["signature_date"] = {
            "label": "Date Signed",
            "type": "date",
            "section": "certification",
            "required": True,
        }

    return fields


def pattern_confidence(fields: dict[str, Any], content: str) -> float:
    confidence = 0.3
    if len(fields) > 5:
        confidence += 0.2
    if len(fields) > 10:
        confidence += 0.2
    if any(key in fields for key in ("organization", "project_title", "requested_amount")):
        confidence += 0.2
    if len(content) > 1000:
        confidence += 0.1
    return round(min(confidence, 0.95), 2)


def categorize_fields(fields: dict[str, dict[str, Any]]) -> dict[str, list[str]]:
    """Group field ids by the kind of data they collect."""
    section_category = {
        "applicant_info": "organizational",
        "contact_info": "contact",
        "project_info": "project",
        "budget_info": "financial",
        "narrative": "narrative",
        "eligibility": "compliance",
        "certification": "compliance",
    }
    categories: dict[str, list[str]] = {
        "organizational": [],
        "contact": [],
        "project": [],
        "financial": [],
        "narrative": [],
        "compliance": [],
    }
    for field_id, field in fields.items():
        category = section_category.get(field.get("section", ""))
        if category:
            categories[category].append(field_id)
    return categories


def detect_form_fields(document_text: str, document_type: str = "grant_application") -> dict[str, Any]:
    """
    Build a form structure from document text using label patterns only.

    Args:
        document_text: Extracted text of the blank form
        document_type: Form type recorded in the metadata

    Returns:
        Dict with formFields, formSections, formMetadata, extractionConfidence,
        detectedFormType and fieldPatterns
    """
    searchable = document_text.lower()
    fields: dict[str, dict[str, Any]] = {}
    sections_seen: list[str] = []

    for field_name, config in UNIVERSAL_FORM_PATTERNS.items():
        if not any(re.search(p, searchable) for p in config["patterns"]):
            continue
        field_type = config["type"]
        fields[field_name] = {
            "label": _title_case(field_name),
            "type": field_type,
            "section": config["section"],
            "required": is_field_required(field_name, searchable),
            "placeholder": generate_placeholder(field_name, field_type),
            "validation": FIELD_VALIDATION.get(field_type),
        }
        if config["section"] not in sections_seen:
            sections_seen.append(config["section"])

    # Explicit markup is scanned on the original text so labels keep their case
    explicit = extract_explicit_fields(document_text)
    fields.update(explicit)
    for field in explicit.values():
        if field["section"] not in sections_seen:
            sections_seen.append(field["section"])

    sections = []
    for section_name in sorted(sections_seen, key=lambda s: SECTION_ORDER.get(s, 999)):
        section_fields = [fid for fid, f in fields.items() if f["section"] == section_name]
        if section_fields:
            sections.append(
                {
                    "id": section_name,
                    "title": _title_case(section_name),
                    "fields": section_fields,
                    "order": SECTION_ORDER.get(section_name, 999),
                    "description": f"Fields related to {section_name.replace('_', ' ')}",
                }
            )

    confidence = pattern_confidence(fields, document_text)
    logger.info(
        f"Pattern detection found {len(fields)} fields in {len(sections)} sections",
        extra={"confidence": confidence},
    )

    return {
        "formFields": fields,
        "formSections": sections,
        "formMetadata": {
            "title": extract_form_title(document_text) or "Grant Application",
            "documentType": document_type,
            "totalFields": len(fields),
            "extractedAt": datetime.now(timezone.utc).isoformat(),
            "confidence": confidence,
        },
        "extractionConfidence": confidence,
        "detectedFormType": document_type,
        "fieldPatterns": categorize_fields(fields),
    }


def merge_form_structures(
    ai_structure: dict[str, Any] | None, pattern_structure: dict[str, Any] | None
) -> dict[str, Any]:
    """
    Merge AI and pattern extraction results.

    AI fields overwrite pattern fields with the same id; pattern-only fields are
    kept. AI sections are used when present, otherwise the pattern sections.
    """
    if not ai_structure and not pattern_structure:
        return {"formFields": {}, "formSections": [], "formMetadata": {}}
    if not ai_structure:
        return pattern_structure  # type: ignore[return-value]
    if not pattern_structure:
        return ai_structure

    merged_fields = dict(pattern_structure.get("formFields") or {})
    merged_fields.update(ai_structure.get("formFields") or {})

    sections = [
        {**s, "fields": list(s.get("fields") or [])}
        for s in ai_structure.get("formSections") or pattern_structure.get("formSections") or []
    ]
    placed = {fid for s in sections for fid in s["fields"]}
    by_id = {s.get("id"): s for s in sections}
    for fid, field in merged_fields.items():
        if fid in placed:
            continue
        section_id = field.get("section") or "additional_info"
        if section_id not in by_id:
            by_id[section_id] = {
                "id": section_id,
                "title": _title_case(section_id),
                "description": "",
                "fields": [],
                "order": SECTION_ORDER.get(section_id, 999),
            }
            sections.append(by_id[section_id])
        by_id[section_id]["fields"].append(fid)

    metadata = {
        **(pattern_structure.get("formMetadata") or {}),
        **(ai_structure.get("formMetadata") or {}),
        "totalFields": len(merged_fields),
        "extractionMethod": "hybrid_ai_pattern",
    }

    return {
        "formFields": merged_fields,
        "formSections": sections,
        "formMetadata": metadata,
        "extractionConfidence": max(
            ai_structure.get("extractionConfidence") or 0,
            pattern_structure.get("extractionConfidence") or 0,
        ),
        "detectedFormType": ai_structure.get("detectedFormType")
        or pattern_structure.get("detectedFormType"),
        "fieldPatterns": ai_structure.get("fieldPatterns") or pattern_structure.get("fieldPatterns"),
    }


def structure_confidence(structure: dict[str, Any]) -> float:
    """Score how complete an extracted structure looks (0.3 - 1.0)."""
    fields = structure.get("formFields") or {}
    sections = structure.get("formSections") or []
    score = 0.3
    if fields:
        score += 0.2
    if len(fields) > 5:
        score += 0.1
    if len(fields) > 15:
        score += 0.1
    if sections:
        score += 0.1
    if len(sections) > 2:
        score += 0.1
    field_types = {f.get("type") for f in fields.values()}
    if len(field_types) > 2:
        score += 0.1
    if len(field_types) > 4:
        score += 0.1
    if any(f.get("required") for f in fields.values()):
        score += 0.1
    return round(min(score, 1.0), 2)


def validate_and_enhance_structure(structure: dict[str, Any]) -> dict[str, Any]:
    """Fill in missing keys, recount metadata and score confidence if absent."""
    structure.setdefault("formFields", {})
    structure.setdefault("formSections", [])
    metadata = structure.setdefault("formMetadata", {})

    fields = structure["formFields"]
    metadata["totalFields"] = len(fields)
    metadata["requiredFields"] = sum(1 for f in fields.values() if f.get("required"))
    metadata["sections"] = len(structure["formSections"])

    if not structure.get("extractionConfidence"):
        structure["extractionConfidence"] = structure_confidence(structure)
    return structure
