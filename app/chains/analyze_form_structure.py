"""LLM chain that extracts a fillable field structure from any application form."""

import json
from typing import Any

from pydantic import ValidationError

from app.core.ai_provider import AIProviderService, get_ai_provider, safe_parse_json
from app.core.form_patterns import detect_form_fields, merge_form_structures, validate_and_enhance_structure
from app.core.llm import get_llm, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_forms import ExtractedFormStructure

logger = get_logger(__name__)

MAX_FORM_CHARS = 15000

# ruff: noqa: E501
SYSTEM_PROMPT = """You are an advanced form analysis AI that can extract structured field information from ANY type of application form or document. Your expertise includes:

1. PATTERN RECOGNITION: Identify form fields regardless of format or layout
2. SEMANTIC UNDERSTANDING: Determine field types and purposes from context
3. STRUCTURAL ANALYSIS: Organize fields into logical sections and hierarchies
4. VALIDATION INFERENCE: Detect requirements, constraints, and dependencies

Look for actual form patterns in the text, not assumptions. Maintain original field order and organization. Always respond with valid, complete JSON."""

EXTRACTION_PROMPT = """TASK: DYNAMIC FORM FIELD EXTRACTION

Extract ALL form fields, input areas, and structural elements from this document.

DOCUMENT CONTENT:
{content}

FIELD DETECTION PATTERNS:
- "Field Name: ____" lines, checkbox lines "[ ] Option", currency "$____", dates "__/__/____"
- Large blank areas or "Description:" prompts are textareas
- Signature lines "Signature: ____" or "Authorized by: ____"

FIELD TYPES: text, textarea, email, phone, date, currency, number, select, checkbox, radio, file
REQUIRED INDICATORS: "*", "required", "must", "mandatory"

RESPONSE FORMAT (STRICT JSON):
{{
  "formFields": {{
    "unique_field_id": {{
      "label": "Exact text label from document",
      "type": "text|textarea|email|phone|date|currency|number|select|checkbox|radio|file",
      "required": true,
      "section": "section_id",
      "placeholder": "hint text",
      "validation": {{"maxLength": 500}},
      "options": []
    }}
  }},
  "formSections": [
    {{"id": "section_id", "title": "Section Title", "description": "", "fields": ["unique_field_id"], "order": 1}}
  ],
  "formMetadata": {{"title": "Detected form title", "documentType": "grant_application|loan_application|registration|survey|other"}},
  "extractionConfidence": 0.0,
  "detectedFormType": "specific form identification if possible"
}}

EXTRACTION MODE: {mode}
{mode_hint}
{context_hint}"""

FIX_SCHEMA_PROMPT = """Your previous output was not valid JSON for the required structure.
Return ONLY the corrected JSON object with formFields, formSections and formMetadata keys."""

MAPPING_SYSTEM = "You are an expert at mapping form fields to data structures. Analyze form fields and suggest intelligent data mappings. Always respond with valid JSON."

MAPPING_PROMPT = """Based on this extracted form structure, suggest how project data should map to form fields:

FORM STRUCTURE:
{structure}

CONTEXT:
{context}

REQUIRED JSON RESPONSE:
{{
  "mappings": {{
    "form_field_id": {{
      "dataSource": "organization|project|user|calculated",
      "dataField": "specific field name in our data",
      "transformation": "uppercase|lowercase|currency|phone or empty",
      "confidence": 0.0
    }}
  }},
  "unmappedFields": ["field_ids that couldn't be mapped"],
  "requiredData": ["data fields needed to complete this form"],
  "suggestions": ["recommendations for data collection"]
}}"""

_MODE_HINTS = {
    "comprehensive": "Extract every possible field and detail.",
    "minimal": "Focus only on clearly defined fields.",
    "structured": "Prioritize well-organized sections and clear field hierarchies.",
}


def build_extraction_prompt(document_text: str, mode: str, context: dict[str, Any]) -> str:
    content = document_text[:MAX_FORM_CHARS]
    if len(document_text) > MAX_FORM_CHARS:
        content += "\n...[content truncated for analysis]"
    project_type = context.get("projectType")
    return EXTRACTION_PROMPT.format(
        content=content,
        mode=mode,
        mode_hint=_MODE_HINTS.get(mode, ""),
        context_hint=(
            f"CONTEXT: This is for a {project_type} project, which may help identify field purposes."
            if project_type
            else ""
        ),
    )


async def extract_form_structure_ai(
    document_text: str, mode: str = "comprehensive", context: dict[str, Any] | None = None
) -> ExtractedFormStructure:
    """
    Ask the LLM for the form structure, retrying once with a schema reminder.

    Raises:
        ValueError: If the output cannot be validated after the retry
    """
    llm = get_llm(temperature=0.1, json_mode=True)
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_extraction_prompt(document_text, mode, context or {})},
    ]

    response = await llm.ainvoke(messages)
    raw_output = response.content

    try:
        return parse_llm_json(raw_output, ExtractedFormStructure)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Form structure parse failed, retrying: {e}")

    retry_messages = messages + [
        {"role": "assistant", "content": raw_output},
        {"role": "user", "content": FIX_SCHEMA_PROMPT},
    ]
    retry = await llm.ainvoke(retry_messages)
    try:
        return parse_llm_json(retry.content, ExtractedFormStructure)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Form structure retry failed: {e}")
        raise ValueError("Model output could not be validated to schema") from e


async def analyze_form_structure(
    document_text: str,
    document_type: str = "grant_application",
    mode: str = "comprehensive",
    context: dict[str, Any] | None = None,
    use_ai: bool = True,
) -> dict[str, Any]:
    """
    Detect a form's fields with patterns and (optionally) the LLM, then merge.

    AI failures are logged and the pattern result is returned on its own.
    """
    context = context or {}
    ai_structure: dict[str, Any] | None = None

    if use_ai:
        try:
            extracted = await extract_form_structure_ai(document_text, mode, context)
            ai_structure = extracted.model_dump(exclude_none=True)
        except Exception as e:
            logger.warning(f"AI extraction failed, falling back to pattern matching: {e}")

    pattern_structure = detect_form_fields(document_text, context.get("documentType", document_type))
    merged = merge_form_structures(ai_structure, pattern_structure)
    return validate_and_enhance_structure(merged)


async def generate_field_mappings(
    structure: dict[str, Any],
    context: dict[str, Any] | None = None,
    provider: AIProviderService | None = None,
) -> dict[str, Any]:
    """Suggest which organization/project/user data should fill each field."""
    if not structure.get("formFields"):
        return {}

    provider = provider or get_ai_provider()
    prompt = MAPPING_PROMPT.format(
        structure=json.dumps(structure, indent=2, default=str),
        context=json.dumps(context or {}, indent=2, default=str),
    )
    response = await provider.generate_completion(
        "smart-form-completion",
        [{"role": "system", "content": MAPPING_SYSTEM}, {"role": "user", "content": prompt}],
        temperature=0.2,
        json_mode=True,
    )
    if not response.content:
        return {}
    return safe_parse_json(response.content)
