"""API endpoints for dynamic form structure analysis."""

import json
from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from app.chains.analyze_form_structure import analyze_form_structure, generate_field_mappings
from app.core.document_text import extract_text_from_upload
from app.core.field_mapping import autofill_fields
from app.core.logging import get_logger
from app.core.schemas_forms import FormAnalysisRequest

logger = get_logger(__name__)

router = APIRouter()


def _autofill_structure(structure: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
    profile = context.get("userProfile") or {}
    if not profile:
        return {}
    fields = [{"id": field_id, **field} for field_id, field in (structure.get("formFields") or {}).items()]
    return autofill_fields(fields, profile, context.get("project"))


async def _analyze(
    text: str,
    document_type: str,
    mode: str,
    context: dict[str, Any],
    use_patterns_only: bool,
    generate_mappings: bool,
) -> dict[str, Any]:
    structure = await analyze_form_structure(
        text, document_type, mode, context, use_ai=not use_patterns_only
    )

    mappings: dict[str, Any] = {}
    if generate_mappings and not use_patterns_only:
        try:
            mappings = await generate_field_mappings(structure, context)
        except Exception as e:
            logger.warning(f"Field mapping generation failed: {e}")

    return {
        "success": True,
        "data": structure,
        "fieldMappings": mappings,
        "autofill": _autofill_structure(structure, context),
    }


@router.post("/ai/form-analysis")
async def analyze_form_text(request: FormAnalysisRequest) -> dict:
    """
    Detect a form's fields from extracted text.

    Returns:
        {success, data: form structure, fieldMappings, autofill}
    """
    try:
        return await _analyze(
            request.documentContent,
            request.documentType,
            request.extractionMode,
            request.context,
            request.usePatternsOnly,
            request.generateMappings,
        )
    except Exception as e:
        logger.exception("Form analysis failed")
        raise HTTPException(status_code=500, detail=f"Form analysis failed: {e}")


@router.post("/ai/form-analysis/upload")
async def analyze_form_upload(
    file: UploadFile = File(...),
    document_type: str = Form(default="grant_application"),
    extraction_mode: str = Form(default="comprehensive"),
    use_patterns_only: bool = Form(default=False),
    context: str = Form(default="{}"),
) -> dict:
    """Extract text from an uploaded PDF, DOCX or text file, then analyze it as a form."""
    try:
        parsed_context = json.loads(context or "{}")
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="context must be valid JSON")

    try:
        raw = await file.read()
        extracted = extract_text_from_upload(file.filename or "upload", file.content_type, raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not extracted.text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from the document")

    try:
        result = await _analyze(
            extracted.text, document_type, extraction_mode, parsed_context, use_patterns_only, False
        )
        result["sourceFormat"] = extracted.source_format
        return result
    except Exception as e:
        logger.exception(f"Form analysis failed for upload {file.filename}")
        raise HTTPException(status_code=500, detail=f"Form analysis failed: {e}")
