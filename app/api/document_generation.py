"""API endpoints for completed form generation."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from app.core.field_mapping import autofill_fields
from app.core.logging import get_logger
from app.core.pdf_generator import generate_completed_form
from app.core.schemas_forms import AutofillRequest, GenerateFormRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/documents/generate-form")
async def generate_form(request: GenerateFormRequest) -> Response:
    """
    Render a completed application form as a PDF.

    Returns:
        application/pdf bytes with field counts in X-Total-Fields / X-Populated-Fields

    Raises:
        HTTPException 400: Invalid form structure
    """
    result = generate_completed_form(request.formStructure, request.userData, request.fieldMappings)
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result.get("error") or "Form generation failed")

    metadata = result["metadata"]
    return Response(
        content=result["document"],
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{request.filename}"',
            "X-Total-Fields": str(metadata["totalFields"]),
            "X-Populated-Fields": str(metadata["populatedFields"]),
            "X-Form-Title": metadata["formTitle"],
        },
    )


@router.post("/documents/autofill")
async def autofill(request: AutofillRequest) -> dict:
    """Return the field values the organization profile can fill, without rendering."""
    try:
        filled = autofill_fields(request.fields, request.profile, request.project)
        return {"success": True, "fields": filled, "filledCount": len(filled), "totalFields": len(request.fields)}
    except Exception as e:
        logger.exception("Autofill failed")
        raise HTTPException(status_code=500, detail=str(e))
