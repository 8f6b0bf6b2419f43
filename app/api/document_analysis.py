"""API endpoints for AI document analysis."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from app.chains.analyze_document import (
    analyze_application_form,
    analyze_document,
    analyze_documents_batch,
    generate_batch_summary,
    generate_clarifying_questions,
    generate_requirements_checklist,
)
from app.core.logging import get_logger
from app.core.schemas_documents import (
    SUPPORTED_ANALYSIS_ACTIONS,
    BatchAnalysisRequest,
    DocumentAnalysisRequest,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get("/ai/document-analysis")
async def document_analysis_info() -> JSONResponse:
    """Document analysis only accepts POST."""
    return JSONResponse(
        status_code=405,
        content={
            "error": "Document analysis requires POST method with document content",
            "supportedMethods": ["POST"],
            "supportedActions": SUPPORTED_ANALYSIS_ACTIONS,
        },
    )


@router.post("/ai/document-analysis")
async def run_document_analysis(request: DocumentAnalysisRequest) -> dict:
    """
    Run one document analysis action.

    Args:
        request: action, documentText, documentType and action-specific context

    Returns:
        {success, data}

    Raises:
        HTTPException 400: Missing document text or unknown action
        HTTPException 500: AI provider or parsing failure
    """
    action = request.action
    context = request.context

    if action == "analyze" and not request.documentText:
        raise HTTPException(status_code=400, detail="Document text is required for analysis")
    if action not in SUPPORTED_ANALYSIS_ACTIONS:
        raise HTTPException(status_code=400, detail="Invalid action specified")

    try:
        if action == "analyze":
            result = await analyze_document(request.documentText, request.documentType, context)
        elif action == "form-analysis":
            result = await analyze_application_form(
                request.documentText, context.get("userProfile"), context.get("projectData")
            )
        elif action == "requirements-checklist":
            result = await generate_requirements_checklist(context.get("analysis"), context.get("userProfile"))
        elif action == "questions":
            result = await generate_clarifying_questions(context.get("formAnalysis"), context)
        else:
            result = await generate_batch_summary(context.get("analyses"))

        return {"success": True, "data": result}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Document analysis action {action} failed")
        raise HTTPException(status_code=500, detail=f"Document analysis failed: {e}")


@router.post("/ai/document-analysis/batch")
async def run_batch_document_analysis(request: BatchAnalysisRequest) -> dict:
    """Analyze several documents, summarize them and consolidate their requirements."""
    try:
        result = await analyze_documents_batch(
            [doc.model_dump() for doc in request.documents], request.context
        )
        return {"success": True, "data": result}

    except Exception as e:
        logger.exception("Batch document analysis failed")
        raise HTTPException(status_code=500, detail=f"Document analysis failed: {e}")
