"""API endpoints for AI smart form completion and completed form validation."""

from fastapi import APIRouter, HTTPException

from app.chains.smart_form_completion import ACTIONS, run_form_completion_action
from app.core.form_validation import validate_form_completion
from app.core.logging import get_logger
from app.core.schemas_forms import FormValidationRequest, SmartFormCompletionRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/ai/smart-form-completion")
async def smart_form_completion(request: SmartFormCompletionRequest) -> dict:
    """
    Run one smart form completion action.

    Args:
        request: action plus formFields, userProfile and projectData

    Returns:
        {success, data}

    Raises:
        HTTPException 400: Unknown action
        HTTPException 500: AI provider or parsing failure
    """
    if request.action not in ACTIONS:
        raise HTTPException(status_code=400, detail=f"Invalid action: {request.action}")

    try:
        result = await run_form_completion_action(
            request.action, request.formFields, request.userProfile, request.projectData
        )
        return {"success": True, "data": result}

    except Exception as e:
        logger.exception(f"Smart form completion action {request.action} failed")
        raise HTTPException(status_code=500, detail=f"Smart form completion failed: {e}")


@router.post("/ai/smart-form-completion/validate")
async def validate_completion(request: FormValidationRequest) -> dict:
    """Score a completed form against its requirements."""
    return {"success": True, "data": validate_form_completion(request.completedForm, request.formRequirements)}
