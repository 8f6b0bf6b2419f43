"""API endpoints for funding project CRUD."""

from fastapi import APIRouter, HTTPException, Query

from app.core.logging import get_logger
from app.core.schemas_projects import ProjectCreateRequest, ProjectUpdateRequest
from app.db.projects import create_project, delete_project, list_projects, update_project

logger = get_logger(__name__)

router = APIRouter()


@router.get("/projects")
async def get_projects(userId: str | None = Query(None, description="Owning user")) -> dict:
    """List a user's projects, most recently updated first."""
    if not userId:
        raise HTTPException(status_code=400, detail="userId is required")

    try:
        return {"projects": list_projects(userId)}
    except Exception as e:
        logger.exception(f"Failed to list projects for user {userId}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/projects")
async def post_project(request: ProjectCreateRequest) -> dict:
    """
    Create a project from the wizard payload.

    Raises:
        HTTPException 400: Missing userId or project
        HTTPException 500: Database error
    """
    if not request.userId or not request.project:
        raise HTTPException(status_code=400, detail="userId and project are required")

    try:
        return {"project": create_project(request.userId, request.project)}
    except Exception as e:
        logger.exception(f"Failed to create project for user {request.userId}")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/projects")
async def put_project(request: ProjectUpdateRequest) -> dict:
    """Update one of the user's projects."""
    if not request.userId or not request.projectId or not request.updates:
        raise HTTPException(status_code=400, detail="userId, projectId and updates are required")

    try:
        return {"project": update_project(request.userId, request.projectId, request.updates)}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to update project {request.projectId}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/projects")
async def remove_project(
    userId: str | None = Query(None, description="Owning user"),
    projectId: str | None = Query(None, description="Project to delete"),
) -> dict:
    if not userId or not projectId:
        raise HTTPException(status_code=400, detail="userId and projectId are required")

    try:
        delete_project(userId, projectId)
        return {"success": True}
    except Exception as e:
        logger.exception(f"Failed to delete project {projectId}")
        raise HTTPException(status_code=500, detail=str(e))
