"""Pydantic schemas for funding project CRUD."""

from typing import Any

from pydantic import BaseModel, Field


class ProjectCreateRequest(BaseModel):
    """Request body for creating a project from the wizard."""

    userId: str | None = Field(None, description="Owning user")
    project: dict[str, Any] | None = Field(None, description="Raw project fields")


class ProjectUpdateRequest(BaseModel):
    """Request body for updating a project."""

    userId: str | None = Field(None, description="Owning user")
    projectId: str | None = Field(None, description="Project to update")
    updates: dict[str, Any] | None = Field(None, description="Fields to change")
