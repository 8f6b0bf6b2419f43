"""Pydantic schemas for AI document analysis."""

from typing import Any

from pydantic import BaseModel, Field

SUPPORTED_ANALYSIS_ACTIONS = ["analyze", "form-analysis", "requirements-checklist", "questions", "batch-summary"]


class DocumentAnalysisRequest(BaseModel):
    """Request body for the document analysis proxy."""

    documentText: str | None = Field(None, description="Document text (required for analyze)")
    documentType: str = Field("unknown", description="application, rfp, guidelines, contract, report")
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="userProfile, projectData, analysis, formAnalysis or analyses depending on action",
    )
    action: str = Field("analyze", description="One of the supported analysis actions")


class BatchDocument(BaseModel):
    """One document in a batch analysis."""

    id: str | None = None
    name: str | None = None
    type: str = "unknown"
    content: str = ""


class BatchAnalysisRequest(BaseModel):
    """Request body for analyzing several documents at once."""

    documents: list[BatchDocument] = Field(..., min_length=1)
    context: dict[str, Any] = Field(default_factory=dict)
