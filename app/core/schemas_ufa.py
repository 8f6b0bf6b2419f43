"""Pydantic schemas for Unified Funding Agent endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class UFARunRequest(BaseModel):
    """Run the analysis for one tenant, or for every tenant when tenantId is omitted."""

    tenantId: str | None = Field(None, description="Tenant to analyze")
    limit: int = Field(1000, ge=1, description="Max tenants to process when running all")


class UFAQueryRequest(BaseModel):
    """A natural-language funding question."""

    tenantId: str = Field(..., min_length=1, description="Tenant asking the question")
    query: str = Field(..., min_length=1, description="Question text")
    userProfile: dict[str, Any] | None = Field(None, description="Business profile for readiness answers")
    projectContext: dict[str, Any] | None = Field(None, description="Current project, if any")


class UFAQueryResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] | None = None
    fallback: bool | None = None
    error: str | None = None


class KnowledgeRefreshRequest(BaseModel):
    """Which knowledge bases to rebuild."""

    sba: bool = Field(True, description="Rebuild SBA business guide knowledge")
    grantsGov: bool = Field(True, description="Rebuild grants.gov learning knowledge")
