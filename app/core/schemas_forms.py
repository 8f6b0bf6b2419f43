"""Pydantic schemas for form analysis, completion and generation."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ExtractedFormStructure(BaseModel):
    """Form structure returned by the AI extraction chain."""

    formFields: dict[str, dict[str, Any]] = Field(default_factory=dict, description="field id -> field definition")
    formSections: list[dict[str, Any]] = Field(default_factory=list, description="Ordered sections")
    formMetadata: dict[str, Any] = Field(default_factory=dict, description="Title, type, counts")
    extractionConfidence: float | None = Field(None, description="0-1 extraction confidence")
    detectedFormType: str | None = Field(None, description="Detected form type")
    fieldPatterns: dict[str, list[str]] | None = Field(None, description="Field ids grouped by category")


class FormAnalysisRequest(BaseModel):
    """Request body for form structure analysis from raw text."""

    documentContent: str = Field(..., min_length=1, description="Extracted form text")
    documentType: str = Field("grant_application", description="Form type hint")
    extractionMode: Literal["comprehensive", "minimal", "structured"] = Field(
        "comprehensive", description="How aggressively to extract fields"
    )
    usePatternsOnly: bool = Field(False, description="Skip the AI extraction step")
    generateMappings: bool = Field(False, description="Ask the AI for field-to-data mapping suggestions")
    context: dict[str, Any] = Field(default_factory=dict, description="projectType, userProfile, project")


class SmartFormCompletionRequest(BaseModel):
    """Request body for the smart form completion proxy."""

    action: str = Field("complete-form", description="Completion action")
    formFields: Any = Field(None, description="Form fields or requirements")
    userProfile: dict[str, Any] | None = Field(None, description="Applicant profile")
    projectData: dict[str, Any] | None = Field(None, description="Project record")


class FormValidationRequest(BaseModel):
    """Request body for completed form validation."""

    completedForm: dict[str, Any] = Field(default_factory=dict, description="field id -> value")
    formRequirements: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="field id -> requirement"
    )


class GenerateFormRequest(BaseModel):
    """Request body for completed form PDF generation."""

    formStructure: dict[str, Any] = Field(..., description="formFields / formSections / formMetadata")
    userData: dict[str, Any] = Field(default_factory=dict, description="organization, project, user")
    fieldMappings: dict[str, dict[str, Any]] = Field(default_factory=dict, description="Explicit mappings")
    filename: str = Field("completed-form.pdf", description="Download filename")


class AutofillRequest(BaseModel):
    """Request body for profile-driven autofill."""

    fields: list[dict[str, Any]] = Field(..., description="Fields with id and label")
    profile: dict[str, Any] = Field(default_factory=dict, description="Organization profile")
    project: dict[str, Any] | None = Field(None, description="Project record")
