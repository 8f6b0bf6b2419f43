"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import document_analysis, document_generation, form_analysis, projects, smart_form_completion, ufa

router = APIRouter()

# AI document analysis (summaries, requirements, questions)
router.include_router(document_analysis.router, tags=["document_analysis"])

# Smart form completion and validation
router.include_router(smart_form_completion.router, tags=["smart_form_completion"])

# Form structure detection from text or uploads
router.include_router(form_analysis.router, tags=["form_analysis"])

# Completed form PDF generation and autofill
router.include_router(document_generation.router, tags=["document_generation"])

# Funding project CRUD
router.include_router(projects.router, tags=["projects"])

# Unified Funding Agent: runs, dashboard, queries, knowledge refresh
router.include_router(ufa.router, tags=["ufa"])
