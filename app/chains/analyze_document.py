"""LLM chains for funding document analysis.

Covers single-document analysis, application form review, requirement
checklists, clarifying questions and multi-document summaries. All calls go
through the hybrid AI provider so they inherit retry and provider failover.
"""

import json
from datetime import datetime, timezone
from typing import Any

from app.core.ai_provider import AIProviderService, get_ai_provider, safe_parse_json
from app.core.logging import get_logger
from app.core.requirements_checklist import calculate_confidence, consolidate_requirements

logger = get_logger(__name__)

MAX_DOCUMENT_CHARS = 12000
MAX_FORM_CHARS = 10000

# ruff: noqa: E501
BASE_SYSTEM_PROMPT = "You are an expert grant and funding analyst with deep expertise in government grants, private foundations, venture funding, and corporate programs."

TYPE_SYSTEM_PROMPTS = {
    "application": "You specialize in analyzing application forms and requirements to help users complete them accurately and competitively.",
    "rfp": "You specialize in analyzing RFPs and funding announcements to extract requirements, deadlines, and strategic insights.",
    "guidelines": "You specialize in interpreting program guidelines and eligibility criteria to help users understand compliance requirements.",
    "contract": "You specialize in analyzing funding contracts and award documents to understand obligations and requirements.",
    "report": "You specialize in analyzing reports and documentation to understand reporting requirements and compliance needs.",
}

GENERAL_SYSTEM_SUFFIX = "Analyze any funding-related document to extract key information, requirements, and strategic insights. Always respond with valid, well-structured JSON."

ANALYSIS_PROMPT = """Analyze this {document_type} document and extract structured information. Focus on:

1. KEY INFORMATION (keyInformation):
   - Title, sponsor, program details
   - Funding amounts (fundingAmount) and cost sharing requirements
   - Application deadlines and important dates (deadlines)
   - Contact information

2. REQUIREMENTS ANALYSIS (requirements):
   - Eligibility criteria (eligibility): organization type, size, location, etc.
   - Required documents and submissions (documents)
   - Technical/project requirements (technical)
   - Compliance and reporting obligations (compliance)

3. EVALUATION CRITERIA (evaluationCriteria):
   - Scoring rubric and evaluation factors
   - Selection criteria and preferences
   - Success metrics and outcomes expected

4. STRATEGIC INSIGHTS (strategicInsights):
   - Alignment with typical project types
   - Competitive positioning advice
   - Risk factors and challenges
   - Recommended approach/strategy

DOCUMENT CONTENT:
{content}"""

FORM_ANALYSIS_SYSTEM = "You are an expert grant application assistant. Analyze application forms and provide intelligent completion suggestions based on the user's profile and project data. Always respond with valid JSON."

FORM_ANALYSIS_PROMPT = """Analyze this application form and provide intelligent completion suggestions:

APPLICATION FORM:
{content}

USER PROFILE:
{user_profile}

PROJECT DATA:
{project_data}

Provide:
1. COMPLETION SUGGESTIONS: Specific text/values for each field we can fill
2. MISSING INFORMATION: What we need from the user, organized by priority
3. QUESTIONS TO ASK: Intelligent questions to gather missing info
4. STRATEGIC RECOMMENDATIONS: How to best position this application
5. RISK ASSESSMENT: Potential issues and how to address them

Focus on maximizing the application's competitiveness while ensuring accuracy."""

CHECKLIST_SYSTEM = "You are a grant compliance expert. Create comprehensive, actionable requirement checklists. Always respond with valid JSON."

CHECKLIST_PROMPT = """Based on this document analysis and user profile, create a comprehensive requirements checklist:

DOCUMENT ANALYSIS:
{analysis}

USER PROFILE:
{user_profile}

Create a detailed checklist with:
1. Required documents and information
2. Eligibility criteria with user's status
3. Deadline-driven action items
4. Recommended preparation steps
5. Risk factors and mitigation strategies

Format as JSON with requirements categorized by type and priority."""

QUESTIONS_SYSTEM = "You are an expert grant application consultant. Generate helpful, intelligent questions that guide users to provide exactly what's needed. Always respond with valid JSON."

QUESTIONS_PROMPT = """Based on this form analysis, generate intelligent, context-aware questions to gather missing information:

FORM ANALYSIS:
{form_analysis}

CONTEXT:
{context}

Generate questions that are:
1. Specific and actionable
2. Prioritized by importance
3. Include helpful context/examples
4. Avoid redundant information we already have
5. Consider the user's business type and project

Format as a JSON object with a "questions" array of objects containing: question, priority, category, helpText, and expectedAnswer type."""

BATCH_SYSTEM = "You are a senior funding strategy consultant. Synthesize multiple document analyses into actionable strategic insights. Always respond with valid JSON."

BATCH_PROMPT = """Analyze these multiple document analyses and provide a consolidated summary:

{analyses}

Create a comprehensive summary that includes:
1. Overall funding opportunity overview
2. Combined requirements and deadlines
3. Strategic recommendations
4. Risk assessment
5. Next steps and priorities

Focus on actionable insights and avoid redundancy."""


def _truncate(text: Any, limit: int, marker: str = "") -> str:
    content = text if isinstance(text, str) else json.dumps(text)
    if len(content) <= limit:
        return content
    return content[:limit] + marker


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def get_system_prompt(document_type: str) -> str:
    specific = TYPE_SYSTEM_PROMPTS.get(document_type)
    if specific:
        return f"{BASE_SYSTEM_PROMPT} {specific}"
    return f"{BASE_SYSTEM_PROMPT} {GENERAL_SYSTEM_SUFFIX}"


def build_analysis_prompt(document_text: Any, document_type: str, context: dict[str, Any]) -> str:
    prompt = ANALYSIS_PROMPT.format(
        document_type=document_type,
        content=_truncate(document_text, MAX_DOCUMENT_CHARS, " ...[truncated]"),
    )
    if context.get("userProfile") or context.get("project"):
        prompt += f"\n\nCONTEXT FOR PERSONALIZED ANALYSIS:\n{_dump(context)}"
    return prompt


async def _complete_json(
    provider: AIProviderService,
    task: str,
    system: str,
    prompt: str,
    temperature: float,
) -> tuple[Any, Any]:
    response = await provider.generate_completion(
        task,
        [{"role": "system", "content": system}, {"role": "user", "content": prompt}],
        temperature=temperature,
        json_mode=True,
    )
    if not response.content:
        raise ValueError("No response received from AI provider")
    return safe_parse_json(response.content), response


async def analyze_document(
    document_text: str,
    document_type: str = "unknown",
    context: dict[str, Any] | None = None,
    provider: AIProviderService | None = None,
) -> dict[str, Any]:
    """
    Extract key information, requirements and strategy from a funding document.

    Args:
        document_text: Raw document text (truncated to 12000 chars for the prompt)
        document_type: application, rfp, guidelines, contract, report or anything else
        context: Optional userProfile / project for personalised analysis
        provider: AI provider override (defaults to the shared service)

    Returns:
        Parsed analysis dict with an added ``metadata`` block

    Raises:
        ValueError: If the model returns nothing parseable
        AIProviderError: If every provider fails
    """
    provider = provider or get_ai_provider()
    context = context or {}

    analysis, response = await _complete_json(
        provider,
        "document-analysis",
        get_system_prompt(document_type),
        build_analysis_prompt(document_text, document_type, context),
        temperature=0.1,
    )

    confidence = calculate_confidence(analysis)
    logger.info(
        f"Analyzed {document_type} document",
        extra={"provider": response.provider, "tokens": response.total_tokens, "confidence": confidence},
    )

    return {
        **analysis,
        "metadata": {
            "documentType": document_type,
            "analyzedAt": datetime.now(timezone.utc).isoformat(),
            "tokensUsed": response.total_tokens,
            "confidence": confidence,
            "provider": response.provider,
            "model": response.model,
        },
    }


async def analyze_application_form(
    form_text: Any,
    user_profile: dict[str, Any] | None,
    project_data: dict[str, Any] | None,
    provider: AIProviderService | None = None,
) -> dict[str, Any]:
    prompt = FORM_ANALYSIS_PROMPT.format(
        content=_truncate(form_text or "", MAX_FORM_CHARS),
        user_profile=_dump(user_profile),
        project_data=_dump(project_data),
    )
    result, _ = await _complete_json(
        provider or get_ai_provider(), "smart-form-completion", FORM_ANALYSIS_SYSTEM, prompt, 0.2
    )
    return result


async def generate_requirements_checklist(
    analysis: dict[str, Any] | None,
    user_profile: dict[str, Any] | None,
    provider: AIProviderService | None = None,
) -> dict[str, Any]:
    prompt = CHECKLIST_PROMPT.format(analysis=_dump(analysis), user_profile=_dump(user_profile))
    result, _ = await _complete_json(
        provider or get_ai_provider(), "document-analysis", CHECKLIST_SYSTEM, prompt, 0.1
    )
    return result


async def generate_clarifying_questions(
    form_analysis: dict[str, Any] | None,
    context: dict[str, Any],
    provider: AIProviderService | None = None,
) -> Any:
    """Return the ``questions`` list when the model wraps it, else the raw result."""
    prompt = QUESTIONS_PROMPT.format(form_analysis=_dump(form_analysis), context=_dump(context))
    result, _ = await _complete_json(
        provider or get_ai_provider(), "smart-form-completion", QUESTIONS_SYSTEM, prompt, 0.3
    )
    if isinstance(result, dict) and "questions" in result:
        return result["questions"]
    return result


async def generate_batch_summary(
    analyses: list[dict[str, Any]] | None, provider: AIProviderService | None = None
) -> dict[str, Any]:
    prompt = BATCH_PROMPT.format(analyses=_dump(analyses or []))
    result, _ = await _complete_json(
        provider or get_ai_provider(), "document-analysis", BATCH_SYSTEM, prompt, 0.2
    )
    return result


async def analyze_documents_batch(
    documents: list[dict[str, Any]],
    context: dict[str, Any] | None = None,
    provider: AIProviderService | None = None,
) -> dict[str, Any]:
    """
    Analyze several documents, then summarize and consolidate their requirements.

    A document that fails analysis is recorded with its error and does not stop
    the batch. A failed summary is reported inline.
    """
    provider = provider or get_ai_provider()
    analyses: list[dict[str, Any]] = []

    for doc in documents:
        try:
            analysis = await analyze_document(
                doc.get("content", ""), doc.get("type", "unknown"), context, provider=provider
            )
            analyses.append({**analysis, "documentName": doc.get("name"), "documentId": doc.get("id")})
        except Exception as e:
            logger.error(f"Failed to analyze document {doc.get('name')}: {e}")
            analyses.append({"error": str(e), "documentName": doc.get("name"), "documentId": doc.get("id")})

    try:
        summary = await generate_batch_summary(analyses, provider=provider)
    except Exception as e:
        logger.error(f"Batch summary generation failed: {e}")
        summary = {"error": "Failed to generate summary", "message": str(e)}

    return {
        "analyses": analyses,
        "summary": summary,
        "consolidatedRequirements": consolidate_requirements(analyses),
    }
