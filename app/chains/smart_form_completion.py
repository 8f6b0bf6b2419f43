"""LLM chains that help applicants complete grant forms."""

import json
from typing import Any

from app.core.ai_provider import AIProviderService, get_ai_provider, safe_parse_json
from app.core.logging import get_logger

logger = get_logger(__name__)

# action -> (system prompt, user prompt template, temperature)
# ruff: noqa: E501
COMPLETE_FORM_SYSTEM = "You are an expert grant application consultant. Complete form fields accurately and provide helpful suggestions. Always respond with valid JSON."
COMPLETE_FORM_PROMPT = """You are an expert grant application assistant. Complete the following form fields using the provided user and project information.

FORM FIELDS TO COMPLETE:
{form_fields}

USER PROFILE:
{user_profile}

PROJECT DATA:
{project_data}

For each form field, provide:
1. A completed value based on the available information
2. Confidence level (0.0-1.0) in the completion
3. Flag if additional information is needed
4. Suggested improvements or alternatives

Respond with JSON containing completedFields, suggestions, and missingInfo arrays."""

COMPLETION_PLAN_SYSTEM = "You are a strategic grant application consultant. Create actionable completion plans that maximize success probability. Always respond with valid JSON."
COMPLETION_PLAN_PROMPT = """Create a strategic completion plan for this grant application based on the requirements and available information.

FORM REQUIREMENTS:
{form_fields}

CONTEXT:
{context}

Create a comprehensive completion plan with:
1. PHASES: Logical steps to complete the application
2. PRIORITIES: High/medium/low priority items
3. TIMELINE: Estimated time for each phase
4. RESOURCES: What information, documents, or help is needed
5. DEPENDENCIES: What must be completed before other tasks
6. RISKS: Potential challenges and mitigation strategies

Format as JSON with detailed phases array and overall strategy."""

NARRATIVES_SYSTEM = "You are an expert grant writer. Create compelling, professional narratives that clearly communicate value and impact. Always respond with valid JSON."
NARRATIVES_PROMPT = """Generate compelling narrative content for grant application sections based on the user's profile and project.

FORM SECTIONS NEEDING NARRATIVES:
{form_fields}

USER PROFILE:
{user_profile}

PROJECT DATA:
{project_data}

For each narrative section, provide:
1. CONTENT: Well-written, compelling text
2. KEY_POINTS: Main messages conveyed
3. WORD_COUNT: Approximate length
4. TONE: Professional, persuasive, technical, etc.
5. IMPROVEMENT_TIPS: How to strengthen the narrative

Focus on demonstrating impact, feasibility, and alignment with funder priorities."""

MISSING_INFO_SYSTEM = "You are a thorough grant application analyst. Identify exactly what information is needed for a complete, competitive application. Always respond with valid JSON."
MISSING_INFO_PROMPT = """Analyze what information is missing for completing this grant application form.

REQUIRED FORM FIELDS:
{form_fields}

AVAILABLE USER PROFILE:
{user_profile}

AVAILABLE PROJECT DATA:
{project_data}

Identify:
1. MISSING_CRITICAL: Essential information that's completely absent
2. MISSING_RECOMMENDED: Information that would strengthen the application
3. INCOMPLETE_FIELDS: Partial information that needs expansion
4. QUESTIONS_TO_ASK: Specific questions to gather missing information
5. PRIORITY_ORDER: What to collect first for maximum impact

Organize by urgency and provide specific guidance on gathering each type of information."""

ACTIONS: dict[str, tuple[str, str, float]] = {
    "complete-form": (COMPLETE_FORM_SYSTEM, COMPLETE_FORM_PROMPT, 0.1),
    "create-completion-plan": (COMPLETION_PLAN_SYSTEM, COMPLETION_PLAN_PROMPT, 0.2),
    "generate-narratives": (NARRATIVES_SYSTEM, NARRATIVES_PROMPT, 0.3),
    "detect-missing-info": (MISSING_INFO_SYSTEM, MISSING_INFO_PROMPT, 0.1),
}


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


async def run_form_completion_action(
    action: str,
    form_fields: Any,
    user_profile: dict[str, Any] | None = None,
    project_data: dict[str, Any] | None = None,
    provider: AIProviderService | None = None,
) -> Any:
    """
    Run one smart form completion action.

    Args:
        action: complete-form, create-completion-plan, generate-narratives or detect-missing-info
        form_fields: Form fields (or requirements for a completion plan)
        user_profile: Applicant profile
        project_data: Project record
        provider: AI provider override

    Returns:
        Parsed JSON result from the model

    Raises:
        KeyError: If the action is unknown
        ValueError: If the model output cannot be parsed
    """
    system, template, temperature = ACTIONS[action]
    prompt = template.format(
        form_fields=_dump(form_fields),
        user_profile=_dump(user_profile),
        project_data=_dump(project_data),
        context=_dump({"userProfile": user_profile, "projectData": project_data}),
    )

    provider = provider or get_ai_provider()
    response = await provider.generate_completion(
        "smart-form-completion",
        [{"role": "system", "content": system}, {"role": "user", "content": prompt}],
        temperature=temperature,
        json_mode=True,
    )
    logger.info(f"Smart form completion action {action} finished", extra={"provider": response.provider})
    return safe_parse_json(response.content)
