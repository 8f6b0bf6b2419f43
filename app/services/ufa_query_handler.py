# ruff: noqa: E501
"""Answers natural-language funding questions from SBA and grants.gov intelligence."""

from typing import Any

from app.core.funding_readiness import assess_funding_readiness, determine_business_stage
from app.core.grants_gov_learning import GrantsGovLearningIntegrator
from app.core.logging import get_logger
from app.core.query_classifier import classify_query, resolve_handler
from app.core.sba_guide import SBABusinessGuideIntegrator
from app.services.ufa_agent import run_expert_funding_analysis

logger = get_logger(__name__)

OUTER_ERROR_MESSAGE = "I had trouble accessing the funding intelligence. Please try again."

FUNDING_OPTIONS_FALLBACK = """I can help you explore funding options! Based on what you've told me, you might be interested in:

**SBA Loan Programs:**
• 7(a) loans up to $5 million for general business purposes
• 504 loans for fixed assets like real estate and equipment
• Microloans up to $50,000 for startups

**Federal Grants:**
• Various programs through grants.gov
• Research and development funding
• Community and economic development grants

**Other Options:**
• Private loans and lines of credit
• Angel investment and venture capital
• Crowdfunding campaigns

Would you like me to run a personalized funding analysis for your specific situation?"""

GENERAL_FALLBACK = """I can help you with comprehensive funding intelligence! I have access to:

**SBA Resources:**
• Business guidance for startups, growth, and operations
• Loan programs with government backing
• Business planning templates and tools

**Federal Grants:**
• Grants.gov application strategies
• Federal funding cycles and deadlines
• Compliance requirements and best practices

**Funding Analysis:**
• Personalized funding strategy development
• Readiness assessments
• Strategic recommendations

What specific aspect of funding would you like to explore?"""


def _success_rate_label(complexity: int | None) -> str:
    complexity = complexity or 0
    if complexity <= 2:
        return "High"
    if complexity <= 3:
        return "Medium"
    return "Lower"


def determine_guidance_categories(query: str, business_stage: str) -> list[str]:
    lowered = query.lower()
    if "start" in lowered or business_stage == "startup":
        return ["business_planning", "business_formation"]
    if "grow" in lowered or business_stage == "growth":
        return ["growth_strategies", "business_operations"]
    if "funding" in lowered or "loan" in lowered:
        return ["funding_strategies", "financial_planning"]
    return ["business_planning", "funding_strategies"]


def _fallback(message: str) -> dict[str, Any]:
    return {"success": False, "message": message, "fallback": True}


class UFAQueryHandler:
    """Routes a classified query to the handler that answers it."""

    def __init__(
        self,
        sba_integrator: SBABusinessGuideIntegrator | None = None,
        grants_integrator: GrantsGovLearningIntegrator | None = None,
    ):
        self.sba_integrator = sba_integrator or SBABusinessGuideIntegrator()
        self.grants_integrator = grants_integrator or GrantsGovLearningIntegrator()

    async def process_query(
        self,
        tenant_id: str,
        query: str,
        user_profile: dict[str, Any] | None = None,
        project_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        logger.info(f"Processing UFA query for tenant {tenant_id}")

        try:
            query_type = classify_query(query)
            handler = resolve_handler(query_type)
            logger.info(f"Classified query as {query_type}, answering with {handler}")

            if handler == "sba_loans":
                return self.handle_sba_loans()
            if handler == "sba_guidance":
                return self.handle_sba_guidance(query, user_profile)
            if handler == "federal_grants":
                return self.handle_federal_grants()
            if handler == "funding_options":
                return await self.handle_funding_options(tenant_id, user_profile)
            if handler == "funding_readiness":
                return self.handle_readiness(user_profile)
            return await self.handle_general(tenant_id, user_profile)

        except Exception as e:
            logger.exception("UFA query handling failed")
            return {"success": False, "message": OUTER_ERROR_MESSAGE, "error": str(e)}

    def handle_sba_loans(self) -> dict[str, Any]:
        try:
            programs = [p for p in self.sba_integrator.load_programs() if p.get("program_type") == "loan_program"][:3]

            message = "Here are the top SBA loan programs that might work for you:\n\n"
            for i, program in enumerate(programs, start=1):
                message += f"**{i}. {program['name']}**\n"
                message += f"• Amount: {program.get('funding_amounts')}\n"
                message += f"• Purpose: {(program.get('description') or '')[:100]}...\n"
                message += f"• Success Rate: {_success_rate_label(program.get('application_complexity'))}\n\n"
            message += "Would you like me to run a full funding analysis to see which programs match your specific situation?"

            return {
                "success": True,
                "message": message,
                "data": {
                    "programs": programs,
                    "queryType": "sba_loans",
                    "recommendations": [
                        {
                            "name": p["name"],
                            "strategic_value": p.get("strategic_value"),
                            "next_steps": (p.get("success_factors") or [])[:2],
                        }
                        for p in programs
                    ],
                },
            }
        except Exception as e:
            logger.error(f"SBA loans query failed: {e}")
            return _fallback("I had trouble accessing SBA loan information. Let me run a general funding analysis instead.")

    def get_relevant_sba_guidance(self, query: str, user_profile: dict[str, Any] | None) -> list[dict[str, Any]]:
        knowledge = self.sba_integrator.load_knowledge()
        stage = determine_business_stage(user_profile)

        guidance = []
        for category in determine_guidance_categories(query, stage):
            data = knowledge.get(category)
            if not data or not data.get("insights"):
                continue
            recommendations = data.get("strategic_recommendations") or []
            action = recommendations[0].get("action") if recommendations else None
            guidance.append(
                {
                    "category": category,
                    "title": data.get("description"),
                    "content": data["insights"][0].get("content") or "",
                    "callouts": [action] if action else [],
                }
            )
        return guidance[:3]

    def handle_sba_guidance(self, query: str, user_profile: dict[str, Any] | None) -> dict[str, Any]:
        try:
            guidance = self.get_relevant_sba_guidance(query, user_profile)

            message = "Based on your question about SBA guidance, here's what I found:\n\n"
            for item in guidance:
                message += f"**{item['title']}**\n"
                message += f"{item['content'][:200]}...\n\n"
                if item["callouts"]:
                    message += "💡 Key Points:\n"
                    for callout in item["callouts"][:2]:
                        message += f"• {callout}\n"
                    message += "\n"

            return {"success": True, "message": message, "data": {"guidance": guidance, "queryType": "sba_guidance"}}
        except Exception as e:
            logger.error(f"SBA guidance query failed: {e}")
            return _fallback("I had trouble accessing SBA guidance. Would you like me to run a general funding analysis?")

    def handle_federal_grants(self) -> dict[str, Any]:
        try:
            knowledge = self.grants_integrator.load_knowledge()

            message = "Here's information about federal grant opportunities:\n\n"
            fundamentals = knowledge.get("fundamentals")
            if fundamentals:
                message += "**Federal Grant Basics:**\n"
                message += f"{fundamentals.get('description')}\n\n"

            strategy = knowledge.get("federal_strategy") or {}
            if strategy.get("insights"):
                message += "**Strategic Insights:**\n"
                for insight in strategy["insights"][:2]:
                    message += f"• {(insight.get('content') or '')[:100]}...\n"
                message += "\n"

            message += "Would you like me to help you identify specific federal grant opportunities for your project?"

            return {
                "success": True,
                "message": message,
                "data": {"grantsKnowledge": knowledge, "queryType": "federal_grants"},
            }
        except Exception as e:
            logger.error(f"Federal grants query failed: {e}")
            return _fallback("I had trouble accessing federal grant information. Let me check your overall funding options.")

    async def handle_funding_options(self, tenant_id: str, user_profile: dict[str, Any] | None) -> dict[str, Any]:
        result = await run_expert_funding_analysis(tenant_id, user_profile)
        if not result.get("ok"):
            logger.info("UFA analysis failed, providing fallback response")
            return _fallback(FUNDING_OPTIONS_FALLBACK)

        top = result["analysis"]["expertStrategies"][:3]
        message = "Based on your profile and projects, here are your top funding options:\n\n"
        for i, rec in enumerate(top, start=1):
            impact = f"${rec['potential_return']:,}" if rec.get("potential_return") else "High"
            message += f"**{i}. {rec['title']}**\n"
            message += f"• Priority: {rec.get('priority')}\n"
            message += f"• Timeline: {rec.get('timeline')}\n"
            message += f"• Potential Impact: {impact}\n\n"
        message += "This analysis combines SBA loan programs, federal grants, and other funding sources. Would you like me to dive deeper into any of these options?"

        return {
            "success": True,
            "message": message,
            "data": {"ufaResult": result, "queryType": "funding_options", "topRecommendations": top},
        }

    def handle_readiness(self, user_profile: dict[str, Any] | None) -> dict[str, Any]:
        try:
            readiness = assess_funding_readiness(user_profile)

            message = "Let me assess your funding readiness:\n\n"
            message += f"**Overall Readiness: {readiness['level']}**\n"
            message += f"**Score: {readiness['score']}/100**\n\n"
            message += "**Current Status:**\n"
            for factor in readiness["factors"]:
                message += f"• {factor}\n"
            message += "\n**Recommendations:**\n"
            for rec in readiness["recommendations"]:
                message += f"• {rec}\n"

            return {
                "success": True,
                "message": message,
                "data": {"readiness": readiness, "queryType": "readiness_check"},
            }
        except Exception as e:
            logger.error(f"Readiness query failed: {e}")
            return _fallback("I had trouble assessing your readiness. Would you like me to help you prepare for funding applications?")

    async def handle_general(self, tenant_id: str, user_profile: dict[str, Any] | None) -> dict[str, Any]:
        result = await run_expert_funding_analysis(tenant_id, user_profile)
        if result.get("ok"):
            strategies = result["analysis"]["expertStrategies"]
            lead = strategies[0]["description"] if strategies else "You have several strong funding options available."
            return {
                "success": True,
                "message": (
                    f"I've analyzed your funding situation. {lead}\n\n"
                    "Would you like me to explain any specific recommendations or help you get started with an application?"
                ),
                "data": {"ufaResult": result, "queryType": "general"},
            }

        return {"success": True, "message": GENERAL_FALLBACK, "data": {"queryType": "general_fallback"}}


async def process_ufa_query(
    tenant_id: str,
    query: str,
    user_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Answer a funding question for a tenant.

    Args:
        tenant_id: Tenant asking the question
        query: Free-text question
        user_context: Optional dict with userProfile and projectContext

    Returns:
        {success, message, data?, fallback?, error?}
    """
    context = user_context or {}
    handler = UFAQueryHandler()
    return await handler.process_query(
        tenant_id, query, context.get("userProfile"), context.get("projectContext")
    )
