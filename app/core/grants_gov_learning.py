"""Grants.gov learning-center integration.

Scrapes the grants.gov "learn grants" pages, extracts timing, eligibility,
compliance and best-practice guidance, and uses it to enrich federal
opportunities and application strategies.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.web_scraper import BrowserSession, extract_content_blocks, fetch_html
from app.db.knowledge_base import list_grants_knowledge, upsert_grants_knowledge

logger = get_logger(__name__)

GRANTS_GOV_BASE_URL = "https://www.grants.gov"

LEARNING_SECTIONS = [
    "/learn-grants/grant-basics",
    "/learn-grants/grant-making-process",
    "/learn-grants/grant-policies",
    "/learn-grants/applicant-resources",
    "/learn-grants/federal-grant-guidance",
    "/learn-grants/find-opportunities",
    "/learn-grants/workspace-overview",
    "/learn-grants/application-submission-tips",
]

# Rendered pages: the first selector with any match is used, then <main>
BROWSER_SELECTORS = [
    ".content-section",
    ".grant-info",
    ".tip-box",
    ".process-step",
    "article",
    "main section",
    ".learning-content",
]
BROWSER_WAIT_SELECTOR = "main, .content, article, .grant-info"
STATIC_SELECTORS = [".content-section", ".grant-info", ".tip-box", ".process-step"]
TIP_SELECTOR = ".tip, .important, .note"

CATEGORY_MAP: list[tuple[str, str]] = [
    ("grant-basics", "fundamentals"),
    ("grant-making-process", "process_intelligence"),
    ("grant-policies", "compliance_requirements"),
    ("applicant-resources", "application_guidance"),
    ("federal-grant-guidance", "federal_strategy"),
    ("find-opportunities", "opportunity_identification"),
    ("workspace-overview", "technical_guidance"),
    ("application-submission-tips", "success_tactics"),
]

INTELLIGENCE_CATEGORIES: dict[str, str] = {
    "fundamentals": "Core grant knowledge and concepts",
    "process_intelligence": "Federal grant process timing and strategies",
    "compliance_requirements": "Critical compliance and policy requirements",
    "application_guidance": "Best practices for application development",
    "federal_strategy": "Strategic approaches to federal funding",
    "opportunity_identification": "Techniques for finding the right opportunities",
    "success_tactics": "Proven tactics for application success",
}

KEY_PHRASES = [
    "must",
    "required",
    "should",
    "recommended",
    "important",
    "critical",
    "deadline",
    "timeline",
    "process",
    "eligibility",
    "criteria",
]

# (trigger terms, insight type, how the insight is used, priority); first match wins
_INSIGHT_RULES: list[tuple[tuple[str, ...], str, str, str]] = [
    (
        ("deadline", "timeline"),
        "timing_strategy",
        "Use for deadline tracking and application timeline planning",
        "high",
    ),
    (
        ("eligibility", "criteria"),
        "eligibility_intelligence",
        "Use for opportunity matching and qualification assessment",
        "high",
    ),
    (
        ("required", "must"),
        "compliance_requirement",
        "Use for application checklist and compliance verification",
        "critical",
    ),
    (
        ("recommended", "should"),
        "best_practice",
        "Use for application quality improvement recommendations",
        "medium",
    ),
]

_APPLICATIONS: dict[str, tuple[str, str, str]] = {
    "process_intelligence": (
        "Timeline Optimization",
        "Use process timing to optimize application submission schedules",
        "Improve success rates through better timing alignment",
    ),
    "opportunity_identification": (
        "Opportunity Matching Algorithm",
        "Integrate search strategies into automated opportunity discovery",
        "Increase relevant opportunity identification by 40%",
    ),
    "application_guidance": (
        "Application Quality Assessment",
        "Use guidance to create application scoring rubrics",
        "Provide real-time application improvement recommendations",
    ),
    "success_tactics": (
        "Success Probability Enhancement",
        "Integrate tactics into ML prediction models and recommendations",
        "Improve predicted and actual success rates",
    ),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def categorize_content(section_path: str) -> str:
    for fragment, category in CATEGORY_MAP:
        if fragment in section_path:
            return category
    return "general"


def convert_to_actionable_insight(sentence: str, category: str) -> dict[str, Any] | None:
    lower = sentence.lower()
    for terms, insight_type, application, priority in _INSIGHT_RULES:
        if any(term in lower for term in terms):
            return {
                "type": insight_type,
                "content": sentence,
                "ufa_application": application,
                "category": category,
                "priority": priority,
            }
    return None


def extract_actionable_insights(item: dict[str, Any]) -> list[dict[str, Any]]:
    insights = []
    for sentence in item["content"].split("."):
        if len(sentence) <= 20:
            continue
        if any(phrase in sentence.lower() for phrase in KEY_PHRASES):
            insight = convert_to_actionable_insight(sentence.strip(), item["category"])
            if insight:
                insights.append(insight)

    for tip in item.get("tips") or []:
        if len(tip) > 10:
            insights.append(
                {
                    "type": "expert_tip",
                    "content": tip,
                    "category": item["category"],
                    "priority": "high",
                    "source": "grants.gov",
                }
            )
    return insights


def generate_ufa_applications(item: dict[str, Any]) -> list[dict[str, Any]]:
    if item["category"] not in _APPLICATIONS:
        return []
    feature, implementation, value = _APPLICATIONS[item["category"]]
    return [
        {
            "ufa_feature": feature,
            "implementation": implementation,
            "strategic_value": value,
            "content_source": item["title"],
        }
    ]


def generate_strategic_recommendations(insights: list[dict[str, Any]], category: str) -> list[dict[str, str]]:
    """One critical and one high recommendation, each only when matching insights exist."""
    label = category.replace("_", " ", 1).upper()
    critical = [i for i in insights if i.get("priority") == "critical"]
    high = [i for i in insights if i.get("priority") == "high"]

    recommendations = []
    if critical:
        recommendations.append(
            {
                "priority": "critical",
                "title": f"{label}: Critical Compliance Requirements",
                "description": f"{len(critical)} critical requirements identified from Grants.gov guidance",
                "implementation": "Integrate into UFA compliance checking and application review processes",
                "strategic_impact": "Prevent application disqualification due to compliance issues",
            }
        )
    if high:
        recommendations.append(
            {
                "priority": "high",
                "title": f"{label}: Strategic Enhancement Opportunities",
                "description": f"{len(high)} strategic insights for improving funding success",
                "implementation": "Integrate into UFA strategic recommendations and expert guidance",
                "strategic_impact": "Increase application quality and success probability",
            }
        )
    return recommendations


def process_into_ufa_intelligence(items: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    intelligence: dict[str, dict[str, Any]] = {
        category: {"description": description, "insights": [], "applications": []}
        for category, description in INTELLIGENCE_CATEGORIES.items()
    }

    for item in items:
        bucket = intelligence.get(item.get("category"))
        if bucket is None:
            continue
        bucket["insights"].extend(extract_actionable_insights(item))
        bucket["applications"].extend(generate_ufa_applications(item))

    for category, bucket in intelligence.items():
        bucket["strategic_recommendations"] = generate_strategic_recommendations(bucket["insights"], category)

    return intelligence


def scraping_method_used(content: list[dict[str, Any]]) -> str:
    """browser, traditional or mixed, from the methods the items were actually scraped with."""
    methods = {item.get("scraping_method") for item in content}
    if methods == {"browser"}:
        return "browser"
    if "browser" in methods:
        return "mixed"
    return "traditional"


class GrantsGovLearningIntegrator:
    """Builds and queries the grants.gov learning knowledge base."""

    def __init__(self, use_browser: bool | None = None):
        settings = get_settings()
        self.use_browser = settings.USE_HEADLESS_BROWSER if use_browser is None else use_browser
        self.knowledge_base: dict[str, dict[str, Any]] = {}
        self.last_updated: str | None = None
        self._browser: BrowserSession | None = None

    async def init_browser(self) -> None:
        if not self.use_browser or self._browser is not None:
            return
        browser = BrowserSession()
        try:
            await browser.start()
            self._browser = browser
        except Exception as e:
            logger.error(f"Failed to launch browser, switching to plain HTTP: {e}")
            self.use_browser = False

    async def close_browser(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None

    async def scrape_section_with_browser(self, section_path: str) -> list[dict[str, Any]]:
        """
        Render a section in the headless browser.

        Raises:
            RuntimeError: If no browser could be started
        """
        await self.init_browser()
        if self._browser is None:
            raise RuntimeError("Browser not available")

        url = f"{GRANTS_GOV_BASE_URL}{section_path}"
        html = await self._browser.fetch_rendered_html(url, wait_selector=BROWSER_WAIT_SELECTOR)
        blocks = extract_content_blocks(
            html, BROWSER_SELECTORS, TIP_SELECTOR, first_match=True, fallback_selector="main"
        )
        logger.info(f"Browser extracted {len(blocks)} items from {section_path}")
        return self._to_items(blocks, section_path, url, "browser")

    async def scrape_learning_section(self, section_path: str) -> list[dict[str, Any]]:
        """Browser first when enabled, then plain HTTP. Errors yield an empty list."""
        if self.use_browser:
            try:
                return await self.scrape_section_with_browser(section_path)
            except Exception as e:
                logger.warning(f"Browser scrape failed for {section_path}, using plain HTTP: {e}")

        url = f"{GRANTS_GOV_BASE_URL}{section_path}"
        try:
            html = await fetch_html(url)
        except Exception as e:
            logger.error(f"Error scraping {url}: {e}")
            return []

        blocks = extract_content_blocks(html, STATIC_SELECTORS, TIP_SELECTOR)
        logger.info(f"Plain HTTP extracted {len(blocks)} items from {section_path}")
        return self._to_items(blocks, section_path, url, "traditional")

    def _to_items(
        self, blocks: list[dict[str, Any]], section_path: str, url: str, method: str
    ) -> list[dict[str, Any]]:
        category = categorize_content(section_path)
        extracted_at = _now()
        return [
            {
                **block,
                "category": category,
                "section": section_path,
                "source_url": url,
                "extracted_at": extracted_at,
                "scraping_method": method,
            }
            for block in blocks
        ]

    async def scrape_learning_content(self) -> list[dict[str, Any]]:
        content: list[dict[str, Any]] = []
        for section in LEARNING_SECTIONS:
            content.extend(await self.scrape_learning_section(section))
        return content

    def store_knowledge_base(self, intelligence: dict[str, dict[str, Any]]) -> bool:
        """Persist the knowledge base. The in-memory copy is always refreshed."""
        self.knowledge_base = intelligence
        try:
            for category, data in intelligence.items():
                upsert_grants_knowledge(category, data)
        except Exception as e:
            logger.error(f"Failed to store grants.gov knowledge base: {e}")
            return False
        logger.info(f"Stored grants.gov knowledge base: {len(intelligence)} categories")
        return True

    async def build_ufa_knowledge_base(self) -> dict[str, Any]:
        """Scrape, process and store grants.gov knowledge. Never raises."""
        logger.info("Building knowledge base from grants.gov learning resources")
        try:
            await self.init_browser()
            content = await self.scrape_learning_content()
            intelligence = process_into_ufa_intelligence(content)
            await asyncio.to_thread(self.store_knowledge_base, intelligence)
            self.last_updated = _now()
            return {
                "success": True,
                "content_categories": list(intelligence.keys()),
                "total_resources": len(content),
                "last_updated": self.last_updated,
                "scraping_method": scraping_method_used(content),
            }
        except Exception as e:
            logger.exception("Failed to build grants.gov knowledge base")
            return {"success": False, "error": str(e)}
        finally:
            await self.close_browser()

    def load_knowledge(self) -> dict[str, dict[str, Any]]:
        """In-memory knowledge, else whatever was stored."""
        if self.knowledge_base:
            return self.knowledge_base
        try:
            rows = list_grants_knowledge()
        except Exception as e:
            logger.warning(f"Could not load stored grants.gov knowledge: {e}")
            rows = []
        self.knowledge_base = {row["category"]: row for row in rows}
        return self.knowledge_base

    def get_relevant_knowledge(self, categories: list[str]) -> dict[str, list[dict[str, Any]]]:
        knowledge = self.load_knowledge()
        insights: list[dict[str, Any]] = []
        applications: list[dict[str, Any]] = []
        recommendations: list[dict[str, Any]] = []
        for category in categories:
            data = knowledge.get(category)
            if data:
                insights.extend(data.get("insights") or [])
                applications.extend(data.get("applications") or [])
                recommendations.extend(data.get("strategic_recommendations") or [])
        return {"insights": insights, "applications": applications, "recommendations": recommendations}

    def extract_compliance_requirements(self) -> list[dict[str, Any]]:
        knowledge = self.get_relevant_knowledge(["compliance_requirements"])
        return [
            {"requirement": i["content"], "priority": i["priority"], "verification_needed": True}
            for i in knowledge["insights"]
            if i.get("type") == "compliance_requirement"
        ]

    def enhance_opportunity_analysis(self, opportunity: dict[str, Any]) -> dict[str, Any]:
        """Attach grants.gov insights, compliance requirements and success tips to an opportunity."""
        knowledge = self.get_relevant_knowledge(
            ["opportunity_identification", "federal_strategy", "application_guidance"]
        )
        return {
            **opportunity,
            "grants_gov_insights": knowledge["insights"][:3],
            "compliance_requirements": self.extract_compliance_requirements(),
            "strategic_recommendations": knowledge["recommendations"],
            "success_enhancement_tips": [a for a in knowledge["applications"] if "Success" in a["ufa_feature"]][:2],
        }

    def enhance_application_strategy(self, strategy: dict[str, Any]) -> dict[str, Any]:
        """Attach best practices, a compliance checklist, timing and quality guidance to a strategy."""
        knowledge = self.get_relevant_knowledge(["application_guidance", "success_tactics", "process_intelligence"])
        insights = knowledge["insights"]
        return {
            **strategy,
            "grants_gov_best_practices": [i for i in insights if i.get("type") == "best_practice"][:5],
            "compliance_checklist": generate_compliance_checklist(insights),
            "timing_optimization": generate_timing_guidance(insights),
            "quality_enhancement": generate_quality_guidance(knowledge),
        }


def generate_compliance_checklist(insights: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "item": i["content"],
            "category": i.get("category"),
            "status": "pending_verification",
            "priority": i.get("priority"),
        }
        for i in insights
        if i.get("type") == "compliance_requirement"
    ]


def generate_timing_guidance(insights: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "optimal_submission_timing": "Submit 2-3 days before deadline for technical review",
        "preparation_timeline": "6-8 weeks minimum for federal grant applications",
        "critical_milestones": [i["content"] for i in insights if i.get("type") == "timing_strategy"],
    }


def generate_quality_guidance(knowledge: dict[str, list[dict[str, Any]]]) -> dict[str, Any]:
    return {
        "expert_tips": [i["content"] for i in knowledge["insights"] if i.get("type") == "expert_tip"][:5],
        "quality_features": [a["ufa_feature"] for a in knowledge["applications"] if "Quality" in a["ufa_feature"]],
        "review_focus": [r["title"] for r in knowledge["recommendations"]],
    }
