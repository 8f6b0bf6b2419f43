"""SBA business guide integration.

Scrapes the sba.gov business guide and funding program pages, turns the
content into categorized funding intelligence, and matches SBA programs to an
organization profile. When scraping or storage fails the integrator keeps
working from the four major SBA programs and whatever it holds in memory.
"""

import asyncio
import copy
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from app.core.config import get_settings
from app.core.funding_readiness import assess_sba_funding_readiness
from app.core.logging import get_logger
from app.core.web_scraper import BrowserSession, extract_content_blocks, fetch_html
from app.db.knowledge_base import (
    list_sba_knowledge,
    list_sba_programs,
    upsert_sba_knowledge,
    upsert_sba_program,
)

logger = get_logger(__name__)

SBA_BASE_URL = "https://www.sba.gov"
SBA_FUNDING_PROGRAMS_URL = f"{SBA_BASE_URL}/funding-programs"

SBA_GUIDE_SECTIONS = [
    "/business-guide/plan-your-business",
    "/business-guide/launch-your-business",
    "/business-guide/manage-your-business",
    "/business-guide/grow-your-business",
    "/business-guide/fund-your-business",
    "/business-guide/plan-your-business/calculate-your-startup-costs",
    "/business-guide/plan-your-business/write-your-business-plan",
    "/business-guide/launch-your-business/choose-business-structure",
    "/business-guide/launch-your-business/register-your-business",
    "/business-guide/manage-your-business/stay-legally-compliant",
    "/business-guide/grow-your-business/expand-market-reach",
    "/business-guide/fund-your-business/determine-how-much-funding-you-need",
    "/business-guide/fund-your-business/explore-funding-options",
]

GUIDE_CONTENT_SELECTORS = [".guide-content", ".section-content", ".funding-option", ".program-details"]
CALLOUT_SELECTOR = ".callout, .highlight, .important"
PROGRAM_CARD_SELECTOR = ".program-card, .funding-option, .loan-program"

# Ordered: the first fragment found in the section path wins
CATEGORY_MAP: list[tuple[str, str]] = [
    ("plan-your-business", "business_planning"),
    ("launch-your-business", "business_formation"),
    ("manage-your-business", "business_operations"),
    ("grow-your-business", "business_growth"),
    ("fund-your-business", "funding_strategies"),
    ("startup-costs", "financial_planning"),
    ("business-plan", "strategic_planning"),
    ("business-structure", "legal_structure"),
    ("register-your-business", "compliance_setup"),
    ("legally-compliant", "ongoing_compliance"),
    ("expand-market", "growth_strategies"),
    ("funding-options", "funding_mechanisms"),
]

STAGE_MAP: list[tuple[str, str]] = [
    ("plan-your-business", "pre_startup"),
    ("launch-your-business", "startup"),
    ("manage-your-business", "established"),
    ("grow-your-business", "growth"),
]

FUNDING_KEYWORDS = [
    "funding",
    "loan",
    "grant",
    "investment",
    "capital",
    "financing",
    "sba loan",
    "microfinance",
    "venture capital",
    "angel investor",
    "crowdfunding",
    "revenue",
    "cash flow",
    "startup costs",
]

INSIGHT_KEYWORDS = [
    "should",
    "must",
    "required",
    "important",
    "consider",
    "avoid",
    "best practice",
    "recommend",
    "critical",
    "essential",
    "key",
]

INTELLIGENCE_CATEGORIES: dict[str, str] = {
    "business_planning": "Strategic business planning and startup guidance",
    "business_formation": "Business structure and legal formation guidance",
    "funding_strategies": "Comprehensive funding options and strategies",
    "financial_planning": "Financial planning and cost analysis",
    "business_operations": "Business management and operational guidance",
    "growth_strategies": "Business growth and expansion strategies",
    "compliance_requirements": "Legal compliance and regulatory requirements",
}

PURPOSE_TERMS = ["equipment", "real estate", "working capital", "expansion", "research", "development"]

MAJOR_SBA_PROGRAMS: list[dict[str, Any]] = [
    {
        "name": "SBA 7(a) Loan Program",
        "description": (
            "SBA's most common loan program providing up to $5 million for various business purposes "
            "including working capital, equipment, real estate, and debt refinancing."
        ),
        "eligibility_requirements": (
            "For-profit business, meet SBA size standards, demonstrate need for credit, have invested equity"
        ),
        "funding_amounts": "Up to $5 million",
        "program_type": "loan_program",
        "business_stage_fit": ["startup", "established", "growth"],
        "strategic_value": 5,
        "application_complexity": 3,
        "success_factors": [
            "Strong credit history",
            "Solid business plan",
            "Industry experience",
            "Collateral availability",
        ],
        "link": "https://www.sba.gov/funding-programs/loans/7a-loans",
    },
    {
        "name": "SBA 504 Loan Program",
        "description": (
            "Long-term, fixed-rate financing for major fixed assets like real estate and equipment. "
            "Provides up to $5.5 million for qualified projects."
        ),
        "eligibility_requirements": "For-profit business, meet size standards, occupy 51% of real estate purchased",
        "funding_amounts": "Up to $5.5 million",
        "program_type": "loan_program",
        "business_stage_fit": ["established", "growth"],
        "strategic_value": 4,
        "application_complexity": 4,
        "success_factors": [
            "Real estate or equipment purchase",
            "Job creation",
            "Strong financials",
            "Occupancy requirements",
        ],
        "link": "https://www.sba.gov/funding-programs/loans/504-loans",
    },
    {
        "name": "SBA Microloans",
        "description": (
            "Small loans up to $50,000 to help small businesses and nonprofit childcare centers start up and expand."
        ),
        "eligibility_requirements": "Small business or nonprofit childcare center, demonstrate need for credit",
        "funding_amounts": "Up to $50,000",
        "program_type": "microfinance",
        "business_stage_fit": ["startup", "established"],
        "strategic_value": 2,
        "application_complexity": 2,
        "success_factors": ["Business plan", "Management experience", "Industry knowledge"],
        "link": "https://www.sba.gov/funding-programs/loans/microloans",
    },
    {
        "name": "SBIR/STTR Programs",
        "description": (
            "Research and development funding for innovative small businesses through federal agencies. "
            "Provides non-dilutive funding for technology development."
        ),
        "eligibility_requirements": "Small business, research and development focus, innovative technology",
        "funding_amounts": "Phase I: up to $275,000, Phase II: up to $1.75 million",
        "program_type": "grant_program",
        "business_stage_fit": ["startup", "established"],
        "strategic_value": 5,
        "application_complexity": 5,
        "success_factors": [
            "Innovation",
            "Technical expertise",
            "Commercialization potential",
            "Research capabilities",
        ],
        "link": "https://www.sba.gov/funding-programs/investment-capital/sbir-sttr",
    },
]

_MILLIONS_RE = re.compile(r"\$(\d+(?:\.\d+)?)\s*million", re.IGNORECASE)
_DOLLARS_RE = re.compile(r"\$(\d+(?:,\d{3})*)")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _has_any(text: str, terms: list[str] | tuple[str, ...]) -> bool:
    return any(term in text for term in terms)


# =============================================================================
# Content classifiers
# =============================================================================


def categorize_sba_content(section_path: str) -> str:
    for fragment, category in CATEGORY_MAP:
        if fragment in section_path:
            return category
    return "general_business"


def identify_business_stage(section_path: str) -> str:
    for fragment, stage in STAGE_MAP:
        if fragment in section_path:
            return stage
    return "all_stages"


def assess_funding_relevance(title: str, content: str) -> str:
    """Count funding keywords in the text: 3+ is high, 1+ medium, else low."""
    text = f"{title} {content}".lower()
    hits = sum(1 for keyword in FUNDING_KEYWORDS if keyword in text)
    if hits >= 3:
        return "high"
    if hits >= 1:
        return "medium"
    return "low"


# =============================================================================
# Program classifiers
# =============================================================================


def classify_program_type(name: str, description: str) -> str:
    text = f"{name} {description}".lower()
    if _has_any(text, ("loan", "7(a)", "504")):
        return "loan_program"
    if _has_any(text, ("grant", "award")):
        return "grant_program"
    if _has_any(text, ("investment", "venture")):
        return "investment_program"
    if _has_any(text, ("micro", "small")):
        return "microfinance"
    if _has_any(text, ("disaster", "emergency")):
        return "disaster_relief"
    if _has_any(text, ("export", "international")):
        return "export_assistance"
    return "general_support"


def determine_business_stage_fit(description: str) -> list[str]:
    text = description.lower()
    stages = []
    if _has_any(text, ("startup", "new business", "start")):
        stages.append("startup")
    if _has_any(text, ("existing", "established", "operating")):
        stages.append("established")
    if _has_any(text, ("expand", "grow", "acquisition")):
        stages.append("growth")
    return stages or ["all_stages"]


def assess_strategic_value(name: str, description: str) -> int:
    """Score 0-5 from amount, accessibility and prominence signals."""
    text = f"{name} {description}".lower()
    value = 0

    if _has_any(text, ("million", "$1,000,000")):
        value += 3
    elif _has_any(text, ("$500,000", "500k")):
        value += 2
    elif _has_any(text, ("$50,000", "50k")):
        value += 1

    if _has_any(text, ("guaranteed", "backed")):
        value += 2
    if _has_any(text, ("low interest", "favorable terms")):
        value += 1

    if _has_any(text, ("core program", "flagship")):
        value += 2
    if _has_any(text, ("popular", "widely used")):
        value += 1

    return min(value, 5)


def assess_application_complexity(description: str) -> int:
    """Score 1-5 from documentation and review signals."""
    text = description.lower()
    complexity = 1
    if _has_any(text, ("extensive documentation", "detailed proposal")):
        complexity += 2
    if _has_any(text, ("business plan required", "financial projections")):
        complexity += 1
    if _has_any(text, ("collateral", "guarantee")):
        complexity += 1
    if _has_any(text, ("multiple phases", "technical review")):
        complexity += 1
    return min(complexity, 5)


_SUCCESS_FACTORS: list[tuple[tuple[str, ...], str]] = [
    (("business plan", "planning"), "Comprehensive business plan"),
    (("credit", "financial"), "Strong credit history"),
    (("collateral", "assets"), "Adequate collateral"),
    (("experience", "management"), "Management experience"),
    (("market", "demand"), "Market validation"),
    (("innovation", "technology"), "Technical innovation"),
]


def identify_success_factors(description: str) -> list[str]:
    text = description.lower()
    factors = [factor for terms, factor in _SUCCESS_FACTORS if _has_any(text, terms)]
    if not factors:
        factors = ["Strong business fundamentals", "Financial readiness", "Clear growth strategy"]
    return factors[:4]


def get_major_sba_programs() -> list[dict[str, Any]]:
    return copy.deepcopy(MAJOR_SBA_PROGRAMS)


def build_program(
    name: str,
    description: str,
    eligibility: str = "",
    amounts: str = "",
    href: str | None = None,
) -> dict[str, Any]:
    """Classify a scraped program card into a program record."""
    return {
        "name": name,
        "description": description,
        "eligibility_requirements": eligibility,
        "funding_amounts": amounts,
        "program_type": classify_program_type(name, description),
        "business_stage_fit": determine_business_stage_fit(description),
        "strategic_value": assess_strategic_value(name, description),
        "application_complexity": assess_application_complexity(description),
        "success_factors": identify_success_factors(description),
        "link": urljoin(SBA_BASE_URL, href) if href else SBA_FUNDING_PROGRAMS_URL,
        "extracted_at": _now(),
    }


def parse_program_cards(html: str) -> list[dict[str, Any]]:
    soup = BeautifulSoup(html, "html.parser")
    programs = []
    for card in soup.select(PROGRAM_CARD_SELECTOR):
        name_el = card.select_one("h3, h4, .program-title")
        desc_el = card.select_one("p, .description")
        name = name_el.get_text(" ", strip=True) if name_el else ""
        description = desc_el.get_text(" ", strip=True) if desc_el else ""
        if not (name and description):
            continue
        link = card.select_one("a[href]")
        programs.append(
            build_program(
                name,
                description,
                eligibility=" ".join(el.get_text(" ", strip=True) for el in card.select(".eligibility, .requirements")),
                amounts=" ".join(
                    el.get_text(" ", strip=True) for el in card.select(".amount, .loan-amount, .funding-range")
                ),
                href=link.get("href") if link else None,
            )
        )
    return programs


# =============================================================================
# Intelligence processing
# =============================================================================


_INSIGHT_RULES: list[tuple[tuple[str, ...], str, str, str]] = [
    (
        ("funding", "capital"),
        "funding_strategy",
        "Use for funding strategy recommendations and capital planning",
        "high",
    ),
    (
        ("loan", "credit"),
        "loan_guidance",
        "Use for SBA loan program recommendations and preparation",
        "high",
    ),
    (
        ("business plan", "planning"),
        "planning_guidance",
        "Use for business plan development and strategic planning",
        "medium",
    ),
    (
        ("compliance", "legal"),
        "compliance_guidance",
        "Use for compliance checking and legal requirement tracking",
        "critical",
    ),
]


def convert_to_business_insight(sentence: str, item: dict[str, Any]) -> dict[str, Any] | None:
    lower = sentence.lower()
    for terms, insight_type, application, priority in _INSIGHT_RULES:
        if _has_any(lower, terms):
            return {
                "type": insight_type,
                "content": sentence,
                "ufa_application": application,
                "category": item["category"],
                "business_stage": item.get("business_stage"),
                "priority": priority,
            }
    return None


def extract_business_insights(item: dict[str, Any]) -> list[dict[str, Any]]:
    """Turn advisory sentences and callouts from one scraped block into insights."""
    insights = []

    for sentence in item["content"].split("."):
        if len(sentence) <= 15:
            continue
        if _has_any(sentence.lower(), INSIGHT_KEYWORDS):
            insight = convert_to_business_insight(sentence.strip(), item)
            if insight:
                insights.append(insight)

    for callout in item.get("callouts") or []:
        if len(callout) > 10:
            insights.append(
                {
                    "type": "sba_guidance",
                    "content": callout,
                    "category": item["category"],
                    "business_stage": item.get("business_stage"),
                    "funding_relevance": item.get("funding_relevance"),
                    "priority": "high",
                    "source": "sba.gov",
                }
            )

    return insights


_FUNDING_APPLICATIONS: dict[str, tuple[str, str, str]] = {
    "funding_strategies": (
        "SBA Loan Program Matching",
        "Match organizations with appropriate SBA loan programs based on business stage and needs",
        "Access to government-backed financing with favorable terms",
    ),
    "financial_planning": (
        "Financial Readiness Assessment",
        "Assess organization readiness for various funding types based on SBA criteria",
        "Improve funding application success rates through better preparation",
    ),
    "business_planning": (
        "Business Plan Enhancement",
        "Integrate SBA business plan guidance into funding application support",
        "Strengthen applications with comprehensive business planning",
    ),
}


def generate_funding_applications(item: dict[str, Any]) -> list[dict[str, Any]]:
    if item.get("funding_relevance") != "high" or item["category"] not in _FUNDING_APPLICATIONS:
        return []
    feature, implementation, value = _FUNDING_APPLICATIONS[item["category"]]
    return [
        {
            "ufa_feature": feature,
            "implementation": implementation,
            "strategic_value": value,
            "business_stage_focus": item.get("business_stage"),
            "content_source": item["title"],
        }
    ]


def generate_ufa_integrations(item: dict[str, Any]) -> list[dict[str, Any]]:
    stage = item.get("business_stage")
    if not stage or item.get("funding_relevance") == "low":
        return []
    return [
        {
            "integration_type": "business_stage_optimization",
            "description": f"Optimize funding strategies for {stage} stage organizations",
            "implementation": f"Use SBA {item['category']} guidance to enhance {stage} funding recommendations",
            "strategic_impact": "Provide stage-appropriate funding strategies and preparation guidance",
            "content_basis": item["title"],
        }
    ]


_CATEGORY_RECOMMENDATIONS: dict[str, dict[str, str]] = {
    "business_planning": {
        "priority": "high",
        "title": "Develop Comprehensive Business Plan",
        "description": "Create detailed business plan using SBA templates and guidance",
        "action": "Use SBA business plan tools and templates for thorough preparation",
        "impact": "Improves funding application success and strategic clarity",
    },
    "funding_strategies": {
        "priority": "high",
        "title": "Explore SBA Loan Programs",
        "description": "Evaluate SBA 7(a) and 504 loan programs for optimal funding",
        "action": "Research SBA loan programs and connect with SBA-approved lenders",
        "impact": "Access to government-backed financing with favorable terms",
    },
    "financial_planning": {
        "priority": "medium",
        "title": "Prepare Financial Documentation",
        "description": "Organize financial statements and projections for funding applications",
        "action": "Work with accountant to prepare 3-year financial statements and projections",
        "impact": "Strengthens funding applications and improves approval odds",
    },
    "business_formation": {
        "priority": "medium",
        "title": "Optimize Business Structure",
        "description": "Ensure business structure supports funding and growth objectives",
        "action": "Review business entity structure with legal counsel",
        "impact": "Ensures compliance and optimal structure for funding",
    },
    "compliance_requirements": {
        "priority": "critical",
        "title": "Maintain Regulatory Compliance",
        "description": "Stay current with all regulatory requirements and certifications",
        "action": "Implement compliance monitoring systems and regular reviews",
        "impact": "Prevents funding delays and maintains program eligibility",
    },
}


def generate_category_recommendations(category: str) -> list[dict[str, str]]:
    if category in _CATEGORY_RECOMMENDATIONS:
        return [dict(_CATEGORY_RECOMMENDATIONS[category])]
    return [
        {
            "priority": "medium",
            "title": f"Leverage {category} Insights",
            "description": f"Apply SBA guidance for {category.replace('_', ' ', 1)} optimization",
            "action": "Review and implement relevant SBA recommendations",
            "impact": "Improves business operations and funding readiness",
        }
    ]


def process_into_ufa_intelligence(items: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """
    Group scraped SBA content into the seven intelligence categories.

    Content whose category is not one of the seven is ignored.
    """
    intelligence: dict[str, dict[str, Any]] = {
        category: {
            "description": description,
            "insights": [],
            "funding_applications": [],
            "ufa_integrations": [],
        }
        for category, description in INTELLIGENCE_CATEGORIES.items()
    }

    for item in items:
        bucket = intelligence.get(item.get("category"))
        if bucket is None:
            continue
        bucket["insights"].extend(extract_business_insights(item))
        bucket["funding_applications"].extend(generate_funding_applications(item))
        bucket["ufa_integrations"].extend(generate_ufa_integrations(item))

    for category, bucket in intelligence.items():
        bucket["strategic_recommendations"] = generate_category_recommendations(category)

    return intelligence


# =============================================================================
# Program matching and pathways
# =============================================================================


def extract_funding_amount(amount_text: str | None) -> int | None:
    """Read the first '$X million' amount, else the first '$X,XXX' amount."""
    if not amount_text:
        return None
    millions = _MILLIONS_RE.search(amount_text)
    if millions:
        return int(float(millions.group(1)) * 1_000_000)
    dollars = _DOLLARS_RE.search(amount_text)
    if dollars:
        return int(dollars.group(1).replace(",", ""))
    return None


def assess_purpose_match(program: dict[str, Any], opportunity: dict[str, Any] | None) -> bool:
    if not opportunity:
        return False
    program_text = f"{program.get('name', '')} {program.get('description', '')}".lower()
    opportunity_text = f"{opportunity.get('title') or ''} {opportunity.get('description') or ''}".lower()
    return any(term in program_text and term in opportunity_text for term in PURPOSE_TERMS)


def assess_amount_match(program: dict[str, Any], opportunity: dict[str, Any] | None) -> bool:
    """True when the opportunity amount fits within 120% of the program maximum, or is unknown."""
    program_amount = extract_funding_amount(program.get("funding_amounts"))
    opportunity_amount = (opportunity or {}).get("funding_amount") or (opportunity or {}).get("value")
    if program_amount and opportunity_amount:
        return opportunity_amount <= program_amount * 1.2
    return True


def _readiness_level(profile: dict[str, Any]) -> str | None:
    return (profile.get("funding_readiness") or {}).get("readiness_level")


def generate_strategic_approach(program: dict[str, Any]) -> str:
    value = program.get("strategic_value") or 0
    complexity = program.get("application_complexity") or 0

    approach = f"Focus on {program['name']} as "
    if value >= 4:
        approach += "primary funding strategy"
    elif value >= 3:
        approach += "secondary funding option"
    else:
        approach += "supplementary funding source"

    if complexity >= 4:
        approach += ". Requires extensive preparation and professional guidance."
    elif complexity >= 3:
        approach += ". Moderate preparation required with strong documentation."
    else:
        approach += ". Relatively straightforward application process."
    return approach


def calculate_preparation_timeline(program: dict[str, Any], profile: dict[str, Any]) -> str:
    weeks = (program.get("application_complexity") or 0) * 4
    level = _readiness_level(profile)
    if level == "low":
        weeks += 8
    elif level == "medium":
        weeks += 4
    return f"{weeks} weeks"


def calculate_success_probability(program: dict[str, Any], profile: dict[str, Any]) -> int:
    """Heuristic 10-90 success probability."""
    probability = 50

    if profile.get("business_stage") in (program.get("business_stage_fit") or []):
        probability += 20

    level = _readiness_level(profile)
    if level == "high":
        probability += 15
    elif level == "medium":
        probability += 5
    else:
        probability -= 10

    complexity = program.get("application_complexity") or 0
    if complexity >= 4:
        probability -= 10
    elif complexity <= 2:
        probability += 10

    return max(10, min(90, probability))


def generate_next_steps(program: dict[str, Any], profile: dict[str, Any]) -> list[str]:
    steps = []
    if not profile.get("has_business_plan"):
        steps.append("Complete comprehensive business plan")
    if program.get("program_type") == "loan_program":
        steps.append("Gather financial documentation and tax returns")
        steps.append("Identify and document collateral assets")
    if "SBIR" in program["name"] or "STTR" in program["name"]:
        steps.append("Develop technical research proposal")
        steps.append("Identify commercialization pathway")
    steps.append(f"Research {program['name']} specific requirements")
    steps.append("Connect with SBA lender or resource partner")
    return steps


def generate_sba_strategic_pathways(profile: dict[str, Any], programs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Build one pathway per program, best probability x value first."""
    pathways = [
        {
            "program_name": program["name"],
            "strategic_approach": generate_strategic_approach(program),
            "preparation_timeline": calculate_preparation_timeline(program, profile),
            "success_probability": calculate_success_probability(program, profile),
            "strategic_value": program.get("strategic_value") or 0,
            "next_steps": generate_next_steps(program, profile),
        }
        for program in programs
    ]
    return sorted(pathways, key=lambda p: p["success_probability"] * p["strategic_value"], reverse=True)


def determine_relevant_categories(profile: dict[str, Any]) -> list[str]:
    categories = ["funding_strategies"]
    stage = profile.get("business_stage")
    if stage in ("pre_startup", "startup"):
        categories += ["business_planning", "business_formation", "financial_planning"]
    if stage == "growth":
        categories += ["growth_strategies", "business_operations"]
    categories.append("compliance_requirements")
    return categories


# =============================================================================
# Integrator
# =============================================================================


class SBABusinessGuideIntegrator:
    """Builds and queries the SBA knowledge base for one analysis run."""

    def __init__(self, use_browser: bool | None = None):
        settings = get_settings()
        self.use_browser = settings.USE_HEADLESS_BROWSER if use_browser is None else use_browser
        self.knowledge_base: dict[str, dict[str, Any]] = {}
        self.programs: dict[str, dict[str, Any]] = {}
        self.last_updated: str | None = None

    async def _fetch(self, url: str, browser: BrowserSession | None) -> str:
        if browser is not None and browser.is_open:
            try:
                return await browser.fetch_rendered_html(url, wait_selector=", ".join(GUIDE_CONTENT_SELECTORS))
            except Exception as e:
                logger.warning(f"Browser fetch failed for {url}, using plain HTTP: {e}")
        return await fetch_html(url)

    async def scrape_sba_section(self, section_path: str, browser: BrowserSession | None = None) -> list[dict]:
        """Scrape one business guide section. Errors yield an empty list."""
        url = f"{SBA_BASE_URL}{section_path}"
        logger.info(f"Scraping SBA content from {url}")

        try:
            html = await self._fetch(url, browser)
        except Exception as e:
            logger.error(f"Error scraping SBA {url}: {e}")
            return []

        category = categorize_sba_content(section_path)
        stage = identify_business_stage(section_path)
        extracted_at = _now()
        return [
            {
                "category": category,
                "title": block["title"],
                "content": block["content"],
                "callouts": block["tips"],
                "source_url": url,
                "section": section_path,
                "business_stage": stage,
                "funding_relevance": assess_funding_relevance(block["title"], block["content"]),
                "extracted_at": extracted_at,
            }
            for block in extract_content_blocks(html, GUIDE_CONTENT_SELECTORS, CALLOUT_SELECTOR)
        ]

    async def _open_browser(self) -> BrowserSession | None:
        if not self.use_browser:
            return None
        browser = BrowserSession()
        try:
            await browser.start()
            return browser
        except Exception as e:
            logger.warning(f"Failed to launch browser, using plain HTTP: {e}")
            return None

    async def scrape_sba_business_guide(self) -> list[dict[str, Any]]:
        browser = await self._open_browser()
        content: list[dict[str, Any]] = []
        try:
            for section in SBA_GUIDE_SECTIONS:
                content.extend(await self.scrape_sba_section(section, browser))
        finally:
            if browser is not None:
                await browser.close()
        return content

    async def extract_sba_funding_programs(self) -> list[dict[str, Any]]:
        """Scraped program cards followed by the major programs; major programs only on error."""
        logger.info("Extracting SBA funding programs")
        try:
            html = await fetch_html(SBA_FUNDING_PROGRAMS_URL)
            programs = parse_program_cards(html)
        except Exception as e:
            logger.error(f"Failed to extract SBA funding programs: {e}")
            return get_major_sba_programs()
        return programs + get_major_sba_programs()

    def store_sba_knowledge_base(
        self, intelligence: dict[str, dict[str, Any]], programs: list[dict[str, Any]]
    ) -> bool:
        """
        Persist the knowledge base. The in-memory copy is always refreshed.

        Returns:
            True when the database write succeeded
        """
        self.knowledge_base = intelligence
        self.programs = {p["name"]: p for p in programs}
        try:
            for category, data in intelligence.items():
                upsert_sba_knowledge(category, data)
            for program in programs:
                upsert_sba_program(program)
        except Exception as e:
            logger.error(f"Failed to store SBA knowledge base, keeping in-memory copy: {e}")
            return False
        logger.info(f"Stored SBA knowledge base: {len(intelligence)} categories, {len(programs)} programs")
        return True

    async def build_sba_knowledge_base(self) -> dict[str, Any]:
        """Scrape, process and store SBA knowledge. Never raises."""
        logger.info("Building SBA knowledge base")
        try:
            content = await self.scrape_sba_business_guide()
            intelligence = process_into_ufa_intelligence(content)
            programs = await self.extract_sba_funding_programs()
            await asyncio.to_thread(self.store_sba_knowledge_base, intelligence, programs)
            self.last_updated = _now()
            return {
                "success": True,
                "content_categories": list(intelligence.keys()),
                "funding_programs": len(programs),
                "total_resources": len(content),
                "last_updated": self.last_updated,
            }
        except Exception as e:
            logger.exception("Failed to build SBA knowledge base")
            return {"success": False, "error": str(e)}

    def load_programs(self) -> list[dict[str, Any]]:
        """In-memory programs, else stored programs, else the major programs."""
        if self.programs:
            return list(self.programs.values())
        try:
            stored = list_sba_programs()
        except Exception as e:
            logger.warning(f"Could not load stored SBA programs: {e}")
            stored = []
        programs = stored or get_major_sba_programs()
        self.programs = {p["name"]: p for p in programs}
        return programs

    def load_knowledge(self) -> dict[str, dict[str, Any]]:
        """In-memory knowledge, else whatever was stored."""
        if self.knowledge_base:
            return self.knowledge_base
        try:
            rows = list_sba_knowledge()
        except Exception as e:
            logger.warning(f"Could not load stored SBA knowledge: {e}")
            rows = []
        self.knowledge_base = {row["category"]: row for row in rows}
        return self.knowledge_base

    def find_relevant_sba_programs(
        self, profile: dict[str, Any], opportunity: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Programs fitting the profile's stage and the opportunity's purpose or amount."""
        stage = profile.get("business_stage")
        matches = []
        for program in self.load_programs():
            fit = program.get("business_stage_fit") or []
            stage_match = stage in fit or "all_stages" in fit
            if stage_match and (assess_purpose_match(program, opportunity) or assess_amount_match(program, opportunity)):
                matches.append(program)
        return sorted(matches, key=lambda p: p.get("strategic_value") or 0, reverse=True)

    def get_relevant_business_guidance(self, profile: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
        insights: list[dict[str, Any]] = []
        integrations: list[dict[str, Any]] = []
        for category in determine_relevant_categories(profile):
            data = self.load_knowledge().get(category)
            if data:
                insights.extend(data.get("insights", []))
                integrations.extend(data.get("ufa_integrations", []))
        return {"insights": insights[:5], "integrations": integrations[:3]}

    def enhance_with_sba_intelligence(self, opportunity: dict[str, Any], profile: dict[str, Any]) -> dict[str, Any]:
        """Attach matching SBA programs, guidance, readiness and pathways to an opportunity."""
        programs = self.find_relevant_sba_programs(profile, opportunity)
        guidance = self.get_relevant_business_guidance(profile)
        return {
            **opportunity,
            "sba_programs": programs,
            "business_guidance": guidance["insights"][:3],
            "funding_readiness": assess_sba_funding_readiness(profile),
            "strategic_pathways": generate_sba_strategic_pathways(profile, programs),
        }

    def get_sba_enhanced_recommendations(
        self, profile: dict[str, Any], opportunity: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        programs = self.find_relevant_sba_programs(profile, opportunity)
        return {
            "sba_programs": programs,
            "business_guidance": self.get_relevant_business_guidance(profile),
            "strategic_pathways": generate_sba_strategic_pathways(profile, programs),
            "readiness_assessment": assess_sba_funding_readiness(profile),
        }
