"""UFA expert strategist with SBA business guide intelligence blended in."""

from datetime import datetime, timezone
from typing import Any

from app.core.config import get_settings
from app.core.funding_readiness import assess_sba_funding_readiness
from app.core.funding_strategist import UFAExpertFundingStrategist
from app.core.logging import get_logger
from app.core.sba_guide import (
    SBABusinessGuideIntegrator,
    calculate_preparation_timeline,
    calculate_success_probability,
    extract_funding_amount,
    generate_next_steps,
    generate_sba_strategic_pathways,
)

logger = get_logger(__name__)

# Used until organization records carry business details
DEFAULT_ORG_PROFILE: dict[str, Any] = {
    "business_stage": "early_stage",
    "industry": "technology",
    "annual_revenue": 500_000,
    "employee_count": 15,
    "years_in_business": 3,
    "innovation_focus": True,
    "sba_loan_readiness": 70,
    "overall_readiness": 65,
    "credit_score": 720,
    "collateral_available": 200_000,
}

PROGRAM_TYPES = {
    "loan_programs": "loan_program",
    "grant_programs": "grant_program",
    "microfinance": "microfinance",
    "investment_programs": "investment_program",
}

MIN_LOAN_READINESS = 60

LOAN_BUSINESS_BENEFITS = [
    "Lower interest rates than conventional loans",
    "Longer repayment terms available",
    "Government backing increases approval probability",
    "Builds relationship with SBA ecosystem",
]

INNOVATION_RECOMMENDATION: dict[str, Any] = {
    "category": "innovation_funding",
    "priority": "high",
    "title": "SBIR/STTR Non-Dilutive Innovation Funding",
    "description": "Secure federal R&D funding without giving up equity or ownership",
    "timeline": "6-12 months per phase",
    "investment_required": 50_000,
    # Phase I + Phase II
    "potential_return": 2_000_000,
    "success_probability": 35,
    "sba_insights": [
        "Non-dilutive funding - no equity required",
        "Phased approach allows proof-of-concept before major investment",
        "Opens doors to federal agency partnerships and procurement opportunities",
    ],
    "action_steps": [
        "Research relevant federal agencies and their SBIR/STTR programs",
        "Develop technical proposal with clear innovation merit",
        "Establish partnerships with research institutions if applicable",
        "Prepare Phase I proposal focusing on feasibility demonstration",
    ],
    "business_benefits": [
        "No equity dilution - retain full ownership",
        "Federal validation of technology/innovation",
        "Pathway to larger Phase II funding",
        "Enhanced credibility for private investment",
    ],
}

MISSING_REQUIREMENTS = ["Financial documentation", "Business plan update", "Compliance verification"]
CAPACITY_GAPS = ["Staffing requirements", "Technical infrastructure", "Compliance systems"]
STRATEGIC_GAPS = ["Market positioning", "Partnership development", "Technology advancement"]

BUSINESS_DEVELOPMENT = {
    "recommended_resources": [
        "SBA Business Development Centers",
        "SCORE Mentoring",
        "Women's Business Centers",
        "Veteran Business Outreach Centers",
    ],
    "development_priorities": [
        "Business plan refinement",
        "Financial management systems",
        "Market analysis and positioning",
        "Compliance and regulatory preparation",
    ],
    "networking_opportunities": [
        "SBA District Office events",
        "Industry-specific SBA programs",
        "Federal contracting workshops",
        "Small business innovation events",
    ],
}

STAGE_GUIDANCE: dict[str, dict[str, Any]] = {
    "startup": {
        "priorities": ["Business structure", "Initial funding", "Market validation"],
        "sba_programs": ["Microloan Program", "SBA 504 for real estate"],
        "timeline": "6-12 months for initial funding",
    },
    "early_stage": {
        "priorities": ["Growth capital", "Market expansion", "Team building"],
        "sba_programs": ["7(a) Loan Program", "SBIR/STTR"],
        "timeline": "3-9 months for growth funding",
    },
    "growth": {
        "priorities": ["Scale operations", "Geographic expansion", "Technology upgrade"],
        "sba_programs": ["7(a) Loan Program", "SBA 504", "Export assistance"],
        "timeline": "6-12 months for major expansion",
    },
    "mature": {
        "priorities": ["Acquisition", "Diversification", "Succession planning"],
        "sba_programs": ["7(a) Acquisition loans", "SBA 504", "Investment programs"],
        "timeline": "12-18 months for strategic initiatives",
    },
}

COMPLIANCE_CHECKLIST = [
    "SBA size standards compliance",
    "Personal guarantee requirements",
    "Collateral documentation",
    "Financial statement preparation",
    "Credit score optimization",
    "Industry-specific certifications",
    "Environmental compliance (if applicable)",
    "Equal opportunity requirements",
]

RESOURCE_RECOMMENDATIONS = [
    {
        "category": "Technical Assistance",
        "resources": ["SBA Resource Partners", "Industry associations", "Trade organizations"],
    },
    {
        "category": "Financial Preparation",
        "resources": ["CPA services", "Financial planning consultants", "Banking relationships"],
    },
    {
        "category": "Legal Support",
        "resources": ["SBA-approved attorneys", "Business law firms", "Regulatory specialists"],
    },
    {
        "category": "Market Intelligence",
        "resources": ["Industry reports", "Market research firms", "Trade publications"],
    },
]

SBA_NEXT_STEPS = [
    "Complete SBA readiness assessment",
    "Gather required financial documentation",
    "Identify target SBA programs and lenders",
    "Develop relationships with SBA resource partners",
    "Create detailed business plan and projections",
    "Schedule consultations with SBA advisors",
]


def estimate_preparation_time(program: dict[str, Any], profile: dict[str, Any]) -> float:
    """Days of preparation: complexity x 30 less half the readiness score, at least 30."""
    complexity = program.get("application_complexity") or 3
    readiness = profile.get("overall_readiness") or 60
    return max(30, complexity * 30 - readiness * 0.5)


def get_stage_specific_guidance(profile: dict[str, Any]) -> dict[str, Any]:
    stage = profile.get("business_stage") or "early_stage"
    guidance = STAGE_GUIDANCE.get(stage, STAGE_GUIDANCE["early_stage"])
    return {k: (list(v) if isinstance(v, list) else v) for k, v in guidance.items()}


def get_sba_business_guidance(profile: dict[str, Any]) -> dict[str, Any]:
    return {
        "stage_specific_guidance": get_stage_specific_guidance(profile),
        "compliance_checklist": list(COMPLIANCE_CHECKLIST),
        "resource_recommendations": [
            {"category": r["category"], "resources": list(r["resources"])} for r in RESOURCE_RECOMMENDATIONS
        ],
        "next_steps": list(SBA_NEXT_STEPS),
    }


def analyze_sba_business_development() -> dict[str, list[str]]:
    return {key: list(items) for key, items in BUSINESS_DEVELOPMENT.items()}


def generate_sba_strategic_recommendations(
    programs: list[dict[str, Any]], profile: dict[str, Any]
) -> list[dict[str, Any]]:
    """
    Recommend at most three SBA plays.

    A strong loan program (strategic value 4+) is recommended when the
    organization's SBA loan readiness is at least 60. SBIR/STTR is recommended
    for innovation-focused organizations.
    """
    recommendations = []

    loan = next(
        (p for p in programs if p.get("program_type") == "loan_program" and (p.get("strategic_value") or 0) >= 4),
        None,
    )
    if loan and (profile.get("sba_loan_readiness") or 0) >= MIN_LOAN_READINESS:
        recommendations.append(
            {
                "category": "sba_loans",
                "priority": "high",
                "title": f"Strategic {loan['name']} Application",
                "description": "Leverage SBA loan guarantee for favorable terms and lower risk to lenders",
                "timeline": calculate_preparation_timeline(loan, profile),
                # Professional guidance and preparation costs
                "investment_required": 25_000,
                "potential_return": extract_funding_amount(loan.get("funding_amounts")),
                "success_probability": calculate_success_probability(loan, profile),
                "sba_insights": [
                    f"{loan['name']} offers government-backed guarantee reducing lender risk",
                    f"Success factors: {', '.join((loan.get('success_factors') or [])[:2])}",
                    f"Application complexity: {loan.get('application_complexity')}/5 - requires professional guidance",
                ],
                "action_steps": generate_next_steps(loan, profile),
                "business_benefits": list(LOAN_BUSINESS_BENEFITS),
            }
        )

    innovation = next((p for p in programs if "SBIR" in p["name"] or "STTR" in p["name"]), None)
    if innovation and profile.get("innovation_focus"):
        recommendations.append(
            {
                k: (list(v) if isinstance(v, list) else v)
                for k, v in INNOVATION_RECOMMENDATION.items()
            }
        )

    return recommendations[:3]


def assess_program_readiness_alignment(
    programs: list[dict[str, Any]], profile: dict[str, Any]
) -> dict[str, dict[str, Any]]:
    alignment = {}
    for program in programs[:5]:
        score = calculate_success_probability(program, profile)
        if score >= 80:
            level = "high"
        elif score >= 60:
            level = "medium"
        else:
            level = "low"
        alignment[program["name"]] = {
            "score": score,
            "readiness_level": level,
            "missing_requirements": list(MISSING_REQUIREMENTS),
            "preparation_time": estimate_preparation_time(program, profile),
        }
    return alignment


def generate_sba_implementation_timeline(
    programs: list[dict[str, Any]], profile: dict[str, Any]
) -> dict[str, list[dict[str, Any]]]:
    """Bucket the top three programs by preparation days: 30, 90, 180, beyond."""
    timeline: dict[str, list[dict[str, Any]]] = {
        "immediate_actions": [],
        "short_term": [],
        "medium_term": [],
        "long_term": [],
    }
    for program in programs[:3]:
        name = program["name"]
        days = estimate_preparation_time(program, profile)
        if days <= 30:
            timeline["immediate_actions"].append(
                {"program": name, "action": f"Apply for {name}", "deadline": program.get("deadline") or "Rolling basis"}
            )
        elif days <= 90:
            timeline["short_term"].append(
                {
                    "program": name,
                    "action": f"Prepare application for {name}",
                    "preparation_needed": list(MISSING_REQUIREMENTS),
                }
            )
        elif days <= 180:
            timeline["medium_term"].append(
                {"program": name, "action": f"Build capacity for {name}", "capacity_building": list(CAPACITY_GAPS)}
            )
        else:
            timeline["long_term"].append(
                {
                    "program": name,
                    "action": f"Long-term positioning for {name}",
                    "strategic_development": list(STRATEGIC_GAPS),
                }
            )
    return timeline


def process_sba_programs(programs: list[dict[str, Any]], profile: dict[str, Any]) -> dict[str, Any]:
    """Summarize the matching SBA programs as one more funding channel."""
    logger.info(f"Processing {len(programs)} relevant SBA programs")

    return {
        "totalAvailable": sum(extract_funding_amount(p.get("funding_amounts")) or 0 for p in programs),
        "programCount": len(programs),
        "categories": {
            key: [p for p in programs if p.get("program_type") == program_type]
            for key, program_type in PROGRAM_TYPES.items()
        },
        "topRecommendations": programs[:3],
        "strategicRecommendations": generate_sba_strategic_recommendations(programs, profile),
        "readinessAlignment": assess_program_readiness_alignment(programs, profile),
        "implementationTimeline": generate_sba_implementation_timeline(programs, profile),
        "dataSource": "SBA.gov Programs + Business Guide",
        "lastSync": datetime.now(timezone.utc).isoformat(),
    }


class UFAExpertStrategistWithSBA(UFAExpertFundingStrategist):
    """Expert strategist that adds SBA programs and readiness to the funding landscape."""

    def __init__(
        self,
        tenant_id: str,
        analysis_timestamp: datetime | None = None,
        sba_integrator: SBABusinessGuideIntegrator | None = None,
        use_sba_intelligence: bool | None = None,
    ):
        super().__init__(tenant_id, analysis_timestamp)
        self.sba_integrator = sba_integrator or SBABusinessGuideIntegrator()
        if use_sba_intelligence is None:
            use_sba_intelligence = get_settings().ENABLE_SBA_INTELLIGENCE
        self.use_sba_intelligence = use_sba_intelligence

    async def initialize_sba_intelligence(self) -> dict[str, Any]:
        logger.info("Initializing SBA business guide intelligence")
        return await self.sba_integrator.build_sba_knowledge_base()

    def get_organization_business_profile(self) -> dict[str, Any]:
        return dict(DEFAULT_ORG_PROFILE)

    def analyze_funding_landscape(self, org_profile: dict[str, Any] | None = None) -> dict[str, Any]:
        base = super().analyze_funding_landscape(org_profile)

        if not self.use_sba_intelligence:
            logger.info("SBA intelligence disabled (set ENABLE_SBA_INTELLIGENCE=true)")
            return base

        try:
            profile = org_profile or self.get_organization_business_profile()
            readiness = assess_sba_funding_readiness(profile)
            programs = self.sba_integrator.find_relevant_sba_programs(profile)

            return {
                **base,
                "channelAnalysis": {
                    **base["channelAnalysis"],
                    "sba_programs": process_sba_programs(programs, profile),
                    "sba_readiness": readiness,
                    "business_development": analyze_sba_business_development(),
                },
                "sbaIntelligence": {
                    "readiness_assessment": readiness,
                    "recommended_programs": programs[:5],
                    "strategic_pathways": generate_sba_strategic_pathways(profile, programs),
                    "business_guidance": get_sba_business_guidance(profile),
                },
                "dataQuality": "LIVE+SBA",
                "enhancementSource": "SBA Business Guide + Federal Programs",
            }
        except Exception as e:
            logger.error(f"SBA intelligence enhancement failed: {e}")
            return base
