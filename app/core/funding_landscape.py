# ruff: noqa: E501
"""Static funding landscape intelligence used by the UFA expert strategist.

Channel figures are annual dollars available to an organization of the
profile the strategist assumes. Every accessor returns a deep copy so callers
can enrich the structures freely.
"""

import copy
from typing import Any

TOTAL_FUNDING_AVAILABLE = 247_000_000

EXPERTISE_AREAS = [
    "federal_grants",
    "foundation_grants",
    "corporate_sponsorship",
    "individual_donors",
    "crowdfunding",
    "impact_investing",
    "revenue_diversification",
    "capital_campaigns",
    "planned_giving",
]

FEDERAL_GRANTS: dict[str, Any] = {
    "totalAvailable": 156_000_000,
    "topAgencies": [
        {
            "agency": "National Science Foundation",
            "priority_areas": ["STEM Education", "Research Infrastructure", "Broadening Participation"],
            "funding_cycle": "October-January submissions for July awards",
            "success_rate": 23.4,
            "average_award": 850_000,
            "strategic_insight": "NSF prioritizing interdisciplinary STEM education initiatives. Best strategy: Partner with research universities, emphasize evaluation component.",
            "application_tips": [
                "Front-load broader impacts section with measurable outcomes",
                "Include diversity, equity, inclusion metrics throughout proposal",
                "Demonstrate institutional support through cost-sharing commitments",
            ],
        },
        {
            "agency": "Department of Education",
            "priority_areas": ["Educational Innovation", "Teacher Development", "Student Success"],
            "funding_cycle": "February-April submissions for September awards",
            "success_rate": 18.7,
            "average_award": 1_200_000,
            "strategic_insight": "Department focusing on evidence-based interventions with strong evaluation designs.",
            "application_tips": [
                "Emphasize rigorous evaluation methodology (RCT preferred)",
                "Show sustainability plan beyond grant period",
                "Include partnership with education research organizations",
            ],
        },
    ],
    "seasonal_patterns": {
        "q1": "Major submission deadlines for education and health programs",
        "q2": "STEM and research program submissions",
        "q3": "Award notifications and project launches",
        "q4": "Planning and partnership development for next cycle",
    },
    "expert_strategy": "Federal grants require 6-12 month development timeline. Focus on 2-3 agencies maximum for deep relationship building.",
    "funding_forecast": "Federal STEM education funding increasing 23% in FY2026 due to National Science Initiative",
}

STATE_LOCAL_GRANTS: dict[str, Any] = {
    "totalAvailable": 32_000_000,
    "state_funding": {
        "education_grants": {
            "value_range": [50_000, 500_000],
            "timeline": "4-6 months",
            "success_factors": ["Alignment with state education priorities", "Regional partnerships", "Outcome measurements"],
            "expert_approach": "State education grants favor regional collaborations and demonstrated impact on student outcomes.",
        },
        "workforce_development": {
            "value_range": [75_000, 300_000],
            "timeline": "3-5 months",
            "success_factors": ["Industry partnerships", "Job placement outcomes", "Skills gap alignment"],
            "expert_approach": "Partner with state workforce boards and demonstrate direct connection to in-demand skills.",
        },
        "community_development": {
            "value_range": [25_000, 200_000],
            "timeline": "2-4 months",
            "success_factors": ["Community need assessment", "Local partnerships", "Sustainability planning"],
            "expert_approach": "Focus on underserved communities and demonstrate long-term community engagement.",
        },
    },
    "local_funding": {
        "municipal_grants": {
            "value_range": [10_000, 100_000],
            "timeline": "2-3 months",
            "success_factors": ["Local impact", "Resident benefit", "Municipal priorities alignment"],
            "expert_approach": "Build relationships with city council members and attend public meetings to understand priorities.",
        },
        "county_programs": {
            "value_range": [15_000, 150_000],
            "timeline": "3-4 months",
            "success_factors": ["County-wide benefit", "Collaboration with county services", "Measurable outcomes"],
            "expert_approach": "Partner with county departments and demonstrate cost-effectiveness of programs.",
        },
        "regional_consortiums": {
            "value_range": [50_000, 250_000],
            "timeline": "4-6 months",
            "success_factors": ["Multi-jurisdiction collaboration", "Regional impact", "Shared resources"],
            "expert_approach": "Facilitate regional partnerships and position as convening organization.",
        },
    },
    "timing_strategies": {
        "state_budget_cycle": "Align proposals with state fiscal year planning (typically July-September)",
        "local_elections": "New administrations bring funding priority shifts - adjust strategy accordingly",
        "legislative_session": "Monitor state legislative priorities for emerging funding opportunities",
    },
}

FOUNDATION_GRANTS: dict[str, Any] = {
    "totalAvailable": 45_000_000,
    "foundation_tiers": {
        "major_foundations": {
            "count": 23,
            "avg_grant": 250_000,
            "relationship_strategy": "Multi-year cultivation required. Board connections essential.",
            "best_approach": "Program officer relationship building, site visits, thought leadership",
        },
        "regional_foundations": {
            "count": 87,
            "avg_grant": 75_000,
            "relationship_strategy": "Local presence and community impact focus",
            "best_approach": "Community partnerships, local board connections, regional impact data",
        },
        "family_foundations": {
            "count": 156,
            "avg_grant": 25_000,
            "relationship_strategy": "Personal mission alignment and trustee relationships",
            "best_approach": "Values-based storytelling, personal connections, impact narratives",
        },
    },
    "seasonal_strategies": {
        "giving_tuesday": "Family foundations most responsive. 340% increase in applications approved.",
        "year_end": "Corporate foundations clearing budgets. Quick-turnaround opportunities.",
        "spring": "Major foundation board meetings. Best time for large proposals.",
        "summer": "Relationship building season. Program officer availability highest.",
    },
    "expert_insights": [
        "Foundation funding requires 18-month relationship cultivation cycle",
        "Site visits increase funding probability by 67%",
        "Multi-year commitments available from 34% of foundations with strong track record",
        "Foundation collaboration grants (multiple funders) seeing 45% growth",
    ],
}

CORPORATE_FUNDING: dict[str, Any] = {
    "totalAvailable": 28_000_000,
    "corporate_strategies": {
        "strategic_partnerships": {
            "value_range": [100_000, 500_000],
            "timeline": "6-9 months",
            "success_factors": ["Mutual value creation", "Employee engagement opportunities", "Brand alignment"],
            "expert_approach": "Focus on business outcomes, not just charitable giving. Propose employee volunteering integration.",
        },
        "sponsorship_opportunities": {
            "value_range": [25_000, 150_000],
            "timeline": "3-6 months",
            "success_factors": ["Marketing value", "Target audience alignment", "Event/program visibility"],
            "expert_approach": "Quantify marketing value in proposal. Provide detailed audience demographics and engagement metrics.",
        },
        "corporate_foundation_grants": {
            "value_range": [50_000, 200_000],
            "timeline": "4-8 months",
            "success_factors": ["Mission alignment", "Geographic presence", "Measurable impact"],
            "expert_approach": "Research corporate giving priorities. Align proposal with corporate sustainability goals.",
        },
    },
    "industry_insights": {
        "technology": "STEM education partnerships highly valued. Employee skills development focus.",
        "healthcare": "Community health outcomes and workforce development priorities.",
        "finance": "Financial literacy and economic development programs preferred.",
        "energy": "Sustainability and environmental education significant opportunity area.",
    },
    "timing_intelligence": {
        "budget_planning": "Q4 (Oct-Dec) - Corporate foundation budget planning",
        "proposal_submission": "Q1 (Jan-Mar) - Optimal submission timing",
        "decision_making": "Q2 (Apr-Jun) - Board approvals and notifications",
        "program_launch": "Q3 (Jul-Sep) - Partnership activation and launches",
    },
}

INDIVIDUAL_DONORS: dict[str, Any] = {
    "totalAvailable": 18_000_000,
    "donor_segments": {
        "major_donors": {
            "threshold": 10_000,
            "cultivation_timeline": "12-24 months",
            "strategy": "Personal relationship building, board engagement, legacy giving discussions",
            "conversion_rate": 12.3,
            "expert_tactics": [
                "Wealth screening and capacity assessment",
                "Stewardship through exclusive events and impact reports",
                "Planned giving conversations after 3+ years of engagement",
            ],
        },
        "mid_level_donors": {
            "threshold": 1_000,
            "cultivation_timeline": "6-12 months",
            "strategy": "Program-specific giving, volunteer engagement, peer-to-peer fundraising",
            "conversion_rate": 23.7,
            "expert_tactics": [
                "Monthly giving program enrollment",
                "Program-specific campaigns with clear impact metrics",
                "Volunteer-to-donor conversion strategies",
            ],
        },
        "small_donors": {
            "threshold": 100,
            "cultivation_timeline": "3-6 months",
            "strategy": "Digital engagement, email nurturing, event participation",
            "conversion_rate": 45.2,
            "expert_tactics": [
                "Email automation with impact storytelling",
                "Social media engagement and peer sharing",
                "Micro-giving campaigns tied to specific outcomes",
            ],
        },
    },
    "seasonal_fundraising": {
        "giving_tuesday": "Small donor acquisition focus. 67% of annual online giving.",
        "year_end": "Major gift solicitation peak. Tax planning conversations.",
        "spring": "Foundation and corporate outreach. Event fundraising season.",
        "summer": "Donor stewardship and relationship building. Planned giving discussions.",
    },
    "digital_strategies": {
        "email_campaigns": "Personalized impact stories increase giving by 43%",
        "social_media": "Peer-to-peer sharing drives 34% of new donor acquisition",
        "crowdfunding": "Project-specific campaigns with clear goals and timelines",
        "donor_management": "CRM integration with wealth screening and move management",
    },
}

CROWDFUNDING: dict[str, Any] = {
    "totalAvailable": 8_500_000,
    "platform_strategies": {
        "kickstarter": {
            "best_for": "Creative projects with tangible outcomes",
            "average_success": 38.4,
            "expert_tips": [
                "Video quality critical - invest in professional production",
                "Pre-launch community building essential for first 48 hours",
                "Reward tiers must provide clear value proposition",
            ],
        },
        "indiegogo": {
            "best_for": "Social impact and technology projects",
            "average_success": 31.2,
            "expert_tips": [
                "Flexible funding option reduces risk",
                "Strong social media strategy essential",
                "Partner with influencers in your sector",
            ],
        },
        "gofundme": {
            "best_for": "Emergency funding and personal causes",
            "average_success": 67.8,
            "expert_tips": [
                "Compelling personal story drives donations",
                "Regular updates maintain donor engagement",
                "Social sharing multiplies reach exponentially",
            ],
        },
    },
    "success_factors": {
        "campaign_preparation": "Minimum 6-8 weeks pre-launch community building",
        "storytelling": "Emotional connection drives 73% more donations than facts alone",
        "social_proof": "First 100 backers determine overall campaign success probability",
        "momentum_management": "First and last weeks critical - plan major outreach accordingly",
    },
}

IMPACT_INVESTING: dict[str, Any] = {
    "totalAvailable": 15_000_000,
    "investment_types": {
        "program_related_investments": {
            "value_range": [100_000, 1_000_000],
            "timeline": "6-12 months",
            "requirements": ["Measurable social outcomes", "Financial sustainability model", "Impact measurement framework"],
            "expert_approach": "Demonstrate both financial return and social impact with clear metrics and reporting systems.",
        },
        "social_impact_bonds": {
            "value_range": [500_000, 5_000_000],
            "timeline": "12-18 months",
            "requirements": ["Government partnership", "Outcome-based payment structure", "Independent evaluation"],
            "expert_approach": "Complex instrument requiring government backing - focus on proven interventions with strong evaluation.",
        },
        "blended_finance": {
            "value_range": [250_000, 2_000_000],
            "timeline": "8-14 months",
            "requirements": ["Multiple funding sources", "Catalytic impact potential", "Risk mitigation strategies"],
            "expert_approach": "Combine philanthropic, public, and private capital - demonstrate how each source reduces risk for others.",
        },
    },
    "market_trends": {
        "growth_sectors": ["Education technology", "Healthcare access", "Climate solutions", "Financial inclusion"],
        "investor_priorities": ["Measurable impact", "Scalability potential", "Financial sustainability", "ESG alignment"],
        "emerging_opportunities": ["Outcome-based financing", "Pay-for-success contracts", "Impact-linked bonds"],
    },
}

EARNED_REVENUE: dict[str, Any] = {
    "totalAvailable": 12_000_000,
    "revenue_models": {
        "fee_for_service": {
            "potential": "High sustainability, immediate revenue",
            "examples": ["Training programs", "Consulting services", "Technical assistance"],
            "expert_strategy": "Price competitively while highlighting social mission value-add",
        },
        "product_sales": {
            "potential": "Scalable with strong brand development",
            "examples": ["Educational materials", "Software licenses", "Branded merchandise"],
            "expert_strategy": "Develop products that align with mission and create sustainable revenue streams",
        },
        "membership_programs": {
            "potential": "Recurring revenue with community building",
            "examples": ["Professional development", "Resource access", "Networking platforms"],
            "expert_strategy": "Create exclusive value that justifies ongoing membership investment",
        },
        "licensing_intellectual_property": {
            "potential": "High-margin revenue from developed content",
            "examples": ["Curriculum licensing", "Methodology frameworks", "Assessment tools"],
            "expert_strategy": "Document and protect intellectual property early in program development",
        },
    },
    "implementation_timeline": {
        "immediate": "Fee-for-service offerings based on existing expertise",
        "short_term": "Product development and initial sales channels",
        "medium_term": "Membership programs and community building",
        "long_term": "Intellectual property licensing and franchise models",
    },
}

# Channel name -> analysis, in the order channels are reported
_CHANNELS: dict[str, dict[str, Any]] = {
    "federal_grants": FEDERAL_GRANTS,
    "state_local_grants": STATE_LOCAL_GRANTS,
    "foundation_grants": FOUNDATION_GRANTS,
    "corporate_funding": CORPORATE_FUNDING,
    "individual_donors": INDIVIDUAL_DONORS,
    "crowdfunding": CROWDFUNDING,
    "impact_investing": IMPACT_INVESTING,
    "earned_revenue": EARNED_REVENUE,
}

CHANNEL_ACTION_STEPS: dict[str, list[str]] = {
    "federal_grants": ["Research agency priorities", "Develop partnerships", "Prepare comprehensive proposals"],
    "foundation_grants": ["Identify aligned foundations", "Build program officer relationships", "Submit targeted proposals"],
    "corporate_funding": ["Research corporate giving priorities", "Develop partnership proposals", "Engage corporate contacts"],
    "individual_donors": ["Develop donor cultivation plan", "Create compelling case for support", "Execute stewardship program"],
    "crowdfunding": ["Build pre-launch community", "Create compelling campaign content", "Execute promotion strategy"],
    "impact_investing": ["Develop impact measurement framework", "Create financial sustainability model", "Engage impact investors"],
    "earned_revenue": ["Assess service offerings", "Develop pricing strategy", "Launch revenue programs"],
    "state_local_grants": ["Research local funding priorities", "Build government relationships", "Submit timely applications"],
}
DEFAULT_ACTION_STEPS = ["Research opportunities", "Develop proposals", "Build relationships"]

DIVERSIFICATION_STRATEGY = {
    "primary_focus": "40% effort on highest-potential channels",
    "secondary_focus": "35% effort on medium-potential channels",
    "experimental_focus": "25% effort on emerging opportunities",
    "risk_balance": "Combine high-certainty and high-potential opportunities",
}

RISK_MITIGATION_STRATEGY = {
    "diversification": "Pursue multiple funding channels simultaneously",
    "relationship_building": "Maintain ongoing funder relationships beyond specific proposals",
    "pipeline_management": "Maintain 3x pipeline of funding opportunities",
    "contingency_planning": "Develop alternative funding scenarios for key programs",
}

CAPACITY_REQUIREMENTS = {
    "staffing": "Minimum 1.5 FTE dedicated to fundraising and grant management",
    "systems": "CRM system for donor management and grant tracking",
    "expertise": "Grant writing, relationship building, and impact measurement capabilities",
    "infrastructure": "Financial management and compliance systems",
}

MARKET_TIMING: dict[str, Any] = {
    "seasonal_patterns": {
        "q1": {
            "optimal_channels": ["federal_grants", "foundation_grants"],
            "rationale": "Major federal and foundation submission deadlines",
            "success_probability": "High for prepared organizations",
            "recommended_actions": ["Submit prepared federal proposals", "Foundation relationship cultivation"],
        },
        "q2": {
            "optimal_channels": ["corporate_funding", "individual_donors"],
            "rationale": "Corporate budget planning and spring fundraising events",
            "success_probability": "Medium-high with proper cultivation",
            "recommended_actions": ["Corporate partnership outreach", "Major donor cultivation"],
        },
        "q3": {
            "optimal_channels": ["earned_revenue", "impact_investing"],
            "rationale": "Program launch season and investor decision cycles",
            "success_probability": "Medium with strong implementation",
            "recommended_actions": ["Launch earned revenue streams", "Demonstrate impact for investors"],
        },
        "q4": {
            "optimal_channels": ["individual_donors", "crowdfunding"],
            "rationale": "Year-end giving surge and holiday campaign effectiveness",
            "success_probability": "Very high for compelling campaigns",
            "recommended_actions": ["Execute year-end campaigns", "Launch holiday crowdfunding"],
        },
    },
    "market_conditions": {
        "economic_indicators": "Monitor GDP growth, unemployment rates, and market volatility",
        "funding_trends": "Track foundation giving trends and corporate CSR budget changes",
        "competitive_landscape": "Assess competing organizations and funding overlap",
    },
}

COMPETITIVE_POSITION: dict[str, Any] = {
    "competitive_advantages": [
        "Unique program model with demonstrated outcomes",
        "Strong leadership team with sector expertise",
        "Established community partnerships and trust",
        "Innovative approach to persistent social problems",
    ],
    "competitive_challenges": [
        "Limited brand recognition in broader market",
        "Smaller scale compared to established organizations",
        "Resource constraints limiting program expansion",
        "Need for stronger evaluation and impact measurement",
    ],
    "market_positioning": {
        "differentiation_strategy": "Focus on innovative program model and measurable community impact",
        "target_funders": "Innovation-focused foundations and impact investors",
        "value_proposition": "Cost-effective, evidence-based solutions with strong community engagement",
        "competitive_response": "Emphasize agility, innovation, and deep community connections",
    },
    "strategic_recommendations": [
        "Develop thought leadership through publications and speaking engagements",
        "Create strategic partnerships to enhance credibility and reach",
        "Invest in impact measurement and evaluation systems",
        "Build brand awareness through targeted marketing and communications",
    ],
}

SEASONAL_STRATEGIES: dict[str, Any] = {
    "q1_strategy": {
        "focus": "Federal grant submissions and foundation cultivation",
        "priority_actions": [
            "Submit major federal grant applications",
            "Foundation relationship building and site visits",
            "Corporate partnership proposal development",
            "Individual donor stewardship and major gift asks",
        ],
        "funding_opportunities": ["NSF Education programs", "NIH training grants", "Foundation spring cycles"],
        "expert_timing": "Q1 is federal submission season. 67% of major federal grants due January-March.",
    },
    "q2_strategy": {
        "focus": "Diversification and earned revenue development",
        "priority_actions": [
            "Corporate sponsorship outreach for fall events",
            "Foundation second-cycle submissions",
            "Individual donor acquisition campaigns",
            "Earned revenue strategy implementation",
        ],
        "funding_opportunities": ["Corporate CSR budgets", "Spring foundation cycles", "Individual major gifts"],
        "expert_timing": "Q2 optimal for corporate engagement. Budget planning for next fiscal year begins.",
    },
    "q3_strategy": {
        "focus": "Program launch and impact demonstration",
        "priority_actions": [
            "Funded program implementation and documentation",
            "Impact data collection and storytelling",
            "Fall fundraising event planning",
            "Year-end campaign strategy development",
        ],
        "funding_opportunities": ["Performance-based funding renewals", "Impact investment opportunities"],
        "expert_timing": "Q3 is impact demonstration season. Use success stories for next funding cycle.",
    },
    "q4_strategy": {
        "focus": "Year-end giving and next year planning",
        "priority_actions": [
            "Year-end individual donor campaigns",
            "Foundation relationship cultivation",
            "Grant proposal development for next cycle",
            "Strategic planning and capacity building",
        ],
        "funding_opportunities": ["Year-end giving surge", "Foundation planning meetings", "Corporate budget planning"],
        "expert_timing": "Q4 drives 42% of annual individual giving. Critical for donor acquisition and retention.",
    },
}

MONTHLY_FOCUS = {
    "january": "Federal grant submissions and foundation relationship building",
    "february": "Corporate partnership development and proposal finalization",
    "march": "Final federal submissions and foundation cultivation events",
    "april": "Foundation spring cycle submissions and donor stewardship",
    "may": "Corporate outreach intensification and event planning",
    "june": "Mid-year assessment and summer strategy preparation",
    "july": "Program implementation focus and impact documentation",
    "august": "Fall campaign planning and relationship maintenance",
    "september": "Fall funding cycle launches and federal planning",
    "october": "Foundation relationship intensification and year-end prep",
    "november": "Year-end campaign execution and donor engagement",
    "december": "Holiday fundraising peak and next year strategic planning",
}

# (month, day, type, description); the year is the analysis year
KEY_FUNDING_DEADLINES: list[tuple[int, int, str, str]] = [
    (1, 15, "federal", "NSF Education Grant Deadline"),
    (2, 1, "foundation", "Major Foundation Spring Cycle"),
    (3, 31, "federal", "Department of Education Submissions"),
    (6, 15, "corporate", "Corporate CSR Budget Planning"),
    (9, 30, "foundation", "Foundation Fall Cycle Deadlines"),
    (11, 1, "individual", "Year-End Campaign Launch"),
]

CAPACITY_ALLOCATION = {
    "q1": {"federal_focus": "40%", "foundation_focus": "30%", "corporate_focus": "20%", "other": "10%"},
    "q2": {"corporate_focus": "35%", "foundation_focus": "25%", "earned_revenue": "25%", "other": "15%"},
    "q3": {"program_delivery": "40%", "impact_measurement": "25%", "relationship_building": "25%", "other": "10%"},
    "q4": {"individual_donors": "45%", "foundation_cultivation": "25%", "planning": "20%", "other": "10%"},
}

MARKET_TRENDS: dict[str, Any] = {
    "market_conditions": {
        "overall_outlook": "moderately positive",
        "economic_factors": "stable with inflation concerns",
        "foundation_giving_trends": "increased focus on equity and systemic change",
        "corporate_csr_trends": "ESG alignment and measurable impact emphasis",
        "federal_funding_outlook": "competitive but opportunities in STEM education and workforce development",
    },
    "sector_trends": {
        "education": "Strong funding for evidence-based interventions and teacher development",
        "workforce_development": "High priority due to skills gap and economic recovery focus",
        "community_development": "Emphasis on equity, inclusion, and systemic approaches",
        "technology": "Continued investment in digital equity and innovation",
    },
    "competitive_intelligence": {
        "funding_competition_level": "high",
        "success_rate_trends": "declining for generic proposals, stable for innovative approaches",
        "funder_priorities_shift": "toward collaborative approaches and systems change",
        "emerging_opportunities": ["pay-for-success models", "blended finance", "cross-sector partnerships"],
    },
}

# Organizational readiness factor assessments, scored 0-100
READINESS_FACTORS: dict[str, dict[str, Any]] = {
    "organizational_capacity": {
        "staffing_level": 75,
        "leadership_strength": 80,
        "governance_structure": 70,
        "operational_systems": 65,
        "strategic_planning": 75,
        "overall_score": 73,
        "strengths": [
            "Strong leadership team with sector experience",
            "Clear mission and strategic direction",
            "Established operational procedures",
        ],
        "improvement_areas": [
            "Expand development staff capacity",
            "Strengthen board fundraising engagement",
            "Enhance project management systems",
        ],
    },
    "financial_management": {
        "accounting_systems": 80,
        "budgeting_processes": 75,
        "cash_flow_management": 70,
        "audit_compliance": 85,
        "grant_management": 65,
        "overall_score": 75,
        "strengths": [
            "Clean audit history and compliance record",
            "Strong accounting systems and controls",
            "Effective budget planning processes",
        ],
        "improvement_areas": [
            "Enhance grant tracking and reporting systems",
            "Improve cash flow forecasting",
            "Strengthen indirect cost recovery processes",
        ],
    },
    "program_development": {
        "program_design": 80,
        "implementation_capacity": 75,
        "quality_assurance": 70,
        "stakeholder_engagement": 85,
        "innovation_capability": 75,
        "overall_score": 77,
        "strengths": [
            "Strong stakeholder relationships and community trust",
            "Proven track record of program delivery",
            "Evidence-based program design approaches",
        ],
        "improvement_areas": [
            "Enhance outcome measurement and evaluation",
            "Expand program scale and reach",
            "Strengthen partnership development",
        ],
    },
    "relationship_capital": {
        "funder_relationships": 65,
        "board_connections": 70,
        "community_partnerships": 85,
        "peer_networks": 75,
        "thought_leadership": 60,
        "overall_score": 71,
        "strengths": [
            "Strong community partnerships and local support",
            "Active board members with diverse networks",
            "Established relationships with local funders",
        ],
        "improvement_areas": [
            "Expand relationships with major national funders",
            "Develop thought leadership and visibility",
            "Strengthen corporate partnership development",
        ],
    },
    "impact_measurement": {
        "outcome_tracking": 70,
        "data_collection": 65,
        "evaluation_design": 60,
        "impact_reporting": 75,
        "continuous_improvement": 70,
        "overall_score": 68,
        "strengths": [
            "Regular outcome tracking and reporting",
            "Clear logic models and theory of change",
            "Stakeholder feedback integration",
        ],
        "improvement_areas": [
            "Implement more rigorous evaluation methodologies",
            "Enhance data collection and analysis systems",
            "Develop comparative and longitudinal studies",
        ],
    },
    "compliance_readiness": {
        "regulatory_compliance": 85,
        "reporting_systems": 80,
        "documentation_practices": 75,
        "risk_management": 70,
        "policy_procedures": 80,
        "overall_score": 78,
        "strengths": [
            "Strong compliance track record",
            "Effective reporting and documentation systems",
            "Clear policies and procedures",
        ],
        "improvement_areas": [
            "Enhance risk management frameworks",
            "Streamline compliance monitoring processes",
            "Strengthen emergency preparedness planning",
        ],
    },
}

# Recommended channel mix by readiness level
FUNDING_MIX: dict[str, dict[str, str]] = {
    "high": {
        "federal_grants": "30%",
        "foundation_grants": "25%",
        "corporate_funding": "20%",
        "earned_revenue": "15%",
        "individual_donors": "10%",
    },
    "medium-high": {
        "foundation_grants": "35%",
        "corporate_funding": "25%",
        "federal_grants": "20%",
        "earned_revenue": "10%",
        "individual_donors": "10%",
    },
    "default": {
        "foundation_grants": "40%",
        "corporate_funding": "30%",
        "earned_revenue": "15%",
        "individual_donors": "10%",
        "federal_grants": "5%",
    },
}

CROSS_CHANNEL_SYNERGIES = [
    {
        "synergy_type": "foundation_corporate_collaboration",
        "description": "Leverage foundation grants to attract corporate matching funds",
        "involved_channels": ["foundation_grants", "corporate_funding"],
        "potential_impact": "Increase total funding by 40-60%",
    },
    {
        "synergy_type": "federal_local_alignment",
        "description": "Use federal grants to demonstrate impact for state/local funding",
        "involved_channels": ["federal_grants", "state_local_grants"],
        "potential_impact": "Create sustainable funding ecosystem",
    },
]

PORTFOLIO_RISK = {
    "concentration_risk": "medium - diversified across channels",
    "timeline_risk": "low - staggered application deadlines",
    "capacity_risk": "medium - requires strategic prioritization",
    "market_risk": "low - stable funding environment",
    "overall_risk_level": "medium",
    "risk_mitigation_strategies": [
        "Maintain pipeline of 3x target funding amount",
        "Diversify across funding channels and timelines",
        "Build contingency funding strategies",
        "Strengthen organizational capacity continuously",
    ],
}

APPLICATION_TIMELINE = {
    "timeline_strategy": "Stagger applications to maintain consistent pipeline",
    "monthly_targets": "Submit 1-2 major applications per month",
    "preparation_timeline": "6-8 weeks per major application",
    "follow_up_schedule": "Quarterly funder relationship maintenance",
}

RESOURCE_ALLOCATION = {
    "staff_allocation": "Development staff: 70%, Program staff: 20%, Leadership: 10%",
    "budget_allocation": "Application development: 60%, Relationship building: 25%, Capacity building: 15%",
    "timeline_allocation": "Research/planning: 30%, Application development: 50%, Follow-up: 20%",
}

PORTFOLIO_SUCCESS_METRICS = {
    "application_success_rate": "Target: 35% overall success rate",
    "funding_diversification": "Target: No single source >40% of total funding",
    "pipeline_health": "Maintain 3x pipeline of funding needs",
    "relationship_building": "Establish 2+ new funder relationships quarterly",
}

ANNUAL_TARGETS = {
    "year_1_targets": {
        "total_funding": "$1,200,000",
        "new_funder_relationships": 8,
        "application_success_rate": "30%",
        "diversification_achievement": "80% of optimal mix",
    },
    "year_2_targets": {
        "total_funding": "$1,300,000",
        "new_funder_relationships": 6,
        "application_success_rate": "35%",
        "diversification_achievement": "90% of optimal mix",
    },
}

IMPLEMENTATION_PHASES = {
    "phase_1": "Foundation Building (Months 1-6): Capacity development and relationship building",
    "phase_2": "Strategic Execution (Months 7-18): Major application submissions and program launches",
    "phase_3": "Optimization & Growth (Months 19-24): Portfolio optimization and scale preparation",
}


def get_channel_analysis() -> dict[str, dict[str, Any]]:
    """All funding channel analyses keyed by channel name."""
    return copy.deepcopy(_CHANNELS)


def get_seasonal_strategies() -> dict[str, Any]:
    return copy.deepcopy(SEASONAL_STRATEGIES)


def get_readiness_factors() -> dict[str, dict[str, Any]]:
    return copy.deepcopy(READINESS_FACTORS)
