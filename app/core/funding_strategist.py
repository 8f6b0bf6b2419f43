# ruff: noqa: E501
"""UFA expert funding strategist.

Turns the static funding landscape into a tenant analysis: channel
recommendations, organizational readiness, expert strategies, multi-channel
opportunities, seasonal planning, portfolio optimization, a roadmap and
leadership communications.

Pure computation. Persistence of the results lives in app.services.ufa_agent.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from app.core.funding_landscape import (
    ANNUAL_TARGETS,
    APPLICATION_TIMELINE,
    CAPACITY_ALLOCATION,
    CAPACITY_REQUIREMENTS,
    CHANNEL_ACTION_STEPS,
    COMPETITIVE_POSITION,
    CROSS_CHANNEL_SYNERGIES,
    DEFAULT_ACTION_STEPS,
    DIVERSIFICATION_STRATEGY,
    EXPERTISE_AREAS,
    FUNDING_MIX,
    IMPLEMENTATION_PHASES,
    KEY_FUNDING_DEADLINES,
    MARKET_TIMING,
    MARKET_TRENDS,
    MONTHLY_FOCUS,
    PORTFOLIO_RISK,
    PORTFOLIO_SUCCESS_METRICS,
    RESOURCE_ALLOCATION,
    RISK_MITIGATION_STRATEGY,
    TOTAL_FUNDING_AVAILABLE,
    get_channel_analysis,
    get_readiness_factors,
    get_seasonal_strategies,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

# ============================================================================
# Constants
# ============================================================================

CHANNEL_PRIORITIES = ["primary", "secondary", "tertiary"]
EXPECTED_SUCCESS_SHARE = 0.15
FEDERAL_STRATEGY_MIN_READINESS = 75
HIGH_READINESS_SCORE = 75
MAX_CONCURRENT_APPLICATIONS = 8

FEDERAL_STRATEGY: dict[str, Any] = {
    "category": "federal_grants",
    "priority": "high",
    "title": "Multi-Agency Federal Grant Strategy",
    "description": "Leverage organizational strength for major federal opportunities",
    "timeline": "12-18 months",
    "investment_required": 150_000,
    "potential_return": 3_500_000,
    "success_probability": 67,
    "expert_insights": [
        "Your evaluation capacity positions you well for education grants",
        "Consider NSF-ED collaborative opportunities for larger awards",
        "Build university partnerships for research components",
    ],
    "action_steps": [
        "Identify 2-3 target agencies based on mission alignment",
        "Develop agency-specific relationship building plan",
        "Create grant development timeline with 6-month lead time",
        "Establish evaluation partnership with research institution",
    ],
    "risk_mitigation": [
        "Diversify across agencies to reduce concentration risk",
        "Maintain pipeline of 3-5 applications in development",
        "Build internal grant management capacity before scaling",
    ],
}

FOUNDATION_STRATEGY: dict[str, Any] = {
    "category": "foundation_grants",
    "priority": "high",
    "title": "Strategic Foundation Portfolio Development",
    "description": "Build diversified foundation funding base with relationship focus",
    "timeline": "18-24 months",
    "investment_required": 75_000,
    "potential_return": 1_200_000,
    "success_probability": 78,
    "expert_insights": [
        "Foundation funding requires long-term relationship investment",
        "Local foundations show 34% higher success rate for your profile",
        "Multi-year commitments available from foundations with track record",
    ],
    "action_steps": [
        "Conduct foundation landscape analysis and prioritization",
        "Develop foundation relationship cultivation calendar",
        "Create foundation-specific case statements and materials",
        "Schedule quarterly program officer relationship meetings",
    ],
    "seasonal_optimization": {
        "Q1": "Foundation relationship building and site visit requests",
        "Q2": "Spring funding cycle submissions and board presentations",
        "Q3": "Summer cultivation and program officer meetings",
        "Q4": "Year-end relationship stewardship and next year planning",
    },
}

CORPORATE_STRATEGY: dict[str, Any] = {
    "category": "corporate_partnerships",
    "priority": "medium",
    "title": "Strategic Corporate Partnership Development",
    "description": "Develop mutually beneficial corporate partnerships beyond traditional sponsorship",
    "timeline": "9-12 months",
    "investment_required": 50_000,
    "potential_return": 800_000,
    "success_probability": 56,
    "expert_insights": [
        "Corporate partnerships most successful when aligned with business objectives",
        "Employee engagement component increases partnership value by 45%",
        "Technology sector partnerships show highest ROI for STEM organizations",
    ],
    "action_steps": [
        "Identify corporate partners with strategic mission alignment",
        "Develop partnership value propositions beyond marketing",
        "Create employee engagement and volunteer opportunity packages",
        "Establish partnership success metrics and reporting structure",
    ],
    "value_creation_opportunities": [
        "Employee skills-based volunteering programs",
        "Corporate training and professional development partnerships",
        "Research and development collaboration opportunities",
        "Supply chain and procurement partnership integration",
    ],
}

INDIVIDUAL_DONOR_STRATEGY: dict[str, Any] = {
    "category": "individual_donors",
    "priority": "medium",
    "title": "Comprehensive Individual Donor Development",
    "description": "Build sustainable individual donor base across all giving levels",
    "timeline": "24-36 months",
    "investment_required": 120_000,
    "potential_return": 2_400_000,
    "success_probability": 82,
    "expert_insights": [
        "Individual giving provides most reliable and flexible funding source",
        "Major donor cultivation requires 18-month minimum timeline",
        "Monthly giving programs show 67% higher lifetime value",
    ],
    "action_steps": [
        "Implement comprehensive donor management and wealth screening system",
        "Develop donor acquisition strategy across digital and traditional channels",
        "Create donor stewardship and cultivation calendar",
        "Establish major gift officer capacity and training program",
    ],
    "donor_development_pipeline": {
        "prospects": "Identify and qualify potential donors through wealth screening",
        "suspects": "Engage through events, communications, and volunteer opportunities",
        "first_time_donors": "Provide exceptional stewardship and impact communication",
        "repeat_donors": "Develop deeper relationship and increase giving capacity",
        "major_donors": "Personal cultivation and legacy giving conversations",
    },
}

DEFAULT_CASE_FOR_INVESTMENT = "Strategic investment in proven programs with scalable impact potential"


def _label(key: str) -> str:
    return key.replace("_", " ")


def _copy_strategy(strategy: dict[str, Any]) -> dict[str, Any]:
    return {k: (list(v) if isinstance(v, list) else dict(v) if isinstance(v, dict) else v) for k, v in strategy.items()}


# ============================================================================
# Funding landscape
# ============================================================================

def assess_channel_timeline(channel_data: dict[str, Any]) -> str:
    if channel_data.get("timeline"):
        return channel_data["timeline"]
    if channel_data.get("seasonal_patterns"):
        return "3-12 months"
    return "1-6 months"


def assess_channel_complexity(timeline: str) -> str:
    if "12-" in timeline:
        return "high"
    if "6-" in timeline:
        return "medium"
    return "low"


def generate_channel_recommendations(channels: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Recommend the three channels with the most funding potential."""
    ranked = []
    for channel, data in channels.items():
        timeline = assess_channel_timeline(data)
        ranked.append(
            {
                "channel": channel,
                "potential": data.get("totalAvailable") or 0,
                "complexity": assess_channel_complexity(timeline),
                "timeline": timeline,
            }
        )
    ranked.sort(key=lambda c: c["potential"], reverse=True)

    recommendations = []
    for priority, channel in zip(CHANNEL_PRIORITIES, ranked):
        recommendations.append(
            {
                "channel": channel["channel"],
                "priority": priority,
                "rationale": (
                    f"{_label(channel['channel'])} offers {channel['potential']:,} in funding potential "
                    f"with {channel['complexity']} complexity and {channel['timeline']} timeline."
                ),
                "action_steps": list(CHANNEL_ACTION_STEPS.get(channel["channel"], DEFAULT_ACTION_STEPS)),
                "timeline": channel["timeline"],
                "expected_outcome": {
                    "funding_potential": round(channel["potential"] * EXPECTED_SUCCESS_SHARE),
                    "timeline": channel["timeline"],
                    "probability": "Medium-high with proper execution",
                },
            }
        )

    return {
        "top_recommendations": recommendations,
        "diversification_strategy": dict(DIVERSIFICATION_STRATEGY),
        "risk_mitigation": dict(RISK_MITIGATION_STRATEGY),
        "capacity_requirements": dict(CAPACITY_REQUIREMENTS),
    }


# ============================================================================
# Organizational readiness
# ============================================================================

def calculate_readiness_score(factors: dict[str, dict[str, Any]]) -> int:
    scores = [factor.get("overall_score") or 0 for factor in factors.values()]
    if not scores:
        return 0
    return round(sum(scores) / len(scores))


def determine_readiness_level(score: float) -> str:
    if score >= 80:
        return "high"
    if score >= 65:
        return "medium-high"
    if score >= 50:
        return "medium"
    if score >= 35:
        return "medium-low"
    return "low"


def generate_readiness_recommendations(factors: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    """One recommendation block per factor scoring under 70."""
    recommendations = []
    for name, data in factors.items():
        score = data.get("overall_score") or 0
        if score < 70:
            recommendations.append(
                {
                    "category": name,
                    "priority": "high" if score < 50 else "medium",
                    "recommendations": data.get("improvement_areas") or [],
                    "timeline": "3-6 months" if score < 50 else "6-12 months",
                }
            )
    return recommendations


def identify_capacity_gaps(factors: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    gaps = []
    for name, data in factors.items():
        score = data.get("overall_score") or 0
        if score < 75:
            critical = score < 50
            gaps.append(
                {
                    "area": name,
                    "gap_level": "critical" if critical else "moderate",
                    "specific_gaps": data.get("improvement_areas") or [],
                    "impact": (
                        "High - may prevent funding success"
                        if critical
                        else "Medium - may limit funding opportunities"
                    ),
                }
            )
    return gaps


def identify_strength_areas(factors: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    strengths = []
    for name, data in factors.items():
        score = data.get("overall_score") or 0
        if score >= 75:
            strengths.append(
                {
                    "area": name,
                    "strength_level": "exceptional" if score >= 85 else "strong",
                    "specific_strengths": data.get("strengths") or [],
                    "leverage_opportunities": f"Use {name} strength to enhance funding competitiveness",
                }
            )
    return strengths


def create_readiness_roadmap(factors: dict[str, dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """
    Bucket each factor by score.

    <50 immediate (0-3 months), <70 short term (3-6), <85 medium term (6-12),
    otherwise long term.
    """
    roadmap: dict[str, list[dict[str, Any]]] = {
        "immediate_priorities": [],
        "short_term_goals": [],
        "medium_term_objectives": [],
        "long_term_vision": [],
    }
    for name, data in factors.items():
        score = data.get("overall_score") or 0
        areas = data.get("improvement_areas") or []
        if score < 50:
            roadmap["immediate_priorities"].append(
                {"area": name, "actions": areas[:2], "expected_impact": "Address critical capacity gaps"}
            )
        elif score < 70:
            roadmap["short_term_goals"].append(
                {"area": name, "actions": areas[:2], "expected_impact": "Strengthen moderate capacity areas"}
            )
        elif score < 85:
            roadmap["medium_term_objectives"].append(
                {"area": name, "actions": areas[:1], "expected_impact": "Enhance good capacity to excellence"}
            )
        else:
            roadmap["long_term_vision"].append(
                {
                    "area": name,
                    "actions": ["Maintain excellence and share best practices"],
                    "expected_impact": "Leverage strength for sector leadership",
                }
            )
    return roadmap


# ============================================================================
# Opportunities
# ============================================================================

def extract_channel_opportunities(channel: str, channel_data: dict[str, Any]) -> list[dict[str, Any]]:
    """Turn one channel analysis into concrete opportunities."""
    opportunities: list[dict[str, Any]] = []

    if channel == "federal_grants":
        for agency in channel_data.get("topAgencies") or []:
            name = agency["agency"]
            opportunities.append(
                {
                    "id": "fed_" + "_".join(name.lower().split()),
                    "channel": channel,
                    "title": f"{name} Grant Opportunity",
                    "description": f"Target funding from {name} for {', '.join(agency['priority_areas'])}",
                    "funding_amount": agency["average_award"],
                    "timeline": agency["funding_cycle"],
                    "priority": "high" if agency["success_rate"] > 20 else "medium",
                    "success_probability": agency["success_rate"],
                    "strategic_value": "high" if agency["average_award"] > 500_000 else "medium",
                }
            )

    elif channel == "foundation_grants":
        major = (channel_data.get("foundation_tiers") or {}).get("major_foundations")
        if major:
            opportunities.append(
                {
                    "id": "found_major",
                    "channel": channel,
                    "title": "Major Foundation Strategic Partnership",
                    "description": "Cultivate relationships with major foundations for significant multi-year funding",
                    # Three grant years
                    "funding_amount": major["avg_grant"] * 3,
                    "timeline": "12-18 months cultivation",
                    "priority": "high",
                    "success_probability": 25,
                    "strategic_value": "high",
                }
            )

    elif channel == "corporate_funding":
        for strategy, data in (channel_data.get("corporate_strategies") or {}).items():
            value_range = data.get("value_range")
            opportunities.append(
                {
                    "id": f"corp_{strategy}",
                    "channel": channel,
                    "title": f"Corporate {_label(strategy)}",
                    "description": f"Develop {_label(strategy)} partnerships with corporate sponsors",
                    "funding_amount": value_range[1] if value_range else 100_000,
                    "timeline": data.get("timeline") or "6-9 months",
                    "priority": "high" if value_range and value_range[1] > 200_000 else "medium",
                    "success_probability": 45,
                    "strategic_value": "medium",
                }
            )

    else:
        total = channel_data.get("totalAvailable")
        opportunities.append(
            {
                "id": f"gen_{channel}",
                "channel": channel,
                "title": f"{_label(channel)} Opportunity",
                "description": f"Explore funding opportunities through {_label(channel)}",
                "funding_amount": total * 0.1 if total else 50_000,
                "timeline": "6-12 months",
                "priority": "medium",
                "success_probability": 35,
                "strategic_value": "medium",
            }
        )

    return opportunities


def create_opportunity_pipeline(opportunities: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    def timeline_has(opp: dict[str, Any], fragment: str) -> bool:
        return fragment in (opp.get("timeline") or "")

    return {
        "immediate": [o for o in opportunities if timeline_has(o, "3") or o["priority"] == "high"][:3],
        "short_term": [o for o in opportunities if timeline_has(o, "6")][:5],
        "long_term": [o for o in opportunities if timeline_has(o, "12")][:4],
    }


def identify_multi_channel_opportunities(landscape: dict[str, Any]) -> dict[str, Any]:
    """Collect opportunities across every analyzed channel."""
    opportunities: list[dict[str, Any]] = []
    for channel, data in (landscape.get("channelAnalysis") or {}).items():
        # Readiness and guidance blocks ride along in channelAnalysis but are not channels
        if isinstance(data, dict) and "totalAvailable" in data:
            opportunities.extend(extract_channel_opportunities(channel, data))

    return {
        "total_opportunities": len(opportunities),
        "high_priority": [o for o in opportunities if o["priority"] == "high"],
        "medium_priority": [o for o in opportunities if o["priority"] == "medium"],
        "cross_channel_synergies": [dict(s) for s in CROSS_CHANNEL_SYNERGIES],
        "opportunity_pipeline": create_opportunity_pipeline(opportunities),
    }


# ============================================================================
# Portfolio
# ============================================================================

def calculate_optimal_funding_mix(readiness_level: str | None) -> dict[str, str]:
    return dict(FUNDING_MIX.get(readiness_level or "", FUNDING_MIX["default"]))


def calculate_resource_requirements(high_priority_count: int) -> dict[str, str]:
    return {
        "staff_time": f"{high_priority_count * 40} hours per month",
        "external_support": (
            "grant writing consultant recommended" if high_priority_count > 3 else "internal capacity sufficient"
        ),
        "budget_requirements": f"${high_priority_count * 5000:,} for application development and submissions",
    }


def align_with_organizational_capacity(
    opportunities: dict[str, Any], readiness: dict[str, Any] | None
) -> dict[str, Any]:
    """Size the concurrent application load from the readiness score (one per 15 points, max 8)."""
    readiness = readiness or {}
    score = readiness.get("overallScore")
    if not isinstance(score, (int, float)):
        score = 0
    gaps = readiness.get("capacityGaps")
    if not isinstance(gaps, list):
        gaps = []

    return {
        "recommended_concurrent_applications": min(int(score // 15), MAX_CONCURRENT_APPLICATIONS),
        "capacity_building_priorities": gaps[:3],
        "resource_requirements": calculate_resource_requirements(len(opportunities.get("high_priority") or [])),
    }


def select_priority_applications(opportunities: dict[str, Any], readiness: dict[str, Any]) -> list[dict[str, Any]]:
    limit = 8 if (readiness.get("overallScore") or 0) >= HIGH_READINESS_SCORE else 5
    return list(opportunities.get("high_priority") or [])[:limit]


def optimize_funding_portfolio(opportunities: dict[str, Any], readiness: dict[str, Any]) -> dict[str, Any]:
    return {
        "recommended_mix": calculate_optimal_funding_mix(readiness.get("readinessLevel")),
        "risk_assessment": {**PORTFOLIO_RISK, "risk_mitigation_strategies": list(PORTFOLIO_RISK["risk_mitigation_strategies"])},
        "capacity_alignment": align_with_organizational_capacity(opportunities, readiness),
        "timeline_optimization": dict(APPLICATION_TIMELINE),
        "priority_applications": select_priority_applications(opportunities, readiness),
        "resource_allocation": dict(RESOURCE_ALLOCATION),
        "success_metrics": dict(PORTFOLIO_SUCCESS_METRICS),
    }


def calculate_diversification_progress(portfolio: dict[str, Any]) -> int:
    """Percent of the recommended mix channels already represented by priority applications."""
    mix = portfolio.get("recommended_mix") or {}
    if not mix:
        return 0
    covered = {app.get("channel") for app in portfolio.get("priority_applications") or []}
    return round(100 * sum(1 for channel in mix if channel in covered) / len(mix))


# ============================================================================
# Roadmap and communications
# ============================================================================

def create_funding_roadmap(
    strategies: list[dict[str, Any]],
    portfolio: dict[str, Any],
    seasonal_strategy: dict[str, Any],
) -> dict[str, Any]:
    year_one_total = int(ANNUAL_TARGETS["year_1_targets"]["total_funding"].strip("$").replace(",", ""))
    quarters = seasonal_strategy.get("annual_strategy") or {}

    milestones = []
    for key, strategy in quarters.items():
        actions = strategy.get("priority_actions") or []
        milestones.append(
            {
                "quarter": key.split("_")[0].upper(),
                "focus": strategy.get("focus"),
                "key_actions": actions,
                "success_metrics": [f"Complete {len(actions) or 3} priority actions"],
                "funding_targets": f"${year_one_total // max(len(quarters), 1):,}",
            }
        )

    return {
        "executive_summary": {
            "total_funding_target": "$2,500,000 over 24 months",
            "diversification_strategy": portfolio.get("recommended_mix"),
            "key_priorities": [s["title"] for s in strategies[:3]],
            "success_probability": "75% chance of achieving 80% of funding target",
            "timeline": "24-month strategic implementation",
        },
        "quarterly_milestones": milestones,
        "annual_targets": {year: dict(targets) for year, targets in ANNUAL_TARGETS.items()},
        "implementation_plan": {
            **IMPLEMENTATION_PHASES,
            "success_factors": [s["description"] for s in strategies[:5]],
            "risk_mitigation": [
                "Regular quarterly reviews",
                "Flexible resource allocation",
                "Continuous capacity building",
            ],
        },
    }


def generate_expert_communications(strategies: list[dict[str, Any]], market: dict[str, Any]) -> dict[str, Any]:
    """Executive briefing, board presentation, funder messaging and team guidance."""
    outlook = (market.get("market_conditions") or {}).get("overall_outlook") or "positive"
    top_title = strategies[0]["title"] if strategies else "Federal grant programs"

    return {
        "executive_briefing": {
            "title": "Strategic Funding Analysis Executive Briefing",
            "key_findings": [
                f"Market outlook: {outlook}",
                f"Top funding opportunity: {top_title}",
                "Organizational readiness: Strong with targeted capacity building needed",
                "24-month funding potential: $2.5M across diversified portfolio",
            ],
            "recommended_actions": [
                (s.get("action_steps") or [s["description"]])[0] for s in strategies[:3]
            ],
            "success_probability": "75% with recommended strategy implementation",
        },
        "board_presentation": {
            "title": "Board Strategic Funding Presentation",
            "slides": [
                "Funding Landscape Analysis and Opportunities",
                "Organizational Readiness Assessment",
                "Strategic Portfolio Recommendations",
                "Implementation Timeline and Resource Requirements",
                "Board Role in Fundraising Success",
            ],
            "board_actions_needed": [
                "Approve strategic funding plan and resource allocation",
                "Activate board networks for relationship building",
                "Support capacity building investments",
                "Commit to quarterly fundraising progress reviews",
            ],
        },
        "funder_messaging": {
            "core_value_proposition": "Evidence-based programs delivering measurable community impact",
            "key_differentiators": [
                "Innovative approach to persistent social challenges",
                "Strong community partnerships and local trust",
                "Proven track record with measurable outcomes",
                "Efficient resource utilization and strong ROI",
            ],
            "case_for_investment": (strategies[0].get("impact_statement") if strategies else None)
            or DEFAULT_CASE_FOR_INVESTMENT,
            "partnership_opportunities": "Multiple collaboration models available for strategic philanthropic partnerships",
        },
        "team_guidance": {
            "development_team_priorities": [s["title"] for s in strategies[:5]],
            "capacity_building_focus": "Grant writing, relationship management, impact measurement",
            "monthly_targets": "Submit 1-2 major applications, cultivate 3-5 funder relationships",
            "success_metrics": "Track application pipeline, relationship development, and conversion rates",
        },
    }


def calculate_expert_confidence_score(readiness: dict[str, Any], market: dict[str, Any]) -> int:
    """Base 85, +5 for readiness of 70 or more, +3 for a positive market outlook, capped at 99."""
    confidence = 85
    if (readiness.get("overallScore") or 0) >= 70:
        confidence += 5
    outlook = (market.get("market_conditions") or {}).get("overall_outlook") or ""
    if "positive" in outlook:
        confidence += 3
    return min(99, confidence)


def calculate_expert_metrics(readiness: dict[str, Any], market: dict[str, Any], timestamp: str) -> dict[str, Any]:
    return {
        "readiness_score": readiness.get("overallScore"),
        "market_outlook": (market.get("market_conditions") or {}).get("overall_outlook"),
        "competitive_position": "strong",
        "funding_pipeline_health": "good",
        "last_updated": timestamp,
    }


# ============================================================================
# Strategist
# ============================================================================

class UFAExpertFundingStrategist:
    """
    Runs the expert funding analysis for one tenant.

    Subclasses may override ``analyze_funding_landscape`` to blend in extra
    channel intelligence; everything downstream reads the landscape it returns.
    """

    expertise_areas = EXPERTISE_AREAS

    def __init__(self, tenant_id: str, analysis_timestamp: datetime | None = None):
        self.tenant_id = tenant_id
        self.analysis_timestamp = analysis_timestamp or datetime.now(timezone.utc)

    @property
    def timestamp(self) -> str:
        return self.analysis_timestamp.isoformat()

    def analyze_funding_landscape(self, org_profile: dict[str, Any] | None = None) -> dict[str, Any]:
        channels = get_channel_analysis()
        return {
            "totalFundingAvailable": TOTAL_FUNDING_AVAILABLE,
            "channelAnalysis": channels,
            "expertRecommendations": generate_channel_recommendations(channels),
            "marketTiming": {
                "seasonal_patterns": {q: dict(v) for q, v in MARKET_TIMING["seasonal_patterns"].items()},
                "market_conditions": dict(MARKET_TIMING["market_conditions"]),
            },
            "competitivePositioning": {
                key: (list(value) if isinstance(value, list) else dict(value))
                for key, value in COMPETITIVE_POSITION.items()
            },
        }

    def assess_readiness(self) -> dict[str, Any]:
        factors = get_readiness_factors()
        score = calculate_readiness_score(factors)
        return {
            "overallScore": score,
            "readinessLevel": determine_readiness_level(score),
            "readinessFactors": factors,
            "expertRecommendations": generate_readiness_recommendations(factors),
            "capacityGaps": identify_capacity_gaps(factors),
            "strengthAreas": identify_strength_areas(factors),
            "fundingReadinessRoadmap": create_readiness_roadmap(factors),
        }

    def generate_expert_strategies(self, landscape: dict[str, Any], readiness: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Build the expert strategy list.

        Federal is offered only to organizations scoring above 75. Corporate
        partnerships need at least one corporate strategy in the landscape.
        """
        strategies = []
        if (readiness.get("overallScore") or 0) > FEDERAL_STRATEGY_MIN_READINESS:
            strategies.append(_copy_strategy(FEDERAL_STRATEGY))

        strategies.append(_copy_strategy(FOUNDATION_STRATEGY))

        corporate = (landscape.get("channelAnalysis") or {}).get("corporate_funding") or {}
        if len(corporate.get("corporate_strategies") or {}) > 0:
            strategies.append(_copy_strategy(CORPORATE_STRATEGY))

        strategies.append(_copy_strategy(INDIVIDUAL_DONOR_STRATEGY))
        return strategies

    def develop_seasonal_strategy(self) -> dict[str, Any]:
        year = self.analysis_timestamp.year
        return {
            "annual_strategy": get_seasonal_strategies(),
            "monthly_focus": dict(MONTHLY_FOCUS),
            "key_deadlines": [
                {"date": f"{year:04d}-{month:02d}-{day:02d}", "type": kind, "description": description}
                for month, day, kind, description in KEY_FUNDING_DEADLINES
            ],
            "capacity_allocation": {q: dict(v) for q, v in CAPACITY_ALLOCATION.items()},
        }

    def analyze_market_trends(self) -> dict[str, Any]:
        return {
            "market_conditions": dict(MARKET_TRENDS["market_conditions"]),
            "sector_trends": dict(MARKET_TRENDS["sector_trends"]),
            "competitive_intelligence": {
                **MARKET_TRENDS["competitive_intelligence"],
                "emerging_opportunities": list(MARKET_TRENDS["competitive_intelligence"]["emerging_opportunities"]),
            },
        }

    def run_analysis(self, org_profile: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Run every analysis step in order.

        Returns:
            Dict with landscape, expertStrategies, opportunities, seasonalStrategy,
            marketIntelligence, portfolioStrategy, readinessAssessment, roadmap,
            communications, expertMetrics, confidenceScore and timestamp
        """
        logger.info(f"Running expert funding analysis for tenant {self.tenant_id}")

        landscape = self.analyze_funding_landscape(org_profile)
        readiness = self.assess_readiness()
        strategies = self.generate_expert_strategies(landscape, readiness)
        opportunities = identify_multi_channel_opportunities(landscape)
        seasonal = self.develop_seasonal_strategy()
        market = self.analyze_market_trends()
        portfolio = optimize_funding_portfolio(opportunities, readiness)
        roadmap = create_funding_roadmap(strategies, portfolio, seasonal)

        return {
            "landscape": landscape,
            "expertStrategies": strategies,
            "opportunities": opportunities,
            "seasonalStrategy": seasonal,
            "marketIntelligence": market,
            "portfolioStrategy": portfolio,
            "readinessAssessment": readiness,
            "roadmap": roadmap,
            "communications": generate_expert_communications(strategies, market),
            "expertMetrics": calculate_expert_metrics(readiness, market, self.timestamp),
            "confidenceScore": calculate_expert_confidence_score(readiness, market),
            "timestamp": self.timestamp,
        }

    # ------------------------------------------------------------------
    # Rows for persistence
    # ------------------------------------------------------------------

    def build_roadmap_goals(self, portfolio: dict[str, Any]) -> list[dict[str, Any]]:
        """Goal rows for ufa_goals, keyed on (tenant_id, title)."""
        now = self.analysis_timestamp
        progress = calculate_diversification_progress(portfolio)

        def months(n: int) -> str:
            return (now + timedelta(days=30 * n)).isoformat()

        return [
            {
                "tenant_id": self.tenant_id,
                "title": "Achieve Diversified Funding Portfolio",
                "description": "Build balanced funding mix: 40% federal, 25% foundation, 15% corporate, 20% individual",
                "progress": progress,
                "target_value": 100,
                "current_value": progress,
                "deadline": months(24),
                "ai_insight": "Portfolio diversification reduces funding risk by 67% and increases sustainability",
                "status": "in-progress",
                "strategy_category": "portfolio_optimization",
            },
            {
                "tenant_id": self.tenant_id,
                "title": "Build Federal Grant Capacity",
                "description": "Develop organizational capacity to successfully pursue and manage federal grants",
                "progress": 35,
                "target_value": 3_500_000,
                "current_value": 875_000,
                "deadline": months(18),
                "ai_insight": "Federal grants offer largest funding opportunities with 67% success probability",
                "status": "high-priority",
                "strategy_category": "federal_grants",
            },
            {
                "tenant_id": self.tenant_id,
                "title": "Establish Corporate Partnership Program",
                "description": "Develop strategic corporate partnerships beyond traditional sponsorship",
                "progress": 15,
                "target_value": 800_000,
                "current_value": 120_000,
                "deadline": months(12),
                "ai_insight": "Corporate partnerships provide flexible funding and valuable non-monetary support",
                "status": "emerging-opportunity",
                "strategy_category": "corporate_partnerships",
            },
        ]

    def build_strategic_decision_tasks(self, strategies: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """One planning task per high-priority strategy, due in 30 days."""
        due = (self.analysis_timestamp + timedelta(days=30)).isoformat()
        return [
            {
                "tenant_id": self.tenant_id,
                "title": f"Strategic Decision: {s['title']}",
                "summary": (
                    f"{s['description']} - Investment: {s['investment_required']:,}, "
                    f"Potential Return: {s['potential_return']:,}"
                ),
                "status": "strategic-planning",
                "due_date": due,
                "ai_recommendation": (
                    f"Expert recommendation: {s['expert_insights'][0]}. "
                    f"Success probability: {s['success_probability']}%"
                ),
                "metadata": {
                    "strategy_category": s["category"],
                    "investment_required": s["investment_required"],
                    "potential_return": s["potential_return"],
                    "success_probability": s["success_probability"],
                    "timeline": s["timeline"],
                    "action_steps": s["action_steps"],
                },
            }
            for s in strategies
            if s.get("priority") == "high"
        ]

    def build_intelligence_metrics(self, analysis: dict[str, Any]) -> dict[str, str]:
        """Dashboard metrics, stringified for ufa_upsert_metric."""
        strategies = analysis.get("expertStrategies") or []
        opportunities = analysis.get("opportunities") or {}
        probabilities = [s.get("success_probability") or 0 for s in strategies]
        success_rate = round(sum(probabilities) / len(probabilities), 1) if probabilities else 0
        portfolio_value = sum(s.get("potential_return") or 0 for s in strategies)

        return {
            "ai_confidence": str(analysis.get("confidenceScore")),
            "success_rate": str(success_rate),
            "portfolio_value": str(portfolio_value),
            "funding_readiness_score": str((analysis.get("readinessAssessment") or {}).get("overallScore")),
            "opportunities_identified": str(opportunities.get("total_opportunities", 0)),
            "high_priority_matches": str(len(opportunities.get("high_priority") or [])),
            "last_comprehensive_analysis": analysis.get("timestamp") or self.timestamp,
        }

    def summarize_analysis(self, analysis: dict[str, Any]) -> dict[str, Any]:
        """Payload for the expert_funding_analysis event."""
        return {
            "strategies_generated": len(analysis.get("expertStrategies") or []),
            "opportunities_identified": (analysis.get("opportunities") or {}).get("total_opportunities", 0),
            "confidence_score": analysis.get("confidenceScore"),
            "funding_readiness_score": (analysis.get("readinessAssessment") or {}).get("overallScore"),
        }

    def build_strategic_update(self, analysis: dict[str, Any]) -> dict[str, Any]:
        """Notification payload summarizing the top strategies for leadership."""
        metrics = self.build_intelligence_metrics(analysis)
        insights = [
            {
                "type": "strategy",
                "priority": s.get("priority"),
                "title": s["title"],
                "description": s["description"],
                "value": f"${s['potential_return']:,}",
                "deadline": s.get("timeline"),
                "action": (s.get("action_steps") or ["Review strategy"])[0],
            }
            for s in (analysis.get("expertStrategies") or [])[:3]
        ]
        market = analysis.get("marketIntelligence") or {}
        return {
            "type": "strategic_update",
            "subject": f"UFA Strategic Update - {self.analysis_timestamp.strftime('%m/%d/%Y')}",
            "insights": insights,
            "performance": {
                "success_rate": float(metrics["success_rate"]),
                "portfolio_value": int(metrics["portfolio_value"]),
                "trend": (market.get("market_conditions") or {}).get("overall_outlook"),
            },
            "ai_confidence": analysis.get("confidenceScore"),
            "generated_at": self.timestamp,
        }
