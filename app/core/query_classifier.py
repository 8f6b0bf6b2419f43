"""Keyword classification of free-text funding questions.

Patterns are tested in declaration order against the lowercased query and the
first match wins. Unmatched queries fall through to ``general``.
"""

import re

QUERY_PATTERNS: dict[str, re.Pattern[str]] = {
    "sba_loans": re.compile(r"sba loan|7a loan|504 loan|microloan|sba funding"),
    "sba_guidance": re.compile(
        r"how to start|business plan|business structure|sba guidance|startup|small business"
    ),
    "federal_grants": re.compile(r"federal grant|government grant|grants\.gov|federal funding"),
    "grant_process": re.compile(r"grant process|how to apply|application process|grant writing"),
    "funding_readiness": re.compile(
        r"ready for funding|funding readiness|qualify|eligible|requirements"
    ),
    "business_funding": re.compile(
        r"business funding|capital|investment|financing|money for business"
    ),
    "next_steps": re.compile(r"what should i do|next steps|recommendations|what now|help me"),
}

# Query types that share a handler with another type
HANDLER_ALIASES: dict[str, str] = {
    "grant_process": "federal_grants",
    "business_funding": "funding_options",
    "next_steps": "funding_readiness",
}


def classify_query(query: str) -> str:
    """Return the first matching query type for ``query``, or ``general``."""
    lowered = (query or "").lower()
    for query_type, pattern in QUERY_PATTERNS.items():
        if pattern.search(lowered):
            return query_type
    return "general"


def resolve_handler(query_type: str) -> str:
    """Map a classified query type onto the handler that answers it."""
    return HANDLER_ALIASES.get(query_type, query_type)
