"""Derive explicit, rated assumptions from ranked opportunities.

No generation happens here: statements come from the opportunities' own
narrative fields, padded with generic statements when the data is sparse.
"""

from __future__ import annotations

import logging
from typing import Any

from insight.config import get_assumption_top_n, get_max_assumptions
from insight.extract import (
    count_citations,
    first_str,
    get_recency_hint,
    get_title,
    get_tradeoffs,
    rank_by_score,
    score_or,
    str_list,
)
from insight.models import Assumption

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

# Padding statements per category, used in order until the category is full
GENERIC_MARKET = [
    (
        "Market dynamics are shifting to create new opportunities",
        "Market shifts drive strategic opportunities and competitive positioning",
    ),
    (
        "Demand in this segment is growing fast enough to support a new entrant",
        "Segment growth determines whether the opportunity is worth pursuing",
    ),
]
GENERIC_BUYER = [
    (
        "Buyer needs are evolving and creating new opportunities",
        "Understanding buyer evolution is critical for product-market fit",
    ),
    (
        "Buyers will switch from their current solution for a clearly better outcome",
        "Switching intent determines how quickly adoption can grow",
    ),
]
GENERIC_COMPETITION = [
    (
        "Competitors are not addressing this opportunity effectively",
        "Competitive gaps create strategic opportunities",
    ),
    (
        "Incumbents cannot respond quickly without disrupting their core business",
        "Response time of incumbents sets the window for differentiation",
    ),
]


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def assumption_id(statement: str, category: str) -> str:
    """Stable id from ``category:statement`` via a 32-bit rolling hash.

    Hashes UTF-16 code units with ``h = h * 31 + c`` in signed 32-bit
    arithmetic. Not a cryptographic identifier.
    """
    text = f"{category}:{statement}"
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"assumption-{_to_base36(abs(h))}"


def derive_confidence(citations_count: int, recency_hint: float | None = None) -> str:
    """High needs both volume and a strong recency hint; a missing hint counts as 0."""
    hint = recency_hint or 0
    if citations_count >= 4 and hint >= 7:
        return "High"
    if citations_count >= 2 or hint >= 5:
        return "Medium"
    return "Low"


def derive_impact(affects_top_opportunities: bool, score: float | None = None) -> int:
    score = score or 0
    if affects_top_opportunities and score >= 70:
        return 5
    if affects_top_opportunities and score >= 50:
        return 4
    if affects_top_opportunities:
        return 3
    return 2


def _make(
    category: str,
    statement: str,
    why: str,
    confidence: str,
    impact: int,
    related: list[str],
    sources: int,
) -> Assumption:
    return Assumption(
        id=assumption_id(statement, category),
        category=category,
        statement=statement,
        why_it_matters=why,
        confidence=confidence,
        impact=impact,
        related_opportunity_ids=list(related),
        sources_count=sources,
    )


def _opp_id(opp: dict, rank: int) -> str:
    value = opp.get("id")
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return f"opp-{rank}"


def _fill(
    derived: list[Assumption],
    generics: list[tuple[str, str]],
    category: str,
    related: list[str],
    sources: int,
    size: int = 2,
) -> list[Assumption]:
    """Drop repeated statements, then pad with generic ones up to ``size``."""
    result: list[Assumption] = []
    ids: set[str] = set()
    for assumption in derived:
        if assumption.id not in ids:
            ids.add(assumption.id)
            result.append(assumption)

    for statement, why in generics:
        if len(result) >= size:
            break
        generic = _make(category, statement, why, "Medium", 3, related, sources)
        if generic.id not in ids:
            ids.add(generic.id)
            result.append(generic)
    return result[:size]


def _fallback_assumptions() -> list[Assumption]:
    return [
        _make(
            "Market",
            "Market dynamics are shifting in ways that create new opportunities",
            "Understanding market shifts is critical for strategic positioning",
            "Low", 3, [], 0,
        ),
        _make(
            "Buyer",
            "Buyer needs and pain points are evolving",
            "Buyer evolution drives product strategy and positioning",
            "Low", 3, [], 0,
        ),
    ]


def derive_assumptions(opportunities: Any, config: dict | None = None) -> list[Assumption]:
    """Derive 8-15 assumptions from opportunity records.

    An empty (or non-list) input yields the two generic Market/Buyer
    assumptions. Output order: Market, Buyer, Competition, Evidence, Execution.
    """
    ranked = rank_by_score(opportunities)
    if not ranked:
        logger.info("No opportunities to derive assumptions from; using fallbacks")
        return _fallback_assumptions()

    top = ranked[: get_assumption_top_n(config)]
    top_ids = [_opp_id(opp, rank) for rank, opp in enumerate(top)]
    total_citations = sum(count_citations(opp) for opp in ranked)

    market: list[Assumption] = []
    buyer: list[Assumption] = []
    competition: list[Assumption] = []

    for rank, opp in enumerate(top[:2]):
        opp_id = top_ids[rank]
        score = score_or(opp)
        citations = count_citations(opp)
        title = get_title(opp)

        why_now = first_str(opp, "why_now")
        problem = first_str(opp, "problem_today")
        customer = first_str(opp, "customer")

        if why_now or problem:
            market.append(_make(
                "Market",
                why_now or f"Market conditions favor {title or 'this opportunity'}",
                f"This market assumption underpins the {title or 'top opportunity'}",
                derive_confidence(citations, get_recency_hint(opp)),
                derive_impact(True, score),
                [opp_id],
                citations,
            ))

        if customer or problem:
            buyer.append(_make(
                "Buyer",
                f"{customer} experience significant pain"
                if customer else "Buyers have unmet needs in this area",
                f"Buyer pain drives the opportunity for {title or 'this solution'}",
                derive_confidence(citations),
                derive_impact(True, score),
                [opp_id],
                citations,
            ))

        wont_follow = str_list(get_tradeoffs(opp).get("why_competitors_wont_follow"))
        if wont_follow:
            competition.append(_make(
                "Competition",
                wont_follow[0],
                "This competitive assumption supports the defensibility of "
                f"{title or 'this opportunity'}",
                "Medium",
                derive_impact(True, score),
                [opp_id],
                citations,
            ))

    assumptions = []
    assumptions += _fill(market, GENERIC_MARKET, "Market", top_ids[:1], total_citations)
    assumptions += _fill(buyer, GENERIC_BUYER, "Buyer", top_ids[:1], total_citations)
    assumptions += _fill(competition, GENERIC_COMPETITION, "Competition", top_ids[:1], 0)

    if total_citations >= 10:
        statement = "Evidence quality and recency support these opportunities"
        confidence = "High"
    else:
        statement = "Evidence is limited and may require additional validation"
        confidence = "Medium" if total_citations >= 5 else "Low"
    assumptions.append(_make(
        "Evidence",
        statement,
        "Evidence quality determines confidence in strategic decisions",
        confidence,
        4,
        top_ids,
        total_citations,
    ))

    top_opp = top[0]
    capabilities = str_list(get_tradeoffs(top_opp).get("capability_forced"))
    capability = capabilities[0] if capabilities else None
    assumptions.append(_make(
        "Execution",
        capability or "We have the capability to execute on this opportunity",
        "Execution capability determines feasibility of "
        f"{get_title(top_opp) or 'the top opportunity'}",
        "Medium" if capability else "Low",
        5,
        top_ids[:1],
        0,
    ))

    result = assumptions[: get_max_assumptions(config)]
    logger.info(
        "Derived %d assumptions from %d opportunities (%d citations)",
        len(result), len(ranked), total_citations,
    )
    return result
