"""Executive readout: top opportunities, summary bullets, action plan, why it matters.

Pure assembly over values that were already derived. Nothing is scored here.
"""

from __future__ import annotations

import logging
from typing import Any

from insight.analyze.levers import classify
from insight.config import get_readout_max_bullets, get_readout_top_n
from insight.extract import (
    extract_score,
    first_str,
    get_list,
    get_title,
    get_tradeoffs,
    rank_by_score,
    str_list,
)
from insight.models import (
    ActionPlan,
    Assumption,
    CompressionResult,
    EvidenceCoverage,
    NormalizedResults,
    ReadoutData,
    TopOpportunity,
    WhyThisMatters,
)

logger = logging.getLogger(__name__)


def _what_it_enables(opp: dict) -> list[str]:
    enables = str_list(opp.get("what_this_enables"))
    if enables:
        return enables
    how_to_win = str_list(opp.get("how_to_win"))
    if how_to_win:
        return how_to_win
    impact = first_str(opp, "impact")
    return [impact] if impact else []


def _first_experiment(opp: dict) -> str | None:
    experiments = opp.get("experiments")
    if isinstance(experiments, list) and experiments:
        first = experiments[0]
        if isinstance(first, dict):
            return first_str(first, "hypothesis", "smallest_test")
        return None
    first_experiments = str_list(opp.get("first_experiments"))
    return first_experiments[0] if first_experiments else None


def _top_opportunity(opp: dict) -> TopOpportunity:
    merged_count = opp.get("mergedCount")
    return TopOpportunity(
        title=get_title(opp) or "Untitled Opportunity",
        score=extract_score(opp),
        one_liner=first_str(opp, "one_liner"),
        why_now=first_str(opp, "why_now"),
        proposed_move=first_str(opp, "proposed_move"),
        what_it_enables=_what_it_enables(opp),
        who_its_for=first_str(opp, "who_this_serves", "who_it_serves"),
        first_experiment=_first_experiment(opp),
        merged_count=merged_count if isinstance(merged_count, int) else 1,
        raw=opp,
    )


def _exec_bullets(
    top: list[TopOpportunity],
    coverage: EvidenceCoverage | None,
    assumptions: list[Assumption] | None,
    max_bullets: int,
) -> list[str]:
    bullets = []
    for opp in top[:3]:
        if opp.one_liner:
            bullets.append(opp.one_liner)
        elif opp.why_now:
            bullets.append(f"{opp.title}: {opp.why_now}")

    # Pad with bare titles so there are at least three
    for opp in top:
        if len(bullets) >= 3:
            break
        if opp.title not in bullets:
            bullets.append(opp.title)

    if coverage is not None and top:
        kinds = len(coverage.source_types)
        bullets.append(
            f"Evidence: {coverage.total_citations} citations across {kinds} "
            f"source type{'' if kinds == 1 else 's'} "
            f"({coverage.recency_label.lower()}, coverage {coverage.coverage_score}/100)"
        )

    riskiest = next(
        (a for a in assumptions or [] if classify(a) == "mustProveNow"), None,
    )
    if riskiest is not None:
        bullets.append(f"Riskiest assumption: {riskiest.statement}")

    return bullets[:max_bullets]


def _bets(normalized: NormalizedResults) -> list[dict]:
    if normalized.strategic_bets is None:
        return []
    return [b for b in get_list(normalized.strategic_bets.content, "bets") if isinstance(b, dict)]


def _action_plan(bets: list[dict], top: list[TopOpportunity]) -> ActionPlan:
    if bets:
        top_bet = bets[0]
        return ActionPlan(
            decision=first_str(top_bet, "summary"),
            next_3_moves=[t for t in (first_str(b, "title") for b in bets[:3]) if t],
            what_to_say_no_to=str_list(top_bet.get("what_we_say_no_to")),
        )
    if top:
        lead = top[0]
        return ActionPlan(
            decision=lead.proposed_move or lead.one_liner,
            next_3_moves=[opp.title for opp in top[:3]],
            what_to_say_no_to=str_list(get_tradeoffs(lead.raw).get("what_we_say_no_to")),
        )
    return ActionPlan()


def _why_this_matters(
    bets: list[dict],
    top: list[TopOpportunity],
    assumptions: list[Assumption] | None,
) -> WhyThisMatters:
    why = WhyThisMatters()

    if bets:
        top_bet = bets[0]
        proof = top_bet.get("first_real_world_proof")
        why.why_now = first_str(proof, "description") if isinstance(proof, dict) else None
        wont_follow = top_bet.get("why_competitors_wont_follow")
        if isinstance(wont_follow, list):
            why.why_defensible = ". ".join(str_list(wont_follow)) or None
        else:
            why.why_defensible = first_str(top_bet, "why_competitors_wont_follow")
    elif top:
        lead = top[0].raw
        why.why_now = top[0].why_now
        reasons = str_list(get_tradeoffs(lead).get("why_competitors_wont_follow"))
        if reasons:
            why.why_defensible = ". ".join(reasons)
        else:
            why.why_defensible = first_str(lead, "why_they_cant_easily_copy")

    tension = next((opp.why_now for opp in top if opp.why_now), None)
    if tension is None:
        problems = (first_str(opp.raw, "problem_today") for opp in top)
        tension = next((p for p in problems if p), None)
    if tension is None and assumptions:
        tension = next((a.statement for a in assumptions if a.category == "Market"), None)
    why.market_tension = tension
    return why


def select_readout(
    normalized: NormalizedResults,
    compressed: CompressionResult | None = None,
    coverage: EvidenceCoverage | None = None,
    assumptions: list[Assumption] | None = None,
    config: dict | None = None,
) -> ReadoutData:
    """Assemble the readout from normalized artifacts and optional derived values.

    When ``compressed`` is given its merged records are the opportunity pool,
    otherwise the best opportunities artifact is used as-is.
    """
    if compressed is not None:
        pool: Any = compressed.items
    elif normalized.best_opportunities is not None:
        pool = get_list(normalized.best_opportunities.content, "opportunities")
    else:
        pool = []

    top = [_top_opportunity(opp) for opp in rank_by_score(pool)[: get_readout_top_n(config)]]
    bets = _bets(normalized)

    readout = ReadoutData(
        last_generated_at=normalized.meta.last_generated_at,
        top_opportunities=top,
        exec_summary_bullets=_exec_bullets(
            top, coverage, assumptions, get_readout_max_bullets(config),
        ),
        action_plan=_action_plan(bets, top),
        why_this_matters=_why_this_matters(bets, top, assumptions),
        evidence=coverage,
        compression=compressed.stats if compressed is not None else None,
    )
    logger.info(
        "Readout: %d top opportunities, %d bullets",
        len(top), len(readout.exec_summary_bullets),
    )
    return readout
