"""Tests for the executive readout."""

from __future__ import annotations

from insight.analyze.assumptions import derive_assumptions
from insight.models import EvidenceCoverage, SourceTypeCount
from insight.normalize import normalize_artifacts
from insight.process.compress import compress
from insight.synthesize.readout import select_readout


def _normalized(rows):
    return normalize_artifacts(rows)


def _row(type, content, created_at="2025-03-14T10:00:00Z"):
    return {"type": type, "content_json": content, "created_at": created_at}


def test_top_opportunities_from_compressed_pool(opportunities_v3):
    normalized = _normalized([_row("opportunities_v3", opportunities_v3)])
    compressed = compress(opportunities_v3["opportunities"])
    readout = select_readout(normalized, compressed=compressed)

    titles = [t.title for t in readout.top_opportunities]
    assert titles == [
        "Free tier expansion for SMB",
        "Automated compliance reporting",
        "Public API for integrations",
    ]
    lead = readout.top_opportunities[0]
    assert lead.score == 82
    assert lead.merged_count == 2
    assert lead.first_experiment == "Free tier lifts signups by 30%"
    assert readout.compression.merged == 1
    assert readout.last_generated_at == "2025-03-14T10:00:00Z"


def test_uncompressed_pool(opportunities_v3):
    """Without compression the raw artifact is ranked as-is."""
    readout = select_readout(_normalized([_row("opportunities_v3", opportunities_v3)]))
    assert [t.title for t in readout.top_opportunities][:2] == [
        "Free tier expansion for SMB",
        "Expand free tier for small businesses",
    ]
    assert readout.compression is None
    assert all(t.merged_count == 1 for t in readout.top_opportunities)


def test_exec_summary_bullets(opportunities_v3):
    normalized = _normalized([_row("opportunities_v3", opportunities_v3)])
    compressed = compress(opportunities_v3["opportunities"])
    coverage = EvidenceCoverage(
        total_citations=9,
        source_types=[SourceTypeCount("reviews", 3), SourceTypeCount("docs", 1)],
        recency_label="Today",
        coverage_score=90,
    )
    assumptions = derive_assumptions(compressed.items)
    readout = select_readout(
        normalized, compressed=compressed, coverage=coverage, assumptions=assumptions,
    )

    assert readout.exec_summary_bullets == [
        "Win SMB teams with a generous free tier",
        "Automated compliance reporting: New audit rules take effect this year",
        "Public API for integrations: Buyers expect to sync data with their CRM",
        "Evidence: 9 citations across 2 source types (today, coverage 90/100)",
        "Riskiest assumption: New audit rules take effect this year",
    ]
    assert readout.evidence is coverage


def test_bullet_cap(opportunities_v3):
    normalized = _normalized([_row("opportunities_v3", opportunities_v3)])
    compressed = compress(opportunities_v3["opportunities"])
    coverage = EvidenceCoverage(total_citations=1, source_types=[SourceTypeCount("docs", 1)])
    readout = select_readout(
        normalized,
        compressed=compressed,
        coverage=coverage,
        config={"readout": {"max_bullets": 3}},
    )
    assert len(readout.exec_summary_bullets) == 3


def test_action_plan_from_top_opportunity(opportunities_v3):
    normalized = _normalized([_row("opportunities_v3", opportunities_v3)])
    readout = select_readout(normalized, compressed=compress(opportunities_v3["opportunities"]))

    plan = readout.action_plan
    assert plan.decision == "Launch a free tier capped at 3 seats"
    assert plan.next_3_moves == [
        "Free tier expansion for SMB",
        "Automated compliance reporting",
        "Public API for integrations",
    ]
    assert plan.what_to_say_no_to == ["Enterprise custom contracts"]

    why = readout.why_this_matters
    assert why.market_tension == "Competitors raised entry prices in the last quarter"
    assert why.why_now == "Competitors raised entry prices in the last quarter"
    assert why.why_defensible == "Incumbents depend on seat-based revenue"


def test_action_plan_from_strategic_bets(opportunities_v3, strategic_bets_content):
    normalized = _normalized([
        _row("opportunities_v3", opportunities_v3),
        _row("strategic_bets", strategic_bets_content),
    ])
    readout = select_readout(normalized)

    plan = readout.action_plan
    assert plan.decision == "Commit to self-serve SMB acquisition this year"
    assert plan.next_3_moves == ["Own the SMB self-serve motion", "Ship a public API"]
    assert plan.what_to_say_no_to == ["Custom enterprise deals", "On-prem installs"]

    why = readout.why_this_matters
    assert why.why_now == "Three competitors raised prices"
    assert why.why_defensible == "Their sales teams are paid on seats"
    assert why.market_tension == "Competitors raised entry prices in the last quarter"


def test_v2_fallbacks(opportunities_v2):
    readout = select_readout(_normalized([_row("opportunities_v2", opportunities_v2)]))

    lead = readout.top_opportunities[0]
    assert lead.title == "Legacy reporting add-on"
    assert lead.score == 61
    assert lead.first_experiment == "Interview 5 finance leads"
    assert readout.exec_summary_bullets == ["Legacy reporting add-on"]
    assert readout.why_this_matters.why_defensible == "Requires a data warehouse"
    assert readout.why_this_matters.market_tension is None


def test_market_tension_from_assumptions():
    opportunities = {"opportunities": [{"title": "Untyped idea"}]}
    normalized = _normalized([_row("opportunities_v2", opportunities)])
    assumptions = derive_assumptions(opportunities["opportunities"])
    readout = select_readout(normalized, assumptions=assumptions)
    assert readout.why_this_matters.market_tension == (
        "Market dynamics are shifting to create new opportunities"
    )


def test_top_n_config(opportunities_v3):
    normalized = _normalized([_row("opportunities_v3", opportunities_v3)])
    readout = select_readout(normalized, config={"readout": {"top_n": 1}})
    assert len(readout.top_opportunities) == 1


def test_empty_results():
    readout = select_readout(_normalized([]))
    assert readout.top_opportunities == []
    assert readout.exec_summary_bullets == []
    assert readout.action_plan.decision is None
    assert readout.action_plan.next_3_moves == []
    assert readout.why_this_matters.market_tension is None
    assert readout.last_generated_at is None
