"""Frame selectors: regroup jobs, opportunities and struggles without changing them."""

from __future__ import annotations

import re
from typing import Any

import numpy as np

from insight.config import get_strategic_bet_families, get_struggle_keywords
from insight.extract import first_str, get_list, rank_by_score, score_or, str_list
from insight.models import FrameGroup
from insight.synthesize import register_frame


def _slug(label: str) -> str:
    return re.sub(r"\s+", "-", label.lower())


def _records(content: Any, key: str) -> list[dict]:
    """Dict records under ``key``, or the content itself when it is a bare list."""
    items = content if isinstance(content, list) else get_list(content, key)
    return [item for item in items if isinstance(item, dict)]


def _mean_score(opportunities: list[dict]) -> float:
    return float(np.mean([score_or(o) for o in opportunities]))


def _ordered_by_mean(groups: list[tuple[FrameGroup, list[dict]]]) -> list[FrameGroup]:
    """Groups by mean member score descending; ties keep first-seen order."""
    ranked = sorted(groups, key=lambda pair: -_mean_score(pair[1]))
    return [group for group, _ in ranked]


def format_type_label(type_name: str) -> str:
    """``table_stakes`` -> ``Table Stakes``."""
    return " ".join(word[:1].upper() + word[1:] for word in type_name.split("_"))


@register_frame("jobs", "jtbd")
def select_by_jobs(jtbd: Any, config: dict | None = None) -> list[FrameGroup]:
    """All jobs in one group, highest opportunity score first."""
    jobs = _records(jtbd, "jobs")
    if not jobs:
        return []
    return [FrameGroup(
        id="all-jobs",
        label="All Jobs",
        items=[{"type": "jtbd", "job": job} for job in rank_by_score(jobs)],
    )]


@register_frame("differentiation_themes", "best_opportunities")
def select_by_differentiation_themes(
    opportunities: Any, config: dict | None = None,
) -> list[FrameGroup]:
    """Opportunities grouped by their ``type``."""
    by_type: dict[str, list[dict]] = {}
    for opp in _records(opportunities, "opportunities"):
        type_name = first_str(opp, "type") or "other"
        by_type.setdefault(type_name, []).append(opp)

    groups = []
    for type_name, items in by_type.items():
        group = FrameGroup(
            id=f"theme-{type_name}",
            label=format_type_label(type_name),
            items=[{"type": "opportunity", "opportunity": o} for o in rank_by_score(items)],
        )
        groups.append((group, items))
    return _ordered_by_mean(groups)


@register_frame("customer_struggles", "profiles")
def select_by_customer_struggles(
    snapshots: Any, config: dict | None = None,
) -> list[FrameGroup]:
    """Competitor customer struggles clustered by their first matching keyword."""
    keywords = get_struggle_keywords(config)

    # First competitor to report a struggle wins
    struggles: dict[str, str] = {}
    for snapshot in _records(snapshots, "snapshots"):
        competitor = first_str(snapshot, "competitor_name", "name") or "Unknown"
        for struggle in str_list(snapshot.get("customer_struggles")):
            if struggle.strip() and struggle not in struggles:
                struggles[struggle] = competitor

    clusters: dict[str, list[dict]] = {}
    for struggle, competitor in struggles.items():
        lower = struggle.lower()
        theme = next((k for k in keywords if k in lower), None)
        label = theme or "Other Issues"
        clusters.setdefault(label, []).append({
            "type": "struggle",
            "struggle": struggle,
            "competitor": competitor,
        })

    groups = [
        FrameGroup(id=f"struggle-{_slug(label)}", label=label, items=items)
        for label, items in clusters.items()
    ]
    return sorted(groups, key=lambda g: -len(g.items))


@register_frame("strategic_bets", "best_opportunities")
def select_by_strategic_bets(
    opportunities: Any, config: dict | None = None,
) -> list[FrameGroup]:
    """Opportunities grouped by the first strategic-bet family their text mentions."""
    families = get_strategic_bet_families(config)

    by_bet: dict[str, list[dict]] = {}
    for opp in _records(opportunities, "opportunities"):
        title = first_str(opp, "title", "name") or ""
        why_now = first_str(opp, "why_now") or ""
        text = f"{title} {why_now}".lower()

        label = next(
            (f["label"] for f in families if any(k in text for k in f["keywords"])),
            "Other Strategic Bets",
        )
        by_bet.setdefault(label, []).append(opp)

    groups = []
    for label, items in by_bet.items():
        group = FrameGroup(
            id=f"bet-{_slug(label)}",
            label=label,
            items=[{"type": "opportunity", "opportunity": o} for o in rank_by_score(items)],
        )
        groups.append((group, items))
    return _ordered_by_mean(groups)
