"""Defensive field access over schema-drifted artifact records.

Each logical attribute is read through an ordered chain of accessors; the
first one that yields a usable value wins, so newer schema conventions are
preferred while older shapes keep working.
"""

from __future__ import annotations

import math
from typing import Any, Callable


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def _nested_total(record: dict) -> Any:
    scoring = record.get("scoring")
    if isinstance(scoring, dict):
        return scoring.get("total")
    return None


# Newest convention first: v3 nests the score under scoring.total
SCORE_ACCESSORS: list[Callable[[dict], Any]] = [
    _nested_total,
    lambda r: r.get("score"),
    lambda r: r.get("opportunity_score"),
    lambda r: r.get("total_score"),
]


def extract_score(opportunity: Any) -> float | None:
    """Return the opportunity's score across schema versions, or None."""
    if not isinstance(opportunity, dict):
        return None
    for accessor in SCORE_ACCESSORS:
        value = accessor(opportunity)
        if _is_number(value):
            return value
    return None


def score_or(opportunity: Any, default: float = 0) -> float:
    score = extract_score(opportunity)
    return default if score is None else score


def rank_by_score(records: Any) -> list[dict]:
    """Dict records sorted by extracted score descending (stable, missing = 0)."""
    if not isinstance(records, list):
        return []
    items = [r for r in records if isinstance(r, dict)]
    return sorted(items, key=lambda r: -score_or(r))


def first_str(record: Any, *keys: str) -> str | None:
    """First non-empty string value among keys, in order."""
    if not isinstance(record, dict):
        return None
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def str_list(value: Any) -> list[str]:
    """Keep the string entries of a list; anything else becomes []."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v]


def get_title(record: Any) -> str | None:
    return first_str(record, "title", "name")


def get_summary(record: Any) -> str | None:
    return first_str(record, "summary", "description")


def get_tradeoffs(record: Any) -> dict:
    if not isinstance(record, dict):
        return {}
    tradeoffs = record.get("tradeoffs")
    return tradeoffs if isinstance(tradeoffs, dict) else {}


def get_citations(record: Any) -> list:
    """Citation list of a record: ``citations`` (v2) or ``proof_points[].citations`` (v3)."""
    if not isinstance(record, dict):
        return []
    citations = record.get("citations")
    if isinstance(citations, list):
        return citations

    proof_points = record.get("proof_points")
    if isinstance(proof_points, list):
        collected: list = []
        for point in proof_points:
            if isinstance(point, dict) and isinstance(point.get("citations"), list):
                collected.extend(point["citations"])
        return collected
    return []


def count_citations(record: Any) -> int:
    return len(get_citations(record))


def get_recency_hint(record: Any) -> float | None:
    """``scoring.breakdown.recencyConfidence`` when the record carries one."""
    if not isinstance(record, dict):
        return None
    scoring = record.get("scoring")
    if not isinstance(scoring, dict):
        return None
    breakdown = scoring.get("breakdown")
    if not isinstance(breakdown, dict):
        return None
    hint = breakdown.get("recencyConfidence", breakdown.get("recency_confidence"))
    return hint if _is_number(hint) else None


def get_list(content: Any, key: str) -> list:
    """``content[key]`` when content is a dict holding a list there, else []."""
    if isinstance(content, dict) and isinstance(content.get(key), list):
        return content[key]
    return []
