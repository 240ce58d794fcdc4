"""Evidence coverage: volume, diversity and recency of citations in any document.

No schema is assumed. Citation arrays are found structurally, anywhere in the
document, by key name.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from insight.config import get_max_walk_depth
from insight.dates import parse_datetime, to_iso
from insight.models import EvidenceCoverage, SourceTypeCount

logger = logging.getLogger(__name__)

CITATION_KEYS = ("citations", "evidence_citations", "sources", "references")
SOURCE_TYPE_KEYS = ("source_type", "sourceType", "type")
DATE_KEYS = (
    "date",
    "published_at",
    "captured_at",
    "extracted_at",
    "extractedAt",
    "publishedAt",
    "timestamp",
)

SECONDS_PER_DAY = 86400


def find_citation_arrays(document: Any, max_depth: int = 64) -> list[list]:
    """Collect every list stored under a citation key, in document order.

    Uses an explicit stack; nodes nested deeper than ``max_depth`` are skipped.
    """
    found: list[list] = []
    seen: set[int] = set()
    stack: list[tuple[Any, int]] = [(document, 0)]

    while stack:
        node, depth = stack.pop()
        if not isinstance(node, (dict, list)):
            continue
        if depth > max_depth:
            logger.debug("Citation walk hit depth limit %d", max_depth)
            continue
        if id(node) in seen:
            continue
        seen.add(id(node))

        if isinstance(node, dict):
            for key in CITATION_KEYS:
                if isinstance(node.get(key), list):
                    found.append(node[key])
            children = list(node.values())
        else:
            children = node

        for child in reversed(children):
            if isinstance(child, (dict, list)):
                stack.append((child, depth + 1))

    return found


def _first_truthy(record: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def extract_citations(arrays: list[list]) -> list[dict]:
    """Reduce citation-like entries to ``{"source_type", "date"}``; non-objects are skipped."""
    citations = []
    for array in arrays:
        for item in array:
            if not isinstance(item, dict):
                continue

            source_type = None
            raw_type = _first_truthy(item, SOURCE_TYPE_KEYS)
            if isinstance(raw_type, str):
                source_type = raw_type.strip().lower() or None

            citations.append({
                "source_type": source_type,
                "date": parse_datetime(_first_truthy(item, DATE_KEYS)),
            })
    return citations


def recency_label(most_recent: datetime | None, now: datetime) -> str:
    """Bucket the newest evidence date by whole days before ``now``."""
    if most_recent is None:
        return "Unknown"

    now = parse_datetime(now) or now
    days = int((now - most_recent).total_seconds() // SECONDS_PER_DAY)
    if days == 0:
        return "Today"
    if days <= 7:
        return "Last 7 days"
    if days <= 30:
        return "Last 30 days"
    return "90+ days"


def coverage_score(total: int, distinct_types: int, recency: str) -> int:
    """Volume (max 30) + diversity (max 30) + recency (max 40), clamped to 0-100."""
    score = 0

    if total >= 10:
        score += 30
    elif total >= 5:
        score += 20
    elif total >= 1:
        score += 10

    if distinct_types >= 3:
        score += 30
    elif distinct_types >= 2:
        score += 20
    elif distinct_types >= 1:
        score += 10

    if recency in ("Today", "Last 7 days", "Last 30 days"):
        score += 40
    elif recency == "90+ days":
        score += 10

    return max(0, min(100, score))


def coverage_notes(total: int, distinct_types: int, recency: str) -> list[str]:
    notes = []

    if total == 0:
        notes.append("No citations found yet — results are directional.")
    elif total < 5:
        plural = "" if total == 1 else "s"
        notes.append(
            f"Only {total} citation{plural} found — consider adding more evidence."
        )

    if distinct_types == 1:
        notes.append(
            "Only 1 source type detected — diversify evidence for stronger defensibility."
        )
    elif distinct_types == 0 and total > 0:
        notes.append("Source types not detected — evidence may lack metadata.")

    if recency == "90+ days":
        notes.append("Most evidence is older than 90 days.")
    elif recency == "Unknown" and total > 0:
        notes.append("Evidence dates unavailable — recency cannot be determined.")

    return notes


def compute_coverage(
    document: Any, now: datetime, config: dict | None = None,
) -> EvidenceCoverage:
    """Compute evidence coverage for any nested JSON value.

    ``now`` is the reference time for recency labels and must be supplied by
    the caller. Malformed nodes are skipped; this never raises.
    """
    arrays = find_citation_arrays(document, get_max_walk_depth(config))
    citations = extract_citations(arrays)
    total = len(citations)

    counts: dict[str, int] = {}
    for citation in citations:
        if citation["source_type"]:
            counts[citation["source_type"]] = counts.get(citation["source_type"], 0) + 1
    source_types = [
        SourceTypeCount(type=t, count=c)
        for t, c in sorted(counts.items(), key=lambda kv: -kv[1])
    ]

    dates = sorted(c["date"] for c in citations if c["date"] is not None)
    most_recent = dates[-1] if dates else None
    recency = recency_label(most_recent, now)

    logger.debug(
        "Coverage: %d citations, %d source types, recency=%s",
        total, len(source_types), recency,
    )

    return EvidenceCoverage(
        total_citations=total,
        source_types=source_types,
        recency_label=recency,
        coverage_score=coverage_score(total, len(source_types), recency),
        coverage_notes=coverage_notes(total, len(source_types), recency),
        most_recent_date=to_iso(most_recent) if most_recent else None,
        oldest_date=to_iso(dates[0]) if dates else None,
    )
