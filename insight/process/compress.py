"""Opportunity compression: merge near-duplicate opportunities, keep provenance."""

from __future__ import annotations

import logging
from typing import Any

from insight.config import (
    get_min_token_length,
    get_similarity_threshold,
    get_summary_chars,
)
from insight.extract import get_citations, get_title, score_or
from insight.models import CompressionResult, CompressionStats
from insight.process.similarity import fingerprint, similarity_matrix

logger = logging.getLogger(__name__)


def _citation_url(citation: Any) -> str | None:
    if not isinstance(citation, dict):
        return None
    for key in ("url", "citation", "source_url"):
        value = citation.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def dedupe_citations(citations: list) -> list:
    """Keep the first citation per URL, in order. Citations without a URL are dropped."""
    seen: set[str] = set()
    result = []
    for citation in citations:
        url = _citation_url(citation)
        if url is None or url in seen:
            continue
        seen.add(url)
        result.append(citation)
    return result


def _source_id(record: dict, index: int) -> str:
    value = record.get("id")
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return get_title(record) or f"idx-{index}"


def _merge_group(records: list[dict], indices: list[int]) -> dict:
    group = [records[i] for i in indices]

    # Highest score becomes the base; ties keep the first seen
    base = group[0]
    best = score_or(base, -1)
    for record in group[1:]:
        score = score_or(record, -1)
        if score > best:
            best = score
            base = record

    all_citations: list = []
    for record in group:
        all_citations.extend(get_citations(record))

    merged = dict(base)
    merged["mergedFromIds"] = [_source_id(records[i], i) for i in indices]
    merged["mergedCount"] = len(group)
    merged["mergedTitles"] = [t for t in (get_title(r) for r in group) if t]
    merged["mergedCitations"] = dedupe_citations(all_citations)
    return merged


def compress(
    opportunities: Any,
    threshold: float | None = None,
    config: dict | None = None,
) -> CompressionResult:
    """Group near-duplicate opportunities and merge each group into one record.

    Groups are formed greedily in input order: each unprocessed record absorbs
    every later unprocessed record whose fingerprint similarity is at least
    ``threshold``. Input records are never mutated.
    """
    if not isinstance(opportunities, list) or not opportunities:
        return CompressionResult()

    if threshold is None:
        threshold = get_similarity_threshold(config)
    min_length = get_min_token_length(config)
    summary_chars = get_summary_chars(config)

    # Non-dict entries still count toward the original total
    records = [o if isinstance(o, dict) else {} for o in opportunities]
    prints = [fingerprint(r, summary_chars) for r in records]
    sims = similarity_matrix(prints, min_length)

    processed = [False] * len(records)
    items = []
    for i in range(len(records)):
        if processed[i]:
            continue
        processed[i] = True
        group = [i]
        for j in range(i + 1, len(records)):
            if not processed[j] and sims[i, j] >= threshold:
                processed[j] = True
                group.append(j)
        items.append(_merge_group(records, group))

    stats = CompressionStats(original=len(records), merged=len(records) - len(items))
    if stats.merged:
        logger.info(
            "Compressed %d opportunities into %d (threshold=%.2f)",
            stats.original, len(items), threshold,
        )
    return CompressionResult(items=items, stats=stats)
