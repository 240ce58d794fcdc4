"""Synthesis orchestrator: wires every derivation step into one read model."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from insight.analyze.assumptions import derive_assumptions
from insight.analyze.coverage import compute_coverage
from insight.analyze.levers import build_levers, compute_quadrant_counts
from insight.extract import get_list
from insight.models import SynthesisResult
from insight.normalize import normalize_artifacts
from insight.process.compress import compress
from insight.synthesize import FRAMES, select_frame
from insight.synthesize.readout import select_readout

logger = logging.getLogger(__name__)


def run_synthesis(
    artifacts: Any,
    now: datetime,
    project_id: str = "",
    config: dict | None = None,
) -> SynthesisResult:
    """Run one synthesis pass over a project's stored artifact rows.

    Pure: no I/O, inputs are not mutated, and the same artifacts with the same
    ``now`` always produce the same result.
    """
    normalized = normalize_artifacts(artifacts, project_id)

    # --- Evidence coverage over every selected artifact ---
    coverage = compute_coverage(
        [a.content for a in normalized.selected()], now, config,
    )
    logger.info(
        "Evidence coverage %d/100 (%d citations, %s)",
        coverage.coverage_score, coverage.total_citations, coverage.recency_label,
    )

    # --- Compress and derive ---
    best = normalized.best_opportunities
    opportunities = get_list(best.content, "opportunities") if best else []
    compression = compress(opportunities, config=config)

    assumptions = derive_assumptions(compression.items, config)
    levers = build_levers(assumptions)
    counts = compute_quadrant_counts(assumptions)
    fluffy = sum(1 for lever in levers if lever.is_fluffy)
    if fluffy:
        logger.info("%d of %d assumptions flagged as fluffy", fluffy, len(levers))

    # --- Views ---
    frames = {name: select_frame(name, normalized, config) for name in FRAMES}
    readout = select_readout(
        normalized,
        compressed=compression,
        coverage=coverage,
        assumptions=assumptions,
        config=config,
    )

    return SynthesisResult(
        normalized=normalized,
        coverage=coverage,
        compression=compression,
        assumptions=assumptions,
        levers=levers,
        quadrant_counts=counts,
        frames=frames,
        readout=readout,
    )
