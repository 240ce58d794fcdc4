"""Core data models for the synthesis core.

Every record is a plain dataclass; ``to_wire`` turns a record tree into the
camelCase dict shape consumed by the read-model / UI layer.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

# Assumption categories, in output order
CATEGORIES = ("Market", "Buyer", "Product", "Competition", "Evidence", "Execution")
CONFIDENCE_LEVELS = ("High", "Medium", "Low")

RECENCY_LABELS = ("Today", "Last 7 days", "Last 30 days", "90+ days", "Unknown")

# Decision-lever quadrants, most urgent first
QUADRANTS = ("mustProveNow", "watchClosely", "safeToProceed", "ignoreForNow")


@dataclass
class SourceTypeCount:
    type: str
    count: int


@dataclass
class EvidenceCoverage:
    """Aggregate recency/diversity/volume of the citations in a document."""

    total_citations: int
    source_types: list[SourceTypeCount] = field(default_factory=list)
    recency_label: str = "Unknown"
    coverage_score: int = 0
    coverage_notes: list[str] = field(default_factory=list)
    most_recent_date: str | None = None  # ISO8601
    oldest_date: str | None = None


@dataclass
class CompressionStats:
    original: int = 0
    merged: int = 0


@dataclass
class CompressionResult:
    """Merged opportunity records plus bookkeeping.

    Items are dicts: the base artifact record with ``mergedFromIds``,
    ``mergedCount``, ``mergedTitles`` and ``mergedCitations`` added.
    """

    items: list[dict] = field(default_factory=list)
    stats: CompressionStats = field(default_factory=CompressionStats)


@dataclass
class Assumption:
    """A synthesized, categorized assumption behind the top opportunities."""

    id: str
    category: str  # Market, Buyer, Product, Competition, Evidence, Execution
    statement: str
    why_it_matters: str
    confidence: str  # High, Medium, Low
    impact: int  # 1-5
    related_opportunity_ids: list[str] = field(default_factory=list)
    sources_count: int = 0


@dataclass
class Lever:
    """An assumption placed on the confidence x sensitivity matrix."""

    assumption: Assumption
    decision_sensitivity: int
    quadrant: str
    label: str
    priority: int
    is_fluffy: bool = False


@dataclass
class QuadrantCounts:
    must_prove_now: int = 0
    watch_closely: int = 0
    safe_to_proceed: int = 0
    ignore_for_now: int = 0

    def total(self) -> int:
        return (
            self.must_prove_now + self.watch_closely
            + self.safe_to_proceed + self.ignore_for_now
        )


@dataclass
class FrameGroup:
    id: str
    label: str
    items: list[dict] = field(default_factory=list)


@dataclass
class TopOpportunity:
    title: str
    score: float | None = None
    one_liner: str | None = None
    why_now: str | None = None
    proposed_move: str | None = None
    what_it_enables: list[str] = field(default_factory=list)
    who_its_for: str | None = None
    first_experiment: str | None = None
    merged_count: int = 1
    raw: dict = field(default_factory=dict)


@dataclass
class ActionPlan:
    decision: str | None = None
    next_3_moves: list[str] = field(default_factory=list)
    what_to_say_no_to: list[str] = field(default_factory=list)


@dataclass
class WhyThisMatters:
    market_tension: str | None = None
    why_now: str | None = None
    why_defensible: str | None = None


@dataclass
class ReadoutData:
    """Final executive readout assembled from already-derived values."""

    last_generated_at: str | None = None
    top_opportunities: list[TopOpportunity] = field(default_factory=list)
    exec_summary_bullets: list[str] = field(default_factory=list)
    action_plan: ActionPlan = field(default_factory=ActionPlan)
    why_this_matters: WhyThisMatters = field(default_factory=WhyThisMatters)
    evidence: EvidenceCoverage | None = None
    compression: CompressionStats | None = None


@dataclass
class NormalizedArtifact:
    """One stored artifact after structural checks."""

    type: str  # jtbd, opportunities_v2, opportunities_v3, strategic_bets, profiles
    content: Any
    created_at: str | None = None
    run_id: str | None = None
    generated_at: str | None = None
    schema_version: int = 0


@dataclass
class ResultsMeta:
    project_id: str = ""
    last_generated_at: str | None = None
    available_artifact_types: list[str] = field(default_factory=list)
    schema_versions_present: list[int] = field(default_factory=list)


@dataclass
class NormalizedResults:
    """Best artifact of each type for one project."""

    opportunities_v3: NormalizedArtifact | None = None
    opportunities_v2: NormalizedArtifact | None = None
    strategic_bets: NormalizedArtifact | None = None
    profiles: NormalizedArtifact | None = None
    jtbd: NormalizedArtifact | None = None
    meta: ResultsMeta = field(default_factory=ResultsMeta)

    @property
    def best_opportunities(self) -> NormalizedArtifact | None:
        return self.opportunities_v3 or self.opportunities_v2

    def selected(self) -> list[NormalizedArtifact]:
        """All selected artifacts, newest schema first."""
        return [
            a for a in (
                self.opportunities_v3, self.opportunities_v2,
                self.strategic_bets, self.profiles, self.jtbd,
            )
            if a is not None
        ]


@dataclass
class SynthesisResult:
    """Everything one synthesis pass derives for a project."""

    normalized: NormalizedResults
    coverage: EvidenceCoverage
    compression: CompressionResult
    assumptions: list[Assumption] = field(default_factory=list)
    levers: list[Lever] = field(default_factory=list)
    quadrant_counts: QuadrantCounts = field(default_factory=QuadrantCounts)
    frames: dict[str, list[FrameGroup]] = field(default_factory=dict)
    readout: ReadoutData = field(default_factory=ReadoutData)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_wire(value: Any) -> Any:
    """Convert a record tree to plain JSON-ready values with camelCase keys.

    Only dataclass field names are renamed; keys of plain dicts (artifact
    records) pass through untouched.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            _camel(f.name): to_wire(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value
