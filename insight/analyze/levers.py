"""Decision-lever quadrants: confidence x decision sensitivity."""

from __future__ import annotations

from insight.analyze.fluff import is_fluffy
from insight.models import QUADRANTS, Assumption, Lever, QuadrantCounts

QUADRANT_LABELS = {
    "mustProveNow": "Must Prove Now",
    "watchClosely": "Watch Closely",
    "safeToProceed": "Safe to Proceed",
    "ignoreForNow": "Ignore for Now",
}

_CONFIDENCE_INDEX = {"High": 2, "Medium": 1, "Low": 0}


def decision_sensitivity(assumption: Assumption) -> int:
    """Impact, +1 for Market/Buyer, +1 when linked to an opportunity; clamped to 1-5."""
    impact = assumption.impact if isinstance(assumption.impact, int) else 3
    sensitivity = impact
    if assumption.category in ("Market", "Buyer"):
        sensitivity += 1
    if assumption.related_opportunity_ids:
        sensitivity += 1
    return max(1, min(5, sensitivity))


def confidence_index(confidence: str) -> int:
    """High=2, Medium=1, anything else=0."""
    return _CONFIDENCE_INDEX.get(confidence, 0)


def classify(assumption: Assumption) -> str:
    """Return the quadrant for one assumption. Rule order matters."""
    confidence = confidence_index(assumption.confidence)
    sensitivity = decision_sensitivity(assumption)

    if confidence == 0 and sensitivity >= 4:
        return "mustProveNow"
    if confidence == 2 and sensitivity <= 2:
        return "safeToProceed"
    if sensitivity <= 2:
        return "ignoreForNow"
    return "watchClosely"


def get_quadrant_label(quadrant: str) -> str:
    return QUADRANT_LABELS[quadrant]


def get_action_priority(quadrant: str) -> int:
    """Sort key, most urgent first: mustProveNow=1 ... ignoreForNow=4."""
    return QUADRANTS.index(quadrant) + 1


def compute_quadrant_counts(assumptions: list[Assumption]) -> QuadrantCounts:
    counts = QuadrantCounts()
    for assumption in assumptions:
        quadrant = classify(assumption)
        if quadrant == "mustProveNow":
            counts.must_prove_now += 1
        elif quadrant == "watchClosely":
            counts.watch_closely += 1
        elif quadrant == "safeToProceed":
            counts.safe_to_proceed += 1
        else:
            counts.ignore_for_now += 1
    return counts


def build_levers(assumptions: list[Assumption]) -> list[Lever]:
    """Levers sorted by action priority, original order within a quadrant."""
    levers = []
    for assumption in assumptions:
        quadrant = classify(assumption)
        levers.append(Lever(
            assumption=assumption,
            decision_sensitivity=decision_sensitivity(assumption),
            quadrant=quadrant,
            label=get_quadrant_label(quadrant),
            priority=get_action_priority(quadrant),
            is_fluffy=is_fluffy(assumption.statement),
        ))
    return sorted(levers, key=lambda lever: lever.priority)
