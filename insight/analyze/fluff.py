"""Fluff detection for assumption statements.

A statement is fluffy when it names no one, measures nothing and points at no
observable proof, so it cannot change a decision.
"""

from __future__ import annotations

import re

BANNED_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"we have the capability",
        r"evidence is limited",
        r"buyer needs are evolving",
        r"competitors are not addressing",
        r"may require (additional )?validation",
        r"\bopportunit(y|ies)\b",
        r"capability to execute",
        r"evidence quality and recency support",
        r"market dynamics are shifting",
        r"buyer needs and pain points are evolving",
    )
]

SOURCE_TYPE_KEYWORDS = [
    "reviews",
    "docs",
    "pricing page",
    "changelog",
    "status page",
    "marketing site",
    "jobs",
]

MEASURABLE = re.compile(r"\d|[≥≤<>%]|\b(hours?|minutes?|days?|weeks?|months?|years?)\b")

STOP_WORDS = frozenset("""
    the a an and or but in on at to for of with by from as is are was were be
    been being have has had do does did will would could should may might must
    can this that these those it its we our they their
""".split())

COMMON_CAPITALIZED = frozenset("""
    The This That These Those We Our They Their Market Buyer Buyers Customer
    Customers Competitor Competitors Evidence Execution Product Service
    Solution Opportunity Opportunities Incumbents Demand Segment
""".split())

_CAPITALIZED = re.compile(r"^[A-Z][a-z]+")


def _capitalized_words(text: str) -> list[str]:
    return [w for w in text.split() if len(w) > 3 and _CAPITALIZED.match(w)]


def extract_entities(statement: str) -> list[str]:
    """Capitalized words that look like names of competitors or segments, deduplicated."""
    entities: list[str] = []
    for word in _capitalized_words(statement):
        word = word.strip(".,;:!?'\"()")
        if word and word not in COMMON_CAPITALIZED and word not in entities:
            entities.append(word)
    return entities


def meaningful_word_count(text: str) -> int:
    words = [w for w in re.split(r"\W+", text.lower()) if len(w) > 2]
    return sum(1 for w in words if w not in STOP_WORDS)


def is_fluffy(statement: str) -> bool:
    """True when a statement is too vague to test."""
    text = (statement or "").strip()
    if not text:
        return True

    if any(p.search(text) for p in BANNED_PATTERNS):
        return True

    meaningful = meaningful_word_count(text)
    has_measure = bool(MEASURABLE.search(text))
    has_source = any(k in text.lower() for k in SOURCE_TYPE_KEYWORDS)
    has_entity = bool(extract_entities(text))

    if not (has_measure or has_source or has_entity) and meaningful < 5:
        return True
    return len(text) < 50 and meaningful < 4
