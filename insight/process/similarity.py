"""Text fingerprints and word-token Jaccard similarity for opportunities."""

from __future__ import annotations

import re

import numpy as np

from insight.extract import get_summary, get_title

_PUNCT = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lower-case, strip punctuation, collapse whitespace."""
    text = _PUNCT.sub("", text.lower())
    return _SPACES.sub(" ", text).strip()


def fingerprint(record: dict, summary_chars: int = 160) -> str:
    """Normalized title followed by the head of the normalized summary."""
    title = normalize_text(get_title(record) or "")
    summary = normalize_text(get_summary(record) or "")[:summary_chars]
    return f"{title} {summary}".strip()


def tokenize(text: str, min_length: int = 3) -> set[str]:
    return {t for t in text.lower().split() if len(t) >= min_length}


def jaccard_similarity(a: str, b: str, min_length: int = 3) -> float:
    """Word-token Jaccard similarity of two fingerprints.

    An empty fingerprint never matches. Two fingerprints made only of short
    tokens have empty token sets and count as identical.
    """
    if not a or not b:
        return 0.0

    tokens_a = tokenize(a, min_length)
    tokens_b = tokenize(b, min_length)
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0

    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def similarity_matrix(fingerprints: list[str], min_length: int = 3) -> np.ndarray:
    """Pairwise Jaccard similarities, shape (N, N), ones on the diagonal."""
    n = len(fingerprints)
    matrix = np.eye(n)
    for i in range(n):
        for j in range(i + 1, n):
            sim = jaccard_similarity(fingerprints[i], fingerprints[j], min_length)
            matrix[i, j] = sim
            matrix[j, i] = sim
    return matrix
