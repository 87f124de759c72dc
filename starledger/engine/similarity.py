"""
starledger.engine.similarity — Username Similarity Score
=========================================================

Normalized Levenshtein similarity: ``1 - distance / max(len(a), len(b))``.
Symmetric, in ``[0, 1]``, and ``1.0`` only when both strings are equal.
"""

from __future__ import annotations

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein


def similarity(a: str, b: str) -> float:
    """Score how alike *a* and *b* are (case-sensitive)."""
    return Levenshtein.normalized_similarity(a, b)


def best_match(
    candidates: list[str] | tuple[str, ...],
    target: str,
    score_cutoff: float = 0.0,
) -> tuple[str | None, float]:
    """Return the first highest-scoring candidate for *target* and its score.

    Ties keep the earliest candidate, so the caller's ordering decides.
    Candidates scoring below *score_cutoff* are never returned; the cutoff
    itself counts as a match.  Returns ``(None, 0.0)`` when nothing qualifies.
    """
    found = process.extractOne(
        target,
        candidates,
        scorer=Levenshtein.normalized_similarity,
        score_cutoff=score_cutoff,
    )
    if found is None:
        return None, 0.0
    match, score, _ = found
    return match, score
