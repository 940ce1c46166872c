"""Relevance scoring for tool discovery: clamping and hybrid fusion."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from .types import ScoredDocument


def clamp_score(score: float) -> float:
    """Clamp a raw relevance score into [0, 1].

    Negative and NaN scores become 0; anything above 1 is capped at 1.
    """
    if math.isnan(score) or score <= 0.0:
        return 0.0
    return min(1.0, score)


def fuse_scores(
    vector_scores: Mapping[str, float],
    keyword_scores: Mapping[str, float],
    order: Iterable[str],
    alpha: float = 0.2,
    min_score: float = 0.0,
    limit: int | None = None,
) -> list[ScoredDocument]:
    """Combine TF-IDF and keyword scores into one ranking.

    ``fused = alpha * keyword + (1 - alpha) * vector``. A document missing
    from one map scores 0 for that half. Keyword scores are clamped into
    [0, 1] first.

    Args:
        vector_scores: Cosine similarities keyed by document id
        keyword_scores: Raw keyword engine scores keyed by document id
        order: Every candidate document id in catalog order; ties keep
            this order and ids outside it are ignored
        alpha: Weight of the keyword signal in [0, 1]
        min_score: Results scoring below this are dropped
        limit: Maximum number of results (None for all)

    Returns:
        Fused results sorted by descending score.

    Raises:
        ValueError: If alpha is outside [0, 1]
    """
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must be between 0 and 1, got {alpha}")

    fused: list[ScoredDocument] = []
    for doc_id in order:
        vector_score = vector_scores.get(doc_id)
        keyword_score = keyword_scores.get(doc_id)
        if vector_score is None and keyword_score is None:
            continue
        score = alpha * clamp_score(keyword_score or 0.0) + (1 - alpha) * clamp_score(
            vector_score or 0.0
        )
        score = min(1.0, max(0.0, score))
        if score > 0.0 and score >= min_score:
            fused.append(ScoredDocument(doc_id=doc_id, score=score))

    # list.sort is stable, so equal scores stay in catalog order
    fused.sort(key=lambda result: result.score, reverse=True)
    if limit is not None:
        fused = fused[: max(0, limit)]
    return fused
