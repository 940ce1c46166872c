"""BM25 keyword relevance engine.

The hybrid search only depends on the :class:`RelevanceEngine` protocol, so
the Okapi BM25 engine here can be swapped for any full-text engine that
returns raw, non-negative scores per document.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from rank_bm25 import BM25Okapi

from .tokenizer import tokenize_for_keywords
from .types import CorpusEntry

logger = logging.getLogger("mcp-catalog.discovery.bm25")


class RelevanceEngine(Protocol):
    """Secondary relevance signal used by the hybrid search."""

    def get_scores(self, query: str) -> dict[str, float]:
        """Return raw scores (unbounded, non-negative) for matching documents."""
        ...


class KeywordIndex:
    """Okapi BM25 index over stemmed corpus tokens.

    Uses Okapi BM25 with:
    - k1=1.5 (term frequency saturation)
    - b=0.75 (document length normalization)
    """

    def __init__(
        self, corpus: Iterable[CorpusEntry], k1: float = 1.5, b: float = 0.75
    ) -> None:
        self.k1 = k1
        self.b = b
        entries = list(corpus)
        self._doc_ids: tuple[str, ...] = tuple(entry.name for entry in entries)
        documents = [tokenize_for_keywords(entry.text) for entry in entries]

        # BM25Okapi divides by the average document length
        self._bm25: BM25Okapi | None = None
        if any(documents):
            self._bm25 = BM25Okapi(documents, k1=k1, b=b)

        logger.debug(f"Built BM25 index: {len(self._doc_ids)} documents")

    def get_scores(self, query: str) -> dict[str, float]:
        """Get BM25 scores for documents sharing at least one query term."""
        if self._bm25 is None:
            return {}

        query_tokens = tokenize_for_keywords(query)
        if not query_tokens:
            return {}

        scores = self._bm25.get_scores(query_tokens)
        return {
            doc_id: float(score)
            for doc_id, score in zip(self._doc_ids, scores)
            if score > 0
        }

    def __len__(self) -> int:
        return len(self._doc_ids)
