"""Sparse TF-IDF vector index with cosine similarity search."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .tokenizer import Vocabulary, tokenize
from .types import CorpusEntry, ScoredDocument, TermVector

logger = logging.getLogger("mcp-catalog.discovery.tfidf")


def _weigh(
    counts: Mapping[int, int], length: int, idf: tuple[float, ...]
) -> tuple[dict[int, float], float]:
    """Return the tf * idf weights of a term-count map and their L2 norm."""
    weights: dict[int, float] = {}
    norm_sq = 0.0
    if length == 0:
        return weights, 0.0
    for term_id, count in counts.items():
        weight = (count / length) * idf[term_id]
        if weight > 0:
            weights[term_id] = weight
            norm_sq += weight * weight
    return weights, math.sqrt(norm_sq)


class TfidfIndex:
    """Immutable TF-IDF index over a fixed corpus.

    Build with :meth:`build`; the vocabulary, IDF table and document vectors
    never change afterwards, so one index can serve concurrent searches.

    IDF uses the smoothed form ``ln((N + 1) / (df + 1)) + 1``, which keeps
    every weight strictly positive.
    """

    def __init__(
        self,
        vocabulary: Vocabulary,
        idf: tuple[float, ...],
        vectors: tuple[TermVector, ...],
    ) -> None:
        self._vocabulary = vocabulary
        self._idf = idf
        self._vectors = vectors

    @classmethod
    def build(cls, corpus: Iterable[CorpusEntry]) -> TfidfIndex:
        """Build an index from corpus entries, in the order given.

        Args:
            corpus: Entries whose ``name`` is returned as the document id

        Returns:
            The built index
        """
        entries = list(corpus)
        documents = [tokenize(entry.text) for entry in entries]
        vocabulary = Vocabulary.build(documents)

        doc_freq: Counter[int] = Counter()
        for tokens in documents:
            doc_freq.update({vocabulary.term_ids[token] for token in tokens})

        n_docs = len(entries)
        idf = tuple(
            math.log((n_docs + 1) / (doc_freq[term_id] + 1)) + 1
            for term_id in range(len(vocabulary))
        )

        vectors = []
        for entry, tokens in zip(entries, documents):
            counts = Counter(vocabulary.term_ids[token] for token in tokens)
            weights, norm = _weigh(counts, len(tokens), idf)
            vectors.append(
                TermVector(
                    doc_id=entry.name,
                    weights=MappingProxyType(weights),
                    norm=norm or 1.0,
                )
            )

        logger.debug(
            f"Built TF-IDF index: {n_docs} documents, {len(vocabulary)} terms"
        )
        return cls(vocabulary, idf, tuple(vectors))

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    @property
    def idf(self) -> tuple[float, ...]:
        return self._idf

    @property
    def vectors(self) -> tuple[TermVector, ...]:
        return self._vectors

    def __len__(self) -> int:
        return len(self._vectors)

    def search(self, query: str, k: int | None = None) -> list[ScoredDocument]:
        """Rank documents by cosine similarity to the query.

        Terms not seen at build time are ignored. Documents with zero
        similarity are omitted; equal scores keep corpus order.

        Args:
            query: Free text query
            k: Optional maximum number of results

        Returns:
            Matches sorted by descending score, each score in [0, 1]
        """
        tokens = tokenize(query)
        if not tokens or not self._vectors:
            return []

        counts: Counter[int] = Counter()
        for token in tokens:
            term_id = self._vocabulary.get(token)
            if term_id is not None:
                counts[term_id] += 1
        if not counts:
            return []

        query_weights, query_norm = _weigh(counts, len(tokens), self._idf)
        query_norm = query_norm or 1.0

        results: list[ScoredDocument] = []
        for vector in self._vectors:
            if len(query_weights) <= len(vector.weights):
                small, big = query_weights, vector.weights
            else:
                small, big = vector.weights, query_weights
            dot = 0.0
            for term_id, weight in small.items():
                other = big.get(term_id)
                if other is not None:
                    dot += weight * other
            similarity = dot / (query_norm * vector.norm)
            if similarity > 0:
                results.append(
                    ScoredDocument(
                        doc_id=vector.doc_id, score=min(1.0, max(0.0, similarity))
                    )
                )

        results.sort(key=lambda result: result.score, reverse=True)
        return results if k is None else results[: max(0, k)]
