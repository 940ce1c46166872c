"""Hybrid tool discovery index."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from types import MappingProxyType

from mcp_catalog.catalog import ToolCatalog, ToolDescriptor
from mcp_catalog.config import DiscoveryConfig
from mcp_catalog.utils.patterns import matches_filter

from .bm25 import KeywordIndex, RelevanceEngine
from .scoring import fuse_scores
from .tfidf import TfidfIndex
from .types import CorpusEntry, SearchResult

logger = logging.getLogger("mcp-catalog.discovery")

ACTION_TYPES: frozenset[str] = frozenset(
    {"create", "update", "delete", "get", "list", "search"}
)

# Repeating the name boosts exact and near matches on it
NAME_BOOST = 3


def build_corpus_entry(descriptor: ToolDescriptor) -> CorpusEntry:
    """Derive the searchable text of one tool.

    The text holds the name (repeated), its category (first ``_`` segment),
    any action verbs among the name segments, the description and the raw
    name segments.

    Examples:
        >>> build_corpus_entry(
        ...     ToolDescriptor("hris_list_employees", "List employees")
        ... ).text
        'hris_list_employees hris_list_employees hris_list_employees hris list List employees hris list employees'
    """
    parts = descriptor.name.split("_")
    category = parts[0]
    actions = [part for part in parts if part in ACTION_TYPES]
    text = " ".join(
        [
            *([descriptor.name] * NAME_BOOST),
            category,
            *actions,
            descriptor.description,
            *parts,
        ]
    )
    return CorpusEntry(name=descriptor.name, text=text)


class ToolDiscoveryIndex:
    """Immutable hybrid (TF-IDF + BM25) search index for one catalog snapshot.

    Create it with :func:`build_search_index` or :meth:`build`. Rebuilding is
    the only way to pick up catalog changes.
    """

    def __init__(
        self,
        descriptors: Iterable[ToolDescriptor],
        vector_index: TfidfIndex,
        keyword_engine: RelevanceEngine,
        alpha: float = 0.2,
    ) -> None:
        if not 0.0 <= alpha <= 1.0:
            raise ValueError(f"alpha must be between 0 and 1, got {alpha}")
        self._descriptors = MappingProxyType({d.name: d for d in descriptors})
        self._vector_index = vector_index
        self._keyword_engine = keyword_engine
        self._alpha = alpha

    @classmethod
    def build(
        cls,
        descriptors: Iterable[ToolDescriptor],
        config: DiscoveryConfig | None = None,
        keyword_engine: RelevanceEngine | None = None,
    ) -> ToolDiscoveryIndex:
        """Build the corpus and both indexes from tool descriptors.

        Args:
            descriptors: Tool descriptors in catalog order
            config: Discovery configuration (defaults used if None)
            keyword_engine: Replacement for the default BM25 engine; it must
                score the same corpus

        Returns:
            The built index
        """
        config = config or DiscoveryConfig()
        descriptors = list(descriptors)

        logger.info("Building tool discovery index...")
        corpus = [build_corpus_entry(descriptor) for descriptor in descriptors]
        vector_index = TfidfIndex.build(corpus)
        if keyword_engine is None:
            keyword_engine = KeywordIndex(corpus, k1=config.bm25_k1, b=config.bm25_b)

        logger.info(
            f"Tool discovery index built with {len(descriptors)} tools "
            f"and {len(vector_index.vocabulary)} terms"
        )
        return cls(descriptors, vector_index, keyword_engine, alpha=config.hybrid_alpha)

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def vector_index(self) -> TfidfIndex:
        return self._vector_index

    @property
    def keyword_engine(self) -> RelevanceEngine:
        return self._keyword_engine

    @property
    def tool_names(self) -> list[str]:
        return list(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def get_descriptor(self, name: str) -> ToolDescriptor | None:
        """Get an indexed tool descriptor by name."""
        return self._descriptors.get(name)

    def search(
        self,
        query: str,
        limit: int = 5,
        min_score: float = 0.0,
        filter_patterns: str | Iterable[str] | None = None,
        alpha: float | None = None,
    ) -> list[SearchResult]:
        """Search for tools matching a query.

        Args:
            query: Natural language description of the task
            limit: Maximum results to return
            min_score: Minimum fused score in [0, 1]
            filter_patterns: Optional globs restricting candidate tool names
            alpha: Override of the index's keyword weight

        Returns:
            List of results sorted by relevance, ties in catalog order
        """
        alpha = self._alpha if alpha is None else alpha

        candidates: Iterable[str] = self._descriptors.keys()
        if filter_patterns:
            candidates = [
                name for name in candidates if matches_filter(name, filter_patterns)
            ]

        vector_scores = {
            result.doc_id: result.score for result in self._vector_index.search(query)
        }
        keyword_scores = self._keyword_engine.get_scores(query) if alpha > 0 else {}

        fused = fuse_scores(
            vector_scores,
            keyword_scores,
            order=candidates,
            alpha=alpha,
            min_score=min_score,
            limit=limit,
        )
        logger.debug(
            f"Search {query!r}: {len(vector_scores)} tf-idf hits, "
            f"{len(keyword_scores)} bm25 hits, {len(fused)} returned"
        )

        results = []
        for match in fused:
            descriptor = self._descriptors[match.doc_id]
            results.append(
                SearchResult(
                    name=descriptor.name,
                    description=descriptor.description,
                    parameters=descriptor.parameters,
                    score=match.score,
                )
            )
        return results


def build_search_index(
    catalog: ToolCatalog | Iterable[ToolDescriptor],
    config: DiscoveryConfig | None = None,
) -> ToolDiscoveryIndex:
    """Build the discovery index for a catalog snapshot.

    Args:
        catalog: A tool catalog or plain tool descriptors
        config: Discovery configuration (defaults used if None)

    Returns:
        The built, immutable index
    """
    if isinstance(catalog, ToolCatalog):
        descriptors = catalog.descriptors
    else:
        descriptors = list(catalog)
    return ToolDiscoveryIndex.build(descriptors, config)
