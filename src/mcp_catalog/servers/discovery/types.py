"""Data types for tool discovery."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class CorpusEntry:
    """Searchable text derived from one catalog tool."""

    name: str
    text: str


@dataclass(frozen=True)
class TermVector:
    """Sparse TF-IDF vector (term id -> weight) with its L2 norm."""

    doc_id: str
    weights: MappingProxyType
    norm: float


@dataclass(frozen=True)
class ScoredDocument:
    """A document id with a relevance score in [0, 1]."""

    doc_id: str
    score: float


@dataclass(frozen=True)
class SearchResult:
    """A tool returned by a search, with its fused relevance score."""

    name: str
    description: str
    parameters: dict[str, Any]
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "score": self.score,
        }
