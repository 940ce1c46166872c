"""Tool discovery module: hybrid TF-IDF and BM25 tool search."""

from .bm25 import KeywordIndex, RelevanceEngine
from .index import ToolDiscoveryIndex, build_corpus_entry, build_search_index
from .scoring import clamp_score, fuse_scores
from .tfidf import TfidfIndex
from .tokenizer import Vocabulary, tokenize
from .types import CorpusEntry, ScoredDocument, SearchResult

__all__ = [
    "CorpusEntry",
    "KeywordIndex",
    "RelevanceEngine",
    "ScoredDocument",
    "SearchResult",
    "TfidfIndex",
    "ToolDiscoveryIndex",
    "Vocabulary",
    "build_corpus_entry",
    "build_search_index",
    "clamp_score",
    "fuse_scores",
    "tokenize",
]
