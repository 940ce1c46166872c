"""Text normalization and vocabulary building for tool search."""

from __future__ import annotations

import re
from collections.abc import Iterable
from types import MappingProxyType

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "the",
        "and",
        "or",
        "but",
        "if",
        "then",
        "else",
        "for",
        "of",
        "in",
        "on",
        "to",
        "from",
        "by",
        "with",
        "as",
        "at",
        "is",
        "are",
        "was",
        "were",
        "be",
        "been",
        "it",
        "this",
        "that",
        "these",
        "those",
        "not",
        "no",
        "can",
        "could",
        "should",
        "would",
        "may",
        "might",
        "do",
        "does",
        "did",
        "have",
        "has",
        "had",
        "you",
        "your",
    }
)

_NON_WORD = re.compile(r"[^a-z0-9_\s]")


def tokenize(text: str) -> list[str]:
    """Split text into lower-case search terms.

    Every character other than ASCII letters, digits, underscore and
    whitespace is replaced by a space before splitting, and stop words are
    dropped. Queries and documents go through the same function.

    Examples:
        >>> tokenize("List the Employees, please!")
        ['list', 'employees', 'please']
    """
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [token for token in cleaned.split() if token not in STOP_WORDS]


def stem(token: str) -> str:
    """Strip a common English suffix so inflected forms share a term.

    This is a light suffix stripper, not a full Porter stemmer. A trailing
    ``e`` is dropped last so that ``employee``, ``employees``, ``create`` and
    ``created`` reduce to ``employe``, ``employe``, ``creat`` and ``creat``.
    Tokens of three characters or fewer and underscored identifiers are
    returned unchanged.
    """
    if "_" in token or len(token) <= 3:
        return token

    if token.endswith("ies") and len(token) >= 5:
        token = token[:-3] + "y"
    elif token.endswith("sses"):
        token = token[:-2]
    elif token.endswith(("xes", "ches", "shes", "zes")):
        token = token[:-2]
    elif token.endswith("s") and not token.endswith(("ss", "us", "is")):
        token = token[:-1]
    elif token.endswith("ing") and len(token) >= 6:
        token = token[:-3]
    elif token.endswith("ed") and not token.endswith("eed") and len(token) >= 5:
        token = token[:-2]

    if token.endswith("e") and len(token) >= 4:
        token = token[:-1]
    return token


def tokenize_for_keywords(text: str) -> list[str]:
    """Tokenize and stem text for the BM25 keyword engine."""
    return [stem(token) for token in tokenize(text)]


class Vocabulary:
    """Frozen mapping of term to integer id.

    Ids are assigned in first-seen order while walking the documents in the
    order given, so the same corpus always yields the same ids.
    """

    def __init__(self, term_ids: dict[str, int]) -> None:
        self._term_ids = MappingProxyType(dict(term_ids))

    @classmethod
    def build(cls, documents: Iterable[Iterable[str]]) -> Vocabulary:
        """Assign ids to every term of the tokenized documents."""
        term_ids: dict[str, int] = {}
        for tokens in documents:
            for token in tokens:
                if token not in term_ids:
                    term_ids[token] = len(term_ids)
        return cls(term_ids)

    @property
    def term_ids(self) -> MappingProxyType:
        return self._term_ids

    def get(self, term: str) -> int | None:
        return self._term_ids.get(term)

    def __contains__(self, term: object) -> bool:
        return term in self._term_ids

    def __len__(self) -> int:
        return len(self._term_ids)
