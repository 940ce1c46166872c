"""Unit tests for the TF-IDF vector index."""

import math

import pytest

from mcp_catalog.servers.discovery.tfidf import TfidfIndex
from mcp_catalog.servers.discovery.types import CorpusEntry


@pytest.fixture
def index():
    """A three document index."""
    return TfidfIndex.build(
        [
            CorpusEntry("alpha", "create employee record"),
            CorpusEntry("beta", "list employees"),
            CorpusEntry("gamma", "delete candidate"),
        ]
    )


class TestTfidfBuild:
    """Tests for building the index."""

    def test_vocabulary_covers_all_terms(self, index):
        assert set(index.vocabulary.term_ids) == {
            "create",
            "employee",
            "record",
            "list",
            "employees",
            "delete",
            "candidate",
        }

    def test_smoothed_idf(self, index):
        term_id = index.vocabulary.get("employee")
        assert index.idf[term_id] == pytest.approx(math.log(4 / 2) + 1)

    def test_idf_is_positive(self, index):
        assert all(weight > 0 for weight in index.idf)

    def test_one_vector_per_document_in_order(self, index):
        assert [vector.doc_id for vector in index.vectors] == ["alpha", "beta", "gamma"]
        assert len(index) == 3

    def test_vector_norms(self, index):
        for vector in index.vectors:
            expected = math.sqrt(sum(w * w for w in vector.weights.values()))
            assert vector.norm == pytest.approx(expected)

    def test_document_of_stop_words_gets_unit_norm(self):
        index = TfidfIndex.build([CorpusEntry("empty", "the of and")])
        assert index.vectors[0].norm == 1.0
        assert len(index.vectors[0].weights) == 0


class TestTfidfSearch:
    """Tests for cosine similarity search."""

    def test_exact_term_matches_one_document(self, index):
        results = index.search("employee")
        assert [result.doc_id for result in results] == ["alpha"]

    def test_plural_is_a_different_term(self, index):
        results = index.search("employees")
        assert [result.doc_id for result in results] == ["beta"]

    def test_scores_within_unit_interval(self, index):
        for query in ("create employee record", "list employees", "candidate"):
            for result in index.search(query):
                assert 0.0 < result.score <= 1.0

    def test_identical_document_scores_one(self, index):
        results = index.search("list employees")
        assert results[0].doc_id == "beta"
        assert results[0].score == pytest.approx(1.0)

    def test_sorted_descending(self, index):
        results = index.search("create employee list employees")
        scores = [result.score for result in results]
        assert scores == sorted(scores, reverse=True)

    def test_case_insensitive(self, index):
        assert index.search("EMPLOYEE") == index.search("employee")

    def test_empty_query(self, index):
        assert index.search("") == []

    def test_stop_word_query(self, index):
        assert index.search("the and of") == []

    def test_unknown_terms_ignored(self, index):
        assert index.search("payroll") == []
        assert [r.doc_id for r in index.search("payroll candidate")] == ["gamma"]

    def test_empty_corpus(self):
        assert TfidfIndex.build([]).search("anything") == []

    def test_k_limits_results(self, index):
        assert len(index.search("create list delete", k=2)) == 2
        assert index.search("create list delete", k=0) == []

    def test_ties_keep_corpus_order(self):
        index = TfidfIndex.build(
            [
                CorpusEntry("first", "shared"),
                CorpusEntry("second", "shared"),
            ]
        )
        assert [r.doc_id for r in index.search("shared")] == ["first", "second"]

    def test_deterministic(self):
        corpus = [
            CorpusEntry("alpha", "create employee record"),
            CorpusEntry("beta", "list employees"),
        ]
        first = TfidfIndex.build(corpus).search("employee list")
        second = TfidfIndex.build(corpus).search("employee list")
        assert first == second

    def test_repeated_term_outranks_mixed_document(self):
        index = TfidfIndex.build(
            [
                CorpusEntry("doc1", "alpha beta"),
                CorpusEntry("doc2", "alpha alpha"),
                CorpusEntry("doc3", "beta gamma"),
            ]
        )
        results = index.search("alpha")
        assert [r.doc_id for r in results] == ["doc2", "doc1"]
        assert results[0].score == pytest.approx(1.0)
        assert 0.0 < results[1].score < results[0].score
