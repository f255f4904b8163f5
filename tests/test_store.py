"""
Tests for the in-memory document store

Tests insertion order, deletion, and term statistics.
"""

import math
import threading
from datetime import datetime, timezone

import numpy as np
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from search.models import Document, FileType
from search.store import DocumentStore, DuplicateDocumentError, TermStatistics


def make_document(doc_id, terms=("apples",), text="apples"):
    """Build a minimal document with a term-frequency table."""
    return Document(
        id=doc_id,
        filename=f"{doc_id}.txt",
        file_type=FileType.TXT,
        uploaded_at=datetime.now(timezone.utc),
        size_bytes=len(text),
        extracted_text=text,
        keywords=list(terms),
        vector=np.zeros(100),
        term_frequency={t: 1 / len(terms) for t in terms},
    )


class TestDocumentStore:
    """Tests for DocumentStore collection operations."""

    @pytest.fixture
    def store(self):
        return DocumentStore()

    def test_insert_and_get(self, store):
        """Test a stored document can be retrieved."""
        doc = make_document("a")
        store.insert(doc)
        assert store.get("a") is doc
        assert "a" in store
        assert len(store) == 1

    def test_get_missing(self, store):
        """Test missing ids return None."""
        assert store.get("nope") is None

    def test_insertion_order(self, store):
        """Test all() returns documents in insertion order."""
        for doc_id in ["c", "a", "b"]:
            store.insert(make_document(doc_id))
        assert [d.id for d in store.all()] == ["c", "a", "b"]

    def test_all_is_snapshot(self, store):
        """Test later inserts do not change an earlier snapshot."""
        store.insert(make_document("a"))
        snapshot = store.all()
        store.insert(make_document("b"))
        assert [d.id for d in snapshot] == ["a"]

    def test_duplicate_id(self, store):
        """Test inserting an existing id raises."""
        store.insert(make_document("a"))
        with pytest.raises(DuplicateDocumentError) as exc:
            store.insert(make_document("a"))
        assert exc.value.document_id == "a"
        assert len(store) == 1

    def test_delete(self, store):
        """Test deleting a document."""
        store.insert(make_document("a"))
        assert store.delete("a") is True
        assert store.get("a") is None
        assert store.delete("a") is False

    def test_clear(self, store):
        """Test clearing the store."""
        store.insert(make_document("a"))
        store.insert(make_document("b"))
        assert store.clear() == 2
        assert len(store) == 0
        assert store.statistics()["total_documents"] == 0

    def test_concurrent_inserts(self, store):
        """Test inserts from several threads are all stored."""
        def worker(start):
            for i in range(start, start + 50):
                store.insert(make_document(f"doc-{i}"))

        threads = [threading.Thread(target=worker, args=(n * 50,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 200
        assert store.term_statistics.total_documents == 200


class TestTermStatistics:
    """Tests for document frequency and IDF bookkeeping."""

    @pytest.fixture
    def store(self):
        store = DocumentStore()
        store.insert(make_document("a", ("apples", "bananas")))
        store.insert(make_document("b", ("apples", "revenue")))
        return store

    def test_insert_counts_each_term_once(self, store):
        """Test document frequency counts documents, not occurrences."""
        assert store.document_frequency("apples") == 2
        assert store.document_frequency("bananas") == 1
        assert store.document_frequency("unknown") == 0

    def test_total_documents(self, store):
        """Test total documents tracks the collection size."""
        stats = store.term_statistics
        assert stats.total_documents == 2
        assert stats.vocabulary == {"apples", "bananas", "revenue"}

    def test_delete_keeps_frequencies(self, store):
        """Test delete decrements the total but not the frequencies."""
        store.delete("a")
        assert store.term_statistics.total_documents == 1
        assert store.document_frequency("bananas") == 1

    def test_refresh_recomputes(self, store):
        """Test refresh rebuilds frequencies from current documents."""
        store.delete("a")
        stats = store.refresh_statistics()
        assert stats.total_documents == 1
        assert store.document_frequency("bananas") == 0
        assert stats.vocabulary == {"apples", "revenue"}

    def test_idf(self, store):
        """Test idf = ln(total / document frequency)."""
        store.refresh_statistics()
        assert store.idf("apples") == pytest.approx(0.0)
        assert store.idf("bananas") == pytest.approx(math.log(2))

    def test_idf_before_refresh(self, store):
        """Test IDF is only available after a refresh."""
        assert store.idf("apples") is None

    def test_term_statistics_is_copy(self, store):
        """Test callers cannot mutate the live statistics."""
        stats = store.term_statistics
        stats.document_frequency["apples"] = 99
        assert store.document_frequency("apples") == 2

    def test_statistics_summary(self, store):
        """Test the summary dictionary."""
        store.refresh_statistics()
        assert store.statistics() == {
            "total_documents": 2,
            "vocabulary_size": 3,
            "terms_with_idf": 3,
        }

    def test_record(self):
        """Test record counts distinct terms."""
        stats = TermStatistics()
        stats.record(["a", "a", "b"])
        assert stats.document_frequency == {"a": 1, "b": 1}
