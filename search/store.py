"""
In-memory document store with global term statistics.

One DocumentStore is created per pipeline (session) and owns every
Document inserted into it. Nothing survives a process restart.

Thread safety: a single re-entrant lock guards the collection and the
statistics. Searches iterate a snapshot taken by all(), so inserts and
deletes never disturb an in-flight search.
"""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .models import Document

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Base exception for store operations."""


class DuplicateDocumentError(DocumentStoreError):
    """A document with the same id is already stored."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document already exists: {document_id}")


@dataclass
class TermStatistics:
    """Document frequencies and IDF over the stored documents."""
    document_frequency: Dict[str, int] = field(default_factory=dict)
    vocabulary: Set[str] = field(default_factory=set)
    total_documents: int = 0
    idf: Dict[str, float] = field(default_factory=dict)

    def record(self, terms) -> None:
        """Count each distinct term once for a newly inserted document."""
        for term in set(terms):
            self.document_frequency[term] = self.document_frequency.get(term, 0) + 1
            self.vocabulary.add(term)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_documents': self.total_documents,
            'vocabulary_size': len(self.vocabulary),
            'terms_with_idf': len(self.idf),
        }


class DocumentStore:
    """Owns indexed documents in insertion order."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._stats = TermStatistics()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        with self._lock:
            return document_id in self._documents

    def insert(self, document: Document) -> Document:
        """
        Store a document and count its terms.

        Raises:
            DuplicateDocumentError: if the id is already present
        """
        with self._lock:
            if document.id in self._documents:
                raise DuplicateDocumentError(document.id)

            self._documents[document.id] = document
            self._stats.total_documents += 1
            self._stats.record(document.term_frequency.keys())

            logger.debug(
                f"Stored document {document.id} ({document.filename}); "
                f"{len(self._documents)} in collection"
            )
            return document

    def get(self, document_id: str) -> Optional[Document]:
        with self._lock:
            return self._documents.get(document_id)

    def delete(self, document_id: str) -> bool:
        """
        Remove a document.

        Document frequencies are left as they are until the next
        refresh_statistics().

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            if document_id not in self._documents:
                return False
            del self._documents[document_id]
            self._stats.total_documents -= 1
            return True

    def all(self) -> List[Document]:
        """Snapshot of all documents in insertion order."""
        with self._lock:
            return list(self._documents.values())

    def clear(self) -> int:
        """
        Drop every document and reset statistics.

        Returns:
            Number of documents removed
        """
        with self._lock:
            count = len(self._documents)
            self._documents.clear()
            self._stats = TermStatistics()
            return count

    def refresh_statistics(self) -> TermStatistics:
        """
        Recompute document frequencies from the stored documents, then IDF.

        idf = ln(total_documents / document_frequency). The values are kept
        for inspection; scoring does not read them.
        """
        with self._lock:
            stats = TermStatistics(total_documents=len(self._documents))
            for document in self._documents.values():
                stats.record(document.term_frequency.keys())

            for term, df in stats.document_frequency.items():
                stats.idf[term] = math.log(stats.total_documents / df)

            self._stats = stats

            logger.info(
                f"Refreshed statistics: {len(stats.vocabulary)} terms "
                f"over {stats.total_documents} documents"
            )
            return stats

    @property
    def term_statistics(self) -> TermStatistics:
        """Copy of the current statistics."""
        with self._lock:
            return TermStatistics(
                document_frequency=dict(self._stats.document_frequency),
                vocabulary=set(self._stats.vocabulary),
                total_documents=self._stats.total_documents,
                idf=dict(self._stats.idf),
            )

    def document_frequency(self, term: str) -> int:
        with self._lock:
            return self._stats.document_frequency.get(term, 0)

    def idf(self, term: str) -> Optional[float]:
        with self._lock:
            return self._stats.idf.get(term)

    def statistics(self) -> Dict[str, Any]:
        with self._lock:
            return self._stats.to_dict()
