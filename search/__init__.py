"""
Local Hybrid Document Search

Provides:
- Hashing-based local embeddings (no model download, no API calls)
- Concept expansion through a small curated table
- Hybrid ranking of vector similarity and keyword evidence
- In-memory document store with term statistics

Usage:
    from search import SearchPipeline, UploadRequest

    pipeline = SearchPipeline()
    pipeline.upload(UploadRequest("notes.txt", "txt", "I love fresh apples"))

    for result in pipeline.search("fruit"):
        print(f"{result.score:.2f} - {result.filename}")
"""

from .concepts import ConceptExpander, StaticConceptExpander, DEFAULT_CONCEPTS
from .config import SearchConfig, load_search_config
from .embeddings import VectorEncoder, EncodedText, cosine_similarity
from .extraction import ExtractionResult, PlainTextExtractor, TextExtractor
from .hybrid_search import HybridSearcher
from .models import (
    Document, DocumentMetadata, FileType, MatchedSection, SearchResult,
    SearchType, UploadRequest, UploadResult,
)
from .pipeline import SearchPipeline
from .preprocessing import TextPreprocessor
from .store import DocumentStore, DocumentStoreError, DuplicateDocumentError, TermStatistics

__all__ = [
    'ConceptExpander',
    'StaticConceptExpander',
    'DEFAULT_CONCEPTS',
    'SearchConfig',
    'load_search_config',
    'VectorEncoder',
    'EncodedText',
    'cosine_similarity',
    'ExtractionResult',
    'PlainTextExtractor',
    'TextExtractor',
    'HybridSearcher',
    'Document',
    'DocumentMetadata',
    'FileType',
    'MatchedSection',
    'SearchResult',
    'SearchType',
    'UploadRequest',
    'UploadResult',
    'SearchPipeline',
    'TextPreprocessor',
    'DocumentStore',
    'DocumentStoreError',
    'DuplicateDocumentError',
    'TermStatistics',
]
