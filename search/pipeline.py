"""
Search Pipeline

Wires preprocessing, concept expansion, vector encoding, the document
store and the hybrid searcher into the two paths callers use:

- Ingestion: UploadRequest -> keywords + vector -> DocumentStore
- Query: query string -> vector -> HybridSearcher over a store snapshot

Each pipeline owns one DocumentStore. Create one pipeline per session or
tenant; there is no shared global state.

Usage:
    from search.pipeline import SearchPipeline
    from search.models import UploadRequest

    pipeline = SearchPipeline()
    pipeline.upload(UploadRequest("notes.txt", "txt", "I love fresh apples"))
    results = pipeline.search("fruit")
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .concepts import ConceptExpander, StaticConceptExpander
from .config import SearchConfig
from .embeddings import VectorEncoder
from .extraction import PlainTextExtractor, TextExtractor, placeholder_text
from .hybrid_search import HybridSearcher
from .models import (
    Document, DocumentMetadata, FileType, SearchResult,
    UploadRequest, UploadResult,
)
from .preprocessing import TextPreprocessor
from .store import DocumentStore, DuplicateDocumentError

logger = logging.getLogger(__name__)


class SearchPipeline:
    """Ingestion and query orchestration over one DocumentStore."""

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        store: Optional[DocumentStore] = None,
        expander: Optional[ConceptExpander] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Search configuration (defaults if None)
            store: Document store to own (a new empty store if None)
            expander: Concept expansion strategy (static table if None)
        """
        self.config = config or SearchConfig()
        self.store = store if store is not None else DocumentStore()
        self.expander = expander or StaticConceptExpander()
        self.preprocessor = TextPreprocessor(
            min_token_length=self.config.min_token_length,
            min_keyword_length=self.config.min_keyword_length,
        )
        self.encoder = VectorEncoder(self.config, self.expander, self.preprocessor)
        self.searcher = HybridSearcher(self.config, self.encoder)

    # =========================================================================
    # Ingestion
    # =========================================================================

    def upload(self, request: UploadRequest, refresh: Optional[bool] = None) -> UploadResult:
        """
        Index and store one document.

        Unsupported file types and duplicate ids are rejected without
        storing anything.

        Args:
            request: Filename, declared type, extracted text and metadata
            refresh: Refresh term statistics afterwards
                     (config.refresh_on_upload if None)
        """
        file_type = FileType.parse(request.file_type)
        if file_type is None:
            logger.warning(f"Rejected upload {request.filename!r}: unsupported type {request.file_type!r}")
            return UploadResult(success=False, error=f"Unsupported file type: {request.file_type}")

        if not request.filename:
            return UploadResult(success=False, error="Filename is required")

        document = self._build_document(request, file_type)

        try:
            self.store.insert(document)
        except DuplicateDocumentError as e:
            logger.warning(str(e))
            return UploadResult(success=False, error=str(e))

        if refresh is None:
            refresh = self.config.refresh_on_upload
        if refresh:
            self.store.refresh_statistics()

        logger.info(
            f"Indexed {document.filename} ({file_type.value}, {document.size_bytes} bytes, "
            f"{len(document.keywords)} keywords); {len(self.store)} documents in collection"
        )
        return UploadResult(success=True, document=document)

    def upload_batch(self, requests: Iterable[UploadRequest]) -> List[UploadResult]:
        """Upload several documents and refresh statistics once at the end."""
        results = [self.upload(request, refresh=False) for request in requests]
        if any(r.success for r in results):
            self.store.refresh_statistics()
        return results

    def upload_file(
        self,
        filename: str,
        data: bytes,
        extractor: Optional[TextExtractor] = None,
        metadata: Optional[DocumentMetadata] = None,
        document_id: Optional[str] = None,
    ) -> UploadResult:
        """
        Extract and upload raw file content.

        A failed extraction still stores the document with a diagnostic
        placeholder text; it is listed but never matches a search.
        """
        file_type = FileType.from_filename(filename)
        if file_type is None:
            logger.warning(f"Rejected upload {filename!r}: unsupported extension")
            return UploadResult(success=False, error="Unsupported file type")

        extractor = extractor or PlainTextExtractor()
        extraction = extractor.extract(data, file_type)

        merged = extraction.metadata or DocumentMetadata()
        if metadata is not None:
            merged = DocumentMetadata(
                title=metadata.title or merged.title,
                author=metadata.author or merged.author,
                pages=metadata.pages if metadata.pages is not None else merged.pages,
            )
        if merged.title is None:
            merged.title = filename.rsplit('.', 1)[0]

        request = UploadRequest(
            filename=filename,
            file_type=file_type,
            metadata=merged,
            document_id=document_id,
            size_bytes=len(data),
        )

        if extraction.success:
            request.extracted_text = extraction.text or ''
            return self.upload(request)

        logger.warning(f"Extraction failed for {filename}: {extraction.error}")
        request.extracted_text = placeholder_text(filename, file_type, len(data), extraction.error)
        return self._store_unsearchable(request, file_type, extraction.error or 'Unknown error')

    def _build_document(self, request: UploadRequest, file_type: FileType) -> Document:
        text = request.extracted_text or ''
        encoded = self.encoder.encode_text(text)
        size = request.size_bytes if request.size_bytes is not None else len(text.encode('utf-8'))

        return Document(
            id=request.document_id or uuid.uuid4().hex,
            filename=request.filename,
            file_type=file_type,
            uploaded_at=datetime.now(timezone.utc),
            size_bytes=size,
            extracted_text=text,
            keywords=self.preprocessor.extract_keywords(text, self.config.max_keywords),
            vector=encoded.vector,
            term_frequency=encoded.term_frequency,
            metadata=request.metadata,
        )

    def _store_unsearchable(self, request: UploadRequest, file_type: FileType, error: str) -> UploadResult:
        document = Document(
            id=request.document_id or uuid.uuid4().hex,
            filename=request.filename,
            file_type=file_type,
            uploaded_at=datetime.now(timezone.utc),
            size_bytes=request.size_bytes or 0,
            extracted_text=request.extracted_text,
            keywords=[],
            vector=self.encoder.zero_vector(),
            term_frequency={},
            metadata=request.metadata,
            extraction_error=error,
        )
        try:
            self.store.insert(document)
        except DuplicateDocumentError as e:
            return UploadResult(success=False, error=str(e))
        return UploadResult(success=True, document=document)

    # =========================================================================
    # Query
    # =========================================================================

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """
        Rank stored documents for a query.

        An empty or whitespace-only query returns an empty list.
        """
        if not query or not query.strip():
            return []

        query_vector = self.encoder.embed(query)
        return self.searcher.search(query, self.store.all(), query_vector=query_vector, limit=limit)

    def explain_query(self, query: str) -> Dict[str, Any]:
        """Tokens, expanded terms and triggered concepts for a query."""
        tokens = self.preprocessor.tokenize(query or '')
        expanded = self.expander.expand(tokens)
        return {
            'tokens': tokens,
            'expanded': self.expander.unique(expanded),
            'concepts': self.expander.explain(tokens),
        }

    # =========================================================================
    # Collection management
    # =========================================================================

    def get_document(self, document_id: str) -> Optional[Document]:
        return self.store.get(document_id)

    def list_documents(self) -> List[Document]:
        return self.store.all()

    def delete_document(self, document_id: str) -> bool:
        deleted = self.store.delete(document_id)
        if deleted:
            logger.info(f"Deleted document {document_id}; {len(self.store)} remaining")
        return deleted

    def refresh_statistics(self) -> Dict[str, Any]:
        return self.store.refresh_statistics().to_dict()

    def statistics(self) -> Dict[str, Any]:
        stats = self.store.statistics()
        stats['documents'] = len(self.store)
        stats['encoder'] = self.encoder.info()
        return stats


# =============================================================================
# CLI
# =============================================================================

if __name__ == '__main__':
    import argparse
    import json
    from pathlib import Path

    from .config import load_search_config

    parser = argparse.ArgumentParser(description="Search local text documents")
    parser.add_argument('query', help="Search query")
    parser.add_argument('paths', nargs='+', help="Text files or directories to index")
    parser.add_argument('--config', '-c', help="Search config YAML")
    parser.add_argument('--limit', '-l', type=int, default=None, help="Max results")
    parser.add_argument('--json', action='store_true', help="Output as JSON")
    parser.add_argument('--explain', action='store_true', help="Show query expansion")

    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)

    config = load_search_config(args.config) if args.config else SearchConfig()
    pipeline = SearchPipeline(config)

    files: List[Path] = []
    for raw in args.paths:
        path = Path(raw)
        files.extend(sorted(path.rglob('*.txt')) if path.is_dir() else [path])

    for path in files:
        pipeline.upload_file(path.name, path.read_bytes())

    results = pipeline.search(args.query, limit=args.limit)

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        if args.explain:
            explanation = pipeline.explain_query(args.query)
            print(f"Tokens: {', '.join(explanation['tokens'])}")
            for concept, terms in explanation['concepts'].items():
                print(f"Concept '{concept}': {', '.join(terms)}")

        print(f"\nFound {len(results)} results for '{args.query}' in {len(files)} files:\n")
        for i, result in enumerate(results, 1):
            print(f"{i}. [{result.score:.3f}] {result.filename} ({result.search_type.value})")
            for section in result.matched_sections:
                print(f"   ... {section.text[:100]}")
            print()
