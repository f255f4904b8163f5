"""
Data models for the document search engine.

Documents are created by the pipeline at upload time and owned by the
DocumentStore afterwards. Search results reference documents by id.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


class FileType(Enum):
    """Supported upload formats."""
    PDF = "pdf"
    DOCX = "docx"
    CSV = "csv"
    TXT = "txt"
    XLSX = "xlsx"
    PPTX = "pptx"

    @classmethod
    def parse(cls, value: Any) -> Optional['FileType']:
        """Return the FileType for a value like 'PDF' or '.txt', or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower().lstrip('.'))
        except ValueError:
            return None

    @classmethod
    def from_filename(cls, filename: str) -> Optional['FileType']:
        """Derive the type from the last extension of a filename."""
        if not filename or '.' not in filename:
            return None
        return cls.parse(filename.rsplit('.', 1)[-1])


class SearchType(Enum):
    """Which signal produced a search result."""
    SEMANTIC = "semantic"
    KEYWORD = "keyword"
    HYBRID = "hybrid"


@dataclass
class DocumentMetadata:
    """Optional descriptive metadata supplied by the extractor."""
    title: Optional[str] = None
    author: Optional[str] = None
    pages: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'author': self.author,
            'pages': self.pages,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'DocumentMetadata':
        data = data or {}
        pages = data.get('pages')
        return cls(
            title=data.get('title'),
            author=data.get('author'),
            pages=int(pages) if pages is not None else None,
        )


@dataclass
class Document:
    """An indexed document with its vector and keyword evidence."""
    id: str
    filename: str
    file_type: FileType
    uploaded_at: datetime
    size_bytes: int
    extracted_text: str
    keywords: List[str]
    vector: np.ndarray
    term_frequency: Dict[str, float] = field(default_factory=dict)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    extraction_error: Optional[str] = None

    @property
    def searchable(self) -> bool:
        """False for empty texts and diagnostic placeholders."""
        return self.extraction_error is None and bool(self.extracted_text.strip())

    def to_dict(self, include_vector: bool = False) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'filename': self.filename,
            'fileType': self.file_type.value,
            'uploadedAt': self.uploaded_at.isoformat(),
            'sizeBytes': self.size_bytes,
            'extractedText': self.extracted_text,
            'keywords': list(self.keywords),
            'metadata': self.metadata.to_dict(),
            'searchable': self.searchable,
            'extractionError': self.extraction_error,
        }
        if include_vector:
            data['vector'] = [float(v) for v in self.vector]
        return data


@dataclass
class MatchedSection:
    """A sentence containing the query, with its surroundings."""
    text: str
    context: str
    highlights: List[Tuple[int, int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'context': self.context,
            'highlights': [list(span) for span in self.highlights],
        }


@dataclass
class SearchResult:
    """A ranked document with the evidence behind its score."""
    document_id: str
    filename: str
    score: float
    search_type: SearchType
    matched_sections: List[MatchedSection]
    semantic_score: float = 0.0
    keyword_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'documentId': self.document_id,
            'filename': self.filename,
            'score': self.score,
            'searchType': self.search_type.value,
            'semanticScore': self.semantic_score,
            'keywordScore': self.keyword_score,
            'matchedSections': [s.to_dict() for s in self.matched_sections],
        }


@dataclass
class UploadRequest:
    """Plain text and metadata produced by an extractor for one file."""
    filename: str
    file_type: Any
    extracted_text: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    document_id: Optional[str] = None
    size_bytes: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadRequest':
        """Build from the JSON upload payload (camelCase keys)."""
        size = data.get('sizeBytes')
        return cls(
            filename=data.get('filename', ''),
            file_type=data.get('fileType'),
            extracted_text=data.get('extractedText') or '',
            metadata=DocumentMetadata.from_dict(data.get('metadata')),
            document_id=data.get('id'),
            size_bytes=int(size) if size is not None else None,
        )


@dataclass
class UploadResult:
    """Outcome of an upload: the stored document or an error message."""
    success: bool
    document: Optional[Document] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'success': self.success}
        if self.document is not None:
            data['document'] = self.document.to_dict()
        if self.error is not None:
            data['error'] = self.error
        return data
