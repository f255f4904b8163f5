"""
Extraction boundary.

Binary formats (PDF, Office documents, spreadsheets) are decoded by
external extractors. This module defines the contract they fulfil, a
plain-text extractor for .txt uploads, and the diagnostic placeholder
stored when extraction fails so the document stays listed.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Protocol

from .models import DocumentMetadata, FileType

logger = logging.getLogger(__name__)

MAX_EXTRACTION_BYTES = 50 * 1024 * 1024


@dataclass
class ExtractionResult:
    """What an extractor returns for one file."""
    success: bool
    text: Optional[str] = None
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    error: Optional[str] = None


class TextExtractor(Protocol):
    """Turns raw bytes of a declared type into plain text."""

    def extract(self, data: bytes, file_type: FileType) -> ExtractionResult:
        ...


class PlainTextExtractor:
    """Decodes UTF-8 text files; every other format is left to external extractors."""

    def __init__(self, max_bytes: int = MAX_EXTRACTION_BYTES, encoding: str = 'utf-8'):
        self.max_bytes = max_bytes
        self.encoding = encoding

    def extract(self, data: bytes, file_type: FileType) -> ExtractionResult:
        if not data:
            return ExtractionResult(success=False, error='File is empty or invalid')

        if len(data) > self.max_bytes:
            return ExtractionResult(success=False, error='File too large for text extraction')

        if file_type is not FileType.TXT:
            return ExtractionResult(
                success=False,
                error=f'No extractor available for {file_type.value.upper()} files',
            )

        text = data.decode(self.encoding, errors='replace')
        return ExtractionResult(success=True, text=text)


def format_file_size(size_bytes: int) -> str:
    """Human readable size, e.g. 1536 -> '1.5 KB'."""
    if size_bytes <= 0:
        return '0 Bytes'
    units = ['Bytes', 'KB', 'MB', 'GB']
    index = min(int(math.log(size_bytes, 1024)), len(units) - 1)
    value = round(size_bytes / (1024 ** index), 2)
    return f"{value:g} {units[index]}"


def placeholder_text(
    filename: str,
    file_type: FileType,
    size_bytes: int,
    error: Optional[str],
    uploaded: Optional[datetime] = None,
) -> str:
    """Diagnostic text stored in place of content that could not be extracted."""
    uploaded = uploaded or datetime.now()
    return (
        f"Document: {filename}\n"
        f"File Type: {file_type.value.upper()}\n"
        f"Size: {format_file_size(size_bytes)}\n"
        f"Uploaded: {uploaded.strftime('%Y-%m-%d')}\n"
        f"\n"
        f"Extraction Error: {error or 'Unknown error'}\n"
        f"\n"
        f"Troubleshooting:\n"
        f"- Ensure the file isn't corrupted\n"
        f"- Try converting to a simpler format (.txt)\n"
        f"- Check if the file opens correctly in its native application\n"
        f"- For PDFs: ensure it's text-based, not image-based"
    )
