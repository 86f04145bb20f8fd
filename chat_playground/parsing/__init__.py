"""Document parsing utilities for the RAG pipeline.

Responsibilities:
    - PDF text extraction with pypdf
    - Sliding-window chunking with overlap for context preservation
    - Metadata extraction (title, author, dates)

Output is plain text chunks ready for embedding generation.
"""

from chat_playground.parsing.chunker import chunk_text
from chat_playground.parsing.pdf_parser import (
    ExtractionError,
    NoContentError,
    PDFContent,
    UnsupportedTypeError,
    extract_text,
    parse_pdf,
)

__all__ = [
    "ExtractionError",
    "NoContentError",
    "PDFContent",
    "UnsupportedTypeError",
    "chunk_text",
    "extract_text",
    "parse_pdf",
]
