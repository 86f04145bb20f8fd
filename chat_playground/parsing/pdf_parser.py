"""PDF text extraction using pypdf.

Extracts text content and metadata from uploaded PDF files with validation.
"""

import io
import logging
from pathlib import Path

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from chat_playground.errors import PlaygroundError

logger = logging.getLogger(__name__)

# Constants
PDF_MIME_TYPE = "application/pdf"
PDF_MAGIC_BYTES = b"%PDF"
MIN_TEXT_LENGTH = 10


class PDFContent(BaseModel):
    """Extracted content from a PDF file.

    Attributes:
        text: Combined text content from all pages.
        pages: Total number of pages in the document.
        metadata: Document metadata (title, author, etc.).
    """

    text: str
    pages: int = Field(ge=0)
    metadata: dict[str, str | None]


class ExtractionError(PlaygroundError):
    """Raised when a document cannot be parsed into text."""

    status_code = 400


class NoContentError(ExtractionError):
    """Raised when extraction succeeds but yields too little text."""


class UnsupportedTypeError(PlaygroundError):
    """Raised for document types the extractor cannot handle."""

    status_code = 400


def _validate_pdf_bytes(file_content: bytes) -> None:
    """Validate PDF file content before parsing.

    Args:
        file_content: Raw bytes of the PDF file.

    Raises:
        ExtractionError: If validation fails.
    """
    if not file_content:
        raise ExtractionError("Empty file provided")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise ExtractionError("Invalid PDF: file does not start with PDF header")


def _extract_metadata(reader: PdfReader) -> dict[str, str | None]:
    """Extract metadata from PDF reader.

    Args:
        reader: Initialized PdfReader instance.

    Returns:
        Dictionary of metadata fields.
    """
    metadata: dict[str, str | None] = {}

    try:
        if reader.metadata:
            # Standard PDF metadata fields
            metadata["title"] = reader.metadata.get("/Title")
            metadata["author"] = reader.metadata.get("/Author")
            metadata["subject"] = reader.metadata.get("/Subject")
            metadata["creator"] = reader.metadata.get("/Creator")
            metadata["producer"] = reader.metadata.get("/Producer")

            creation_date = reader.metadata.get("/CreationDate")
            if creation_date:
                metadata["creation_date"] = str(creation_date)

            mod_date = reader.metadata.get("/ModDate")
            if mod_date:
                metadata["modification_date"] = str(mod_date)
    except Exception as e:
        logger.warning(f"Failed to extract some metadata: {e}")

    return {k: str(v) for k, v in metadata.items() if v is not None}


def parse_pdf(file_content: bytes) -> PDFContent:
    """Parse a PDF file and extract its text content.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFContent with extracted text, page count, and metadata.

    Raises:
        ExtractionError: If the file is empty, not a PDF, or corrupt.
    """
    _validate_pdf_bytes(file_content)

    try:
        reader = PdfReader(io.BytesIO(file_content))
    except PdfReadError as e:
        raise ExtractionError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise ExtractionError(f"Failed to read PDF: {e}") from e

    pages = len(reader.pages)

    text_parts: list[str] = []
    for i, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            continue

    text = "\n\n".join(text_parts)

    if not text.strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return PDFContent(
        text=text,
        pages=pages,
        metadata=_extract_metadata(reader),
    )


def extract_text(file_path: str | Path, file_type: str = PDF_MIME_TYPE) -> str:
    """Extract trimmed plain text from a stored document.

    Single attempt, no retry: callers decide whether to degrade.

    Args:
        file_path: Path to the uploaded file on disk.
        file_type: MIME type reported at upload time.

    Returns:
        The document text, trimmed.

    Raises:
        UnsupportedTypeError: If the file is not a PDF.
        ExtractionError: If the file is missing or cannot be parsed.
        NoContentError: If fewer than 10 characters of text were found.
    """
    if file_type != PDF_MIME_TYPE:
        raise UnsupportedTypeError("Only PDF files are supported for now.", details=file_type)

    try:
        file_content = Path(file_path).read_bytes()
    except OSError as e:
        raise ExtractionError(f"Failed to read uploaded file: {e}") from e

    text = parse_pdf(file_content).text.strip()

    if len(text) < MIN_TEXT_LENGTH:
        raise NoContentError(
            "No text content found in PDF or extracted text is too short to be meaningful"
        )

    return text
