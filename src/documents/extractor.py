"""Text extraction from résumé documents (pymupdf / python-docx, optional)."""

import io
import logging
import zipfile
from pathlib import Path

from src.core.errors import ExtractionError, UnsupportedFormat
from src.core.schemas import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


def extract_text(blob: bytes, extension: str) -> str:
    """Extract plain text from a document held in memory.

    Args:
        blob: Raw file content.
        extension: Declared extension ('pdf', 'doc', 'docx'); a leading dot
            and upper case are tolerated.

    Returns:
        The document text, stripped.

    Raises:
        UnsupportedFormat: If the extension is not pdf, doc or docx.
        ExtractionError: If the content cannot be decoded.
        ImportError: If the library for the format is not installed.
    """
    ext = extension.lower().strip().lstrip(".")
    if ext not in SUPPORTED_EXTENSIONS:
        msg = f"Unsupported file format: .{ext or '?'}"
        raise UnsupportedFormat(f"document.{ext}", msg)

    if ext == "pdf":
        return _extract_pdf(blob)
    return _extract_word(blob)


def extract_text_from_path(path: str | Path) -> str:
    """Extract plain text from a document on disk.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Document not found: {path}"
        raise FileNotFoundError(msg)
    return extract_text(path.read_bytes(), path.suffix)


def _extract_pdf(blob: bytes) -> str:
    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required for PDF extraction. "
            "Install with: pip install 'cv-screener[documents]'"
        )
        raise ImportError(msg) from None

    try:
        doc = pymupdf.open(stream=blob, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        msg = f"Could not open PDF: {e}"
        raise ExtractionError(msg) from e

    text_parts: list[str] = []
    with doc:
        for page in doc:
            text_parts.append(page.get_text())

    return "\n".join(text_parts).strip()


def _extract_word(blob: bytes) -> str:
    try:
        import docx
    except ImportError:
        msg = (
            "python-docx is required for Word extraction. "
            "Install with: pip install 'cv-screener[documents]'"
        )
        raise ImportError(msg) from None

    # Legacy binary .doc files are not zip packages and fail here.
    try:
        document = docx.Document(io.BytesIO(blob))
    except (zipfile.BadZipFile, KeyError, ValueError) as e:
        msg = f"Could not open Word document: {e}"
        raise ExtractionError(msg) from e

    paragraphs = [p.text for p in document.paragraphs]
    return "\n".join(paragraphs).strip()
