"""Tests for document text extraction (pymupdf / python-docx mocked)."""

import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.core.errors import ExtractionError, UnsupportedFormat
from src.documents.extractor import extract_text, extract_text_from_path


def _mock_pymupdf(*pages: str) -> MagicMock:
    mock_pages = []
    for text in pages:
        page = MagicMock()
        page.get_text.return_value = text
        mock_pages.append(page)

    mock_doc = MagicMock()
    mock_doc.__iter__ = MagicMock(return_value=iter(mock_pages))

    mock_pymupdf = MagicMock()
    mock_pymupdf.open.return_value = mock_doc
    return mock_pymupdf


def _mock_docx(*paragraphs: str) -> MagicMock:
    document = MagicMock()
    document.paragraphs = [MagicMock(text=p) for p in paragraphs]
    mock_docx = MagicMock()
    mock_docx.Document.return_value = document
    return mock_docx


class TestExtractPdf:
    def test_successful_extraction(self) -> None:
        mock_pymupdf = _mock_pymupdf("Jane Doe\n", "Senior Data Scientist\n")

        with patch.dict("sys.modules", {"pymupdf": mock_pymupdf}):
            result = extract_text(b"%PDF-1.4 fake", "pdf")

        assert result == "Jane Doe\n\nSenior Data Scientist"
        mock_pymupdf.open.assert_called_once_with(stream=b"%PDF-1.4 fake", filetype="pdf")
        mock_pymupdf.open.return_value.__exit__.assert_called_once()

    def test_document_closed_when_page_fails(self) -> None:
        mock_pymupdf = _mock_pymupdf("Jane Doe")
        page = MagicMock()
        page.get_text.side_effect = RuntimeError("broken page")
        mock_doc = mock_pymupdf.open.return_value
        mock_doc.__iter__ = MagicMock(return_value=iter([page]))

        with (
            patch.dict("sys.modules", {"pymupdf": mock_pymupdf}),
            pytest.raises(RuntimeError, match="broken page"),
        ):
            extract_text(b"%PDF-1.4 fake", "pdf")

        mock_doc.__exit__.assert_called_once()

    def test_corrupt_pdf(self) -> None:
        mock_pymupdf = MagicMock()
        mock_pymupdf.open.side_effect = RuntimeError("cannot open broken document")

        with (
            patch.dict("sys.modules", {"pymupdf": mock_pymupdf}),
            pytest.raises(ExtractionError, match="Could not open PDF"),
        ):
            extract_text(b"garbage", "pdf")

    def test_missing_pymupdf(self) -> None:
        with (
            patch.dict("sys.modules", {"pymupdf": None}),
            pytest.raises(ImportError, match="pymupdf is required"),
        ):
            extract_text(b"%PDF", "pdf")


class TestExtractWord:
    @pytest.mark.parametrize("ext", ["docx", "doc", ".DOCX"])
    def test_paragraphs_joined(self, ext: str) -> None:
        mock_docx = _mock_docx("Jane Doe", "PhD Statistics", "")

        with patch.dict("sys.modules", {"docx": mock_docx}):
            result = extract_text(b"PK fake", ext)

        assert result == "Jane Doe\nPhD Statistics"

    def test_legacy_binary_doc(self) -> None:
        mock_docx = MagicMock()
        mock_docx.Document.side_effect = zipfile.BadZipFile("File is not a zip file")

        with (
            patch.dict("sys.modules", {"docx": mock_docx}),
            pytest.raises(ExtractionError, match="Could not open Word document"),
        ):
            extract_text(b"\xd0\xcf\x11\xe0", "doc")

    def test_missing_python_docx(self) -> None:
        with (
            patch.dict("sys.modules", {"docx": None}),
            pytest.raises(ImportError, match="python-docx is required"),
        ):
            extract_text(b"PK", "docx")


class TestExtractTextDispatch:
    def test_unsupported_extension(self) -> None:
        with pytest.raises(UnsupportedFormat):
            extract_text(b"plain", "txt")

    def test_from_path_missing(self) -> None:
        with pytest.raises(FileNotFoundError, match="Document not found"):
            extract_text_from_path("/nonexistent/resume.pdf")

    def test_from_path(self, tmp_path: Path) -> None:
        path = tmp_path / "resume.pdf"
        path.write_bytes(b"%PDF-1.4 fake")

        with patch.dict("sys.modules", {"pymupdf": _mock_pymupdf("Jane Doe")}):
            assert extract_text_from_path(path) == "Jane Doe"
