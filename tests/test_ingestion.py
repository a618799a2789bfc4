"""Tests for transcript file text extraction (.txt, .docx, .pdf)."""

from __future__ import annotations

import io
from unittest.mock import MagicMock, patch

import docx
import pytest
from pypdf import PdfWriter

from src.ingestion.parsers import (
    DOCX_CONTENT_TYPE,
    TranscriptParseError,
    UnsupportedFileTypeError,
    detect_format,
    extract_text,
    parse_docx,
    parse_pdf,
    parse_txt,
)


def _docx_bytes(*paragraphs: str) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def _blank_pdf_bytes() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


class TestDetectFormat:
    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("notes.txt", "txt"),
            ("Minutes.DOCX", "docx"),
            ("standup.2024.pdf", "pdf"),
        ],
    )
    def test_extension(self, filename: str, expected: str) -> None:
        assert detect_format(filename) == expected

    def test_content_type_fallback(self) -> None:
        assert detect_format("upload", DOCX_CONTENT_TYPE) == "docx"
        assert detect_format(None, "text/plain; charset=utf-8") == "txt"

    def test_extension_wins_over_content_type(self) -> None:
        assert detect_format("notes.txt", "application/pdf") == "txt"

    @pytest.mark.parametrize("filename", ["meeting.vtt", "audio.mp3", "noext", ""])
    def test_unsupported(self, filename: str) -> None:
        with pytest.raises(UnsupportedFileTypeError, match=r"\.txt, \.docx, or \.pdf"):
            detect_format(filename, "application/octet-stream")


class TestTxtParser:
    def test_utf8(self) -> None:
        assert parse_txt("Zoë will call José.".encode()) == "Zoë will call José."

    def test_bom_stripped(self) -> None:
        assert parse_txt(b"\xef\xbb\xbfHello") == "Hello"

    def test_invalid_utf8(self) -> None:
        with pytest.raises(TranscriptParseError, match="UTF-8"):
            parse_txt(b"\xff\xfe\x00bad")


class TestDocxParser:
    def test_paragraphs_joined(self) -> None:
        raw = _docx_bytes("Alice: I'll draft the plan.", "Bob: Thanks.")
        assert parse_docx(raw) == "Alice: I'll draft the plan.\nBob: Thanks."

    def test_corrupt_docx(self) -> None:
        with pytest.raises(TranscriptParseError, match="docx"):
            parse_docx(b"this is not a zip archive")


class TestPdfParser:
    def test_pages_joined(self) -> None:
        page_one = MagicMock()
        page_one.extract_text.return_value = "Page one text."
        page_two = MagicMock()
        page_two.extract_text.return_value = None
        page_three = MagicMock()
        page_three.extract_text.return_value = "Page three text."

        with patch("src.ingestion.parsers.PdfReader") as mock_reader:
            mock_reader.return_value.pages = [page_one, page_two, page_three]
            text = parse_pdf(b"%PDF-fake")

        assert text == "Page one text.\n\nPage three text."

    def test_blank_pdf_has_no_text(self) -> None:
        assert parse_pdf(_blank_pdf_bytes()).strip() == ""

    def test_corrupt_pdf(self) -> None:
        with pytest.raises(TranscriptParseError, match="pdf"):
            parse_pdf(b"definitely not a pdf")


class TestExtractText:
    def test_txt(self) -> None:
        assert extract_text("t.txt", b"John will send the report.") == "John will send the report."

    def test_docx(self) -> None:
        raw = _docx_bytes("Carol: Ship it Friday.")
        assert extract_text("minutes.docx", raw) == "Carol: Ship it Friday."

    def test_blank_file_rejected(self) -> None:
        with pytest.raises(TranscriptParseError, match="No text"):
            extract_text("empty.txt", b"  \n ")

    def test_blank_pdf_rejected(self) -> None:
        with pytest.raises(TranscriptParseError, match=r"No text could be extracted from the \.pdf"):
            extract_text("scan.pdf", _blank_pdf_bytes())

    def test_unsupported_is_parse_error(self) -> None:
        """UnsupportedFileTypeError is a TranscriptParseError subtype."""
        with pytest.raises(TranscriptParseError):
            extract_text("slides.pptx", b"...")
