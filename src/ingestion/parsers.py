"""Plain-text extraction for uploaded transcripts (.txt, .docx, .pdf)."""

from __future__ import annotations

import io
from collections.abc import Callable

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PyPdfError

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Content types accepted when the filename has no usable extension
_CONTENT_TYPE_FORMATS = {
    "text/plain": "txt",
    DOCX_CONTENT_TYPE: "docx",
    "application/pdf": "pdf",
}


class TranscriptParseError(ValueError):
    """The file could not be turned into transcript text."""


class UnsupportedFileTypeError(TranscriptParseError):
    """The file is not a .txt, .docx, or .pdf transcript."""


def parse_txt(raw: bytes) -> str:
    """Decode a UTF-8 text file (a leading BOM is accepted)."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise TranscriptParseError(f"Text file is not valid UTF-8: {exc}") from exc


def parse_docx(raw: bytes) -> str:
    """Extract paragraph text from a Word document."""
    try:
        document = Document(io.BytesIO(raw))
    except Exception as exc:
        # python-docx raises zip/XML/package errors with no common base class.
        raise TranscriptParseError(f"Could not read .docx file: {exc}") from exc
    return "\n".join(p.text for p in document.paragraphs)


def parse_pdf(raw: bytes) -> str:
    """Extract page text from a PDF."""
    try:
        reader = PdfReader(io.BytesIO(raw))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, OSError) as exc:
        raise TranscriptParseError(f"Could not read .pdf file: {exc}") from exc
    return "\n".join(pages)


def detect_format(filename: str | None, content_type: str | None = None) -> str:
    """Return ``"txt"``, ``"docx"``, or ``"pdf"`` for an upload.

    The filename extension wins; the content type is the fallback.

    Raises:
        UnsupportedFileTypeError: If neither identifies a supported format.
    """
    name = filename or ""
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if ext in ("txt", "docx", "pdf"):
        return ext

    ctype = (content_type or "").split(";", 1)[0].strip().lower()
    fmt = _CONTENT_TYPE_FORMATS.get(ctype)
    if fmt is None:
        raise UnsupportedFileTypeError(
            f"Unsupported file type {name or ctype or 'unknown'!r}. "
            "Please upload a .txt, .docx, or .pdf file."
        )
    return fmt


def extract_text(filename: str | None, raw: bytes, content_type: str | None = None) -> str:
    """Turn an uploaded transcript file into a single plain-text string.

    Args:
        filename: Original upload filename (used for the extension).
        raw: File bytes.
        content_type: Optional MIME type, used when the filename has no extension.

    Returns:
        The transcript text.

    Raises:
        UnsupportedFileTypeError: If the file type is not supported.
        TranscriptParseError: If the file is corrupt or contains no text.
    """
    dispatch: dict[str, Callable[[bytes], str]] = {
        "txt": parse_txt,
        "docx": parse_docx,
        "pdf": parse_pdf,
    }
    fmt = detect_format(filename, content_type)
    text = dispatch[fmt](raw)
    if not text.strip():
        raise TranscriptParseError(f"No text could be extracted from the .{fmt} file.")
    return text
