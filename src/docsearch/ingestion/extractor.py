"""Text extraction — raw bytes + format hint → plain text.

Three format families are understood:

* UTF-8 text (``.txt``, ``.md``, ``.json``, ``.html``) — decoded directly.
* PDF — page text via :mod:`pypdf`.
* Word-processor documents (``.docx``) — paragraph text via :mod:`docx`.

Unsupported or corrupt input yields ``""``; callers treat that as
"no content" and skip the file.
"""

from __future__ import annotations

import io
import logging
from pathlib import PurePath

from docsearch.errors import ExtractionFailure

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({".txt", ".md", ".html", ".json"})
PDF_EXTENSIONS = frozenset({".pdf"})
WORD_EXTENSIONS = frozenset({".docx"})

SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | PDF_EXTENSIONS | WORD_EXTENSIONS


def extension_of(format_hint: str) -> str:
    """Return the lowercase extension for a filename, path, or bare extension."""
    hint = format_hint.strip().lower()
    if hint.startswith(".") and "/" not in hint and hint.count(".") == 1:
        return hint
    return PurePath(hint).suffix


def is_supported(format_hint: str) -> bool:
    return extension_of(format_hint) in SUPPORTED_EXTENSIONS


def extract(data: bytes, format_hint: str) -> str:
    """Convert *data* to plain text according to *format_hint*.

    Parameters
    ----------
    data:
        Raw file contents.
    format_hint:
        A filename, path, or extension (``"report.pdf"``, ``".pdf"``).

    Returns
    -------
    str
        The extracted text, or ``""`` when the format is unsupported or the
        buffer cannot be read.
    """
    ext = extension_of(format_hint)
    try:
        if ext in TEXT_EXTENSIONS:
            return _decode_text(data)
        if ext in PDF_EXTENSIONS:
            return _extract_pdf(data)
        if ext in WORD_EXTENSIONS:
            return _extract_docx(data)
    except ExtractionFailure as exc:
        logger.warning("Could not extract text from %s: %s", format_hint, exc)
        return ""

    logger.debug("Unsupported format %r for %s", ext, format_hint)
    return ""


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _extract_pdf(data: bytes) -> str:
    from pypdf import PdfReader

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as exc:  # pypdf surfaces corrupt input as many error types
        raise ExtractionFailure(f"unreadable PDF: {exc}") from exc
    return "\n".join(p for p in pages if p.strip())


def _extract_docx(data: bytes) -> str:
    from docx import Document as DocxDocument

    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as exc:  # bad zip, missing parts, malformed XML
        raise ExtractionFailure(f"unreadable word-processor document: {exc}") from exc
    return "\n\n".join(para.text for para in doc.paragraphs if para.text.strip())
