"""Convert uploaded documents into plain source text."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pymupdf
from docx import Document

from .exceptions import TextExtractionError

LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".txt", ".md", ".docx", ".pdf")


def extract_text(file_name: str, data: bytes) -> str:
    """Return the plain text of an uploaded ``.txt``/``.md``/``.docx``/``.pdf`` file."""

    suffix = Path(file_name).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise TextExtractionError(
            f"Unsupported file type '{suffix or file_name}'. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    try:
        if suffix in (".txt", ".md"):
            text = _decode_text(data)
        elif suffix == ".docx":
            text = _extract_docx(data)
        else:
            text = _extract_pdf(data)
    except TextExtractionError:
        raise
    except Exception as exc:
        LOGGER.warning("Failed to extract text from %s: %s", file_name, exc)
        raise TextExtractionError(f"Could not read '{file_name}': {exc}") from exc

    text = text.strip()
    if not text:
        raise TextExtractionError(f"'{file_name}' contains no extractable text")
    LOGGER.info("Extracted %d characters from %s", len(text), file_name)
    return text


def _decode_text(data: bytes) -> str:
    for encoding in ("utf-8-sig", "cp932"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise TextExtractionError("Text file is not valid UTF-8 or Shift_JIS")


def _extract_docx(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    paragraphs = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            paragraphs.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(paragraphs)


def _extract_pdf(data: bytes) -> str:
    with pymupdf.open(stream=data, filetype="pdf") as document:
        return "\n".join(page.get_text() for page in document)
