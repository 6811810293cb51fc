"""
local.py

Fast, deterministic byte -> text extraction with no network access.

PDFs go through pdfplumber page by page; plain-text and Fountain uploads are
decoded as UTF-8. A leading byte-order mark is dropped, and undecodable
bytes (from a cp1252 export, for one) become U+FFFD rather than failing the
stage. Any other type (DOC, DOCX, images) is rejected with
UnsupportedDocumentType: converting those is another service's job.

Errors propagate. The orchestrator is responsible for treating a failure
here as "no output" and moving on to the next strategy.
"""
from __future__ import annotations

import io
from typing import Any, Callable

import pdfplumber

from screenplay_ingest.extraction.document import Document
from screenplay_ingest.extraction.errors import UnsupportedDocumentType


def extract_local(
    document: Document,
    *,
    pdf_open: Callable[..., Any] = pdfplumber.open,
) -> str:
    """
    Extract the text layer of a document.

    Args:
        document: The uploaded file.
        pdf_open: Opener compatible with pdfplumber.open; injectable for tests.

    Returns:
        Page texts joined with newlines. A PDF with no text layer yields "".
    """
    if document.is_text:
        return document.data.decode("utf-8-sig", errors="replace")
    if not document.is_pdf:
        raise UnsupportedDocumentType(f"local extraction does not handle {document.mime_type}")

    pages = []
    with pdf_open(io.BytesIO(document.data)) as pdf:
        for p in pdf.pages:
            pages.append(p.extract_text() or "")
    return "\n".join(pages)
