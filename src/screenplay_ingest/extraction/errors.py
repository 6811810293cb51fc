"""
errors.py

Failure taxonomy for document extraction.

    ExtractionFailure           fatal; every strategy ran and none was accepted
        DocumentUnreadable      no stage produced any text (e.g. scanned PDF)
        BackendUnavailable      the remote stage could not run (no credential)
        InsufficientContent     text came back, but below every threshold
    SegmentExtractionFailed     one page range failed; absorbed and logged
    UnsupportedDocumentType     local stage cannot read this MIME type

Only ExtractionFailure subclasses reach callers of the orchestrator.
"""
from __future__ import annotations

from typing import Sequence

from screenplay_ingest.extraction.document import StageAttempt


class ExtractionFailure(RuntimeError):
    kind = "failed"

    def __init__(self, message: str, attempts: Sequence[StageAttempt] = ()):
        self.attempts = list(attempts)
        if self.attempts:
            detail = "; ".join(a.describe() for a in self.attempts)
            message = f"{message} (attempted {detail})"
        super().__init__(message)


class DocumentUnreadable(ExtractionFailure):
    kind = "document-unreadable"


class BackendUnavailable(ExtractionFailure):
    kind = "backend-unavailable"


class InsufficientContent(ExtractionFailure):
    kind = "insufficient-content"


class SegmentExtractionFailed(RuntimeError):
    def __init__(self, start: int, end: int, reason: str):
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(f"pages {start}-{end}: {reason}")


class UnsupportedDocumentType(ValueError):
    pass
