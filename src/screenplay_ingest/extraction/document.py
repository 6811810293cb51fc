from __future__ import annotations

import base64
import mimetypes
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

PDF_MIME = "application/pdf"
TEXT_MIMES = ("text/plain", "text/x-fountain")

METHOD_LOCAL = "local"
METHOD_REMOTE_PAGINATED = "remote-paginated"
METHOD_FAILED = "failed"

_EXTENSIONS = {
    PDF_MIME: ".pdf",
    "text/plain": ".txt",
    "text/x-fountain": ".fountain",
}


def default_filename(mime_type: str) -> str:
    ext = _EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ""
    return "script" + ext


@dataclass(frozen=True)
class Document:
    """
    An uploaded screenplay file. Input only, never mutated.

    data: raw bytes as uploaded
    mime_type: declared MIME type (application/pdf, text/plain, ...)
    filename: original file name, forwarded to the remote backend;
        defaults to "script" plus an extension matching mime_type
    """
    data: bytes
    mime_type: str
    filename: str = ""

    def __post_init__(self) -> None:
        if not self.filename:
            object.__setattr__(self, "filename", default_filename(self.mime_type))

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME

    @property
    def is_text(self) -> bool:
        return self.mime_type in TEXT_MIMES

    @classmethod
    def from_path(cls, path: str, mime_type: str | None = None) -> "Document":
        if mime_type is None:
            if path.lower().endswith(".fountain"):
                mime_type = "text/x-fountain"
            else:
                mime_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        with open(path, "rb") as f:
            data = f.read()
        return cls(data=data, mime_type=mime_type, filename=os.path.basename(path))


@dataclass(frozen=True)
class DocumentPayload:
    """Whole-document request body for the remote backend (base64 encoded once)."""
    data_b64: str
    mime_type: str
    filename: str

    @classmethod
    def from_document(cls, document: Document) -> "DocumentPayload":
        return cls(
            data_b64=base64.b64encode(document.data).decode("ascii"),
            mime_type=document.mime_type,
            filename=document.filename,
        )

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_b64}"


@dataclass(frozen=True)
class Segment:
    """
    One page range extracted on its own.

    start / end: 1-based inclusive page range; start is the reassembly sort key
    """
    start: int
    end: int
    text: str

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def page_range(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class PaginatedExtraction:
    """
    Result of a paginated remote extraction.

    planned: every page range that was requested, in page order
    segments: successful segments, sorted by start page
    failed: page ranges that raised or came back below the floor
    """
    total_pages: int
    planned: Tuple[Tuple[int, int], ...]
    segments: Tuple[Segment, ...]
    failed: Tuple[Tuple[int, int], ...]
    combined_text: str

    @property
    def total_characters(self) -> int:
        return len(self.combined_text)

    @property
    def succeeded(self) -> int:
        return len(self.segments)


@dataclass(frozen=True)
class StageAttempt:
    """
    What one extraction strategy produced, and why it was rejected if it was.

    paginated: segment coverage when the stage was the paginated remote one
    """
    stage: str
    char_count: int
    reason: str = ""
    paginated: Optional[PaginatedExtraction] = None

    def describe(self) -> str:
        out = f"{self.stage}: {self.reason}" if self.reason else f"{self.stage}: {self.char_count} characters"
        if self.paginated is not None:
            out += f" from {self.paginated.succeeded}/{len(self.paginated.planned)} segments"
        return out


@dataclass(frozen=True)
class ExtractedText:
    text: str
    method: str
    attempts: List[StageAttempt] = field(default_factory=list)
    paginated: Optional[PaginatedExtraction] = None

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def segments_succeeded(self) -> Optional[int]:
        """Successful page ranges for remote-paginated results, else None."""
        return None if self.paginated is None else self.paginated.succeeded

    @property
    def segments_failed(self) -> Tuple[Tuple[int, int], ...]:
        return () if self.paginated is None else self.paginated.failed
