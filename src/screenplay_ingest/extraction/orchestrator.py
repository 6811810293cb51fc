"""
orchestrator.py

Top-level contract for turning document bytes into plain text.

    extract(document) -> ExtractedText   or raises ExtractionFailure

The orchestrator walks an ordered list of strategies (config.stage_order,
default local then remote-paginated). Each strategy returns the text it
managed to produce (plus the segment coverage for the
remote-paginated stage), or raises. The first strategy whose text is strictly
longer than its own threshold wins:

    local             > local_min_chars   (100)
    remote-paginated  > remote_min_chars  (50_000)

The remote threshold is much higher on purpose: the paginated path is meant
for long scripts whose text layer the local stage could not read.

Nothing is retried. When every strategy has been tried, the failure raised
names each attempt:

    BackendUnavailable   the remote stage had no credential / backend
    DocumentUnreadable   no stage produced a single character
    InsufficientContent  text came back but never cleared a threshold
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional, Tuple

import pdfplumber

from screenplay_ingest.extraction.config import ExtractionConfig
from screenplay_ingest.extraction.document import (
    METHOD_LOCAL,
    METHOD_REMOTE_PAGINATED,
    Document,
    ExtractedText,
    PaginatedExtraction,
    StageAttempt,
)
from screenplay_ingest.extraction.errors import (
    BackendUnavailable,
    DocumentUnreadable,
    ExtractionFailure,
    InsufficientContent,
)
from screenplay_ingest.extraction.local import extract_local
from screenplay_ingest.extraction.paginated import PaginatedExtractor, estimate_pages
from screenplay_ingest.llm.openai_backend import OpenAIBackend, TextBackend

logger = logging.getLogger(__name__)


class LocalStrategy:
    name = METHOD_LOCAL

    def __init__(self, config: ExtractionConfig, pdf_open: Callable[..., Any]):
        self.min_chars = config.local_min_chars
        self.pdf_open = pdf_open

    async def run(self, document: Document) -> Tuple[str, None]:
        # pdfplumber is synchronous; keep it off the event loop
        text = await asyncio.to_thread(extract_local, document, pdf_open=self.pdf_open)
        return text, None


class PaginatedRemoteStrategy:
    name = METHOD_REMOTE_PAGINATED

    def __init__(self, config: ExtractionConfig, backend: Optional[TextBackend]):
        self.config = config
        self.min_chars = config.remote_min_chars
        self.backend = backend

    async def run(self, document: Document) -> Tuple[str, PaginatedExtraction]:
        if self.backend is None:
            raise BackendUnavailable("remote extraction is not configured (no API key)")
        pages = estimate_pages(document, self.config.bytes_per_page)
        result = await PaginatedExtractor(self.backend, self.config).extract_paginated(document, pages)
        return result.combined_text, result


class ExtractionOrchestrator:
    """
    Args:
        config: Explicit configuration; see ExtractionConfig.
        backend: Remote document-to-text backend. When omitted, an
            OpenAIBackend is built if config.api_key is set; otherwise the
            remote stage reports BackendUnavailable.
        pdf_open: pdfplumber-compatible opener for the local stage.
    """

    def __init__(
        self,
        config: ExtractionConfig,
        *,
        backend: Optional[TextBackend] = None,
        pdf_open: Callable[..., Any] = pdfplumber.open,
    ):
        self.config = config
        if backend is None and config.api_key:
            backend = OpenAIBackend.from_config(config)
        self.backend = backend
        self.strategies = self._build_strategies(pdf_open)

    def _build_strategies(self, pdf_open: Callable[..., Any]) -> List[Any]:
        out = []
        for name in self.config.stage_order:
            if name == METHOD_LOCAL:
                out.append(LocalStrategy(self.config, pdf_open))
            elif name == METHOD_REMOTE_PAGINATED:
                out.append(PaginatedRemoteStrategy(self.config, self.backend))
        return out

    async def extract(self, document: Document) -> ExtractedText:
        logger.info("Extracting text from %s (%d bytes, %s)", document.filename, document.size, document.mime_type)
        attempts: List[StageAttempt] = []
        backend_missing = False

        for strategy in self.strategies:
            try:
                text, paginated = await strategy.run(document)
            except BackendUnavailable as exc:
                backend_missing = True
                attempts.append(StageAttempt(strategy.name, 0, str(exc)))
                logger.warning("Stage %s unavailable: %s", strategy.name, exc)
                continue
            except Exception as exc:
                attempts.append(StageAttempt(strategy.name, 0, f"{type(exc).__name__}: {exc}"))
                logger.warning("Stage %s failed: %s", strategy.name, exc)
                continue

            text = text or ""
            if len(text) > strategy.min_chars:
                attempts.append(StageAttempt(strategy.name, len(text), paginated=paginated))
                logger.info("Stage %s accepted: %d characters", strategy.name, len(text))
                return ExtractedText(text=text, method=strategy.name, attempts=attempts, paginated=paginated)

            reason = f"{len(text)} characters, need more than {strategy.min_chars}"
            attempts.append(StageAttempt(strategy.name, len(text), reason, paginated))
            logger.warning("Stage %s rejected: %s", strategy.name, reason)

        raise self._failure(attempts, backend_missing)

    @staticmethod
    def _failure(attempts: List[StageAttempt], backend_missing: bool) -> ExtractionFailure:
        if backend_missing:
            return BackendUnavailable("no stage produced usable text and remote extraction is unavailable", attempts)
        if all(a.char_count == 0 for a in attempts):
            return DocumentUnreadable("no extractable text layer found", attempts)
        return InsufficientContent("extracted text stayed below every threshold", attempts)

    def extract_sync(self, document: Document) -> ExtractedText:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.extract(document))
