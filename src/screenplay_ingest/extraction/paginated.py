"""
paginated.py

This module extracts a long document through a remote backend one page range
at a time, then stitches the ranges back together in page order.

Why page ranges
---------------
A single remote request cannot return the full text of a feature-length
script: model output budgets cap it. Asking for ~8 separate ranges keeps each
answer well inside the budget.

Execution model
---------------
1) Plan contiguous ranges covering 1..estimated_pages
       segment_size = min(max_segment_pages, ceil(pages / target_segments))
2) Send one request per range, each carrying the WHOLE document plus an
   explicit page-range instruction.
3) Run requests in fixed-size batches of max_concurrency, guarded by a
   semaphore, with a fixed pause between batches (upstream rate limits).
4) A range that raises or returns too little text is dropped: logged, never
   retried, and its siblings keep running.
5) After all batches drain, sort surviving segments by start page (never by
   completion order) and join them with a blank line.

Partial coverage is a normal result; the orchestrator decides whether the
combined text is enough.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import List, Optional, Tuple

from tqdm import tqdm

from screenplay_ingest.extraction.config import ExtractionConfig
from screenplay_ingest.extraction.document import (
    Document,
    DocumentPayload,
    PaginatedExtraction,
    Segment,
)
from screenplay_ingest.extraction.errors import SegmentExtractionFailed
from screenplay_ingest.llm.openai_backend import TextBackend
from screenplay_ingest.llm.prompts_extraction import build_page_range_prompt

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "\n\n"


def estimate_pages(document: Document, bytes_per_page: int = 2000) -> int:
    """Rough page count from file size; never less than one page."""
    return max(1, document.size // bytes_per_page)


def plan_segments(
    total_pages: int,
    *,
    target_segments: int = 8,
    max_segment_pages: int = 15,
) -> List[Tuple[int, int]]:
    """
    Partition pages 1..total_pages into contiguous inclusive ranges.

    Examples:
        plan_segments(120) -> 8 ranges of 15 pages
        plan_segments(49)  -> 7 ranges of 7 pages
        plan_segments(10)  -> 5 ranges of 2 pages
    """
    if total_pages < 1:
        return []
    size = min(max_segment_pages, math.ceil(total_pages / target_segments))
    size = max(1, size)
    ranges = []
    for start in range(1, total_pages + 1, size):
        ranges.append((start, min(start + size - 1, total_pages)))
    return ranges


class PaginatedExtractor:
    """
    Bounded-concurrency page-range extraction over a TextBackend.

    Args:
        backend: Anything with `async generate(payload, prompt, max_output_tokens)`.
        config: Thresholds, concurrency and pause settings.
    """

    def __init__(self, backend: TextBackend, config: ExtractionConfig):
        self.backend = backend
        self.config = config

    async def _request_segment(
        self,
        payload: DocumentPayload,
        start: int,
        end: int,
        total_pages: int,
    ) -> Segment:
        prompt = build_page_range_prompt(start, end, total_pages)
        text = await self.backend.generate(payload, prompt, self.config.max_output_tokens)
        text = text or ""
        if len(text) <= self.config.segment_min_chars:
            raise SegmentExtractionFailed(start, end, f"only {len(text)} characters returned")
        return Segment(start=start, end=end, text=text)

    async def _extract_segment(
        self,
        sem: asyncio.Semaphore,
        payload: DocumentPayload,
        start: int,
        end: int,
        total_pages: int,
    ) -> Tuple[int, int, Optional[Segment]]:
        async with sem:
            try:
                seg = await self._request_segment(payload, start, end, total_pages)
            except SegmentExtractionFailed as exc:
                logger.warning("Dropping segment %s", exc)
                return start, end, None
            except Exception as exc:
                logger.warning("Dropping segment pages %d-%d: %s: %s", start, end, type(exc).__name__, exc)
                return start, end, None
        logger.info("Extracted %d characters from pages %d-%d", seg.char_count, start, end)
        return start, end, seg

    async def extract_paginated(self, document: Document, estimated_pages: int) -> PaginatedExtraction:
        """
        Extract every planned page range and reassemble in page order.

        Args:
            document: The uploaded file; sent whole with each request.
            estimated_pages: Page count used for planning ranges.

        Returns:
            A PaginatedExtraction. `segments` holds only the ranges that
            succeeded; `failed` lists the rest. Never raises for segment
            failures.
        """
        cfg = self.config
        planned = plan_segments(
            estimated_pages,
            target_segments=cfg.target_segments,
            max_segment_pages=cfg.max_segment_pages,
        )
        payload = DocumentPayload.from_document(document)
        sem = asyncio.Semaphore(cfg.max_concurrency)
        batch_size = cfg.max_concurrency
        n_batches = math.ceil(len(planned) / batch_size) if planned else 0

        logger.info(
            "Paginated extraction: %d estimated pages in %d segments (%d batches)",
            estimated_pages,
            len(planned),
            n_batches,
        )

        # filled in completion order; sorted by start page afterwards
        completed: List[Segment] = []
        failed: List[Tuple[int, int]] = []

        with tqdm(total=len(planned), desc="segments", disable=not cfg.show_progress) as bar:
            for b in range(0, len(planned), batch_size):
                batch = planned[b:b + batch_size]
                tasks = [
                    self._extract_segment(sem, payload, start, end, estimated_pages)
                    for start, end in batch
                ]
                for fut in asyncio.as_completed(tasks):
                    start, end, seg = await fut
                    if seg is None:
                        failed.append((start, end))
                    else:
                        completed.append(seg)
                    bar.update(1)

                if b + batch_size < len(planned) and cfg.batch_pause_s > 0:
                    await asyncio.sleep(cfg.batch_pause_s)

        segments = sorted(completed, key=lambda s: s.start)
        failed.sort()
        combined = SEGMENT_SEPARATOR.join(s.text for s in segments)

        logger.info(
            "Paginated extraction complete: %d characters from %d/%d segments",
            len(combined),
            len(segments),
            len(planned),
        )
        return PaginatedExtraction(
            total_pages=estimated_pages,
            planned=tuple(planned),
            segments=tuple(segments),
            failed=tuple(failed),
            combined_text=combined,
        )
