import asyncio

import pytest

from fakes import RANGE_RE, FakeBackend, page_text
from screenplay_ingest.extraction import paginated
from screenplay_ingest.extraction.config import ExtractionConfig
from screenplay_ingest.extraction.document import Document
from screenplay_ingest.extraction.paginated import (
    SEGMENT_SEPARATOR,
    PaginatedExtractor,
    estimate_pages,
    plan_segments,
)
from screenplay_ingest.llm.prompts_extraction import build_page_range_prompt

FAST = ExtractionConfig(batch_pause_s=0)


def pdf_of_pages(pages):
    return Document(b"x" * (pages * 2000), "application/pdf")


def run(extractor, doc, pages):
    return asyncio.run(extractor.extract_paginated(doc, pages))


@pytest.mark.parametrize(
    "pages,expected",
    [
        (120, [(1 + 15 * i, 15 * (i + 1)) for i in range(8)]),
        (49, [(1 + 7 * i, 7 * (i + 1)) for i in range(7)]),
        (10, [(1, 2), (3, 4), (5, 6), (7, 8), (9, 10)]),
        (1, [(1, 1)]),
        (0, []),
    ],
)
def test_plan_segments(pages, expected):
    assert plan_segments(pages) == expected


def test_plan_segments_caps_segment_size():
    ranges = plan_segments(300)
    assert all(end - start + 1 <= 15 for start, end in ranges)
    assert ranges[0] == (1, 15)
    assert ranges[-1] == (286, 300)
    assert len(ranges) == 20


def test_plan_segments_covers_every_page_once():
    for pages in (7, 33, 64, 95, 121):
        covered = [p for s, e in plan_segments(pages) for p in range(s, e + 1)]
        assert covered == list(range(1, pages + 1))


def test_estimate_pages():
    assert estimate_pages(pdf_of_pages(60)) == 60
    assert estimate_pages(Document(b"tiny", "application/pdf")) == 1


def test_prompt_names_the_page_range():
    prompt = build_page_range_prompt(16, 30, 120)
    assert "pages 16 to 30" in prompt
    assert "15 pages of a 120-page screenplay" in prompt


def test_reassembly_follows_page_order_not_completion_order():
    # later ranges answer first
    backend = FakeBackend(delay=lambda start: (100 - start) / 2000)
    result = run(PaginatedExtractor(backend, FAST), pdf_of_pages(49), 49)

    assert backend.completion_order != sorted(backend.completion_order)
    assert [s.start for s in result.segments] == [1, 8, 15, 22, 29, 36, 43]
    expected = SEGMENT_SEPARATOR.join(page_text(s, e) for s, e in plan_segments(49))
    assert result.combined_text == expected


def test_partial_failure_keeps_surviving_segments_in_order():
    # segment 3 of 7 starts on page 15
    backend = FakeBackend(fail={15})
    result = run(PaginatedExtractor(backend, FAST), pdf_of_pages(49), 49)

    assert result.succeeded == 6
    assert result.failed == ((15, 21),)
    assert [s.start for s in result.segments] == [1, 8, 22, 29, 36, 43]
    assert "<pages 15-21>" not in result.combined_text
    assert result.combined_text.index("<pages 8-14>") < result.combined_text.index("<pages 22-28>")
    # the failure was not retried
    assert backend.calls.count((15, 21)) == 1


def test_short_segments_are_dropped():
    backend = FakeBackend(short={1, 43})
    result = run(PaginatedExtractor(backend, FAST), pdf_of_pages(49), 49)
    assert result.failed == ((1, 7), (43, 49))
    assert result.succeeded == 5


def test_all_segments_failing_is_not_an_exception():
    backend = FakeBackend(fail={1, 8, 15, 22, 29, 36, 43})
    result = run(PaginatedExtractor(backend, FAST), pdf_of_pages(49), 49)
    assert result.segments == ()
    assert result.combined_text == ""
    assert len(result.failed) == 7


def test_concurrency_never_exceeds_cap():
    backend = FakeBackend(delay=lambda start: 0.005)
    result = run(PaginatedExtractor(backend, FAST), pdf_of_pages(120), 120)
    assert result.succeeded == 8
    assert 1 < backend.max_in_flight <= 4


def test_custom_concurrency_cap():
    backend = FakeBackend(delay=lambda start: 0.005)
    cfg = ExtractionConfig(batch_pause_s=0, max_concurrency=2)
    run(PaginatedExtractor(backend, cfg), pdf_of_pages(120), 120)
    assert backend.max_in_flight <= 2
    assert len(backend.calls) == 8


def test_whole_document_payload_is_sent_every_time():
    seen = []

    class RecordingBackend(FakeBackend):
        async def generate(self, payload, prompt, max_output_tokens):
            seen.append((payload.data_b64, payload.mime_type, max_output_tokens))
            return await super().generate(payload, prompt, max_output_tokens)

    run(PaginatedExtractor(RecordingBackend(), FAST), pdf_of_pages(20), 20)
    assert len(seen) == 7
    assert len({s[0] for s in seen}) == 1
    assert all(s[1] == "application/pdf" and s[2] == 8192 for s in seen)


def test_batches_run_one_after_another_with_pause_between(monkeypatch):
    # 20 pages -> 7 ranges of 3 pages -> batches of 2, 2, 2, 1
    events = []
    real_sleep = asyncio.sleep

    async def recording_sleep(delay, *args, **kwargs):
        if delay == 0.05:
            events.append(("pause", None))
        return await real_sleep(delay, *args, **kwargs)

    class EventBackend(FakeBackend):
        async def generate(self, payload, prompt, max_output_tokens):
            start = int(RANGE_RE.search(prompt).group(1))
            events.append(("start", start))
            try:
                return await super().generate(payload, prompt, max_output_tokens)
            finally:
                events.append(("end", start))

    monkeypatch.setattr(paginated.asyncio, "sleep", recording_sleep)
    cfg = ExtractionConfig(max_concurrency=2, batch_pause_s=0.05)
    backend = EventBackend(delay=lambda start: (20 - start) / 2000)
    result = run(PaginatedExtractor(backend, cfg), pdf_of_pages(20), 20)
    assert result.succeeded == 7

    groups = [[]]
    for kind, start in events:
        if kind == "pause":
            groups.append([])
        else:
            groups[-1].append((kind, start))

    # three pauses, none after the last batch
    assert len(groups) == 4
    assert events[-1][0] != "pause"
    expected_batches = [{1, 4}, {7, 10}, {13, 16}, {19}]
    for group, batch in zip(groups, expected_batches):
        assert {s for kind, s in group if kind == "start"} == batch
        assert {s for kind, s in group if kind == "end"} == batch


def test_single_batch_takes_no_pause(monkeypatch):
    pauses = []
    real_sleep = asyncio.sleep

    async def recording_sleep(delay, *args, **kwargs):
        if delay == 5:
            pauses.append(delay)
        return await real_sleep(0)

    monkeypatch.setattr(paginated.asyncio, "sleep", recording_sleep)
    cfg = ExtractionConfig(max_concurrency=8, batch_pause_s=5)
    result = run(PaginatedExtractor(FakeBackend(), cfg), pdf_of_pages(120), 120)
    assert result.succeeded == 8
    assert pauses == []
