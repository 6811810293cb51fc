import asyncio
import re

RANGE_RE = re.compile(r"pages (\d+) to (\d+)")


class FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


class FakePDF:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def make_pdf_open(*page_texts):
    def _open(_fp):
        return FakePDF([FakePage(t) for t in page_texts])
    return _open


def page_text(start, end, width=150):
    """Deterministic filler that identifies its page range."""
    body = f"<pages {start}-{end}> " + "x" * width
    return body


class FakeBackend:
    """
    In-memory document-to-text backend.

    fail: set of start pages whose request raises
    short: set of start pages that come back with too little text
    delay: callable(start) -> seconds to sleep before answering
    """

    def __init__(self, fail=(), short=(), delay=None, width=150):
        self.fail = set(fail)
        self.short = set(short)
        self.delay = delay
        self.width = width
        self.calls = []
        self.completion_order = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate(self, payload, prompt, max_output_tokens):
        start, end = (int(x) for x in RANGE_RE.search(prompt).groups())
        self.calls.append((start, end))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay(start) if self.delay else 0)
            if start in self.fail:
                raise RuntimeError("upstream 503")
            self.completion_order.append(start)
            if start in self.short:
                return "too short"
            return page_text(start, end, self.width)
        finally:
            self.in_flight -= 1
