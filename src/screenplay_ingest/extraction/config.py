from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from screenplay_ingest.extraction.document import METHOD_LOCAL, METHOD_REMOTE_PAGINATED

DEFAULT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Everything the extraction stages need, passed in at construction.

    Algorithm code never reads the environment; use from_env() at the edge.

    api_key: credential for the remote backend; None disables that stage
    model: remote model name
    max_output_tokens: output budget per remote request
    local_min_chars: local text is accepted when strictly longer than this
    remote_min_chars: combined paginated text is accepted when strictly longer
    segment_min_chars: a segment at or below this length is dropped
    bytes_per_page: page-count heuristic for the paginated stage
    target_segments: aim for roughly this many page ranges
    max_segment_pages: upper bound on pages per range
    max_concurrency: in-flight segment requests (also the batch size)
    batch_pause_s: fixed pause between batches
    stage_order: strategies in the order they are tried
    show_progress: draw a tqdm bar over segment requests
    """
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_output_tokens: int = 8192
    local_min_chars: int = 100
    remote_min_chars: int = 50_000
    segment_min_chars: int = 100
    bytes_per_page: int = 2000
    target_segments: int = 8
    max_segment_pages: int = 15
    max_concurrency: int = 4
    batch_pause_s: float = 0.2
    stage_order: Tuple[str, ...] = (METHOD_LOCAL, METHOD_REMOTE_PAGINATED)
    show_progress: bool = False

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if self.bytes_per_page < 1:
            raise ValueError("bytes_per_page must be >= 1")
        unknown = set(self.stage_order) - {METHOD_LOCAL, METHOD_REMOTE_PAGINATED}
        if unknown:
            raise ValueError(f"unknown extraction stages: {sorted(unknown)}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ExtractionConfig":
        env = os.environ if environ is None else environ
        values = {
            "api_key": env.get("OPENAI_API_KEY") or None,
            "model": env.get("OPENAI_MODEL", DEFAULT_MODEL),
        }
        values.update(overrides)
        return cls(**values)
