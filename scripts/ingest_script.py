#!/usr/bin/env python
import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from screenplay_ingest.extraction.config import ExtractionConfig
from screenplay_ingest.extraction.document import Document
from screenplay_ingest.extraction.errors import ExtractionFailure
from screenplay_ingest.io.jsonio import write_breakdown
from screenplay_ingest.pipeline.ingest import ingest_document


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line entry point: screenplay file -> scene breakdown JSON.

    This script is intentionally thin: all the real work happens in
    screenplay_ingest.pipeline.ingest.ingest_document().
    """
    ap = argparse.ArgumentParser(description="Extract and segment a screenplay into scenes.")
    ap.add_argument("--input", required=True, help="Path to the screenplay (PDF, TXT or Fountain).")
    ap.add_argument("--out", required=True, help="Path to the output scenes JSON file.")
    ap.add_argument("--mime_type", default=None, help="Override the MIME type guessed from the extension.")
    ap.add_argument(
        "--model",
        default=os.environ.get("OPENAI_MODEL", "gpt-4o-mini"),
        help="OpenAI model used for paginated remote extraction.",
    )
    ap.add_argument("--local_min_chars", type=int, default=100)
    ap.add_argument("--remote_min_chars", type=int, default=50_000)
    ap.add_argument("--max_concurrency", type=int, default=4)
    ap.add_argument(
        "--stage_order",
        default="local,remote-paginated",
        help="Comma-separated extraction strategies, tried in order.",
    )
    ap.add_argument("--no_clean", action="store_true", help="Skip text normalization before segmentation.")
    ap.add_argument("--timeout", type=float, default=None, help="Abandon extraction after this many seconds.")
    ap.add_argument("-v", "--verbose", action="store_true")

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    stage_order = tuple(x.strip() for x in args.stage_order.split(",") if x.strip())
    config = ExtractionConfig.from_env(
        model=args.model,
        local_min_chars=args.local_min_chars,
        remote_min_chars=args.remote_min_chars,
        max_concurrency=args.max_concurrency,
        stage_order=stage_order,
        show_progress=True,
    )
    document = Document.from_path(args.input, mime_type=args.mime_type)

    print(f"[phase] ingest {document.filename} ({document.size} bytes)...", flush=True)
    coro = ingest_document(document, config, clean=not args.no_clean)
    if args.timeout:
        coro = asyncio.wait_for(coro, timeout=args.timeout)
    try:
        breakdown = asyncio.run(coro)
    except ExtractionFailure as exc:
        print(f"[error] {exc.kind}: {exc}", file=sys.stderr, flush=True)
        return 2
    except asyncio.TimeoutError:
        print(f"[error] extraction timed out after {args.timeout}s", file=sys.stderr, flush=True)
        return 3

    for w in breakdown.warnings:
        print(f"[warn] {w}", flush=True)
    write_breakdown(args.out, breakdown)
    print(
        f"[ok] method={breakdown.extraction_method} scenes={breakdown.total_scenes} "
        f"minutes={breakdown.estimated_duration} -> {args.out}",
        flush=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
