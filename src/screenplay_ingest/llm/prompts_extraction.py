"""
prompts_extraction.py

This module defines the instruction sent to the remote document-to-text
backend for one page range.

Architectural role
------------------
It is the contract between:
    - the paginated extractor, which decides WHICH pages to ask for
    - the remote backend, which receives the whole document every time

Because the backend always sees the full document, the page range has to be
stated explicitly and repeated, and the model must be told not to summarize.
Anything the model adds beyond the raw text ends up inside scene content, so
the prompt asks for raw text only.
"""
from __future__ import annotations


def build_page_range_prompt(start: int, end: int, total_pages: int) -> str:
    """
    Build the extraction instruction for pages start..end (1-based, inclusive).

    Args:
        start: First page of the range.
        end: Last page of the range.
        total_pages: Estimated page count of the whole document, given to the
            model as orientation.

    Returns:
        A single prompt string.
    """
    page_count = end - start + 1
    return (
        f"Extract complete text from pages {start} to {end} of this screenplay document.\n\n"
        "EXTRACTION REQUIREMENTS:\n"
        f"- Extract ALL text from pages {start} through {end} only\n"
        "- Include scene headings, character names, dialogue, and action lines\n"
        "- Keep the original line breaks; put each scene heading and each "
        "character name on its own line\n"
        "- Output raw text content without any analysis, commentary or summary\n"
        f"- This is {page_count} pages of a {total_pages}-page screenplay\n\n"
        f"Extract the complete text from pages {start}-{end}:"
    )
