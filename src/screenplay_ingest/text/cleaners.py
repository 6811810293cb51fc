from __future__ import annotations

import re
from typing import List

# Layout noise that extraction backends leave between pages.
_JUNK_LINE_RE = re.compile(
    r"""(
        ^\s*\d+\.?\s*$                      |  # bare page number
        ^\s*\(?CONTINUED\)?:?\s*$           |  # CONTINUED / (CONTINUED)
        ^\s*\(?CONT'D\)?\s*$                |  # CONT'D on its own line
        ^\s*\(?MORE\)?\s*$                     # (MORE) at a page break
    )""",
    re.IGNORECASE | re.VERBOSE,
)


def clean_lines(lines: List[str]) -> List[str]:
    """
    Drop page furniture from extracted screenplay lines.

    Blank lines are kept so the segmenter still sees paragraph breaks;
    only page numbers and continuation markers are removed.
    """
    cleaned: List[str] = []
    for ln in lines:
        if ln.strip() and _JUNK_LINE_RE.search(ln):
            continue
        cleaned.append(ln)
    return cleaned


def clean_screenplay_text(text: str) -> str:
    """
    Normalize raw extracted text before scene segmentation.

    Steps:
      - CRLF / CR line endings become LF.
      - Page numbers and CONTINUED / CONT'D / MORE marker lines are dropped.
      - Runs of four or more newlines collapse to three.
      - Runs of three or more spaces or tabs collapse to two spaces.
      - Leading and trailing whitespace is trimmed.

    Args:
        text: Text as returned by the extraction stage.

    Returns:
        Normalized text. Line structure is otherwise preserved.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = "\n".join(clean_lines(text.split("\n")))
    text = re.sub(r"\n{4,}", "\n\n\n", text)
    text = re.sub(r"[ \t]{3,}", "  ", text)
    return text.strip()
