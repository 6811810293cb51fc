"""
segmenter.py

This module turns plain screenplay text into an ordered list of Scene records.

High-level purpose
------------------
Given the text produced by the extraction stage, this module:

1) Scans the text once, line by line
2) Opens a scene on every recognized heading (see patterns.HEADING_MATCHERS),
   or on a FADE IN / FADE OUT cue if no scene has been opened yet
3) Collects the raw content of each scene and the character cues inside it
4) Estimates page ranges with a fixed 55-lines-per-page model

Scanner states
--------------
    NoOpenScene        blank lines and unrecognized lines are ignored
    AccumulatingScene  every line lands in the open scene's content;
                       a new heading closes it and opens the next one

Duration, description and tag are NOT computed here; classifier.py does that
in a separate pass over the finished list.

The output is purely structural and deterministic: the same text always
yields the same scenes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from screenplay_ingest.text.patterns import (
    UNKNOWN_LOCATION,
    UNSPECIFIED,
    HeadingMatch,
    is_transition,
    is_valid_character_name,
    match_character_cue,
    match_heading,
)

LINES_PER_PAGE = 55

TAG_ACTION = "Action"
TAG_DIALOGUE = "Dialogue"
TAG_MONTAGE = "Montage"
TAG_FLASHBACK = "Flashback"
TAG_UNCLASSIFIED = "Unclassified"


@dataclass(frozen=True)
class Scene:
    """
    scene_number: 1-based, contiguous in document order
    heading: the line that opened the scene (heading or transition cue)
    content: heading line plus every following line up to the next heading
    characters: cue names in first-seen order, no duplicates
    page_start / page_end: estimated from line position (55 lines per page)
    duration, description, tag: filled in by classifier.classify_scenes
    """
    scene_number: int
    location: str
    time_of_day: str
    heading: str
    content: str
    characters: Tuple[str, ...]
    page_start: int
    page_end: int
    duration: int = 1
    description: str = ""
    tag: str = TAG_UNCLASSIFIED

    @property
    def scene_id(self) -> str:
        return f"scene_{self.scene_number}"


@dataclass
class _Accumulator:
    scene_number: int
    location: str
    time_of_day: str
    heading: str
    start_line: int
    parts: List[str] = field(default_factory=list)
    characters: List[str] = field(default_factory=list)

    def add_character(self, name: str) -> None:
        if name in self.characters:
            return
        if is_valid_character_name(name):
            self.characters.append(name)

    def close(self, last_line: int) -> Scene:
        last_line = max(last_line, self.start_line)
        return Scene(
            scene_number=self.scene_number,
            location=self.location,
            time_of_day=self.time_of_day,
            heading=self.heading,
            content="".join(self.parts),
            characters=tuple(self.characters),
            page_start=page_for_line(self.start_line),
            page_end=page_for_line(last_line),
        )


def page_for_line(line_index: int) -> int:
    """0-based line index -> 1-based estimated page."""
    return line_index // LINES_PER_PAGE + 1


def _open(number: int, line: str, line_index: int, hit: Optional[HeadingMatch]) -> _Accumulator:
    if hit is None:
        location, time_of_day = UNKNOWN_LOCATION, UNSPECIFIED
    else:
        location, time_of_day = hit.location, hit.time_of_day
    return _Accumulator(
        scene_number=number,
        location=location,
        time_of_day=time_of_day,
        heading=line,
        start_line=line_index,
        parts=[line + "\n"],
    )


def segment_scenes(text: str) -> List[Scene]:
    """
    Split screenplay text into scenes.

    Returns an empty list when no heading (and no leading FADE IN) is found;
    that is a valid outcome, not an error.
    """
    scenes: List[Scene] = []
    cur: Optional[_Accumulator] = None
    lines = text.splitlines()

    for idx, raw in enumerate(lines):
        s = raw.strip()
        if not s:
            if cur is not None:
                cur.parts.append("\n")
            continue

        hit = match_heading(s)
        if hit is not None:
            if cur is not None:
                scenes.append(cur.close(idx - 1))
            cur = _open(len(scenes) + 1, s, idx, hit)
            continue

        if cur is None:
            # only the very first scene may be opened by a transition cue
            if not scenes and is_transition(s):
                cur = _open(1, s, idx, None)
            continue

        cur.parts.append(s + "\n")
        name = match_character_cue(s)
        if name is not None:
            cur.add_character(name)

    if cur is not None:
        scenes.append(cur.close(len(lines) - 1))
    return scenes


def extract_title(text: str, *, max_lines: int = 10) -> Optional[str]:
    """
    Guess the script title from the first non-empty lines.

    A title candidate is an all-caps line of 4..49 characters that is not a
    heading, not a FADE cue and does not start with a digit.
    """
    seen = 0
    for raw in text.splitlines():
        s = raw.strip()
        if not s:
            continue
        seen += 1
        if seen > max_lines:
            break
        if not (3 < len(s) < 50):
            continue
        if s != s.upper() or not any(c.isalpha() for c in s):
            continue
        if "INT." in s or "EXT." in s or "FADE" in s or s[0].isdigit():
            continue
        return s
    return None
