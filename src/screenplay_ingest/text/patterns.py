"""
patterns.py

Ordered recognizers for screenplay scene headings and character cues.

Every recognizer exposes the same `match(line)` call and returns either a
parsed result or None. Callers iterate the module-level tuples in order and
stop at the first hit, so the order of HEADING_MATCHERS and CUE_MATCHERS is
the tie-break rule:

    HEADING_MATCHERS
        1) INT./EXT. LOCATION - TIME       (hyphen, en dash or em dash)
        2) INT./EXT. LOCATION TIME         (TIME from a fixed vocabulary)
        3) INT./EXT. LOCATION              (bare)
        4) 12. INT./EXT. LOCATION [- TIME] (numbered)
        5) SCENE 12

    CUE_MATCHERS
        1) JOHN
        2) JOHN (O.S.)
        3) JOHN:

Lines are expected to be stripped before matching.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

UNSPECIFIED = "UNSPECIFIED"
UNKNOWN_LOCATION = "UNKNOWN LOCATION"

TIME_KEYWORDS: Tuple[str, ...] = (
    "DAY",
    "NIGHT",
    "MORNING",
    "AFTERNOON",
    "EVENING",
    "DAWN",
    "DUSK",
    "LATER",
    "CONTINUOUS",
    "SAME TIME",
)

RESERVED_TOKENS: Tuple[str, ...] = (
    "INT",
    "EXT",
    "FADE",
    "CUT",
    "DISSOLVE",
    "SCENE",
    "ACT",
    "THE",
    "END",
    "TITLE",
)

_PREFIX = r"(?P<prefix>INT\./EXT\.|EXT\./INT\.|INT\.|EXT\.|INTERIOR|EXTERIOR)"
_DASH = r"[-–—]+"
_TIME = "|".join(re.escape(t) for t in TIME_KEYWORDS)

# Dashes must touch whitespace on at least one side so hyphenated names
# such as MARY-JANE'S stay part of the location.
_SEP = rf"(?:\s+{_DASH}\s*|\s*{_DASH}\s+)"

_DASHED_RE = re.compile(
    rf"^{_PREFIX}\s+(?P<location>.+?){_SEP}(?P<time>[^-–—]+?)$",
    re.IGNORECASE,
)
_SPACED_TIME_RE = re.compile(
    rf"^{_PREFIX}\s+(?P<location>.+?)\s+(?P<time>{_TIME})$",
    re.IGNORECASE,
)
_BARE_RE = re.compile(rf"^{_PREFIX}\s+(?P<location>.+)$", re.IGNORECASE)
_NUMBERED_RE = re.compile(
    rf"^(?P<number>\d{{1,4}}[A-Z]?)[.)]?\s+{_PREFIX}\s+(?P<rest>.+)$",
    re.IGNORECASE,
)
_SCENE_NUMBER_RE = re.compile(r"^SCENE\s+(?P<number>\d+)[.:]?$", re.IGNORECASE)

# Secondary split for a location that still carries its time of day,
# e.g. "KITCHEN, NIGHT" or "KITCHEN -DAY".
_TRAILING_TIME_RE = re.compile(
    rf"^(?P<location>.*?)[\s,.\-–—]+(?P<time>{_TIME})\.?$",
    re.IGNORECASE,
)
_REST_DASHED_RE = re.compile(rf"^(?P<location>.+?){_SEP}(?P<time>[^-–—]+?)$")

TRANSITION_RE = re.compile(r"^FADE\s+(?:IN|OUT)\s*:?\.?$", re.IGNORECASE)

# Any letter, not just ASCII (JOSÉ, ZOË); CueMatcher enforces upper case.
_NAME = r"[^\W\d_](?:[^\W\d_]|[ '.\-])*"
_BARE_CUE_RE = re.compile(rf"^(?P<name>{_NAME})$")
_PAREN_CUE_RE = re.compile(rf"^(?P<name>{_NAME}?)\s*\([^)]*\)$")
_COLON_CUE_RE = re.compile(rf"^(?P<name>{_NAME}?)\s*:$")

MIN_NAME_LEN = 2
MAX_NAME_LEN = 25
MAX_NAME_WORDS = 4


def clean_spaces(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()


def _trim_location(s: str) -> str:
    return clean_spaces(s).rstrip(",;:").strip()


@dataclass(frozen=True)
class HeadingMatch:
    """
    kind: name of the recognizer that fired (for debugging and tests)
    location: location text, never empty
    time_of_day: upper-cased time string or UNSPECIFIED
    label: printed scene number for numbered headings, else None
    """
    kind: str
    location: str
    time_of_day: str
    label: Optional[str] = None


def split_location_time(combined: str) -> Tuple[str, str]:
    """
    Split a location string that may still end in a time of day.

    Tries a dash separator first, then the trailing time-keyword vocabulary.
    Falls back to (combined, UNSPECIFIED).
    """
    combined = clean_spaces(combined)
    m = _REST_DASHED_RE.match(combined)
    if m:
        return _trim_location(m.group("location")), clean_spaces(m.group("time")).upper()
    m = _TRAILING_TIME_RE.match(combined)
    if m and _trim_location(m.group("location")):
        return _trim_location(m.group("location")), m.group("time").upper()
    return combined, UNSPECIFIED


def _strip_trailing_scene_label(rest: str, label: str) -> str:
    r = clean_spaces(rest)
    # shooting scripts repeat the number at the end: "12 INT. HALL - NIGHT 12"
    r = re.sub(rf"\s+{re.escape(label)}\s*$", "", r)
    return r.strip()


class RegexHeadingMatcher:
    """Heading recognizer backed by a single compiled pattern."""

    def __init__(self, kind: str, pattern: Pattern[str], *, secondary_split: bool = False):
        self.kind = kind
        self.pattern = pattern
        self.secondary_split = secondary_split

    def match(self, line: str) -> Optional[HeadingMatch]:
        m = self.pattern.match(line)
        if not m:
            return None
        location = _trim_location(m.group("location"))
        groups = m.groupdict()
        if groups.get("time"):
            time_of_day = clean_spaces(groups["time"]).upper()
        elif self.secondary_split:
            location, time_of_day = split_location_time(location)
        else:
            time_of_day = UNSPECIFIED
        if not location:
            return None
        return HeadingMatch(kind=self.kind, location=location, time_of_day=time_of_day)


class NumberedHeadingMatcher:
    kind = "numbered"

    def match(self, line: str) -> Optional[HeadingMatch]:
        m = _NUMBERED_RE.match(line)
        if not m:
            return None
        label = m.group("number")
        rest = _strip_trailing_scene_label(m.group("rest"), label)
        location, time_of_day = split_location_time(rest)
        if not location:
            return None
        return HeadingMatch(kind=self.kind, location=location, time_of_day=time_of_day, label=label)


class SceneNumberMatcher:
    kind = "scene-number"

    def match(self, line: str) -> Optional[HeadingMatch]:
        m = _SCENE_NUMBER_RE.match(line)
        if not m:
            return None
        return HeadingMatch(
            kind=self.kind,
            location=UNKNOWN_LOCATION,
            time_of_day=UNSPECIFIED,
            label=m.group("number"),
        )


HEADING_MATCHERS = (
    RegexHeadingMatcher("dashed", _DASHED_RE),
    RegexHeadingMatcher("spaced-time", _SPACED_TIME_RE),
    RegexHeadingMatcher("bare", _BARE_RE, secondary_split=True),
    NumberedHeadingMatcher(),
    SceneNumberMatcher(),
)


def match_heading(line: str) -> Optional[HeadingMatch]:
    for matcher in HEADING_MATCHERS:
        hit = matcher.match(line)
        if hit is not None:
            return hit
    return None


def is_transition(line: str) -> bool:
    return bool(TRANSITION_RE.match(line))


class CueMatcher:
    """Character-cue recognizer: returns the candidate name or None."""

    def __init__(self, kind: str, pattern: Pattern[str]):
        self.kind = kind
        self.pattern = pattern

    def match(self, line: str) -> Optional[str]:
        m = self.pattern.match(line)
        if not m:
            return None
        name = clean_spaces(m.group("name"))
        if not name.isupper():
            return None
        return name


CUE_MATCHERS = (
    CueMatcher("bare", _BARE_CUE_RE),
    CueMatcher("parenthetical", _PAREN_CUE_RE),
    CueMatcher("colon", _COLON_CUE_RE),
)


def match_character_cue(line: str) -> Optional[str]:
    for matcher in CUE_MATCHERS:
        name = matcher.match(line)
        if name is not None:
            return name
    return None


def is_valid_character_name(name: str) -> bool:
    """
    Structural filter for a cue candidate (duplicates are checked by the caller).

    Rejects names outside 2..25 characters, names starting with a digit or a
    reserved structural token (INT, FADE, CUT, ...), and anything longer
    than four words.
    """
    if len(name) < MIN_NAME_LEN or len(name) > MAX_NAME_LEN:
        return False
    if name[0].isdigit():
        return False
    if name.upper().startswith(RESERVED_TOKENS):
        return False
    return len(name.split()) <= MAX_NAME_WORDS
