"""
classifier.py

Heuristic enrichment pass over segmented scenes.

For every scene this computes:
    - tag:         Action / Dialogue / Montage / Flashback / Unclassified
    - description: "Scene at LOCATION[ during TIME]" + a tag-specific suffix
    - duration:    estimated screen minutes (>= 1)

Tagging is a keyword search over the scene content in fixed priority order;
the first rule that fires wins. Scenes are frozen, so enriched copies are
returned and the input list is left untouched.
"""
from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Sequence, Tuple

from screenplay_ingest.text.patterns import UNSPECIFIED
from screenplay_ingest.text.segmenter import (
    TAG_ACTION,
    TAG_DIALOGUE,
    TAG_FLASHBACK,
    TAG_MONTAGE,
    TAG_UNCLASSIFIED,
    Scene,
)

ACTION_KEYWORDS = ("fight", "action", "chase")
DIALOGUE_KEYWORDS = ("dialogue",)
MONTAGE_KEYWORDS = ("montage",)
FLASHBACK_KEYWORDS = ("flashback",)

# each recorded speaker stands in for three lines of dialogue
DIALOGUE_LINES_PER_CHARACTER = 3
MINUTES_PER_DIALOGUE_LINE = 0.5
MINUTES_PER_ACTION_LINE = 1.2


def _contains_any(haystack: str, needles: Sequence[str]) -> bool:
    return any(n in haystack for n in needles)


def _dialogue_suffix(characters: Sequence[str]) -> str:
    if not characters:
        return " - Dialogue scene"
    if len(characters) == 1:
        return f" - Dialogue with {characters[0]}"
    suffix = f" - Dialogue between {characters[0]} and {characters[1]}"
    if len(characters) > 2:
        suffix += f" and {len(characters) - 2} others"
    return suffix


def tag_scene(scene: Scene) -> Tuple[str, str]:
    """Return (tag, description suffix) for one scene."""
    text = scene.content.lower()
    if _contains_any(text, ACTION_KEYWORDS):
        return TAG_ACTION, " - Action sequence"
    if _contains_any(text, DIALOGUE_KEYWORDS) or scene.characters:
        return TAG_DIALOGUE, _dialogue_suffix(scene.characters)
    if _contains_any(text, MONTAGE_KEYWORDS):
        return TAG_MONTAGE, " - Montage sequence"
    if _contains_any(text, FLASHBACK_KEYWORDS):
        return TAG_FLASHBACK, " - Flashback sequence"
    return TAG_UNCLASSIFIED, ""


def describe_scene(scene: Scene, suffix: str) -> str:
    desc = f"Scene at {scene.location}"
    if scene.time_of_day != UNSPECIFIED:
        desc += f" during {scene.time_of_day}"
    return desc + suffix


def estimate_duration(scene: Scene) -> int:
    """
    Estimate screen minutes from content density.

        dialogue_lines = characters * 3
        action_lines   = non-blank content lines - dialogue_lines
        minutes        = round(dialogue_lines * 0.5 + action_lines * 1.2)

    Halves round up. The result is clamped to at least one minute.
    """
    total_lines = sum(1 for ln in scene.content.splitlines() if ln.strip())
    dialogue_lines = len(scene.characters) * DIALOGUE_LINES_PER_CHARACTER
    action_lines = total_lines - dialogue_lines
    minutes = dialogue_lines * MINUTES_PER_DIALOGUE_LINE + action_lines * MINUTES_PER_ACTION_LINE
    return max(1, int(math.floor(minutes + 0.5)))


def classify_scene(scene: Scene) -> Scene:
    tag, suffix = tag_scene(scene)
    return replace(
        scene,
        tag=tag,
        description=describe_scene(scene, suffix),
        duration=estimate_duration(scene),
    )


def classify_scenes(scenes: Sequence[Scene]) -> List[Scene]:
    return [classify_scene(sc) for sc in scenes]
