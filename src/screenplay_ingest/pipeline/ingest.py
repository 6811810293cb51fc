"""
ingest.py

End-to-end pipeline from an uploaded screenplay to a scene breakdown.

    document bytes
      -> ExtractionOrchestrator.extract    (local, then paginated remote)
      -> clean_screenplay_text             (optional)
      -> segment_scenes
      -> classify_scenes
      -> ScriptBreakdown

Downstream consumers (dashboards, casting, storyboards) only ever see the
ScriptBreakdown or its dict form from breakdown_to_dict(). Persistence is
their business; nothing here writes to disk.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from screenplay_ingest.extraction.config import ExtractionConfig
from screenplay_ingest.extraction.document import METHOD_FAILED, Document
from screenplay_ingest.extraction.errors import ExtractionFailure
from screenplay_ingest.extraction.orchestrator import ExtractionOrchestrator
from screenplay_ingest.text.classifier import classify_scenes
from screenplay_ingest.text.cleaners import clean_screenplay_text
from screenplay_ingest.text.segmenter import Scene, extract_title, segment_scenes

logger = logging.getLogger(__name__)


@dataclass
class ScriptBreakdown:
    """
    title: guessed from the first lines, or None
    scenes: classified scenes in document order
    total_scenes / estimated_duration: summary figures (minutes)
    extraction_method: local | remote-paginated | failed | text
    error: failure message when extraction_method is "failed"
    """
    title: Optional[str]
    scenes: List[Scene]
    extraction_method: str = "text"
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def total_scenes(self) -> int:
        return len(self.scenes)

    @property
    def estimated_duration(self) -> int:
        return sum(sc.duration for sc in self.scenes)


def analyze_script(text: str, *, clean: bool = True, extraction_method: str = "text") -> ScriptBreakdown:
    """Segment and classify already-extracted screenplay text."""
    if clean:
        text = clean_screenplay_text(text)
    scenes = classify_scenes(segment_scenes(text))
    warnings = []
    if not scenes:
        warnings.append("no scene headings found")
        logger.warning("No scene headings found in %d characters of text", len(text))
    logger.info("Segmented %d scenes", len(scenes))
    return ScriptBreakdown(
        title=extract_title(text),
        scenes=scenes,
        extraction_method=extraction_method,
        warnings=warnings,
    )


async def ingest_document(
    document: Document,
    config: ExtractionConfig,
    *,
    orchestrator: Optional[ExtractionOrchestrator] = None,
    clean: bool = True,
    raise_on_failure: bool = True,
) -> ScriptBreakdown:
    """
    Extract, segment and classify one uploaded document.

    Args:
        document: The uploaded file.
        config: Extraction settings (ignored when `orchestrator` is given).
        orchestrator: Pre-built orchestrator, e.g. with a custom backend.
        clean: Run clean_screenplay_text before segmentation.
        raise_on_failure: When False, an ExtractionFailure is reported as an
            empty breakdown with extraction_method="failed" instead of raised.
    """
    orchestrator = orchestrator or ExtractionOrchestrator(config)
    try:
        extracted = await orchestrator.extract(document)
    except ExtractionFailure as exc:
        if raise_on_failure:
            raise
        logger.error("Extraction failed for %s: %s", document.filename, exc)
        return ScriptBreakdown(title=None, scenes=[], extraction_method=METHOD_FAILED, error=str(exc))
    breakdown = analyze_script(extracted.text, clean=clean, extraction_method=extracted.method)
    for start, end in extracted.segments_failed:
        breakdown.warnings.append(f"pages {start}-{end} could not be extracted")
    return breakdown


def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    return {
        "id": scene.scene_id,
        "sceneNumber": scene.scene_number,
        "location": scene.location,
        "timeOfDay": scene.time_of_day,
        "description": scene.description,
        "characters": list(scene.characters),
        "content": scene.content,
        "pageStart": scene.page_start,
        "pageEnd": scene.page_end,
        "duration": scene.duration,
        "classification": scene.tag,
        # populated by other services
        "vfxNeeds": [],
        "productPlacementOpportunities": [],
    }


def breakdown_to_dict(breakdown: ScriptBreakdown) -> Dict[str, Any]:
    return {
        "title": breakdown.title,
        "extractionMethod": breakdown.extraction_method,
        "totalScenes": breakdown.total_scenes,
        "estimatedDuration": breakdown.estimated_duration,
        "error": breakdown.error,
        "warnings": list(breakdown.warnings),
        "scenes": [scene_to_dict(sc) for sc in breakdown.scenes],
    }
