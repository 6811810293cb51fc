"""
jsonio.py

Scene breakdowns on disk. The JSON is written to a sibling ".tmp" file and
moved into place, so a dashboard polling the output path never reads a
half-written breakdown. Character names keep their accents (JOSÉ, ZOË).
"""
import json
import os
from typing import Any, Dict

from screenplay_ingest.pipeline.ingest import ScriptBreakdown, breakdown_to_dict


def safe_write_json(path: str, obj: Dict[str, Any]) -> None:
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def write_breakdown(path: str, breakdown: ScriptBreakdown) -> Dict[str, Any]:
    """Serialize a breakdown to `path`; returns the dict that was written."""
    data = breakdown_to_dict(breakdown)
    safe_write_json(path, data)
    return data
