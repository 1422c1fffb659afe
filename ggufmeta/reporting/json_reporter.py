"""
JSON reporting utilities.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict

from ggufmeta.observability import to_dict


def _json_safe(obj: Any) -> Any:
    # NaN/inf floats are legal GGUF values but not legal JSON
    if isinstance(obj, float) and not math.isfinite(obj):
        return str(obj)
    if isinstance(obj, list):
        return [_json_safe(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    return obj


def to_json_dict(report) -> Dict[str, Any]:
    """Convert AnalysisReport to a JSON-serializable dict."""
    d = to_dict(report)
    for entry in d["metadata"]:
        entry.pop("preview", None)
    return _json_safe(d)


def write_json(report, path: str) -> None:
    """Write report to a file as pretty JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_json_dict(report), f, indent=2)
