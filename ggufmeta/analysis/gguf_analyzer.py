"""
GGUF analyzer: decode the metadata section and check well-known keys.
"""

from __future__ import annotations

import os
from typing import List, Optional

from loguru import logger

from ggufmeta.analysis.base import AnalysisReport, ErrorInfo
from ggufmeta.model_formats.gguf.gguf import GGUFArray, GGUFContainer, GGUFParseError
from ggufmeta.model_formats.gguf.gguf_reader import GGUFReader
from ggufmeta.model_formats.gguf.gguf_rules import validate_known_keys
from ggufmeta.model_formats.gguf.gguf_values import ReaderOptions
from ggufmeta.observability import Timer

AVAILABLE_STAGES: List[str] = ["metadata", "rules"]


def format_value(value, *, max_items: int = 3) -> str:
    """Short human-readable rendering of a metadata value."""
    if isinstance(value, GGUFArray):
        preview = ", ".join(format_value(v, max_items=max_items) for v in value.items[:max_items])
        more = ", ..." if value.count > max_items else ""
        return f"Array[{value.element_type.name}], Count={value.count}, Preview=[{preview}{more}]"
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


class GGUFAnalyzer:
    """Runs the decode and rule stages against one file."""

    def __init__(self, path: str, options: Optional[ReaderOptions] = None):
        self.path = path
        self.options = options
        self.container: Optional[GGUFContainer] = None

    def get_format_name(self) -> str:
        return "gguf"

    def run(self, stages: Optional[List[str]] = None, *, max_items: int = 3) -> AnalysisReport:
        """
        Orchestrates the analysis process.

        Args:
            stages: Stages to run; defaults to all of AVAILABLE_STAGES. Every
                stage needs the decoded container, so "metadata" always runs.
            max_items: Array items shown in value previews.
        """
        stages = stages or AVAILABLE_STAGES
        if "metadata" not in stages:
            stages = ["metadata", *stages]
        report = AnalysisReport(
            file_path=self.path,
            file_size=os.path.getsize(self.path),
            format=self.get_format_name(),
        )

        with Timer("decode") as t:
            try:
                self.container = GGUFReader(self.options).read(self.path)
            except GGUFParseError as e:
                logger.error("Failed to decode {path}: {error}", path=self.path, error=e)
                report.format = "unknown"
                report.error = ErrorInfo(kind=type(e).__name__, message=str(e), offset=e.offset)
                report.add("parse", False, f"{type(e).__name__}: {e}")
                report.stages_run.append("metadata")
                return report
        logger.debug("GGUF metadata decoded in {ms:.2f}ms", ms=t.duration_ms)
        report.stages_run.append("metadata")

        self._fill_metadata(report, max_items=max_items)
        if "rules" in stages:
            self._check_rules(report)
            report.stages_run.append("rules")
        return report

    def _fill_metadata(self, report: AnalysisReport, *, max_items: int) -> None:
        c = self.container
        report.header = {
            "version": c.version,
            "tensor_count": c.tensor_count,
            "metadata_entry_count": c.metadata_entry_count,
            "metadata_end_offset": c.metadata_end_offset,
        }
        for item in c:
            report.metadata.append(
                {
                    "key": item.key,
                    "type": item.type.name,
                    "value": item.to_python(),
                    "preview": format_value(item.value, max_items=max_items),
                    "offset_start": item.offset_start,
                    "offset_end": item.offset_end,
                }
            )
        report.add("structure:magic_version", True, f"GGUF v{c.version}")
        report.add("structure:header", True, "Region: [0, 24)")
        report.add(
            "structure:kv_store",
            True,
            f"Region: [24, {c.metadata_end_offset}) (Count: {c.metadata_entry_count})",
        )
        report.add(
            "structure:metadata_offset_bounds",
            c.metadata_end_offset <= report.file_size,
            f"Region: [0, {c.metadata_end_offset})",
        )

    def _check_rules(self, report: AnalysisReport) -> None:
        for key, ok, details in validate_known_keys(self.container):
            report.add(f"known_keys:{key}", ok, details, key=key)
