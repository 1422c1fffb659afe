"""
Base analysis models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Finding:
    """Single check result."""

    name: str
    ok: bool
    details: str = ""
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorInfo:
    """Why the decode failed."""

    kind: str  # exception class name, e.g. "TruncatedError"
    message: str
    offset: Optional[int] = None


@dataclass
class AnalysisReport:
    """Aggregate report for one decoded (or rejected) file."""

    file_path: str
    file_size: int
    format: str  # "gguf" | "unknown"
    header: Dict[str, Any] = field(default_factory=dict)
    metadata: List[Dict[str, Any]] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)
    error: Optional[ErrorInfo] = None
    stages_run: List[str] = field(default_factory=list)

    def add(self, name: str, ok: bool, details: str = "", **context: Any) -> None:
        self.findings.append(Finding(name=name, ok=ok, details=details, context=context))

    @property
    def ok(self) -> bool:
        if self.error is not None:
            return False
        return all(f.ok for f in self.findings) if self.findings else True
