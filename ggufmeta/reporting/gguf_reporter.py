"""
GGUF-specific console reporting functions.
"""
from __future__ import annotations

from collections import defaultdict
from typing import List

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ggufmeta.analysis.base import AnalysisReport, Finding

console = Console()


def _status(ok: bool) -> str:
    return "[green]PASS[/green]" if ok else "[bold red]FAIL[/bold red]"


def _render_summary(rep: AnalysisReport) -> None:
    """Render a high-level summary table."""
    t = Table(title="GGUF Metadata Summary", box=box.SIMPLE_HEAVY)
    t.add_column("Field", style="bold")
    t.add_column("Value")
    t.add_row("Path", escape(rep.file_path))
    t.add_row("Size (bytes)", str(rep.file_size))
    t.add_row("Format", rep.format)
    for k, v in rep.header.items():
        t.add_row(k.replace("_", " ").title(), str(v))
    console.print(t)


def _render_metadata_table(rep: AnalysisReport) -> None:
    """Metadata entries in file order."""
    table = Table(
        title="Metadata Key-Value Store", box=box.ROUNDED, show_lines=False, title_style="bold magenta"
    )
    table.add_column("Index", justify="right", style="dim")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type", style="yellow")
    table.add_column("Value", style="white")
    table.add_column("Bytes", justify="right", style="dim")

    for index, entry in enumerate(rep.metadata, start=1):
        value_str = entry["preview"]
        # Truncate long strings to keep the table clean
        if len(value_str) > 70:
            value_str = value_str[:67] + "..."
        table.add_row(
            str(index),
            escape(entry["key"]),
            entry["type"],
            escape(value_str),
            f"{entry['offset_start']}-{entry['offset_end']}",
        )

    console.print(table)


def _render_generic_table(title: str, findings: List[Finding]) -> None:
    """Generic renderer for finding groups."""
    table = Table(title=title, box=box.ROUNDED, show_lines=False, title_style="bold magenta")
    table.add_column("Status", justify="center", width=8)
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Details", style="white")

    for f in findings:
        check_name = f.name.split(":", 1)[-1]
        table.add_row(_status(f.ok), escape(check_name), escape(f.details))

    console.print(table)


def _render_error(rep: AnalysisReport) -> None:
    if rep.error is None:
        return
    offset = f" at offset {rep.error.offset}" if rep.error.offset is not None else ""
    console.print(f"[bold red]{rep.error.kind}[/bold red]{offset}: {escape(rep.error.message)}")


def render_report(rep: AnalysisReport) -> None:
    """Renders the full console report for a GGUF file."""
    _render_summary(rep)
    _render_error(rep)

    groups = defaultdict(list)
    for f in rep.findings:
        if ":" in f.name:
            groups[f.name.split(":", 1)[0]].append(f)

    if "structure" in groups:
        _render_generic_table("Structural Checks", groups["structure"])
    if rep.metadata:
        _render_metadata_table(rep)
    if "known_keys" in groups:
        _render_generic_table("Known Key Checks", groups["known_keys"])
