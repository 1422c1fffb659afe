# ggufmeta/cli.py
"""
cli.py

Rich console CLI:
- dump:    decode a .gguf file's header and metadata, print tables and
           known-key checks, optionally write a JSON report.
- version: show the package version.
"""
from __future__ import annotations

import argparse
import os
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from ggufmeta import __version__
from ggufmeta.analysis.gguf_analyzer import AVAILABLE_STAGES, GGUFAnalyzer
from ggufmeta.logging import configure_logging
from ggufmeta.model_formats.gguf.gguf_values import MAX_DEPTH_LIMIT, ReaderOptions
from ggufmeta.reporting import gguf_reporter
from ggufmeta.reporting.json_reporter import write_json

console = Console()


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def _depth(text: str) -> int:
    value = _positive_int(text)
    if value > MAX_DEPTH_LIMIT:
        raise argparse.ArgumentTypeError(f"must be <= {MAX_DEPTH_LIMIT}, got {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ggufmeta",
        description="Decode and inspect the header and metadata section of GGUF model files.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    sub = p.add_subparsers(dest="cmd", title="Available Commands", metavar="<command>")

    sp_dump = sub.add_parser("dump", help="Decode a local .gguf file and print its metadata")
    sp_dump.add_argument("path", help="Path to model file (.gguf)")
    sp_dump.add_argument("--debug", action="store_true", help="Enable debug logging")
    sp_dump.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    sp_dump.add_argument(
        "--json-out", type=str, default=None, help="Write JSON report to this path"
    )
    sp_dump.add_argument(
        "--strict-bool",
        action="store_true",
        help="Reject bool values whose byte is neither 0 nor 1",
    )
    sp_dump.add_argument(
        "--max-depth",
        type=_depth,
        default=ReaderOptions.max_depth,
        help=f"Maximum array nesting depth, 1..{MAX_DEPTH_LIMIT} (default: {ReaderOptions.max_depth})",
    )
    sp_dump.add_argument(
        "--max-items",
        type=_positive_int,
        default=3,
        help="Array items shown in value previews (default: 3)",
    )
    sp_dump.add_argument(
        "--stage",
        nargs="+",
        choices=AVAILABLE_STAGES,
        metavar="STAGE",
        help=(
            f"Run only specific stages. Defaults to all stages if not provided.\n"
            f"Available stages: {', '.join(AVAILABLE_STAGES)}."
        ),
    )

    sub.add_parser("version", help="Show the version of ggufmeta")

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "version":
        console.print(f"ggufmeta version {__version__}")
        return 0

    if args.cmd == "dump":
        configure_logging(debug=args.debug, quiet=args.quiet)
        path = args.path
        if not os.path.isfile(path):
            console.print(f"[red]File not found:[/red] {path}")
            return 2

        options = ReaderOptions(strict_bool=args.strict_bool, max_depth=args.max_depth)
        rep = GGUFAnalyzer(path, options).run(stages=args.stage, max_items=args.max_items)

        console.print(
            Panel(
                f"[bold]Result:[/bold] {'[green]OK[/green]' if rep.ok else '[red]FAILED[/red]'}",
                style="bold cyan",
            )
        )
        gguf_reporter.render_report(rep)

        if args.json_out:
            write_json(rep, args.json_out)
            console.print(f"[dim]Wrote JSON report → {args.json_out}[/dim]")

        return 1 if rep.error is not None else 0

    parser.print_help()
    return 1
