"""Rendering of accumulated statistics as text, JSON or a per-line listing."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator, List

from .analyzers.stats import FileBreakdown
from .models import LineStats, LineType, Report
from .stores.base import StatsAccumulator

BASE_INDENT = 4
NESTED_INDENT = 6

_TYPE_LETTERS = {
    LineType.BLANK: "B",
    LineType.COMMENT: "M",
    LineType.DOC: "D",
    LineType.CODE: "C",
}

_ANSI_RESET = "\033[0m"
_PREFIX_COLORS = {
    (False, LineType.BLANK): "\033[90m",
    (False, LineType.COMMENT): "\033[32m",
    (False, LineType.DOC): "\033[92m",
    (False, LineType.CODE): "\033[34m",
    (True, LineType.BLANK): "\033[90m",
    (True, LineType.COMMENT): "\033[33m",
    (True, LineType.DOC): "\033[93m",
    (True, LineType.CODE): "\033[35m",
}


def build_report(accumulator: StatsAccumulator) -> Report:
    return Report(summary=accumulator.summary(), files=tuple(accumulator.iter_files()))


def render_json(accumulator: StatsAccumulator) -> str:
    return json.dumps(build_report(accumulator).to_dict(), indent=2)


def format_line_stats(stats: LineStats, indent: int) -> str:
    prefix = " " * indent
    return "\n".join(
        (
            f"{prefix}All lines: {stats.all_lines}",
            f"{prefix}Blank lines: {stats.blank_lines}",
            f"{prefix}Comment lines: {stats.comment_lines}",
            f"{prefix}Doc lines: {stats.doc_lines}",
            f"{prefix}Code lines: {stats.code_lines}",
        )
    )


def iter_text(accumulator: StatsAccumulator) -> Iterator[str]:
    """Yield the text report one block at a time.

    Files are streamed from the accumulator rather than collected first, so
    spilled corpora are never loaded into memory at once.
    """
    summary = accumulator.summary()
    yield "\n".join(
        (
            "Summary:",
            f"  Files: {summary.files}",
            "  Total:",
            format_line_stats(summary.total, BASE_INDENT),
            "  Production:",
            format_line_stats(summary.production, BASE_INDENT),
            "  Test:",
            format_line_stats(summary.test, BASE_INDENT),
            "",
            "Files:",
        )
    )
    for file_stats in accumulator.iter_files():
        yield "\n".join(
            (
                f"  {file_stats.path}:",
                "    Total:",
                format_line_stats(file_stats.total, NESTED_INDENT),
                "    Production:",
                format_line_stats(file_stats.production, NESTED_INDENT),
                "    Test:",
                format_line_stats(file_stats.test, NESTED_INDENT),
            )
        )


def render_text(accumulator: StatsAccumulator) -> str:
    return "\n".join(iter_text(accumulator))


def format_debug_line(line: str, line_type: LineType, is_test: bool, *, color: bool) -> str:
    prefix = ("T" if is_test else "P") + _TYPE_LETTERS[line_type]
    if color:
        prefix = f"{_PREFIX_COLORS[(is_test, line_type)]}{prefix}{_ANSI_RESET}"
    return f"{prefix}  {line}"


def render_debug(path: Path | str, breakdown: FileBreakdown, *, color: bool = True) -> str:
    """List every line of a file prefixed with its production/test tag and category."""
    lines: List[str] = [f"{path}:"]
    for text, line_type, is_test in zip(
        breakdown.lines, breakdown.line_types, breakdown.test_mask
    ):
        lines.append(format_debug_line(text, line_type, is_test, color=color))
    return "\n".join(lines)


__all__ = [
    "build_report",
    "format_debug_line",
    "format_line_stats",
    "iter_text",
    "render_debug",
    "render_json",
    "render_text",
]
