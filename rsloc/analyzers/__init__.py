"""Line classification, test-section detection and per-file statistics."""

from __future__ import annotations

from .lines import LineIndex, classify_lines, count_lines
from .sections import CodeSection, find_test_sections, is_test_node, mark_test_lines
from .stats import (
    FileAnalysisError,
    FileAnalyzer,
    FileBreakdown,
    FileTooLargeError,
    compute_line_stats,
    parse_file_size,
    reduce_lines,
)

__all__ = [
    "CodeSection",
    "FileAnalysisError",
    "FileAnalyzer",
    "FileBreakdown",
    "FileTooLargeError",
    "LineIndex",
    "classify_lines",
    "compute_line_stats",
    "count_lines",
    "find_test_sections",
    "is_test_node",
    "mark_test_lines",
    "parse_file_size",
    "reduce_lines",
]
