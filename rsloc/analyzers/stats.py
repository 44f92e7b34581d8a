"""Per-file statistics: line reduction and the read/parse/classify pipeline."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..logging import get_logger
from ..models import FileStats, LineStats, LineType
from ..syntax import RustParser
from .lines import LineIndex, classify_lines, count_lines
from .sections import find_test_sections, mark_test_lines

logger = get_logger("stats")

_SIZE_UNITS = {
    "KB": 1024,
    "MB": 1024 * 1024,
    "GB": 1024 * 1024 * 1024,
}


class FileAnalysisError(RuntimeError):
    """Raised when a single file cannot be analyzed."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(message)
        self.path = str(path)


class FileTooLargeError(FileAnalysisError):
    """Raised when a file is larger than the configured size limit."""

    def __init__(self, path: Path | str, size: int, limit: int) -> None:
        super().__init__(
            path,
            f"File '{path}' exceeds maximum size limit ({size} bytes > {limit} bytes). "
            "Consider increasing --max-file-size or excluding this file.",
        )
        self.size = size
        self.limit = limit


@dataclass(frozen=True)
class FileBreakdown:
    """Per-line view of a file: text, category and test membership."""

    lines: List[str]
    line_types: List[LineType]
    test_mask: List[bool]


def compute_line_stats(line_types: Sequence[LineType]) -> LineStats:
    counts = Counter(line_types)
    return LineStats(
        all_lines=len(line_types),
        blank_lines=counts[LineType.BLANK],
        comment_lines=counts[LineType.COMMENT],
        doc_lines=counts[LineType.DOC],
        code_lines=counts[LineType.CODE],
    )


def reduce_lines(
    path: str, line_types: Sequence[LineType], test_mask: Sequence[bool]
) -> FileStats:
    """Fold per-line categories and test flags into total/production/test counts."""
    if len(line_types) != len(test_mask):
        raise ValueError(
            f"Line categories and test flags differ in length ({len(line_types)} != {len(test_mask)})"
        )
    production = [kind for kind, is_test in zip(line_types, test_mask) if not is_test]
    test = [kind for kind, is_test in zip(line_types, test_mask) if is_test]
    return FileStats(
        path=path,
        total=compute_line_stats(line_types),
        production=compute_line_stats(production),
        test=compute_line_stats(test),
    )


def parse_file_size(value: str) -> int:
    """Parse sizes such as ``1000``, ``3.5KB``, ``10MB`` or ``1.1GB`` into bytes."""
    text = value.strip()
    upper = text.upper()
    position = next((i for i, char in enumerate(upper) if char.isalpha()), None)
    multiplier = 1
    number_text = text
    if position is not None:
        unit = upper[position:].strip()
        if unit not in _SIZE_UNITS:
            raise ValueError(
                f"Invalid size unit: '{text[position:]}'. Supported units: KB, MB, GB"
            )
        multiplier = _SIZE_UNITS[unit]
        number_text = text[:position]
    try:
        number = float(number_text.strip())
    except ValueError:
        raise ValueError(f"Invalid size number: '{number_text}'") from None
    if number < 0:
        raise ValueError("File size cannot be negative")
    size = number * multiplier
    if not math.isfinite(size):
        raise ValueError(f"Size is too large: '{text}'")
    return int(size)


class FileAnalyzer:
    """Runs the read -> parse -> classify -> reduce pipeline for single files.

    Instances hold no per-file state, so one analyzer can be shared by every
    worker thread.
    """

    def __init__(self, parser: RustParser | None = None) -> None:
        self.parser = parser or RustParser()

    def analyze_file(self, path: Path, max_file_size: Optional[int] = None) -> FileStats:
        logger.debug("Analyzing file: %s", path)
        source = self.read_source(path, max_file_size)
        return self.analyze_source(str(path), source)

    def analyze_source(self, path: str, source: bytes) -> FileStats:
        if count_lines(source) == 0:
            logger.debug("Empty file: %s", path)
            return FileStats(path=path)

        breakdown = self.inspect_source(source)
        stats = reduce_lines(path, breakdown.line_types, breakdown.test_mask)
        logger.debug(
            "File %s: total=%d, prod=%d, test=%d",
            path,
            stats.total.all_lines,
            stats.production.all_lines,
            stats.test.all_lines,
        )
        return stats

    def inspect_source(self, source: bytes) -> FileBreakdown:
        index = LineIndex(source)
        if index.line_count == 0:
            return FileBreakdown(lines=[], line_types=[], test_mask=[])
        tree = self.parser.parse(source)
        line_types = classify_lines(source, tree, index)
        sections = find_test_sections(tree, index)
        test_mask = mark_test_lines(sections, index.line_count)
        lines = [line.rstrip("\r") for line in source.decode("utf-8").split("\n")]
        return FileBreakdown(
            lines=lines[: index.line_count],
            line_types=line_types,
            test_mask=test_mask,
        )

    def read_source(self, path: Path, max_file_size: Optional[int] = None) -> bytes:
        """Read a file as UTF-8 checked bytes, enforcing the optional size limit."""
        if max_file_size is not None:
            try:
                size = path.stat().st_size
            except OSError as exc:
                raise FileAnalysisError(
                    path,
                    f"Failed to get metadata for '{path}': {exc}. "
                    "File may not exist or be inaccessible.",
                ) from exc
            if size > max_file_size:
                logger.debug(
                    "Skipping file %s (size: %d bytes exceeds limit: %d bytes)",
                    path,
                    size,
                    max_file_size,
                )
                raise FileTooLargeError(path, size, max_file_size)

        try:
            source = path.read_bytes()
            source.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileAnalysisError(
                path,
                f"Failed to read file '{path}': {exc}. "
                "Ensure the file exists, is readable, and is valid UTF-8.",
            ) from exc
        return source


__all__ = [
    "FileAnalysisError",
    "FileAnalyzer",
    "FileBreakdown",
    "FileTooLargeError",
    "compute_line_stats",
    "parse_file_size",
    "reduce_lines",
]
