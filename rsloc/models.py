"""Core data models shared across rsloc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class LineType(Enum):
    """Category assigned to a single source line."""

    BLANK = "blank"
    COMMENT = "comment"
    DOC = "doc"
    CODE = "code"


_LINE_STATS_KEYS: Tuple[Tuple[str, str], ...] = (
    ("all_lines", "all-lines"),
    ("blank_lines", "blank-lines"),
    ("comment_lines", "comment-lines"),
    ("doc_lines", "doc-lines"),
    ("code_lines", "code-lines"),
)


@dataclass(frozen=True)
class LineStats:
    """Line counts for one scope (a whole file, its production or its test part)."""

    all_lines: int = 0
    blank_lines: int = 0
    comment_lines: int = 0
    doc_lines: int = 0
    code_lines: int = 0

    def __add__(self, other: LineStats) -> LineStats:
        if not isinstance(other, LineStats):
            return NotImplemented
        return LineStats(
            all_lines=self.all_lines + other.all_lines,
            blank_lines=self.blank_lines + other.blank_lines,
            comment_lines=self.comment_lines + other.comment_lines,
            doc_lines=self.doc_lines + other.doc_lines,
            code_lines=self.code_lines + other.code_lines,
        )

    def to_dict(self) -> Dict[str, int]:
        return {key: getattr(self, attr) for attr, key in _LINE_STATS_KEYS}

    @classmethod
    def from_dict(cls, payload: object) -> Optional[LineStats]:
        if not isinstance(payload, Mapping):
            return None
        values: Dict[str, int] = {}
        for attr, key in _LINE_STATS_KEYS:
            value = payload.get(key)
            if not _is_count(value):
                return None
            values[attr] = value
        return cls(**values)


@dataclass(frozen=True)
class FileStats:
    """Statistics for one file, split into production and test code."""

    path: str
    total: LineStats = field(default_factory=LineStats)
    production: LineStats = field(default_factory=LineStats)
    test: LineStats = field(default_factory=LineStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "total": self.total.to_dict(),
            "production": self.production.to_dict(),
            "test": self.test.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: object) -> Optional[FileStats]:
        if not isinstance(payload, Mapping):
            return None
        path = payload.get("path")
        if not isinstance(path, str):
            return None
        parts = _scopes_from_dict(payload)
        if parts is None:
            return None
        total, production, test = parts
        return cls(path=path, total=total, production=production, test=test)


@dataclass(frozen=True)
class Summary:
    """Aggregate statistics across every file added so far."""

    files: int = 0
    total: LineStats = field(default_factory=LineStats)
    production: LineStats = field(default_factory=LineStats)
    test: LineStats = field(default_factory=LineStats)

    def add_file(self, file_stats: FileStats) -> Summary:
        """Return a new summary that also covers ``file_stats``."""
        return Summary(
            files=self.files + 1,
            total=self.total + file_stats.total,
            production=self.production + file_stats.production,
            test=self.test + file_stats.test,
        )

    def merge(self, other: Summary) -> Summary:
        return Summary(
            files=self.files + other.files,
            total=self.total + other.total,
            production=self.production + other.production,
            test=self.test + other.test,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": self.files,
            "total": self.total.to_dict(),
            "production": self.production.to_dict(),
            "test": self.test.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: object) -> Optional[Summary]:
        if not isinstance(payload, Mapping):
            return None
        files = payload.get("files")
        if not _is_count(files):
            return None
        parts = _scopes_from_dict(payload)
        if parts is None:
            return None
        total, production, test = parts
        return cls(files=files, total=total, production=production, test=test)


@dataclass(frozen=True)
class Report:
    """Top-level artifact handed to renderers."""

    summary: Summary
    files: Tuple[FileStats, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "files": [file.to_dict() for file in self.files],
        }

    @classmethod
    def from_dict(cls, payload: object) -> Optional[Report]:
        if not isinstance(payload, Mapping):
            return None
        summary = Summary.from_dict(payload.get("summary"))
        raw_files = payload.get("files")
        if summary is None or not isinstance(raw_files, list):
            return None
        files = []
        for raw in raw_files:
            file_stats = FileStats.from_dict(raw)
            if file_stats is None:
                return None
            files.append(file_stats)
        return cls(summary=summary, files=tuple(files))


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _scopes_from_dict(
    payload: Mapping[str, Any]
) -> Optional[Tuple[LineStats, LineStats, LineStats]]:
    total = LineStats.from_dict(payload.get("total"))
    production = LineStats.from_dict(payload.get("production"))
    test = LineStats.from_dict(payload.get("test"))
    if total is None or production is None or test is None:
        return None
    return total, production, test


__all__ = ["FileStats", "LineStats", "LineType", "Report", "Summary"]
