"""In-memory accumulator for corpora known to fit in memory."""

from __future__ import annotations

from typing import Iterator, List

from ..models import FileStats, Summary
from .base import StatsAccumulator


class InMemoryAccumulator(StatsAccumulator):
    """Keeps every record in a list."""

    def __init__(self) -> None:
        self._summary = Summary()
        self._files: List[FileStats] = []

    def add_file(self, file_stats: FileStats) -> None:
        self._summary = self._summary.add_file(file_stats)
        self._files.append(file_stats)

    def summary(self) -> Summary:
        return self._summary

    def iter_files(self) -> Iterator[FileStats]:
        return iter(tuple(self._files))

    def __len__(self) -> int:
        return len(self._files)


__all__ = ["InMemoryAccumulator"]
