"""Base contract for file-statistics accumulators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Iterator, Optional, Type

from ..models import FileStats, Summary


class AccumulatorError(RuntimeError):
    """Raised when an accumulator cannot store or read back its records."""


class StatsAccumulator(ABC):
    """Collects per-file statistics and keeps a running summary.

    Implementations are not internally synchronised; callers adding records
    from several threads must serialise calls to :meth:`add_file`.
    """

    @abstractmethod
    def add_file(self, file_stats: FileStats) -> None:
        """Record one file and fold it into the running summary."""

    @abstractmethod
    def summary(self) -> Summary:
        """Return the summary of every record added so far."""

    @abstractmethod
    def iter_files(self) -> Iterator[FileStats]:
        """Return a fresh iterator over the records in insertion order."""

    def flush(self) -> None:
        """Make every added record visible to :meth:`iter_files`."""

    def close(self) -> None:
        """Release any resources held by the accumulator."""

    def __enter__(self) -> StatsAccumulator:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()
