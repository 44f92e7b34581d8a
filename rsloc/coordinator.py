"""Concurrent analysis of many source files into a single accumulator."""

from __future__ import annotations

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from .analyzers.stats import FileAnalysisError, FileAnalyzer, FileTooLargeError
from .logging import get_logger
from .scanner import SourceScanner
from .stores.base import StatsAccumulator


class CoordinatorError(RuntimeError):
    """Base class for batch-level failures."""


class NoCandidatesError(CoordinatorError):
    """Raised before any work when there is nothing to analyze."""


class NothingAnalyzedError(CoordinatorError):
    """Raised when every candidate was skipped or failed."""

    def __init__(self, message: str, outcome: RunOutcome) -> None:
        super().__init__(message)
        self.outcome = outcome


@dataclass(frozen=True)
class RunOutcome:
    """Per-batch bookkeeping of what happened to each candidate."""

    analyzed: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def candidates(self) -> int:
        return self.analyzed + self.skipped + self.failed


class _Status(Enum):
    ANALYZED = "analyzed"
    SKIPPED = "skipped"
    FAILED = "failed"


class DirectoryCoordinator:
    """Analyzes candidate files in parallel and feeds one accumulator.

    Reading, parsing and classifying run concurrently on a thread pool; only
    the hand-off to the accumulator is serialised behind a lock.
    """

    def __init__(
        self,
        analyzer: FileAnalyzer | None = None,
        *,
        workers: Optional[int] = None,
        max_file_size: Optional[int] = None,
    ) -> None:
        self.analyzer = analyzer or FileAnalyzer()
        self.workers = workers
        self.max_file_size = max_file_size
        self.logger = get_logger("coordinator")

    def run(
        self,
        candidates: Sequence[Path | str],
        accumulator: StatsAccumulator,
        *,
        description: str | None = None,
    ) -> RunOutcome:
        """Analyze every candidate and add the results to ``accumulator``."""
        where = f" in {description}" if description else ""
        paths = [Path(candidate) for candidate in candidates]
        if not paths:
            raise NoCandidatesError(f"No Rust files found{where}")

        self.logger.debug("Analyzing %d candidate files%s", len(paths), where)
        lock = threading.Lock()
        counts: Counter[_Status] = Counter()
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="rsloc") as executor:
            futures = [
                executor.submit(self._process, path, accumulator, lock) for path in paths
            ]
            try:
                for future in as_completed(futures):
                    counts[future.result()] += 1
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        outcome = RunOutcome(
            analyzed=counts[_Status.ANALYZED],
            skipped=counts[_Status.SKIPPED],
            failed=counts[_Status.FAILED],
        )
        self.logger.debug(
            "Analyzed %d files%s (skipped %d files exceeding size limit, %d failed)",
            outcome.analyzed,
            where,
            outcome.skipped,
            outcome.failed,
        )
        if outcome.analyzed == 0:
            raise NothingAnalyzedError(
                f"No Rust files could be analyzed{where} "
                f"({outcome.skipped} skipped, {outcome.failed} failed)",
                outcome,
            )
        return outcome

    def analyze_directory(
        self,
        root: Path | str,
        accumulator: StatsAccumulator,
        *,
        exclude_paths: Sequence[str] = (),
        follow_links: bool = True,
    ) -> RunOutcome:
        """Discover the Rust files below ``root`` and analyze them."""
        scanner = SourceScanner(exclude_paths, follow_links=follow_links)
        candidates = scanner.scan(root)
        self.logger.debug("Scanner discovered %d files in %s", len(candidates), root)
        return self.run(candidates, accumulator, description=str(root))

    def analyze_path(
        self,
        path: Path | str,
        accumulator: StatsAccumulator,
        *,
        exclude_paths: Sequence[str] = (),
        follow_links: bool = True,
    ) -> RunOutcome:
        """Analyze a single file directly or a whole directory tree."""
        target = Path(path)
        if target.is_dir():
            return self.analyze_directory(
                target, accumulator, exclude_paths=exclude_paths, follow_links=follow_links
            )
        stats = self.analyzer.analyze_file(target, self.max_file_size)
        accumulator.add_file(stats)
        return RunOutcome(analyzed=1)

    def _process(
        self, path: Path, accumulator: StatsAccumulator, lock: threading.Lock
    ) -> _Status:
        try:
            stats = self.analyzer.analyze_file(path, self.max_file_size)
        except FileTooLargeError as exc:
            self.logger.debug("Skipped: %s", exc)
            return _Status.SKIPPED
        except FileAnalysisError as exc:
            self.logger.warning("%s", exc)
            return _Status.FAILED
        except Exception as exc:
            self.logger.warning("Failed to analyze %s: %s", path, exc)
            return _Status.FAILED

        with lock:
            accumulator.add_file(stats)
        return _Status.ANALYZED


__all__ = [
    "CoordinatorError",
    "DirectoryCoordinator",
    "NoCandidatesError",
    "NothingAnalyzedError",
    "RunOutcome",
]
