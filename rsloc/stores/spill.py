"""Spill-to-disk accumulator for corpora of unbounded size."""

from __future__ import annotations

import json
import os
import tempfile
import weakref
from pathlib import Path
from typing import IO, Iterator

from ..logging import get_logger
from ..models import FileStats, Summary
from .base import AccumulatorError, StatsAccumulator

logger = get_logger("stores.spill")

BUFFER_SIZE = 8 * 1024 * 1024


class SpillingAccumulator(StatsAccumulator):
    """Streams records to a private JSON-lines temporary file.

    Only the running summary stays in memory. The temporary file is deleted
    when the accumulator is closed, when a ``with`` block using it exits, or
    when the object is garbage collected, whichever happens first. Records
    written since the last :meth:`flush` may still sit in the write buffer
    and are not seen by :meth:`iter_files`.
    """

    def __init__(
        self, directory: str | Path | None = None, *, buffer_size: int = BUFFER_SIZE
    ) -> None:
        try:
            fd, name = tempfile.mkstemp(prefix="rsloc-", suffix=".jsonl", dir=directory)
        except OSError as exc:
            raise AccumulatorError(
                f"Failed to create temporary file for accumulator: {exc}. "
                "Ensure adequate disk space and write permissions in temp directory."
            ) from exc

        path = Path(name)
        try:
            writer = os.fdopen(fd, "w", encoding="utf-8", newline="\n", buffering=buffer_size)
        except OSError as exc:
            os.close(fd)
            path.unlink(missing_ok=True)
            raise AccumulatorError(
                f"Failed to open temporary file '{path}' for writing: {exc}"
            ) from exc

        self._path = path
        self._writer = writer
        self._summary = Summary()
        self._finalizer = weakref.finalize(self, _release, writer, path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def add_file(self, file_stats: FileStats) -> None:
        self._ensure_open()
        try:
            line = json.dumps(file_stats.to_dict(), separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise AccumulatorError(
                f"Failed to serialize file stats for '{file_stats.path}': {exc}"
            ) from exc
        try:
            self._writer.write(line + "\n")
        except OSError as exc:
            raise AccumulatorError(
                f"Failed to write to temporary file '{self._path}': {exc}"
            ) from exc
        self._summary = self._summary.add_file(file_stats)

    def summary(self) -> Summary:
        return self._summary

    def flush(self) -> None:
        self._ensure_open()
        try:
            self._writer.flush()
        except OSError as exc:
            raise AccumulatorError(f"Failed to flush writer: {exc}") from exc

    def iter_files(self) -> Iterator[FileStats]:
        """Check the spill file is readable, then stream its records.

        The read handle is only held while the returned iterator is being
        consumed, so an iterator that is never advanced holds no file.
        """
        self._ensure_open()
        _open_reader(self._path).close()
        return _read_records(self._path)

    def close(self) -> None:
        self._finalizer()

    def _ensure_open(self) -> None:
        if self.closed:
            raise AccumulatorError("Accumulator has already been closed")


def _open_reader(path: Path) -> IO[str]:
    try:
        return path.open("r", encoding="utf-8", errors="replace")
    except OSError as exc:
        raise AccumulatorError(
            f"Failed to open temporary file '{path}' for reading: {exc}"
        ) from exc


def _read_records(path: Path) -> Iterator[FileStats]:
    with _open_reader(path) as handle:
        for number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as exc:
                logger.debug("Failed to deserialize line %d: %s", number, exc)
                continue
            file_stats = FileStats.from_dict(payload)
            if file_stats is None:
                logger.debug("Skipping malformed record on line %d", number)
                continue
            yield file_stats


def _release(writer: IO[str], path: Path) -> None:
    try:
        writer.close()
    except OSError as exc:
        logger.debug("Failed to close temporary file %s: %s", path, exc)
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug("Failed to remove temporary file %s: %s", path, exc)


__all__ = ["BUFFER_SIZE", "SpillingAccumulator"]
