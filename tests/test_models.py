"""Tests for rsloc.models."""

from __future__ import annotations

import pytest

from rsloc.models import FileStats, LineStats, Report, Summary


def _stats(all_lines: int, blank: int, comment: int, doc: int, code: int) -> LineStats:
    return LineStats(
        all_lines=all_lines,
        blank_lines=blank,
        comment_lines=comment,
        doc_lines=doc,
        code_lines=code,
    )


def _file(path: str, production: LineStats, test: LineStats) -> FileStats:
    return FileStats(path=path, total=production + test, production=production, test=test)


def test_line_stats_default_to_zero() -> None:
    stats = LineStats()

    assert stats.to_dict() == {
        "all-lines": 0,
        "blank-lines": 0,
        "comment-lines": 0,
        "doc-lines": 0,
        "code-lines": 0,
    }


def test_line_stats_addition_is_componentwise() -> None:
    left = _stats(5, 1, 1, 1, 2)
    right = _stats(3, 0, 2, 0, 1)

    assert left + right == _stats(8, 1, 3, 1, 3)


def test_summary_add_file_counts_files_and_lines() -> None:
    summary = Summary()
    first = _file("a.rs", _stats(4, 1, 0, 1, 2), _stats(2, 0, 0, 0, 2))
    second = _file("b.rs", _stats(1, 0, 0, 0, 1), LineStats())

    summary = summary.add_file(first).add_file(second)

    assert summary.files == 2
    assert summary.total == _stats(7, 1, 0, 1, 5)
    assert summary.production == _stats(5, 1, 0, 1, 3)
    assert summary.test == _stats(2, 0, 0, 0, 2)
    assert summary.total == summary.production + summary.test


def test_summary_merge_is_associative_and_commutative() -> None:
    a = Summary().add_file(_file("a.rs", _stats(3, 1, 1, 0, 1), LineStats()))
    b = Summary().add_file(_file("b.rs", LineStats(), _stats(2, 0, 0, 0, 2)))
    c = Summary().add_file(_file("c.rs", _stats(6, 2, 0, 3, 1), _stats(1, 0, 1, 0, 0)))

    assert a.merge(b) == b.merge(a)
    assert a.merge(b).merge(c) == a.merge(b.merge(c))
    assert a.merge(Summary()) == a


def test_file_stats_serialises_with_hyphenated_keys() -> None:
    stats = _file("src/lib.rs", _stats(2, 0, 0, 1, 1), _stats(1, 0, 0, 0, 1))

    payload = stats.to_dict()

    assert payload["path"] == "src/lib.rs"
    assert payload["test"] == {
        "all-lines": 1,
        "blank-lines": 0,
        "comment-lines": 0,
        "doc-lines": 0,
        "code-lines": 1,
    }
    assert FileStats.from_dict(payload) == stats


def test_report_round_trips_through_dict() -> None:
    files = (
        _file("a.rs", _stats(2, 1, 0, 0, 1), LineStats()),
        _file("b.rs", LineStats(), _stats(4, 0, 1, 0, 3)),
    )
    summary = Summary()
    for item in files:
        summary = summary.add_file(item)
    report = Report(summary=summary, files=files)

    assert Report.from_dict(report.to_dict()) == report


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "not a mapping",
        {"path": 3, "total": {}, "production": {}, "test": {}},
        {"path": "a.rs"},
        {
            "path": "a.rs",
            "total": {"all-lines": -1, "blank-lines": 0, "comment-lines": 0, "doc-lines": 0, "code-lines": 0},
            "production": LineStats().to_dict(),
            "test": LineStats().to_dict(),
        },
        {
            "path": "a.rs",
            "total": {"all-lines": True, "blank-lines": 0, "comment-lines": 0, "doc-lines": 0, "code-lines": 0},
            "production": LineStats().to_dict(),
            "test": LineStats().to_dict(),
        },
    ],
)
def test_file_stats_from_dict_rejects_malformed_payloads(payload: object) -> None:
    assert FileStats.from_dict(payload) is None


def test_summary_from_dict_requires_file_count() -> None:
    payload = Summary().to_dict()
    payload["files"] = "three"

    assert Summary.from_dict(payload) is None
