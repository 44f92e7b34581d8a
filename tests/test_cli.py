"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from rsloc.cli import _build_parser, main
from tests._fixtures.source_builder import SourceBuilder

_LIB = """
/// Doubles a value.
pub fn double(x: u32) -> u32 {
    x * 2
}

#[cfg(test)]
mod tests {
    #[test]
    fn doubles() {
        assert_eq!(super::double(2), 4);
    }
}
"""


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["debug", "src", "-v"])
    assert args.verbose is True
    assert args.command == "debug"
    assert args.path == "src"


def test_cli_parses_analyze_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        [
            "analyze",
            "crate",
            "--json",
            "--max-file-size",
            "10MB",
            "--workers",
            "3",
            "--accumulator",
            "memory",
        ]
    )
    assert args.output == "json"
    assert args.max_file_size == 10 * 1024 * 1024
    assert args.workers == 3
    assert args.accumulator == "memory"


def test_cli_rejects_conflicting_output_flags() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["analyze", "--json", "--text"])


@pytest.mark.parametrize(
    "argv",
    [
        ["analyze", "--max-file-size", "1TB"],
        ["analyze", "--max-file-size", "9" * 400],
        ["analyze", "--workers", "0"],
        ["analyze", "--accumulator", "database"],
    ],
)
def test_cli_rejects_invalid_option_values(argv: list[str]) -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(argv)


def test_analyze_prints_text_report(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB})

    main(["analyze", str(source_builder.path())])

    out = capsys.readouterr().out
    assert out.startswith("Summary:\n  Files: 1\n")
    assert f"  {source_builder.path() / 'src' / 'lib.rs'}:" in out


def test_analyze_prints_json_report(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB})

    main(["analyze", str(source_builder.path()), "--json", "--accumulator", "memory"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"]["files"] == 1
    assert payload["summary"]["total"]["all-lines"] == 12
    assert payload["summary"]["production"]["all-lines"] == 5
    assert payload["summary"]["test"]["all-lines"] == 7


def test_analyze_reads_output_format_from_config(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB, ".rsloc.yml": "output: json\n"})

    main(["analyze", str(source_builder.path())])

    assert json.loads(capsys.readouterr().out)["summary"]["files"] == 1


def test_cli_flags_override_config(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB, ".rsloc.yml": "output: json\n"})

    main(["analyze", str(source_builder.path()), "--text"])

    assert capsys.readouterr().out.startswith("Summary:")


def test_analyze_single_file(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    (path,) = source_builder.write({"main.rs": "fn main() {}\n"})

    main(["analyze", str(path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["files"][0]["path"] == str(path)


def test_analyze_without_rust_files_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "No Rust files found" in capsys.readouterr().err


def test_analyze_all_oversized_exits_with_error(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB})

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(source_builder.path()), "--max-file-size", "10"])

    assert excinfo.value.code == 1
    assert "could be analyzed" in capsys.readouterr().err


def test_missing_path_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "nowhere")])

    assert excinfo.value.code == 1
    assert "Path not found" in capsys.readouterr().err


def test_missing_explicit_config_exits_with_error(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB})

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(source_builder.path()), "--config", "absent.yml"])

    assert excinfo.value.code == 1
    assert "Configuration file not found" in capsys.readouterr().err


def test_debug_prints_tagged_lines(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    (path,) = source_builder.write({"src/lib.rs": _LIB})

    main(["debug", str(path), "--no-color"])

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == f"{path}:"
    assert lines[1] == "PD  /// Doubles a value."
    assert lines[2] == "PC  pub fn double(x: u32) -> u32 {"
    assert lines[5] == "PB  "
    assert lines[6] == "TC  #[cfg(test)]"
    assert lines[-1] == "TC  }"


def test_debug_directory_skips_unreadable_files(
    source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB})
    (source_builder.path() / "src" / "bad.rs").write_bytes(b"\xff\n")

    main(["debug", str(source_builder.path()), "--no-color"])

    captured = capsys.readouterr()
    assert "TC  }" in captured.out
    assert "bad.rs" in captured.err


def test_log_file_receives_debug_records(
    source_builder: SourceBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source_builder.write({"src/lib.rs": _LIB})
    log_file = tmp_path / "rsloc.log"

    main(["analyze", str(source_builder.path()), "--verbose", "--log-file", str(log_file)])

    capsys.readouterr()
    assert "Analyzing file" in log_file.read_text(encoding="utf-8")
