"""CLI entrypoints for rsloc commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from .analyzers.stats import FileAnalysisError, FileAnalyzer, parse_file_size
from .config import OUTPUT_FORMATS, ConfigError, RslocConfig, load_config
from .coordinator import CoordinatorError, DirectoryCoordinator
from .logging import configure_logging, get_logger
from .report import iter_text, render_debug, render_json
from .scanner import SourceScanner
from .stores import ACCUMULATOR_KINDS, AccumulatorError, create_accumulator

logger = get_logger("cli")


def _size_argument(value: str) -> int:
    try:
        return parse_file_size(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Rust file or directory to analyze (defaults to current directory).",
    )
    parser.add_argument(
        "--max-file-size",
        type=_size_argument,
        default=None,
        metavar="SIZE",
        help="Skip files larger than SIZE (bytes, or with a KB/MB/GB unit, e.g. 3.5KB).",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="Path to a .rsloc.yml file (defaults to the one next to PATH).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="FILE",
        help="Also write log records to FILE.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rsloc",
        description="Count blank, comment, doc and code lines of Rust sources, "
        "split into production and test code.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Report line statistics for a file or a directory tree.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_common_options(analyze_parser)
    output_group = analyze_parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--json",
        dest="output",
        action="store_const",
        const="json",
        help="Print the report as JSON.",
    )
    output_group.add_argument(
        "--text",
        dest="output",
        action="store_const",
        const="text",
        help="Print the report as indented text (default).",
    )
    analyze_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of worker threads used to analyze files.",
    )
    analyze_parser.add_argument(
        "--accumulator",
        choices=ACCUMULATOR_KINDS,
        default=None,
        help="Keep per-file results in memory or spill them to a temporary file.",
    )

    debug_parser = subparsers.add_parser(
        "debug",
        help="Print every line tagged with its production/test scope and category.",
    )
    _add_verbose_option(debug_parser, suppress_default=True)
    _add_common_options(debug_parser)
    debug_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors in the line tags.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for rsloc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    target = Path(args.path)
    if not target.exists():
        parser.exit(1, f"Path not found: {target}\n")

    try:
        config = _load_config(args.config, target)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    max_file_size = args.max_file_size
    if max_file_size is None:
        max_file_size = config.max_file_size

    if args.command == "analyze":
        _run_analyze(parser, args, config, target, max_file_size)
    elif args.command == "debug":
        _run_debug(parser, target, config, max_file_size, color=not args.no_color)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_config(config_arg: Optional[str], target: Path) -> RslocConfig:
    if config_arg is None:
        return load_config(target)
    config_path = Path(config_arg)
    if not config_path.is_file():
        raise ConfigError(f"Configuration file not found: {config_path}")
    return load_config(config_path)


def _run_analyze(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    config: RslocConfig,
    target: Path,
    max_file_size: Optional[int],
) -> None:
    output = args.output or config.output
    if output not in OUTPUT_FORMATS:  # pragma: no cover - validated by config and argparse
        parser.exit(1, f"Unknown output format: {output}\n")

    coordinator = DirectoryCoordinator(
        workers=args.workers or config.workers,
        max_file_size=max_file_size,
    )
    try:
        with create_accumulator(args.accumulator or config.accumulator) as accumulator:
            outcome = coordinator.analyze_path(
                target,
                accumulator,
                exclude_paths=config.exclude_paths,
                follow_links=config.follow_links,
            )
            logger.debug(
                "Run finished: %d analyzed, %d skipped, %d failed",
                outcome.analyzed,
                outcome.skipped,
                outcome.failed,
            )
            accumulator.flush()
            if output == "json":
                print(render_json(accumulator))
            else:
                for block in iter_text(accumulator):
                    print(block)
    except (CoordinatorError, AccumulatorError, FileAnalysisError, ValueError, OSError) as exc:
        parser.exit(1, f"rsloc analyze failed: {exc}\n")
    except Exception as exc:  # pragma: no cover - unexpected failure
        parser.exit(1, f"rsloc analyze failed: {exc}\nRun with --verbose for more details.\n")


def _run_debug(
    parser: argparse.ArgumentParser,
    target: Path,
    config: RslocConfig,
    max_file_size: Optional[int],
    *,
    color: bool,
) -> None:
    analyzer = FileAnalyzer()
    if not target.is_dir():
        try:
            listing = _debug_listing(analyzer, target, max_file_size, color=color)
        except FileAnalysisError as exc:
            parser.exit(1, f"{exc}\n")
        if listing is not None:
            print(listing)
        return

    scanner = SourceScanner(config.exclude_paths, follow_links=config.follow_links)
    paths = scanner.scan(target)
    if not paths:
        parser.exit(1, f"No Rust files found in {target}\n")
    for path in paths:
        try:
            listing = _debug_listing(analyzer, path, max_file_size, color=color)
        except FileAnalysisError as exc:
            logger.warning("%s", exc)
            continue
        if listing is not None:
            print(listing)
            print()


def _debug_listing(
    analyzer: FileAnalyzer, path: Path, max_file_size: Optional[int], *, color: bool
) -> Optional[str]:
    source = analyzer.read_source(path, max_file_size)
    breakdown = analyzer.inspect_source(source)
    if not breakdown.lines:
        return None
    return render_debug(path, breakdown, color=color)


if __name__ == "__main__":
    main(sys.argv[1:])
