"""Discovery of Rust source files below a directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

_SOURCE_SUFFIX = ".rs"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    "target",
    "node_modules",
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .rsloc.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if pattern.startswith("!"):
        negate = not negate
        pattern = pattern[1:]
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.is_file():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        rule = build_ignore_rule(line)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class SourceScanner:
    """Walks a directory tree and lists the Rust files to analyze."""

    def __init__(
        self,
        exclude_paths: Sequence[str] = (),
        *,
        follow_links: bool = True,
        use_gitignore: bool = True,
    ) -> None:
        self.exclude_paths = list(exclude_paths)
        self.follow_links = follow_links
        self.use_gitignore = use_gitignore

    def scan(self, root: str | Path) -> List[Path]:
        """Return the candidate source files below ``root`` in sorted order."""
        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise FileNotFoundError(f"Directory not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {root}")

        rules = self._load_rules(root_path)
        return sorted(self._iter_files(root_path, rules))

    def _load_rules(self, root: Path) -> List[IgnoreRule]:
        rules = _parse_gitignore(root / ".gitignore") if self.use_gitignore else []
        for pattern in self.exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                rules.append(rule)
        return rules

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
        visited: set[str] = set()
        for dirpath, dirnames, filenames in os.walk(root, followlinks=self.follow_links):
            current_dir = Path(dirpath)
            if self.follow_links:
                # Symlink loops would otherwise be walked forever.
                real = os.path.realpath(dirpath)
                if real in visited:
                    dirnames[:] = []
                    continue
                visited.add(real)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in filenames:
                if not filename.endswith(_SOURCE_SUFFIX):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                path = current_dir / filename
                if path.is_file():
                    yield path


__all__ = ["IgnoreRule", "SourceScanner", "build_ignore_rule"]
