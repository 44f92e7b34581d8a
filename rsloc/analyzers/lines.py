"""Line-offset index and token-driven line classification."""

from __future__ import annotations

from bisect import bisect_right
from typing import List, Tuple

from ..models import LineType
from ..syntax import NodeKind, SyntaxNode

DOC_COMMENT_PREFIXES = ("///", "//!", "/**", "/*!")

_COMMENT_TYPES = (LineType.COMMENT, LineType.DOC)


def count_lines(source: bytes) -> int:
    """Return the number of lines, where a trailing newline does not open a new line."""
    if not source:
        return 0
    newlines = source.count(b"\n")
    return newlines if source.endswith(b"\n") else newlines + 1


class LineIndex:
    """Maps byte offsets of a source file to 0-based line numbers."""

    def __init__(self, source: bytes) -> None:
        self.line_count = count_lines(source)
        starts = [0]
        position = source.find(b"\n")
        while position != -1:
            starts.append(position + 1)
            position = source.find(b"\n", position + 1)
        self._starts = starts

    def line_of(self, offset: int) -> int:
        if self.line_count == 0:
            return 0
        line = bisect_right(self._starts, offset) - 1
        return min(max(line, 0), self.line_count - 1)

    def span(self, start: int, end: int) -> Tuple[int, int]:
        """Inclusive line span of the half-open byte range ``[start, end)``."""
        return self.line_of(start), self.line_of(max(end - 1, start))


def is_doc_comment(text: str) -> bool:
    return text.startswith(DOC_COMMENT_PREFIXES)


def classify_lines(
    source: bytes, tree: SyntaxNode, index: LineIndex | None = None
) -> List[LineType]:
    """Assign a :class:`LineType` to every line of ``source``.

    Comment tokens always win over code sharing the same line, whatever the
    order the tokens appear in.
    """
    index = index or LineIndex(source)
    total = index.line_count
    if total == 0:
        return []

    line_types = [LineType.BLANK] * total
    for token in tree.iter_tokens():
        if token.kind is NodeKind.WHITESPACE:
            continue
        first, last = index.span(token.start_byte, token.end_byte)
        if token.kind is NodeKind.COMMENT:
            category = LineType.DOC if is_doc_comment(token.text) else LineType.COMMENT
            for line in range(first, last + 1):
                line_types[line] = category
        else:
            for line in range(first, last + 1):
                if line_types[line] not in _COMMENT_TYPES:
                    line_types[line] = LineType.CODE
    return line_types


__all__ = ["DOC_COMMENT_PREFIXES", "LineIndex", "classify_lines", "count_lines", "is_doc_comment"]
