"""Detection of test-only sections in a parsed source file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from ..logging import get_logger
from ..syntax import Annotation, NodeKind, SyntaxNode
from .lines import LineIndex

logger = get_logger("sections")

_TEST_MARKER = "test"
_CONDITIONAL_MARKER = "cfg"


@dataclass(frozen=True)
class CodeSection:
    """Inclusive, 0-based line range of one test-only subtree."""

    start_line: int
    end_line: int


def is_test_annotation(annotation: Annotation) -> bool:
    if annotation.name == _TEST_MARKER:
        return True
    # Substring match on the raw token tree: cfg(any(test, feature = "x"))
    # qualifies and so does cfg(not(test)).
    return annotation.name == _CONDITIONAL_MARKER and _TEST_MARKER in (annotation.arguments or "")


def is_test_node(node: SyntaxNode) -> bool:
    """Return True for a function or module declaration marked as test code."""
    if node.kind not in (NodeKind.FUNCTION, NodeKind.MODULE):
        return False
    return any(is_test_annotation(annotation) for annotation in node.annotations)


def find_test_sections(tree: SyntaxNode, index: LineIndex) -> List[CodeSection]:
    """Collect the line ranges of every outermost test declaration.

    Children of a test declaration are not visited: anything nested inside
    is already covered by the enclosing section.
    """
    sections: List[CodeSection] = []
    stack = [tree]
    while stack:
        node = stack.pop()
        if is_test_node(node):
            start_line, end_line = index.span(node.start_byte, node.end_byte)
            logger.debug("Found test section: lines %d-%d", start_line, end_line)
            sections.append(CodeSection(start_line=start_line, end_line=end_line))
            continue
        stack.extend(reversed(node.children))
    return sections


def mark_test_lines(sections: Iterable[CodeSection], line_count: int) -> List[bool]:
    """Return one flag per line, True where the line belongs to a test section."""
    mask = [False] * line_count
    if line_count == 0:
        return mask
    for section in sections:
        end = min(section.end_line, line_count - 1)
        for line in range(section.start_line, end + 1):
            mask[line] = True
    return mask


__all__ = [
    "CodeSection",
    "find_test_sections",
    "is_test_annotation",
    "is_test_node",
    "mark_test_lines",
]
