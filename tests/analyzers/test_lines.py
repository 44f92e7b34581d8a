"""Tests for line indexing and line classification."""

from __future__ import annotations

from typing import List

import pytest

from rsloc.analyzers.lines import LineIndex, classify_lines, count_lines, is_doc_comment
from rsloc.models import LineType
from rsloc.syntax import NodeKind, RustParser, SyntaxNode

BLANK = LineType.BLANK
COMMENT = LineType.COMMENT
DOC = LineType.DOC
CODE = LineType.CODE


def _classify(text: str) -> List[LineType]:
    source = text.encode("utf-8")
    return classify_lines(source, RustParser().parse(source))


def _token(kind: NodeKind, source: bytes, fragment: bytes, start: int = 0) -> SyntaxNode:
    offset = source.index(fragment, start)
    return SyntaxNode(
        kind, offset, offset + len(fragment), text=fragment.decode("utf-8")
    )


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        (b"", 0),
        (b"a", 1),
        (b"a\n", 1),
        (b"a\nb", 2),
        (b"\n\n", 2),
        (b"a\r\nb\r\n", 2),
    ],
)
def test_count_lines_ignores_trailing_newline(source: bytes, expected: int) -> None:
    assert count_lines(source) == expected


def test_line_index_maps_offsets_to_lines() -> None:
    index = LineIndex(b"ab\ncd\n")

    assert index.line_count == 2
    assert index.line_of(0) == 0
    assert index.line_of(2) == 0
    assert index.line_of(3) == 1
    # Offsets past the last line clamp onto it.
    assert index.line_of(6) == 1
    assert index.span(0, 3) == (0, 0)
    assert index.span(1, 5) == (0, 1)


def test_empty_source_has_no_lines() -> None:
    assert _classify("") == []


def test_whitespace_only_lines_are_blank() -> None:
    assert _classify("\n\n  \n\t\n") == [BLANK] * 4


def test_line_and_doc_comments() -> None:
    assert _classify("// comment 1\n// comment 2\n/// doc comment") == [
        COMMENT,
        COMMENT,
        DOC,
    ]


def test_inner_doc_comments() -> None:
    assert _classify("//! crate docs\n/*! block\n docs */\n") == [DOC, DOC, DOC]


def test_block_comment_marks_every_spanned_line() -> None:
    assert _classify("/* start\nmiddle\nend */") == [COMMENT] * 3


def test_code_lines() -> None:
    assert _classify('fn main() {\n    println!("hello");\n}') == [CODE] * 3


def test_mixed_comment_blank_and_code() -> None:
    assert _classify("// comment\n\nfn main() {}") == [COMMENT, BLANK, CODE]


def test_block_comment_between_code_lines() -> None:
    text = "fn a() {}\n/* comment start\ncomment middle\ncomment end */\nfn b() {}"

    assert _classify(text) == [CODE, COMMENT, COMMENT, COMMENT, CODE]


def test_code_after_block_comment_on_same_line_is_comment() -> None:
    assert _classify("fn f() { /* note */ g(); }\n") == [COMMENT]


def test_trailing_comment_wins_over_code() -> None:
    assert _classify("fn f() {} // explain\nfn g() {}\n") == [COMMENT, CODE]


def test_comment_markers_inside_strings_are_code() -> None:
    assert _classify('const URL: &str = "http://example.com";\n') == [CODE]


def test_multiline_string_spans_code_lines() -> None:
    assert _classify('const S: &str = "one\n\ntwo";\n') == [CODE, CODE, CODE]


def test_raw_string_closing_delimiter_line_is_code() -> None:
    assert _classify('f(r#"\nx\n"#\n);\n') == [CODE, CODE, CODE, CODE]


def test_raw_string_with_blank_interior_lines_is_code() -> None:
    text = 'const S: &str = r"\n\n";\n'

    assert _classify(text) == [CODE, CODE, CODE]


def test_tabs_and_indentation_do_not_change_category() -> None:
    assert _classify("fn f() {\n\t// tabbed\n\tg();\n}\n") == [CODE, COMMENT, CODE, CODE]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("/// doc", True),
        ("//! inner", True),
        ("/** block */", True),
        ("/*! inner block */", True),
        ("//// four slashes", True),
        ("// plain", False),
        ("/* plain */", False),
    ],
)
def test_is_doc_comment_prefixes(text: str, expected: bool) -> None:
    assert is_doc_comment(text) is expected


def test_classification_is_order_independent_for_hand_built_trees() -> None:
    source = b"x // c\n  \ny\n"
    code_x = _token(NodeKind.TOKEN, source, b"x")
    comment = _token(NodeKind.COMMENT, source, b"// c")
    spaces = _token(NodeKind.WHITESPACE, source, b"  \n")
    code_y = _token(NodeKind.TOKEN, source, b"y")

    forward = SyntaxNode(
        NodeKind.NODE, 0, len(source), children=(code_x, comment, spaces, code_y)
    )
    backward = SyntaxNode(
        NodeKind.NODE, 0, len(source), children=(comment, code_x, spaces, code_y)
    )

    assert classify_lines(source, forward) == [COMMENT, BLANK, CODE]
    assert classify_lines(source, backward) == [COMMENT, BLANK, CODE]
