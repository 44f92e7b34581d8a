"""Syntax-node model and the tree-sitter adapter that builds it for Rust sources."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

RUST_LANGUAGE = Language(tree_sitter_rust.language())

_COMMENT_TYPES = frozenset({"line_comment", "block_comment"})
_LITERAL_TYPES = frozenset({"string_literal", "raw_string_literal", "char_literal"})
_ATOMIC_TYPES = _COMMENT_TYPES | _LITERAL_TYPES


class NodeKind(Enum):
    """Kinds of syntax nodes the line analyzers distinguish.

    tree-sitter drops whitespace, so ``WHITESPACE`` only appears in trees
    built by hand.
    """

    WHITESPACE = "whitespace"
    COMMENT = "comment"
    TOKEN = "token"
    FUNCTION = "function"
    MODULE = "module"
    ATTRIBUTE = "attribute"
    NODE = "node"


_TOKEN_KINDS = frozenset({NodeKind.WHITESPACE, NodeKind.COMMENT, NodeKind.TOKEN})

_DECLARATION_KINDS = {
    "function_item": NodeKind.FUNCTION,
    "mod_item": NodeKind.MODULE,
}


@dataclass(frozen=True)
class Annotation:
    """An attribute attached to a declaration, e.g. ``#[cfg(test)]``."""

    name: Optional[str] = None
    arguments: Optional[str] = None


@dataclass(frozen=True)
class SyntaxNode:
    """Immutable node of a parsed source file.

    Tokens carry their literal text and have no children. Declarations carry
    the annotations written in front of them; their byte range covers those
    annotations as well.
    """

    kind: NodeKind
    start_byte: int
    end_byte: int
    text: str = ""
    annotations: Tuple[Annotation, ...] = ()
    children: Tuple["SyntaxNode", ...] = ()

    @property
    def is_token(self) -> bool:
        return self.kind in _TOKEN_KINDS

    def iter_tokens(self) -> Iterator[SyntaxNode]:
        """Yield every token below this node in source order."""
        stack: List[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            if node.is_token:
                yield node
            else:
                stack.extend(reversed(node.children))


class RustParser:
    """Parses Rust sources with tree-sitter into :class:`SyntaxNode` trees.

    tree-sitter parsers are not safe to share between threads, so one parser
    is created lazily per calling thread.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def parse(self, source: bytes) -> SyntaxNode:
        tree = self._get_parser().parse(source)
        return _TreeBuilder(source).build(tree.root_node)

    def _get_parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(RUST_LANGUAGE)
            self._local.parser = parser
        return parser


class _Frame:
    __slots__ = ("node", "pending", "built")

    def __init__(self, node: Node, atomic: bool) -> None:
        self.node = node
        self.pending: List[Node] = [] if atomic else list(reversed(node.children))
        self.built: List[SyntaxNode] = []


class _TreeBuilder:
    def __init__(self, source: bytes) -> None:
        self._source = source

    def build(self, root: Node) -> SyntaxNode:
        frames = [_Frame(root, atomic=False)]
        while True:
            frame = frames[-1]
            if frame.pending:
                child = frame.pending.pop()
                # MISSING nodes and other zero-width nodes cover no text.
                if child.is_missing or child.start_byte == child.end_byte:
                    continue
                atomic = child.type in _ATOMIC_TYPES or child.child_count == 0
                frames.append(_Frame(child, atomic=atomic))
                continue
            frames.pop()
            node = self._finish(frame, is_root=not frames)
            if not frames:
                return node
            frames[-1].built.append(node)

    def _finish(self, frame: _Frame, *, is_root: bool) -> SyntaxNode:
        node = frame.node
        start, end = node.start_byte, node.end_byte
        if node.type in _COMMENT_TYPES:
            return SyntaxNode(NodeKind.COMMENT, start, end, text=self._text(start, end))
        # Literals are single tokens spanning their delimiters.
        if node.type in _LITERAL_TYPES:
            return SyntaxNode(NodeKind.TOKEN, start, end, text=self._text(start, end))
        if node.child_count == 0 and not is_root:
            return SyntaxNode(NodeKind.TOKEN, start, end, text=self._text(start, end))

        children = tuple(self._attach_annotations(frame.built))
        if node.type == "attribute_item":
            return SyntaxNode(
                NodeKind.ATTRIBUTE,
                start,
                end,
                annotations=(self._annotation(node),),
                children=children,
            )
        kind = _DECLARATION_KINDS.get(node.type, NodeKind.NODE)
        return SyntaxNode(kind, start, end, children=children)

    def _attach_annotations(self, children: List[SyntaxNode]) -> List[SyntaxNode]:
        """Fold attribute items written before a declaration into the declaration."""
        result: List[SyntaxNode] = []
        for child in children:
            if child.kind in (NodeKind.FUNCTION, NodeKind.MODULE):
                lead_start = len(result)
                follower = child
                while lead_start > 0 and self._attaches(result[lead_start - 1], follower):
                    lead_start -= 1
                    follower = result[lead_start]
                lead = result[lead_start:]
                if any(item.kind is NodeKind.ATTRIBUTE for item in lead):
                    del result[lead_start:]
                    annotations = tuple(a for item in lead for a in item.annotations)
                    child = replace(
                        child,
                        start_byte=lead[0].start_byte,
                        annotations=annotations + child.annotations,
                        children=tuple(lead) + child.children,
                    )
            result.append(child)
        return result

    def _attaches(self, node: SyntaxNode, follower: SyntaxNode) -> bool:
        if node.kind is NodeKind.ATTRIBUTE:
            return True
        if node.kind is not NodeKind.COMMENT:
            return False
        # A comment belongs to the next item only when it sits on its own
        # line and no blank line separates the two.
        line_start = self._source.rfind(b"\n", 0, node.start_byte) + 1
        if self._source[line_start : node.start_byte].strip():
            return False
        end = node.end_byte
        if self._source[end - 1 : end] == b"\n":
            end -= 1
        return self._source.count(b"\n", end, follower.start_byte) <= 1

    def _annotation(self, node: Node) -> Annotation:
        attribute = next((c for c in node.named_children if c.type == "attribute"), None)
        if attribute is None:
            return Annotation()
        arguments = attribute.child_by_field_name("arguments")
        path = attribute.named_children[0] if attribute.named_child_count else None
        name = None
        if path is not None and (arguments is None or path.start_byte != arguments.start_byte):
            name = self._text(path.start_byte, path.end_byte)
        args = self._text(arguments.start_byte, arguments.end_byte) if arguments else None
        return Annotation(name=name, arguments=args)

    def _text(self, start: int, end: int) -> str:
        return self._source[start:end].decode("utf-8", errors="replace")


__all__ = ["Annotation", "NodeKind", "RUST_LANGUAGE", "RustParser", "SyntaxNode"]
