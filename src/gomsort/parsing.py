import logging
from typing import Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from gomsort.errors import ParseError
from gomsort.models.ast_models import Declaration, SourceUnit
from gomsort.tree_sitter_helpers import end_row, find_error_node, node_point, span_text, start_row

logger = logging.getLogger(__name__)


# --- Tree-sitter language loading -------------------------------------------

def load_go_language() -> Language:
    """
    Loads the Tree-sitter Go grammar for the Python bindings.
    The grammar ships as a prebuilt wheel (tree-sitter-go), so no build step is needed.
    """
    return Language(tree_sitter_go.language())


# --- The parser --------------------------------------------------------------

class GoParser:
    """
    Turns Go source into a SourceUnit: the file's top-level items as exact text,
    with every comment resolved to the declaration it documents, trails, or to
    a freestanding comment block of its own.
    """

    def __init__(self, language: Optional[Language] = None):
        self.language = language or load_go_language()
        self.parser = Parser(self.language)

    def parse(self, source: str, filename: Optional[str] = None) -> SourceUnit:
        """
        Parses a single Go file. Raises ParseError if tree-sitter had to recover
        from a syntax error anywhere in the file.
        """
        source_bytes = source.encode("utf-8")
        tree = self.parser.parse(source_bytes)
        root: Node = tree.root_node

        if root.has_error:
            bad = find_error_node(root) or root
            line, col = node_point(bad)
            detail = f"missing {bad.type}" if bad.is_missing else "syntax error"
            raise ParseError(filename, line, col, detail)

        newline = "\r\n" if b"\r\n" in source_bytes else "\n"
        builder = _UnitBuilder(source_bytes)
        # Anonymous children are statement terminators (";" or newlines).
        for child in root.children:
            if child.is_named:
                builder.feed(child)
        unit = builder.finish()
        unit.newline = newline
        unit.tree = tree

        logger.debug(
            "Parsed %s: %d top-level items", filename or "<source>", len(unit.decls)
        )
        return unit


class _UnitBuilder:
    """
    Groups top-level nodes into Declarations in a single left-to-right pass.

    Comments are held back as "pending" until the next declaration shows up,
    because only then do we know whether they form its doc block (no blank
    line in between) or stand on their own.
    """

    def __init__(self, source_bytes: bytes):
        self.source_bytes = source_bytes
        self.decls: list[Declaration] = []
        self.pending: list[Node] = []
        self.cursor = 0  # end byte of the last emitted item, trailing comments included
        self.last_row = -1  # row on which the last emitted item ends

    def feed(self, node: Node):
        if node.type == "comment":
            if not self.pending and self.decls and start_row(node) == self.last_row:
                self._attach_trailing(node)
            else:
                self.pending.append(node)
            return

        runs = self._comment_runs()
        doc_run = None
        if runs and start_row(node) - end_row(runs[-1][-1]) <= 1:
            doc_run = runs.pop()
        for run in runs:
            self._emit_comment_block(run)

        if doc_run is not None:
            doc_start = doc_run[0].start_byte
            doc_end = doc_run[-1].end_byte
            decl = Declaration(
                kind=node.type,
                text=self._text(node.start_byte, node.end_byte),
                doc=self._text(doc_start, doc_end),
                doc_gap=self._text(doc_end, node.start_byte),
                separator=self._text(self.cursor, doc_start),
                node=node,
            )
        else:
            decl = Declaration(
                kind=node.type,
                text=self._text(node.start_byte, node.end_byte),
                separator=self._text(self.cursor, node.start_byte),
                node=node,
            )
        self._emit(decl, node.end_byte, end_row(node))

    def finish(self) -> SourceUnit:
        for run in self._comment_runs():
            self._emit_comment_block(run)
        tail = self._text(self.cursor, len(self.source_bytes))
        return SourceUnit(decls=self.decls, tail=tail, source_bytes=self.source_bytes)

    # -- helpers ------------------------------------------------------------

    def _text(self, start: int, end: int) -> str:
        return span_text(self.source_bytes, start, end)

    def _comment_runs(self) -> list[list[Node]]:
        """Splits the pending comments wherever a blank line separates them."""
        runs: list[list[Node]] = []
        for comment in self.pending:
            if runs and start_row(comment) - end_row(runs[-1][-1]) <= 1:
                runs[-1].append(comment)
            else:
                runs.append([comment])
        self.pending = []
        return runs

    def _emit_comment_block(self, run: list[Node]):
        start, end = run[0].start_byte, run[-1].end_byte
        block = Declaration(
            kind="comment",
            text=self._text(start, end),
            separator=self._text(self.cursor, start),
        )
        self._emit(block, end, end_row(run[-1]))

    def _emit(self, decl: Declaration, end_byte: int, row: int):
        self.decls.append(decl)
        self.cursor = end_byte
        self.last_row = row

    def _attach_trailing(self, comment: Node):
        last = self.decls[-1]
        last.trailing += self._text(self.cursor, comment.end_byte)
        self.cursor = comment.end_byte
        self.last_row = end_row(comment)
