# --- Data models for a parsed Go file and its methods -----------------------
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional


class MethodKey(NamedTuple):
    """Composite call graph key: the receiver's type name plus the method name."""
    receiver: str
    name: str

    def __str__(self) -> str:
        return f"{self.receiver}.{self.name}"


@dataclass
class Declaration:
    """
    One top-level item of a Go file, kept as exact source text.

    Leading doc comments are owned by the declaration they document, so they
    move with it. Comments that belong to no declaration become their own
    items with kind "comment".
    """
    kind: str  # tree-sitter node type, e.g. "method_declaration", or "comment"
    text: str  # exact source of the node
    doc: Optional[str] = None  # attached doc comment block, if any
    doc_gap: str = "\n"  # whatever sits between the doc block and `text`
    trailing: str = ""  # same-line comments after the node, leading spaces included
    separator: str = ""  # source between the previous item and this one
    node: Any = None  # tree-sitter Node; None for comment blocks

    @property
    def is_method(self) -> bool:
        return self.kind == "method_declaration"

    def render(self) -> str:
        head = self.doc + self.doc_gap if self.doc is not None else ""
        return head + self.text + self.trailing


@dataclass
class SourceUnit:
    """A parsed compilation unit: the ordered top-level items plus the file tail."""
    decls: list[Declaration]
    tail: str = ""  # text after the last item (usually the final newline)
    newline: str = "\n"
    source_bytes: Optional[bytes] = None  # only set on units that came from the parser
    tree: Any = None

    def render(self) -> str:
        return "".join(d.separator + d.render() for d in self.decls) + self.tail


@dataclass
class MethodRecord:
    """Information about a method bound to a receiver type."""
    name: str  # e.g., "Start"
    receiver_type_name: str  # grouping name, e.g. "Server" for both `Server` and `*Server`
    receiver_type: str  # display form, e.g. "*Server"
    receiver_param: str  # receiver variable, e.g. "s"; empty for `func (*Server) ...`
    is_exported: bool
    original_order: int
    decl_index: int  # position of the declaration in SourceUnit.decls
    line: int = 0
    in_degree: int = 0  # set by the metrics engine
    max_depth: int = 0  # set by the metrics engine
    calls: list[str] = field(default_factory=list)  # names called on the receiver, in order

    @property
    def key(self) -> MethodKey:
        return MethodKey(self.receiver_type_name, self.name)
