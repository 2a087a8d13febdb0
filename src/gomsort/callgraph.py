import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from tree_sitter import Node

from gomsort.models.ast_models import MethodKey, MethodRecord, SourceUnit
from gomsort.tree_sitter_helpers import node_text

logger = logging.getLogger(__name__)


@dataclass
class CallDetection:
    """
    Decides which selector operands count as "the receiver".

    `self_names` are placeholder identifiers that always mean the receiver.
    `initial_letter_match` enables the single-letter heuristic: `c.dial()` is
    treated as a call on the receiver in any method of `Client`, even when
    that method named its receiver differently. It can over-match (a local
    `c` of another type) and is kept on by default to match gomsort's
    historical results.
    """
    self_names: tuple[str, ...] = ("self",)
    initial_letter_match: bool = True

    def is_receiver_reference(self, ident: str, method: MethodRecord) -> bool:
        if ident in self.self_names:
            return True
        if method.receiver_param and ident == method.receiver_param:
            return True
        # Method expressions: Server.helper(s)
        if ident == method.receiver_type_name:
            return True
        if self.initial_letter_match and len(ident) == 1:
            return ident.lower() == method.receiver_type_name[:1].lower()
        return False


# --- The graph ---------------------------------------------------------------

@dataclass
class CallGraph:
    """
    Methods of a single file and the direct calls between methods of the same
    receiver type. Edges only ever connect known methods, and each edge is
    stored once no matter how many call sites produce it.
    """
    methods: dict[MethodKey, MethodRecord] = field(default_factory=dict)
    calls: dict[MethodKey, list[MethodKey]] = field(default_factory=dict)

    def add_method(self, method: MethodRecord):
        # With duplicate declarations the first one wins; both share metrics.
        self.methods.setdefault(method.key, method)
        self.calls.setdefault(method.key, [])

    def add_call(self, source: MethodKey, target: MethodKey) -> bool:
        """Adds source -> target. Returns False for unknown endpoints and repeats."""
        if source not in self.methods or target not in self.methods:
            return False
        targets = self.calls[source]
        if target in targets:
            return False
        targets.append(target)
        return True

    def callees(self, key: MethodKey) -> list[MethodKey]:
        return self.calls.get(key, [])

    def callers(self, key: MethodKey) -> list[MethodKey]:
        return [src for src, targets in self.calls.items() if key in targets]

    def edges(self) -> Iterator[tuple[MethodKey, MethodKey]]:
        for source, targets in self.calls.items():
            for target in targets:
                yield source, target

    def __contains__(self, key) -> bool:
        return key in self.methods

    def __len__(self) -> int:
        return len(self.methods)


# --- Building it -------------------------------------------------------------

def build_call_graph(unit: SourceUnit, records: list[MethodRecord],
                     detection: Optional[CallDetection] = None) -> CallGraph:
    """
    Two passes: every method is registered first, so calls to methods declared
    further down the file resolve like any other.
    """
    detection = detection or CallDetection()
    graph = CallGraph()

    for record in records:
        graph.add_method(record)

    for record in records:
        decl = unit.decls[record.decl_index]
        body = decl.node.child_by_field_name("body")
        if body is None:
            continue
        record.calls = collect_receiver_calls(unit.source_bytes, body, record, detection)
        for called in record.calls:
            target = MethodKey(record.receiver_type_name, called)
            if graph.add_call(record.key, target):
                logger.debug("Edge %s -> %s", record.key, target)

    return graph


def collect_receiver_calls(source_bytes: bytes, body: Node, method: MethodRecord,
                           detection: CallDetection) -> list[str]:
    """
    Finds `call_expression` nodes of the form `<recv>.<name>(...)` anywhere in
    the body (closures included) and returns the called names in source order.

    Note: this is syntax-only. Calls through method values, interfaces or
    embedded fields are not seen.
    """
    found = []
    stack = [body]
    while stack:
        node = stack.pop()
        if node.type == "call_expression":
            called = _receiver_call_name(source_bytes, node, method, detection)
            if called is not None:
                found.append(called)
        # reversed keeps the walk in source order
        stack.extend(reversed(node.children))
    return found


def _receiver_call_name(source_bytes: bytes, call: Node, method: MethodRecord,
                        detection: CallDetection) -> Optional[str]:
    function = call.child_by_field_name("function")
    if function is None or function.type != "selector_expression":
        return None
    operand = function.child_by_field_name("operand")
    field_node = function.child_by_field_name("field")
    if operand is None or field_node is None or operand.type != "identifier":
        return None
    if not detection.is_receiver_reference(node_text(source_bytes, operand), method):
        return None
    return node_text(source_bytes, field_node)
