import logging
from typing import Optional

from tree_sitter import Node

from gomsort.models.ast_models import Declaration, MethodRecord, SourceUnit
from gomsort.tree_sitter_helpers import node_point, node_text

logger = logging.getLogger(__name__)


def extract_methods(unit: SourceUnit) -> list[MethodRecord]:
    """
    Returns one MethodRecord per well-formed method declaration, in the order
    the methods first appear in the file. Free functions, types, vars, consts
    and anything with a receiver we cannot classify are skipped.
    """
    records: list[MethodRecord] = []
    for index, decl in enumerate(unit.decls):
        if not decl.is_method:
            continue
        record = extract_method_info(unit.source_bytes, decl, index, len(records))
        if record is None:
            logger.debug("Skipping unclassifiable method declaration at item %d", index)
            continue
        records.append(record)
    return records


def extract_method_info(source_bytes: bytes, decl: Declaration, decl_index: int,
                        original_order: int) -> Optional[MethodRecord]:
    node: Node = decl.node
    name_node = node.child_by_field_name("name")
    receiver_node = node.child_by_field_name("receiver")
    if name_node is None or receiver_node is None:
        return None

    receiver = _single_receiver(receiver_node)
    if receiver is None:
        return None

    names = receiver.children_by_field_name("name")
    type_node = receiver.child_by_field_name("type")
    if len(names) > 1 or type_node is None:
        return None

    type_name = receiver_type_name(source_bytes, type_node)
    if type_name is None:
        return None

    name = node_text(source_bytes, name_node)
    line, _ = node_point(node)
    return MethodRecord(
        name=name,
        receiver_type_name=type_name,
        receiver_type=node_text(source_bytes, type_node),
        receiver_param=node_text(source_bytes, names[0]) if names else "",
        is_exported=is_exported(name),
        original_order=original_order,
        decl_index=decl_index,
        line=line,
    )


def _single_receiver(receiver_node: Node) -> Optional[Node]:
    """The receiver list must hold exactly one (non-variadic) parameter declaration."""
    params = [c for c in receiver_node.named_children if c.type != "comment"]
    if len(params) != 1 or params[0].type != "parameter_declaration":
        return None
    return params[0]


def receiver_type_name(source_bytes: bytes, type_node: Node) -> Optional[str]:
    """
    Normalises a receiver type to the name methods are grouped under:
    `T`, `*T`, `T[K, V]` and `*T[K, V]` all map to "T", as do parenthesized
    spellings like `(T)` or `(*T)`. Only one level of pointer indirection is
    unwrapped.
    """
    node = _unwrap_parens(type_node)
    if node is not None and node.type == "pointer_type":
        node = _unwrap_parens(_only_child(node))
    if node is None:
        return None
    if node.type == "generic_type":
        node = node.child_by_field_name("type")
        if node is None:
            return None
    if node.type != "type_identifier":
        return None
    return node_text(source_bytes, node)


def _only_child(node: Node) -> Optional[Node]:
    inner = [c for c in node.named_children if c.type != "comment"]
    return inner[0] if len(inner) == 1 else None


def _unwrap_parens(node: Node) -> Optional[Node]:
    while node is not None and node.type == "parenthesized_type":
        node = _only_child(node)
    return node


def is_exported(name: str) -> bool:
    """Go's rule: an identifier is exported if its first character is upper case."""
    return name[:1].isupper()
