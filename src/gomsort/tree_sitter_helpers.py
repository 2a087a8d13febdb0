# --- Tree-sitter plumbing ----------------------------------------------------
from typing import Optional

from tree_sitter import Node


def node_text(source_bytes: bytes, node) -> str:
    """
    Converts a node's [start_byte:end_byte] into the corresponding string.
    Tree-sitter nodes only store byte offsets, so we slice the original source.
    """
    return span_text(source_bytes, node.start_byte, node.end_byte)


def span_text(source_bytes: bytes, start: int, end: int) -> str:
    """Decodes an arbitrary byte range of the source (used for gaps between nodes)."""
    return source_bytes[start:end].decode("utf-8", errors="replace")


def node_point(node) -> tuple[int, int]:
    """
    Returns the (line, column) of a node's start in 0-based coordinates.
    Handy for displaying where a method/call was found.
    """
    return (node.start_point[0], node.start_point[1])


def start_row(node) -> int:
    return node.start_point[0]


def end_row(node) -> int:
    return node.end_point[0]


def find_error_node(root: Node) -> Optional[Node]:
    """
    Returns the first ERROR or MISSING node in document order, or None.
    Subtrees without errors are skipped thanks to `has_error`.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if not node.has_error:
            continue
        # reversed so that the leftmost child is popped first
        stack.extend(reversed(node.children))
    return None
