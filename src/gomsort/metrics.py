import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from gomsort.callgraph import CallGraph
from gomsort.models.ast_models import MethodKey, MethodRecord

logger = logging.getLogger(__name__)


def in_degrees(graph: CallGraph) -> dict[MethodKey, int]:
    """Number of distinct callers per method. A method calling itself counts once."""
    counts = {key: 0 for key in graph.methods}
    for _, target in graph.edges():
        counts[target] += 1
    return counts


@dataclass
class _Frame:
    key: MethodKey
    targets: Iterator[MethodKey]
    depth: int = 0
    cut: bool = False  # True once this subtree ran into a method already on the path


def max_depth(graph: CallGraph, start: MethodKey,
              memo: Optional[dict[MethodKey, int]] = None) -> int:
    """
    Length of the longest call chain starting at `start`.

    Depth-first with an explicit stack. A callee that is already on the
    current path contributes 0 instead of being entered again, so cycles
    terminate; once the walk unwinds past a method it may be visited again
    along another path.

    `memo` may be shared between calls. Only depths whose computation never
    hit the on-path rule are stored: those subtrees are acyclic and the value
    is the same whichever path reaches them.
    """
    if memo is None:
        memo = {}
    if start in memo:
        return memo[start]

    on_path = {start}
    stack = [_Frame(start, iter(graph.callees(start)))]
    result = 0
    while stack:
        frame = stack[-1]
        target = next(frame.targets, None)

        if target is None:
            stack.pop()
            on_path.discard(frame.key)
            if not frame.cut:
                memo[frame.key] = frame.depth
            if stack:
                parent = stack[-1]
                parent.depth = max(parent.depth, frame.depth + 1)
                parent.cut = parent.cut or frame.cut
            else:
                result = frame.depth
            continue

        if target in on_path:
            frame.depth = max(frame.depth, 1)
            frame.cut = True
        elif target in memo:
            frame.depth = max(frame.depth, memo[target] + 1)
        else:
            on_path.add(target)
            stack.append(_Frame(target, iter(graph.callees(target))))

    return result


def calculate_metrics(graph: CallGraph, records: Optional[Iterable[MethodRecord]] = None):
    """
    Fills in `in_degree` and `max_depth` on every method record. Pass the full
    record list when the file declares the same method twice; the graph only
    holds one record per key, and the duplicates get the same numbers.
    """
    degrees = in_degrees(graph)
    memo: dict[MethodKey, int] = {}
    depths = {key: max_depth(graph, key, memo) for key in graph.methods}

    targets = records if records is not None else graph.methods.values()
    for record in targets:
        record.in_degree = degrees.get(record.key, 0)
        record.max_depth = depths.get(record.key, 0)
        logger.debug(
            "%s: depth=%d in_degree=%d", record.key, record.max_depth, record.in_degree
        )
