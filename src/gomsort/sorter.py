import logging
from dataclasses import dataclass, field
from typing import Optional

from gomsort.callgraph import CallDetection, CallGraph, build_call_graph
from gomsort.config import Config
from gomsort.extractor import extract_methods
from gomsort.metrics import calculate_metrics
from gomsort.models.ast_models import MethodRecord
from gomsort.ordering import order_changed, sort_methods
from gomsort.parsing import GoParser
from gomsort.rewriter import render_unit, rewrite, validate_rendering

logger = logging.getLogger(__name__)


@dataclass
class SortResult:
    source: str  # the text to write; identical to the input when unchanged
    changed: bool
    methods: list[MethodRecord] = field(default_factory=list)  # in target order
    graph: Optional[CallGraph] = None


class MethodSorter:
    """
    Runs the whole per-file pipeline:

      parse -> extract methods -> build call graph -> metrics -> sort
            -> unchanged: original text
            -> changed:   rewrite -> render -> validate

    One instance can be reused for any number of files; nothing is carried
    over between calls except the tree-sitter parser itself.
    """

    def __init__(self, config: Optional[Config] = None, parser: Optional[GoParser] = None):
        self.config = config or Config()
        self.parser = parser or GoParser()
        self.detection = CallDetection(
            self_names=tuple(self.config.self_names),
            initial_letter_match=self.config.initial_letter_match,
        )

    def sort_source(self, source: str, filename: Optional[str] = None) -> SortResult:
        unit = self.parser.parse(source, filename)

        records = extract_methods(unit)
        graph = build_call_graph(unit, records, self.detection)
        calculate_metrics(graph, records)
        ordered = sort_methods(records, self.config.sort_criteria)

        if not order_changed(ordered):
            logger.debug("%s: %d methods already in order", filename or "<source>", len(ordered))
            return SortResult(source=source, changed=False, methods=ordered, graph=graph)

        rewritten = rewrite(unit, ordered)
        text = render_unit(rewritten)
        expected = sum(1 for d in unit.decls if d.is_method)
        validate_rendering(text, expected, self.parser, filename)

        logger.debug("%s: reordered %d methods", filename or "<source>", len(ordered))
        return SortResult(source=text, changed=True, methods=ordered, graph=graph)


def sort_source(source: str, config: Optional[Config] = None,
                filename: Optional[str] = None) -> SortResult:
    """Convenience wrapper for one-off use."""
    return MethodSorter(config).sort_source(source, filename)
