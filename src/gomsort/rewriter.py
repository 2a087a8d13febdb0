import logging
from dataclasses import replace
from typing import Optional

from gomsort.errors import ParseError, RenderError
from gomsort.models.ast_models import Declaration, MethodRecord, SourceUnit
from gomsort.parsing import GoParser

logger = logging.getLogger(__name__)


# --- Rewriting ---------------------------------------------------------------

def rewrite(unit: SourceUnit, ordered: list[MethodRecord]) -> SourceUnit:
    """
    Builds a new SourceUnit with the given methods in the given order.

    The methods are lifted out and appended, as one contiguous run, after
    everything else, so a type's declaration always precedes its methods.
    Every other item (types, functions, vars, freestanding comments, methods
    we could not classify) keeps its relative order. Doc and trailing
    comments are fields of the Declaration they belong to, so they travel
    with it and cannot be left behind or duplicated.

    Exactly one blank line separates consecutive items in the result. The
    input unit is not modified.
    """
    moving = {m.decl_index for m in ordered}
    if not moving:
        return unit

    kept = [d for i, d in enumerate(unit.decls) if i not in moving]
    items = kept + [unit.decls[m.decl_index] for m in ordered]
    blank = unit.newline * 2
    leading = unit.decls[0].separator if unit.decls else ""

    decls: list[Declaration] = []
    for position, decl in enumerate(items):
        decls.append(replace(decl, separator=leading if position == 0 else blank))

    return SourceUnit(decls=decls, tail=unit.tail, newline=unit.newline)


# --- Rendering ---------------------------------------------------------------

def render_unit(unit: SourceUnit) -> str:
    return unit.render()


def validate_rendering(text: str, expected_methods: int, parser: GoParser,
                       filename: Optional[str] = None):
    """
    Reparses rendered output. Anything that no longer parses, or that lost or
    gained a method along the way, is a RenderError: the caller must not
    write it out.
    """
    try:
        rendered = parser.parse(text, filename)
    except ParseError as e:
        raise RenderError(filename, f"rewritten source does not parse ({e.detail} at {e.line + 1}:{e.col + 1})") from e

    methods = sum(1 for d in rendered.decls if d.is_method)
    if methods != expected_methods:
        raise RenderError(
            filename, f"rewritten source has {methods} methods, expected {expected_methods}"
        )
    logger.debug("Rendered %s: %d methods verified", filename or "<source>", methods)
