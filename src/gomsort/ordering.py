from typing import Iterable, Optional

from gomsort.config import SortCriteria
from gomsort.models.ast_models import MethodRecord


# --- Sort keys -----------------------------------------------------------------

def sort_key(method: MethodRecord, criteria: Optional[SortCriteria] = None) -> tuple:
    """
    Builds the comparison tuple for a method. Earlier elements dominate:

      1. receiver type name, ascending (groups a type's methods together)
      2. exported before unexported
      3. max call depth, ascending (entry points first)
      4. in-degree, ascending (widely shared helpers sink to the end)
      5. original position (makes the order total)

    A disabled criterion is simply left out, so the next one decides.
    """
    criteria = criteria or SortCriteria()
    key: list = []
    if criteria.group_by_receiver:
        key.append(method.receiver_type_name)
    if criteria.exported_first:
        key.append(not method.is_exported)
    if criteria.sort_by_depth:
        key.append(method.max_depth)
    if criteria.sort_by_in_degree:
        key.append(method.in_degree)
    if criteria.preserve_original_order:
        key.append(method.original_order)
    return tuple(key)


def compare_methods(a: MethodRecord, b: MethodRecord,
                    criteria: Optional[SortCriteria] = None) -> int:
    """Classic three-way comparison: -1 if `a` sorts first, 1 if `b` does, 0 on a tie."""
    key_a, key_b = sort_key(a, criteria), sort_key(b, criteria)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_methods(methods: Iterable[MethodRecord],
                 criteria: Optional[SortCriteria] = None) -> list[MethodRecord]:
    """Returns a new, stably sorted list; the input is left alone."""
    criteria = criteria or SortCriteria()
    return sorted(methods, key=lambda m: sort_key(m, criteria))


def order_changed(ordered: list[MethodRecord]) -> bool:
    """True unless the methods are still in their original 0, 1, 2, ... sequence."""
    return [m.original_order for m in ordered] != list(range(len(ordered)))
