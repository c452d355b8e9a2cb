# sort.py
from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, Dict, List, Optional, Tuple

from .model import Component, Pipeline

NONE_SORTER = "none"

Comparator = Callable[[Component, Component], int]


@dataclass(frozen=True)
class ComparatorEntry:
    name: str
    display_name: str
    compare: Comparator


_COMPARATORS: Dict[str, ComparatorEntry] = {}


def register_comparator(name: str, display_name: str):
    """Decorator: register a compare(a, b) -> int function under `name`."""
    def deco(fn: Comparator) -> Comparator:
        _COMPARATORS[name] = ComparatorEntry(name=name, display_name=display_name, compare=fn)
        return fn
    return deco


def find_comparator(name: str | None) -> ComparatorEntry:
    """Registered comparator, or the no-op one for unknown names."""
    return _COMPARATORS.get(name or NONE_SORTER) or _COMPARATORS[NONE_SORTER]


def sorting_options() -> List[Tuple[str, str]]:
    """(name, display name) pairs, 'none' first."""
    entries = sorted(_COMPARATORS.values(), key=lambda e: (e.name != NONE_SORTER, e.display_name))
    return [(e.name, e.display_name) for e in entries]


def sort_components(components: List[Component], name: str | None) -> List[Component]:
    entry = find_comparator(name)
    if entry.name == NONE_SORTER:
        return list(components)
    # list.sort is stable, so equal components keep registration order
    return sorted(components, key=cmp_to_key(entry.compare))


# ---------------------------------------------------------------------
# Built-in comparators
# ---------------------------------------------------------------------

def _first_pipeline(component: Component | None) -> Optional[Pipeline]:
    if component is None:
        return None
    return component.first_pipeline


def _has_failed_job(pipeline: Optional[Pipeline]) -> bool:
    return pipeline is not None and pipeline.has_failed


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


@register_comparator(NONE_SORTER, "None")
def no_op(o1: Component, o2: Component) -> int:
    return 0


@register_comparator("latestActivity", "Sorting by last activity")
def latest_activity(o1: Component, o2: Component) -> int:
    p1, p2 = _first_pipeline(o1), _first_pipeline(o2)
    t1 = p1.latest_activity if p1 else None
    t2 = p2.latest_activity if p2 else None

    if t1 is not None and t2 is not None and t1 != t2:
        return -1 if t1 > t2 else 1
    if t1 is not None and t2 is None:
        return -1
    if t1 is None and t2 is not None:
        return 1
    return _cmp(o1.name, o2.name)


@register_comparator("failedFirst", "Sorting by failed pipelines, then by last activity")
def failed_first(o1: Component, o2: Component) -> int:
    f1 = _has_failed_job(_first_pipeline(o1))
    f2 = _has_failed_job(_first_pipeline(o2))
    if f1 and not f2:
        return -1
    if f2 and not f1:
        return 1
    return latest_activity(o1, o2)
