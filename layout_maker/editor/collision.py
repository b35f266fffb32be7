"""
Advisory overlap detection.

Collisions never block an edit; they only feed the renderer's warning state.
Zones never collide (other elements sit inside them), and a chair never
collides with its own table.
"""

from __future__ import annotations

from typing import Iterable

from layout_maker.geometry.shapes import element_bounds
from layout_maker.geometry.viewport import Rect
from layout_maker.model.elements import Chair, Element, ElementKind
from layout_maker.model.store import ElementStore


def _inflate(rect: Rect, buffer: float) -> Rect:
    return Rect(rect.x - buffer, rect.y - buffer, rect.width + buffer * 2.0, rect.height + buffer * 2.0)


def _related(a: Element, b: Element) -> bool:
    if isinstance(a, Chair) and a.parent_table_id == b.id:
        return True
    if isinstance(b, Chair) and b.parent_table_id == a.id:
        return True
    return False


def elements_collide(a: Element, b: Element, buffer: float = 0.0) -> bool:
    if a.id == b.id or _related(a, b):
        return False
    if a.kind is ElementKind.ZONE or b.kind is ElementKind.ZONE:
        return False
    return _inflate(element_bounds(a), buffer).intersects(_inflate(element_bounds(b), buffer))


def find_collisions(store: ElementStore, moving_ids: Iterable[str], buffer: float = 0.0) -> set[str]:
    """Ids of moving elements that overlap a non-moving one, plus the ones they hit."""
    moving = [store.elements[eid] for eid in dict.fromkeys(moving_ids) if eid in store.elements]
    moving_set = {e.id for e in moving}
    others = [e for e in store.ordered(visible_only=True) if e.id not in moving_set]
    hits: set[str] = set()
    for element in moving:
        if not element.visible:
            continue
        for other in others:
            if elements_collide(element, other, buffer):
                hits.add(element.id)
                hits.add(other.id)
    return hits


__all__ = ["elements_collide", "find_collisions"]
