"""
Selection, hit-testing and the drag-move transform.

Dragging keeps the pointer's offset to the grabbed element's anchor, so the
element never jumps under the cursor: every move event computes
``pointer - offset``, snaps that position and moves the whole selection by
the resulting delta in one batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from layout_maker.editor.collision import find_collisions
from layout_maker.editor.state import EditorState
from layout_maker.geometry import contract
from layout_maker.geometry.shapes import contains_point, element_bounds, element_footprint, rect_polygon
from layout_maker.geometry.viewport import Rect, Viewport
from layout_maker.model.elements import Element, Table, Zone
from layout_maker.model.store import ElementStore
from layout_maker.vector.snap import SnapGuide, snap_rect

HIT_TOLERANCE_PX = 2.0


def _selectable(element: Element) -> bool:
    if isinstance(element, Zone) and element.is_space:
        return False
    return not element.locked


def rect_from_corners(a: tuple[float, float], b: tuple[float, float]) -> Rect:
    x, y = min(a[0], b[0]), min(a[1], b[1])
    return Rect(x, y, abs(a[0] - b[0]), abs(a[1] - b[1]))


class Selection:
    """Ordered set of selected ids plus the single hovered id."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: dict[str, None] = dict.fromkeys(ids)
        self.hovered_id: str | None = None

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._ids

    def select(self, element_id: str) -> None:
        self._ids = {element_id: None}

    def select_many(self, element_ids: Iterable[str], additive: bool = False) -> None:
        if not additive:
            self._ids = {}
        for eid in element_ids:
            self._ids[eid] = None

    def toggle_selection(self, element_id: str) -> None:
        if element_id in self._ids:
            del self._ids[element_id]
        else:
            self._ids[element_id] = None

    def deselect_all(self) -> None:
        self._ids = {}

    def is_selected(self, element_id: str) -> bool:
        return element_id in self._ids

    def prune(self, existing: Iterable[str] | ElementStore) -> None:
        """Forget ids that are no longer in the scene."""
        alive = set(existing.elements) if isinstance(existing, ElementStore) else set(existing)
        self._ids = {eid: None for eid in self._ids if eid in alive}
        if self.hovered_id not in alive:
            self.hovered_id = None


@dataclass
class DragSession:
    anchor_id: str
    offset: tuple[float, float]
    ids: list[str]
    start: tuple[float, float]
    last_event_at: float
    moved: bool = False


@dataclass
class Marquee:
    origin: tuple[float, float]
    current: tuple[float, float]
    additive: bool = False

    @property
    def rect(self) -> Rect:
        return rect_from_corners(self.origin, self.current)


@dataclass
class SelectionController:
    selection: Selection = field(default_factory=Selection)
    drag: DragSession | None = None
    marquee: Marquee | None = None
    guides: list[SnapGuide] = field(default_factory=list)
    colliding: set[str] = field(default_factory=set)

    # -- hit-testing ----------------------------------------------------

    def hit_test(self, store: ElementStore, point: tuple[float, float], viewport: Viewport) -> str | None:
        """Topmost visible element whose footprint contains ``point``."""
        tolerance = viewport.pixels_to_world(HIT_TOLERANCE_PX)
        for element in reversed(store.ordered(visible_only=True)):
            # the room outline is background, clicks on it start a marquee
            if isinstance(element, Zone) and element.is_space:
                continue
            if contains_point(element, point, tolerance):
                return element.id
        return None

    def hover(self, store: ElementStore, point: tuple[float, float], viewport: Viewport) -> str | None:
        self.selection.hovered_id = self.hit_test(store, point, viewport)
        return self.selection.hovered_id

    def select_in_rect(self, store: ElementStore, rect: Rect, additive: bool = False) -> list[str]:
        """Marquee selection: visible, unlocked elements whose footprint touches ``rect``."""
        area = rect_polygon(rect)
        hits = [
            e.id for e in store.ordered(visible_only=True)
            if _selectable(e) and area.intersects(element_footprint(e))
        ]
        self.selection.select_many(hits, additive=additive)
        return hits

    def select_all(self, store: ElementStore) -> list[str]:
        ids = [e.id for e in store.ordered(visible_only=True) if _selectable(e)]
        self.selection.select_many(ids)
        return ids

    # -- marquee --------------------------------------------------------

    def begin_marquee(self, point: tuple[float, float], additive: bool = False) -> None:
        self.marquee = Marquee(origin=point, current=point, additive=additive)

    def update_marquee(self, point: tuple[float, float]) -> None:
        if self.marquee is not None:
            self.marquee.current = point

    def end_marquee(self, store: ElementStore) -> list[str]:
        marquee, self.marquee = self.marquee, None
        if marquee is None:
            return []
        rect = marquee.rect
        if rect.width <= contract.EPSILON and rect.height <= contract.EPSILON:
            return []
        return self.select_in_rect(store, rect, additive=marquee.additive)

    # -- drag -----------------------------------------------------------

    def begin_drag(self, store: ElementStore, state: EditorState, anchor_id: str, point: tuple[float, float]) -> bool:
        anchor = store.get_element_by_id(anchor_id)
        if anchor is None:
            return False
        if not self.selection.is_selected(anchor_id):
            self.selection.select(anchor_id)
        self.drag = DragSession(
            anchor_id=anchor_id,
            offset=(point[0] - anchor.x, point[1] - anchor.y),
            ids=self.selection.ids,
            start=(anchor.x, anchor.y),
            last_event_at=state.clock(),
        )
        self.guides = []
        self.colliding = set()
        return True

    def _moving_ids(self, store: ElementStore, ids: list[str]) -> set[str]:
        moving = {eid for eid in ids if eid in store}
        for eid in list(moving):
            if isinstance(store.elements[eid], Table):
                moving.update(chair.id for chair in store.chairs_of(eid))
        return moving

    def drag_to(
        self,
        store: ElementStore,
        state: EditorState,
        viewport: Viewport,
        point: tuple[float, float],
    ) -> list[str]:
        """Apply one drag-move event; returns the ids that moved."""
        drag = self.drag
        if drag is None:
            return []
        anchor = store.get_element_by_id(drag.anchor_id)
        if anchor is None:
            # grabbed element was deleted mid-drag
            self.cancel_drag(store, revert=False)
            return []
        drag.last_event_at = state.clock()

        target_x = point[0] - drag.offset[0]
        target_y = point[1] - drag.offset[1]
        dx0, dy0 = target_x - anchor.x, target_y - anchor.y
        bounds = element_bounds(anchor)
        proposed = Rect(bounds.x + dx0, bounds.y + dy0, bounds.width, bounds.height)

        moving = self._moving_ids(store, drag.ids)
        others = [(e.id, element_bounds(e)) for e in store.ordered(visible_only=True) if e.id not in moving]
        snapped = snap_rect(proposed, others, state.snap_threshold(viewport), state.active_grid())

        dx = dx0 + (snapped.x - proposed.x)
        dy = dy0 + (snapped.y - proposed.y)
        self.guides = snapped.guides
        moved = store.move_elements(drag.ids, dx, dy) if (dx or dy) else []
        if moved:
            drag.moved = True
        self.colliding = find_collisions(store, moving, state.settings.collision.buffer)
        return moved

    def end_drag(self) -> DragSession | None:
        drag, self.drag = self.drag, None
        self.guides = []
        self.colliding = set()
        return drag

    def cancel_drag(self, store: ElementStore, revert: bool = True) -> None:
        """Abort the drag; with ``revert`` the selection returns to where it started."""
        drag = self.end_drag()
        if drag is None or not revert or not drag.moved:
            return
        anchor = store.get_element_by_id(drag.anchor_id)
        if anchor is None:
            return
        store.move_elements(drag.ids, drag.start[0] - anchor.x, drag.start[1] - anchor.y)

    def expire_stale_drag(self, store: ElementStore, state: EditorState) -> bool:
        timeout = state.settings.drag.timeout_seconds
        if self.drag is None or timeout is None:
            return False
        if state.clock() - self.drag.last_event_at <= timeout:
            return False
        logger.warning("Drag on {id} timed out, ending session", id=self.drag.anchor_id)
        self.cancel_drag(store, revert=False)
        return True

    # -- keyboard -------------------------------------------------------

    def nudge(
        self,
        store: ElementStore,
        viewport: Viewport,
        dx_px: float,
        dy_px: float,
    ) -> list[str]:
        """Move the selection by a screen-pixel delta (arrow keys)."""
        if not self.selection.ids:
            return []
        dx, dy = viewport.screen_delta_to_world(dx_px, dy_px)
        return store.move_elements(self.selection.ids, dx, dy)


__all__ = [
    "Selection",
    "SelectionController",
    "DragSession",
    "Marquee",
    "rect_from_corners",
]
