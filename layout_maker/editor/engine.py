"""
LayoutEngine: the single entry point the host talks to.

Every intent mutates the active scene synchronously and never raises for
bad input: validation and tool-state failures are logged, kept in
``last_error`` and leave the scene untouched. The renderer reads an
immutable ``RenderSnapshot`` built on demand.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Literal

from loguru import logger

from layout_maker.editor.construction import (
    ConstructionPhase,
    PresetLibrary,
    WallConstruction,
    WallPreset,
    append_walls,
    delete_wall,
    move_wall_endpoint,
)
from layout_maker.editor.selection import SelectionController
from layout_maker.editor.state import EditorState, Modifiers, ToolMode
from layout_maker.exceptions import GeometryValidationError, ToolStateError, ValidationError
from layout_maker.geometry import contract
from layout_maker.geometry.shapes import element_bounds
from layout_maker.geometry.viewport import Rect, Viewport
from layout_maker.model.catalog import ELEMENT_DEFAULTS, resolve_table_size
from layout_maker.model.elements import (
    DECORATION_TYPES,
    SPACE_CATEGORY,
    SERVICE_TYPES,
    ZONE_CATEGORIES,
    Decoration,
    Element,
    ElementKind,
    Service,
    Table,
    TableType,
    Zone,
    new_id,
)
from layout_maker.model.scene import Scene, new_scene
from layout_maker.model.seating import seat_world_pose
from layout_maker.model.walls import Door, Wall, resolve_door, walls_bounds
from layout_maker.settings import Settings


@dataclass(frozen=True)
class RenderSnapshot:
    """What to draw and where; built fresh for every frame."""

    viewport: dict[str, float]
    visible_elements: tuple[dict[str, Any], ...]
    walls: tuple[dict[str, Any], ...]
    doors: tuple[dict[str, Any], ...]
    selection: tuple[str, ...]
    hover_id: str | None
    active_guides: tuple[dict[str, Any], ...]
    ghost_preview: dict[str, Any] | None
    colliding_ids: tuple[str, ...] = ()
    seats: dict[str, tuple[dict[str, float], ...]] = field(default_factory=dict)
    scratch_walls: tuple[dict[str, Any], ...] = ()
    scratch_doors: tuple[dict[str, Any], ...] = ()
    tool: str = ToolMode.SELECT.value
    phase: str = ConstructionPhase.IDLE.value
    scene_id: str = ""
    scene_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "scene_id": self.scene_id,
            "scene_name": self.scene_name,
            "tool": self.tool,
            "phase": self.phase,
            "viewport": dict(self.viewport),
            "visible_elements": [dict(e) for e in self.visible_elements],
            "walls": [dict(w) for w in self.walls],
            "doors": [dict(d) for d in self.doors],
            "scratch_walls": [dict(w) for w in self.scratch_walls],
            "scratch_doors": [dict(d) for d in self.scratch_doors],
            "selection": list(self.selection),
            "hover_id": self.hover_id,
            "active_guides": [dict(g) for g in self.active_guides],
            "ghost_preview": copy.deepcopy(self.ghost_preview),
            "colliding_ids": list(self.colliding_ids),
            "seats": {tid: [dict(s) for s in seats] for tid, seats in self.seats.items()},
        }


def _door_payload(door: Door, walls_by_id: dict[str, Wall]) -> dict[str, Any] | None:
    placement = resolve_door(door, walls_by_id)
    if placement is None:
        return None
    payload = door.to_dict()
    payload.update(center=placement.center, start=placement.start, end=placement.end, angle=placement.angle)
    return payload


class LayoutEngine:
    def __init__(
        self,
        scene: Scene | None = None,
        settings: Settings | None = None,
        state: EditorState | None = None,
        viewport: Viewport | None = None,
        presets: PresetLibrary | None = None,
    ) -> None:
        self.settings = settings or (state.settings if state else Settings())
        self.state = state or EditorState.from_settings(self.settings)
        self.viewport = viewport or Viewport.from_settings(self.settings.viewport)
        self.presets = presets or PresetLibrary()
        self.controller = SelectionController()
        self.construction = WallConstruction()
        self.last_error: Exception | None = None
        self.scene = scene or new_scene(orphan_policy=self.settings.seating.orphan_policy)
        self._adopt(self.scene)

    # -- plumbing -------------------------------------------------------

    @property
    def store(self):
        return self.scene.store

    @property
    def selection(self):
        return self.controller.selection

    @contextmanager
    def _reporting(self, action: str) -> Iterator[None]:
        """Turn rejected input into ``last_error`` instead of an exception."""
        self.last_error = None
        try:
            yield
        except (ValidationError, ToolStateError) as exc:
            logger.warning("{action} rejected: {message}", action=action, message=exc.message)
            self.last_error = exc

    def _adopt(self, scene: Scene) -> None:
        scene.store.orphan_policy = self.settings.seating.orphan_policy
        scene.store.chair_size = self.settings.seating.chair_size
        if scene.viewport:
            self.viewport.restore(scene.viewport)
        else:
            self.viewport.reset_view()

    def load_scene(self, scene: Scene) -> None:
        """Make ``scene`` the live scene; transient editor state is dropped.

        Uncommitted walls and doors belong to the outgoing scene and are discarded.
        """
        self.controller = SelectionController()
        if self.construction.buffer:
            logger.debug("Discarding uncommitted walls of scene {id}", id=self.scene.id)
        self.construction.cancel()
        self.scene = scene
        self._adopt(scene)
        self.last_error = None

    def sync_viewport(self) -> None:
        """Record the current pan/zoom on the scene before it is persisted."""
        self.scene.viewport = self.viewport.to_dict()

    def _world(self, screen_point: tuple[float, float]) -> tuple[float, float]:
        return tuple(self.viewport.screen_to_world(screen_point))

    def _touched(self) -> None:
        self.scene.touch()
        self.selection.prune(self.store)

    # -- tools ----------------------------------------------------------

    def set_tool(self, mode: ToolMode | str) -> None:
        with self._reporting("set_tool"):
            try:
                tool = ToolMode(mode)
            except ValueError as exc:
                raise ValidationError(f"unknown tool: {mode!r}") from exc
            if tool is self.state.tool:
                return
            self.controller.cancel_drag(self.store, revert=False)
            self.controller.marquee = None
            self.construction.reset_tool()
            self.state.tool = tool
            logger.debug("Tool switched to {tool}", tool=tool.value)

    def set_snap_to_grid(self, enabled: bool) -> None:
        self.state.snap_to_grid = bool(enabled)

    def set_grid_size(self, size: float) -> None:
        with self._reporting("set_grid_size"):
            if not contract.is_finite(size) or not contract.MIN_GRID_SIZE <= size <= contract.MAX_GRID_SIZE:
                raise GeometryValidationError("grid size out of range", {"size": str(size)})
            self.state.grid_size = float(size)

    # -- pointer --------------------------------------------------------

    def pointer_down(self, screen_point: tuple[float, float], modifiers: Modifiers | None = None) -> None:
        modifiers = modifiers or Modifiers()
        with self._reporting("pointer_down"):
            self.controller.expire_stale_drag(self.store, self.state)
            point = self._world(screen_point)
            tool = self.state.tool
            if tool is ToolMode.SELECT:
                hit = self.controller.hit_test(self.store, point, self.viewport)
                if hit is None:
                    if not modifiers.additive:
                        self.selection.deselect_all()
                    self.controller.begin_marquee(point, additive=modifiers.additive)
                    return
                if modifiers.additive:
                    self.selection.toggle_selection(hit)
                    if not self.selection.is_selected(hit):
                        return
                self.controller.begin_drag(self.store, self.state, hit, point)
            elif tool is ToolMode.WALL:
                self.construction.wall_down(self.scene, self.state, self.viewport, point)
            elif tool is ToolMode.DOOR:
                self.construction.place_door(self.scene, self.state, self.viewport, point)
            elif tool is ToolMode.PAN:
                self.construction.pan_down(screen_point)

    def pointer_move(self, screen_point: tuple[float, float], modifiers: Modifiers | None = None) -> None:
        with self._reporting("pointer_move"):
            self.controller.expire_stale_drag(self.store, self.state)
            point = self._world(screen_point)
            tool = self.state.tool
            if tool is ToolMode.SELECT:
                if self.controller.drag is not None:
                    self.controller.drag_to(self.store, self.state, self.viewport, point)
                elif self.controller.marquee is not None:
                    self.controller.update_marquee(point)
                else:
                    self.controller.hover(self.store, point, self.viewport)
            elif tool is ToolMode.WALL:
                self.construction.wall_move(self.scene, self.state, self.viewport, point)
            elif tool is ToolMode.DOOR:
                self.construction.door_move(self.scene, self.state, self.viewport, point)
            elif tool is ToolMode.PAN:
                self.construction.pan_move(self.viewport, screen_point)

    def pointer_up(self, screen_point: tuple[float, float], modifiers: Modifiers | None = None) -> None:
        with self._reporting("pointer_up"):
            point = self._world(screen_point)
            tool = self.state.tool
            if tool is ToolMode.SELECT:
                if self.controller.drag is not None:
                    drag = self.controller.end_drag()
                    if drag is not None and drag.moved:
                        self.scene.touch()
                elif self.controller.marquee is not None:
                    self.controller.end_marquee(self.store)
            elif tool is ToolMode.WALL:
                self.construction.wall_up(self.scene, self.state, self.viewport, point)
            elif tool is ToolMode.PAN:
                self.construction.pan_up()

    def cancel_drag(self) -> None:
        self.controller.cancel_drag(self.store)
        self.controller.marquee = None
        self.construction.pan_up()

    def nudge(self, dx: int, dy: int, modifiers: Modifiers | None = None) -> list[str]:
        """Arrow-key move of the selection; ``dx``/``dy`` are -1, 0 or 1."""
        step = contract.NUDGE_LARGE_PX if modifiers and modifiers.shift else contract.NUDGE_PX
        moved: list[str] = []
        with self._reporting("nudge"):
            moved = self.controller.nudge(self.store, self.viewport, dx * step, dy * step)
            if moved:
                self.scene.touch()
        return moved

    # -- viewport -------------------------------------------------------

    def zoom_in(self, pivot: tuple[float, float] | None = None) -> None:
        self.viewport.zoom_in(pivot)

    def zoom_out(self, pivot: tuple[float, float] | None = None) -> None:
        self.viewport.zoom_out(pivot)

    def zoom_to(self, level: float, pivot: tuple[float, float] | None = None) -> None:
        self.viewport.zoom_to(level, pivot)

    def zoom_by(self, delta: float, pivot: tuple[float, float] | None = None) -> None:
        self.viewport.zoom_by(delta, pivot)

    def pan_by(self, dx: float, dy: float) -> None:
        self.viewport.pan_by(dx, dy)

    def resize(self, width: float, height: float) -> None:
        self.viewport.resize(width, height)

    def reset_view(self) -> None:
        self.viewport.reset_view()

    def content_bounds(self) -> tuple[float, float, float, float] | None:
        boxes = [element_bounds(e) for e in self.store.ordered(visible_only=True)]
        extents = [(b.x, b.y, b.max_x, b.max_y) for b in boxes]
        wall_box = walls_bounds(self.scene.walls)
        if wall_box is not None:
            extents.append(wall_box)
        if not extents:
            return None
        return (
            min(e[0] for e in extents),
            min(e[1] for e in extents),
            max(e[2] for e in extents),
            max(e[3] for e in extents),
        )

    def fit_to_content(self) -> bool:
        bounds = self.content_bounds()
        if bounds is None:
            return False
        self.viewport.fit_to_bounds(*bounds)
        return True

    # -- selection ------------------------------------------------------

    def select(self, element_id: str) -> None:
        if element_id in self.store:
            self.selection.select(element_id)

    def toggle_selection(self, element_id: str) -> None:
        if element_id in self.store:
            self.selection.toggle_selection(element_id)

    def deselect_all(self) -> None:
        self.selection.deselect_all()

    def is_selected(self, element_id: str) -> bool:
        return self.selection.is_selected(element_id)

    def select_all(self) -> list[str]:
        return self.controller.select_all(self.store)

    def select_in_rect(self, rect: Rect, additive: bool = False) -> list[str]:
        return self.controller.select_in_rect(self.store, rect, additive)

    # -- element intents ------------------------------------------------

    def add_space(self, width: float, height: float) -> Zone | None:
        """Create the room outline at the origin, replacing any previous one."""
        space: Zone | None = None
        with self._reporting("add_space"):
            if not contract.is_finite(width, height) or width <= 0 or height <= 0:
                raise GeometryValidationError("space size must be positive", {"width": str(width), "height": str(height)})
            for old in [e for e in self.store.ordered() if isinstance(e, Zone) and e.is_space]:
                self.store.delete_element(old.id)
            space = Zone(id=new_id("space"), x=0.0, y=0.0, width=float(width), height=float(height),
                         category=SPACE_CATEGORY, label="Space", locked=True)
            self.store.add_element(space)
            self.store.send_to_back(space.id)
            self.viewport.fit_to_bounds(0.0, 0.0, space.width, space.height)
            self._touched()
            logger.info("Space set to {w} x {h} m", w=width, h=height)
        return space

    def current_space(self) -> Zone | None:
        for element in self.store.ordered():
            if isinstance(element, Zone) and element.is_space:
                return element
        return None

    def _placement_center(self, target_space_id: str | None) -> tuple[float, float]:
        space = self.store.get_element_by_id(target_space_id) if target_space_id else self.current_space()
        if space is not None:
            return space.center
        visible = self.viewport.visible_world_bounds()
        return visible.x + visible.width / 2.0, visible.y + visible.height / 2.0

    def add_table(
        self,
        table_type: TableType | str,
        size_spec: str | float | None = None,
        seat_count: int = 8,
        target_space_id: str | None = None,
        center: tuple[float, float] | None = None,
    ) -> Table | None:
        """Add a table with its chairs, centered in the target space (or the view)."""
        table: Table | None = None
        with self._reporting("add_table"):
            try:
                table_type = TableType(table_type)
            except ValueError as exc:
                raise ValidationError(f"unknown table type: {table_type!r}") from exc
            if isinstance(seat_count, bool) or not isinstance(seat_count, int) or seat_count < 0:
                raise ValidationError("seat count must be a non-negative integer", {"seat_count": str(seat_count)})
            if target_space_id is not None and target_space_id not in self.store:
                target_space_id = None
            width, height = resolve_table_size(table_type, size_spec, seat_count)
            cx, cy = center if center is not None else self._placement_center(target_space_id)
            table = Table(
                id=new_id("table"),
                x=cx - width / 2.0,
                y=cy - height / 2.0,
                width=width,
                height=height,
                table_type=table_type,
                capacity=seat_count,
                table_number=self.store.next_table_number(),
                space_id=target_space_id or getattr(self.current_space(), "id", None),
            )
            table.chair_config.offset = self.settings.seating.chair_offset
            self.store.add_element(table)
            self.store.generate_chairs(table.id)
            self._touched()
        return table

    def add_item(
        self,
        kind: ElementKind | str,
        subtype: str,
        center: tuple[float, float] | None = None,
        width: float | None = None,
        height: float | None = None,
    ) -> Element | None:
        """Add a zone, service or decoration using the catalog's default size."""
        element: Element | None = None
        with self._reporting("add_item"):
            try:
                kind = ElementKind(kind)
            except ValueError as exc:
                raise ValidationError(f"unknown element kind: {kind!r}") from exc
            choices: dict[ElementKind, tuple[str, ...]] = {
                # the room outline is owned by add_space
                ElementKind.ZONE: tuple(c for c in ZONE_CATEGORIES if c != SPACE_CATEGORY),
                ElementKind.SERVICE: SERVICE_TYPES,
                ElementKind.DECORATION: DECORATION_TYPES,
            }
            if kind not in choices or subtype not in choices[kind]:
                raise ValidationError(f"cannot add {kind!r}/{subtype!r}")
            default_w, default_h = ELEMENT_DEFAULTS.get(subtype, ELEMENT_DEFAULTS["custom"])
            width = default_w if width is None else width
            height = default_h if height is None else height
            if not contract.is_finite(width, height) or width <= 0 or height <= 0:
                raise GeometryValidationError("size must be positive", {"width": str(width), "height": str(height)})
            cx, cy = center if center is not None else self._placement_center(None)
            common = dict(id=new_id(subtype), x=cx - width / 2.0, y=cy - height / 2.0, width=float(width),
                          height=float(height), space_id=getattr(self.current_space(), "id", None))
            if kind is ElementKind.ZONE:
                element = Zone(category=subtype, **common)
            elif kind is ElementKind.SERVICE:
                element = Service(service_type=subtype, **common)
            else:
                element = Decoration(decoration_type=subtype, **common)
            self.store.add_element(element)
            self._touched()
        return element

    def update_element(self, element_id: str, **changes: Any) -> Element | None:
        element: Element | None = None
        with self._reporting("update_element"):
            element = self.store.update_element(element_id, **changes)
            if element is not None:
                self._touched()
        return element

    def move_elements(self, element_ids: Iterable[str], dx: float, dy: float) -> list[str]:
        moved: list[str] = []
        with self._reporting("move_elements"):
            moved = self.store.move_elements(element_ids, dx, dy)
            if moved:
                self.scene.touch()
        return moved

    def resize_element(self, element_id: str, width: float, height: float) -> Element | None:
        element: Element | None = None
        with self._reporting("resize_element"):
            element = self.store.resize_element(element_id, width, height)
            if element is not None:
                self.scene.touch()
        return element

    def rotate_element(self, element_id: str, rotation: float) -> Element | None:
        element: Element | None = None
        with self._reporting("rotate_element"):
            element = self.store.rotate_element(element_id, rotation)
            if element is not None:
                self.scene.touch()
        return element

    def rotate_selected(self, delta: float) -> Element | None:
        """Rotate the single selected element by ``delta`` degrees."""
        ids = self.selection.ids
        if len(ids) != 1:
            self.last_error = ToolStateError("rotate needs exactly one selected element", {"selected": len(ids)})
            logger.warning("rotate_selected rejected: {count} elements selected", count=len(ids))
            return None
        element = self.store.get_element_by_id(ids[0])
        if element is None:
            return None
        return self.rotate_element(element.id, element.rotation + delta)

    def delete_element(self, element_id: str) -> list[str]:
        removed = self.store.delete_element(element_id)
        if removed:
            self._touched()
        return removed

    def delete_selected(self) -> list[str]:
        removed: list[str] = []
        for eid in self.selection.ids:
            removed.extend(self.store.delete_element(eid))
        if removed:
            self._touched()
        return removed

    def duplicate_selected(self) -> list[str]:
        created: list[str] = []
        with self._reporting("duplicate"):
            created = self.store.duplicate(self.selection.ids)
            if created:
                self.selection.select_many(created)
                self._touched()
        return created

    def bring_to_front(self, element_id: str) -> bool:
        return self.store.bring_to_front(element_id)

    def send_to_back(self, element_id: str) -> bool:
        moved = self.store.send_to_back(element_id)
        self._keep_space_at_back()
        return moved

    def bring_forward(self, element_ids: Iterable[str] | None = None) -> list[str]:
        """Raise the given elements (default: the selection) one step."""
        ids = list(self.selection.ids if element_ids is None else element_ids)
        return self.store.bring_forward(ids)

    def send_backward(self, element_ids: Iterable[str] | None = None) -> list[str]:
        """Lower the given elements (default: the selection) one step; the space stays at the back."""
        ids = list(self.selection.ids if element_ids is None else element_ids)
        moved = self.store.send_backward(ids)
        self._keep_space_at_back()
        return moved

    def _keep_space_at_back(self) -> None:
        space = self.current_space()
        if space is not None:
            self.store.send_to_back(space.id)

    def set_locked(self, element_id: str, locked: bool) -> Element | None:
        return self.store.set_locked(element_id, locked)

    def set_visible(self, element_id: str, visible: bool) -> Element | None:
        return self.store.set_visible(element_id, visible)

    def set_capacity(self, table_id: str, capacity: int) -> Table | None:
        table: Table | None = None
        with self._reporting("set_capacity"):
            table = self.store.set_capacity(table_id, capacity)
            if table is not None:
                self._touched()
        return table

    def assign_guest(self, chair_id: str, guest_id: str, dietary_type: str | None = None,
                     allergy_flags: Iterable[str] = ()):
        return self.store.assign_guest(chair_id, guest_id, dietary_type, allergy_flags)

    def unassign_guest(self, chair_id: str):
        return self.store.unassign_guest(chair_id)

    # -- walls ----------------------------------------------------------

    def add_walls_batch(self, walls: Iterable[Wall], doors: Iterable[Door] = ()) -> bool:
        """Append a finished batch straight to the scene, all or nothing."""
        with self._reporting("add_walls_batch"):
            count = append_walls(self.scene, walls, doors)
            logger.info("Added {walls} walls and {doors} doors to {scene}", walls=count[0], doors=count[1],
                        scene=self.scene.id)
            return True
        return False

    def commit_walls(self) -> bool:
        with self._reporting("commit_walls"):
            self.construction.commit(self.scene)
            return True
        return False

    def cancel_walls(self) -> None:
        self.construction.cancel()

    def finish_wall_chain(self) -> None:
        self.construction.finish_chain()

    def save_preset(self, name: str) -> WallPreset | None:
        preset: WallPreset | None = None
        with self._reporting("save_preset"):
            buffer = self.construction.buffer
            preset = self.presets.save(name, buffer.walls, buffer.doors)
        return preset

    def load_preset(self, name: str) -> bool:
        preset = self.presets.load(name)
        if preset is None:
            self.last_error = ToolStateError(f"no preset named {name!r}")
            return False
        self.construction.load(preset)
        return True

    def move_wall_endpoint(self, wall_id: str, which: Literal["start", "end"], point: tuple[float, float]) -> Wall | None:
        wall: Wall | None = None
        with self._reporting("move_wall_endpoint"):
            wall = move_wall_endpoint(self.scene.walls, wall_id, which, point)
            if wall is None:
                wall = move_wall_endpoint(self.construction.buffer.walls, wall_id, which, point)
            else:
                self.scene.touch()
        return wall

    def delete_wall(self, wall_id: str) -> bool:
        if any(w.id == wall_id for w in self.scene.walls):
            self.scene.walls, self.scene.doors = delete_wall(self.scene.walls, self.scene.doors, wall_id)
            self.scene.touch()
            return True
        buffer = self.construction.buffer
        if any(w.id == wall_id for w in buffer.walls):
            buffer.walls, buffer.doors = delete_wall(buffer.walls, buffer.doors, wall_id)
            return True
        return False

    # -- rendering ------------------------------------------------------

    def _guides(self) -> list[dict[str, Any]]:
        if self.state.tool is ToolMode.SELECT:
            guides = self.controller.guides
        else:
            guides = self.construction.guides
        return [
            {"orientation": g.orientation, "position": g.position, "kind": g.kind, "target_id": g.target_id}
            for g in guides
        ]

    def _ghost(self) -> dict[str, Any] | None:
        marquee = self.controller.marquee
        if self.state.tool is ToolMode.SELECT and marquee is not None:
            return {"kind": "marquee", "rect": tuple(marquee.rect)}
        if self.state.tool in (ToolMode.WALL, ToolMode.DOOR):
            return self.construction.ghost()
        return None

    def snapshot(self) -> RenderSnapshot:
        visible = self.store.ordered(visible_only=True)
        seats: dict[str, tuple[dict[str, float], ...]] = {}
        for element in visible:
            if isinstance(element, Table):
                poses = (seat_world_pose(element, seat) for seat in element.seats)
                seats[element.id] = tuple({"x": x, "y": y, "angle": angle} for x, y, angle in poses)

        walls_by_id = self.scene.walls_by_id()
        doors = (_door_payload(d, walls_by_id) for d in self.scene.doors)
        scratch = self.construction.buffer
        scratch_walls_by_id = {**walls_by_id, **{w.id: w for w in scratch.walls}}
        scratch_doors = (_door_payload(d, scratch_walls_by_id) for d in scratch.doors)

        return RenderSnapshot(
            viewport=self.viewport.to_dict(),
            visible_elements=tuple(e.to_dict() for e in visible),
            walls=tuple(w.to_dict() for w in self.scene.walls),
            doors=tuple(d for d in doors if d is not None),
            selection=tuple(self.selection.ids),
            hover_id=self.selection.hovered_id,
            active_guides=tuple(self._guides()),
            ghost_preview=self._ghost(),
            colliding_ids=tuple(sorted(self.controller.colliding)),
            seats=seats,
            scratch_walls=tuple(w.to_dict() for w in scratch.walls),
            scratch_doors=tuple(d for d in scratch_doors if d is not None),
            tool=self.state.tool.value,
            phase=self.construction.phase.value,
            scene_id=self.scene.id,
            scene_name=self.scene.name,
        )


__all__ = ["LayoutEngine", "RenderSnapshot"]
