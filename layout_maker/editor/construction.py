"""
Wall/door construction state machine.

Drawing happens in a scratch buffer owned by the session. Nothing reaches
the scene until ``commit`` appends the whole buffer in one step; ``cancel``
throws it away. Presets are stored as deep copies so editing a loaded
preset never changes the saved one.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Literal

from loguru import logger

from layout_maker.editor.state import EditorState
from layout_maker.exceptions import GeometryValidationError, ValidationError
from layout_maker.geometry import contract
from layout_maker.geometry.viewport import Viewport
from layout_maker.model.elements import new_id, utc_now
from layout_maker.model.scene import Scene
from layout_maker.model.walls import (
    Door,
    DoorPlacement,
    Wall,
    door_from_dict,
    make_door,
    make_wall,
    nearest_wall,
    resolve_door,
    validate_wall_geometry,
    wall_endpoints,
    wall_from_dict,
)
from layout_maker.vector.snap import SnapGuide, snap_point_to_grid, snap_segment_end, snap_to_points


class ConstructionPhase(str, Enum):
    IDLE = "idle"
    DRAWING_WALL = "drawing_wall"
    PLACING_DOOR = "placing_door"
    PANNING = "panning"


@dataclass
class WallPreset:
    name: str
    walls: list[Wall] = field(default_factory=list)
    doors: list[Door] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "walls": [w.to_dict() for w in self.walls],
            "doors": [d.to_dict() for d in self.doors],
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "WallPreset":
        return cls(
            name=str(payload["name"]),
            walls=[wall_from_dict(item) for item in payload.get("walls") or []],
            doors=[door_from_dict(item) for item in payload.get("doors") or []],
            created_at=str(payload.get("created_at") or utc_now()),
        )


def _with_fresh_ids(walls: Iterable[Wall], doors: Iterable[Door]) -> tuple[list[Wall], list[Door]]:
    """Deep copies with new ids; door references follow their walls."""
    mapping: dict[str, str] = {}
    new_walls: list[Wall] = []
    for wall in walls:
        twin = copy.deepcopy(wall)
        twin.id = mapping.setdefault(wall.id, new_id("wall"))
        new_walls.append(twin)
    new_doors: list[Door] = []
    for door in doors:
        twin = copy.deepcopy(door)
        twin.id = new_id("door")
        twin.wall_id = mapping.get(door.wall_id, door.wall_id)
        new_doors.append(twin)
    return new_walls, new_doors


class PresetLibrary:
    def __init__(self, presets: Iterable[WallPreset] = ()) -> None:
        self._presets: dict[str, WallPreset] = {p.name: copy.deepcopy(p) for p in presets}

    def names(self) -> list[str]:
        return sorted(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def save(self, name: str, walls: Iterable[Wall], doors: Iterable[Door]) -> WallPreset:
        name = name.strip()
        if not name:
            raise ValidationError("preset name must not be empty")
        preset = WallPreset(name=name, walls=copy.deepcopy(list(walls)), doors=copy.deepcopy(list(doors)))
        self._presets[name] = preset
        logger.info("Saved wall preset {name} ({count} walls)", name=name, count=len(preset.walls))
        return copy.deepcopy(preset)

    def load(self, name: str) -> WallPreset | None:
        """Independent copy of a stored preset (fresh ids), or None."""
        stored = self._presets.get(name)
        if stored is None:
            return None
        walls, doors = _with_fresh_ids(stored.walls, stored.doors)
        return WallPreset(name=stored.name, walls=walls, doors=doors, created_at=stored.created_at)

    def delete(self, name: str) -> bool:
        return self._presets.pop(name, None) is not None

    def to_list(self) -> list[dict[str, Any]]:
        return [self._presets[name].to_dict() for name in self.names()]


@dataclass
class ScratchBuffer:
    walls: list[Wall] = field(default_factory=list)
    doors: list[Door] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.walls or self.doors)


def append_walls(scene: Scene, walls: Iterable[Wall], doors: Iterable[Door]) -> tuple[int, int]:
    """Validate a batch and append it to the scene in one step.

    Doors must reference a wall in the batch or already in the scene.

    Raises:
        GeometryValidationError: a wall is degenerate or non-finite.
        ValidationError: a door references an unknown wall or an id clashes.
    """
    walls = [copy.deepcopy(w) for w in walls]
    doors = [copy.deepcopy(d) for d in doors]
    for wall in walls:
        validate_wall_geometry(wall.x1, wall.y1, wall.x2, wall.y2, wall.thickness)
    known = {w.id for w in scene.walls}
    batch_ids = [w.id for w in walls]
    if len(set(batch_ids)) != len(batch_ids) or known.intersection(batch_ids):
        raise ValidationError("wall ids must be unique within the scene")
    walls_by_id = {**scene.walls_by_id(), **{w.id: w for w in walls}}
    for door in doors:
        wall = walls_by_id.get(door.wall_id)
        if wall is None:
            raise ValidationError(f"door {door.id} references unknown wall {door.wall_id}", {"id": door.id})
        if not contract.is_finite(door.position_along_wall, door.width) or door.width <= 0:
            raise GeometryValidationError("door width must be positive and finite", {"id": door.id})
        door.width = min(door.width, wall.length)
        door.position_along_wall = contract.clamp(door.position_along_wall, 0.0, 1.0)

    scene.walls = scene.walls + walls
    scene.doors = scene.doors + doors
    scene.touch()
    return len(walls), len(doors)


def move_wall_endpoint(
    walls: list[Wall],
    wall_id: str,
    which: Literal["start", "end"],
    point: tuple[float, float],
) -> Wall | None:
    """Move one end of a wall; its doors keep their fraction along it."""
    wall = next((w for w in walls if w.id == wall_id), None)
    if wall is None:
        return None
    if which == "start":
        validate_wall_geometry(point[0], point[1], wall.x2, wall.y2, wall.thickness)
        wall.x1, wall.y1 = float(point[0]), float(point[1])
    elif which == "end":
        validate_wall_geometry(wall.x1, wall.y1, point[0], point[1], wall.thickness)
        wall.x2, wall.y2 = float(point[0]), float(point[1])
    else:
        raise ValidationError(f"unknown wall endpoint: {which!r}")
    return wall


def delete_wall(walls: list[Wall], doors: list[Door], wall_id: str) -> tuple[list[Wall], list[Door]]:
    return (
        [w for w in walls if w.id != wall_id],
        [d for d in doors if d.wall_id != wall_id],
    )


class WallConstruction:
    """Pointer-driven wall drawing and door placement.

    Click-drag-release draws one segment; successive clicks chain segments
    from the previous end point until ``finish_chain`` (or a tool switch).
    """

    def __init__(self) -> None:
        self.phase = ConstructionPhase.IDLE
        self.buffer = ScratchBuffer()
        self.anchor: tuple[float, float] | None = None
        self.cursor: tuple[float, float] | None = None
        self.door_preview: DoorPlacement | None = None
        self.guides: list[SnapGuide] = []
        self._press: tuple[float, float] | None = None
        self._pan_last: tuple[float, float] | None = None

    # -- snapping -------------------------------------------------------

    def snap(
        self,
        scene: Scene,
        state: EditorState,
        viewport: Viewport,
        point: tuple[float, float],
    ) -> tuple[tuple[float, float], list[SnapGuide]]:
        """Endpoint snap first, then grid, then angle relative to the anchor."""
        endpoints = wall_endpoints(scene.walls + self.buffer.walls)
        snapped, hit = snap_to_points(point, endpoints, state.endpoint_threshold(viewport))
        if hit:
            return snapped, [
                SnapGuide("vertical", snapped[0], "endpoint"),
                SnapGuide("horizontal", snapped[1], "endpoint"),
            ]
        if not state.snap_to_grid:
            return point, []
        guides: list[SnapGuide] = []
        snapped, on_grid = snap_point_to_grid(point, state.grid_size, state.snap_threshold(viewport))
        if on_grid:
            guides = [SnapGuide("vertical", snapped[0], "grid"), SnapGuide("horizontal", snapped[1], "grid")]
        if self.anchor is not None and state.snap_angles:
            result = snap_segment_end(self.anchor, snapped, state.snap_angles, state.angle_tolerance)
            if result.snapped:
                return result.point, [SnapGuide("angular", result.angle, "angle")]
        return snapped, guides

    # -- wall tool ------------------------------------------------------

    def _add_segment(self, state: EditorState, end: tuple[float, float]) -> Wall | None:
        start = self.anchor
        if start is None:
            return None
        walls = state.settings.walls
        length = ((end[0] - start[0]) ** 2 + (end[1] - start[1]) ** 2) ** 0.5
        if length < max(walls.min_length, contract.EPSILON):
            return None
        wall = make_wall(start, end, walls.default_thickness)
        self.buffer.walls.append(wall)
        self.anchor = wall.end
        logger.debug("Drew wall {id} ({length:.2f} m)", id=wall.id, length=wall.length)
        return wall

    def wall_down(self, scene: Scene, state: EditorState, viewport: Viewport, point: tuple[float, float]) -> Wall | None:
        snapped, self.guides = self.snap(scene, state, viewport, point)
        self.cursor = snapped
        if self.anchor is None:
            self.anchor = snapped
            self.phase = ConstructionPhase.DRAWING_WALL
            self._press = snapped
            return None
        wall = self._add_segment(state, snapped)
        self._press = self.anchor
        return wall

    def wall_move(self, scene: Scene, state: EditorState, viewport: Viewport, point: tuple[float, float]) -> None:
        if self.phase is not ConstructionPhase.DRAWING_WALL:
            return
        self.cursor, self.guides = self.snap(scene, state, viewport, point)

    def wall_up(self, scene: Scene, state: EditorState, viewport: Viewport, point: tuple[float, float]) -> Wall | None:
        if self.phase is not ConstructionPhase.DRAWING_WALL or self._press is None:
            return None
        snapped, self.guides = self.snap(scene, state, viewport, point)
        press, self._press = self._press, None
        # a release away from the press point is a click-drag segment
        if press == self.anchor and snapped != press:
            return self._add_segment(state, snapped)
        return None

    def finish_chain(self) -> None:
        self.anchor = None
        self.cursor = None
        self._press = None
        self.guides = []
        if self.phase is ConstructionPhase.DRAWING_WALL:
            self.phase = ConstructionPhase.IDLE

    # -- door tool ------------------------------------------------------

    def _door_hit(self, scene: Scene, state: EditorState, viewport: Viewport, point: tuple[float, float]):
        walls = scene.walls + self.buffer.walls
        return nearest_wall(walls, point, viewport.pixels_to_world(state.settings.walls.door_pick_threshold_px))

    def door_move(self, scene: Scene, state: EditorState, viewport: Viewport, point: tuple[float, float]) -> None:
        hit = self._door_hit(scene, state, viewport, point)
        if hit is None:
            self.door_preview = None
            return
        self.phase = ConstructionPhase.PLACING_DOOR
        door = make_door(hit.wall, hit.fraction, state.settings.walls.door_width, door_id="preview")
        self.door_preview = resolve_door(door, {hit.wall.id: hit.wall})

    def place_door(
        self, scene: Scene, state: EditorState, viewport: Viewport, point: tuple[float, float]
    ) -> Door | None:
        """Put a door on the wall nearest ``point``.

        A click with no wall close enough, or on a wall too short for a door,
        changes nothing and returns ``None``.
        """
        hit = self._door_hit(scene, state, viewport, point)
        if hit is None:
            logger.debug("Door click at ({x:.2f}, {y:.2f}) missed every wall", x=point[0], y=point[1])
            return None
        settings = state.settings.walls
        if hit.wall.length < settings.door_min_width:
            logger.debug("Wall {id} is too short for a door", id=hit.wall.id)
            return None
        door = make_door(hit.wall, hit.fraction, settings.door_width)
        self.buffer.doors.append(door)
        self.phase = ConstructionPhase.PLACING_DOOR
        logger.debug("Placed door {id} on {wall} at {fraction:.3f}", id=door.id, wall=hit.wall.id,
                     fraction=door.position_along_wall)
        return door

    # -- pan tool -------------------------------------------------------

    def pan_down(self, screen_point: tuple[float, float]) -> None:
        self.phase = ConstructionPhase.PANNING
        self._pan_last = screen_point

    def pan_move(self, viewport: Viewport, screen_point: tuple[float, float]) -> None:
        if self.phase is not ConstructionPhase.PANNING or self._pan_last is None:
            return
        viewport.pan_by(screen_point[0] - self._pan_last[0], screen_point[1] - self._pan_last[1])
        self._pan_last = screen_point

    def pan_up(self) -> None:
        self._pan_last = None
        if self.phase is ConstructionPhase.PANNING:
            self.phase = ConstructionPhase.IDLE

    # -- session --------------------------------------------------------

    def reset_tool(self) -> None:
        """Leave any in-progress gesture; the scratch buffer survives."""
        self.finish_chain()
        self.pan_up()
        self.door_preview = None
        self.phase = ConstructionPhase.IDLE

    def load(self, preset: WallPreset) -> None:
        self.reset_tool()
        self.buffer = ScratchBuffer(walls=list(preset.walls), doors=list(preset.doors))

    def commit(self, scene: Scene) -> tuple[int, int]:
        """Append the scratch buffer to ``scene`` and start a fresh buffer."""
        counts = append_walls(scene, self.buffer.walls, self.buffer.doors)
        self.buffer = ScratchBuffer()
        self.reset_tool()
        logger.info("Committed {walls} walls and {doors} doors to {scene}", walls=counts[0], doors=counts[1],
                    scene=scene.id)
        return counts

    def cancel(self) -> None:
        self.buffer = ScratchBuffer()
        self.reset_tool()

    def ghost(self) -> dict[str, Any] | None:
        if self.phase is ConstructionPhase.DRAWING_WALL and self.anchor is not None and self.cursor is not None:
            return {"kind": "wall", "start": self.anchor, "end": self.cursor}
        if self.door_preview is not None:
            p = self.door_preview
            return {"kind": "door", "wall_id": p.wall_id, "center": p.center, "start": p.start, "end": p.end,
                    "angle": p.angle}
        return None


__all__ = [
    "ConstructionPhase",
    "WallPreset",
    "PresetLibrary",
    "ScratchBuffer",
    "WallConstruction",
    "append_walls",
    "move_wall_endpoint",
    "delete_wall",
]
