"""Floor-plan structure: wall segments and the doors bound to them.

A door never stores absolute coordinates. Its position is the fraction of
the way along its wall (0 = start point, 1 = end point) of the door center,
so moving a wall drags its doors with it.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from shapely.geometry import LineString, Point

from layout_maker.exceptions import GeometryValidationError, MalformedSceneError
from layout_maker.geometry import contract
from layout_maker.model.elements import new_id


@dataclass
class Wall:
    id: str
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float = contract.DEFAULT_WALL_THICKNESS

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @property
    def angle(self) -> float:
        """Direction from start to end in degrees, [0, 360)."""
        return contract.normalize_rotation(math.degrees(math.atan2(self.y2 - self.y1, self.x2 - self.x1)))

    @property
    def start(self) -> tuple[float, float]:
        return self.x1, self.y1

    @property
    def end(self) -> tuple[float, float]:
        return self.x2, self.y2

    def line(self) -> LineString:
        return LineString([self.start, self.end])

    def point_at(self, fraction: float) -> tuple[float, float]:
        return (
            self.x1 + (self.x2 - self.x1) * fraction,
            self.y1 + (self.y2 - self.y1) * fraction,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Door:
    id: str
    wall_id: str
    position_along_wall: float
    width: float = contract.DEFAULT_DOOR_WIDTH
    hinge_side: str = "start"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WallHit:
    wall: Wall
    fraction: float
    distance: float
    point: tuple[float, float]


@dataclass
class DoorPlacement:
    """World geometry of a door resolved against its wall."""

    door_id: str
    wall_id: str
    center: tuple[float, float]
    start: tuple[float, float]
    end: tuple[float, float]
    angle: float


def make_wall(
    start: tuple[float, float],
    end: tuple[float, float],
    thickness: float = contract.DEFAULT_WALL_THICKNESS,
    wall_id: str | None = None,
) -> Wall:
    """Create a validated wall segment.

    Raises:
        GeometryValidationError: non-finite coordinates, zero length or
            non-positive thickness.
    """
    validate_wall_geometry(start[0], start[1], end[0], end[1], thickness)
    return Wall(
        id=wall_id or new_id("wall"),
        x1=float(start[0]),
        y1=float(start[1]),
        x2=float(end[0]),
        y2=float(end[1]),
        thickness=float(thickness),
    )


def validate_wall_geometry(x1: float, y1: float, x2: float, y2: float, thickness: float) -> None:
    if not contract.is_finite(x1, y1, x2, y2, thickness):
        raise GeometryValidationError("wall coordinates must be finite")
    if thickness <= 0:
        raise GeometryValidationError("wall thickness must be positive", {"thickness": str(thickness)})
    if math.hypot(x2 - x1, y2 - y1) <= contract.EPSILON:
        raise GeometryValidationError("wall must have non-zero length")


def clamp_door_fraction(wall: Wall, fraction: float, width: float) -> float:
    """Keep the whole door on its wall; degenerate walls pin the door to the middle."""
    length = wall.length
    if length <= contract.EPSILON:
        return 0.5
    half = min(width, length) / 2.0 / length
    return contract.clamp(fraction, half, 1.0 - half)


def make_door(wall: Wall, fraction: float, width: float = contract.DEFAULT_DOOR_WIDTH, door_id: str | None = None) -> Door:
    """Create a door on ``wall`` centered at ``fraction``.

    Raises:
        GeometryValidationError: non-finite fraction or non-positive width.
    """
    if not contract.is_finite(fraction, width) or width <= 0:
        raise GeometryValidationError("door width must be positive and finite")
    width = min(float(width), wall.length)
    return Door(
        id=door_id or new_id("door"),
        wall_id=wall.id,
        position_along_wall=clamp_door_fraction(wall, float(fraction), width),
        width=width,
    )


def nearest_wall(
    walls: Iterable[Wall],
    point: tuple[float, float],
    max_distance: float,
) -> WallHit | None:
    """Closest wall to ``point`` within ``max_distance`` (plus half the wall thickness)."""
    target = Point(point)
    best: WallHit | None = None
    for wall in walls:
        if wall.length <= contract.EPSILON:
            continue
        line = wall.line()
        distance = line.distance(target)
        if distance > max_distance + wall.thickness / 2.0:
            continue
        if best is not None and distance >= best.distance:
            continue
        fraction = float(line.project(target, normalized=True))
        best = WallHit(wall=wall, fraction=fraction, distance=distance, point=wall.point_at(fraction))
    return best


def resolve_door(door: Door, walls_by_id: dict[str, Wall]) -> DoorPlacement | None:
    """Absolute geometry of a door, or None when its wall is gone."""
    wall = walls_by_id.get(door.wall_id)
    if wall is None or wall.length <= contract.EPSILON:
        return None
    length = wall.length
    half = min(door.width, length) / 2.0 / length
    fraction = door.position_along_wall
    return DoorPlacement(
        door_id=door.id,
        wall_id=wall.id,
        center=wall.point_at(fraction),
        start=wall.point_at(fraction - half),
        end=wall.point_at(fraction + half),
        angle=wall.angle,
    )


def wall_endpoints(walls: Iterable[Wall]) -> list[tuple[float, float]]:
    points: list[tuple[float, float]] = []
    for wall in walls:
        points.append(wall.start)
        points.append(wall.end)
    return points


def walls_bounds(walls: Sequence[Wall]) -> tuple[float, float, float, float] | None:
    """(min_x, min_y, max_x, max_y) of the wall outline including thickness."""
    if not walls:
        return None
    pad = max(w.thickness for w in walls) / 2.0
    xs = [c for w in walls for c in (w.x1, w.x2)]
    ys = [c for w in walls for c in (w.y1, w.y2)]
    return min(xs) - pad, min(ys) - pad, max(xs) + pad, max(ys) + pad


def wall_from_dict(payload: dict[str, Any]) -> Wall:
    try:
        wall = Wall(
            id=str(payload["id"]),
            x1=float(payload["x1"]),
            y1=float(payload["y1"]),
            x2=float(payload["x2"]),
            y2=float(payload["y2"]),
            thickness=float(payload.get("thickness", contract.DEFAULT_WALL_THICKNESS)),
        )
        validate_wall_geometry(wall.x1, wall.y1, wall.x2, wall.y2, wall.thickness)
    except (KeyError, TypeError, ValueError, GeometryValidationError) as exc:
        raise MalformedSceneError(f"invalid wall payload: {exc}") from exc
    return wall


def door_from_dict(payload: dict[str, Any]) -> Door:
    try:
        door = Door(
            id=str(payload["id"]),
            wall_id=str(payload["wall_id"]),
            position_along_wall=float(payload["position_along_wall"]),
            width=float(payload.get("width", contract.DEFAULT_DOOR_WIDTH)),
            hinge_side=str(payload.get("hinge_side", "start")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedSceneError(f"invalid door payload: {exc}") from exc
    if not contract.is_finite(door.position_along_wall, door.width) or not 0.0 <= door.position_along_wall <= 1.0:
        raise MalformedSceneError("door position must be a fraction in [0, 1]", {"id": door.id})
    return door


__all__ = [
    "Wall",
    "Door",
    "WallHit",
    "DoorPlacement",
    "make_wall",
    "make_door",
    "validate_wall_geometry",
    "clamp_door_fraction",
    "nearest_wall",
    "resolve_door",
    "wall_endpoints",
    "walls_bounds",
    "wall_from_dict",
    "door_from_dict",
]
