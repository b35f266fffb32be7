from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Sequence, Tuple

from shapely.geometry import MultiPoint, Point
from shapely.ops import nearest_points

from layout_maker.geometry import contract
from layout_maker.geometry.viewport import Rect

Orientation = Literal["vertical", "horizontal", "angular"]
GuideKind = Literal["grid", "edge", "center", "angle", "endpoint"]

# lower wins when two candidates are equally close
_KIND_PRIORITY = {"grid": 0, "edge": 1, "center": 2}


@dataclass
class SnapGuide:
    """Transient alignment hint.

    ``vertical`` guides are lines of constant x at ``position``; ``horizontal``
    guides are lines of constant y; ``angular`` guides carry the snapped
    direction in degrees.
    """

    orientation: Orientation
    position: float
    kind: GuideKind
    target_id: str | None = None


@dataclass
class SnapResult:
    x: float
    y: float
    guides: List[SnapGuide] = field(default_factory=list)

    @property
    def snapped(self) -> bool:
        return bool(self.guides)


@dataclass
class AngleSnap:
    point: Tuple[float, float]
    angle: float
    snapped: bool


@dataclass
class _Candidate:
    distance: float
    priority: int
    order: int
    shift: float
    guide: SnapGuide


def _best(candidates: Sequence[_Candidate], threshold: float) -> _Candidate | None:
    eligible = [c for c in candidates if c.distance <= threshold]
    if not eligible:
        return None
    return min(eligible, key=lambda c: (round(c.distance, 9), c.priority, c.order))


def _axis_candidates(
    orientation: Orientation,
    start: float,
    size: float,
    grid_size: float | None,
    targets: Sequence[Tuple[str, float, float]],
) -> List[_Candidate]:
    """Candidates along one axis for a span [start, start + size]."""
    candidates: List[_Candidate] = []
    order = 0
    if grid_size:
        aligned = round(start / grid_size) * grid_size
        candidates.append(
            _Candidate(abs(aligned - start), _KIND_PRIORITY["grid"], order, aligned - start,
                       SnapGuide(orientation, aligned, "grid"))
        )
        order += 1

    moving_edges = (start, start + size)
    moving_center = start + size / 2.0
    for target_id, t_start, t_size in targets:
        for edge in (t_start, t_start + t_size):
            for own in moving_edges:
                candidates.append(
                    _Candidate(abs(edge - own), _KIND_PRIORITY["edge"], order, edge - own,
                               SnapGuide(orientation, edge, "edge", target_id))
                )
                order += 1
        t_center = t_start + t_size / 2.0
        candidates.append(
            _Candidate(abs(t_center - moving_center), _KIND_PRIORITY["center"], order, t_center - moving_center,
                       SnapGuide(orientation, t_center, "center", target_id))
        )
        order += 1
    return candidates


def snap_rect(
    proposed: Rect,
    others: Iterable[Tuple[str, Rect]],
    threshold: float,
    grid_size: float | None = None,
) -> SnapResult:
    """
    Snap a moving box against the grid and the edges/centers of other boxes.

    Each axis is solved independently: the closest candidate within
    ``threshold`` wins, ties go grid > edge > center and then to the first
    target in paint order. Both axes may snap at once; the returned (x, y)
    is then the intersection of the two guides.
    """
    nearby = [
        (oid, rect) for oid, rect in others
        if rect.x - threshold <= proposed.max_x and rect.max_x + threshold >= proposed.x
        or rect.y - threshold <= proposed.max_y and rect.max_y + threshold >= proposed.y
    ]
    x_targets = [(oid, r.x, r.width) for oid, r in nearby]
    y_targets = [(oid, r.y, r.height) for oid, r in nearby]

    best_x = _best(_axis_candidates("vertical", proposed.x, proposed.width, grid_size, x_targets), threshold)
    best_y = _best(_axis_candidates("horizontal", proposed.y, proposed.height, grid_size, y_targets), threshold)

    result = SnapResult(proposed.x, proposed.y)
    if best_x is not None:
        result.x = proposed.x + best_x.shift
        result.guides.append(best_x.guide)
    if best_y is not None:
        result.y = proposed.y + best_y.shift
        result.guides.append(best_y.guide)
    return result


def snap_point_to_grid(point: Tuple[float, float], grid_size: float, threshold: float) -> Tuple[Tuple[float, float], bool]:
    """Nearest grid intersection when it lies within ``threshold``."""
    if grid_size <= 0:
        return point, False
    gx = round(point[0] / grid_size) * grid_size
    gy = round(point[1] / grid_size) * grid_size
    if math.hypot(point[0] - gx, point[1] - gy) <= threshold:
        return (gx, gy), True
    return point, False


def snap_to_points(
    point: Tuple[float, float],
    targets: Sequence[Tuple[float, float]],
    threshold: float,
) -> Tuple[Tuple[float, float], bool]:
    """Snap onto the closest existing point (e.g. a wall endpoint) within ``threshold``."""
    if not targets:
        return point, False
    origin = Point(point)
    _, nearest = nearest_points(origin, MultiPoint(list(targets)))
    if origin.distance(nearest) <= threshold:
        return (nearest.x, nearest.y), True
    return point, False


def angle_of(start: Tuple[float, float], end: Tuple[float, float]) -> float:
    dx, dy = end[0] - start[0], end[1] - start[1]
    if abs(dx) < contract.EPSILON and abs(dy) < contract.EPSILON:
        return 0.0
    return contract.normalize_rotation(math.degrees(math.atan2(dy, dx)))


def snap_angle(angle: float, candidates: Sequence[float], tolerance: float) -> Tuple[float, bool]:
    """Closest candidate angle within ``tolerance`` degrees (first listed wins ties)."""
    best: Tuple[float, float] | None = None  # (delta, candidate)
    for candidate in candidates:
        delta = contract.angular_distance(angle, candidate)
        if best is None or delta < best[0]:
            best = (delta, candidate)
    if best is None or best[0] > tolerance:
        return contract.normalize_rotation(angle), False
    return contract.normalize_rotation(best[1]), True


def _unit_from_angle(angle_deg: float) -> Tuple[float, float]:
    # exact vectors on the axes so snapped walls are exactly orthogonal
    exact = {0.0: (1.0, 0.0), 90.0: (0.0, 1.0), 180.0: (-1.0, 0.0), 270.0: (0.0, -1.0)}
    angle = contract.normalize_rotation(angle_deg)
    if angle in exact:
        return exact[angle]
    a = math.radians(angle)
    return math.cos(a), math.sin(a)


def snap_segment_end(
    start: Tuple[float, float],
    end: Tuple[float, float],
    candidates: Sequence[float],
    tolerance: float,
) -> AngleSnap:
    """
    If the segment direction is within tolerance of a candidate angle,
    rotate the end point about ``start`` onto it, preserving length.
    """
    length = math.hypot(end[0] - start[0], end[1] - start[1])
    current = angle_of(start, end)
    if length < contract.EPSILON:
        return AngleSnap(point=end, angle=current, snapped=False)
    snapped_angle, snapped = snap_angle(current, candidates, tolerance)
    if not snapped:
        return AngleSnap(point=end, angle=current, snapped=False)
    ux, uy = _unit_from_angle(snapped_angle)
    return AngleSnap(
        point=(start[0] + ux * length, start[1] + uy * length),
        angle=snapped_angle,
        snapped=True,
    )


__all__ = [
    "SnapGuide",
    "SnapResult",
    "AngleSnap",
    "snap_rect",
    "snap_point_to_grid",
    "snap_to_points",
    "angle_of",
    "snap_angle",
    "snap_segment_end",
]
