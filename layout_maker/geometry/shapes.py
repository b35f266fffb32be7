from __future__ import annotations

import math

from shapely import affinity
from shapely.geometry import Point, Polygon, box
from shapely.geometry.base import BaseGeometry

from layout_maker.geometry.viewport import Rect
from layout_maker.model.elements import Element, ElementKind, Table, TableType


def rotated_rectangle(x: float, y: float, width: float, height: float, rotation: float) -> Polygon:
    """Rectangle anchored top-left at (x, y), rotated about its center."""
    rect = box(x, y, x + width, y + height)
    if rotation % 360.0 == 0.0:
        return rect
    return affinity.rotate(rect, rotation, origin=(x + width / 2.0, y + height / 2.0))


def _ellipse(cx: float, cy: float, width: float, height: float, rotation: float) -> Polygon:
    circle = Point(cx, cy).buffer(1.0, quad_segs=32)
    ellipse = affinity.scale(circle, width / 2.0, height / 2.0, origin=(cx, cy))
    if rotation % 360.0 == 0.0:
        return ellipse
    return affinity.rotate(ellipse, rotation, origin=(cx, cy))


def element_footprint(element: Element) -> BaseGeometry:
    """Exact 2D outline used for hit-testing and marquee selection."""
    kind = element.kind
    if kind is ElementKind.TABLE:
        assert isinstance(element, Table)
        if element.table_type in (TableType.ROUND, TableType.OVAL):
            cx, cy = element.center
            return _ellipse(cx, cy, element.width, element.height, element.rotation)
        return rotated_rectangle(element.x, element.y, element.width, element.height, element.rotation)
    if kind in (ElementKind.CHAIR, ElementKind.ZONE, ElementKind.SERVICE, ElementKind.DECORATION):
        return rotated_rectangle(element.x, element.y, element.width, element.height, element.rotation)
    raise ValueError(f"unsupported element kind: {kind!r}")


def element_bounds(element: Element) -> Rect:
    """Axis-aligned bounds of the rotated element box."""
    if element.rotation == 0.0:
        return Rect(element.x, element.y, element.width, element.height)
    rad = math.radians(element.rotation)
    cos_r = abs(math.cos(rad))
    sin_r = abs(math.sin(rad))
    width = element.width * cos_r + element.height * sin_r
    height = element.width * sin_r + element.height * cos_r
    cx, cy = element.center
    return Rect(cx - width / 2.0, cy - height / 2.0, width, height)


def contains_point(element: Element, point: tuple[float, float], tolerance: float = 0.0) -> bool:
    footprint = element_footprint(element)
    target = Point(point)
    if tolerance > 0.0:
        return footprint.distance(target) <= tolerance
    return footprint.covers(target)


def rect_polygon(rect: Rect) -> Polygon:
    return box(rect.x, rect.y, rect.max_x, rect.max_y)


__all__ = [
    "rotated_rectangle",
    "element_footprint",
    "element_bounds",
    "contains_point",
    "rect_polygon",
]
