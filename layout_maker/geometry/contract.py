from __future__ import annotations

"""
Canvas Geometry Contract

Single source of truth for the scale, tolerances and defaults used by the
canvas engine. All modules should import from here instead of hardcoding.
"""

import math
from typing import Iterable

# Lengths in meters unless noted; pixel constants end with _PX

# Scale
PIXELS_PER_METER = 100.0  # content units per meter at zoom 1

# Zoom
DEFAULT_ZOOM = 1.0
ZOOM_MIN = 0.1
ZOOM_MAX = 5.0
ZOOM_STEP_FACTOR = 1.2
ZOOM_PRESETS = (0.25, 0.5, 0.75, 1.0, 1.5, 2.0, 3.0)
FIT_PADDING_PX = 50.0

# Drawing surface fallback until the host reports its size
DEFAULT_SCREEN_WIDTH_PX = 800.0
DEFAULT_SCREEN_HEIGHT_PX = 600.0

# Grid
DEFAULT_GRID_SIZE = 0.5
MIN_GRID_SIZE = 0.1
MAX_GRID_SIZE = 2.0

# Snapping
SNAP_THRESHOLD_PX = 10.0
ENDPOINT_SNAP_PX = 10.0
ANGLE_TOLERANCE_DEG = 5.0
DEFAULT_SNAP_ANGLES = (0.0, 45.0, 90.0, 135.0, 180.0, 225.0, 270.0, 315.0)

# Seating
CHAIR_SIZE = 0.45
CHAIR_OFFSET = 0.4
CHAIR_SPACING = 0.1

# Collisions
COLLISION_BUFFER = 0.05

# Walls / doors
DEFAULT_WALL_THICKNESS = 0.15
MIN_WALL_LENGTH = 0.1
DEFAULT_DOOR_WIDTH = 0.9
MIN_DOOR_WIDTH = 0.2
DOOR_PICK_THRESHOLD_PX = 12.0

# Keyboard nudges (screen pixels)
NUDGE_PX = 1.0
NUDGE_LARGE_PX = 10.0

# Drag sessions older than this are treated as abandoned
DRAG_TIMEOUT_SECONDS = 30.0

EPSILON = 1e-9


def cm(value_m: float) -> float:
    """Convert meters to centimeters."""
    return float(value_m * 100.0)


def m(value_cm: float) -> float:
    """Convert centimeters to meters."""
    return float(value_cm / 100.0)


def normalize_rotation(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    value = float(degrees) % 360.0
    # -1e-17 % 360 rounds to 360.0
    if value >= 360.0:
        value = 0.0
    return value


def normalize_angles(angles: Iterable[float]) -> list[float]:
    """Normalize, de-duplicate and sort a list of snap angles."""
    seen: set[float] = set()
    result: list[float] = []
    for angle in angles:
        value = round(normalize_rotation(angle), 9)
        if value not in seen:
            seen.add(value)
            result.append(value)
    return sorted(result)


def angular_distance(a: float, b: float) -> float:
    """Smallest absolute difference between two angles in degrees."""
    diff = abs(normalize_rotation(a) - normalize_rotation(b))
    return min(diff, 360.0 - diff)


def is_finite(*values: float) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
