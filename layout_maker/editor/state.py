"""Explicit editor state handed to every engine call (no module-level globals)."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from layout_maker.geometry.viewport import Viewport
from layout_maker.settings import Settings


class ToolMode(str, Enum):
    SELECT = "select"
    WALL = "wall"
    DOOR = "door"
    PAN = "pan"


@dataclass(frozen=True)
class Modifiers:
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    meta: bool = False

    @property
    def additive(self) -> bool:
        """Selection gesture that adds to / toggles the selection."""
        return self.shift or self.ctrl or self.meta


@dataclass
class EditorState:
    settings: Settings = field(default_factory=Settings)
    tool: ToolMode = ToolMode.SELECT
    snap_to_grid: bool = True
    grid_size: float = 0.5
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "EditorState":
        return cls(
            settings=settings,
            snap_to_grid=settings.grid.snap_to_grid,
            grid_size=settings.grid.size,
        )

    @property
    def snap_angles(self) -> list[float]:
        return self.settings.snap.angles_deg

    @property
    def angle_tolerance(self) -> float:
        return self.settings.snap.angle_tolerance_deg

    def snap_threshold(self, viewport: Viewport) -> float:
        return viewport.pixels_to_world(self.settings.snap.threshold_px)

    def endpoint_threshold(self, viewport: Viewport) -> float:
        return viewport.pixels_to_world(self.settings.snap.endpoint_threshold_px)

    def active_grid(self) -> float | None:
        return self.grid_size if self.snap_to_grid else None


__all__ = ["ToolMode", "Modifiers", "EditorState"]
