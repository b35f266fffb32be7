"""World <-> screen transforms and pan/zoom state for the canvas.

Screen coordinates are derived from world meters in two steps: meters are
scaled into content units by the fixed ``pixels_per_meter`` and the content
plane is then offset by ``pan`` and scaled by ``zoom``::

    screen = (world * pixels_per_meter - pan) * zoom
    world = (screen / zoom + pan) / pixels_per_meter

``pan`` is expressed in content units (zoom independent), so the two
directions are exact algebraic inverses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

from layout_maker.geometry import contract
from layout_maker.settings import ViewportSettings


class WorldPoint(NamedTuple):
    x: float
    y: float


class ScreenPoint(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    """Axis-aligned rectangle, top-left anchored."""

    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def intersects(self, other: "Rect") -> bool:
        return not (
            self.max_x < other.x
            or self.x > other.max_x
            or self.max_y < other.y
            or self.y > other.max_y
        )


@dataclass
class Viewport:
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = contract.DEFAULT_ZOOM
    screen_width: float = contract.DEFAULT_SCREEN_WIDTH_PX
    screen_height: float = contract.DEFAULT_SCREEN_HEIGHT_PX
    config: ViewportSettings = field(default_factory=ViewportSettings, repr=False, compare=False)

    @classmethod
    def from_settings(cls, config: ViewportSettings) -> "Viewport":
        return cls(
            zoom=config.default_zoom,
            screen_width=config.default_width,
            screen_height=config.default_height,
            config=config,
        )

    @property
    def pixels_per_meter(self) -> float:
        return self.config.pixels_per_meter

    # -- transforms -----------------------------------------------------

    def world_to_screen(self, point: tuple[float, float]) -> ScreenPoint:
        ppm = self.pixels_per_meter
        return ScreenPoint(
            (point[0] * ppm - self.pan_x) * self.zoom,
            (point[1] * ppm - self.pan_y) * self.zoom,
        )

    def screen_to_world(self, point: tuple[float, float]) -> WorldPoint:
        ppm = self.pixels_per_meter
        return WorldPoint(
            (point[0] / self.zoom + self.pan_x) / ppm,
            (point[1] / self.zoom + self.pan_y) / ppm,
        )

    def world_delta_to_screen(self, dx: float, dy: float) -> tuple[float, float]:
        scale = self.pixels_per_meter * self.zoom
        return dx * scale, dy * scale

    def screen_delta_to_world(self, dx: float, dy: float) -> tuple[float, float]:
        scale = self.pixels_per_meter * self.zoom
        return dx / scale, dy / scale

    def pixels_to_world(self, pixels: float) -> float:
        """Length in meters covered by ``pixels`` screen pixels at the current zoom."""
        return pixels / (self.pixels_per_meter * self.zoom)

    def world_rect_to_screen(self, rect: Rect) -> Rect:
        top_left = self.world_to_screen((rect.x, rect.y))
        bottom_right = self.world_to_screen((rect.max_x, rect.max_y))
        return Rect(top_left.x, top_left.y, bottom_right.x - top_left.x, bottom_right.y - top_left.y)

    # -- zoom -----------------------------------------------------------

    def clamp_zoom(self, level: float) -> float:
        return contract.clamp(level, self.config.zoom_min, self.config.zoom_max)

    def zoom_to(self, level: float, pivot: tuple[float, float] | None = None) -> None:
        """Set zoom, keeping the world point under ``pivot`` fixed on screen.

        Without a pivot the surface center is used.
        """
        if not contract.is_finite(level) or level <= 0.0:
            return
        new_zoom = self.clamp_zoom(level)
        if pivot is None:
            pivot = (self.screen_width / 2.0, self.screen_height / 2.0)
        anchor = self.screen_to_world(pivot)
        ppm = self.pixels_per_meter
        self.zoom = new_zoom
        # solve pivot = (anchor * ppm - pan) * zoom for pan
        self.pan_x = anchor.x * ppm - pivot[0] / new_zoom
        self.pan_y = anchor.y * ppm - pivot[1] / new_zoom

    def zoom_in(self, pivot: tuple[float, float] | None = None) -> None:
        self.zoom_to(self.zoom * self.config.zoom_step_factor, pivot)

    def zoom_out(self, pivot: tuple[float, float] | None = None) -> None:
        self.zoom_to(self.zoom / self.config.zoom_step_factor, pivot)

    def zoom_by(self, delta: float, pivot: tuple[float, float] | None = None) -> None:
        """Add ``delta`` to the zoom; overshooting below zero lands on the minimum."""
        if not contract.is_finite(delta):
            return
        self.zoom_to(max(self.zoom + delta, self.config.zoom_min), pivot)

    # -- pan ------------------------------------------------------------

    def pan_by(self, dx: float, dy: float) -> None:
        """Pan by a screen-space delta; content follows the pointer at any zoom."""
        if not contract.is_finite(dx, dy):
            return
        self.pan_x -= dx / self.zoom
        self.pan_y -= dy / self.zoom

    def pan_to(self, point: tuple[float, float]) -> None:
        """Center the given world point on the drawing surface."""
        if not contract.is_finite(*point):
            return
        ppm = self.pixels_per_meter
        self.pan_x = point[0] * ppm - self.screen_width / 2.0 / self.zoom
        self.pan_y = point[1] * ppm - self.screen_height / 2.0 / self.zoom

    def reset_view(self) -> None:
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.zoom = self.config.default_zoom

    def resize(self, width: float, height: float) -> None:
        # zoom and pan are deliberately untouched; only the visible region changes
        if not contract.is_finite(width, height) or width <= 0.0 or height <= 0.0:
            return
        self.screen_width = float(width)
        self.screen_height = float(height)

    def fit_to_bounds(
        self,
        min_x: float,
        min_y: float,
        max_x: float,
        max_y: float,
        padding_px: float | None = None,
    ) -> None:
        """Zoom and pan so the world rectangle fills the surface, centered."""
        if not contract.is_finite(min_x, min_y, max_x, max_y):
            return
        padding = self.config.fit_padding_px if padding_px is None else padding_px
        ppm = self.pixels_per_meter
        width_units = max(max_x - min_x, contract.EPSILON) * ppm
        height_units = max(max_y - min_y, contract.EPSILON) * ppm
        available_w = max(self.screen_width - padding * 2.0, 1.0)
        available_h = max(self.screen_height - padding * 2.0, 1.0)
        self.zoom = self.clamp_zoom(min(available_w / width_units, available_h / height_units))
        self.pan_to(((min_x + max_x) / 2.0, (min_y + max_y) / 2.0))

    # -- visibility -----------------------------------------------------

    def visible_world_bounds(self) -> Rect:
        top_left = self.screen_to_world((0.0, 0.0))
        bottom_right = self.screen_to_world((self.screen_width, self.screen_height))
        return Rect(top_left.x, top_left.y, bottom_right.x - top_left.x, bottom_right.y - top_left.y)

    def is_rect_visible(self, rect: Rect) -> bool:
        return self.visible_world_bounds().intersects(rect)

    # -- snapshots ------------------------------------------------------

    def to_dict(self) -> dict[str, float]:
        return {
            "pan_x": self.pan_x,
            "pan_y": self.pan_y,
            "zoom": self.zoom,
            "screen_width": self.screen_width,
            "screen_height": self.screen_height,
        }

    def restore(self, payload: dict[str, Any]) -> None:
        """Load pan/zoom from a snapshot; surface size stays with the host."""
        pan_x = float(payload.get("pan_x", 0.0))
        pan_y = float(payload.get("pan_y", 0.0))
        zoom = float(payload.get("zoom", self.config.default_zoom))
        if not contract.is_finite(pan_x, pan_y, zoom) or zoom <= 0.0:
            self.reset_view()
            return
        self.pan_x = pan_x
        self.pan_y = pan_y
        self.zoom = self.clamp_zoom(zoom)

    def copy(self) -> "Viewport":
        return Viewport(
            pan_x=self.pan_x,
            pan_y=self.pan_y,
            zoom=self.zoom,
            screen_width=self.screen_width,
            screen_height=self.screen_height,
            config=self.config,
        )


__all__ = ["WorldPoint", "ScreenPoint", "Rect", "Viewport"]
