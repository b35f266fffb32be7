from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from layout_maker.geometry import contract

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


class ViewportSettings(BaseModel):
    pixels_per_meter: float = Field(contract.PIXELS_PER_METER, gt=0.0)
    zoom_min: float = Field(contract.ZOOM_MIN, gt=0.0)
    zoom_max: float = Field(contract.ZOOM_MAX, gt=0.0)
    default_zoom: float = Field(contract.DEFAULT_ZOOM, gt=0.0)
    zoom_step_factor: float = Field(contract.ZOOM_STEP_FACTOR, gt=1.0)
    zoom_presets: list[float] = Field(default_factory=lambda: list(contract.ZOOM_PRESETS))
    fit_padding_px: float = Field(contract.FIT_PADDING_PX, ge=0.0)
    default_width: float = Field(contract.DEFAULT_SCREEN_WIDTH_PX, gt=0.0)
    default_height: float = Field(contract.DEFAULT_SCREEN_HEIGHT_PX, gt=0.0)

    @model_validator(mode="after")
    def _check_zoom_range(self) -> "ViewportSettings":
        if self.zoom_min >= self.zoom_max:
            raise ValueError("zoom_min must be lower than zoom_max")
        if not self.zoom_min <= self.default_zoom <= self.zoom_max:
            raise ValueError("default_zoom must lie within [zoom_min, zoom_max]")
        return self


class GridSettings(BaseModel):
    size: float = Field(contract.DEFAULT_GRID_SIZE, ge=contract.MIN_GRID_SIZE, le=contract.MAX_GRID_SIZE)
    snap_to_grid: bool = True


class SnapSettings(BaseModel):
    threshold_px: float = Field(contract.SNAP_THRESHOLD_PX, ge=0.0)
    angles_deg: list[float] = Field(default_factory=lambda: list(contract.DEFAULT_SNAP_ANGLES))
    angle_tolerance_deg: float = Field(contract.ANGLE_TOLERANCE_DEG, ge=0.0, le=45.0)
    endpoint_threshold_px: float = Field(contract.ENDPOINT_SNAP_PX, ge=0.0)

    @field_validator("angles_deg", mode="before")
    @classmethod
    def _normalize_angles(cls, value: Any) -> list[float]:  # noqa: D401
        if value is None:
            return list(contract.DEFAULT_SNAP_ANGLES)
        if isinstance(value, (int, float)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("angles_deg must be a list of numbers")
        try:
            return contract.normalize_angles(float(item) for item in value)
        except (TypeError, ValueError) as exc:
            raise ValueError("angles_deg entries must be numeric") from exc


class SeatingSettings(BaseModel):
    chair_offset: float = Field(contract.CHAIR_OFFSET, ge=0.0)
    chair_size: float = Field(contract.CHAIR_SIZE, gt=0.0)
    # what happens to chairs when their table is deleted
    orphan_policy: Literal["keep", "delete"] = "keep"


class CollisionSettings(BaseModel):
    buffer: float = Field(contract.COLLISION_BUFFER, ge=0.0)


class DragSettings(BaseModel):
    timeout_seconds: float | None = Field(contract.DRAG_TIMEOUT_SECONDS, gt=0.0)


class WallSettings(BaseModel):
    default_thickness: float = Field(contract.DEFAULT_WALL_THICKNESS, gt=0.0)
    min_length: float = Field(contract.MIN_WALL_LENGTH, ge=0.0)
    door_width: float = Field(contract.DEFAULT_DOOR_WIDTH, gt=0.0)
    door_min_width: float = Field(contract.MIN_DOOR_WIDTH, gt=0.0)
    door_pick_threshold_px: float = Field(contract.DOOR_PICK_THRESHOLD_PX, ge=0.0)


class StorageSettings(BaseModel):
    backend: Literal["local", "memory", "s3"] = "local"
    root: str = "data/layouts"
    bucket: str | None = None
    prefix: str = ""
    region: str | None = None
    key_prefix: str = "layout-maker"

    @model_validator(mode="after")
    def _check_bucket(self) -> "StorageSettings":
        if self.backend == "s3" and not self.bucket:
            raise ValueError("storage.bucket is required for the s3 backend")
        return self


class Settings(BaseModel):
    viewport: ViewportSettings = Field(default_factory=ViewportSettings)
    grid: GridSettings = Field(default_factory=GridSettings)
    snap: SnapSettings = Field(default_factory=SnapSettings)
    seating: SeatingSettings = Field(default_factory=SeatingSettings)
    collision: CollisionSettings = Field(default_factory=CollisionSettings)
    drag: DragSettings = Field(default_factory=DragSettings)
    walls: WallSettings = Field(default_factory=WallSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                LAYOUT_MAKER_CONFIG environment variable or defaults to config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ValueError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("LAYOUT_MAKER_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "ViewportSettings",
    "GridSettings",
    "SnapSettings",
    "SeatingSettings",
    "CollisionSettings",
    "DragSettings",
    "WallSettings",
    "StorageSettings",
    "get_settings",
]
