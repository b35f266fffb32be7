from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class PointPayload(BaseModel):
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y


class ModifiersPayload(BaseModel):
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    meta: bool = False


class PointerEvent(BaseModel):
    """Pointer position in screen pixels."""

    x: float
    y: float
    modifiers: ModifiersPayload = Field(default_factory=ModifiersPayload)


class ToolRequest(BaseModel):
    tool: Literal["select", "wall", "door", "pan"]


class ZoomRequest(BaseModel):
    action: Literal["in", "out", "to", "by"] = "to"
    level: float | None = None
    delta: float | None = None
    pivot: PointPayload | None = None


class PanRequest(BaseModel):
    dx: float
    dy: float


class ResizeViewportRequest(BaseModel):
    width: float
    height: float


class SpaceRequest(BaseModel):
    width: float
    height: float


class TableRequest(BaseModel):
    table_type: Literal["round", "rectangular", "oval", "square"] = "round"
    size: str | float | None = None
    seat_count: int = Field(8, ge=0, le=40)
    target_space_id: str | None = None
    center: PointPayload | None = None


class ItemRequest(BaseModel):
    kind: Literal["zone", "service", "decoration"]
    subtype: str
    center: PointPayload | None = None
    width: float | None = None
    height: float | None = None


class RotateRequest(BaseModel):
    rotation: float


class ResizeElementRequest(BaseModel):
    width: float
    height: float


class WallIn(BaseModel):
    id: str | None = None
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float | None = None


class DoorIn(BaseModel):
    id: str | None = None
    wall_id: str
    position_along_wall: float = Field(0.5, ge=0.0, le=1.0)
    width: float | None = None


class WallBatchRequest(BaseModel):
    walls: list[WallIn] = Field(default_factory=list)
    doors: list[DoorIn] = Field(default_factory=list)


class ProjectCreate(BaseModel):
    name: str | None = None


class ProjectRename(BaseModel):
    name: str


class ProjectOut(BaseModel):
    id: str
    name: str
    active: bool
    element_count: int
    wall_count: int
    updated_at: str


class SceneResponse(BaseModel):
    snapshot: dict[str, Any]
