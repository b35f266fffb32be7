"""
Canvas element model.

Every placeable object on the canvas is one variant of ``Element``. The
variant is fixed by the ``kind`` tag (table, chair, zone, service,
decoration) and each kind carries its own fields. Geometry is always in
meters with a top-left anchor; rotation is in degrees around the element
center and normalized into [0, 360).

Walls and doors are not elements; they live in ``layout_maker.model.walls``.
"""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar
from uuid import uuid4

from layout_maker.exceptions import MalformedSceneError
from layout_maker.geometry import contract


class ElementKind(str, Enum):
    TABLE = "table"
    CHAIR = "chair"
    ZONE = "zone"
    SERVICE = "service"
    DECORATION = "decoration"


class TableType(str, Enum):
    ROUND = "round"
    RECTANGULAR = "rectangular"
    OVAL = "oval"
    SQUARE = "square"


SPACE_CATEGORY = "space"
ZONE_CATEGORIES = (SPACE_CATEGORY, "dance-floor", "stage", "cocktail-area", "ceremony-area")
SERVICE_TYPES = ("bar", "buffet", "cake-table", "gift-table", "dj-booth")
DECORATION_TYPES = ("flower-arrangement", "photo-booth", "arch", "custom")
DIETARY_TYPES = ("regular", "vegetarian", "vegan", "halal", "kosher", "other")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


@dataclass
class SeatPosition:
    """Seat placement relative to the table center, before table rotation."""

    local_x: float
    local_y: float
    angle: float  # direction the seated guest faces, degrees


@dataclass
class ChairConfig:
    count: int = 0
    spacing: float = contract.CHAIR_SPACING
    offset: float = contract.CHAIR_OFFSET
    auto_generate: bool = True


@dataclass
class Element:
    id: str
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    locked: bool = False
    visible: bool = True
    label: str = ""
    space_id: str | None = None
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    kind: ClassVar[ElementKind]

    def __post_init__(self) -> None:
        self.rotation = contract.normalize_rotation(self.rotation)

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    def touch(self) -> None:
        self.updated_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload

    def clone(self) -> "Element":
        return copy.deepcopy(self)


@dataclass
class Table(Element):
    table_type: TableType = TableType.ROUND
    capacity: int = 0
    table_number: str = ""
    seats: list[SeatPosition] = field(default_factory=list)
    chair_config: ChairConfig = field(default_factory=ChairConfig)

    kind: ClassVar[ElementKind] = ElementKind.TABLE

    def __post_init__(self) -> None:
        super().__post_init__()
        self.table_type = TableType(self.table_type)
        self.capacity = max(0, int(self.capacity))

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["table_type"] = self.table_type.value
        return payload


@dataclass
class Chair(Element):
    parent_table_id: str | None = None
    seat_index: int | None = None
    assigned_guest_id: str | None = None
    dietary_type: str | None = None
    allergy_flags: set[str] = field(default_factory=set)

    kind: ClassVar[ElementKind] = ElementKind.CHAIR

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["allergy_flags"] = sorted(self.allergy_flags)
        return payload


@dataclass
class Zone(Element):
    category: str = "dance-floor"
    fill_color: str | None = None

    kind: ClassVar[ElementKind] = ElementKind.ZONE

    @property
    def is_space(self) -> bool:
        return self.category == SPACE_CATEGORY


@dataclass
class Service(Element):
    service_type: str = "bar"

    kind: ClassVar[ElementKind] = ElementKind.SERVICE


@dataclass
class Decoration(Element):
    decoration_type: str = "custom"
    custom_shape: str | None = None

    kind: ClassVar[ElementKind] = ElementKind.DECORATION


ELEMENT_CLASSES: dict[ElementKind, type[Element]] = {
    ElementKind.TABLE: Table,
    ElementKind.CHAIR: Chair,
    ElementKind.ZONE: Zone,
    ElementKind.SERVICE: Service,
    ElementKind.DECORATION: Decoration,
}


def element_from_dict(payload: dict[str, Any]) -> Element:
    """Rebuild an element from its ``to_dict`` form.

    Raises:
        MalformedSceneError: unknown kind, missing fields or wrong types.
    """
    if not isinstance(payload, dict):
        raise MalformedSceneError("element payload must be a mapping")
    try:
        kind = ElementKind(payload.get("kind"))
    except ValueError as exc:
        raise MalformedSceneError(
            f"unknown element kind: {payload.get('kind')!r}", {"id": str(payload.get("id"))}
        ) from exc

    cls = ELEMENT_CLASSES[kind]
    known = {f.name for f in fields(cls)}
    data = {key: value for key, value in payload.items() if key in known}
    try:
        if kind is ElementKind.TABLE:
            data["seats"] = [SeatPosition(**seat) for seat in data.get("seats") or []]
            data["chair_config"] = ChairConfig(**(data.get("chair_config") or {}))
        elif kind is ElementKind.CHAIR:
            data["allergy_flags"] = set(data.get("allergy_flags") or [])
        element = cls(**data)
    except (TypeError, ValueError) as exc:
        raise MalformedSceneError(f"invalid {kind.value} payload: {exc}", {"id": str(payload.get("id"))}) from exc

    for name in ("x", "y", "width", "height", "rotation"):
        if not isinstance(getattr(element, name), (int, float)):
            raise MalformedSceneError(f"{kind.value}.{name} must be numeric", {"id": element.id})
    if not contract.is_finite(element.x, element.y, element.width, element.height, element.rotation):
        raise MalformedSceneError("element geometry must be finite", {"id": element.id})
    if element.width <= 0 or element.height <= 0:
        raise MalformedSceneError("element size must be positive", {"id": element.id})
    return element


__all__ = [
    "ElementKind",
    "TableType",
    "SPACE_CATEGORY",
    "ZONE_CATEGORIES",
    "SERVICE_TYPES",
    "DECORATION_TYPES",
    "DIETARY_TYPES",
    "SeatPosition",
    "ChairConfig",
    "Element",
    "Table",
    "Chair",
    "Zone",
    "Service",
    "Decoration",
    "ELEMENT_CLASSES",
    "element_from_dict",
    "new_id",
    "utc_now",
]
