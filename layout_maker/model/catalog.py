"""Default element sizes and parsing of host-supplied size specifications."""

from __future__ import annotations

import re
from dataclasses import dataclass

from layout_maker.exceptions import GeometryValidationError
from layout_maker.model.elements import TableType

# meters
ELEMENT_DEFAULTS: dict[str, tuple[float, float]] = {
    "table-round": (1.5, 1.5),
    "table-rectangular": (2.4, 0.75),
    "table-oval": (2.2, 1.2),
    "table-square": (1.5, 1.5),
    "chair": (0.45, 0.45),
    "space": (10.0, 8.0),
    "dance-floor": (4.0, 4.0),
    "stage": (3.0, 2.0),
    "cocktail-area": (3.0, 3.0),
    "ceremony-area": (5.0, 4.0),
    "bar": (2.0, 0.6),
    "buffet": (2.4, 0.75),
    "cake-table": (0.9, 0.9),
    "gift-table": (1.5, 0.75),
    "dj-booth": (1.5, 0.8),
    "flower-arrangement": (0.5, 0.5),
    "photo-booth": (2.5, 2.0),
    "arch": (2.5, 0.5),
    "custom": (1.0, 1.0),
}

TABLE_PRESETS: dict[tuple[TableType, int], tuple[float, float]] = {
    (TableType.ROUND, 4): (1.0, 1.0),
    (TableType.ROUND, 6): (1.2, 1.2),
    (TableType.ROUND, 8): (1.5, 1.5),
    (TableType.ROUND, 10): (1.8, 1.8),
    (TableType.ROUND, 12): (2.1, 2.1),
    (TableType.RECTANGULAR, 4): (1.2, 0.75),
    (TableType.RECTANGULAR, 6): (1.8, 0.75),
    (TableType.RECTANGULAR, 8): (2.4, 0.75),
    (TableType.RECTANGULAR, 10): (3.0, 0.75),
    (TableType.RECTANGULAR, 12): (3.6, 0.75),
    (TableType.OVAL, 6): (1.8, 1.0),
    (TableType.OVAL, 8): (2.2, 1.2),
    (TableType.OVAL, 10): (2.6, 1.4),
    (TableType.SQUARE, 4): (1.0, 1.0),
    (TableType.SQUARE, 8): (1.5, 1.5),
}

SIZE_PRESETS: dict[str, float] = {"small": 0.6, "medium": 1.2, "large": 1.8}

_NUMBER = r"(\d+(?:\.\d+)?)"
_SIZE_RE = re.compile(rf"^{_NUMBER}(cm|m)?(?:x{_NUMBER}(cm|m)?)?$")


@dataclass
class SizeSpec:
    width: float
    height: float | None = None


def recommended_table_size(table_type: TableType, capacity: int) -> tuple[float, float]:
    preset = TABLE_PRESETS.get((TableType(table_type), capacity))
    if preset:
        return preset
    table_type = TableType(table_type)
    if table_type is TableType.ROUND:
        diameter = 0.6 + capacity * 0.15
        return diameter, diameter
    if table_type is TableType.RECTANGULAR:
        return 0.6 + capacity * 0.3, 0.75
    if table_type is TableType.OVAL:
        return 0.8 + capacity * 0.18, 0.6 + capacity * 0.12
    if table_type is TableType.SQUARE:
        side = 0.6 + capacity * 0.2
        return side, side
    raise ValueError(f"unsupported table type: {table_type!r}")


def _to_meters(value: str, unit: str | None) -> float:
    number = float(value)
    return number / 100.0 if unit == "cm" else number


def parse_size_spec(spec: str | float | int | None) -> SizeSpec:
    """Parse ``"1.5"``, ``"2m"``, ``"150cm"``, ``"1.5x0.8"`` or a named preset.

    Centimeters are converted here so only meters enter the element model.

    Raises:
        GeometryValidationError: unparsable or non-positive sizes.
    """
    if spec is None:
        raise GeometryValidationError("size specification is empty")
    if isinstance(spec, (int, float)):
        if spec <= 0:
            raise GeometryValidationError("size must be positive", {"size": str(spec)})
        return SizeSpec(width=float(spec))

    normalized = str(spec).strip().lower()
    if normalized in SIZE_PRESETS:
        return SizeSpec(width=SIZE_PRESETS[normalized])

    normalized = re.sub(r"\s+", "", normalized).replace("×", "x").replace("*", "x").replace(",", ".")
    match = _SIZE_RE.match(normalized)
    if not match:
        raise GeometryValidationError("unrecognised size specification", {"size": str(spec)})

    width = _to_meters(match.group(1), match.group(2))
    height = _to_meters(match.group(3), match.group(4)) if match.group(3) is not None else None
    if width <= 0 or (height is not None and height <= 0):
        raise GeometryValidationError("size must be positive", {"size": str(spec)})
    return SizeSpec(width=width, height=height)


def resolve_table_size(table_type: TableType, spec: str | float | int | None, capacity: int) -> tuple[float, float]:
    """Turn an optional size spec into table width/height in meters."""
    table_type = TableType(table_type)
    if spec is None or (isinstance(spec, str) and not spec.strip()):
        return recommended_table_size(table_type, capacity)
    parsed = parse_size_spec(spec)
    if parsed.height is not None:
        return parsed.width, parsed.height
    if table_type in (TableType.ROUND, TableType.SQUARE):
        return parsed.width, parsed.width
    _, depth = recommended_table_size(table_type, capacity)
    return parsed.width, depth


__all__ = [
    "ELEMENT_DEFAULTS",
    "TABLE_PRESETS",
    "SIZE_PRESETS",
    "SizeSpec",
    "recommended_table_size",
    "parse_size_spec",
    "resolve_table_size",
]
