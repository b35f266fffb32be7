"""Seat generation around tables and chair redistribution on capacity changes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from layout_maker.geometry import contract
from layout_maker.model.elements import Chair, SeatPosition, Table, TableType


@dataclass
class ChairRedistribution:
    """Plan for reconciling materialized chairs with a new seat list."""

    to_update: list[tuple[str, int]] = field(default_factory=list)  # (chair id, seat index)
    to_remove: list[str] = field(default_factory=list)
    to_add: list[int] = field(default_factory=list)  # seat indices without a chair


def _round_seats(width: float, capacity: int, offset: float) -> list[SeatPosition]:
    radius = width / 2.0 + offset
    seats: list[SeatPosition] = []
    for i in range(capacity):
        angle = (i / capacity) * 2.0 * math.pi - math.pi / 2.0
        seats.append(
            SeatPosition(
                local_x=radius * math.cos(angle),
                local_y=radius * math.sin(angle),
                angle=contract.normalize_rotation(math.degrees(angle) + 180.0),
            )
        )
    return seats


def _oval_seats(width: float, height: float, capacity: int, offset: float) -> list[SeatPosition]:
    radius_x = width / 2.0 + offset
    radius_y = height / 2.0 + offset
    seats: list[SeatPosition] = []
    for i in range(capacity):
        angle = (i / capacity) * 2.0 * math.pi - math.pi / 2.0
        x = radius_x * math.cos(angle)
        y = radius_y * math.sin(angle)
        # face the table center
        facing = math.degrees(math.atan2(-y, -x))
        seats.append(SeatPosition(local_x=x, local_y=y, angle=contract.normalize_rotation(facing)))
    return seats


def _rectangular_seats(width: float, height: float, capacity: int, offset: float) -> list[SeatPosition]:
    # long sides first; short sides only join in for large tables
    use_short_sides = capacity > 10
    if use_short_sides:
        short_side_total = 2 if capacity <= 14 else 4
        long_side = math.ceil((capacity - short_side_total) / 2)
    else:
        short_side_total = 0
        long_side = math.ceil(capacity / 2)

    top_y = -height / 2.0 - offset
    bottom_y = height / 2.0 + offset
    left_x = -width / 2.0 - offset
    right_x = width / 2.0 + offset
    long_spacing = width / (long_side + 1) if long_side else 0.0

    seats: list[SeatPosition] = []
    for i in range(long_side):
        if len(seats) >= capacity:
            break
        seats.append(SeatPosition(-width / 2.0 + long_spacing * (i + 1), top_y, 90.0))
    for i in range(long_side):
        if len(seats) >= capacity:
            break
        seats.append(SeatPosition(width / 2.0 - long_spacing * (i + 1), bottom_y, 270.0))

    remaining = capacity - len(seats)
    if use_short_sides and remaining > 0:
        left_count = remaining // 2
        right_count = remaining - left_count
        for count, x, facing in ((left_count, left_x, 0.0), (right_count, right_x, 180.0)):
            spacing = height / (count + 1) if count else 0.0
            for i in range(count):
                seats.append(SeatPosition(x, -height / 2.0 + spacing * (i + 1), facing))
    return seats


def _square_seats(width: float, height: float, capacity: int, offset: float) -> list[SeatPosition]:
    per_side = math.ceil(capacity / 4) if capacity else 0
    half_w = width / 2.0
    half_h = height / 2.0
    spacing_w = width / (per_side + 1) if per_side else 0.0
    spacing_h = height / (per_side + 1) if per_side else 0.0

    # clockwise: top, right, bottom, left
    sides = (
        lambda i: SeatPosition(-half_w + spacing_w * (i + 1), -half_h - offset, 90.0),
        lambda i: SeatPosition(half_w + offset, -half_h + spacing_h * (i + 1), 180.0),
        lambda i: SeatPosition(half_w - spacing_w * (i + 1), half_h + offset, 270.0),
        lambda i: SeatPosition(-half_w - offset, half_h - spacing_h * (i + 1), 0.0),
    )
    seats: list[SeatPosition] = []
    for side in sides:
        for i in range(per_side):
            if len(seats) >= capacity:
                return seats
            seats.append(side(i))
    return seats


def generate_seats(
    table_type: TableType,
    width: float,
    height: float,
    capacity: int,
    offset: float = contract.CHAIR_OFFSET,
) -> list[SeatPosition]:
    """Deterministic seat layout for a table of the given shape and size.

    Seats are table-local (origin at the table center, unrotated); ``angle``
    points from the seat toward the table.
    """
    if capacity <= 0:
        return []
    table_type = TableType(table_type)
    if table_type is TableType.ROUND:
        return _round_seats(width, capacity, offset)
    if table_type is TableType.OVAL:
        return _oval_seats(width, height, capacity, offset)
    if table_type is TableType.RECTANGULAR:
        return _rectangular_seats(width, height, capacity, offset)
    if table_type is TableType.SQUARE:
        return _square_seats(width, height, capacity, offset)
    raise ValueError(f"unsupported table type: {table_type!r}")


def refresh_table_seats(table: Table) -> None:
    """Recompute ``table.seats`` when seating is auto-generated."""
    if not table.chair_config.auto_generate:
        return
    table.seats = generate_seats(
        table.table_type,
        table.width,
        table.height,
        table.capacity,
        table.chair_config.offset,
    )
    table.chair_config.count = len(table.seats)


def seat_world_pose(table: Table, seat: SeatPosition) -> tuple[float, float, float]:
    """World center and facing of a seat, applying the table rotation."""
    cx, cy = table.center
    rad = math.radians(table.rotation)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    wx = cx + seat.local_x * cos_r - seat.local_y * sin_r
    wy = cy + seat.local_x * sin_r + seat.local_y * cos_r
    return wx, wy, contract.normalize_rotation(seat.angle + table.rotation)


def place_chair_on_seat(chair: Chair, table: Table, seat: SeatPosition) -> None:
    wx, wy, facing = seat_world_pose(table, seat)
    chair.x = wx - chair.width / 2.0
    chair.y = wy - chair.height / 2.0
    # chair artwork faces "up" at rotation 0 (toward -y == 270 deg)
    chair.rotation = contract.normalize_rotation(facing - 270.0)


def redistribute_chairs(chairs: list[Chair], new_capacity: int) -> ChairRedistribution:
    """Match existing chairs to seats 0..new_capacity-1.

    Chairs holding a guest assignment are kept first, then unassigned chairs
    in seat order; whatever does not fit is removed.
    """
    plan = ChairRedistribution()
    ordered = sorted(chairs, key=lambda c: (c.seat_index is None, c.seat_index or 0))
    assigned = [c for c in ordered if c.assigned_guest_id is not None]
    unassigned = [c for c in ordered if c.assigned_guest_id is None]

    keep_assigned = assigned[: max(0, new_capacity)]
    keep_unassigned = unassigned[: max(0, new_capacity - len(keep_assigned))]
    kept_ids = {c.id for c in keep_assigned} | {c.id for c in keep_unassigned}

    # kept chairs retain their seat order
    kept = [c for c in ordered if c.id in kept_ids]
    for index, chair in enumerate(kept):
        plan.to_update.append((chair.id, index))
    plan.to_remove = [c.id for c in ordered if c.id not in kept_ids]
    plan.to_add = list(range(len(kept), max(0, new_capacity)))
    return plan


__all__ = [
    "ChairRedistribution",
    "generate_seats",
    "refresh_table_seats",
    "seat_world_pose",
    "place_chair_on_seat",
    "redistribute_chairs",
]
