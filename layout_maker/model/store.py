"""
Element store for a single scene.

Elements live in one flat mapping keyed by id; ``element_order`` is the
paint order (last = topmost). Every mutation goes through this class so the
order, the rotation normalization and the table seat layout stay consistent.

Mutations on ids that no longer exist are no-ops (events may arrive after a
delete). Invalid geometry raises ``GeometryValidationError`` before anything
is touched.
"""

from __future__ import annotations

import copy
from dataclasses import fields
from typing import Any, Iterable, Iterator, Literal

from loguru import logger

from layout_maker.exceptions import ElementNotFoundError, GeometryValidationError, ValidationError
from layout_maker.geometry import contract
from layout_maker.model.elements import Chair, ChairConfig, Element, SeatPosition, Table, TableType, new_id
from layout_maker.model.seating import place_chair_on_seat, redistribute_chairs, refresh_table_seats

OrphanPolicy = Literal["keep", "delete"]

_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at", "kind"}
_GEOMETRY_FIELDS = ("x", "y", "width", "height", "rotation")
_TEXT_FIELDS = {"label", "table_number", "category", "service_type", "decoration_type"}
_SEAT_FIELDS = {"width", "height", "capacity", "table_type", "chair_config"}


def validate_geometry(
    x: float | None = None,
    y: float | None = None,
    width: float | None = None,
    height: float | None = None,
    rotation: float | None = None,
) -> None:
    """Reject non-finite coordinates and non-positive sizes.

    Raises:
        GeometryValidationError: on the first offending value.
    """
    for name, value in (("x", x), ("y", y), ("width", width), ("height", height), ("rotation", rotation)):
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not contract.is_finite(value):
            raise GeometryValidationError(f"{name} must be a finite number", {name: str(value)})
    for name, value in (("width", width), ("height", height)):
        if value is not None and value <= 0:
            raise GeometryValidationError(f"{name} must be positive", {name: str(value)})


def _non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer", {name: str(value)})
    return value


def _coerce_changes(element: Element, changes: dict[str, Any]) -> dict[str, Any]:
    """Check and convert a partial update without touching ``element``.

    Raises:
        GeometryValidationError: bad position, size or rotation.
        ValidationError: any other field with the wrong type or value.
    """
    validate_geometry(**{name: changes[name] for name in _GEOMETRY_FIELDS if name in changes})
    coerced: dict[str, Any] = {}
    for name, value in changes.items():
        if name in _GEOMETRY_FIELDS:
            coerced[name] = float(value)
        elif name in ("locked", "visible"):
            if not isinstance(value, bool):
                raise ValidationError(f"{name} must be a boolean", {name: str(value)})
            coerced[name] = value
        elif name == "table_type":
            try:
                coerced[name] = TableType(value)
            except ValueError as exc:
                raise ValidationError(f"unknown table type: {value!r}", {name: str(value)}) from exc
        elif name == "capacity":
            coerced[name] = _non_negative_int(name, value)
        elif name == "seat_index":
            coerced[name] = None if value is None else _non_negative_int(name, value)
        elif name == "chair_config":
            try:
                config = value if isinstance(value, ChairConfig) else ChairConfig(**value)
            except TypeError as exc:
                raise ValidationError("invalid chair config", {name: str(value)}) from exc
            if not contract.is_finite(config.spacing, config.offset) or not isinstance(config.auto_generate, bool):
                raise ValidationError("invalid chair config", {name: str(value)})
            coerced[name] = ChairConfig(
                count=_non_negative_int("count", config.count),
                spacing=float(config.spacing),
                offset=float(config.offset),
                auto_generate=config.auto_generate,
            )
        elif name == "seats":
            try:
                coerced[name] = [s if isinstance(s, SeatPosition) else SeatPosition(**s) for s in value]
            except TypeError as exc:
                raise ValidationError("invalid seat list", {name: str(value)}) from exc
        elif name == "allergy_flags":
            if isinstance(value, str) or not all(isinstance(flag, str) for flag in value):
                raise ValidationError("allergy flags must be a collection of strings", {name: str(value)})
            coerced[name] = set(value)
        elif name in _TEXT_FIELDS:
            if not isinstance(value, str):
                raise ValidationError(f"{name} must be a string", {name: str(value)})
            coerced[name] = value
        else:
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{name} must be a string or empty", {name: str(value)})
            coerced[name] = value
    return coerced


class ElementStore:
    def __init__(
        self,
        elements: Iterable[Element] | None = None,
        orphan_policy: OrphanPolicy = "keep",
        chair_size: float = contract.CHAIR_SIZE,
    ) -> None:
        self.elements: dict[str, Element] = {}
        self.element_order: list[str] = []
        self.orphan_policy: OrphanPolicy = orphan_policy
        self.chair_size = chair_size
        for element in elements or ():
            self.add_element(element)

    # -- reads ----------------------------------------------------------

    def __contains__(self, element_id: object) -> bool:
        return element_id in self.elements

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.ordered())

    def get_element_by_id(self, element_id: str) -> Element | None:
        return self.elements.get(element_id)

    def require_element(self, element_id: str) -> Element:
        element = self.elements.get(element_id)
        if element is None:
            raise ElementNotFoundError(f"element {element_id} not found", {"id": element_id})
        return element

    def ordered(self, visible_only: bool = False) -> list[Element]:
        result = [self.elements[eid] for eid in self.element_order]
        if visible_only:
            result = [e for e in result if e.visible]
        return result

    def chairs_of(self, table_id: str) -> list[Chair]:
        chairs = [
            e for e in self.ordered()
            if isinstance(e, Chair) and e.parent_table_id == table_id
        ]
        return sorted(chairs, key=lambda c: (c.seat_index is None, c.seat_index or 0))

    def tables(self) -> list[Table]:
        return [e for e in self.ordered() if isinstance(e, Table)]

    def next_table_number(self) -> str:
        numbers = [int(t.table_number) for t in self.tables() if t.table_number.isdigit()]
        return str(max(numbers, default=0) + 1)

    # -- creation / deletion --------------------------------------------

    def add_element(self, element: Element) -> Element:
        """Append ``element`` on top of the paint order.

        Raises:
            GeometryValidationError: invalid position or size.
            ValidationError: duplicate id.
        """
        validate_geometry(element.x, element.y, element.width, element.height, element.rotation)
        if element.id in self.elements:
            raise ValidationError(f"element {element.id} already exists", {"id": element.id})
        element.rotation = contract.normalize_rotation(element.rotation)
        if isinstance(element, Table):
            refresh_table_seats(element)
        self.elements[element.id] = element
        self.element_order.append(element.id)
        logger.debug("Added {kind} {id}", kind=element.kind.value, id=element.id)
        return element

    def delete_element(self, element_id: str) -> list[str]:
        """Remove an element; returns every id removed (tables may take chairs along)."""
        element = self.elements.get(element_id)
        if element is None:
            return []
        removed = [element_id]
        if isinstance(element, Table) and self.orphan_policy == "delete":
            removed.extend(chair.id for chair in self.chairs_of(element_id))
        for eid in removed:
            self.elements.pop(eid, None)
        removed_set = set(removed)
        self.element_order = [eid for eid in self.element_order if eid not in removed_set]
        logger.debug("Deleted {ids}", ids=removed)
        return removed

    # -- mutations ------------------------------------------------------

    def update_element(self, element_id: str, **changes: Any) -> Element | None:
        """Apply a partial update.

        Every field is checked before anything changes. A locked element
        keeps its geometry unless the same update unlocks it.
        """
        element = self.elements.get(element_id)
        if element is None:
            return None
        blocked = _IMMUTABLE_FIELDS.intersection(changes)
        if blocked:
            raise ValidationError(f"fields cannot be updated: {sorted(blocked)}", {"id": element_id})
        known = {f.name for f in fields(element)}
        unknown = [name for name in changes if name not in known]
        if unknown:
            raise ValidationError(f"unknown fields for {element.kind.value}: {unknown}", {"id": element_id})
        changes = _coerce_changes(element, changes)
        if element.locked and changes.get("locked", True) and set(_GEOMETRY_FIELDS).intersection(changes):
            logger.debug("Update rejected, {id} is locked", id=element_id)
            return None

        old_x, old_y = element.x, element.y
        for name, value in changes.items():
            setattr(element, name, value)
        element.rotation = contract.normalize_rotation(element.rotation)
        element.touch()

        if isinstance(element, Table):
            if _SEAT_FIELDS.intersection(changes):
                refresh_table_seats(element)
                self._redistribute(element)
            elif {"rotation"}.intersection(changes):
                self._seat_chairs(element)
            elif element.x != old_x or element.y != old_y:
                self._shift_chairs(element, element.x - old_x, element.y - old_y)
        return element

    def move_elements(self, element_ids: Iterable[str], dx: float, dy: float) -> list[str]:
        """Translate a group rigidly.

        Ids that no longer exist are skipped. The rest move together or not at
        all: a locked member cancels the whole batch and a non-finite delta
        raises before anything moves. Chairs follow their table exactly once
        even if also listed.
        """
        if not contract.is_finite(dx, dy):
            raise GeometryValidationError("move delta must be finite", {"dx": str(dx), "dy": str(dy)})
        targets: list[Element] = []
        seen: set[str] = set()
        for eid in element_ids:
            element = self.elements.get(eid)
            if element is None or eid in seen:
                continue
            seen.add(eid)
            targets.append(element)
        if not targets:
            return []
        locked = [e.id for e in targets if e.locked]
        if locked:
            logger.debug("Move rejected, locked elements: {ids}", ids=locked)
            return []

        for table in [e for e in targets if isinstance(e, Table)]:
            for chair in self.chairs_of(table.id):
                if chair.id not in seen:
                    seen.add(chair.id)
                    targets.append(chair)

        for element in targets:
            element.x += dx
            element.y += dy
            element.touch()
        return [e.id for e in targets]

    def resize_element(self, element_id: str, width: float, height: float) -> Element | None:
        element = self.elements.get(element_id)
        if element is None:
            return None
        validate_geometry(width=width, height=height)
        if element.locked:
            return None
        # the top-left anchor stays put
        element.width = float(width)
        element.height = float(height)
        element.touch()
        if isinstance(element, Table):
            refresh_table_seats(element)
            self._seat_chairs(element)
        return element

    def rotate_element(self, element_id: str, rotation: float) -> Element | None:
        element = self.elements.get(element_id)
        if element is None:
            return None
        validate_geometry(rotation=rotation)
        if element.locked:
            return None
        element.rotation = contract.normalize_rotation(rotation)
        element.touch()
        if isinstance(element, Table):
            self._seat_chairs(element)
        return element

    def set_locked(self, element_id: str, locked: bool) -> Element | None:
        element = self.elements.get(element_id)
        if element is not None:
            element.locked = bool(locked)
            element.touch()
        return element

    def set_visible(self, element_id: str, visible: bool) -> Element | None:
        element = self.elements.get(element_id)
        if element is not None:
            element.visible = bool(visible)
            element.touch()
        return element

    # -- ordering -------------------------------------------------------

    def bring_to_front(self, element_id: str) -> bool:
        if element_id not in self.elements:
            return False
        self.element_order.remove(element_id)
        self.element_order.append(element_id)
        return True

    def send_to_back(self, element_id: str) -> bool:
        if element_id not in self.elements:
            return False
        self.element_order.remove(element_id)
        self.element_order.insert(0, element_id)
        return True

    def bring_forward(self, element_ids: Iterable[str]) -> list[str]:
        """Raise each listed element one step, past its nearest unlisted neighbour above.

        Listed elements keep their relative order; returns the ids that moved.
        """
        chosen = {eid for eid in element_ids if eid in self.elements}
        order = self.element_order
        moved: list[str] = []
        for index in range(len(order) - 2, -1, -1):
            if order[index] in chosen and order[index + 1] not in chosen:
                order[index], order[index + 1] = order[index + 1], order[index]
                moved.append(order[index + 1])
        return moved

    def send_backward(self, element_ids: Iterable[str]) -> list[str]:
        """Lower each listed element one step, past its nearest unlisted neighbour below."""
        chosen = {eid for eid in element_ids if eid in self.elements}
        order = self.element_order
        moved: list[str] = []
        for index in range(1, len(order)):
            if order[index] in chosen and order[index - 1] not in chosen:
                order[index], order[index - 1] = order[index - 1], order[index]
                moved.append(order[index - 1])
        return moved

    def duplicate(self, element_ids: Iterable[str], offset: tuple[float, float] = (0.5, 0.5)) -> list[str]:
        """Copy elements with fresh ids on top of the order. Chairs of tables are not copied."""
        created: list[str] = []
        for eid in list(element_ids):
            source = self.elements.get(eid)
            if source is None:
                continue
            clone = copy.deepcopy(source)
            clone.id = new_id(source.kind.value)
            clone.x += offset[0]
            clone.y += offset[1]
            clone.created_at = clone.updated_at = source.updated_at
            clone.touch()
            if isinstance(clone, Table):
                clone.table_number = self.next_table_number()
            if isinstance(clone, Chair):
                clone.assigned_guest_id = None
            self.add_element(clone)
            created.append(clone.id)
        return created

    # -- seating --------------------------------------------------------

    def set_capacity(self, table_id: str, capacity: int) -> Table | None:
        element = self.elements.get(table_id)
        if not isinstance(element, Table):
            return None
        if capacity < 0:
            raise ValidationError("capacity must be non-negative", {"capacity": str(capacity)})
        element.capacity = int(capacity)
        refresh_table_seats(element)
        self._redistribute(element)
        element.touch()
        return element

    def generate_chairs(self, table_id: str) -> list[Chair]:
        """Materialize one chair element per seat that has none yet."""
        table = self.elements.get(table_id)
        if not isinstance(table, Table):
            return []
        taken = {c.seat_index for c in self.chairs_of(table_id)}
        created: list[Chair] = []
        for index, seat in enumerate(table.seats):
            if index in taken:
                continue
            chair = Chair(
                id=new_id("chair"),
                x=0.0,
                y=0.0,
                width=self.chair_size,
                height=self.chair_size,
                parent_table_id=table_id,
                seat_index=index,
                space_id=table.space_id,
            )
            place_chair_on_seat(chair, table, seat)
            created.append(self.add_element(chair))
        return created

    def assign_guest(
        self,
        chair_id: str,
        guest_id: str,
        dietary_type: str | None = None,
        allergy_flags: Iterable[str] = (),
    ) -> Chair | None:
        chair = self.elements.get(chair_id)
        if not isinstance(chair, Chair):
            return None
        chair.assigned_guest_id = guest_id
        chair.dietary_type = dietary_type
        chair.allergy_flags = set(allergy_flags)
        chair.touch()
        return chair

    def unassign_guest(self, chair_id: str) -> Chair | None:
        chair = self.elements.get(chair_id)
        if not isinstance(chair, Chair):
            return None
        chair.assigned_guest_id = None
        chair.dietary_type = None
        chair.allergy_flags = set()
        chair.touch()
        return chair

    def _seat_chairs(self, table: Table) -> None:
        for chair in self.chairs_of(table.id):
            if chair.seat_index is not None and 0 <= chair.seat_index < len(table.seats):
                place_chair_on_seat(chair, table, table.seats[chair.seat_index])
                chair.touch()

    def _shift_chairs(self, table: Table, dx: float, dy: float) -> None:
        for chair in self.chairs_of(table.id):
            chair.x += dx
            chair.y += dy
            chair.touch()

    def _redistribute(self, table: Table) -> None:
        chairs = self.chairs_of(table.id)
        if not chairs:
            return
        plan = redistribute_chairs(chairs, len(table.seats))
        for chair_id in plan.to_remove:
            self.delete_element(chair_id)
        for chair_id, seat_index in plan.to_update:
            chair = self.elements[chair_id]
            assert isinstance(chair, Chair)
            chair.seat_index = seat_index
        self._seat_chairs(table)
        if plan.to_add:
            self.generate_chairs(table.id)

    # -- copies ---------------------------------------------------------

    def clone(self) -> "ElementStore":
        twin = ElementStore(orphan_policy=self.orphan_policy, chair_size=self.chair_size)
        twin.elements = copy.deepcopy(self.elements)
        twin.element_order = list(self.element_order)
        return twin


__all__ = ["ElementStore", "OrphanPolicy", "validate_geometry"]
