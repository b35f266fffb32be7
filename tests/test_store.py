from __future__ import annotations

import math

import pytest

from layout_maker.exceptions import GeometryValidationError, ValidationError
from layout_maker.model.elements import Chair, Service, Table, TableType
from layout_maker.model.store import ElementStore


def _service(element_id: str, x: float = 0.0, y: float = 0.0, **kwargs) -> Service:
    return Service(id=element_id, x=x, y=y, width=1.0, height=1.0, **kwargs)


def _table_with_chairs(store: ElementStore, capacity: int = 8) -> Table:
    table = Table(id="t1", x=2.0, y=2.0, width=1.5, height=1.5, table_type=TableType.ROUND, capacity=capacity)
    store.add_element(table)
    store.generate_chairs(table.id)
    return table


def test_add_element_appends_on_top():
    store = ElementStore([_service("a"), _service("b")])
    assert store.element_order == ["a", "b"]
    assert [e.id for e in store] == ["a", "b"]


def test_add_element_rejects_duplicate_id():
    store = ElementStore([_service("a")])
    with pytest.raises(ValidationError):
        store.add_element(_service("a"))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 0.0},
        {"height": -1.0},
        {"x": math.nan},
        {"y": math.inf},
    ],
)
def test_add_element_rejects_invalid_geometry(kwargs):
    values = {"id": "bad", "x": 0.0, "y": 0.0, "width": 1.0, "height": 1.0, **kwargs}
    store = ElementStore()
    with pytest.raises(GeometryValidationError):
        store.add_element(Service(**values))
    assert len(store) == 0


def test_update_element_validates_before_touching_anything():
    store = ElementStore([_service("a", 1.0, 1.0)])
    with pytest.raises(GeometryValidationError):
        store.update_element("a", x=5.0, width=0.0)
    element = store.require_element("a")
    assert (element.x, element.width) == (1.0, 1.0)


def test_update_element_blocks_immutable_and_unknown_fields():
    store = ElementStore([_service("a")])
    with pytest.raises(ValidationError):
        store.update_element("a", id="other")
    with pytest.raises(ValidationError):
        store.update_element("a", capacity=4)


def test_mutations_on_missing_ids_are_noops():
    store = ElementStore([_service("a")])
    assert store.update_element("ghost", x=1.0) is None
    assert store.rotate_element("ghost", 45.0) is None
    assert store.resize_element("ghost", 1.0, 1.0) is None
    assert store.delete_element("ghost") == []
    assert store.move_elements(["ghost"], 1.0, 1.0) == []


@pytest.mark.parametrize(
    ("rotation", "expected"),
    [(-90.0, 270.0), (360.0, 0.0), (725.0, 5.0), (-1e-17, 0.0)],
)
def test_rotation_is_normalized(rotation, expected):
    store = ElementStore([_service("a")])
    store.rotate_element("a", rotation)
    assert store.require_element("a").rotation == pytest.approx(expected)
    assert 0.0 <= store.require_element("a").rotation < 360.0


def test_move_elements_translates_group_rigidly():
    store = ElementStore([_service("a", 0.0, 0.0), _service("b", 3.0, 1.0)])
    moved = store.move_elements(["a", "b", "ghost"], 1.5, -0.5)
    assert moved == ["a", "b"]
    assert (store.elements["a"].x, store.elements["a"].y) == (1.5, -0.5)
    assert (store.elements["b"].x, store.elements["b"].y) == (4.5, 0.5)


def test_locked_member_cancels_the_whole_batch():
    store = ElementStore([_service("a", 0.0, 0.0), _service("b", 3.0, 1.0, locked=True)])
    assert store.move_elements(["a", "b"], 1.0, 1.0) == []
    assert (store.elements["a"].x, store.elements["a"].y) == (0.0, 0.0)
    assert (store.elements["b"].x, store.elements["b"].y) == (3.0, 1.0)


def test_non_finite_delta_raises_before_moving():
    store = ElementStore([_service("a")])
    with pytest.raises(GeometryValidationError):
        store.move_elements(["a"], math.nan, 0.0)
    assert store.elements["a"].x == 0.0


def test_chairs_follow_their_table_exactly_once():
    store = ElementStore()
    table = _table_with_chairs(store)
    chair = store.chairs_of(table.id)[0]
    before = (chair.x, chair.y)
    store.move_elements([table.id, chair.id], 1.0, 2.0)
    assert (chair.x, chair.y) == pytest.approx((before[0] + 1.0, before[1] + 2.0))


def test_orphan_policy_keep_leaves_chairs():
    store = ElementStore(orphan_policy="keep")
    table = _table_with_chairs(store, capacity=4)
    removed = store.delete_element(table.id)
    assert removed == [table.id]
    assert len([e for e in store if isinstance(e, Chair)]) == 4


def test_orphan_policy_delete_removes_chairs():
    store = ElementStore(orphan_policy="delete")
    table = _table_with_chairs(store, capacity=4)
    removed = store.delete_element(table.id)
    assert len(removed) == 5
    assert len(store) == 0
    assert store.element_order == []


def test_paint_order_changes():
    store = ElementStore([_service("a"), _service("b"), _service("c")])
    store.bring_to_front("a")
    assert store.element_order == ["b", "c", "a"]
    store.send_to_back("c")
    assert store.element_order == ["c", "b", "a"]
    assert store.bring_to_front("ghost") is False


def test_duplicate_gives_fresh_ids_and_offset():
    store = ElementStore()
    table = _table_with_chairs(store, capacity=4)
    table.table_number = "1"
    created = store.duplicate([table.id])
    assert len(created) == 1
    twin = store.require_element(created[0])
    assert twin.id != table.id
    assert (twin.x, twin.y) == pytest.approx((table.x + 0.5, table.y + 0.5))
    assert isinstance(twin, Table) and twin.table_number == "2"
    assert store.element_order[-1] == twin.id


def test_clone_shares_no_state():
    store = ElementStore([_service("a")])
    twin = store.clone()
    twin.move_elements(["a"], 1.0, 0.0)
    twin.delete_element("a")
    assert store.elements["a"].x == 0.0
    assert store.element_order == ["a"]


def test_locked_elements_reject_resize_and_rotate():
    store = ElementStore([_service("a", locked=True)])
    assert store.resize_element("a", 2.0, 2.0) is None
    assert store.rotate_element("a", 45.0) is None
    element = store.elements["a"]
    assert (element.width, element.rotation) == (1.0, 0.0)


@pytest.mark.parametrize(
    "changes",
    [
        {"table_type": "hexagon"},
        {"capacity": "abc"},
        {"capacity": -2},
        {"capacity": True},
        {"x": "5"},
        {"locked": "yes"},
        {"label": 12},
        {"chair_config": {"offset": "wide"}},
        {"width": 2.0, "table_type": "hexagon"},
    ],
)
def test_update_element_rejects_bad_fields_without_partial_writes(changes):
    store = ElementStore()
    table = _table_with_chairs(store)
    before = table.to_dict()
    with pytest.raises(ValidationError):
        store.update_element(table.id, **changes)
    assert table.to_dict() == before
    assert len(store.chairs_of(table.id)) == 8


def test_update_element_converts_accepted_values():
    store = ElementStore()
    table = _table_with_chairs(store)
    store.update_element(table.id, table_type="square", capacity=4, x=3)
    assert table.table_type is TableType.SQUARE
    assert isinstance(table.x, float)
    assert len(table.seats) == 4
    assert len(store.chairs_of(table.id)) == 4
    assert table.to_dict()["table_type"] == "square"


def test_update_element_keeps_locked_geometry():
    store = ElementStore([_service("a", locked=True)])
    assert store.update_element("a", x=9.0, rotation=45.0) is None
    element = store.elements["a"]
    assert (element.x, element.rotation) == (0.0, 0.0)
    store.update_element("a", label="Main bar")
    assert element.label == "Main bar"
    store.update_element("a", locked=False, x=9.0)
    assert (element.locked, element.x) == (False, 9.0)


def test_resize_keeps_top_left_anchor():
    store = ElementStore([_service("a", 0.0, 0.7)])
    element = store.resize_element("a", 4.0, 2.0)
    assert (element.x, element.y, element.width, element.height) == (0.0, 0.7, 4.0, 2.0)


def test_bring_forward_steps_past_one_neighbour():
    store = ElementStore([_service(eid) for eid in "abcd"])
    assert store.bring_forward(["a", "b"]) == ["b", "a"]
    assert store.element_order == ["c", "a", "b", "d"]
    store.bring_forward(["d", "ghost"])
    assert store.element_order == ["c", "a", "b", "d"]


def test_send_backward_steps_past_one_neighbour():
    store = ElementStore([_service(eid) for eid in "abcd"])
    assert store.send_backward(["c", "d"]) == ["c", "d"]
    assert store.element_order == ["a", "c", "d", "b"]
    store.send_backward(["a"])
    assert store.element_order == ["a", "c", "d", "b"]
