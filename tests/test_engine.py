from __future__ import annotations

import dataclasses

import pytest

from layout_maker.editor.engine import LayoutEngine
from layout_maker.editor.state import Modifiers, ToolMode
from layout_maker.exceptions import GeometryValidationError, ToolStateError, ValidationError
from layout_maker.model.elements import Table, TableType, Zone
from layout_maker.model.walls import Door, make_wall


@pytest.fixture()
def engine() -> LayoutEngine:
    return LayoutEngine()


def test_invalid_space_is_reported_not_raised(engine):
    assert engine.add_space(0.0, 4.0) is None
    assert isinstance(engine.last_error, GeometryValidationError)
    assert len(engine.store) == 0


def test_space_is_locked_background_and_replaced(engine):
    engine.add_item("service", "bar", center=(1.0, 1.0))
    first = engine.add_space(5.0, 4.0)
    assert engine.store.element_order[0] == first.id
    assert first.locked
    second = engine.add_space(8.0, 6.0)
    spaces = [e for e in engine.store if isinstance(e, Zone) and e.is_space]
    assert spaces == [second]
    assert engine.current_space() is second
    # the view is fitted to the new room
    visible = engine.viewport.visible_world_bounds()
    assert visible.x <= 0.0 and visible.max_x >= 8.0


def test_unknown_table_type_is_reported(engine):
    assert engine.add_table("hexagon") is None
    assert isinstance(engine.last_error, ValidationError)
    assert engine.add_table("round", "banana") is None
    assert isinstance(engine.last_error, GeometryValidationError)
    assert len(engine.store) == 0


def test_successful_intent_clears_last_error(engine):
    engine.add_space(-1.0, 1.0)
    assert engine.last_error is not None
    engine.add_space(5.0, 4.0)
    assert engine.last_error is None


def test_tables_get_increasing_numbers(engine):
    first = engine.add_table("round", None, 4, center=(1.0, 1.0))
    second = engine.add_table("rectangular", None, 6, center=(4.0, 1.0))
    assert (first.table_number, second.table_number) == ("1", "2")
    assert (second.width, second.height) == (1.8, 0.75)


def test_add_item_rejects_space_and_unknown_subtypes(engine):
    assert engine.add_item("zone", "space") is None
    assert isinstance(engine.last_error, ValidationError)
    assert engine.add_item("service", "rocket") is None
    assert engine.add_item("chair", "bar") is None
    stage = engine.add_item("zone", "stage", center=(0.0, 0.0))
    assert (stage.width, stage.height) == (3.0, 2.0)


def test_rotate_selected_needs_exactly_one(engine):
    a = engine.add_item("service", "bar", center=(1.0, 1.0))
    b = engine.add_item("service", "bar", center=(1.0, 4.0))
    assert engine.rotate_selected(15.0) is None
    assert isinstance(engine.last_error, ToolStateError)
    engine.select(a.id)
    engine.toggle_selection(b.id)
    assert engine.rotate_selected(15.0) is None
    engine.toggle_selection(b.id)
    engine.rotate_selected(-15.0)
    assert a.rotation == pytest.approx(345.0)


def test_update_element_reports_bad_geometry(engine):
    bar = engine.add_item("service", "bar", center=(1.0, 1.0))
    assert engine.update_element(bar.id, width=-2.0) is None
    assert isinstance(engine.last_error, GeometryValidationError)
    assert bar.width == 2.0
    engine.update_element(bar.id, label="Main bar")
    assert bar.label == "Main bar"


def test_delete_selected_prunes_selection(engine):
    table = engine.add_table("round", None, 4, center=(2.0, 2.0))
    engine.select(table.id)
    removed = engine.delete_selected()
    assert removed == [table.id]
    assert engine.selection.ids == []
    # chairs are kept by default
    assert len(engine.store) == 4


def test_duplicate_selected_selects_the_copies(engine):
    bar = engine.add_item("service", "bar", center=(1.0, 1.0))
    engine.select(bar.id)
    created = engine.duplicate_selected()
    assert len(created) == 1
    assert engine.selection.ids == created


def test_nudge_steps(engine):
    bar = engine.add_item("service", "bar", center=(2.0, 2.0))
    engine.select(bar.id)
    engine.nudge(1, 0)
    assert bar.x == pytest.approx(1.01)
    engine.nudge(0, -1, Modifiers(shift=True))
    assert bar.y == pytest.approx(1.6)


def test_locked_elements_cannot_be_dragged(engine):
    bar = engine.add_item("service", "bar", center=(2.0, 2.0))
    engine.set_locked(bar.id, True)
    engine.pointer_down((200.0, 200.0))
    engine.pointer_move((400.0, 400.0))
    engine.pointer_up((400.0, 400.0))
    assert (bar.x, bar.y) == pytest.approx((1.0, 1.7))


def test_pan_tool_drags_the_view(engine):
    engine.set_tool("pan")
    engine.pointer_down((100.0, 100.0))
    engine.pointer_move((150.0, 80.0))
    engine.pointer_up((150.0, 80.0))
    assert (engine.viewport.pan_x, engine.viewport.pan_y) == pytest.approx((-50.0, 20.0))
    assert engine.snapshot().phase == "idle"


def test_unknown_tool_is_reported(engine):
    engine.set_tool("laser")
    assert isinstance(engine.last_error, ValidationError)
    assert engine.state.tool is ToolMode.SELECT


def test_tool_switch_ends_drag_and_chain(engine):
    engine.set_tool("wall")
    engine.pointer_down((100.0, 100.0))
    engine.set_tool("select")
    assert engine.construction.anchor is None
    assert engine.snapshot().ghost_preview is None


def test_door_click_without_wall_is_ignored(engine):
    engine.set_tool("door")
    engine.pointer_down((300.0, 300.0))
    assert engine.last_error is None
    snapshot = engine.snapshot()
    assert snapshot.scratch_doors == ()
    assert snapshot.doors == ()


def test_grid_size_bounds(engine):
    engine.set_grid_size(1.0)
    assert engine.state.grid_size == 1.0
    engine.set_grid_size(5.0)
    assert isinstance(engine.last_error, GeometryValidationError)
    assert engine.state.grid_size == 1.0


def test_walls_batch_is_all_or_nothing(engine):
    wall = make_wall((0.0, 0.0), (4.0, 0.0), wall_id="w1")
    assert not engine.add_walls_batch([wall], [Door(id="d", wall_id="nope", position_along_wall=0.5)])
    assert engine.scene.walls == []
    assert engine.add_walls_batch([wall], [Door(id="d", wall_id="w1", position_along_wall=0.5)])
    assert len(engine.scene.walls) == 1
    assert engine.delete_wall("w1")
    assert engine.scene.doors == []


def test_dangling_doors_are_not_rendered(engine):
    engine.add_walls_batch([make_wall((0.0, 0.0), (4.0, 0.0), wall_id="w1")])
    engine.scene.doors = [Door(id="d", wall_id="gone", position_along_wall=0.5)]
    assert engine.snapshot().doors == ()


def test_presets_through_the_engine(engine):
    engine.set_tool("wall")
    engine.pointer_down((0.0, 0.0))
    engine.pointer_up((300.0, 0.0))
    assert engine.save_preset("L") is not None
    engine.cancel_walls()
    assert engine.load_preset("L")
    assert len(engine.snapshot().scratch_walls) == 1
    assert not engine.load_preset("missing")
    assert isinstance(engine.last_error, ToolStateError)


def test_fit_to_content(engine):
    assert engine.fit_to_content() is False
    engine.add_item("zone", "stage", center=(20.0, 20.0))
    assert engine.fit_to_content()
    visible = engine.viewport.visible_world_bounds()
    assert visible.x <= 18.5 and visible.max_x >= 21.5


def test_snapshot_is_immutable_and_serializable(engine):
    engine.add_space(5.0, 4.0)
    table = engine.add_table("round", None, 6)
    snapshot = engine.snapshot()
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.hover_id = "x"
    payload = snapshot.to_dict()
    assert payload["scene_id"] == engine.scene.id
    assert len(payload["seats"][table.id]) == 6
    ids = [e["id"] for e in payload["visible_elements"]]
    assert ids[0] == engine.current_space().id
    assert table.id in ids


def test_hidden_elements_leave_the_snapshot(engine):
    table = engine.add_table("square", None, 4, center=(2.0, 2.0))
    engine.set_visible(table.id, False)
    snapshot = engine.snapshot()
    assert table.id not in [e["id"] for e in snapshot.visible_elements]
    assert table.id not in snapshot.seats


def test_capacity_and_guest_assignment(engine):
    table = engine.add_table("round", None, 8, center=(2.0, 2.0))
    chair = engine.store.chairs_of(table.id)[7]
    engine.assign_guest(chair.id, "guest-9", "halal", ["nuts"])
    engine.set_capacity(table.id, 2)
    chairs = engine.store.chairs_of(table.id)
    assert len(chairs) == 2
    assert chair in chairs
    assert chair.allergy_flags == {"nuts"}
    engine.unassign_guest(chair.id)
    assert chair.assigned_guest_id is None
    engine.set_capacity(table.id, -1)
    assert isinstance(engine.last_error, ValidationError)
    assert isinstance(engine.store.elements[table.id], Table)


def test_step_ordering_keeps_the_space_at_the_back(engine):
    space = engine.add_space(10.0, 8.0)
    bar = engine.add_item("service", "bar", center=(2.0, 2.0))
    stage = engine.add_item("zone", "stage", center=(6.0, 5.0))
    engine.select(stage.id)
    assert engine.send_backward() == [stage.id]
    assert engine.store.element_order == [space.id, stage.id, bar.id]
    engine.send_backward()
    assert engine.store.element_order[0] == space.id
    assert engine.bring_forward([stage.id]) == [stage.id]
    assert engine.store.element_order == [space.id, bar.id, stage.id]


def test_bad_table_update_is_reported_and_snapshot_still_builds(engine):
    engine.add_space(10.0, 8.0)
    table = engine.add_table("round", "1.5m", 8)
    assert engine.update_element(table.id, table_type="hexagon") is None
    assert isinstance(engine.last_error, ValidationError)
    assert table.table_type is TableType.ROUND
    snapshot = engine.snapshot()
    assert len(snapshot.seats[table.id]) == 8
