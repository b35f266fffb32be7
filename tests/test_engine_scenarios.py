from __future__ import annotations

import pytest

from layout_maker.editor.engine import LayoutEngine
from layout_maker.editor.state import Modifiers
from layout_maker.geometry import contract
from layout_maker.model.elements import Chair


def _screen(engine: LayoutEngine, x: float, y: float) -> tuple[float, float]:
    return tuple(engine.viewport.world_to_screen((x, y)))


def test_round_table_in_space_rotates_with_its_seats():
    engine = LayoutEngine()
    space = engine.add_space(5.0, 4.0)
    table = engine.add_table("round", "1.5m", 8)
    assert engine.last_error is None
    assert table.center == pytest.approx((2.5, 2.0))
    assert table.space_id == space.id
    assert len(engine.store.chairs_of(table.id)) == 8

    before = engine.snapshot().seats[table.id]
    engine.select(table.id)
    engine.rotate_selected(90.0)
    after = engine.snapshot().seats[table.id]

    assert table.rotation == pytest.approx(90.0)
    assert table.center == pytest.approx((2.5, 2.0))
    cx, cy = table.center
    for old, new in zip(before, after):
        assert contract.angular_distance(new["angle"], old["angle"] + 90.0) == pytest.approx(0.0, abs=1e-9)
        assert (new["x"], new["y"]) == pytest.approx((cx - (old["y"] - cy), cy + (old["x"] - cx)))


def test_chairs_follow_the_rotated_table():
    engine = LayoutEngine()
    engine.add_space(5.0, 4.0)
    table = engine.add_table("round", "1.5m", 8)
    engine.rotate_element(table.id, 90.0)
    seats = engine.snapshot().seats[table.id]
    for chair in engine.store.chairs_of(table.id):
        assert isinstance(chair, Chair)
        seat = seats[chair.seat_index]
        assert chair.center == pytest.approx((seat["x"], seat["y"]))


def test_two_walls_snap_to_exact_right_angle():
    engine = LayoutEngine()
    engine.set_tool("wall")

    engine.pointer_down(_screen(engine, 1.0, 1.0))
    engine.pointer_move(_screen(engine, 4.0, 1.0))
    engine.pointer_up(_screen(engine, 4.0, 1.0))

    # second segment released about 3 degrees off vertical
    engine.pointer_down(_screen(engine, 4.0, 1.0))
    engine.pointer_move(_screen(engine, 4.157, 4.0))
    engine.pointer_up(_screen(engine, 4.157, 4.0))

    assert engine.scene.walls == []
    assert len(engine.snapshot().scratch_walls) == 2

    assert engine.commit_walls()
    first, second = engine.scene.walls
    assert first.angle == 0.0
    assert second.angle == 90.0
    assert second.start == first.end
    assert second.x2 == 4.0
    assert engine.snapshot().scratch_walls == ()


def test_door_on_committed_wall_moves_with_it():
    engine = LayoutEngine()
    engine.set_tool("wall")
    engine.pointer_down(_screen(engine, 0.0, 0.0))
    engine.pointer_up(_screen(engine, 4.0, 0.0))
    engine.set_tool("door")
    engine.pointer_down(_screen(engine, 3.0, 0.03))
    engine.commit_walls()

    wall = engine.scene.walls[0]
    door = engine.snapshot().doors[0]
    assert door["position_along_wall"] == pytest.approx(0.75)
    assert door["center"] == pytest.approx((3.0, 0.0))

    engine.move_wall_endpoint(wall.id, "end", (8.0, 0.0))
    door = engine.snapshot().doors[0]
    assert door["center"] == pytest.approx((6.0, 0.0))


def test_drag_select_and_move_with_the_pointer():
    engine = LayoutEngine()
    bar = engine.add_item("service", "bar", center=(2.0, 2.0))
    other = engine.add_item("decoration", "arch", center=(6.0, 5.0))

    engine.pointer_down(_screen(engine, 2.0, 2.0))
    engine.pointer_move(_screen(engine, 3.0, 2.0))
    snapshot = engine.snapshot()
    assert [g["kind"] for g in snapshot.active_guides if g["orientation"] == "vertical"] == ["grid"]
    engine.pointer_up(_screen(engine, 3.0, 2.0))

    assert (bar.x, bar.y) == pytest.approx((2.0, 1.7))
    assert engine.selection.ids == [bar.id]
    assert engine.snapshot().active_guides == ()
    assert (other.x, other.y) == pytest.approx((4.75, 4.75))


def test_marquee_then_shift_click_toggles():
    engine = LayoutEngine()
    a = engine.add_item("service", "cake-table", center=(1.0, 1.0))
    b = engine.add_item("service", "cake-table", center=(3.0, 1.0))

    engine.pointer_down(_screen(engine, 7.0, 5.0))
    engine.pointer_move(_screen(engine, 0.2, 0.2))
    assert engine.snapshot().ghost_preview["kind"] == "marquee"
    engine.pointer_up(_screen(engine, 0.2, 0.2))
    assert engine.selection.ids == [a.id, b.id]

    engine.pointer_down(_screen(engine, 1.0, 1.0), Modifiers(shift=True))
    engine.pointer_up(_screen(engine, 1.0, 1.0), Modifiers(shift=True))
    assert engine.selection.ids == [b.id]

    engine.pointer_down(_screen(engine, 7.0, 5.0))
    engine.pointer_up(_screen(engine, 7.0, 5.0))
    assert engine.selection.ids == []
