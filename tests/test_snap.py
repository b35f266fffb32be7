from __future__ import annotations

import math

import pytest

from layout_maker.geometry import contract
from layout_maker.geometry.viewport import Rect
from layout_maker.vector.snap import (
    SnapGuide,
    angle_of,
    snap_angle,
    snap_point_to_grid,
    snap_rect,
    snap_segment_end,
    snap_to_points,
)

ANGLES = list(contract.DEFAULT_SNAP_ANGLES)


def test_snap_angle_within_tolerance():
    assert snap_angle(87.0, ANGLES, 5.0) == (90.0, True)
    assert snap_angle(358.0, ANGLES, 5.0) == (0.0, True)
    assert snap_angle(-3.0, ANGLES, 5.0) == (0.0, True)


def test_snap_angle_outside_tolerance():
    angle, snapped = snap_angle(70.0, ANGLES, 5.0)
    assert snapped is False
    assert angle == pytest.approx(70.0)


def test_segment_end_snaps_to_exact_vertical():
    start = (4.0, 1.0)
    end = (4.0 + 3.0 * math.tan(math.radians(3.0)), 4.0)
    result = snap_segment_end(start, end, ANGLES, 5.0)
    assert result.snapped
    assert result.angle == 90.0
    # exactly vertical, same length as the drawn segment
    assert result.point[0] == 4.0
    assert result.point[1] - start[1] == pytest.approx(math.hypot(end[0] - start[0], end[1] - start[1]))


def test_segment_end_keeps_diagonal_length():
    result = snap_segment_end((0.0, 0.0), (2.0, 2.1), ANGLES, 5.0)
    assert result.snapped
    assert result.angle == 45.0
    assert math.hypot(*result.point) == pytest.approx(math.hypot(2.0, 2.1))
    assert result.point[0] == pytest.approx(result.point[1])


def test_zero_length_segment_does_not_snap():
    result = snap_segment_end((1.0, 1.0), (1.0, 1.0), ANGLES, 5.0)
    assert not result.snapped
    assert result.point == (1.0, 1.0)
    assert angle_of((1.0, 1.0), (1.0, 1.0)) == 0.0


def test_snap_rect_to_grid_on_both_axes():
    result = snap_rect(Rect(0.98, 2.03, 1.0, 1.0), [], threshold=0.1, grid_size=0.5)
    assert (result.x, result.y) == pytest.approx((1.0, 2.0))
    assert [(g.orientation, g.kind) for g in result.guides] == [("vertical", "grid"), ("horizontal", "grid")]
    assert result.snapped


def test_snap_rect_outside_threshold_is_untouched():
    result = snap_rect(Rect(0.2, 0.2, 1.0, 1.0), [], threshold=0.1, grid_size=0.5)
    assert (result.x, result.y) == (0.2, 0.2)
    assert result.guides == []
    assert not result.snapped


def test_snap_rect_without_grid_ignores_grid():
    result = snap_rect(Rect(0.98, 2.03, 1.0, 1.0), [], threshold=0.1, grid_size=None)
    assert (result.x, result.y) == (0.98, 2.03)


def test_grid_beats_edge_on_a_tie():
    other = ("a", Rect(-1.0, 5.0, 1.5, 1.0))  # right edge at 0.5
    result = snap_rect(Rect(0.52, 5.0, 1.0, 1.0), [other], threshold=0.1, grid_size=0.5)
    assert result.x == pytest.approx(0.5)
    assert result.guides[0].kind == "grid"


def test_edge_beats_center_on_a_tie():
    edge_target = ("a", Rect(1.0, 20.0, 1.0, 1.0))  # right edge at 2.0
    center_target = ("b", Rect(1.56, 30.0, 2.0, 1.0))  # center at 2.56
    result = snap_rect(Rect(2.03, 10.0, 1.0, 1.0), [edge_target, center_target], threshold=0.1)
    assert result.x == pytest.approx(2.0)
    assert result.y == 10.0
    assert result.guides == [SnapGuide("vertical", 2.0, "edge", "a")]


def test_center_alignment():
    target = ("a", Rect(0.0, 0.0, 4.0, 1.0))  # center x at 2.0
    result = snap_rect(Rect(1.47, 3.0, 1.0, 1.0), [target], threshold=0.1)
    assert result.x == pytest.approx(1.5)
    assert result.guides[0].kind == "center"
    assert result.guides[0].target_id == "a"


def test_edges_align_with_nearby_box_on_both_axes():
    target = ("a", Rect(0.0, 0.0, 2.0, 2.0))
    result = snap_rect(Rect(2.04, 1.97, 1.0, 1.0), [target], threshold=0.1)
    # left edge onto its right edge, top edge onto its bottom edge
    assert (result.x, result.y) == pytest.approx((2.0, 2.0))
    assert {g.orientation for g in result.guides} == {"vertical", "horizontal"}


def test_snap_point_to_grid():
    assert snap_point_to_grid((1.04, 0.97), 0.5, 0.1) == ((1.0, 1.0), True)
    assert snap_point_to_grid((1.2, 0.97), 0.5, 0.1) == ((1.2, 0.97), False)
    assert snap_point_to_grid((1.2, 0.97), 0.0, 0.1) == ((1.2, 0.97), False)


def test_snap_to_points_picks_closest_target():
    targets = [(0.0, 0.0), (4.0, 1.0), (4.1, 1.0)]
    point, hit = snap_to_points((4.03, 1.02), targets, 0.1)
    assert hit
    assert point == pytest.approx((4.0, 1.0))
    point, hit = snap_to_points((2.0, 2.0), targets, 0.1)
    assert not hit
    assert snap_to_points((0.0, 0.0), [], 0.1) == ((0.0, 0.0), False)
