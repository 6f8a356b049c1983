"""Tests for the placement engine: stacking height and zone classification."""

import numpy as np
import pytest

from taskboard.placement import (
    FLOORS,
    ZONES,
    Zone,
    classify_zone,
    footprints_overlap,
    resolve_support_height,
    settle_height,
)
from taskboard.primitives import GROUND_Y, SHAPE_SIZE, ShapeKind, Status
from taskboard.shapes import Shape


def _shape(shape_id, x, y, z):
    return Shape(id=shape_id, kind=ShapeKind.CUBE, position=np.array([x, y, z], dtype=float))


# ---------------------------------------------------------------------------
# Footprint overlap
# ---------------------------------------------------------------------------


class TestFootprints:
    def test_same_spot_overlaps(self):
        assert footprints_overlap(_shape(1, 0, 0, 0), _shape(2, 0, 0, 0))

    def test_partial_overlap(self):
        assert footprints_overlap(_shape(1, 0, 0, 0), _shape(2, 0.9, 0, -0.9))

    def test_touching_edges_do_not_overlap(self):
        assert not footprints_overlap(_shape(1, 0, 0, 0), _shape(2, 1.0, 0, 0))

    def test_needs_overlap_on_both_axes(self):
        assert not footprints_overlap(_shape(1, 0, 0, 0), _shape(2, 0.5, 0, 3.0))


# ---------------------------------------------------------------------------
# Support height
# ---------------------------------------------------------------------------


class TestSupportHeight:
    def test_alone_rests_on_ground(self):
        a = _shape(1, 0, GROUND_Y, 0)
        assert resolve_support_height(a, [a]) == GROUND_Y

    def test_non_overlapping_shapes_are_independent(self):
        a = _shape(1, 0, GROUND_Y, 0)
        b = _shape(2, 3, GROUND_Y, 0)
        assert resolve_support_height(a, [a, b]) == GROUND_Y
        assert resolve_support_height(b, [a, b]) == GROUND_Y

    def test_identical_footprint_stacks_one_unit_up(self):
        a = _shape(1, 2, GROUND_Y, 2)
        b = _shape(2, 2, GROUND_Y, 2)
        assert resolve_support_height(b, [a, b]) == a.y + SHAPE_SIZE

    def test_neighbor_far_above_is_ignored(self):
        high = _shape(1, 0, GROUND_Y + 3.0, 0)
        target = _shape(2, 0, GROUND_Y, 0)
        assert resolve_support_height(target, [high, target]) == GROUND_Y

    def test_neighbor_just_above_tolerance_is_ignored(self):
        other = _shape(1, 0, GROUND_Y + 0.6, 0)
        target = _shape(2, 0, GROUND_Y, 0)
        assert resolve_support_height(target, [other, target]) == GROUND_Y

    def test_highest_qualifying_neighbor_wins(self):
        a = _shape(1, 0, GROUND_Y, 0)
        b = _shape(2, 0.5, GROUND_Y + 1.0, 0)
        target = _shape(3, 0.2, GROUND_Y + 1.0, 0.2)
        assert resolve_support_height(target, [a, b, target]) == pytest.approx(GROUND_Y + 2.0)

    def test_target_is_not_modified(self):
        a = _shape(1, 0, GROUND_Y, 0)
        b = _shape(2, 0, GROUND_Y, 0)
        resolve_support_height(b, [a, b])
        assert b.y == GROUND_Y

    def test_custom_unit_size(self):
        a = _shape(1, 0, 0.0, 0)
        b = _shape(2, 1.5, 0.0, 0)
        assert resolve_support_height(b, [a, b], size=2.0, ground_y=0.0) == 2.0


class TestSettleHeight:
    def test_settles_on_top_of_a_stack(self):
        a = _shape(1, 0, GROUND_Y, 0)
        b = _shape(2, 0, GROUND_Y + SHAPE_SIZE, 0)
        c = _shape(3, 0, GROUND_Y, 0)
        assert settle_height(c, [a, b]) == pytest.approx(GROUND_Y + 2 * SHAPE_SIZE)
        assert c.y == GROUND_Y

    def test_empty_board_is_ground(self):
        a = _shape(1, 4, GROUND_Y, 4)
        assert settle_height(a, []) == GROUND_Y


# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------


class TestClassifyZone:
    @pytest.mark.parametrize("x", [-10.0, -3.5, 0.0, 9.999, 10.0])
    def test_todo_range(self, x):
        assert classify_zone(x) == Status.TODO

    @pytest.mark.parametrize("x", [10.0001, 15.0, 29.9, 30.0])
    def test_done_range(self, x):
        assert classify_zone(x) == Status.DONE

    @pytest.mark.parametrize("x", [-10.0001, -50.0, 30.0001, 100.0])
    def test_outside_keeps_current(self, x):
        assert classify_zone(x, Status.DONE) == Status.DONE
        assert classify_zone(x, Status.TODO) == Status.TODO
        assert classify_zone(x) is None

    def test_zone_bounds(self):
        done = Zone(Status.DONE, 10.0, 30.0, include_min=False)
        assert not done.contains(10.0)
        assert done.contains(30.0)

    def test_floors_cover_zones(self):
        for zone, floor in zip(ZONES, FLOORS):
            cx = floor.center[0]
            assert zone.x_min == pytest.approx(cx - floor.width / 2)
            assert zone.x_max == pytest.approx(cx + floor.width / 2)
