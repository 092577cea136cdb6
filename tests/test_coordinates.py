"""Tests for ``hexworld.coordinates`` — cube coordinates, directions, edges."""

from __future__ import annotations

import pytest

from hexworld.coordinates import EdgeType, HexCoordinates, HexDirection, edge_type
from hexworld.metrics import INNER_DIAMETER, OUTER_RADIUS


# ═══════════════════════════════════════════════════════════════════
# Directions
# ═══════════════════════════════════════════════════════════════════


class TestHexDirection:
    def test_opposite(self):
        assert HexDirection.NE.opposite() is HexDirection.SW
        assert HexDirection.E.opposite() is HexDirection.W
        assert HexDirection.NW.opposite() is HexDirection.SE

    def test_opposite_is_involution(self):
        for d in HexDirection:
            assert d.opposite().opposite() is d

    def test_next_and_previous_wrap(self):
        assert HexDirection.NW.next() is HexDirection.NE
        assert HexDirection.NE.previous() is HexDirection.NW

    def test_next2_and_previous2(self):
        assert HexDirection.W.next2() is HexDirection.NE
        assert HexDirection.NE.previous2() is HexDirection.W
        assert HexDirection.E.next2() is HexDirection.SW


class TestEdgeType:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            (0, 0, EdgeType.FLAT),
            (3, 4, EdgeType.SLOPE),
            (4, 3, EdgeType.SLOPE),
            (0, 2, EdgeType.CLIFF),
            (5, -1, EdgeType.CLIFF),
        ],
    )
    def test_classification(self, a, b, expected):
        assert edge_type(a, b) is expected


# ═══════════════════════════════════════════════════════════════════
# Coordinates
# ═══════════════════════════════════════════════════════════════════


class TestHexCoordinates:
    def test_from_offset(self):
        assert HexCoordinates.from_offset(0, 0) == HexCoordinates(0, 0)
        assert HexCoordinates.from_offset(1, 1) == HexCoordinates(1, 1)
        assert HexCoordinates.from_offset(0, 2) == HexCoordinates(-1, 2)
        assert HexCoordinates.from_offset(3, 5) == HexCoordinates(1, 5)

    def test_offset_round_trip(self):
        for z in range(7):
            for x in range(7):
                assert HexCoordinates.from_offset(x, z).to_offset() == (x, z)

    def test_cube_invariant(self):
        for z in range(5):
            for x in range(5):
                c = HexCoordinates.from_offset(x, z)
                assert c.x + c.y + c.z == 0

    def test_str(self):
        assert str(HexCoordinates(1, 2)) == "(1, -3, 2)"

    def test_position(self):
        assert HexCoordinates(0, 0).to_position() == (0.0, 0.0)
        x, z = HexCoordinates(0, 1).to_position()
        assert x == pytest.approx(0.5 * INNER_DIAMETER)
        assert z == pytest.approx(1.5 * OUTER_RADIUS)

    def test_wrapped_folds_x(self):
        assert HexCoordinates.wrapped(-1, 0, 10) == HexCoordinates(9, 0)
        assert HexCoordinates.wrapped(10, 0, 10) == HexCoordinates(0, 0)
        # row 2 shifts cube x by one
        assert HexCoordinates.wrapped(-2, 2, 10) == HexCoordinates(8, 2)
        assert HexCoordinates.wrapped(3, 2, 10) == HexCoordinates(3, 2)

    def test_wrapped_without_wrap_size_is_identity(self):
        assert HexCoordinates.wrapped(-5, 3, 0) == HexCoordinates(-5, 3)


class TestDistance:
    def test_distance_to_self_is_zero(self):
        c = HexCoordinates.from_offset(2, 3)
        assert c.distance_to(c) == 0
        assert c.distance_to(c, 10) == 0

    def test_straight_line(self):
        a = HexCoordinates.from_offset(0, 0)
        b = HexCoordinates.from_offset(5, 0)
        assert a.distance_to(b) == 5

    def test_neighbours_are_one_apart(self):
        a = HexCoordinates(2, 2)
        for dx, dz in ((1, 0), (-1, 0), (0, 1), (0, -1), (1, -1), (-1, 1)):
            assert a.distance_to(HexCoordinates(2 + dx, 2 + dz)) == 1

    def test_symmetric(self):
        points = [HexCoordinates.from_offset(x, z) for x in range(6) for z in range(6)]
        for a in points[::5]:
            for b in points:
                assert a.distance_to(b) == b.distance_to(a)
                assert a.distance_to(b, 6) == b.distance_to(a, 6)

    def test_wrap_shortcut(self):
        a = HexCoordinates.from_offset(0, 0)
        b = HexCoordinates.from_offset(9, 0)
        assert a.distance_to(b) == 9
        assert a.distance_to(b, 10) == 1

    def test_wrap_never_longer(self):
        points = [HexCoordinates.from_offset(x, z) for x in range(8) for z in range(4)]
        for a in points:
            for b in points:
                assert a.distance_to(b, 8) <= a.distance_to(b)
