"""Tests for path geometry and the geo helpers."""

import math

import pytest

from scroll_journey.geo.path import (
    PathGeometry,
    bearing_deg,
    haversine_km,
    is_finite_coordinate,
    project_onto_segment,
)


def test_haversine_one_degree_on_equator():
    assert haversine_km((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111.195, rel=1e-4)
    assert haversine_km((3.0, 4.0), (3.0, 4.0)) == 0.0


def test_bearing_cardinal_directions():
    assert bearing_deg((0.0, 0.0), (1.0, 0.0)) == pytest.approx(90.0)
    assert bearing_deg((0.0, 0.0), (0.0, 1.0)) == pytest.approx(0.0)
    assert bearing_deg((1.0, 0.0), (0.0, 0.0)) == pytest.approx(270.0)
    assert bearing_deg((0.0, 1.0), (0.0, 0.0)) == pytest.approx(180.0)


def test_is_finite_coordinate():
    assert is_finite_coordinate((1.0, 2.0))
    assert not is_finite_coordinate((math.nan, 2.0))
    assert not is_finite_coordinate((1.0, math.inf))
    assert not is_finite_coordinate((1.0,))
    assert not is_finite_coordinate(("a", 2.0))


def test_project_onto_segment_clamps_to_extent():
    a, b = (0.0, 0.0), (1.0, 0.0)
    assert project_onto_segment((0.5, 0.3), a, b) == pytest.approx((0.5, 0.0))
    assert project_onto_segment((-2.0, 0.1), a, b) == pytest.approx(a)
    assert project_onto_segment((5.0, -0.1), a, b) == pytest.approx(b)
    assert project_onto_segment((5.0, 5.0), a, a) == a


def test_total_length_and_cumulative(equator_path):
    assert len(equator_path) == 11
    assert equator_path.total_length == pytest.approx(haversine_km((0.0, 0.0), (1.0, 0.0)), rel=1e-9)
    cum = equator_path.cumulative_km
    assert cum[0] == 0.0
    assert all(b > a for a, b in zip(cum, cum[1:]))


def test_point_at_interpolates_and_clamps(equator_path):
    total = equator_path.total_length
    assert equator_path.point_at(0.0) == (0.0, 0.0)
    assert equator_path.point_at(total) == (1.0, 0.0)
    mid = equator_path.point_at(total / 2)
    assert mid[0] == pytest.approx(0.5, abs=1e-9)
    assert mid[1] == pytest.approx(0.0)
    assert equator_path.point_at(-10.0) == (0.0, 0.0)
    assert equator_path.point_at(total + 10.0) == (1.0, 0.0)


def test_degenerate_single_point_path():
    path = PathGeometry([(5.0, 6.0)])
    assert path.is_degenerate
    assert path.total_length == 0.0
    assert path.point_at(0.0) == (5.0, 6.0)
    assert path.point_at(123.0) == (5.0, 6.0)


def test_zero_length_path_returns_its_point():
    path = PathGeometry([(5.0, 6.0), (5.0, 6.0), (5.0, 6.0)])
    assert path.is_degenerate
    assert path.point_at(3.0) == (5.0, 6.0)


def test_non_finite_path_coordinates_are_skipped():
    path = PathGeometry([(0.0, 0.0), (math.nan, 0.0), (1.0, 0.0)])
    assert path.coordinates == ((0.0, 0.0), (1.0, 0.0))


def test_empty_path_rejected():
    with pytest.raises(ValueError):
        PathGeometry([])
    with pytest.raises(ValueError):
        PathGeometry([(math.nan, math.nan)])


def test_segments_yield_start_distance(equator_path):
    segs = list(equator_path.segments())
    assert len(segs) == 10
    i, a, b, start_km = segs[3]
    assert i == 3
    assert a == (0.3, 0.0)
    assert start_km == pytest.approx(equator_path.cumulative_km[3])
