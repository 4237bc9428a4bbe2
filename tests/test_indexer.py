"""Tests for snapping narrative points onto the path."""

import logging
import math

import pytest

from scroll_journey.core.indexer import index_waypoints, snap
from scroll_journey.core.models import NarrativePoint
from scroll_journey.geo.path import PathGeometry, haversine_km


def test_snap_projects_perpendicular(equator_path):
    coord, along = snap((0.25, 0.1), equator_path)
    assert coord[0] == pytest.approx(0.25, abs=1e-9)
    assert coord[1] == pytest.approx(0.0, abs=1e-12)
    assert along == pytest.approx(haversine_km((0.0, 0.0), (0.25, 0.0)), rel=1e-9)


def test_snap_before_start_and_after_end_clamp_to_endpoints(equator_path):
    coord, along = snap((-0.5, 0.2), equator_path)
    assert coord == pytest.approx((0.0, 0.0))
    assert along == 0.0

    coord, along = snap((1.5, -0.3), equator_path)
    assert coord == pytest.approx((1.0, 0.0))
    assert along == pytest.approx(equator_path.total_length)


def test_snap_tie_prefers_earliest_segment():
    # Out-and-back: both legs are equally close to the query point
    path = PathGeometry([(0.0, 0.0), (1.0, 0.0), (0.0, 0.0)])
    _, along = snap((0.5, 0.1), path)
    assert along == pytest.approx(haversine_km((0.0, 0.0), (0.5, 0.0)), rel=1e-9)


def test_snap_single_point_path():
    path = PathGeometry([(2.0, 3.0)])
    assert snap((9.0, 9.0), path) == ((2.0, 3.0), 0.0)


def test_snap_picks_nearest_segment_on_bent_path():
    path = PathGeometry([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)])
    coord, along = snap((1.1, 0.5), path)
    assert coord == pytest.approx((1.0, 0.5), abs=1e-9)
    expected = haversine_km((0.0, 0.0), (1.0, 0.0)) + haversine_km((1.0, 0.0), (1.0, 0.5))
    assert along == pytest.approx(expected, rel=1e-9)


def test_index_waypoints_sorted_by_distance(equator_path):
    points = [
        NarrativePoint(id=3, lon=0.9, lat=0.05, section_name="C", text="third"),
        NarrativePoint(id=1, lon=0.1, lat=-0.05, section_name="A", image="a.jpg"),
        NarrativePoint(id=2, lon=0.5, lat=0.02, section_name="B", contents_name="Bee"),
    ]
    wps = index_waypoints(points, equator_path)
    assert [w.id for w in wps] == [1, 2, 3]
    assert all(a.distance_along_path <= b.distance_along_path for a, b in zip(wps, wps[1:]))
    assert wps[0].image_ref == "a.jpg"
    assert wps[1].section_label == "Bee"
    assert wps[2].text == "third"
    assert wps[0].coordinate[1] == pytest.approx(0.0, abs=1e-12)


def test_index_waypoints_drops_non_finite_with_warning(equator_path, caplog):
    points = [
        NarrativePoint(id=1, lon=0.1, lat=0.0),
        NarrativePoint(id=2, lon=math.nan, lat=0.0),
        NarrativePoint(id=3, lon=0.4, lat=math.inf),
        NarrativePoint(id=4, lon=0.6, lat=0.0),
    ]
    with caplog.at_level(logging.WARNING, logger="scroll_journey.core.indexer"):
        wps = index_waypoints(points, equator_path)
    assert [w.id for w in wps] == [1, 4]
    assert "non-finite" in caplog.text


def test_index_waypoints_drops_duplicate_ids(equator_path):
    points = [
        NarrativePoint(id=1, lon=0.1, lat=0.0),
        NarrativePoint(id=1, lon=0.6, lat=0.0),
    ]
    wps = index_waypoints(points, equator_path)
    assert len(wps) == 1
    assert wps[0].coordinate[0] == pytest.approx(0.1)


def test_index_waypoints_empty(equator_path):
    assert index_waypoints([], equator_path) == []
