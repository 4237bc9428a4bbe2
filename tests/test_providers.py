"""Tests for journey sources."""

import logging

import pytest

from scroll_journey.core.models import AnchorSpec
from scroll_journey.providers.geojson import GeoJSONSource, narrative_lookup
from scroll_journey.providers.mock import MockSource

PATH = {
    "type": "FeatureCollection",
    "features": [{
        "type": "Feature",
        "properties": {},
        "geometry": {"type": "LineString", "coordinates": [[0.0, 0.0, 12.0], [0.5, 0.0], [1.0, 0.0]]},
    }],
}

POINTS = {
    "type": "FeatureCollection",
    "features": [
        {"type": "Feature", "properties": {"id": 2}, "geometry": {"type": "Point", "coordinates": [0.6, 0.1]}},
        {"type": "Feature", "properties": {"id": 1}, "geometry": {"type": "Point", "coordinates": [0.1, 0.1]}},
        {"type": "Feature", "properties": {"id": 9, "name": "Stray"},
         "geometry": {"type": "Point", "coordinates": [0.9, 0.0]}},
        {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [0.2, 0.0]}},
    ],
}

NARRATIVE = {
    "sections": [
        {
            "name": "Northern Approach",
            "contents-name": "North",
            "subsections": [
                {"number": 1, "name": "Cape", "text": "Rounding the cape.", "image": "cape.jpg"},
                {"number": 2, "name": "Bay", "contents-name": "The Bay", "text": "Into the bay.", "image": None},
            ],
        },
        {"name": "Broken", "subsections": [{"name": "no number"}]},
    ]
}


def test_narrative_lookup_joins_section_fields(caplog):
    with caplog.at_level(logging.WARNING):
        lookup = narrative_lookup(NARRATIVE)
    assert set(lookup) == {1, 2}
    assert lookup[1]["section_name"] == "Northern Approach"
    assert lookup[1]["contents_name"] == "North"
    assert lookup[2]["subsection_contents_name"] == "The Bay"
    assert "without a usable number" in caplog.text


def test_geojson_source_builds_input(caplog):
    anchors = [AnchorSpec(id="contact", label="Contact", anchor_id="gallery-contact")]
    with caplog.at_level(logging.WARNING):
        journey = GeoJSONSource(PATH, POINTS, NARRATIVE, anchors=anchors, journey_id="track").load()

    assert journey.journey_id == "track"
    assert journey.path == [(0.0, 0.0), (0.5, 0.0), (1.0, 0.0)]
    assert [p.id for p in journey.points] == [2, 1, 9]
    bay = journey.points[0]
    assert bay.section_name == "Northern Approach"
    assert bay.subsection_name == "Bay"
    assert bay.subsection_contents_name == "The Bay"
    assert journey.points[1].image == "cape.jpg"

    stray = journey.points[2]
    assert stray.section_name == ""
    assert stray.subsection_name == "Stray"
    assert "No narrative entry for point 9" in caplog.text
    assert journey.anchors == anchors


def test_geojson_source_accepts_bare_geometry_and_multilinestring():
    multi = {"type": "MultiLineString", "coordinates": [[[0, 0], [1, 0]], [[1, 0], [1, 1]]]}
    journey = GeoJSONSource(multi, {"features": []}).load()
    assert journey.path == [(0, 0), (1, 0), (1, 0), (1, 1)]
    assert journey.points == []


def test_geojson_source_rejects_non_line_path():
    with pytest.raises(ValueError):
        GeoJSONSource({"type": "Point", "coordinates": [0, 0]}, {"features": []}).load()
    with pytest.raises(ValueError):
        GeoJSONSource({"type": "FeatureCollection", "features": []}, {"features": []}).load()


def test_mock_source_is_deterministic():
    a = MockSource().load()
    b = MockSource().load()
    assert a == b
    assert len(a.points) == 7
    assert len(a.path) == 200
    assert {p.section_name for p in a.points} == {"Departure", "Open Water", "Arrival"}
    assert [x.anchor_id for x in a.anchors] == ["gallery-pricing", "gallery-contact"]


def test_geojson_source_skips_malformed_points(caplog):
    points = {
        "features": [
            {"properties": {"id": "abc"}, "geometry": {"type": "Point", "coordinates": [0.3, 0.0]}},
            {"properties": {"id": 3}, "geometry": {"type": "Point", "coordinates": [0.4]}},
            {"properties": {"id": 4}, "geometry": {"type": "Point", "coordinates": [0.5, "north"]}},
            {"properties": {"id": 1}, "geometry": {"type": "Point", "coordinates": [0.1, 0.1]}},
        ]
    }
    with caplog.at_level(logging.WARNING):
        journey = GeoJSONSource(PATH, points, NARRATIVE).load()

    assert [p.id for p in journey.points] == [1]
    assert caplog.text.count("Skipping malformed point feature") == 3
