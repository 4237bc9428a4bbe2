"""Join GeoJSON path / point features with a narrative document."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from scroll_journey.core.models import AnchorSpec, JourneyInput, NarrativePoint
from scroll_journey.providers.base import JourneySource

log = logging.getLogger(__name__)


def _path_coordinates(path_geojson: Dict[str, Any]) -> List[tuple]:
    """Coordinates of the first LineString in a FeatureCollection / Feature / geometry."""
    obj = path_geojson
    if obj.get("type") == "FeatureCollection":
        features = obj.get("features") or []
        if not features:
            raise ValueError("path FeatureCollection has no features")
        obj = features[0]
    if obj.get("type") == "Feature":
        obj = obj.get("geometry") or {}

    gtype = obj.get("type")
    coords = obj.get("coordinates") or []
    if gtype == "MultiLineString":
        # Stitch parts in order
        return [tuple(c[:2]) for part in coords for c in part]
    if gtype != "LineString":
        raise ValueError(f"expected a LineString path, got {gtype!r}")
    return [tuple(c[:2]) for c in coords]


def narrative_lookup(narrative: Dict[str, Any]) -> Dict[int, Dict[str, Any]]:
    """Map subsection ``number`` to its section/subsection fields."""
    out: Dict[int, Dict[str, Any]] = {}
    for section in narrative.get("sections", []):
        section_name = section.get("name", "")
        contents_name = section.get("contents-name")
        for sub in section.get("subsections", []):
            try:
                number = int(sub["number"])
            except (KeyError, TypeError, ValueError):
                log.warning("Narrative subsection without a usable number in %r, skipped", section_name)
                continue
            out[number] = {
                "section_name": section_name,
                "contents_name": contents_name,
                "subsection_name": sub.get("name", ""),
                "subsection_contents_name": sub.get("contents-name"),
                "text": sub.get("text", ""),
                "image": sub.get("image"),
            }
    return out


class GeoJSONSource(JourneySource):
    """
    Build a :class:`JourneyInput` from parsed documents.

    ``points_geojson`` features carry an ``id`` property that matches a
    subsection ``number`` in ``narrative``.
    """

    def __init__(
        self,
        path_geojson: Dict[str, Any],
        points_geojson: Dict[str, Any],
        narrative: Optional[Dict[str, Any]] = None,
        anchors: Sequence[AnchorSpec] = (),
        journey_id: str = "journey",
    ):
        self.path_geojson = path_geojson
        self.points_geojson = points_geojson
        self.narrative = narrative or {}
        self.anchors = list(anchors)
        self.journey_id = journey_id

    def load(self) -> JourneyInput:
        lookup = narrative_lookup(self.narrative)
        points: List[NarrativePoint] = []

        for feat in self.points_geojson.get("features", []):
            props = feat.get("properties") or {}
            geom = feat.get("geometry") or {}
            raw_id = props.get("id", props.get("fid"))
            if raw_id is None or geom.get("type") != "Point":
                log.warning("Skipping point feature without id or Point geometry: %s", props)
                continue

            coords = geom.get("coordinates") or [float("nan"), float("nan")]
            try:
                point_id = int(raw_id)
                lon, lat = float(coords[0]), float(coords[1])
            except (IndexError, TypeError, ValueError):
                log.warning("Skipping malformed point feature %r: %s", raw_id, coords)
                continue

            entry = lookup.get(point_id)
            if entry is None:
                log.warning("No narrative entry for point %s", raw_id)
                entry = {}

            points.append(NarrativePoint(
                id=point_id,
                lon=lon,
                lat=lat,
                section_name=entry.get("section_name", ""),
                subsection_name=entry.get("subsection_name", props.get("name", "")) or "",
                text=entry.get("text", props.get("description", "")) or "",
                image=entry.get("image"),
                contents_name=entry.get("contents_name"),
                subsection_contents_name=entry.get("subsection_contents_name"),
            ))

        return JourneyInput(
            journey_id=self.journey_id,
            path=_path_coordinates(self.path_geojson),
            points=points,
            anchors=self.anchors,
        )
