"""Snap narrative points onto the path and measure distance along it."""
from __future__ import annotations

import logging
from math import isfinite
from typing import Iterable, List, Optional, Tuple

from scroll_journey.contracts.journey_contract import Waypoint
from scroll_journey.core.models import NarrativePoint
from scroll_journey.geo.path import (
    Coordinate,
    PathGeometry,
    haversine_km,
    is_finite_coordinate,
    project_onto_segment,
)

log = logging.getLogger(__name__)


def snap(point: Coordinate, path: PathGeometry) -> Tuple[Coordinate, float]:
    """
    Project *point* onto the nearest location of *path*.

    Returns ``(snapped_coordinate, distance_along_path_km)``.  Every segment
    is tried; ties keep the earliest segment.  A single-point path snaps
    everything to that point at distance 0.
    """
    coords = path.coordinates
    if len(coords) == 1:
        return coords[0], 0.0

    best: Optional[Tuple[float, Coordinate, float]] = None  # (gap_km, coord, along_km)
    for _, a, b, start_km in path.segments():
        proj = project_onto_segment(point, a, b)
        gap = haversine_km(point, proj)
        if best is None or gap < best[0]:
            best = (gap, proj, start_km + haversine_km(a, proj))

    _, coord, along = best
    return coord, path.clamp(along)


def index_waypoints(points: Iterable[NarrativePoint], path: PathGeometry) -> List[Waypoint]:
    """
    Snap every narrative point and return waypoints ordered by distance.

    Points with non-finite coordinates (or whose projection is not finite)
    are dropped with a warning; the rest are still indexed.
    """
    out: List[Waypoint] = []
    seen: set[int] = set()

    for p in points:
        if p.id in seen:
            log.warning("Duplicate narrative point id %s dropped", p.id)
            continue
        if not is_finite_coordinate(p.coordinate):
            log.warning("Narrative point %s has non-finite coordinate %s, dropped", p.id, p.coordinate)
            continue

        coord, along = snap(p.coordinate, path)
        if not (is_finite_coordinate(coord) and isfinite(along)):
            log.warning("Narrative point %s could not be projected onto the path, dropped", p.id)
            continue

        seen.add(p.id)
        out.append(Waypoint(
            id=p.id,
            section_name=p.section_name,
            subsection_name=p.subsection_name,
            text=p.text,
            image_ref=p.image,
            coordinate=coord,
            distance_along_path=along,
            contents_name=p.contents_name,
            subsection_contents_name=p.subsection_contents_name,
        ))

    # Stable: equal distances keep input order
    out.sort(key=lambda w: w.distance_along_path)
    return out
