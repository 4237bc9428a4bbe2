"""Path polyline geometry: arc-length queries over an ordered coordinate list."""
from __future__ import annotations

from bisect import bisect_right
from math import atan2, cos, degrees, isfinite, radians, sin, sqrt
from typing import Iterable, Iterator, List, Sequence, Tuple

from shapely.geometry import LineString, Point

# (lon, lat), GeoJSON order
Coordinate = Tuple[float, float]


# ---------------------------------------------------------------------------
# Geo helpers
# ---------------------------------------------------------------------------

def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometres between two (lon, lat) points."""
    R = 6_371.0088  # mean Earth radius in km
    lon1r, lat1r, lon2r, lat2r = map(radians, [a[0], a[1], b[0], b[1]])
    dlat = lat2r - lat1r
    dlon = lon2r - lon1r
    h = sin(dlat / 2) ** 2 + cos(lat1r) * cos(lat2r) * sin(dlon / 2) ** 2
    return R * 2 * atan2(sqrt(h), sqrt(1 - h))


def bearing_deg(a: Coordinate, b: Coordinate) -> float:
    """Initial great-circle bearing from *a* to *b* (degrees clockwise from north)."""
    lon1r, lat1r, lon2r, lat2r = map(radians, [a[0], a[1], b[0], b[1]])
    dlon = lon2r - lon1r
    x = sin(dlon) * cos(lat2r)
    y = cos(lat1r) * sin(lat2r) - sin(lat1r) * cos(lat2r) * cos(dlon)
    return (degrees(atan2(x, y)) + 360.0) % 360.0


def interpolate_coordinate(a: Coordinate, b: Coordinate, frac: float) -> Coordinate:
    """Linear interpolation between two coordinates (frac in [0,1])."""
    return a[0] + frac * (b[0] - a[0]), a[1] + frac * (b[1] - a[1])


def is_finite_coordinate(coord: Sequence[float]) -> bool:
    try:
        return len(coord) >= 2 and isfinite(float(coord[0])) and isfinite(float(coord[1]))
    except (TypeError, ValueError):
        return False


def project_onto_segment(point: Coordinate, a: Coordinate, b: Coordinate) -> Coordinate:
    """
    Perpendicular projection of *point* onto segment a→b, clamped to the segment.

    Projection is done in a local equirectangular frame (longitude scaled by
    cos(latitude) of the query point) so that "perpendicular" is meaningful
    away from the equator.
    """
    if a == b:
        return a
    k = cos(radians(point[1])) or 1e-12
    seg = LineString([(a[0] * k, a[1]), (b[0] * k, b[1])])
    frac = seg.project(Point(point[0] * k, point[1]), normalized=True)
    frac = max(0.0, min(1.0, frac))
    return interpolate_coordinate(a, b, frac)


# ---------------------------------------------------------------------------
# PathGeometry
# ---------------------------------------------------------------------------

class PathGeometry:
    """
    Immutable route polyline with cumulative arc length in kilometres.

    A path with a single coordinate (or whose coordinates all coincide) is
    degenerate: every query returns that coordinate.
    """

    def __init__(self, coordinates: Iterable[Sequence[float]]):
        coords: List[Coordinate] = [
            (float(c[0]), float(c[1])) for c in coordinates if is_finite_coordinate(c)
        ]
        if not coords:
            raise ValueError("PathGeometry needs at least one finite coordinate")

        cum: List[float] = [0.0]
        for i in range(1, len(coords)):
            cum.append(cum[-1] + haversine_km(coords[i - 1], coords[i]))

        self._coords: Tuple[Coordinate, ...] = tuple(coords)
        self._cum: Tuple[float, ...] = tuple(cum)

    @property
    def coordinates(self) -> Tuple[Coordinate, ...]:
        return self._coords

    @property
    def cumulative_km(self) -> Tuple[float, ...]:
        return self._cum

    @property
    def total_length(self) -> float:
        return self._cum[-1]

    @property
    def is_degenerate(self) -> bool:
        return self.total_length <= 0.0

    def __len__(self) -> int:
        return len(self._coords)

    def __repr__(self) -> str:
        return f"PathGeometry(points={len(self._coords)}, length_km={self.total_length:.3f})"

    def segments(self) -> Iterator[Tuple[int, Coordinate, Coordinate, float]]:
        """Yield ``(index, start, end, start_km)`` for every segment in order."""
        for i in range(len(self._coords) - 1):
            yield i, self._coords[i], self._coords[i + 1], self._cum[i]

    def clamp(self, distance_km: float) -> float:
        return max(0.0, min(self.total_length, distance_km))

    def point_at(self, distance_km: float) -> Coordinate:
        """Coordinate at arc length *distance_km* from the path start (clamped)."""
        if self.is_degenerate or len(self._coords) == 1:
            return self._coords[0]

        d = self.clamp(distance_km)
        if d >= self.total_length:
            return self._coords[-1]

        # Segment i spans [cum[i], cum[i+1]]
        i = bisect_right(self._cum, d) - 1
        i = max(0, min(i, len(self._coords) - 2))
        seg_len = self._cum[i + 1] - self._cum[i]
        frac = (d - self._cum[i]) / seg_len if seg_len > 0 else 0.0
        return interpolate_coordinate(self._coords[i], self._coords[i + 1], frac)
