"""Scroll offset → distance → coordinate / heading."""
from __future__ import annotations

from bisect import bisect_right
from typing import Optional

from scroll_journey.contracts.journey_contract import ResolvedPosition, ScrollMapping
from scroll_journey.geo.path import Coordinate, PathGeometry, bearing_deg


def distance_for_offset(mapping: ScrollMapping, px: float) -> float:
    """Interpolate distance along the path for scroll offset *px* (clamped)."""
    dists = mapping.distance_samples
    pixels = mapping.cumulative_pixels
    if len(dists) <= 1:
        return dists[0]

    px = max(0.0, min(mapping.total_pixel_range, px))
    if px >= pixels[-1]:
        # Tail padding past the last sample stays on the last distance
        return dists[-1]

    hi = bisect_right(pixels, px)
    lo = hi - 1
    span = pixels[hi] - pixels[lo]
    if span <= 0:
        return dists[lo]
    frac = (px - pixels[lo]) / span
    return dists[lo] + frac * (dists[hi] - dists[lo])


def offset_for_distance(mapping: ScrollMapping, distance: float) -> float:
    """Inverse lookup: scroll offset at which *distance* is reached."""
    dists = mapping.distance_samples
    pixels = mapping.cumulative_pixels
    if len(dists) <= 1:
        return 0.0

    d = max(dists[0], min(dists[-1], distance))
    hi = bisect_right(dists, d)
    if hi >= len(dists):
        return pixels[-1]
    lo = hi - 1
    frac = (d - dists[lo]) / (dists[hi] - dists[lo])
    return pixels[lo] + frac * (pixels[hi] - pixels[lo])


class PositionResolver:
    """Resolves scroll offsets into path positions for one journey."""

    def __init__(self, path: PathGeometry, mapping: ScrollMapping, heading_delta: float = 0.5):
        self.path = path
        self.mapping = mapping
        self.heading_delta = heading_delta

    def distance_for_offset(self, px: float) -> float:
        return distance_for_offset(self.mapping, px)

    def offset_for_distance(self, distance: float) -> float:
        return offset_for_distance(self.mapping, distance)

    def coordinate_for_distance(self, distance: float) -> Coordinate:
        return self.path.point_at(distance)

    def heading_at_distance(self, distance: float, fallback: float = 0.0) -> float:
        """
        Bearing of the path around *distance*, sampled over a window of
        ``heading_delta`` km.  Each sample is clamped to the path, so near
        either end the window becomes one-sided.
        """
        total = self.path.total_length
        if total <= 0:
            return fallback

        d = self.path.clamp(distance)
        width = min(self.heading_delta, total)
        p = self.path.point_at(self.path.clamp(d - width / 2))
        q = self.path.point_at(self.path.clamp(d + width / 2))
        if p == q:
            return fallback
        return bearing_deg(p, q)

    def resolve(self, px: float, fallback_heading: Optional[float] = None) -> ResolvedPosition:
        offset = max(0.0, min(self.mapping.total_pixel_range, px))
        d = self.distance_for_offset(offset)
        return ResolvedPosition(
            offset=offset,
            distance=d,
            coordinate=self.coordinate_for_distance(d),
            heading=self.heading_at_distance(d, fallback=fallback_heading or 0.0),
        )
