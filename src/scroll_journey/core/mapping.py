"""Dwell-weighted scroll mapping: a sampled table of distance ↔ scroll pixels."""
from __future__ import annotations

import logging
from math import ceil
from typing import List, Sequence

from scroll_journey.contracts.journey_contract import ScrollMapping, Waypoint

log = logging.getLogger(__name__)

# Guards against a spurious extra step from float division (e.g. 25 / 0.2)
_STEP_SLACK = 1e-9


def trivial_mapping(distance: float = 0.0) -> ScrollMapping:
    """Single-sample, zero-range mapping: every offset resolves to *distance*."""
    return ScrollMapping(distance_samples=(distance,), cumulative_pixels=(0.0,), total_pixel_range=0.0)


def in_dwell_zone(distance: float, waypoint_distances: Sequence[float], dwell_window: float) -> bool:
    return any(abs(distance - wd) <= dwell_window for wd in waypoint_distances)


def build_scroll_mapping(
    waypoints: Sequence[Waypoint],
    base_rate: float,
    dwell_window: float,
    dwell_factor: float,
    step: float = 0.2,
    tail_fraction: float = 0.5,
) -> ScrollMapping:
    """
    Build the distance → pixel table spanning first to last waypoint.

    The span is cut into fixed *step*-long pieces (the final piece may be
    shorter).  Each piece costs ``length * base_rate``, multiplied by
    *dwell_factor* when its midpoint is within *dwell_window* of any
    waypoint.  ``total_pixel_range`` adds ``tail_fraction * base_rate`` past
    the last sample so the final waypoint is not pinned to end-of-scroll.

    Zero or one waypoint (or a zero-length span) gives a trivial mapping.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")

    if len(waypoints) <= 1:
        return trivial_mapping(waypoints[0].distance_along_path if waypoints else 0.0)

    start = waypoints[0].distance_along_path
    end = waypoints[-1].distance_along_path
    if end <= start:
        return trivial_mapping(start)

    wp_dists = [w.distance_along_path for w in waypoints]
    n_steps = max(1, ceil((end - start) / step - _STEP_SLACK))

    samples: List[float] = [start]
    pixels: List[float] = [0.0]
    acc = 0.0
    prev = start

    for i in range(1, n_steps + 1):
        d = end if i == n_steps else start + i * step
        length = d - prev
        mid = prev + length / 2
        rate = base_rate * (dwell_factor if in_dwell_zone(mid, wp_dists, dwell_window) else 1.0)
        acc += length * rate
        samples.append(d)
        pixels.append(acc)
        prev = d

    total = acc + tail_fraction * base_rate
    log.debug("Scroll mapping: %d samples over %.3f km, %.1f px", len(samples), end - start, total)

    return ScrollMapping(
        distance_samples=tuple(samples),
        cumulative_pixels=tuple(pixels),
        total_pixel_range=total,
    )
