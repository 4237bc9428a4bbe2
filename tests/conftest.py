"""Shared test fixtures for scroll_journey tests."""

import pytest

from scroll_journey.config import Settings
from scroll_journey.contracts.journey_contract import Waypoint
from scroll_journey.core.scheduler import ManualScheduler
from scroll_journey.geo.path import PathGeometry


def make_waypoint(wid, distance, section="", subsection="", coordinate=(0.0, 0.0), **kw):
    return Waypoint(
        id=wid,
        section_name=section,
        subsection_name=subsection or f"stop {wid}",
        text=kw.pop("text", ""),
        image_ref=kw.pop("image_ref", None),
        coordinate=coordinate,
        distance_along_path=distance,
        **kw,
    )


@pytest.fixture()
def scheduler():
    return ManualScheduler(frame_interval_ms=16.0)


@pytest.fixture()
def equator_path():
    """Straight eastward path along the equator, 0..1 degree of longitude (~111 km)."""
    return PathGeometry([(i / 10, 0.0) for i in range(11)])


@pytest.fixture()
def scenario_waypoints():
    """Waypoints at 0 / 10 / 25 km; the first and last only anchor the path."""
    return [
        make_waypoint(1, 0.0, "Start"),
        make_waypoint(2, 10.0, "Middle"),
        make_waypoint(3, 25.0, "End"),
    ]


@pytest.fixture()
def journey_waypoints():
    """Seven waypoints in three sections, 20 km apart."""
    sections = ["Start", "Coast", "Coast", "Sea", "Sea", "Sea", "End"]
    return [make_waypoint(i + 1, i * 20.0, s) for i, s in enumerate(sections)]


@pytest.fixture()
def engine_settings():
    return Settings(
        base_px_per_km=100.0,
        dwell_window_km=5.0,
        dwell_factor=2.0,
        sample_step_km=0.5,
        swap_delay_ms=280.0,
        nav_ms_per_section=1000.0,
    )
