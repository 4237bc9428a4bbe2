# path: scroll-journey/src/scroll_journey/contracts/journey_contract.py

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

Coordinate = Tuple[float, float]  # (lon, lat)


@dataclass(frozen=True)
class Waypoint:
    id: int
    section_name: str
    subsection_name: str
    text: str
    image_ref: Optional[str]
    coordinate: Coordinate  # snapped onto the path
    distance_along_path: float  # km from path start
    contents_name: Optional[str] = None  # nav label override for the section
    subsection_contents_name: Optional[str] = None

    @property
    def section_label(self) -> str:
        return self.contents_name or self.section_name

    @property
    def subsection_label(self) -> str:
        return self.subsection_contents_name or self.subsection_name


@dataclass(frozen=True)
class ScrollMapping:
    distance_samples: Tuple[float, ...]  # strictly increasing, km
    cumulative_pixels: Tuple[float, ...]  # non-decreasing, px
    total_pixel_range: float  # last cumulative pixel + tail padding

    @property
    def is_degenerate(self) -> bool:
        return len(self.distance_samples) <= 1


@dataclass(frozen=True)
class SectionRange:
    section_name: str
    min_distance: float
    max_distance: float

    def contains(self, distance: float) -> bool:
        return self.min_distance <= distance <= self.max_distance


@dataclass(frozen=True)
class NavigationItem:
    id: str
    label: str
    is_header: bool
    parent_id: Optional[str] = None
    anchor_pixel: Optional[float] = None  # None for anchor-bound items
    anchor_id: Optional[str] = None  # set only for anchor-bound items

    @property
    def is_anchor_bound(self) -> bool:
        return self.anchor_id is not None


@dataclass(frozen=True)
class ResolvedPosition:
    offset: float
    distance: float
    coordinate: Coordinate
    heading: float  # degrees clockwise from true north


class ContentPhase(str, Enum):
    HIDDEN = "hidden"
    FADING_OUT = "fading_out"
    SWAPPING = "swapping"
    VISIBLE = "visible"


@dataclass(frozen=True)
class PanelState:
    active_waypoint_id: Optional[int] = None
    displayed_waypoint_id: Optional[int] = None
    pending_waypoint_id: Optional[int] = None
    content_visible: bool = False
    section_visible: bool = False
    current_section_name: Optional[str] = None
    phase: ContentPhase = ContentPhase.HIDDEN


@dataclass(frozen=True)
class DerivedState:
    """Everything recomputed from a single scroll offset (no timers involved)."""
    position: ResolvedPosition
    active_waypoint_id: Optional[int]
    section_visible: bool
    current_section_name: Optional[str]
    active_index: Optional[int]
    at_bottom: bool = False
    scroll_hint_visible: bool = True
