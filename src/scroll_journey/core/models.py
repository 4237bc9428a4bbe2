from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class NarrativePoint(BaseModel):
    """A raw narrative location before it is snapped onto the path."""
    id: int
    lon: float
    lat: float

    section_name: str = ""
    subsection_name: str = ""
    text: str = ""
    image: Optional[str] = None

    # "contents-name" overrides used by the navigation index
    contents_name: Optional[str] = None
    subsection_contents_name: Optional[str] = None

    @property
    def coordinate(self) -> Tuple[float, float]:
        return self.lon, self.lat


class AnchorSpec(BaseModel):
    """A trailing navigation entry positioned by external layout measurement."""
    id: str
    label: str
    anchor_id: str


class SectionPolicy(BaseModel):
    # First/last waypoints only mark the ends of the path
    exclude_endpoints: bool = True
    include_subsections: bool = False
    anchors: List[AnchorSpec] = Field(default_factory=list)


class JourneyInput(BaseModel):
    """Parsed journey data handed over by a source."""
    journey_id: str = "journey"
    path: List[Tuple[float, float]]  # (lon, lat)
    points: List[NarrativePoint] = Field(default_factory=list)
    anchors: List[AnchorSpec] = Field(default_factory=list)
