from __future__ import annotations

import math

from scroll_journey.core.models import AnchorSpec, JourneyInput, NarrativePoint
from scroll_journey.providers.base import JourneySource


class MockSource(JourneySource):
    """
    Deterministic fake journey so the engine runs end-to-end without data files.
    A gently curving coastal track with a handful of narrative stops.
    """

    SECTIONS = [
        ("Departure", ["Harbour", "Breakwater"]),
        ("Open Water", ["Sound", "Skerries", "Lighthouse"]),
        ("Arrival", ["Fjord Mouth", "Quay"]),
    ]

    def __init__(self, n_path_points: int = 200, start=(12.2, 65.5), span_deg: float = 1.2):
        self.n_path_points = max(2, n_path_points)
        self.start = start
        self.span_deg = span_deg

    def _track_point(self, u: float) -> tuple[float, float]:
        lon0, lat0 = self.start
        lon = lon0 + self.span_deg * u
        lat = lat0 + 0.15 * math.sin(u * math.pi * 2) + 0.3 * u
        return lon, lat

    def load(self) -> JourneyInput:
        n = self.n_path_points
        path = [self._track_point(i / (n - 1)) for i in range(n)]

        stops = [(s, sub) for s, subs in self.SECTIONS for sub in subs]
        points = []
        for k, (section, sub) in enumerate(stops):
            u = k / (len(stops) - 1)
            lon, lat = self._track_point(u)
            # Nudge off the track so snapping has work to do
            lat += 0.01 * (1 if k % 2 else -1)
            points.append(NarrativePoint(
                id=k + 1,
                lon=lon,
                lat=lat,
                section_name=section,
                subsection_name=sub,
                text=f"{sub}: stop {k + 1} of {len(stops)} in {section.lower()}.",
                image=f"{sub.lower().replace(' ', '_')}.jpg",
            ))

        anchors = [
            AnchorSpec(id="pricing", label="Pricing", anchor_id="gallery-pricing"),
            AnchorSpec(id="contact", label="Contact", anchor_id="gallery-contact"),
        ]
        return JourneyInput(journey_id="mock", path=path, points=points, anchors=anchors)
