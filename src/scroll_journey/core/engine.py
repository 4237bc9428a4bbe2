"""Composition root: one frame-coalesced entry point feeding every component."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence

from scroll_journey.config import Settings, settings as default_settings
from scroll_journey.contracts.journey_contract import DerivedState, PanelState, Waypoint
from scroll_journey.core.activation import ActivationTracker
from scroll_journey.core.indexer import index_waypoints
from scroll_journey.core.mapping import build_scroll_mapping
from scroll_journey.core.models import AnchorSpec, JourneyInput, SectionPolicy
from scroll_journey.core.progress import NavigationAnimation, NavigationPlan, ProgressIndex, is_at_bottom
from scroll_journey.core.resolver import PositionResolver
from scroll_journey.core.scheduler import Handle, Scheduler
from scroll_journey.geo.path import PathGeometry

log = logging.getLogger(__name__)

SCROLL_HINT_THRESHOLD_PX = 10.0


@dataclass(frozen=True)
class FrameUpdate:
    derived: DerivedState
    panel: PanelState


Listener = Callable[[FrameUpdate], None]


class JourneyEngine:
    """
    Drives resolution, activation and navigation from scroll offsets.

    The host reports every scroll through :meth:`on_offset_changed`; work
    runs at most once per frame with the latest offset.  Listeners receive a
    :class:`FrameUpdate` after each frame and whenever the panel cross-fade
    advances on its own timer.
    """

    def __init__(
        self,
        path: PathGeometry,
        waypoints: Sequence[Waypoint],
        scheduler: Scheduler,
        settings: Optional[Settings] = None,
        anchors: Sequence[AnchorSpec] = (),
        scroll_writer: Optional[Callable[[float], None]] = None,
    ):
        s = settings or default_settings
        self.settings = s
        self.path = path
        self.waypoints: List[Waypoint] = list(waypoints)
        self._scheduler = scheduler
        self._scroll_writer = scroll_writer

        self.mapping = build_scroll_mapping(
            self.waypoints,
            base_rate=s.base_px_per_km,
            dwell_window=s.dwell_window_km,
            dwell_factor=s.dwell_factor,
            step=s.sample_step_km,
            tail_fraction=s.tail_fraction,
        )
        self.resolver = PositionResolver(path, self.mapping, heading_delta=s.heading_delta_km)
        self.tracker = ActivationTracker(
            self.waypoints,
            scheduler,
            dwell_window=s.dwell_window_km,
            swap_delay_ms=s.swap_delay_ms,
            exclude_endpoints=s.exclude_endpoints,
            on_change=self._on_panel_change,
        )
        policy = SectionPolicy(
            exclude_endpoints=s.exclude_endpoints,
            include_subsections=s.include_subsections,
            anchors=list(anchors),
        )
        self.progress = ProgressIndex.build(
            self.waypoints,
            self.mapping,
            policy,
            epsilon_px=s.nav_epsilon_px,
            ms_per_section=s.nav_ms_per_section,
            fixed_duration_ms=s.nav_fixed_duration_ms,
        )

        self._listeners: List[Listener] = []
        self._pending_frame: Optional[Handle] = None
        self._offset = 0.0
        self._at_bottom = False
        self._hint_visible = True
        self._animation: Optional[NavigationAnimation] = None
        self._in_frame = False
        self.last_update: Optional[FrameUpdate] = None
        self.frames_resolved = 0

        log.info(
            "Journey built: %d waypoints, %d nav items, %.1f px scroll range",
            len(self.waypoints), len(self.progress), self.mapping.total_pixel_range,
        )

    @classmethod
    def from_input(
        cls,
        journey: JourneyInput,
        scheduler: Scheduler,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> JourneyEngine:
        path = PathGeometry(journey.path)
        waypoints = index_waypoints(journey.points, path)
        dropped = len(journey.points) - len(waypoints)
        if dropped:
            log.warning("%s: %d of %d narrative points dropped", journey.journey_id, dropped, len(journey.points))
        return cls(path, waypoints, scheduler, settings=settings, anchors=journey.anchors, **kwargs)

    # ---- outputs --------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def content_height(self, viewport_height: float) -> float:
        """Height of the scrollable content for a given viewport."""
        return self.mapping.total_pixel_range + viewport_height

    def waypoint(self, waypoint_id: Optional[int]) -> Optional[Waypoint]:
        for w in self.waypoints:
            if w.id == waypoint_id:
                return w
        return None

    @property
    def offset(self) -> float:
        return self._offset

    @property
    def navigating(self) -> bool:
        return self._animation is not None and self._animation.running

    # ---- pure resolution ------------------------------------------------------

    def resolve(self, offset: float, at_bottom: bool = False) -> DerivedState:
        """Everything derived from one scroll offset; touches no state."""
        position = self.resolver.resolve(offset)
        active = self.tracker.active_waypoint(position.distance)
        section = self.tracker.current_section(position.distance)
        return DerivedState(
            position=position,
            active_waypoint_id=active.id if active else None,
            section_visible=section is not None,
            current_section_name=section,
            active_index=self.progress.active_index(offset, at_bottom=at_bottom),
            at_bottom=at_bottom,
            scroll_hint_visible=offset <= SCROLL_HINT_THRESHOLD_PX,
        )

    # ---- inputs ---------------------------------------------------------------

    def on_offset_changed(
        self,
        offset: float,
        client_height: Optional[float] = None,
        scroll_height: Optional[float] = None,
    ) -> None:
        """Record the latest scroll offset and make sure one frame is pending."""
        if self.navigating and not self._is_animation_echo(offset):
            log.debug("User scroll at %.1f px interrupts navigation", offset)
            self._animation.abort()

        self._offset = offset
        if client_height is not None and scroll_height is not None:
            self._at_bottom = is_at_bottom(
                offset, client_height, scroll_height, tolerance=self.settings.bottom_tolerance_px
            )
        else:
            self._at_bottom = False
        self.refresh()

    def refresh(self) -> None:
        """Schedule a frame for the current offset, replacing any pending one."""
        if self._pending_frame is not None:
            self._pending_frame.cancel()
        self._pending_frame = self._scheduler.request_frame(self._run_frame)

    def set_anchor_position(self, anchor_id: str, px: Optional[float]) -> None:
        """Layout measured (or lost) an anchor; the active entry may move."""
        self.progress.set_anchor_position(anchor_id, px)
        self.refresh()

    def navigate(self, index: int) -> NavigationPlan:
        """Animate the scroller to navigation item *index*."""
        if self._scroll_writer is None:
            raise RuntimeError("navigate() needs a scroll_writer to move the scroller")
        if self._animation is not None:
            self._animation.abort()

        plan = self.progress.navigate(index, self._offset, at_bottom=self._at_bottom)
        log.info(
            "Navigate to %r: %.1f -> %.1f px over %.0f ms",
            self.progress.items[index].label, plan.start_px, plan.target_px, plan.duration_ms,
        )
        self._animation = NavigationAnimation(plan, self._scheduler, self._scroll_writer)
        self._animation.start()
        return plan

    def dispose(self) -> None:
        if self._pending_frame is not None:
            self._pending_frame.cancel()
            self._pending_frame = None
        if self._animation is not None:
            self._animation.abort()
        self.tracker.dispose()
        self._listeners.clear()

    # ---- internals ------------------------------------------------------------

    def _is_animation_echo(self, offset: float) -> bool:
        last = self._animation.last_written
        return last is not None and abs(offset - last) <= self.settings.nav_epsilon_px

    def _run_frame(self) -> None:
        self._pending_frame = None
        derived = self.resolve(self._offset, at_bottom=self._at_bottom)

        # Hint hides for good after the first real scroll
        self._hint_visible = self._hint_visible and derived.scroll_hint_visible
        derived = replace(derived, scroll_hint_visible=self._hint_visible)

        self._in_frame = True
        try:
            panel = self.tracker.apply(derived.active_waypoint_id, derived.current_section_name)
        finally:
            self._in_frame = False
        self.frames_resolved += 1
        self._publish(FrameUpdate(derived=derived, panel=panel))

    def _on_panel_change(self, panel: PanelState) -> None:
        # Frame updates publish themselves; only timer-driven swaps land here
        if self._in_frame or self.last_update is None:
            return
        self._publish(FrameUpdate(derived=self.last_update.derived, panel=panel))

    def _publish(self, update: FrameUpdate) -> None:
        self.last_update = update
        for listener in list(self._listeners):
            listener(update)
