"""Active waypoint / section detection and the narrative panel cross-fade."""
from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from scroll_journey.contracts.journey_contract import (
    ContentPhase,
    PanelState,
    SectionRange,
    Waypoint,
)
from scroll_journey.core.scheduler import Handle, Scheduler

log = logging.getLogger(__name__)


class TimerAction(str, Enum):
    KEEP = "keep"
    CANCEL = "cancel"
    ARM = "arm"  # cancel any pending swap, then arm a new one


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------

def eligible_waypoints(waypoints: Sequence[Waypoint], exclude_endpoints: bool = True) -> List[Waypoint]:
    """Waypoints that may become active; endpoints only anchor the path."""
    if not exclude_endpoints:
        return list(waypoints)
    return list(waypoints[1:-1])


def active_waypoint(eligible: Sequence[Waypoint], distance: float, dwell_window: float) -> Optional[Waypoint]:
    """First eligible waypoint whose closed window ``[d - w, d + w]`` holds *distance*."""
    for w in eligible:
        if abs(distance - w.distance_along_path) <= dwell_window:
            return w
    return None


def build_section_ranges(eligible: Sequence[Waypoint], dwell_window: float) -> List[SectionRange]:
    """
    Merge runs of consecutive waypoints sharing a section name into one
    range padded by *dwell_window* on both sides.  Waypoints without a
    section name break runs and produce no range.
    """
    ranges: List[SectionRange] = []
    run_name: Optional[str] = None
    run_min = run_max = 0.0

    for w in eligible:
        name = w.section_name
        if name and name == run_name:
            run_max = w.distance_along_path
            continue
        if run_name:
            ranges.append(SectionRange(run_name, run_min - dwell_window, run_max + dwell_window))
        run_name = name or None
        run_min = run_max = w.distance_along_path

    if run_name:
        ranges.append(SectionRange(run_name, run_min - dwell_window, run_max + dwell_window))
    return ranges


def section_at(ranges: Sequence[SectionRange], distance: float) -> Optional[str]:
    for r in ranges:
        if r.contains(distance):
            return r.section_name
    return None


def transition(state: PanelState, new_active_id: Optional[int]) -> Tuple[PanelState, TimerAction]:
    """
    Cross-fade transition for a freshly computed active waypoint id.

    Only a change of the active id is an event.  Returning to the displayed
    waypoint shows it at once; a different waypoint fades out and arms the
    swap timer; no active waypoint hides the panel but keeps the displayed
    content so the fade-out does not blank it.
    """
    if new_active_id == state.active_waypoint_id:
        return state, TimerAction.KEEP

    if new_active_id is None:
        return replace(
            state,
            active_waypoint_id=None,
            pending_waypoint_id=None,
            content_visible=False,
            phase=ContentPhase.HIDDEN,
        ), TimerAction.CANCEL

    if new_active_id == state.displayed_waypoint_id:
        return replace(
            state,
            active_waypoint_id=new_active_id,
            pending_waypoint_id=None,
            content_visible=True,
            phase=ContentPhase.VISIBLE,
        ), TimerAction.CANCEL

    return replace(
        state,
        active_waypoint_id=new_active_id,
        pending_waypoint_id=new_active_id,
        content_visible=False,
        phase=ContentPhase.FADING_OUT,
    ), TimerAction.ARM


def swap(state: PanelState) -> PanelState:
    """Swap timer fired: the pending waypoint becomes the displayed one."""
    if state.phase is not ContentPhase.FADING_OUT or state.pending_waypoint_id is None:
        return state
    return replace(
        state,
        displayed_waypoint_id=state.pending_waypoint_id,
        pending_waypoint_id=None,
        content_visible=False,
        phase=ContentPhase.SWAPPING,
    )


def reveal(state: PanelState) -> PanelState:
    if state.phase is not ContentPhase.SWAPPING:
        return state
    return replace(state, content_visible=True, phase=ContentPhase.VISIBLE)


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------

class ActivationTracker:
    """
    Owns the panel state and its single swap timer.

    Section visibility follows every update synchronously; content follows
    the debounced cross-fade.  *on_change* is called whenever the state
    changes, including when the swap timer fires between updates.
    """

    def __init__(
        self,
        waypoints: Sequence[Waypoint],
        scheduler: Scheduler,
        dwell_window: float,
        swap_delay_ms: float = 280.0,
        exclude_endpoints: bool = True,
        on_change: Optional[Callable[[PanelState], None]] = None,
    ):
        self.eligible = eligible_waypoints(waypoints, exclude_endpoints)
        self.section_ranges = build_section_ranges(self.eligible, dwell_window)
        self.dwell_window = dwell_window
        self.swap_delay_ms = swap_delay_ms
        self._scheduler = scheduler
        self._timer: Optional[Handle] = None
        self._on_change = on_change
        self.state = PanelState()
        self.swaps = 0

    @property
    def has_pending_swap(self) -> bool:
        return self._timer is not None and self._timer.active

    def active_waypoint(self, distance: float) -> Optional[Waypoint]:
        return active_waypoint(self.eligible, distance, self.dwell_window)

    def current_section(self, distance: float) -> Optional[str]:
        return section_at(self.section_ranges, distance)

    def update(self, distance: float) -> PanelState:
        active = self.active_waypoint(distance)
        section = self.current_section(distance)
        return self.apply(active.id if active else None, section)

    def apply(self, active_id: Optional[int], section: Optional[str]) -> PanelState:
        prev = self.state
        state, action = transition(prev, active_id)
        state = replace(state, section_visible=section is not None, current_section_name=section)

        if action is TimerAction.CANCEL:
            self._cancel_timer()
        elif action is TimerAction.ARM:
            self._cancel_timer()
            self._timer = self._scheduler.call_later(self.swap_delay_ms, self._on_swap_timer)

        self._set_state(prev, state)
        return state

    def dispose(self) -> None:
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_swap_timer(self) -> None:
        self._timer = None
        prev = self.state
        swapped = swap(prev)
        if swapped is prev:
            return
        self.swaps += 1
        log.debug("Panel swap -> waypoint %s", swapped.displayed_waypoint_id)
        self._set_state(prev, reveal(swapped))

    def _set_state(self, prev: PanelState, state: PanelState) -> None:
        self.state = state
        if state != prev and self._on_change is not None:
            self._on_change(state)
