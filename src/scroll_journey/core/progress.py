"""Navigation index: section headers, sub-items and anchor-bound trailing entries."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from math import inf
from typing import Callable, Dict, List, Optional, Sequence

from scroll_journey.contracts.journey_contract import NavigationItem, ScrollMapping, Waypoint
from scroll_journey.core.activation import eligible_waypoints
from scroll_journey.core.models import SectionPolicy
from scroll_journey.core.resolver import offset_for_distance
from scroll_journey.core.scheduler import Handle, Scheduler

log = logging.getLogger(__name__)


def ease_out_cubic(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return 1 - (1 - t) ** 3


def is_at_bottom(scroll_top: float, client_height: float, scroll_height: float, tolerance: float = 5.0) -> bool:
    """True when the scroller has reached (or passed) its maximum extent."""
    return scroll_top + client_height >= scroll_height - tolerance


@dataclass(frozen=True)
class NavigationPlan:
    target_index: int
    start_px: float
    target_px: float
    duration_ms: float
    index_distance: int

    @property
    def is_noop(self) -> bool:
        return self.start_px == self.target_px

    def offset_at(self, elapsed_ms: float) -> float:
        """Scroll offset *elapsed_ms* into the animation (ease-out cubic)."""
        if self.duration_ms <= 0:
            return self.target_px
        ease = ease_out_cubic(elapsed_ms / self.duration_ms)
        return self.start_px + (self.target_px - self.start_px) * ease


def build_navigation_items(
    waypoints: Sequence[Waypoint],
    mapping: ScrollMapping,
    policy: SectionPolicy,
) -> List[NavigationItem]:
    """
    One header per first occurrence of a section name among eligible
    waypoints, optional per-waypoint sub-items, then the anchor-bound
    trailing items from *policy*.
    """
    items: List[NavigationItem] = []
    headers: Dict[str, str] = {}

    for w in eligible_waypoints(waypoints, policy.exclude_endpoints):
        px = offset_for_distance(mapping, w.distance_along_path)
        name = w.section_name
        if name and name not in headers:
            headers[name] = f"section-{w.id}"
            items.append(NavigationItem(
                id=headers[name],
                label=w.section_label,
                is_header=True,
                anchor_pixel=px,
            ))
        if policy.include_subsections:
            items.append(NavigationItem(
                id=f"waypoint-{w.id}",
                label=w.subsection_label,
                is_header=False,
                parent_id=headers.get(name),
                anchor_pixel=px,
            ))

    for a in policy.anchors:
        items.append(NavigationItem(id=a.id, label=a.label, is_header=True, anchor_id=a.anchor_id))

    return items


class ProgressIndex:
    """Active-entry tracking and jump planning over a fixed item list."""

    def __init__(
        self,
        items: Sequence[NavigationItem],
        epsilon_px: float = 1.0,
        ms_per_section: float = 5000.0,
        fixed_duration_ms: Optional[float] = None,
    ):
        self.items: List[NavigationItem] = list(items)
        self.epsilon_px = epsilon_px
        self.ms_per_section = ms_per_section
        self.fixed_duration_ms = fixed_duration_ms
        self._anchor_px: Dict[str, float] = {}

    @classmethod
    def build(
        cls,
        waypoints: Sequence[Waypoint],
        mapping: ScrollMapping,
        policy: Optional[SectionPolicy] = None,
        **kwargs,
    ) -> ProgressIndex:
        return cls(build_navigation_items(waypoints, mapping, policy or SectionPolicy()), **kwargs)

    def __len__(self) -> int:
        return len(self.items)

    # ---- anchor measurements ------------------------------------------------

    def set_anchor_position(self, anchor_id: str, px: Optional[float]) -> None:
        """Record (or with ``None`` forget) the measured offset of an anchor."""
        if px is None:
            self._anchor_px.pop(anchor_id, None)
        else:
            self._anchor_px[anchor_id] = float(px)

    def anchor_position(self, anchor_id: str) -> Optional[float]:
        return self._anchor_px.get(anchor_id)

    def effective_position(self, index: int) -> float:
        """Scroll offset of item *index*; unmeasured anchors are unreachable."""
        item = self.items[index]
        if item.is_anchor_bound:
            return self._anchor_px.get(item.anchor_id, inf)
        return item.anchor_pixel if item.anchor_pixel is not None else inf

    # ---- per-scroll queries -------------------------------------------------

    def active_index(self, offset: float, at_bottom: bool = False) -> Optional[int]:
        """Last item reached by *offset* (item 0 by default, last when at bottom)."""
        if not self.items:
            return None
        if at_bottom:
            return len(self.items) - 1
        best = 0
        for i in range(len(self.items)):
            if self.effective_position(i) <= offset + self.epsilon_px:
                best = i
        return best

    def is_passed(self, index: int, offset: float, active: Optional[int]) -> bool:
        return index != active and offset >= self.effective_position(index)

    # ---- jumps --------------------------------------------------------------

    def target_offset(self, index: int, current_offset: float) -> float:
        pos = self.effective_position(index)
        if pos == inf:
            log.warning("Navigation target %s is not measured yet, staying put", self.items[index].id)
            return current_offset
        return pos

    def navigate(self, target_index: int, current_offset: float, at_bottom: bool = False) -> NavigationPlan:
        if not 0 <= target_index < len(self.items):
            raise IndexError(f"navigation index {target_index} out of range (0..{len(self.items) - 1})")

        active = self.active_index(current_offset, at_bottom=at_bottom) or 0
        steps = max(abs(target_index - active), 1)
        if self.fixed_duration_ms is not None:
            duration = self.fixed_duration_ms
        else:
            duration = steps * self.ms_per_section

        return NavigationPlan(
            target_index=target_index,
            start_px=current_offset,
            target_px=self.target_offset(target_index, current_offset),
            duration_ms=duration,
            index_distance=steps,
        )


class NavigationAnimation:
    """
    Per-frame playback of a :class:`NavigationPlan`.

    Offsets are pushed through *write*; :attr:`last_written` lets the owner
    tell its own scroll echoes apart from user input.
    """

    def __init__(
        self,
        plan: NavigationPlan,
        scheduler: Scheduler,
        write: Callable[[float], None],
        on_finish: Optional[Callable[[bool], None]] = None,
    ):
        self.plan = plan
        self._scheduler = scheduler
        self._write = write
        self._on_finish = on_finish
        self._frame: Optional[Handle] = None
        self._t0 = 0.0
        self.last_written: Optional[float] = None
        self.running = False
        self.completed = False

    def start(self) -> None:
        self._t0 = self._scheduler.now_ms()
        self.running = True
        self._frame = self._scheduler.request_frame(self._tick)

    def abort(self) -> None:
        if not self.running:
            return
        if self._frame is not None:
            self._frame.cancel()
            self._frame = None
        self.running = False
        log.debug("Navigation to item %d aborted", self.plan.target_index)
        if self._on_finish is not None:
            self._on_finish(False)

    def _tick(self) -> None:
        self._frame = None
        if not self.running:
            return
        elapsed = self._scheduler.now_ms() - self._t0
        px = self.plan.offset_at(elapsed)
        self.last_written = px
        self._write(px)

        if self.plan.duration_ms > 0 and elapsed < self.plan.duration_ms:
            self._frame = self._scheduler.request_frame(self._tick)
            return

        self.running = False
        self.completed = True
        if self._on_finish is not None:
            self._on_finish(True)
