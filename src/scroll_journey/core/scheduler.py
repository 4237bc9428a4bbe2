"""Cancellable timers and frame callbacks for the single-threaded engine."""
from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class Handle:
    """An owned, cancellable reference to one scheduled callback."""

    __slots__ = ("_cancelled", "_fired", "_on_cancel")

    def __init__(self, on_cancel: Optional[Callback] = None):
        self._cancelled = False
        self._fired = False
        self._on_cancel = on_cancel

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        if not self.active:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()

    def _mark_fired(self) -> bool:
        if not self.active:
            return False
        self._fired = True
        return True


class Scheduler(ABC):
    """Source of time, delayed callbacks and per-frame callbacks."""

    @abstractmethod
    def now_ms(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> Handle:
        raise NotImplementedError

    @abstractmethod
    def request_frame(self, callback: Callback) -> Handle:
        raise NotImplementedError


class ManualScheduler(Scheduler):
    """
    Deterministic virtual clock.

    Timers fire in due-time order (ties in arming order) while the clock is
    advanced; frame callbacks run on :meth:`run_frame`, or every
    ``frame_interval_ms`` of :meth:`advance` when *auto_frames* is set.
    """

    def __init__(self, frame_interval_ms: float = 16.0, auto_frames: bool = True):
        self._now = 0.0
        self._seq = itertools.count()
        self._timers: List[Tuple[float, int, Handle, Callback]] = []
        self._frames: List[Tuple[Handle, Callback]] = []
        self.frame_interval_ms = frame_interval_ms
        self.auto_frames = auto_frames
        self.frames_run = 0

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> Handle:
        h = Handle()
        heapq.heappush(self._timers, (self._now + max(0.0, delay_ms), next(self._seq), h, callback))
        return h

    def request_frame(self, callback: Callback) -> Handle:
        h = Handle()
        self._frames.append((h, callback))
        return h

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, h, _ in self._timers if h.active)

    @property
    def pending_frames(self) -> int:
        return sum(1 for h, _ in self._frames if h.active)

    def run_frame(self) -> int:
        """Run every frame callback requested before this call. Returns how many ran."""
        batch, self._frames = self._frames, []
        ran = 0
        for h, cb in batch:
            if h._mark_fired():
                cb()
                ran += 1
        self.frames_run += 1
        return ran

    def _run_timers_until(self, t: float) -> None:
        while self._timers and self._timers[0][0] <= t:
            due, _, h, cb = heapq.heappop(self._timers)
            self._now = max(self._now, due)
            if h._mark_fired():
                cb()

    def advance(self, ms: float) -> None:
        """Move the clock forward by *ms*, firing due timers (and frames)."""
        target = self._now + ms
        if self.auto_frames:
            while self._now + self.frame_interval_ms <= target:
                frame_at = self._now + self.frame_interval_ms
                self._run_timers_until(frame_at)
                self._now = frame_at
                self.run_frame()
        self._run_timers_until(target)
        self._now = target


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop; frames are paced timers."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, frame_interval_ms: float = 16.0):
        self._loop = loop
        self.frame_interval_ms = frame_interval_ms

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> Handle:
        timer: Optional[asyncio.TimerHandle] = None

        def _cancel() -> None:
            if timer is not None:
                timer.cancel()

        h = Handle(on_cancel=_cancel)

        def _fire() -> None:
            if h._mark_fired():
                callback()

        timer = self.loop.call_later(max(0.0, delay_ms) / 1000.0, _fire)
        return h

    def request_frame(self, callback: Callback) -> Handle:
        return self.call_later(self.frame_interval_ms, callback)
