#!/usr/bin/env python3
"""
Cancellable scheduled tasks for the two engine cadences.

SimulationController owns exactly one FrameTask (render cadence) and one
EmissionTask (emission cadence) while Running. Each holds its own
CancellationToken; leaving Running cancels both, entering Running creates
fresh ones. A cancelled task never fires again.

Neither task reads a clock on its own. The viewport pumps the controller
with wall-clock timestamps, FrameTask turns consecutive timestamps into
frame deltas, and EmissionTask turns accumulated simulated time into
emission firings. Because the accumulation only happens while Running,
paused wall time never reaches either task.
"""
from typing import Optional

from .constants import MAX_EMISSIONS_PER_PUMP


class CancellationToken:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FrameTask:
    """Render cadence: converts pumped wall-clock timestamps into frame deltas."""

    def __init__(self, token: CancellationToken, max_frame_ms: Optional[float] = None):
        self.token = token
        self.max_frame_ms = max_frame_ms
        self._last_ms: Optional[float] = None

    @property
    def active(self) -> bool:
        return not self.token.cancelled

    def elapsed(self, now_ms: float) -> Optional[float]:
        """
        Return the ms elapsed since the previous call, or None on the first
        call after arming (and whenever the task is cancelled).

        A clock that goes backwards yields 0. Deltas above max_frame_ms are
        capped so a stalled window does not produce one huge step.
        """
        if self.token.cancelled:
            return None
        last = self._last_ms
        self._last_ms = now_ms
        if last is None:
            return None
        dt = max(0.0, now_ms - last)
        if self.max_frame_ms is not None:
            dt = min(dt, self.max_frame_ms)
        return dt


class EmissionTask:
    """
    Emission cadence: fires once per interval of accumulated simulated time.

    phase_ms carries the time already accumulated toward the next firing, so
    a task re-armed on resume continues where the cancelled one stopped.
    """

    def __init__(self, token: CancellationToken, phase_ms: float = 0.0):
        self.token = token
        self.phase_ms = max(0.0, float(phase_ms))

    @property
    def active(self) -> bool:
        return not self.token.cancelled

    def advance(self, dt_ms: float, interval_ms: float) -> int:
        """Accumulate dt_ms and return how many firings fell due."""
        if self.token.cancelled or dt_ms <= 0 or interval_ms <= 0:
            return 0
        # Phase built under a longer interval counts as at most one firing
        self.phase_ms = min(self.phase_ms, interval_ms)
        self.phase_ms += dt_ms
        fired = 0
        while self.phase_ms >= interval_ms and fired < MAX_EMISSIONS_PER_PUMP:
            self.phase_ms -= interval_ms
            fired += 1
        if self.phase_ms >= interval_ms:
            # Backlog beyond the cap is dropped, not carried into later frames
            self.phase_ms %= interval_ms
        return fired
