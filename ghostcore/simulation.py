#!/usr/bin/env python3
"""
Simulation controller: state machine, tick pipeline and shared state.

SimulationController owns the config, both bodies and the ordered wavefront
and ghost collections. The viewport thread pumps it once per frame; the
control panel thread sends commands and parameter updates. Every public
method takes the same re-entrant lock, so a tick, an emission and a command
never interleave.

States
- Stopped (initial): no bodies before the first start; after a reset the
  freshly initialised bodies wait here.
- Running: emission, motion, growth, arrival detection and expiry happen.
- Paused: everything is frozen; paused wall time is never simulated.

Tick order (render cadence)
1) advance simulated time and hue, move both bodies
2) grow all wavefronts, then test each for arrival at the observer
3) cull oversized wavefronts, expire faded ghosts

Emissions due since the previous frame (emission cadence) are appended
before step 1, so the detector always sees every live wavefront.
"""
import dataclasses
import math
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

from .arrivals import detect_arrivals
from .config import SimConfig
from .constants import (
    MAX_FRAME_MS,
    OBSERVER_COLOR,
    OBSERVER_RADIUS,
    SOURCE_COLOR,
    SOURCE_RADIUS,
    STICK_RADIUS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .controls import drag_to_velocity, observer_velocity
from .data_models import Body, Ghost, Wavefront
from .lifecycle import cull_wavefronts, expire_ghosts, grow_wavefronts
from .logging_utils import log_event
from .motion import integrate_body
from .scheduling import CancellationToken, EmissionTask, FrameTask
from .vector_utils import from_angle, with_length

SOURCE = "source"
OBSERVER = "observer"


class SimState(Enum):
    STOPPED = "Stopped"
    RUNNING = "Running"
    PAUSED = "Paused"


@dataclass(frozen=True)
class WavefrontView:
    uid: int
    origin: Tuple[float, float]
    radius: float
    hue: float
    arrived: bool


@dataclass(frozen=True)
class GhostView:
    uid: int
    position: Tuple[float, float]
    hue: float
    opacity: float


@dataclass
class FrameReport:
    """Everything the view layer needs for one frame, copied out under the lock."""
    state: SimState
    sim_time_ms: float
    source: Optional[Body] = None
    observer: Optional[Body] = None
    wavefronts: List[WavefrontView] = field(default_factory=list)
    ghosts: List[GhostView] = field(default_factory=list)
    wavefronts_removed: int = 0
    ghosts_removed: int = 0
    ghosts_created: int = 0
    emitted: int = 0

    @property
    def wavefront_count(self) -> int:
        return len(self.wavefronts)

    @property
    def ghost_count(self) -> int:
        return len(self.ghosts)


class SimulationController:
    """
    Shared simulation state between the viewport thread (pygame) and the
    control panel (Dear PyGui), guarded by a re-entrant lock.
    """

    def __init__(self, config: Optional[SimConfig] = None,
                 width: float = VIEW_WIDTH, height: float = VIEW_HEIGHT,
                 rng: Optional[random.Random] = None,
                 stick_radius: float = STICK_RADIUS):
        self.lock = threading.RLock()
        self.config = config if config is not None else SimConfig()
        self.width = max(0.0, float(width))
        self.height = max(0.0, float(height))
        self.rng = rng if rng is not None else random.Random()
        self.stick_radius = stick_radius

        self.state = SimState.STOPPED
        self.source: Optional[Body] = None
        self.observer: Optional[Body] = None
        self.wavefronts: List[Wavefront] = []
        self.ghosts: List[Ghost] = []
        self.sim_time_ms = 0.0

        self._frame_task: Optional[FrameTask] = None
        self._emission_task: Optional[EmissionTask] = None
        self._emission_phase_ms = 0.0
        self._pending_rescale: Set[str] = set()
        self._last_counts = (0, 0, 0, 0)

    # -----------------------
    # Commands
    # -----------------------

    def start(self) -> bool:
        """Stopped -> Running: fresh bodies, empty collections, newly armed tasks."""
        with self.lock:
            if self.state is not SimState.STOPPED:
                log_event("debug", "State", "Ignored start", state=self.state.value)
                return False
            self._reinitialize()
            self.config.started = True
            self._set_state(SimState.RUNNING)
            self._arm(phase_ms=0.0)
            return True

    def pause(self) -> bool:
        """Running -> Paused: cancel both tasks and freeze state."""
        with self.lock:
            if self.state is not SimState.RUNNING:
                log_event("debug", "State", "Ignored pause", state=self.state.value)
                return False
            self._disarm()
            self._set_state(SimState.PAUSED)
            return True

    def resume(self) -> bool:
        """Paused -> Running: re-arm both tasks, keeping the emission phase."""
        with self.lock:
            if self.state is not SimState.PAUSED:
                log_event("debug", "State", "Ignored resume", state=self.state.value)
                return False
            self._set_state(SimState.RUNNING)
            self._arm(phase_ms=self._emission_phase_ms)
            for name in sorted(self._pending_rescale):
                self._rescale_body(name)
            self._pending_rescale.clear()
            return True

    def toggle_pause(self) -> bool:
        with self.lock:
            if self.state is SimState.RUNNING:
                return self.pause()
            return self.resume()

    def reset(self) -> bool:
        """Running|Paused -> Stopped: clear collections and reinitialise bodies."""
        with self.lock:
            if self.state is SimState.STOPPED:
                log_event("debug", "State", "Ignored reset", started=self.config.started)
                return False
            self._disarm()
            self._reinitialize()
            self._set_state(SimState.STOPPED)
            return True

    # -----------------------
    # Live inputs
    # -----------------------

    def set_container_size(self, width: float, height: float) -> None:
        with self.lock:
            self.width = max(0.0, float(width))
            self.height = max(0.0, float(height))
            log_event("debug", "View", "Container resized", width=self.width, height=self.height)

    def set_emission_interval(self, ms) -> float:
        with self.lock:
            return self.config.set_emission_interval(ms)

    def set_growth_speed(self, speed) -> float:
        with self.lock:
            return self.config.set_growth_speed(speed)

    def set_fade_duration(self, ms) -> float:
        with self.lock:
            return self.config.set_fade_duration(ms)

    def set_hue_cycle_speed(self, speed) -> float:
        with self.lock:
            return self.config.set_hue_cycle_speed(speed)

    def set_source_speed(self, speed) -> float:
        with self.lock:
            applied = self.config.set_source_speed(speed)
            self._request_rescale(SOURCE)
            return applied

    def set_observer_speed(self, speed) -> float:
        with self.lock:
            applied = self.config.set_observer_speed(speed)
            self._request_rescale(OBSERVER)
            return applied

    def apply_drag(self, target: str, dx: float, dy: float) -> bool:
        """
        Steer a body from an analog-stick drag sample (knob offset dx, dy).

        Only applies while Running. The observer is forced to rest while its
        speed is 0, whatever the drag says.
        """
        with self.lock:
            if self.state is not SimState.RUNNING:
                return False
            if target == SOURCE:
                self.source.velocity = drag_to_velocity(dx, dy, self.stick_radius, self.config.source_speed)
            elif target == OBSERVER:
                self.observer.velocity = observer_velocity(dx, dy, self.stick_radius, self.config.observer_speed)
            else:
                log_event("warning", "Controls", "Unknown drag target", target=target)
                return False
            return True

    # -----------------------
    # Cadences
    # -----------------------

    def pump(self, now_ms: float) -> Optional[FrameReport]:
        """
        Drive both cadences from a wall-clock timestamp (ms).

        Returns the tick's FrameReport, or None when nothing was simulated
        (not Running, or the first frame after the tasks were armed).
        """
        with self.lock:
            if self.state is not SimState.RUNNING or self._frame_task is None:
                return None
            dt = self._frame_task.elapsed(now_ms)
            if dt is None:
                return None
            fired = self._emission_task.advance(dt, self.config.emission_interval_ms)
            for _ in range(fired):
                self.emit_wavefront()
            return self.tick(dt, emitted=fired)

    def emit_wavefront(self) -> Optional[Wavefront]:
        """Emission cadence: append a wavefront at the source's current position."""
        with self.lock:
            if self.state is not SimState.RUNNING:
                return None
            w = Wavefront(origin=self.source.position, hue=self.config.current_hue, created_at=self.sim_time_ms)
            self.wavefronts.append(w)
            return w

    def tick(self, dt_ms: float, emitted: int = 0) -> FrameReport:
        """Render cadence: advance the simulation by dt_ms of simulated time."""
        with self.lock:
            if self.state is not SimState.RUNNING or dt_ms <= 0:
                return self.snapshot()

            now = self.sim_time_ms + dt_ms
            self.sim_time_ms = now
            cfg = self.config
            cfg.advance_hue(dt_ms)

            if cfg.observer_speed <= 0:
                self.observer.velocity = (0.0, 0.0)
            integrate_body(self.source, dt_ms, self.width, self.height)
            integrate_body(self.observer, dt_ms, self.width, self.height)

            previous = grow_wavefronts(self.wavefronts, cfg.growth_speed * dt_ms)
            new_ghosts = detect_arrivals(self.wavefronts, previous, self.observer.position, now)
            self.ghosts.extend(new_ghosts)

            removed_w = cull_wavefronts(self.wavefronts, self.width, self.height)
            removed_g = expire_ghosts(self.ghosts, now, cfg.fade_duration_ms)
            if removed_w or removed_g:
                log_event("debug", "Tick", "Pruned", wavefronts=removed_w, ghosts=removed_g)

            self._last_counts = (removed_w, removed_g, len(new_ghosts), emitted)
            return self.snapshot()

    def snapshot(self) -> FrameReport:
        """Copy of the current state for drawing; counts refer to the last tick."""
        with self.lock:
            now = self.sim_time_ms
            fade = self.config.fade_duration_ms
            removed_w, removed_g, created, emitted = self._last_counts
            return FrameReport(
                state=self.state,
                sim_time_ms=now,
                source=dataclasses.replace(self.source) if self.source else None,
                observer=dataclasses.replace(self.observer) if self.observer else None,
                wavefronts=[WavefrontView(w.uid, w.origin, w.radius, w.hue, w.arrived) for w in self.wavefronts],
                ghosts=[GhostView(g.uid, g.position, g.hue, g.opacity(now, fade)) for g in self.ghosts],
                wavefronts_removed=removed_w,
                ghosts_removed=removed_g,
                ghosts_created=created,
                emitted=emitted,
            )

    # -----------------------
    # Internals
    # -----------------------

    def _set_state(self, state: SimState) -> None:
        if state is not self.state:
            log_event("info", "State", f"{self.state.value} -> {state.value}",
                      wavefronts=len(self.wavefronts), ghosts=len(self.ghosts))
        self.state = state
        self.config.running = state is SimState.RUNNING

    def _arm(self, phase_ms: float) -> None:
        self._frame_task = FrameTask(CancellationToken(), max_frame_ms=MAX_FRAME_MS)
        self._emission_task = EmissionTask(CancellationToken(), phase_ms=phase_ms)

    def _disarm(self) -> None:
        if self._emission_task is not None:
            self._emission_phase_ms = self._emission_task.phase_ms
            self._emission_task.token.cancel()
        if self._frame_task is not None:
            self._frame_task.token.cancel()
        self._frame_task = None
        self._emission_task = None

    def _reinitialize(self) -> None:
        self.wavefronts.clear()
        self.ghosts.clear()
        self.sim_time_ms = 0.0
        self._emission_phase_ms = 0.0
        self._pending_rescale.clear()
        self._last_counts = (0, 0, 0, 0)
        self.source = self._random_body(SOURCE, SOURCE_RADIUS, self.config.source_speed, SOURCE_COLOR)
        self.observer = self._random_body(OBSERVER, OBSERVER_RADIUS, self.config.observer_speed, OBSERVER_COLOR)

    def _random_body(self, name: str, radius: float, speed: float, color) -> Body:
        def coord(size: float) -> float:
            if size <= 0:
                return 0.0
            if size <= 2 * radius:
                return size / 2.0
            return self.rng.uniform(radius, size - radius)

        velocity = from_angle(self.rng.uniform(0.0, 2.0 * math.pi), speed) if speed > 0 else (0.0, 0.0)
        return Body(name=name, radius=radius, position=(coord(self.width), coord(self.height)),
                    velocity=velocity, color=color)

    def _request_rescale(self, name: str) -> None:
        # Applies with or without an active drag; only the magnitude changes
        if self.state is SimState.PAUSED:
            self._pending_rescale.add(name)
        else:
            self._rescale_body(name)

    def _rescale_body(self, name: str) -> None:
        """Match a body's current velocity to its configured speed, keeping direction."""
        body = self.source if name == SOURCE else self.observer
        if body is None:
            return
        speed = self.config.source_speed if name == SOURCE else self.config.observer_speed
        body.velocity = with_length(body.velocity, speed)
