#!/usr/bin/env python3
"""
Live simulation parameters.

SimConfig is owned by a SimulationController and read on every tick; nothing
snapshots it. External controls write it only through the set_* methods,
which coerce the value to float and clamp it into its valid range:

- emission_interval_ms, fade_duration_ms: clamped up to a positive minimum
- growth_speed, source_speed, observer_speed, hue_cycle_speed: clamped to >= 0
- non-numeric or NaN input is rejected and the previous value kept (the
  default, when passed to the constructor)

The running/started flags mirror the controller's state machine and are
not meant to be written by controls.
"""
from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_EMISSION_INTERVAL_MS,
    DEFAULT_FADE_DURATION_MS,
    DEFAULT_GROWTH_SPEED,
    DEFAULT_HUE_CYCLE_SPEED,
    DEFAULT_OBSERVER_SPEED,
    DEFAULT_SOURCE_SPEED,
    MIN_EMISSION_INTERVAL_MS,
    MIN_FADE_DURATION_MS,
    REFERENCE_FRAME_MS,
)
from .logging_utils import log_event


def _to_float(name: str, value) -> Optional[float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        log_event("warning", "Config", f"Rejected non-numeric {name}", value=value)
        return None
    if f != f:  # NaN
        log_event("warning", "Config", f"Rejected NaN {name}")
        return None
    return f


def _at_least(name: str, value: float, minimum: float) -> float:
    if value < minimum:
        log_event("warning", "Config", f"Clamped {name}", requested=value, applied=minimum)
        return minimum
    return value


@dataclass
class SimConfig:
    emission_interval_ms: float = DEFAULT_EMISSION_INTERVAL_MS
    growth_speed: float = DEFAULT_GROWTH_SPEED
    source_speed: float = DEFAULT_SOURCE_SPEED
    observer_speed: float = DEFAULT_OBSERVER_SPEED
    fade_duration_ms: float = DEFAULT_FADE_DURATION_MS
    hue_cycle_speed: float = DEFAULT_HUE_CYCLE_SPEED
    current_hue: float = 0.0
    running: bool = False
    started: bool = False

    def __post_init__(self):
        # Route constructor values through the same validation as live updates;
        # a rejected value leaves the field at its default.
        for name, default, setter in (
            ("emission_interval_ms", DEFAULT_EMISSION_INTERVAL_MS, self.set_emission_interval),
            ("growth_speed", DEFAULT_GROWTH_SPEED, self.set_growth_speed),
            ("source_speed", DEFAULT_SOURCE_SPEED, self.set_source_speed),
            ("observer_speed", DEFAULT_OBSERVER_SPEED, self.set_observer_speed),
            ("fade_duration_ms", DEFAULT_FADE_DURATION_MS, self.set_fade_duration),
            ("hue_cycle_speed", DEFAULT_HUE_CYCLE_SPEED, self.set_hue_cycle_speed),
        ):
            requested = getattr(self, name)
            setattr(self, name, default)
            setter(requested)
        hue = _to_float("current_hue", self.current_hue)
        self.current_hue = 0.0 if hue is None else hue % 360.0

    def set_emission_interval(self, ms) -> float:
        v = _to_float("emission_interval_ms", ms)
        if v is not None:
            self.emission_interval_ms = _at_least("emission_interval_ms", v, MIN_EMISSION_INTERVAL_MS)
        return self.emission_interval_ms

    def set_growth_speed(self, speed) -> float:
        v = _to_float("growth_speed", speed)
        if v is not None:
            self.growth_speed = _at_least("growth_speed", v, 0.0)
        return self.growth_speed

    def set_source_speed(self, speed) -> float:
        v = _to_float("source_speed", speed)
        if v is not None:
            self.source_speed = _at_least("source_speed", v, 0.0)
        return self.source_speed

    def set_observer_speed(self, speed) -> float:
        v = _to_float("observer_speed", speed)
        if v is not None:
            self.observer_speed = _at_least("observer_speed", v, 0.0)
        return self.observer_speed

    def set_fade_duration(self, ms) -> float:
        v = _to_float("fade_duration_ms", ms)
        if v is not None:
            self.fade_duration_ms = _at_least("fade_duration_ms", v, MIN_FADE_DURATION_MS)
        return self.fade_duration_ms

    def set_hue_cycle_speed(self, speed) -> float:
        v = _to_float("hue_cycle_speed", speed)
        if v is not None:
            self.hue_cycle_speed = _at_least("hue_cycle_speed", v, 0.0)
        return self.hue_cycle_speed

    def advance_hue(self, dt_ms: float) -> float:
        """Cycle current_hue by hue_cycle_speed degrees per reference frame."""
        if dt_ms > 0 and self.hue_cycle_speed > 0:
            self.current_hue = (self.current_hue + self.hue_cycle_speed * dt_ms / REFERENCE_FRAME_MS) % 360.0
        return self.current_hue
