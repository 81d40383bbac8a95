#!/usr/bin/env python3
"""
Data models for the Ghost Trail Simulator.

This module defines the entities owned by SimulationController: the two
moving bodies, the expanding wavefronts and the fading ghosts.

Units and usage
- position/origin are container pixels; velocity is pixels per reference frame.
- created_at is simulated milliseconds (paused time never counts).
- hue is in degrees [0, 360).
- uid is a process-unique identity. Entities carry no view state; the
  renderer keys its own caches on uid.
"""
import itertools
from dataclasses import dataclass, field
from typing import Tuple

_uids = itertools.count(1)


def _next_uid() -> int:
    return next(_uids)


@dataclass
class Body:
    """
    A moving point of interest: either the source or the observer.

    Fields:
    - name: "source" or "observer"
    - radius: Collision/visual radius in pixels
    - position: (x, y) in container pixels
    - velocity: (vx, vy) in pixels per reference frame
    - color: RGB tuple used for rendering
    """
    name: str
    radius: float
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    color: Tuple[int, int, int] = (200, 200, 255)
    uid: int = field(default_factory=_next_uid)


@dataclass
class Wavefront:
    """
    An expanding ring emitted by the source.

    origin never moves after emission. radius only grows while the
    simulation runs. arrived flips once, when the ring first reaches the
    observer; the wavefront keeps growing until it is culled by size.
    """
    origin: Tuple[float, float]
    hue: float
    created_at: float
    radius: float = 0.0
    arrived: bool = False
    uid: int = field(default_factory=_next_uid)


@dataclass
class Ghost:
    """A perception marker left where the observer stood when a wavefront arrived."""
    position: Tuple[float, float]
    hue: float
    created_at: float
    uid: int = field(default_factory=_next_uid)

    def age(self, now: float) -> float:
        return now - self.created_at

    def opacity(self, now: float, fade_duration_ms: float) -> float:
        """Linear fade from 1 at creation to 0 at fade_duration_ms."""
        if fade_duration_ms <= 0:
            return 0.0
        return max(0.0, min(1.0, 1.0 - self.age(now) / fade_duration_ms))
