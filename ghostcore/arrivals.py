#!/usr/bin/env python3
"""
Arrival detection between growing wavefronts and the observer.

A wavefront "arrives" when its ring sweeps across the observer during a
tick: with d the distance from the wavefront's origin to the observer,

    previous_radius < d <= new_radius

Frame-to-frame growth is coarse, so the test checks for the crossing over
the whole step instead of comparing against an exact radius or a fixed
epsilon; a thin observer is never skipped.

Edge cases
- d == 0 (emitted right on top of the observer): the strict lower bound can
  never hold, so the first growth step away from radius 0 counts as arrival.
- No growth this tick (growth_speed == 0): nothing can arrive.
- A wavefront that has already arrived is skipped, so each one produces at
  most one ghost. It is not removed here; size-based culling does that.
"""
from typing import List, Sequence, Tuple

from .data_models import Ghost, Wavefront
from .vector_utils import distance


def crossed(previous_radius: float, new_radius: float, d: float) -> bool:
    """True if a ring growing from previous_radius to new_radius swept past distance d."""
    if new_radius <= previous_radius:
        return False
    if d == 0:
        return previous_radius == 0
    return previous_radius < d <= new_radius


def detect_arrivals(wavefronts: Sequence[Wavefront],
                    previous_radii: Sequence[float],
                    observer_position: Tuple[float, float],
                    now: float) -> List[Ghost]:
    """
    Mark newly arrived wavefronts and create one ghost for each.

    Args:
        wavefronts: Live wavefronts, already grown for this tick.
        previous_radii: Each wavefront's radius before this tick's growth,
            in the same order.
        observer_position: Observer position after this tick's motion.
        now: Simulated time in ms, stamped on the new ghosts.

    Returns:
        New ghosts in wavefront (emission) order.
    """
    ghosts: List[Ghost] = []
    for w, prev in zip(wavefronts, previous_radii):
        if w.arrived:
            continue
        d = distance(w.origin, observer_position)
        if crossed(prev, w.radius, d):
            w.arrived = True
            ghosts.append(Ghost(position=observer_position, hue=w.hue, created_at=now))
    return ghosts
