#!/usr/bin/env python3
"""
Control mapping from analog-stick drags to body velocities.

A drag is the knob offset (dx, dy) from the stick centre. It is bounded to
the stick travel radius R and scaled so that full travel means the body's
configured maximum speed S:

    velocity = (dx / R * S, dy / R * S),  |velocity| <= S

The observer is stationary whenever its speed is 0: any drag maps to (0, 0).
"""
from typing import Tuple

from .vector_utils import clamp_length, vec_scale


def clamp_to_stick(dx: float, dy: float, stick_radius: float) -> Tuple[float, float]:
    """Bound a raw pointer offset to the stick's travel circle."""
    return clamp_length((dx, dy), stick_radius)


def drag_to_velocity(dx: float, dy: float, stick_radius: float, max_speed: float) -> Tuple[float, float]:
    """
    Map a drag vector to a velocity.

    Args:
        dx, dy: Knob offset from the stick centre in pixels.
        stick_radius: Maximum knob travel R (<= 0 disables the stick).
        max_speed: Speed S reached at full travel (<= 0 gives zero velocity).

    Returns:
        (vx, vy) in pixels per reference frame with magnitude <= max_speed.
    """
    if stick_radius <= 0 or max_speed <= 0:
        return (0.0, 0.0)
    dx, dy = clamp_to_stick(dx, dy, stick_radius)
    v = vec_scale((dx, dy), max_speed / stick_radius)
    return clamp_length(v, max_speed)


def observer_velocity(dx: float, dy: float, stick_radius: float, observer_speed: float) -> Tuple[float, float]:
    """Observer mapping: active only while observer_speed > 0."""
    if observer_speed <= 0:
        return (0.0, 0.0)
    return drag_to_velocity(dx, dy, stick_radius, observer_speed)
