#!/usr/bin/env python3
"""
Motion integrator for the source and observer bodies.

Responsibilities
- Advance a body's position from its velocity over an elapsed frame time.
- Keep bodies inside the container, reflecting velocity off its walls.

Units and conventions
- Velocities are pixels per reference frame (REFERENCE_FRAME_MS), so an
  update over dt milliseconds moves a body by velocity * dt / REFERENCE_FRAME_MS.
  Speeds therefore look the same at any actual frame rate.
- Container coordinates run from (0, 0) at the top-left to (width, height).

Boundary policy
- Each axis is clamped to [radius, size - radius]. If the container is
  narrower than the body, the body is pinned to the axis centre.
- A velocity component pointing out through the wall that was hit is negated
  (reflect-on-boundary). A component already pointing inward is left alone so
  a body resting on a wall never jitters.
- A container with zero (or negative) width or height has not been laid out
  yet; the position still integrates but boundary handling is skipped.
"""
from typing import Tuple

from .constants import REFERENCE_FRAME_MS
from .data_models import Body
from .vector_utils import vec_add, vec_scale


def _bounce_axis(p: float, v: float, radius: float, size: float) -> Tuple[float, float, bool]:
    lo = radius
    hi = size - radius
    if lo > hi:
        lo = hi = size / 2.0
    if p < lo:
        return lo, (-v if v < 0 else v), True
    if p > hi:
        return hi, (-v if v > 0 else v), True
    return p, v, False


def integrate_body(body: Body, dt_ms: float, width: float, height: float) -> bool:
    """
    Move body by its velocity over dt_ms and resolve wall contacts.

    Args:
        body: Body to advance (modified in place).
        dt_ms: Elapsed simulated time in milliseconds (<= 0 is a no-op).
        width: Container width in pixels.
        height: Container height in pixels.

    Returns:
        True if the body touched a wall this step.
    """
    if dt_ms <= 0:
        return False

    body.position = vec_add(body.position, vec_scale(body.velocity, dt_ms / REFERENCE_FRAME_MS))

    if width <= 0 or height <= 0:
        return False

    x, vx, hit_x = _bounce_axis(body.position[0], body.velocity[0], body.radius, width)
    y, vy, hit_y = _bounce_axis(body.position[1], body.velocity[1], body.radius, height)
    body.position = (x, y)
    body.velocity = (vx, vy)
    return hit_x or hit_y

