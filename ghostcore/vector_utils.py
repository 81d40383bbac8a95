#!/usr/bin/env python3
"""
2D vector helpers shared by the motion, arrival and control code.

Vectors are plain (x, y) tuples; every helper returns a new tuple.
"""
import math
from typing import Tuple

Vec2 = Tuple[float, float]


def vec_add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def vec_scale(a: Vec2, s: float) -> Vec2:
    return (a[0] * s, a[1] * s)


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def distance(a: Vec2, b: Vec2) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def clamp_length(a: Vec2, max_len: float) -> Vec2:
    """Shrink a so that |a| <= max_len, keeping its direction."""
    l = vec_len(a)
    if max_len <= 0:
        return (0.0, 0.0)
    if l <= max_len:
        return (float(a[0]), float(a[1]))
    return vec_scale(a, max_len / l)


def with_length(a: Vec2, new_len: float) -> Vec2:
    """Return a rescaled to new_len; the zero vector stays zero."""
    l = vec_len(a)
    if l == 0 or new_len <= 0:
        return (0.0, 0.0)
    return vec_scale(a, new_len / l)


def from_angle(angle: float, length: float) -> Vec2:
    return (math.cos(angle) * length, math.sin(angle) * length)
