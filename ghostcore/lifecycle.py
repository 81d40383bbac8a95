#!/usr/bin/env python3
"""
Wavefront and ghost lifecycle: growth, size-based culling and fade expiry.

Wavefronts
- Every live wavefront grows by the same step each tick, computed from the
  live growth speed, so a speed change affects rings already in flight.
- A wavefront is culled once radius > 2 * max(width, height). The bound is
  recomputed from the current container each tick; while the container is
  not laid out (zero width or height) nothing is culled.

Ghosts
- A ghost expires once now - created_at >= fade_duration_ms. Ghosts are
  otherwise never mutated; Ghost.opacity gives the view its fade.

The collections are pruned in place and keep insertion (emission) order.
"""
from typing import List, Optional

from .data_models import Ghost, Wavefront


def max_radius(width: float, height: float) -> Optional[float]:
    """Cull threshold for the given container, or None while it has no size."""
    if width <= 0 or height <= 0:
        return None
    return 2.0 * max(width, height)


def grow_wavefronts(wavefronts: List[Wavefront], step: float) -> List[float]:
    """Grow every wavefront by step (negative steps are ignored) and return the radii before growth."""
    step = max(0.0, step)
    previous = []
    for w in wavefronts:
        previous.append(w.radius)
        w.radius += step
    return previous


def cull_wavefronts(wavefronts: List[Wavefront], width: float, height: float) -> int:
    """Remove wavefronts larger than max_radius; return how many were removed."""
    limit = max_radius(width, height)
    if limit is None:
        return 0
    before = len(wavefronts)
    wavefronts[:] = [w for w in wavefronts if w.radius <= limit]
    return before - len(wavefronts)


def expire_ghosts(ghosts: List[Ghost], now: float, fade_duration_ms: float) -> int:
    """Remove fully faded ghosts; return how many were removed."""
    before = len(ghosts)
    ghosts[:] = [g for g in ghosts if g.age(now) < fade_duration_ms]
    return before - len(ghosts)
