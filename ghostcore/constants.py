#!/usr/bin/env python3
"""
Shared constants for the Ghost Trail Simulator.

Units
- Distances are in container pixels.
- Times are in milliseconds of simulated time unless stated otherwise.
- Body speeds are pixels per reference frame (see REFERENCE_FRAME_MS).
- Hue values are degrees in [0, 360).

Keeping defaults and tunables in one place makes slider ranges and clamp
limits consistent between the engine and the control panel.
"""

# Timing
REFERENCE_FRAME_MS = 1000.0 / 60.0  # nominal frame that velocities are expressed against
MAX_FRAME_MS = 250.0  # cap on a single pumped frame (window drags, debugger stops)
MAX_EMISSIONS_PER_PUMP = 1000  # cap per pump for very small intervals

# Parameter defaults
DEFAULT_EMISSION_INTERVAL_MS = 200.0
DEFAULT_GROWTH_SPEED = 0.3  # px/ms
DEFAULT_SOURCE_SPEED = 3.0  # px/frame
DEFAULT_OBSERVER_SPEED = 2.0  # px/frame
DEFAULT_FADE_DURATION_MS = 4000.0
DEFAULT_HUE_CYCLE_SPEED = 1.0  # degrees/frame

# Clamp limits
MIN_EMISSION_INTERVAL_MS = 10.0
MIN_FADE_DURATION_MS = 50.0

# Slider ranges (min, max)
EMISSION_INTERVAL_RANGE = (MIN_EMISSION_INTERVAL_MS, 2000.0)
GROWTH_SPEED_RANGE = (0.0, 2.0)
SOURCE_SPEED_RANGE = (0.0, 15.0)
OBSERVER_SPEED_RANGE = (0.0, 15.0)
FADE_DURATION_RANGE = (MIN_FADE_DURATION_MS, 10000.0)
HUE_CYCLE_SPEED_RANGE = (0.0, 10.0)

# Bodies
SOURCE_RADIUS = 10.0
OBSERVER_RADIUS = 8.0
SOURCE_COLOR = (255, 170, 60)
OBSERVER_COLOR = (90, 200, 255)

# Analog sticks (viewport overlay)
STICK_RADIUS = 50.0
STICK_KNOB_RADIUS = 16
STICK_MARGIN = 30
STICK_BASE_COLOR = (60, 66, 84)
STICK_KNOB_COLOR = (170, 175, 190)

# Rendering (viewport)
VIEW_WIDTH = 1000
VIEW_HEIGHT = 700
BACKGROUND_COLOR = (10, 12, 18)
HUD_COLOR = (200, 200, 200)
GHOST_RADIUS = 4
RING_SATURATION = 0.75
RING_VALUE = 1.0

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
