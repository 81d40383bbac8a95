#!/usr/bin/env python3
"""
Ghost Trail Simulator application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame viewport thread that pumps the simulation
  and draws it, and the Dear PyGui control panel on the main thread.
- Shares one SimulationController between them; the controller serializes
  all access behind its re-entrant lock.

Viewport
- Wavefronts are drawn as rings coloured by their emission hue, ghosts as
  dots fading out with age, the source and observer as filled circles.
- Two analog sticks sit in the bottom corners: left steers the source, right
  steers the observer. Dragging a knob sends drag vectors to the controller;
  releasing it springs the knob back and leaves the velocity as it was.
- Resizing the window resizes the simulation container.

Control panel
- Sliders for every live parameter, Start / Pause-Resume / Reset buttons and
  a stats readout refreshed about ten times a second. Space toggles pause.

Running
1) Install dependencies: `pip install pygame dearpygui`
2) Run this module: `python ghost_sim.py` (or the `ghost-sim` script)

Set GHOST_SIM_LOG_LEVEL=DEBUG to see per-tick pruning in the console.
"""

import colorsys
import threading
import time
from typing import Dict, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from ghostcore.constants import (
    BACKGROUND_COLOR,
    DEFAULT_EMISSION_INTERVAL_MS,
    DEFAULT_FADE_DURATION_MS,
    DEFAULT_GROWTH_SPEED,
    DEFAULT_HUE_CYCLE_SPEED,
    DEFAULT_OBSERVER_SPEED,
    DEFAULT_SOURCE_SPEED,
    EMISSION_INTERVAL_RANGE,
    FADE_DURATION_RANGE,
    GHOST_RADIUS,
    GROWTH_SPEED_RANGE,
    HUD_COLOR,
    HUE_CYCLE_SPEED_RANGE,
    OBSERVER_SPEED_RANGE,
    RING_SATURATION,
    RING_VALUE,
    SAFE_COORD_LIMIT,
    SOURCE_SPEED_RANGE,
    STICK_BASE_COLOR,
    STICK_KNOB_COLOR,
    STICK_KNOB_RADIUS,
    STICK_MARGIN,
    STICK_RADIUS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from ghostcore.controls import clamp_to_stick
from ghostcore.logging_utils import configure_logging, log_event
from ghostcore.simulation import OBSERVER, SOURCE, FrameReport, SimState, SimulationController


# ============================================================
# Drawing helpers
# ============================================================

def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


_cached_font = None


def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except Exception:
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


class HueColorCache:
    """
    Render-side table of RGB colours keyed by entity uid.

    Entities only carry a hue; the viewport converts it once per entity and
    forgets entries whose entity is gone.
    """
    def __init__(self):
        self._colors: Dict[int, Tuple[int, int, int]] = {}

    def color_for(self, uid: int, hue: float) -> Tuple[int, int, int]:
        c = self._colors.get(uid)
        if c is None:
            r, g, b = colorsys.hsv_to_rgb((hue % 360.0) / 360.0, RING_SATURATION, RING_VALUE)
            c = (int(r * 255), int(g * 255), int(b * 255))
            self._colors[uid] = c
        return c

    def prune(self, live_uids) -> None:
        live = set(live_uids)
        for uid in [u for u in self._colors if u not in live]:
            del self._colors[uid]


class AnalogStick:
    """On-screen stick: a base circle and a knob that follows the mouse within STICK_RADIUS."""
    def __init__(self, target: str):
        self.target = target
        self.center = (0, 0)
        self.knob = (0.0, 0.0)
        self.active = False

    def place(self, x: int, y: int) -> None:
        self.center = (x, y)

    def hit(self, pos) -> bool:
        dx = pos[0] - self.center[0]
        dy = pos[1] - self.center[1]
        return dx * dx + dy * dy <= STICK_RADIUS * STICK_RADIUS

    def drag_to(self, pos) -> Tuple[float, float]:
        self.knob = clamp_to_stick(pos[0] - self.center[0], pos[1] - self.center[1], STICK_RADIUS)
        return self.knob

    def release(self) -> None:
        self.active = False
        self.knob = (0.0, 0.0)

    def draw(self, surf) -> None:
        cx, cy = self.center
        gfxdraw.aacircle(surf, cx, cy, int(STICK_RADIUS), STICK_BASE_COLOR)
        kx, ky = int(cx + self.knob[0]), int(cy + self.knob[1])
        gfxdraw.filled_circle(surf, kx, ky, STICK_KNOB_RADIUS, STICK_KNOB_COLOR)
        gfxdraw.aacircle(surf, kx, ky, STICK_KNOB_RADIUS, STICK_KNOB_COLOR)


# ============================================================
# Pygame Renderer Thread
# ============================================================

class PygameRenderer(threading.Thread):
    """
    Pygame loop: pumps the simulation, draws rings, ghosts, bodies and sticks.
    Handles stick drags and window resizes.
    """
    def __init__(self, sim: SimulationController):
        super().__init__(daemon=True)
        self.sim = sim
        self.surface = None
        self.clock = None
        self.colors = HueColorCache()
        self.sticks = [AnalogStick(SOURCE), AnalogStick(OBSERVER)]
        self.running = True

    def _layout_sticks(self, w: int, h: int) -> None:
        off = int(STICK_RADIUS) + STICK_MARGIN
        self.sticks[0].place(off, h - off)
        self.sticks[1].place(w - off, h - off)

    def _resize(self, w: int, h: int) -> None:
        self.sim.set_container_size(w, h)
        self._layout_sticks(w, h)

    def run(self):
        pygame.init()
        pygame.display.set_caption("Ghost Trail Simulator - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self._resize(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()

        while self.running:
            self.handle_events()
            self.sim.pump(time.perf_counter() * 1000.0)
            self.draw(self.sim.snapshot())
            self.clock.tick(60)

        pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                dpg.stop_dearpygui()

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self._resize(event.w, event.h)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                for stick in self.sticks:
                    if stick.hit(event.pos):
                        stick.active = True
                        dx, dy = stick.drag_to(event.pos)
                        self.sim.apply_drag(stick.target, dx, dy)

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                for stick in self.sticks:
                    stick.release()

            elif event.type == pygame.MOUSEMOTION:
                for stick in self.sticks:
                    if stick.active:
                        dx, dy = stick.drag_to(event.pos)
                        self.sim.apply_drag(stick.target, dx, dy)

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
                self.sim.toggle_pause()

    def draw(self, frame: FrameReport):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        for w in frame.wavefronts:
            c = _safe_point(w.origin)
            r = int(w.radius)
            if c is None or r < 1 or r > SAFE_COORD_LIMIT:
                continue
            gfxdraw.aacircle(surf, c[0], c[1], r, self.colors.color_for(w.uid, w.hue))

        for g in frame.ghosts:
            p = _safe_point(g.position)
            if p is None:
                continue
            rgb = self.colors.color_for(g.uid, g.hue)
            alpha = int(255 * g.opacity)
            gfxdraw.filled_circle(surf, p[0], p[1], GHOST_RADIUS, (rgb[0], rgb[1], rgb[2], alpha))

        self.colors.prune([w.uid for w in frame.wavefronts] + [g.uid for g in frame.ghosts])

        for b in (frame.source, frame.observer):
            if b is None:
                continue
            p = _safe_point(b.position)
            if p is None:
                continue
            vis_r = max(2, int(b.radius))
            gfxdraw.filled_circle(surf, p[0], p[1], vis_r, b.color)
            gfxdraw.aacircle(surf, p[0], p[1], vis_r, b.color)

        for stick in self.sticks:
            stick.draw(surf)

        draw_text(surf, "Left stick: source | Right stick: observer | Space: Pause/Resume", 10, 10, HUD_COLOR)
        draw_text(surf,
                  f"[{frame.state.value}] t={frame.sim_time_ms / 1000.0:.1f}s  "
                  f"wavefronts={frame.wavefront_count} (-{frame.wavefronts_removed})  "
                  f"ghosts={frame.ghost_count} (-{frame.ghosts_removed})",
                  10, 30, HUD_COLOR)

        pygame.display.flip()


# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui control panel: parameter sliders, simulation commands, stats.
    """
    def __init__(self, sim: SimulationController):
        self.sim = sim
        self.status_msg_id = None
        self.stats_id = None
        self.pause_button_id = None
        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (~10Hz at 60 FPS)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    # -----------------------
    # UI Construction
    # -----------------------

    def _add_param_slider(self, label: str, tag: str, bounds, default: float, setter, fmt: str):
        lo, hi = bounds
        with dpg.group(horizontal=True):
            dpg.add_text(label)
            dpg.add_slider_float(min_value=lo, max_value=hi, default_value=default, width=260,
                                 format=fmt, tag=tag,
                                 callback=lambda s, a, u: self._apply_param(tag, setter, a))

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Ghost Trail Simulator - Controls', width=460, height=420)

        with dpg.window(label="Controls", width=440, height=400, pos=(10, 10), tag="main_window"):
            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Start", callback=self._start)
                self.pause_button_id = dpg.add_button(label="Pause", callback=self._toggle_pause)
                dpg.add_button(label="Reset", callback=self._reset)
            self.status_msg_id = dpg.add_text("Press Start.")

            dpg.add_separator()

            dpg.add_text("Wavefronts")
            self._add_param_slider("Emission interval (ms):", "interval_slider", EMISSION_INTERVAL_RANGE,
                                   DEFAULT_EMISSION_INTERVAL_MS, self.sim.set_emission_interval, "%.0f")
            self._add_param_slider("Growth speed (px/ms):", "growth_slider", GROWTH_SPEED_RANGE,
                                   DEFAULT_GROWTH_SPEED, self.sim.set_growth_speed, "%.3f")
            self._add_param_slider("Hue cycle (deg/frame):", "hue_slider", HUE_CYCLE_SPEED_RANGE,
                                   DEFAULT_HUE_CYCLE_SPEED, self.sim.set_hue_cycle_speed, "%.2f")

            dpg.add_text("Bodies")
            self._add_param_slider("Source speed (px/frame):", "source_speed_slider", SOURCE_SPEED_RANGE,
                                   DEFAULT_SOURCE_SPEED, self.sim.set_source_speed, "%.1f")
            self._add_param_slider("Observer speed (px/frame):", "observer_speed_slider", OBSERVER_SPEED_RANGE,
                                   DEFAULT_OBSERVER_SPEED, self.sim.set_observer_speed, "%.1f")

            dpg.add_text("Ghosts")
            self._add_param_slider("Fade duration (ms):", "fade_slider", FADE_DURATION_RANGE,
                                   DEFAULT_FADE_DURATION_MS, self.sim.set_fade_duration, "%.0f")

            dpg.add_separator()
            self.stats_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _apply_param(self, tag: str, setter, value):
        applied = setter(value)
        # Reflect clamped value back into the slider
        if applied != value:
            dpg.set_value(tag, applied)

    def _start(self):
        if self.sim.start():
            self._set_status("Simulation running.")
        else:
            self._set_status("Already started; Reset first.", color=(255, 120, 120))

    def _toggle_pause(self):
        if self.sim.toggle_pause():
            self._set_status(f"Simulation {self.sim.state.value.lower()}.")
        else:
            self._set_status("Nothing to pause; press Start.", color=(255, 120, 120))

    def _reset(self):
        if self.sim.reset():
            self._set_status("Simulation reset.")

    def _sync_ui_with_sim(self):
        """Periodic refresh of the stats readout and the pause button label."""
        frame = self.sim.snapshot()
        dpg.set_value(self.stats_id,
                      f"State: {frame.state.value}\n"
                      f"Simulated time: {frame.sim_time_ms / 1000.0:.2f} s\n"
                      f"Wavefronts: {frame.wavefront_count}   Ghosts: {frame.ghost_count}\n"
                      f"Hue: {self.sim.config.current_hue:.0f}")
        dpg.configure_item(self.pause_button_id,
                           label="Resume" if frame.state is SimState.PAUSED else "Pause")
        self._schedule_sync()


# ============================================================
# Application Entry
# ============================================================

def main():
    configure_logging()
    sim = SimulationController()
    renderer = PygameRenderer(sim)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(sim)

    with dpg.handler_registry():
        def key_press(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_pause()
        dpg.add_key_press_handler(callback=key_press)

    log_event("info", "App", "Ghost Trail Simulator started")
    try:
        dpg.start_dearpygui()
    finally:
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()


if __name__ == "__main__":
    main()
