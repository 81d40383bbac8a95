"""Tests for the simulation controller: state machine, tick pipeline and scenarios."""

import math

import pytest

from ghostcore.config import SimConfig
from ghostcore.constants import MAX_FRAME_MS, REFERENCE_FRAME_MS
from ghostcore.simulation import OBSERVER, SOURCE, SimState, SimulationController

from .conftest import TEST_HEIGHT, TEST_WIDTH, place_bodies


class TestStateMachine:
    def test_initial_state(self, sim):
        assert sim.state is SimState.STOPPED
        assert sim.source is None and sim.observer is None
        assert sim.config.started is False and sim.config.running is False

    def test_start_initialises_everything(self, sim):
        assert sim.start() is True
        assert sim.state is SimState.RUNNING
        assert sim.config.started and sim.config.running
        assert sim.source is not None and sim.observer is not None
        assert sim.wavefronts == []
        assert sim.ghosts == []

    def test_bodies_placed_inside_container_with_configured_speed(self, sim):
        sim.start()
        for body, speed in ((sim.source, sim.config.source_speed), (sim.observer, sim.config.observer_speed)):
            x, y = body.position
            assert body.radius <= x <= TEST_WIDTH - body.radius
            assert body.radius <= y <= TEST_HEIGHT - body.radius
            assert math.hypot(*body.velocity) == pytest.approx(speed)

    def test_pause_resume_cycle(self, sim):
        sim.start()
        assert sim.pause() is True
        assert sim.state is SimState.PAUSED
        assert sim.config.running is False and sim.config.started is True
        assert sim.resume() is True
        assert sim.state is SimState.RUNNING
        assert sim.config.running is True

    def test_toggle_pause(self, sim):
        sim.start()
        sim.toggle_pause()
        assert sim.state is SimState.PAUSED
        sim.toggle_pause()
        assert sim.state is SimState.RUNNING

    @pytest.mark.parametrize("command", ["pause", "resume", "reset"])
    def test_commands_rejected_before_start(self, sim, command):
        assert getattr(sim, command)() is False
        assert sim.state is SimState.STOPPED
        assert sim.config.started is False
        assert sim.source is None

    def test_invalid_commands_have_no_effect(self, sim):
        sim.start()
        assert sim.start() is False
        assert sim.resume() is False
        sim.pause()
        assert sim.pause() is False
        assert sim.state is SimState.PAUSED

    def test_reset_from_running(self, running_sim):
        sim = running_sim
        sim.emit_wavefront()
        sim.tick(16.0)
        assert sim.reset() is True
        assert sim.state is SimState.STOPPED
        assert sim.config.running is False
        assert sim.config.started is True
        assert sim.wavefronts == [] and sim.ghosts == []
        assert sim.source is not None and sim.observer is not None
        assert sim.sim_time_ms == 0.0

    def test_reset_from_paused_then_start_again(self, sim):
        sim.start()
        sim.pause()
        assert sim.reset() is True
        assert sim.state is SimState.STOPPED
        assert sim.start() is True
        assert sim.state is SimState.RUNNING

    def test_start_then_reset_matches_fresh_start(self, sim):
        sim.start()
        fresh = (len(sim.wavefronts), len(sim.ghosts))
        sim.emit_wavefront()
        sim.tick(10.0)
        sim.reset()
        assert (len(sim.wavefronts), len(sim.ghosts)) == fresh == (0, 0)

    def test_first_emission_one_interval_after_start(self, running_sim):
        sim = running_sim
        sim.set_emission_interval(100)
        sim.pump(0.0)
        sim.pump(99.0)
        assert sim.wavefronts == []
        sim.pump(100.0)
        assert len(sim.wavefronts) == 1
        assert sim.wavefronts[0].origin == (100.0, 300.0)

    def test_reset_rearms_fresh_bodies(self, sim):
        sim.start()
        first = (sim.source.uid, sim.observer.uid)
        sim.reset()
        assert (sim.source.uid, sim.observer.uid) != first

    def test_nothing_moves_outside_running(self, running_sim):
        sim = running_sim
        sim.source.velocity = (5.0, 0.0)
        sim.pause()
        report = sim.tick(100.0)
        assert report.source.position == (100.0, 300.0)
        assert sim.emit_wavefront() is None
        assert sim.pump(1000.0) is None


class TestTickPipeline:
    def test_growth_uses_live_speed_for_all_wavefronts(self, running_sim):
        sim = running_sim
        sim.config.set_growth_speed(1.0)
        a = sim.emit_wavefront()
        sim.tick(10.0)
        b = sim.emit_wavefront()
        sim.set_growth_speed(3.0)
        sim.tick(10.0)
        assert a.radius == pytest.approx(40.0)
        assert b.radius == pytest.approx(30.0)

    def test_wavefront_origin_fixed_after_emission(self, running_sim):
        sim = running_sim
        sim.source.velocity = (5.0, 0.0)
        w = sim.emit_wavefront()
        sim.tick(REFERENCE_FRAME_MS * 4)
        assert w.origin == (100.0, 300.0)
        assert sim.source.position[0] == pytest.approx(120.0)

    def test_wavefront_hue_captured_at_emission(self, running_sim):
        sim = running_sim
        sim.config.current_hue = 40.0
        w = sim.emit_wavefront()
        sim.config.current_hue = 200.0
        assert w.hue == 40.0

    def test_radius_non_decreasing_while_running(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(0.7)
        w = sim.emit_wavefront()
        last = w.radius
        for dt in (16.0, 0.0, 3.5, 16.7, 40.0):
            sim.tick(dt)
            assert w.radius >= last
            last = w.radius

    def test_ghost_created_on_arrival(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(1.0)
        sim.config.current_hue = 123.0
        sim.emit_wavefront()
        # Observer is 300 px away: 299 ms is not enough, 300 ms is
        sim.tick(299.0)
        assert sim.ghosts == []
        report = sim.tick(1.0)
        assert report.ghosts_created == 1
        assert len(sim.ghosts) == 1
        ghost = sim.ghosts[0]
        assert ghost.position == (400.0, 300.0)
        assert ghost.hue == 123.0
        assert ghost.created_at == pytest.approx(300.0)

    def test_at_most_one_ghost_per_wavefront(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(0.5)
        sim.observer.velocity = (2.0, 0.0)  # observer runs ahead of the ring for a while
        sim.emit_wavefront()
        for _ in range(400):
            sim.tick(REFERENCE_FRAME_MS)
        assert len(sim.ghosts) <= 1
        assert all(w.arrived for w in sim.wavefronts) or sim.wavefronts == []

    def test_ghost_marks_observer_position_after_motion(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(1.0)
        sim.observer.velocity = (-6.0, 0.0)
        sim.emit_wavefront()
        # Observer closes in at 6 px/frame while the ring grows ~16.7 px/frame
        for _ in range(30):
            sim.tick(REFERENCE_FRAME_MS)
            if sim.ghosts:
                break
        assert len(sim.ghosts) == 1
        g = sim.ghosts[0]
        assert g.position == sim.observer.position
        assert math.hypot(g.position[0] - 100.0, g.position[1] - 300.0) <= sim.wavefronts[0].radius

    def test_zero_growth_never_produces_ghosts(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(0.0)
        place_bodies(sim, observer=(100.0, 300.0))  # even right on top of the origin
        sim.emit_wavefront()
        sim.source.position = (400.0, 300.0)
        sim.emit_wavefront()
        for _ in range(200):
            sim.tick(50.0)
        assert sim.ghosts == []
        assert all(w.radius == 0.0 for w in sim.wavefronts)

    def test_origin_on_observer_arrives_on_first_growth_tick(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(0.2)
        place_bodies(sim, observer=(100.0, 300.0))
        sim.emit_wavefront()
        report = sim.tick(5.0)
        assert report.ghosts_created == 1
        for _ in range(10):
            sim.tick(5.0)
        assert len(sim.ghosts) == 1

    def test_oversized_wavefronts_culled(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(10.0)
        sim.emit_wavefront()
        report = sim.tick(160.0)  # radius 1600 == limit for 800x600, kept
        assert report.wavefronts_removed == 0 and len(sim.wavefronts) == 1
        report = sim.tick(1.0)
        assert report.wavefronts_removed == 1
        assert sim.wavefronts == []

    def test_cull_threshold_tracks_container_resize(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(1.0)
        sim.emit_wavefront()
        sim.tick(700.0)
        assert len(sim.wavefronts) == 1
        sim.set_container_size(300, 200)
        sim.tick(1.0)
        assert sim.wavefronts == []

    def test_unsized_container_tolerated(self, running_sim):
        sim = running_sim
        sim.set_container_size(0, 0)
        sim.source.velocity = (3.0, 4.0)
        sim.set_growth_speed(100.0)
        sim.emit_wavefront()
        for _ in range(50):
            sim.tick(16.0)
        assert len(sim.wavefronts) == 1
        assert all(math.isfinite(c) for c in sim.source.position)

    def test_observer_forced_to_rest_when_speed_zero(self, running_sim):
        sim = running_sim
        sim.observer.velocity = (4.0, 4.0)
        sim.config.observer_speed = 0.0  # written behind the controller's back
        sim.tick(REFERENCE_FRAME_MS)
        assert sim.observer.velocity == (0.0, 0.0)
        assert sim.observer.position == (400.0, 300.0)

    def test_hue_cycles_with_ticks(self, running_sim):
        sim = running_sim
        sim.set_hue_cycle_speed(3.0)
        sim.tick(REFERENCE_FRAME_MS * 2)
        assert sim.config.current_hue == pytest.approx(6.0)


class TestScenarios:
    def test_single_emission_grows_to_expected_radius(self, rng):
        cfg = SimConfig(emission_interval_ms=50, growth_speed=2, hue_cycle_speed=0)
        sim = SimulationController(config=cfg, width=800, height=600, rng=rng)
        sim.start()
        sim.emit_wavefront()  # single emission at t=0
        for _ in range(25):
            sim.tick(2.0)
        assert len(sim.wavefronts) == 1
        assert sim.wavefronts[0].radius == pytest.approx(100.0)
        assert sim.sim_time_ms == pytest.approx(50.0)

    def test_invalid_constructor_config_still_runs(self, rng):
        cfg = SimConfig(emission_interval_ms="fast", growth_speed=float("nan"), hue_cycle_speed=0)
        sim = SimulationController(config=cfg, width=800, height=600, rng=rng)
        sim.start()
        sim.pump(0.0)
        sim.pump(250.0)
        assert len(sim.wavefronts) == 1
        assert sim.wavefronts[0].radius > 0

    def test_ghost_fades_out_exactly_at_fade_duration(self, running_sim):
        sim = running_sim
        sim.set_fade_duration(4000)
        sim.set_growth_speed(2.0)
        place_bodies(sim, observer=(110.0, 300.0))
        sim.emit_wavefront()
        sim.tick(5.0)  # ring reaches 10 px: ghost created at t=5
        assert len(sim.ghosts) == 1
        created = sim.ghosts[0].created_at
        sim.tick(3999.0)
        assert sim.sim_time_ms - created == pytest.approx(3999.0)
        assert len(sim.ghosts) == 1
        report = sim.tick(1.0)
        assert sim.ghosts == []
        assert report.ghosts_removed == 1

    def test_pause_excludes_wall_time(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(0.1)
        sim.source.velocity = (2.0, 1.0)
        sim.emit_wavefront()
        t = 0.0
        sim.pump(t)  # arms the frame clock
        while t < 1000.0:
            t += 20.0
            sim.pump(t)
        before = (sim.source.position, sim.observer.position, [w.radius for w in sim.wavefronts])

        sim.pause()
        assert sim.pump(1250.0) is None
        sim.resume()
        assert sim.pump(1500.0) is None  # first frame after resume only re-arms the clock
        after = (sim.source.position, sim.observer.position, [w.radius for w in sim.wavefronts])
        assert after == before

        sim.pump(1520.0)
        assert sim.sim_time_ms == pytest.approx(1020.0)

    def test_emission_phase_survives_pause(self, running_sim):
        sim = running_sim
        sim.set_emission_interval(100)
        sim.pump(0.0)
        sim.pump(60.0)
        assert len(sim.wavefronts) == 0
        sim.pause()
        sim.resume()
        sim.pump(5000.0)
        sim.pump(5040.0)  # 60 + 40 = one full interval of running time
        assert len(sim.wavefronts) == 1

    def test_emissions_follow_interval_independent_of_frame_rate(self, running_sim):
        sim = running_sim
        sim.set_emission_interval(10)
        sim.pump(0.0)
        sim.pump(35.0)  # three firings in a single frame
        assert len(sim.wavefronts) == 3
        assert all(w.origin == (100.0, 300.0) for w in sim.wavefronts)

    def test_shortening_interval_mid_run_does_not_burst(self, running_sim):
        sim = running_sim
        sim.set_emission_interval(2000)
        t = 0.0
        sim.pump(t)
        while t < 1990.0:
            t += 10.0
            sim.pump(t)
        assert len(sim.wavefronts) == 0
        sim.set_emission_interval(10)
        report = sim.pump(t + 1.0)
        assert report.emitted == 1
        assert len(sim.wavefronts) == 1
        sim.pump(t + 11.0)
        assert len(sim.wavefronts) == 2

    def test_pump_caps_long_frames(self, running_sim):
        sim = running_sim
        sim.pump(0.0)
        sim.pump(10000.0)
        assert sim.sim_time_ms == pytest.approx(MAX_FRAME_MS)


class TestControls:
    def test_drag_steers_source(self, running_sim):
        sim = running_sim
        sim.set_source_speed(4.0)
        assert sim.apply_drag(SOURCE, sim.stick_radius, 0.0) is True
        assert sim.source.velocity == pytest.approx((4.0, 0.0))

    def test_drag_ignored_for_observer_at_zero_speed(self, running_sim):
        sim = running_sim
        sim.set_observer_speed(0.0)
        sim.apply_drag(OBSERVER, 30.0, 30.0)
        assert sim.observer.velocity == (0.0, 0.0)

    def test_drag_ignored_while_paused(self, running_sim):
        sim = running_sim
        sim.pause()
        assert sim.apply_drag(SOURCE, 10.0, 0.0) is False
        assert sim.source.velocity == (0.0, 0.0)

    def test_unknown_target_rejected(self, running_sim):
        assert running_sim.apply_drag("moon", 1.0, 1.0) is False

    def test_speed_change_rescales_velocity(self, running_sim):
        sim = running_sim
        sim.source.velocity = (3.0, 4.0)
        sim.set_source_speed(10.0)
        assert sim.source.velocity == pytest.approx((6.0, 8.0))

    def test_speed_change_while_paused_applies_on_resume(self, running_sim):
        sim = running_sim
        sim.observer.velocity = (0.0, 2.0)
        sim.pause()
        sim.set_observer_speed(5.0)
        assert sim.observer.velocity == (0.0, 2.0)
        sim.resume()
        assert sim.observer.velocity == pytest.approx((0.0, 5.0))

    def test_only_speed_changes_touch_velocity_without_drag(self, running_sim):
        sim = running_sim
        sim.source.velocity = (3.0, 4.0)
        sim.set_growth_speed(2.0)
        sim.set_emission_interval(50)
        sim.set_fade_duration(500)
        assert sim.source.velocity == (3.0, 4.0)
        sim.source.velocity = (0.0, 0.0)
        sim.set_source_speed(9.0)
        assert sim.source.velocity == (0.0, 0.0)


class TestFrameReport:
    def test_report_contents(self, running_sim):
        sim = running_sim
        sim.set_growth_speed(1.0)
        sim.set_fade_duration(1000)
        sim.emit_wavefront()
        sim.tick(300.0)
        report = sim.tick(500.0)
        assert report.state is SimState.RUNNING
        assert report.wavefront_count == 1
        assert report.ghost_count == 1
        assert report.wavefronts[0].radius == pytest.approx(800.0)
        assert report.wavefronts[0].arrived is True
        assert report.ghosts[0].opacity == pytest.approx(0.5)
        assert report.observer.position == (400.0, 300.0)

    def test_report_is_a_copy(self, running_sim):
        sim = running_sim
        report = sim.snapshot()
        report.source.position = (0.0, 0.0)
        assert sim.source.position == (100.0, 300.0)
