"""Pytest configuration and shared fixtures."""

import random

import pytest

from ghostcore.config import SimConfig
from ghostcore.simulation import SimulationController

TEST_WIDTH = 800
TEST_HEIGHT = 600


@pytest.fixture
def rng() -> random.Random:
    """Seeded RNG so body placement is reproducible."""
    return random.Random(1234)


@pytest.fixture
def config() -> SimConfig:
    """Config with hue cycling off so hues stay predictable."""
    return SimConfig(hue_cycle_speed=0.0)


@pytest.fixture
def sim(config: SimConfig, rng: random.Random) -> SimulationController:
    """A controller in its initial Stopped state with an 800x600 container."""
    return SimulationController(config=config, width=TEST_WIDTH, height=TEST_HEIGHT, rng=rng)


@pytest.fixture
def running_sim(sim: SimulationController) -> SimulationController:
    """
    A started controller with both bodies at rest in known places and no
    wavefronts, so tests control every emission themselves.

    Source sits at (100, 300), observer at (400, 300).
    """
    sim.start()
    place_bodies(sim, source=(100.0, 300.0), observer=(400.0, 300.0))
    sim.wavefronts.clear()
    return sim


def place_bodies(sim: SimulationController, source=None, observer=None) -> None:
    """Put bodies at fixed positions and stop them."""
    if source is not None:
        sim.source.position = source
        sim.source.velocity = (0.0, 0.0)
    if observer is not None:
        sim.observer.position = observer
        sim.observer.velocity = (0.0, 0.0)
