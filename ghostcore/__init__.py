"""Core engine for the Ghost Trail Simulator: wavefronts, arrivals and ghosts."""
from .config import SimConfig
from .simulation import FrameReport, SimState, SimulationController

__all__ = ["SimConfig", "FrameReport", "SimState", "SimulationController"]
