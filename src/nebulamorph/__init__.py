"""Audio-reactive 3D particle visualizer core."""

from nebulamorph.config import VisualConfig, VisualSettings, VisualShape
from nebulamorph.core.controller import AnimationController, ControlSignals
from nebulamorph.core.particles import ParticlePool
from nebulamorph.core.shapes import generate_shape
from nebulamorph.io.exporter import SignalExporter
from nebulamorph.mood import MoodAdvisor, MoodLookup
from nebulamorph.pipeline import SessionRunner

__version__ = "0.1.0"
__all__ = [
    "VisualConfig",
    "VisualSettings",
    "VisualShape",
    "AnimationController",
    "ControlSignals",
    "ParticlePool",
    "generate_shape",
    "SignalExporter",
    "MoodAdvisor",
    "MoodLookup",
    "SessionRunner",
]
