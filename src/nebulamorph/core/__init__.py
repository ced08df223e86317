"""Core modules: shape generation, particle pool, animation control."""

from nebulamorph.core.controller import AnimationController, ControlSignals, ShapeMode
from nebulamorph.core.particles import ParticlePool, SpriteType
from nebulamorph.core.shapes import SHAPE_GENERATORS, generate_shape

__all__ = [
    "AnimationController",
    "ControlSignals",
    "ShapeMode",
    "ParticlePool",
    "SpriteType",
    "SHAPE_GENERATORS",
    "generate_shape",
]
