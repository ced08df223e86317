"""
Configuration records and defaults for the particle morph engine.

VisualConfig is the per-track "identity" (shape, palette, speed, chaos);
VisualSettings are user-tunable render parameters; AnimationConfig holds
the controller's timing and smoothing constants.
"""

from dataclasses import dataclass
from enum import Enum


class VisualShape(Enum):
    """Closed catalog of procedural point-cloud shapes."""

    SPHERE = "SPHERE"
    GALAXY_SPIRAL = "GALAXY_SPIRAL"
    LORENZ_ATTRACTOR = "LORENZ_ATTRACTOR"
    MOBIUS_STRIP = "MOBIUS_STRIP"
    MENGER_SPONGE_APPROX = "MENGER_SPONGE_APPROX"
    PENROSE_TRIANGLE_APPROX = "PENROSE_TRIANGLE_APPROX"
    CARDIOID_HEART = "CARDIOID_HEART"
    DNA_HELIX = "DNA_HELIX"
    CUBE_GRID = "CUBE_GRID"
    TORUS = "TORUS"
    KLEIN_BOTTLE = "KLEIN_BOTTLE"
    VOXEL_GRID = "VOXEL_GRID"
    CYBER_FLOWER = "CYBER_FLOWER"
    LIQUID_WAVE = "LIQUID_WAVE"
    PULSING_BLACK_HOLE = "PULSING_BLACK_HOLE"
    AIZAWA_ATTRACTOR = "AIZAWA_ATTRACTOR"
    THOMAS_ATTRACTOR = "THOMAS_ATTRACTOR"
    CLIFFORD_ATTRACTOR = "CLIFFORD_ATTRACTOR"
    KOCH_SNOWFLAKE = "KOCH_SNOWFLAKE"
    ASTROID_ELLIPSOID = "ASTROID_ELLIPSOID"
    BUTTERFLY_CURVE = "BUTTERFLY_CURVE"
    ARCHIMEDEAN_SPIRAL = "ARCHIMEDEAN_SPIRAL"
    CATENARY_SURFACE = "CATENARY_SURFACE"
    BERNOULLI_LEMNISCATE = "BERNOULLI_LEMNISCATE"


ALL_SHAPES: tuple[VisualShape, ...] = tuple(VisualShape)

SHAPE_LABELS = {
    VisualShape.SPHERE: "Cosmic Sphere",
    VisualShape.GALAXY_SPIRAL: "Andromeda Spiral",
    VisualShape.LORENZ_ATTRACTOR: "Lorenz Chaos",
    VisualShape.MOBIUS_STRIP: "Infinity Loop",
    VisualShape.MENGER_SPONGE_APPROX: "Quantum Fractal",
    VisualShape.PENROSE_TRIANGLE_APPROX: "Impossible Triangle",
    VisualShape.CARDIOID_HEART: "Heartbeat",
    VisualShape.DNA_HELIX: "Life Helix",
    VisualShape.CUBE_GRID: "Matrix Grid",
    VisualShape.TORUS: "Flux Torus",
    VisualShape.KLEIN_BOTTLE: "Klein Manifold",
    VisualShape.VOXEL_GRID: "Digital Voxel",
    VisualShape.CYBER_FLOWER: "Neon Lotus",
    VisualShape.LIQUID_WAVE: "Sonic Rain",
    VisualShape.PULSING_BLACK_HOLE: "Event Horizon",
    VisualShape.AIZAWA_ATTRACTOR: "Aizawa Nebula",
    VisualShape.THOMAS_ATTRACTOR: "Thomas Cycler",
    VisualShape.CLIFFORD_ATTRACTOR: "Clifford Field",
    VisualShape.KOCH_SNOWFLAKE: "Koch Fractal",
    VisualShape.ASTROID_ELLIPSOID: "Hyper Star",
    VisualShape.BUTTERFLY_CURVE: "Chaos Butterfly",
    VisualShape.ARCHIMEDEAN_SPIRAL: "Golden Spiral",
    VisualShape.CATENARY_SURFACE: "Catenoid Tube",
    VisualShape.BERNOULLI_LEMNISCATE: "Infinity Ribbon",
}

# Particle pool capacity (the "High" particle setting)
PARTICLE_CAPACITY = 40000

# Analyser window; yields FFT_SIZE // 2 frequency bins per frame
ANALYSER_FFT_SIZE = 512

DEFAULT_COLORS: tuple[str, str, str] = ("#ffffff", "#88ccff", "#ff00aa")


def parse_shape(value) -> VisualShape:
    """
    Resolve a shape member from an enum member or its name.

    Raises:
        ValueError: If the value does not name a catalog member.
    """
    if isinstance(value, VisualShape):
        return value
    if isinstance(value, str):
        key = value.strip().upper().replace("-", "_")
        try:
            return VisualShape[key]
        except KeyError:
            pass
    raise ValueError(f"Unknown shape: {value!r}")


@dataclass(frozen=True)
class VisualConfig:
    """Per-track visual identity. Replaced wholesale, never mutated."""

    shape: VisualShape = VisualShape.SPHERE
    colors: tuple[str, str, str] = DEFAULT_COLORS
    speed: float = 1.0   # 0.5 = ambient, 2.5 = techno
    chaos: float = 0.5   # 0 = ordered, 1 = entropy
    description: str = "Waiting for music..."

    def __post_init__(self):
        if len(self.colors) != 3:
            raise ValueError(f"colors must have exactly 3 entries, got {len(self.colors)}")
        # Normalise lists coming from JSON into the tuple form
        object.__setattr__(self, "colors", tuple(self.colors))


@dataclass
class VisualSettings:
    """User-tunable render parameters; never affect geometry."""

    particle_count: int = 15000
    particle_size: float = 1.0
    brightness: float = 1.0
    bloom_intensity: float = 1.5
    trail_strength: float = 0.5  # controls warp / flow

    def visible_count(self, capacity: int) -> int:
        """Particles eligible for display, capped at the pool capacity."""
        return max(0, min(int(self.particle_count), int(capacity)))


@dataclass
class AnimationConfig:
    """Timing and smoothing constants for the frame controller."""

    # Shape switching (wall-clock seconds)
    switch_base_interval: float = 6.0
    switch_loudness_threshold: float = 0.5
    force_switch_after: float = 15.0
    switch_chaos_gain: float = 0.2

    # Position blending
    base_lerp: float = 0.03
    loudness_lerp: float = 0.08
    speed_lerp_gain: float = 0.2
    grip_blend_cutoff: float = 0.5
    shimmer_threshold: float = 0.8
    shimmer_gain: float = 0.5

    # Signal smoothing (per-frame lerp factors)
    grip_smoothing: float = 0.1
    rain_smoothing: float = 0.05
    touch_smoothing: float = 0.2
    color_smoothing: float = 0.1

    # Shader-facing scalars
    hue_rotation_speed: float = 0.05
    treble_fraction: float = 0.3
    touch_screen_scale: float = 30.0
    size_scale: float = 1.2


DEFAULT_VISUAL_CONFIG = VisualConfig()
DEFAULT_VISUAL_SETTINGS = VisualSettings()

STANDBY_SPEED = 0.3
STANDBY_CHAOS = 0.1
STANDBY_DESCRIPTION = "Standby - Waiting for Music..."
