"""
Procedural point-cloud generators for the visual shape catalog.

``generate_shape`` maps (shape, count, chaos) to a flat float32 buffer of
``3 * count`` coordinates. Every family draws the same random arrays in the
same order regardless of chaos, so chaos only ever adds perturbation on top
of an identical base cloud:

  - chaos 0   -> the cleanest form the formula allows (e.g. grid snapped)
  - chaos 1   -> maximal scatter / structural variation

Shape families with no structural chaos term get an isotropic scatter of
``(u - 0.5) * chaos * amplitude``.
"""

import logging
import math
from typing import Callable

import numpy as np

from nebulamorph.config import VisualShape, parse_shape
from nebulamorph.core import attractors

logger = logging.getLogger(__name__)

ShapeFn = Callable[[int, np.ndarray, np.ndarray, float, np.random.Generator], np.ndarray]

_TAU = 2.0 * math.pi
_CUBE_FILL_SIZE = 15.0


def _lerp_range(val: np.ndarray, lo: float, hi: float) -> np.ndarray:
    """Map [0, 1] to [lo, hi]."""
    return lo + val * (hi - lo)


def _spherical(radius, phi, theta) -> np.ndarray:
    """Spherical to cartesian, polar axis along +Y."""
    sin_phi = np.sin(phi)
    return np.stack(
        [radius * sin_phi * np.sin(theta), radius * np.cos(phi), radius * sin_phi * np.cos(theta)],
        axis=1,
    )


def _scatter(rng: np.random.Generator, n: int, chaos: float, amplitude: float) -> np.ndarray:
    return (rng.random((n, 3)) - 0.5) * chaos * amplitude


# ---------------------------------------------------------------------------
# Closed-form families
# ---------------------------------------------------------------------------

def _sphere(n, t, r, chaos, rng):
    theta = _TAU * r[:, 0]
    phi = np.arccos(2.0 * r[:, 1] - 1.0)
    radius = 10.0 + r[:, 2] * chaos * 5.0
    return _spherical(radius, phi, theta)


def _galaxy_spiral(n, t, r, chaos, rng):
    arms = 3 + math.floor(chaos * 4)
    spin = t * arms * _TAU
    distance = np.sqrt(r[:, 0]) * 20.0  # concentrate toward the core
    arm_offset = np.floor(r[:, 1] * arms) / arms * _TAU
    pts = np.stack(
        [
            np.cos(spin + arm_offset) * distance,
            (r[:, 2] - 0.5) * distance * 0.2,
            np.sin(spin + arm_offset) * distance,
        ],
        axis=1,
    )
    return pts + _scatter(rng, n, chaos, 2.0)


def _mobius_strip(n, t, r, chaos, rng):
    u = r[:, 0] * _TAU
    v = _lerp_range(r[:, 1], -1.0, 1.0)
    ring = 10.0 + v / 2.0 * np.cos(u / 2.0)
    pts = np.stack([ring * np.cos(u), ring * np.sin(u), v / 2.0 * np.sin(u / 2.0) * 5.0], axis=1)
    return pts + _scatter(rng, n, chaos, 1.5)


def _cardioid_heart(n, t, r, chaos, rng):
    u = r[:, 0] * math.pi
    v = r[:, 1] * _TAU
    scale = 1.5
    lobe = 16.0 * np.sin(v) ** 3
    pts = scale * np.stack(
        [
            lobe * np.sin(u),
            13.0 * np.cos(v) - 5.0 * np.cos(2 * v) - 2.0 * np.cos(3 * v) - np.cos(4 * v),
            lobe * np.cos(u),
        ],
        axis=1,
    )
    return pts + _scatter(rng, n, chaos, 2.0)


def _dna_helix(n, t, r, chaos, rng):
    turns = 5
    height = _lerp_range(t, -15.0, 15.0)
    angle = t * _TAU * turns
    strand = np.where(np.arange(n) % 2 == 0, 0.0, math.pi)
    wobble = (r[:, 2] - 0.5) * chaos * 2.0
    return np.stack(
        [
            np.cos(angle + strand) * 6.0 + wobble,
            height * 2.0,
            np.sin(angle + strand) * 6.0 + wobble,
        ],
        axis=1,
    )


def _menger_sponge(n, t, r, chaos, rng):
    size = 20.0
    step = size / 3.0
    pts = _lerp_range(r, -size, size)
    keep_structure = rng.random((n, 3)) > chaos
    snapped = np.round(pts / step) * step
    return np.where(keep_structure, snapped, pts)


def _penrose_triangle(n, t, r, chaos, rng):
    leg = np.arange(n) % 3
    pos = _lerp_range(rng.random(n), -10.0, 10.0)
    thickness = 2.0 + chaos
    j = (rng.random((n, 2)) - 0.5) * thickness

    along = pos + 10.0
    pts = np.empty((n, 3))
    pts[:, 2] = j[:, 0]

    base = leg == 0
    pts[base, 0] = pos[base]
    pts[base, 1] = -10.0 + j[base, 1]

    right = leg == 1
    pts[right, 0] = 10.0 - along[right] / 2.0
    pts[right, 1] = -10.0 + along[right] * 0.866

    left = leg == 2
    pts[left, 0] = -10.0 + along[left] / 2.0
    pts[left, 1] = -10.0 + along[left] * 0.866
    return pts


def _cube_grid(n, t, r, chaos, rng):
    # Lattice lines: one free axis per particle, the others snapped
    size = _CUBE_FILL_SIZE
    lines = 7
    spacing = 2.0 * size / (lines - 1)
    free_axis = np.arange(n) % 3
    snapped = -size + spacing * np.minimum(np.floor(r * lines), lines - 1)
    free = _lerp_range(r, -size, size)
    pts = snapped.copy()
    rows = np.arange(n)
    pts[rows, free_axis] = free[rows, free_axis]
    return pts + _scatter(rng, n, chaos, 2.0)


def _torus(n, t, r, chaos, rng):
    major = 15.0
    minor = 5.0 + chaos * 3.0
    u = r[:, 0] * _TAU
    v = r[:, 1] * _TAU
    ring = major + minor * np.cos(v)
    return np.stack([ring * np.cos(u), ring * np.sin(u), minor * np.sin(v)], axis=1)


def _klein_bottle(n, t, r, chaos, rng):
    u = r[:, 0] * _TAU
    v = r[:, 1] * _TAU
    tube = 6.0
    cu2, su2 = np.cos(u / 2.0), np.sin(u / 2.0)
    sv, s2v = np.sin(v), np.sin(2.0 * v)
    temp = tube + cu2 * sv - su2 * s2v
    pts = np.stack([temp * np.cos(u), su2 * sv + cu2 * s2v, temp * np.sin(u)], axis=1) * 2.0
    return pts + _scatter(rng, n, chaos, 1.5)


def _voxel_grid(n, t, r, chaos, rng):
    size = 25.0
    steps = 6
    step_size = size * 2.0 / steps
    pts = np.round(_lerp_range(r, -size, size) / step_size) * step_size
    return pts + _scatter(rng, n, chaos, 2.0)


def _cyber_flower(n, t, r, chaos, rng):
    theta = r[:, 0] * _TAU
    phi = r[:, 1] * math.pi
    k = 4 + math.floor(chaos * 3)
    radius = 15.0 + 10.0 * np.sin(k * theta) * np.sin(k * phi)
    pts = _spherical(radius, phi, theta)
    pts[::10] *= 0.2  # seed cluster in the middle of the bloom
    return pts


def _liquid_wave(n, t, r, chaos, rng):
    size = 40.0
    cols = max(1, int(math.sqrt(n)))
    idx = np.arange(n)
    row = idx // cols
    col = idx % cols
    wobble = rng.random((n, 3)) - 0.5
    return np.stack(
        [
            _lerp_range(col / cols, -size, size) + wobble[:, 0] * 2.0,
            wobble[:, 1] * chaos * 4.0,
            _lerp_range(row / cols, -size, size) + wobble[:, 2] * 2.0,
        ],
        axis=1,
    )


def _pulsing_black_hole(n, t, r, chaos, rng):
    core_u = rng.random((n, 3))
    height_u = rng.random(n)

    # Core sphere: the first 20% of the particles
    core = _spherical(5.0 + core_u[:, 2], np.arccos(2.0 * core_u[:, 1] - 1.0), core_u[:, 0] * _TAU)

    # Accretion disk, thinner with distance and twisted
    angle = r[:, 0] * _TAU
    dist = 8.0 + r[:, 1] * 25.0
    height = (height_u - 0.5) * (10.0 / dist)
    twist = angle + dist * 0.2
    disk = np.stack([np.cos(twist) * dist, height, np.sin(twist) * dist], axis=1)

    in_core = (np.arange(n) < n * 0.2)[:, None]
    return np.where(in_core, core, disk) + _scatter(rng, n, chaos, 1.0)


def _koch_snowflake(n, t, r, chaos, rng):
    # Sphere with spherical-harmonic style spikes
    theta = r[:, 0] * _TAU
    phi = r[:, 1] * math.pi
    spikes = 4 + math.floor(chaos * 4)
    harmonic = np.sqrt(np.abs(np.sin(spikes * theta) * np.cos(spikes * phi)))
    radius = 12.0 + harmonic * 10.0 * (0.5 + r[:, 2])
    return _spherical(radius, phi, theta) + _scatter(rng, n, chaos, 1.0)


def _astroid_ellipsoid(n, t, r, chaos, rng):
    u = r[:, 0] * _TAU
    v = _lerp_range(r[:, 1], -math.pi / 2.0, math.pi / 2.0)
    a = 18.0
    cv3 = np.cos(v) ** 3
    pts = np.stack([a * np.cos(u) ** 3 * cv3, a * np.sin(u) ** 3 * cv3, a * np.sin(v) ** 3], axis=1)
    return pts + _scatter(rng, n, chaos, 2.0)


def _butterfly_curve(n, t, r, chaos, rng):
    # Temple H. Fay's butterfly, extruded in depth
    theta = r[:, 0] * math.pi * 12.0
    radius = (
        np.exp(np.sin(theta)) - 2.0 * np.cos(4.0 * theta) + np.sin((2.0 * theta - math.pi) / 24.0) ** 5
    ) * 3.0
    depth = _lerp_range(r[:, 1], -5.0, 5.0) * (1.0 + np.abs(radius) * 0.1)
    pts = np.stack([radius * np.cos(theta), radius * np.sin(theta), depth], axis=1)
    return pts + _scatter(rng, n, chaos, 1.5)


def _archimedean_spiral(n, t, r, chaos, rng):
    loops = 10
    theta = t * loops * _TAU
    radius = 1.0 + 0.5 * theta
    tube_radius = 3.0
    tube_angle = r[:, 1] * _TAU
    x = radius * np.cos(theta) + np.cos(tube_angle) * tube_radius
    y = radius * np.sin(theta) + np.sin(tube_angle) * tube_radius
    z = t * 40.0 - 20.0
    # Quarter turn about X so the spiral faces the camera
    pts = np.stack([x, -z, y], axis=1)
    return pts + _scatter(rng, n, chaos, 1.5)


def _catenary_surface(n, t, r, chaos, rng):
    c = 6.0
    u = r[:, 0] * _TAU
    v = _lerp_range(r[:, 1], -12.0, 12.0)
    radius = c * np.cosh(v / c)
    pts = np.stack([radius * np.cos(u), v * 2.5, radius * np.sin(u)], axis=1)
    return pts + _scatter(rng, n, chaos, 1.5)


def _bernoulli_lemniscate(n, t, r, chaos, rng):
    theta = r[:, 0] * _TAU
    a = 20.0
    den = 1.0 + np.sin(theta) ** 2
    x = a * math.sqrt(2.0) * np.cos(theta) / den
    y = a * math.sqrt(2.0) * np.cos(theta) * np.sin(theta) / den
    thickness = 2.0 + np.abs(x) * 0.1
    depth = (r[:, 1] - 0.5) * thickness * 4.0
    twist = x * 0.1
    z = depth * np.cos(twist) - y * np.sin(twist)
    pts = np.stack([x, y, z], axis=1)
    return pts + _scatter(rng, n, chaos, 1.0)


def _cube_fill(n, t, r, chaos, rng):
    return _lerp_range(r, -_CUBE_FILL_SIZE, _CUBE_FILL_SIZE)


def _attractor(cloud) -> ShapeFn:
    def generate(n, t, r, chaos, rng):
        return cloud(n, chaos, rng)
    return generate


SHAPE_GENERATORS: dict[VisualShape, ShapeFn] = {
    VisualShape.SPHERE: _sphere,
    VisualShape.GALAXY_SPIRAL: _galaxy_spiral,
    VisualShape.LORENZ_ATTRACTOR: _attractor(attractors.lorenz_cloud),
    VisualShape.MOBIUS_STRIP: _mobius_strip,
    VisualShape.MENGER_SPONGE_APPROX: _menger_sponge,
    VisualShape.PENROSE_TRIANGLE_APPROX: _penrose_triangle,
    VisualShape.CARDIOID_HEART: _cardioid_heart,
    VisualShape.DNA_HELIX: _dna_helix,
    VisualShape.CUBE_GRID: _cube_grid,
    VisualShape.TORUS: _torus,
    VisualShape.KLEIN_BOTTLE: _klein_bottle,
    VisualShape.VOXEL_GRID: _voxel_grid,
    VisualShape.CYBER_FLOWER: _cyber_flower,
    VisualShape.LIQUID_WAVE: _liquid_wave,
    VisualShape.PULSING_BLACK_HOLE: _pulsing_black_hole,
    VisualShape.AIZAWA_ATTRACTOR: _attractor(attractors.aizawa_cloud),
    VisualShape.THOMAS_ATTRACTOR: _attractor(attractors.thomas_cloud),
    VisualShape.CLIFFORD_ATTRACTOR: _attractor(attractors.clifford_cloud),
    VisualShape.KOCH_SNOWFLAKE: _koch_snowflake,
    VisualShape.ASTROID_ELLIPSOID: _astroid_ellipsoid,
    VisualShape.BUTTERFLY_CURVE: _butterfly_curve,
    VisualShape.ARCHIMEDEAN_SPIRAL: _archimedean_spiral,
    VisualShape.CATENARY_SURFACE: _catenary_surface,
    VisualShape.BERNOULLI_LEMNISCATE: _bernoulli_lemniscate,
}


def _resolve(shape) -> VisualShape | None:
    try:
        return parse_shape(shape)
    except ValueError:
        return None


def generate_shape(
    shape,
    count: int,
    chaos: float = 0.5,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    Generate target positions for a shape.

    Args:
        shape: A VisualShape member or its name. Anything else falls back
            to a uniform cube fill.
        count: Number of particles (negative values are treated as 0).
        chaos: Disorder level in [0, 1].
        rng: Random source; a fresh unseeded generator when omitted.

    Returns:
        Flat float32 array of length ``3 * count`` (x, y, z interleaved).
    """
    count = max(0, int(count))
    if count == 0:
        return np.zeros(0, dtype=np.float32)

    rng = rng if rng is not None else np.random.default_rng()
    chaos = float(chaos)

    kind = _resolve(shape)
    if kind is None:
        logger.debug("Unknown shape %r, using cube fill", shape)
        generator = _cube_fill
    else:
        generator = SHAPE_GENERATORS[kind]

    t = np.arange(count, dtype=np.float64) / count
    r = rng.random((count, 3))
    pts = generator(count, t, r, chaos, rng)
    return np.ascontiguousarray(pts, dtype=np.float32).reshape(-1)
