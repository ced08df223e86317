"""
Strange-attractor point clouds (Lorenz, Aizawa, Thomas, Clifford).

Each cloud is traced by integrating a 3-variable ODE with a small fixed
Euler step, writing one particle per step. The trajectory is reseeded with
a randomized perturbation every ``stride`` particles, so the cloud is made
of several independent segments instead of one endless orbit.

Segments never share state, so all of them are integrated side by side as
rows of one (n_segments, 3) array. Row ``s`` at step ``k`` is exactly the
particle at index ``s * stride + k`` of the sequential formulation.
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np


@dataclass(frozen=True)
class AttractorSpec:
    """Integration constants for one attractor family."""

    dt: float
    stride: int            # reseed every `stride` particles
    output_scale: float
    jitter: float          # chaos-driven scatter amplitude


LORENZ = AttractorSpec(dt=0.005, stride=500, output_scale=0.8, jitter=1.0)
AIZAWA = AttractorSpec(dt=0.01, stride=500, output_scale=15.0, jitter=1.0)
THOMAS = AttractorSpec(dt=0.05, stride=1000, output_scale=32.0, jitter=1.5)
CLIFFORD = AttractorSpec(dt=0.005, stride=500, output_scale=6.0, jitter=1.0)

_LORENZ_SIGMA = 10.0
_LORENZ_RHO = 28.0
_LORENZ_BETA = 8.0 / 3.0
_LORENZ_Z_CENTER = 25.0

_AIZAWA = (0.95, 0.7, 0.6, 3.5, 0.25, 0.1)  # a, b, c, d, e, f
_THOMAS_B = 0.208186
_CLIFFORD_A = 1.4


# ---------------------------------------------------------------------------
# Derivatives (vectorized over segments)
# ---------------------------------------------------------------------------

def _lorenz(p: np.ndarray) -> np.ndarray:
    x, y, z = p[:, 0], p[:, 1], p[:, 2]
    return np.stack(
        [
            _LORENZ_SIGMA * (y - x),
            x * (_LORENZ_RHO - z) - y,
            x * y - _LORENZ_BETA * z,
        ],
        axis=1,
    )


def _aizawa(p: np.ndarray) -> np.ndarray:
    a, b, c, d, e, f = _AIZAWA
    x, y, z = p[:, 0], p[:, 1], p[:, 2]
    return np.stack(
        [
            (z - b) * x - d * y,
            d * x + (z - b) * y,
            c + a * z - z ** 3 / 3.0 - (x ** 2 + y ** 2) * (1.0 + e * z) + f * z * x ** 3,
        ],
        axis=1,
    )


def _thomas(p: np.ndarray) -> np.ndarray:
    x, y, z = p[:, 0], p[:, 1], p[:, 2]
    return np.stack(
        [
            np.sin(y) - _THOMAS_B * x,
            np.sin(z) - _THOMAS_B * y,
            np.sin(x) - _THOMAS_B * z,
        ],
        axis=1,
    )


def _clifford(p: np.ndarray) -> np.ndarray:
    # Cyclically symmetric quadratic flow (Halvorsen form)
    a = _CLIFFORD_A
    x, y, z = p[:, 0], p[:, 1], p[:, 2]
    return np.stack(
        [
            -a * x - 4.0 * y - 4.0 * z - y * y,
            -a * y - 4.0 * z - 4.0 * x - z * z,
            -a * z - 4.0 * x - 4.0 * y - x * x,
        ],
        axis=1,
    )


# ---------------------------------------------------------------------------
# Reseed points
# ---------------------------------------------------------------------------

def _lorenz_seeds(n: int, rng: np.random.Generator) -> np.ndarray:
    seeds = np.full((n, 3), 0.1)
    seeds[:, 0] += (rng.random(n) - 0.5) * 10.0
    return seeds


def _aizawa_seeds(n: int, rng: np.random.Generator) -> np.ndarray:
    seeds = np.zeros((n, 3))
    seeds[:, 0] = 0.1 + (rng.random(n) - 0.5) * 2.0
    return seeds


def _thomas_seeds(n: int, rng: np.random.Generator) -> np.ndarray:
    seeds = np.full((n, 3), 0.1)
    seeds[:, 0] += (rng.random(n) - 0.5) * 2.0
    return seeds


def _clifford_seeds(n: int, rng: np.random.Generator) -> np.ndarray:
    seeds = np.zeros((n, 3))
    seeds[:, 0] = 1.0 + (rng.random(n) - 0.5)
    return seeds


def trace_segments(
    count: int,
    spec: AttractorSpec,
    deriv: Callable[[np.ndarray], np.ndarray],
    seeds: Callable[[int, np.random.Generator], np.ndarray],
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Integrate ``ceil(count / stride)`` independent trajectory segments.

    Args:
        count: Number of particles to produce.
        spec: Step size and reseed stride.
        deriv: Vectorized derivative, (n, 3) -> (n, 3).
        seeds: Reseed positions for n segments.
        rng: Random source for the reseed perturbation.

    Returns:
        (count, 3) float64 array of raw attractor coordinates.
    """
    if count <= 0:
        return np.zeros((0, 3))

    n_segments = -(-count // spec.stride)
    steps = min(spec.stride, count)
    state = seeds(n_segments, rng)
    trace = np.empty((n_segments, steps, 3))

    for k in range(steps):
        state = state + deriv(state) * spec.dt
        bad = ~np.isfinite(state).all(axis=1)
        if np.any(bad):
            # Escaped segment: restart it from a fresh seed
            state[bad] = seeds(int(bad.sum()), rng)
        trace[:, k] = state

    return trace.reshape(-1, 3)[:count]


def _finish(pts: np.ndarray, spec: AttractorSpec, chaos: float, rng: np.random.Generator) -> np.ndarray:
    jitter = (rng.random(pts.shape) - 0.5) * chaos * spec.jitter
    return pts * spec.output_scale + jitter


def lorenz_cloud(count: int, chaos: float, rng: np.random.Generator) -> np.ndarray:
    pts = trace_segments(count, LORENZ, _lorenz, _lorenz_seeds, rng)
    pts[:, 2] -= _LORENZ_Z_CENTER
    return _finish(pts, LORENZ, chaos, rng)


def aizawa_cloud(count: int, chaos: float, rng: np.random.Generator) -> np.ndarray:
    pts = trace_segments(count, AIZAWA, _aizawa, _aizawa_seeds, rng)
    return _finish(pts, AIZAWA, chaos, rng)


def thomas_cloud(count: int, chaos: float, rng: np.random.Generator) -> np.ndarray:
    pts = trace_segments(count, THOMAS, _thomas, _thomas_seeds, rng)
    return _finish(pts, THOMAS, chaos, rng)


def clifford_cloud(count: int, chaos: float, rng: np.random.Generator) -> np.ndarray:
    pts = trace_segments(count, CLIFFORD, _clifford, _clifford_seeds, rng)
    return _finish(pts, CLIFFORD, chaos, rng)
