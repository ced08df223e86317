"""Tests for the procedural shape generators."""

import numpy as np
import pytest

from nebulamorph.config import ALL_SHAPES, VisualShape
from nebulamorph.core.shapes import SHAPE_GENERATORS, generate_shape


def _total_variance(flat: np.ndarray) -> float:
    return float(flat.reshape(-1, 3).astype(np.float64).var(axis=0).sum())


class TestGenerateShape:
    """Output contract shared by every shape."""

    def test_catalog_is_complete(self):
        """Every catalog member has a dedicated generator."""
        assert set(SHAPE_GENERATORS) == set(VisualShape)
        assert len(ALL_SHAPES) == 24

    @pytest.mark.parametrize("shape", list(VisualShape))
    @pytest.mark.parametrize("count", [0, 1, 100, 10000])
    def test_length_and_finiteness(self, shape, count):
        """Output has 3*count finite float32 values."""
        out = generate_shape(shape, count, chaos=0.5, rng=np.random.default_rng(1))

        assert out.dtype == np.float32
        assert out.shape == (3 * count,)
        assert np.all(np.isfinite(out))

    @pytest.mark.parametrize("shape", [VisualShape.SPHERE, VisualShape.LORENZ_ATTRACTOR])
    @pytest.mark.parametrize("chaos", [0.0, 1.0])
    def test_chaos_extremes_are_finite(self, shape, chaos):
        out = generate_shape(shape, 2000, chaos=chaos, rng=np.random.default_rng(3))
        assert np.all(np.isfinite(out))

    def test_negative_count_is_empty(self):
        out = generate_shape(VisualShape.TORUS, -5)
        assert out.shape == (0,)

    def test_shape_name_string_accepted(self):
        """Shapes can be given by name."""
        a = generate_shape("TORUS", 500, rng=np.random.default_rng(9))
        b = generate_shape(VisualShape.TORUS, 500, rng=np.random.default_rng(9))
        np.testing.assert_array_equal(a, b)

    def test_unknown_shape_falls_back_to_cube_fill(self):
        """Unrecognized shapes produce a uniform cube of half-size 15."""
        out = generate_shape("NOT_A_SHAPE", 5000, rng=np.random.default_rng(2)).reshape(-1, 3)

        assert np.all(np.abs(out) <= 15.0 + 1e-4)
        # Filled volume, not a surface
        assert out.std(axis=0).min() > 7.0

    def test_same_seed_is_reproducible(self):
        a = generate_shape(VisualShape.GALAXY_SPIRAL, 3000, 0.4, np.random.default_rng(11))
        b = generate_shape(VisualShape.GALAXY_SPIRAL, 3000, 0.4, np.random.default_rng(11))
        np.testing.assert_array_equal(a, b)


class TestShapeGeometry:
    """Family-specific geometry checks."""

    def test_sphere_chaos_zero_has_radius_ten(self):
        out = generate_shape(VisualShape.SPHERE, 1000, chaos=0.0, rng=np.random.default_rng(0))
        radii = np.linalg.norm(out.reshape(-1, 3), axis=1)
        np.testing.assert_allclose(radii, 10.0, atol=1e-4)

    def test_sphere_radius_bounded_by_chaos(self):
        out = generate_shape(VisualShape.SPHERE, 5000, chaos=1.0, rng=np.random.default_rng(0))
        radii = np.linalg.norm(out.reshape(-1, 3), axis=1)
        assert radii.min() >= 10.0 - 1e-4
        assert radii.max() <= 15.0 + 1e-4

    def test_voxel_grid_snaps_at_zero_chaos(self):
        """Chaos 0 voxel points sit on the lattice."""
        out = generate_shape(VisualShape.VOXEL_GRID, 3000, chaos=0.0, rng=np.random.default_rng(4))
        step = 50.0 / 6
        ratio = out.astype(np.float64) / step
        np.testing.assert_allclose(ratio, np.round(ratio), atol=1e-3)

    def test_cube_grid_draws_lattice_lines(self):
        """At chaos 0, two of the three coordinates lie on grid planes."""
        pts = generate_shape(VisualShape.CUBE_GRID, 3000, chaos=0.0, rng=np.random.default_rng(5))
        pts = pts.reshape(-1, 3).astype(np.float64)
        spacing = 30.0 / 6
        on_grid = np.isclose((pts + 15.0) / spacing, np.round((pts + 15.0) / spacing), atol=1e-3)
        assert np.all(on_grid.sum(axis=1) >= 2)

    def test_black_hole_core_is_compact(self):
        """The first fifth of the particles form the core sphere."""
        n = 5000
        pts = generate_shape(
            VisualShape.PULSING_BLACK_HOLE, n, chaos=0.0, rng=np.random.default_rng(6)
        ).reshape(-1, 3)
        core = np.linalg.norm(pts[: n // 5], axis=1)
        disk = np.linalg.norm(pts[n // 5 + 1:], axis=1)
        assert core.max() <= 6.0 + 1e-4
        assert disk.min() >= 7.9

    @pytest.mark.parametrize(
        "shape",
        [
            VisualShape.SPHERE,
            VisualShape.TORUS,
            VisualShape.DNA_HELIX,
            VisualShape.VOXEL_GRID,
            VisualShape.MOBIUS_STRIP,
            VisualShape.CATENARY_SURFACE,
            VisualShape.PENROSE_TRIANGLE_APPROX,
        ],
    )
    def test_variance_grows_with_chaos(self, shape):
        """Same seed, higher chaos: the cloud is more spread out."""
        low = generate_shape(shape, 10000, chaos=0.1, rng=np.random.default_rng(21))
        high = generate_shape(shape, 10000, chaos=0.9, rng=np.random.default_rng(21))
        assert _total_variance(high) > _total_variance(low)
