"""Tests for the Lambertian material.

Tests cover:
- Scattering always happens and stays on the normal's side
- Attenuation is the albedo
- Cosine-like distribution of scattered directions
- Registry validation and capacity
"""

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 2048


class TestScatterLambertian:
    """Test scatter_lambertian."""

    def _scatter_many(self, normal):
        from lufasu.core.sampler import seed_streams
        from lufasu.materials.lambertian import scatter_lambertian, vec3

        seed_streams(seed=17, count=N_SAMPLES)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
        scattered = ti.field(dtype=ti.i32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel(nx: ti.f32, ny: ti.f32, nz: ti.f32):
            n = vec3(nx, ny, nz).normalized()
            for i in range(N_SAMPLES):
                d, a, s = scatter_lambertian(vec3(0.8, 0.5, 0.2), n, i)
                directions[i] = d
                attenuations[i] = a
                scattered[i] = s

        test_kernel(*normal)
        return directions.to_numpy(), attenuations.to_numpy(), scattered.to_numpy()

    def test_always_scatters(self):
        """Diffuse surfaces never absorb the path."""
        _, _, scattered = self._scatter_many((0.0, 1.0, 0.0))
        assert np.all(scattered == 1)

    def test_attenuation_is_albedo(self):
        """The attenuation equals the albedo for every sample."""
        _, attenuations, _ = self._scatter_many((0.0, 1.0, 0.0))
        np.testing.assert_allclose(attenuations, np.tile([0.8, 0.5, 0.2], (N_SAMPLES, 1)), atol=1e-6)

    @pytest.mark.parametrize("normal", [(0.0, 1.0, 0.0), (1.0, 1.0, 0.0), (0.0, 0.0, -1.0)])
    def test_directions_are_unit_and_not_below_surface(self, normal):
        """Scattered directions are unit length and not into the surface."""
        directions, _, _ = self._scatter_many(normal)
        n = np.array(normal) / np.linalg.norm(normal)

        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)
        assert np.all(directions @ n >= -1e-5)

    def test_distribution_leans_toward_normal(self):
        """Directions cluster around the normal."""
        directions, _, _ = self._scatter_many((0.0, 1.0, 0.0))

        # normal + uniform ball has a mean cosine well above a uniform
        # hemisphere's 0.5
        assert directions[:, 1].mean() > 0.6
        assert abs(directions[:, 0].mean()) < 0.05
        assert abs(directions[:, 2].mean()) < 0.05


class TestLambertianRegistry:
    """Test Lambertian material storage."""

    def test_add_and_read_back(self):
        """Albedos are stored and readable from kernels."""
        from lufasu.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.1, 0.2, 0.3))
        idx = add_lambertian_material((0.4, 0.5, 0.6))
        assert idx == 1
        assert get_lambertian_material_count() == 2

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_lambertian_albedo(1)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((0.4, 0.5, 0.6))

    @pytest.mark.parametrize("albedo", [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_invalid_albedo(self, albedo):
        """Albedo components outside [0, 1] are rejected."""
        from lufasu.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError, match="Albedo"):
            add_lambertian_material(albedo)

    def test_capacity(self):
        """Exceeding MAX_LAMBERTIAN_MATERIALS raises RuntimeError."""
        from lufasu.materials.lambertian import (
            MAX_LAMBERTIAN_MATERIALS,
            add_lambertian_material,
            num_lambertian_materials,
        )

        num_lambertian_materials[None] = MAX_LAMBERTIAN_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number of Lambertian"):
            add_lambertian_material((0.5, 0.5, 0.5))
