"""Tests for the path tracing integrator.

This module tests the core path tracing functionality including:
- Render target setup and management
- The sky gradient background
- trace() termination cases (miss, absorption, bounce limit)
- Normal shading
- Band-wise and serial rendering determinism

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run, so module-level
imports of modules containing ti.field() declarations would fail.
"""

import numpy as np
import pytest
import taichi as ti


def _setup_demo_camera(aspect_ratio=1.0):
    from lufasu.camera.thin_lens import ThinLensCamera, setup_camera

    setup_camera(
        ThinLensCamera(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=90.0,
            aspect_ratio=aspect_ratio,
        )
    )


def _trace(origin, direction, max_bounces=50, samples=1):
    """Trace ``samples`` paths along one ray and return their radiance."""
    from lufasu.core.integrator import trace
    from lufasu.core.ray import make_ray, vec3
    from lufasu.core.sampler import seed_streams

    seed_streams(seed=0, count=samples)
    out = ti.Vector.field(3, dtype=ti.f32, shape=samples)

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        bounces: ti.i32,
    ):
        for i in range(samples):
            out[i] = trace(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), bounces, i)

    test_kernel(*origin, *direction, max_bounces)
    return out.to_numpy()


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_render_target_sets_dimensions(self):
        """Test that setup_render_target records the image size."""
        from lufasu.core.integrator import get_image_dimensions, get_image_numpy, setup_render_target

        setup_render_target(64, 48)

        assert get_image_dimensions() == (64, 48)
        image = get_image_numpy()
        assert image.shape == (48, 64, 3)
        assert np.all(image == 0.0)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (2048, 10), (10, 2048)])
    def test_setup_render_target_rejects_bad_sizes(self, width, height):
        """Test that out-of-range dimensions raise ValueError."""
        from lufasu.core.integrator import setup_render_target

        with pytest.raises(ValueError, match="Image dimensions"):
            setup_render_target(width, height)

    def test_render_without_camera_raises(self):
        """Test that rendering before setup_camera raises RuntimeError."""
        from lufasu.core.integrator import render_rows, setup_render_target

        setup_render_target(8, 8)
        with pytest.raises(RuntimeError, match="Camera not set up"):
            render_rows(0, 8, samples_per_pixel=1, max_bounces=1)

    def test_get_image_requires_render_target(self):
        """Test that reading the image before setup raises RuntimeError."""
        from lufasu.core.integrator import get_image_numpy, reset_render_target, setup_render_target

        setup_render_target(4, 4)
        reset_render_target()
        with pytest.raises(RuntimeError, match="Render target not set up"):
            get_image_numpy()

    def test_render_rows_rejects_bad_range(self):
        """Test that a row band outside the image raises ValueError."""
        from lufasu.core.integrator import render_rows, setup_render_target

        setup_render_target(8, 8)
        _setup_demo_camera()
        with pytest.raises(ValueError, match="Row range"):
            render_rows(4, 9, samples_per_pixel=1, max_bounces=1)


class TestBackground:
    """Test the sky gradient."""

    def _background(self, directions):
        from lufasu.core.integrator import background_color

        n = len(directions)
        dirs = ti.Vector.field(3, dtype=ti.f32, shape=n)
        dirs.from_numpy(np.array(directions, dtype=np.float32))
        out = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                out[i] = background_color(dirs[i])

        test_kernel()
        return out.to_numpy()

    def test_default_gradient_endpoints(self):
        """y = 1 gives blue, y = -1 white, y = 0 their midpoint."""
        colors = self._background([(0, 1, 0), (0, -1, 0), (1, 0, 0)])

        np.testing.assert_allclose(colors[0], [0.0, 0.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(colors[1], [1.0, 1.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(colors[2], [0.5, 0.5, 1.0], atol=1e-6)

    def test_custom_background(self):
        """set_background changes both ends of the gradient."""
        from lufasu.core.integrator import get_background, set_background

        set_background(top=(0.2, 0.4, 0.6), bottom=(1.0, 0.0, 0.0))
        colors = self._background([(0, 1, 0), (0, -1, 0), (0, 0, 1)])

        np.testing.assert_allclose(colors[0], [0.2, 0.4, 0.6], atol=1e-6)
        np.testing.assert_allclose(colors[1], [1.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(colors[2], [0.6, 0.2, 0.3], atol=1e-6)
        assert get_background()[0] == pytest.approx((0.2, 0.4, 0.6))

    def test_reset_background(self):
        """reset_background restores the default gradient."""
        from lufasu.core.integrator import (
            DEFAULT_BACKGROUND_BOTTOM,
            DEFAULT_BACKGROUND_TOP,
            get_background,
            reset_background,
            set_background,
        )

        set_background(top=(0.0, 0.0, 0.0), bottom=(0.0, 0.0, 0.0))
        reset_background()
        assert get_background() == (DEFAULT_BACKGROUND_TOP, DEFAULT_BACKGROUND_BOTTOM)


class TestTrace:
    """Test the path tracing loop."""

    def test_empty_scene_returns_background(self):
        """A ray that hits nothing sees the sky."""
        radiance = _trace((0, 0, 0), (0, 1, 0))
        np.testing.assert_allclose(radiance[0], [0.0, 0.0, 1.0], atol=1e-6)

    def test_zero_bounces_on_hit_is_black(self):
        """With max_bounces = 0 any surface hit terminates black."""
        from lufasu.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -2.0), 1.0, (0.5, 0.5, 0.5))

        radiance = _trace((0, 0, 0), (0, 0, -1), max_bounces=0)
        np.testing.assert_allclose(radiance[0], 0.0)

    def test_zero_bounces_on_miss_is_background(self):
        """With max_bounces = 0 a miss still sees the sky."""
        radiance = _trace((0, 0, 0), (0, -1, 0), max_bounces=0)
        np.testing.assert_allclose(radiance[0], [1.0, 1.0, 1.0], atol=1e-6)

    def test_mirror_reflects_sky(self):
        """A perfect mirror facing up shows the sky attenuated by its albedo."""
        from lufasu.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, -101.0, 0.0), 100.0, albedo=(0.5, 0.5, 0.5), fuzz=0.0)

        radiance = _trace((0, 0, 0), (0, -1, 0), max_bounces=5)
        # Straight down, reflected straight up: top color times albedo
        np.testing.assert_allclose(radiance[0], [0.0, 0.0, 0.5], atol=1e-5)

    def test_glass_is_transparent_to_sky(self):
        """Looking up through a glass sphere still ends at the sky."""
        from lufasu.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 3.0, 0.0), 1.0, refractive_index=1.5)

        radiance = _trace((0, 0, 0), (0, 1, 0), max_bounces=10, samples=64)
        # Dielectric attenuation is white, so every path picks up sky
        assert np.all(radiance.sum(axis=1) > 0.0)
        assert np.all(radiance <= 1.0 + 1e-5)

    def test_radiance_bounded_by_background(self):
        """Albedo <= 1 keeps every path at or below the brightest sky color."""
        from lufasu.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (1.0, 1.0, 1.0))
        scene.add_metal_sphere((0.0, -100.5, -1.0), 100.0, (1.0, 1.0, 1.0), fuzz=0.5)

        radiance = _trace((0, 0, 0), (0, -0.3, -1), max_bounces=50, samples=256)
        assert np.all(radiance >= 0.0)
        assert np.all(radiance <= 1.0 + 1e-5)


class TestNormalShading:
    """Test the normal visualization mode."""

    def test_normal_shading_maps_normal_to_rgb(self):
        """The center pixel of the demo view shows the sphere's +z normal."""
        from lufasu.core.integrator import SHADING_NORMALS, get_image_numpy, render_rows, setup_render_target
        from lufasu.core.sampler import seed_streams
        from lufasu.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        _setup_demo_camera()

        size = 21
        setup_render_target(size, size)
        seed_streams(seed=0, count=size * size)
        render_rows(0, size, samples_per_pixel=4, max_bounces=1, shading=SHADING_NORMALS)
        image = get_image_numpy()

        center = image[size // 2, size // 2]
        np.testing.assert_allclose(center, [0.5, 0.5, 1.0], atol=0.05)
        # Corners miss the sphere and show the background
        assert image[0, 0][2] == pytest.approx(1.0, abs=1e-5)


class TestRenderDeterminism:
    """Test that renders depend only on the seed."""

    def _render(self, seed, bands, serial=False, size=(24, 12)):
        from lufasu.core.integrator import get_image_numpy, render_rows, setup_render_target
        from lufasu.core.sampler import seed_streams

        width, height = size
        setup_render_target(width, height)
        seed_streams(seed=seed, count=width * height)
        for row_start, row_end in bands:
            render_rows(row_start, row_end, samples_per_pixel=4, max_bounces=8, serial=serial)
        return get_image_numpy()

    def _build_scene(self):
        from lufasu.scene.presets import create_two_sphere_scene

        create_two_sphere_scene()
        _setup_demo_camera(aspect_ratio=2.0)

    def test_same_seed_identical(self):
        """Two renders with the same seed are bit-identical."""
        self._build_scene()
        first = self._render(7, [(0, 12)])
        second = self._render(7, [(0, 12)])
        np.testing.assert_array_equal(first, second)

    def test_bands_match_full_render(self):
        """Splitting rows into bands produces the same image."""
        self._build_scene()
        full = self._render(7, [(0, 12)])
        banded = self._render(7, [(0, 5), (5, 6), (6, 12)])
        np.testing.assert_array_equal(full, banded)

    def test_serial_matches_parallel(self):
        """The single-threaded reference kernel produces the same image."""
        self._build_scene()
        parallel = self._render(7, [(0, 12)])
        serial = self._render(7, [(0, 12)], serial=True)
        np.testing.assert_array_equal(parallel, serial)

    def test_different_seed_differs(self):
        """A different seed changes the noise."""
        self._build_scene()
        first = self._render(7, [(0, 12)])
        second = self._render(8, [(0, 12)])
        assert not np.array_equal(first, second)
