"""Tests for the thin-lens camera.

Tests cover:
- Configuration validation
- Basis and viewport computation
- Pinhole ray generation through known image points
- Depth of field: rays converge on the focal plane
"""

import math

import numpy as np
import pytest
import taichi as ti


def _default_camera(**overrides):
    from lufasu.camera.thin_lens import ThinLensCamera

    params = dict(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=2.0,
    )
    params.update(overrides)
    return ThinLensCamera(**params)


def _generate_rays(coords, stream_count=1):
    """Generate one ray per (s, t) pair, each from its own stream."""
    from lufasu.camera.thin_lens import get_ray
    from lufasu.core.sampler import seed_streams

    n = len(coords)
    seed_streams(seed=0, count=max(n, stream_count))
    st = ti.Vector.field(2, dtype=ti.f32, shape=n)
    st.from_numpy(np.array(coords, dtype=np.float32))
    origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def test_kernel():
        for i in range(n):
            ray = get_ray(st[i][0], st[i][1], i)
            origins[i] = ray.origin
            directions[i] = ray.direction

    test_kernel()
    return origins.to_numpy(), directions.to_numpy()


class TestCameraValidation:
    """Test ThinLensCamera.validate."""

    @pytest.mark.parametrize(
        "overrides,match",
        [
            ({"vfov": 0.0}, "vfov"),
            ({"vfov": 180.0}, "vfov"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"aperture": -0.1}, "aperture"),
            ({"focus_dist": 0.0}, "focus_dist"),
            ({"lookat": (0.0, 0.0, 0.0)}, "distinct"),
            ({"vup": (0.0, 0.0, 1.0)}, "parallel"),
        ],
    )
    def test_invalid_configuration(self, overrides, match):
        """Each invalid parameter raises ValueError."""
        from lufasu.camera.thin_lens import setup_camera

        camera = _default_camera(**overrides)
        with pytest.raises(ValueError, match=match):
            setup_camera(camera)

    def test_valid_configuration(self):
        """A valid configuration marks the camera initialized."""
        from lufasu.camera.thin_lens import is_camera_initialized, setup_camera

        assert not is_camera_initialized()
        setup_camera(_default_camera())
        assert is_camera_initialized()


class TestCameraSetup:
    """Test the derived camera state."""

    def test_demo_viewport(self):
        """vfov 90, aspect 2 gives the classic (-2,-1,-1) 4x2 viewport."""
        from lufasu.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_default_camera())
        info = get_camera_info()

        assert info["origin"] == pytest.approx((0.0, 0.0, 0.0))
        assert info["lower_left"] == pytest.approx((-2.0, -1.0, -1.0), abs=1e-5)
        assert info["horizontal"] == pytest.approx((4.0, 0.0, 0.0), abs=1e-5)
        assert info["vertical"] == pytest.approx((0.0, 2.0, 0.0), abs=1e-5)
        assert info["lens_radius"] == pytest.approx((0.0,))

    def test_basis_is_orthonormal(self):
        """u, v, w are unit length and mutually perpendicular."""
        from lufasu.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_default_camera(lookfrom=(3.0, 3.0, 2.0), lookat=(0.0, 0.0, -1.0)))
        info = get_camera_info()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for axis in (u, v, w):
            assert np.linalg.norm(axis) == pytest.approx(1.0, abs=1e-5)
        assert np.dot(u, v) == pytest.approx(0.0, abs=1e-5)
        assert np.dot(u, w) == pytest.approx(0.0, abs=1e-5)
        assert np.dot(v, w) == pytest.approx(0.0, abs=1e-5)
        # w points from lookat back toward lookfrom
        expected_w = np.array([3.0, 3.0, 3.0]) / math.sqrt(27.0)
        np.testing.assert_allclose(w, expected_w, atol=1e-5)

    def test_viewport_scales_with_focus_distance(self):
        """The focal-plane rectangle sits at focus_dist."""
        from lufasu.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_default_camera(focus_dist=3.0, aperture=0.5))
        info = get_camera_info()

        assert info["lower_left"] == pytest.approx((-6.0, -3.0, -3.0), abs=1e-5)
        assert info["horizontal"] == pytest.approx((12.0, 0.0, 0.0), abs=1e-4)
        assert info["lens_radius"] == pytest.approx((0.25,))

    def test_reset_camera(self):
        """reset_camera clears the initialized flag."""
        from lufasu.camera.thin_lens import is_camera_initialized, reset_camera, setup_camera

        setup_camera(_default_camera())
        reset_camera()
        assert not is_camera_initialized()


class TestRayGeneration:
    """Test get_ray."""

    def test_pinhole_rays_through_known_points(self):
        """Pinhole rays start at the origin and pass through the viewport."""
        from lufasu.camera.thin_lens import setup_camera

        setup_camera(_default_camera())
        coords = [(0.5, 0.5), (0.0, 0.0), (1.0, 1.0), (0.25, 0.75)]
        origins, directions = _generate_rays(coords)

        np.testing.assert_allclose(origins, 0.0, atol=1e-6)
        for (s, t), d in zip(coords, directions):
            target = np.array([-2.0 + 4.0 * s, -1.0 + 2.0 * t, -1.0])
            np.testing.assert_allclose(d, target / np.linalg.norm(target), atol=1e-5)

    def test_ray_directions_are_unit(self):
        """Generated rays have unit directions."""
        from lufasu.camera.thin_lens import setup_camera

        setup_camera(_default_camera(aperture=1.0, focus_dist=2.0))
        rng = np.random.default_rng(0)
        coords = rng.random((256, 2)).tolist()
        _, directions = _generate_rays(coords)

        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)

    def test_thin_lens_origins_on_lens_disk(self):
        """With an aperture, ray origins spread over the lens disk."""
        from lufasu.camera.thin_lens import setup_camera

        setup_camera(_default_camera(aperture=1.0, focus_dist=2.0))
        origins, _ = _generate_rays([(0.5, 0.5)] * 512)

        # Lens lies in the u-v plane (z = 0 here) within radius 0.5
        np.testing.assert_allclose(origins[:, 2], 0.0, atol=1e-6)
        radii = np.linalg.norm(origins[:, :2], axis=1)
        assert radii.max() < 0.5 + 1e-6
        assert radii.max() > 0.3

    def test_thin_lens_rays_converge_on_focal_plane(self):
        """All rays for one (s, t) meet at the same focal-plane point."""
        from lufasu.camera.thin_lens import setup_camera

        focus = 2.0
        setup_camera(_default_camera(aperture=1.0, focus_dist=focus))
        s, t = 0.3, 0.6
        origins, directions = _generate_rays([(s, t)] * 128)

        # Intersect each ray with the plane z = -focus
        k = (-focus - origins[:, 2]) / directions[:, 2]
        points = origins + k[:, None] * directions
        target = np.array([focus * (-2.0 + 4.0 * s), focus * (-1.0 + 2.0 * t), -focus])
        np.testing.assert_allclose(points, np.tile(target, (128, 1)), atol=1e-4)
