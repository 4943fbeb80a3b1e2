"""Pytest configuration for lufasu tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material, background and camera state around each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized first
    from lufasu.camera.thin_lens import reset_camera
    from lufasu.core.integrator import reset_background, reset_render_target
    from lufasu.materials.dielectric import clear_dielectric_materials
    from lufasu.materials.lambertian import clear_lambertian_materials
    from lufasu.materials.metal import clear_metal_materials
    from lufasu.scene.intersection import clear_scene
    from lufasu.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_background()
        reset_camera()
        reset_render_target()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()
