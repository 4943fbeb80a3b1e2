"""Ready-made scenes.

Each factory clears the global scene, fills it through a SceneManager and
returns the manager together with a matching camera configuration. The camera
is not set up; pass it to ``setup_camera`` before rendering.

Scenes:
    two_spheres: A sphere resting on a huge "ground" sphere, seen through a
        90 degree pinhole camera at the origin. With normal shading this is
        the classic first image of the renderer.
    material_showcase: Diffuse, metal and glass spheres side by side on a
        ground sphere, viewed from above with a wide aperture.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.scene.presets import create_two_sphere_scene
    >>> from lufasu.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_two_sphere_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import math
from collections.abc import Callable

from lufasu.camera.thin_lens import ThinLensCamera
from lufasu.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

CENTER_SPHERE_CENTER = (0.0, 0.0, -1.0)
CENTER_SPHERE_RADIUS = 0.5

GROUND_SPHERE_CENTER = (0.0, -100.5, -1.0)
GROUND_SPHERE_RADIUS = 100.0

# Two-sphere scene materials
DIFFUSE_GRAY_ALBEDO = (0.5, 0.5, 0.5)

# Showcase materials
GROUND_ALBEDO = (0.8, 0.8, 0.0)  # Yellow-green
CENTER_ALBEDO = (0.1, 0.2, 0.5)  # Blue diffuse
GOLD_ALBEDO = (0.8, 0.6, 0.2)
GOLD_FUZZ = 0.0
GLASS_INDEX = 1.5


# =============================================================================
# Scene Factories
# =============================================================================


def create_two_sphere_scene(aspect_ratio: float = 2.0) -> tuple[SceneManager, ThinLensCamera]:
    """Create a diffuse sphere resting on a large ground sphere.

    The camera sits at the origin looking down -Z with a 90 degree vertical
    field of view. For the default 2:1 aspect ratio the focal plane spans
    x in [-2, 2] and y in [-1, 1] at z = -1.

    Args:
        aspect_ratio: Width / height of the intended image.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).

    Example:
        >>> scene, camera = create_two_sphere_scene()
        >>> scene.get_sphere_count()
        2
    """
    scene = SceneManager()

    scene.add_lambertian_sphere(CENTER_SPHERE_CENTER, CENTER_SPHERE_RADIUS, DIFFUSE_GRAY_ALBEDO)
    scene.add_lambertian_sphere(GROUND_SPHERE_CENTER, GROUND_SPHERE_RADIUS, DIFFUSE_GRAY_ALBEDO)

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=1.0,
    )

    return scene, camera


def create_material_showcase_scene(
    aspect_ratio: float = 2.0,
    aperture: float = 2.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create glass, diffuse and metal spheres on a ground sphere.

    Left to right: a glass sphere, a blue diffuse sphere and a polished gold
    sphere. The camera looks down at the middle sphere from (3, 3, 2) and is
    focused on it, so the outer spheres show depth-of-field blur.

    Args:
        aspect_ratio: Width / height of the intended image.
        aperture: Lens diameter; 0 renders everything sharp.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center = scene.add_lambertian_material(albedo=CENTER_ALBEDO)
    glass = scene.add_dielectric_material(refractive_index=GLASS_INDEX)
    gold = scene.add_metal_material(albedo=GOLD_ALBEDO, fuzz=GOLD_FUZZ)

    scene.add_sphere(GROUND_SPHERE_CENTER, GROUND_SPHERE_RADIUS, ground)
    scene.add_sphere(CENTER_SPHERE_CENTER, CENTER_SPHERE_RADIUS, center)
    scene.add_sphere((-1.0, 0.0, -1.0), CENTER_SPHERE_RADIUS, glass)
    scene.add_sphere((1.0, 0.0, -1.0), CENTER_SPHERE_RADIUS, gold)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = CENTER_SPHERE_CENTER

    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=aperture,
        focus_dist=math.dist(lookfrom, lookat),
    )

    return scene, camera


# Preset name -> factory, used by the command-line script
SCENE_PRESETS: dict[str, Callable[..., tuple[SceneManager, ThinLensCamera]]] = {
    "two_spheres": create_two_sphere_scene,
    "material_showcase": create_material_showcase_scene,
}
