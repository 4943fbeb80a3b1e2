"""Ideal diffuse (Lambertian) surfaces.

The scattered direction is the normal plus a uniform point in the unit ball,
which leans toward the normal roughly like cos(theta). The estimator weight of
a bounce is then just the albedo, and a diffuse hit never ends the path.

Example:
    >>> # inside a kernel, with an albedo, unit normal and stream at hand
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal, stream)
"""

import taichi as ti
import taichi.math as tm

from lufasu.core.ray import near_zero
from lufasu.core.sampler import random_in_unit_sphere

vec3 = tm.vec3

MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Reject reflectances that would add energy to a path.

    Raises:
        ValueError: If any channel lies outside [0, 1].
    """
    for channel, value in zip("RGB", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo {channel} = {value} must lie in [0, 1]")


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Bounce off a diffuse surface.

    Args:
        albedo: Reflectance per channel.
        normal: Outward unit normal at the hit.
        stream: Random stream of the current pixel.

    Returns:
        (scattered_direction, attenuation, did_scatter) with a unit
        direction, the albedo as attenuation and did_scatter == 1.
    """
    direction = normal + random_in_unit_sphere(stream)

    # normal + p can cancel to (almost) nothing
    if near_zero(direction):
        direction = normal

    did_scatter = 1
    return tm.normalize(direction), albedo, did_scatter


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a diffuse material and return its registry slot.

    Raises:
        ValueError: If the albedo is out of range.
        RuntimeError: If MAX_LAMBERTIAN_MATERIALS slots are in use.
    """
    validate_albedo(albedo)

    slot = int(num_lambertian_materials[None])
    if slot >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded")

    lambertian_albedos[slot] = albedo
    num_lambertian_materials[None] = slot + 1
    return slot


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(slot: ti.i32) -> vec3:
    return lambertian_albedos[slot]
