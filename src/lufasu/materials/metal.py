"""Metals: mirror reflection blurred by a fuzz sphere.

The mirror direction is reflect(d, n) = d - 2 (d . n) n. Adding fuzz times a
random point in the unit ball spreads it into a glossy lobe. Directions that
end up at or below the tangent plane are absorbed, which happens mostly at
grazing angles with large fuzz.

Example:
    >>> # inside a kernel
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, ray_direction, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from lufasu.core.ray import near_zero, reflect
from lufasu.core.sampler import random_in_unit_sphere
from lufasu.materials.lambertian import validate_albedo

vec3 = tm.vec3

MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Reflect off a metal surface.

    Args:
        albedo: Reflectance per channel.
        fuzz: Radius of the blur sphere, 0 for a perfect mirror.
        incident_direction: Unit direction of the arriving ray.
        normal: Outward unit normal at the hit.
        stream: Random stream of the current pixel.

    Returns:
        (scattered_direction, attenuation, did_scatter). When the blurred
        direction points into the surface did_scatter is 0 and the direction
        is the zero vector.
    """
    lobe = reflect(incident_direction, normal) + fuzz * random_in_unit_sphere(stream)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    if not near_zero(lobe):
        unit = tm.normalize(lobe)
        if tm.dot(unit, normal) > 0.0:
            scattered_direction = unit
            did_scatter = 1

    return scattered_direction, albedo, did_scatter


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Store a metal material and return its registry slot.

    Raises:
        ValueError: If the albedo or fuzz lies outside [0, 1].
        RuntimeError: If MAX_METAL_MATERIALS slots are in use.
    """
    validate_albedo(albedo)
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(f"Fuzz = {fuzz} must lie in [0, 1] (0 is a perfect mirror)")

    slot = int(num_metal_materials[None])
    if slot >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[slot] = albedo
    metal_fuzzes[slot] = fuzz
    num_metal_materials[None] = slot + 1
    return slot


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(slot: ti.i32) -> vec3:
    return metal_albedos[slot]


@ti.func
def get_metal_fuzz(slot: ti.i32) -> ti.f32:
    return metal_fuzzes[slot]
