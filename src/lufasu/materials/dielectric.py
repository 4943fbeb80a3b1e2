"""Dielectrics: clear media such as glass or water.

At each hit the ray either reflects or refracts. Which side it is on comes
from the sign of dot(d, n) against the outward normal; a positive value means
the ray is leaving the medium. Refraction follows Snell's law
(n1 sin(theta1) = n2 sin(theta2)). When no refracted direction exists the ray
reflects (total internal reflection); otherwise it reflects with the Schlick
probability. Nothing is absorbed, so attenuation is white.

Example:
    >>> # inside a kernel
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refractive_index, ray_direction, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from lufasu.core.ray import reflect, refract, schlick
from lufasu.core.sampler import random_bool

vec3 = tm.vec3

MAX_DIELECTRIC_MATERIALS = 256

dielectric_indices = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


@ti.func
def dielectric_interface(refractive_index: ti.f32, incident_direction: vec3, normal: vec3):
    """Work out which side of the surface the ray is on.

    Args:
        refractive_index: Refractive index of the material.
        incident_direction: The incoming unit ray direction.
        normal: The outward surface normal.

    Returns:
        A tuple (facing_normal, index_ratio, cosine). facing_normal points
        toward the incident side, index_ratio is n_incident / n_transmitted,
        and cosine is the Schlick cosine.
    """
    d_dot_n = tm.dot(incident_direction, normal)
    facing_normal = normal
    index_ratio = 1.0 / refractive_index
    cosine = -d_dot_n
    if d_dot_n > 0.0:
        # Leaving the material
        facing_normal = -normal
        index_ratio = refractive_index
        cosine = refractive_index * d_dot_n
    return facing_normal, index_ratio, cosine


@ti.func
def scatter_dielectric(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered direction for a dielectric material.

    Args:
        refractive_index: Refractive index of the material.
        incident_direction: The incoming unit ray direction.
        normal: The outward surface normal.
        stream: Random stream used for the reflect/refract choice.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The normalized reflected or refracted direction.
        - attenuation: White (1, 1, 1).
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    facing_normal, index_ratio, cosine = dielectric_interface(
        refractive_index, incident_direction, normal
    )
    refracted, can_refract = refract(incident_direction, facing_normal, index_ratio)

    direction = reflect(incident_direction, normal)
    if can_refract == 1:
        if random_bool(stream, schlick(cosine, refractive_index)) == 0:
            direction = refracted

    did_scatter = 1
    return tm.normalize(direction), attenuation, did_scatter


def add_dielectric_material(refractive_index: float = 1.5) -> int:
    """Store a dielectric and return its registry slot.

    Typical indices: water 1.33, glass 1.5, diamond 2.4. The surrounding
    medium is always vacuum (index 1).

    Raises:
        ValueError: If refractive_index < 1.
        RuntimeError: If MAX_DIELECTRIC_MATERIALS slots are in use.
    """
    if refractive_index < 1.0:
        raise ValueError(f"Refractive index = {refractive_index} must be at least 1")

    slot = int(num_dielectric_materials[None])
    if slot >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded")

    dielectric_indices[slot] = refractive_index
    num_dielectric_materials[None] = slot + 1
    return slot


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_index(slot: ti.i32) -> ti.f32:
    return dielectric_indices[slot]
