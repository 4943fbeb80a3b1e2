"""Sphere primitive with closed-form ray-sphere intersection.

Substituting the ray p(t) = o + t d (with |d| = 1) into |p - c|^2 = r^2
gives the monic quadratic

    t^2 + b t + c' = 0,   b = 2 (oc . d),   c' = oc . oc - r^2

with oc = o - c. The smaller root is tried first; a root is accepted when
t_min <= t < t_max. A small positive t_min keeps a scattered ray from
re-hitting the point it just left.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.geometry.sphere import Sphere, hit_sphere, vec3
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter of the intersection, t_min <= t < t_max.
            Only valid if hit == 1.
        point: The world-space intersection point, ray_at(t).
            Only valid if hit == 1.
        normal: Outward unit normal at the intersection point.
            Only valid if has_normal == 1.
        has_normal: 1 if the primitive has a surface orientation at the hit.
            Volumes such as fog can be hit without having a normal.
        material_id: Unified material ID of the struck primitive, or -1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    has_normal: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        has_normal=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted t (inclusive).
        t_max: Upper bound on t (exclusive).

    Returns:
        A HitRecord for the nearest root in [t_min, t_max). The normal
        always points away from the center, even for hits from inside.
        material_id is left at -1 for the caller to fill in.
    """
    oc = ray_origin - sphere.center
    b = 2.0 * tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Smaller root first, then the far side of the sphere
        t = (-b - sqrt_d) / 2.0
        valid = t_min <= t and t < t_max
        if not valid:
            t = (-b + sqrt_d) / 2.0
            valid = t_min <= t and t < t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = tm.normalize((hit_point - sphere.center) / sphere.radius)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        has_normal=did_hit,
        material_id=-1,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
