"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the vector helpers shared by the
geometry and material code. Rays always carry a unit-length direction; the
normalization happens once, in make_ray().

Coordinate system: x is right, y is up, z points *towards* the viewer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def demo() -> ti.f32:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 5.0).z  # -5.0, direction was normalized
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Unit length when the
            ray was built with make_ray().
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a non-zero direction.

    The direction is normalized here so every Ray in the renderer has a unit
    direction. Passing a zero vector is a caller bug; it is only caught when
    Taichi runs with ``debug=True``.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray with a normalized direction.
    """
    assert length_squared(direction) > 0.0, "ray direction must be non-zero"
    return Ray(origin=origin, direction=tm.normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Useful for detecting degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident vector about a unit normal: d - 2(d.n)n.

    The sign of the normal does not matter.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, index_ratio: ti.f32):
    """Refract a direction through a surface using Snell's law.

    The normal must face the side the incident ray comes from, i.e.
    dot(incident, normal) <= 0.

    Args:
        incident: The incoming direction vector.
        normal: The outward-facing unit normal on the incident side.
        index_ratio: n_incident / n_transmitted.

    Returns:
        A tuple (refracted, ok). ``ok`` is 0 on total internal reflection,
        in which case ``refracted`` is the zero vector.
    """
    unit = tm.normalize(incident)
    cos_theta = tm.dot(unit, normal)
    discriminant = 1.0 - index_ratio * index_ratio * (1.0 - cos_theta * cos_theta)
    refracted = vec3(0.0, 0.0, 0.0)
    ok = 0
    if discriminant > 0.0:
        refracted = index_ratio * (unit - cos_theta * normal) - normal * ti.sqrt(discriminant)
        ok = 1
    return refracted, ok


@ti.func
def schlick(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Fresnel reflectance using Schlick's approximation.

    r0 = ((1 - n) / (1 + n))^2
    R(cos) = r0 + (1 - r0) (1 - cos)^5

    Args:
        cosine: Cosine of the incidence angle.
        refractive_index: Refractive index of the material.

    Returns:
        The approximate reflectance.
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    m = 1.0 - cosine
    m2 = m * m
    return r0 + (1.0 - r0) * m2 * m2 * m
