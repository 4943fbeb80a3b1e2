"""Sphere storage and the nearest-hit query.

Spheres live in parallel fields (centers, radii, material ids) indexed by
insertion order. A query scans all of them; there is no acceleration
structure. The material id stored with each sphere is copied into the hit
record for the integrator's scatter dispatch.

Example:
    >>> from lufasu.core.ray import vec3
    >>> from lufasu.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=0)
    0
"""

import taichi as ti
import taichi.math as tm

from lufasu.geometry.sphere import HitRecord, hit_sphere, make_miss_record, make_sphere

vec3 = tm.vec3

MAX_SPHERES = 1024

# One slot per sphere, filled in insertion order
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Forget all spheres; their slots are reused by later add_sphere calls."""
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Store a sphere and return its slot.

    The material id is not checked here; SceneManager.add_sphere does that.

    Raises:
        ValueError: If radius <= 0.
        RuntimeError: If all MAX_SPHERES slots are taken.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    slot = int(num_spheres[None])
    if slot >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[slot] = center
    sphere_radii[slot] = radius
    sphere_material_ids[slot] = material_id
    num_spheres[None] = slot + 1
    return slot


def get_sphere_count() -> int:
    return int(num_spheres[None])


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the nearest intersection of a ray with all spheres.

    Each sphere is tested with the current best t as its upper bound, so
    farther hits are pruned as the scan proceeds. The best record is only
    replaced on a strictly smaller t: on an exact tie the earlier sphere
    wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Smallest accepted t (inclusive).
        t_max: Upper bound on t (exclusive).

    Returns:
        The closest HitRecord with material_id filled in, or a miss record.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = make_sphere(sphere_centers[i], sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = HitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                has_normal=rec.has_normal,
                material_id=sphere_material_ids[i],
            )

    return result

