"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure and vector utilities
    sampler: Per-pixel random-number streams
    integrator: Iterative path tracing loop and render kernels
    renderer: Host-side Renderer driving the kernels band by band

The integrator solves the rendering equation by Monte Carlo estimation:
each pixel averages many jittered camera paths, each path bouncing until
it escapes to the sky, is absorbed, or runs out of bounces.

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    schlick,
    vec3,
)
from .sampler import (
    MAX_STREAMS,
    random_bool,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    seed_streams,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from lufasu.core.integrator or lufasu.core.renderer when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "near_zero",
    "reflect",
    "refract",
    "schlick",
    "MAX_STREAMS",
    "seed_streams",
    "random_float",
    "random_bool",
    "random_in_unit_disk",
    "random_in_unit_sphere",
]
