"""Independent random-number streams for Monte Carlo sampling.

Every stochastic operation in the renderer takes a ``stream`` argument: an
index into a field of 32-bit generator states. Each pixel owns exactly one
stream while a render runs, so parallel workers never touch the same state
and a render is reproducible from its seed alone.

The generator is a 32-bit LCG whose output passes through an integer hash
(a PCG-style permutation). All multiplier constants stay below 2**31.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.core.sampler import seed_streams, random_float
    >>> seed_streams(seed=7, count=16)
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     return random_float(3)
"""

import taichi as ti
import taichi.math as tm


vec3 = tm.vec3

# One stream per pixel of the largest supported image
MAX_STREAMS = 1024 * 1024

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_HASH_MULTIPLIER = 277803737
_SEED_MULTIPLIER = 747796405

# Rejection sampling gives up after this many tries
MAX_REJECTION_TRIES = 64

_rng_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    """Scramble an LCG state into a well-distributed output word."""
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.cast(
        _HASH_MULTIPLIER, ti.u32
    )
    return (word >> ti.u32(22)) ^ word


@ti.func
def next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream and return its next 32-bit output."""
    state = _rng_state[stream] * ti.cast(_LCG_MULTIPLIER, ti.u32) + ti.cast(
        _LCG_INCREMENT, ti.u32
    )
    _rng_state[stream] = state
    return _permute(state)


@ti.kernel
def _seed_streams(seed: ti.i32, count: ti.i32):
    for i in range(count):
        key = ti.cast(i, ti.u32) * ti.cast(_SEED_MULTIPLIER, ti.u32) + ti.cast(seed, ti.u32)
        _rng_state[i] = _permute(_permute(key) + ti.cast(seed, ti.u32))


def seed_streams(seed: int, count: int) -> None:
    """Seed the first ``count`` streams deterministically.

    Stream ``i`` depends only on ``(seed, i)``, so re-seeding with the same
    value reproduces every stream exactly.

    Args:
        seed: Non-negative seed below 2**31.
        count: Number of streams to seed (at most MAX_STREAMS).

    Raises:
        ValueError: If the seed or count is out of range.
    """
    if not 0 <= seed < 2**31:
        raise ValueError(f"Seed {seed} is outside [0, 2**31)")
    if not 0 <= count <= MAX_STREAMS:
        raise ValueError(f"Stream count {count} is outside [0, {MAX_STREAMS}]")
    _seed_streams(seed, count)


@ti.func
def random_float(stream: ti.i32) -> ti.f32:
    """Uniform float in [0, 1) from the top 24 bits of the next output."""
    return ti.cast(next_u32(stream) >> ti.u32(8), ti.f32) * (1.0 / 16777216.0)


@ti.func
def random_bool(stream: ti.i32, probability: ti.f32) -> ti.i32:
    """Bernoulli draw: 1 with the given probability, else 0."""
    return random_float(stream) < probability


@ti.func
def random_in_unit_disk(stream: ti.i32) -> tm.vec2:
    """Uniform point inside the unit disk, by rejection sampling."""
    p = tm.vec2(0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = tm.vec2(
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
            )
            if tm.dot(p, p) < 1.0:
                found = True
    if not found:
        p = tm.vec2(0.0, 0.0)
    return p


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Uniform point inside the unit ball, by rejection sampling."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
            )
            if tm.dot(p, p) < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p
