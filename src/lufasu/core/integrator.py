"""Path tracing integrator and render kernels.

The path tracer estimates the radiance through each pixel by averaging many
random camera paths. A path is traced with an explicit loop carrying
(ray, throughput, depth):

    - miss: the path ends and picks up throughput * sky gradient
    - absorbed (material declined to scatter): the path ends, black
    - scattered: throughput *= attenuation, continue from the hit point
    - still bouncing after max_bounces scatters: the path ends, black

Truncating at the bounce limit is a deliberate bias that keeps the work
per path bounded.

Rendering is data-parallel over pixels: the outermost loop of the render
kernel runs rows of pixels on Taichi's worker pool. Each pixel draws from its
own random stream (see lufasu.core.sampler) and writes only its own slot in
the color buffer, so no synchronization is needed and the result depends
only on the seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.core.integrator import render_rows, setup_render_target
    >>> from lufasu.scene.presets import create_two_sphere_scene
    >>> from lufasu.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_two_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(200, 100)
    >>> render_rows(0, 100, samples_per_pixel=16, max_bounces=50)
"""

import taichi as ti
import taichi.math as tm

from lufasu.camera.thin_lens import get_ray, is_camera_initialized
from lufasu.core.ray import Ray
from lufasu.core.sampler import MAX_STREAMS, random_float
from lufasu.materials.dielectric import get_dielectric_index, scatter_dielectric
from lufasu.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from lufasu.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from lufasu.scene.intersection import intersect_scene
from lufasu.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection; t_min keeps a scattered ray from
# re-hitting the surface it starts on
T_MIN = 1e-4
T_MAX = 1e10

# Shading modes
SHADING_PATH = 0
SHADING_NORMALS = 1

SHADING_MODES = {"path": SHADING_PATH, "normals": SHADING_NORMALS}

# Sky gradient: white near the horizon below, blue straight up
DEFAULT_BACKGROUND_TOP = (0.0, 0.0, 1.0)
DEFAULT_BACKGROUND_BOTTOM = (1.0, 1.0, 1.0)

# =============================================================================
# Background
# =============================================================================

_background_top = ti.Vector.field(3, dtype=ti.f32, shape=())
_background_bottom = ti.Vector.field(3, dtype=ti.f32, shape=())

# 1 once set_background has run; render_rows falls back to the default gradient
_background_configured = ti.field(dtype=ti.i32, shape=())


def set_background(
    top: tuple[float, float, float],
    bottom: tuple[float, float, float],
) -> None:
    """Configure the sky gradient seen by rays that escape the scene.

    Args:
        top: Linear color for a ray pointing straight up (y = 1).
        bottom: Linear color for a ray pointing straight down (y = -1).
    """
    _background_top[None] = [top[0], top[1], top[2]]
    _background_bottom[None] = [bottom[0], bottom[1], bottom[2]]
    _background_configured[None] = 1


def reset_background() -> None:
    """Restore the default white-to-blue sky gradient."""
    set_background(DEFAULT_BACKGROUND_TOP, DEFAULT_BACKGROUND_BOTTOM)


def get_background() -> tuple[tuple[float, ...], tuple[float, ...]]:
    """Get the current (top, bottom) background colors."""
    top = _background_top[None]
    bottom = _background_bottom[None]
    return (
        (float(top[0]), float(top[1]), float(top[2])),
        (float(bottom[0]), float(bottom[1]), float(bottom[2])),
    )


@ti.func
def background_color(direction: vec3) -> vec3:
    """Blend the sky gradient by the vertical component of a unit direction.

    y = -1 gives exactly the bottom color, y = 1 exactly the top color.
    """
    a = 0.5 * (direction.y + 1.0)
    return (1.0 - a) * _background_bottom[None] + a * _background_top[None]


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Buffers are allocated once at the largest size so a resize never recompiles
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

assert MAX_IMAGE_WIDTH * MAX_IMAGE_HEIGHT <= MAX_STREAMS

# Active image size; only the top-left [height, width] block is used
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Averaged linear color per pixel, indexed [row, col] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# 1 after setup_render_target, 0 after reset_render_target
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Select the active image size and zero the color buffer.

    Args:
        width: Image width in pixels (1..MAX_IMAGE_WIDTH).
        height: Image height in pixels (1..MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are outside the supported range.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def reset_render_target() -> None:
    """Mark the render target as not configured."""
    _render_target_initialized[None] = 0


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming unit ray direction.
        normal: The outward surface normal.
        stream: Random stream for the material's draws.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the path.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, did_scatter = scatter_lambertian(
            albedo, normal, stream
        )

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal, stream
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        refractive_index = get_dielectric_index(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            refractive_index, incident_direction, normal, stream
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace(ray: Ray, max_bounces: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The camera (or scattered) ray.
        max_bounces: Number of scattering events allowed before the path
            is cut off. 0 means only the background is ever visible.
        stream: Random stream for all material draws on this path.

    Returns:
        The linear RGB radiance estimate for this path.
    """
    origin = ray.origin
    direction = ray.direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Taichi doesn't support break in ti.func loops; track liveness instead
    active = 1

    for _ in range(max_bounces + 1):
        if active == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * background_color(direction)
                active = 0
            elif rec.has_normal == 0:
                # No surface orientation to scatter about
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, stream
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return radiance


@ti.func
def shade_normal(ray: Ray) -> vec3:
    """Debug shading: map the first hit's unit normal to RGB.

    Misses show the background gradient.
    """
    rec = intersect_scene(ray.origin, ray.direction, T_MIN, T_MAX)
    color = background_color(ray.direction)
    if rec.hit == 1 and rec.has_normal == 1:
        color = 0.5 * (rec.normal + vec3(1.0, 1.0, 1.0))
    return color


@ti.func
def render_pixel(
    row: ti.i32,
    col: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_bounces: ti.i32,
    shading: ti.i32,
) -> vec3:
    """Average ``samples_per_pixel`` jittered samples for one pixel.

    Row 0 is the top of the image, while the camera's t = 0 is the bottom
    edge, so rows are flipped here. The pixel index row * width + col is
    also the pixel's random stream.

    Returns:
        The mean linear color over all samples.
    """
    stream = row * width + col
    inv_width = 1.0 / ti.cast(width, ti.f32)
    inv_height = 1.0 / ti.cast(height, ti.f32)

    total = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        s = (ti.cast(col, ti.f32) + random_float(stream)) * inv_width
        t = (ti.cast(height - 1 - row, ti.f32) + random_float(stream)) * inv_height
        ray = get_ray(s, t, stream)

        sample = vec3(0.0, 0.0, 0.0)
        if shading == SHADING_NORMALS:
            sample = shade_normal(ray)
        else:
            sample = trace(ray, max_bounces, stream)

        # Drop NaN/Inf samples so one bad path cannot poison the pixel
        for c in ti.static(range(3)):
            if tm.isnan(sample[c]) or tm.isinf(sample[c]):
                sample[c] = 0.0

        total += sample

    return total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_bounces: ti.i32,
    shading: ti.i32,
    serial: ti.template(),
):
    """Render rows [row_start, row_end) into the color buffer.

    With serial=True the pixel loop runs on a single thread; this is the
    reference the parallel version must match byte for byte.
    """
    ti.loop_config(serialize=serial)
    for row, col in ti.ndrange((row_start, row_end), width):
        _color_buffer[row, col] = render_pixel(
            row, col, width, height, samples_per_pixel, max_bounces, shading
        )


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    row_start: int,
    row_end: int,
    samples_per_pixel: int,
    max_bounces: int,
    shading: int = SHADING_PATH,
    serial: bool = False,
) -> None:
    """Render a band of rows with the current scene and camera.

    The caller is responsible for seeding the random streams first
    (lufasu.core.sampler.seed_streams) for reproducible output.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.
        samples_per_pixel: Number of samples averaged per pixel.
        max_bounces: Bounce limit per path.
        shading: SHADING_PATH or SHADING_NORMALS.
        serial: Run the pixel loop on a single thread.

    Raises:
        RuntimeError: If the render target or camera has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    if _background_configured[None] == 0:
        reset_background()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) is outside [0, {height})")

    _render_rows(
        row_start,
        row_end,
        width,
        height,
        samples_per_pixel,
        max_bounces,
        shading,
        bool(serial),
    )


def get_image_numpy():
    """Get the averaged linear image as a NumPy array.

    Returns:
        Array of shape (height, width, 3), dtype float32, row 0 at the top.
        Values are not clamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return full_image[:height, :width, :].copy()
