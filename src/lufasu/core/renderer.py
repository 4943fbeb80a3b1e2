"""Band-wise renderer driving the path tracing kernels.

This module provides a convenient wrapper around the core integrator that supports:
- Seeding one random stream per pixel from a single render seed
- Rendering the image in bands of rows with progress callbacks
- A generator variant for cooperative progress reporting
- Conversion of the result to float, 8-bit and packed RGB buffers

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.core.renderer import Renderer, RenderSettings
    >>> from lufasu.scene.presets import create_two_sphere_scene
    >>> from lufasu.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_two_sphere_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(200, 100, RenderSettings(samples_per_pixel=16))
    >>> renderer.render()
    >>> pixels = renderer.get_pixels()
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from lufasu.camera.thin_lens import is_camera_initialized
from lufasu.core.integrator import (
    SHADING_MODES,
    get_image_numpy,
    render_rows,
    setup_render_target,
)
from lufasu.core.sampler import seed_streams

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Per-render parameters.

    Attributes:
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_bounces: Scattering events allowed per path before it is cut off.
        seed: Render seed; identical seeds give identical images.
        shading: "path" for path tracing, "normals" for normal visualization.
        rows_per_batch: Rows rendered per kernel launch. None renders the
            whole image in one launch.
        serial: Run the pixel loop on a single thread.
    """

    samples_per_pixel: int = 100
    max_bounces: int = 50
    seed: int = 0
    shading: str = "path"
    rows_per_batch: int | None = None
    serial: bool = False

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces = {self.max_bounces} must be non-negative")
        if self.seed < 0:
            raise ValueError(f"seed = {self.seed} must be non-negative")
        if self.shading not in SHADING_MODES:
            raise ValueError(
                f"Unknown shading mode: {self.shading!r} "
                f"(expected one of {sorted(SHADING_MODES)})"
            )
        if self.rows_per_batch is not None and self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch = {self.rows_per_batch} must be at least 1")


class Renderer:
    """Renders the current scene through the current camera.

    The renderer owns the image dimensions and the render settings and
    delegates to the global integrator buffers (which are Taichi fields).
    The scene and camera must be set up before rendering.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        settings: The RenderSettings used by render().
    """

    def __init__(
        self,
        width: int,
        height: int,
        settings: RenderSettings | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 1024).
            height: Image height in pixels (max 1024).
            settings: Render settings; defaults to RenderSettings().

        Raises:
            ValueError: If dimensions are out of range or settings are invalid.
        """
        self.settings = settings if settings is not None else RenderSettings()
        self.settings.validate()

        self._width = width
        self._height = height
        self._rendered = False
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def rendered(self) -> bool:
        """Whether a complete render is available in the buffer."""
        return self._rendered

    def reset(self) -> None:
        """Clear the color buffer."""
        setup_render_target(self._width, self._height)
        self._rendered = False

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render the full image.

        Args:
            callback: Optional callback function called after each band.
                Receives (rows_done, total_rows).

        Raises:
            RuntimeError: If the camera has not been set up.
            ValueError: If the settings are invalid.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(callback=progress)
        """
        for rows_done, total_rows in self.render_progressive():
            if callback is not None:
                callback(rows_done, total_rows)

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the full image, yielding progress after each band.

        This is a generator-based alternative to render() with callbacks,
        useful for integration with asyncio or iterative processing.

        Yields:
            Tuple of (rows_done, total_rows).
        """
        settings = self.settings
        settings.validate()
        if not is_camera_initialized():
            raise RuntimeError("Camera not set up. Call setup_camera() first.")

        # The render target is global; make sure it matches this renderer
        setup_render_target(self._width, self._height)
        self._rendered = False

        seed_streams(settings.seed, self._width * self._height)
        shading = SHADING_MODES[settings.shading]
        batch = settings.rows_per_batch or self._height

        logger.info(
            "Rendering %dx%d: %d spp, %d max bounces, shading=%s, seed=%d",
            self._width,
            self._height,
            settings.samples_per_pixel,
            settings.max_bounces,
            settings.shading,
            settings.seed,
        )
        start = time.perf_counter()

        row = 0
        while row < self._height:
            row_end = min(row + batch, self._height)
            render_rows(
                row,
                row_end,
                settings.samples_per_pixel,
                settings.max_bounces,
                shading=shading,
                serial=settings.serial,
            )
            row = row_end
            yield (row, self._height)

        self._rendered = True
        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image as a linear NumPy array.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32,
            clamped to [0, 1], row 0 at the top.
        """
        return np.clip(get_image_numpy(), 0.0, 1.0).astype(np.float32)

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Args:
            gamma: Gamma correction value. Default 2.2 for sRGB.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        from lufasu.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy(), gamma=gamma)

    def get_pixels(self, gamma: float = 2.2) -> npt.NDArray[np.uint32]:
        """Get the rendered image as packed 24-bit RGB words.

        Args:
            gamma: Gamma correction value. Default 2.2 for sRGB.

        Returns:
            Flat uint32 array of length width * height, row-major, each
            word r << 16 | g << 8 | b.
        """
        from lufasu.preview.export import pack_rgb

        return pack_rgb(self.get_image_uint8(gamma=gamma))

    def save_image(self, filepath: str, gamma: float = 2.2) -> None:
        """Save the rendered image to a file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 2.2 for sRGB.
        """
        from lufasu.preview.export import save_png_from_array

        save_png_from_array(self.get_image_numpy(), filepath, gamma=gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"spp={self.settings.samples_per_pixel}, rendered={self.rendered})"
        )
