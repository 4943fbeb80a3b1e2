"""Turning the linear float image into bytes.

Output formats:

    - (H, W, 3) uint8 arrays, gamma encoded and rounded
    - packed 24-bit words, one uint32 per pixel: r << 16 | g << 8 | b
    - 8-bit RGB PNG files written with Pillow

Example:
    >>> from lufasu.preview.export import image_to_uint8, pack_rgb
    >>> pixels = pack_rgb(image_to_uint8(linear_image, gamma=2.2))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from lufasu.preview.display import process_image_for_display

if TYPE_CHECKING:
    from lufasu.core.renderer import Renderer


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Clamp, gamma encode, then scale by 255 and round to the nearest level."""
    encoded = process_image_for_display(image, gamma=gamma)
    return np.rint(encoded * 255.0).astype(np.uint8)


def pack_rgb(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint32]:
    """Pack an (H, W, 3) uint8 image into a flat row-major uint32 buffer.

    Each word is r << 16 | g << 8 | b; the top byte is always zero.

    Raises:
        ValueError: If the image is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    r, g, b = (image[..., c].astype(np.uint32) for c in range(3))
    return ((r << 16) | (g << 8) | b).reshape(-1)


def unpack_rgb(pixels: npt.NDArray[np.uint32], width: int, height: int) -> npt.NDArray[np.uint8]:
    """Inverse of pack_rgb: expand packed words back to an (H, W, 3) image."""
    if pixels.size != width * height:
        raise ValueError(f"Expected {width * height} pixels, got {pixels.size}")

    words = pixels.reshape(height, width).astype(np.uint32)
    image = np.stack([(words >> 16) & 0xFF, (words >> 8) & 0xFF, words & 0xFF], axis=-1)
    return image.astype(np.uint8)


def save_png(
    renderer: Renderer,
    filepath: str,
    *,
    gamma: float = 2.2,
) -> None:
    """Write the renderer's current image to ``filepath`` as an 8-bit PNG."""
    save_png_from_array(renderer.get_image_numpy(), filepath, gamma=gamma)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 2.2,
) -> None:
    """Gamma encode a linear (H, W, 3) image and write it as an RGB PNG.

    Args:
        image: Linear image, row 0 at the top.
        filepath: Destination; Pillow picks the format from the suffix.
        gamma: Encoding gamma.
    """
    PILImage.fromarray(image_to_uint8(image, gamma=gamma)).save(filepath)

