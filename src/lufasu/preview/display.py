"""Gamma encoding and a Matplotlib window for finished renders.

The renderer produces linear radiance. Monitors expect gamma-encoded values,
so everything shown or saved goes through ``apply_gamma`` first.

Example:
    >>> from lufasu.core.renderer import Renderer
    >>> from lufasu.preview.display import show_preview
    >>>
    >>> renderer = Renderer(400, 200)
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from lufasu.core.renderer import Renderer


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Encode linear values as ``value ** (1 / gamma)``.

    Inputs are clamped to [0, 1] first. Gamma 1 is the identity and returns
    the array unchanged.

    Args:
        image: Linear (H, W, 3) image.
        gamma: Display gamma, 2.2 for a typical sRGB monitor.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma = {gamma} must be positive")
    if gamma == 1.0:
        return image

    encoded = np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma)
    return encoded.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Linear image in, gamma-encoded float32 image in [0, 1] out."""
    encoded = apply_gamma(image.copy(), gamma)
    return np.clip(encoded, 0.0, 1.0).astype(np.float32)


def show_preview(
    renderer: Renderer,
    *,
    gamma: float = 2.2,
    title: str | None = None,
    figsize: tuple[float, float] = (10, 5),
    block: bool = True,
) -> None:
    """Open a Matplotlib figure showing the renderer's current image.

    Args:
        renderer: Renderer whose buffer is displayed.
        gamma: Display gamma.
        title: Figure title; by default the image size and sample count.
        figsize: Figure size in inches.
        block: Passed to ``plt.show``.
    """
    import matplotlib.pyplot as plt

    if title is None:
        title = (
            f"lufasu - {renderer.width}x{renderer.height}, "
            f"{renderer.settings.samples_per_pixel} SPP"
        )

    fig, ax = plt.subplots(figsize=figsize)
    ax.imshow(process_image_for_display(renderer.get_image_numpy(), gamma=gamma))
    ax.set_title(title)
    ax.axis("off")
    fig.tight_layout()
    plt.show(block=block)
