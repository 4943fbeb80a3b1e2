"""Preview module for output and visualization.

Components:
    display: Gamma encoding and the Matplotlib preview window
    export: 8-bit conversion, packed RGB words and PNG export

Example:
    >>> from lufasu.preview import save_png, show_preview
    >>> from lufasu.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(400, 200)
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer, "output.png", gamma=2.2)
"""

from lufasu.preview.display import (
    apply_gamma,
    process_image_for_display,
    show_preview,
)
from lufasu.preview.export import (
    image_to_uint8,
    pack_rgb,
    save_png,
    save_png_from_array,
    unpack_rgb,
)

__all__ = [
    # Display functions
    "show_preview",
    "apply_gamma",
    "process_image_for_display",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "pack_rgb",
    "unpack_rgb",
]
