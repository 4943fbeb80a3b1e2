"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at camera with vertical FOV, aspect ratio and a
        thin-lens aperture for depth of field (aperture 0 = pinhole)

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Sample the lens disk from the caller's random stream
    - Support look-at positioning with up vector

Ray generation uses normalized image coordinates:
    s in [0, 1): left to right across image
    t in [0, 1): bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_ray,
    is_camera_initialized,
    reset_camera,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "reset_camera",
    "is_camera_initialized",
    "get_ray",
    "get_camera_info",
]
