"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole (perspective) camera looking down -z

Camera responsibilities:
    - Transform (u, v) image coordinates to world-space rays
    - Apply deterministic sub-pixel jitter for anti-aliasing

Ray generation uses normalized device coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
