"""Pinhole camera model for primary ray generation.

This module implements the fixed pinhole camera of the renderer. The camera
sits at ``origin`` and looks down -z with +y up; its virtual image plane is
``focal_length`` in front of it and ``viewport_height`` tall, with the width
following from the aspect ratio.

Image coordinates are normalized:
    u in [0, 1]: left to right across the viewport
    v in [0, 1]: bottom to top across the viewport

Pixel rows are numbered from the top of the image, so row 0 maps to the top
of the viewport.

All ray generation is Taichi-compatible for GPU acceleration.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(aspect_ratio=2.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from whitted.core.ray import Ray, make_ray, normalize, vec3
from whitted.core.sampling import jitter_pair

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        viewport_height: Height of the virtual image plane.
        focal_length: Distance from the camera origin to the image plane.
        origin: Camera position in world space (x, y, z).
    """

    aspect_ratio: float
    viewport_height: float = 2.0
    focal_length: float = 1.0
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the aspect ratio, viewport height or focal length is
            not positive.
    """
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"Aspect ratio = {camera.aspect_ratio} must be positive")
    if camera.viewport_height <= 0.0:
        raise ValueError(f"Viewport height = {camera.viewport_height} must be positive")
    if camera.focal_length <= 0.0:
        raise ValueError(f"Focal length = {camera.focal_length} must be positive")

    origin = np.array(camera.origin, dtype=np.float32)
    horizontal = np.array([camera.viewport_height * camera.aspect_ratio, 0.0, 0.0], dtype=np.float32)
    vertical = np.array([0.0, camera.viewport_height, 0.0], dtype=np.float32)
    focal = np.array([0.0, 0.0, camera.focal_length], dtype=np.float32)

    lower_left = origin - horizontal / 2.0 - vertical / 2.0 - focal

    _camera_origin[None] = origin.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray with origin at the camera position and unit direction toward
        the specified point on the image plane.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    return make_ray(origin, normalize(point_on_viewport - origin))


@ti.func
def get_ray_jittered(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    seed: ti.i32,
    sample_index: ti.i32,
) -> Ray:
    """Generate a jittered ray for one sample of a pixel.

    The sub-pixel offsets are drawn from a generator seeded by
    ``(seed, row * width + col, sample_index)``, so the same sample of the
    same pixel always gets the same ray.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        seed: The render seed.
        sample_index: Index of the sample within the pixel.

    Returns:
        A Ray through a jittered point inside the pixel.
    """
    jitter_u, jitter_v = jitter_pair(seed, row * width + col, sample_index)

    u = (ti.cast(col, ti.f32) + jitter_u) / ti.cast(width, ti.f32)
    v = (ti.cast(height - 1 - row, ti.f32) + jitter_v) / ti.cast(height, ti.f32)

    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical, lower_left.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    ll_vec = _lower_left_corner[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "lower_left": (float(ll_vec[0]), float(ll_vec[1]), float(ll_vec[2])),
    }
