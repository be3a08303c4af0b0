"""Camera sampler and render entry points.

This module implements the main rendering kernel: for every pixel it
generates jittered camera rays, shades them with the configured ShadingMode
and accumulates the sample colors. The final pixel color is the arithmetic
mean of its samples.

A single kernel serves every shading mode; the mode, bounce budget and seed
are kernel arguments. Jitter offsets are derived from ``(seed, pixel,
sample)``, so a render is reproducible no matter how Taichi schedules the
pixel loop, and rendering N samples in one call or in several batches draws
the same rays.

Key features:
    - Unified sampler for normals, shadows and recursive shading
    - Deterministic per-pixel jitter for anti-aliasing
    - Progressive sample accumulation into a preallocated render target

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.integrator import render, to_image
    >>> from whitted.scene.presets import create_basic_scene
    >>> scene = create_basic_scene()
    >>> buffer = render(200, 100, scene.spheres, scene.lights, samples_per_pixel=4)
    >>> image = to_image(buffer, 200, 100)  # (100, 200, 3)
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from whitted.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera
from whitted.core.shading import MAX_RECURSION_DEPTH, ShadingMode, shade
from whitted.scene.manager import SceneManager
from whitted.scene.model import PointLight, Scene, SphereInfo

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Seed used when the caller does not pick one
DEFAULT_SEED = 42

# Seeds are hashed as unsigned 32-bit integers but passed as i32
MAX_SEED = 2**31 - 1


@dataclass
class RenderSettings:
    """Configuration of a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Bounce budget of the recursive shading mode.
        seed: Seed of the per-pixel jitter.
        mode: Shading function used for every sample.
    """

    width: int = 400
    height: int = 200
    samples_per_pixel: int = 16
    max_depth: int = 5
    seed: int = DEFAULT_SEED
    mode: ShadingMode = ShadingMode.RECURSIVE


def validate_render_args(width: int, height: int, samples_per_pixel: int, max_depth: int, seed: int) -> None:
    """Check render arguments before any kernel is launched.

    Raises:
        ValueError: If any argument is out of range.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if samples_per_pixel <= 0:
        raise ValueError(f"Samples per pixel = {samples_per_pixel} must be positive")
    if max_depth < 0 or max_depth > MAX_RECURSION_DEPTH:
        raise ValueError(f"Max depth = {max_depth} is outside [0, {MAX_RECURSION_DEPTH}]")
    if seed < 0 or seed > MAX_SEED:
        raise ValueError(f"Seed = {seed} is outside [0, {MAX_SEED}]")


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of sample colors, indexed [row, col] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def reset_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_samples(
    width: ti.i32,
    height: ti.i32,
    first_sample: ti.i32,
    num_samples: ti.i32,
    mode: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
):
    """Shade num_samples jittered rays per pixel and accumulate their sum.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        first_sample: Index of the first sample drawn for every pixel.
        num_samples: Number of samples to add to every pixel.
        mode: ShadingMode value.
        max_depth: Bounce budget of the recursive mode.
        seed: Seed of the per-pixel jitter.
    """
    for row, col in ti.ndrange(height, width):
        color_sum = vec3(0.0, 0.0, 0.0)
        for s in range(num_samples):
            ray = get_ray_jittered(col, row, width, height, seed, first_sample + s)
            color_sum += shade(ray.origin, ray.direction, mode, max_depth)

        _color_buffer[row, col] += color_sum
        _sample_count[row, col] += num_samples


@ti.kernel
def _render_single_sample(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    sample_index: ti.i32,
    mode: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
) -> vec3:
    """Shade one sample of one pixel without touching the render target."""
    ray = get_ray_jittered(col, row, width, height, seed, sample_index)
    return shade(ray.origin, ray.direction, mode, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_sample(
    col: int,
    row: int,
    sample_index: int = 0,
    mode: ShadingMode = ShadingMode.RECURSIVE,
    max_depth: int = 5,
    seed: int = DEFAULT_SEED,
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = top).
        sample_index: Index of the sample within the pixel.
        mode: Shading function to use.
        max_depth: Bounce budget of the recursive mode.
        seed: Seed of the per-pixel jitter.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_sample(
        col, row, width, height, sample_index, int(mode), max_depth, seed
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(
    num_samples: int = 1,
    mode: ShadingMode = ShadingMode.RECURSIVE,
    max_depth: int = 5,
    seed: int = DEFAULT_SEED,
) -> None:
    """Add samples to every pixel of the render target.

    Can be called multiple times to add more samples; each call continues
    the per-pixel sample sequence where the previous one stopped.

    Args:
        num_samples: Number of samples to render per pixel.
        mode: Shading function to use.
        max_depth: Bounce budget of the recursive mode.
        seed: Seed of the per-pixel jitter.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If any argument is out of range.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    validate_render_args(width, height, num_samples, max_depth, seed)

    first_sample = get_total_samples()
    _render_samples(width, height, first_sample, num_samples, int(mode), max_depth, seed)


def get_total_samples() -> int:
    """Get the number of samples rendered so far per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_image_numpy() -> np.ndarray:
    """Get the averaged image as a NumPy array.

    The array shape is (height, width, 3) with dtype float32, row 0 at the
    top. Pixels without samples are black.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    color_sum = _color_buffer.to_numpy()[:height, :width, :]
    counts = _sample_count.to_numpy()[:height, :width]

    image = np.zeros((height, width, 3), dtype=np.float32)
    sampled = counts > 0
    image[sampled] = color_sum[sampled] / counts[sampled][:, np.newaxis]
    return image


def get_buffer() -> np.ndarray:
    """Get the averaged image as a flat (width * height, 3) buffer, row-major."""
    image = get_image_numpy()
    return image.reshape(-1, 3)


def to_image(buffer: np.ndarray, width: int, height: int) -> np.ndarray:
    """Reshape a flat row-major color buffer to (height, width, 3).

    Raises:
        ValueError: If the buffer does not hold width * height colors.
    """
    buffer = np.asarray(buffer)
    if buffer.shape != (width * height, 3):
        raise ValueError(
            f"Buffer of shape {buffer.shape} does not match a {width}x{height} image"
        )
    return buffer.reshape(height, width, 3)


def render(
    width: int,
    height: int,
    spheres: Sequence[SphereInfo],
    lights: Sequence[PointLight],
    max_depth: int = 5,
    samples_per_pixel: int = 16,
    seed: int = DEFAULT_SEED,
    mode: ShadingMode = ShadingMode.RECURSIVE,
    camera: PinholeCamera | None = None,
) -> np.ndarray:
    """Render a scene of spheres and point lights.

    Loads the scene into the Taichi fields, sets up the camera and render
    target, and averages samples_per_pixel jittered samples per pixel.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        spheres: Spheres in intersection order.
        lights: Point lights (may be empty for the normals mode).
        max_depth: Bounce budget of the recursive mode.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        seed: Seed of the per-pixel jitter.
        mode: Shading function used for every sample.
        camera: Camera to render from. Defaults to a pinhole camera at the
            origin matching the image aspect ratio.

    Returns:
        A float32 array of shape (width * height, 3), row-major, row 0 at
        the top of the image.

    Raises:
        ValueError: If any argument or scene element is invalid.
        RuntimeError: If the scene exceeds a capacity limit.
    """
    validate_render_args(width, height, samples_per_pixel, max_depth, seed)

    scene = Scene(spheres=tuple(spheres), lights=tuple(lights))
    manager = SceneManager()
    manager.load(scene)

    if camera is None:
        camera = PinholeCamera(aspect_ratio=width / height)
    setup_camera(camera)
    setup_render_target(width, height)

    mode = ShadingMode(mode)
    logger.info(
        "Rendering %dx%d, %d spp, depth %d, mode %s, %d spheres, %d lights",
        width,
        height,
        samples_per_pixel,
        max_depth,
        mode.name,
        len(scene.spheres),
        len(scene.lights),
    )
    start = time.perf_counter()
    render_image(samples_per_pixel, mode=mode, max_depth=max_depth, seed=seed)
    buffer = get_buffer()
    logger.info("Render finished in %.2fs", time.perf_counter() - start)

    return buffer


def render_scene(
    scene: Scene,
    settings: RenderSettings | None = None,
    camera: PinholeCamera | None = None,
) -> np.ndarray:
    """Render a Scene with the given RenderSettings.

    See render() for the returned buffer layout.
    """
    if settings is None:
        settings = RenderSettings()
    return render(
        settings.width,
        settings.height,
        scene.spheres,
        scene.lights,
        max_depth=settings.max_depth,
        samples_per_pixel=settings.samples_per_pixel,
        seed=settings.seed,
        mode=settings.mode,
        camera=camera,
    )
