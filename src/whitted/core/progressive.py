"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks for UI updates
- Easy reset and re-render functionality

Samples keep their per-pixel index across batches, so rendering 16 samples
in batches of 4 draws the same jittered rays as rendering them in one call.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.progressive import ProgressiveRenderer
    >>> from whitted.scene.manager import SceneManager
    >>> from whitted.scene.presets import create_showcase_scene
    >>> from whitted.camera.pinhole import PinholeCamera, setup_camera
    >>>
    >>> SceneManager().load(create_showcase_scene())
    >>> setup_camera(PinholeCamera(aspect_ratio=2.0))
    >>>
    >>> renderer = ProgressiveRenderer(400, 200)
    >>> renderer.render(16, batch_size=4)
    >>> image = renderer.get_image_numpy()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from whitted.core.integrator import (
    DEFAULT_SEED,
    RenderSettings,
    clear_render_target,
    get_buffer,
    get_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
    validate_render_args,
)
from whitted.core.shading import ShadingMode
from whitted.preview.display import apply_gamma
from whitted.preview.export import quantize, save_image

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    This class wraps the core integrator functions to provide a convenient
    interface for progressive rendering with support for:
    - Incremental sample accumulation
    - Batch rendering (multiple SPP per call)
    - Progress callbacks
    - Reset functionality

    The renderer renders whatever scene and camera are currently loaded
    into the Taichi fields, and delegates to the global integrator buffers.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        mode: Shading function used for every sample.
        max_depth: Bounce budget of the recursive mode.
        seed: Seed of the per-pixel jitter.
    """

    def __init__(
        self,
        width: int,
        height: int,
        mode: ShadingMode = ShadingMode.RECURSIVE,
        max_depth: int = 5,
        seed: int = DEFAULT_SEED,
    ) -> None:
        """Initialize the progressive renderer.

        Raises:
            ValueError: If dimensions, depth or seed are out of range.
        """
        validate_render_args(width, height, 1, max_depth, seed)
        self._width = width
        self._height = height
        self.mode = ShadingMode(mode)
        self.max_depth = max_depth
        self.seed = seed
        setup_render_target(width, height)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "ProgressiveRenderer":
        """Create a renderer matching RenderSettings (samples are not rendered)."""
        return cls(
            settings.width,
            settings.height,
            mode=settings.mode,
            max_depth=settings.max_depth,
            seed=settings.seed,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions exceed maximum supported size.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def _render_batch(self, batch: int) -> None:
        render_image(batch, mode=self.mode, max_depth=self.max_depth, seed=self.seed)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
                A larger batch size reduces callback overhead but provides
                less frequent updates.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Example:
            >>> for current, target in renderer.render_progressive(100, batch_size=10):
            ...     print(f"Progress: {current}/{target} samples")
        """
        if batch_size <= 0:
            raise ValueError(f"Batch size = {batch_size} must be positive")
        if num_samples <= 0:
            return

        start_samples = self.sample_count
        target_samples = start_samples + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            self._render_batch(batch)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_buffer(self) -> npt.NDArray[np.float32]:
        """Get the averaged colors as a flat (width * height, 3) buffer."""
        return get_buffer()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).
                Use 2.2 for sRGB display.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        return apply_gamma(get_image_numpy(), gamma)

    def get_image_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        """Get the rendered image quantized to 8 bits per channel.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        return quantize(self.get_image_numpy(gamma=gamma))

    def save_image(self, filepath: str, gamma: float = 1.0) -> None:
        """Save the rendered image to a .ppm or Pillow-supported file."""
        save_image(self.get_buffer(), self.width, self.height, filepath, gamma=gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"mode={self.mode.name}, samples={self.sample_count})"
        )
