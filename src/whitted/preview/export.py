"""Image export utilities for rendered images.

This module turns the renderer's float color buffer into image files.

Supported formats:
    - PPM (ASCII P3, written directly)
    - PNG (8-bit via Pillow, optional gamma correction)

Colors are quantized to 8 bits per channel with an explicit (min, max)
range:

    clamp(((value - min) / (max - min)) * 255 + 0.5, 0, 255)

truncated toward zero, so values are rounded to the nearest level.

Example:
    >>> from whitted.core.integrator import render
    >>> from whitted.preview.export import save_ppm
    >>>
    >>> buffer = render(400, 200, spheres, lights)
    >>> save_ppm(buffer, 400, 200, "output/spheres.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from whitted.preview.display import apply_gamma

logger = logging.getLogger(__name__)


def quantize(
    colors: npt.ArrayLike,
    min_value: float = 0.0,
    max_value: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Map float colors in [min_value, max_value] to 8-bit levels.

    Args:
        colors: Array of float colors of any shape.
        min_value: Value mapped to level 0.
        max_value: Value mapped to level 255.

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If max_value equals min_value.
    """
    if max_value == min_value:
        raise ValueError(f"Quantization range [{min_value}, {max_value}] is empty")

    scaled = (np.asarray(colors, dtype=np.float64) - min_value) / (max_value - min_value)
    levels = np.clip(scaled * 255.0 + 0.5, 0.0, 255.0)
    return levels.astype(np.uint8)


def encode_ppm_p3(
    width: int,
    height: int,
    colors: npt.ArrayLike,
    path: str | Path,
) -> None:
    """Write quantized colors as an ASCII PPM (P3) file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        colors: 8-bit colors, at least width * height of them, row-major
            with row 0 at the top.
        path: Destination file.

    Raises:
        ValueError: If colors holds fewer than width * height pixels.
        OSError: If the destination cannot be opened or written.
    """
    pixels = np.asarray(colors, dtype=np.uint8).reshape(-1, 3)
    if pixels.shape[0] < width * height:
        raise ValueError(
            f"Buffer holds {pixels.shape[0]} pixels, {width}x{height} image needs {width * height}"
        )

    lines = [f"P3\n{width} {height}\n255\n"]
    lines.extend(f"{r} {g} {b}\n" for r, g, b in pixels[: width * height].tolist())

    try:
        with open(path, "w", encoding="ascii") as f:
            f.writelines(lines)
    except OSError:
        logger.error("Can't open the file %s", path)
        raise


def save_ppm(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
    path: str | Path,
    *,
    min_value: float = 0.0,
    max_value: float = 1.0,
) -> None:
    """Quantize a float color buffer and write it as an ASCII PPM file."""
    encode_ppm_p3(width, height, quantize(buffer, min_value, max_value), path)


def save_png(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
    path: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a float color buffer in [0, 1] as an 8-bit PNG file.

    Args:
        buffer: Colors of shape (width * height, 3) or (height, width, 3).
        width: Image width in pixels.
        height: Image height in pixels.
        path: Destination file.
        gamma: Gamma correction value. Default 1.0 (linear).

    Raises:
        ValueError: If buffer does not hold width * height colors.
        OSError: If the destination cannot be written.
    """
    pixels = np.asarray(buffer, dtype=np.float32).reshape(-1, 3)
    if pixels.shape[0] != width * height:
        raise ValueError(
            f"Buffer holds {pixels.shape[0]} pixels, {width}x{height} image needs {width * height}"
        )

    image = apply_gamma(pixels.reshape(height, width, 3), gamma)
    pil_image = PILImage.fromarray(quantize(image))
    try:
        pil_image.save(path)
    except OSError:
        logger.error("Can't open the file %s", path)
        raise


def save_image(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
    path: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a float color buffer, picking the format from the file suffix.

    ``.ppm`` files are written as ASCII PPM (gamma is not applied), anything
    else goes through Pillow.
    """
    if Path(path).suffix.lower() == ".ppm":
        save_ppm(buffer, width, height, path)
    else:
        save_png(buffer, width, height, path, gamma=gamma)
