"""Preview module for output and visualization.

This module handles rendering output:

Components:
    display: Matplotlib-based preview display and gamma correction
    export: 8-bit quantization, ASCII PPM and PNG export

Example:
    >>> from whitted.preview import save_ppm, show_preview
    >>> from whitted.core.integrator import render, to_image
    >>>
    >>> buffer = render(400, 200, spheres, lights)
    >>> save_ppm(buffer, 400, 200, "output/spheres.ppm")
    >>> show_preview(to_image(buffer, 400, 200))
"""

from whitted.preview.display import apply_gamma, show_preview
from whitted.preview.export import (
    encode_ppm_p3,
    quantize,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "apply_gamma",
    # Export functions
    "quantize",
    "encode_ppm_p3",
    "save_ppm",
    "save_png",
    "save_image",
]
