"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    sampling: Deterministic per-pixel jitter generation
    shading: Normals, shadows and recursive Whitted shading
    integrator: Camera sampler, render target and render entry points
    progressive: Batch-wise sample accumulation

All compute-intensive operations use Taichi kernels for GPU acceleration.
"""

from .ray import (
    Ray,
    clamp01,
    length,
    lerp,
    make_ray,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from whitted.core.integrator or whitted.core.progressive when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "clamp01",
    "lerp",
    "reflect",
    "refract",
    "schlick_reflectance",
]
