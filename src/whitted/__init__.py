"""Taichi-based Whitted-style ray tracer for scenes of spheres.

This package provides GPU-accelerated recursive ray tracing using Taichi, with support for:
- Binary shadows from attenuated point lights
- Ambient, diffuse and Blinn-Phong specular local illumination
- Mirror reflection and Fresnel-blended refraction
- Deterministic jittered anti-aliasing and progressive accumulation

Subpackages:
    core: Ray and vector utilities, shading, sampler and rendering loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Opaque and dielectric surface models
    scene: Scene description, storage and queries
    camera: Pinhole camera ray generation
    preview: Quantization, image export and preview utilities
"""

__version__ = "0.1.0"
