"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive with ray-sphere intersection

All intersection routines are implemented as Taichi functions (@ti.func)
so they inline into the render kernels. Scenes are small, so primitives are
tested with a linear scan rather than an acceleration structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
