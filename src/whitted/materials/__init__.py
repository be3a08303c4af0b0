"""Materials module for Whitted-style surface models.

This module implements the two mutually exclusive surface models:

Components:
    opaque: Ambient + diffuse + Blinn-Phong specular, optional mirror blend
    dielectric: Glass-like materials with reflection and refraction,
        blended by Schlick's Fresnel approximation

Each material type keeps its parameters in its own Taichi field registry;
the scene manager maps unified material IDs onto these registries.

All shading computations are implemented as Taichi functions for GPU execution.
"""

from .dielectric import (
    DielectricParams,
    add_dielectric_material,
    blend_dielectric,
    clear_dielectric_materials,
    get_dielectric_ior,
    get_dielectric_material_count,
    get_dielectric_params,
    split_dielectric,
    will_reflect,
)
from .opaque import (
    AMBIENT_COEFFICIENT,
    OpaqueParams,
    add_opaque_material,
    blend_reflection,
    clear_opaque_materials,
    get_opaque_material_count,
    get_opaque_params,
    shade_opaque_light,
)

__all__ = [
    # Opaque
    "AMBIENT_COEFFICIENT",
    "OpaqueParams",
    "shade_opaque_light",
    "blend_reflection",
    "add_opaque_material",
    "clear_opaque_materials",
    "get_opaque_material_count",
    "get_opaque_params",
    # Dielectric
    "DielectricParams",
    "split_dielectric",
    "blend_dielectric",
    "will_reflect",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_params",
    "get_dielectric_ior",
]
