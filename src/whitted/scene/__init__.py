"""Scene module for scene description, storage and queries.

This module handles scene representation and ray-scene queries:

Components:
    model: Host-side immutable scene description and JSON I/O
    intersection: Sphere storage and nearest-hit / occlusion queries
    lights: Point light storage and distance attenuation
    manager: Unified scene manager coordinating spheres, lights and materials
    presets: Ready-made demo scenes

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    find_nearest_hit,
    get_sphere_count,
    is_occluded,
)
from .lights import (
    MAX_LIGHTS,
    add_point_light,
    clear_lights,
    get_light_count,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereEntry,
    get_material_type,
    get_material_type_index,
)
from .model import (
    DielectricMaterial,
    Material,
    OpaqueMaterial,
    PointLight,
    Scene,
    SphereInfo,
    load_scene,
    material_from_properties,
    save_scene,
)
from .presets import (
    PRESETS,
    create_basic_scene,
    create_shadow_scene,
    create_showcase_scene,
    get_preset,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "find_nearest_hit",
    "is_occluded",
    "MAX_SPHERES",
    # Lights module
    "add_point_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereEntry",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Model module
    "Scene",
    "SphereInfo",
    "PointLight",
    "Material",
    "OpaqueMaterial",
    "DielectricMaterial",
    "material_from_properties",
    "load_scene",
    "save_scene",
    # Presets module
    "PRESETS",
    "create_basic_scene",
    "create_shadow_scene",
    "create_showcase_scene",
    "get_preset",
]
