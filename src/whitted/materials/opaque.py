"""Opaque (diffuse + specular + mirror) material implementation.

This module implements the local illumination model for opaque surfaces:

    color = ambient + sum over visible lights of (diffuse + specular)

where, for a light with attenuated intensity I, direction L, view direction V
and surface normal N:

    ambient  = albedo * AMBIENT_COEFFICIENT
    diffuse  = albedo * I * max(0, N . L) * diffuse_k
    specular = white  * I * max(0, N . H)^shininess * specular_k,  H = |L + V|

Opaque surfaces can additionally act as partial mirrors: the locally lit color
is blended with the color seen along the reflected ray by ``reflectivity``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.opaque import add_opaque_material
    >>> idx = add_opaque_material((0.8, 0.3, 0.3), specular_k=0.5, shininess=64.0)
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import normalize

# Type alias for 3D vectors
vec3 = tm.vec3

# Fraction of the albedo returned regardless of lighting
AMBIENT_COEFFICIENT = 0.1


@ti.dataclass
class OpaqueParams:
    """Opaque material properties.

    Attributes:
        albedo: The base surface color (RGB, each component in [0, 1]).
        diffuse_k: Weight of the Lambertian term (>= 0).
        specular_k: Weight of the Blinn-Phong highlight (>= 0).
        shininess: Specular exponent (> 0). Larger values give tighter
            highlights.
        reflectivity: Mirror blend factor in [0, 1]. 0 disables reflection
            rays entirely.
    """

    albedo: vec3
    diffuse_k: ti.f32
    specular_k: ti.f32
    shininess: ti.f32
    reflectivity: ti.f32


@ti.func
def ambient_term(albedo: vec3) -> vec3:
    """Light a surface receives regardless of visible lights."""
    return albedo * AMBIENT_COEFFICIENT


@ti.func
def diffuse_term(albedo: vec3, intensity: vec3, normal: vec3, light_dir: vec3) -> vec3:
    """Evaluate the unweighted Lambertian term for one light.

    Args:
        albedo: The surface color.
        intensity: The light color after distance attenuation.
        normal: The surface normal (unit length, facing the viewer).
        light_dir: Unit direction from the surface point to the light.

    Returns:
        albedo * intensity * max(0, normal . light_dir).
    """
    return albedo * intensity * tm.max(0.0, tm.dot(normal, light_dir))


@ti.func
def shade_opaque_light(
    params: OpaqueParams,
    intensity: vec3,
    normal: vec3,
    light_dir: vec3,
    view_dir: vec3,
) -> vec3:
    """Evaluate the diffuse and Blinn-Phong specular terms for one light.

    Args:
        params: The material being shaded.
        intensity: The light color after distance attenuation.
        normal: The surface normal (unit length, facing the viewer).
        light_dir: Unit direction from the surface point to the light.
        view_dir: Unit direction from the surface point to the viewer.

    Returns:
        The color contributed by this light.
    """
    diffuse = diffuse_term(params.albedo, intensity, normal, light_dir) * params.diffuse_k

    halfway = normalize(light_dir + view_dir)
    spec_angle = tm.max(0.0, tm.dot(normal, halfway))
    specular = vec3(1.0, 1.0, 1.0) * intensity * spec_angle**params.shininess

    return diffuse + specular * params.specular_k


@ti.func
def blend_reflection(local: vec3, reflected: vec3, reflectivity: ti.f32) -> vec3:
    """Mix the locally lit color with the mirror-reflected color."""
    return local * (1.0 - reflectivity) + reflected * reflectivity


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of opaque materials in the scene
MAX_OPAQUE_MATERIALS = 256

# Storage for opaque material properties
opaque_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OPAQUE_MATERIALS)
opaque_diffuse_k = ti.field(dtype=ti.f32, shape=MAX_OPAQUE_MATERIALS)
opaque_specular_k = ti.field(dtype=ti.f32, shape=MAX_OPAQUE_MATERIALS)
opaque_shininess = ti.field(dtype=ti.f32, shape=MAX_OPAQUE_MATERIALS)
opaque_reflectivity = ti.field(dtype=ti.f32, shape=MAX_OPAQUE_MATERIALS)
num_opaque_materials = ti.field(dtype=ti.i32, shape=())


def clear_opaque_materials() -> None:
    """Clear all opaque materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_opaque_materials[None] = 0


def validate_opaque_material(
    albedo: tuple[float, float, float],
    diffuse_k: float = 1.0,
    specular_k: float = 0.0,
    shininess: float = 32.0,
    reflectivity: float = 0.0,
) -> None:
    """Check opaque material parameters without touching the registry.

    Raises:
        ValueError: If any parameter is out of range.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    if diffuse_k < 0.0 or specular_k < 0.0:
        raise ValueError(
            f"Diffuse and specular weights must be >= 0 (got {diffuse_k}, {specular_k})"
        )
    if shininess <= 0.0:
        raise ValueError(f"Shininess = {shininess} must be positive")
    if reflectivity < 0.0 or reflectivity > 1.0:
        raise ValueError(f"Reflectivity = {reflectivity} is outside [0, 1]")


def add_opaque_material(
    albedo: tuple[float, float, float],
    diffuse_k: float = 1.0,
    specular_k: float = 0.0,
    shininess: float = 32.0,
    reflectivity: float = 0.0,
) -> int:
    """Add an opaque material to the material registry.

    Args:
        albedo: The base color as (R, G, B) tuple, each component in [0, 1].
        diffuse_k: Weight of the diffuse term. Must be >= 0.
        specular_k: Weight of the specular term. Must be >= 0.
        shininess: Specular exponent. Must be > 0.
        reflectivity: Mirror blend factor in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is out of range.
    """
    validate_opaque_material(albedo, diffuse_k, specular_k, shininess, reflectivity)

    idx = num_opaque_materials[None]
    if idx >= MAX_OPAQUE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of opaque materials ({MAX_OPAQUE_MATERIALS}) exceeded"
        )

    opaque_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    opaque_diffuse_k[idx] = diffuse_k
    opaque_specular_k[idx] = specular_k
    opaque_shininess[idx] = shininess
    opaque_reflectivity[idx] = reflectivity
    num_opaque_materials[None] = idx + 1
    return idx


def get_opaque_material_count() -> int:
    """Get the number of opaque materials in the registry."""
    return int(num_opaque_materials[None])


@ti.func
def get_opaque_params(material_idx: ti.i32) -> OpaqueParams:
    """Get the properties of an opaque material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The OpaqueParams for the material.
    """
    return OpaqueParams(
        albedo=opaque_albedos[material_idx],
        diffuse_k=opaque_diffuse_k[material_idx],
        specular_k=opaque_specular_k[material_idx],
        shininess=opaque_shininess[material_idx],
        reflectivity=opaque_reflectivity[material_idx],
    )

