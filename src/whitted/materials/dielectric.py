"""Dielectric (glass/water) material implementation.

This module implements the deterministic dielectric split used by Whitted-style
ray tracing: every hit on a dielectric spawns a reflected ray and, unless
total internal reflection occurs, a refracted ray. The two results are blended
by the Fresnel reflectance kr:

    color = reflected * kr + refracted * (1 - kr) * albedo

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1, which forces kr = 1

Dielectric surfaces are not lit by the local illumination model; their color
comes entirely from what the reflected and refracted rays see.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.dielectric import split_dielectric
    >>> # Use within a Taichi kernel:
    >>> # kr, reflect_dir, refract_dir, can_refract = split_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import (
    normalize,
    reflect,
    refract,
    schlick_reflectance,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DielectricParams:
    """Dielectric (glass/water) material properties.

    Attributes:
        albedo: Tint applied to transmitted light (RGB in [0, 1]).
        ior: Index of refraction relative to vacuum. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    albedo: vec3
    ior: ti.f32


@ti.func
def refraction_indices(ior: ti.f32, front_face: ti.i32):
    """Pick the incident and transmitted indices for a hit.

    A front face hit enters the material from vacuum; a back face hit
    leaves it.

    Returns:
        A tuple of (eta_i, eta_t).
    """
    eta_i = 1.0
    eta_t = ior
    if front_face == 0:
        eta_i = ior
        eta_t = 1.0
    return eta_i, eta_t


@ti.func
def split_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the Fresnel split for a ray hitting a dielectric.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing against the incident ray
            (should be normalized).
        front_face: 1 if ray is hitting the outside of the surface,
            0 if ray is inside the material hitting from within.

    Returns:
        A tuple of (kr, reflect_dir, refract_dir, can_refract) where:
        - kr: Fresnel reflectance, 1.0 on total internal reflection.
        - reflect_dir: Mirror direction of the incident ray.
        - refract_dir: Transmitted direction (zero on total internal
          reflection).
        - can_refract: 1 if a refracted ray exists, 0 otherwise.
    """
    unit_incident = normalize(incident_direction)

    eta_i, eta_t = refraction_indices(ior, front_face)
    eta = eta_i / eta_t

    cos_i = tm.clamp(-tm.dot(unit_incident, normal), -1.0, 1.0)
    kr = schlick_reflectance(cos_i, eta)

    reflect_dir = reflect(unit_incident, normal)
    refract_dir, can_refract = refract(unit_incident, normal, eta)

    if can_refract == 0:
        kr = 1.0

    return kr, reflect_dir, refract_dir, can_refract


@ti.func
def blend_dielectric(reflected: vec3, refracted: vec3, kr: ti.f32, albedo: vec3) -> vec3:
    """Blend the reflected and refracted colors by Fresnel reflectance."""
    return reflected * kr + refracted * (1.0 - kr) * albedo


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (should be normalized).
        front_face: 1 if ray is hitting the outside of the surface,
            0 if ray is inside the material hitting from within.

    Returns:
        1 if total internal reflection will occur, 0 otherwise.
    """
    eta_i, eta_t = refraction_indices(ior, front_face)
    _, can_refract = refract(normalize(incident_direction), normal, eta_i / eta_t)
    return 1 - can_refract


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def validate_dielectric_material(
    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ior: float = 1.5,
) -> None:
    """Check dielectric material parameters without touching the registry.

    Raises:
        ValueError: If the albedo or IOR is out of range.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")


def add_dielectric_material(
    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ior: float = 1.5,
) -> int:
    """Add a dielectric material to the material registry.

    Args:
        albedo: Transmission tint as (R, G, B), each component in [0, 1].
            Default is clear (white).
        ior: Index of refraction relative to vacuum. Default is 1.5
            (typical glass). Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the albedo or IOR is out of range.
    """
    validate_dielectric_material(albedo, ior)

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_params(material_idx: ti.i32) -> DielectricParams:
    """Get the properties of a dielectric material by index."""
    return DielectricParams(
        albedo=dielectric_albedos[material_idx],
        ior=dielectric_iors[material_idx],
    )


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]
