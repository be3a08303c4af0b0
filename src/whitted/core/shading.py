"""Shading engine: flat and recursive Whitted-style ray shading.

This module turns a camera ray into a color. Three shading modes share the
same scene queries:

    NORMALS   - visualize the surface normal of the nearest hit
    SHADOWS   - ambient plus shadow-tested diffuse lighting
    RECURSIVE - full local illumination with mirror reflection and
                Fresnel-blended refraction, bounded by a bounce budget

Taichi functions are inlined and cannot recurse, so the recursive mode walks
the shading tree with an explicit per-ray frame stack. Each frame is one
level of the tree; a frame that needs a child color pushes the child ray,
and is resumed with the child's result once the child returns. Frames are
evaluated post-order, exactly as the recursive formulation would.

The remaining depth of a ray is ``max_depth - level``. A ray whose remaining
depth is zero or less is absorbed and returns black. ``max_depth = 0`` renders
black everywhere, and ``max_depth = 1`` lights primary hits locally while
every reflected or refracted ray contributes nothing.

Example:
    >>> @ti.kernel
    ... def trace() -> tm.vec3:
    ...     return shade(tm.vec3(0, 0, 0), tm.vec3(0, 0, -1), int(ShadingMode.RECURSIVE), 5)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from whitted.core.ray import clamp01, lerp, normalize, reflect
from whitted.materials.dielectric import (
    blend_dielectric,
    get_dielectric_params,
    split_dielectric,
)
from whitted.materials.opaque import (
    OpaqueParams,
    ambient_term,
    blend_reflection,
    diffuse_term,
    get_opaque_params,
    shade_opaque_light,
)
from whitted.scene.intersection import find_nearest_hit, is_occluded
from whitted.scene.lights import attenuated_intensity, light_direction, num_lights
from whitted.scene.manager import MaterialType, get_material_type, get_material_type_index

# Type alias for 3D vectors
vec3 = tm.vec3


class ShadingMode(IntEnum):
    """Shading function invoked for every camera sample."""

    NORMALS = 0
    SHADOWS = 1
    RECURSIVE = 2


# Offset of shadow ray origins along the surface normal
SHADOW_BIAS = 1e-3
# Offset of reflected/refracted ray origins along the surface normal
REFLECTION_BIAS = 1e-3
# Valid ray parameter interval for scene queries
T_MIN = 1e-3
T_MAX = 1e10

# Vertical background gradient, bottom to top
BACKGROUND_BOTTOM = (1.0, 1.0, 1.0)
BACKGROUND_TOP = (0.5, 0.7, 1.0)

# Largest bounce budget a render may request
MAX_RECURSION_DEPTH = 8

# One frame per level from the camera ray down to the absorbed ray
_STACK_SIZE = MAX_RECURSION_DEPTH + 1

_OPAQUE = int(MaterialType.OPAQUE)
_DIELECTRIC = int(MaterialType.DIELECTRIC)
_NORMALS = int(ShadingMode.NORMALS)
_SHADOWS = int(ShadingMode.SHADOWS)

# Resume stages of a frame
_STAGE_REFLECTED = 1
_STAGE_REFRACTED = 2


@ti.func
def background(direction: vec3) -> vec3:
    """Sky gradient seen by a ray that escapes the scene."""
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    bottom = vec3(BACKGROUND_BOTTOM[0], BACKGROUND_BOTTOM[1], BACKGROUND_BOTTOM[2])
    top = vec3(BACKGROUND_TOP[0], BACKGROUND_TOP[1], BACKGROUND_TOP[2])
    return lerp(bottom, top, t)


@ti.func
def light_visible(point: vec3, normal: vec3, light_dir: vec3, distance: ti.f32) -> ti.i32:
    """Binary shadow test between a surface point and a light.

    Returns:
        1 if nothing blocks the light, 0 otherwise.
    """
    shadow_origin = point + normal * SHADOW_BIAS
    return 1 - is_occluded(shadow_origin, light_dir, T_MIN, distance)


@ti.func
def material_albedo(material_id: ti.i32) -> vec3:
    """Base color of any material, black for an unknown ID."""
    albedo = vec3(0.0, 0.0, 0.0)
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)
    if mat_type == _OPAQUE:
        albedo = get_opaque_params(type_index).albedo
    elif mat_type == _DIELECTRIC:
        albedo = get_dielectric_params(type_index).albedo
    return albedo


@ti.func
def direct_diffuse(point: vec3, normal: vec3, albedo: vec3) -> vec3:
    """Ambient plus shadow-tested, attenuated diffuse light, clamped to [0, 1]."""
    color = ambient_term(albedo)
    for i in range(num_lights[None]):
        light_dir, distance = light_direction(i, point)
        if light_visible(point, normal, light_dir, distance) == 1:
            color += diffuse_term(albedo, attenuated_intensity(i, distance), normal, light_dir)
    return clamp01(color)


@ti.func
def local_illumination(params: OpaqueParams, point: vec3, normal: vec3, view_dir: vec3) -> vec3:
    """Ambient plus diffuse and specular light from every visible light.

    The result is not clamped; callers clamp after blending in reflections.
    """
    color = ambient_term(params.albedo)
    for i in range(num_lights[None]):
        light_dir, distance = light_direction(i, point)
        if light_visible(point, normal, light_dir, distance) == 1:
            color += shade_opaque_light(
                params, attenuated_intensity(i, distance), normal, light_dir, view_dir
            )
    return color


@ti.func
def shade_normals(ray_origin: vec3, ray_direction: vec3) -> vec3:
    """Map the hit normal from [-1, 1] to a color in [0, 1]."""
    color = background(ray_direction)
    rec = find_nearest_hit(ray_origin, ray_direction, T_MIN, T_MAX)
    if rec.hit == 1:
        color = 0.5 * (rec.normal + 1.0)
    return color


@ti.func
def shade_shadows(ray_origin: vec3, ray_direction: vec3) -> vec3:
    """Flat shading with binary shadows and no recursion."""
    color = background(ray_direction)
    rec = find_nearest_hit(ray_origin, ray_direction, T_MIN, T_MAX)
    if rec.hit == 1:
        color = direct_diffuse(rec.point, rec.normal, material_albedo(rec.material_id))
    return color


@ti.func
def shade_recursive(ray_origin: vec3, ray_direction: vec3, max_depth: ti.i32) -> vec3:
    """Trace a ray with reflection and refraction up to max_depth bounces.

    Opaque hits are lit locally and, when reflective, blended with the color
    seen along the mirror direction. Dielectric hits are not lit locally;
    they blend the reflected and refracted colors by Schlick's reflectance.
    Every frame clamps its color to [0, 1] before returning it to its parent.

    Args:
        ray_origin: Origin of the camera ray.
        ray_direction: Direction of the camera ray.
        max_depth: Depth bound, in [0, MAX_RECURSION_DEPTH]. Zero renders black.

    Returns:
        The color carried back along the camera ray.
    """
    stage = ti.Vector.zero(ti.i32, _STACK_SIZE)
    frame_type = ti.Vector.zero(ti.i32, _STACK_SIZE)
    frame_index = ti.Vector.zero(ti.i32, _STACK_SIZE)
    frame_kr = ti.Vector.zero(ti.f32, _STACK_SIZE)
    frame_can_refract = ti.Vector.zero(ti.i32, _STACK_SIZE)
    # Rows are per-level vec3 values
    frame_local = ti.Matrix.zero(ti.f32, _STACK_SIZE, 3)
    frame_reflected = ti.Matrix.zero(ti.f32, _STACK_SIZE, 3)
    frame_refract_origin = ti.Matrix.zero(ti.f32, _STACK_SIZE, 3)
    frame_refract_dir = ti.Matrix.zero(ti.f32, _STACK_SIZE, 3)

    origin = ray_origin
    direction = ray_direction
    result = vec3(0.0, 0.0, 0.0)
    level = 0
    entering = 1

    while level >= 0:
        if entering == 1:
            entering = 0
            if max_depth - level <= 0:
                result = vec3(0.0, 0.0, 0.0)
                level -= 1
            else:
                rec = find_nearest_hit(origin, direction, T_MIN, T_MAX)
                mat_type = get_material_type(rec.material_id)
                type_index = get_material_type_index(rec.material_id)
                if rec.hit == 0:
                    result = background(direction)
                    level -= 1
                elif mat_type == _DIELECTRIC:
                    dielectric = get_dielectric_params(type_index)
                    kr, reflect_dir, refract_dir, can_refract = split_dielectric(
                        dielectric.ior, direction, rec.normal, rec.front_face
                    )
                    refract_origin = rec.point - rec.normal * REFLECTION_BIAS
                    frame_type[level] = mat_type
                    frame_index[level] = type_index
                    frame_kr[level] = kr
                    frame_can_refract[level] = can_refract
                    for c in ti.static(range(3)):
                        frame_refract_origin[level, c] = refract_origin[c]
                        frame_refract_dir[level, c] = refract_dir[c]
                    stage[level] = _STAGE_REFLECTED

                    origin = rec.point + rec.normal * REFLECTION_BIAS
                    direction = reflect_dir
                    level += 1
                    entering = 1
                elif mat_type == _OPAQUE:
                    opaque = get_opaque_params(type_index)
                    view_dir = normalize(origin - rec.point)
                    local = local_illumination(opaque, rec.point, rec.normal, view_dir)
                    if opaque.reflectivity > 0.0:
                        frame_type[level] = mat_type
                        frame_index[level] = type_index
                        for c in ti.static(range(3)):
                            frame_local[level, c] = local[c]
                        stage[level] = _STAGE_REFLECTED

                        origin = rec.point + rec.normal * REFLECTION_BIAS
                        direction = reflect(normalize(direction), rec.normal)
                        level += 1
                        entering = 1
                    else:
                        result = clamp01(local)
                        level -= 1
                else:
                    # Sphere with an unregistered material
                    result = vec3(0.0, 0.0, 0.0)
                    level -= 1
        else:
            if frame_type[level] == _DIELECTRIC:
                dielectric = get_dielectric_params(frame_index[level])
                if stage[level] == _STAGE_REFLECTED:
                    for c in ti.static(range(3)):
                        frame_reflected[level, c] = result[c]
                    if frame_can_refract[level] == 1:
                        stage[level] = _STAGE_REFRACTED
                        for c in ti.static(range(3)):
                            origin[c] = frame_refract_origin[level, c]
                            direction[c] = frame_refract_dir[level, c]
                        level += 1
                        entering = 1
                    else:
                        # Total internal reflection, kr == 1
                        result = clamp01(
                            blend_dielectric(
                                result, vec3(0.0, 0.0, 0.0), frame_kr[level], dielectric.albedo
                            )
                        )
                        level -= 1
                else:
                    reflected = vec3(
                        frame_reflected[level, 0],
                        frame_reflected[level, 1],
                        frame_reflected[level, 2],
                    )
                    result = clamp01(
                        blend_dielectric(reflected, result, frame_kr[level], dielectric.albedo)
                    )
                    level -= 1
            else:
                opaque = get_opaque_params(frame_index[level])
                local = vec3(frame_local[level, 0], frame_local[level, 1], frame_local[level, 2])
                result = clamp01(blend_reflection(local, result, opaque.reflectivity))
                level -= 1

    return result


@ti.func
def shade(ray_origin: vec3, ray_direction: vec3, mode: ti.i32, max_depth: ti.i32) -> vec3:
    """Shade a camera ray with the selected ShadingMode."""
    color = vec3(0.0, 0.0, 0.0)
    if mode == _NORMALS:
        color = shade_normals(ray_origin, ray_direction)
    elif mode == _SHADOWS:
        color = shade_shadows(ray_origin, ray_direction)
    else:
        color = shade_recursive(ray_origin, ray_direction, max_depth)
    return color
