"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the Ray dataclass and the small set of vector helpers the
shading pipeline is built on. All helpers are Taichi functions so they can be
inlined into the render kernels.

Vectors are plain ``taichi.math.vec3`` values and are used polymorphically for
positions, directions, normals and colors.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; callers normalize where the math depends on it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike ``tm.normalize``, a zero-length vector is returned unchanged
    instead of producing NaN components.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or v itself if |v| == 0.
    """
    result = v
    len_v = length(v)
    if len_v != 0.0:
        result = v / len_v
    return result


@ti.func
def clamp01(v: vec3) -> vec3:
    """Clamp every component of a color to [0, 1]."""
    return tm.clamp(v, 0.0, 1.0)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The mirror-reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32):
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal, facing against the incident ray
            (should be normalized).
        eta: The ratio of refractive indices (eta_incident / eta_transmitted).

    Returns:
        A tuple of (direction, refracted) where refracted is 0 on total
        internal reflection, in which case direction is the zero vector.
    """
    cos_i = tm.clamp(-tm.dot(incident, normal), -1.0, 1.0)
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    direction = vec3(0.0, 0.0, 0.0)
    refracted = 0
    if k >= 0.0:
        direction = eta * incident + (eta * cos_i - ti.sqrt(k)) * normal
        refracted = 1
    return direction, refracted


@ti.func
def schlick_reflectance(cosine: ti.f32, eta: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the reversed incident direction
            and the normal.
        eta: Ratio of refractive indices (eta_incident / eta_transmitted).

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = (eta - 1.0) / (eta + 1.0)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linearly interpolate between two vectors."""
    return (1.0 - t) * a + t * b
