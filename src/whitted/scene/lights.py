"""Point light storage and distance attenuation.

Lights are stored in Taichi fields alongside the scene's spheres. Each light
has a position, an RGB intensity and constant/linear/quadratic attenuation
coefficients. The attenuation factor at distance d is

    clamp(1 / (att_c + att_l * d + att_q * d^2), 0, 1)

Callers are responsible for keeping the denominator positive at every
reachable distance (for example with att_c > 0); a zero denominator is a
configuration error and is not guarded inside the kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.lights import add_point_light, clear_lights
    >>> clear_lights()
    >>> add_point_light((5.0, 5.0, 0.0), (1.0, 1.0, 1.0), att_c=1.0, att_q=0.01)
    0
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of point lights supported in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_attenuations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def validate_point_light(
    intensity: tuple[float, float, float],
    att_c: float = 1.0,
    att_l: float = 0.0,
    att_q: float = 0.0,
) -> None:
    """Check point light parameters without touching the light fields.

    Raises:
        ValueError: If any attenuation coefficient or intensity component
            is negative.
    """
    if att_c < 0.0 or att_l < 0.0 or att_q < 0.0:
        raise ValueError(
            f"Attenuation coefficients must be >= 0 (got {att_c}, {att_l}, {att_q})"
        )
    for i, component in enumerate(intensity):
        if component < 0.0:
            raise ValueError(f"Intensity component {i} = {component} is negative")


def add_point_light(
    position: tuple[float, float, float],
    intensity: tuple[float, float, float],
    att_c: float = 1.0,
    att_l: float = 0.0,
    att_q: float = 0.0,
) -> int:
    """Add a point light to the scene.

    Args:
        position: World-space position of the light.
        intensity: RGB radiance of the light. Components may exceed 1.
        att_c: Constant attenuation coefficient (>= 0).
        att_l: Linear attenuation coefficient (>= 0).
        att_q: Quadratic attenuation coefficient (>= 0).

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If any attenuation coefficient or intensity component
            is negative.
    """
    validate_point_light(intensity, att_c, att_l, att_q)

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_intensities[idx] = vec3(intensity[0], intensity[1], intensity[2])
    light_attenuations[idx] = vec3(att_c, att_l, att_q)
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def attenuation_factor(coefficients: vec3, distance: ti.f32) -> ti.f32:
    """Evaluate the inverse-polynomial falloff, clamped to [0, 1].

    Args:
        coefficients: (att_c, att_l, att_q).
        distance: Distance from the light.
    """
    denominator = coefficients[0] + coefficients[1] * distance + coefficients[2] * distance * distance
    return tm.clamp(1.0 / denominator, 0.0, 1.0)


@ti.func
def light_direction(light_idx: ti.i32, point: vec3):
    """Compute the unit direction and distance from a point to a light.

    Returns:
        A tuple of (direction, distance).
    """
    to_light = light_positions[light_idx] - point
    distance = tm.length(to_light)
    direction = to_light
    if distance > 0.0:
        direction = to_light / distance
    return direction, distance


@ti.func
def attenuated_intensity(light_idx: ti.i32, distance: ti.f32) -> vec3:
    """Light intensity reaching a point at the given distance."""
    return light_intensities[light_idx] * attenuation_factor(light_attenuations[light_idx], distance)
