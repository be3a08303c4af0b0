"""Ready-made demo scenes.

The scenes use the default camera: a pinhole at the origin looking down -z
with a viewport two units tall, so a 2:1 image spans x in [-2, 2].

Example:
    >>> from whitted.scene.presets import create_showcase_scene
    >>> from whitted.core.integrator import render_scene, RenderSettings
    >>> buffer = render_scene(create_showcase_scene(), RenderSettings())
"""

from whitted.scene.model import (
    DielectricMaterial,
    OpaqueMaterial,
    PointLight,
    Scene,
    SphereInfo,
)

# =============================================================================
# Scene Constants
# =============================================================================

# Ground sphere large enough to read as a plane under the camera
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

GROUND_MATERIAL = OpaqueMaterial(albedo=(0.8, 0.8, 0.0))


def create_basic_scene() -> Scene:
    """A single sphere resting on a ground sphere, without lights.

    Intended for the normals mode, which needs no lights.
    """
    return Scene(
        spheres=(
            SphereInfo(center=(0.0, 0.0, -1.0), radius=0.5, material=OpaqueMaterial((0.7, 0.3, 0.3))),
            SphereInfo(center=GROUND_CENTER, radius=GROUND_RADIUS, material=GROUND_MATERIAL),
        ),
    )


def create_shadow_scene() -> Scene:
    """A diffuse sphere over the ground lit by one overhead light.

    The sphere casts a hard shadow onto the ground below it.
    """
    return Scene(
        spheres=(
            SphereInfo(center=(0.0, 0.0, -1.0), radius=0.5, material=OpaqueMaterial((0.7, 0.3, 0.3))),
            SphereInfo(center=GROUND_CENTER, radius=GROUND_RADIUS, material=GROUND_MATERIAL),
        ),
        lights=(PointLight(position=(0.0, 3.0, -1.0), intensity=(1.0, 1.0, 1.0)),),
    )


def create_showcase_scene() -> Scene:
    """Glass, mirror and glossy spheres lit by two attenuated lights."""
    glossy = OpaqueMaterial(
        albedo=(0.1, 0.2, 0.5),
        diffuse_k=0.9,
        specular_k=0.6,
        shininess=64.0,
    )
    mirror = OpaqueMaterial(
        albedo=(0.8, 0.6, 0.2),
        diffuse_k=0.3,
        specular_k=1.0,
        shininess=256.0,
        reflectivity=0.8,
    )
    glass = DielectricMaterial(albedo=(1.0, 1.0, 1.0), refractive_index=1.5)
    ground = OpaqueMaterial(albedo=(0.8, 0.8, 0.0), reflectivity=0.1)

    return Scene(
        spheres=(
            SphereInfo(center=(0.0, 0.0, -1.0), radius=0.5, material=glossy),
            SphereInfo(center=(1.0, 0.0, -1.0), radius=0.5, material=mirror),
            SphereInfo(center=(-1.0, 0.0, -1.0), radius=0.5, material=glass),
            SphereInfo(center=GROUND_CENTER, radius=GROUND_RADIUS, material=ground),
        ),
        lights=(
            PointLight(position=(-2.0, 2.0, 0.5), intensity=(1.0, 1.0, 1.0), att_q=0.02),
            PointLight(position=(2.0, 3.0, -0.5), intensity=(0.6, 0.6, 0.8), att_l=0.1),
        ),
    )


PRESETS = {
    "basic": create_basic_scene,
    "shadow": create_shadow_scene,
    "showcase": create_showcase_scene,
}


def get_preset(name: str) -> Scene:
    """Build a preset scene by name.

    Raises:
        ValueError: If no preset has that name.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset: {name} (choose from {', '.join(PRESETS)})") from None
    return factory()
