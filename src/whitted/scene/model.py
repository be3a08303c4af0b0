"""Host-side scene description.

These immutable dataclasses describe a scene independently of the Taichi
fields the renderer reads from. A Scene is built in Python (or loaded from a
JSON file), handed to ``SceneManager.load`` and then left untouched for the
duration of a render.

Materials are a tagged variant: an OpaqueMaterial is lit by the local
illumination model and may act as a partial mirror, a DielectricMaterial
only reflects and refracts. The two illumination models never mix on one
surface.

Example:
    >>> from whitted.scene.model import (
    ...     DielectricMaterial, OpaqueMaterial, PointLight, Scene, SphereInfo
    ... )
    >>> scene = Scene(
    ...     spheres=(
    ...         SphereInfo((0.0, 0.0, -1.0), 0.5, DielectricMaterial()),
    ...         SphereInfo((0.0, -100.5, -1.0), 100.0, OpaqueMaterial((0.8, 0.8, 0.0))),
    ...     ),
    ...     lights=(PointLight((2.0, 2.0, 0.0), (1.0, 1.0, 1.0)),),
    ... )
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


def _as_vec3(values: Any, name: str) -> Vec3:
    """Convert a 3-element sequence to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class OpaqueMaterial:
    """Material lit by ambient, diffuse and Blinn-Phong specular terms.

    Attributes:
        albedo: Base surface color (R, G, B).
        diffuse_k: Weight of the diffuse term.
        specular_k: Weight of the specular highlight.
        shininess: Specular exponent.
        reflectivity: Mirror blend factor in [0, 1].
    """

    albedo: Vec3
    diffuse_k: float = 1.0
    specular_k: float = 0.0
    shininess: float = 32.0
    reflectivity: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _as_vec3(self.albedo, "albedo"))


@dataclass(frozen=True)
class DielectricMaterial:
    """Transparent material that reflects and refracts.

    Attributes:
        albedo: Tint applied to refracted light (R, G, B).
        refractive_index: Index of refraction relative to vacuum.
    """

    albedo: Vec3 = (1.0, 1.0, 1.0)
    refractive_index: float = 1.5

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _as_vec3(self.albedo, "albedo"))


Material = Union[OpaqueMaterial, DielectricMaterial]


def material_from_properties(
    albedo: Vec3,
    *,
    diffuse_k: float = 1.0,
    specular_k: float = 0.0,
    shininess: float = 32.0,
    reflectivity: float = 0.0,
    transparency: float = 0.0,
    refractive_index: float = 1.0,
) -> Material:
    """Build a material from the flat property record.

    Any positive transparency selects the dielectric model; the opaque-only
    properties are then ignored.

    Raises:
        ValueError: If transparency is outside [0, 1].
    """
    if transparency < 0.0 or transparency > 1.0:
        raise ValueError(f"Transparency = {transparency} is outside [0, 1]")
    if transparency > 0.0:
        return DielectricMaterial(albedo=albedo, refractive_index=refractive_index)
    return OpaqueMaterial(
        albedo=albedo,
        diffuse_k=diffuse_k,
        specular_k=specular_k,
        shininess=shininess,
        reflectivity=reflectivity,
    )


@dataclass(frozen=True)
class SphereInfo:
    """A sphere primitive with its material.

    Attributes:
        center: Center of the sphere.
        radius: Radius of the sphere (positive).
        material: Surface material.
    """

    center: Vec3
    radius: float
    material: Material

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _as_vec3(self.center, "center"))


@dataclass(frozen=True)
class PointLight:
    """A point light with polynomial distance attenuation.

    Attributes:
        position: World-space position.
        intensity: RGB radiance.
        att_c: Constant attenuation coefficient.
        att_l: Linear attenuation coefficient.
        att_q: Quadratic attenuation coefficient.
    """

    position: Vec3
    intensity: Vec3
    att_c: float = 1.0
    att_l: float = 0.0
    att_q: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vec3(self.position, "position"))
        object.__setattr__(self, "intensity", _as_vec3(self.intensity, "intensity"))


@dataclass(frozen=True)
class Scene:
    """An ordered collection of spheres and point lights.

    Attributes:
        spheres: Spheres in intersection order.
        lights: Point lights in shading order.
    """

    spheres: tuple[SphereInfo, ...] = field(default_factory=tuple)
    lights: tuple[PointLight, ...] = field(default_factory=tuple)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {
            "spheres": [
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material": _material_to_dict(sphere.material),
                }
                for sphere in self.spheres
            ],
            "lights": [
                {
                    "position": list(light.position),
                    "intensity": list(light.intensity),
                    "att_c": light.att_c,
                    "att_l": light.att_l,
                    "att_q": light.att_q,
                }
                for light in self.lights
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'spheres' and 'lights' keys.

        Raises:
            ValueError: If the dictionary contains invalid data.
        """
        spheres = []
        for sphere_config in data.get("spheres", []):
            spheres.append(
                SphereInfo(
                    center=_as_vec3(sphere_config.get("center", [0, 0, 0]), "center"),
                    radius=float(sphere_config.get("radius", 1.0)),
                    material=_material_from_dict(sphere_config.get("material", {})),
                )
            )

        lights = []
        for light_config in data.get("lights", []):
            lights.append(
                PointLight(
                    position=_as_vec3(light_config.get("position", [0, 0, 0]), "position"),
                    intensity=_as_vec3(light_config.get("intensity", [1, 1, 1]), "intensity"),
                    att_c=float(light_config.get("att_c", 1.0)),
                    att_l=float(light_config.get("att_l", 0.0)),
                    att_q=float(light_config.get("att_q", 0.0)),
                )
            )

        return cls(spheres=tuple(spheres), lights=tuple(lights))


def _material_to_dict(material: Material) -> dict[str, Any]:
    if isinstance(material, DielectricMaterial):
        return {
            "type": "dielectric",
            "albedo": list(material.albedo),
            "refractive_index": material.refractive_index,
        }
    return {
        "type": "opaque",
        "albedo": list(material.albedo),
        "diffuse_k": material.diffuse_k,
        "specular_k": material.specular_k,
        "shininess": material.shininess,
        "reflectivity": material.reflectivity,
    }


def _material_from_dict(config: dict[str, Any]) -> Material:
    mat_type = config.get("type", "opaque").lower()
    albedo = _as_vec3(config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
    if mat_type == "opaque":
        return OpaqueMaterial(
            albedo=albedo,
            diffuse_k=float(config.get("diffuse_k", 1.0)),
            specular_k=float(config.get("specular_k", 0.0)),
            shininess=float(config.get("shininess", 32.0)),
            reflectivity=float(config.get("reflectivity", 0.0)),
        )
    if mat_type == "dielectric":
        return DielectricMaterial(
            albedo=albedo,
            refractive_index=float(config.get("refractive_index", 1.5)),
        )
    if mat_type == "properties":
        return material_from_properties(
            albedo,
            diffuse_k=float(config.get("diffuse_k", 1.0)),
            specular_k=float(config.get("specular_k", 0.0)),
            shininess=float(config.get("shininess", 32.0)),
            reflectivity=float(config.get("reflectivity", 0.0)),
            transparency=float(config.get("transparency", 0.0)),
            refractive_index=float(config.get("refractive_index", 1.0)),
        )
    raise ValueError(f"Unknown material type: {mat_type}")


def load_scene(path: str | Path) -> Scene:
    """Read a scene from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or describes an invalid
            scene.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    scene = Scene.from_dict(data)
    logger.debug(
        "Loaded scene %s: %d spheres, %d lights", path, len(scene.spheres), len(scene.lights)
    )
    return scene


def save_scene(scene: Scene, path: str | Path) -> None:
    """Write a scene to a JSON file."""
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(scene.to_dict(), f, indent=2)
