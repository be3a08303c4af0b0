"""Unified scene manager for coordinating spheres, lights and materials.

This module provides a high-level scene management API that coordinates
sphere and light storage with material assignment. It tracks which material
type (Opaque, Dielectric) each material ID corresponds to, enabling the
shading kernels to dispatch on the tagged material variant.

The SceneManager maintains:
- A unified material_id space across both material types
- Mapping from material_id to (material_type, type_local_index)
- Loading of host-side Scene descriptions into the Taichi fields
- Scene serialization support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_opaque_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
    >>> scene.add_light(position=(2, 2, 0), intensity=(1, 1, 1))
    >>> # Use get_material_type(mat_id) in the shading kernels for dispatch
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from whitted.materials.dielectric import (
    MAX_DIELECTRIC_MATERIALS,
    add_dielectric_material,
    clear_dielectric_materials,
    validate_dielectric_material,
)
from whitted.materials.opaque import (
    MAX_OPAQUE_MATERIALS,
    add_opaque_material,
    clear_opaque_materials,
    validate_opaque_material,
)
from whitted.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    validate_sphere_radius,
)
from whitted.scene.lights import (
    MAX_LIGHTS,
    add_point_light,
    clear_lights,
    get_light_count,
    validate_point_light,
)
from whitted.scene.model import (
    DielectricMaterial,
    Material,
    OpaqueMaterial,
    PointLight,
    Scene,
    SphereInfo,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the shading kernels to determine which
    illumination model applies to a hit.
    """

    OPAQUE = 0
    DIELECTRIC = 1


# Maximum number of materials across all types
MAX_MATERIALS = 512  # 256 per type * 2 types

# Taichi fields for kernel-side material type lookup
# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd dielectric material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., opaque_albedos[type_index]).

    Returns:
        The index into the type-specific material array.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _validate_material(material: Material) -> None:
    """Check a host-side material against its registry's limits."""
    if isinstance(material, DielectricMaterial):
        validate_dielectric_material(material.albedo, material.refractive_index)
    elif isinstance(material, OpaqueMaterial):
        validate_opaque_material(
            material.albedo,
            material.diffuse_k,
            material.specular_k,
            material.shininess,
            material.reflectivity,
        )
    else:
        raise ValueError(f"Unknown material: {material!r}")


def _validate_scene(scene: Scene) -> None:
    """Check a whole Scene before any of it is written to the fields.

    Raises:
        RuntimeError: If the scene does not fit the preallocated fields.
        ValueError: If a sphere, material or light is invalid.
    """
    if len(scene.spheres) > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    if len(scene.lights) > MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    materials: set[Material] = set()
    for index, sphere in enumerate(scene.spheres):
        try:
            validate_sphere_radius(sphere.radius)
            if sphere.material not in materials:
                _validate_material(sphere.material)
                materials.add(sphere.material)
        except ValueError as exc:
            raise ValueError(f"Sphere {index}: {exc}") from exc

    num_dielectric = sum(isinstance(m, DielectricMaterial) for m in materials)
    if num_dielectric > MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )
    if len(materials) - num_dielectric > MAX_OPAQUE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of opaque materials ({MAX_OPAQUE_MATERIALS}) exceeded"
        )

    for index, light in enumerate(scene.lights):
        try:
            validate_point_light(light.intensity, light.att_c, light.att_l, light.att_q)
        except ValueError as exc:
            raise ValueError(f"Light {index}: {exc}") from exc


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Opaque, Dielectric).
        type_index: The index within the type-specific material array.
        material: The host-side material description.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    material: Material


@dataclass
class SphereEntry:
    """Information about a sphere stored in the scene fields.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


class SceneManager:
    """Unified scene manager coordinating spheres, lights and materials.

    The SceneManager provides a high-level API for building scenes with
    automatic material tracking. It maintains a unified material_id space
    that maps to type-specific material registries, so the shading kernels
    can pick the illumination model of each hit.

    Only one scene lives in the Taichi fields at a time; creating a manager
    or calling ``clear``/``load`` replaces whatever was stored before.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereEntry for all spheres in the scene.
        lights: List of PointLight for all lights in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_opaque_material(albedo=(0.8, 0.1, 0.1), specular_k=0.5)
        >>> glass = scene.add_dielectric_material(refractive_index=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red)
        >>> scene.add_sphere((1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereEntry] = []
        self.lights: list[PointLight] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lights()
        clear_opaque_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres, lights and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self, material_type: MaterialType, type_index: int, material: Material
    ) -> int:
        """Assign a unified ID to a material stored in a type registry."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                material=material,
            )
        )
        return material_id

    def add_opaque_material(
        self,
        albedo: tuple[float, float, float],
        diffuse_k: float = 1.0,
        specular_k: float = 0.0,
        shininess: float = 32.0,
        reflectivity: float = 0.0,
    ) -> int:
        """Add an opaque (locally lit, optionally mirroring) material.

        Args:
            albedo: The base color as (R, G, B), each component in [0, 1].
            diffuse_k: Weight of the diffuse term.
            specular_k: Weight of the specular highlight.
            shininess: Specular exponent.
            reflectivity: Mirror blend factor in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is out of range.
        """
        type_index = add_opaque_material(albedo, diffuse_k, specular_k, shininess, reflectivity)
        material = OpaqueMaterial(
            albedo=tuple(albedo),
            diffuse_k=diffuse_k,
            specular_k=specular_k,
            shininess=shininess,
            reflectivity=reflectivity,
        )
        return self._register_material(MaterialType.OPAQUE, type_index, material)

    def add_dielectric_material(
        self,
        albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
        refractive_index: float = 1.5,
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            albedo: Transmission tint as (R, G, B). Default is clear.
            refractive_index: Index of refraction. Default is 1.5 (typical
                glass). Common values: Air=1.0, Water=1.33, Glass=1.5,
                Diamond=2.4

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the albedo or refractive index is out of range.
        """
        type_index = add_dielectric_material(albedo, refractive_index)
        material = DielectricMaterial(albedo=tuple(albedo), refractive_index=refractive_index)
        return self._register_material(MaterialType.DIELECTRIC, type_index, material)

    def add_material(self, material: Material) -> int:
        """Add a host-side material description to the scene.

        Returns:
            The unified material ID for this material.
        """
        if isinstance(material, DielectricMaterial):
            return self.add_dielectric_material(material.albedo, material.refractive_index)
        if isinstance(material, OpaqueMaterial):
            return self.add_opaque_material(
                material.albedo,
                diffuse_k=material.diffuse_k,
                specular_k=material.specular_k,
                shininess=material.shininess,
                reflectivity=material.reflectivity,
            )
        raise ValueError(f"Unknown material: {material!r}")

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Primitive and Light Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the radius is not
                positive.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereEntry(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_sphere_with_material(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> tuple[int, int]:
        """Add a sphere with a new material in one call.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_material(material)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_light(
        self,
        position: tuple[float, float, float],
        intensity: tuple[float, float, float],
        att_c: float = 1.0,
        att_l: float = 0.0,
        att_q: float = 0.0,
    ) -> int:
        """Add a point light to the scene.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If an attenuation coefficient or intensity component
                is negative.
        """
        light_index = add_point_light(position, intensity, att_c, att_l, att_q)
        self.lights.append(
            PointLight(
                position=tuple(position),
                intensity=tuple(intensity),
                att_c=att_c,
                att_l=att_l,
                att_q=att_q,
            )
        )
        return light_index

    # =========================================================================
    # Scene Loading
    # =========================================================================

    def load(self, scene: Scene) -> None:
        """Replace the current scene with a host-side Scene description.

        Spheres that share an equal material share one material ID. The whole
        scene is validated first, so a rejected scene leaves the current one
        in place.

        Raises:
            RuntimeError: If a capacity limit is exceeded.
            ValueError: If the scene contains invalid data.
        """
        _validate_scene(scene)
        self.clear()

        material_ids: dict[Material, int] = {}
        for sphere in scene.spheres:
            material_id = material_ids.get(sphere.material)
            if material_id is None:
                material_id = self.add_material(sphere.material)
                material_ids[sphere.material] = material_id
            self.add_sphere(sphere.center, sphere.radius, material_id)

        for light in scene.lights:
            self.add_light(light.position, light.intensity, light.att_c, light.att_l, light.att_q)

        logger.debug(
            "Loaded %d spheres, %d materials, %d lights",
            len(self.spheres),
            len(self.materials),
            len(self.lights),
        )

    def to_scene(self) -> Scene:
        """Export the stored scene as a host-side Scene description."""
        spheres = tuple(
            SphereInfo(
                center=entry.center,
                radius=entry.radius,
                material=self.materials[entry.material_id].material,
            )
            for entry in self.spheres
        )
        return Scene(spheres=spheres, lights=tuple(self.lights))

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return self.to_scene().to_dict()

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'spheres' and 'lights' keys.
        """
        self.load(Scene.from_dict(data))

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
