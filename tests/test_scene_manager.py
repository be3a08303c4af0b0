"""Unit tests for the unified scene manager.

Tests cover:
- Unified material IDs across opaque and dielectric registries
- Kernel-side material type lookup
- Sphere and light management with validation
- Loading and exporting host-side scenes
"""

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from whitted.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for adding materials through the manager."""

    def test_unified_material_ids(self, fresh_scene):
        """Test that IDs are shared across material types."""
        from whitted.scene.manager import MaterialType

        red = fresh_scene.add_opaque_material(albedo=(0.8, 0.1, 0.1))
        glass = fresh_scene.add_dielectric_material(refractive_index=1.5)
        blue = fresh_scene.add_opaque_material(albedo=(0.1, 0.1, 0.8))

        assert (red, glass, blue) == (0, 1, 2)
        assert fresh_scene.get_material_count() == 3
        assert fresh_scene.get_material_type_python(glass) == MaterialType.DIELECTRIC
        assert fresh_scene.get_material_info(blue).type_index == 1
        assert fresh_scene.get_material_info(glass).type_index == 0

    def test_unknown_material_id(self, fresh_scene):
        """Test lookups of IDs that were never registered."""
        assert fresh_scene.get_material_info(5) is None
        assert fresh_scene.get_material_type_python(-1) is None

    def test_kernel_side_lookup(self, fresh_scene):
        """Test get_material_type and get_material_type_index in a kernel."""
        from whitted.scene.manager import MaterialType, get_material_type, get_material_type_index

        fresh_scene.add_opaque_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_dielectric_material()

        types = ti.field(dtype=ti.i32, shape=(3,))
        indices = ti.field(dtype=ti.i32, shape=(3,))

        @ti.kernel
        def test_kernel():
            for i in range(3):
                types[i] = get_material_type(i)
                indices[i] = get_material_type_index(i)

        test_kernel()
        assert types[0] == int(MaterialType.OPAQUE)
        assert types[1] == int(MaterialType.DIELECTRIC)
        assert types[2] == -1
        assert indices[0] == 0
        assert indices[1] == 0
        assert indices[2] == -1

    def test_invalid_material_not_registered(self, fresh_scene):
        """Test that a rejected material leaves no unified ID behind."""
        with pytest.raises(ValueError):
            fresh_scene.add_opaque_material(albedo=(2.0, 0.0, 0.0))
        assert fresh_scene.get_material_count() == 0


class TestSphereAndLightManagement:
    """Tests for adding spheres and lights."""

    def test_add_sphere(self, fresh_scene):
        """Test adding a sphere with a registered material."""
        mat = fresh_scene.add_opaque_material(albedo=(0.5, 0.5, 0.5))
        idx = fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, mat)

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.spheres[0].material_id == mat

    def test_add_sphere_invalid_material(self, fresh_scene):
        """Test that spheres need a registered material."""
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, 0)

    def test_add_sphere_with_material(self, fresh_scene):
        """Test adding a sphere and its material in one call."""
        from whitted.scene.model import DielectricMaterial

        sphere_idx, mat_id = fresh_scene.add_sphere_with_material(
            (0.0, 0.0, -1.0), 0.5, DielectricMaterial()
        )
        assert sphere_idx == 0
        assert mat_id == 0
        assert fresh_scene.get_material_count() == 1

    def test_add_light(self, fresh_scene):
        """Test adding a light through the manager."""
        idx = fresh_scene.add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0), att_q=0.1)

        assert idx == 0
        assert fresh_scene.get_light_count() == 1
        assert fresh_scene.lights[0].att_q == 0.1

    def test_clear(self, fresh_scene):
        """Test that clear empties every registry."""
        mat = fresh_scene.add_opaque_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, mat)
        fresh_scene.add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))

        fresh_scene.clear()
        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_light_count() == 0
        assert fresh_scene.get_material_count() == 0

    def test_capacity_information(self):
        """Test the static capacity getters."""
        from whitted.scene.manager import SceneManager

        assert SceneManager.get_max_spheres() == 1024
        assert SceneManager.get_max_lights() == 64
        assert SceneManager.get_max_materials() == 512


class TestSceneLoading:
    """Tests for loading and exporting scenes."""

    def test_load_shares_equal_materials(self, fresh_scene):
        """Test that spheres with equal materials share one ID."""
        from whitted.scene.model import OpaqueMaterial, PointLight, Scene, SphereInfo

        grey = OpaqueMaterial((0.5, 0.5, 0.5))
        scene = Scene(
            spheres=(
                SphereInfo((0.0, 0.0, -1.0), 0.5, grey),
                SphereInfo((1.0, 0.0, -1.0), 0.5, OpaqueMaterial((0.5, 0.5, 0.5))),
            ),
            lights=(PointLight((0.0, 3.0, 0.0), (1.0, 1.0, 1.0)),),
        )
        fresh_scene.load(scene)

        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.get_material_count() == 1
        assert fresh_scene.get_light_count() == 1

    def test_load_replaces_previous_scene(self, fresh_scene):
        """Test that loading clears what was stored before."""
        from whitted.scene.presets import create_basic_scene

        mat = fresh_scene.add_opaque_material(albedo=(0.5, 0.5, 0.5))
        for i in range(5):
            fresh_scene.add_sphere((float(i), 0.0, -3.0), 0.5, mat)

        fresh_scene.load(create_basic_scene())
        assert fresh_scene.get_sphere_count() == 2

    def test_to_scene_round_trip(self, fresh_scene):
        """Test that a loaded scene exports unchanged."""
        from whitted.scene.presets import create_showcase_scene

        scene = create_showcase_scene()
        fresh_scene.load(scene)
        assert fresh_scene.to_scene() == scene

    def test_dict_round_trip(self, fresh_scene):
        """Test to_dict and from_dict through the manager."""
        from whitted.scene.presets import create_shadow_scene

        fresh_scene.load(create_shadow_scene())
        data = fresh_scene.to_dict()

        fresh_scene.clear()
        fresh_scene.from_dict(data)
        assert fresh_scene.to_scene() == create_shadow_scene()

    def test_load_invalid_scene_raises(self, fresh_scene):
        """Test that invalid sphere data raises ValueError."""
        from whitted.scene.model import OpaqueMaterial, Scene, SphereInfo

        scene = Scene(spheres=(SphereInfo((0.0, 0.0, -1.0), -1.0, OpaqueMaterial((0.5, 0.5, 0.5))),))
        with pytest.raises(ValueError):
            fresh_scene.load(scene)

    def test_rejected_scene_keeps_previous_one(self, fresh_scene):
        """Test that a scene with a bad sphere near its end leaves the fields untouched."""
        from whitted.scene.model import OpaqueMaterial, Scene, SphereInfo
        from whitted.scene.presets import create_showcase_scene

        fresh_scene.load(create_showcase_scene())
        grey = OpaqueMaterial((0.5, 0.5, 0.5))
        scene = Scene(
            spheres=(
                SphereInfo((0.0, 0.0, -1.0), 0.5, grey),
                SphereInfo((1.0, 0.0, -1.0), 0.5, OpaqueMaterial((0.2, 0.2, 0.2))),
                SphereInfo((2.0, 0.0, -1.0), 0.0, grey),
            ),
        )
        with pytest.raises(ValueError, match="Sphere 2"):
            fresh_scene.load(scene)

        assert fresh_scene.get_sphere_count() == 4
        assert fresh_scene.get_light_count() == 2
        assert fresh_scene.to_scene() == create_showcase_scene()

    def test_rejected_light_keeps_previous_scene(self, fresh_scene):
        """Test that an invalid light is caught before any sphere is written."""
        from whitted.scene.model import OpaqueMaterial, PointLight, Scene, SphereInfo
        from whitted.scene.presets import create_basic_scene

        fresh_scene.load(create_basic_scene())
        scene = Scene(
            spheres=(SphereInfo((0.0, 0.0, -1.0), 0.5, OpaqueMaterial((0.5, 0.5, 0.5))),),
            lights=(PointLight((0.0, 3.0, 0.0), (1.0, -1.0, 1.0)),),
        )
        with pytest.raises(ValueError, match="Light 0"):
            fresh_scene.load(scene)
        assert fresh_scene.get_sphere_count() == 2

    def test_load_materials_built_from_lists(self, fresh_scene):
        """Test that list colors are accepted and still share one material ID."""
        from whitted.scene.model import OpaqueMaterial, PointLight, Scene, SphereInfo

        scene = Scene(
            spheres=(
                SphereInfo([0.0, 0.0, -1.0], 0.5, OpaqueMaterial([0.5, 0.5, 0.5])),
                SphereInfo([1.0, 0.0, -1.0], 0.5, OpaqueMaterial([0.5, 0.5, 0.5])),
            ),
            lights=(PointLight([0.0, 3.0, 0.0], [1.0, 1.0, 1.0]),),
        )
        fresh_scene.load(scene)

        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.get_material_count() == 1
