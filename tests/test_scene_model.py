"""Unit tests for the host-side scene description and JSON files."""

import json

import pytest


class TestMaterialFromProperties:
    """Tests for building materials from the flat property record."""

    def test_zero_transparency_is_opaque(self):
        """Test that an opaque record keeps its lighting properties."""
        from whitted.scene.model import OpaqueMaterial, material_from_properties

        material = material_from_properties(
            (0.8, 0.2, 0.2), specular_k=0.5, shininess=64.0, reflectivity=0.3
        )
        assert material == OpaqueMaterial(
            albedo=(0.8, 0.2, 0.2),
            diffuse_k=1.0,
            specular_k=0.5,
            shininess=64.0,
            reflectivity=0.3,
        )

    def test_positive_transparency_is_dielectric(self):
        """Test that any transparency selects the dielectric model."""
        from whitted.scene.model import DielectricMaterial, material_from_properties

        material = material_from_properties(
            (1.0, 1.0, 1.0), reflectivity=0.9, transparency=0.5, refractive_index=1.33
        )
        assert material == DielectricMaterial(albedo=(1.0, 1.0, 1.0), refractive_index=1.33)

    def test_transparency_out_of_range(self):
        """Test that transparency outside [0, 1] is rejected."""
        from whitted.scene.model import material_from_properties

        with pytest.raises(ValueError):
            material_from_properties((1.0, 1.0, 1.0), transparency=1.5)
        with pytest.raises(ValueError):
            material_from_properties((1.0, 1.0, 1.0), transparency=-0.1)


class TestVectorFields:
    """Tests for the conversion of vector fields to float tuples."""

    def test_list_albedo_is_hashable(self):
        """Test that materials built from lists hash and compare like tuples."""
        from whitted.scene.model import DielectricMaterial, OpaqueMaterial

        opaque = OpaqueMaterial([0.5, 0.5, 0.5])
        assert opaque.albedo == (0.5, 0.5, 0.5)
        assert hash(opaque) == hash(OpaqueMaterial((0.5, 0.5, 0.5)))
        assert {opaque: 1}[OpaqueMaterial((0.5, 0.5, 0.5))] == 1

        glass = DielectricMaterial(albedo=[1, 1, 1])
        assert glass == DielectricMaterial()

    def test_sphere_and_light_vectors(self):
        """Test that sphere and light vectors become float tuples."""
        from whitted.scene.model import OpaqueMaterial, PointLight, SphereInfo

        sphere = SphereInfo([0, 0, -1], 0.5, OpaqueMaterial((0.5, 0.5, 0.5)))
        light = PointLight([0, 3, 0], [1, 1, 1])
        assert sphere.center == (0.0, 0.0, -1.0)
        assert light.position == (0.0, 3.0, 0.0)
        assert light.intensity == (1.0, 1.0, 1.0)

    def test_wrong_length_rejected(self):
        """Test that a vector without three components raises ValueError."""
        from whitted.scene.model import OpaqueMaterial

        with pytest.raises(ValueError):
            OpaqueMaterial((0.5, 0.5))


class TestSceneSerialization:
    """Tests for Scene.to_dict and Scene.from_dict."""

    def _scene(self):
        from whitted.scene.model import (
            DielectricMaterial,
            OpaqueMaterial,
            PointLight,
            Scene,
            SphereInfo,
        )

        return Scene(
            spheres=(
                SphereInfo((0.0, 0.0, -1.0), 0.5, DielectricMaterial(refractive_index=1.5)),
                SphereInfo(
                    (0.0, -100.5, -1.0),
                    100.0,
                    OpaqueMaterial((0.8, 0.8, 0.0), specular_k=0.2, reflectivity=0.1),
                ),
            ),
            lights=(PointLight((2.0, 2.0, 0.0), (1.0, 1.0, 1.0), att_q=0.01),),
        )

    def test_round_trip(self):
        """Test that a scene survives export and import unchanged."""
        from whitted.scene.model import Scene

        scene = self._scene()
        assert Scene.from_dict(scene.to_dict()) == scene

    def test_material_type_tags(self):
        """Test that exported materials carry their type tag."""
        data = self._scene().to_dict()

        assert data["spheres"][0]["material"]["type"] == "dielectric"
        assert data["spheres"][1]["material"]["type"] == "opaque"

    def test_defaults_applied(self):
        """Test that missing keys fall back to defaults."""
        from whitted.scene.model import OpaqueMaterial, Scene

        scene = Scene.from_dict({"spheres": [{"center": [1, 2, 3]}]})

        assert len(scene.spheres) == 1
        assert scene.spheres[0].center == (1.0, 2.0, 3.0)
        assert scene.spheres[0].radius == 1.0
        assert isinstance(scene.spheres[0].material, OpaqueMaterial)
        assert scene.lights == ()

    def test_properties_material(self):
        """Test loading a flat property record with transparency."""
        from whitted.scene.model import DielectricMaterial, Scene

        scene = Scene.from_dict(
            {
                "spheres": [
                    {
                        "center": [0, 0, -1],
                        "radius": 0.5,
                        "material": {
                            "type": "properties",
                            "albedo": [1, 1, 1],
                            "transparency": 1.0,
                            "refractive_index": 1.5,
                        },
                    }
                ]
            }
        )
        assert isinstance(scene.spheres[0].material, DielectricMaterial)

    def test_unknown_material_type(self):
        """Test that unknown material types raise ValueError."""
        from whitted.scene.model import Scene

        with pytest.raises(ValueError, match="Unknown material type"):
            Scene.from_dict({"spheres": [{"material": {"type": "metal"}}]})

    def test_wrong_vector_length(self):
        """Test that vectors without three components raise ValueError."""
        from whitted.scene.model import Scene

        with pytest.raises(ValueError):
            Scene.from_dict({"spheres": [{"center": [0, 0]}]})


class TestSceneFiles:
    """Tests for load_scene and save_scene."""

    def test_save_and_load(self, tmp_path):
        """Test writing a scene to JSON and reading it back."""
        from whitted.scene.model import (
            OpaqueMaterial,
            PointLight,
            Scene,
            SphereInfo,
            load_scene,
            save_scene,
        )

        scene = Scene(
            spheres=(SphereInfo((0.0, 0.0, -1.0), 0.5, OpaqueMaterial((0.5, 0.5, 0.5))),),
            lights=(PointLight((0.0, 3.0, -1.0), (1.0, 1.0, 1.0)),),
        )
        path = tmp_path / "scene.json"
        save_scene(scene, path)

        with path.open() as f:
            assert "spheres" in json.load(f)
        assert load_scene(path) == scene

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file raises OSError."""
        from whitted.scene.model import load_scene

        with pytest.raises(OSError):
            load_scene(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        """Test that malformed JSON raises ValueError."""
        from whitted.scene.model import load_scene

        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_scene(path)
