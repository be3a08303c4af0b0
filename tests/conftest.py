"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized before fields are created
    from whitted.core.integrator import clear_render_target, reset_render_target
    from whitted.materials.dielectric import clear_dielectric_materials
    from whitted.materials.opaque import clear_opaque_materials
    from whitted.scene.intersection import clear_scene
    from whitted.scene.lights import clear_lights
    from whitted.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lights()
        clear_opaque_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_render_target()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def unit_camera():
    """Set up the default camera for a 2:1 image."""
    from whitted.camera.pinhole import PinholeCamera, setup_camera

    camera = PinholeCamera(aspect_ratio=2.0)
    setup_camera(camera)
    return camera
