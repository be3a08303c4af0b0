"""Unit tests for point light storage and attenuation."""

import pytest
import taichi as ti


class TestLightStorage:
    """Tests for adding and clearing point lights."""

    def test_add_point_light(self):
        """Test adding lights returns consecutive indices."""
        from whitted.scene.lights import add_point_light, get_light_count

        assert get_light_count() == 0
        assert add_point_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0)) == 0
        assert add_point_light((1.0, 5.0, 0.0), (2.0, 2.0, 2.0)) == 1
        assert get_light_count() == 2

    def test_clear_lights(self):
        """Test that clearing removes every light."""
        from whitted.scene.lights import add_point_light, clear_lights, get_light_count

        add_point_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))
        clear_lights()
        assert get_light_count() == 0

    def test_negative_attenuation_rejected(self):
        """Test that negative attenuation coefficients are rejected."""
        from whitted.scene.lights import add_point_light, get_light_count

        with pytest.raises(ValueError):
            add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), att_c=-1.0)
        with pytest.raises(ValueError):
            add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), att_q=-0.1)
        assert get_light_count() == 0

    def test_negative_intensity_rejected(self):
        """Test that negative intensity components are rejected."""
        from whitted.scene.lights import add_point_light

        with pytest.raises(ValueError):
            add_point_light((0.0, 0.0, 0.0), (1.0, -0.5, 1.0))

    def test_intensity_above_one_allowed(self):
        """Test that bright lights with intensity above one are accepted."""
        from whitted.scene.lights import add_point_light, get_light_count

        add_point_light((0.0, 0.0, 0.0), (5.0, 5.0, 5.0))
        assert get_light_count() == 1

    def test_capacity_exceeded(self):
        """Test that exceeding MAX_LIGHTS raises RuntimeError."""
        from whitted.scene.lights import MAX_LIGHTS, add_point_light

        for i in range(MAX_LIGHTS):
            add_point_light((float(i), 0.0, 0.0), (1.0, 1.0, 1.0))
        with pytest.raises(RuntimeError):
            add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))


class TestAttenuation:
    """Tests for distance attenuation."""

    def _evaluate(self, c, l, q, distance):
        from whitted.scene.lights import attenuation_factor, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(c: ti.f32, l: ti.f32, q: ti.f32, d: ti.f32):
            result[None] = attenuation_factor(vec3(c, l, q), d)

        test_kernel(c, l, q, distance)
        return result[None]

    def test_constant_only_is_one(self):
        """Test that the default coefficients do not attenuate."""
        assert abs(self._evaluate(1.0, 0.0, 0.0, 10.0) - 1.0) < 1e-6

    def test_quadratic_falloff(self):
        """Test inverse-polynomial falloff with distance."""
        value = self._evaluate(1.0, 0.0, 0.25, 2.0)
        assert abs(value - 0.5) < 1e-6

    def test_linear_falloff(self):
        """Test falloff with only a linear term."""
        value = self._evaluate(1.0, 0.5, 0.0, 6.0)
        assert abs(value - 0.25) < 1e-6

    def test_clamped_to_one(self):
        """Test that small denominators are clamped to full intensity."""
        value = self._evaluate(0.5, 0.0, 0.0, 1.0)
        assert abs(value - 1.0) < 1e-6

    def test_decreases_with_distance(self):
        """Test that the factor never increases with distance."""
        near = self._evaluate(1.0, 0.1, 0.01, 1.0)
        far = self._evaluate(1.0, 0.1, 0.01, 5.0)
        assert far < near

    def test_light_direction_and_attenuated_intensity(self):
        """Test direction, distance and attenuated intensity to a light."""
        from whitted.scene.lights import (
            add_point_light,
            attenuated_intensity,
            light_direction,
            vec3,
        )

        add_point_light((0.0, 4.0, 0.0), (2.0, 2.0, 2.0), att_c=1.0, att_q=0.0625)

        direction = ti.field(dtype=ti.math.vec3, shape=())
        distance = ti.field(dtype=ti.f32, shape=())
        intensity = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, dist = light_direction(0, vec3(0.0, 0.0, 0.0))
            direction[None] = d
            distance[None] = dist
            intensity[None] = attenuated_intensity(0, dist)

        test_kernel()
        assert abs(direction[None][1] - 1.0) < 1e-6
        assert abs(distance[None] - 4.0) < 1e-5
        # 1 / (1 + 0.0625 * 16) = 0.5
        assert abs(intensity[None][0] - 1.0) < 1e-5
