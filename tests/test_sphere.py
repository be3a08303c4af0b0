"""Unit tests for Sphere and ray-sphere intersection.

Tests cover:
- Front face hits from outside the sphere
- Misses and grazing rays
- Back face hits from inside the sphere
- The open (t_min, t_max) interval
"""

import taichi as ti


def _make_hit_kernel():
    """Build result fields and a kernel wrapping hit_sphere."""
    from whitted.geometry.sphere import hit_sphere, make_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def run(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        cx: ti.f32, cy: ti.f32, cz: ti.f32,
        radius: ti.f32, t_min: ti.f32, t_max: ti.f32,
    ):
        sphere = make_sphere(vec3(cx, cy, cz), radius)
        rec = hit_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere, t_min, t_max)
        hit[None] = rec.hit
        t[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal
        front_face[None] = rec.front_face

    return run, hit, t, point, normal, front_face


class TestSphereHit:
    """Tests for hit_sphere."""

    def test_hit_from_outside(self):
        """Test a head-on hit at distance minus radius."""
        run, hit, t, point, normal, front_face = _make_hit_kernel()
        run(0, 0, 0, 0, 0, -1, 0, 0, -5, 1.0, 1e-3, 1e10)

        assert hit[None] == 1
        assert abs(t[None] - 4.0) < 1e-5
        assert abs(point[None][2] - (-4.0)) < 1e-5
        n = normal[None]
        assert abs(n[0]) < 1e-5
        assert abs(n[1]) < 1e-5
        assert abs(n[2] - 1.0) < 1e-5
        assert front_face[None] == 1

    def test_unnormalized_direction(self):
        """Test that t scales with the direction length."""
        run, hit, t, point, _, _ = _make_hit_kernel()
        run(0, 0, 0, 0, 0, -2, 0, 0, -5, 1.0, 1e-3, 1e10)

        assert hit[None] == 1
        assert abs(t[None] - 2.0) < 1e-5
        assert abs(point[None][2] - (-4.0)) < 1e-5

    def test_miss(self):
        """Test a ray passing beside the sphere."""
        run, hit, *_ = _make_hit_kernel()
        run(0, 0, 0, 0, 0, -1, 3, 0, -5, 1.0, 1e-3, 1e10)

        assert hit[None] == 0

    def test_sphere_behind_ray(self):
        """Test that a sphere behind the origin is not hit."""
        run, hit, *_ = _make_hit_kernel()
        run(0, 0, 0, 0, 0, -1, 0, 0, 5, 1.0, 1e-3, 1e10)

        assert hit[None] == 0

    def test_hit_from_inside(self):
        """Test a back face hit with the normal facing inward."""
        run, hit, t, _, normal, front_face = _make_hit_kernel()
        run(0, 0, 0, 1, 0, 0, 0, 0, 0, 2.0, 1e-3, 1e10)

        assert hit[None] == 1
        assert abs(t[None] - 2.0) < 1e-5
        assert front_face[None] == 0
        n = normal[None]
        assert abs(n[0] - (-1.0)) < 1e-5

    def test_normal_is_unit_length(self):
        """Test that the returned normal is normalized."""
        run, hit, _, _, normal, _ = _make_hit_kernel()
        run(0.3, 0.2, 0, 0, 0, -1, 0, 0, -5, 1.5, 1e-3, 1e10)

        assert hit[None] == 1
        n = normal[None]
        assert abs((n[0] ** 2 + n[1] ** 2 + n[2] ** 2) - 1.0) < 1e-5

    def test_near_root_outside_interval_uses_far_root(self):
        """Test that a near root below t_min falls back to the far root."""
        run, hit, t, _, _, front_face = _make_hit_kernel()
        run(0, 0, 0, 0, 0, -1, 0, 0, -5, 1.0, 4.5, 1e10)

        assert hit[None] == 1
        assert abs(t[None] - 6.0) < 1e-5
        assert front_face[None] == 0

    def test_hit_beyond_t_max_rejected(self):
        """Test that hits at or beyond t_max are rejected."""
        run, hit, *_ = _make_hit_kernel()
        run(0, 0, 0, 0, 0, -1, 0, 0, -5, 1.0, 1e-3, 3.0)

        assert hit[None] == 0
