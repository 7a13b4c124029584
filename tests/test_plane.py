"""Unit tests for one-sided plane intersection."""

import math

import pytest
import taichi as ti


def _trace_plane(origin, direction, point, normal):
    """Run hit_plane in a kernel and return (hit, distance, normal)."""
    from src.whitted.geometry.plane import hit_plane, make_plane
    from src.whitted.geometry.sphere import Surface, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())
    hit_normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        o: ti.math.vec3, d: ti.math.vec3, p: ti.math.vec3, n: ti.math.vec3
    ):
        surface = Surface(color=vec3(1.0, 1.0, 1.0), reflectivity=0.0, refractivity=0.0)
        record = hit_plane(o, d, make_plane(p, n, surface))
        hit[None] = record.hit
        distance[None] = record.distance
        hit_normal[None] = record.normal

    test_kernel(
        ti.math.vec3(*origin), ti.math.vec3(*direction), ti.math.vec3(*point), ti.math.vec3(*normal)
    )
    n = hit_normal[None]
    return hit[None], distance[None], (n[0], n[1], n[2])


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    FLOOR_POINT = (0.0, -1.0, 0.0)
    FLOOR_NORMAL = (0.0, -1.0, 0.0)

    def test_floor_hit_from_above(self):
        """A downward ray hits the floor at the height difference."""
        hit, distance, normal = _trace_plane(
            (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), self.FLOOR_POINT, self.FLOOR_NORMAL
        )
        assert hit == 1
        assert distance == pytest.approx(3.0, abs=1e-5)
        # Returned normal faces the incoming ray
        assert normal == pytest.approx((0.0, 1.0, 0.0), abs=1e-6)

    def test_oblique_hit(self):
        """A 45 degree ray travels sqrt(2) times the height."""
        s = math.sqrt(0.5)
        hit, distance, _ = _trace_plane(
            (0.0, 0.0, 0.0), (0.0, -s, -s), self.FLOOR_POINT, self.FLOOR_NORMAL
        )
        assert hit == 1
        assert distance == pytest.approx(math.sqrt(2.0), abs=1e-4)

    def test_back_side_never_hits(self):
        """Rays approaching from below the floor do not hit."""
        hit, _, _ = _trace_plane(
            (0.0, -3.0, 0.0), (0.0, 1.0, 0.0), self.FLOOR_POINT, self.FLOOR_NORMAL
        )
        assert hit == 0

    def test_parallel_ray_never_hits(self):
        """dot(n, d) = 0 is rejected."""
        hit, _, _ = _trace_plane(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), self.FLOOR_POINT, self.FLOOR_NORMAL
        )
        assert hit == 0

    def test_grazing_ray_below_epsilon_never_hits(self):
        """dot(n, d) at or below the epsilon is rejected even if the plane is ahead."""
        from src.whitted.geometry.plane import PLANE_EPSILON

        dy = PLANE_EPSILON * 0.5
        dz = math.sqrt(1.0 - dy * dy)
        hit, _, _ = _trace_plane(
            (0.0, 0.0, 0.0), (0.0, -dy, -dz), self.FLOOR_POINT, self.FLOOR_NORMAL
        )
        assert hit == 0

    def test_plane_behind_origin_misses(self):
        """Negative distances are rejected."""
        # Floor normal points down, ray goes down, but the origin is already below
        hit, _, _ = _trace_plane(
            (0.0, -2.0, 0.0), (0.0, -1.0, 0.0), self.FLOOR_POINT, self.FLOOR_NORMAL
        )
        assert hit == 0
