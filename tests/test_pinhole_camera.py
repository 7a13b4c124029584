"""Unit tests for the yaw camera and primary ray generation."""

import math

import numpy as np
import pytest
import taichi as ti


def _ray(x, y):
    """Generate the primary ray for pixel (x, y) and return (origin, direction)."""
    from src.whitted.camera.pinhole import get_ray

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(px: ti.i32, py: ti.i32):
        ray = get_ray(px, py)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(x, y)
    o = origin[None]
    d = direction[None]
    return (o[0], o[1], o[2]), (d[0], d[1], d[2])


class TestViewBasis:
    """Tests for compute_view_basis."""

    def test_yaw_zero_looks_down_negative_z(self):
        from src.whitted.camera.pinhole import compute_view_basis

        forward, right, up = compute_view_basis(0.0)
        np.testing.assert_allclose(forward, [0.0, 0.0, -1.0], atol=1e-7)
        np.testing.assert_allclose(right, [1.0, 0.0, 0.0], atol=1e-7)
        np.testing.assert_allclose(up, [0.0, 1.0, 0.0], atol=1e-7)

    def test_yaw_ninety_looks_down_positive_x(self):
        from src.whitted.camera.pinhole import compute_view_basis

        forward, right, _ = compute_view_basis(90.0)
        np.testing.assert_allclose(forward, [1.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(right, [0.0, 0.0, 1.0], atol=1e-6)

    def test_basis_is_orthonormal(self):
        from src.whitted.camera.pinhole import compute_view_basis

        forward, right, up = compute_view_basis(33.0)
        for v in (forward, right, up):
            assert np.linalg.norm(v) == pytest.approx(1.0, abs=1e-6)
        assert np.dot(forward, right) == pytest.approx(0.0, abs=1e-6)
        assert np.dot(forward, up) == pytest.approx(0.0, abs=1e-6)


class TestSetupCamera:
    """Tests for setup_camera."""

    def test_view_plane_corners(self):
        """With a 90 degree FOV and square image the top-left corner is (-1, 1, -1)."""
        from src.whitted.camera.pinhole import YawCamera, get_camera_info, setup_camera

        setup_camera(YawCamera(), 4, 4)
        info = get_camera_info()
        assert info["top_left"] == pytest.approx((-1.0, 1.0, -1.0))
        assert info["x_increment"] == pytest.approx((0.5, 0.0, 0.0))
        assert info["y_increment"] == pytest.approx((0.0, 0.5, 0.0))

    def test_aspect_ratio_scales_height(self):
        from src.whitted.camera.pinhole import YawCamera, get_camera_info, setup_camera

        setup_camera(YawCamera(), 8, 4)
        info = get_camera_info()
        assert info["top_left"] == pytest.approx((-1.0, 0.5, -1.0))
        assert info["x_increment"] == pytest.approx((0.25, 0.0, 0.0))
        assert info["y_increment"] == pytest.approx((0.0, 0.25, 0.0))

    def test_position_is_uploaded(self):
        from src.whitted.camera.pinhole import YawCamera, get_camera_info, setup_camera

        setup_camera(YawCamera(position=(1.0, 2.0, 3.0), yaw=45.0), 10, 10)
        assert get_camera_info()["origin"] == pytest.approx((1.0, 2.0, 3.0))


class TestGetRay:
    """Tests for primary ray generation."""

    def test_center_pixel_looks_forward(self):
        from src.whitted.camera.pinhole import YawCamera, setup_camera

        setup_camera(YawCamera(position=(0.5, 0.0, 0.0)), 4, 4)
        origin, direction = _ray(2, 2)
        assert origin == pytest.approx((0.5, 0.0, 0.0))
        assert direction == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)

    def test_top_left_pixel(self):
        """Pixel (0, 0) is the upper-left corner of the view plane."""
        from src.whitted.camera.pinhole import YawCamera, setup_camera

        setup_camera(YawCamera(), 4, 4)
        _, direction = _ray(0, 0)
        s = 1.0 / math.sqrt(3.0)
        assert direction == pytest.approx((-s, s, -s), abs=1e-6)

    def test_directions_are_unit_length(self):
        from src.whitted.camera.pinhole import YawCamera, setup_camera

        setup_camera(YawCamera(yaw=-30.0), 16, 9)
        for x, y in [(0, 0), (15, 8), (7, 3)]:
            _, d = _ray(x, y)
            assert math.sqrt(sum(c * c for c in d)) == pytest.approx(1.0, abs=1e-5)

    def test_yaw_rotates_rays(self):
        """Turning right by 90 degrees makes the center ray point down +x."""
        from src.whitted.camera.pinhole import YawCamera, setup_camera

        setup_camera(YawCamera(yaw=90.0), 4, 4)
        _, direction = _ray(2, 2)
        assert direction == pytest.approx((1.0, 0.0, 0.0), abs=1e-6)
