"""Yaw-only pinhole camera for per-pixel primary ray generation.

The camera is positioned anywhere in the world and can only turn about the
vertical axis. It builds a view basis from its yaw angle:
- forward: (sin(yaw), 0, -cos(yaw)), so yaw 0 looks down -z
- up: world up (0, 1, 0)
- right: -up x forward

The view plane sits at unit distance along forward. Its half-width is
tan(fov / 2) and its half-height is the half-width scaled by height / width.
Pixel (0, 0) maps to the top-left corner of the view plane; x grows to the
right and y grows downward.

Zero width or height is not checked here and divides by zero; callers
guarantee positive dimensions.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.camera.pinhole import YawCamera, setup_camera, get_ray
    >>>
    >>> camera = YawCamera(position=(0.0, 0.0, 0.0), yaw=0.0)
    >>> setup_camera(camera, width=640, height=480)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(320, 240)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, make_ray

# Fixed horizontal field of view in degrees
FOV_DEGREES = 90.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class YawCamera:
    """Configuration for the yaw camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        yaw: Rotation about the vertical axis in degrees. Positive yaw turns
            right (toward +x).
        fov: Field of view in degrees across the image width.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    yaw: float = 0.0
    fov: float = FOV_DEGREES


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# View basis
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())

# View plane corner and per-pixel steps
_top_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_x_increment = ti.Vector.field(3, dtype=ti.f32, shape=())
_y_increment = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per frame)
# =============================================================================


def compute_view_basis(yaw: float) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute (forward, right, up) unit vectors for a yaw angle in degrees."""
    theta = math.radians(yaw)
    forward = np.array([math.sin(theta), 0.0, -math.cos(theta)], dtype=np.float32)
    up = np.array([0.0, 1.0, 0.0], dtype=np.float32)
    right = -np.cross(up, forward)
    return forward, right, up


def setup_camera(camera: YawCamera, width: int, height: int) -> None:
    """Initialize camera state for an image size.

    Computes the view basis, the top-left corner of the view plane, and the
    per-pixel increments along right and up.

    Args:
        camera: Camera configuration with position, yaw and FOV.
        width: Image width in pixels.
        height: Image height in pixels.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    forward, right, up = compute_view_basis(camera.yaw)

    half_width = math.tan(math.radians(camera.fov) / 2.0)
    half_height = half_width * height / width

    top_left = forward + up * half_height - right * half_width
    x_increment = right * (2.0 * half_width / width)
    y_increment = up * (2.0 * half_height / height)

    _camera_origin[None] = list(camera.position)
    _camera_forward[None] = forward.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _top_left[None] = top_left.tolist()
    _x_increment[None] = x_increment.tolist()
    _y_increment[None] = y_increment.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(x: ti.i32, y: ti.i32) -> Ray:
    """Generate the primary ray through pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        A Ray from the camera position with unit direction
        normalize(top_left + x * x_increment - y * y_increment).
    """
    direction = tm.normalize(
        _top_left[None]
        + ti.cast(x, ti.f32) * _x_increment[None]
        - ti.cast(y, ti.f32) * _y_increment[None]
    )
    return make_ray(_camera_origin[None], direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, forward, right, up, top_left, x_increment
        and y_increment.
    """
    fields = {
        "origin": _camera_origin,
        "forward": _camera_forward,
        "right": _camera_right,
        "up": _camera_up,
        "top_left": _top_left,
        "x_increment": _x_increment,
        "y_increment": _y_increment,
    }
    info = {}
    for name, field in fields.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
