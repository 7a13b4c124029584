"""Camera module for primary ray generation.

Components:
    pinhole: Yaw-only pinhole camera with a fixed 90 degree field of view

Ray generation uses integer pixel coordinates:
    x in [0, width): left to right across image
    y in [0, height): top to bottom across image
"""

from .pinhole import (
    FOV_DEGREES,
    YawCamera,
    compute_view_basis,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "FOV_DEGREES",
    "YawCamera",
    "compute_view_basis",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
