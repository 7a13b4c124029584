"""Scene module for the per-frame scene and ray-scene queries.

Components:
    builder: Immutable scene records and the time-animated scene factory
    intersection: Taichi field storage, nearest-hit and light glow queries

The host builds a Scene snapshot once per frame and uploads it into
Structure-of-Arrays fields. Kernels only read those fields.
"""

from .builder import (
    LightSpec,
    PlaneSpec,
    Scene,
    SphereSpec,
    SurfaceSpec,
    build_scene,
    empty_scene,
)
from .intersection import (
    MAX_LIGHTS,
    MAX_PLANES,
    MAX_SPHERES,
    clear_scene,
    get_light_count,
    get_plane_count,
    get_sphere_count,
    trace_lights,
    trace_scene,
    upload_scene,
)

__all__ = [
    # Builder module
    "Scene",
    "SurfaceSpec",
    "SphereSpec",
    "PlaneSpec",
    "LightSpec",
    "build_scene",
    "empty_scene",
    # Intersection module
    "upload_scene",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "get_light_count",
    "trace_scene",
    "trace_lights",
    "MAX_SPHERES",
    "MAX_PLANES",
    "MAX_LIGHTS",
]
