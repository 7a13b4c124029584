"""One-sided infinite plane primitive.

A plane is defined by a point on it and a unit normal. Only rays whose
direction has a positive component along the stored normal beyond
PLANE_EPSILON can hit it, so the stored normal points away from the visible
side and grazing rays never hit (this also keeps the distance division away
from zero). The normal reported in the Intersect is the negated plane normal,
which faces the incoming ray.

Ray-plane intersection solves:
    dist = dot(point - origin, normal) / dot(normal, direction)

and rejects negative distances.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.plane import Plane, hit_plane
    >>> # Floor at y = -1 seen from above: stored normal points down
    >>> floor = Plane(point=ti.math.vec3(0, -1, 0), normal=ti.math.vec3(0, -1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import Intersect, Surface, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum dot(normal, direction) for a ray to count as approaching the front face
PLANE_EPSILON = 1e-3


@ti.dataclass
class Plane:
    """An infinite one-sided plane.

    Attributes:
        point: Any point on the plane (vec3).
        normal: Unit normal, pointing away from the visible side (vec3).
        surface: The plane's Surface.
    """

    point: vec3
    normal: vec3
    surface: Surface


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> Intersect:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The plane to test intersection against.

    Returns:
        An Intersect with the ray-facing normal, or a miss.
    """
    result = make_miss()

    denom = tm.dot(plane.normal, ray_direction)
    if denom > PLANE_EPSILON:
        dist = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if dist >= 0.0:
            result = Intersect(
                hit=1,
                distance=dist,
                normal=-plane.normal,
                surface=plane.surface,
            )

    return result


@ti.func
def make_plane(point: vec3, normal: vec3, surface: Surface) -> Plane:
    """Create a plane from a point, a unit normal and a surface."""
    return Plane(point=point, normal=normal, surface=surface)
