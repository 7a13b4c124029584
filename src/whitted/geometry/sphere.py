"""Surface, intersection record and sphere primitive.

A sphere is intersected geometrically: the ray is projected onto the line
toward the sphere center, the closest-approach distance is compared with the
radius, and the chord half-length gives the two candidate roots.

Root policy:
    - both roots negative: miss (sphere entirely behind the origin)
    - exactly one negative: the positive root (origin inside the sphere)
    - otherwise: the nearer root

The returned normal is always the outward normal, also for hits from inside
the sphere; the refraction code relies on it to detect exiting rays.

Misses are reported through the ``hit`` flag of Intersect. A hit at exactly
zero distance is a real hit, not a miss.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import Sphere, Surface, hit_sphere
    >>> surface = Surface(color=ti.math.vec3(1, 0, 0), reflectivity=0.0, refractivity=0.0)
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -4), radius=1.0, surface=surface)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Surface:
    """Appearance of a primitive.

    Attributes:
        color: Base color, each channel in [0, 1].
        reflectivity: Mirror reflectivity in [0, 1]. 0 is fully diffuse.
        refractivity: 0 for opaque surfaces, otherwise the relative index of
            refraction used for Snell's law.
    """

    color: vec3
    reflectivity: ti.f32
    refractivity: ti.f32


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and surface.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        surface: The sphere's Surface.
    """

    center: vec3
    radius: ti.f32
    surface: Surface


@ti.dataclass
class Intersect:
    """Result of a ray-primitive intersection test.

    Attributes:
        hit: 1 if the ray hit the primitive, 0 on a miss.
        distance: Distance along the ray to the hit. Only valid if hit == 1.
        normal: Unit surface normal at the hit. Only valid if hit == 1.
        surface: Surface of the hit primitive. Only valid if hit == 1.
    """

    hit: ti.i32
    distance: ti.f32
    normal: vec3
    surface: Surface


@ti.func
def make_miss() -> Intersect:
    """Create an Intersect indicating no intersection."""
    return Intersect(
        hit=0,
        distance=0.0,
        normal=vec3(0.0, 0.0, 0.0),
        surface=Surface(color=vec3(0.0, 0.0, 0.0), reflectivity=0.0, refractivity=0.0),
    )


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> Intersect:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        An Intersect for the selected root, or a miss.
    """
    result = make_miss()

    # Projection of the center onto the ray
    to_center = sphere.center - ray_origin
    t = tm.dot(to_center, ray_direction)

    # Squared closest-approach distance between ray line and center
    y2 = tm.dot(to_center, to_center) - t * t
    y = ti.sqrt(ti.max(y2, 0.0))

    if y <= sphere.radius:
        x = ti.sqrt(sphere.radius * sphere.radius - y * y)
        t1 = t - x
        t2 = t + x

        if not (t1 < 0.0 and t2 < 0.0):
            # t1 <= t2, so a single negative root is always t1
            dist = t1
            if t1 < 0.0:
                dist = t2

            hit_point = ray_origin + dist * ray_direction
            result = Intersect(
                hit=1,
                distance=dist,
                normal=(hit_point - sphere.center) / sphere.radius,
                surface=sphere.surface,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, surface: Surface) -> Sphere:
    """Create a sphere from center, radius and surface."""
    return Sphere(center=center, radius=radius, surface=surface)
