"""Scene-level intersection testing.

This module holds the current frame's primitives and lights in Taichi fields
and provides the two scene queries used by the shader:

- trace_scene: nearest sphere or plane hit along a ray
- trace_lights: summed glow of the positional lights visible along a ray

The fields are written once per frame by upload_scene() from an immutable
Scene snapshot and are only read by the kernels, so pixel invocations share
no mutable state.

Nearest-hit rule: the first hit replaces the miss, and any later hit
replaces the current best only if its distance is strictly smaller. Ties
keep the earlier primitive, and spheres are tested before planes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.builder import build_scene
    >>> from src.whitted.scene.intersection import upload_scene, trace_scene
    >>> upload_scene(build_scene(time=0.0))
    >>> # Use trace_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.geometry.light import Light, is_positional, light_glow
from src.whitted.geometry.plane import Plane, hit_plane, make_plane
from src.whitted.geometry.sphere import Intersect, Sphere, Surface, hit_sphere, make_miss, make_sphere
from src.whitted.scene.builder import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of primitives and lights supported in the scene
MAX_SPHERES = 16
MAX_PLANES = 8
MAX_LIGHTS = 8

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_reflectivity = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_refractivity = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_reflectivity = ti.field(dtype=ti.f32, shape=MAX_PLANES)
plane_refractivity = ti.field(dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Light storage
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_brightness = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives and lights from the scene.

    Resets the counts to zero. The field data is overwritten by the next
    upload_scene().
    """
    num_spheres[None] = 0
    num_planes[None] = 0
    num_lights[None] = 0


def upload_scene(scene: Scene) -> None:
    """Replace the traced scene with a Scene snapshot.

    Args:
        scene: The frame's scene.

    Raises:
        RuntimeError: If the scene exceeds the sphere, plane or light capacity.
    """
    if scene.sphere_count > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    if scene.plane_count > MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    if scene.light_count > MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    for idx, sphere in enumerate(scene.spheres):
        sphere_centers[idx] = list(sphere.center)
        sphere_radii[idx] = sphere.radius
        sphere_colors[idx] = list(sphere.surface.color)
        sphere_reflectivity[idx] = sphere.surface.reflectivity
        sphere_refractivity[idx] = sphere.surface.refractivity

    for idx, plane in enumerate(scene.planes):
        plane_points[idx] = list(plane.point)
        plane_normals[idx] = list(plane.normal)
        plane_colors[idx] = list(plane.surface.color)
        plane_reflectivity[idx] = plane.surface.reflectivity
        plane_refractivity[idx] = plane.surface.refractivity

    for idx, light in enumerate(scene.lights):
        light_positions[idx] = list(light.position)
        light_brightness[idx] = light.brightness
        light_directions[idx] = list(light.direction)

    num_spheres[None] = scene.sphere_count
    num_planes[None] = scene.plane_count
    num_lights[None] = scene.light_count


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Assemble sphere i from the field storage."""
    return make_sphere(
        sphere_centers[i],
        sphere_radii[i],
        Surface(
            color=sphere_colors[i],
            reflectivity=sphere_reflectivity[i],
            refractivity=sphere_refractivity[i],
        ),
    )


@ti.func
def get_plane(i: ti.i32) -> Plane:
    """Assemble plane i from the field storage."""
    return make_plane(
        plane_points[i],
        plane_normals[i],
        Surface(
            color=plane_colors[i],
            reflectivity=plane_reflectivity[i],
            refractivity=plane_refractivity[i],
        ),
    )


@ti.func
def get_light(i: ti.i32) -> Light:
    """Assemble light i from the field storage."""
    return Light(
        position=light_positions[i],
        brightness=light_brightness[i],
        direction=light_directions[i],
    )


@ti.func
def _closer(candidate: Intersect, nearest: Intersect) -> ti.i32:
    """Whether candidate should replace the current nearest hit."""
    return candidate.hit == 1 and (nearest.hit == 0 or candidate.distance < nearest.distance)


@ti.func
def trace_scene(ray_origin: vec3, ray_direction: vec3) -> Intersect:
    """Find the nearest primitive hit along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        The nearest Intersect, or a miss if nothing was hit (always a miss
        for an empty scene).
    """
    nearest = make_miss()

    for i in range(num_spheres[None]):
        candidate = hit_sphere(ray_origin, ray_direction, get_sphere(i))
        if _closer(candidate, nearest):
            nearest = candidate

    for i in range(num_planes[None]):
        candidate = hit_plane(ray_origin, ray_direction, get_plane(i))
        if _closer(candidate, nearest):
            nearest = candidate

    return nearest


@ti.func
def trace_lights(ray_origin: vec3, ray_direction: vec3, nearest: Intersect) -> ti.f32:
    """Sum the glow of positional lights visible along a ray.

    A light counts only if it is closer to the ray origin than the nearest
    primitive hit, or unconditionally when the ray hit nothing.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        nearest: Result of trace_scene for the same ray.

    Returns:
        The summed glow intensity (may exceed 1 when discs overlap).
    """
    total = 0.0
    for i in range(num_lights[None]):
        light = get_light(i)
        if is_positional(light):
            light_distance = tm.length(light.position - ray_origin)
            if nearest.hit == 0 or light_distance < nearest.distance:
                total += light_glow(ray_origin, ray_direction, light)
    return total
