"""Ray data structure and vector utilities for the per-pixel ray tracer.

This module provides the Ray dataclass and the small set of optics helpers
used by the shading loop: mirror reflection, Snell refraction, Schlick's
Fresnel approximation and gamma encoding. All operations are Taichi
functions so they can be called from inside the per-pixel kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = make_ray(origin, direction)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Display gamma applied to the final pixel color
GAMMA = 2.2


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Primary, shadow,
            reflected and refracted rays are always built with unit directions.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract an incident vector through a surface.

    Computes the refracted direction using Snell's law. The normal must face
    the side the incident ray arrives from. If total internal reflection
    occurs, returns a zero vector.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal facing the incident side (normalized).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector, or zero vector if total internal
        reflection occurs.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        result = eta * incident + (eta * cos_i - cos_t) * normal
    return result


@ti.func
def schlick_fresnel(color: vec3, reflectivity: ti.f32, cosine: ti.f32) -> vec3:
    """Compute per-channel Fresnel reflectance using Schlick's approximation.

    The normal-incidence reflectance is tinted by the surface color, so the
    result is a color rather than a scalar.

    Args:
        color: Base color of the surface.
        reflectivity: Surface reflectivity in [0, 1].
        cosine: Cosine between the surface normal and the reversed ray
            direction, already clamped to [0, 1].

    Returns:
        The approximate Fresnel reflectance for each color channel.
    """
    r0 = color * reflectivity
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def gamma_encode(color: vec3) -> vec3:
    """Encode a linear color for display: channel^(1/GAMMA).

    Values above 1 are not clamped.
    """
    return color ** (1.0 / GAMMA)
