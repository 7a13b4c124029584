"""Core rendering module.

Components:
    ray: Ray data structure, reflection/refraction and Fresnel helpers
    integrator: Bounded bounce loop, direct lighting and the per-pixel kernel
    frame: Frame driver mapping per-frame inputs to a rendered RGBA image

The integrator is a fixed-depth loop with explicit state (color, mask and
previous attenuation) standing in for recursion, and every pixel is an
independent kernel invocation with no shared mutable state.
"""

from .ray import (
    GAMMA,
    Ray,
    gamma_encode,
    make_ray,
    near_zero,
    reflect,
    refract,
    schlick_fresnel,
    vec3,
)

# Note: integrator and frame are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.frame.

__all__ = [
    "GAMMA",
    "Ray",
    "make_ray",
    "vec3",
    "near_zero",
    "reflect",
    "refract",
    "schlick_fresnel",
    "gamma_encode",
]
