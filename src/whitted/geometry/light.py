"""Light sources and their visible glow.

A light has a position, a scalar brightness and a direction. A zero direction
marks a positional light: it falls off with the inverse square of distance
and is drawn as a glowing disc. Any other direction marks a directional light
with no falloff and no disc.

The glow is not geometric shading. A positional light is treated as a sphere
of radius brightness / 100 and the ray's closest-approach distance to its
center is mapped through a smooth falloff between 80% and 100% of that
radius, giving an intensity in [0, 1].
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Glow disc radius per unit of brightness
GLOW_RADIUS_SCALE = 0.01

# Fraction of the glow radius where the falloff starts
GLOW_INNER_FRACTION = 0.8


@ti.dataclass
class Light:
    """A point or directional light.

    Attributes:
        position: World position (vec3). Unused by directional lights.
        brightness: Scalar intensity.
        direction: Zero for positional lights, otherwise the direction toward
            the light used for directional shading.
    """

    position: vec3
    brightness: ti.f32
    direction: vec3


@ti.func
def is_positional(light: Light) -> ti.i32:
    """Return 1 if the light is positional (zero direction), 0 otherwise."""
    return light.direction.x == 0.0 and light.direction.y == 0.0 and light.direction.z == 0.0


@ti.func
def light_glow(ray_origin: vec3, ray_direction: vec3, light: Light) -> ti.f32:
    """Soft-edged visibility of a positional light along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        light: The light to test.

    Returns:
        Glow intensity in [0, 1]; 0 for directional lights and for lights
        behind the ray origin.
    """
    glow = 0.0
    if is_positional(light):
        to_light = light.position - ray_origin
        t = tm.dot(to_light, ray_direction)
        if t > 0.0:
            closest = tm.length(to_light - t * ray_direction)
            radius = light.brightness * GLOW_RADIUS_SCALE
            glow = 1.0 - tm.smoothstep(GLOW_INNER_FRACTION * radius, radius, closest)
    return glow
