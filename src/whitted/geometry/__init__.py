"""Geometry module for primitives and lights.

Components:
    sphere: Surface, Intersect record and ray-sphere intersection
    plane: One-sided infinite plane with ray-plane intersection
    light: Positional/directional lights and the light glow test

All intersection routines are Taichi functions (@ti.func) and return an
Intersect whose ``hit`` flag distinguishes misses from hits:
    rec = hit_shape(ray_origin, ray_direction, shape)
"""

from .light import Light, is_positional, light_glow
from .plane import PLANE_EPSILON, Plane, hit_plane, make_plane
from .sphere import Intersect, Sphere, Surface, hit_sphere, make_miss, make_sphere

__all__ = [
    "Surface",
    "Intersect",
    "Sphere",
    "hit_sphere",
    "make_miss",
    "make_sphere",
    "Plane",
    "hit_plane",
    "make_plane",
    "PLANE_EPSILON",
    "Light",
    "is_positional",
    "light_glow",
]
