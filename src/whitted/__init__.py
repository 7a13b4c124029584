"""Taichi-based Whitted-style ray tracer.

Every output pixel is computed by one independent kernel invocation that
rebuilds nothing shared and writes exactly one location of the image, with:
- Ray-sphere and one-sided ray-plane intersection
- Direct lighting from positional and directional lights with hard shadows
- Schlick-weighted mirror reflection and Snell refraction
- Visible glow discs for positional lights
- Gamma encoding of the final color

Subpackages:
    core: Ray utilities, the shading integrator, and the frame driver
    geometry: Surface, sphere, plane, and light primitives
    scene: Time-animated scene builder and scene-level tracing
    camera: Yaw camera with per-pixel primary ray generation
    preview: PNG export and interactive window
"""

__version__ = "0.1.0"
