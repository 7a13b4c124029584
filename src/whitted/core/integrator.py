"""Whitted-style shading integrator and the per-pixel rendering kernel.

This module implements the shading loop that turns a primary ray into a
pixel color. Shading languages have no recursion, so reflection and
refraction are handled by a loop of at most MAX_DEPTH iterations that
carries its state explicitly:

    color             accumulated radiance
    mask              product of the Fresnel terms of all bounces so far
    prev_attenuation  reflectivity of the previous bounce, weighting this
                      bounce's direct lighting (1 for the primary hit)

Each iteration:
    1. Traces the scene and adds the glow of visible positional lights.
    2. Stops if nothing was hit.
    3. Computes the Schlick Fresnel term and folds it into mask.
    4. Opaque surfaces: adds direct lighting and continues along the mirror
       direction if the surface is reflective, otherwise stops.
    5. Refractive surfaces: continues along the refracted direction without
       adding any direct lighting.

The final color is gamma encoded. Every pixel is an independent kernel
invocation that only reads the scene and camera fields and writes its own
pixel, so there is no synchronization and no write contention.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.camera.pinhole import YawCamera, setup_camera
    >>> from src.whitted.core.integrator import render_frame, setup_render_target
    >>> from src.whitted.scene.builder import build_scene
    >>> from src.whitted.scene.intersection import upload_scene
    >>>
    >>> upload_scene(build_scene(time=0.0))
    >>> setup_camera(YawCamera(), 320, 240)
    >>> setup_render_target(320, 240)
    >>> render_frame()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import get_ray
from src.whitted.core.ray import Ray, gamma_encode, near_zero, reflect, refract, schlick_fresnel
from src.whitted.geometry.light import is_positional
from src.whitted.geometry.sphere import Surface
from src.whitted.scene.intersection import get_light, num_lights, trace_lights, trace_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Hard cap on shading loop iterations
MAX_DEPTH = 10

# Offset applied to secondary ray origins to avoid self-intersection
RAY_EPSILON = 1e-3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# RGBA output buffer indexed [x, y] with y = 0 at the top of the image
_color_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer. The buffer is
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi
    kernel recompilation.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Clear the buffer and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the RGBA color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Direct Lighting
# =============================================================================


@ti.func
def direct_lighting(
    hit_point: vec3,
    normal: vec3,
    surface: Surface,
    fresnel: vec3,
    prev_mask: vec3,
) -> vec3:
    """Light arriving directly from all lights at a hit point.

    Positional lights fall off with the inverse square of distance and are
    shadow tested against their own distance. Their clamped diffuse term is
    scaled by (1 - fresnel) * mask / fresnel, where mask already includes
    this bounce's fresnel; this is evaluated as (1 - fresnel) * prev_mask,
    which stays finite when fresnel is zero.

    Directional lights have no falloff and no Fresnel scaling; they are lit
    when the shadow ray toward them escapes the scene.

    Args:
        hit_point: The surface point being shaded.
        normal: Unit surface normal facing the incoming ray.
        surface: The surface being shaded.
        fresnel: This bounce's Fresnel term.
        prev_mask: The mask before this bounce's Fresnel term was applied.

    Returns:
        The incident light per channel (not yet tinted by the surface color).
    """
    light_sum = vec3(0.0, 0.0, 0.0)
    diffuse_weight = 1.0 - surface.reflectivity

    for j in range(num_lights[None]):
        light = get_light(j)

        if is_positional(light):
            to_light = light.position - hit_point
            light_distance = tm.length(to_light)
            light_dir = to_light / light_distance

            shadow_origin = hit_point + light_dir * RAY_EPSILON
            blocker = trace_scene(shadow_origin, light_dir)

            # Compare against the distance to this same light
            if blocker.hit == 0 or blocker.distance > tm.length(light.position - shadow_origin):
                intensity = light.brightness / (light_distance * light_distance)
                diffuse = tm.clamp(
                    intensity * ti.max(0.0, tm.dot(normal, light_dir)) * diffuse_weight,
                    0.0,
                    1.0,
                )
                light_sum += diffuse * (1.0 - fresnel) * prev_mask
        else:
            light_dir = tm.normalize(light.direction)
            blocker = trace_scene(hit_point + light_dir * RAY_EPSILON, light_dir)
            if blocker.hit == 0:
                diffuse = tm.clamp(
                    ti.max(0.0, tm.dot(normal, light_dir)) * light.brightness * diffuse_weight,
                    0.0,
                    1.0,
                )
                light_sum += vec3(diffuse, diffuse, diffuse)

    return light_sum


# =============================================================================
# Refraction
# =============================================================================


@ti.func
def refract_through(direction: vec3, normal: vec3, refractivity: ti.f32):
    """Bend a ray crossing the surface of a refractive primitive.

    The sign of dot(direction, normal) tells entering from exiting, given
    the outward normal from the intersector:
    - entering: refraction ratio 1 / refractivity, normal kept
    - exiting: refraction ratio refractivity, normal flipped

    On total internal reflection the ray is mirrored instead and stays on
    the incident side.

    Args:
        direction: Unit incident direction.
        normal: Outward unit normal at the hit.
        refractivity: Relative index of refraction of the primitive.

    Returns:
        A tuple of (new_direction, offset_normal). The next ray origin is
        hit_point - offset_normal * RAY_EPSILON.
    """
    facing = normal
    eta = 1.0 / refractivity
    if tm.dot(direction, normal) > 0.0:
        facing = -normal
        eta = refractivity

    new_direction = refract(direction, facing, eta)
    offset_normal = facing
    if near_zero(new_direction):
        new_direction = reflect(direction, facing)
        offset_normal = -facing

    return new_direction, offset_normal


# =============================================================================
# Shading Loop
# =============================================================================


@ti.func
def integrate(ray: Ray):
    """Shade a ray by following its reflections and refractions.

    Args:
        ray: The primary ray (unit direction).

    Returns:
        A tuple of (color, bounces): the linear color before gamma encoding,
        and the number of surface hits processed (at most MAX_DEPTH).
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)
    mask = vec3(1.0, 1.0, 1.0)
    prev_attenuation = 1.0
    bounces = 0

    # Active flag for loop continuation
    active = 1

    for _ in range(MAX_DEPTH):
        if active == 1:
            nearest = trace_scene(origin, direction)

            # Light glow is added whether or not a primitive was hit
            glow = trace_lights(origin, direction, nearest)
            color += vec3(glow, glow, glow)

            if nearest.hit == 0:
                active = 0
            else:
                bounces += 1
                hit_point = origin + direction * nearest.distance
                normal = nearest.normal
                surface = nearest.surface

                cos_theta = tm.clamp(tm.dot(normal, -direction), 0.0, 1.0)
                fresnel = schlick_fresnel(surface.color, surface.reflectivity, cos_theta)
                prev_mask = mask
                mask *= fresnel

                if surface.refractivity == 0.0:
                    incident = direct_lighting(hit_point, normal, surface, fresnel, prev_mask)
                    color += surface.color * incident * prev_attenuation
                    prev_attenuation = surface.reflectivity

                    if surface.reflectivity != 0.0:
                        direction = reflect(direction, normal)
                        origin = hit_point + direction * RAY_EPSILON
                    else:
                        active = 0
                else:
                    new_direction, offset_normal = refract_through(
                        direction, normal, surface.refractivity
                    )
                    origin = hit_point - offset_normal * RAY_EPSILON
                    direction = new_direction

    return color, bounces


@ti.func
def trace_pixel(x: ti.i32, y: ti.i32) -> vec3:
    """Compute the gamma-encoded color of pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        The encoded color. Channels are not clamped and may exceed 1.
    """
    color, _ = integrate(get_ray(x, y))
    return gamma_encode(color)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32):
    """Shade every pixel of the active image region."""
    for x, y in ti.ndrange(width, height):
        color = trace_pixel(x, y)
        _color_buffer[x, y] = tm.vec4(color.x, color.y, color.z, 1.0)


@ti.kernel
def _render_single_pixel(x: ti.i32, y: ti.i32) -> vec3:
    """Shade a single pixel. Used for testing and debugging."""
    return trace_pixel(x, y)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame() -> None:
    """Render the whole image into the color buffer.

    The scene and camera must have been uploaded for this frame.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_frame(width, height)


def render_pixel(x: int, y: int) -> tuple[float, float, float]:
    """Render a single pixel and return its encoded color.

    This is a Python-callable function for testing. For production rendering,
    use render_frame() which processes all pixels in parallel.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _render_single_pixel(x, y)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 4) with row 0 at the top of the image
    and alpha fixed at 1. Color channels are clamped to [0, 1], matching an
    8-bit normalized output image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Extract active region of the full buffer
    image = _color_buffer.to_numpy()[:width, :height, :]

    # Transpose from (width, height, 4) to (height, width, 4) for standard image format
    image = np.transpose(image, (1, 0, 2))

    image = np.clip(image, 0.0, 1.0)

    return np.ascontiguousarray(image, dtype=np.float32)
