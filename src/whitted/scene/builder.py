"""Time-animated scene builder.

The scene is small and fixed-size: every frame has the same number of
spheres, planes and lights, and only their positions and brightness change
with time. ``build_scene`` is a pure function of ``time`` with no randomness
and no hidden state, so calling it again for the same time yields an equal
Scene.

The default scene consists of:
- A slightly reflective floor plane at y = -1
- A red diffuse sphere at the center of the stage
- A mirror sphere and a glass sphere orbiting the center sphere
- A small blue sphere bobbing up and down in front
- A pulsing positional light above the stage (visible as a glowing disc)
- A dim directional fill light

The camera starts at the origin looking down -z (yaw 0), which frames the
stage centered at z = -5.

Example:
    >>> from src.whitted.scene.builder import build_scene
    >>> scene = build_scene(time=1.5)
    >>> scene.sphere_count, scene.plane_count, scene.light_count
    (4, 1, 2)
"""

import math
from dataclasses import dataclass

Vec3 = tuple[float, float, float]

# =============================================================================
# Scene Records
# =============================================================================


@dataclass(frozen=True)
class SurfaceSpec:
    """Host-side description of a Surface.

    Attributes:
        color: Base color, each channel in [0, 1].
        reflectivity: Mirror reflectivity in [0, 1]. 0 is fully diffuse.
        refractivity: 0 for opaque surfaces, otherwise the relative index
            of refraction.
    """

    color: Vec3 = (1.0, 1.0, 1.0)
    reflectivity: float = 0.0
    refractivity: float = 0.0


@dataclass(frozen=True)
class SphereSpec:
    """Host-side description of a sphere."""

    center: Vec3
    radius: float
    surface: SurfaceSpec = SurfaceSpec()


@dataclass(frozen=True)
class PlaneSpec:
    """Host-side description of a one-sided plane.

    Attributes:
        point: Any point on the plane.
        normal: Unit normal pointing away from the visible side. A floor seen
            from above has normal (0, -1, 0).
        surface: The plane's surface.
    """

    point: Vec3
    normal: Vec3
    surface: SurfaceSpec = SurfaceSpec()


@dataclass(frozen=True)
class LightSpec:
    """Host-side description of a light.

    Attributes:
        position: World position (ignored by directional lights).
        brightness: Scalar intensity.
        direction: (0, 0, 0) for a positional light, otherwise the direction
            toward the light.
    """

    position: Vec3
    brightness: float
    direction: Vec3 = (0.0, 0.0, 0.0)

    @property
    def is_positional(self) -> bool:
        """True for positional lights (zero direction)."""
        return self.direction == (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Scene:
    """Immutable snapshot of all primitives and lights for one frame."""

    spheres: tuple[SphereSpec, ...] = ()
    planes: tuple[PlaneSpec, ...] = ()
    lights: tuple[LightSpec, ...] = ()

    @property
    def sphere_count(self) -> int:
        return len(self.spheres)

    @property
    def plane_count(self) -> int:
        return len(self.planes)

    @property
    def light_count(self) -> int:
        return len(self.lights)


# =============================================================================
# Default Scene Constants
# =============================================================================

FLOOR_HEIGHT = -1.0
STAGE_CENTER = (0.0, 0.0, -5.0)

# Orbit of the mirror and glass spheres around the stage center
ORBIT_RADIUS = 2.5
ORBIT_SPEED = 0.5

FLOOR_SURFACE = SurfaceSpec(color=(0.8, 0.8, 0.8), reflectivity=0.2)
CENTER_SURFACE = SurfaceSpec(color=(0.9, 0.15, 0.1))
MIRROR_SURFACE = SurfaceSpec(color=(0.95, 0.95, 0.95), reflectivity=0.9)
GLASS_SURFACE = SurfaceSpec(color=(1.0, 1.0, 1.0), reflectivity=0.1, refractivity=1.5)
BOBBING_SURFACE = SurfaceSpec(color=(0.1, 0.3, 0.9), reflectivity=0.1)

# Positional light brightness oscillates around this value
KEY_LIGHT_BRIGHTNESS = 40.0
FILL_LIGHT_BRIGHTNESS = 0.3


# =============================================================================
# Scene Factories
# =============================================================================


def build_scene(time: float) -> Scene:
    """Build the animated scene for a frame time.

    Args:
        time: Frame time in seconds.

    Returns:
        The Scene for that time. Equal times give equal scenes.
    """
    cx, cy, cz = STAGE_CENTER
    angle = time * ORBIT_SPEED

    center_sphere = SphereSpec(
        center=(cx, cy, cz),
        radius=1.0,
        surface=CENTER_SURFACE,
    )

    # Mirror and glass spheres orbit on opposite sides of the center sphere
    mirror_sphere = SphereSpec(
        center=(
            cx + ORBIT_RADIUS * math.cos(angle),
            cy - 0.3,
            cz + ORBIT_RADIUS * math.sin(angle),
        ),
        radius=0.7,
        surface=MIRROR_SURFACE,
    )
    glass_sphere = SphereSpec(
        center=(
            cx - ORBIT_RADIUS * math.cos(angle),
            cy - 0.2,
            cz - ORBIT_RADIUS * math.sin(angle),
        ),
        radius=0.8,
        surface=GLASS_SURFACE,
    )

    # Small sphere bobbing above the floor in front of the stage
    bob_height = 0.3 * abs(math.sin(2.0 * time))
    bobbing_sphere = SphereSpec(
        center=(cx + 1.2 * math.sin(time), FLOOR_HEIGHT + 0.6 + bob_height, cz + 2.0),
        radius=0.4,
        surface=BOBBING_SURFACE,
    )

    floor = PlaneSpec(
        point=(0.0, FLOOR_HEIGHT, 0.0),
        normal=(0.0, -1.0, 0.0),
        surface=FLOOR_SURFACE,
    )

    key_light = LightSpec(
        position=(1.5 * math.sin(0.7 * time), 3.0 + 0.5 * math.sin(time), cz + 1.0),
        brightness=KEY_LIGHT_BRIGHTNESS + 10.0 * math.sin(3.0 * time),
    )
    fill_light = LightSpec(
        position=(0.0, 0.0, 0.0),
        brightness=FILL_LIGHT_BRIGHTNESS,
        direction=_normalized((-0.5, 1.0, 0.5)),
    )

    return Scene(
        spheres=(center_sphere, mirror_sphere, glass_sphere, bobbing_sphere),
        planes=(floor,),
        lights=(key_light, fill_light),
    )


def empty_scene() -> Scene:
    """Create a scene with no primitives and no lights."""
    return Scene()


def _normalized(v: Vec3) -> Vec3:
    """Return v scaled to unit length."""
    length = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    return (v[0] / length, v[1] / length, v[2] / length)
