"""Unit tests for scene storage and scene-level ray queries.

Tests cover:
- Uploading a Scene into the fields
- Capacity checks
- Nearest-hit selection across spheres and planes
- Light glow occlusion by primitives
"""

import pytest
import taichi as ti


def _nearest(origin, direction):
    """Run trace_scene in a kernel and return (hit, distance, color)."""
    from src.whitted.scene.intersection import trace_scene

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())
    color = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3):
        record = trace_scene(o, d)
        hit[None] = record.hit
        distance[None] = record.distance
        color[None] = record.surface.color

    test_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction))
    c = color[None]
    return hit[None], distance[None], (c[0], c[1], c[2])


def _light_glow_along(origin, direction):
    """Run trace_lights (after trace_scene) in a kernel."""
    from src.whitted.scene.intersection import trace_lights, trace_scene

    result = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3):
        result[None] = trace_lights(o, d, trace_scene(o, d))

    test_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction))
    return result[None]


class TestUploadScene:
    """Tests for uploading scenes."""

    def test_upload_sets_counts(self):
        from src.whitted.scene.builder import build_scene
        from src.whitted.scene.intersection import (
            get_light_count,
            get_plane_count,
            get_sphere_count,
            upload_scene,
        )

        upload_scene(build_scene(0.0))
        assert get_sphere_count() == 4
        assert get_plane_count() == 1
        assert get_light_count() == 2

    def test_clear_scene_resets_counts(self):
        from src.whitted.scene.builder import build_scene
        from src.whitted.scene.intersection import clear_scene, get_sphere_count, upload_scene

        upload_scene(build_scene(0.0))
        clear_scene()
        assert get_sphere_count() == 0

    def test_upload_replaces_previous_scene(self):
        from src.whitted.scene.builder import Scene, SphereSpec, build_scene
        from src.whitted.scene.intersection import get_plane_count, get_sphere_count, upload_scene

        upload_scene(build_scene(0.0))
        upload_scene(Scene(spheres=(SphereSpec(center=(0.0, 0.0, -4.0), radius=1.0),)))
        assert get_sphere_count() == 1
        assert get_plane_count() == 0

    def test_too_many_spheres_raises(self):
        from src.whitted.scene.builder import Scene, SphereSpec
        from src.whitted.scene.intersection import MAX_SPHERES, upload_scene

        spheres = tuple(
            SphereSpec(center=(float(i), 0.0, -5.0), radius=0.1) for i in range(MAX_SPHERES + 1)
        )
        with pytest.raises(RuntimeError, match="spheres"):
            upload_scene(Scene(spheres=spheres))

    def test_too_many_lights_raises(self):
        from src.whitted.scene.builder import LightSpec, Scene
        from src.whitted.scene.intersection import MAX_LIGHTS, upload_scene

        lights = tuple(LightSpec(position=(0.0, 5.0, 0.0), brightness=1.0) for _ in range(MAX_LIGHTS + 1))
        with pytest.raises(RuntimeError, match="lights"):
            upload_scene(Scene(lights=lights))


class TestTraceScene:
    """Tests for nearest-hit selection."""

    def test_empty_scene_always_misses(self):
        from src.whitted.scene.builder import empty_scene
        from src.whitted.scene.intersection import upload_scene

        upload_scene(empty_scene())
        for direction in [(0.0, 0.0, -1.0), (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (1.0, 0.0, 0.0)]:
            hit, _, _ = _nearest((0.0, 0.0, 0.0), direction)
            assert hit == 0

    def test_nearest_of_two_spheres(self):
        """The closer sphere wins regardless of storage order."""
        from src.whitted.scene.builder import Scene, SphereSpec, SurfaceSpec
        from src.whitted.scene.intersection import upload_scene

        far = SphereSpec(center=(0.0, 0.0, -10.0), radius=1.0, surface=SurfaceSpec(color=(0.0, 0.0, 1.0)))
        near = SphereSpec(center=(0.0, 0.0, -4.0), radius=1.0, surface=SurfaceSpec(color=(1.0, 0.0, 0.0)))
        upload_scene(Scene(spheres=(far, near)))

        hit, distance, color = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert distance == pytest.approx(3.0, abs=1e-5)
        assert color == pytest.approx((1.0, 0.0, 0.0))

    def test_plane_closer_than_sphere(self):
        """A plane hit in front of a sphere is selected."""
        from src.whitted.scene.builder import PlaneSpec, Scene, SphereSpec, SurfaceSpec
        from src.whitted.scene.intersection import upload_scene

        sphere = SphereSpec(center=(0.0, -5.0, 0.0), radius=1.0, surface=SurfaceSpec(color=(1.0, 0.0, 0.0)))
        floor = PlaneSpec(
            point=(0.0, -1.0, 0.0),
            normal=(0.0, -1.0, 0.0),
            surface=SurfaceSpec(color=(0.0, 1.0, 0.0)),
        )
        upload_scene(Scene(spheres=(sphere,), planes=(floor,)))

        hit, distance, color = _nearest((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert hit == 1
        assert distance == pytest.approx(1.0, abs=1e-5)
        assert color == pytest.approx((0.0, 1.0, 0.0))

    def test_zero_distance_hit_replaces_miss(self):
        """A hit at distance 0 is kept as the nearest hit."""
        from src.whitted.scene.builder import Scene, SphereSpec
        from src.whitted.scene.intersection import upload_scene

        upload_scene(Scene(spheres=(SphereSpec(center=(0.0, 0.0, -4.0), radius=1.0),)))
        hit, distance, _ = _nearest((0.0, 0.0, -3.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert distance == pytest.approx(0.0, abs=1e-6)


class TestTraceLights:
    """Tests for light glow along a ray."""

    def test_glow_visible_on_miss(self):
        from src.whitted.scene.builder import LightSpec, Scene
        from src.whitted.scene.intersection import upload_scene

        upload_scene(Scene(lights=(LightSpec(position=(0.0, 0.0, -5.0), brightness=100.0),)))
        assert _light_glow_along((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == pytest.approx(1.0)

    def test_glow_hidden_behind_primitive(self):
        """A light farther away than the nearest hit does not glow."""
        from src.whitted.scene.builder import LightSpec, Scene, SphereSpec
        from src.whitted.scene.intersection import upload_scene

        upload_scene(
            Scene(
                spheres=(SphereSpec(center=(0.0, 0.0, -4.0), radius=1.0),),
                lights=(LightSpec(position=(0.0, 0.0, -10.0), brightness=100.0),),
            )
        )
        assert _light_glow_along((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == pytest.approx(0.0)

    def test_glow_in_front_of_primitive(self):
        from src.whitted.scene.builder import LightSpec, Scene, SphereSpec
        from src.whitted.scene.intersection import upload_scene

        upload_scene(
            Scene(
                spheres=(SphereSpec(center=(0.0, 0.0, -10.0), radius=1.0),),
                lights=(LightSpec(position=(0.0, 0.0, -4.0), brightness=100.0),),
            )
        )
        assert _light_glow_along((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == pytest.approx(1.0)

    def test_glows_sum(self):
        """Overlapping discs add up and may exceed 1."""
        from src.whitted.scene.builder import LightSpec, Scene
        from src.whitted.scene.intersection import upload_scene

        upload_scene(
            Scene(
                lights=(
                    LightSpec(position=(0.0, 0.0, -4.0), brightness=100.0),
                    LightSpec(position=(0.0, 0.0, -8.0), brightness=100.0),
                )
            )
        )
        assert _light_glow_along((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == pytest.approx(2.0)

    def test_directional_light_never_glows(self):
        from src.whitted.scene.builder import LightSpec, Scene
        from src.whitted.scene.intersection import upload_scene

        upload_scene(
            Scene(lights=(LightSpec(position=(0.0, 0.0, -5.0), brightness=100.0, direction=(0.0, 0.0, 1.0)),))
        )
        assert _light_glow_along((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == pytest.approx(0.0)
