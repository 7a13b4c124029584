"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    discard the module-level fields of already imported modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the uploaded scene and the render target around each test."""
    # Import here to ensure Taichi is initialized first
    from src.whitted.core.integrator import reset_render_target
    from src.whitted.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def white_sphere_scene():
    """Factory for a single white sphere at (0, 0, -4) with radius 1.

    Lights are passed in so each test controls the illumination.
    """
    from src.whitted.scene.builder import Scene, SphereSpec, SurfaceSpec

    def _make(*lights, surface=None):
        sphere = SphereSpec(
            center=(0.0, 0.0, -4.0),
            radius=1.0,
            surface=surface if surface is not None else SurfaceSpec(color=(1.0, 1.0, 1.0)),
        )
        return Scene(spheres=(sphere,), lights=tuple(lights))

    return _make
