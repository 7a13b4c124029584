"""Frame driver: from per-frame inputs to a rendered RGBA image.

This module wraps the integrator with the per-frame workflow:
- Build the scene for the frame time and upload it
- Set up the camera from position and yaw
- Dispatch one kernel invocation per pixel
- Read back the image as a (height, width, 4) array, row 0 at the top

It also carries the keyboard camera motion rule used by the interactive
preview: each frame the camera steps 0.01 units along its view direction
and turns 1 degree while the corresponding keys are held.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.frame import FrameInput, FrameRenderer
    >>>
    >>> renderer = FrameRenderer()
    >>> image = renderer.render(FrameInput(width=320, height=240, time=1.0))
    >>> image.shape
    (240, 320, 4)
"""

import logging
import math
import time
from collections.abc import Callable, Generator, Iterable
from dataclasses import dataclass, replace

import numpy as np
import numpy.typing as npt

from src.whitted.camera.pinhole import YawCamera, setup_camera
from src.whitted.core.integrator import (
    get_image_dimensions,
    get_image_numpy,
    render_frame,
    setup_render_target,
)
from src.whitted.scene.builder import Scene, build_scene
from src.whitted.scene.intersection import upload_scene

logger = logging.getLogger(__name__)

# Camera step per frame along the view direction
MOVE_STEP = 0.01

# Camera turn per frame in degrees
TURN_STEP = 1.0

# Builds the scene for a frame time
SceneFactory = Callable[[float], Scene]


@dataclass(frozen=True)
class FrameInput:
    """Per-frame parameters supplied to one dispatch.

    Attributes:
        width: Output image width in pixels.
        height: Output image height in pixels.
        view_position: Camera world position.
        view_angle: Camera yaw in degrees.
        time: Scene animation time in seconds.
    """

    width: int = 500
    height: int = 500
    view_position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    view_angle: float = 0.0
    time: float = 0.0


@dataclass
class CameraControls:
    """Which movement keys are currently held."""

    forward: bool = False
    backward: bool = False
    turn_left: bool = False
    turn_right: bool = False


def step_camera(
    position: tuple[float, float, float],
    angle: float,
    controls: CameraControls,
) -> tuple[tuple[float, float, float], float]:
    """Advance the camera by one frame of keyboard motion.

    Args:
        position: Current camera position.
        angle: Current yaw in degrees.
        controls: Keys held this frame.

    Returns:
        Tuple of (new_position, new_angle).
    """
    x, y, z = position
    theta = math.radians(angle)

    if controls.forward:
        x += MOVE_STEP * math.sin(theta)
        z -= MOVE_STEP * math.cos(theta)
    if controls.backward:
        x -= MOVE_STEP * math.sin(theta)
        z += MOVE_STEP * math.cos(theta)

    if controls.turn_left:
        angle -= TURN_STEP
    if controls.turn_right:
        angle += TURN_STEP

    return (x, y, z), angle


class FrameRenderer:
    """Renders complete frames from FrameInput records.

    The renderer owns the render target sizing and delegates the pixel work
    to the integrator kernel. The scene factory defaults to the animated
    build_scene() but can be replaced, e.g. with a fixed test scene.

    Attributes:
        scene_factory: Function mapping frame time to a Scene.
        frame_count: Number of frames rendered so far.
        last_render_seconds: Wall time of the most recent render() call.
    """

    def __init__(self, scene_factory: SceneFactory = build_scene) -> None:
        self.scene_factory = scene_factory
        self.frame_count = 0
        self.last_render_seconds = 0.0
        self._size: tuple[int, int] | None = None

    def _ensure_target(self, width: int, height: int) -> None:
        """Resize the render target when the frame size changes."""
        if self._size != (width, height) or get_image_dimensions() != (width, height):
            setup_render_target(width, height)
            self._size = (width, height)
            logger.debug("Render target set to %dx%d", width, height)

    def prepare(self, frame: FrameInput) -> Scene:
        """Upload scene and camera state for a frame without dispatching.

        Args:
            frame: The frame parameters.

        Returns:
            The Scene built for the frame time.

        Raises:
            ValueError: If the frame dimensions are invalid.
        """
        self._ensure_target(frame.width, frame.height)

        scene = self.scene_factory(frame.time)
        upload_scene(scene)
        setup_camera(
            YawCamera(position=frame.view_position, yaw=frame.view_angle),
            frame.width,
            frame.height,
        )
        logger.debug(
            "Frame t=%.3f: %d spheres, %d planes, %d lights",
            frame.time,
            scene.sphere_count,
            scene.plane_count,
            scene.light_count,
        )
        return scene

    def render(self, frame: FrameInput) -> npt.NDArray[np.float32]:
        """Render one frame.

        Args:
            frame: The frame parameters.

        Returns:
            RGBA image of shape (height, width, 4), row 0 at the top.

        Raises:
            ValueError: If the frame dimensions are invalid.
        """
        start = time.perf_counter()

        self.prepare(frame)
        render_frame()
        image = get_image_numpy()

        self.last_render_seconds = time.perf_counter() - start
        self.frame_count += 1
        logger.debug("Rendered frame %d in %.3fs", self.frame_count, self.last_render_seconds)

        return image

    def render_sequence(
        self,
        frames: Iterable[FrameInput],
    ) -> Generator[npt.NDArray[np.float32], None, None]:
        """Render frames one after another, yielding each image.

        Example:
            >>> frames = [FrameInput(time=t / 30.0) for t in range(60)]
            >>> for image in renderer.render_sequence(frames):
            ...     pass
        """
        for frame in frames:
            yield self.render(frame)

    def render_animation(
        self,
        base: FrameInput,
        num_frames: int,
        fps: float = 30.0,
    ) -> Generator[npt.NDArray[np.float32], None, None]:
        """Render num_frames frames starting at base.time, spaced 1/fps apart."""
        frames = (replace(base, time=base.time + i / fps) for i in range(num_frames))
        yield from self.render_sequence(frames)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return f"FrameRenderer(size={self._size}, frames={self.frame_count})"
