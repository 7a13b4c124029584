"""Interactive preview window using Taichi GGUI.

The preview renders the animated scene continuously, one frame per window
refresh, with the animation clock running on wall time. The camera is
driven from the keyboard:

    Up / Down      move forward / backward along the view direction
    Left / Right   turn left / right
    P              export the current frame to a timestamped PNG

Rendered frames never leave the device: the integrator's color buffer is
copied into the display field by a small kernel, flipping rows because the
canvas has its origin at the bottom-left while the render target has row 0
at the top.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.whitted.preview.interactive import InteractivePreview
    >>>
    >>> preview = InteractivePreview(500, 500)
    >>> preview.run()  # Blocks until the window is closed
"""

import logging
import os
import time
from datetime import datetime
from typing import TYPE_CHECKING, Any

import numpy as np
import taichi as ti

from src.whitted.core.frame import CameraControls, FrameInput, FrameRenderer, step_camera

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Lazy kernel holder - kernel is created on first use after Taichi is initialized
_copy_flipped_kernel: Any = None


def _get_copy_flipped_kernel() -> Any:
    """Get or create the flipping RGBA to RGB copy kernel.

    The kernel is created lazily to ensure Taichi is initialized first.
    """
    global _copy_flipped_kernel
    if _copy_flipped_kernel is None:

        @ti.kernel
        def _kernel(src: ti.template(), dst: ti.template(), height: ti.i32):
            for i, j in dst:
                c = src[i, height - 1 - j]
                dst[i, j] = ti.Vector([c[0], c[1], c[2]])

        _copy_flipped_kernel = _kernel
    return _copy_flipped_kernel


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        position: Current camera position.
        angle: Current camera yaw in degrees.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Whitted Ray Tracer",
        position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        angle: float = 0.0,
        renderer: FrameRenderer | None = None,
    ) -> None:
        """Set up the preview state.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.
            position: Initial camera position.
            angle: Initial camera yaw in degrees.
            renderer: Frame renderer to drive (a new one by default).

        Note:
            The window is created but not shown until run() is called.
        """
        self.width = width
        self.height = height
        self.position = position
        self.angle = angle
        self._title = title
        self._renderer = renderer if renderer is not None else FrameRenderer()
        self._start_time: float | None = None
        self._last_frame: FrameInput | None = None

        # Defer window creation until run() to support headless checks
        self._window: "ti.ui.Window | None" = None
        self._canvas: "ti.ui.Canvas | None" = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: "ti.MatrixField" = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        """Create the Taichi GGUI window and canvas."""
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> "ti.ui.Window":
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> "ti.ui.Canvas":
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    @property
    def renderer(self) -> FrameRenderer:
        return self._renderer

    def update_image(self, image: "npt.NDArray[np.float32]") -> None:
        """Update the display image from a rendered frame.

        Args:
            image: Array of shape (height, width, 4) or (height, width, 3)
                with row 0 at the top and values in [0, 1].

        Raises:
            ValueError: If the image size doesn't match the window.
        """
        if image.ndim != 3 or image.shape[:2] != (self.height, self.width) or image.shape[2] < 3:
            raise ValueError(
                f"Image shape {image.shape} doesn't match expected "
                f"({self.height}, {self.width}, 3 or 4)"
            )

        # Drop alpha, flip to bottom-left origin and transpose to (x, y)
        rgb = image[:, :, :3].astype(np.float32)
        self.display_image.from_numpy(np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2))))

    def update_image_from_field(self, field: "ti.MatrixField") -> None:
        """Update the display image from an RGBA field indexed [x, y], top row first.

        Args:
            field: Taichi Vector.field with at least (width, height) cells.
        """
        kernel = _get_copy_flipped_kernel()
        kernel(field, self.display_image, self.height)

    def read_controls(self) -> CameraControls:
        """Read the arrow key state for this frame."""
        window = self.window
        return CameraControls(
            forward=window.is_pressed(ti.ui.UP),
            backward=window.is_pressed(ti.ui.DOWN),
            turn_left=window.is_pressed(ti.ui.LEFT),
            turn_right=window.is_pressed(ti.ui.RIGHT),
        )

    def elapsed(self) -> float:
        """Seconds since the preview loop started."""
        if self._start_time is None:
            return 0.0
        return time.perf_counter() - self._start_time

    def next_frame(self, controls: CameraControls) -> FrameInput:
        """Apply one frame of camera motion and build the frame input."""
        self.position, self.angle = step_camera(self.position, self.angle, controls)
        return FrameInput(
            width=self.width,
            height=self.height,
            view_position=self.position,
            view_angle=self.angle,
            time=self.elapsed(),
        )

    def render_frame(self, frame: FrameInput) -> None:
        """Render a frame straight into the display field."""
        from src.whitted.core.integrator import get_image, render_frame

        self._renderer.prepare(frame)
        render_frame()
        self.update_image_from_field(get_image())
        self._last_frame = frame

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def show_frame(self) -> None:
        """Present the display image."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Run the render loop until the window is closed."""
        self._initialize_window()
        self._start_time = time.perf_counter()
        logger.info("Preview started at %dx%d", self.width, self.height)

        while self.is_running():
            self.render_frame(self.next_frame(self.read_controls()))

            if self.window.get_event(ti.ui.PRESS) and self.window.event.key == "p":
                self._export_png()

            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    def _export_png(self) -> None:
        """Export the current frame to a timestamped PNG file."""
        from src.whitted.core.integrator import get_image_numpy
        from src.whitted.preview.export import save_png

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = save_png(get_image_numpy(), f"whitted_{timestamp}.png")
        if self._last_frame is not None:
            logger.info("Exported %s (t=%.2f)", path, self._last_frame.time)

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        # On Linux, check for X11 or Wayland
        return bool(display or wayland)
