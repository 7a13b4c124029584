#!/usr/bin/env python3
"""Render the animated Whitted scene.

By default this opens an interactive window: the arrow keys move the camera
forward/backward and turn it left/right, and the scene animates on wall-clock
time. With --frame NAME a single frame is rendered headless and written to
NAME.png instead.

Usage:
    python -m examples.render_frame [options]

Options:
    --width WIDTH           Image width in pixels (default: 500)
    --height HEIGHT         Image height in pixels (default: 500)
    --arch ARCH             Taichi backend: cpu, gpu, cuda, vulkan, metal, opengl
    --list-archs            List the backends available on this machine and exit
    --frame NAME            Render one frame to NAME.png instead of opening a window
    --time SECONDS          Scene time for --frame (default: 0)
    --view-angle DEGREES    Initial camera yaw (default: 0)
    --position X Y Z        Initial camera position (default: 0 0 0)
    --verbose               Log debug messages

Example:
    python -m examples.render_frame --frame still --time 2.5 --width 320 --height 240
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402

logger = logging.getLogger("whitted.render_frame")

ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
    "opengl": ti.opengl,
}


@dataclass(frozen=True)
class RenderConfig:
    """Settings collected from the command line."""

    width: int = 500
    height: int = 500
    arch: str = "gpu"
    frame: str | None = None
    time: float = 0.0
    view_angle: float = 0.0
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    list_archs: bool = False
    verbose: bool = False


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args(argv: list[str] | None = None) -> RenderConfig:
    """Parse command-line arguments into a RenderConfig."""
    parser = argparse.ArgumentParser(
        description="Render the animated Whitted ray tracing scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=_positive_int,
        default=500,
        help="Image width in pixels (default: 500)",
    )
    parser.add_argument(
        "--height",
        type=_positive_int,
        default=500,
        help="Image height in pixels (default: 500)",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHS),
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument(
        "--list-archs",
        action="store_true",
        help="List the backends available on this machine and exit",
    )
    parser.add_argument(
        "--frame",
        type=str,
        default=None,
        metavar="NAME",
        help="Render a single frame to NAME.png instead of opening a window",
    )
    parser.add_argument(
        "--time",
        type=float,
        default=0.0,
        help="Scene time in seconds for --frame (default: 0)",
    )
    parser.add_argument(
        "--view-angle",
        type=float,
        default=0.0,
        help="Initial camera yaw in degrees (default: 0)",
    )
    parser.add_argument(
        "--position",
        type=float,
        nargs=3,
        default=(0.0, 0.0, 0.0),
        metavar=("X", "Y", "Z"),
        help="Initial camera position (default: 0 0 0)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    args = parser.parse_args(argv)

    return RenderConfig(
        width=args.width,
        height=args.height,
        arch=args.arch,
        frame=args.frame,
        time=args.time,
        view_angle=args.view_angle,
        position=tuple(args.position),
        list_archs=args.list_archs,
        verbose=args.verbose,
    )


def available_archs() -> list[str]:
    """Names of the backends this Taichi build can run on."""
    from taichi.lang.misc import is_arch_supported

    return [name for name, arch in ARCHS.items() if name != "gpu" and is_arch_supported(arch)]


def initialize_taichi(arch_name: str) -> str:
    """Initialize Taichi with the requested backend, falling back to CPU.

    Returns:
        Name of the backend being used.
    """
    try:
        ti.init(arch=ARCHS[arch_name])
        return arch_name
    except Exception as e:
        if arch_name == "cpu":
            raise
        logger.warning("Backend %s unavailable (%s), falling back to cpu", arch_name, e)

    ti.init(arch=ti.cpu)
    return "cpu"


def render_still(config: RenderConfig, name: str) -> Path:
    """Render one frame and save it as name.png.

    Returns:
        Path to the saved image file.
    """
    # Import after Taichi initialization
    from src.whitted.core.frame import FrameInput, FrameRenderer
    from src.whitted.preview.export import save_png

    renderer = FrameRenderer()
    image = renderer.render(
        FrameInput(
            width=config.width,
            height=config.height,
            view_position=config.position,
            view_angle=config.view_angle,
            time=config.time,
        )
    )
    logger.info("Rendered %dx%d in %.2fs", config.width, config.height, renderer.last_render_seconds)
    return save_png(image, name)


def run_interactive(config: RenderConfig) -> int:
    """Open the preview window and render until it is closed."""
    # Import after Taichi initialization
    from src.whitted.preview.interactive import InteractivePreview

    if not InteractivePreview.is_display_available():
        logger.error("No display available. Use --frame NAME to render headless.")
        return 1

    preview = InteractivePreview(
        config.width,
        config.height,
        position=config.position,
        angle=config.view_angle,
    )
    try:
        preview.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    finally:
        preview.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    config = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if config.list_archs:
        for name in available_archs():
            print(name)
        return 0

    try:
        backend = initialize_taichi(config.arch)
        logger.info("Taichi backend: %s", backend)

        if config.frame is not None:
            path = render_still(config, config.frame)
            logger.info("Saved to: %s", path.absolute())
            return 0

        return run_interactive(config)
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
