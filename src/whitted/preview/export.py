"""Image export utilities for rendered frames.

Frames come out of the renderer already gamma encoded and clamped to
[0, 1], so export is a straight conversion to 8 bits per channel.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from src.whitted.core.frame import FrameInput, FrameRenderer
    >>> from src.whitted.preview.export import save_png
    >>>
    >>> image = FrameRenderer().render(FrameInput(time=2.0))
    >>> save_png(image, "frame")  # writes frame.png
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def image_to_uint8(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8.

    Values outside [0, 1] are clamped and channels are rounded to the
    nearest 8-bit level.

    Args:
        image: Image array of shape (H, W, 3) or (H, W, 4).

    Returns:
        Array of the same shape with dtype uint8.
    """
    clamped = np.clip(image, 0.0, 1.0)
    return np.round(clamped * 255.0).astype(np.uint8)


def png_path(name: str | Path) -> Path:
    """Return name as a path ending in .png."""
    path = Path(name)
    if path.suffix.lower() != ".png":
        path = path.with_name(path.name + ".png")
    return path


def save_png(image: npt.NDArray[np.float32], filepath: str | Path) -> Path:
    """Save a rendered frame as a PNG file.

    Args:
        image: Image array of shape (H, W, 4) (RGBA) or (H, W, 3) (RGB)
            with values in [0, 1], row 0 at the top.
        filepath: Output path. ".png" is appended when missing.

    Returns:
        The path that was written.

    Raises:
        ValueError: If the image does not have 3 or 4 channels.
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got {image.shape}")

    path = png_path(filepath)

    # Pillow picks RGB or RGBA from the channel count
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(path)

    logger.info("Saved %dx%d frame to %s", image.shape[1], image.shape[0], path)
    return path
