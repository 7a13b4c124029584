"""Preview module for frame output and the interactive window.

Components:
    export: PNG export of rendered frames via Pillow
    interactive: Taichi GGUI window with keyboard camera controls

Example:
    >>> from src.whitted.preview import save_png
    >>> save_png(image, "frame.png")

For the interactive window:
    >>> from src.whitted.preview import InteractivePreview
    >>> InteractivePreview(500, 500).run()
"""

from src.whitted.preview.export import image_to_uint8, png_path, save_png
from src.whitted.preview.interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "save_png",
    "png_path",
    "image_to_uint8",
]
