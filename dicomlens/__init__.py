"""Measurement overlays, image windowing and series navigation for 2D medical images."""

__version__ = "0.1.0"

__all__ = [
    "base",
    "lines",
    "roi",
    "cobb",
    "tumor",
    "cliprect",
    "image",
    "series",
    "thumbnail",
]