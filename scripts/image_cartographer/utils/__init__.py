"""
Utility modules for image decoding, encoding and pixel buffers.
"""

from .image import ImageUtils

__all__ = [
    "ImageUtils",
]
