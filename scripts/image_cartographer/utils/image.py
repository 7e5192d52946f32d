"""
Image decoding, encoding and pixel buffer helpers.
"""

from typing import Optional, Union
from pathlib import Path
from PIL import Image
import numpy as np
import io


class ImageUtils:
    """Utility class for common image operations."""

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image]) -> Image.Image:
        """
        Load image from various sources and decode it fully.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object with pixel data loaded

        Raises:
            ValueError: If data cannot be loaded as image
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
                return image
            except Exception as e:
                raise ValueError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, (str, Path)):
            try:
                with Image.open(data) as image:
                    image.load()
                    return image.copy()
            except Exception as e:
                raise ValueError(f"Cannot load image from path '{data}': {e}")
        else:
            raise ValueError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def save_image(image: Image.Image, path: Union[str, Path], format: str = 'PNG', **kwargs) -> None:
        """
        Save image to file without lossy re-encoding.

        Args:
            image: Image to save
            path: Output file path
            format: Image format (PNG, etc.)
            **kwargs: Additional save parameters
        """
        save_kwargs = {}

        if format.upper() == 'PNG':
            save_kwargs['compress_level'] = kwargs.pop('compress_level', 6)

        save_kwargs.update(kwargs)

        image.save(path, format=format, **save_kwargs)

    @staticmethod
    def format_for_extension(extension: str) -> Optional[str]:
        """Return the Pillow format that writes files with this suffix, or None."""
        format = Image.registered_extensions().get(extension.lower())
        if format is None or format not in Image.SAVE:
            return None
        return format

    @staticmethod
    def ensure_rgba(image: Image.Image) -> Image.Image:
        """Convert image to RGBA mode if not already."""
        if image.mode != 'RGBA':
            return image.convert('RGBA')
        return image

    @staticmethod
    def to_array(image: Image.Image) -> np.ndarray:
        """Return the RGBA pixels of an image as a (height, width, 4) uint8 array."""
        return np.asarray(ImageUtils.ensure_rgba(image), dtype=np.uint8)

    @staticmethod
    def from_array(pixels: np.ndarray) -> Image.Image:
        """Build an RGBA image from a (height, width, 4) uint8 array."""
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected a (height, width, 4) array, got shape {pixels.shape}")
        return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
