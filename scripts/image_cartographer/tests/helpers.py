"""
Shared builders for test images.
"""

from pathlib import Path
from typing import Union
from PIL import Image
import numpy as np

from ..processing.loader import SourceImage


def random_pixels(width: int, height: int, seed: int = 0) -> np.ndarray:
    """Deterministic opaque-ish RGBA noise of the given size."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)


def make_image(width: int, height: int, seed: int = 0) -> Image.Image:
    return Image.fromarray(random_pixels(width, height, seed))


def make_source(image_id: int, name: str, width: int, height: int) -> SourceImage:
    """Source image filled with noise seeded by its id."""
    return SourceImage(id=image_id, name=name, image=make_image(width, height, seed=image_id + 1))


def write_png(directory: Union[str, Path], name: str, width: int, height: int, seed: int = 0) -> Path:
    """Write a noise PNG into directory and return its path."""
    path = Path(directory) / name
    make_image(width, height, seed).save(path, format='PNG')
    return path
