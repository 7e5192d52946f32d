"""
Loading of the image set that goes into an atlas.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union
from PIL import Image

from ..config import CartographerConfig
from ..utils.image import ImageUtils


logger = logging.getLogger("image_cartographer")


@dataclass(frozen=True)
class SourceImage:
    """A decoded input image with its stable load index."""
    id: int
    name: str
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        """Get image size."""
        return self.image.size


class ImageLoadError(Exception):
    """Exception raised when the image set cannot be loaded."""

    def __init__(self, message: str, path: Union[str, Path, None] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class DirectoryImageLoader:
    """Collects every eligible image file of a directory."""

    def __init__(self, config: CartographerConfig):
        """Initialize loader with configuration."""
        self.config = config

    def find_image_files(self, directory: Union[str, Path]) -> List[Path]:
        """
        List the eligible image files of a directory in file name order.

        Files whose base name equals the atlas output name (ignoring case) are
        skipped so a previous atlas is never packed into the next one.

        Raises:
            ImageLoadError: If the directory does not exist, or two files
                would be packed under the same image name
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ImageLoadError(f"Not a directory: {directory}", directory)

        extension = self.config.image_extension.lower()
        output_name = self.config.output_name.lower()
        files = []
        seen: Dict[str, Path] = {}

        for path in sorted(directory.iterdir(), key=lambda p: p.name):
            if not path.is_file():
                continue
            if path.suffix.lower() != extension:
                continue
            if path.stem.lower() == output_name:
                logger.debug(f"Skipping previous output {path.name}")
                continue
            if path.stem in seen:
                raise ImageLoadError(
                    f"{seen[path.stem].name} and {path.name} share the image name '{path.stem}'", path
                )
            seen[path.stem] = path
            files.append(path)

        return files

    def load(self, directory: Union[str, Path]) -> List[SourceImage]:
        """
        Decode every eligible image of a directory as RGBA.

        Args:
            directory: Directory to scan

        Returns:
            Images in load order, ids numbered from 0

        Raises:
            ImageLoadError: If the directory is missing or a file cannot be decoded
        """
        images = []

        for path in self.find_image_files(directory):
            try:
                image = ImageUtils.ensure_rgba(ImageUtils.load_image(path))
            except ValueError as e:
                raise ImageLoadError(f"Cannot decode {path.name}: {e}", path)

            logger.debug(f"Loaded {path.name} ({image.width}x{image.height})")
            images.append(SourceImage(id=len(images), name=path.stem, image=image))

        return images
