"""
Texture atlas composition with clamp-to-edge borders.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
from PIL import Image
import numpy as np
import toml

from ..utils.image import ImageUtils
from .loader import SourceImage
from .layout import PlacementPlan, PlacementPlanner, pad_size, sort_by_height
from .metadata import AtlasEntry, build_entries


logger = logging.getLogger("image_cartographer")


@dataclass
class AtlasResult:
    """Result of atlas generation."""
    atlas: Image.Image
    entries: List[AtlasEntry]
    plan: PlacementPlan
    padding: int
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def frame_map(self) -> Dict[str, Dict[str, int]]:
        return {entry.name: entry.as_frame() for entry in self.entries}

    def save_atlas(self, path: Union[str, Path], compress_level: int = 6) -> None:
        """Save atlas image to file, encoded in the format its suffix names."""
        format = ImageUtils.format_for_extension(Path(path).suffix)
        if format is None:
            raise ValueError(f"No image encoder for '{Path(path).suffix}' files")
        ImageUtils.save_image(self.atlas, path, format=format, compress_level=compress_level)

    def save_frame_map(self, path: Union[str, Path], format: str = "json", image_name: str = "") -> None:
        """Save frame map to JSON or TOML file."""
        atlas_data = {
            "frames": self.frame_map,
            "meta": {
                "image": image_name,
                "size": {"w": self.atlas.width, "h": self.atlas.height},
                "format": self.atlas.mode,
                "padding": self.padding,
                "scale": 1,
                **self.metadata
            }
        }

        if format.lower() == "toml":
            with open(path, 'w', encoding='utf-8') as f:
                toml.dump(atlas_data, f)
        elif format.lower() == "json":
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(atlas_data, f, indent=2)
        else:
            raise ValueError(f"Unsupported frame map format: {format}")


class AtlasCompositor:
    """Copies placed images into one RGBA buffer and replicates their edges."""

    def __init__(self, padding: int = 1):
        self.padding = padding

    def composite(self, images: Sequence[SourceImage], plan: PlacementPlan) -> Image.Image:
        """
        Draw every placed image into a transparent atlas of the plan's size.

        Raises:
            CompositionError: If a padded placement falls outside the atlas
        """
        canvas = np.zeros((plan.height, plan.width, 4), dtype=np.uint8)
        by_id = {image.id: image for image in images}

        for image_id, origin in plan.placements.items():
            image = by_id[image_id]
            rect = plan.padded_rect(image, self.padding)

            if not rect.fits_within(plan.width, plan.height):
                raise CompositionError(
                    f"Image '{image.name}' at ({origin.x}, {origin.y}) with padded size "
                    f"{rect.width}x{rect.height} exceeds atlas {plan.width}x{plan.height}"
                )

            self.copy_image(canvas, ImageUtils.to_array(image.image), origin.x, origin.y)

        return ImageUtils.from_array(canvas)

    def copy_image(self, canvas: np.ndarray, pixels: np.ndarray, x: int, y: int) -> None:
        """
        Copy pixels to (x + padding, y + padding) and fill the padding around them.

        Left and right columns come first so that the top and bottom rows,
        copied whole, carry the corner pixels into the corners.
        """
        padding = self.padding
        height, width = pixels.shape[:2]
        left = x + padding
        top = y + padding
        right = left + width
        bottom = top + height

        canvas[top:bottom, left:right] = pixels

        if padding == 0:
            return

        canvas[top:bottom, left - padding:left] = pixels[:, :1]
        canvas[top:bottom, right:right + padding] = pixels[:, -1:]

        canvas[top - padding:top, left - padding:right + padding] = canvas[top, left - padding:right + padding]
        canvas[bottom:bottom + padding, left - padding:right + padding] = canvas[bottom - 1, left - padding:right + padding]


class AtlasGenerator:
    """Handles generation of a texture atlas from a loaded image set."""

    def __init__(self, padding: int = 1):
        """Initialize atlas generator with the border padding."""
        self.padding = padding
        self.planner = PlacementPlanner(padding)
        self.compositor = AtlasCompositor(padding)

    def plan_layout(self, images: Sequence[SourceImage]) -> PlacementPlan:
        """Sort images by height and compute their placements."""
        return self.planner.plan(sort_by_height(images))

    def create_atlas(self, images: Sequence[SourceImage],
                     plan: Optional[PlacementPlan] = None) -> AtlasResult:
        """
        Create a texture atlas for a collection of images.

        Args:
            images: Loaded source images
            plan: Placement plan computed earlier by plan_layout, if any

        Returns:
            AtlasResult with atlas image, entries and placement plan

        Raises:
            AtlasGenerationError: If no images are given or composition fails
        """
        if not images:
            raise AtlasGenerationError("No images provided for atlas generation")

        if plan is None:
            plan = self.plan_layout(images)
        logger.debug(
            f"Planned {len(plan.placements)} placements, bounding width {plan.bounding_width}, "
            f"row height {plan.row_height}"
        )

        atlas = self.compositor.composite(images, plan)
        entries = build_entries(images, plan, self.padding)

        return AtlasResult(
            atlas=atlas,
            entries=entries,
            plan=plan,
            padding=self.padding,
            metadata={
                "image_count": len(images),
                "placed_count": len(plan.placements),
                "efficiency": round(self._efficiency(images, plan), 4),
            }
        )

    def _efficiency(self, images: Sequence[SourceImage], plan: PlacementPlan) -> float:
        """Share of the atlas area covered by padded images."""
        total_area = plan.width * plan.height
        if total_area == 0:
            return 0.0
        used = sum(
            pad_size(image.width, self.padding) * pad_size(image.height, self.padding)
            for image in images if image.id in plan.placements
        )
        return used / total_area


class AtlasGenerationError(Exception):
    """Exception raised when atlas generation fails."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CompositionError(AtlasGenerationError):
    """Exception raised when a placement does not fit the atlas buffer."""
