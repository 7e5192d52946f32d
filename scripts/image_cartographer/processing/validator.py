"""
Consistency checks for generated atlases.
"""

from typing import List, Sequence
from PIL import Image
import numpy as np

from ..utils.image import ImageUtils
from .atlas import AtlasResult
from .layout import PlacementPlan, is_power_of_two
from .loader import SourceImage
from .metadata import AtlasEntry


class AtlasValidator:
    """Validator for atlas generation results."""

    def __init__(self, padding: int = 1):
        """Initialize atlas validator with the padding the atlas was built with."""
        self.padding = padding

    def validate_dimensions(self, atlas: Image.Image) -> List[str]:
        """Check both atlas sides are exact powers of two."""
        errors = []
        width, height = atlas.size

        if not is_power_of_two(width):
            errors.append(f"Atlas width {width} is not a power of two")
        if not is_power_of_two(height):
            errors.append(f"Atlas height {height} is not a power of two")

        return errors

    def validate_placements(self, images: Sequence[SourceImage], plan: PlacementPlan) -> List[str]:
        """
        Check every padded placement lies inside the plan and no two overlap.

        Args:
            images: Images the plan was computed for
            plan: Placement plan

        Returns:
            List of validation error messages
        """
        errors = []
        placed = [image for image in images if image.id in plan.placements]
        rects = [(image, plan.padded_rect(image, self.padding)) for image in placed]

        for image, rect in rects:
            if not rect.fits_within(plan.width, plan.height):
                errors.append(
                    f"Image '{image.name}' extends beyond the atlas: "
                    f"({rect.x}, {rect.y}, {rect.width}x{rect.height}) in {plan.width}x{plan.height}"
                )

        for i, (image, rect) in enumerate(rects):
            for other, other_rect in rects[i + 1:]:
                if rect.intersects(other_rect):
                    errors.append(f"Images '{image.name}' and '{other.name}' overlap")

        return errors

    def validate_frame_content(self, atlas: Image.Image, images: Sequence[SourceImage],
                               entries: Sequence[AtlasEntry]) -> List[str]:
        """Check that cropping the atlas at every entry gives back the source pixels."""
        errors = []
        by_name = {image.name: image for image in images}
        atlas_pixels = ImageUtils.to_array(atlas)

        for entry in entries:
            source = by_name.get(entry.name)
            if source is None:
                errors.append(f"Entry '{entry.name}' has no source image")
                continue

            if (entry.width, entry.height) != source.size:
                errors.append(
                    f"Entry '{entry.name}' size {entry.width}x{entry.height} "
                    f"differs from source {source.width}x{source.height}"
                )
                continue

            region = atlas_pixels[entry.y:entry.y + entry.height, entry.x:entry.x + entry.width]
            if not np.array_equal(region, ImageUtils.to_array(source.image)):
                errors.append(f"Atlas content of '{entry.name}' differs from its source image")

        return errors

    def validate_result(self, result: AtlasResult, images: Sequence[SourceImage]) -> List[str]:
        """Perform every check on a generation result."""
        all_errors = []

        all_errors.extend(self.validate_dimensions(result.atlas))
        all_errors.extend(self.validate_placements(images, result.plan))
        all_errors.extend(self.validate_frame_content(result.atlas, images, result.entries))

        return all_errors
