"""
Atlas processing: image loading, placement planning, composition, metadata and validation.
"""

from .loader import DirectoryImageLoader, SourceImage, ImageLoadError
from .layout import (
    Point,
    Rectangle,
    PlacementPlan,
    PlacementPlanner,
    round_up_power_of_two,
    sort_by_height,
)
from .atlas import (
    AtlasCompositor,
    AtlasGenerator,
    AtlasResult,
    AtlasGenerationError,
    CompositionError,
)
from .metadata import AtlasEntry, MetadataWriter, MetadataGenerationError, read_atlas_info
from .validator import AtlasValidator

__all__ = [
    "DirectoryImageLoader",
    "SourceImage",
    "ImageLoadError",
    "Point",
    "Rectangle",
    "PlacementPlan",
    "PlacementPlanner",
    "round_up_power_of_two",
    "sort_by_height",
    "AtlasCompositor",
    "AtlasGenerator",
    "AtlasResult",
    "AtlasGenerationError",
    "CompositionError",
    "AtlasEntry",
    "MetadataWriter",
    "MetadataGenerationError",
    "read_atlas_info",
    "AtlasValidator",
]
