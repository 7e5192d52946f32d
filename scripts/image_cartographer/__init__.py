"""
Image Cartographer

Packs a directory of images into one power-of-two texture atlas with
clamp-to-edge borders, and writes the placement of every image so a renderer
can find it again.
"""

__version__ = "0.1.0"
__author__ = "Image Cartographer Development Team"

from .config import CartographerConfig
from .pipeline import CartographerPipeline, PipelineResult
from .processing.atlas import AtlasGenerator, AtlasResult
from .processing.layout import PlacementPlanner, round_up_power_of_two, sort_by_height
from .processing.metadata import MetadataWriter, read_atlas_info
from .processing.validator import AtlasValidator

__all__ = [
    "CartographerConfig",
    "CartographerPipeline",
    "PipelineResult",
    "AtlasGenerator",
    "AtlasResult",
    "PlacementPlanner",
    "round_up_power_of_two",
    "sort_by_height",
    "MetadataWriter",
    "read_atlas_info",
    "AtlasValidator",
]
