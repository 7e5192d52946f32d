"""
Tests for atlas validation.
"""

import unittest
import numpy as np
from PIL import Image

from ..processing.atlas import AtlasGenerator
from ..processing.layout import PlacementPlan, Point
from ..processing.metadata import AtlasEntry
from ..processing.validator import AtlasValidator
from .helpers import make_source


class TestAtlasValidator(unittest.TestCase):
    """Test AtlasValidator checks."""

    def setUp(self):
        self.validator = AtlasValidator(padding=1)
        self.images = [make_source(i, f"img{i}", w, h) for i, (w, h) in enumerate(
            [(12, 20), (6, 6), (9, 4), (3, 11)]
        )]
        self.result = AtlasGenerator(padding=1).create_atlas(self.images)

    def test_generated_atlas_is_valid(self):
        self.assertEqual(self.validator.validate_result(self.result, self.images), [])

    def test_non_power_of_two_dimensions(self):
        errors = self.validator.validate_dimensions(Image.new('RGBA', (48, 64)))

        self.assertEqual(len(errors), 1)
        self.assertIn("width 48", errors[0])

    def test_overlapping_placements(self):
        images = [make_source(0, "a", 2, 2), make_source(1, "b", 2, 2)]
        plan = PlacementPlan(placements={0: Point(0, 0), 1: Point(2, 2)}, width=8, height=8)

        errors = self.validator.validate_placements(images, plan)

        self.assertEqual(errors, ["Images 'a' and 'b' overlap"])

    def test_placement_out_of_bounds(self):
        images = [make_source(0, "a", 2, 2)]
        plan = PlacementPlan(placements={0: Point(6, 0)}, width=8, height=8)

        errors = self.validator.validate_placements(images, plan)

        self.assertEqual(len(errors), 1)
        self.assertIn("extends beyond the atlas", errors[0])

    def test_changed_pixel_is_detected(self):
        pixels = np.array(self.result.atlas)
        entry = self.result.entries[0]
        pixels[entry.y, entry.x] = 255 - pixels[entry.y, entry.x]
        tampered = Image.fromarray(pixels)

        errors = self.validator.validate_frame_content(tampered, self.images, self.result.entries)

        self.assertEqual(errors, [f"Atlas content of '{entry.name}' differs from its source image"])

    def test_entry_without_source(self):
        errors = self.validator.validate_frame_content(
            self.result.atlas, self.images, [AtlasEntry("ghost", 1, 1, 2, 2)]
        )

        self.assertEqual(errors, ["Entry 'ghost' has no source image"])

    def test_entry_size_mismatch(self):
        entry = self.result.entries[0]
        wrong = AtlasEntry(entry.name, entry.x, entry.y, entry.width + 1, entry.height)

        errors = self.validator.validate_frame_content(self.result.atlas, self.images, [wrong])

        self.assertEqual(len(errors), 1)
        self.assertIn("differs from source", errors[0])


if __name__ == '__main__':
    unittest.main()
