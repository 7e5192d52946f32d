"""
Tests for configuration loading and validation.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ..config import CartographerConfig, ConfigurationError


class TestCartographerConfig(unittest.TestCase):
    """Test CartographerConfig."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_defaults(self):
        config = CartographerConfig()

        self.assertEqual(config.padding, 1)
        self.assertEqual(config.atlas_filename, "atlas.png")
        self.assertEqual(config.info_filename, "atlasInfo.txt")
        self.assertEqual(config.info_separator, ";")
        self.assertEqual(config.validate(), [])

    def test_frame_map_filename(self):
        config = CartographerConfig(frame_map_format="toml")

        self.assertEqual(config.frame_map_filename(), "atlas.toml")
        self.assertEqual(config.frame_map_filename("JSON"), "atlas.json")

    def test_from_toml(self):
        path = Path(self.temp_dir) / "image_cartographer.toml"
        path.write_text(
            "[packing]\n"
            "padding = 2\n"
            "\n"
            "[output]\n"
            "name = \"sheet\"\n"
            "frame_map_format = \"json\"\n"
            "\n"
            "[validation]\n"
            "allow_unplaced = true\n"
        )

        config = CartographerConfig.from_file(path)

        self.assertEqual(config.padding, 2)
        self.assertEqual(config.output_name, "sheet")
        self.assertEqual(config.info_filename, "sheetInfo.txt")
        self.assertEqual(config.frame_map_format, "json")
        self.assertTrue(config.allow_unplaced)
        self.assertTrue(config.verify_output)

    def test_from_json(self):
        path = Path(self.temp_dir) / "image_cartographer.json"
        with open(path, 'w') as f:
            json.dump({"output": {"info_separator": ",", "compression_level": 9},
                       "logging": {"level": "DEBUG"}}, f)

        config = CartographerConfig.from_file(path)

        self.assertEqual(config.info_separator, ",")
        self.assertEqual(config.compression_level, 9)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.padding, 1)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            CartographerConfig.from_file(Path(self.temp_dir) / "missing.toml")

    def test_unsupported_format(self):
        path = Path(self.temp_dir) / "config.yaml"
        path.write_text("padding: 2\n")

        with self.assertRaises(ValueError):
            CartographerConfig.from_file(path)

    @patch.dict(os.environ, {
        "CARTOGRAPHER_PADDING": "3",
        "CARTOGRAPHER_FRAME_MAP_FORMAT": "TOML",
        "CARTOGRAPHER_VERIFY_OUTPUT": "false",
        "CARTOGRAPHER_LOG_LEVEL": "info",
    })
    def test_env_overrides(self):
        config = CartographerConfig.default()

        self.assertEqual(config.padding, 3)
        self.assertEqual(config.frame_map_format, "toml")
        self.assertFalse(config.verify_output)
        self.assertEqual(config.log_level, "INFO")

    @patch.dict(os.environ, {"CARTOGRAPHER_PADDING": "wide"})
    def test_env_override_not_an_integer(self):
        with self.assertRaises(ConfigurationError):
            CartographerConfig.default()

    def test_validate_reports_every_problem(self):
        config = CartographerConfig(
            padding=-1,
            image_extension="png",
            info_separator=";;",
            compression_level=12,
            frame_map_format="xml",
            log_level="LOUD",
        )

        errors = config.validate()

        self.assertEqual(len(errors), 6)

    def test_compression_level_must_be_an_integer(self):
        config_path = Path(self.temp_dir) / "config.json"
        with open(config_path, 'w') as f:
            json.dump({"output": {"compression_level": "6"}}, f)

        config = CartographerConfig.from_file(config_path)

        with self.assertRaises(ConfigurationError) as context:
            config.ensure_valid()
        self.assertIn("compression_level", context.exception.message)

    def test_image_extension_must_be_writable(self):
        self.assertEqual(CartographerConfig(image_extension=".bmp").validate(), [])
        self.assertEqual(CartographerConfig(image_extension=".PNG").validate(), [])

        errors = CartographerConfig(image_extension=".nope").validate()

        self.assertEqual(len(errors), 1)
        self.assertIn(".nope", errors[0])

    def test_ensure_valid(self):
        with self.assertRaises(ConfigurationError) as context:
            CartographerConfig(padding=-2).ensure_valid()

        self.assertIn("padding", context.exception.message)

        config = CartographerConfig()
        self.assertIs(config.ensure_valid(), config)


if __name__ == '__main__':
    unittest.main()
