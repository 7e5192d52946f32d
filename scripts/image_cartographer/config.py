"""
Configuration management for the atlas packer.
Supports TOML and JSON configuration files with validation.
"""

import os
import json
import tomllib
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Union
from pathlib import Path

from .utils.image import ImageUtils


FRAME_MAP_FORMATS = ("none", "json", "toml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Exception raised when the configuration is unusable."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class CartographerConfig:
    """Main configuration class for atlas packing."""

    # Packing settings
    padding: int = 1

    # Input settings
    image_extension: str = ".png"

    # Output settings
    output_name: str = "atlas"
    info_separator: str = ";"
    compression_level: int = 6
    frame_map_format: str = "none"
    template_dir: Optional[str] = None

    # Validation settings
    verify_output: bool = True
    allow_unplaced: bool = False

    # Logging
    log_level: str = "WARNING"

    @property
    def atlas_filename(self) -> str:
        """File name of the composited atlas image."""
        return f"{self.output_name}{self.image_extension}"

    @property
    def info_filename(self) -> str:
        """File name of the placement text file."""
        return f"{self.output_name}Info.txt"

    def frame_map_filename(self, format: Optional[str] = None) -> str:
        """File name of the optional frame map for the given format."""
        format = (format or self.frame_map_format).lower()
        return f"{self.output_name}.{format}"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "CartographerConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "CartographerConfig":
        """Load configuration from TOML file."""
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "CartographerConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "CartographerConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'packing' in data:
            packing = data['packing']
            config_data['padding'] = packing.get('padding', 1)

        if 'input' in data:
            input_settings = data['input']
            config_data['image_extension'] = input_settings.get('image_extension', '.png')

        if 'output' in data:
            output = data['output']
            config_data['output_name'] = output.get('name', 'atlas')
            config_data['info_separator'] = output.get('info_separator', ';')
            config_data['compression_level'] = output.get('compression_level', 6)
            config_data['frame_map_format'] = output.get('frame_map_format', 'none')
            config_data['template_dir'] = output.get('template_dir')

        if 'validation' in data:
            validation = data['validation']
            config_data['verify_output'] = validation.get('verify_output', True)
            config_data['allow_unplaced'] = validation.get('allow_unplaced', False)

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', 'WARNING')

        return cls(**config_data)

    @classmethod
    def default(cls) -> "CartographerConfig":
        """Create default configuration with environment variable overrides."""
        config = cls()
        return cls._apply_env_overrides(config)

    @classmethod
    def _apply_env_overrides(cls, config: "CartographerConfig") -> "CartographerConfig":
        """Apply environment variable overrides to configuration."""

        if os.getenv('CARTOGRAPHER_PADDING'):
            config.padding = _env_int('CARTOGRAPHER_PADDING')

        if os.getenv('CARTOGRAPHER_IMAGE_EXTENSION'):
            config.image_extension = os.getenv('CARTOGRAPHER_IMAGE_EXTENSION', '.png')

        if os.getenv('CARTOGRAPHER_OUTPUT_NAME'):
            config.output_name = os.getenv('CARTOGRAPHER_OUTPUT_NAME', 'atlas')

        if os.getenv('CARTOGRAPHER_INFO_SEPARATOR'):
            config.info_separator = os.getenv('CARTOGRAPHER_INFO_SEPARATOR', ';')

        if os.getenv('CARTOGRAPHER_COMPRESSION_LEVEL'):
            config.compression_level = _env_int('CARTOGRAPHER_COMPRESSION_LEVEL')

        if os.getenv('CARTOGRAPHER_FRAME_MAP_FORMAT'):
            config.frame_map_format = os.getenv('CARTOGRAPHER_FRAME_MAP_FORMAT', 'none').lower()

        if os.getenv('CARTOGRAPHER_TEMPLATE_DIR'):
            config.template_dir = os.getenv('CARTOGRAPHER_TEMPLATE_DIR')

        if os.getenv('CARTOGRAPHER_VERIFY_OUTPUT'):
            config.verify_output = os.getenv('CARTOGRAPHER_VERIFY_OUTPUT', 'true').lower() == 'true'

        if os.getenv('CARTOGRAPHER_ALLOW_UNPLACED'):
            config.allow_unplaced = os.getenv('CARTOGRAPHER_ALLOW_UNPLACED', 'false').lower() == 'true'

        if os.getenv('CARTOGRAPHER_LOG_LEVEL'):
            config.log_level = os.getenv('CARTOGRAPHER_LOG_LEVEL', 'WARNING').upper()

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not isinstance(self.padding, int) or self.padding < 0:
            errors.append("padding must be a non-negative integer")

        if not self.image_extension.startswith('.') or len(self.image_extension) < 2:
            errors.append("image_extension must start with '.' followed by a suffix")
        elif ImageUtils.format_for_extension(self.image_extension) is None:
            errors.append(f"image_extension '{self.image_extension}' is not a format the atlas can be written in")

        if not self.output_name:
            errors.append("output_name must not be empty")

        if len(self.info_separator) != 1 or self.info_separator in "\r\n":
            errors.append("info_separator must be a single non-newline character")

        if not isinstance(self.compression_level, int) or not 0 <= self.compression_level <= 9:
            errors.append("compression_level must be between 0 and 9")

        if self.frame_map_format.lower() not in FRAME_MAP_FORMATS:
            errors.append(f"frame_map_format must be one of {', '.join(FRAME_MAP_FORMATS)}")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        return errors

    def ensure_valid(self) -> "CartographerConfig":
        """Raise ConfigurationError if validation reports any problem."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}")
        return self


def _env_int(name: str) -> int:
    value = os.getenv(name, '')
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
