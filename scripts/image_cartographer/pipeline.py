"""
Atlas pipeline coordinator.
Runs load, plan, composite, validate and write as one sequential pass.
"""

import time
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union
from dataclasses import dataclass, field
from contextlib import contextmanager

from .config import CartographerConfig
from .processing.loader import DirectoryImageLoader, SourceImage
from .processing.atlas import AtlasGenerator, AtlasResult, AtlasGenerationError
from .processing.metadata import AtlasEntry, MetadataWriter
from .processing.validator import AtlasValidator
from .processing.layout import PlacementPlan


class PipelineStep(Enum):
    """Enumeration of pipeline steps."""
    LOAD = "load"
    PLAN = "plan"
    COMPOSITE = "composite"
    VALIDATE = "validate"
    WRITE = "write"


@dataclass
class StepResult:
    """Result of a pipeline step execution."""
    step: PipelineStep
    duration: float
    message: str = ""


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""
    directory: Path
    image_count: int = 0
    width: int = 0
    height: int = 0
    entries: List[AtlasEntry] = field(default_factory=list)
    unplaced: List[str] = field(default_factory=list)
    atlas_path: Optional[Path] = None
    info_path: Optional[Path] = None
    frame_map_path: Optional[Path] = None
    duration: float = 0.0
    step_results: Dict[PipelineStep, StepResult] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        """True when the directory held no eligible images."""
        return self.image_count == 0

    @property
    def placed_count(self) -> int:
        return len(self.entries)

    @property
    def duration_ms(self) -> int:
        return int(round(self.duration * 1000))


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(self, message: str, step: Optional[PipelineStep] = None):
        super().__init__(message)
        self.message = message
        self.step = step


class UnplaceableImageError(PipelineError):
    """Raised when the planner could not find room for some images."""

    def __init__(self, names: List[str]):
        super().__init__(
            f"{len(names)} image(s) could not be placed under the shelf height: {', '.join(names)}",
            PipelineStep.PLAN
        )
        self.names = names


class CartographerPipeline:
    """
    Packs every image of a directory into an atlas and writes its metadata.

    Nothing is written unless loading, planning, composition and validation
    all succeed.
    """

    def __init__(self, config: Optional[CartographerConfig] = None):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration, defaults plus environment overrides if omitted

        Raises:
            ConfigurationError: If the configuration does not validate
        """
        self.config = (config or CartographerConfig.default()).ensure_valid()
        self.logger = self._setup_logging()

        self.loader = DirectoryImageLoader(self.config)
        self.generator = AtlasGenerator(self.config.padding)
        self.writer = MetadataWriter(self.config.info_separator, self.config.template_dir)
        self.validator = AtlasValidator(self.config.padding)

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("image_cartographer")
        logger.setLevel(self.config.log_level.upper())

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @contextmanager
    def _step(self, step: PipelineStep, result: PipelineResult):
        """Time a step and record it on the result."""
        self.logger.info(f"Executing step: {step.value}")
        start_time = time.perf_counter()

        try:
            yield
        except Exception as e:
            duration = time.perf_counter() - start_time
            self.logger.error(f"Step {step.value} failed after {duration:.3f}s: {e}")
            raise

        duration = time.perf_counter() - start_time
        result.step_results[step] = StepResult(step, duration, f"Step {step.value} completed")
        self.logger.info(f"Step {step.value} completed in {duration:.3f}s")

    def run(self, directory: Union[str, Path, None] = None) -> PipelineResult:
        """
        Run the whole pipeline on a directory.

        Args:
            directory: Directory holding the images, the working directory if omitted

        Returns:
            PipelineResult; ``empty`` is set and no file written when the
            directory has no eligible images

        Raises:
            ImageLoadError: If the directory or an image cannot be read
            UnplaceableImageError: If images were left unplaced and that is not allowed
            AtlasGenerationError: If composition or validation fails
            MetadataGenerationError: If the info file cannot be rendered
            PipelineError: If writing an output file fails
        """
        directory = Path(directory) if directory is not None else Path.cwd()
        result = PipelineResult(directory=directory)
        start_time = time.perf_counter()

        self.logger.info(f"Starting atlas generation in {directory}")

        with self._step(PipelineStep.LOAD, result):
            images = self.loader.load(directory)
            result.image_count = len(images)

        if not images:
            self.logger.info("No eligible images found, nothing to do")
            result.duration = time.perf_counter() - start_time
            return result

        with self._step(PipelineStep.PLAN, result):
            plan = self.generator.plan_layout(images)
            result.unplaced = self._check_unplaced(images, plan)

        with self._step(PipelineStep.COMPOSITE, result):
            atlas_result = self.generator.create_atlas(images, plan)
            result.entries = atlas_result.entries
            result.width, result.height = plan.size

        if self.config.verify_output:
            with self._step(PipelineStep.VALIDATE, result):
                errors = self.validator.validate_result(atlas_result, images)
                if errors:
                    raise AtlasGenerationError(f"Atlas failed validation: {'; '.join(errors)}")

        with self._step(PipelineStep.WRITE, result):
            self._write_outputs(directory, atlas_result, result)

        result.duration = time.perf_counter() - start_time
        self.logger.info(
            f"Created {result.width}x{result.height} atlas from {result.image_count} images "
            f"in {result.duration_ms}ms"
        )

        return result

    def _check_unplaced(self, images: List[SourceImage], plan: PlacementPlan) -> List[str]:
        """Report unplaced images, raising unless they may be dropped."""
        by_id = {image.id: image for image in images}
        names = [by_id[image_id].name for image_id in plan.unplaced]

        if names and not self.config.allow_unplaced:
            raise UnplaceableImageError(names)

        for name in names:
            self.logger.warning(f"Image '{name}' could not be placed and is left out of the atlas")

        return names

    def _write_outputs(self, directory: Path, atlas_result: AtlasResult, result: PipelineResult) -> None:
        """Write the atlas image, the info file and the optional frame map."""
        atlas_path = directory / self.config.atlas_filename
        info_path = directory / self.config.info_filename

        # Unrepresentable names must fail before anything touches the disk.
        self.writer.render(atlas_result.entries)

        try:
            atlas_result.save_atlas(atlas_path, compress_level=self.config.compression_level)
            result.atlas_path = atlas_path

            result.info_path = self.writer.write(atlas_result.entries, info_path)

            if self.config.frame_map_format.lower() != "none":
                frame_map_path = directory / self.config.frame_map_filename()
                atlas_result.save_frame_map(
                    frame_map_path,
                    format=self.config.frame_map_format,
                    image_name=self.config.atlas_filename
                )
                result.frame_map_path = frame_map_path

        except OSError as e:
            raise PipelineError(f"Cannot write atlas output: {e}", PipelineStep.WRITE)
