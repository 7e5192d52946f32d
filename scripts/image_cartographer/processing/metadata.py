"""
Placement metadata: the atlasInfo.txt records a runtime uses to find each image.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
from jinja2 import (
    ChoiceLoader, DictLoader, Environment, FileSystemLoader, TemplateError
)

from .loader import SourceImage
from .layout import PlacementPlan


INFO_TEMPLATE_NAME = "atlas_info.txt.j2"

BUILTIN_TEMPLATES = {
    INFO_TEMPLATE_NAME: (
        "{% for entry in entries %}\n"
        "{{ entry.name }}{{ separator }}{{ entry.x }}{{ separator }}{{ entry.y }}"
        "{{ separator }}{{ entry.width }}{{ separator }}{{ entry.height }}\n"
        "{% endfor %}\n"
    ),
}


@dataclass(frozen=True)
class AtlasEntry:
    """Location of one image's content inside the atlas."""
    name: str
    x: int
    y: int
    width: int
    height: int

    def as_frame(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.width, "h": self.height}


class MetadataGenerationError(Exception):
    """Exception raised when metadata generation fails."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def build_entries(images: Sequence[SourceImage], plan: PlacementPlan, padding: int) -> List[AtlasEntry]:
    """
    Build one entry per placement, in placement order.

    The entry origin is the first content pixel, i.e. the placement origin
    shifted by the padding; width and height are the unpadded image size.
    """
    by_id = {image.id: image for image in images}
    entries = []

    for image_id, origin in plan.placements.items():
        image = by_id[image_id]
        entries.append(AtlasEntry(
            name=image.name,
            x=origin.x + padding,
            y=origin.y + padding,
            width=image.width,
            height=image.height,
        ))

    return entries


class MetadataWriter:
    """Renders and writes the separator-delimited atlas info file."""

    def __init__(self, separator: str = ";", template_dir: Optional[Union[str, Path]] = None):
        """
        Initialize metadata writer.

        Args:
            separator: Field delimiter of each record
            template_dir: Optional directory holding an atlas_info.txt.j2 override
        """
        self.separator = separator
        self.template_dir = Path(template_dir) if template_dir else None

        loaders = [DictLoader(BUILTIN_TEMPLATES)]
        if self.template_dir is not None:
            loaders.insert(0, FileSystemLoader(str(self.template_dir)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False
        )

    def render(self, entries: Sequence[AtlasEntry]) -> str:
        """
        Render entries as ``name;x;y;width;height`` lines.

        Raises:
            MetadataGenerationError: If a name cannot be written unambiguously
                or the template fails to render
        """
        for entry in entries:
            if self.separator in entry.name or "\n" in entry.name or "\r" in entry.name:
                raise MetadataGenerationError(
                    f"Image name {entry.name!r} contains the separator or a line break"
                )

        try:
            template = self.env.get_template(INFO_TEMPLATE_NAME)
            return template.render(entries=entries, separator=self.separator)
        except TemplateError as e:
            raise MetadataGenerationError(f"Cannot render {INFO_TEMPLATE_NAME}: {e}")

    def write(self, entries: Sequence[AtlasEntry], path: Union[str, Path]) -> Path:
        """Render entries and write them to path."""
        path = Path(path)
        content = self.render(entries)

        with open(path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)

        return path


def read_atlas_info(path: Union[str, Path], separator: str = ";") -> List[AtlasEntry]:
    """
    Parse an atlas info file back into entries.

    Raises:
        MetadataGenerationError: If a line does not hold five fields with
            integer coordinates and sizes
    """
    entries = []

    with open(path, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line:
                continue

            fields = line.split(separator)
            if len(fields) != 5:
                raise MetadataGenerationError(
                    f"Line {line_number}: expected 5 fields, got {len(fields)}"
                )

            name, *numbers = fields
            try:
                x, y, width, height = (int(number) for number in numbers)
            except ValueError:
                raise MetadataGenerationError(f"Line {line_number}: non-integer field in {line!r}")

            entries.append(AtlasEntry(name, x, y, width, height))

    return entries
