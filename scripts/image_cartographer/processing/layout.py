"""
Placement planning for atlas packing.

Images are packed on a single shelf whose height is fixed by the tallest
image. Every placed image opens the column beneath it, which is filled with
shorter images before the scan moves on to the right.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .loader import SourceImage


@dataclass(frozen=True)
class Point:
    """Integer coordinate in the atlas plane."""
    x: int
    y: int


@dataclass
class Rectangle:
    """Rectangle for atlas layout calculations."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def intersects(self, other: 'Rectangle') -> bool:
        """Check if this rectangle intersects with another."""
        return not (self.right <= other.x or other.right <= self.x or
                    self.bottom <= other.y or other.bottom <= self.y)

    def fits_within(self, width: int, height: int) -> bool:
        """Check if the rectangle lies inside a width x height area at the origin."""
        return self.x >= 0 and self.y >= 0 and self.right <= width and self.bottom <= height


@dataclass
class PackingCursor:
    """One pending scan of the planner: a start point bounded on the right."""
    x: int
    y: int
    limit_x: Optional[int] = None
    next_index: int = 0


@dataclass
class PlacementPlan:
    """Result of placement planning."""
    placements: Dict[int, Point] = field(default_factory=dict)
    width: int = 0
    height: int = 0
    bounding_width: int = 0
    row_height: int = 0
    unplaced: List[int] = field(default_factory=list)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def padded_rect(self, image: SourceImage, padding: int) -> Rectangle:
        """Padded rectangle occupied by a placed image."""
        origin = self.placements[image.id]
        return Rectangle(origin.x, origin.y, pad_size(image.width, padding), pad_size(image.height, padding))


def pad_size(size: int, padding: int) -> int:
    return size + padding * 2


def round_up_power_of_two(x: int) -> int:
    """
    Smallest power of two greater than or equal to x.

    Zero and one both give 1.
    """
    if x < 0:
        raise ValueError(f"Cannot round a negative value to a power of two: {x}")

    power = 1
    while power < x:
        power *= 2

    return power


def is_power_of_two(n: int) -> bool:
    """Check if number is a power of two."""
    return n > 0 and (n & (n - 1)) == 0


def sort_by_height(images: Sequence[SourceImage]) -> List[SourceImage]:
    """Order images by descending height, keeping load order among equal heights."""
    return sorted(images, key=lambda image: image.height, reverse=True)


class PlacementPlanner:
    """Assigns every image a non-overlapping origin in the atlas plane."""

    def __init__(self, padding: int = 1):
        if padding < 0:
            raise ValueError(f"padding must be non-negative, got {padding}")
        self.padding = padding

    def plan(self, images: Sequence[SourceImage]) -> PlacementPlan:
        """
        Compute placements for images sorted by descending height.

        The shelf height is the first image's padded height rounded up to a
        power of two and never grows. Images that can never fit under it are
        reported in ``unplaced`` rather than raising.

        Args:
            images: Images in packing order

        Returns:
            PlacementPlan with power-of-two dimensions
        """
        plan = PlacementPlan()
        if not images:
            return plan

        plan.row_height = round_up_power_of_two(pad_size(images[0].height, self.padding))

        self._place(images, plan)

        plan.width = round_up_power_of_two(plan.bounding_width)
        plan.height = plan.row_height
        plan.unplaced = [image.id for image in images if image.id not in plan.placements]

        return plan

    def _place(self, images: Sequence[SourceImage], plan: PlacementPlan) -> None:
        # Each cursor on the stack stands for one gap-fill pass; the pass on
        # top runs to completion before the one below it resumes.
        stack = [PackingCursor(0, 0)]

        while stack and len(plan.placements) < len(images):
            cursor = stack[-1]
            opened = None

            while cursor.next_index < len(images):
                image = images[cursor.next_index]
                cursor.next_index += 1

                if image.id in plan.placements:
                    continue

                padded_width = pad_size(image.width, self.padding)
                padded_height = pad_size(image.height, self.padding)

                if cursor.y + padded_height > plan.row_height:
                    continue
                if cursor.limit_x is not None and cursor.x + padded_width > cursor.limit_x:
                    continue

                plan.placements[image.id] = Point(cursor.x, cursor.y)
                below = Point(cursor.x, cursor.y + padded_height)
                cursor.x += padded_width
                plan.bounding_width = max(plan.bounding_width, cursor.x)

                if below.y < plan.row_height:
                    opened = PackingCursor(below.x, below.y, limit_x=cursor.x)
                    break

            if opened is not None:
                stack.append(opened)
            else:
                stack.pop()
