"""Eight-way direction classification for pointer displacements.

Coordinates are screen coordinates: +x is right, +y is down, so an upward
stroke has negative dy.

The circle is split into eight sectors centered on the cardinal and diagonal
directions. Sector widths are parameters: the default 45/45 split gives the
nearest-of-eight rule, while horizontal_span=90, vertical_span=90 leaves no
room for diagonals and behaves like a dominant-axis four-way classifier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    """A single classified stroke direction."""
    LEFT = "L"
    RIGHT = "R"
    UP = "U"
    DOWN = "D"
    UP_LEFT = "UL"
    UP_RIGHT = "UR"
    DOWN_LEFT = "DL"
    DOWN_RIGHT = "DR"

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)

    @property
    def is_cardinal(self) -> bool:
        return self.is_horizontal or self.is_vertical

    @classmethod
    def diagonal(cls, vertical: Direction, horizontal: Direction) -> Direction:
        """Combine a vertical and a horizontal cardinal into a diagonal."""
        if not (vertical.is_vertical and horizontal.is_horizontal):
            raise ValueError(f"cannot combine {vertical.value} and {horizontal.value}")
        return cls(vertical.value + horizontal.value)


DEFAULT_SPAN = 45.0


def classify(
    dx: float,
    dy: float,
    jitter_px: float,
    horizontal_span: float = DEFAULT_SPAN,
    vertical_span: float = DEFAULT_SPAN,
) -> Optional[Direction]:
    """Classify a displacement vector.

    Args:
        dx, dy: Displacement in pixels (screen coordinates).
        jitter_px: Below this on both axes the movement carries no direction.
        horizontal_span: Angular width in degrees of the L and R sectors.
        vertical_span: Angular width in degrees of the U and D sectors.

    Returns:
        The nearest direction, or None for sub-jitter or zero movement.
    """
    adx, ady = abs(dx), abs(dy)
    if adx < jitter_px and ady < jitter_px:
        return None
    if adx == 0 and ady == 0:
        return None

    # Fold into the first quadrant: 0 = horizontal, 90 = vertical
    theta = math.degrees(math.atan2(ady, adx))

    horizontal = Direction.RIGHT if dx >= 0 else Direction.LEFT
    vertical = Direction.DOWN if dy > 0 else Direction.UP

    # Ties on a sector boundary go to the cardinal direction
    if theta <= horizontal_span / 2.0:
        return horizontal
    if theta >= 90.0 - vertical_span / 2.0:
        return vertical
    return Direction.diagonal(vertical, horizontal)


@dataclass(frozen=True)
class DirectionClassifier:
    """Classifier with its jitter threshold and sector widths bound."""
    jitter_px: float = 4.0
    horizontal_span: float = DEFAULT_SPAN
    vertical_span: float = DEFAULT_SPAN

    def __call__(self, dx: float, dy: float) -> Optional[Direction]:
        return classify(dx, dy, self.jitter_px, self.horizontal_span, self.vertical_span)

    @property
    def diagonal_span(self) -> float:
        return 90.0 - (self.horizontal_span + self.vertical_span) / 2.0
