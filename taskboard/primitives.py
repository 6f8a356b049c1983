"""Primitive shape kinds, volumes and colours for the task board.

Every task on the board is one primitive. The board only needs two things
from a primitive: the volume used for ray picking and the unit footprint
used for stacking.

Coordinate convention:
    - Y-up; the floors are horizontal planes at y = -1.5
    - A shape's position is the center of its volume
    - Resting shapes sit at GROUND_Y, stacked shapes one SHAPE_SIZE higher

Volume convention (half-extents around the shape center):
    - CUBE: (0.5, 0.5, 0.5) box
    - SPHERE: radius 0.5
    - CYLINDER: radius 1.0, half-height 0.5, aligned along Y

Stacking always uses the unit footprint, whatever the volume.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class UnknownShapeKindError(ValueError):
    """Raised when a spawn request names a kind outside ShapeKind."""


class ShapeKind(str, Enum):
    """Primitive kinds a task can be drawn as."""

    CUBE = "cube"
    SPHERE = "sphere"
    CYLINDER = "cylinder"

    @classmethod
    def parse(cls, value: ShapeKind | str) -> ShapeKind:
        """Resolve a kind name, raising UnknownShapeKindError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownShapeKindError(f"unknown shape kind: {value!r}") from None


class Status(str, Enum):
    """Task status, derived from which floor a shape rests on."""

    TODO = "todo"
    DONE = "done"


@dataclass(frozen=True)
class Volume:
    """Pickable volume of a primitive, relative to its center.

    Attributes:
        kind: Which primitive this volume belongs to
        radius: Sphere/cylinder radius (unused for cubes)
        half_extents: Axis-aligned half sizes (x, y, z)
    """

    kind: ShapeKind
    radius: float
    half_extents: tuple[float, float, float]


VOLUMES: dict[ShapeKind, Volume] = {
    ShapeKind.CUBE: Volume(ShapeKind.CUBE, 0.5, (0.5, 0.5, 0.5)),
    ShapeKind.SPHERE: Volume(ShapeKind.SPHERE, 0.5, (0.5, 0.5, 0.5)),
    ShapeKind.CYLINDER: Volume(ShapeKind.CYLINDER, 1.0, (1.0, 0.5, 1.0)),
}

# ---------------------------------------------------------------------------
# Stacking constants
# ---------------------------------------------------------------------------

SHAPE_SIZE = 1.0  # unit footprint edge and stacking step
GROUND_Y = -0.999  # resting height on the floor
SAME_LEVEL_EPS = SHAPE_SIZE * 0.5  # shapes this close in y never stack

# ---------------------------------------------------------------------------
# Palette colors (the swatches offered when spawning)
# ---------------------------------------------------------------------------

DEFAULT_COLOR = "#1475b5"

SWATCH_BLUE = "#1475b5"
SWATCH_RED = "#d64545"
SWATCH_GREEN = "#3fa34d"
SWATCH_ORANGE = "#f08c2e"
SWATCH_PURPLE = "#8e5cc7"
SWATCH_PINK = "#de3c81"

SWATCHES = (
    SWATCH_BLUE,
    SWATCH_RED,
    SWATCH_GREEN,
    SWATCH_ORANGE,
    SWATCH_PURPLE,
    SWATCH_PINK,
)

# Floor colors
FLOOR_TODO = "#f9c834"
FLOOR_DONE = "#00bccc"

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")
_RGB_RE = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$")


def parse_color(value) -> tuple[int, int, int] | None:
    """Parse a color into an (r, g, b) tuple of 0-255 ints.

    Accepts "#rrggbb", "#rgb", "rgb(r, g, b)" and 3-sequences of ints.
    Returns None for anything else.
    """
    if isinstance(value, str):
        text = value.strip()
        m = _HEX_RE.match(text)
        if m:
            h = m.group(1)
            if len(h) == 3:
                h = "".join(c * 2 for c in h)
            return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
        m = _RGB_RE.match(text)
        if m:
            rgb = tuple(int(g) for g in m.groups())
            if all(0 <= c <= 255 for c in rgb):
                return rgb
        return None
    if isinstance(value, (tuple, list)) and len(value) == 3:
        try:
            rgb = tuple(int(c) for c in value)
        except (TypeError, ValueError):
            return None
        if all(0 <= c <= 255 for c in rgb):
            return rgb
    return None


def normalize_color(value, fallback: str = DEFAULT_COLOR) -> str:
    """Return *value* as a lowercase "#rrggbb" string, or *fallback*."""
    rgb = parse_color(value)
    if rgb is None:
        return fallback
    return "#{:02x}{:02x}{:02x}".format(*rgb)
