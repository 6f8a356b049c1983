"""Placement engine: stacking height and zone status for board shapes.

Shapes stack without physics: a shape rests directly on top of the highest
neighbor whose unit footprint overlaps its own and which is not above it.
The same-level tolerance keeps two shapes at (nearly) the same height from
climbing onto each other while one of them is dragged through the other.

Zones are x-ranges on the floor:

    To Do:  x in [-10, 10]
    Done:   x in (10, 30]

Anything outside both ranges keeps whatever status it had before.

Usage:
    shape.y = resolve_support_height(shape, board.shapes)   # one drag tick
    shape.y = settle_height(shape, board.shapes)            # spawn
    shape.status = classify_zone(shape.x, shape.status)
"""

from __future__ import annotations

from dataclasses import dataclass

from taskboard.primitives import (
    FLOOR_DONE,
    FLOOR_TODO,
    GROUND_Y,
    SAME_LEVEL_EPS,
    SHAPE_SIZE,
    Status,
)
from taskboard.raycast import GroundPlane

# Floors sit half a unit below the resting height of a shape
FLOOR_Y = -1.5
FLOOR_SIZE = 20.0


@dataclass(frozen=True)
class Zone:
    """An x-range of the floor mapped to a task status.

    Attributes:
        status: Status assigned to shapes inside the range
        x_min, x_max: Range bounds; x_max is always inclusive
        include_min: Whether x_min itself belongs to the zone
    """

    status: Status
    x_min: float
    x_max: float
    include_min: bool = True

    def contains(self, x: float) -> bool:
        above = x >= self.x_min if self.include_min else x > self.x_min
        return above and x <= self.x_max


# Checked in order: the shared edge x=10 belongs to To Do
ZONES: tuple[Zone, ...] = (
    Zone(Status.TODO, -10.0, 10.0, include_min=True),
    Zone(Status.DONE, 10.0, 30.0, include_min=False),
)

FLOORS: tuple[GroundPlane, ...] = (
    GroundPlane("To Do", (0.0, FLOOR_Y, 0.0), FLOOR_SIZE, FLOOR_SIZE, FLOOR_TODO),
    GroundPlane("Done", (20.0, FLOOR_Y, 0.0), FLOOR_SIZE, FLOOR_SIZE, FLOOR_DONE),
)


def footprints_overlap(a, b, size: float = SHAPE_SIZE) -> bool:
    """Unit-square XZ footprint overlap (strict, so touching edges don't count)."""
    return abs(a.x - b.x) < size and abs(a.z - b.z) < size


def resolve_support_height(
    target,
    shapes,
    size: float = SHAPE_SIZE,
    ground_y: float = GROUND_Y,
    same_level_eps: float = SAME_LEVEL_EPS,
) -> float:
    """Height *target* should rest at given its footprint and current y.

    Considers every other shape that overlaps the target's footprint and
    sits at or below ``target.y + same_level_eps``. Returns the highest
    ``other.y + size`` among them, or *ground_y* when none qualifies.
    The target itself is skipped by id and is not modified.
    """
    support = ground_y
    for other in shapes:
        if other.id == target.id:
            continue
        if other.y > target.y + same_level_eps:
            continue
        if not footprints_overlap(target, other, size):
            continue
        top = other.y + size
        if top > support:
            support = top
    return support


class _Probe:
    """Stand-in for a shape at a trial height (keeps the real shape untouched)."""

    __slots__ = ("id", "x", "y", "z")

    def __init__(self, shape, y: float):
        self.id = shape.id
        self.x = shape.x
        self.y = y
        self.z = shape.z


def settle_height(
    target,
    shapes,
    size: float = SHAPE_SIZE,
    ground_y: float = GROUND_Y,
    same_level_eps: float = SAME_LEVEL_EPS,
) -> float:
    """Resolve the support height repeatedly until it stops changing.

    A single resolve only climbs one level per call (the tolerance window
    moves with the target), so spawning onto a tall stack needs a few
    rounds. Bounded by the number of shapes since each round climbs at
    least one of them.
    """
    probe = _Probe(target, target.y)
    shapes = list(shapes)
    for _ in range(len(shapes) + 1):
        y = resolve_support_height(probe, shapes, size, ground_y, same_level_eps)
        if y == probe.y:
            break
        probe.y = y
    return probe.y


def classify_zone(
    x: float,
    current: Status | None = None,
    zones: tuple[Zone, ...] = ZONES,
) -> Status | None:
    """Status for a shape at *x*; *current* is kept outside every zone."""
    for zone in zones:
        if zone.contains(x):
            return zone.status
    return current
