"""Live shape objects and spawn requests."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from taskboard.primitives import DEFAULT_COLOR, ShapeKind, Status


@dataclass
class SpawnRequest:
    """What the spawn surface accepts (kind is validated at spawn time).

    Attributes:
        kind: "cube", "sphere" or "cylinder"
        position: Requested (x, y, z); y is re-resolved unless trusted
        color: Any color parse_color() accepts
        label_text: Optional overlay text ("" for no label)
    """

    kind: ShapeKind | str = ShapeKind.CUBE
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    color: str = DEFAULT_COLOR
    label_text: str = ""


@dataclass(eq=False)
class Shape:
    """A task placed on the board. Mutated in place by drag/drop.

    Identity is the integer id the owning Board assigns; two shapes with
    equal fields are still different tasks.
    """

    id: int
    kind: ShapeKind
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    color: str = DEFAULT_COLOR
    status: Status = Status.TODO
    draggable: bool = True
    selected: bool = False

    @property
    def x(self) -> float:
        return float(self.position[0])

    @x.setter
    def x(self, value: float):
        self.position[0] = value

    @property
    def y(self) -> float:
        return float(self.position[1])

    @y.setter
    def y(self, value: float):
        self.position[1] = value

    @property
    def z(self) -> float:
        return float(self.position[2])

    @z.setter
    def z(self, value: float):
        self.position[2] = value
