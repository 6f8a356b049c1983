"""Descriptor codec: live shapes to/from plain serializable records.

A Descriptor is a value snapshot of a shape:

    {"kind": "cube", "x": 5.0, "y": -0.999, "z": 5.0,
     "color": "#1475b5", "label": "demo", "status": "todo"}

Decoding goes through the board's normal spawn path, but trusts the stored
position (no re-stacking) and the stored status (no re-classification).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from taskboard.primitives import (
    DEFAULT_COLOR,
    ShapeKind,
    Status,
    UnknownShapeKindError,
    normalize_color,
)
from taskboard.shapes import SpawnRequest


class DescriptorError(ValueError):
    """A stored record cannot be turned back into a shape."""


@dataclass(frozen=True)
class Descriptor:
    kind: str
    x: float
    y: float
    z: float
    color: str = DEFAULT_COLOR
    label: str = ""
    status: str = Status.TODO.value

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> Descriptor:
        """Validate and build a descriptor from a parsed JSON object.

        Older payloads name the kind "type"; color, label and status are
        optional and fall back to their defaults.
        """
        if not isinstance(data, dict):
            raise DescriptorError(f"descriptor must be an object, got {type(data).__name__}")
        kind = data.get("kind", data.get("type"))
        if kind is None:
            raise DescriptorError("descriptor has no kind")
        try:
            kind = ShapeKind.parse(kind).value
        except UnknownShapeKindError as e:
            raise DescriptorError(str(e)) from e

        coords = []
        for axis in ("x", "y", "z"):
            value = data.get(axis)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise DescriptorError(f"descriptor {axis}={value!r} is not a number")
            try:
                value = float(value)
            except OverflowError:
                raise DescriptorError(f"descriptor {axis} is too large") from None
            if not math.isfinite(value):
                raise DescriptorError(f"descriptor {axis}={value!r} is not finite")
            coords.append(value)

        status = data.get("status") or Status.TODO.value
        try:
            status = Status(status).value
        except ValueError:
            raise DescriptorError(f"unknown status: {status!r}") from None

        label = data.get("label") or ""
        return cls(
            kind=kind,
            x=coords[0],
            y=coords[1],
            z=coords[2],
            color=normalize_color(data.get("color")),
            label=str(label),
            status=status,
        )


def encode(shape, label: str | None = None) -> Descriptor:
    """Snapshot a shape. *label* is the text of its overlay, if any.

    Overlays live on the board, so Board.encode() is the label-preserving
    entry point.
    """
    return Descriptor(
        kind=ShapeKind.parse(shape.kind).value,
        x=float(shape.x),
        y=float(shape.y),
        z=float(shape.z),
        color=normalize_color(getattr(shape, "color", None)),
        label=label or "",
        status=Status(shape.status or Status.TODO).value,
    )


def decode(descriptor: Descriptor, board):
    """Recreate a shape on *board* from a descriptor (position verbatim)."""
    request = SpawnRequest(
        kind=descriptor.kind,
        position=(descriptor.x, descriptor.y, descriptor.z),
        color=descriptor.color,
        label_text=descriptor.label,
    )
    shape = board.spawn(request, trust_position=True)
    shape.status = Status(descriptor.status)
    return shape
