"""Drag controller: pick, track, drop.

State machine (one drag at a time):

    IDLE --click--> PICKING --hit--> DRAGGING --click--> IDLE (drop)
                       |
                       +--miss--> IDLE

While DRAGGING, each frame's tick() projects the latest pointer onto the
floors and moves the dragged shape there, re-resolving its height. Nothing
is persisted until the drop. A click while dragging is always a drop,
wherever it lands, so a second pick can never start mid-drag.

Clicks inside the control palette are ignored in every state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from taskboard.labels import Viewport
from taskboard.primitives import Status
from taskboard.raycast import ndc_to_pointer, pointer_to_ndc

log = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    PICKING = "picking"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Rect:
    """Screen rectangle in pixels (the palette UI region)."""

    left: float
    top: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return (
            self.left <= px <= self.left + self.width
            and self.top <= py <= self.top + self.height
        )


class DragController:
    """Coordinates ray picking, ground tracking and drop commits for a board."""

    def __init__(self, board, ray_service, viewport: Viewport, palette: Rect | None = None):
        self.board = board
        self.rays = ray_service
        self.viewport = viewport
        self.palette = palette
        self.state = DragState.IDLE
        self.dragged = None
        self._pointer: tuple[float, float] | None = None

    @property
    def is_dragging(self) -> bool:
        return self.state == DragState.DRAGGING

    def _ndc(self, px: float, py: float):
        return pointer_to_ndc(px, py, self.viewport.width, self.viewport.height)

    def _release_if_removed(self) -> None:
        # A clear operation can delete the shape under an active drag
        if self.dragged is not None and self.dragged not in self.board:
            log.debug("Dragged shape #%d was removed; drag abandoned", self.dragged.id)
            self.dragged = None
            self.state = DragState.IDLE

    # -------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------

    def on_pointer_move(self, px: float, py: float) -> None:
        self._pointer = (px, py)

    def on_click(self, px: float, py: float) -> DragState:
        """Handle a click: drop while dragging, otherwise try to pick."""
        if self.palette is not None and self.palette.contains(px, py):
            return self.state
        self._release_if_removed()
        if self.state == DragState.DRAGGING:
            self._drop()
        else:
            self._pick(px, py)
        return self.state

    def _pick(self, px: float, py: float) -> None:
        self.state = DragState.PICKING
        hit = self.rays.pick(self._ndc(px, py), self.board.draggables())
        if hit is None:
            self.state = DragState.IDLE
            return
        self.dragged = hit.obj
        self.dragged.selected = True
        self._pointer = (px, py)
        self.state = DragState.DRAGGING
        log.debug("Picked shape #%d", self.dragged.id)

    def _drop(self) -> None:
        shape = self.dragged
        previous = shape.status
        shape.status = self.board.classify(shape.x, previous)
        shape.selected = False
        self.dragged = None
        self.state = DragState.IDLE
        log.info(
            "Dropped shape #%d at (%.2f, %.2f, %.2f) status=%s",
            shape.id, shape.x, shape.y, shape.z, shape.status.value,
        )
        if shape.status == Status.DONE and previous != Status.DONE:
            self.board.notify_completed(shape)
        self.board.save()

    # -------------------------------------------------------------------
    # Per-frame update
    # -------------------------------------------------------------------

    def tick(self) -> None:
        """Move the dragged shape to the ground point under the pointer."""
        self._release_if_removed()
        if self.state != DragState.DRAGGING or self._pointer is None:
            return
        point = self.rays.project_to_ground(self._ndc(*self._pointer), self.board.floors)
        if point is None:
            return
        shape = self.dragged
        shape.x = float(point[0])
        shape.z = float(point[2])
        shape.y = self.board.resolve_height(shape)


def scripted_drag(controller: DragController, camera, shape, x: float, z: float, frame=None) -> bool:
    """Drive a full pick -> track -> drop of *shape* to (x, z) through pointer events.

    Clicks on the shape's projected center, moves the pointer over the
    ground point at (x, z) and ticks until the height settles, then drops
    there. *frame* is the per-frame callable (defaults to controller.tick).
    Returns False if the pick landed on a different shape or missed; the
    accidental drag is dropped in place.
    """
    frame = frame or controller.tick
    viewport = controller.viewport

    ndc = camera.project(shape.position)
    if ndc is None:
        log.warning("Shape #%d is behind the camera; cannot pick it", shape.id)
        return False
    px, py = ndc_to_pointer(ndc, viewport.width, viewport.height)
    controller.on_click(px, py)
    if controller.dragged is not shape:
        if controller.is_dragging:
            log.warning("Pick hit shape #%d instead of #%d", controller.dragged.id, shape.id)
            controller.on_click(px, py)
        return False

    floor_y = controller.board.floors[0].center[1] if controller.board.floors else 0.0
    target = camera.project((x, floor_y, z))
    if target is None:
        log.warning("Target (%.2f, %.2f) is behind the camera", x, z)
        controller.on_click(px, py)
        return False
    tx, ty = ndc_to_pointer(target, viewport.width, viewport.height)
    controller.on_pointer_move(tx, ty)
    for _ in range(len(controller.board) + 1):
        before = shape.y
        frame()
        if shape.y == before:
            break
    controller.on_click(tx, ty)
    return True
