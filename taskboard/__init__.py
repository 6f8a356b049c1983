"""Spatial task board: placement and state-transition core.

Tasks are 3D primitives on two floors ("To Do" and "Done"). Shapes are
picked and dragged with camera rays, stack on top of each other, take their
status from the floor they are dropped on, and persist as a JSON list of
descriptors.

Usage:
    from taskboard import Board, DragController, RayCaster, Camera, Viewport

    board = Board()
    board.restore()
    viewport = Viewport(1280, 720)
    camera = Camera(aspect=viewport.aspect)
    drag = DragController(board, RayCaster(camera), viewport)
    drag.on_click(px, py)          # pick
    drag.on_pointer_move(px2, py2)
    drag.tick()                    # follow the pointer
    drag.on_click(px2, py2)        # drop + save
"""

from taskboard.board import Board
from taskboard.codec import Descriptor, DescriptorError, decode, encode
from taskboard.drag import DragController, DragState, Rect
from taskboard.labels import FrameLoop, LabelOverlay, LabelSynchronizer, Viewport
from taskboard.placement import classify_zone, resolve_support_height, settle_height
from taskboard.primitives import ShapeKind, Status, UnknownShapeKindError
from taskboard.raycast import Camera, GroundPlane, RayCaster, pointer_to_ndc
from taskboard.shapes import Shape, SpawnRequest
from taskboard.storage import JsonFileStore, MemoryStore, StoreError

__all__ = [
    "Board",
    "Camera",
    "Descriptor",
    "DescriptorError",
    "DragController",
    "DragState",
    "FrameLoop",
    "GroundPlane",
    "JsonFileStore",
    "LabelOverlay",
    "LabelSynchronizer",
    "MemoryStore",
    "RayCaster",
    "Rect",
    "Shape",
    "ShapeKind",
    "SpawnRequest",
    "Status",
    "StoreError",
    "UnknownShapeKindError",
    "Viewport",
    "classify_zone",
    "decode",
    "encode",
    "pointer_to_ndc",
    "resolve_support_height",
    "settle_height",
]
