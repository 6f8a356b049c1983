"""Screen-space label overlays that follow their shapes.

Each labelled shape owns exactly one LabelOverlay, kept in a side table
keyed by shape id (never stored on the shape). Once per frame, after the
camera has moved, every overlay is re-centered on its shape's projected
position.

Frame ordering (FrameLoop.frame):
    1. camera/controls update    (external callback)
    2. drag tick                 (moves the dragged shape)
    3. label projection          (reads the camera and shape positions above)

Projection must see this frame's camera, otherwise labels trail the view
by one frame while orbiting.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from taskboard.raycast import Camera, ndc_to_pointer

log = logging.getLogger(__name__)

# Label box metrics (pixels) used to size a cloned template
CHAR_WIDTH = 8.0
LINE_HEIGHT = 18.0
PADDING = 6.0


@dataclass
class Viewport:
    """Drawable area in pixels; shared by pointer conversion and labels."""

    width: int = 1280
    height: int = 720

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def resize(self, width: int, height: int, camera: Camera | None = None) -> None:
        """Apply a new window size, keeping the camera aspect in step."""
        self.width = width
        self.height = height
        if camera is not None:
            camera.aspect = self.aspect


@dataclass
class LabelOverlay:
    """A 2D label box positioned in screen pixels (top-left corner)."""

    text: str = ""
    width: float = 0.0
    height: float = LINE_HEIGHT
    left: float = 0.0
    top: float = 0.0
    visible: bool = True
    css_class: str = "label"

    def clone(self, text: str) -> LabelOverlay:
        """Copy this overlay as a template, sized for *text*."""
        return dataclasses.replace(
            self,
            text=text,
            width=len(text) * CHAR_WIDTH + 2 * PADDING,
            left=0.0,
            top=0.0,
            visible=True,
        )

    def center_on(self, x: float, y: float) -> None:
        self.left = x - self.width / 2
        self.top = y - self.height / 2


DEFAULT_LABEL_TEMPLATE = LabelOverlay()


class LabelSynchronizer:
    """Owns the shape-id -> overlay table and keeps overlays on their shapes."""

    def __init__(self, template: LabelOverlay | None = None):
        self.template = template
        self.overlays: dict[int, LabelOverlay] = {}

    def attach(self, shape_id: int, text: str) -> LabelOverlay | None:
        """Create the overlay for a shape. Skipped without a template or text."""
        if not text:
            return None
        if self.template is None:
            log.debug("No label template; shape %d stays unlabelled", shape_id)
            return None
        overlay = self.template.clone(text)
        self.overlays[shape_id] = overlay
        return overlay

    def detach(self, shape_id: int) -> None:
        self.overlays.pop(shape_id, None)

    def clear(self) -> None:
        self.overlays.clear()

    def text_for(self, shape_id: int) -> str:
        overlay = self.overlays.get(shape_id)
        return overlay.text if overlay is not None else ""

    def sync(self, shapes, camera: Camera, viewport: Viewport) -> None:
        """Center every overlay on its shape's projected screen position."""
        by_id = {s.id: s for s in shapes}
        for shape_id in list(self.overlays):
            shape = by_id.get(shape_id)
            if shape is None:
                # Owner is gone; the overlay goes with it
                del self.overlays[shape_id]
                continue
            overlay = self.overlays[shape_id]
            ndc = camera.project(shape.position)
            if ndc is None:
                overlay.visible = False
                continue
            x, y = ndc_to_pointer(ndc, viewport.width, viewport.height)
            overlay.visible = True
            overlay.center_on(x, y)


class FrameLoop:
    """One explicit per-frame pass: camera, then drag, then labels."""

    def __init__(self, board, drag, camera: Camera, viewport: Viewport, camera_update=None):
        self.board = board
        self.drag = drag
        self.camera = camera
        self.viewport = viewport
        self.camera_update = camera_update
        self.frame_count = 0

    def frame(self) -> None:
        if self.camera_update is not None:
            self.camera_update(self.camera)
        self.drag.tick()
        self.board.labels.sync(self.board.shapes, self.camera, self.viewport)
        self.frame_count += 1
