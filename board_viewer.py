"""
Render a task board snapshot with Rerun.io

Logs both floors, every shape (colored, labelled with its task text and
status) and the board camera to a .rrd file that can be opened with:
    rerun board.rrd
"""

from __future__ import annotations

import logging

import numpy as np
import rerun as rr

from taskboard.primitives import VOLUMES, ShapeKind, parse_color

log = logging.getLogger(__name__)

# Floors are drawn as thin slabs
_FLOOR_HALF_THICKNESS = 0.01

# Rerun cylinders run along Z; board cylinders stand along Y
_Y_UP_CYLINDER = rr.RotationAxisAngle(axis=[1.0, 0.0, 0.0], degrees=90.0)


def _rgb(color: str) -> list[int]:
    return list(parse_color(color) or (128, 128, 128))


def _shape_label(board, shape) -> str:
    text = board.label_of(shape)
    return f"{text} [{shape.status.value}]" if text else f"#{shape.id} [{shape.status.value}]"


def log_floors(board, namespace: str = "world") -> None:
    """Log the static floor slabs."""
    rr.log(
        f"{namespace}/floors",
        rr.Boxes3D(
            half_sizes=[[f.width / 2, _FLOOR_HALF_THICKNESS, f.depth / 2] for f in board.floors],
            centers=[list(f.center) for f in board.floors],
            colors=[_rgb(f.color) for f in board.floors],
            labels=[f.name for f in board.floors],
        ),
        static=True,
    )


def log_shapes(board, namespace: str = "world") -> None:
    """Log every shape, one entity batch per kind."""
    for kind in ShapeKind:
        shapes = [s for s in board.shapes if s.kind == kind]
        path = f"{namespace}/shapes/{kind.value}"
        if not shapes:
            rr.log(path, rr.Clear(recursive=False))
            continue
        vol = VOLUMES[kind]
        centers = [[s.x, s.y, s.z] for s in shapes]
        colors = [_rgb(s.color) for s in shapes]
        labels = [_shape_label(board, s) for s in shapes]

        if kind == ShapeKind.CUBE:
            archetype = rr.Boxes3D(
                half_sizes=[list(vol.half_extents)] * len(shapes),
                centers=centers,
                colors=colors,
                labels=labels,
            )
        elif kind == ShapeKind.SPHERE:
            archetype = rr.Ellipsoids3D(
                half_sizes=[[vol.radius] * 3] * len(shapes),
                centers=centers,
                colors=colors,
                labels=labels,
            )
        else:
            archetype = rr.Cylinders3D(
                lengths=[vol.half_extents[1] * 2] * len(shapes),
                radii=[vol.radius] * len(shapes),
                centers=centers,
                rotation_axis_angles=[_Y_UP_CYLINDER] * len(shapes),
                colors=colors,
                labels=labels,
            )
        rr.log(path, archetype)


def log_camera(camera, viewport, namespace: str = "world") -> str:
    """Log the board camera as a pinhole. Returns its entity path."""
    right, up, back = camera.basis()
    focal_length = float(viewport.height / (2.0 * np.tan(np.radians(camera.fov_deg) / 2.0)))
    entity_path = f"{namespace}/camera"
    rr.log(
        entity_path,
        rr.Transform3D(
            translation=list(camera.position),
            mat3x3=np.column_stack([right, up, back]),
        ),
    )
    rr.log(
        entity_path,
        rr.Pinhole(
            resolution=[viewport.width, viewport.height],
            focal_length=focal_length,
            camera_xyz=rr.ViewCoordinates.RUB,
        ),
    )
    return entity_path


def log_board(board, camera=None, viewport=None, namespace: str = "world", step: int = 0) -> None:
    """Log a full board snapshot at sequence *step*."""
    rr.set_time("step", sequence=step)
    rr.log(namespace, rr.ViewCoordinates.RIGHT_HAND_Y_UP, static=True)
    log_floors(board, namespace)
    log_shapes(board, namespace)
    if camera is not None and viewport is not None:
        log_camera(camera, viewport, namespace)
    rr.log("info/counter", rr.TextLog(board.counter_text()))


def export_board(board, output_file: str = "board.rrd", camera=None, viewport=None) -> str:
    """Save a board snapshot to an .rrd recording."""
    rr.init("taskboard")
    rr.save(output_file)
    log_board(board, camera, viewport)
    log.info("Recording saved to %s (%s)", output_file, board.counter_text())
    return output_file
