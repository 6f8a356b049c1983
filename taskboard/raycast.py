"""Geometry/ray service: pinhole camera, pointer picking, ground projection.

Everything here works in normalized device coordinates (NDC), derived from
pointer pixels as ``(px / width * 2 - 1, -(py / height * 2 - 1))``. A ray is
cast from the camera through the NDC point and intersected against:

    - shape volumes (box / sphere / Y-aligned cylinder), for picking
    - horizontal floor rectangles (GroundPlane), for drag projection

Any object with the same ``pick`` and ``project_to_ground`` methods can
stand in for RayCaster (e.g. a real renderer's raycaster).

Usage:
    camera = Camera(position=(5, 5, 10), target=(0, 0, 0), aspect=16 / 9)
    caster = RayCaster(camera)
    ndc = pointer_to_ndc(640, 360, 1280, 720)
    hit = caster.pick(ndc, board.draggables())      # Hit or None
    point = caster.project_to_ground(ndc, FLOORS)   # np.ndarray or None
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from taskboard.primitives import VOLUMES, ShapeKind

_EPS = 1e-9


def pointer_to_ndc(px: float, py: float, width: float, height: float) -> np.ndarray:
    """Convert pointer pixel coordinates to NDC (x right, y up, both in [-1, 1])."""
    return np.array([px / width * 2 - 1, -(py / height * 2 - 1)])


def ndc_to_pointer(ndc, width: float, height: float) -> tuple[float, float]:
    """Inverse of pointer_to_ndc."""
    return (
        float((ndc[0] * 0.5 + 0.5) * width),
        float((-ndc[1] * 0.5 + 0.5) * height),
    )


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------


@dataclass
class Camera:
    """Perspective camera looking from *position* at *target* (Y-up).

    Attributes:
        position: Eye position in world coordinates
        target: Point the camera looks at
        fov_deg: Vertical field of view (degrees)
        aspect: Viewport width / height
        near, far: Clip distances
    """

    position: tuple[float, float, float] = (5.0, 5.0, 10.0)
    target: tuple[float, float, float] = (0.0, 0.0, 0.0)
    fov_deg: float = 75.0
    aspect: float = 16 / 9
    near: float = 0.1
    far: float = 1000.0

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Camera axes in world space: (right, up, back)."""
        eye = np.asarray(self.position, dtype=float)
        back = eye - np.asarray(self.target, dtype=float)
        back /= np.linalg.norm(back)
        right = np.cross(np.array([0.0, 1.0, 0.0]), back)
        norm = np.linalg.norm(right)
        if norm < _EPS:
            # Looking straight down/up: pick any horizontal right vector
            right = np.array([1.0, 0.0, 0.0])
        else:
            right /= norm
        up = np.cross(back, right)
        return right, up, back

    def view_matrix(self) -> np.ndarray:
        """World -> camera transform (4x4)."""
        right, up, back = self.basis()
        eye = np.asarray(self.position, dtype=float)
        view = np.eye(4)
        view[0, :3] = right
        view[1, :3] = up
        view[2, :3] = back
        view[:3, 3] = -view[:3, :3] @ eye
        return view

    def projection_matrix(self) -> np.ndarray:
        """Camera -> clip transform (4x4, OpenGL convention)."""
        f = 1.0 / np.tan(np.radians(self.fov_deg) / 2.0)
        n, fa = self.near, self.far
        proj = np.zeros((4, 4))
        proj[0, 0] = f / self.aspect
        proj[1, 1] = f
        proj[2, 2] = (fa + n) / (n - fa)
        proj[2, 3] = 2 * fa * n / (n - fa)
        proj[3, 2] = -1.0
        return proj

    def project(self, point) -> np.ndarray | None:
        """Project a world point to NDC (x, y, z). None if behind the camera."""
        p = np.append(np.asarray(point, dtype=float), 1.0)
        clip = self.projection_matrix() @ (self.view_matrix() @ p)
        if clip[3] <= _EPS:
            return None
        return clip[:3] / clip[3]

    def ray(self, ndc) -> tuple[np.ndarray, np.ndarray]:
        """World-space ray (origin, unit direction) through an NDC point."""
        right, up, back = self.basis()
        tan_half = np.tan(np.radians(self.fov_deg) / 2.0)
        direction = (
            right * (ndc[0] * tan_half * self.aspect)
            + up * (ndc[1] * tan_half)
            - back
        )
        direction /= np.linalg.norm(direction)
        return np.asarray(self.position, dtype=float), direction


# ---------------------------------------------------------------------------
# Ground planes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GroundPlane:
    """Horizontal floor rectangle that drag projection can land on.

    Attributes:
        name: Human-readable floor name ("To Do", "Done")
        center: (x, y, z) center of the rectangle
        width: Extent along X
        depth: Extent along Z
        color: Floor color ("#rrggbb")
    """

    name: str
    center: tuple[float, float, float]
    width: float
    depth: float
    color: str = "#cccccc"

    def contains_xz(self, x: float, z: float) -> bool:
        cx, _, cz = self.center
        return abs(x - cx) <= self.width / 2 and abs(z - cz) <= self.depth / 2


@dataclass
class Hit:
    """Nearest intersection along a ray."""

    obj: object
    point: np.ndarray
    distance: float


# ---------------------------------------------------------------------------
# Ray/volume intersection
# ---------------------------------------------------------------------------


def _ray_box(origin, direction, center, half) -> float | None:
    """Slab test against an axis-aligned box. Returns entry distance."""
    lo = np.asarray(center) - np.asarray(half)
    hi = np.asarray(center) + np.asarray(half)
    t_near, t_far = -np.inf, np.inf
    for axis in range(3):
        d = direction[axis]
        o = origin[axis]
        if abs(d) < _EPS:
            if o < lo[axis] or o > hi[axis]:
                return None
            continue
        t1 = (lo[axis] - o) / d
        t2 = (hi[axis] - o) / d
        t_near = max(t_near, min(t1, t2))
        t_far = min(t_far, max(t1, t2))
        if t_near > t_far:
            return None
    if t_far < 0:
        return None
    return float(t_near if t_near >= 0 else t_far)


def _ray_sphere(origin, direction, center, radius) -> float | None:
    oc = origin - np.asarray(center)
    b = float(np.dot(oc, direction))
    c = float(np.dot(oc, oc)) - radius * radius
    disc = b * b - c
    if disc < 0:
        return None
    root = np.sqrt(disc)
    for t in (-b - root, -b + root):
        if t >= 0:
            return float(t)
    return None


def _ray_cylinder(origin, direction, center, radius, half_height) -> float | None:
    """Ray against a closed cylinder aligned with the Y axis."""
    cx, cy, cz = center
    ox, oy, oz = origin[0] - cx, origin[1] - cy, origin[2] - cz
    dx, dy, dz = direction
    best: float | None = None

    # Side wall
    a = dx * dx + dz * dz
    if a > _EPS:
        b = ox * dx + oz * dz
        c = ox * ox + oz * oz - radius * radius
        disc = b * b - a * c
        if disc >= 0:
            root = np.sqrt(disc)
            for t in ((-b - root) / a, (-b + root) / a):
                if t >= 0 and abs(oy + t * dy) <= half_height:
                    best = t if best is None else min(best, t)

    # Caps
    if abs(dy) > _EPS:
        for cap in (-half_height, half_height):
            t = (cap - oy) / dy
            if t >= 0:
                px, pz = ox + t * dx, oz + t * dz
                if px * px + pz * pz <= radius * radius:
                    best = t if best is None else min(best, t)

    return None if best is None else float(best)


def intersect_shape(origin, direction, shape) -> float | None:
    """Distance along the ray to *shape*'s volume, or None on a miss."""
    kind = ShapeKind.parse(shape.kind)
    vol = VOLUMES[kind]
    center = np.asarray(shape.position, dtype=float)
    if kind == ShapeKind.SPHERE:
        return _ray_sphere(origin, direction, center, vol.radius)
    if kind == ShapeKind.CYLINDER:
        return _ray_cylinder(origin, direction, center, vol.radius, vol.half_extents[1])
    return _ray_box(origin, direction, center, vol.half_extents)


def intersect_ground(origin, direction, plane: GroundPlane) -> float | None:
    """Distance along the ray to a floor rectangle, or None on a miss."""
    if abs(direction[1]) < _EPS:
        return None
    t = (plane.center[1] - origin[1]) / direction[1]
    if t < 0:
        return None
    x = origin[0] + t * direction[0]
    z = origin[2] + t * direction[2]
    if not plane.contains_xz(x, z):
        return None
    return float(t)


# ---------------------------------------------------------------------------
# Ray service
# ---------------------------------------------------------------------------


class RayCaster:
    """Casts camera rays through NDC points against shapes and floors."""

    def __init__(self, camera: Camera):
        self.camera = camera

    def pick(self, ndc, candidates) -> Hit | None:
        """Nearest candidate shape under the NDC point."""
        origin, direction = self.camera.ray(ndc)
        best: Hit | None = None
        for obj in candidates:
            t = intersect_shape(origin, direction, obj)
            if t is None:
                continue
            if best is None or t < best.distance:
                best = Hit(obj, origin + t * direction, t)
        return best

    def project_to_ground(self, ndc, grounds) -> np.ndarray | None:
        """Nearest ground point under the NDC point."""
        origin, direction = self.camera.ray(ndc)
        best_t: float | None = None
        for plane in grounds:
            t = intersect_ground(origin, direction, plane)
            if t is not None and (best_t is None or t < best_t):
                best_t = t
        if best_t is None:
            return None
        return origin + best_t * direction
