"""
Centralized configuration for the task board.

All placement, zone, camera, viewport and storage settings in one place.
Flattens to a dict for start-up logging.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from taskboard.drag import Rect
from taskboard.placement import FLOOR_SIZE, FLOOR_Y, Zone
from taskboard.primitives import FLOOR_DONE, FLOOR_TODO, Status
from taskboard.raycast import Camera, GroundPlane
from taskboard.storage import STORAGE_KEY


@dataclass
class PlacementConfig:
    """Stacking configuration."""

    shape_size: float = 1.0  # Unit footprint edge and stacking step
    ground_y: float = -0.999  # Resting height on the floor
    same_level_eps: float = 0.5  # Shapes this close in y never stack


@dataclass
class ZoneConfig:
    """Floor layout: one floor per status, side by side along X."""

    todo_x: tuple[float, float] = (-10.0, 10.0)  # Inclusive both ends
    done_x: tuple[float, float] = (10.0, 30.0)  # Exclusive min, inclusive max
    floor_y: float = FLOOR_Y
    floor_depth: float = FLOOR_SIZE

    def build_zones(self) -> tuple[Zone, ...]:
        return (
            Zone(Status.TODO, self.todo_x[0], self.todo_x[1], include_min=True),
            Zone(Status.DONE, self.done_x[0], self.done_x[1], include_min=False),
        )

    def build_floors(self) -> tuple[GroundPlane, ...]:
        floors = []
        for name, (lo, hi), color in (
            ("To Do", self.todo_x, FLOOR_TODO),
            ("Done", self.done_x, FLOOR_DONE),
        ):
            floors.append(
                GroundPlane(name, ((lo + hi) / 2, self.floor_y, 0.0), hi - lo, self.floor_depth, color)
            )
        return tuple(floors)


@dataclass
class CameraConfig:
    """Initial camera pose."""

    position: tuple[float, float, float] = (5.0, 5.0, 10.0)
    target: tuple[float, float, float] = (0.0, 0.0, 0.0)
    fov_deg: float = 75.0
    near: float = 0.1
    far: float = 1000.0


@dataclass
class ViewConfig:
    """Viewport and overlay configuration."""

    width: int = 1280
    height: int = 720
    labels_enabled: bool = True  # False = no label template (labels skipped)

    # Control palette region in pixels; clicks inside never reach the board
    palette_left: float = 0.0
    palette_top: float = 0.0
    palette_width: float = 220.0
    palette_height: float = 320.0

    def palette_rect(self) -> Rect | None:
        if self.palette_width <= 0 or self.palette_height <= 0:
            return None
        return Rect(self.palette_left, self.palette_top, self.palette_width, self.palette_height)


@dataclass
class StoreConfig:
    """Persistence configuration."""

    key: str = STORAGE_KEY
    path: str = "board_state.json"  # JsonFileStore file used by the CLI


@dataclass
class Config:
    """Complete board configuration."""

    placement: PlacementConfig = field(default_factory=PlacementConfig)
    zones: ZoneConfig = field(default_factory=ZoneConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    store: StoreConfig = field(default_factory=StoreConfig)

    def to_flat_dict(self) -> dict:
        """
        Convert to flat dict for logging.

        Prefixes each section's keys with section name.
        Example: view.width -> "view/width"
        """
        result = {}
        for section_name, section in [
            ("placement", self.placement),
            ("zones", self.zones),
            ("camera", self.camera),
            ("view", self.view),
            ("store", self.store),
        ]:
            for key, value in asdict(section).items():
                result[f"{section_name}/{key}"] = value
        return result

    def build_camera(self) -> Camera:
        return Camera(
            position=self.camera.position,
            target=self.camera.target,
            fov_deg=self.camera.fov_deg,
            aspect=self.view.width / self.view.height,
            near=self.camera.near,
            far=self.camera.far,
        )

    @classmethod
    def for_test(cls) -> Config:
        """Config for tests: fixed 800x600 viewport, no palette region."""
        return cls(
            view=ViewConfig(
                width=800,
                height=600,
                palette_width=0.0,
                palette_height=0.0,
            ),
            store=StoreConfig(path="test_board_state.json"),
        )
