"""The owning context for every live shape on the task board.

The board holds the ordered shape list, hands out shape ids, owns the
label side table and the persistence key, and fires completion hooks.
The drag controller and the placement engine work on a board instead of
on global state.

Usage:
    board = Board(store=JsonFileStore("board.json"))
    board.restore()                       # load saved shapes (or a welcome cube)
    shape = board.spawn(SpawnRequest("cube", (5, 0, 5), label_text="demo"))
    board.save()
    board.on_completed(lambda s: print("done:", s.id))
    board.clear_done()
"""

from __future__ import annotations

import logging

import numpy as np

from taskboard.codec import decode, encode
from taskboard.labels import DEFAULT_LABEL_TEMPLATE, LabelOverlay, LabelSynchronizer
from taskboard.placement import (
    FLOORS,
    ZONES,
    classify_zone,
    resolve_support_height,
    settle_height,
)
from taskboard.primitives import (
    DEFAULT_COLOR,
    GROUND_Y,
    SAME_LEVEL_EPS,
    SHAPE_SIZE,
    ShapeKind,
    Status,
    normalize_color,
)
from taskboard.shapes import Shape, SpawnRequest
from taskboard.storage import (
    STORAGE_KEY,
    LoadResult,
    MemoryStore,
    SaveResult,
    load_descriptors,
    remove_saved,
    save_descriptors,
)

log = logging.getLogger(__name__)

# Half-width of the square spawn area around the origin
SPAWN_SPREAD = 5.0
WELCOME_LABEL = "welcome!"


class Board:
    """Live shapes, their labels, and the store they persist to."""

    def __init__(
        self,
        store=None,
        key: str = STORAGE_KEY,
        label_template: LabelOverlay | None = DEFAULT_LABEL_TEMPLATE,
        zones=ZONES,
        floors=FLOORS,
        shape_size: float = SHAPE_SIZE,
        ground_y: float = GROUND_Y,
        same_level_eps: float = SAME_LEVEL_EPS,
    ):
        self.store = store if store is not None else MemoryStore()
        self.key = key
        self.zones = tuple(zones)
        self.floors = tuple(floors)
        self.shape_size = shape_size
        self.ground_y = ground_y
        self.same_level_eps = same_level_eps
        self.shapes: list[Shape] = []
        self.labels = LabelSynchronizer(label_template)
        self._next_id = 1
        self._completion_hooks: list = []

    @classmethod
    def from_config(cls, cfg, store=None) -> Board:
        """Build a board from a config.Config."""
        return cls(
            store=store,
            key=cfg.store.key,
            label_template=DEFAULT_LABEL_TEMPLATE if cfg.view.labels_enabled else None,
            zones=cfg.zones.build_zones(),
            floors=cfg.zones.build_floors(),
            shape_size=cfg.placement.shape_size,
            ground_y=cfg.placement.ground_y,
            same_level_eps=cfg.placement.same_level_eps,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def get(self, shape_id: int) -> Shape | None:
        for shape in self.shapes:
            if shape.id == shape_id:
                return shape
        return None

    def __contains__(self, shape) -> bool:
        return any(s is shape for s in self.shapes)

    def __len__(self) -> int:
        return len(self.shapes)

    def draggables(self) -> list[Shape]:
        return [s for s in self.shapes if s.draggable]

    def label_of(self, shape: Shape) -> str:
        return self.labels.text_for(shape.id)

    def counts(self) -> dict[Status, int]:
        counts = {status: 0 for status in Status}
        for shape in self.shapes:
            counts[shape.status] += 1
        return counts

    def counter_text(self) -> str:
        counts = self.counts()
        return f"ToDo: {counts[Status.TODO]} | Done: {counts[Status.DONE]}"

    # -------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------

    def resolve_height(self, shape: Shape) -> float:
        return resolve_support_height(
            shape, self.shapes, self.shape_size, self.ground_y, self.same_level_eps
        )

    def classify(self, x: float, current: Status | None = None) -> Status | None:
        return classify_zone(x, current, self.zones)

    # -------------------------------------------------------------------
    # Spawning
    # -------------------------------------------------------------------

    def spawn(self, request: SpawnRequest, trust_position: bool = False) -> Shape:
        """Create a shape from a spawn request and add it to the board.

        Unknown kinds raise UnknownShapeKindError before anything changes.
        Unless *trust_position* is set, the requested y is ignored: the
        shape starts on the ground and settles on top of whatever stack
        lies under its footprint.
        """
        kind = ShapeKind.parse(request.kind)
        x, y, z = (float(v) for v in request.position)
        shape = Shape(
            id=self._next_id,
            kind=kind,
            position=np.array([x, y, z], dtype=float),
            color=normalize_color(request.color, DEFAULT_COLOR),
        )
        self._next_id += 1

        if not trust_position:
            shape.y = self.ground_y
            shape.y = settle_height(
                shape, self.shapes, self.shape_size, self.ground_y, self.same_level_eps
            )
        shape.status = self.classify(shape.x, Status.TODO)

        self.shapes.append(shape)
        self.labels.attach(shape.id, request.label_text)
        log.debug(
            "Spawned %s #%d at (%.3f, %.3f, %.3f) status=%s",
            kind.value, shape.id, shape.x, shape.y, shape.z, shape.status.value,
        )
        return shape

    def spawn_random(
        self,
        kind: ShapeKind | str = ShapeKind.CUBE,
        color: str = DEFAULT_COLOR,
        label_text: str = "",
        rng: np.random.Generator | None = None,
    ) -> Shape:
        """Spawn at a random spot near the middle of the To Do floor."""
        rng = rng if rng is not None else np.random.default_rng()
        x = float((rng.random() - 0.5) * 2 * SPAWN_SPREAD)
        z = float((rng.random() - 0.5) * 2 * SPAWN_SPREAD)
        return self.spawn(SpawnRequest(kind, (x, 0.0, z), color, label_text))

    # -------------------------------------------------------------------
    # Completion hooks
    # -------------------------------------------------------------------

    def on_completed(self, callback) -> None:
        """Register ``callback(shape)`` for shapes dropped into Done."""
        self._completion_hooks.append(callback)

    def notify_completed(self, shape: Shape) -> None:
        for callback in self._completion_hooks:
            try:
                callback(shape)
            except Exception:
                log.exception("Completion hook failed for shape #%d", shape.id)

    # -------------------------------------------------------------------
    # Clearing
    # -------------------------------------------------------------------

    def _remove_where(self, predicate) -> int:
        removed = [s for s in self.shapes if predicate(s)]
        for shape in removed:
            self.labels.detach(shape.id)
        self.shapes = [s for s in self.shapes if not predicate(s)]
        return len(removed)

    def clear_all(self) -> SaveResult:
        """Remove every shape and label, and forget the saved state."""
        n = self._remove_where(lambda s: True)
        self.labels.clear()
        log.info("Cleared all %d shapes", n)
        result = remove_saved(self.store, self.key)
        if not result.ok:
            log.warning("Failed to remove saved shapes: %s", result.error)
        return result

    def clear_done(self) -> SaveResult:
        n = self._remove_where(lambda s: s.status == Status.DONE)
        log.info("Cleared %d done shapes", n)
        return self.save()

    def clear_todo(self) -> SaveResult:
        n = self._remove_where(lambda s: s.status == Status.TODO)
        log.info("Cleared %d todo shapes", n)
        return self.save()

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------

    def encode(self, shape: Shape):
        """Descriptor for *shape*, label text included from the side table."""
        return encode(shape, self.label_of(shape))

    def descriptors(self):
        return [self.encode(s) for s in self.shapes]

    def save(self) -> SaveResult:
        """Persist the full shape list. Failures are logged, not raised."""
        result = save_descriptors(self.store, self.key, self.descriptors())
        if not result.ok:
            log.warning("Failed to save shapes: %s", result.error)
        return result

    def load(self) -> LoadResult:
        """Recreate saved shapes on this board (appended, stored y trusted)."""
        result = load_descriptors(self.store, self.key)
        if not result.ok:
            log.warning("Failed to load shapes: %s", result.error)
            return result
        for desc in result.descriptors:
            decode(desc, self)
        if result.descriptors:
            log.info("Loaded %d shapes (%s)", len(result.descriptors), self.counter_text())
        return result

    def restore(self) -> LoadResult:
        """Start-up load; an empty board gets a welcome cube."""
        result = self.load()
        if not self.shapes:
            self.spawn(SpawnRequest(ShapeKind.CUBE, (0.0, 0.0, 0.0), DEFAULT_COLOR, WELCOME_LABEL))
        return result
