"""
Command-line front end for the spatial task board.

Drives the same operations as the board's palette buttons against a JSON
store file, so a board can be inspected and edited headlessly.

Usage:
    python main.py list                                  # Shapes + counter
    python main.py spawn --kind cube --label "write docs" [--x X --z Z] [--color #d64545]
    python main.py move ID --x 20 --z 0                  # Pick, drag and drop a shape
    python main.py clear {all,done,todo}
    python main.py view [--out board.rrd]                # Rerun snapshot

Every command accepts --store PATH (default: board_state.json).
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from config import Config
from taskboard import Board, DragController, FrameLoop, JsonFileStore, RayCaster, SpawnRequest, Viewport
from taskboard.drag import scripted_drag
from taskboard.primitives import DEFAULT_COLOR, ShapeKind, UnknownShapeKindError

log = logging.getLogger(__name__)


def _setup_logging() -> None:
    """Configure root logger level and install an excepthook.

    Logs go to stderr so command output on stdout stays clean.
    """
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)

    # Capture unhandled exceptions to the log
    _original_excepthook = sys.excepthook

    def _logging_excepthook(exc_type, exc_value, exc_tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            logging.critical(
                "Unhandled exception", exc_info=(exc_type, exc_value, exc_tb)
            )
        _original_excepthook(exc_type, exc_value, exc_tb)

    sys.excepthook = _logging_excepthook


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="Spatial task board - spawn, drag and clear task shapes",
    )
    parser.add_argument("--store", type=str, default=None, help="JSON store file (default: board_state.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # list
    sub.add_parser("list", help="List shapes and the todo/done counter")

    # spawn
    p_spawn = sub.add_parser("spawn", help="Spawn a new task shape")
    p_spawn.add_argument("--kind", type=str, default="cube", help="cube, sphere or cylinder (default: cube)")
    p_spawn.add_argument("--label", type=str, default="", help="Task label text")
    p_spawn.add_argument("--color", type=str, default=DEFAULT_COLOR, help=f"Color (default: {DEFAULT_COLOR})")
    p_spawn.add_argument("--x", type=float, default=None, help="X position (default: random near origin)")
    p_spawn.add_argument("--z", type=float, default=None, help="Z position (default: random near origin)")
    p_spawn.add_argument("--seed", type=int, default=None, help="Seed for random placement")

    # move
    p_move = sub.add_parser("move", help="Drag a shape to a new floor position and drop it")
    p_move.add_argument("id", type=int, help="Shape id (see `list`)")
    p_move.add_argument("--x", type=float, required=True, help="Target X")
    p_move.add_argument("--z", type=float, required=True, help="Target Z")

    # clear
    p_clear = sub.add_parser("clear", help="Remove shapes")
    p_clear.add_argument("which", choices=["all", "done", "todo"], help="Which shapes to remove")

    # view
    p_view = sub.add_parser("view", help="Save a Rerun recording of the board")
    p_view.add_argument("--out", type=str, default="board.rrd", help="Output .rrd file")

    return parser


def _open_board(cfg: Config) -> Board:
    board = Board.from_config(cfg, store=JsonFileStore(cfg.store.path))
    board.restore()
    board.on_completed(lambda s: log.info("Task done: #%d %s", s.id, board.label_of(s) or s.kind.value))
    return board


def _print_shapes(board: Board) -> None:
    if not board.shapes:
        print("(empty board)")
    for s in board.shapes:
        label = board.label_of(s)
        print(
            f"#{s.id:<3} {s.kind.value:<8} {s.status.value:<4} "
            f"({s.x:7.2f}, {s.y:6.3f}, {s.z:7.2f}) {s.color}  {label}"
        )
    print(board.counter_text())


def _spawn(board: Board, args) -> int:
    try:
        if args.x is None or args.z is None:
            shape = board.spawn_random(args.kind, args.color, args.label, np.random.default_rng(args.seed))
        else:
            shape = board.spawn(SpawnRequest(args.kind, (args.x, 0.0, args.z), args.color, args.label))
    except UnknownShapeKindError as e:
        kinds = ", ".join(k.value for k in ShapeKind)
        print(f"Error: {e} (expected one of: {kinds})", file=sys.stderr)
        return 2
    board.save()
    print(f"Spawned #{shape.id} {shape.kind.value} at ({shape.x:.2f}, {shape.y:.3f}, {shape.z:.2f}) [{shape.status.value}]")
    return 0


def _move(board: Board, cfg: Config, args) -> int:
    shape = board.get(args.id)
    if shape is None:
        print(f"Error: no shape #{args.id}", file=sys.stderr)
        return 1
    viewport = Viewport(cfg.view.width, cfg.view.height)
    camera = cfg.build_camera()
    drag = DragController(board, RayCaster(camera), viewport)
    loop = FrameLoop(board, drag, camera, viewport)
    if not scripted_drag(drag, camera, shape, args.x, args.z, frame=loop.frame):
        print(f"Error: could not pick #{args.id} from the board camera", file=sys.stderr)
        return 1
    print(f"Moved #{shape.id} to ({shape.x:.2f}, {shape.y:.3f}, {shape.z:.2f}) [{shape.status.value}]")
    return 0


def main(argv=None) -> int:
    _setup_logging()

    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cfg = Config()
    if args.store:
        cfg.store.path = args.store
    log.debug("Config: %s", cfg.to_flat_dict())

    if args.command is None:
        parser.print_help()
        return 0

    board = _open_board(cfg)

    if args.command == "list":
        _print_shapes(board)
        return 0

    elif args.command == "spawn":
        return _spawn(board, args)

    elif args.command == "move":
        return _move(board, cfg, args)

    elif args.command == "clear":
        if args.which == "all":
            board.clear_all()
        elif args.which == "done":
            board.clear_done()
        else:
            board.clear_todo()
        print(board.counter_text())
        return 0

    elif args.command == "view":
        from board_viewer import export_board
        camera = cfg.build_camera()
        export_board(board, args.out, camera, Viewport(cfg.view.width, cfg.view.height))
        print(f"Recording saved to: {args.out}")
        print(f"View it with: rerun {args.out}")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
