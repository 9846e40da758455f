# core_game.py (headless, vectorized simulation core)
import random
from typing import NamedTuple

import numpy as np

cols, rows = 10, 20
GRID_WIDTH, GRID_HEIGHT = cols, rows

# tick cadences, the driver is expected to call tick() at a steady 60 Hz
MOVE_INTERVAL = 5
SOFT_DROP_INTERVAL = 3
DROP_INTERVAL = 30

SPAWN_ROW = 1
POINTS = (40, 100, 300, 1200)

RAND_BITS = 15
RAND_MAX = (1 << RAND_BITS) - 1

DIRECTIONS = {
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


class Position(NamedTuple):
    x: int
    y: int


class PieceState(NamedTuple):
    piece: int
    rotation: int


class Piece(NamedTuple):
    name: str
    count: int  # geometrically distinct rotations
    rotations: np.ndarray  # (4, 4, 2) int8 (x, y) offsets from the pivot


def _piece(name, count, rotations):
    offsets = np.array(rotations, dtype=np.int8)
    offsets.setflags(write=False)
    return Piece(name, count, offsets)


PIECES = (
    _piece('O', 1, [
        [(0, 0), (0, -1), (1, -1), (1, 0)],
        [(0, 0), (0, -1), (1, -1), (1, 0)],
        [(0, 0), (0, -1), (1, -1), (1, 0)],
        [(0, 0), (0, -1), (1, -1), (1, 0)],
    ]),
    _piece('I', 2, [
        [(-1, 0), (0, 0), (1, 0), (2, 0)],
        [(0, -2), (0, -1), (0, 0), (0, 1)],
        [(-1, 0), (0, 0), (1, 0), (2, 0)],
        [(0, -2), (0, -1), (0, 0), (0, 1)],
    ]),
    _piece('J', 4, [
        [(-1, 0), (0, 0), (1, 0), (1, 1)],
        [(-1, 1), (0, 1), (0, 0), (0, -1)],
        [(-1, -1), (-1, 0), (0, 0), (1, 0)],
        [(1, -1), (0, -1), (0, 0), (0, 1)],
    ]),
    _piece('L', 4, [
        [(-1, 1), (-1, 0), (0, 0), (1, 0)],
        [(-1, -1), (0, -1), (0, 0), (0, 1)],
        [(-1, 0), (0, 0), (1, 0), (1, -1)],
        [(0, -1), (0, 0), (0, 1), (1, 1)],
    ]),
    _piece('S', 4, [
        [(-1, 1), (0, 1), (0, 0), (1, 0)],
        [(-1, -1), (-1, 0), (0, 0), (0, 1)],
        [(-1, 1), (0, 1), (0, 0), (1, 0)],
        [(-1, -1), (-1, 0), (0, 0), (0, 1)],
    ]),
    _piece('T', 4, [
        [(-1, 0), (0, 0), (1, 0), (0, 1)],
        [(-1, 0), (0, -1), (0, 0), (0, 1)],
        [(-1, 0), (0, 0), (1, 0), (0, -1)],
        [(0, -1), (0, 0), (0, 1), (1, 0)],
    ]),
    _piece('Z', 4, [
        [(-1, 0), (0, 0), (0, 1), (1, 1)],
        [(-1, 1), (-1, 0), (0, 0), (0, -1)],
        [(-1, 0), (0, 0), (0, 1), (1, 1)],
        [(-1, 1), (-1, 0), (0, 0), (0, -1)],
    ]),
)


class GameState:
    """Everything the driver reads and writes between two ticks.

    The driver sets the five intent flags (and may raise ``level``) and reads
    back ``field``, the pieces, ``piece_pos``, ``score`` and ``lines``.
    Use ``new_game()`` or ``initialize()`` before the first ``tick()``.
    """

    def __init__(self, rng=None):
        self.field = create_grid()
        self.pieces = PIECES
        self.current_piece = PieceState(0, 0)
        self.next_piece = PieceState(0, 0)
        self.piece_pos = spawn_position()
        self.key_left = False
        self.key_right = False
        self.key_down = False
        self.rotate_right = False
        self.rotate_left = False
        # plain int, grows without wraparound
        self.interval_count = 0
        self.level = 0
        self.lines = 0
        self.score = 0
        self.points = POINTS
        self.pieces_locked = 0
        self.game_over = False
        self.rng = rng if rng is not None else random


def create_grid():
    return np.zeros((rows, cols), dtype=np.int8)


def spawn_position() -> Position:
    return Position(GRID_WIDTH // 2, SPAWN_ROW)


def random_index(size: int, rng=random) -> int:
    """
    Uniform index in [0, size). Draws landing in the remainder above the
    last whole bucket are thrown away and redrawn.
    """
    bucket_size = (RAND_MAX + 1) // size
    limit = bucket_size * size
    while True:
        val = rng.getrandbits(RAND_BITS)
        if val < limit:
            return val // bucket_size


def generate_piece(rng=random) -> PieceState:
    piece = random_index(len(PIECES), rng)
    rotation = random_index(4, rng)
    return PieceState(piece, rotation)


def initialize(state: GameState, rng=None) -> GameState:
    if rng is not None:
        state.rng = rng
    state.field[:, :] = 0
    state.key_left = False
    state.key_right = False
    state.key_down = False
    state.rotate_right = False
    state.rotate_left = False
    state.interval_count = 0
    state.level = 0
    state.lines = 0
    state.score = 0
    state.points = POINTS
    state.pieces = PIECES
    state.pieces_locked = 0
    state.game_over = False
    state.current_piece = generate_piece(state.rng)
    state.next_piece = generate_piece(state.rng)
    state.piece_pos = spawn_position()
    return state


def new_game(rng=None) -> GameState:
    state = GameState(rng)
    return initialize(state)


# ----------------------------
# Collision
# ----------------------------
def cell_collides(field: np.ndarray, x: int, y: int) -> bool:
    h, w = field.shape
    if x < 0 or x >= w or y >= h:
        return True
    # rows above the top are open space
    if y < 0:
        return False
    return bool(field[y, x] != 0)


def piece_cells(piece: int, rotation: int, pos) -> np.ndarray:
    """Absolute (x, y) cells of a piece, shape (4, 2)."""
    offsets = PIECES[piece].rotations[rotation].astype(np.intp)
    return offsets + np.array(pos, dtype=np.intp)


def check_collision(field: np.ndarray, piece: int, rotation: int, pos) -> bool:
    cells = piece_cells(piece, rotation, pos)
    xs, ys = cells[:, 0], cells[:, 1]
    h, w = field.shape
    if np.any((xs < 0) | (xs >= w) | (ys >= h)):
        return True
    visible = ys >= 0
    return bool(np.any(field[ys[visible], xs[visible]] != 0))


# ----------------------------
# Movement
# ----------------------------
def attempt_move(state: GameState, direction: str) -> bool:
    dx, dy = DIRECTIONS[direction]
    pos = Position(state.piece_pos.x + dx, state.piece_pos.y + dy)
    current = state.current_piece
    if check_collision(state.field, current.piece, current.rotation, pos):
        return False
    state.piece_pos = pos
    return True


def rotate(state: GameState, clockwise: bool = True) -> bool:
    current = state.current_piece
    count = state.pieces[current.piece].count
    if clockwise:
        rotation = (current.rotation + 1) % count
    else:
        rotation = (current.rotation + count - 1) % count
    if check_collision(state.field, current.piece, rotation, state.piece_pos):
        return False
    state.current_piece = current._replace(rotation=rotation)
    return True


# ----------------------------
# Locking, line clears, scoring
# ----------------------------
def lock_piece(state: GameState):
    current = state.current_piece
    cells = piece_cells(current.piece, current.rotation, state.piece_pos)
    visible = cells[:, 1] >= 0
    state.field[cells[visible, 1], cells[visible, 0]] = current.piece + 1
    state.pieces_locked += 1


def step_down(state: GameState) -> int:
    """
    Move the piece one row down, or lock it and bring in the next one.
    Returns the number of lines cleared (0 while the piece is still falling).
    """
    if attempt_move(state, "down"):
        return 0
    lock_piece(state)
    lines = clear_lines(state)
    state.current_piece = state.next_piece
    state.next_piece = generate_piece(state.rng)
    state.piece_pos = spawn_position()
    current = state.current_piece
    if check_collision(state.field, current.piece, current.rotation, state.piece_pos):
        state.game_over = True
    return lines


def move_grid_down(field: np.ndarray, top: int, count: int):
    # rows 0..top land on count..top+count, the top count rows empty out
    field[count:top + count + 1] = field[:top + 1].copy()
    field[:count] = 0


def clear_lines(state: GameState) -> int:
    field = state.field
    total = 0
    count = 0
    y = field.shape[0] - 1
    while y >= 0:
        if np.all(field[y] != 0):
            count += 1
        elif count > 0:
            move_grid_down(field, y, count)
            award(state, count)
            total += count
            # row y now sits at y + count, resume just above it
            y += count
            count = 0
        y -= 1
    if count > 0:
        move_grid_down(field, -1, count)
        award(state, count)
        total += count
    return total


def award(state: GameState, lines: int):
    state.lines += lines
    base = state.points[lines - 1]
    state.score += base * (state.level + 1)


# ----------------------------
# Per-tick update
# ----------------------------
def tick(state: GameState) -> int:
    if state.game_over:
        return 0
    if state.rotate_right:
        rotate(state, clockwise=True)
        state.rotate_right = False
    if state.rotate_left:
        rotate(state, clockwise=False)
        state.rotate_left = False

    if state.interval_count % MOVE_INTERVAL == 0:
        if state.key_left:
            attempt_move(state, "left")
        elif state.key_right:
            attempt_move(state, "right")

    lines = 0
    if state.interval_count % SOFT_DROP_INTERVAL == 0 and state.key_down:
        lines = step_down(state)
    elif state.interval_count % DROP_INTERVAL == 0:
        lines = step_down(state)

    state.interval_count += 1
    return lines
