# adapter.py (driver side of the simulation core)
import random

import numpy as np
import core_game as cg

# held actions map to level-triggered flags, one-shot actions to rotation flags
HELD_ACTIONS = {
    "left": "key_left",
    "right": "key_right",
    "down": "key_down",
}
ONE_SHOT_ACTIONS = {
    "rotate_cw": "rotate_right",
    "rotate_ccw": "rotate_left",
}
ACTIONS = tuple(HELD_ACTIONS) + tuple(ONE_SHOT_ACTIONS)

LINES_PER_LEVEL = 10


class GameDriver:
    # expose the board size the way display code expects it
    cols = cg.cols
    rows = cg.rows

    def __init__(self, seed=None, lines_per_level: int = LINES_PER_LEVEL):
        self.rng = random.Random(seed)
        self.lines_per_level = lines_per_level
        self.state = cg.GameState(self.rng)
        self.new_game()

    def new_game(self):
        cg.initialize(self.state, self.rng)
        return self.state

    def press(self, action: str):
        setattr(self.state, self._flag(action), True)

    def release(self, action: str):
        # rotation flags are consumed by the core, releasing them is a no-op
        if action in ONE_SHOT_ACTIONS:
            return
        setattr(self.state, self._flag(action), False)

    def release_all(self):
        for flag in HELD_ACTIONS.values():
            setattr(self.state, flag, False)

    def update(self) -> int:
        lines = cg.tick(self.state)
        # leveling is our policy, the core only reads the level
        earned = self.state.lines // self.lines_per_level
        if earned > self.state.level:
            self.state.level = earned
        return lines

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    def snapshot(self) -> np.ndarray:
        """Copy of the field with the falling piece drawn in."""
        state = self.state
        grid = state.field.copy()
        if state.game_over:
            return grid
        current = state.current_piece
        cells = cg.piece_cells(current.piece, current.rotation, state.piece_pos)
        visible = cells[:, 1] >= 0
        grid[cells[visible, 1], cells[visible, 0]] = current.piece + 1
        return grid

    def stats(self) -> dict:
        state = self.state
        return {
            "score": state.score,
            "lines": state.lines,
            "level": state.level,
            "pieces": state.pieces_locked,
            "next": state.pieces[state.next_piece.piece].name,
            "game_over": state.game_over,
        }

    @staticmethod
    def _flag(action: str) -> str:
        if action in HELD_ACTIONS:
            return HELD_ACTIONS[action]
        if action in ONE_SHOT_ACTIONS:
            return ONE_SHOT_ACTIONS[action]
        raise ValueError(f"unknown action {action!r}, expected one of {ACTIONS}")
