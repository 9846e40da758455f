import io
import unittest
from contextlib import redirect_stdout

import numpy as np

import core_game as cg
import main
from adapter import GameDriver


class GameDriverTests(unittest.TestCase):
    def setUp(self):
        self.driver = GameDriver(seed=7)
        self.state = self.driver.state

    def test_starts_initialized(self):
        self.assertEqual(self.driver.cols, cg.GRID_WIDTH)
        self.assertEqual(self.driver.rows, cg.GRID_HEIGHT)
        self.assertEqual(self.state.piece_pos, cg.spawn_position())
        self.assertFalse(self.state.field.any())
        self.assertFalse(self.driver.game_over)

    def test_held_actions(self):
        self.driver.press("left")
        self.driver.press("down")
        self.assertTrue(self.state.key_left and self.state.key_down)
        self.driver.release("left")
        self.assertFalse(self.state.key_left)
        self.driver.release_all()
        self.assertFalse(self.state.key_down)

    def test_rotation_actions_are_consumed_by_the_core(self):
        self.driver.press("rotate_cw")
        self.driver.press("rotate_ccw")
        self.assertTrue(self.state.rotate_right and self.state.rotate_left)
        self.driver.release("rotate_cw")
        self.assertTrue(self.state.rotate_right)
        self.driver.update()
        self.assertFalse(self.state.rotate_right or self.state.rotate_left)

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            self.driver.press("hard_drop")
        with self.assertRaises(ValueError):
            self.driver.release("jump")

    def test_level_follows_lines(self):
        self.state.lines = 25
        self.driver.update()
        self.assertEqual(self.state.level, 2)
        self.state.lines = 3
        self.driver.update()
        self.assertEqual(self.state.level, 2)

    def test_custom_lines_per_level(self):
        driver = GameDriver(seed=1, lines_per_level=4)
        driver.state.lines = 9
        driver.update()
        self.assertEqual(driver.state.level, 2)

    def test_snapshot_overlays_falling_piece(self):
        self.state.current_piece = cg.PieceState(0, 0)
        self.state.piece_pos = cg.spawn_position()
        grid = self.driver.snapshot()
        self.assertEqual(list(grid[0:2, 5]), [1, 1])
        self.assertEqual(list(grid[0:2, 6]), [1, 1])
        self.assertEqual(int(np.count_nonzero(grid)), 4)
        self.assertFalse(self.state.field.any())

    def test_snapshot_skips_cells_above_the_top(self):
        self.state.current_piece = cg.PieceState(1, 1)
        self.state.piece_pos = cg.Position(2, 0)
        grid = self.driver.snapshot()
        self.assertEqual(list(grid[0:2, 2]), [2, 2])
        self.assertEqual(int(np.count_nonzero(grid)), 2)

    def test_stats(self):
        stats = self.driver.stats()
        self.assertEqual(stats["score"], 0)
        self.assertEqual(stats["lines"], 0)
        self.assertEqual(stats["pieces"], 0)
        self.assertIn(stats["next"], [p.name for p in cg.PIECES])
        self.assertFalse(stats["game_over"])

    def test_new_game_resets(self):
        self.state.score = 900
        self.state.field[19, :4] = 3
        self.driver.new_game()
        self.assertEqual(self.state.score, 0)
        self.assertFalse(self.state.field.any())

    def test_seeded_drivers_replay_identically(self):
        a, b = GameDriver(seed=11), GameDriver(seed=11)
        for action in ["left", "down", "rotate_cw"]:
            a.press(action)
            b.press(action)
        for _ in range(600):
            a.update()
            b.update()
        np.testing.assert_array_equal(a.state.field, b.state.field)
        self.assertEqual(a.stats(), b.stats())


class HeadlessRunTests(unittest.TestCase):
    def test_run_prints_summary(self):
        out = io.StringIO()
        with redirect_stdout(out):
            stats = main.main(["--ticks", "3000", "--seed", "3"])
        text = out.getvalue()
        self.assertIn("Score:", text)
        self.assertIn("Pieces:", text)
        self.assertGreater(stats["pieces"], 0)

    def test_zero_ticks(self):
        out = io.StringIO()
        with redirect_stdout(out):
            stats = main.main(["--ticks", "0"])
        self.assertEqual(stats["score"], 0)
        self.assertIn("Ticks:   0", out.getvalue())


if __name__ == "__main__":
    unittest.main()
