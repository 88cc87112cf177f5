import unittest
import random
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathfinder_lab.algo.division import RecursiveDivision, ensure_path, is_reachable
from pathfinder_lab.algo.randomize import (
    generate_random_environment, randomize_start_end, randomize_weights,
)
from pathfinder_lab.core.config import GeneratorConfig
from pathfinder_lab.core.grid import Grid


class TestGenerators(unittest.TestCase):
    def test_division_always_connected(self):
        rng = random.Random(7)
        for i in range(100):
            rows = rng.randint(5, 30)
            cols = rng.randint(5, 30)
            grid = Grid(rows, cols)
            RecursiveDivision(grid, seed=i).run_all()
            self.assertTrue(is_reachable(grid), f"maze #{i} ({rows}x{cols}) is disconnected")

    def test_division_places_walls(self):
        grid = Grid(20, 20)
        RecursiveDivision(grid, seed=3).run_all()
        self.assertGreater(grid.wall_count(), 0)

    def test_special_cells_survive(self):
        grid = Grid(15, 15)
        grid.set_start_end((7, 3), (2, 11))
        RecursiveDivision(grid, seed=11).run_all()
        self.assertTrue(grid[(7, 3)].is_start)
        self.assertTrue(grid[(2, 11)].is_end)
        self.assertFalse(grid.start.is_wall)
        self.assertFalse(grid.end.is_wall)

    def test_previous_layout_is_cleared(self):
        grid = Grid(10, 10)
        for c in range(10):
            grid.set_wall(5, c)
        grid.set_weight(1, 1, 10)
        RecursiveDivision(grid, seed=5).run_all()
        self.assertTrue(all(c.weight == 1 for c in grid))
        self.assertTrue(is_reachable(grid))

    def test_determinism(self):
        grid1 = Grid(12, 12)
        RecursiveDivision(grid1, seed=12345).run_all()

        grid2 = Grid(12, 12)
        gen = RecursiveDivision(grid2, seed=12345)
        for _ in gen.run(): pass

        self.assertEqual(grid1.layout(), grid2.layout())

    def test_repair_carves_corridor(self):
        grid = Grid(8, 8)
        # Wall off End completely
        grid.set_wall(6, 7)
        grid.set_wall(7, 6)
        grid.set_wall(6, 6)
        self.assertFalse(is_reachable(grid))

        cleared = ensure_path(grid, random.Random(1), detour_chance=0.0)
        self.assertGreater(cleared, 0)
        self.assertTrue(is_reachable(grid))
        self.assertTrue(grid.end.is_end)

    def test_repair_noop_when_reachable(self):
        grid = Grid(5, 5)
        grid.set_wall(2, 2)
        self.assertEqual(ensure_path(grid, random.Random(1)), 0)
        self.assertTrue(grid[(2, 2)].is_wall)


class TestRandomizers(unittest.TestCase):
    def test_start_end_on_open_cells(self):
        for seed in range(30):
            grid = Grid(10, 10)
            RecursiveDivision(grid, seed=seed).run_all()
            start, end = randomize_start_end(grid, random.Random(seed))
            self.assertNotEqual(start, end)
            self.assertEqual(grid.start.position, start)
            self.assertEqual(grid.end.position, end)
            self.assertEqual(sum(1 for c in grid if c.is_start), 1)
            self.assertEqual(sum(1 for c in grid if c.is_end), 1)

    def test_start_end_exhausted_attempts(self):
        grid = Grid(2, 2)
        # Single attempt each; whatever is drawn is accepted
        start, end = randomize_start_end(grid, random.Random(0), max_attempts=1)
        self.assertNotEqual(start, end)
        self.assertFalse(grid.start.is_wall)
        self.assertFalse(grid.end.is_wall)

    def test_weights_only_on_normal_open_cells(self):
        grid = Grid(10, 10)
        grid.set_wall(4, 4)
        heavy = randomize_weights(grid, random.Random(2), fill_probability=1.0)
        self.assertEqual(heavy, 100 - 3)
        self.assertEqual(grid.start.weight, 1)
        self.assertEqual(grid.end.weight, 1)
        self.assertEqual(grid[(4, 4)].weight, 1)
        for cell in grid:
            if not (cell.is_special or cell.is_wall):
                self.assertIn(cell.weight, (2, 5, 10))

    def test_zero_fill_resets_weights(self):
        grid = Grid(5, 5)
        grid.set_weight(1, 1, 5)
        self.assertEqual(randomize_weights(grid, random.Random(2), fill_probability=0.0), 0)
        self.assertTrue(all(c.weight == 1 for c in grid))

    def test_random_environment_is_solvable(self):
        for seed in range(20):
            grid = Grid(15, 15)
            generate_random_environment(grid, seed=seed)
            self.assertTrue(is_reachable(grid))

    def test_config_validation(self):
        with self.assertRaises(ValueError):
            GeneratorConfig(detour_chance=1.5)
        with self.assertRaises(ValueError):
            GeneratorConfig(weight_choices=(0, 2))


if __name__ == '__main__':
    unittest.main()
