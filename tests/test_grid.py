import unittest
import sys
import os

# Add project root to path so we can import pathfinder_lab
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathfinder_lab.core.errors import InvalidPlacement
from pathfinder_lab.core.grid import Cell, Grid, INF


class TestGrid(unittest.TestCase):
    def test_initialization(self):
        grid = Grid(4, 6)
        self.assertEqual(len(grid.cells), 24)
        self.assertEqual(grid.start.position, (0, 0))
        self.assertEqual(grid.end.position, (3, 5))
        for cell in grid:
            self.assertFalse(cell.is_wall)
            self.assertEqual(cell.weight, 1)

    def test_too_small(self):
        with self.assertRaises(ValueError):
            Grid(1, 5)

    def test_coordinates(self):
        grid = Grid(5, 5)
        self.assertEqual(grid.get_index(2, 3), 13)  # 2 * 5 + 3

        with self.assertRaises(IndexError):
            grid.get_index(-1, 0)
        with self.assertRaises(IndexError):
            grid.get_index(0, 5)
        self.assertIsNone(grid.get_cell(5, 0))
        self.assertIs(grid[(1, 1)], grid.cells[6])

    def test_neighbor_order(self):
        grid = Grid(3, 3)
        # Up, down, left, right
        got = [c.position for c in grid.neighbors(grid[(1, 1)])]
        self.assertEqual(got, [(0, 1), (2, 1), (1, 0), (1, 2)])

        corner = [c.position for c in grid.neighbors(grid[(0, 0)])]
        self.assertEqual(corner, [(1, 0), (0, 1)])

    def test_open_neighbors_skip_walls(self):
        grid = Grid(3, 3)
        grid.set_wall(0, 1)
        got = [c.position for c in grid.open_neighbors(grid[(1, 1)])]
        self.assertEqual(got, [(2, 1), (1, 0), (1, 2)])

    def test_set_start_clears_wall_and_weight(self):
        grid = Grid(4, 4)
        grid.set_wall(2, 2)
        self.assertTrue(grid.set_start(2, 2))
        cell = grid[(2, 2)]
        self.assertTrue(cell.is_start)
        self.assertFalse(cell.is_wall)
        self.assertEqual(cell.weight, 1)
        self.assertEqual(grid[(0, 0)].role, Cell.NORMAL)

        grid.set_weight(1, 1, 5)
        self.assertTrue(grid.set_end(1, 1))
        self.assertEqual(grid[(1, 1)].weight, 1)
        self.assertFalse(grid[(3, 3)].is_end)

    def test_blocked_set_end_is_noop(self):
        grid = Grid(3, 3)
        before = grid.layout()
        self.assertFalse(grid.set_end(0, 0))
        self.assertFalse(grid.set_start(2, 2))
        self.assertEqual(grid.layout(), before)
        self.assertEqual(grid.start.position, (0, 0))
        self.assertEqual(grid.end.position, (2, 2))

    def test_set_start_end_swap(self):
        grid = Grid(3, 3)
        grid.set_start_end((2, 2), (0, 0))
        self.assertTrue(grid[(2, 2)].is_start)
        self.assertTrue(grid[(0, 0)].is_end)
        with self.assertRaises(InvalidPlacement):
            grid.set_start_end((1, 1), (1, 1))

    def test_walls_and_weights_skip_special_cells(self):
        grid = Grid(3, 3)
        self.assertFalse(grid.set_wall(0, 0))
        self.assertFalse(grid.set_weight(2, 2, 5))
        self.assertFalse(grid[(0, 0)].is_wall)

        grid.set_weight(1, 1, 10)
        grid.set_wall(1, 1)
        self.assertEqual(grid[(1, 1)].weight, 1)
        self.assertFalse(grid.set_weight(1, 1, 2))

        with self.assertRaises(ValueError):
            grid.set_weight(0, 1, 0)
        with self.assertRaises(ValueError):
            grid.set_weight(0, 1, True)

    def test_clear_cell(self):
        grid = Grid(3, 3)
        grid.set_weight(0, 1, 5)
        grid.set_wall(1, 1)
        grid.clear_cell(0, 1)
        grid.clear_cell(1, 1)
        self.assertEqual(grid[(0, 1)].weight, 1)
        self.assertFalse(grid[(1, 1)].is_wall)
        self.assertFalse(grid.clear_cell(0, 0))

    def test_reset_annotations_keeps_layout(self):
        grid = Grid(3, 3)
        grid.set_wall(1, 1)
        grid.set_weight(0, 1, 2)
        cell = grid[(0, 1)]
        cell.explored = True
        cell.is_path = True
        cell.distance = 4
        cell.previous = 0
        cell.f_score = 7
        before = grid.layout()

        grid.reset_annotations()
        self.assertEqual(grid.layout(), before)
        self.assertFalse(cell.explored)
        self.assertFalse(cell.is_path)
        self.assertEqual(cell.distance, INF)
        self.assertIsNone(cell.previous)
        self.assertEqual(cell.f_score, INF)

    def test_clear_restores_corners(self):
        grid = Grid(4, 5)
        grid.set_start_end((1, 1), (2, 2))
        grid.set_wall(3, 3)
        grid.set_weight(0, 4, 10)
        grid.clear()
        self.assertEqual(grid.start.position, (0, 0))
        self.assertEqual(grid.end.position, (3, 4))
        self.assertEqual(grid.wall_count(), 0)
        self.assertTrue(all(c.weight == 1 for c in grid))
        self.assertEqual(sum(1 for c in grid if c.is_special), 2)

    def test_resize_discards_state(self):
        grid = Grid(3, 3)
        grid.set_wall(1, 1)
        grid.resize(6, 4)
        self.assertEqual((grid.rows, grid.cols), (6, 4))
        self.assertEqual(grid.wall_count(), 0)
        self.assertEqual(grid.end.position, (5, 3))

    def test_copy_is_independent(self):
        grid = Grid(4, 4)
        grid.set_wall(1, 2)
        grid.set_weight(2, 2, 5)
        clone = grid.copy()
        self.assertEqual(clone.layout(), grid.layout())

        clone.set_wall(3, 0)
        self.assertFalse(grid[(3, 0)].is_wall)

        other = Grid(2, 2)
        other.copy_layout_from(grid)
        self.assertEqual((other.rows, other.cols), (4, 4))
        self.assertEqual(other.layout(), grid.layout())


if __name__ == '__main__':
    unittest.main()
