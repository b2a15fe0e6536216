"""
Tests for single-chunk A* search and the LocalPathfinder wrapper.
"""

import math
import unittest

import numpy as np

from chunknav.chunk import Chunk
from chunknav.errors import ConfigError
from chunknav.pathfinding import (
    LocalPathfinder,
    SearchOptions,
    find_path_astar,
    path_cost,
    register_algorithm,
)
from chunknav.pathfinding.grid_search import (
    expand_path,
    has_line_of_sight,
    is_walkable,
    smooth_path,
)


def assert_valid_path(test, grid, path, start, end, allow_diagonal=False):
    """Check a path is contiguous, walkable and spans start..end."""
    walkable = np.asarray(grid) == 0
    test.assertEqual(path[0], start)
    test.assertEqual(path[-1], end)
    for a, b in zip(path, path[1:]):
        dx, dy = abs(a[0] - b[0]), abs(a[1] - b[1])
        if allow_diagonal:
            test.assertTrue(max(dx, dy) == 1, f"Non-unit step {a} -> {b}")
        else:
            test.assertEqual(dx + dy, 1, f"Non-unit step {a} -> {b}")
    for tile in path:
        test.assertTrue(is_walkable(walkable, tile), f"Blocked tile {tile} in path")


class TestAStarPathfinding(unittest.TestCase):
    """A* behaviour on small grids."""

    def setUp(self):
        self.open_grid = np.zeros((5, 5), dtype=int)

        # Wall on column 2 with a gap at the bottom
        self.wall_grid = np.zeros((5, 5), dtype=int)
        self.wall_grid[0:4, 2] = 1

        self.pathfinder = LocalPathfinder()

    def test_same_tile_returns_single_element(self):
        for algorithm in ("astar", "jps"):
            for allow_diagonal in (False, True):
                with self.subTest(algorithm=algorithm, diagonal=allow_diagonal):
                    pathfinder = LocalPathfinder(
                        algorithm=algorithm, allow_diagonal=allow_diagonal
                    )
                    self.assertEqual(
                        pathfinder.find_path(self.open_grid, (2, 3), (2, 3)), [(2, 3)]
                    )

    def test_open_grid_four_directional(self):
        path = self.pathfinder.find_path(self.open_grid, (0, 0), (4, 4))
        assert_valid_path(self, self.open_grid, path, (0, 0), (4, 4))
        self.assertEqual(len(path), 9)
        self.assertEqual(path_cost(path), 8)

    def test_open_grid_eight_directional(self):
        pathfinder = LocalPathfinder(heuristic="octile", allow_diagonal=True)
        path = pathfinder.find_path(self.open_grid, (0, 0), (4, 4))
        assert_valid_path(self, self.open_grid, path, (0, 0), (4, 4), allow_diagonal=True)
        self.assertEqual(len(path), 5)
        self.assertAlmostEqual(path_cost(path), 4 * math.sqrt(2))

    def test_routes_around_wall(self):
        path = self.pathfinder.find_path(self.wall_grid, (0, 0), (4, 0))
        assert_valid_path(self, self.wall_grid, path, (0, 0), (4, 0))
        self.assertIn((2, 4), path)
        self.assertEqual(path_cost(path), 12)

    def test_blocked_start_or_end_returns_none(self):
        grid = self.open_grid.copy()
        grid[0, 0] = 1
        self.assertIsNone(self.pathfinder.find_path(grid, (0, 0), (4, 4)))
        self.assertIsNone(self.pathfinder.find_path(grid, (4, 4), (0, 0)))
        self.assertIsNone(self.pathfinder.find_path(grid, (0, 0), (0, 0)))

    def test_out_of_bounds_returns_none(self):
        self.assertIsNone(self.pathfinder.find_path(self.open_grid, (0, 0), (5, 0)))
        self.assertIsNone(self.pathfinder.find_path(self.open_grid, (-1, 0), (2, 2)))

    def test_unreachable_returns_none(self):
        grid = self.open_grid.copy()
        grid[:, 2] = 1
        self.assertIsNone(self.pathfinder.find_path(grid, (0, 0), (4, 4)))

    def test_no_corner_cutting(self):
        pathfinder = LocalPathfinder(heuristic="octile", allow_diagonal=True)

        # Both corners blocked: the tiles only touch diagonally
        grid = np.array([[0, 1], [1, 0]])
        self.assertIsNone(pathfinder.find_path(grid, (0, 0), (1, 1)))

        # One corner blocked: the path has to go around it
        grid = np.array([[0, 1], [0, 0]])
        path = pathfinder.find_path(grid, (0, 0), (1, 1))
        self.assertEqual(path, [(0, 0), (0, 1), (1, 1)])

    def test_tie_break_is_reproducible(self):
        # Lowest f, then lowest h, then first inserted; neighbors N, E, S, W
        expected = [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2)]
        grid = np.zeros((3, 3), dtype=int)
        for _ in range(3):
            self.assertEqual(LocalPathfinder().find_path(grid, (0, 0), (2, 2)), expected)

    def test_weighted_heuristic_still_finds_path(self):
        pathfinder = LocalPathfinder(heuristic_weight=3.0)
        path = pathfinder.find_path(self.wall_grid, (0, 0), (4, 0))
        assert_valid_path(self, self.wall_grid, path, (0, 0), (4, 0))

    def test_accepts_chunk_and_boolean_mask(self):
        mask = self.open_grid == 0
        chunk = Chunk(chunk_id="0,0", walkable=mask)
        expected = self.pathfinder.find_path(self.open_grid, (0, 0), (3, 1))
        self.assertEqual(self.pathfinder.find_path(mask, (0, 0), (3, 1)), expected)
        self.assertEqual(self.pathfinder.find_path(chunk, (0, 0), (3, 1)), expected)

    def test_is_walkable(self):
        self.assertTrue(LocalPathfinder.is_walkable(self.wall_grid, (2, 4)))
        self.assertFalse(LocalPathfinder.is_walkable(self.wall_grid, (2, 0)))
        self.assertFalse(LocalPathfinder.is_walkable(self.wall_grid, (9, 9)))

    def test_strategy_function_directly(self):
        options = SearchOptions(allow_diagonal=False)
        path = find_path_astar(self.open_grid == 0, (0, 0), (0, 3), options)
        self.assertEqual(path, [(0, 0), (0, 1), (0, 2), (0, 3)])


class TestLocalPathfinderConfiguration(unittest.TestCase):
    """Strategy and option validation."""

    def test_rejects_low_heuristic_weight(self):
        with self.assertRaises(ConfigError):
            LocalPathfinder(heuristic_weight=0.5)

    def test_rejects_unknown_algorithm(self):
        with self.assertRaises(ConfigError):
            LocalPathfinder(algorithm="dfs")

    def test_rejects_unknown_heuristic(self):
        with self.assertRaises(ConfigError):
            LocalPathfinder(heuristic="teleport")

    def test_custom_strategy_output_is_expanded(self):
        def straight_line(grid, start, end, options):
            return [start, end]

        pathfinder = LocalPathfinder(algorithm=straight_line)
        self.assertEqual(pathfinder.algorithm_name, "straight_line")
        path = pathfinder.find_path(np.zeros((1, 4), dtype=int), (0, 0), (3, 0))
        self.assertEqual(path, [(0, 0), (1, 0), (2, 0), (3, 0)])

    def test_registered_strategy(self):
        def never(grid, start, end, options):
            return None

        register_algorithm("never_test", never)
        pathfinder = LocalPathfinder(algorithm="never_test")
        self.assertIsNone(pathfinder.find_path(np.zeros((3, 3)), (0, 0), (2, 2)))


class TestPathHelpers(unittest.TestCase):
    """expand_path and path_cost."""

    def test_expand_path(self):
        self.assertEqual(expand_path([]), [])
        self.assertEqual(
            expand_path([(0, 0), (2, 2), (2, 0)]),
            [(0, 0), (1, 1), (2, 2), (2, 1), (2, 0)],
        )

    def test_path_cost(self):
        self.assertEqual(path_cost([(0, 0)]), 0)
        self.assertAlmostEqual(path_cost([(0, 0), (1, 1), (1, 3)]), math.sqrt(2) + 2)


class TestPathSmoothing(unittest.TestCase):
    """Line-of-sight smoothing of local paths."""

    def setUp(self):
        self.ring = np.array([[0, 0, 0], [0, 1, 0], [0, 0, 0]]) == 0

    def test_line_of_sight(self):
        open_grid = np.ones((4, 4), dtype=bool)
        self.assertTrue(has_line_of_sight(open_grid, (0, 0), (3, 2)))
        self.assertTrue(has_line_of_sight(self.ring, (0, 0), (2, 0)))
        self.assertFalse(has_line_of_sight(self.ring, (0, 0), (2, 2)))
        self.assertFalse(has_line_of_sight(self.ring, (0, 1), (2, 1)))

    def test_line_of_sight_respects_corner_rule(self):
        grid = np.array([[0, 1], [0, 0]]) == 0
        self.assertFalse(has_line_of_sight(grid, (0, 0), (1, 1)))
        self.assertTrue(has_line_of_sight(grid, (0, 0), (0, 1)))

    def test_smooth_path_keeps_corners(self):
        path = [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2)]
        self.assertEqual(smooth_path(self.ring, path), [(0, 0), (2, 0), (2, 2)])
        self.assertEqual(smooth_path(self.ring, path[:2]), path[:2])

    def test_optimize_path_option(self):
        grid = np.zeros((4, 4), dtype=int)
        plain = LocalPathfinder()
        smooth = LocalPathfinder(optimize_path=True)

        self.assertEqual(len(plain.find_path(grid, (0, 0), (3, 2))), 6)
        self.assertEqual(smooth.find_path(grid, (0, 0), (3, 2)), [(0, 0), (3, 2)])
        self.assertEqual(len(smooth.find_path(grid, (0, 0), (3, 2), optimize=False)), 6)
        self.assertEqual(plain.find_path(grid, (0, 0), (3, 2), optimize=True), [(0, 0), (3, 2)])

    def test_optimized_path_around_obstacle(self):
        pathfinder = LocalPathfinder(optimize_path=True)
        path = pathfinder.find_path(self.ring, (0, 0), (2, 2))
        self.assertEqual(path, [(0, 0), (2, 0), (2, 2)])


if __name__ == "__main__":
    unittest.main()
