"""
Tests for distance heuristics and the heuristic registry.
"""

import math
import unittest

from chunknav.errors import ConfigError
from chunknav.heuristics import (
    HeuristicType,
    available_heuristics,
    diagonal,
    euclidean,
    get_heuristic,
    heuristic_name,
    manhattan,
    octile,
    register_heuristic,
)


class TestHeuristics(unittest.TestCase):
    """Values of the built-in heuristics."""

    def test_values(self):
        a, b = (0, 0), (3, 4)
        self.assertEqual(manhattan(a, b), 7)
        self.assertAlmostEqual(euclidean(a, b), 5.0)
        self.assertEqual(diagonal(a, b), 4)
        self.assertAlmostEqual(octile(a, b), 4 + (math.sqrt(2) - 1) * 3)

    def test_zero_distance(self):
        for heuristic in (manhattan, euclidean, diagonal, octile):
            with self.subTest(heuristic=heuristic.__name__):
                self.assertEqual(heuristic((2, 5), (2, 5)), 0)

    def test_ordering_on_diagonal_offsets(self):
        a, b = (1, 1), (6, 3)
        self.assertLessEqual(diagonal(a, b), octile(a, b))
        self.assertLessEqual(euclidean(a, b), octile(a, b))
        self.assertLessEqual(octile(a, b), manhattan(a, b))


class TestHeuristicRegistry(unittest.TestCase):
    """Name resolution through the registry."""

    def test_builtin_names(self):
        for member in HeuristicType:
            self.assertIn(member.value, available_heuristics())
            self.assertIs(get_heuristic(member), get_heuristic(member.value))

    def test_unknown_name_raises(self):
        with self.assertRaises(ConfigError):
            get_heuristic("teleport")

    def test_callable_passes_through(self):
        def zero(a, b):
            return 0

        self.assertIs(get_heuristic(zero), zero)
        self.assertEqual(heuristic_name(zero), "zero")

    def test_register_custom(self):
        def scaled_manhattan(a, b):
            return 2 * manhattan(a, b)

        register_heuristic("scaled_manhattan_test", scaled_manhattan)
        self.assertIs(get_heuristic("scaled_manhattan_test"), scaled_manhattan)

    def test_register_rejects_non_callable(self):
        with self.assertRaises(ConfigError):
            register_heuristic("broken", 42)


if __name__ == "__main__":
    unittest.main()
