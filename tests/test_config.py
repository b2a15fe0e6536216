"""
Tests for PathfindingConfig validation and conversion.
"""

import unittest

from chunknav import ConfigError, PathfindingConfig, TransitionPointMethod
from chunknav.heuristics import euclidean


def provider(chunk_id):
    return None


class TestPathfindingConfig(unittest.TestCase):
    def test_defaults(self):
        config = PathfindingConfig(get_chunk_data=provider)
        self.assertEqual(config.transition_point_method, TransitionPointMethod.CENTER)
        self.assertEqual(config.max_transition_points, 3)
        self.assertEqual(config.heuristic_weight, 1.0)
        self.assertFalse(config.allow_diagonal)
        self.assertFalse(config.optimize_path)
        self.assertFalse(config.to_dict()["optimize_path"])
        self.assertTrue(config.build_graph_on_init)

    def test_dimensions(self):
        config = PathfindingConfig(
            get_chunk_data=provider,
            grid_width=3,
            grid_height=2,
            chunk_width=10,
            chunk_height=5,
            tile_size=8,
        )
        self.assertEqual(config.chunk_world_size, (80, 40))
        self.assertEqual(config.world_dimensions, (240, 80))
        self.assertEqual(config.tile_dimensions, (30, 10))
        self.assertEqual(config.layout.chunk_width, 10)

    def test_method_string_is_converted(self):
        config = PathfindingConfig(get_chunk_data=provider, transition_point_method="margin")
        self.assertIs(config.transition_point_method, TransitionPointMethod.MARGIN)

    def test_all_errors_reported_together(self):
        with self.assertRaises(ConfigError) as ctx:
            PathfindingConfig(grid_width=0, tile_size=-1)
        message = str(ctx.exception)
        self.assertIn("grid_width", message)
        self.assertIn("tile_size", message)
        self.assertIn("get_chunk_data", message)

    def test_bool_is_not_a_dimension(self):
        with self.assertRaises(ConfigError):
            PathfindingConfig(get_chunk_data=provider, chunk_width=True)

    def test_flags_must_be_booleans(self):
        for name in ("allow_diagonal", "optimize_path", "build_graph_on_init"):
            with self.subTest(name=name):
                with self.assertRaises(ConfigError) as ctx:
                    PathfindingConfig(get_chunk_data=provider, **{name: "yes"})
                self.assertIn(name, str(ctx.exception))

    def test_clone_validates(self):
        config = PathfindingConfig(get_chunk_data=provider)
        clone = config.clone(grid_width=12)
        self.assertEqual(clone.grid_width, 12)
        self.assertEqual(config.grid_width, 8)
        with self.assertRaises(ConfigError):
            config.clone(heuristic_weight=0.1)

    def test_from_dict_aliases(self):
        config = PathfindingConfig.from_dict(
            {
                "getChunkData": provider,
                "chunkSize": 6,
                "chunk_height": 4,
                "allowDiagonal": True,
                "optimizePath": True,
                "maxTransitionPoints": 2,
            }
        )
        self.assertEqual(config.chunk_width, 6)
        self.assertEqual(config.chunk_height, 4)
        self.assertTrue(config.allow_diagonal)
        self.assertTrue(config.optimize_path)
        self.assertEqual(config.max_transition_points, 2)

    def test_from_dict_unknown_key(self):
        with self.assertRaises(ConfigError) as ctx:
            PathfindingConfig.from_dict({"getChunkData": provider, "gridDepth": 3})
        self.assertIn("gridDepth", str(ctx.exception))

    def test_to_dict(self):
        config = PathfindingConfig(
            get_chunk_data=provider,
            local_algorithm="jps",
            hierarchical_heuristic=euclidean,
            transition_points=[{"chunks": ["0,0", "1,0"], "position": 1}],
        )
        exported = config.to_dict()
        self.assertEqual(exported["local_algorithm"], "jps")
        self.assertEqual(exported["local_heuristic"], "manhattan")
        self.assertEqual(exported["hierarchical_heuristic"], "euclidean")
        self.assertEqual(exported["transition_point_method"], "center")
        self.assertEqual(exported["transition_point_count"], 1)
        self.assertNotIn("get_chunk_data", exported)

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            PathfindingConfig(get_chunk_data=provider, max_transition_points=0)


if __name__ == "__main__":
    unittest.main()
