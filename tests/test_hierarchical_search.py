"""
Tests for Dijkstra/A* selection and entry point choice over the transition graph.
"""

import unittest

import numpy as np

from chunknav.chunk import ChunkSource
from chunknav.coordinates import ChunkLayout, make_chunk_id
from chunknav.errors import StaleGraphError
from chunknav.graph import HierarchicalSearch, PathfindingAlgorithm, TransitionGraphBuilder
from chunknav.heuristics import manhattan
from chunknav.pathfinding import LocalPathfinder


def build_search(chunks, grid_width, grid_height, size=4, heuristic=manhattan, build=True):
    layout = ChunkLayout(size, size, 1)
    source = ChunkSource(chunks.get, size, size)
    local = LocalPathfinder()
    builder = TransitionGraphBuilder(layout, grid_width, grid_height, source, local)
    if build:
        builder.rebuild()
    return HierarchicalSearch(layout, source, local, builder, heuristic=heuristic)


def open_chunks(grid_width, grid_height, size=4):
    return {
        make_chunk_id(x, y): np.zeros((size, size), dtype=int)
        for y in range(grid_height)
        for x in range(grid_width)
    }


class TestAlgorithmSelection(unittest.TestCase):
    """Heuristic presence decides between A* and Dijkstra."""

    def test_algorithm_property(self):
        chunks = open_chunks(2, 1)
        self.assertEqual(build_search(chunks, 2, 1).algorithm, PathfindingAlgorithm.A_STAR)
        self.assertEqual(
            build_search(chunks, 2, 1, heuristic=None).algorithm,
            PathfindingAlgorithm.DIJKSTRA,
        )

    def test_chain_costs_match(self):
        chunks = open_chunks(3, 1)
        astar = build_search(chunks, 3, 1)
        dijkstra = build_search(chunks, 3, 1, heuristic=None)

        a = astar.find_transition_path("0,0|1,0#0", "1,0|2,0#2")
        d = dijkstra.find_transition_path("0,0|1,0#0", "1,0|2,0#2")
        self.assertTrue(a.success)
        self.assertTrue(d.success)
        self.assertEqual(a.total_cost, 5)
        self.assertEqual(d.total_cost, 5)
        self.assertEqual(a.path, ["0,0|1,0#0", "1,0|2,0#2"])

    def test_dijkstra_never_worse_than_astar(self):
        chunks = open_chunks(3, 3)
        chunks["1,1"][1:3, 1:3] = 1
        astar = build_search(chunks, 3, 3)
        dijkstra = build_search(chunks, 3, 3, heuristic=None)

        graph = dijkstra.builder.graph
        ids = sorted(graph.point_ids)
        for start_id, end_id in ((ids[0], ids[-1]), (ids[1], ids[-2]), (ids[2], ids[5])):
            with self.subTest(start=start_id, end=end_id):
                a = astar.find_transition_path(start_id, end_id)
                d = dijkstra.find_transition_path(start_id, end_id)
                self.assertTrue(d.success)
                self.assertTrue(a.success)
                self.assertLessEqual(d.total_cost, a.total_cost)
                self.assertEqual(d.path[0], start_id)
                self.assertEqual(d.path[-1], end_id)

    def test_astar_matches_dijkstra_on_random_worlds(self):
        for seed in (3, 11, 29):
            rng = np.random.RandomState(seed)
            chunks = {
                make_chunk_id(x, y): (rng.rand(6, 6) < 0.25).astype(int)
                for y in range(3)
                for x in range(3)
            }
            astar = build_search(chunks, 3, 3, size=6)
            dijkstra = build_search(chunks, 3, 3, size=6, heuristic=None)

            ids = sorted(dijkstra.builder.graph.point_ids)
            for i, start_id in enumerate(ids):
                for end_id in ids[i + 1:]:
                    a = astar.find_transition_path(start_id, end_id)
                    d = dijkstra.find_transition_path(start_id, end_id)
                    self.assertEqual(a.success, d.success)
                    if d.success:
                        self.assertEqual(
                            a.total_cost, d.total_cost,
                            f"seed {seed}: {start_id} -> {end_id}",
                        )

    def test_search_tile_collapses_borders(self):
        graph = build_search(open_chunks(2, 2), 2, 2).builder.graph
        for point in graph.points:
            tiles = set()
            for chunk_id in point.chunks:
                x, y = graph.local_position(point, chunk_id)
                chunk_x, chunk_y = map(int, chunk_id.split(","))
                tiles.add((chunk_x * 4 + x - chunk_x, chunk_y * 4 + y - chunk_y))
            self.assertEqual(tiles, {graph.search_tile(point)})

        self.assertEqual(graph.search_tile(graph.get_point("1,0|1,1#2")), (5, 3))

    def test_same_point(self):
        search = build_search(open_chunks(2, 1), 2, 1)
        result = search.find_transition_path("0,0|1,0#1", "0,0|1,0#1")
        self.assertTrue(result.success)
        self.assertEqual(result.path, ["0,0|1,0#1"])
        self.assertEqual(result.total_cost, 0.0)

    def test_unknown_point_raises(self):
        search = build_search(open_chunks(2, 1), 2, 1)
        with self.assertRaises(StaleGraphError):
            search.find_transition_path("0,0|1,0#1", "0,0|1,0#7")

    def test_unbuilt_graph_raises(self):
        search = build_search(open_chunks(2, 1), 2, 1, build=False)
        with self.assertRaises(StaleGraphError):
            search.find_transition_path("0,0|1,0#1", "0,0|1,0#2")


class TestEntryAndExitPoints(unittest.TestCase):
    """Nearest reachable transition point selection."""

    def test_nearest_point_wins(self):
        search = build_search(open_chunks(2, 1), 2, 1)
        graph = search.builder.graph
        point = search.find_nearest_transition(graph, (0.5, 0.5), "0,0")
        self.assertEqual(point.id, "0,0|1,0#0")

        point = search.find_nearest_transition(graph, (5.5, 3.5), "1,0")
        self.assertEqual(point.id, "0,0|1,0#2")

    def test_unreachable_nearest_point_is_skipped(self):
        # Point #0 sits in a pocket closed off by (2, 0) and (3, 1)
        chunks = open_chunks(2, 1)
        chunks["0,0"][0, 2] = 1
        chunks["0,0"][1, 3] = 1
        search = build_search(chunks, 2, 1)
        graph = search.builder.graph

        self.assertEqual(
            sorted(graph.point_ids), ["0,0|1,0#0", "0,0|1,0#2", "0,0|1,0#3"]
        )
        point = search.find_nearest_transition(graph, (0.5, 0.5), "0,0")
        self.assertEqual(point.id, "0,0|1,0#2")

    def test_no_points_in_chunk(self):
        chunks = open_chunks(2, 1)
        chunks["0,0"][:, 3] = 1
        search = build_search(chunks, 2, 1)
        self.assertIsNone(
            search.find_nearest_transition(search.builder.graph, (0.5, 0.5), "0,0")
        )

    def test_same_chunk_direct_path_is_empty(self):
        search = build_search(open_chunks(2, 1), 2, 1)
        self.assertEqual(search.find_path((0.5, 0.5), (3.5, 3.5)), [])

    def test_cross_chunk_path(self):
        search = build_search(open_chunks(2, 1), 2, 1)
        self.assertEqual(search.find_path((0.5, 0.5), (7.5, 0.5)), ["0,0|1,0#0"])


if __name__ == "__main__":
    unittest.main()
