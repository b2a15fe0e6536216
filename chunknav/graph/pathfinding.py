"""
Hierarchical search over the transition graph.

A query between two world positions is answered in three steps: a direct
local search when both positions share a chunk, selection of the nearest
usable transition point in the start and end chunks, and a weighted graph
search between those two points.
"""

import heapq
import itertools
import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Set

from ..chunk import ChunkSource
from ..coordinates import ChunkLayout
from ..heuristics import Heuristic
from ..pathfinding.local_pathfinder import LocalPathfinder
from .graph_builder import TransitionGraphBuilder
from .transition_graph import TransitionGraph, TransitionPoint

logger = logging.getLogger(__name__)


class PathfindingAlgorithm(IntEnum):
    """
    Graph search algorithms for the transition graph.

    DIJKSTRA (0):
        - Explores purely by accumulated edge weight
        - Used when no hierarchical heuristic is configured

    A_STAR (1):
        - Guided by the configured heuristic over border-collapsed point
          positions (``TransitionGraph.search_tile``)
        - Optimal with heuristic_weight 1.0 and manhattan or euclidean for
          4-directional movement, or diagonal (Chebyshev) when diagonal
          steps are allowed; other combinations can overestimate
    """

    DIJKSTRA = 0
    A_STAR = 1


@dataclass
class PathResult:
    """Result of a transition graph search."""

    path: List[str]  # Transition point ids from start to goal
    total_cost: float
    success: bool
    nodes_explored: int


def _failed(nodes_explored: int = 0) -> PathResult:
    return PathResult(
        path=[], total_cost=float("inf"), success=False, nodes_explored=nodes_explored
    )


class HierarchicalSearch:
    """
    Finds transition point sequences between world positions.

    Args:
        layout: Chunk dimensions and tile size
        chunk_source: Provider adapter for chunk walkability
        local_pathfinder: Used for same-chunk queries and entry/exit checks
        builder: Owner of the transition graph
        heuristic: Heuristic for A* over the graph, or None for Dijkstra
        heuristic_weight: Multiplier applied to the heuristic
    """

    def __init__(
        self,
        layout: ChunkLayout,
        chunk_source: ChunkSource,
        local_pathfinder: LocalPathfinder,
        builder: TransitionGraphBuilder,
        heuristic: Optional[Heuristic] = None,
        heuristic_weight: float = 1.0,
    ):
        self.layout = layout
        self.chunk_source = chunk_source
        self.local_pathfinder = local_pathfinder
        self.builder = builder
        self.heuristic = heuristic
        self.heuristic_weight = heuristic_weight

    @property
    def algorithm(self) -> PathfindingAlgorithm:
        if self.heuristic is None:
            return PathfindingAlgorithm.DIJKSTRA
        return PathfindingAlgorithm.A_STAR

    def find_path(
        self, start: Sequence[float], end: Sequence[float]
    ) -> Optional[List[str]]:
        """
        Find the transition point sequence for a route from start to end.

        Returns:
            An empty list when a direct path inside a single chunk exists,
            the ordered point ids otherwise, or None when unreachable.
        """
        start_chunk = self.layout.chunk_id_at(start)
        end_chunk = self.layout.chunk_id_at(end)

        if start_chunk == end_chunk:
            if self._has_direct_path(start_chunk, start, end):
                logger.debug(f"Direct path inside chunk {start_chunk}")
                return []
            logger.debug(
                f"No direct path inside chunk {start_chunk}, trying transitions"
            )

        graph = self.builder.require_graph()

        entry = self.find_nearest_transition(graph, start, start_chunk)
        if entry is None:
            logger.debug(f"No usable transition point in start chunk {start_chunk}")
            return None

        exit_point = self.find_nearest_transition(graph, end, end_chunk)
        if exit_point is None:
            logger.debug(f"No usable transition point in end chunk {end_chunk}")
            return None

        result = self._search(graph, entry.id, exit_point.id)
        if not result.success:
            logger.debug(f"Transition graph has no route from {entry.id} to {exit_point.id}")
            return None

        logger.debug(
            f"Transition route {entry.id} -> {exit_point.id}: {len(result.path)} points, "
            f"cost {result.total_cost}, explored {result.nodes_explored}"
        )
        return result.path

    def find_transition_path(self, start_id: str, end_id: str) -> PathResult:
        """
        Search the graph between two point ids.

        Raises:
            StaleGraphError: If the graph is not built or an id is unknown.
        """
        graph = self.builder.require_graph()
        graph.require_point(start_id)
        graph.require_point(end_id)
        return self._search(graph, start_id, end_id)

    def find_nearest_transition(
        self, graph: TransitionGraph, position: Sequence[float], chunk_id: str
    ) -> Optional[TransitionPoint]:
        """
        Nearest usable transition point of a chunk.

        Points are tried in order of straight-line world distance (ties by
        id); the first non-stale point reachable by a local path from
        ``position`` wins.
        """
        chunk = self.chunk_source.get(chunk_id)
        if chunk is None:
            return None

        local_start = self.layout.to_local(position, chunk_id)
        candidates = []
        for point in graph.get_points_in_chunk(chunk_id):
            if point.stale:
                continue
            world = graph.world_position(point, chunk_id)
            distance = math.hypot(world[0] - position[0], world[1] - position[1])
            candidates.append((distance, point.id, point))

        for _, _, point in sorted(candidates, key=lambda c: (c[0], c[1])):
            local_point = graph.local_position(point, chunk_id)
            path = self.local_pathfinder.find_path(
                chunk, local_start, local_point, optimize=False
            )
            if path is not None:
                return point
        return None

    def _has_direct_path(
        self, chunk_id: str, start: Sequence[float], end: Sequence[float]
    ) -> bool:
        chunk = self.chunk_source.get(chunk_id)
        if chunk is None:
            return False
        path = self.local_pathfinder.find_path(
            chunk,
            self.layout.to_local(start, chunk_id),
            self.layout.to_local(end, chunk_id),
            optimize=False,
        )
        return path is not None

    def _search(self, graph: TransitionGraph, start_id: str, goal_id: str) -> PathResult:
        if start_id == goal_id:
            return PathResult(path=[start_id], total_cost=0.0, success=True, nodes_explored=1)

        if self.algorithm == PathfindingAlgorithm.A_STAR:
            return self._find_path_a_star(graph, start_id, goal_id)
        return self._find_path_dijkstra(graph, start_id, goal_id)

    def _estimate(self, graph: TransitionGraph, point_id: str, goal_tile) -> float:
        tile = graph.search_tile(graph.get_point(point_id))
        return self.heuristic_weight * self.heuristic(tile, goal_tile)

    def _find_path_a_star(
        self, graph: TransitionGraph, start_id: str, goal_id: str
    ) -> PathResult:
        goal_tile = graph.search_tile(graph.get_point(goal_id))
        counter = itertools.count()

        open_set = [(self._estimate(graph, start_id, goal_tile), next(counter), start_id)]
        g_costs: Dict[str, float] = {start_id: 0.0}
        parent_map: Dict[str, str] = {}
        closed_set: Set[str] = set()
        nodes_explored = 0

        while open_set:
            _, _, current = heapq.heappop(open_set)

            if current in closed_set:
                continue

            closed_set.add(current)
            nodes_explored += 1

            if current == goal_id:
                return PathResult(
                    path=self._reconstruct_path(parent_map, start_id, goal_id),
                    total_cost=g_costs[current],
                    success=True,
                    nodes_explored=nodes_explored,
                )

            for neighbor, weight in graph.neighbors(current):
                if neighbor in closed_set:
                    continue

                tentative_g = g_costs[current] + weight
                if neighbor not in g_costs or tentative_g < g_costs[neighbor]:
                    g_costs[neighbor] = tentative_g
                    parent_map[neighbor] = current
                    f_cost = tentative_g + self._estimate(graph, neighbor, goal_tile)
                    heapq.heappush(open_set, (f_cost, next(counter), neighbor))

        return _failed(nodes_explored)

    def _find_path_dijkstra(
        self, graph: TransitionGraph, start_id: str, goal_id: str
    ) -> PathResult:
        distances: Dict[str, float] = {start_id: 0.0}
        parent_map: Dict[str, str] = {}
        visited: Set[str] = set()
        counter = itertools.count()
        priority_queue = [(0.0, next(counter), start_id)]
        nodes_explored = 0

        while priority_queue:
            current_dist, _, current = heapq.heappop(priority_queue)

            if current in visited:
                continue

            visited.add(current)
            nodes_explored += 1

            if current == goal_id:
                return PathResult(
                    path=self._reconstruct_path(parent_map, start_id, goal_id),
                    total_cost=current_dist,
                    success=True,
                    nodes_explored=nodes_explored,
                )

            for neighbor, weight in graph.neighbors(current):
                if neighbor in visited:
                    continue

                new_distance = current_dist + weight
                if neighbor not in distances or new_distance < distances[neighbor]:
                    distances[neighbor] = new_distance
                    parent_map[neighbor] = current
                    heapq.heappush(priority_queue, (new_distance, next(counter), neighbor))

        return _failed(nodes_explored)

    def _reconstruct_path(
        self, parent_map: Dict[str, str], start_id: str, goal_id: str
    ) -> List[str]:
        path = [goal_id]
        current = goal_id
        while current != start_id:
            current = parent_map[current]
            path.append(current)
        path.reverse()
        return path
