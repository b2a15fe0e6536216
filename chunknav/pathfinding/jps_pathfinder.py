"""
Jump Point Search over a single chunk's walkability grid.

Two variants are provided behind one entry point:

- 8-connected, where diagonal steps are only allowed when both orthogonal
  tiles are walkable (the same corner rule the A* search uses)
- 4-connected, used when diagonals are disabled, where vertical runs scan
  sideways for horizontal jump points

The search runs A* over jump points with the same ``(f, h, insertion order)``
ordering as ``astar_pathfinder``. Jump points are expanded to unit steps
before returning, so callers always receive contiguous tile paths.
"""

import heapq
import itertools
import logging
from typing import Callable, Dict, List, Optional, Set

import numpy as np

from .grid_search import (
    SearchOptions,
    TilePos,
    expand_path,
    iter_neighbors,
    reconstruct_path,
    step_cost,
    validate_endpoints,
)

logger = logging.getLogger(__name__)


def _direction(value: int) -> int:
    return (value > 0) - (value < 0)


class _JumpScanner:
    """Jump and neighbor-pruning rules for one search."""

    def __init__(self, grid: np.ndarray, end: TilePos, allow_diagonal: bool):
        self.grid = grid
        self.height, self.width = grid.shape
        self.end = end
        self.allow_diagonal = allow_diagonal

    def walkable(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and bool(self.grid[y, x])

    def jump(self, x: int, y: int, dx: int, dy: int) -> Optional[TilePos]:
        """Jump from (x, y) in direction (dx, dy); (x, y) itself is not tested."""
        if dx != 0 and dy != 0:
            return self._jump_diagonal(x, y, dx, dy)
        return self._jump_straight(x, y, dx, dy)

    def _jump_straight(self, x: int, y: int, dx: int, dy: int) -> Optional[TilePos]:
        walkable = self.walkable
        while True:
            x += dx
            y += dy
            if not walkable(x, y):
                return None
            if (x, y) == self.end:
                return x, y

            if dx != 0:
                # Forced neighbor above/below that was shadowed on the previous tile
                if (walkable(x, y - 1) and not walkable(x - dx, y - 1)) or (
                    walkable(x, y + 1) and not walkable(x - dx, y + 1)
                ):
                    return x, y
            else:
                if (walkable(x - 1, y) and not walkable(x - 1, y - dy)) or (
                    walkable(x + 1, y) and not walkable(x + 1, y - dy)
                ):
                    return x, y
                if not self.allow_diagonal:
                    # Without diagonals a vertical run is the only way to turn
                    if self._jump_straight(x, y, 1, 0) or self._jump_straight(
                        x, y, -1, 0
                    ):
                        return x, y

    def _jump_diagonal(self, x: int, y: int, dx: int, dy: int) -> Optional[TilePos]:
        walkable = self.walkable
        while True:
            if not (walkable(x + dx, y) and walkable(x, y + dy)):
                return None
            x += dx
            y += dy
            if not walkable(x, y):
                return None
            if (x, y) == self.end:
                return x, y
            if self._jump_straight(x, y, dx, 0) or self._jump_straight(x, y, 0, dy):
                return x, y

    def pruned_neighbors(self, tile: TilePos, parent: Optional[TilePos]) -> List[TilePos]:
        """Neighbors worth jumping towards given the direction of travel."""
        x, y = tile
        if parent is None:
            return [n for n, _ in iter_neighbors(self.grid, tile, self.allow_diagonal)]

        dx = _direction(x - parent[0])
        dy = _direction(y - parent[1])
        walkable = self.walkable
        neighbors = []

        if dx != 0 and dy != 0:
            vertical_open = walkable(x, y + dy)
            horizontal_open = walkable(x + dx, y)
            if vertical_open:
                neighbors.append((x, y + dy))
            if horizontal_open:
                neighbors.append((x + dx, y))
            if vertical_open and horizontal_open:
                neighbors.append((x + dx, y + dy))
            return neighbors

        if not self.allow_diagonal:
            if dx != 0:
                candidates = [(x, y - 1), (x, y + 1), (x + dx, y)]
            else:
                candidates = [(x - 1, y), (x + 1, y), (x, y + dy)]
            return [c for c in candidates if walkable(*c)]

        if dx != 0:
            forward_open = walkable(x + dx, y)
            below_open = walkable(x, y + 1)
            above_open = walkable(x, y - 1)
            if forward_open:
                neighbors.append((x + dx, y))
                if below_open:
                    neighbors.append((x + dx, y + 1))
                if above_open:
                    neighbors.append((x + dx, y - 1))
            if below_open:
                neighbors.append((x, y + 1))
            if above_open:
                neighbors.append((x, y - 1))
        else:
            forward_open = walkable(x, y + dy)
            right_open = walkable(x + 1, y)
            left_open = walkable(x - 1, y)
            if forward_open:
                neighbors.append((x, y + dy))
                if right_open:
                    neighbors.append((x + 1, y + dy))
                if left_open:
                    neighbors.append((x - 1, y + dy))
            if right_open:
                neighbors.append((x + 1, y))
            if left_open:
                neighbors.append((x - 1, y))
        return neighbors


def find_path_jps(
    grid: np.ndarray, start: TilePos, end: TilePos, options: SearchOptions
) -> Optional[List[TilePos]]:
    """
    Find a path from start to end with Jump Point Search.

    Args:
        grid: Boolean walkability grid indexed [y, x]
        start: Local start tile (x, y)
        end: Local end tile (x, y)
        options: Heuristic, weight and diagonal settings

    Returns:
        Unit-step tile list from start to end inclusive, or None.
    """
    start = (int(start[0]), int(start[1]))
    end = (int(end[0]), int(end[1]))

    trivial = validate_endpoints(grid, start, end)
    if trivial is not None:
        return trivial or None

    scanner = _JumpScanner(grid, end, options.allow_diagonal)
    heuristic: Callable = options.heuristic
    weight = options.heuristic_weight
    counter = itertools.count()

    h_start = heuristic(start, end)
    open_set = [(weight * h_start, h_start, next(counter), start)]
    g_costs: Dict[TilePos, float] = {start: 0.0}
    parent_map: Dict[TilePos, TilePos] = {}
    closed_set: Set[TilePos] = set()

    while open_set:
        _, _, _, current = heapq.heappop(open_set)

        if current in closed_set:
            continue

        if current == end:
            jump_points = reconstruct_path(parent_map, start, end)
            logger.debug(
                f"JPS reached {end} from {start} via {len(jump_points)} jump points"
            )
            return expand_path(jump_points)

        closed_set.add(current)
        current_g = g_costs[current]

        for neighbor in scanner.pruned_neighbors(current, parent_map.get(current)):
            jump_point = scanner.jump(
                current[0],
                current[1],
                neighbor[0] - current[0],
                neighbor[1] - current[1],
            )
            if jump_point is None or jump_point in closed_set:
                continue

            tentative_g = current_g + step_cost(current, jump_point)
            if jump_point not in g_costs or tentative_g < g_costs[jump_point]:
                g_costs[jump_point] = tentative_g
                parent_map[jump_point] = current
                h_cost = heuristic(jump_point, end)
                heapq.heappush(
                    open_set,
                    (tentative_g + weight * h_cost, h_cost, next(counter), jump_point),
                )

    return None
