"""
A* search over a single chunk's walkability grid.

Open-set ordering is ``(f, h, insertion order)``: among equal f scores the
tile closer to the goal by the heuristic wins, and remaining ties go to the
tile pushed first. Combined with the fixed neighbor order of
``iter_neighbors`` this makes results reproducible.
"""

import heapq
import itertools
import logging
from typing import Dict, List, Optional, Set

import numpy as np

from .grid_search import (
    SearchOptions,
    TilePos,
    iter_neighbors,
    reconstruct_path,
    validate_endpoints,
)

logger = logging.getLogger(__name__)


def find_path_astar(
    grid: np.ndarray, start: TilePos, end: TilePos, options: SearchOptions
) -> Optional[List[TilePos]]:
    """
    Find a path from start to end with A*.

    Args:
        grid: Boolean walkability grid indexed [y, x]
        start: Local start tile (x, y)
        end: Local end tile (x, y)
        options: Heuristic, weight and diagonal settings

    Returns:
        Unit-step tile list from start to end inclusive, or None if either
        endpoint is blocked or the end is unreachable.
    """
    start = (int(start[0]), int(start[1]))
    end = (int(end[0]), int(end[1]))

    trivial = validate_endpoints(grid, start, end)
    if trivial is not None:
        return trivial or None

    heuristic = options.heuristic
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
            logger.debug(
                f"A* reached {end} from {start} after expanding {len(closed_set)} tiles"
            )
            return reconstruct_path(parent_map, start, end)

        closed_set.add(current)
        current_g = g_costs[current]

        for neighbor, cost in iter_neighbors(grid, current, options.allow_diagonal):
            if neighbor in closed_set:
                continue

            tentative_g = current_g + cost
            if neighbor not in g_costs or tentative_g < g_costs[neighbor]:
                g_costs[neighbor] = tentative_g
                parent_map[neighbor] = current
                h_cost = heuristic(neighbor, end)
                heapq.heappush(
                    open_set,
                    (tentative_g + weight * h_cost, h_cost, next(counter), neighbor),
                )

    return None
