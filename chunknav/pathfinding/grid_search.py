"""
Shared building blocks for single-chunk grid searches.

Grids are boolean numpy arrays of shape ``(height, width)`` indexed
``[y, x]`` with True meaning walkable. Tiles are ``(x, y)`` tuples.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..constants import (
    CARDINAL_DIRECTIONS,
    DIAGONAL_COST,
    DIAGONAL_DIRECTIONS,
    STRAIGHT_COST,
)
from ..heuristics import Heuristic, manhattan

TilePos = Tuple[int, int]


@dataclass(frozen=True)
class SearchOptions:
    """Per-search parameters handed to every local search strategy."""

    heuristic: Heuristic = manhattan
    heuristic_weight: float = 1.0
    allow_diagonal: bool = False


def is_walkable(grid: np.ndarray, tile: Sequence[int]) -> bool:
    """True if ``tile`` is inside the grid and walkable."""
    x, y = tile[0], tile[1]
    height, width = grid.shape
    if x < 0 or y < 0 or x >= width or y >= height:
        return False
    return bool(grid[y, x])


def iter_neighbors(
    grid: np.ndarray, tile: TilePos, allow_diagonal: bool
) -> Iterator[Tuple[TilePos, float]]:
    """
    Yield walkable neighbors of ``tile`` with their step cost.

    Cardinal neighbors come first in N, E, S, W order, then diagonals in
    NE, SE, SW, NW order. A diagonal step requires both orthogonal tiles it
    passes between to be walkable, so paths never cut corners.
    """
    x, y = tile
    for dx, dy in CARDINAL_DIRECTIONS:
        neighbor = (x + dx, y + dy)
        if is_walkable(grid, neighbor):
            yield neighbor, STRAIGHT_COST

    if not allow_diagonal:
        return

    for dx, dy in DIAGONAL_DIRECTIONS:
        neighbor = (x + dx, y + dy)
        if (
            is_walkable(grid, neighbor)
            and is_walkable(grid, (x + dx, y))
            and is_walkable(grid, (x, y + dy))
        ):
            yield neighbor, DIAGONAL_COST


def step_cost(a: Sequence[int], b: Sequence[int]) -> float:
    """Cost of a straight or pure-diagonal run from ``a`` to ``b``."""
    dx = abs(b[0] - a[0])
    dy = abs(b[1] - a[1])
    straight = max(dx, dy) - min(dx, dy)
    return straight * STRAIGHT_COST + min(dx, dy) * DIAGONAL_COST


def path_cost(path: Sequence[Sequence[int]]) -> float:
    """Total movement cost of a path made of straight/diagonal runs."""
    return sum(step_cost(path[i], path[i + 1]) for i in range(len(path) - 1))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def expand_path(points: Sequence[Sequence[int]]) -> List[TilePos]:
    """
    Expand a path of straight/diagonal runs into unit steps.

    Consecutive points must lie on a common row, column or diagonal.
    """
    if not points:
        return []

    expanded = [tuple(points[0])]
    for target in points[1:]:
        tx, ty = target[0], target[1]
        x, y = expanded[-1]
        dx = _sign(tx - x)
        dy = _sign(ty - y)
        while (x, y) != (tx, ty):
            x += dx
            y += dy
            expanded.append((x, y))
    return expanded


def has_line_of_sight(grid: np.ndarray, a: Sequence[int], b: Sequence[int]) -> bool:
    """
    True if every tile on the Bresenham line from ``a`` to ``b`` is walkable.

    Where the line moves diagonally, both orthogonal tiles must be walkable
    as well, the same corner rule ``iter_neighbors`` applies.
    """
    x, y = a[0], a[1]
    end_x, end_y = b[0], b[1]
    dx = abs(end_x - x)
    dy = abs(end_y - y)
    sx = 1 if x < end_x else -1
    sy = 1 if y < end_y else -1
    err = dx - dy

    while True:
        if not is_walkable(grid, (x, y)):
            return False
        if x == end_x and y == end_y:
            return True

        e2 = 2 * err
        step_x = e2 > -dy
        step_y = e2 < dx
        if step_x and step_y and not (
            is_walkable(grid, (x + sx, y)) and is_walkable(grid, (x, y + sy))
        ):
            return False
        if step_x:
            err -= dy
            x += sx
        if step_y:
            err += dx
            y += sy


def smooth_path(grid: np.ndarray, path: Sequence[TilePos]) -> List[TilePos]:
    """
    Drop waypoints that a straight line can skip.

    From each kept waypoint, the walk jumps to the furthest following tile
    still in line of sight, stopping at the first tile that is not. The
    result keeps both endpoints but is no longer a unit-step path.
    """
    if len(path) <= 2:
        return list(path)

    smoothed = [path[0]]
    current = 0
    while current < len(path) - 1:
        furthest = current + 1
        for index in range(current + 2, len(path)):
            if not has_line_of_sight(grid, path[current], path[index]):
                break
            furthest = index
        smoothed.append(path[furthest])
        current = furthest
    return smoothed


def reconstruct_path(
    parent_map: Dict[TilePos, TilePos], start: TilePos, goal: TilePos
) -> List[TilePos]:
    """Walk parent links back from goal to start."""
    path = [goal]
    current = goal
    while current != start:
        current = parent_map[current]
        path.append(current)
    path.reverse()
    return path


def validate_endpoints(
    grid: np.ndarray, start: TilePos, end: TilePos
) -> Optional[List[TilePos]]:
    """
    Common pre-checks for all strategies.

    Returns ``[start]`` when start equals end and is walkable, an empty list
    when either endpoint is unusable, and None when a search is needed.
    """
    if not is_walkable(grid, start) or not is_walkable(grid, end):
        return []
    if start == end:
        return [start]
    return None
