"""
Single-chunk pathfinding with pluggable search strategies.

A strategy is any callable ``(grid, start, end, options) -> path | None``
where ``grid`` is a boolean walkability array. ``astar`` and ``jps`` are
registered by default; others can be added with ``register_algorithm`` or
passed directly as callables.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..chunk import Chunk, to_walkability
from ..errors import ConfigError
from ..heuristics import Heuristic, HeuristicType, get_heuristic, heuristic_name
from .astar_pathfinder import find_path_astar
from .grid_search import SearchOptions, TilePos, expand_path, is_walkable, smooth_path
from .jps_pathfinder import find_path_jps

logger = logging.getLogger(__name__)

SearchStrategy = Callable[
    [np.ndarray, TilePos, TilePos, SearchOptions], Optional[List[TilePos]]
]


class LocalSearchAlgorithm(Enum):
    """Built-in local search strategies."""

    ASTAR = "astar"
    JPS = "jps"


_ALGORITHMS: Dict[str, SearchStrategy] = {
    LocalSearchAlgorithm.ASTAR.value: find_path_astar,
    LocalSearchAlgorithm.JPS.value: find_path_jps,
}


def register_algorithm(name: str, strategy: SearchStrategy) -> None:
    """Register a local search strategy under ``name``."""
    if not callable(strategy):
        raise ConfigError(f"Search strategy '{name}' must be callable")
    _ALGORITHMS[name] = strategy


def available_algorithms() -> List[str]:
    return sorted(_ALGORITHMS)


def get_algorithm(
    algorithm: Union[str, LocalSearchAlgorithm, SearchStrategy]
) -> Tuple[str, SearchStrategy]:
    """
    Resolve a strategy from a name, enum member or callable.

    Returns:
        Tuple of (display name, strategy callable)

    Raises:
        ConfigError: If a name is not registered.
    """
    if isinstance(algorithm, LocalSearchAlgorithm):
        algorithm = algorithm.value
    if isinstance(algorithm, str):
        try:
            return algorithm, _ALGORITHMS[algorithm]
        except KeyError:
            raise ConfigError(
                f"Unknown local algorithm '{algorithm}', "
                f"expected one of {available_algorithms()}"
            ) from None
    if callable(algorithm):
        return getattr(algorithm, "__name__", "custom"), algorithm
    raise ConfigError(f"Invalid local algorithm: {algorithm!r}")


class LocalPathfinder:
    """
    Finds tile paths inside one chunk using the configured strategy.

    Paths returned by ``find_path`` are unit-step tile sequences; output
    from custom strategies is expanded if it skips tiles. With
    ``optimize_path`` the unit-step path is then smoothed down to
    line-of-sight waypoints.
    """

    def __init__(
        self,
        algorithm: Union[str, LocalSearchAlgorithm, SearchStrategy] = "astar",
        heuristic: Union[str, HeuristicType, Heuristic] = "manhattan",
        heuristic_weight: float = 1.0,
        allow_diagonal: bool = False,
        optimize_path: bool = False,
    ):
        if heuristic_weight < 1.0:
            raise ConfigError(
                f"heuristic_weight must be >= 1.0, got {heuristic_weight}"
            )

        self.algorithm_name, self._strategy = get_algorithm(algorithm)
        self._builtin = self._strategy in (find_path_astar, find_path_jps)
        self.heuristic_name = heuristic_name(heuristic)
        self.options = SearchOptions(
            heuristic=get_heuristic(heuristic),
            heuristic_weight=float(heuristic_weight),
            allow_diagonal=bool(allow_diagonal),
        )
        self.optimize_path = bool(optimize_path)

    @classmethod
    def from_config(cls, config) -> "LocalPathfinder":
        return cls(
            algorithm=config.local_algorithm,
            heuristic=config.local_heuristic,
            heuristic_weight=config.heuristic_weight,
            allow_diagonal=config.allow_diagonal,
            optimize_path=config.optimize_path,
        )

    def find_path(
        self,
        grid: Any,
        start: Sequence[int],
        end: Sequence[int],
        optimize: Optional[bool] = None,
    ) -> Optional[List[TilePos]]:
        """
        Find a local tile path.

        Args:
            grid: A Chunk, a boolean walkability array, or tile values (0 = walkable)
            start: Local start tile (x, y)
            end: Local end tile (x, y)
            optimize: Smooth the path; None uses the ``optimize_path`` setting

        Returns:
            Tile list from start to end inclusive, or None if there is no path.
        """
        walkable = grid.walkable if isinstance(grid, Chunk) else to_walkability(grid)
        start = (int(start[0]), int(start[1]))
        end = (int(end[0]), int(end[1]))

        path = self._strategy(walkable, start, end, self.options)
        if not path:
            return None
        if not self._builtin:
            path = expand_path(path)
        smooth = self.optimize_path if optimize is None else optimize
        if smooth:
            path = smooth_path(walkable, path)
        return path

    @staticmethod
    def is_walkable(grid: Any, tile: Sequence[int]) -> bool:
        walkable = grid.walkable if isinstance(grid, Chunk) else to_walkability(grid)
        return is_walkable(walkable, tile)

    def __repr__(self) -> str:
        return (
            f"LocalPathfinder(algorithm={self.algorithm_name!r}, "
            f"heuristic={self.heuristic_name!r}, "
            f"weight={self.options.heuristic_weight}, "
            f"diagonal={self.options.allow_diagonal}, "
            f"optimize={self.optimize_path})"
        )
