"""Single-chunk grid search: A*, Jump Point Search and the strategy registry."""

from .astar_pathfinder import find_path_astar
from .grid_search import SearchOptions, expand_path, path_cost
from .jps_pathfinder import find_path_jps
from .local_pathfinder import (
    LocalPathfinder,
    LocalSearchAlgorithm,
    available_algorithms,
    get_algorithm,
    register_algorithm,
)

__all__ = [
    "LocalPathfinder",
    "LocalSearchAlgorithm",
    "SearchOptions",
    "available_algorithms",
    "expand_path",
    "find_path_astar",
    "find_path_jps",
    "get_algorithm",
    "path_cost",
    "register_algorithm",
]
