"""
Hierarchical pathfinding for chunked tile worlds.
"""

from .config import PathfindingConfig, TransitionPointMethod
from .coordinates import ChunkLayout, make_chunk_id, parse_chunk_id
from .errors import (
    ConfigError,
    OutOfBoundsError,
    ParseError,
    PathfindingError,
    StaleGraphError,
)
from .graph import (
    GraphStats,
    PathSegment,
    TransitionGraph,
    TransitionPoint,
)
from .heuristics import HeuristicType, register_heuristic
from .pathfinder import HierarchicalPathfinder
from .pathfinding import LocalPathfinder, register_algorithm
from .segment_walker import CalculatedSegment, SegmentWalker

__all__ = [
    # Facade
    "HierarchicalPathfinder",
    "PathfindingConfig",
    "TransitionPointMethod",
    "SegmentWalker",
    "CalculatedSegment",
    # Data
    "ChunkLayout",
    "GraphStats",
    "PathSegment",
    "TransitionGraph",
    "TransitionPoint",
    "make_chunk_id",
    "parse_chunk_id",
    # Strategies
    "HeuristicType",
    "LocalPathfinder",
    "register_algorithm",
    "register_heuristic",
    # Errors
    "ConfigError",
    "OutOfBoundsError",
    "ParseError",
    "PathfindingError",
    "StaleGraphError",
]
