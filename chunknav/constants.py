"""
Constants for the chunk-based pathfinding system.

Centralizes default configuration values and movement tables so that the
search, builder and config modules agree on them.
"""

import math
from typing import Tuple

# =============================================================================
# PATHFINDING CONSTANTS
# =============================================================================


class PathfindingDefaults:
    """Default values for pathfinding configuration."""

    # Search parameters
    HEURISTIC_WEIGHT: float = 1.0
    LOCAL_ALGORITHM: str = "astar"
    LOCAL_HEURISTIC: str = "manhattan"
    HIERARCHICAL_HEURISTIC: str = "manhattan"
    ALLOW_DIAGONAL: bool = False
    OPTIMIZE_PATH: bool = False

    # World layout
    TILE_SIZE: int = 16
    GRID_WIDTH: int = 8
    GRID_HEIGHT: int = 6
    CHUNK_WIDTH: int = 11
    CHUNK_HEIGHT: int = 11

    # Transition point placement
    MAX_TRANSITION_POINTS: int = 3
    TRANSITION_POINT_METHOD: str = "center"
    TRANSITION_POINT_MARGIN: int = 4


# =============================================================================
# MOVEMENT CONSTANTS
# =============================================================================

STRAIGHT_COST: float = 1.0
DIAGONAL_COST: float = math.sqrt(2.0)

# Expansion order matters for deterministic results: N, E, S, W
CARDINAL_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, -1),
    (1, 0),
    (0, 1),
    (-1, 0),
)

# NE, SE, SW, NW
DIAGONAL_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, -1),
    (1, 1),
    (-1, 1),
    (-1, -1),
)

# Chunk id separator, e.g. "3,2"
CHUNK_ID_SEPARATOR: str = ","

# Transition point id layout: "<chunkA>|<chunkB>#<position>"
POINT_CHUNK_SEPARATOR: str = "|"
POINT_POSITION_SEPARATOR: str = "#"
