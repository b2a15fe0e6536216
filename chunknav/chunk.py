"""
Chunk model and adapter around the caller's chunk data provider.

Providers return a 2D array-like of tile values indexed ``[y][x]`` where 0 is
walkable and any other value is blocked. Boolean arrays are taken as
walkability masks as-is. ``None`` means the chunk is missing and is treated
as fully blocked.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from .coordinates import parse_chunk_id
from .errors import ConfigError

logger = logging.getLogger(__name__)

ChunkDataProvider = Callable[[str], Optional[Any]]


def to_walkability(grid: Any) -> np.ndarray:
    """Convert provider tile data into a boolean walkability mask."""
    array = np.asarray(grid)
    if array.dtype == np.bool_:
        return array.copy()
    return array == 0


@dataclass(frozen=True)
class Chunk:
    """Immutable snapshot of one chunk's walkability."""

    chunk_id: str
    walkable: np.ndarray  # shape (height, width), True = walkable

    @property
    def width(self) -> int:
        return int(self.walkable.shape[1])

    @property
    def height(self) -> int:
        return int(self.walkable.shape[0])

    @property
    def coords(self):
        return parse_chunk_id(self.chunk_id)

    def is_walkable(self, local: Sequence[int]) -> bool:
        x, y = local[0], local[1]
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return False
        return bool(self.walkable[y, x])


class ChunkSource:
    """
    Fetches chunk snapshots from a provider and validates their shape.

    A source can optionally memoize chunks for the duration of one graph
    build; queries always go to the provider.
    """

    def __init__(
        self, provider: ChunkDataProvider, chunk_width: int, chunk_height: int
    ):
        if not callable(provider):
            raise ConfigError("Chunk data provider must be callable")
        self.provider = provider
        self.chunk_width = chunk_width
        self.chunk_height = chunk_height
        self._memo: Optional[Dict[str, Optional[Chunk]]] = None

    def get(self, chunk_id: str) -> Optional[Chunk]:
        """
        Return the chunk snapshot for ``chunk_id``, or None if the provider
        has no data for it.

        Raises:
            ConfigError: If the provider returns a grid of the wrong shape.
        """
        if self._memo is not None and chunk_id in self._memo:
            return self._memo[chunk_id]

        chunk = self._load(chunk_id)
        if self._memo is not None:
            self._memo[chunk_id] = chunk
        return chunk

    def begin_snapshot(self) -> None:
        """Start memoizing chunks until end_snapshot() is called."""
        self._memo = {}

    def end_snapshot(self) -> None:
        self._memo = None

    def _load(self, chunk_id: str) -> Optional[Chunk]:
        grid = self.provider(chunk_id)
        if grid is None:
            logger.debug(f"No chunk data for {chunk_id}, treating as blocked")
            return None

        walkable = to_walkability(grid)
        expected = (self.chunk_height, self.chunk_width)
        if walkable.shape != expected:
            raise ConfigError(
                f"Chunk {chunk_id} has shape {walkable.shape}, expected {expected}"
            )
        return Chunk(chunk_id=chunk_id, walkable=walkable)
