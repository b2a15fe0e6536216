"""
Border scanning and transition point placement.

For every pair of 4-adjacent chunks the shared border is scanned for indices
where the facing tiles on both sides are walkable. Contiguous runs of such
indices form segments, and transition points are placed inside each segment
according to the configured method.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

from ..chunk import Chunk, ChunkSource
from ..config import TransitionPointMethod
from ..coordinates import ChunkLayout, make_chunk_id, parse_chunk_id
from .transition_graph import TransitionPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BorderSegment:
    """A maximal run of passable indices on one chunk border (inclusive)."""

    chunks: Tuple[str, str]
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def center_positions(start: int, end: int, max_points: int) -> List[int]:
    """
    Spread up to ``max_points`` positions evenly over [start, end].

    The segment is cut into equal bins and each point takes the (floored)
    center of its bin. A single point lands on ``(start + end) // 2``.
    """
    length = end - start + 1
    count = min(max_points, length)
    return [
        start + ((2 * i + 1) * length - count) // (2 * count) for i in range(count)
    ]


def margin_positions(start: int, end: int, margin: int) -> List[int]:
    """One position per full ``margin``-wide window, centered in the window."""
    length = end - start + 1
    return [start + j * margin + margin // 2 for j in range(length // margin)]


def passable_runs(passable: np.ndarray) -> Iterator[Tuple[int, int]]:
    """Yield (start, end) of each run of True values, inclusive."""
    run_start = None
    for index, value in enumerate(passable):
        if value and run_start is None:
            run_start = index
        elif not value and run_start is not None:
            yield run_start, index - 1
            run_start = None
    if run_start is not None:
        yield run_start, len(passable) - 1


def facing_tiles(first: Chunk, second: Chunk) -> np.ndarray:
    """
    Passability of the border between two chunks.

    ``second`` must be the right or bottom neighbor of ``first``.
    """
    first_x, first_y = parse_chunk_id(first.chunk_id)
    second_x, second_y = parse_chunk_id(second.chunk_id)

    if second_x == first_x + 1 and second_y == first_y:
        return first.walkable[:, -1] & second.walkable[:, 0]
    if second_y == first_y + 1 and second_x == first_x:
        return first.walkable[-1, :] & second.walkable[0, :]
    raise ValueError(
        f"Chunk {second.chunk_id} is not the right or bottom neighbor of {first.chunk_id}"
    )


class BorderScanner:
    """Generates transition points from chunk data."""

    def __init__(
        self,
        layout: ChunkLayout,
        grid_width: int,
        grid_height: int,
        method: TransitionPointMethod = TransitionPointMethod.CENTER,
        max_points: int = 3,
        margin: int = 4,
    ):
        self.layout = layout
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.method = method
        self.max_points = max_points
        self.margin = margin

    def adjacent_pairs(self) -> Iterator[Tuple[str, str]]:
        """Every right and bottom neighbor pair, row by row."""
        for chunk_y in range(self.grid_height):
            for chunk_x in range(self.grid_width):
                current = make_chunk_id(chunk_x, chunk_y)
                if chunk_x + 1 < self.grid_width:
                    yield current, make_chunk_id(chunk_x + 1, chunk_y)
                if chunk_y + 1 < self.grid_height:
                    yield current, make_chunk_id(chunk_x, chunk_y + 1)

    def scan_border(
        self, first: Optional[Chunk], second: Optional[Chunk]
    ) -> List[BorderSegment]:
        if first is None or second is None:
            return []
        chunks = (first.chunk_id, second.chunk_id)
        return [
            BorderSegment(chunks, start, end)
            for start, end in passable_runs(facing_tiles(first, second))
        ]

    def place_points(self, segment: BorderSegment) -> List[int]:
        if self.method == TransitionPointMethod.MARGIN:
            return margin_positions(segment.start, segment.end, self.margin)
        return center_positions(segment.start, segment.end, self.max_points)

    def scan(self, source: ChunkSource) -> List[TransitionPoint]:
        """Scan all borders and return the generated points in a stable order."""
        points = []
        segment_count = 0

        for first_id, second_id in self.adjacent_pairs():
            segments = self.scan_border(source.get(first_id), source.get(second_id))
            segment_count += len(segments)
            for segment in segments:
                for position in self.place_points(segment):
                    points.append(TransitionPoint.create(first_id, second_id, position))

        logger.debug(
            f"Border scan found {segment_count} passable segments, "
            f"placed {len(points)} points ({self.method.value} mode)"
        )
        return points
