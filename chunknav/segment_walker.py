"""
Stepwise expansion of path segments into tile paths.

A segment list only names the waypoint to reach in each chunk. The walker
turns segments into concrete local tile paths one at a time, so a mover can
start walking before the whole route is materialized.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .coordinates import TilePos, WorldPos
from .graph.segment_builder import PathSegment
from .pathfinder import HierarchicalPathfinder

logger = logging.getLogger(__name__)


@dataclass
class CalculatedSegment:
    """A segment together with the tile path that reaches it."""

    index: int
    chunk: str
    start: WorldPos
    end: WorldPos
    local_path: Optional[List[TilePos]]
    world_path: List[WorldPos] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.local_path is not None


class SegmentWalker:
    """Computes the local path of each segment on demand."""

    def __init__(self, pathfinder: HierarchicalPathfinder):
        self.pathfinder = pathfinder
        self.segments: List[PathSegment] = []
        self.start: Optional[WorldPos] = None
        self.end: Optional[WorldPos] = None
        self._calculated: List[CalculatedSegment] = []

    def set_path(
        self,
        segments: Sequence[PathSegment],
        start: Sequence[float],
        end: Sequence[float],
    ) -> None:
        self.segments = list(segments)
        self.start = (start[0], start[1])
        self.end = (end[0], end[1])
        self._calculated = []

    @property
    def current_index(self) -> int:
        return len(self._calculated)

    @property
    def is_complete(self) -> bool:
        return bool(self.segments) and self.current_index >= len(self.segments)

    @property
    def progress(self) -> str:
        return f"{self.current_index}/{len(self.segments)}"

    @property
    def calculated_segments(self) -> List[CalculatedSegment]:
        return list(self._calculated)

    def calculate_next(self) -> Optional[CalculatedSegment]:
        """
        Compute the tile path for the next segment.

        The path starts at the previous segment's waypoint (or the route
        start) and ends at this segment's waypoint, both taken inside this
        segment's chunk.

        Returns:
            The calculated segment, or None once every segment is done.
        """
        if self.start is None or self.is_complete:
            return None

        index = self.current_index
        segment = self.segments[index]
        from_position = self.start if index == 0 else self.segments[index - 1].position

        local_path = self.pathfinder.find_local_path(
            segment.chunk, from_position, segment.position
        )
        world_path = []
        if local_path is not None:
            layout = self.pathfinder.layout
            world_path = [layout.to_world(tile, segment.chunk) for tile in local_path]
        else:
            logger.warning(
                f"No local path in chunk {segment.chunk} for segment {index + 1}/"
                f"{len(self.segments)}"
            )

        calculated = CalculatedSegment(
            index=index,
            chunk=segment.chunk,
            start=(from_position[0], from_position[1]),
            end=segment.position,
            local_path=local_path,
            world_path=world_path,
        )
        self._calculated.append(calculated)
        return calculated

    def calculate_all(self) -> List[CalculatedSegment]:
        while self.calculate_next() is not None:
            pass
        return self.calculated_segments

    def reset(self) -> None:
        """Forget calculated segments but keep the current route."""
        self._calculated = []

    def world_path(self) -> List[WorldPos]:
        """Concatenated world path of all calculated segments."""
        path: List[Tuple[float, float]] = []
        for calculated in self._calculated:
            for point in calculated.world_path:
                if not path or path[-1] != point:
                    path.append(point)
        return path
