"""
Conversion of transition point sequences into path segments.

A segment is the waypoint a mover should reach while traversing one chunk.
The builder projects each transition point into the chunk the route uses to
reach it and trims waypoints that would only bounce inside the start or end
chunk.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..coordinates import ChunkLayout
from ..errors import StaleGraphError
from .transition_graph import TransitionGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathSegment:
    """Waypoint to reach inside ``chunk``, in world units."""

    chunk: str
    position: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        return {"chunk": self.chunk, "position": self.position}


class PathSegmentBuilder:
    """Builds the ordered segment list for one query."""

    def __init__(self, layout: ChunkLayout):
        self.layout = layout

    def build_segments(
        self,
        start: Sequence[float],
        end: Sequence[float],
        node_ids: Sequence[str],
        graph: Optional[TransitionGraph] = None,
    ) -> List[PathSegment]:
        """
        Build segments from start to end through the given transition points.

        Args:
            start: World start position
            end: World end position
            node_ids: Transition point ids from the hierarchical search
            graph: Graph the ids belong to; required unless node_ids is empty

        Returns:
            Segments whose first chunk is the start chunk and last chunk is
            the end chunk.

        Raises:
            StaleGraphError: If an id is not in the graph or two consecutive
                ids are not connected.
        """
        start_chunk = self.layout.chunk_id_at(start)
        end_chunk = self.layout.chunk_id_at(end)
        end_position = (end[0], end[1])

        if not node_ids:
            return [PathSegment(start_chunk, end_position)]

        if graph is None:
            raise StaleGraphError("A transition graph is required to resolve point ids")

        nodes = [graph.require_point(node_id) for node_id in node_ids]

        # The first point is redundant when the route leaves it through the start chunk
        if (
            len(nodes) >= 2
            and nodes[1].touches(start_chunk)
            and graph.connecting_chunk(nodes[0].id, nodes[1].id) == start_chunk
        ):
            nodes = nodes[1:]

        segments = []
        previous = None
        for node in nodes:
            if previous is None:
                chunk_id = start_chunk
            else:
                chunk_id = graph.connecting_chunk(previous.id, node.id)

            position = graph.world_position(node, chunk_id)
            if position is None:
                raise StaleGraphError(
                    f"Transition point {node.id} does not border chunk {chunk_id}"
                )
            segments.append(PathSegment(chunk_id, position))
            previous = node

        segments.append(PathSegment(end_chunk, end_position))

        # A waypoint already inside the end chunk only adds a detour
        if len(segments) >= 2 and segments[-2].chunk == end_chunk:
            del segments[-2]

        deduplicated = [segments[0]]
        for segment in segments[1:]:
            if segment != deduplicated[-1]:
                deduplicated.append(segment)

        logger.debug(
            f"Built {len(deduplicated)} segments from {len(node_ids)} transition points"
        )
        return deduplicated
