"""
Transition graph builder.

Builds a TransitionGraph from one of three inputs:

- nothing: transition points are generated by scanning chunk borders
- a declarative list of ``{chunks: [a, b], position}`` entries
- a pre-built graph of ``{id, chunks, connections}`` entries, used as-is

For generated and declarative points, connections are computed by running
the local pathfinder between every pair of points that touch the same chunk.
That is ``k^2`` local searches per chunk, so the builder keeps a dirty flag
and only builds when asked to.
"""

import logging
import time
from typing import Any, List, Mapping, Optional, Sequence

from ..chunk import ChunkSource
from ..config import TransitionPointMethod
from ..coordinates import ChunkLayout, are_chunks_adjacent, parse_chunk_id
from ..errors import ConfigError, StaleGraphError
from ..pathfinding.local_pathfinder import LocalPathfinder
from .border_scanner import BorderScanner
from .transition_graph import TransitionGraph, TransitionPoint

logger = logging.getLogger(__name__)


def is_prebuilt(entries: Sequence[Any]) -> bool:
    """True if the entries carry their own connections."""
    return any(isinstance(e, Mapping) and "connections" in e for e in entries)


class TransitionGraphBuilder:
    """
    Owns the transition graph and rebuilds it on request.

    The graph is never rebuilt implicitly: callers use ``rebuild()`` or
    ``ensure_built()`` after changing chunk data or transition points.
    """

    def __init__(
        self,
        layout: ChunkLayout,
        grid_width: int,
        grid_height: int,
        chunk_source: ChunkSource,
        local_pathfinder: LocalPathfinder,
        transition_points: Optional[Sequence[Any]] = None,
        method: TransitionPointMethod = TransitionPointMethod.CENTER,
        max_points: int = 3,
        margin: int = 4,
        debug: bool = False,
    ):
        self.layout = layout
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.chunk_source = chunk_source
        self.local_pathfinder = local_pathfinder
        self.transition_points = transition_points
        self.scanner = BorderScanner(
            layout, grid_width, grid_height, method, max_points, margin
        )
        self.debug = debug

        self._graph: Optional[TransitionGraph] = None
        self._dirty = True

    @property
    def graph(self) -> Optional[TransitionGraph]:
        """The last built graph, or None if nothing has been built yet."""
        return self._graph

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        """Flag the graph as out of date with the chunk data."""
        self._dirty = True

    def set_transition_points(self, transition_points: Optional[Sequence[Any]]) -> None:
        self.transition_points = transition_points
        self.mark_dirty()

    def ensure_built(self) -> TransitionGraph:
        """Build only if the graph is missing or dirty."""
        if self._graph is None or self._dirty:
            return self.rebuild()
        return self._graph

    def rebuild(self) -> TransitionGraph:
        """
        Build the graph from scratch and replace the current one.

        Identical chunk data and transition input always yield identical
        point ids and edge weights.

        Raises:
            ConfigError: On malformed transition point input or chunk data.
        """
        start_time = time.time()
        self.chunk_source.begin_snapshot()
        try:
            graph = self._build()
        finally:
            self.chunk_source.end_snapshot()

        self._graph = graph
        self._dirty = False

        stats = graph.stats()
        logger.info(
            f"Built transition graph: {stats.point_count} points, "
            f"{stats.connection_count} connections, {stats.stale_count} stale "
            f"in {time.time() - start_time:.3f}s"
        )
        return graph

    def _build(self) -> TransitionGraph:
        entries = self.transition_points

        if entries is not None and is_prebuilt(entries):
            if self.debug:
                logger.debug(f"Loading pre-built graph with {len(entries)} points")
            return TransitionGraph.from_dict(entries, self.layout)

        if entries is None:
            points = self.scanner.scan(self.chunk_source)
        else:
            points = self.parse_declarative(entries)

        graph = TransitionGraph(self.layout)
        for point in points:
            graph.add_point(point)

        self._mark_stale_points(graph)
        self._connect_points(graph)
        return graph

    def parse_declarative(self, entries: Sequence[Any]) -> List[TransitionPoint]:
        """
        Turn ``{chunks: [a, b], position}`` entries into transition points.

        Raises:
            ConfigError: If an entry is malformed, names chunks that are not
                adjacent or outside the grid, or has an out-of-range position.
        """
        points = []
        for entry in entries:
            if isinstance(entry, TransitionPoint):
                chunks, position = entry.chunks, entry.position
            else:
                try:
                    chunks = list(entry["chunks"])
                    position = entry["position"]
                except (KeyError, TypeError) as e:
                    raise ConfigError(f"Malformed transition point {entry!r}") from e

            if len(chunks) != 2:
                raise ConfigError(f"Transition point {entry!r} must list two chunks")
            chunk_a, chunk_b = chunks

            for chunk_id in (chunk_a, chunk_b):
                chunk_x, chunk_y = parse_chunk_id(chunk_id)
                if not (0 <= chunk_x < self.grid_width and 0 <= chunk_y < self.grid_height):
                    raise ConfigError(f"Transition point chunk {chunk_id} is outside the grid")
            if not are_chunks_adjacent(chunk_a, chunk_b):
                raise ConfigError(f"Chunks {chunk_a} and {chunk_b} are not adjacent")

            if isinstance(position, bool) or not isinstance(position, int):
                raise ConfigError(f"Transition point position must be an integer: {entry!r}")
            border_length = (
                self.layout.chunk_height
                if parse_chunk_id(chunk_a)[1] == parse_chunk_id(chunk_b)[1]
                else self.layout.chunk_width
            )
            if not 0 <= position < border_length:
                raise ConfigError(
                    f"Transition point position {position} is outside the border "
                    f"of length {border_length}"
                )

            points.append(TransitionPoint.create(chunk_a, chunk_b, position))
        return points

    def _mark_stale_points(self, graph: TransitionGraph) -> None:
        """A point is stale unless its border tile is walkable on both sides."""
        for point in graph.points:
            point.stale = False
            for chunk_id in point.chunks:
                chunk = self.chunk_source.get(chunk_id)
                local = graph.local_position(point, chunk_id)
                if chunk is None or not chunk.is_walkable(local):
                    point.stale = True
                    break
            if point.stale:
                logger.warning(
                    f"Transition point {point.id} is blocked in its chunks, excluding it"
                )

    def _connect_points(self, graph: TransitionGraph) -> None:
        """Add an edge for every pair of points joined by a local path."""
        searches = 0
        for chunk_id in graph.chunk_ids:
            chunk = self.chunk_source.get(chunk_id)
            if chunk is None:
                continue

            points = sorted(
                (p for p in graph.get_points_in_chunk(chunk_id) if not p.stale),
                key=lambda p: p.id,
            )
            local_positions = {p.id: graph.local_position(p, chunk_id) for p in points}

            for i, point_a in enumerate(points):
                for point_b in points[i + 1:]:
                    searches += 1
                    path = self.local_pathfinder.find_path(
                        chunk,
                        local_positions[point_a.id],
                        local_positions[point_b.id],
                        optimize=False,
                    )
                    if path is None:
                        continue

                    weight = len(path) - 1
                    existing = graph.connection(point_a.id, point_b.id)
                    if existing is None or weight < existing["weight"]:
                        graph.add_connection(point_a.id, point_b.id, weight, chunk_id)

            if self.debug:
                logger.debug(f"Connected {len(points)} points in chunk {chunk_id}")

        logger.debug(f"Ran {searches} local searches while connecting points")

    def require_graph(self) -> TransitionGraph:
        """
        The current graph for queries.

        Raises:
            StaleGraphError: If no graph has been built yet.
        """
        if self._graph is None:
            raise StaleGraphError(
                "Transition graph has not been built; call rebuild() first"
            )
        if self._dirty:
            logger.warning("Querying a transition graph that is marked dirty")
        return self._graph
