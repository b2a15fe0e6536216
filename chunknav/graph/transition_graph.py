"""
Transition points and the weighted graph connecting them.

A transition point sits on the border between two 4-adjacent chunks. Two
points are connected when a local path exists between them inside a chunk
they both touch; the edge remembers that chunk and the path length.

Edges live in an undirected ``networkx.Graph``, so A->B and B->A always
carry the same weight.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from ..constants import POINT_CHUNK_SEPARATOR, POINT_POSITION_SEPARATOR
from ..coordinates import (
    ChunkLayout,
    TilePos,
    WorldPos,
    local_to_global,
    parse_chunk_id,
    sort_chunk_pair,
)
from ..errors import ConfigError, StaleGraphError

logger = logging.getLogger(__name__)


def make_point_id(chunk_a: str, chunk_b: str, position: int) -> str:
    """Deterministic id from the sorted chunk pair and the border position."""
    first, second = sort_chunk_pair(chunk_a, chunk_b)
    return f"{first}{POINT_CHUNK_SEPARATOR}{second}{POINT_POSITION_SEPARATOR}{position}"


def parse_point_id(point_id: str) -> Optional[Tuple[Tuple[str, str], int]]:
    """Recover ``((chunk_a, chunk_b), position)`` from an id, or None."""
    pair, sep, position = point_id.rpartition(POINT_POSITION_SEPARATOR)
    chunks = pair.split(POINT_CHUNK_SEPARATOR)
    if not sep or len(chunks) != 2:
        return None
    try:
        return (chunks[0], chunks[1]), int(position)
    except ValueError:
        return None


@dataclass
class TransitionPoint:
    """A border crossing between two adjacent chunks."""

    id: str
    chunks: Tuple[str, str]
    position: int
    stale: bool = False

    def touches(self, chunk_id: str) -> bool:
        return chunk_id in self.chunks

    def other_chunk(self, chunk_id: str) -> Optional[str]:
        if chunk_id == self.chunks[0]:
            return self.chunks[1]
        if chunk_id == self.chunks[1]:
            return self.chunks[0]
        return None

    @classmethod
    def create(cls, chunk_a: str, chunk_b: str, position: int) -> "TransitionPoint":
        chunks = sort_chunk_pair(chunk_a, chunk_b)
        return cls(
            id=make_point_id(chunk_a, chunk_b, position),
            chunks=chunks,
            position=int(position),
        )


@dataclass
class GraphStats:
    """Summary counts for inspection tooling."""

    point_count: int
    connection_count: int
    avg_connections_per_point: float
    stale_count: int
    chunk_count: int
    connections_by_chunk: Dict[str, int] = field(default_factory=dict)


class TransitionGraph:
    """
    Transition points plus undirected weighted connections.

    Points are stored as node attributes of a networkx graph; each edge
    carries ``weight`` (local path length in steps) and ``chunk`` (the chunk
    the connection runs through).
    """

    def __init__(self, layout: ChunkLayout):
        self.layout = layout
        self._graph = nx.Graph()
        self._points_by_chunk: Dict[str, List[str]] = defaultdict(list)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._graph

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_point(self, point: TransitionPoint) -> None:
        if point.id in self._graph:
            raise ConfigError(f"Duplicate transition point '{point.id}'")
        self._graph.add_node(point.id, point=point)
        for chunk_id in point.chunks:
            self._points_by_chunk[chunk_id].append(point.id)

    def add_connection(
        self, point_a: str, point_b: str, weight: float, chunk_id: str
    ) -> None:
        """Add or replace the connection between two points."""
        for point_id in (point_a, point_b):
            if point_id not in self._graph:
                raise StaleGraphError(f"Unknown transition point '{point_id}'")
        self._graph.add_edge(point_a, point_b, weight=weight, chunk=chunk_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def points(self) -> List[TransitionPoint]:
        return [data["point"] for _, data in self._graph.nodes(data=True)]

    @property
    def point_ids(self) -> List[str]:
        return list(self._graph.nodes)

    @property
    def chunk_ids(self) -> List[str]:
        return sorted(
            self._points_by_chunk, key=lambda c: tuple(reversed(parse_chunk_id(c)))
        )

    @property
    def networkx_graph(self) -> nx.Graph:
        """Read-only view of the underlying networkx graph."""
        return self._graph.copy(as_view=True)

    def get_point(self, point_id: str) -> Optional[TransitionPoint]:
        data = self._graph.nodes.get(point_id)
        return data["point"] if data is not None else None

    def require_point(self, point_id: str) -> TransitionPoint:
        point = self.get_point(point_id)
        if point is None:
            raise StaleGraphError(
                f"Transition point '{point_id}' is not part of the current graph"
            )
        return point

    def get_points_in_chunk(self, chunk_id: str) -> List[TransitionPoint]:
        return [
            self._graph.nodes[point_id]["point"]
            for point_id in self._points_by_chunk.get(chunk_id, ())
        ]

    def connection(self, point_a: str, point_b: str) -> Optional[Mapping[str, Any]]:
        return self._graph.get_edge_data(point_a, point_b)

    def connecting_chunk(self, point_a: str, point_b: str) -> str:
        """
        Chunk the connection between two points runs through.

        Raises:
            StaleGraphError: If either point is unknown or they are not connected.
        """
        self.require_point(point_a)
        self.require_point(point_b)
        data = self._graph.get_edge_data(point_a, point_b)
        if data is None:
            raise StaleGraphError(
                f"Transition points '{point_a}' and '{point_b}' are not connected"
            )
        return data["chunk"]

    def neighbors(self, point_id: str) -> Iterator[Tuple[str, float]]:
        """Connected points with their edge weight, in id order."""
        adjacency = self._graph.adj[point_id]
        for neighbor_id in sorted(adjacency):
            yield neighbor_id, adjacency[neighbor_id]["weight"]

    def degree(self, point_id: str) -> int:
        return self._graph.degree(point_id)

    def local_position(self, point: TransitionPoint, chunk_id: str) -> Optional[TilePos]:
        return self.layout.border_local(point.chunks, point.position, chunk_id)

    def world_position(self, point: TransitionPoint, chunk_id: str) -> Optional[WorldPos]:
        return self.layout.border_world(point.chunks, point.position, chunk_id)

    def global_tile(self, point: TransitionPoint) -> TilePos:
        """Global tile of the point on the side of its first chunk."""
        chunk_id = point.chunks[0]
        local = self.local_position(point, chunk_id)
        return local_to_global(
            local, chunk_id, self.layout.chunk_width, self.layout.chunk_height
        )

    def search_tile(self, point: TransitionPoint) -> TilePos:
        """
        Position of a point with chunk borders collapsed.

        Each global tile is shifted back by one tile per chunk to its left
        and above, so the two tiles facing each other across a border share
        one coordinate. Crossing a border is free in edge weights and moves
        zero tiles here, while a step inside a chunk still moves one tile,
        so grid distances between these positions never exceed the step
        count of a graph route.
        """
        tile_x, tile_y = self.global_tile(point)
        chunk_x, chunk_y = parse_chunk_id(point.chunks[0])
        return tile_x - chunk_x, tile_y - chunk_y

    def stats(self) -> GraphStats:
        point_count = self._graph.number_of_nodes()
        connection_count = self._graph.number_of_edges()
        by_chunk: Dict[str, int] = defaultdict(int)
        for _, _, chunk_id in self._graph.edges(data="chunk"):
            by_chunk[chunk_id] += 1

        return GraphStats(
            point_count=point_count,
            connection_count=connection_count,
            avg_connections_per_point=(
                2.0 * connection_count / point_count if point_count else 0.0
            ),
            stale_count=sum(1 for p in self.points if p.stale),
            chunk_count=len(self._points_by_chunk),
            connections_by_chunk=dict(by_chunk),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> List[Dict[str, Any]]:
        """Export in the pre-built graph format accepted by ``from_dict``."""
        exported = []
        for point in self.points:
            exported.append(
                {
                    "id": point.id,
                    "chunks": list(point.chunks),
                    "position": point.position,
                    "connections": [
                        {
                            "id": neighbor_id,
                            "weight": weight,
                            "chunk": self._graph.edges[point.id, neighbor_id]["chunk"],
                        }
                        for neighbor_id, weight in self.neighbors(point.id)
                    ],
                }
            )
        return exported

    @classmethod
    def from_dict(
        cls, entries: Sequence[Mapping[str, Any]], layout: ChunkLayout
    ) -> "TransitionGraph":
        """
        Load a pre-built graph: ``{id, chunks, position?, connections: [{id, weight, chunk?}]}``.

        ``position`` may be omitted when the id follows the ``make_point_id``
        layout. A connection without ``chunk`` runs through the chunk both
        points share (the first of the pair if they share both). Missing
        weights default to 1.
        """
        graph = cls(layout)

        for entry in entries:
            try:
                point_id = entry["id"]
                chunks = list(entry["chunks"])
            except (KeyError, TypeError) as e:
                raise ConfigError(f"Malformed pre-built transition point {entry!r}") from e
            if len(chunks) != 2:
                raise ConfigError(f"Transition point '{point_id}' must list two chunks")

            position = entry.get("position")
            if position is None:
                parsed = parse_point_id(point_id)
                if parsed is None:
                    raise ConfigError(
                        f"Transition point '{point_id}' has no position"
                    )
                position = parsed[1]

            graph.add_point(
                TransitionPoint(
                    id=point_id,
                    chunks=sort_chunk_pair(chunks[0], chunks[1]),
                    position=int(position),
                )
            )

        for entry in entries:
            point = graph.get_point(entry["id"])
            for connection in entry.get("connections", ()):
                if not isinstance(connection, Mapping):
                    raise ConfigError(
                        f"Malformed connection {connection!r} on transition point '{point.id}'"
                    )
                other = graph.get_point(connection.get("id"))
                if other is None:
                    raise ConfigError(
                        f"Transition point '{point.id}' connects to unknown "
                        f"point '{connection.get('id')}'"
                    )
                weight = connection.get("weight", 1)
                chunk_id = connection.get("chunk") or _shared_chunk(point, other)

                existing = graph.connection(point.id, other.id)
                if existing is not None:
                    if existing["weight"] != weight:
                        logger.warning(
                            f"Asymmetric weights between {point.id} and {other.id}: "
                            f"{existing['weight']} vs {weight}, keeping the lower"
                        )
                    if existing["weight"] <= weight:
                        continue
                graph.add_connection(point.id, other.id, weight, chunk_id)

        return graph


def _shared_chunk(point_a: TransitionPoint, point_b: TransitionPoint) -> str:
    for chunk_id in point_a.chunks:
        if point_b.touches(chunk_id):
            return chunk_id
    raise ConfigError(
        f"Transition points '{point_a.id}' and '{point_b.id}' share no chunk"
    )
