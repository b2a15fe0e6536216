"""
Hierarchical pathfinder facade.

Wires the configuration, local search, transition graph builder,
hierarchical search and segment builder together behind a small API::

    pathfinder = HierarchicalPathfinder({
        "grid_width": 4,
        "grid_height": 4,
        "chunk_width": 16,
        "chunk_height": 16,
        "tile_size": 8,
        "get_chunk_data": world.chunk_tiles,
    })
    segments = pathfinder.find_path((12.0, 40.0), (400.0, 220.0))
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from .chunk import ChunkSource
from .config import PathfindingConfig
from .coordinates import TilePos, parse_chunk_id
from .errors import ConfigError, OutOfBoundsError
from .graph.graph_builder import TransitionGraphBuilder
from .graph.pathfinding import HierarchicalSearch
from .graph.segment_builder import PathSegment, PathSegmentBuilder
from .graph.transition_graph import GraphStats, TransitionGraph
from .heuristics import get_heuristic
from .pathfinding.local_pathfinder import LocalPathfinder

logger = logging.getLogger(__name__)


class HierarchicalPathfinder:
    """
    Finds routes across a chunked tile world.

    Args:
        config: PathfindingConfig or a mapping of options. When omitted,
            ``init`` must be called before any query.
    """

    def __init__(self, config: Optional[Union[PathfindingConfig, Mapping[str, Any]]] = None):
        self._config: Optional[PathfindingConfig] = None
        self._builder: Optional[TransitionGraphBuilder] = None
        if config is not None:
            self.init(config)

    def init(self, config: Union[PathfindingConfig, Mapping[str, Any]]) -> None:
        """
        Validate the configuration and wire all components.

        Builds the transition graph unless ``build_graph_on_init`` is False.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        if isinstance(config, Mapping):
            config = PathfindingConfig.from_dict(config)
        elif isinstance(config, PathfindingConfig):
            config.validate()
        else:
            raise ConfigError(f"Unsupported configuration type: {type(config).__name__}")

        self._config = config
        self.layout = config.layout
        self.chunk_source = ChunkSource(
            config.get_chunk_data, config.chunk_width, config.chunk_height
        )
        self._local_pathfinder = LocalPathfinder.from_config(config)

        self._builder = TransitionGraphBuilder(
            layout=self.layout,
            grid_width=config.grid_width,
            grid_height=config.grid_height,
            chunk_source=self.chunk_source,
            local_pathfinder=self._local_pathfinder,
            transition_points=config.transition_points,
            method=config.transition_point_method,
            max_points=config.max_transition_points,
            margin=config.transition_point_margin,
        )

        hierarchical_heuristic = (
            get_heuristic(config.hierarchical_heuristic)
            if config.hierarchical_heuristic is not None
            else None
        )
        self._search = HierarchicalSearch(
            layout=self.layout,
            chunk_source=self.chunk_source,
            local_pathfinder=self._local_pathfinder,
            builder=self._builder,
            heuristic=hierarchical_heuristic,
            heuristic_weight=config.heuristic_weight,
        )
        self._segment_builder = PathSegmentBuilder(self.layout)

        logger.info(
            f"Pathfinder initialized: {config.grid_width}x{config.grid_height} chunks "
            f"of {config.chunk_width}x{config.chunk_height} tiles, {self._local_pathfinder}"
        )

        if config.build_graph_on_init:
            self._builder.rebuild()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_path(
        self, start: Sequence[float], end: Sequence[float]
    ) -> Optional[List[PathSegment]]:
        """
        Find a route between two world positions.

        Returns:
            Ordered path segments, or None if end is unreachable from start.

        Raises:
            OutOfBoundsError: If start or end is outside the world.
            StaleGraphError: If a transition route is needed but no graph
                has been built.
        """
        self._require_init()
        self.check_bounds(start)
        self.check_bounds(end)

        node_ids = self._search.find_path(start, end)
        if node_ids is None:
            logger.debug(f"No path from {start} to {end}")
            return None

        return self._segment_builder.build_segments(
            start, end, node_ids, self._builder.graph
        )

    def find_local_path(
        self, chunk_id: str, start: Sequence[float], end: Sequence[float]
    ) -> Optional[List[TilePos]]:
        """
        Tile path inside one chunk between two world positions.

        Positions outside the chunk are clamped to its nearest edge tile.

        Returns:
            Chunk-local tiles from start to end inclusive, or None.

        Raises:
            ParseError: If chunk_id is malformed.
            OutOfBoundsError: If the chunk is outside the grid.
        """
        self._require_init()
        chunk_x, chunk_y = parse_chunk_id(chunk_id)
        if not (
            0 <= chunk_x < self._config.grid_width
            and 0 <= chunk_y < self._config.grid_height
        ):
            raise OutOfBoundsError(f"Chunk {chunk_id} is outside the chunk grid")

        chunk = self.chunk_source.get(chunk_id)
        if chunk is None:
            return None

        return self._local_pathfinder.find_path(
            chunk,
            self.layout.to_local(start, chunk_id),
            self.layout.to_local(end, chunk_id),
        )

    def find_transition_path(self, start_id: str, end_id: str) -> Optional[List[str]]:
        """Raw transition point ids between two points, or None if disconnected."""
        self._require_init()
        result = self._search.find_transition_path(start_id, end_id)
        return result.path if result.success else None

    def check_bounds(self, position: Sequence[float]) -> None:
        """
        Raises:
            OutOfBoundsError: If position lies outside the world.
        """
        width, height = self._config.world_dimensions
        x, y = position[0], position[1]
        if not (0 <= x < width and 0 <= y < height):
            raise OutOfBoundsError(
                f"Position ({x}, {y}) is outside the world bounds ({width}, {height})"
            )

    # ------------------------------------------------------------------
    # Graph lifecycle
    # ------------------------------------------------------------------

    def rebuild_transition_graph(self) -> TransitionGraph:
        """Rebuild the transition graph from the current chunk data."""
        self._require_init()
        return self._builder.rebuild()

    def mark_graph_dirty(self) -> None:
        """Record that chunk data changed; the graph stays in use until rebuilt."""
        self._require_init()
        self._builder.mark_dirty()

    def set_transition_points(self, transition_points: Optional[Sequence[Any]]) -> None:
        """Replace the transition point input; takes effect on the next rebuild."""
        self._require_init()
        self._builder.set_transition_points(transition_points)

    @property
    def is_graph_dirty(self) -> bool:
        self._require_init()
        return self._builder.is_dirty

    @property
    def transition_graph(self) -> Optional[TransitionGraph]:
        self._require_init()
        return self._builder.graph

    def graph_stats(self) -> Optional[GraphStats]:
        graph = self.transition_graph
        return graph.stats() if graph is not None else None

    @property
    def config(self) -> Optional[PathfindingConfig]:
        return self._config

    @property
    def local_pathfinder(self) -> LocalPathfinder:
        self._require_init()
        return self._local_pathfinder

    def _require_init(self) -> None:
        if self._config is None:
            raise ConfigError("HierarchicalPathfinder.init() has not been called")
