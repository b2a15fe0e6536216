"""
Configuration for the hierarchical pathfinder.

``PathfindingConfig`` validates itself on construction, so any instance that
exists is usable. Mappings using either snake_case or the camelCase option
names (``gridWidth``, ``getChunkData`` ...) are accepted by ``from_dict``.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .constants import PathfindingDefaults
from .coordinates import ChunkLayout
from .errors import ConfigError
from .heuristics import get_heuristic, heuristic_name
from .pathfinding.local_pathfinder import get_algorithm


class TransitionPointMethod(Enum):
    """How transition points are placed along a passable border segment."""

    CENTER = "center"
    MARGIN = "margin"


_CAMEL_CASE_KEYS = {
    "gridWidth": "grid_width",
    "gridHeight": "grid_height",
    "chunkWidth": "chunk_width",
    "chunkHeight": "chunk_height",
    "tileSize": "tile_size",
    "getChunkData": "get_chunk_data",
    "transitionPoints": "transition_points",
    "localAlgorithm": "local_algorithm",
    "localHeuristic": "local_heuristic",
    "hierarchicalHeuristic": "hierarchical_heuristic",
    "heuristicWeight": "heuristic_weight",
    "allowDiagonal": "allow_diagonal",
    "optimizePath": "optimize_path",
    "maxTransitionPoints": "max_transition_points",
    "transitionPointMethod": "transition_point_method",
    "transitionPointMargin": "transition_point_margin",
    "buildGraphOnInit": "build_graph_on_init",
}


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class PathfindingConfig:
    """Options for building and querying a hierarchical pathfinder."""

    get_chunk_data: Optional[Callable[[str], Any]] = None
    grid_width: int = PathfindingDefaults.GRID_WIDTH
    grid_height: int = PathfindingDefaults.GRID_HEIGHT
    chunk_width: int = PathfindingDefaults.CHUNK_WIDTH
    chunk_height: int = PathfindingDefaults.CHUNK_HEIGHT
    tile_size: float = PathfindingDefaults.TILE_SIZE
    transition_points: Optional[Sequence[Any]] = None
    local_algorithm: Union[str, Callable] = PathfindingDefaults.LOCAL_ALGORITHM
    local_heuristic: Union[str, Callable] = PathfindingDefaults.LOCAL_HEURISTIC
    hierarchical_heuristic: Optional[Union[str, Callable]] = (
        PathfindingDefaults.HIERARCHICAL_HEURISTIC
    )
    heuristic_weight: float = PathfindingDefaults.HEURISTIC_WEIGHT
    allow_diagonal: bool = PathfindingDefaults.ALLOW_DIAGONAL
    optimize_path: bool = PathfindingDefaults.OPTIMIZE_PATH
    max_transition_points: int = PathfindingDefaults.MAX_TRANSITION_POINTS
    transition_point_method: Union[str, TransitionPointMethod] = (
        PathfindingDefaults.TRANSITION_POINT_METHOD
    )
    transition_point_margin: int = PathfindingDefaults.TRANSITION_POINT_MARGIN
    build_graph_on_init: bool = True

    def __post_init__(self):
        if isinstance(self.transition_point_method, str):
            methods = {m.value: m for m in TransitionPointMethod}
            self.transition_point_method = methods.get(
                self.transition_point_method, self.transition_point_method
            )
        self.validate()

    def validate(self) -> None:
        """
        Check every option and raise a single ConfigError listing all problems.

        Raises:
            ConfigError: If any option is invalid.
        """
        errors = self.collect_errors()
        if errors:
            raise ConfigError("Invalid pathfinding configuration: " + "; ".join(errors))

    def collect_errors(self) -> List[str]:
        errors = []

        for name in ("grid_width", "grid_height", "chunk_width", "chunk_height"):
            if not _is_positive_int(getattr(self, name)):
                errors.append(f"{name} must be a positive integer")

        if not _is_number(self.tile_size) or self.tile_size <= 0:
            errors.append("tile_size must be a positive number")

        if not callable(self.get_chunk_data):
            errors.append("get_chunk_data must be a callable")

        if not _is_number(self.heuristic_weight) or self.heuristic_weight < 1.0:
            errors.append("heuristic_weight must be a number >= 1.0")

        for name in ("allow_diagonal", "optimize_path", "build_graph_on_init"):
            if not isinstance(getattr(self, name), bool):
                errors.append(f"{name} must be a boolean")

        if not _is_positive_int(self.max_transition_points):
            errors.append("max_transition_points must be a positive integer")

        if not _is_positive_int(self.transition_point_margin):
            errors.append("transition_point_margin must be a positive integer")

        if not isinstance(self.transition_point_method, TransitionPointMethod):
            errors.append(
                f"transition_point_method must be one of "
                f"{[m.value for m in TransitionPointMethod]}"
            )

        if self.transition_points is not None and not isinstance(
            self.transition_points, (list, tuple)
        ):
            errors.append("transition_points must be a list")

        try:
            get_algorithm(self.local_algorithm)
        except ConfigError as e:
            errors.append(str(e))

        heuristics = [self.local_heuristic]
        if self.hierarchical_heuristic is not None:
            heuristics.append(self.hierarchical_heuristic)
        for heuristic in heuristics:
            try:
                get_heuristic(heuristic)
            except ConfigError as e:
                errors.append(str(e))

        return errors

    @property
    def layout(self) -> ChunkLayout:
        return ChunkLayout(self.chunk_width, self.chunk_height, self.tile_size)

    @property
    def chunk_world_size(self) -> Tuple[float, float]:
        return self.chunk_width * self.tile_size, self.chunk_height * self.tile_size

    @property
    def world_dimensions(self) -> Tuple[float, float]:
        """World size in world units (width, height)."""
        chunk_w, chunk_h = self.chunk_world_size
        return self.grid_width * chunk_w, self.grid_height * chunk_h

    @property
    def tile_dimensions(self) -> Tuple[int, int]:
        """World size in tiles (width, height)."""
        return self.grid_width * self.chunk_width, self.grid_height * self.chunk_height

    def clone(self, **overrides) -> "PathfindingConfig":
        """Copy with some options replaced; the copy is validated."""
        return dataclasses.replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the options; callables are reported by name."""
        return {
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "chunk_width": self.chunk_width,
            "chunk_height": self.chunk_height,
            "tile_size": self.tile_size,
            "local_algorithm": get_algorithm(self.local_algorithm)[0],
            "local_heuristic": heuristic_name(self.local_heuristic),
            "hierarchical_heuristic": (
                heuristic_name(self.hierarchical_heuristic)
                if self.hierarchical_heuristic is not None
                else None
            ),
            "heuristic_weight": self.heuristic_weight,
            "allow_diagonal": self.allow_diagonal,
            "optimize_path": self.optimize_path,
            "max_transition_points": self.max_transition_points,
            "transition_point_method": self.transition_point_method.value,
            "transition_point_margin": self.transition_point_margin,
            "build_graph_on_init": self.build_graph_on_init,
            "transition_point_count": (
                len(self.transition_points) if self.transition_points is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "PathfindingConfig":
        """
        Create a config from a mapping of option names.

        ``chunk_size`` / ``chunkSize`` sets both chunk dimensions unless they
        are given explicitly.

        Raises:
            ConfigError: On unknown option names or invalid values.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs: Dict[str, Any] = {}
        chunk_size = None
        unknown = []

        for key, value in options.items():
            if key in ("chunk_size", "chunkSize"):
                chunk_size = value
                continue
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            kwargs[name] = value

        if unknown:
            raise ConfigError(f"Unknown configuration options: {sorted(unknown)}")

        if chunk_size is not None:
            kwargs.setdefault("chunk_width", chunk_size)
            kwargs.setdefault("chunk_height", chunk_size)

        return cls(**kwargs)
