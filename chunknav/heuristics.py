"""
Distance heuristics shared by the local and hierarchical searches.

Each heuristic takes two ``(x, y)`` positions and returns a non-negative
distance. Names are resolved through a small registry so configuration can
refer to them as strings.
"""

import math
from enum import Enum
from typing import Callable, Dict, Sequence, Union

from .errors import ConfigError

Heuristic = Callable[[Sequence[float], Sequence[float]], float]

_OCTILE_FACTOR = math.sqrt(2.0) - 1.0


class HeuristicType(Enum):
    """Built-in heuristics."""

    MANHATTAN = "manhattan"
    EUCLIDEAN = "euclidean"
    DIAGONAL = "diagonal"  # Chebyshev distance
    OCTILE = "octile"


def manhattan(a: Sequence[float], b: Sequence[float]) -> float:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def euclidean(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def diagonal(a: Sequence[float], b: Sequence[float]) -> float:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def octile(a: Sequence[float], b: Sequence[float]) -> float:
    """Exact cost on an open 8-connected grid with diagonal steps of sqrt(2)."""
    dx = abs(a[0] - b[0])
    dy = abs(a[1] - b[1])
    return max(dx, dy) + _OCTILE_FACTOR * min(dx, dy)


_REGISTRY: Dict[str, Heuristic] = {
    HeuristicType.MANHATTAN.value: manhattan,
    HeuristicType.EUCLIDEAN.value: euclidean,
    HeuristicType.DIAGONAL.value: diagonal,
    HeuristicType.OCTILE.value: octile,
}


def register_heuristic(name: str, func: Heuristic) -> None:
    """Register a custom heuristic under ``name``."""
    if not callable(func):
        raise ConfigError(f"Heuristic '{name}' must be callable")
    _REGISTRY[name] = func


def available_heuristics():
    return sorted(_REGISTRY)


def get_heuristic(name: Union[str, HeuristicType, Heuristic]) -> Heuristic:
    """
    Resolve a heuristic by name, enum member or callable.

    Raises:
        ConfigError: If the name is not registered.
    """
    if isinstance(name, HeuristicType):
        name = name.value
    if callable(name):
        return name
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ConfigError(
            f"Unknown heuristic '{name}', expected one of {available_heuristics()}"
        ) from None


def heuristic_name(heuristic: Union[str, HeuristicType, Heuristic]) -> str:
    if isinstance(heuristic, HeuristicType):
        return heuristic.value
    if isinstance(heuristic, str):
        return heuristic
    return getattr(heuristic, "__name__", repr(heuristic))
