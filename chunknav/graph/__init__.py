"""
Transition graph construction, hierarchical search and segment building.
"""

from .border_scanner import BorderScanner, BorderSegment
from .graph_builder import TransitionGraphBuilder
from .pathfinding import HierarchicalSearch, PathfindingAlgorithm, PathResult
from .segment_builder import PathSegment, PathSegmentBuilder
from .transition_graph import (
    GraphStats,
    TransitionGraph,
    TransitionPoint,
    make_point_id,
)

__all__ = [
    "BorderScanner",
    "BorderSegment",
    "GraphStats",
    "HierarchicalSearch",
    "PathResult",
    "PathSegment",
    "PathSegmentBuilder",
    "PathfindingAlgorithm",
    "TransitionGraph",
    "TransitionGraphBuilder",
    "TransitionPoint",
    "make_point_id",
]
