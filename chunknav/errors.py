"""
Exception types raised by the chunknav pathfinding stack.

Unreachable targets are never reported through exceptions: searches return
``None`` for that case. The exceptions below signal caller mistakes or
contract violations between the transition graph and its consumers.
"""


class PathfindingError(Exception):
    """Base class for all chunknav errors."""


class ConfigError(PathfindingError, ValueError):
    """Invalid or missing configuration, or malformed transition point input."""


class OutOfBoundsError(PathfindingError, ValueError):
    """A query position or chunk lies outside the world."""


class ParseError(PathfindingError, ValueError):
    """A chunk id string could not be parsed."""


class StaleGraphError(PathfindingError, RuntimeError):
    """The transition graph does not match the ids it was asked to resolve."""
