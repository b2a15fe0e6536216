"""
Coordinate conversions between world units, global tiles, chunks and
chunk-local tiles.

Spaces used throughout the package:

- world: continuous ``(x, y)`` in world units (``tile_size`` units per tile)
- global tile: integer ``(x, y)`` over the whole map
- chunk: integer ``(cx, cy)`` grid coordinates, addressed by ids like ``"3,2"``
- local tile: integer ``(x, y)`` relative to a chunk's top-left tile

All conversions floor, so a position exactly on a chunk edge belongs to the
chunk on its right/bottom.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .constants import CHUNK_ID_SEPARATOR
from .errors import ParseError

TilePos = Tuple[int, int]
WorldPos = Tuple[float, float]


def make_chunk_id(chunk_x: int, chunk_y: int) -> str:
    """Build the string id of the chunk at grid coordinates (chunk_x, chunk_y)."""
    return f"{chunk_x}{CHUNK_ID_SEPARATOR}{chunk_y}"


def parse_chunk_id(chunk_id: str) -> Tuple[int, int]:
    """
    Parse a chunk id of the form ``"x,y"`` into integer grid coordinates.

    Raises:
        ParseError: If the id is not a string of two comma-separated integers.
    """
    if not isinstance(chunk_id, str):
        raise ParseError(f"Chunk id must be a string, got {type(chunk_id).__name__}")

    parts = chunk_id.split(CHUNK_ID_SEPARATOR)
    if len(parts) != 2:
        raise ParseError(f"Malformed chunk id '{chunk_id}': expected 'x,y'")

    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError as e:
        raise ParseError(f"Malformed chunk id '{chunk_id}': {e}") from e


def world_to_tile(position: Sequence[float], tile_size: float) -> TilePos:
    """Convert a world position to the global tile containing it."""
    return int(position[0] // tile_size), int(position[1] // tile_size)


def tile_to_world(tile: Sequence[int], tile_size: float) -> WorldPos:
    """Convert a global tile to the world position of its center."""
    half = tile_size / 2
    return tile[0] * tile_size + half, tile[1] * tile_size + half


def tile_to_chunk_id(tile: Sequence[int], chunk_width: int, chunk_height: int) -> str:
    return make_chunk_id(tile[0] // chunk_width, tile[1] // chunk_height)


def world_to_chunk_id(
    position: Sequence[float], chunk_width: int, chunk_height: int, tile_size: float
) -> str:
    """Chunk id of the chunk containing a world position."""
    return tile_to_chunk_id(
        world_to_tile(position, tile_size), chunk_width, chunk_height
    )


def chunk_origin(chunk_id: str, chunk_width: int, chunk_height: int) -> TilePos:
    """Global tile of the top-left corner of a chunk."""
    chunk_x, chunk_y = parse_chunk_id(chunk_id)
    return chunk_x * chunk_width, chunk_y * chunk_height


def global_to_local(
    tile: Sequence[int], chunk_id: str, chunk_width: int, chunk_height: int
) -> TilePos:
    origin_x, origin_y = chunk_origin(chunk_id, chunk_width, chunk_height)
    return tile[0] - origin_x, tile[1] - origin_y


def local_to_global(
    local: Sequence[int], chunk_id: str, chunk_width: int, chunk_height: int
) -> TilePos:
    origin_x, origin_y = chunk_origin(chunk_id, chunk_width, chunk_height)
    return origin_x + local[0], origin_y + local[1]


def world_to_local(
    position: Sequence[float],
    chunk_id: str,
    chunk_width: int,
    chunk_height: int,
    tile_size: float,
) -> TilePos:
    """
    Convert a world position to a tile local to ``chunk_id``.

    The result is clamped into the chunk, so positions slightly outside the
    chunk snap to its nearest edge tile.
    """
    local_x, local_y = global_to_local(
        world_to_tile(position, tile_size), chunk_id, chunk_width, chunk_height
    )
    return (
        min(max(local_x, 0), chunk_width - 1),
        min(max(local_y, 0), chunk_height - 1),
    )


def local_to_world(
    local: Sequence[int],
    chunk_id: str,
    chunk_width: int,
    chunk_height: int,
    tile_size: float,
) -> WorldPos:
    """World position of the center of a chunk-local tile."""
    return tile_to_world(
        local_to_global(local, chunk_id, chunk_width, chunk_height), tile_size
    )


def are_chunks_adjacent(chunk_a: str, chunk_b: str) -> bool:
    """True if the two chunks share a border (no diagonal adjacency)."""
    ax, ay = parse_chunk_id(chunk_a)
    bx, by = parse_chunk_id(chunk_b)
    return abs(ax - bx) + abs(ay - by) == 1


def sort_chunk_pair(chunk_a: str, chunk_b: str) -> Tuple[str, str]:
    """Order a chunk pair by (y, x) so the pair key is independent of input order."""
    ax, ay = parse_chunk_id(chunk_a)
    bx, by = parse_chunk_id(chunk_b)
    if (ay, ax) <= (by, bx):
        return chunk_a, chunk_b
    return chunk_b, chunk_a


def border_local_position(
    chunks: Iterable[str],
    position: int,
    chunk_id: str,
    chunk_width: int,
    chunk_height: int,
) -> Optional[TilePos]:
    """
    Local tile of a border position as seen from one of the two chunks.

    A transition point sits on the border between two chunks, so its local
    coordinate depends on which side is used as the reference. ``position``
    indexes rows on vertical borders and columns on horizontal ones.

    Args:
        chunks: The two chunk ids sharing the border
        position: Index along the shared border
        chunk_id: Reference chunk, must be one of ``chunks``

    Returns:
        Local (x, y) within ``chunk_id``, or None if ``chunk_id`` is not part
        of the pair.
    """
    chunks = list(chunks)
    if chunk_id not in chunks:
        return None

    others = [c for c in chunks if c != chunk_id]
    if not others:
        return None

    x, y = parse_chunk_id(chunk_id)
    other_x, other_y = parse_chunk_id(others[0])

    if other_x > x:
        return chunk_width - 1, position
    if other_x < x:
        return 0, position
    if other_y > y:
        return position, chunk_height - 1
    return position, 0


def border_world_position(
    chunks: Iterable[str],
    position: int,
    chunk_id: str,
    chunk_width: int,
    chunk_height: int,
    tile_size: float,
) -> Optional[WorldPos]:
    local = border_local_position(chunks, position, chunk_id, chunk_width, chunk_height)
    if local is None:
        return None
    return local_to_world(local, chunk_id, chunk_width, chunk_height, tile_size)


@dataclass(frozen=True)
class ChunkLayout:
    """Chunk dimensions bundled with the tile size, with bound conversions."""

    chunk_width: int
    chunk_height: int
    tile_size: float

    @property
    def chunk_world_size(self) -> WorldPos:
        return self.chunk_width * self.tile_size, self.chunk_height * self.tile_size

    def chunk_id_at(self, position: Sequence[float]) -> str:
        return world_to_chunk_id(
            position, self.chunk_width, self.chunk_height, self.tile_size
        )

    def to_local(self, position: Sequence[float], chunk_id: str) -> TilePos:
        return world_to_local(
            position, chunk_id, self.chunk_width, self.chunk_height, self.tile_size
        )

    def to_world(self, local: Sequence[int], chunk_id: str) -> WorldPos:
        return local_to_world(
            local, chunk_id, self.chunk_width, self.chunk_height, self.tile_size
        )

    def border_local(
        self, chunks: Iterable[str], position: int, chunk_id: str
    ) -> Optional[TilePos]:
        return border_local_position(
            chunks, position, chunk_id, self.chunk_width, self.chunk_height
        )

    def border_world(
        self, chunks: Iterable[str], position: int, chunk_id: str
    ) -> Optional[WorldPos]:
        return border_world_position(
            chunks,
            position,
            chunk_id,
            self.chunk_width,
            self.chunk_height,
            self.tile_size,
        )
