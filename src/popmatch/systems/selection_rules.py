"""Chain rules shared by the selection machine and the resolution engine."""
from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from esper import World

from popmatch.components.tile import Tile
from popmatch.systems.board_ops import active_tile_map, board_dimensions, is_king_adjacent

Position = Tuple[int, int]


def first_base_color(tiles: Sequence[Tile]) -> Optional[str]:
    for tile in tiles:
        if not tile.is_wildcard:
            return tile.color
    return None


def chain_color(world: World, chain: Sequence[Position]) -> Optional[str]:
    """Color of the first non-wildcard tile along the chain, or None if there is none yet."""
    if not chain:
        return None
    tiles = active_tile_map(world)
    return first_base_color([tiles[pos] for pos in chain if pos in tiles])


def accepts_tile(established: Optional[str], tile: Tile) -> bool:
    if tile.is_wildcard:
        return True
    return established is None or established == tile.color


def chain_problem(world: World, chain: Sequence[Position], tiles: Dict[Position, Tile] | None = None) -> Optional[str]:
    """Return why ``chain`` could not be a legal selection, or None when it is legal.

    Resolution re-checks every committed chain with this so a malformed chain
    is discarded instead of corrupting the grid.
    """
    if not chain:
        return "empty"
    dims = board_dimensions(world)
    if dims is None:
        return "no_board"
    rows, cols = dims
    tile_map = tiles if tiles is not None else active_tile_map(world)
    seen: set[Position] = set()
    established: Optional[str] = None
    previous: Optional[Position] = None
    for pos in chain:
        row, col = pos
        if not (0 <= row < rows and 0 <= col < cols):
            return "out_of_range"
        if pos in seen:
            return "duplicate"
        tile = tile_map.get(pos)
        if tile is None:
            return "empty_cell"
        if previous is not None and not is_king_adjacent(previous, pos):
            return "not_adjacent"
        if not accepts_tile(established, tile):
            return "color_mismatch"
        if established is None and not tile.is_wildcard:
            established = tile.color
        seen.add(pos)
        previous = pos
    return None
