from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from esper import World

from popmatch.components.active_switch import ActiveSwitch
from popmatch.components.board import Board
from popmatch.components.board_position import BoardPosition
from popmatch.components.tile import Tile
from popmatch.factories.tiles import TileFactory

Position = Tuple[int, int]
ColorEntry = Tuple[int, int, str]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    color: str
    tile_id: int


def get_board(world: World) -> Board | None:
    for _, board in world.get_component(Board):
        return board
    return None


def board_dimensions(world: World) -> Tuple[int, int] | None:
    board = get_board(world)
    if board is None:
        return None
    return board.rows, board.cols


def get_tile_factory(world: World) -> TileFactory:
    factory = getattr(world, "tile_factory", None)
    if isinstance(factory, TileFactory):
        return factory
    raise RuntimeError("TileFactory not attached to world")


def position_entity_map(world: World) -> Dict[Position, int]:
    return {(pos.row, pos.col): entity for entity, pos in world.get_component(BoardPosition)}


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for entity, position in world.get_component(BoardPosition):
        if position.row == row and position.col == col:
            return entity
    return None


def in_bounds(world: World, row: int, col: int) -> bool:
    board = get_board(world)
    return board is not None and board.contains(row, col)


def tile_at(world: World, row: int, col: int) -> Tile | None:
    """Return the tile at (row, col), or None for empty or out-of-range cells."""
    if not in_bounds(world, row, col):
        return None
    entity = get_entity_at(world, row, col)
    if entity is None:
        return None
    try:
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            return None
        return world.component_for_entity(entity, Tile)
    except KeyError:
        return None


def active_tile_map(world: World) -> Dict[Position, Tile]:
    """Return mapping of occupied positions to their tiles."""
    mapping: Dict[Position, Tile] = {}
    for entity, position in world.get_component(BoardPosition):
        try:
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if not switch.active:
                continue
            tile: Tile = world.component_for_entity(entity, Tile)
        except KeyError:
            continue
        mapping[(position.row, position.col)] = tile
    return mapping


def empty_cells(world: World) -> List[Position]:
    empties: List[Position] = []
    for entity, position in world.get_component(BoardPosition):
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            empties.append((position.row, position.col))
    return sorted(empties)


def is_king_adjacent(a: Position, b: Position) -> bool:
    """True when b is one king move away from a (diagonals included, not identical)."""
    dr = abs(a[0] - b[0])
    dc = abs(a[1] - b[1])
    return dr <= 1 and dc <= 1 and (dr, dc) != (0, 0)


def _write_tile(world: World, entity: int, tile: Tile) -> None:
    target: Tile = world.component_for_entity(entity, Tile)
    target.color = tile.color
    target.powerup = tile.powerup
    target.tile_id = tile.tile_id
    world.component_for_entity(entity, ActiveSwitch).active = True


def create_board_entities(world: World, rows: int, cols: int) -> int:
    """Create the board entity and one entity per cell; cells start empty."""
    board_entity = world.create_entity(Board(rows=rows, cols=cols))
    for row in range(rows):
        for col in range(cols):
            world.create_entity(
                BoardPosition(row=row, col=col),
                ActiveSwitch(active=False),
                Tile(color=""),
            )
    return board_entity


def generate_grid(world: World) -> List[Position]:
    """Fill every cell with a freshly generated tile in row-major order."""
    factory = get_tile_factory(world)
    positions = position_entity_map(world)
    filled: List[Position] = []
    for pos in sorted(positions):
        _write_tile(world, positions[pos], factory.spawn())
        filled.append(pos)
    return filled


def place_tile(world: World, row: int, col: int, tile: Tile) -> bool:
    entity = get_entity_at(world, row, col)
    if entity is None:
        return False
    _write_tile(world, entity, tile)
    return True


def clear_tiles(world: World, positions: Iterable[Position]) -> List[ColorEntry]:
    """Empty the given cells and return (row, col, color) for each tile removed."""
    entity_map = position_entity_map(world)
    cleared: List[ColorEntry] = []
    for row, col in sorted(set(positions)):
        entity = entity_map.get((row, col))
        if entity is None:
            continue
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            continue
        tile: Tile = world.component_for_entity(entity, Tile)
        cleared.append((row, col, tile.color))
        switch.active = False
    return cleared


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Plan a stable per-column compaction toward the bottom row."""
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    tiles = active_tile_map(world)
    moves: List[GravityMove] = []
    for col in range(cols):
        filled_rows = [row for row in range(rows) if (row, col) in tiles]
        first_target = rows - len(filled_rows)
        for offset, original_row in enumerate(filled_rows):
            target_row = first_target + offset
            if target_row == original_row:
                continue
            tile = tiles[(original_row, col)]
            moves.append(GravityMove(source=(original_row, col), target=(target_row, col),
                                     color=tile.color, tile_id=tile.tile_id))
    return moves


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    entity_map = position_entity_map(world)
    # Lowest targets first so no destination still holds an unmoved tile.
    for move in sorted(moves, key=lambda m: (m.target[1], -m.target[0])):
        src_entity = entity_map.get(move.source)
        dst_entity = entity_map.get(move.target)
        if src_entity is None or dst_entity is None:
            continue
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        if not src_switch.active:
            continue
        src_tile: Tile = world.component_for_entity(src_entity, Tile)
        _write_tile(world, dst_entity, Tile(color=src_tile.color, powerup=src_tile.powerup, tile_id=src_tile.tile_id))
        src_switch.active = False


def refill_inactive_tiles(world: World) -> List[Position]:
    factory = get_tile_factory(world)
    entity_map = position_entity_map(world)
    spawned: List[Position] = []
    for pos in sorted(entity_map):
        entity = entity_map[pos]
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if switch.active:
            continue
        _write_tile(world, entity, factory.spawn())
        spawned.append(pos)
    return spawned


def settle_board(world: World, *, refill: bool = True) -> Tuple[List[GravityMove], List[Position]]:
    """Compact every column, then refill vacated cells. Runs once; landing tiles never re-match."""
    moves = compute_gravity_moves(world)
    if moves:
        apply_gravity_moves(world, moves)
    new_tiles = refill_inactive_tiles(world) if refill else []
    return moves, new_tiles


def board_layout(world: World) -> List[List[Optional[Tile]]]:
    """Row-major copy of the grid for read-only consumers."""
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    tiles = active_tile_map(world)
    layout: List[List[Optional[Tile]]] = []
    for row in range(rows):
        row_tiles: List[Optional[Tile]] = []
        for col in range(cols):
            tile = tiles.get((row, col))
            if tile is None:
                row_tiles.append(None)
            else:
                row_tiles.append(Tile(color=tile.color, powerup=tile.powerup, tile_id=tile.tile_id))
        layout.append(row_tiles)
    return layout
