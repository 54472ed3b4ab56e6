import random

from esper import World

from popmatch.components.combo_meter import ComboMeter
from popmatch.components.game_state import GamePhase, GameState
from popmatch.components.selection import Selection
from popmatch.components.targets import Targets
from popmatch.config import GameConfig
from popmatch.events.bus import EventBus
from popmatch.factories.tiles import TileFactory
from popmatch.systems.board_ops import create_board_entities, generate_grid
from popmatch.systems.level_ops import load_level


def create_world(
    event_bus: EventBus,
    config: GameConfig | None = None,
    *,
    initial_phase: GamePhase = GamePhase.HOME,
    rng: random.Random | None = None,
) -> World:
    """Build a world holding the board, one entity per cell and the game state entity.

    Level 0 is loaded and its grid dealt immediately, so the world is
    consistent even before any system is attached. ``event_bus`` is accepted
    for symmetry with the systems; nothing is emitted during construction.
    """
    config = config or GameConfig()
    world = World()
    if rng is None:
        rng = random.Random(config.seed)
    setattr(world, "random", rng)
    setattr(world, "config", config)
    setattr(world, "level_cache", {})
    setattr(
        world,
        "tile_factory",
        TileFactory(
            rng,
            palette=config.palette,
            powerups_enabled=config.ruleset.powerups_enabled,
            powerup_chance=config.ruleset.powerup_chance,
        ),
    )

    world.create_entity(
        GameState(phase=initial_phase),
        Targets(),
        ComboMeter(),
        Selection(),
    )
    create_board_entities(world, config.rows, config.cols)
    load_level(world, 0)
    generate_grid(world)
    return world
