from esper import World

from popmatch.events.bus import EVENT_BOARD_GENERATED, EVENT_LEVEL_STARTED, EventBus
from popmatch.systems.board_ops import board_dimensions, generate_grid
from popmatch.utils.log import get_logger

log = get_logger(__name__)


class BoardSystem:
    """Owns grid dealing: every level start gets a freshly generated board."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_LEVEL_STARTED, self.on_level_started)

    def on_level_started(self, sender, **kwargs):
        self.regenerate()

    def regenerate(self) -> None:
        filled = generate_grid(self.world)
        dims = board_dimensions(self.world) or (0, 0)
        log.debug("dealt %d tiles on a %dx%d board", len(filled), dims[0], dims[1])
        self.event_bus.emit(EVENT_BOARD_GENERATED, rows=dims[0], cols=dims[1])
