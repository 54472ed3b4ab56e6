from __future__ import annotations

import random
from typing import List

from esper import World

from popmatch.components.effect import TransientEffect
from popmatch.constants import COMIC_WORDS, EXPLOSION_DURATION, SHAKE_DURATION
from popmatch.events.bus import EVENT_EFFECT_EXPIRED, EVENT_EFFECT_SPAWNED, EVENT_MATCH_RESOLVED, EVENT_TICK, EventBus
from popmatch.systems.level_ops import get_config
from popmatch.systems.scoring import BonusTier

EFFECT_EXPLOSION = 'explosion'
EFFECT_SHAKE = 'shake'


class EffectsSystem:
    """Fire-and-forget presentation tokens with their own lifetimes.

    Each resolution spawns an explosion callout at the chain's middle cell;
    bonus and super tiers also shake the board. Tokens count down on tick
    events and delete themselves; nothing here feeds back into game state.
    """

    def __init__(self, world: World, event_bus: EventBus, *, rng: random.Random | None = None):
        self.world = world
        self.event_bus = event_bus
        # Never world.random: board generation must not depend on effects.
        self._rng = rng if rng is not None else random.Random(get_config(world).seed)
        self.event_bus.subscribe(EVENT_MATCH_RESOLVED, self.on_match_resolved)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_match_resolved(self, sender, **kwargs):
        result = kwargs.get('result')
        if result is None:
            return
        self._spawn(TransientEffect(
            kind=EFFECT_EXPLOSION,
            remaining=EXPLOSION_DURATION,
            position=result.explosion_origin,
            text=self._rng.choice(COMIC_WORDS),
            color=result.chain_color,
        ))
        if result.tier in (BonusTier.BONUS, BonusTier.SUPER):
            self._spawn(TransientEffect(kind=EFFECT_SHAKE, remaining=SHAKE_DURATION))

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        expired: List[tuple[int, str]] = []
        for entity, effect in self.world.get_component(TransientEffect):
            effect.remaining -= dt
            if effect.remaining <= 0:
                expired.append((entity, effect.kind))
        for entity, kind in expired:
            self.world.delete_entity(entity, immediate=True)
            self.event_bus.emit(EVENT_EFFECT_EXPIRED, effect_entity=entity, kind=kind)

    def active_effects(self) -> List[TransientEffect]:
        return [effect for _, effect in self.world.get_component(TransientEffect)]

    def is_shaking(self) -> bool:
        return any(effect.kind == EFFECT_SHAKE for effect in self.active_effects())

    def _spawn(self, effect: TransientEffect) -> int:
        entity = self.world.create_entity(effect)
        self.event_bus.emit(EVENT_EFFECT_SPAWNED, effect_entity=entity, kind=effect.kind)
        return entity
