"""
Count effects - charged attacks and counter-defense stances.

The player's `count_effects` list is a FIFO queue. Only its head is live:
it alone replaces the parry rate (counter-defense / flow-read) and only
the head may pay off (charge attack). Effects behind it keep counting
down but wait their turn; once the head resolves, any effect that has
already run out resolves on the same tick.

Ticking rules:
- Non-swift actions tick once; swift actions never tick.
- A freshly registered effect skips exactly one tick (its `is_new` flag
  is consumed by the first tick that follows registration, whichever
  action issues it).
- Counters stop at 0.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..state.cards import EffectKind, Skill
from ..state.player import CountEffect, CountEffectKind, PlayerState

logger = logging.getLogger(__name__)

__all__ = [
    "register_charge",
    "register_counter_defense",
    "active_effect",
    "active_defense_effect",
    "tick_count_effects",
    "consume_effect",
]

# Flow-read falls back to these when the skill carries no tables
DEFAULT_DEFENSE_SCALING = (1.0, 2.0, 4.0, 6.0, 8.0)
DEFAULT_COUNTER_SCALING = (0.25, 0.5, 1.0, 1.5, 2.0)


def register_charge(player: PlayerState, skill: Skill, target_id: Optional[str] = None) -> CountEffect:
    """Queue a charged attack. Stores the formula, not the damage."""
    duration = max(1, int(skill.effect.duration or 1)) if skill.effect else 1
    effect = CountEffect(
        kind=CountEffectKind.CHARGE_ATTACK,
        name=skill.name,
        remaining_delays=duration,
        max_delays=duration,
        attack_multiplier=skill.attack_multiplier,
        skill_attack_count=skill.attack_count,
        reach=skill.reach,
        target_id=target_id,
        source_uid=skill.uid,
    )
    player.count_effects.append(effect)
    logger.debug("Registered charge %s (%d delays)", skill.name, duration)
    return effect


def register_counter_defense(player: PlayerState, skill: Skill) -> CountEffect:
    """Queue a counter-defense or flow-read stance from a defensive skill."""
    stance = skill.effect
    duration = max(1, int(stance.duration or 1))
    if stance.kind == EffectKind.FLOW_READ:
        effect = CountEffect(
            kind=CountEffectKind.FLOW_READ,
            name=skill.name,
            remaining_delays=duration,
            max_delays=duration,
            defense_multiplier=float(stance.value or 1.0),
            counter_attack=True,
            counter_multiplier=stance.counter_multiplier,
            consume_on_success=stance.consume_on_success,
            defense_scaling=tuple(stance.defense_scaling) or DEFAULT_DEFENSE_SCALING,
            counter_scaling=tuple(stance.counter_scaling) or DEFAULT_COUNTER_SCALING,
            source_uid=skill.uid,
        )
    else:
        effect = CountEffect(
            kind=CountEffectKind.COUNTER_DEFENSE,
            name=skill.name,
            remaining_delays=duration,
            max_delays=duration,
            defense_multiplier=float(stance.value or 1.0),
            counter_attack=stance.counter_attack,
            counter_multiplier=stance.counter_multiplier,
            consume_on_success=stance.consume_on_success,
            source_uid=skill.uid,
        )
    player.count_effects.append(effect)
    logger.debug("Registered %s %s (%d delays)", effect.kind.value, skill.name, duration)
    return effect


def active_effect(player: PlayerState) -> Optional[CountEffect]:
    return player.count_effects[0] if player.count_effects else None


def active_defense_effect(player: PlayerState) -> Optional[CountEffect]:
    """The head effect if it is a defensive stance; later stances wait."""
    head = active_effect(player)
    if head is not None and head.is_defensive:
        return head
    return None


def consume_effect(player: PlayerState, effect: CountEffect) -> bool:
    for i, existing in enumerate(player.count_effects):
        if existing is effect:
            del player.count_effects[i]
            return True
    return False


def tick_count_effects(player: PlayerState) -> List[CountEffect]:
    """
    Advance every count effect by one tick.

    Returns the effects that resolved this tick, in FIFO order. They are
    already removed from the queue; the caller pays off the charges.
    """
    for effect in player.count_effects:
        if effect.is_new:
            effect.is_new = False
            continue
        effect.remaining_delays = max(0, effect.remaining_delays - 1)

    resolved: List[CountEffect] = []
    while player.count_effects and player.count_effects[0].is_expired:
        resolved.append(player.count_effects.pop(0))
    return resolved
