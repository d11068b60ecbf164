"""
Enemy Action Queue - delay countdowns and the scripted action cycle.

Each enemy's `action_queue` is an ordered cycle; only the head is armed.
Non-swift player actions call reduce_delays(enemies, 1); every enemy
whose head is then at 0 or below is ready. Once its action has fired (or
been skipped) rotate_action() moves it to the tail with its delay reset,
or, for bosses, appends a fresh instance of the next template.

The actual effect of a fired action (damage, parries, summons) lives in
the combat engine since it touches player state.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..state.enemy import Enemy, EnemyAction

logger = logging.getLogger(__name__)

__all__ = [
    "arm_enemy",
    "arm_enemies",
    "reduce_delays",
    "ready_enemies",
    "rotate_action",
    "tick_enemy_timers",
    "legal_targets",
]


def arm_enemy(enemy: Enemy) -> None:
    """Build the action cycle from the enemy's action list (combat start / spawn)."""
    if enemy.is_boss and not enemy.action_templates:
        enemy.action_templates = [a.fresh() for a in enemy.actions]
    enemy.action_queue = [a.fresh() for a in enemy.actions]
    enemy.next_template_index = 0


def arm_enemies(enemies: List[Enemy]) -> None:
    for enemy in enemies:
        if not enemy.action_queue:
            arm_enemy(enemy)


def reduce_delays(enemies: List[Enemy], amount: int = 1) -> List[Enemy]:
    """
    Count every living enemy's armed action down by `amount`.

    No clamping: delays may go negative. Returns the enemies that are now
    ready, in line order.
    """
    if amount:
        for enemy in enemies:
            head = enemy.head_action
            if enemy.is_alive and head is not None:
                head.current_delay -= amount
    return ready_enemies(enemies)


def ready_enemies(enemies: List[Enemy]) -> List[Enemy]:
    return [e for e in enemies if e.is_alive and e.head_action is not None and e.head_action.is_ready]


def rotate_action(enemy: Enemy) -> Optional[EnemyAction]:
    """
    Retire the head action after it fired and arm the next one.

    Regular enemies recycle the same action at the tail with its base
    delay. Bosses append a new instance of the next template in their
    cycle instead.
    """
    if not enemy.action_queue:
        return None
    fired = enemy.action_queue.pop(0)
    if enemy.is_boss and enemy.action_templates:
        template = enemy.action_templates[enemy.next_template_index % len(enemy.action_templates)]
        enemy.next_template_index = (enemy.next_template_index + 1) % len(enemy.action_templates)
        enemy.action_queue.append(template.fresh())
    else:
        fired.rearm()
        enemy.action_queue.append(fired)
    return fired


def tick_enemy_timers(enemies: List[Enemy]) -> None:
    """End-of-turn countdown of stun, taunt and summon cooldown."""
    for enemy in enemies:
        if enemy.stun > 0:
            enemy.stun -= 1
        if enemy.taunt_duration > 0:
            enemy.taunt_duration -= 1
            if enemy.taunt_duration <= 0:
                enemy.is_taunting = False
        if enemy.summon_cooldown > 0:
            enemy.summon_cooldown -= 1


def legal_targets(enemies: List[Enemy]) -> List[Enemy]:
    """Taunting enemies if any are taunting, otherwise every living enemy."""
    living = [e for e in enemies if e.is_alive]
    taunting = [e for e in living if e.taunt_active]
    return taunting or living
