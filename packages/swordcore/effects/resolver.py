"""
Effect Resolver - atomic status effects on enemies.

Every damage-dealing path (skill attacks, draw attacks, charge payoffs)
funnels its on-hit side effects through these functions, so bleed and
poison stacking, armor reduction and action cancelling behave the same
everywhere.

Functions mutate the given enemy and return what changed; they never
touch player state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..state.cards import DrawAttack, StatusSpec, Weapon
from ..state.enemy import Enemy, EnemyAction, StatusStack

__all__ = [
    "EffectReport",
    "apply_bleed",
    "apply_poison",
    "apply_armor_reduction",
    "cancel_next_action",
    "increase_next_delay",
    "apply_weapon_on_hit",
    "apply_draw_attack_effects",
    "apply_critical_draw_attack_effects",
    "tick_status",
]


@dataclass
class EffectReport:
    """What a batch of on-hit effects did to one enemy."""
    enemy_id: str
    bleed_stacks: int = 0
    poison_stacks: int = 0
    armor_reduced: int = 0
    delay_added: int = 0
    cancelled: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.bleed_stacks or self.poison_stacks or self.armor_reduced
                    or self.delay_added or self.cancelled)

    def merge(self, other: "EffectReport") -> "EffectReport":
        self.bleed_stacks += other.bleed_stacks
        self.poison_stacks += other.poison_stacks
        self.armor_reduced += other.armor_reduced
        self.delay_added += other.delay_added
        self.cancelled.extend(other.cancelled)
        return self


# =============================================================================
# Atomic effects
# =============================================================================


def apply_bleed(enemy: Enemy, damage: int, duration: int) -> StatusStack:
    """Append a new bleed stack; existing stacks are left alone."""
    stack = StatusStack(damage=int(damage), duration=int(duration))
    enemy.bleeds.append(stack)
    return stack


def apply_poison(enemy: Enemy, damage: int, duration: int) -> StatusStack:
    """Append a new poison stack; existing stacks are left alone."""
    stack = StatusStack(damage=int(damage), duration=int(duration))
    enemy.poisons.append(stack)
    return stack


def apply_armor_reduction(enemy: Enemy, amount: int) -> int:
    """Permanently lower armor, clamped at 0. Returns the amount removed."""
    if amount <= 0 or enemy.defense <= 0:
        return 0
    reduced = min(int(amount), enemy.defense)
    enemy.defense -= reduced
    return reduced


def cancel_next_action(enemy: Enemy) -> Optional[EnemyAction]:
    """
    Cancel the armed action.

    The head is skipped without firing: it goes to the back of the cycle
    with its delay reset, and the next action becomes armed.
    """
    if not enemy.action_queue:
        return None
    action = enemy.action_queue.pop(0)
    action.rearm()
    enemy.action_queue.append(action)
    return action


def increase_next_delay(enemy: Enemy, amount: int) -> int:
    head = enemy.head_action
    if head is None or amount <= 0:
        return 0
    head.current_delay += amount
    return amount


def _apply_status(enemy: Enemy, report: EffectReport, bleed: Optional[StatusSpec],
                  poison: Optional[StatusSpec]) -> None:
    if bleed is not None:
        apply_bleed(enemy, bleed.damage, bleed.duration)
        report.bleed_stacks += 1
    if poison is not None:
        apply_poison(enemy, poison.damage, poison.duration)
        report.poison_stacks += 1


# =============================================================================
# Composite effects
# =============================================================================


def apply_weapon_on_hit(enemy: Enemy, weapon: Weapon) -> EffectReport:
    """Persistent weapon effects: bleed, poison and armor break."""
    report = EffectReport(enemy_id=enemy.id)
    if not enemy.is_alive:
        return report
    on_hit = weapon.on_hit
    _apply_status(enemy, report, on_hit.bleed, on_hit.poison)
    if on_hit.armor_break:
        report.armor_reduced += apply_armor_reduction(enemy, on_hit.armor_break)
    return report


def apply_draw_attack_effects(enemy: Enemy, draw_attack: DrawAttack) -> EffectReport:
    """Draw-attack extras that land on every hit: armor reduce, status, cancel."""
    report = EffectReport(enemy_id=enemy.id)
    if not enemy.is_alive:
        return report
    if draw_attack.armor_reduce:
        report.armor_reduced += apply_armor_reduction(enemy, draw_attack.armor_reduce)
    _apply_status(enemy, report, draw_attack.bleed, draw_attack.poison)
    if draw_attack.cancel_enemy_skill:
        cancelled = cancel_next_action(enemy)
        if cancelled is not None:
            report.cancelled.append(cancelled.id)
    return report


def apply_critical_draw_attack_effects(enemy: Enemy, draw_attack: DrawAttack) -> EffectReport:
    """Extras that only land when the draw attack crits."""
    report = EffectReport(enemy_id=enemy.id)
    if not enemy.is_alive:
        return report
    _apply_status(enemy, report, draw_attack.critical_bleed, draw_attack.critical_poison)
    if draw_attack.critical_cancel:
        cancelled = cancel_next_action(enemy)
        if cancelled is not None:
            report.cancelled.append(cancelled.id)
    return report


# =============================================================================
# Status ticks
# =============================================================================


def tick_status(stacks: List[StatusStack]) -> int:
    """
    Tick a bleed or poison stack list in place.

    Every stack deals its damage, loses one duration, and expired stacks
    are dropped. Returns the total damage to apply.
    """
    total = sum(s.damage for s in stacks)
    for stack in stacks:
        stack.duration -= 1
    stacks[:] = [s for s in stacks if s.duration > 0]
    return total
