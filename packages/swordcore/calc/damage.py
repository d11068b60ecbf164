"""
Damage Calculator - single source of truth for combat numbers.

Design principles:
1. Pure functions - no side effects, no state
2. Every damage-dealing path (skills, draw attacks, charge payoffs,
   counters) goes through these helpers
3. Floor to int at the end, never in the middle

Outgoing damage order:
1. Weapon attack + flat buff bonus
2. Skill multiplier
3. Focus multiplier (1 + focus buffs)
4. Critical multiplier
5. Defense: ignored outright by piercing paths, otherwise reduced by
   max(0, defense - (weapon pierce + skill pierce)) with a floor of 1
"""

import math
from typing import Iterable, Optional, Tuple

__all__ = [
    "calculate_base_damage",
    "calculate_hit_damage",
    "effective_defense",
    "calculate_counter_damage",
    "calculate_parry_rate",
    "calculate_lifesteal",
    "calculate_gold_drop",
    "exp_for_kill",
    "exp_to_next_level",
    "split_buffs",
    "MIN_HIT_DAMAGE",
    "DEFAULT_CRIT_MULT",
    "COUNTER_INCOMING_RATIO",
]


# =============================================================================
# CONSTANTS
# =============================================================================

# Non-piercing hits always deal at least this much
MIN_HIT_DAMAGE = 1

DEFAULT_CRIT_MULT = 1.5

# Share of the blocked hit that a counter reflects
COUNTER_INCOMING_RATIO = 0.5


# =============================================================================
# OUTGOING DAMAGE
# =============================================================================

def calculate_base_damage(
    weapon_attack: float,
    buff_bonus: float = 0,
    skill_multiplier: float = 1.0,
    focus_multiplier: float = 1.0,
    critical_multiplier: float = 1.0,
) -> float:
    """
    Pre-defense damage of a single hit.

    (weaponAttack + buffBonus) x skillMultiplier x focusMultiplier x criticalMultiplier

    Kept as a float so the defense step can floor once.
    """
    return (weapon_attack + buff_bonus) * skill_multiplier * focus_multiplier * critical_multiplier


def effective_defense(enemy_defense: int, weapon_pierce: int = 0, skill_pierce: int = 0) -> int:
    """Armor left after flat pierce, never negative."""
    return max(0, enemy_defense - (weapon_pierce + skill_pierce))


def calculate_hit_damage(
    base_damage: float,
    enemy_defense: int = 0,
    weapon_pierce: int = 0,
    skill_pierce: int = 0,
    ignore_defense: bool = False,
) -> int:
    """
    Final damage of one hit against one enemy.

    Args:
        base_damage: Output of calculate_base_damage
        enemy_defense: Target's flat armor
        weapon_pierce: Flat armor ignored by the weapon
        skill_pierce: Flat armor ignored by the skill
        ignore_defense: Armor-ignoring path (pierce skills, armor breaker,
            piercing crits) - base damage lands unreduced

    Returns:
        Damage as int; non-ignoring hits never go below MIN_HIT_DAMAGE
    """
    if ignore_defense:
        return max(0, math.floor(base_damage))
    reduced = base_damage - effective_defense(enemy_defense, weapon_pierce, skill_pierce)
    return max(MIN_HIT_DAMAGE, math.floor(reduced))


def calculate_lifesteal(total_damage: int, ratio: float) -> int:
    return math.floor(total_damage * ratio)


# =============================================================================
# DEFENSE
# =============================================================================

def calculate_parry_rate(
    weapon_defense: int,
    defense_buffs: Iterable[float] = (),
    passive_bonus: int = 0,
    counter_multiplier: Optional[float] = None,
) -> float:
    """
    Percent chance to parry an incoming hit.

    A live counter-defense effect replaces the normal rate with
    weapon_defense x its stage multiplier; buffs and passives then do not
    apply.
    """
    if counter_multiplier is not None:
        return weapon_defense * counter_multiplier
    return weapon_defense + sum(defense_buffs) + passive_bonus


def calculate_counter_damage(weapon_attack: float, counter_multiplier: float, incoming_damage: int,
                             incoming_ratio: float = COUNTER_INCOMING_RATIO) -> int:
    """weaponAttack x counterMultiplier + incomingDamage x 0.5, floored."""
    return math.floor(weapon_attack * counter_multiplier + incoming_damage * incoming_ratio)


# =============================================================================
# REWARDS
# =============================================================================

def calculate_gold_drop(max_hp: int, is_boss: bool, roll: float,
                        hp_divisor: int = 5, boss_multiplier: int = 3,
                        variance: float = 0.3) -> int:
    """
    Gold for a kill.

    Base is max_hp / hp_divisor (x boss_multiplier for bosses), then shifted
    by up to +-variance using `roll` in [0, 1). Never below 1.
    """
    base = max_hp // hp_divisor
    if is_boss:
        base *= boss_multiplier
    spread = math.floor(base * variance)
    amount = base + math.floor(roll * spread * 2) - spread
    return max(1, amount)


def exp_for_kill(max_hp: int, is_summoned: bool) -> int:
    """Half the enemy's max hp; summoned minions give nothing."""
    if is_summoned:
        return 0
    return max_hp // 2


def exp_to_next_level(level: int, exp_per_level: int = 50) -> int:
    return level * exp_per_level


def split_buffs(attack_buffs: Iterable[float], focus_buffs: Iterable[float]) -> Tuple[float, float]:
    """(flat attack bonus, focus multiplier) from the active buffs."""
    return sum(attack_buffs), 1.0 + sum(focus_buffs)
