"""
Reach Resolver - how many enemies an attack touches.

Pure functions, no state. Four ordered tiers (single < double < triple < all)
map to target counts 1/2/3/unbounded. Skills either declare a fixed tier or
defer to the equipped weapon ("weapon") or double it ("weaponDouble").

Target selection works on the ordered enemy list: a contiguous slice
starting at the chosen enemy, or the front-most slice when no enemy was
chosen.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, TypeVar, Union

__all__ = [
    "Reach",
    "SkillReach",
    "REACH_ORDER",
    "REACH_TO_COUNT",
    "ALL_TARGETS",
    "reach_from_count",
    "target_count",
    "combine_reach",
    "resolve_reach",
    "parse_reach",
    "parse_skill_reach",
    "select_targets",
]


# =============================================================================
# TIERS
# =============================================================================

class Reach(Enum):
    """Concrete range tier."""
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    ALL = "all"


class SkillReach(Enum):
    """Reach token a skill may declare."""
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    ALL = "all"
    WEAPON = "weapon"               # use the weapon's tier
    WEAPON_DOUBLE = "weaponDouble"  # weapon's target count x2, re-bucketed


REACH_ORDER: List[Reach] = [Reach.SINGLE, Reach.DOUBLE, Reach.TRIPLE, Reach.ALL]

# "all" is unbounded; 999 keeps slice arithmetic simple
ALL_TARGETS = 999

REACH_TO_COUNT = {
    Reach.SINGLE: 1,
    Reach.DOUBLE: 2,
    Reach.TRIPLE: 3,
    Reach.ALL: ALL_TARGETS,
}


def parse_reach(value: Union[str, Reach, None]) -> Reach:
    """Parse a tier token; unknown values fall back to single."""
    if isinstance(value, Reach):
        return value
    try:
        return Reach(value)
    except ValueError:
        return Reach.SINGLE


def parse_skill_reach(value: Union[str, SkillReach, None]) -> SkillReach:
    """Parse a skill reach token; unknown values fall back to weapon reach."""
    if isinstance(value, SkillReach):
        return value
    if value is None:
        return SkillReach.WEAPON
    try:
        return SkillReach(value)
    except ValueError:
        return SkillReach.WEAPON


# =============================================================================
# RESOLUTION
# =============================================================================

def reach_from_count(count: int) -> Reach:
    """Bucket a target count into a tier (4 or more is "all")."""
    if count >= 4:
        return Reach.ALL
    if count == 3:
        return Reach.TRIPLE
    if count == 2:
        return Reach.DOUBLE
    return Reach.SINGLE


def target_count(reach: Union[Reach, str]) -> int:
    return REACH_TO_COUNT[parse_reach(reach)]


def combine_reach(a: Reach, b: Reach) -> Reach:
    """Merge two reaches by taking the wider tier."""
    return REACH_ORDER[max(REACH_ORDER.index(a), REACH_ORDER.index(b))]


def resolve_reach(skill_reach: Union[SkillReach, str, None], weapon_reach: Union[Reach, str, None]) -> Reach:
    """
    Turn a skill's reach token into a concrete tier.

    Args:
        skill_reach: The skill's declared token
        weapon_reach: The equipped weapon's tier (None when bare-handed,
            treated as single)

    Returns:
        The concrete Reach to target with
    """
    token = parse_skill_reach(skill_reach)
    weapon = parse_reach(weapon_reach) if weapon_reach is not None else Reach.SINGLE

    if token == SkillReach.WEAPON:
        return weapon
    if token == SkillReach.WEAPON_DOUBLE:
        return reach_from_count(REACH_TO_COUNT[weapon] * 2)
    return Reach(token.value)


# =============================================================================
# TARGET SELECTION
# =============================================================================

T = TypeVar("T")


def select_targets(reach: Union[Reach, str], enemies: Sequence[T], base: Optional[T] = None) -> List[T]:
    """
    Pick the enemies a hit of the given reach lands on.

    With a base enemy the slice starts at that enemy and runs right for the
    tier's count, clamped to the end of the list. Without one (or when the
    base is no longer present) the front-most enemies are taken. "all"
    always returns the whole list.
    """
    tier = parse_reach(reach)
    count = REACH_TO_COUNT[tier]
    if not enemies:
        return []
    if tier == Reach.ALL:
        return list(enemies)

    start = 0
    if base is not None:
        for i, enemy in enumerate(enemies):
            if enemy is base:
                start = i
                break
    return list(enemies[start:start + count])
