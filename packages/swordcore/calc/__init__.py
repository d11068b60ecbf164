"""
Calculation utilities for sword combat.

Contains:
- Reach resolution and target selection (pure functions)
- Damage, parry, counter and reward math (pure functions, no side effects)
"""

from .reach import (
    Reach,
    SkillReach,
    REACH_ORDER,
    REACH_TO_COUNT,
    ALL_TARGETS,
    reach_from_count,
    target_count,
    combine_reach,
    resolve_reach,
    parse_reach,
    parse_skill_reach,
    select_targets,
)

from .damage import (
    calculate_base_damage,
    calculate_hit_damage,
    effective_defense,
    calculate_counter_damage,
    calculate_parry_rate,
    calculate_lifesteal,
    calculate_gold_drop,
    exp_for_kill,
    exp_to_next_level,
    split_buffs,
    # Constants
    MIN_HIT_DAMAGE,
    DEFAULT_CRIT_MULT,
    COUNTER_INCOMING_RATIO,
)

__all__ = [
    # Reach
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
    # Damage
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
    # Constants
    "MIN_HIT_DAMAGE",
    "DEFAULT_CRIT_MULT",
    "COUNTER_INCOMING_RATIO",
]
