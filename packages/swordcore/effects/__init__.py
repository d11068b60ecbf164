"""
Effects - enemy status effects and the player's count-effect queue.
"""

from .resolver import (
    EffectReport,
    apply_bleed,
    apply_poison,
    apply_armor_reduction,
    cancel_next_action,
    increase_next_delay,
    apply_weapon_on_hit,
    apply_draw_attack_effects,
    apply_critical_draw_attack_effects,
    tick_status,
)

from .count_effects import (
    register_charge,
    register_counter_defense,
    active_effect,
    active_defense_effect,
    tick_count_effects,
    consume_effect,
)
