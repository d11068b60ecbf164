"""
Handlers for sword combat.

Pile Handlers:
- draw_cards / draw_with_guaranteed_weapon: Draws with reshuffle and hand-size overflow
- reset_deck: Wave-clear deck reset
- remove_mirage_cards: End-of-turn mirage cleanup

Enemy Handlers:
- reduce_delays / rotate_action: The scripted action cycle
- tick_enemy_timers: Stun, taunt and summon cooldowns
- legal_targets: Taunt-aware targeting

Progression:
- gain_exp / learn_passive
"""

from .cards import (
    DrawResult,
    draw_cards,
    draw_first_weapon,
    draw_with_guaranteed_weapon,
    reset_deck,
    remove_mirage_cards,
    reveal_cards,
    shuffle_discard_into_deck,
    take_from_pile,
)
from .enemy_actions import (
    arm_enemy,
    arm_enemies,
    reduce_delays,
    ready_enemies,
    rotate_action,
    tick_enemy_timers,
    legal_targets,
)
from .progression import gain_exp, learn_passive
