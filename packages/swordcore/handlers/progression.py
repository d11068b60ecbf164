"""
Progression - experience, level ups and passives.
"""

from __future__ import annotations

import logging

from ..calc.damage import exp_to_next_level
from ..config import DEFAULT_CONFIG, GameConfig
from ..state.player import Passive, PlayerState

logger = logging.getLogger(__name__)


def gain_exp(player: PlayerState, amount: int, config: GameConfig = DEFAULT_CONFIG) -> int:
    """
    Add experience and apply any level ups it pays for.

    Each level costs `level x exp_per_level`, raises max hp and heals.
    Returns the number of levels gained.
    """
    if amount <= 0:
        return 0
    player.exp += amount
    gained = 0
    while player.exp >= exp_to_next_level(player.level, config.exp_per_level):
        player.exp -= exp_to_next_level(player.level, config.exp_per_level)
        player.level += 1
        player.max_hp += config.level_up_max_hp
        player.hp = min(player.max_hp, player.hp + config.level_up_heal)
        gained += 1
        logger.info("Level up -> %d", player.level)
    return gained


def learn_passive(player: PlayerState, passive: Passive) -> Passive:
    """Add a new passive, or level up the one already owned (capped)."""
    for owned in player.passives:
        if owned.kind == passive.kind:
            owned.level_up()
            return owned
    player.passives.append(passive)
    return passive
