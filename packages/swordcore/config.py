"""
Game constants for the sword combat engine.

Every tunable number the engine reads lives on GameConfig. Content values
(weapon attack, enemy hp, ...) are NOT here; they come from the content
library. Defaults match the shipped game; a .env file or SWORDCORE_*
environment variables can override them for balancing runs.

Usage:
    from packages.swordcore.config import GameConfig, DEFAULT_CONFIG

    config = GameConfig.from_env()
    engine = CombatEngine(session, config=config)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from dotenv import load_dotenv


ENV_PREFIX = "SWORDCORE_"


@dataclass(frozen=True)
class GameConfig:
    """Immutable engine constants."""

    # Piles and draws
    max_hand_size: int = 12
    initial_draw: int = 5
    draw_per_turn: int = 2
    deck_size: int = 20

    # Mana
    initial_mana: int = 3
    max_mana: int = 10

    # Player start
    starting_hp: int = 50
    starting_level: int = 1

    # Combat math
    default_critical_multiplier: float = 1.5
    counter_incoming_ratio: float = 0.5
    default_enemy_defend: int = 5
    base_wait_count: int = 1

    # Enemies
    max_enemies: int = 5
    summon_cooldown: int = 3
    gold_hp_divisor: int = 5
    boss_gold_multiplier: int = 3
    gold_variance: float = 0.3

    # Rolls
    card_drop_chance: float = 0.3
    weapon_drop_chance: float = 0.25
    reward_weapon_chance: float = 0.33
    mirage_chance: float = 0.33
    reward_card_count: int = 3

    # Progression
    exp_per_level: int = 50
    level_up_max_hp: int = 10
    level_up_heal: int = 20

    # Presentation pacing (milliseconds)
    hit_interval_ms: int = 250
    enemy_action_interval_ms: int = 400

    # Newest combat log entries kept in memory
    combat_log_size: int = 2000

    # Persistence
    snapshot_version: int = 1
    storage_key: str = "sword-master-save-v1"

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "GameConfig":
        """
        Build a config from SWORDCORE_* variables.

        Loads a .env file first when reading the real environment. Unknown
        variables are ignored; values are coerced to the field's type.
        """
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            default = getattr(DEFAULT_CONFIG, f.name)
            if isinstance(default, bool):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes")
            elif isinstance(default, int):
                overrides[f.name] = int(raw)
            elif isinstance(default, float):
                overrides[f.name] = float(raw)
            else:
                overrides[f.name] = raw
        return replace(DEFAULT_CONFIG, **overrides)


DEFAULT_CONFIG = GameConfig()
