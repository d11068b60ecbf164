"""
Sword Combat Engine

The combat core of a turn-based sword card battler: weapons with
durability and draw attacks, technique cards, enemies with delay-gated
scripted action queues, charged attacks and counter stances, waves,
rewards and level ups.

Core subsystems:
- state: Cards, enemies, player, game phase, session
- calc: Reach resolution, damage/parry/reward formulas
- effects: Enemy status effects, the count-effect FIFO
- handlers: Piles, enemy action cycle, progression
- content: Template tables and instance factories
- combat_engine: The card-play pipeline and turn flow
- persistence: Versioned session snapshots

Usage:
    from packages.swordcore import CombatEngine, ContentLibrary, GameSession

    content = ContentLibrary.default()
    session = GameSession.new(deck=content.starter_deck(), seed=7)
    engine = CombatEngine(session, content=content)
    engine.start_combat()

    for index in engine.playable_cards():
        engine.use_card(index)
        break
    engine.end_turn()
"""

__version__ = "0.1.0"

# Configuration and errors
from .config import GameConfig, DEFAULT_CONFIG
from .errors import RejectReason, RejectedAction, IllegalTransition, CorruptSnapshot, SwordcoreError

# Reach and damage
from .calc.reach import Reach, SkillReach, resolve_reach, combine_reach, select_targets
from .calc.damage import calculate_base_damage, calculate_hit_damage, calculate_parry_rate

# State
from .state.cards import Card, Weapon, Skill, SkillEffect, EffectKind, SkillKind, DrawAttack
from .state.enemy import Enemy, EnemyAction, EnemyActionType
from .state.player import PlayerState, CountEffect, CountEffectKind, PassiveKind
from .state.phase import GamePhase
from .state.game import GameState
from .state.session import GameSession, RuntimeState

# Content
from .content.library import ContentLibrary

# Engine
from .events import EngineEvent, EventBus, CombatLog
from .steps import StepQueue
from .combat_engine import CombatEngine, ActionResult

# Persistence
from .persistence import (
    MemoryStorage,
    JsonFileStorage,
    serialize_snapshot,
    parse_snapshot,
    persist_snapshot,
    load_snapshot,
    has_restorable_snapshot,
    clear_snapshot,
)
