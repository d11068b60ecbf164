"""
State module - everything the engine mutates.

Contains:
- Cards (Weapon/Skill tagged union with stable identities)
- Enemies and their scripted action queues
- Player state (piles, buffs, count effects, passives)
- Game state and the phase state machine
- GameSession, the single owner of all of the above
"""

from .cards import (
    Card,
    CardKind,
    SkillKind,
    EffectKind,
    CriticalCondition,
    SELECTION_EFFECTS,
    StatusSpec,
    DrawAttack,
    WeaponOnHit,
    Weapon,
    SkillEffect,
    Skill,
    card_from_dict,
    is_weapon,
    new_uid,
)

from .enemy import (
    Enemy,
    EnemyAction,
    EnemyActionEffect,
    EnemyActionType,
    EnemyEffectType,
    StatusStack,
)

from .player import (
    PlayerState,
    Buff,
    BuffKind,
    Passive,
    PassiveKind,
    CountEffect,
    CountEffectKind,
)

from .phase import GamePhase, PhaseTransition, PHASE_TRANSITIONS, can_transition, check_transition, is_game_phase
from .game import GameState
from .session import GameSession, RuntimeState, PendingTarget, PendingSkillSelection
