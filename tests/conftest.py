"""
Shared pytest fixtures for the sword combat test suite.

This module provides reusable fixtures for:
- Card and enemy builders with explicit numbers
- Sessions and engines with a known seed
- The default content library
"""

import pytest
import sys

# Ensure project root is in path
import os
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from packages.swordcore.calc.reach import Reach, SkillReach
from packages.swordcore.combat_engine import CombatEngine
from packages.swordcore.config import GameConfig
from packages.swordcore.content.library import ContentLibrary
from packages.swordcore.handlers.enemy_actions import arm_enemy
from packages.swordcore.state.cards import DrawAttack, Skill, SkillEffect, SkillKind, Weapon
from packages.swordcore.state.enemy import Enemy, EnemyAction, EnemyActionType
from packages.swordcore.state.game import GameState
from packages.swordcore.state.phase import GamePhase
from packages.swordcore.state.player import PlayerState
from packages.swordcore.state.session import GameSession


# =============================================================================
# Builders
# =============================================================================


def build_weapon(attack=10, attack_count=1, durability=5, defense=0, pierce=0,
                 reach=Reach.SINGLE, mana_cost=0, draw_attack=None, **kwargs):
    """Weapon with explicit stats; parry rate 0 by default so enemy hits always land."""
    return Weapon(
        id=kwargs.pop("id", "testblade"),
        name=kwargs.pop("name", "Test Blade"),
        attack=attack,
        attack_count=attack_count,
        reach=reach,
        defense=defense,
        pierce=pierce,
        durability=durability,
        mana_cost=mana_cost,
        draw_attack=draw_attack or DrawAttack(name="Test Draw", durability_cost=1),
        **kwargs,
    )


def build_skill(kind=SkillKind.ATTACK, multiplier=1.0, attack_count=1, mana_cost=0,
                reach=SkillReach.WEAPON, effect=None, **kwargs):
    return Skill(
        id=kwargs.pop("id", "testskill"),
        name=kwargs.pop("name", "Test Skill"),
        skill_kind=kind,
        attack_multiplier=multiplier,
        attack_count=attack_count,
        mana_cost=mana_cost,
        reach=reach,
        effect=effect,
        **kwargs,
    )


def build_enemy(hp=50, defense=0, damage=5, delay=3, actions=None, name="Dummy", **kwargs):
    """Enemy with a single attack (unless `actions` is given), already armed."""
    if actions is None:
        actions = [EnemyAction(id="hit", name="Hit", action_type=EnemyActionType.ATTACK,
                               damage=damage, delay=delay)]
    enemy = Enemy(name=name, hp=hp, max_hp=hp, defense=defense, actions=actions, **kwargs)
    arm_enemy(enemy)
    return enemy


def build_engine(enemies=None, hand=None, deck=None, discard=None, sword=None,
                 mana=10, hp=50, seed=1, content=None, config=None, **engine_kwargs):
    """Engine already in combat with exactly the given piles and enemies."""
    player = PlayerState(hp=hp, max_hp=hp, mana=mana, max_mana=mana,
                         hand=list(hand or []), deck=list(deck or []), discard=list(discard or []),
                         current_sword=sword)
    game = GameState(phase=GamePhase.COMBAT,
                     enemies=list(enemies if enemies is not None else [build_enemy()]))
    session = GameSession(player=player, game=game, seed=seed)
    return CombatEngine(session, content=content, config=config or GameConfig(), **engine_kwargs)


def pile_total(player):
    """Cards the player owns: three piles plus the equipped weapon."""
    equipped = 1 if player.current_sword is not None else 0
    return len(player.hand) + len(player.deck) + len(player.discard) + equipped


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def content():
    """The shipped content tables."""
    return ContentLibrary.default()


@pytest.fixture
def weapon():
    return build_weapon()


@pytest.fixture
def enemy():
    return build_enemy()


@pytest.fixture
def engine():
    """Combat engine with one dummy enemy, an empty hand and no weapon."""
    return build_engine()


@pytest.fixture
def new_session(content):
    """Fresh session with the starter deck and a fixed seed."""
    return GameSession.new(deck=content.starter_deck(), seed=42)
