"""
Game session - the single owner of mutable engine state.

The engine never touches globals: everything it mutates lives on the
GameSession handed to it (player, game, in-flight selections and the RNG).
Two sessions never share state, so several engines can run side by side.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..calc.reach import Reach, parse_reach
from ..config import DEFAULT_CONFIG, GameConfig
from .cards import Card, EffectKind, card_from_dict
from .game import GameState
from .player import PassiveKind, PlayerState


@dataclass
class PendingTarget:
    """A card waiting for the player to pick an enemy."""
    card_uid: str
    reach: Reach

    def to_dict(self) -> Dict[str, Any]:
        return {"card_uid": self.card_uid, "reach": self.reach.value}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["PendingTarget"]:
        if not data:
            return None
        return cls(card_uid=data["card_uid"], reach=parse_reach(data.get("reach")))


@dataclass
class PendingSkillSelection:
    """A search/recall skill waiting for the player to pick one of the offered cards."""
    effect: EffectKind
    skill_uid: str
    mana_spent: int
    offered_uids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effect": self.effect.value,
            "skill_uid": self.skill_uid,
            "mana_spent": self.mana_spent,
            "offered_uids": list(self.offered_uids),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["PendingSkillSelection"]:
        if not data:
            return None
        return cls(
            effect=EffectKind(data["effect"]),
            skill_uid=data["skill_uid"],
            mana_spent=int(data.get("mana_spent", 0)),
            offered_uids=list(data["offered_uids"]),
        )


@dataclass
class RuntimeState:
    """Transient in-flight selections that still belong in a save."""
    is_exchange_mode: bool = False
    pending_target: Optional[PendingTarget] = None
    skill_selection: Optional[PendingSkillSelection] = None
    reward_cards: List[Card] = field(default_factory=list)
    pending_level_up: bool = False
    passive_choices: List[PassiveKind] = field(default_factory=list)
    exchange_used: bool = False

    def clear_combat_selections(self) -> None:
        self.is_exchange_mode = False
        self.pending_target = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_exchange_mode": self.is_exchange_mode,
            "pending_target": self.pending_target.to_dict() if self.pending_target else None,
            "skill_selection": self.skill_selection.to_dict() if self.skill_selection else None,
            "reward_cards": [c.to_dict() for c in self.reward_cards],
            "pending_level_up": self.pending_level_up,
            "passive_choices": [p.value for p in self.passive_choices],
            "exchange_used": self.exchange_used,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuntimeState":
        return cls(
            is_exchange_mode=bool(data.get("is_exchange_mode", False)),
            pending_target=PendingTarget.from_dict(data.get("pending_target")),
            skill_selection=PendingSkillSelection.from_dict(data.get("skill_selection")),
            reward_cards=[card_from_dict(c) for c in data["reward_cards"]],
            pending_level_up=bool(data.get("pending_level_up", False)),
            passive_choices=[PassiveKind(p) for p in data["passive_choices"]],
            exchange_used=bool(data.get("exchange_used", False)),
        )


@dataclass
class GameSession:
    """Owns PlayerState, GameState, runtime selections and the RNG."""
    player: PlayerState
    game: GameState
    runtime: RuntimeState = field(default_factory=RuntimeState)
    seed: Optional[int] = None
    rng: random.Random = field(default=None, repr=False)

    def __post_init__(self):
        if self.rng is None:
            self.rng = random.Random(self.seed)

    @classmethod
    def new(cls, deck: Optional[List[Card]] = None, seed: Optional[int] = None,
            config: GameConfig = DEFAULT_CONFIG) -> "GameSession":
        """Fresh session with the configured starting stats."""
        player = PlayerState(
            hp=config.starting_hp,
            max_hp=config.starting_hp,
            mana=config.initial_mana,
            max_mana=config.initial_mana,
            level=config.starting_level,
            deck=list(deck or []),
        )
        session = cls(player=player, game=GameState(), seed=seed)
        session.rng.shuffle(session.player.deck)
        return session
