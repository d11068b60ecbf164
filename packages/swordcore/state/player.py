"""
Player state - vitals, piles, buffs, count effects and passives.

The three piles (hand, deck, discard) are disjoint lists of card
instances. The deck draws from its end (`deck.pop()`), so the last element
is the top card. Count effects form a FIFO queue; see
effects/count_effects.py for how they tick and resolve.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..calc.reach import SkillReach, parse_skill_reach
from .cards import Card, Weapon, card_from_dict, new_uid


# =============================================================================
# Buffs
# =============================================================================


class BuffKind(Enum):
    ATTACK = "attack"      # flat bonus added to weapon attack
    DEFENSE = "defense"    # flat parry-rate bonus (percent)
    FOCUS = "focus"        # adds to the focus multiplier, consumed by the next attack


@dataclass
class Buff:
    id: str
    name: str
    kind: BuffKind
    value: float
    duration: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "kind": self.kind.value,
                "value": self.value, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Buff":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            kind=BuffKind(data["kind"]),
            value=data.get("value", 0),
            duration=int(data.get("duration", 1)),
        )


# =============================================================================
# Passives
# =============================================================================


class PassiveKind(Enum):
    PERFECT_CAST = "perfectCast"
    DEFENSE_BONUS = "defenseBonus"
    DRAW_INCREASE = "drawIncrease"
    WAIT_INCREASE = "waitIncrease"


@dataclass
class Passive:
    kind: PassiveKind
    name: str
    level: int = 1
    max_level: int = 1
    value: int = 1

    def level_up(self) -> bool:
        """Raise the level if below the cap."""
        if self.level >= self.max_level:
            return False
        self.level += 1
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "name": self.name, "level": self.level,
                "max_level": self.max_level, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Passive":
        return cls(
            kind=PassiveKind(data["kind"]),
            name=data.get("name", data["kind"]),
            level=int(data.get("level", 1)),
            max_level=int(data.get("max_level", 1)),
            value=int(data.get("value", 1)),
        )


# =============================================================================
# Count effects
# =============================================================================


class CountEffectKind(Enum):
    CHARGE_ATTACK = "chargeAttack"
    COUNTER_DEFENSE = "countDefense"
    FLOW_READ = "flowRead"


@dataclass
class CountEffect:
    """
    A timer-based delayed attack or enhanced defense.

    Charge attacks keep a formula snapshot (multipliers and reach token),
    never a damage value: the payoff is computed from whatever weapon is
    equipped when the timer runs out.
    """
    kind: CountEffectKind
    name: str
    remaining_delays: int
    max_delays: int
    is_new: bool = True
    # Charge attack snapshot
    attack_multiplier: float = 1.0
    skill_attack_count: int = 1
    reach: SkillReach = SkillReach.WEAPON
    target_id: Optional[str] = None
    # Counter defense
    defense_multiplier: float = 1.0
    counter_attack: bool = False
    counter_multiplier: float = 1.0
    consume_on_success: bool = True
    defense_scaling: Tuple[float, ...] = ()
    counter_scaling: Tuple[float, ...] = ()
    source_uid: Optional[str] = None
    id: str = field(default_factory=new_uid)

    @property
    def is_defensive(self) -> bool:
        return self.kind in (CountEffectKind.COUNTER_DEFENSE, CountEffectKind.FLOW_READ)

    @property
    def is_expired(self) -> bool:
        return self.remaining_delays <= 0

    @property
    def elapsed(self) -> int:
        return self.max_delays - self.remaining_delays

    def stage_index(self, table_length: int) -> int:
        """Elapsed ticks clamped to the scaling table bounds."""
        if table_length <= 0:
            return 0
        return max(0, min(self.elapsed, table_length - 1))

    @property
    def current_defense_multiplier(self) -> float:
        if self.kind == CountEffectKind.FLOW_READ and self.defense_scaling:
            return self.defense_scaling[self.stage_index(len(self.defense_scaling))]
        return self.defense_multiplier

    @property
    def current_counter_multiplier(self) -> float:
        if self.kind == CountEffectKind.FLOW_READ and self.counter_scaling:
            return self.counter_scaling[self.stage_index(len(self.counter_scaling))]
        return self.counter_multiplier

    def copy(self) -> "CountEffect":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "remaining_delays": self.remaining_delays,
            "max_delays": self.max_delays,
            "is_new": self.is_new,
            "attack_multiplier": self.attack_multiplier,
            "skill_attack_count": self.skill_attack_count,
            "reach": self.reach.value,
            "target_id": self.target_id,
            "defense_multiplier": self.defense_multiplier,
            "counter_attack": self.counter_attack,
            "counter_multiplier": self.counter_multiplier,
            "consume_on_success": self.consume_on_success,
            "defense_scaling": list(self.defense_scaling),
            "counter_scaling": list(self.counter_scaling),
            "source_uid": self.source_uid,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CountEffect":
        return cls(
            id=data.get("id") or new_uid(),
            kind=CountEffectKind(data["kind"]),
            name=data.get("name", data["kind"]),
            remaining_delays=int(data["remaining_delays"]),
            max_delays=int(data.get("max_delays", data["remaining_delays"])),
            is_new=bool(data.get("is_new", False)),
            attack_multiplier=float(data.get("attack_multiplier", 1.0)),
            skill_attack_count=int(data.get("skill_attack_count", 1)),
            reach=parse_skill_reach(data.get("reach")),
            target_id=data.get("target_id"),
            defense_multiplier=float(data.get("defense_multiplier", 1.0)),
            counter_attack=bool(data.get("counter_attack", False)),
            counter_multiplier=float(data.get("counter_multiplier", 1.0)),
            consume_on_success=bool(data.get("consume_on_success", True)),
            defense_scaling=tuple(data.get("defense_scaling", ())),
            counter_scaling=tuple(data.get("counter_scaling", ())),
            source_uid=data.get("source_uid"),
        )


# =============================================================================
# Player
# =============================================================================


@dataclass
class PlayerState:
    """Everything the player owns during a run."""
    hp: int = 50
    max_hp: int = 50
    mana: int = 3
    max_mana: int = 3
    defense: int = 0
    exp: int = 0
    level: int = 1
    gold: int = 0
    current_sword: Optional[Weapon] = None
    hand: List[Card] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)
    discard: List[Card] = field(default_factory=list)
    buffs: List[Buff] = field(default_factory=list)
    count_effects: List[CountEffect] = field(default_factory=list)
    passives: List[Passive] = field(default_factory=list)
    used_attack_this_turn: bool = False
    waits_used: int = 0

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    @property
    def is_barehanded(self) -> bool:
        return self.current_sword is None

    def passive_level(self, kind: PassiveKind) -> int:
        for passive in self.passives:
            if passive.kind == kind:
                return passive.level
        return 0

    def has_passive(self, kind: PassiveKind) -> bool:
        return self.passive_level(kind) > 0

    def buff_total(self, kind: BuffKind) -> float:
        return sum(b.value for b in self.buffs if b.kind == kind)

    def card_count(self) -> int:
        """Cards across all piles plus the equipped weapon."""
        equipped = 1 if self.current_sword is not None else 0
        return len(self.hand) + len(self.deck) + len(self.discard) + equipped

    def find_card(self, uid: str) -> Optional[Tuple[str, int]]:
        """Locate a card instance by uid: (pile name, index) or None."""
        for pile_name in ("hand", "deck", "discard"):
            for i, card in enumerate(getattr(self, pile_name)):
                if card.uid == uid:
                    return pile_name, i
        if self.current_sword is not None and self.current_sword.uid == uid:
            return "equipped", 0
        return None

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hp": self.hp,
            "max_hp": self.max_hp,
            "mana": self.mana,
            "max_mana": self.max_mana,
            "defense": self.defense,
            "exp": self.exp,
            "level": self.level,
            "gold": self.gold,
            "current_sword": self.current_sword.to_dict() if self.current_sword else None,
            "hand": [c.to_dict() for c in self.hand],
            "deck": [c.to_dict() for c in self.deck],
            "discard": [c.to_dict() for c in self.discard],
            "buffs": [b.to_dict() for b in self.buffs],
            "count_effects": [e.to_dict() for e in self.count_effects],
            "passives": [p.to_dict() for p in self.passives],
            "used_attack_this_turn": self.used_attack_this_turn,
            "waits_used": self.waits_used,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerState":
        sword = data.get("current_sword")
        return cls(
            hp=int(data["hp"]),
            max_hp=int(data["max_hp"]),
            mana=int(data["mana"]),
            max_mana=int(data["max_mana"]),
            defense=int(data.get("defense", 0)),
            exp=int(data.get("exp", 0)),
            level=int(data.get("level", 1)),
            gold=int(data.get("gold", 0)),
            current_sword=Weapon.from_dict(sword) if sword else None,
            hand=[card_from_dict(c) for c in data["hand"]],
            deck=[card_from_dict(c) for c in data["deck"]],
            discard=[card_from_dict(c) for c in data["discard"]],
            buffs=[Buff.from_dict(b) for b in data["buffs"]],
            count_effects=[CountEffect.from_dict(e) for e in data["count_effects"]],
            passives=[Passive.from_dict(p) for p in data["passives"]],
            used_attack_this_turn=bool(data.get("used_attack_this_turn", False)),
            waits_used=int(data.get("waits_used", 0)),
        )
