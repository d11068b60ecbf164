"""
Enemy state - hp, armor, statuses and the scripted action queue.

Each enemy owns an ordered `action_queue`. Only the head is armed: its
`current_delay` counts down with player activity and the action fires
once it reaches 0 or below. The counter is never clamped, so a delay can
go negative and simply reads as "ready".
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class EnemyActionType(Enum):
    ATTACK = "attack"
    CHARGE = "charge"      # telegraph only
    DEFEND = "defend"
    SPECIAL = "special"
    BUFF = "buff"
    TAUNT = "taunt"


class EnemyEffectType(Enum):
    BLEED = "bleed"
    STUN = "stun"
    DEBUFF = "debuff"
    HEAL = "heal"
    TAUNT = "taunt"
    SUMMON = "summon"
    POISON = "poison"


def new_enemy_id() -> str:
    return "enemy_" + uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class EnemyActionEffect:
    """Side effect attached to an enemy action."""
    kind: EnemyEffectType
    value: int = 0
    duration: int = 0
    # Summons: which enemy template to call (None = the content default)
    template_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "duration": self.duration,
            "template_id": self.template_id,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["EnemyActionEffect"]:
        if not data:
            return None
        return cls(
            kind=EnemyEffectType(data["kind"]),
            value=int(data.get("value", 0)),
            duration=int(data.get("duration", 0)),
            template_id=data.get("template_id"),
        )


@dataclass
class EnemyAction:
    """One scripted move. `delay` is the base value, `current_delay` the live countdown."""
    id: str
    name: str
    action_type: EnemyActionType = EnemyActionType.ATTACK
    damage: int = 0
    delay: int = 1
    current_delay: Optional[int] = None
    hit_count: int = 1
    defense_increase: int = 0
    effect: Optional[EnemyActionEffect] = None

    def __post_init__(self):
        if self.current_delay is None:
            self.current_delay = self.delay

    @property
    def is_ready(self) -> bool:
        return self.current_delay <= 0

    @property
    def is_summon(self) -> bool:
        return self.effect is not None and self.effect.kind == EnemyEffectType.SUMMON

    def rearm(self) -> None:
        """Reset the countdown to the base delay."""
        self.current_delay = self.delay

    def copy(self) -> "EnemyAction":
        return replace(self)

    def fresh(self) -> "EnemyAction":
        """New armed instance from this action used as a template."""
        return replace(self, current_delay=self.delay)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "action_type": self.action_type.value,
            "damage": self.damage,
            "delay": self.delay,
            "current_delay": self.current_delay,
            "hit_count": self.hit_count,
            "defense_increase": self.defense_increase,
            "effect": self.effect.to_dict() if self.effect else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnemyAction":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            action_type=EnemyActionType(data.get("action_type", "attack")),
            damage=int(data.get("damage", 0)),
            delay=int(data.get("delay", 1)),
            current_delay=data.get("current_delay"),
            hit_count=max(1, int(data.get("hit_count", 1))),
            defense_increase=int(data.get("defense_increase", 0)),
            effect=EnemyActionEffect.from_dict(data.get("effect")),
        )


@dataclass
class StatusStack:
    """One bleed or poison application. Stacks never merge."""
    damage: int
    duration: int

    def to_dict(self) -> Dict[str, int]:
        return {"damage": self.damage, "duration": self.duration}


@dataclass
class Enemy:
    """A combatant on the enemy side."""
    name: str
    hp: int
    max_hp: int
    defense: int = 0
    actions: List[EnemyAction] = field(default_factory=list)
    action_queue: List[EnemyAction] = field(default_factory=list)
    # Bosses rebuild fired actions from these instead of recycling them
    action_templates: List[EnemyAction] = field(default_factory=list)
    next_template_index: int = 0
    is_boss: bool = False
    is_summoned: bool = False
    stun: int = 0
    bleeds: List[StatusStack] = field(default_factory=list)
    poisons: List[StatusStack] = field(default_factory=list)
    is_taunting: bool = False
    taunt_duration: int = 0
    summon_cooldown: int = 0
    template_id: str = "unknown"
    id: str = field(default_factory=new_enemy_id)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def is_stunned(self) -> bool:
        return self.stun > 0

    @property
    def taunt_active(self) -> bool:
        return self.is_taunting and self.taunt_duration > 0

    @property
    def head_action(self) -> Optional[EnemyAction]:
        return self.action_queue[0] if self.action_queue else None

    def take_damage(self, amount: int) -> int:
        """Apply hp loss; returns damage actually dealt."""
        amount = max(0, int(amount))
        dealt = min(amount, max(self.hp, 0))
        self.hp -= amount
        return dealt

    def heal(self, amount: int) -> int:
        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return self.hp - before

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "name": self.name,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "defense": self.defense,
            "actions": [a.to_dict() for a in self.actions],
            "action_queue": [a.to_dict() for a in self.action_queue],
            "action_templates": [a.to_dict() for a in self.action_templates],
            "next_template_index": self.next_template_index,
            "is_boss": self.is_boss,
            "is_summoned": self.is_summoned,
            "stun": self.stun,
            "bleeds": [s.to_dict() for s in self.bleeds],
            "poisons": [s.to_dict() for s in self.poisons],
            "is_taunting": self.is_taunting,
            "taunt_duration": self.taunt_duration,
            "summon_cooldown": self.summon_cooldown,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Enemy":
        return cls(
            id=data["id"],
            template_id=data.get("template_id", "unknown"),
            name=data.get("name", data["id"]),
            hp=int(data["hp"]),
            max_hp=int(data["max_hp"]),
            defense=int(data.get("defense", 0)),
            actions=[EnemyAction.from_dict(a) for a in data.get("actions", [])],
            action_queue=[EnemyAction.from_dict(a) for a in data.get("action_queue", [])],
            action_templates=[EnemyAction.from_dict(a) for a in data.get("action_templates", [])],
            next_template_index=int(data.get("next_template_index", 0)),
            is_boss=bool(data.get("is_boss", False)),
            is_summoned=bool(data.get("is_summoned", False)),
            stun=int(data.get("stun", 0)),
            bleeds=[StatusStack(int(s["damage"]), int(s["duration"])) for s in data.get("bleeds", [])],
            poisons=[StatusStack(int(s["damage"]), int(s["duration"])) for s in data.get("poisons", [])],
            is_taunting=bool(data.get("is_taunting", False)),
            taunt_duration=int(data.get("taunt_duration", 0)),
            summon_cooldown=int(data.get("summon_cooldown", 0)),
        )
