"""
Card state - weapons and skills.

A Card is a closed tagged union of Weapon and Skill, discriminated by
`kind`. Cards are identities, not values: every instance carries a `uid`
that is assigned once at creation and survives to_dict/from_dict, so
"find this exact card" works across hand, deck, discard and the equipped
slot.

Effects are plain data (SkillEffect with an EffectKind tag); the engine
dispatches on the tag instead of on subclasses.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..calc.reach import Reach, SkillReach, parse_reach, parse_skill_reach


def new_uid() -> str:
    """Fresh card identity."""
    return uuid.uuid4().hex[:12]


# =============================================================================
# Tags
# =============================================================================


class CardKind(Enum):
    WEAPON = "weapon"
    SKILL = "skill"


class SkillKind(Enum):
    ATTACK = "attack"
    DEFENSE = "defense"
    BUFF = "buff"
    DRAW = "draw"
    SPECIAL = "special"


class EffectKind(Enum):
    """Closed set of skill effect tags."""
    PIERCE = "pierce"
    CHARGE_ATTACK = "chargeAttack"
    STUN = "stun"
    BLEED = "bleed"
    LIFESTEAL = "lifesteal"
    ARMOR_BREAKER = "armorBreaker"
    DRAW = "draw"
    TAUNT = "taunt"
    COUNT_DEFENSE = "countDefense"
    FLOW_READ = "flowRead"
    FOCUS = "focus"
    SHARPEN = "sharpen"
    FOLLOW_UP = "followUp"
    BLADE_DANCE = "bladeDance"
    SHEATHE = "sheathe"
    SEARCH_SWORD = "searchSword"
    GRAVE_RECALL = "graveRecall"
    GRAVE_EQUIP = "graveEquip"
    GRAVE_DRAW_TOP = "graveDrawTop"
    BLADE_GRAB = "bladeGrab"
    DESTROY_WEAPON = "destroyWeapon"
    DELAY_REDUCE = "delayReduce"


# Effects that open a pick-a-card selection instead of resolving at once
SELECTION_EFFECTS = (EffectKind.SEARCH_SWORD, EffectKind.GRAVE_RECALL, EffectKind.GRAVE_EQUIP)


class CriticalCondition(Enum):
    ENEMY_DELAY_1 = "enemyDelay1"   # a target's next action has exactly 1 delay left
    DAGGER = "dagger"               # equipped weapon is a dagger


def _parse_enum(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    return enum_cls(value)


def _enum_value(value):
    return value.value if isinstance(value, Enum) else value


# =============================================================================
# Shared pieces
# =============================================================================


@dataclass(frozen=True)
class StatusSpec:
    """A bleed/poison application: damage per tick for a number of ticks."""
    damage: int
    duration: int

    def to_dict(self) -> Dict[str, int]:
        return {"damage": self.damage, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["StatusSpec"]:
        if not data:
            return None
        return cls(damage=int(data["damage"]), duration=int(data["duration"]))


def _status_dict(status: Optional[StatusSpec]) -> Optional[Dict[str, int]]:
    return status.to_dict() if status is not None else None


@dataclass(frozen=True)
class DrawAttack:
    """The automatic attack a weapon performs when equipped mid-combat."""
    name: str = "Draw"
    multiplier: float = 1.0
    reach: Reach = Reach.SINGLE
    durability_cost: int = 1
    is_swift: bool = False
    pierce: bool = False
    critical_condition: Optional[CriticalCondition] = None
    critical_multiplier: Optional[float] = None
    critical_pierce: bool = True
    armor_reduce: int = 0
    bleed: Optional[StatusSpec] = None
    poison: Optional[StatusSpec] = None
    delay_increase: int = 0
    cancel_enemy_skill: bool = False
    critical_bleed: Optional[StatusSpec] = None
    critical_poison: Optional[StatusSpec] = None
    critical_cancel: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "multiplier": self.multiplier,
            "reach": self.reach.value,
            "durability_cost": self.durability_cost,
            "is_swift": self.is_swift,
            "pierce": self.pierce,
            "critical_condition": _enum_value(self.critical_condition),
            "critical_multiplier": self.critical_multiplier,
            "critical_pierce": self.critical_pierce,
            "armor_reduce": self.armor_reduce,
            "bleed": _status_dict(self.bleed),
            "poison": _status_dict(self.poison),
            "delay_increase": self.delay_increase,
            "cancel_enemy_skill": self.cancel_enemy_skill,
            "critical_bleed": _status_dict(self.critical_bleed),
            "critical_poison": _status_dict(self.critical_poison),
            "critical_cancel": self.critical_cancel,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DrawAttack":
        return cls(
            name=data.get("name", "Draw"),
            multiplier=float(data.get("multiplier", 1.0)),
            reach=parse_reach(data.get("reach")),
            durability_cost=int(data.get("durability_cost", 1)),
            is_swift=bool(data.get("is_swift", False)),
            pierce=bool(data.get("pierce", False)),
            critical_condition=_parse_enum(CriticalCondition, data.get("critical_condition")),
            critical_multiplier=data.get("critical_multiplier"),
            critical_pierce=bool(data.get("critical_pierce", True)),
            armor_reduce=int(data.get("armor_reduce", 0)),
            bleed=StatusSpec.from_dict(data.get("bleed")),
            poison=StatusSpec.from_dict(data.get("poison")),
            delay_increase=int(data.get("delay_increase", 0)),
            cancel_enemy_skill=bool(data.get("cancel_enemy_skill", False)),
            critical_bleed=StatusSpec.from_dict(data.get("critical_bleed")),
            critical_poison=StatusSpec.from_dict(data.get("critical_poison")),
            critical_cancel=bool(data.get("critical_cancel", False)),
        )


@dataclass(frozen=True)
class WeaponOnHit:
    """Persistent effects applied whenever the equipped weapon lands an attack."""
    bleed: Optional[StatusSpec] = None
    poison: Optional[StatusSpec] = None
    armor_break: int = 0
    delay_increase: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bleed": _status_dict(self.bleed),
            "poison": _status_dict(self.poison),
            "armor_break": self.armor_break,
            "delay_increase": self.delay_increase,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "WeaponOnHit":
        data = data or {}
        return cls(
            bleed=StatusSpec.from_dict(data.get("bleed")),
            poison=StatusSpec.from_dict(data.get("poison")),
            armor_break=int(data.get("armor_break", 0)),
            delay_increase=int(data.get("delay_increase", 0)),
        )


# =============================================================================
# Weapon
# =============================================================================


@dataclass
class Weapon:
    """
    A sword card.

    `defense` is the parry rate in percent; `pierce` is flat armor ignored
    by every hit. current_durability stays within [0, durability].
    """
    id: str
    name: str
    attack: int
    attack_count: int = 1
    reach: Reach = Reach.SINGLE
    defense: int = 0
    pierce: int = 0
    durability: int = 1
    current_durability: Optional[int] = None
    mana_cost: int = 1
    draw_attack: DrawAttack = field(default_factory=DrawAttack)
    on_hit: WeaponOnHit = field(default_factory=WeaponOnHit)
    rarity: str = "common"
    category: str = "sword"
    is_mirage: bool = False
    uid: str = field(default_factory=new_uid)

    kind = CardKind.WEAPON

    def __post_init__(self):
        if self.current_durability is None:
            self.current_durability = self.durability
        self.current_durability = max(0, min(self.current_durability, self.durability))

    @property
    def is_broken(self) -> bool:
        return self.current_durability <= 0

    @property
    def is_dagger(self) -> bool:
        return self.category == "dagger"

    def consume_durability(self, amount: int) -> int:
        """Spend up to `amount` durability; returns what was actually spent."""
        spent = max(0, min(amount, self.current_durability))
        self.current_durability -= spent
        return spent

    def repair(self, amount: int) -> int:
        """Restore durability, capped at max; returns the amount restored."""
        before = self.current_durability
        self.current_durability = min(self.durability, self.current_durability + amount)
        return self.current_durability - before

    def copy(self) -> "Weapon":
        """Copy with the same identity (for simulation, not for new cards)."""
        return replace(self)

    def clone(self) -> "Weapon":
        """Fresh card with the same stats and a new identity."""
        return replace(self, uid=new_uid(), current_durability=self.durability)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "uid": self.uid,
            "id": self.id,
            "name": self.name,
            "attack": self.attack,
            "attack_count": self.attack_count,
            "reach": self.reach.value,
            "defense": self.defense,
            "pierce": self.pierce,
            "durability": self.durability,
            "current_durability": self.current_durability,
            "mana_cost": self.mana_cost,
            "draw_attack": self.draw_attack.to_dict(),
            "on_hit": self.on_hit.to_dict(),
            "rarity": self.rarity,
            "category": self.category,
            "is_mirage": self.is_mirage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Weapon":
        return cls(
            uid=data.get("uid") or new_uid(),
            id=data["id"],
            name=data.get("name", data["id"]),
            attack=int(data["attack"]),
            attack_count=int(data.get("attack_count", 1)),
            reach=parse_reach(data.get("reach")),
            defense=int(data.get("defense", 0)),
            pierce=int(data.get("pierce", 0)),
            durability=int(data.get("durability", 1)),
            current_durability=data.get("current_durability"),
            mana_cost=int(data.get("mana_cost", 1)),
            draw_attack=DrawAttack.from_dict(data.get("draw_attack") or {}),
            on_hit=WeaponOnHit.from_dict(data.get("on_hit")),
            rarity=data.get("rarity", "common"),
            category=data.get("category", "sword"),
            is_mirage=bool(data.get("is_mirage", False)),
        )


# =============================================================================
# Skill
# =============================================================================


@dataclass(frozen=True)
class SkillEffect:
    """
    Tagged skill effect.

    `value` and `duration` mean different things per kind (multiplier for
    countDefense, stack damage for bleed, card count for draw, ...). The
    counter fields are only read by countDefense/flowRead.
    """
    kind: EffectKind
    value: float = 0
    duration: int = 0
    counter_attack: bool = False
    counter_multiplier: float = 1.0
    consume_on_success: bool = True
    defense_scaling: Tuple[float, ...] = ()
    counter_scaling: Tuple[float, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "duration": self.duration,
            "counter_attack": self.counter_attack,
            "counter_multiplier": self.counter_multiplier,
            "consume_on_success": self.consume_on_success,
            "defense_scaling": list(self.defense_scaling),
            "counter_scaling": list(self.counter_scaling),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["SkillEffect"]:
        if not data:
            return None
        return cls(
            kind=EffectKind(data["kind"]),
            value=data.get("value", 0),
            duration=int(data.get("duration", 0)),
            counter_attack=bool(data.get("counter_attack", False)),
            counter_multiplier=float(data.get("counter_multiplier", 1.0)),
            consume_on_success=bool(data.get("consume_on_success", True)),
            defense_scaling=tuple(data.get("defense_scaling", ())),
            counter_scaling=tuple(data.get("counter_scaling", ())),
        )


@dataclass
class Skill:
    """A technique card. Attack/special skills need an equipped weapon."""
    id: str
    name: str
    skill_kind: SkillKind = SkillKind.ATTACK
    attack_multiplier: float = 1.0
    attack_count: int = 1
    reach: SkillReach = SkillReach.WEAPON
    mana_cost: int = 1
    durability_cost: int = 0
    defense_bonus: int = 0
    effect: Optional[SkillEffect] = None
    is_swift: bool = False
    is_consumable: bool = False
    is_piercing: bool = False
    critical_condition: Optional[CriticalCondition] = None
    critical_multiplier: Optional[float] = None
    critical_pierce: bool = True
    rarity: str = "common"
    uid: str = field(default_factory=new_uid)

    kind = CardKind.SKILL

    @property
    def is_offensive(self) -> bool:
        return self.skill_kind in (SkillKind.ATTACK, SkillKind.SPECIAL)

    @property
    def effect_kind(self) -> Optional[EffectKind]:
        return self.effect.kind if self.effect is not None else None

    @property
    def is_charge(self) -> bool:
        return self.effect_kind == EffectKind.CHARGE_ATTACK

    def copy(self) -> "Skill":
        return replace(self)

    def clone(self) -> "Skill":
        return replace(self, uid=new_uid())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "uid": self.uid,
            "id": self.id,
            "name": self.name,
            "skill_kind": self.skill_kind.value,
            "attack_multiplier": self.attack_multiplier,
            "attack_count": self.attack_count,
            "reach": self.reach.value,
            "mana_cost": self.mana_cost,
            "durability_cost": self.durability_cost,
            "defense_bonus": self.defense_bonus,
            "effect": self.effect.to_dict() if self.effect else None,
            "is_swift": self.is_swift,
            "is_consumable": self.is_consumable,
            "is_piercing": self.is_piercing,
            "critical_condition": _enum_value(self.critical_condition),
            "critical_multiplier": self.critical_multiplier,
            "critical_pierce": self.critical_pierce,
            "rarity": self.rarity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Skill":
        return cls(
            uid=data.get("uid") or new_uid(),
            id=data["id"],
            name=data.get("name", data["id"]),
            skill_kind=SkillKind(data.get("skill_kind", "attack")),
            attack_multiplier=float(data.get("attack_multiplier", 1.0)),
            attack_count=int(data.get("attack_count", 1)),
            reach=parse_skill_reach(data.get("reach")),
            mana_cost=int(data.get("mana_cost", 1)),
            durability_cost=int(data.get("durability_cost", 0)),
            defense_bonus=int(data.get("defense_bonus", 0)),
            effect=SkillEffect.from_dict(data.get("effect")),
            is_swift=bool(data.get("is_swift", False)),
            is_consumable=bool(data.get("is_consumable", False)),
            is_piercing=bool(data.get("is_piercing", False)),
            critical_condition=_parse_enum(CriticalCondition, data.get("critical_condition")),
            critical_multiplier=data.get("critical_multiplier"),
            critical_pierce=bool(data.get("critical_pierce", True)),
            rarity=data.get("rarity", "common"),
        )


Card = Union[Weapon, Skill]


def card_from_dict(data: Dict[str, Any]) -> Card:
    """Rebuild a card from its dict, dispatching on the `kind` tag."""
    kind = CardKind(data.get("kind"))
    if kind == CardKind.WEAPON:
        return Weapon.from_dict(data)
    return Skill.from_dict(data)


def is_weapon(card: Card) -> bool:
    return card.kind == CardKind.WEAPON
