"""
Content library - factories over weapon, skill, enemy and passive templates.

The engine asks the library for new instances (starter deck, card drops,
reward offers, wave spawns, summons, mirage weapons) and never reads the
templates itself. Every created card gets a fresh identity.

Usage:
    library = ContentLibrary.default()
    katana = library.create_weapon("katana")
    enemies = library.wave_enemies(wave=3, rng=random.Random(7))

    library = ContentLibrary.from_json("my_content.json")
"""

from __future__ import annotations

import json
import math
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..state.cards import Card, Skill, Weapon
from ..state.enemy import Enemy, EnemyAction
from ..state.player import Passive, PassiveKind
from .default import DEFAULT_CONTENT


class UnknownTemplate(KeyError):
    """No template with that id."""


class ContentLibrary:
    """Read-only template tables plus instance factories."""

    def __init__(
        self,
        weapons: Dict[str, Dict[str, Any]],
        skills: Dict[str, Dict[str, Any]],
        enemies: Dict[str, Dict[str, Any]],
        bosses: Optional[Dict[str, Dict[str, Any]]] = None,
        passives: Optional[Dict[str, Dict[str, Any]]] = None,
        waves: Optional[Dict[str, Any]] = None,
        starter_deck: Optional[List[str]] = None,
        mirage_weapon_id: Optional[str] = None,
    ):
        self.weapons = weapons
        self.skills = skills
        self.enemies = enemies
        self.bosses = bosses or {}
        self.passives = passives or {}
        self.waves = waves or {}
        self.starter_deck_ids = list(starter_deck or [])
        self.mirage_weapon_id = mirage_weapon_id

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentLibrary":
        return cls(
            weapons=data.get("weapons", {}),
            skills=data.get("skills", {}),
            enemies=data.get("enemies", {}),
            bosses=data.get("bosses"),
            passives=data.get("passives"),
            waves=data.get("waves"),
            starter_deck=data.get("starter_deck"),
            mirage_weapon_id=data.get("mirage_weapon_id"),
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ContentLibrary":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def default(cls) -> "ContentLibrary":
        return cls.from_dict(DEFAULT_CONTENT)

    # -------------------------------------------------------------------------
    # Cards
    # -------------------------------------------------------------------------

    def create_weapon(self, template_id: str) -> Weapon:
        template = self.weapons.get(template_id)
        if template is None:
            raise UnknownTemplate(f"Unknown weapon: {template_id}")
        return Weapon.from_dict({**template, "id": template_id})

    def create_skill(self, template_id: str) -> Skill:
        template = self.skills.get(template_id)
        if template is None:
            raise UnknownTemplate(f"Unknown skill: {template_id}")
        return Skill.from_dict({**template, "id": template_id})

    def create_card(self, template_id: str) -> Card:
        if template_id in self.weapons:
            return self.create_weapon(template_id)
        return self.create_skill(template_id)

    def starter_deck(self) -> List[Card]:
        return [self.create_card(card_id) for card_id in self.starter_deck_ids]

    def create_mirage_weapon(self) -> Optional[Weapon]:
        if not self.mirage_weapon_id:
            return None
        weapon = self.create_weapon(self.mirage_weapon_id)
        weapon.is_mirage = True
        return weapon

    def _regular_weapon_ids(self) -> List[str]:
        return [wid for wid in self.weapons if wid != self.mirage_weapon_id]

    def random_weapon(self, rng: random.Random) -> Weapon:
        return self.create_weapon(rng.choice(self._regular_weapon_ids()))

    def random_skill(self, rng: random.Random) -> Skill:
        return self.create_skill(rng.choice(list(self.skills)))

    def random_drop(self, rng: random.Random, weapon_chance: float = 0.25) -> Card:
        """Kill drop: a weapon with `weapon_chance`, otherwise a skill."""
        if self._regular_weapon_ids() and rng.random() < weapon_chance:
            return self.random_weapon(rng)
        return self.random_skill(rng)

    def reward_cards(self, rng: random.Random, count: int = 3, weapon_chance: float = 0.25) -> List[Card]:
        return [self.random_drop(rng, weapon_chance) for _ in range(count)]

    # -------------------------------------------------------------------------
    # Enemies
    # -------------------------------------------------------------------------

    def _build_enemy(self, template_id: str, template: Dict[str, Any], is_boss: bool = False,
                     hp_scale: float = 1.0) -> Enemy:
        actions = [EnemyAction.from_dict(a) for a in template.get("actions", [])]
        hp = math.floor(template["hp"] * hp_scale)
        enemy = Enemy(
            name=template.get("name", template_id),
            hp=hp,
            max_hp=hp,
            defense=math.floor(template.get("defense", 0) * hp_scale),
            actions=actions,
            is_boss=is_boss,
            template_id=template_id,
        )
        if is_boss:
            enemy.action_templates = [a.fresh() for a in actions]
        return enemy

    def create_enemy(self, template_id: str) -> Enemy:
        if template_id in self.enemies:
            return self._build_enemy(template_id, self.enemies[template_id])
        if template_id in self.bosses:
            return self._build_enemy(template_id, self.bosses[template_id], is_boss=True)
        raise UnknownTemplate(f"Unknown enemy: {template_id}")

    def create_boss(self, template_id: str, wave: int = 1) -> Enemy:
        template = self.bosses.get(template_id)
        if template is None:
            raise UnknownTemplate(f"Unknown boss: {template_id}")
        scale = 1 + (wave // 10) * self.waves.get("boss_scaling_per_10", 0.0)
        return self._build_enemy(template_id, template, is_boss=True, hp_scale=scale)

    def summon_enemy(self, template_id: Optional[str] = None) -> Optional[Enemy]:
        """A minion for a summon action; falls back to the first regular template."""
        if template_id is None:
            if not self.enemies:
                return None
            template_id = next(iter(self.enemies))
        enemy = self.create_enemy(template_id)
        enemy.is_summoned = True
        return enemy

    def is_boss_wave(self, wave: int) -> bool:
        every = self.waves.get("boss_every", 0)
        return bool(every) and bool(self.bosses) and wave > 0 and wave % every == 0

    def _pool_for_wave(self, wave: int) -> List[str]:
        pools = self.waves.get("pools") or {}
        pool: List[str] = []
        for start in sorted(pools, key=int):
            if int(start) <= wave:
                pool = pools[start]
        return pool or list(self.enemies)

    def wave_enemies(self, wave: int, rng: random.Random) -> List[Enemy]:
        """Spawn the enemy line for a wave: one boss on boss waves, a random group otherwise."""
        if self.is_boss_wave(wave):
            bosses = self.waves.get("bosses") or list(self.bosses)
            index = (wave // self.waves["boss_every"] - 1) % len(bosses)
            return [self.create_boss(bosses[index], wave)]
        low = self.waves.get("min_enemies", 1)
        high = self.waves.get("max_enemies", low)
        pool = self._pool_for_wave(wave)
        return [self.create_enemy(rng.choice(pool)) for _ in range(rng.randint(low, high))]

    # -------------------------------------------------------------------------
    # Passives
    # -------------------------------------------------------------------------

    def create_passive(self, kind: PassiveKind) -> Passive:
        template = self.passives.get(kind.value, {})
        return Passive(
            kind=kind,
            name=template.get("name", kind.value),
            level=1,
            max_level=int(template.get("max_level", 1)),
            value=int(template.get("value", 1)),
        )

    def passive_choices(self, rng: random.Random, count: int = 3) -> List[PassiveKind]:
        kinds = [PassiveKind(k) for k in self.passives]
        rng.shuffle(kinds)
        return kinds[:count]
