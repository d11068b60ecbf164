"""
Game state - phase, counters and the enemy line.

Enemy order matters: it decides front-most default targeting and which
neighbours a multi-target reach expands into.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import IllegalTransition
from .enemy import Enemy
from .phase import GamePhase, PhaseTransition, check_transition

logger = logging.getLogger(__name__)


@dataclass
class GameState:
    phase: GamePhase = GamePhase.RUNNING
    turn: int = 1
    score: int = 0
    current_wave: int = 1
    enemies_defeated: int = 0
    enemies: List[Enemy] = field(default_factory=list)

    @property
    def in_combat(self) -> bool:
        return self.phase == GamePhase.COMBAT

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def find_enemy(self, enemy_id: Optional[str]) -> Optional[Enemy]:
        if enemy_id is None:
            return None
        for enemy in self.enemies:
            if enemy.id == enemy_id:
                return enemy
        return None

    def living_enemies(self) -> List[Enemy]:
        return [e for e in self.enemies if e.is_alive]

    def transition(self, target: GamePhase, force: bool = False, strict: bool = False) -> PhaseTransition:
        """
        Move to `target` if the table allows it (or `force` is set).

        Illegal requests leave the phase untouched and come back with
        accepted=False; pass strict=True to raise IllegalTransition instead.
        """
        result = check_transition(self.phase, target, force)
        if not result.accepted:
            logger.debug("Rejected phase transition %s -> %s", self.phase.value, target.value)
            if strict:
                raise IllegalTransition(self.phase, target)
            return result
        if result.changed:
            logger.debug("Phase %s -> %s", self.phase.value, target.value)
        self.phase = target
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "turn": self.turn,
            "score": self.score,
            "current_wave": self.current_wave,
            "enemies_defeated": self.enemies_defeated,
            "enemies": [e.to_dict() for e in self.enemies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        return cls(
            phase=GamePhase(data["phase"]),
            turn=int(data.get("turn", 1)),
            score=int(data.get("score", 0)),
            current_wave=int(data.get("current_wave", 1)),
            enemies_defeated=int(data.get("enemies_defeated", 0)),
            enemies=[Enemy.from_dict(e) for e in data["enemies"]],
        )
