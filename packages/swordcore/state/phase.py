"""
Phase state machine.

Legal moves between exploration, combat, victory, event, paused and the
terminal game-over phase. A rejected (non-forced) transition is a no-op
that reports accepted=False; forced transitions skip the table and are
reserved for game over and hard resets.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet


class GamePhase(Enum):
    RUNNING = "running"
    COMBAT = "combat"
    VICTORY = "victory"
    EVENT = "event"
    PAUSED = "paused"
    GAME_OVER = "gameOver"


PHASE_TRANSITIONS: Dict[GamePhase, FrozenSet[GamePhase]] = {
    GamePhase.RUNNING: frozenset({
        GamePhase.RUNNING, GamePhase.COMBAT, GamePhase.EVENT, GamePhase.PAUSED, GamePhase.GAME_OVER,
    }),
    GamePhase.COMBAT: frozenset({
        GamePhase.COMBAT, GamePhase.VICTORY, GamePhase.PAUSED, GamePhase.GAME_OVER,
    }),
    GamePhase.VICTORY: frozenset({
        GamePhase.VICTORY, GamePhase.RUNNING, GamePhase.PAUSED, GamePhase.GAME_OVER,
    }),
    GamePhase.PAUSED: frozenset(GamePhase),
    GamePhase.EVENT: frozenset({
        GamePhase.EVENT, GamePhase.RUNNING, GamePhase.COMBAT, GamePhase.PAUSED, GamePhase.GAME_OVER,
    }),
    GamePhase.GAME_OVER: frozenset({GamePhase.GAME_OVER}),
}


@dataclass(frozen=True)
class PhaseTransition:
    """Outcome of a transition request."""
    from_phase: GamePhase
    to_phase: GamePhase
    accepted: bool
    changed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_phase.value,
            "to": self.to_phase.value,
            "accepted": self.accepted,
            "changed": self.changed,
        }


def is_game_phase(value: Any) -> bool:
    """True if value is a GamePhase or one of its string values."""
    if isinstance(value, GamePhase):
        return True
    return isinstance(value, str) and value in {p.value for p in GamePhase}


def can_transition(current: GamePhase, target: GamePhase) -> bool:
    return target in PHASE_TRANSITIONS[current]


def check_transition(current: GamePhase, target: GamePhase, force: bool = False) -> PhaseTransition:
    """Evaluate a transition without applying it."""
    accepted = force or can_transition(current, target)
    return PhaseTransition(
        from_phase=current,
        to_phase=target if accepted else current,
        accepted=accepted,
        changed=accepted and target != current,
    )
