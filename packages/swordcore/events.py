"""
Presentation events and the combat log.

The engine never renders anything. It announces what happened on an
EventBus; a presentation layer subscribes and draws. Every emitted event
is also appended to the CombatLog so tests and replays can inspect the
exact sequence.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


class EngineEvent(Enum):
    HAND_CHANGED = "handChanged"
    STATS_CHANGED = "statsChanged"
    TURN_ENDED = "turnEnded"
    COMBAT_STARTED = "combatStarted"
    COMBAT_ENDED = "combatEnded"
    TARGETING_STARTED = "targetingStarted"
    TARGETING_CANCELLED = "targetingCancelled"
    REWARD_SHOWN = "rewardShown"
    SKILL_SELECTION_SHOWN = "skillSelectionShown"
    LEVEL_UP = "levelUp"
    EXCHANGE_MODE_CHANGED = "exchangeModeChanged"
    MESSAGE = "message"
    BEAT = "beat"
    # Combat detail
    DAMAGE_DEALT = "damageDealt"
    PLAYER_DAMAGED = "playerDamaged"
    PARRY = "parry"
    COUNTER_ATTACK = "counterAttack"
    WEAPON_EQUIPPED = "weaponEquipped"
    WEAPON_BROKEN = "weaponBroken"
    ENEMY_ACTION = "enemyAction"
    ENEMY_KILLED = "enemyKilled"
    ENEMY_SUMMONED = "enemySummoned"
    COUNT_EFFECT_RESOLVED = "countEffectResolved"
    GAME_OVER = "gameOver"


# =============================================================================
# COMBAT LOG
# =============================================================================

@dataclass
class CombatLogEntry:
    """A single combat log entry."""
    turn: int
    event_type: str
    data: Dict[str, Any]


class CombatLog:
    """Combat event log for replay and tests. Keeps the newest `max_entries`."""

    def __init__(self, max_entries: Optional[int] = 2000):
        self.entries: Deque[CombatLogEntry] = deque(maxlen=max_entries)

    def log(self, turn: int, event_type: str, data: Optional[Dict[str, Any]] = None):
        """Add a log entry."""
        data = dict(data or {})
        self.entries.append(CombatLogEntry(turn=turn, event_type=event_type, data=data))
        logger.debug("turn %d %s %s", turn, event_type, data)

    def get_events(self, event_type: str) -> List[CombatLogEntry]:
        """Get all events of a specific type."""
        return [e for e in self.entries if e.event_type == event_type]

    def clear(self):
        self.entries.clear()


# =============================================================================
# EVENT BUS
# =============================================================================

Handler = Callable[[EngineEvent, Dict[str, Any]], None]


class EventBus:
    """Synchronous publish/subscribe for presentation listeners."""

    def __init__(self):
        self._handlers: Dict[Optional[EngineEvent], List[Handler]] = defaultdict(list)

    def subscribe(self, handler: Handler, event: Optional[EngineEvent] = None) -> None:
        """Listen to one event type, or to everything when `event` is None."""
        self._handlers[event].append(handler)

    def unsubscribe(self, handler: Handler, event: Optional[EngineEvent] = None) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: EngineEvent, payload: Dict[str, Any]) -> None:
        for handler in list(self._handlers.get(event, ())) + list(self._handlers.get(None, ())):
            handler(event, payload)
