"""
Error taxonomy for the combat engine.

Nothing here is fatal. RejectedAction is raised by gate checks and turned
into an ActionResult at the public engine boundary; CorruptSnapshot is
raised by snapshot parsing and turned into "start fresh" by the loader.
Illegal phase transitions never raise; they report accepted=False.
"""

from __future__ import annotations

from enum import Enum


class RejectReason(Enum):
    """Why a player action was refused."""
    BUSY = "BUSY"
    WRONG_PHASE = "WRONG_PHASE"
    INVALID_INDEX = "INVALID_INDEX"
    NOT_ENOUGH_MANA = "NOT_ENOUGH_MANA"
    NO_WEAPON = "NO_WEAPON"
    NO_DURABILITY = "NO_DURABILITY"
    NO_ATTACK_THIS_TURN = "NO_ATTACK_THIS_TURN"
    INVALID_TARGET = "INVALID_TARGET"
    NOT_TARGETING = "NOT_TARGETING"
    NO_SELECTION = "NO_SELECTION"
    NO_WAITS_LEFT = "NO_WAITS_LEFT"
    NO_HITS = "NO_HITS"
    SELECTION_PENDING = "SELECTION_PENDING"
    NO_CONTENT = "NO_CONTENT"


class SwordcoreError(Exception):
    """Base class for engine errors."""


class RejectedAction(SwordcoreError):
    """A player action failed its gate; no state was mutated."""

    def __init__(self, reason: RejectReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class IllegalTransition(SwordcoreError):
    """Raised only by callers that want a failed phase change to be loud."""

    def __init__(self, from_phase, to_phase):
        super().__init__(f"Illegal phase transition {from_phase} -> {to_phase}")
        self.from_phase = from_phase
        self.to_phase = to_phase


class CorruptSnapshot(SwordcoreError, ValueError):
    """A persisted snapshot failed shape or version validation."""
