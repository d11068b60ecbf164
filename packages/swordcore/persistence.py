"""
Session persistence - versioned snapshots of a GameSession.

A snapshot is a plain JSON-compatible dict holding the full state graph
(player, game, in-flight runtime selections) plus the RNG state. Loading
re-validates the shape before anything is rebuilt; a snapshot that fails
validation is discarded wholesale and the caller starts fresh. Nothing is
ever partially applied.

Snapshot layout (version 1):
    {
        "version": 1,
        "saved_at": 1730000000.0,
        "seed": 42,
        "rng_state": [...],
        "player": {...},      # PlayerState.to_dict()
        "game": {...},        # GameState.to_dict()
        "runtime": {...},     # RuntimeState.to_dict()
    }

Usage:
    storage = JsonFileStorage("saves")
    persist_snapshot(storage, session)

    session = load_snapshot(storage)
    if session is None:
        session = GameSession.new(deck=content.starter_deck())
"""

from __future__ import annotations

import json
import logging
import random
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import DEFAULT_CONFIG, GameConfig
from .errors import CorruptSnapshot
from .state.game import GameState
from .state.phase import is_game_phase
from .state.player import PlayerState
from .state.session import GameSession, RuntimeState

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

# Keys that must hold lists for the snapshot to be usable
PLAYER_LIST_KEYS = ("hand", "deck", "discard", "buffs", "count_effects", "passives")
GAME_LIST_KEYS = ("enemies",)
RUNTIME_LIST_KEYS = ("reward_cards", "passive_choices")

# Lists whose entries must be objects
PLAYER_RECORD_KEYS = ("hand", "deck", "discard", "buffs", "count_effects", "passives")
GAME_RECORD_KEYS = ("enemies",)
RUNTIME_RECORD_KEYS = ("reward_cards",)
CARD_PILE_KEYS = ("hand", "deck", "discard")


# =============================================================================
# STORAGE BACKENDS
# =============================================================================

class MemoryStorage:
    """Dict-backed key/value store (tests, headless runs)."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """One JSON file per key under a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


# =============================================================================
# SERIALIZATION
# =============================================================================

def _rng_state_to_list(rng: random.Random) -> List[Any]:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def _rng_from_list(state: Optional[List[Any]], seed: Optional[int]) -> random.Random:
    rng = random.Random(seed)
    if state:
        version, internal, gauss_next = state
        rng.setstate((version, tuple(internal), gauss_next))
    return rng


def serialize_snapshot(session: GameSession, config: GameConfig = DEFAULT_CONFIG,
                       saved_at: Optional[float] = None) -> Dict[str, Any]:
    """Full snapshot dict of a session."""
    return {
        "version": config.snapshot_version,
        "saved_at": saved_at if saved_at is not None else time.time(),
        "seed": session.seed,
        "rng_state": _rng_state_to_list(session.rng),
        "player": session.player.to_dict(),
        "game": session.game.to_dict(),
        "runtime": session.runtime.to_dict(),
    }


def _require_dict(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise CorruptSnapshot(f"'{key}' must be an object")
    return value


def _require_lists(section: Dict[str, Any], keys, where: str) -> None:
    for key in keys:
        if not isinstance(section.get(key), list):
            raise CorruptSnapshot(f"{where}.{key} must be a list")


def _require_records(section: Dict[str, Any], keys, where: str) -> None:
    for key in keys:
        for i, entry in enumerate(section[key]):
            if not isinstance(entry, dict):
                raise CorruptSnapshot(f"{where}.{key}[{i}] must be an object")


def _check_durability(card: Dict[str, Any], where: str) -> None:
    """Weapon durability must already be in range; it is never repaired on load."""
    if card.get("kind") != "weapon":
        return
    durability = card.get("durability")
    current = card.get("current_durability", durability)
    if not isinstance(durability, int) or not isinstance(current, int):
        raise CorruptSnapshot(f"{where} durability must be an integer")
    if not 0 <= current <= durability:
        raise CorruptSnapshot(f"{where} durability {current}/{durability} out of range")


def validate_snapshot(data: Any, version: int = SNAPSHOT_VERSION) -> None:
    """Raise CorruptSnapshot unless `data` has the expected shape and version."""
    if not isinstance(data, dict):
        raise CorruptSnapshot("Snapshot must be an object")
    if data.get("version") != version:
        raise CorruptSnapshot(f"Unsupported snapshot version: {data.get('version')!r}")

    player = _require_dict(data, "player")
    game = _require_dict(data, "game")
    runtime = _require_dict(data, "runtime")

    _require_lists(player, PLAYER_LIST_KEYS, "player")
    _require_lists(game, GAME_LIST_KEYS, "game")
    _require_lists(runtime, RUNTIME_LIST_KEYS, "runtime")
    _require_records(player, PLAYER_RECORD_KEYS, "player")
    _require_records(game, GAME_RECORD_KEYS, "game")
    _require_records(runtime, RUNTIME_RECORD_KEYS, "runtime")

    sword = player.get("current_sword")
    if sword is not None:
        if not isinstance(sword, dict):
            raise CorruptSnapshot("player.current_sword must be an object")
        _check_durability(sword, "player.current_sword")
    for key in CARD_PILE_KEYS:
        for i, card in enumerate(player[key]):
            _check_durability(card, f"player.{key}[{i}]")

    if not is_game_phase(game.get("phase")):
        raise CorruptSnapshot(f"Illegal phase: {game.get('phase')!r}")
    for key in ("hp", "max_hp", "mana", "max_mana"):
        if not isinstance(player.get(key), int) or isinstance(player.get(key), bool):
            raise CorruptSnapshot(f"player.{key} must be an integer")


def parse_snapshot(data: Any, config: GameConfig = DEFAULT_CONFIG) -> GameSession:
    """
    Validate and rebuild a session from a snapshot dict.

    Raises:
        CorruptSnapshot: On any shape, version or content error
    """
    validate_snapshot(data, config.snapshot_version)
    try:
        player = PlayerState.from_dict(data["player"])
        game = GameState.from_dict(data["game"])
        runtime = RuntimeState.from_dict(data["runtime"])
        seed = data.get("seed")
        rng = _rng_from_list(data.get("rng_state"), seed)
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise CorruptSnapshot(f"Snapshot content is invalid: {e}") from e

    if player.hp > player.max_hp or player.mana > player.max_mana:
        raise CorruptSnapshot("player vitals exceed their maximum")
    owned = player.hand + player.deck + player.discard
    if player.current_sword is not None:
        owned.append(player.current_sword)
    uids = [card.uid for card in owned]
    if len(set(uids)) != len(uids):
        raise CorruptSnapshot("the same card appears more than once")
    return GameSession(player=player, game=game, runtime=runtime, seed=seed, rng=rng)


# =============================================================================
# STORAGE OPERATIONS
# =============================================================================

def persist_snapshot(storage, session: GameSession, config: GameConfig = DEFAULT_CONFIG) -> bool:
    """Write the session to storage. Returns False if the write failed."""
    try:
        payload = json.dumps(serialize_snapshot(session, config))
        storage.set(config.storage_key, payload)
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Failed to save snapshot: %s", e)
        return False
    return True


def has_restorable_snapshot(storage, config: GameConfig = DEFAULT_CONFIG) -> bool:
    """True if storage holds a snapshot that would load."""
    raw = storage.get(config.storage_key)
    if raw is None:
        return False
    try:
        validate_snapshot(json.loads(raw), config.snapshot_version)
    except (CorruptSnapshot, ValueError):
        return False
    return True


def load_snapshot(storage, config: GameConfig = DEFAULT_CONFIG) -> Optional[GameSession]:
    """
    Restore the saved session, or None to start fresh.

    A corrupt snapshot is removed from storage so it is not offered again.
    """
    raw = storage.get(config.storage_key)
    if raw is None:
        return None
    try:
        session = parse_snapshot(json.loads(raw), config)
    except (CorruptSnapshot, ValueError) as e:
        logger.warning("Discarding corrupt snapshot: %s", e)
        storage.remove(config.storage_key)
        return None
    logger.info("Restored snapshot (wave %d, turn %d)", session.game.current_wave, session.game.turn)
    return session


def clear_snapshot(storage, config: GameConfig = DEFAULT_CONFIG) -> None:
    storage.remove(config.storage_key)
