#!/usr/bin/env python3
"""
Sword Combat Server

HTTP front end for the combat engine. Holds one GameSession in memory,
exposes the engine's player actions as endpoints and returns the full
state view after every call. Saves go to a JSON file directory.

Usage:
    python web/server.py --port 8080

Then:
    curl -X POST localhost:8080/api/new
    curl -X POST localhost:8080/api/card/0
    curl localhost:8080/api/state
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from packages.swordcore import (
    ActionResult,
    CombatEngine,
    ContentLibrary,
    GameConfig,
    GameSession,
    JsonFileStorage,
    clear_snapshot,
    has_restorable_snapshot,
    load_snapshot,
    persist_snapshot,
)

logger = logging.getLogger(__name__)

SAVE_DIR = Path(os.environ.get("SWORDCORE_SAVE_DIR", Path(__file__).parent / "saves"))


# ============================================================================
# GAME HOLDER
# ============================================================================

class GameHolder:
    """The single in-memory game the server plays."""

    def __init__(self, content: ContentLibrary, config: GameConfig, storage):
        self.content = content
        self.config = config
        self.storage = storage
        self.engine: Optional[CombatEngine] = None

    def new_game(self, seed: Optional[int] = None) -> CombatEngine:
        session = GameSession.new(deck=self.content.starter_deck(), seed=seed, config=self.config)
        self.engine = CombatEngine(session, content=self.content, config=self.config)
        self.engine.start_combat()
        logger.info("New game (seed=%s)", seed)
        return self.engine

    def restore(self) -> bool:
        session = load_snapshot(self.storage, self.config)
        if session is None:
            return False
        self.engine = CombatEngine(session, content=self.content, config=self.config)
        return True

    def state(self) -> Dict[str, Any]:
        if self.engine is None:
            return {"active": False, "has_save": has_restorable_snapshot(self.storage, self.config)}
        return {"active": True, **self.engine.to_dict()}


def _respond(holder: GameHolder, result: ActionResult) -> JSONResponse:
    status = 200 if result.accepted else 409
    return JSONResponse({"result": result.to_dict(), "state": holder.state()}, status_code=status)


def _no_game() -> JSONResponse:
    return JSONResponse({"error": "No game in progress"}, status_code=404)


# ============================================================================
# APP
# ============================================================================

def create_app(content: Optional[ContentLibrary] = None, config: Optional[GameConfig] = None,
               storage=None) -> FastAPI:
    """Build the FastAPI app around a fresh GameHolder."""
    config = config or GameConfig.from_env()
    holder = GameHolder(content or ContentLibrary.default(), config, storage or JsonFileStorage(SAVE_DIR))
    app = FastAPI(title="Sword Combat Server")
    app.state.holder = holder

    @app.get("/api/state")
    async def get_state():
        """Current state view."""
        return JSONResponse(holder.state())

    @app.post("/api/new")
    async def new_game(seed: Optional[int] = None):
        holder.new_game(seed)
        return JSONResponse(holder.state())

    @app.post("/api/card/{index}")
    async def use_card(index: int):
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.use_card(index))

    # Fixed paths are registered before their parameterised siblings
    @app.post("/api/target/cancel")
    async def cancel_targeting():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.cancel_targeting())

    @app.post("/api/target/{enemy_id}")
    async def select_target(enemy_id: str):
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.select_target(enemy_id))

    @app.post("/api/end-turn")
    async def end_turn():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.end_turn())

    @app.post("/api/wait")
    async def wait():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.wait())

    @app.post("/api/exchange")
    async def toggle_exchange():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.toggle_exchange_mode())

    @app.post("/api/selection/cancel")
    async def cancel_selection():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.cancel_skill_selection())

    @app.post("/api/selection/{index}")
    async def select_skill_card(index: int):
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.select_skill_card(index))

    @app.post("/api/reward/skip")
    async def skip_reward():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.skip_reward())

    @app.post("/api/reward/{index}")
    async def choose_reward(index: int):
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.choose_reward(index))

    @app.post("/api/passive/{index}")
    async def learn_passive(index: int):
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.learn_passive(index))

    @app.post("/api/next-wave")
    async def next_wave():
        if holder.engine is None:
            return _no_game()
        return _respond(holder, holder.engine.advance_wave())

    @app.post("/api/save")
    async def save():
        if holder.engine is None:
            return _no_game()
        saved = persist_snapshot(holder.storage, holder.engine.session, holder.config)
        return JSONResponse({"saved": saved}, status_code=200 if saved else 500)

    @app.post("/api/load")
    async def load():
        if not holder.restore():
            return JSONResponse({"error": "No restorable save"}, status_code=404)
        return JSONResponse(holder.state())

    @app.delete("/api/save")
    async def delete_save():
        clear_snapshot(holder.storage, holder.config)
        return JSONResponse({"deleted": True})

    return app


# ============================================================================
# MAIN
# ============================================================================

def main():
    parser = argparse.ArgumentParser(description="Sword combat HTTP server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    print(f"""
    ========================================
    Sword Combat Server

    URL: http://localhost:{args.port}
    Saves: {SAVE_DIR}

    Press Ctrl+C to stop.
    ========================================
    """)
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
