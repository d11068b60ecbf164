#!/usr/bin/env python3
"""
Sword Combat - Command Line Interface

Headless runs of the combat engine for balancing and smoke testing.

Usage:
    python cli.py run --seed 42 --waves 5
    python cli.py run --seed 42 --waves 10 --json
    python cli.py content --kind weapons
    python cli.py wave --wave 5 --seed 3
"""

import argparse
import json
import logging
import os
import random
import sys
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from packages.swordcore import CombatEngine, ContentLibrary, GameConfig, GameSession, GamePhase
from packages.swordcore.state.cards import is_weapon

logger = logging.getLogger(__name__)


# =============================================================================
# AUTOPLAY
# =============================================================================

def choose_card(engine: CombatEngine) -> Optional[int]:
    """Greedy policy: equip when bare-handed, otherwise the first playable card."""
    playable = engine.playable_cards()
    if not playable:
        return None
    hand = engine.player.hand
    if engine.player.is_barehanded:
        for index in playable:
            if is_weapon(hand[index]):
                return index
    for index in playable:
        if not is_weapon(hand[index]):
            return index
    return playable[0]


def play_turn(engine: CombatEngine, max_actions: int = 20) -> int:
    """Play cards until nothing is playable, then end the turn. Returns cards played."""
    played = 0
    while engine.game.in_combat and played < max_actions:
        index = choose_card(engine)
        if index is None:
            break
        result = engine.use_card(index)
        if not result.accepted:
            break
        if result.data.get("targeting"):
            engine.select_target(engine.legal_target_ids()[0])
        if engine.runtime.skill_selection is not None:
            engine.select_skill_card(0)
        played += 1
    if engine.game.in_combat:
        engine.end_turn()
    return played


def load_content(path: Optional[str] = None) -> ContentLibrary:
    """Content tables from a JSON file, or the shipped defaults."""
    if path:
        return ContentLibrary.from_json(path)
    return ContentLibrary.default()


def autoplay(seed: Optional[int], waves: int, max_turns: int = 200,
             config: Optional[GameConfig] = None,
             content: Optional[ContentLibrary] = None) -> Dict[str, Any]:
    """Run the greedy policy until game over, the wave limit or the turn limit."""
    config = config or GameConfig.from_env()
    content = content or ContentLibrary.default()
    session = GameSession.new(deck=content.starter_deck(), seed=seed, config=config)
    engine = CombatEngine(session, content=content, config=config)
    engine.start_combat()

    turns = 0
    cards_played = 0
    while turns < max_turns:
        phase = engine.game.phase
        if phase == GamePhase.COMBAT:
            cards_played += play_turn(engine)
            turns += 1
        elif phase == GamePhase.VICTORY:
            if engine.runtime.pending_level_up and engine.runtime.passive_choices:
                engine.learn_passive(0)
            if engine.runtime.reward_cards:
                engine.choose_reward(0)
            if engine.game.current_wave >= waves:
                break
            engine.advance_wave()
        else:
            break

    return {
        "seed": seed,
        "phase": engine.game.phase.value,
        "wave": engine.game.current_wave,
        "turns": turns,
        "cards_played": cards_played,
        "score": engine.game.score,
        "enemies_defeated": engine.game.enemies_defeated,
        "level": engine.player.level,
        "hp": engine.player.hp,
        "gold": engine.player.gold,
    }


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_run(args) -> int:
    summary = autoplay(args.seed, args.waves, args.max_turns, content=load_content(args.content))
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Seed {summary['seed']}: {summary['phase']} on wave {summary['wave']}")
        print(f"  Turns: {summary['turns']}  Cards: {summary['cards_played']}")
        print(f"  Score: {summary['score']}  Kills: {summary['enemies_defeated']}")
        print(f"  Level: {summary['level']}  HP: {summary['hp']}  Gold: {summary['gold']}")
    return 0


def cmd_content(args) -> int:
    content = load_content(args.content)
    tables = {
        "weapons": content.weapons,
        "skills": content.skills,
        "enemies": content.enemies,
        "bosses": content.bosses,
    }
    table = tables[args.kind]
    if args.json:
        print(json.dumps(table, indent=2))
        return 0
    for template_id, template in table.items():
        print(f"{template_id:16s} {template.get('name', template_id)}")
    return 0


def cmd_wave(args) -> int:
    content = load_content(args.content)
    enemies = content.wave_enemies(args.wave, random.Random(args.seed))
    rows: List[Dict[str, Any]] = [
        {"name": e.name, "hp": e.hp, "defense": e.defense, "boss": e.is_boss,
         "actions": [a.name for a in e.actions]}
        for e in enemies
    ]
    if args.json:
        print(json.dumps(rows, indent=2))
        return 0
    boss = " (boss wave)" if content.is_boss_wave(args.wave) else ""
    print(f"Wave {args.wave}{boss}:")
    for row in rows:
        print(f"  {row['name']:18s} hp={row['hp']:<4d} def={row['defense']:<3d} {', '.join(row['actions'])}")
    return 0


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description="Sword Combat - headless engine runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run --seed 42 --waves 5
  %(prog)s content --kind skills
  %(prog)s wave --wave 5
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--content", "-c", default=None, help="Content JSON file (default: shipped tables)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Auto-play a run")
    run_parser.add_argument("--seed", "-s", type=int, default=None, help="RNG seed")
    run_parser.add_argument("--waves", "-w", type=int, default=5, help="Stop after this wave")
    run_parser.add_argument("--max-turns", type=int, default=200, help="Turn limit")
    run_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    content_parser = subparsers.add_parser("content", help="List content templates")
    content_parser.add_argument("--kind", "-k", default="weapons",
                                choices=["weapons", "skills", "enemies", "bosses"])
    content_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    wave_parser = subparsers.add_parser("wave", help="Show the enemy line for a wave")
    wave_parser.add_argument("--wave", type=int, default=1, help="Wave number")
    wave_parser.add_argument("--seed", "-s", type=int, default=None, help="RNG seed")
    wave_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "run": cmd_run,
        "content": cmd_content,
        "wave": cmd_wave,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
