"""
Tests for the headless autoplay runner.
"""

import json

from packages.swordcore.config import GameConfig
from packages.swordcore.content.default import DEFAULT_CONTENT

from cli import autoplay, choose_card, load_content
from tests.conftest import build_engine, build_skill, build_weapon


class TestChooseCard:

    def test_equips_when_bare_handed(self):
        engine = build_engine(hand=[build_skill(), build_weapon()], sword=None)
        assert choose_card(engine) == 1

    def test_prefers_skills_when_armed(self):
        engine = build_engine(hand=[build_weapon(), build_skill()], sword=build_weapon())
        assert choose_card(engine) == 1

    def test_nothing_playable(self):
        engine = build_engine(hand=[], sword=build_weapon())
        assert choose_card(engine) is None


class TestAutoplay:

    def test_summary_shape(self):
        summary = autoplay(seed=11, waves=2, max_turns=40, config=GameConfig())
        assert summary["seed"] == 11
        assert summary["phase"] in ("combat", "victory", "gameOver")
        assert 1 <= summary["wave"] <= 2
        assert summary["turns"] <= 40

    def test_same_seed_same_run(self):
        a = autoplay(seed=5, waves=1, max_turns=30, config=GameConfig())
        b = autoplay(seed=5, waves=1, max_turns=30, config=GameConfig())
        assert a == b


class TestLoadContent:

    def test_default_tables(self):
        assert load_content(None).weapons.keys() == DEFAULT_CONTENT["weapons"].keys()

    def test_from_file(self, tmp_path):
        path = tmp_path / "content.json"
        path.write_text(json.dumps(DEFAULT_CONTENT), encoding="utf-8")
        content = load_content(str(path))
        assert len(content.starter_deck()) == len(DEFAULT_CONTENT["starter_deck"])
