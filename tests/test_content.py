"""
Tests for the content library and the engine paths that depend on it:
starter deck, wave spawns, bosses, summons, mirage weapons, rewards,
passives and wave advancement.
"""

import random
from dataclasses import replace

import pytest

from packages.swordcore.combat_engine import CombatEngine
from packages.swordcore.content.library import UnknownTemplate
from packages.swordcore.errors import RejectReason
from packages.swordcore.state.cards import CardKind, is_weapon
from packages.swordcore.state.phase import GamePhase
from packages.swordcore.state.player import PassiveKind

from tests.conftest import build_engine, build_enemy, build_skill, build_weapon


class TestCards:

    def test_starter_deck(self, content, config):
        deck = content.starter_deck()
        assert len(deck) == config.deck_size
        assert len({c.uid for c in deck}) == len(deck)
        assert sum(1 for c in deck if is_weapon(c)) == 5

    def test_every_template_builds(self, content):
        for weapon_id in content.weapons:
            weapon = content.create_weapon(weapon_id)
            assert weapon.current_durability == weapon.durability
        for skill_id in content.skills:
            assert content.create_skill(skill_id).kind == CardKind.SKILL

    def test_instances_are_independent(self, content):
        a, b = content.create_weapon("katana"), content.create_weapon("katana")
        assert a.uid != b.uid
        a.consume_durability(3)
        assert b.current_durability == b.durability

    def test_mirage(self, content):
        mirage = content.create_mirage_weapon()
        assert mirage.is_mirage

    def test_unknown_template(self, content):
        with pytest.raises(UnknownTemplate):
            content.create_weapon("nope")
        with pytest.raises(KeyError):
            content.create_enemy("nope")

    def test_rewards_never_offer_mirage(self, content):
        rng = random.Random(3)
        cards = content.reward_cards(rng, count=30, weapon_chance=1.0)
        assert all(is_weapon(c) and not c.is_mirage for c in cards)


class TestEnemies:

    def test_regular_wave(self, content):
        enemies = content.wave_enemies(1, random.Random(5))
        assert 2 <= len(enemies) <= 3
        assert {e.template_id for e in enemies} <= {"bandit", "archer"}
        assert not any(e.is_boss for e in enemies)

    def test_boss_every_fifth_wave(self, content):
        assert content.is_boss_wave(5) and content.is_boss_wave(10)
        assert not content.is_boss_wave(4)
        boss = content.wave_enemies(5, random.Random(1))
        assert len(boss) == 1
        assert boss[0].is_boss
        assert boss[0].template_id == "banditLeader"
        assert len(boss[0].action_templates) == len(boss[0].actions)

    def test_boss_scaling(self, content):
        boss = content.wave_enemies(10, random.Random(1))[0]
        assert boss.template_id == "swordMaster"
        assert 200 < boss.max_hp <= 230

    def test_summon(self, content):
        minion = content.summon_enemy("minion")
        assert minion.is_summoned
        assert minion.hp == 18

    def test_summon_default_template(self, content):
        assert content.summon_enemy().template_id == next(iter(content.enemies))


class TestPassives:

    def test_choices_are_distinct(self, content):
        choices = content.passive_choices(random.Random(2))
        assert len(choices) == 3
        assert len(set(choices)) == 3

    def test_create_passive(self, content):
        passive = content.create_passive(PassiveKind.WAIT_INCREASE)
        assert passive.max_level == 3
        assert passive.level == 1


# =============================================================================
# Engine with content
# =============================================================================


class TestCombatWithContent:

    def test_start_combat_from_fresh_session(self, new_session, content):
        engine = CombatEngine(new_session, content=content)
        result = engine.start_combat()

        assert result.accepted
        assert engine.game.phase == GamePhase.COMBAT
        assert len(engine.player.hand) == 5
        assert any(is_weapon(c) for c in engine.player.hand)
        assert engine.player.mana == engine.player.max_mana
        assert all(e.head_action is not None for e in engine.game.enemies)
        assert engine.player.card_count() == 20

    def test_start_combat_needs_enemies(self, new_session):
        engine = CombatEngine(new_session)
        assert not engine.start_combat().accepted
        assert engine.game.phase == GamePhase.RUNNING

    def test_victory_offers_rewards(self, content, config):
        engine = build_engine(enemies=[build_enemy(hp=5)], hand=[build_skill()],
                              sword=build_weapon(attack=10), content=content)
        engine.use_card(0)

        assert engine.game.phase == GamePhase.VICTORY
        assert len(engine.runtime.reward_cards) == config.reward_card_count

        before = len(engine.player.deck)
        reward = engine.runtime.reward_cards[0]
        assert engine.choose_reward(0).accepted
        assert len(engine.player.deck) == before + 1
        assert reward in engine.player.deck
        assert engine.runtime.reward_cards == []

    def test_skip_reward(self, content):
        engine = build_engine(enemies=[build_enemy(hp=5)], hand=[build_skill()],
                              sword=build_weapon(attack=10), content=content)
        engine.use_card(0)
        before = len(engine.player.deck)
        engine.skip_reward()
        assert len(engine.player.deck) == before
        assert not engine.choose_reward(0).accepted

    def test_skip_reward_needs_victory(self, content):
        engine = build_engine(content=content)
        result = engine.skip_reward()
        assert result.reason == RejectReason.WRONG_PHASE
        assert engine.game.phase == GamePhase.COMBAT

    def test_advance_wave(self, content):
        engine = build_engine(enemies=[build_enemy(hp=5)], hand=[build_skill()],
                              deck=[build_weapon(name="Spare")], sword=build_weapon(attack=10),
                              content=content)
        engine.use_card(0)
        engine.skip_reward()

        result = engine.advance_wave()

        assert result.accepted
        assert engine.game.current_wave == 2
        assert engine.game.turn == 1
        assert engine.game.phase == GamePhase.COMBAT
        assert len(engine.game.enemies) >= 2

    def test_advance_wave_needs_victory(self, content):
        engine = build_engine(content=content)
        assert not engine.advance_wave().accepted

    def test_level_up_offers_passives(self, content):
        enemy = build_enemy(hp=1)
        enemy.max_hp = 100
        engine = build_engine(enemies=[enemy], hand=[build_skill()], sword=build_weapon(), content=content)
        engine.use_card(0)

        assert engine.runtime.pending_level_up
        choice = engine.runtime.passive_choices[0]
        assert engine.learn_passive(0).accepted
        assert engine.player.has_passive(choice)
        assert not engine.runtime.pending_level_up
        assert not engine.learn_passive(0).accepted

    def test_mirage_appears_when_bare_handed(self, content, config):
        engine = build_engine(enemies=[build_enemy(delay=9)], content=content,
                              config=replace(config, mirage_chance=1.0))
        engine.end_turn()
        mirages = [c for c in engine.player.hand if is_weapon(c) and c.is_mirage]
        assert len(mirages) == 1
