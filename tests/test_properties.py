"""
Randomised engine runs that check invariants after every action:

- Cards are never created or lost (a broken weapon is the only exit)
- Durability stays within [0, max]
- Non-piercing hits deal at least 1
- Swift cards never advance enemy timers
"""

import random

import pytest

from packages.swordcore.calc.reach import Reach, SkillReach
from packages.swordcore.events import EngineEvent
from packages.swordcore.state.cards import DrawAttack, EffectKind, SkillEffect, SkillKind, is_weapon
from packages.swordcore.state.phase import GamePhase

from tests.conftest import build_engine, build_enemy, build_skill, build_weapon


def mixed_cards(rng):
    """A small deck of ordinary cards: no consumables, no selections."""
    cards = []
    for i in range(4):
        cards.append(build_weapon(name=f"Blade {i}", attack=rng.randint(5, 15),
                                  attack_count=rng.randint(1, 2), durability=rng.randint(1, 5),
                                  defense=rng.randint(0, 40), reach=rng.choice(list(Reach))))
    for i in range(8):
        cards.append(build_skill(name=f"Cut {i}", multiplier=rng.choice([0.5, 1.0, 1.5]),
                                 attack_count=rng.randint(1, 3), reach=rng.choice(list(SkillReach)),
                                 is_swift=rng.random() < 0.3))
    cards.append(build_skill(kind=SkillKind.DEFENSE, name="Stance", is_swift=True,
                             effect=SkillEffect(kind=EffectKind.COUNT_DEFENSE, value=2.0, duration=3,
                                                counter_attack=True)))
    cards.append(build_skill(name="Charge", multiplier=2.0,
                             effect=SkillEffect(kind=EffectKind.CHARGE_ATTACK, value=2.0, duration=2)))
    rng.shuffle(cards)
    return cards


def random_engine(seed):
    rng = random.Random(seed)
    cards = mixed_cards(rng)
    enemies = [build_enemy(hp=rng.randint(60, 200), defense=rng.randint(0, 6),
                           damage=rng.randint(1, 4), delay=rng.randint(1, 4))
               for _ in range(rng.randint(1, 3))]
    engine = build_engine(enemies=enemies, hand=cards[:5], deck=cards[5:], mana=10, hp=200, seed=seed)
    return engine, rng


def step(engine, rng):
    playable = engine.playable_cards()
    if playable and rng.random() < 0.85:
        result = engine.use_card(rng.choice(playable))
        if result.data.get("targeting"):
            engine.select_target(rng.choice(engine.legal_target_ids()))
    else:
        engine.end_turn()


def all_weapons(player):
    weapons = [c for c in player.hand + player.deck + player.discard if is_weapon(c)]
    if player.current_sword is not None:
        weapons.append(player.current_sword)
    return weapons


@pytest.mark.parametrize("seed", range(8))
def test_cards_are_conserved(seed):
    engine, rng = random_engine(seed)
    broken = []
    engine.events.subscribe(lambda event, payload: broken.append(payload["weapon"]), EngineEvent.WEAPON_BROKEN)
    initial = engine.player.card_count()
    for _ in range(60):
        if engine.game.phase != GamePhase.COMBAT:
            break
        step(engine, rng)
        if engine.game.phase == GamePhase.COMBAT:
            assert engine.player.card_count() + len(broken) == initial


@pytest.mark.parametrize("seed", range(8))
def test_durability_in_bounds(seed):
    engine, rng = random_engine(seed)
    for _ in range(60):
        if engine.game.phase != GamePhase.COMBAT:
            break
        step(engine, rng)
        for weapon in all_weapons(engine.player):
            assert 0 <= weapon.current_durability <= weapon.durability


@pytest.mark.parametrize("seed", range(4))
def test_armor_never_stops_a_hit(seed):
    rng = random.Random(seed)
    enemy = build_enemy(hp=1000, defense=100, delay=50)
    hand = [build_skill(multiplier=rng.choice([0.5, 1.0, 2.0]), attack_count=2) for _ in range(4)]
    engine = build_engine(enemies=[enemy], hand=hand, sword=build_weapon(attack=rng.randint(1, 30), durability=20))
    for _ in range(4):
        engine.use_card(0)
    amounts = [e.data["amount"] for e in engine.log.get_events(EngineEvent.DAMAGE_DEALT.value)]
    assert amounts == [1] * 8
    assert enemy.hp == 992


def test_swift_cards_leave_timers_alone():
    enemies = [build_enemy(delay=d) for d in (1, 2, 3)]
    hand = [
        build_weapon(draw_attack=DrawAttack(is_swift=True)),
        build_skill(is_swift=True),
        build_skill(kind=SkillKind.BUFF, is_swift=True, effect=SkillEffect(kind=EffectKind.FOCUS, value=0.5)),
        build_skill(kind=SkillKind.DEFENSE, is_swift=True,
                    effect=SkillEffect(kind=EffectKind.COUNT_DEFENSE, value=1.0, duration=2)),
    ]
    engine = build_engine(enemies=enemies, hand=hand, hp=50)
    while engine.player.hand:
        result = engine.use_card(0)
        if result.data.get("targeting"):
            engine.select_target(engine.legal_target_ids()[-1])
    assert [e.head_action.current_delay for e in enemies] == [1, 2, 3]
    assert engine.player.hp == 50
    assert engine.player.count_effects[0].is_new
