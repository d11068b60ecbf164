"""
Tests for damage, parry, counter and reward calculations.

All functions under test are pure; numbers are worked by hand in the
comments.
"""

import pytest

from packages.swordcore.calc.damage import (
    calculate_base_damage,
    calculate_counter_damage,
    calculate_gold_drop,
    calculate_hit_damage,
    calculate_lifesteal,
    calculate_parry_rate,
    effective_defense,
    exp_for_kill,
    exp_to_next_level,
    split_buffs,
    MIN_HIT_DAMAGE,
)


class TestBaseDamage:
    """(attack + bonus) x skill x focus x crit."""

    def test_plain_hit(self):
        assert calculate_base_damage(10) == 10

    def test_full_chain(self):
        # (10 + 2) * 1.5 * 1.5 * 2.0 = 54
        assert calculate_base_damage(10, 2, 1.5, 1.5, 2.0) == pytest.approx(54.0)

    def test_bonus_before_multiplier(self):
        # (8 + 2) * 0.5 = 5, not 8 * 0.5 + 2 = 6
        assert calculate_base_damage(8, 2, 0.5) == pytest.approx(5.0)

    def test_stays_float(self):
        assert calculate_base_damage(7, 0, 1.5) == pytest.approx(10.5)


class TestHitDamage:
    """Defense reduction, pierce and the damage floor."""

    def test_defense_subtracts(self):
        # 15 - 2 = 13
        assert calculate_hit_damage(15, enemy_defense=2) == 13

    def test_floors_once(self):
        # 10.9 - 3 = 7.9 -> 7
        assert calculate_hit_damage(10.9, enemy_defense=3) == 7

    def test_floor_of_one(self):
        assert calculate_hit_damage(5, enemy_defense=50) == MIN_HIT_DAMAGE

    def test_zero_base_still_one(self):
        assert calculate_hit_damage(0, enemy_defense=0) == 1

    def test_weapon_and_skill_pierce_stack(self):
        # defense 10 - (3 + 4) = 3 -> 20 - 3 = 17
        assert calculate_hit_damage(20, enemy_defense=10, weapon_pierce=3, skill_pierce=4) == 17

    def test_pierce_never_adds_damage(self):
        assert effective_defense(2, 5, 5) == 0
        assert calculate_hit_damage(10, enemy_defense=2, weapon_pierce=10) == 10

    def test_ignore_defense_uses_base(self):
        assert calculate_hit_damage(12.7, enemy_defense=100, ignore_defense=True) == 12

    def test_ignore_defense_has_no_floor_of_one(self):
        assert calculate_hit_damage(0.5, enemy_defense=100, ignore_defense=True) == 0


class TestParryAndCounter:

    def test_normal_rate_adds_buffs_and_passive(self):
        assert calculate_parry_rate(10, [5, 5], passive_bonus=3) == 23

    def test_counter_stance_replaces_rate(self):
        """A live stance ignores buffs and passives."""
        assert calculate_parry_rate(10, [50], passive_bonus=10, counter_multiplier=2.0) == 20

    def test_counter_damage(self):
        # 10 * 1.5 + 9 * 0.5 = 19.5 -> 19
        assert calculate_counter_damage(10, 1.5, 9) == 19

    def test_lifesteal_floors(self):
        assert calculate_lifesteal(25, 0.3) == 7


class TestRewards:

    def test_gold_midpoint_roll(self):
        # base 100 // 5 = 20, spread 6, roll 0.5 -> 20 + 6 - 6 = 20
        assert calculate_gold_drop(100, False, 0.5) == 20

    def test_gold_low_roll(self):
        # 20 + 0 - 6 = 14
        assert calculate_gold_drop(100, False, 0.0) == 14

    def test_boss_triples_base(self):
        # base 60, spread 18, roll 0.5 -> 60
        assert calculate_gold_drop(100, True, 0.5) == 60

    def test_gold_never_below_one(self):
        assert calculate_gold_drop(1, False, 0.0) == 1

    def test_exp_half_max_hp(self):
        assert exp_for_kill(33, False) == 16

    def test_summoned_give_no_exp(self):
        assert exp_for_kill(100, True) == 0

    def test_level_threshold(self):
        assert exp_to_next_level(3) == 150

    def test_split_buffs(self):
        assert split_buffs([2, 3], [0.5]) == (5, 1.5)
        assert split_buffs([], []) == (0, 1.0)
