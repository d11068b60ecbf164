"""
Tests for the enemy action cycle: delay countdown, rotation, timers and
taunt-aware targeting.
"""

import pytest

from packages.swordcore.handlers.enemy_actions import (
    arm_enemy,
    legal_targets,
    ready_enemies,
    reduce_delays,
    rotate_action,
    tick_enemy_timers,
)
from packages.swordcore.state.enemy import Enemy, EnemyAction, EnemyActionType

from tests.conftest import build_enemy


def cycle_actions():
    return [
        EnemyAction(id="jab", name="Jab", damage=3, delay=1),
        EnemyAction(id="smash", name="Smash", damage=12, delay=3),
    ]


class TestDelays:

    def test_only_head_counts_down(self):
        enemy = build_enemy(actions=cycle_actions())
        enemy.action_queue[0].current_delay = 2
        reduce_delays([enemy], 1)
        assert enemy.action_queue[0].current_delay == 1
        assert enemy.action_queue[1].current_delay == 3

    def test_ready_at_zero(self):
        enemy = build_enemy(delay=1)
        assert reduce_delays([enemy], 1) == [enemy]

    def test_delay_can_go_negative(self):
        enemy = build_enemy(delay=1)
        reduce_delays([enemy], 3)
        assert enemy.head_action.current_delay == -2
        assert enemy.head_action.is_ready

    def test_dead_enemies_do_not_tick(self):
        enemy = build_enemy(delay=1)
        enemy.hp = 0
        assert reduce_delays([enemy], 1) == []
        assert enemy.head_action.current_delay == 1

    def test_ready_keeps_line_order(self):
        a, b, c = build_enemy(delay=1), build_enemy(delay=5), build_enemy(delay=1)
        assert reduce_delays([a, b, c]) == [a, c]
        assert ready_enemies([a, b, c]) == [a, c]


class TestRotation:

    def test_regular_enemy_recycles_with_base_delay(self):
        enemy = build_enemy(actions=cycle_actions())
        enemy.action_queue[0].current_delay = -1
        fired = rotate_action(enemy)
        assert fired.id == "jab"
        assert [a.id for a in enemy.action_queue] == ["smash", "jab"]
        assert enemy.action_queue[-1].current_delay == 1

    def test_cycle_is_deterministic(self):
        enemy = build_enemy(actions=cycle_actions())
        order = [rotate_action(enemy).id for _ in range(4)]
        assert order == ["jab", "smash", "jab", "smash"]

    def test_boss_rebuilds_from_templates(self):
        boss = Enemy(name="Boss", hp=100, max_hp=100, actions=cycle_actions(), is_boss=True)
        arm_enemy(boss)
        fired = rotate_action(boss)
        tail = boss.action_queue[-1]
        assert tail is not fired
        assert tail.id == "jab"
        assert boss.next_template_index == 1

    def test_empty_queue(self):
        enemy = Enemy(name="Idle", hp=5, max_hp=5)
        assert rotate_action(enemy) is None


class TestTimers:

    def test_stun_taunt_cooldown_count_down(self):
        enemy = build_enemy(stun=1, is_taunting=True, taunt_duration=1, summon_cooldown=2)
        tick_enemy_timers([enemy])
        assert enemy.stun == 0
        assert not enemy.is_taunting
        assert enemy.summon_cooldown == 1


class TestLegalTargets:

    def test_everyone_when_nobody_taunts(self):
        a, b = build_enemy(), build_enemy()
        assert legal_targets([a, b]) == [a, b]

    def test_taunt_restricts(self):
        a = build_enemy()
        b = build_enemy(is_taunting=True, taunt_duration=2)
        assert legal_targets([a, b]) == [b]

    def test_dead_taunter_ignored(self):
        a = build_enemy()
        b = build_enemy(is_taunting=True, taunt_duration=2)
        b.hp = 0
        assert legal_targets([a, b]) == [a]
