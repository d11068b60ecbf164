"""
Tests for the phase state machine.
"""

import pytest

from packages.swordcore.errors import IllegalTransition
from packages.swordcore.state.game import GameState
from packages.swordcore.state.phase import (
    GamePhase,
    PHASE_TRANSITIONS,
    can_transition,
    check_transition,
    is_game_phase,
)


class TestTransitionTable:

    def test_combat_cannot_skip_victory(self):
        game = GameState(phase=GamePhase.COMBAT)
        result = game.transition(GamePhase.RUNNING)
        assert not result.accepted
        assert not result.changed
        assert game.phase == GamePhase.COMBAT

    def test_combat_to_victory(self):
        game = GameState(phase=GamePhase.COMBAT)
        assert game.transition(GamePhase.VICTORY).changed
        assert game.phase == GamePhase.VICTORY

    def test_paused_reaches_anything(self):
        for target in GamePhase:
            assert can_transition(GamePhase.PAUSED, target)

    def test_game_over_is_terminal(self):
        game = GameState(phase=GamePhase.GAME_OVER)
        for target in GamePhase:
            if target != GamePhase.GAME_OVER:
                assert not game.transition(target).accepted
        assert game.phase == GamePhase.GAME_OVER

    def test_self_transition_accepted_but_unchanged(self):
        result = check_transition(GamePhase.EVENT, GamePhase.EVENT)
        assert result.accepted and not result.changed

    def test_every_phase_has_a_row(self):
        assert set(PHASE_TRANSITIONS) == set(GamePhase)


class TestForcedAndStrict:

    def test_force_bypasses_table(self):
        game = GameState(phase=GamePhase.VICTORY)
        assert game.transition(GamePhase.COMBAT, force=True).accepted
        assert game.phase == GamePhase.COMBAT

    def test_strict_raises(self):
        game = GameState(phase=GamePhase.COMBAT)
        with pytest.raises(IllegalTransition):
            game.transition(GamePhase.EVENT, strict=True)
        assert game.phase == GamePhase.COMBAT

    def test_report_dict(self):
        result = check_transition(GamePhase.RUNNING, GamePhase.COMBAT)
        assert result.to_dict() == {"from": "running", "to": "combat", "accepted": True, "changed": True}


class TestPhaseValues:

    @pytest.mark.parametrize("value", ["running", "gameOver", GamePhase.PAUSED])
    def test_legal(self, value):
        assert is_game_phase(value)

    @pytest.mark.parametrize("value", ["game_over", "", None, 3])
    def test_illegal(self, value):
        assert not is_game_phase(value)
