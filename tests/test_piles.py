"""
Tests for pile handling: draws, reshuffles, overflow, deck reset and
mirage cleanup.
"""

import random

import pytest

from packages.swordcore.handlers.cards import (
    draw_cards,
    draw_with_guaranteed_weapon,
    remove_mirage_cards,
    reset_deck,
    reveal_cards,
    take_from_pile,
)
from packages.swordcore.state.player import PlayerState

from tests.conftest import build_skill, build_weapon, pile_total


def skills(n, prefix="s"):
    return [build_skill(id=f"{prefix}{i}", name=f"Skill {i}") for i in range(n)]


class TestDraw:

    def test_draws_from_top(self):
        cards = skills(3)
        player = PlayerState(deck=list(cards))
        result = draw_cards(player, 1, random.Random(1))
        assert result.drawn == [cards[2]]
        assert player.hand == [cards[2]]

    def test_reshuffle_when_deck_empty(self):
        """Empty deck, 3 in discard, draw 2: reshuffle, 2 drawn, 1 left in deck."""
        cards = skills(3)
        player = PlayerState(discard=list(cards))
        result = draw_cards(player, 2, random.Random(4))
        assert result.count == 2
        assert result.reshuffles == 1
        assert player.discard == []
        assert len(player.deck) == 1
        assert {c.uid for c in player.hand + player.deck} == {c.uid for c in cards}

    def test_exhausted_stops_early(self):
        player = PlayerState(deck=skills(1))
        result = draw_cards(player, 3, random.Random(1))
        assert result.count == 1
        assert result.exhausted

    def test_full_hand_pushes_oldest(self):
        hand = skills(2, "h")
        player = PlayerState(hand=list(hand), deck=skills(1))
        result = draw_cards(player, 1, random.Random(1), max_hand=2)
        assert result.overflow == [hand[0]]
        assert player.discard == [hand[0]]
        assert len(player.hand) == 2

    def test_draw_conserves_cards(self):
        player = PlayerState(hand=skills(2, "h"), deck=skills(3), discard=skills(4, "d"))
        before = pile_total(player)
        draw_cards(player, 10, random.Random(9), max_hand=4)
        assert pile_total(player) == before


class TestGuaranteedWeapon:

    def test_weapon_pulled_from_anywhere_in_deck(self):
        blade = build_weapon()
        player = PlayerState(deck=[blade] + skills(6))
        result = draw_with_guaranteed_weapon(player, 3, random.Random(2))
        assert blade in player.hand
        assert result.count == 3

    def test_no_weapon_available(self):
        player = PlayerState(deck=skills(4))
        result = draw_with_guaranteed_weapon(player, 3, random.Random(2))
        assert result.count == 3


class TestResetAndCleanup:

    def test_reset_merges_hand_and_discard(self):
        player = PlayerState(hand=skills(2, "h"), deck=skills(1), discard=skills(3, "d"))
        reset_deck(player, random.Random(0))
        assert player.hand == [] and player.discard == []
        assert len(player.deck) == 6

    def test_mirage_vanishes_from_every_pile(self):
        mirage = build_weapon(is_mirage=True)
        kept = build_weapon()
        player = PlayerState(hand=[mirage], deck=[kept], discard=[build_weapon(is_mirage=True)],
                             current_sword=build_weapon(is_mirage=True))
        removed = remove_mirage_cards(player)
        assert len(removed) == 2
        assert player.deck == [kept]
        assert player.current_sword is not None

    def test_take_by_uid(self):
        cards = skills(3)
        pile = list(cards)
        assert take_from_pile(pile, cards[1].uid) is cards[1]
        assert take_from_pile(pile, "missing") is None
        assert len(pile) == 2

    def test_reveal_keeps_cards_out_of_hand(self):
        player = PlayerState(deck=skills(2))
        result = reveal_cards(player, 2, random.Random(0))
        assert result.count == 2
        assert player.hand == []
        assert player.deck == []
