"""
Pile handling - draws, reshuffles, deck resets and mirage cleanup.

All moves are by instance: a card leaves one pile and enters another as
the same object, so the total card count only changes through the
explicit destructive paths (consumables, broken weapons, mirage expiry)
and through reward additions.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..state.cards import Card, is_weapon
from ..state.player import PlayerState

logger = logging.getLogger(__name__)


@dataclass
class DrawResult:
    """Outcome of a draw request. `exhausted` means both piles ran dry."""
    requested: int
    drawn: List[Card] = field(default_factory=list)
    overflow: List[Card] = field(default_factory=list)
    reshuffles: int = 0
    exhausted: bool = False

    @property
    def count(self) -> int:
        return len(self.drawn)


def shuffle_discard_into_deck(player: PlayerState, rng: random.Random) -> int:
    """Move the whole discard pile under the deck and shuffle. Returns cards moved."""
    moved = len(player.discard)
    if not moved:
        return 0
    player.deck.extend(player.discard)
    player.discard.clear()
    rng.shuffle(player.deck)
    logger.debug("Reshuffled %d cards from discard", moved)
    return moved


def draw_cards(player: PlayerState, count: int, rng: random.Random, max_hand: int = 12) -> DrawResult:
    """
    Draw `count` cards from the top of the deck.

    A full hand pushes its oldest card to discard to make room. An empty
    deck reshuffles discard; when both are empty the draw stops early and
    reports a partial result.
    """
    result = DrawResult(requested=count)
    for _ in range(count):
        if len(player.hand) >= max_hand:
            oldest = player.hand.pop(0)
            player.discard.append(oldest)
            result.overflow.append(oldest)
        if not player.deck:
            if not player.discard:
                result.exhausted = True
                break
            shuffle_discard_into_deck(player, rng)
            result.reshuffles += 1
        card = player.deck.pop()
        player.hand.append(card)
        result.drawn.append(card)
    return result


def draw_first_weapon(player: PlayerState, max_hand: int = 12) -> Optional[Card]:
    """Pull the topmost weapon out of the deck (or discard) into hand."""
    for pile in (player.deck, player.discard):
        for i in range(len(pile) - 1, -1, -1):
            if is_weapon(pile[i]):
                card = pile.pop(i)
                if len(player.hand) >= max_hand:
                    player.discard.append(player.hand.pop(0))
                player.hand.append(card)
                return card
    return None


def draw_with_guaranteed_weapon(player: PlayerState, count: int, rng: random.Random,
                                max_hand: int = 12) -> DrawResult:
    """Opening draw: at least one weapon if the piles hold any, rest from the top."""
    result = DrawResult(requested=count)
    if count <= 0:
        return result
    weapon = draw_first_weapon(player, max_hand)
    if weapon is not None:
        result.drawn.append(weapon)
        count -= 1
    rest = draw_cards(player, count, rng, max_hand)
    result.drawn.extend(rest.drawn)
    result.overflow.extend(rest.overflow)
    result.reshuffles = rest.reshuffles
    result.exhausted = rest.exhausted
    return result


def reset_deck(player: PlayerState, rng: random.Random) -> int:
    """Wave clear: hand and discard go back into the deck, shuffled."""
    moved = len(player.hand) + len(player.discard)
    player.deck.extend(player.hand)
    player.deck.extend(player.discard)
    player.hand.clear()
    player.discard.clear()
    rng.shuffle(player.deck)
    return moved


def remove_mirage_cards(player: PlayerState) -> List[Card]:
    """Mirage weapons vanish from every pile (the equipped one stays until it breaks)."""
    removed: List[Card] = []
    for pile in (player.hand, player.deck, player.discard):
        kept = []
        for card in pile:
            if is_weapon(card) and card.is_mirage:
                removed.append(card)
            else:
                kept.append(card)
        pile[:] = kept
    return removed


def take_from_pile(pile: List[Card], uid: str) -> Optional[Card]:
    """Remove a card instance from a pile by uid."""
    for i, card in enumerate(pile):
        if card.uid == uid:
            return pile.pop(i)
    return None


def reveal_cards(player: PlayerState, count: int, rng: random.Random) -> DrawResult:
    """Take cards off the top of the deck without putting them in hand."""
    result = DrawResult(requested=count)
    for _ in range(count):
        if not player.deck:
            if not player.discard:
                result.exhausted = True
                break
            shuffle_discard_into_deck(player, rng)
            result.reshuffles += 1
        result.drawn.append(player.deck.pop())
    return result
