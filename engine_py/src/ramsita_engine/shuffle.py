"""
Deck construction, shuffling and dealing.
"""

import random
from typing import List, Optional

from .constants import (
    DECK_SIZE, HAND_SIZE, MARKER_CARD_ID, MARKER_SUIT, MAX_PLAYERS, PLAIN_SUITS
)
from .models import Card, Player


def build_deck() -> List[Card]:
    """
    Create the fixed 16-card deck.

    Ids are assigned in order: the marker card (1), the three plain
    marker-suit cards (2-4), then four cards of each remaining suit.
    """
    deck = [Card(id=MARKER_CARD_ID, suit=MARKER_SUIT, is_special=True)]
    for _ in range(HAND_SIZE - 1):
        deck.append(Card(id=len(deck) + 1, suit=MARKER_SUIT))
    for suit in PLAIN_SUITS:
        for _ in range(HAND_SIZE):
            deck.append(Card(id=len(deck) + 1, suit=suit))
    return deck


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Fisher-Yates shuffle.

    Args:
        deck: Cards to shuffle (left untouched)
        rng: Optional random source for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    rng = rng or random
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal_cards(players: List[Player], rng: Optional[random.Random] = None) -> int:
    """
    Deal a freshly shuffled deck, four cards per seat.

    Seat i receives the slice [4i, 4i + 4) of the shuffled deck. Any winning
    set or finish position from an earlier game is cleared.

    Args:
        players: Exactly four players in seat order
        rng: Optional random source

    Returns:
        The seat holding the marker card
    """
    if len(players) != MAX_PLAYERS:
        raise ValueError(f"Need exactly {MAX_PLAYERS} players to deal, got {len(players)}")

    deck = shuffle_deck(build_deck(), rng)
    assert len(deck) == DECK_SIZE

    marker_seat = 0
    for player in players:
        start = player.seat * HAND_SIZE
        player.hand = deck[start:start + HAND_SIZE]
        player.winning_set = None
        player.finish_position = None
        if any(card.is_marker for card in player.hand):
            marker_seat = player.seat
    return marker_seat
