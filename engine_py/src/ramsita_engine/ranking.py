# engine_py/src/ramsita_engine/ranking.py

from typing import List, Optional, Tuple

from .constants import MARKER_SUIT, MIN_WINNING_ROUND, PLAIN_SUITS, SET_SIZE
from .models import Card, Player


def find_winning_set(hand: List[Card]) -> Optional[List[int]]:
    """
    Find a completed set in a hand.

    A hand wins with the marker card plus three plain marker-suit cards, or
    with four cards of one other suit. When both are possible the marker set
    is reported; within a suit the lowest ids are chosen so the result is
    reproducible.

    Args:
        hand: The cards to inspect (order is irrelevant)

    Returns:
        Sorted list of the four winning card ids, or None
    """
    marker = next((c for c in hand if c.is_marker), None)
    if marker is not None:
        plain_marker_suit = sorted(
            c.id for c in hand if c.suit == MARKER_SUIT and not c.is_special
        )
        if len(plain_marker_suit) >= SET_SIZE - 1:
            return sorted([marker.id] + plain_marker_suit[:SET_SIZE - 1])

    for suit in PLAIN_SUITS:
        ids = sorted(c.id for c in hand if c.suit == suit)
        if len(ids) >= SET_SIZE:
            return ids[:SET_SIZE]

    return None


def scan_for_winner(
    players: List[Player],
    round_number: int,
    min_round: int = MIN_WINNING_ROUND
) -> Optional[Tuple[Player, List[int]]]:
    """
    Return the first player in seat order holding a winning set.

    Nothing counts before `min_round`: the marker holder has to have had the
    card go around the table once before anyone can finish.
    """
    if round_number < min_round:
        return None

    for player in sorted(players, key=lambda p: p.seat):
        winning_set = find_winning_set(player.hand)
        if winning_set:
            return player, winning_set
    return None
