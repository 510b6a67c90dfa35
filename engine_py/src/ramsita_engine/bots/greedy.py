"""
Greedy bot implementation with basic heuristics.
"""

from collections import Counter
from typing import List, Optional

from .base import BaseBot
from ..constants import MARKER_SUIT
from ..models import Card


def choose_card_to_relinquish(hand: List[Card], preferred_suit: Optional[str] = None) -> Card:
    """
    Deterministic choice of the card to pass on.

    With the marker in hand its suit is protected: nothing of that suit leaves
    while another card is available. Otherwise the card comes from the suit
    held least often, lowest id first. An advisory suit preference is used
    only when a candidate of that suit exists.
    """
    if not hand:
        raise ValueError("Cannot choose a card from an empty hand")

    has_marker = any(card.is_marker for card in hand)
    candidates = list(hand)
    if has_marker:
        candidates = [c for c in hand if c.suit != MARKER_SUIT]
        if not candidates:
            candidates = [c for c in hand if not c.is_marker] or list(hand)

    if preferred_suit is not None:
        preferred = [c for c in candidates if c.suit == preferred_suit]
        if preferred:
            return min(preferred, key=lambda c: c.id)

    counts = Counter(card.suit for card in candidates)
    return min(candidates, key=lambda c: (counts[c.suit], c.id))


class GreedyBot(BaseBot):
    """
    Bot that keeps whatever it has most of.

    Strategy:
    - Hold on to the marker suit once the marker card is in hand
    - Give away the suit it holds the fewest of
    """

    def choose_card(self, hand: List[Card], preferred_suit: Optional[str] = None) -> Card:
        return choose_card_to_relinquish(hand, preferred_suit)
