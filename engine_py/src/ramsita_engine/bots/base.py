"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..constants import STATE_ACTIVE
from ..models import Card, Player


class BotAction:
    """Represents a bot action."""

    def __init__(self, action_type: str, **kwargs):
        self.type = action_type
        self.data = kwargs

    @classmethod
    def pass_card(cls, card_id: int, to_seat: int) -> 'BotAction':
        """Create a pass-card action."""
        return cls('pass_card', card_id=card_id, to_seat=to_seat)

    def __repr__(self) -> str:
        return f"BotAction({self.type}, {self.data})"


class BaseBot(ABC):
    """Abstract base class for bot players."""

    def __init__(self, player_uid: str):
        self.player_uid = player_uid

    @abstractmethod
    def choose_card(self, hand: List[Card], preferred_suit: Optional[str] = None) -> Card:
        """
        Pick the card to give away.

        Args:
            hand: The bot's current hand
            preferred_suit: Optional advisory hint for the suit to get rid of

        Returns:
            A card from the hand
        """
        pass

    def me(self, room) -> Optional[Player]:
        for player in room.players:
            if player.uid == self.player_uid:
                return player
        return None

    def is_my_turn(self, room) -> bool:
        player = self.me(room)
        return (
            player is not None and
            room.state == STATE_ACTIVE and
            room.current_turn_seat == player.seat
        )

    def choose_action(self, room, preferred_suit: Optional[str] = None) -> Optional[BotAction]:
        """
        Choose an action based on the current room state.

        Returns:
            BotAction to take, or None if it is not this bot's turn
        """
        if not self.is_my_turn(room):
            return None
        player = self.me(room)
        if not player.hand:
            return None
        to_seat = room.next_active_seat(player.seat)
        if to_seat is None:
            return None
        card = self.choose_card(player.hand, preferred_suit)
        return BotAction.pass_card(card.id, to_seat)
