"""Game models and data structures"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import MARKER_SUIT


def new_uid() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Card:
    id: int
    suit: str
    is_special: bool = False

    @property
    def is_marker(self) -> bool:
        return self.is_special and self.suit == MARKER_SUIT

    def to_dict(self) -> dict:
        return {'id': self.id, 'suit': self.suit, 'isSpecial': self.is_special}


@dataclass
class Player:
    seat: int  # 0-based, renumbered when a seat is removed
    name: str
    uid: str = field(default_factory=new_uid)  # stable across renumbering
    connection_id: Optional[str] = None
    client_token: Optional[str] = None
    hand: List[Card] = field(default_factory=list)
    is_bot: bool = False
    winning_set: Optional[List[int]] = None
    finish_position: Optional[int] = None

    @property
    def finished(self) -> bool:
        return self.finish_position is not None

    @property
    def connected(self) -> bool:
        return self.is_bot or self.connection_id is not None

    def card(self, card_id: int) -> Optional[Card]:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None


@dataclass
class Vacancy:
    """What a seat removed mid-game leaves behind for its bot replacement."""
    hand: List[Card]
    winning_set: Optional[List[int]] = None
    finish_position: Optional[int] = None
    held_turn: bool = False
    held_anchor: bool = False
