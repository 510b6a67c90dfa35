"""Game constants"""

from typing import List

# Suits; A is the marker suit
SUIT_A = 'A'
SUIT_B = 'B'
SUIT_C = 'C'
SUIT_D = 'D'
SUITS: List[str] = [SUIT_A, SUIT_B, SUIT_C, SUIT_D]
MARKER_SUIT = SUIT_A
# Non-marker suits, in the order they are checked for a four-of-a-kind set
PLAIN_SUITS: List[str] = [SUIT_B, SUIT_C, SUIT_D]

MARKER_CARD_ID = 1
DECK_SIZE = 16
HAND_SIZE = 4
SET_SIZE = 4
MAX_PLAYERS = 4

# Room states
STATE_WAITING = 'waiting'
STATE_ACTIVE = 'active'
STATE_ENDED = 'ended'

MIN_WINNING_ROUND = 2

DEFAULT_BOT_NAMES: List[str] = ["R.1", "P10", "R.0"]
GAME_SENDER = "GAME"
