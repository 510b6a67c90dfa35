"""
Optional external advisory service: bot strategy hints, bot dialogue and
end-of-game commentary.

Nothing here is authoritative. Every call is bounded by a timeout and any
failure surfaces as ExternalAdvisoryUnavailable, which callers log and
replace with a fallback.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, List, Optional

import requests

from .constants import MARKER_SUIT, SUITS
from .errors import ExternalAdvisoryUnavailable
from .models import Card, Player

logger = logging.getLogger(__name__)

FALLBACK_DIALOGUE: Dict[str, List[str]] = {
    'excited': ["Almost there!", "One more card and I'm done."],
    'happy': ["Nice pass.", "Thanks for that one!"],
    'frustrated': ["Not the card I wanted...", "Hmm, this hand is stubborn."],
    'neutral': ["Your move.", "Passing it along."],
}


def fallback_dialogue(emotion: str, seed: int = 0) -> str:
    lines = FALLBACK_DIALOGUE.get(emotion) or FALLBACK_DIALOGUE['neutral']
    return lines[seed % len(lines)]


def fallback_commentary(winner: Optional[Player], round_number: int) -> str:
    if winner is None:
        return "Game over!"
    return f"{winner.name} completed a set in round {round_number} and takes first place!"


def describe_hand(hand: List[Card]) -> Dict[str, int]:
    """Suit counts with the marker card counted on its own."""
    counts = Counter('marker' if c.is_marker else c.suit for c in hand)
    return {key: counts.get(key, 0) for key in ['marker'] + SUITS}


def bot_mood(hand: List[Card]):
    """Dialogue context and emotion for a bot after it moved."""
    counts = describe_hand(hand)
    if counts['marker'] and counts[MARKER_SUIT] >= 2:
        return "close to winning with the marker suit", 'excited'
    if any(counts[s] >= 3 for s in SUITS if s != MARKER_SUIT):
        return "close to winning", 'excited'
    return "making a move", 'neutral'


class Advisor(ABC):
    """Interface of the advisory service."""

    @abstractmethod
    async def suggest_suit(self, hand: List[Card], round_number: int) -> Optional[str]:
        """Suit the bot should give away, or None for no opinion."""

    @abstractmethod
    async def dialogue(self, bot_name: str, opponent_name: str, context: str, emotion: str) -> str:
        """A short chat line for a bot."""

    @abstractmethod
    async def game_commentary(self, winner: Optional[Player], players: List[Player],
                              round_number: int) -> str:
        """A short comment on a finished game."""


class NullAdvisor(Advisor):
    """No advisory service configured."""

    async def suggest_suit(self, hand, round_number):
        raise ExternalAdvisoryUnavailable("No advisory service configured")

    async def dialogue(self, bot_name, opponent_name, context, emotion):
        raise ExternalAdvisoryUnavailable("No advisory service configured")

    async def game_commentary(self, winner, players, round_number):
        raise ExternalAdvisoryUnavailable("No advisory service configured")


class HttpAdvisor(Advisor):
    """
    Advisory service reached over HTTP.

    Each method POSTs a JSON body to `{base_url}/{endpoint}` and expects a
    JSON object back (`{"suit": ...}` or `{"text": ...}`). Requests run in a
    worker thread so the event loop is never blocked.
    """

    def __init__(self, base_url: str, timeout: float = 3.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, endpoint: str, payload: Dict) -> Dict:
        try:
            response = self.session.post(f"{self.base_url}/{endpoint}", json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalAdvisoryUnavailable(f"{endpoint} failed: {e}")

    async def _call(self, endpoint: str, payload: Dict) -> Dict:
        return await asyncio.to_thread(self._post, endpoint, payload)

    async def suggest_suit(self, hand, round_number):
        data = await self._call('strategy', {
            'hand': describe_hand(hand),
            'round': round_number,
        })
        suit = data.get('suit')
        if suit is not None and suit not in SUITS:
            raise ExternalAdvisoryUnavailable(f"Unknown suit in advice: {suit!r}")
        return suit

    async def dialogue(self, bot_name, opponent_name, context, emotion):
        data = await self._call('dialogue', {
            'bot': bot_name,
            'opponent': opponent_name,
            'context': context,
            'emotion': emotion,
        })
        return self._text(data)

    async def game_commentary(self, winner, players, round_number):
        data = await self._call('commentary', {
            'winner': winner.name if winner else None,
            'players': [{'name': p.name, 'position': p.finish_position} for p in players],
            'round': round_number,
        })
        return self._text(data)

    @staticmethod
    def _text(data: Dict) -> str:
        text = data.get('text')
        if not isinstance(text, str) or not text.strip():
            raise ExternalAdvisoryUnavailable("Empty advisory text")
        return text.strip()


async def ask(coro, timeout: float, what: str):
    """
    Await an advisory coroutine with a timeout.

    Returns None when the service is unavailable or too slow.
    """
    try:
        return await asyncio.wait_for(coro, timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Advisory {what} timed out after {timeout}s")
    except ExternalAdvisoryUnavailable as e:
        logger.info(f"Advisory {what} unavailable: {e.message}")
    return None
