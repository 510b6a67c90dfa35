"""
Bot players.
"""

from .base import BaseBot, BotAction
from .greedy import GreedyBot, choose_card_to_relinquish

__all__ = ["BaseBot", "BotAction", "GreedyBot", "choose_card_to_relinquish"]
