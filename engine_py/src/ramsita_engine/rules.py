"""
Game rule configuration and validation.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_BOT_NAMES, MAX_PLAYERS, MIN_WINNING_ROUND


class RuleConfig(BaseModel):
    """Configuration for game rules, timers and server behaviour."""

    max_players: int = Field(
        default=MAX_PLAYERS,
        ge=MAX_PLAYERS,
        le=MAX_PLAYERS,
        description="Seats per room (fixed)"
    )
    min_winning_round: int = Field(
        default=MIN_WINNING_ROUND,
        ge=1,
        description="Sets completed before this round do not count"
    )
    grace_period_seconds: float = Field(
        default=60.0,
        gt=0,
        description="How long a disconnected seat is held for a rejoin"
    )
    bot_move_delay: float = Field(
        default=1.5,
        ge=0,
        description="Delay before a bot passes its card"
    )
    matchmaking_timeout: float = Field(
        default=10.0,
        gt=0,
        description="How long a random-match entry waits before bots fill the table"
    )
    advisory_timeout: float = Field(
        default=3.0,
        gt=0,
        description="Upper bound for any external advisory call"
    )
    auto_fill_bots: bool = Field(
        default=True,
        description="Fill empty seats with bots when the host starts early"
    )
    redact_hands: bool = Field(
        default=False,
        description="Broadcast only card counts for other players' hands"
    )
    bot_chatter: bool = Field(
        default=True,
        description="Post bot dialogue lines to the room chat"
    )
    bot_names: List[str] = Field(
        default_factory=lambda: list(DEFAULT_BOT_NAMES),
        description="Names given to bots, in seat-fill order"
    )

    @field_validator('bot_names')
    @classmethod
    def validate_bot_names(cls, v):
        """Enough names to fill every seat but the host's."""
        if len(v) < MAX_PLAYERS - 1:
            raise ValueError(f'bot_names needs at least {MAX_PLAYERS - 1} names')
        return v

    def bot_name(self, index: int) -> str:
        return self.bot_names[index % len(self.bot_names)]


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)
