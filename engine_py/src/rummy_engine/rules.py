"""
Game rule configuration and validation.
"""

import os

from pydantic import BaseModel, Field, field_validator

from .constants import CARDS_PER_DECK


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    min_players: int = Field(
        default=2,
        ge=2,
        le=7,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=6,
        ge=2,
        le=7,
        description="Maximum number of players allowed"
    )
    hand_size: int = Field(
        default=13,
        ge=13,
        le=13,
        description="Cards dealt to each player"
    )
    enable_bots: bool = Field(
        default=True,
        description="Whether to allow bot players"
    )
    turn_timeout: int = Field(
        default=30,
        ge=5,
        le=600,
        description="Seconds a player has to finish their turn"
    )
    max_chained_turns: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Upper bound on consecutive automated or timed-out turns per request"
    )
    room_timeout: int = Field(
        default=3600,
        ge=60,
        le=86400,
        description="Room inactivity timeout in seconds"
    )
    hide_opponent_hands: bool = Field(
        default=False,
        description="Only show a viewer their own hand in snapshots"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't fall below minimum."""
        min_players = info.data.get('min_players', 2)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    def decks_for_players(self, player_count: int) -> int:
        """Number of 53-card decks in the shoe for a table of this size."""
        if player_count <= 2:
            return 1
        if player_count <= 5:
            return 2
        return 3

    def get_shoe_size(self, player_count: int) -> int:
        """Get the total number of cards in the shoe."""
        return self.decks_for_players(player_count) * CARDS_PER_DECK


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


def rules_from_env() -> RuleConfig:
    """Build rules from RUMMY_* environment variables."""
    overrides = {}
    env_map = {
        'RUMMY_TURN_TIMEOUT': 'turn_timeout',
        'RUMMY_ROOM_TIMEOUT': 'room_timeout',
        'RUMMY_MAX_PLAYERS': 'max_players',
        'RUMMY_HIDE_OPPONENT_HANDS': 'hide_opponent_hands',
    }
    for env_name, field_name in env_map.items():
        value = os.getenv(env_name)
        if value is not None:
            overrides[field_name] = value
    # pydantic coerces "45" / "true" into the field types
    return create_rules(**overrides)
