"""
Game mode and aggregation interval enumerations.

The prices API tracks each game ruleset (world type) independently, and
aggregates trades into fixed-size time buckets.
"""

from enum import Enum
from typing import Optional


class Region(Enum):
    """
    Enum for the game rulesets the prices API tracks.

    Each ruleset has its own Grand Exchange, so prices never mix:
    - REGULAR: the main game
    - DEADMAN: Deadman Mode worlds
    - FRESH_START: Fresh Start worlds
    """
    REGULAR = "osrs"
    DEADMAN = "dmm"
    FRESH_START = "fsw"

    def __str__(self) -> str:
        """String representation (the URL token)"""
        return self.value

    def display_name(self) -> str:
        """Human-readable name"""
        return {
            Region.REGULAR: "Old School RuneScape",
            Region.DEADMAN: "Deadman Mode",
            Region.FRESH_START: "Fresh Start Worlds",
        }[self]

    @classmethod
    def from_string(cls, value: str) -> Optional['Region']:
        """
        Create Region from its URL token.

        Args:
            value: "osrs", "dmm", "fsw" (case-insensitive)

        Returns:
            Region enum or None if invalid
        """
        if not isinstance(value, str):
            return None
        value_lower = value.lower().strip()

        for region in cls:
            if region.value == value_lower:
                return region

        return None

    @classmethod
    def get_default(cls) -> 'Region':
        """Get default region (regular game)"""
        return cls.REGULAR


class Interval(Enum):
    """
    Aggregation bucket sizes for price statistics.

    Only FIVE_MINUTES and ONE_HOUR are served by the bulk interval endpoint;
    all four are valid timesteps for per-item time series.
    """
    FIVE_MINUTES = "5m"
    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    TWENTY_FOUR_HOURS = "24h"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> Optional['Interval']:
        """
        Create Interval from its token.

        Args:
            value: "5m", "1h", "6h", "24h" (case-insensitive)

        Returns:
            Interval enum or None if invalid
        """
        if not isinstance(value, str):
            return None
        value_lower = value.lower().strip()

        for interval in cls:
            if interval.value == value_lower:
                return interval

        return None


# Intervals accepted by the bulk interval-prices endpoint
BULK_INTERVALS = frozenset({Interval.FIVE_MINUTES, Interval.ONE_HOUR})
