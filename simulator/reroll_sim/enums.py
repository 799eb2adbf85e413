"""Enumerations for the reroll simulator."""

from __future__ import annotations
from enum import Enum


class Container(str, Enum):
    """The two places an owned unit can sit."""
    BOARD = "board"
    BENCH = "bench"


class OverlapMode(str, Enum):
    """How hard the seven simulated lobby opponents contest a wanted unit.

    NONE: nobody else plays the unit, they only drain other same-cost units.
    WITH: one opponent also buys the wanted unit.
    """
    NONE = "none"
    WITH = "with"

    @classmethod
    def parse(cls, value) -> "OverlapMode":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.NONE
        return cls(str(value))


class GameMode(str, Enum):
    STANDARD = "standard"        # finite gold balance
    TIME_ATTACK = "time_attack"  # unlimited gold, spend is the score

    @property
    def unlimited_gold(self) -> bool:
        return self is GameMode.TIME_ATTACK


class Rejection(str, Enum):
    """Why an intent was ignored. Rejections never change state."""
    LOCKED = "locked"
    INSUFFICIENT_GOLD = "insufficient_gold"
    MAX_LEVEL = "max_level"
    INVALID_SLOT = "invalid_slot"
    EMPTY_SLOT = "empty_slot"
    POOL_EXHAUSTED = "pool_exhausted"
    BENCH_FULL = "bench_full"
    BOARD_FULL = "board_full"
    NO_MERGE = "no_merge"
    COMPLETED = "completed"         # unit already held at 3 stars
    NO_CHANGE = "no_change"
    UNLIMITED_GOLD = "unlimited_gold"


# Overlap side-burns per purchased copy of a wanted unit: (self, others)
OVERLAP_BURNS: dict[OverlapMode, tuple[int, int]] = {
    OverlapMode.NONE: (1, 7),
    OverlapMode.WITH: (2, 6),
}

# Copies of the shared pool held by one instance, by rank
COPY_WEIGHT: dict[int, int] = {1: 1, 2: 3, 3: 9}

MAX_RANK = 3
