"""Trait bookkeeping for the board (display data only, no bonuses)."""

from __future__ import annotations

from collections import defaultdict

from .enums import MAX_RANK
from .units import Slots, iter_units


def trait_counts(board: Slots) -> list[tuple[str, int]]:
    """Unique champions per trait on the board.

    Duplicates of a champion count once. Sorted by count (desc), then name.
    """
    members: dict[str, set[str]] = defaultdict(set)
    for u in iter_units(board):
        for trait in u.unit.traits:
            members[trait].add(u.key)
    return sorted(
        ((trait, len(keys)) for trait, keys in members.items()),
        key=lambda row: (-row[1], row[0]),
    )


def three_star_count(board: Slots) -> int:
    return sum(1 for u in iter_units(board) if u.rank >= MAX_RANK)
