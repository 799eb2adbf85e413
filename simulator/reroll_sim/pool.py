"""Shared unit pool — the finite market every player draws from.

The stored counts are ground truth. They are never re-derived from what
the player holds, because purchases in overlap mode also drain units the
player never sees (simulated opponents buying from the same pool).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Optional

from .data import ROSTER, UNITS_BY_COST, get_unit, pool_ceiling
from .enums import OVERLAP_BURNS, OverlapMode
from .rng import RNGState
from .units import Slots, iter_units

logger = logging.getLogger(__name__)


class PoolInvariantError(AssertionError):
    """The pool went negative, over its ceiling, or lost track of a copy.

    Always a bookkeeping bug, never a user error.
    """


class UnitPool:
    """Remaining drawable copies per unit key."""

    def __init__(self, counts: Optional[dict[str, int]] = None):
        self.counts: dict[str, int] = dict(counts) if counts else {}

    @classmethod
    def from_catalog(cls) -> "UnitPool":
        return cls({u.key: pool_ceiling(u.cost) for u in ROSTER})

    # --- Queries ---

    def remaining(self, key: str) -> int:
        """Copies still drawable for ``key`` (ground truth)."""
        return self.counts.get(key, 0)

    def ceiling(self, key: str) -> int:
        return pool_ceiling(get_unit(key).cost)

    @staticmethod
    def held_copies(key: str, board: Slots, bench: Slots) -> int:
        """Copy weight of ``key`` held across board and bench.

        Derived on every call by scanning both containers.
        """
        return sum(u.copy_weight for u in iter_units(board, bench) if u.key == key)

    def outstanding(self, key: str, board: Slots, bench: Slots) -> int:
        """Ceiling minus held copies, clamped at zero (display figure)."""
        return max(0, self.ceiling(key) - self.held_copies(key, board, bench))

    # --- Mutation ---

    def consume(self, key: str, quantity: int = 1) -> None:
        have = self.remaining(key)
        if quantity < 0 or have < quantity:
            raise PoolInvariantError(
                f"Pool underflow for {key}: need {quantity}, have {have}"
            )
        self.counts[key] = have - quantity

    def restore(self, identities: Iterable[str]) -> None:
        """Return one copy per listed identity. All-or-nothing."""
        returned = Counter(identities)
        for key, n in returned.items():
            if self.remaining(key) + n > self.ceiling(key):
                raise PoolInvariantError(
                    f"Pool overflow for {key}: {self.remaining(key)} + {n} "
                    f"> ceiling {self.ceiling(key)}"
                )
        for key, n in returned.items():
            self.counts[key] = self.remaining(key) + n

    def take_for_purchase(
        self,
        key: str,
        quantity: int,
        overlap_mode: OverlapMode,
        wanted: Iterable[str],
        excluded: Iterable[str],
        rng: RNGState,
    ) -> list[list[str]]:
        """Draw ``quantity`` copies of ``key`` and return each copy's provenance.

        Buying an unwanted unit takes one copy of itself. Buying a wanted
        unit also plays out the other seven players' turn: extra copies of
        itself (``OverlapMode.WITH`` only) and single copies of random
        same-cost units that are not wanted, not ``excluded`` and still
        available, each drawn after the previous one is removed.
        """
        wanted = set(wanted)
        excluded = set(excluded)
        if self.remaining(key) < quantity:
            raise PoolInvariantError(
                f"Pool underflow for {key}: need {quantity}, have {self.remaining(key)}"
            )

        provenance: list[list[str]] = []
        for _ in range(quantity):
            if key not in wanted:
                self.consume(key, 1)
                provenance.append([key])
                continue

            self_burn, other_burn = OVERLAP_BURNS[overlap_mode]
            removed: list[str] = []
            for _ in range(self_burn):
                if self.remaining(key) <= 0:
                    break
                self.consume(key, 1)
                removed.append(key)

            cost = get_unit(key).cost
            for _ in range(other_burn):
                candidates = [
                    u.key for u in UNITS_BY_COST[cost]
                    if u.key != key
                    and u.key not in wanted
                    and u.key not in excluded
                    and self.remaining(u.key) > 0
                ]
                if not candidates:
                    break
                victim = rng.random_element("overlap", candidates)
                self.consume(victim, 1)
                removed.append(victim)

            logger.debug("Purchase of %s burned %s", key, removed)
            provenance.append(removed)
        return provenance

    # --- Invariants ---

    def check_conservation(self, board: Slots, bench: Slots) -> None:
        """Every copy is either in the pool or owed by an owned instance.

        Raises PoolInvariantError listing each key that does not add up.
        """
        owed = Counter()
        for u in iter_units(board, bench):
            owed.update(u.removed_identities)

        problems = []
        for key, count in self.counts.items():
            if count < 0:
                problems.append(f"{key}: negative count {count}")
                continue
            total = count + owed.get(key, 0)
            if total != self.ceiling(key):
                problems.append(f"{key}: {count} + {owed.get(key, 0)} != {self.ceiling(key)}")
        for key in owed:
            if key not in self.counts:
                problems.append(f"{key}: owed but not in pool")
        if problems:
            raise PoolInvariantError("Pool conservation broken: " + "; ".join(problems))

    # --- Copy / serialization ---

    def copy(self) -> "UnitPool":
        return UnitPool(self.counts)

    def to_dict(self) -> dict[str, int]:
        return dict(self.counts)

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "UnitPool":
        pool = cls.from_catalog()
        for key, count in (d or {}).items():
            if key in pool.counts:
                pool.counts[key] = int(count)
        return pool

    def __eq__(self, other) -> bool:
        if not isinstance(other, UnitPool):
            return NotImplemented
        return self.counts == other.counts

    def __repr__(self) -> str:
        return f"UnitPool({sum(self.counts.values())} copies)"
