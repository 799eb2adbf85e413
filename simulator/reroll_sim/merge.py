"""Merge engine — three of a kind at rank N become one at rank N+1.

Resolution order is load-bearing and externally visible (it decides which
physical slot ends up empty):

- rank 1 groups resolve before rank 2, so a fresh 2-star can chain into a 3-star
- keys are visited in first-seen order scanning board then bench
- survivor: lowest board index holding the group, else lowest bench index
- casualties: bench slots first (lowest index), then board slots (lowest index)

Every function here copies its inputs; nothing is mutated in place.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from .data import BENCH_SIZE, UnitDef
from .enums import Container, MAX_RANK
from .units import Slots, UnitInstance, copy_container, first_empty, iter_units, occupancy, pack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Promotion:
    """One resolved merge: where the survivor sits and what it became."""
    key: str
    rank: int
    container: Container
    index: int


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def count_by_rank(key: str, board: Slots, bench: Slots) -> dict[int, int]:
    counts = {rank: 0 for rank in range(1, MAX_RANK + 1)}
    for u in iter_units(board, bench):
        if u.key == key:
            counts[u.rank] += 1
    return counts


def max_rank(key: str, board: Slots, bench: Slots) -> int:
    """Highest rank held for ``key``, or 0 when none is held."""
    return max((u.rank for u in iter_units(board, bench) if u.key == key), default=0)


def has_triplet(board: Slots, bench: Slots) -> bool:
    """True if any key has three or more instances at a mergeable rank."""
    groups = Counter((u.key, u.rank) for u in iter_units(board, bench) if u.rank < MAX_RANK)
    return any(n >= 3 for n in groups.values())


def _positions(slots: Slots, key: str, rank: int) -> list[int]:
    return [i for i, u in enumerate(slots) if u is not None and u.key == key and u.rank == rank]


def _keys_in_order(board: Slots, bench: Slots, rank: int) -> list[str]:
    seen: dict[str, None] = {}
    for u in iter_units(board, bench):
        if u.rank == rank:
            seen.setdefault(u.key, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_merges_detailed(board: Slots, bench: Slots) -> tuple[Slots, Slots, list[Promotion]]:
    """Resolve every outstanding triplet; also report each promotion in order."""
    board = copy_container(board)
    bench = copy_container(bench)
    promotions: list[Promotion] = []

    for rank in range(1, MAX_RANK):
        for key in _keys_in_order(board, bench, rank):
            while True:
                on_board = _positions(board, key, rank)
                on_bench = _positions(bench, key, rank)
                if len(on_board) + len(on_bench) < 3:
                    break

                if on_board:
                    target = (Container.BOARD, on_board[0])
                else:
                    target = (Container.BENCH, on_bench[0])
                ordered = [(Container.BENCH, i) for i in on_bench] + [(Container.BOARD, i) for i in on_board]
                casualties = [pos for pos in ordered if pos != target][:2]

                slots = {Container.BOARD: board, Container.BENCH: bench}
                survivor = slots[target[0]][target[1]]
                debt = list(survivor.removed_identities)
                for where, idx in casualties:
                    debt.extend(slots[where][idx].removed_identities)
                    slots[where][idx] = None

                slots[target[0]][target[1]] = UnitInstance(survivor.unit, rank + 1, debt)
                promotions.append(Promotion(key, rank + 1, target[0], target[1]))
                logger.debug("Merged %s into %d-star at %s[%d]", key, rank + 1, target[0].value, target[1])

    return board, bench, promotions


def resolve_merges(board: Slots, bench: Slots) -> tuple[Slots, Slots]:
    """Return (board, bench) with no triplet left at any mergeable rank."""
    board, bench, _ = resolve_merges_detailed(board, bench)
    return board, bench


# ---------------------------------------------------------------------------
# Speculative purchase
# ---------------------------------------------------------------------------

@dataclass
class PurchasePreview:
    """Outcome of buying virtual copies into the current containers."""
    key: str
    board: Slots
    bench: Slots
    promotions: list[Promotion] = field(default_factory=list)

    @property
    def promotes(self) -> bool:
        return any(p.key == self.key for p in self.promotions)

    def fits(self, bench_size: int = BENCH_SIZE) -> bool:
        return occupancy(self.bench) <= bench_size


def preview_purchase(
    unit: UnitDef,
    board: Slots,
    bench: Slots,
    virtual_copies: int = 1,
    bench_size: int = BENCH_SIZE,
    provenance: Optional[list[list[str]]] = None,
) -> PurchasePreview:
    """Land ``virtual_copies`` rank-1 copies and resolve merges, without mutating inputs.

    Each copy goes to the first empty bench slot, or to a virtual slot past
    the end when the bench is full. The resulting bench is packed (units to
    the front) and padded back to ``bench_size``. Leftovers are kept rather
    than truncated, so callers must check ``fits``.
    """
    board_c = copy_container(board)
    bench_c = copy_container(bench)
    for n in range(virtual_copies):
        debt = list(provenance[n]) if provenance else []
        copy_ = UnitInstance(unit, 1, debt)
        idx = first_empty(bench_c)
        if idx == -1:
            bench_c.append(copy_)
        else:
            bench_c[idx] = copy_

    board_c, bench_c, promotions = resolve_merges_detailed(board_c, bench_c)
    return PurchasePreview(unit.key, board_c, pack(bench_c, bench_size), promotions)


def simulate_purchase(
    unit: UnitDef,
    board: Slots,
    bench: Slots,
    virtual_copies: int = 1,
    bench_size: int = BENCH_SIZE,
    provenance: Optional[list[list[str]]] = None,
) -> tuple[Slots, Slots]:
    preview = preview_purchase(unit, board, bench, virtual_copies, bench_size, provenance)
    return preview.board, preview.bench
