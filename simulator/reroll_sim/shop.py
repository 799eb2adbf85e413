"""Shop generation — pool-aware, level-weighted offers.

Per slot, independently:
- draw a cost tier from the level's odds (cumulative weights)
- candidates = units of that tier not already held at 3 stars with copies left
- empty candidate set leaves the slot empty (no retry on another tier)
- otherwise pick a candidate weighted by its remaining copies
"""

from __future__ import annotations

from typing import Optional

from .data import COST_TIERS, SHOP_SIZE, UNITS_BY_COST, UnitDef, odds_for_level
from .enums import MAX_RANK
from .pool import UnitPool
from .rng import RNGState
from .units import Slots, UnitInstance, iter_units

ShopRow = list[Optional[UnitInstance]]


def three_star_keys(board: Slots, bench: Slots) -> set[str]:
    """Keys the player already holds at max rank."""
    return {u.key for u in iter_units(board, bench) if u.rank >= MAX_RANK}


def roll_cost_tier(level: int, rng: RNGState) -> int:
    odds = odds_for_level(level)
    return COST_TIERS[rng.weighted_index("shop_tier", odds)]


def shop_candidates(cost: int, pool: UnitPool, completed: set[str]) -> list[UnitDef]:
    """Units of ``cost`` that may be offered, in catalog order."""
    return [
        u for u in UNITS_BY_COST.get(cost, [])
        if u.key not in completed and pool.remaining(u.key) > 0
    ]


def pick_weighted_unit(candidates: list[UnitDef], pool: UnitPool, rng: RNGState) -> UnitDef:
    """Choose a candidate with probability proportional to its remaining copies."""
    weights = [pool.remaining(u.key) for u in candidates]
    return candidates[rng.weighted_index("shop_unit", weights)]


def generate_shop(
    level: int,
    board: Slots,
    bench: Slots,
    pool: UnitPool,
    rng: RNGState,
    size: int = SHOP_SIZE,
) -> ShopRow:
    """Roll a fresh shop row. Only ``rng`` is advanced; nothing else changes.

    Offers do not reserve copies; the pool is only drawn on purchase.
    """
    completed = three_star_keys(board, bench)
    row: ShopRow = []
    for _ in range(size):
        cost = roll_cost_tier(level, rng)
        candidates = shop_candidates(cost, pool, completed)
        if not candidates:
            row.append(None)
            continue
        row.append(UnitInstance(pick_weighted_unit(candidates, pool, rng)))
    return row


def is_legal_offer(offer: Optional[UnitInstance], board: Slots, bench: Slots, pool: UnitPool) -> bool:
    """An empty slot or a rank-1 unit with copies left that is not already 3-starred."""
    if offer is None:
        return True
    return (
        offer.rank == 1
        and pool.remaining(offer.key) > 0
        and offer.key not in three_star_keys(board, bench)
    )
