"""Tests for pool-aware shop generation."""

from collections import Counter

import pytest

from reroll_sim.data import BENCH_SIZE, BOARD_SLOTS, SHOP_SIZE, UNITS_BY_COST
from reroll_sim.pool import UnitPool
from reroll_sim.rng import RNGState
from reroll_sim.shop import (
    generate_shop, is_legal_offer, pick_weighted_unit, roll_cost_tier,
    shop_candidates, three_star_keys,
)
from reroll_sim.units import empty_container


@pytest.fixture
def containers():
    return empty_container(BOARD_SLOTS), empty_container(BENCH_SIZE)


class TestCostTier:
    def test_level_one_only_rolls_one_costs(self):
        rng = RNGState("t")
        assert {roll_cost_tier(1, rng) for _ in range(100)} == {1}

    def test_level_three_never_rolls_three_plus(self):
        rng = RNGState("t")
        assert {roll_cost_tier(3, rng) for _ in range(300)} == {1, 2}

    def test_level_ten_rolls_five_costs(self):
        rng = RNGState("t")
        assert 5 in {roll_cost_tier(10, rng) for _ in range(300)}


class TestCandidates:
    def test_excludes_exhausted_and_three_starred(self):
        pool = UnitPool.from_catalog()
        pool.consume("Rell", 30)
        keys = [u.key for u in shop_candidates(1, pool, {"Garen"})]
        assert "Rell" not in keys
        assert "Garen" not in keys
        assert keys[0] == "Syndra"

    def test_weighted_pick_favours_remaining_copies(self):
        pool = UnitPool.from_catalog()
        candidates = [u for u in UNITS_BY_COST[1] if u.key in ("Garen", "Rell")]
        pool.consume("Rell", 29)
        rng = RNGState("w")
        picks = Counter(pick_weighted_unit(candidates, pool, rng).key for _ in range(500))
        assert picks["Garen"] > picks["Rell"] * 5

    def test_three_star_keys(self, containers, make_unit):
        board, bench = containers
        board[0] = make_unit("Garen", 3)
        bench[0] = make_unit("Rell", 2)
        assert three_star_keys(board, bench) == {"Garen"}


class TestGenerateShop:
    def test_row_size_and_rank(self, containers):
        board, bench = containers
        shop = generate_shop(5, board, bench, UnitPool.from_catalog(), RNGState("s"))
        assert len(shop) == SHOP_SIZE
        assert all(o is not None and o.rank == 1 and o.removed_identities == [] for o in shop)

    def test_seeded_shops_are_deterministic(self, containers):
        board, bench = containers
        a = generate_shop(7, board, bench, UnitPool.from_catalog(), RNGState("same"))
        b = generate_shop(7, board, bench, UnitPool.from_catalog(), RNGState("same"))
        assert [o.key for o in a] == [o.key for o in b]

    def test_does_not_touch_pool(self, containers):
        board, bench = containers
        pool = UnitPool.from_catalog()
        generate_shop(8, board, bench, pool, RNGState("p"))
        assert pool == UnitPool.from_catalog()

    def test_empty_tier_gives_empty_slot(self, containers):
        board, bench = containers
        pool = UnitPool.from_catalog()
        for u in UNITS_BY_COST[1]:
            pool.consume(u.key, pool.remaining(u.key))
        # level 1 only rolls cost 1, which is sold out
        assert generate_shop(1, board, bench, pool, RNGState("e")) == [None] * SHOP_SIZE

    def test_every_offer_is_legal(self, containers, make_unit):
        board, bench = containers
        pool = UnitPool.from_catalog()
        board[0] = make_unit("Garen", 3)
        pool.consume("Garen", 9)
        pool.consume("Rell", 30)
        rng = RNGState("legal")
        for _ in range(100):
            shop = generate_shop(2, board, bench, pool, rng)
            assert all(is_legal_offer(o, board, bench, pool) for o in shop)
            assert not any(o is not None and o.key in ("Garen", "Rell") for o in shop)
