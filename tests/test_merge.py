"""Tests for merge resolution and speculative purchases."""

import random

import pytest

from reroll_sim.data import BENCH_SIZE, BOARD_SLOTS, ROSTER, get_unit
from reroll_sim.enums import Container
from reroll_sim.merge import (
    Promotion, count_by_rank, has_triplet, max_rank, preview_purchase,
    resolve_merges, resolve_merges_detailed, simulate_purchase,
)
from reroll_sim.units import empty_container, occupancy


@pytest.fixture
def board():
    return empty_container(BOARD_SLOTS)


@pytest.fixture
def bench():
    return empty_container(BENCH_SIZE)


def _distinct_bench(make_unit, exclude=()):
    keys = [u.key for u in ROSTER if u.key not in exclude][:BENCH_SIZE]
    return [make_unit(k) for k in keys]


class TestResolveMerges:
    def test_garen_two_bench_one_board(self, board, bench, make_unit):
        bench[0] = make_unit("Garen")
        bench[1] = make_unit("Garen")
        board[3] = make_unit("Garen")

        new_board, new_bench = resolve_merges(board, bench)

        assert new_board[3].key == "Garen"
        assert new_board[3].rank == 2
        assert new_bench[0] is None
        assert new_bench[1] is None

    def test_inputs_not_mutated(self, board, bench, make_unit):
        bench[0] = make_unit("Garen")
        bench[1] = make_unit("Garen")
        bench[2] = make_unit("Garen")
        resolve_merges(board, bench)
        assert [u.rank for u in bench[:3]] == [1, 1, 1]

    def test_survivor_is_lowest_bench_when_none_on_board(self, board, bench, make_unit):
        bench[2] = make_unit("Rell")
        bench[5] = make_unit("Rell")
        bench[7] = make_unit("Rell")
        _, new_bench = resolve_merges(board, bench)
        assert new_bench[2].rank == 2
        assert new_bench[5] is None and new_bench[7] is None

    def test_survivor_is_lowest_board_slot(self, board, bench, make_unit):
        board[6] = make_unit("Rell")
        board[1] = make_unit("Rell")
        bench[4] = make_unit("Rell")
        new_board, new_bench = resolve_merges(board, bench)
        assert new_board[1].rank == 2
        # bench casualty taken before the other board copy
        assert new_bench[4] is None
        assert new_board[6] is None

    def test_casualties_prefer_bench_then_board(self, board, bench, make_unit):
        board[0] = make_unit("Zac")
        board[1] = make_unit("Zac")
        board[2] = make_unit("Zac")
        bench[9] = make_unit("Zac")
        new_board, new_bench = resolve_merges(board, bench)
        assert new_board[0].rank == 2
        assert new_bench[9] is None
        assert new_board[1] is None
        assert new_board[2].rank == 1

    def test_cascade_to_three_stars(self, board, bench, make_unit):
        board[0] = make_unit("Garen", 2)
        bench[0] = make_unit("Garen", 2)
        bench[1] = make_unit("Garen")
        bench[2] = make_unit("Garen")
        bench[3] = make_unit("Garen")

        new_board, new_bench, promotions = resolve_merges_detailed(board, bench)

        assert new_board[0].rank == 3
        assert occupancy(new_bench) == 0
        assert promotions == [
            Promotion("Garen", 2, Container.BENCH, 1),
            Promotion("Garen", 3, Container.BOARD, 0),
        ]

    def test_provenance_accumulates_through_cascade(self, board, bench, make_unit):
        board[0] = make_unit("Garen", 2, debt=["Garen"] * 3)
        bench[0] = make_unit("Garen", 2, debt=["Garen"] * 3 + ["Rell"])
        bench[1] = make_unit("Garen", debt=["Garen", "Sivir"])
        bench[2] = make_unit("Garen")
        bench[3] = make_unit("Garen")
        new_board, _ = resolve_merges(board, bench)
        debt = new_board[0].removed_identities
        assert sorted(debt) == sorted(["Garen"] * 9 + ["Rell", "Sivir"])

    def test_three_stars_never_merge(self, board, bench, make_unit):
        for i in range(3):
            bench[i] = make_unit("Rell", 3, debt=[])
        _, new_bench = resolve_merges(board, bench)
        assert [u.rank for u in new_bench[:3]] == [3, 3, 3]

    def test_closure_and_determinism_on_random_layouts(self, make_unit):
        keys = ["Garen", "Rell", "Zac", "Kobuko"]
        rnd = random.Random(7)
        for _ in range(50):
            board = empty_container(BOARD_SLOTS)
            bench = empty_container(BENCH_SIZE)
            for slots in (board, bench):
                for i in rnd.sample(range(len(slots)), k=min(len(slots), 9)):
                    slots[i] = make_unit(rnd.choice(keys), rnd.choice([1, 1, 1, 2]))

            first = resolve_merges(board, bench)
            second = resolve_merges(board, bench)

            assert not has_triplet(*first)
            for key in keys:
                counts = count_by_rank(key, *first)
                assert counts[1] < 3 and counts[2] < 3
            assert [repr(u) for u in first[0]] == [repr(u) for u in second[0]]
            assert [repr(u) for u in first[1]] == [repr(u) for u in second[1]]


class TestQueries:
    def test_max_rank_none_held(self, board, bench):
        assert max_rank("Garen", board, bench) == 0

    def test_count_by_rank(self, board, bench, make_unit):
        board[0] = make_unit("Garen", 2)
        bench[0] = make_unit("Garen")
        assert count_by_rank("Garen", board, bench) == {1: 1, 2: 1, 3: 0}
        assert max_rank("Garen", board, bench) == 2


class TestSpeculativePurchase:
    def test_full_bench_merges_with_board_pair(self, board, make_unit):
        bench = _distinct_bench(make_unit, exclude=("Garen",))
        board[0] = make_unit("Garen")
        board[1] = make_unit("Garen")

        preview = preview_purchase(get_unit("Garen"), board, bench)

        assert preview.promotes
        assert preview.fits()
        assert preview.board[0].rank == 2
        assert preview.board[1] is None
        assert [u.key for u in preview.bench] == [u.key for u in bench]

    def test_full_bench_without_merge_does_not_fit(self, board, make_unit):
        bench = _distinct_bench(make_unit, exclude=("Garen",))
        preview = preview_purchase(get_unit("Garen"), board, bench)
        assert not preview.promotes
        assert not preview.fits()
        assert len(preview.bench) == BENCH_SIZE + 1

    def test_double_copy_merge(self, board, make_unit):
        bench = _distinct_bench(make_unit, exclude=("Garen",))
        board[4] = make_unit("Garen")
        single = preview_purchase(get_unit("Garen"), board, bench, 1)
        double = preview_purchase(get_unit("Garen"), board, bench, 2)
        assert not single.promotes
        assert double.promotes and double.fits()
        assert double.board[4].rank == 2

    def test_bench_is_repacked(self, board, bench, make_unit):
        bench[0] = make_unit("Rell")
        bench[3] = make_unit("Garen")
        bench[6] = make_unit("Garen")
        new_board, new_bench = simulate_purchase(get_unit("Garen"), board, bench)
        assert [u.key if u else None for u in new_bench[:3]] == ["Rell", "Garen", None]
        assert new_bench[1].rank == 2
        assert len(new_bench) == BENCH_SIZE

    def test_virtual_copies_carry_provenance(self, board, bench, make_unit):
        bench[0] = make_unit("Garen")
        bench[1] = make_unit("Garen")
        _, new_bench = simulate_purchase(get_unit("Garen"), board, bench, provenance=[["Garen", "Rell"]])
        assert sorted(new_bench[0].removed_identities) == ["Garen", "Garen", "Garen", "Rell"]
