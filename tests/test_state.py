"""Tests for EconomyState copying and the persisted record."""

import json

import pytest

from reroll_sim.data import BENCH_SIZE, BOARD_SLOTS, SHOP_SIZE, START_GOLD, START_LEVEL
from reroll_sim.enums import GameMode, OverlapMode
from reroll_sim.state import EconomyState


class TestConstruction:
    def test_defaults(self):
        s = EconomyState(seed="d")
        assert s.gold == START_GOLD
        assert s.level == START_LEVEL
        assert (len(s.board), len(s.bench), len(s.shop)) == (BOARD_SLOTS, BENCH_SIZE, SHOP_SIZE)
        assert s.rng is not None

    def test_enum_values_normalized(self):
        s = EconomyState(mode="time_attack", overlap_mode="with")
        assert s.mode is GameMode.TIME_ATTACK
        assert s.overlap_mode is OverlapMode.WITH
        assert s.unlimited_gold

    def test_wanted_from_targets(self):
        s = EconomyState(targets={"Garen": 3, "Rell": 2})
        assert s.wanted == ["Garen", "Rell"]

    def test_targets_default_to_two_stars(self):
        s = EconomyState(wanted=["Garen", "Rell"])
        assert s.targets == {"Garen": 2, "Rell": 2}

    def test_short_containers_padded(self):
        s = EconomyState(bench=[None, None])
        assert len(s.bench) == BENCH_SIZE

    def test_padding_leaves_caller_list_alone(self):
        bench = [None, None]
        s = EconomyState(bench=bench)
        assert bench == [None, None]
        assert s.bench is not bench

    def test_overlong_container_rejected(self):
        with pytest.raises(ValueError):
            EconomyState(shop=[None] * (SHOP_SIZE + 1))


class TestCopy:
    def test_copy_is_independent(self, empty_state, place):
        place(empty_state, "bench", 0, "Garen")
        clone = empty_state.copy()

        clone.bench[0].removed_identities.append("Rell")
        clone.board[0] = clone.bench[0]
        clone.pool.consume("Rell", 1)
        clone.rng.random("shop_unit")
        clone.targets["Garen"] = 3

        assert empty_state.bench[0].removed_identities == ["Garen"]
        assert empty_state.board[0] is None
        assert empty_state.pool.remaining("Rell") == 30
        assert empty_state.targets == {}
        assert clone.rng.get_state_dict() != empty_state.rng.get_state_dict()


class TestSerialization:
    def test_record_layout(self, empty_state, place):
        place(empty_state, "board", 2, "Garen", rank=2)
        empty_state.reroll_count = 4
        d = empty_state.to_dict()

        assert len(d["board"]) == BOARD_SLOTS
        assert len(d["bench"]) == BENCH_SIZE
        assert len(d["shop"]) == SHOP_SIZE
        assert d["board"][0] is None
        assert d["board"][2]["key"] == "Garen"
        assert d["board"][2]["star"] == 2
        assert d["board"][2]["removedUnits"] == ["Garen"] * 3
        assert d["rerollCount"] == 4
        assert d["pool"]["Garen"] == 27
        assert d["mode"] == "standard"
        assert d["overlapMode"] == "none"

    def test_record_is_json_and_restores(self, engine):
        s = engine.new_session("persist", targets={"Garen": 2}, overlap_mode=OverlapMode.WITH)
        restored = EconomyState.from_dict(json.loads(json.dumps(s.to_dict())))
        assert restored.to_dict() == s.to_dict()

    def test_restored_rng_continues_the_sequence(self, engine):
        from reroll_sim.actions import Reroll

        s = engine.new_session("cont")
        restored = EconomyState.from_dict(json.loads(json.dumps(s.to_dict())))
        a, b = engine.step(s, Reroll()), engine.step(restored, Reroll())
        assert [o.key for o in a.shop if o] == [o.key for o in b.shop if o]

    def test_missing_fields_take_defaults(self):
        s = EconomyState.from_dict({"gold": 12})
        assert s.gold == 12
        assert s.level == START_LEVEL
        assert s.mode is GameMode.STANDARD
        assert s.overlap_mode is OverlapMode.NONE
        assert s.pool.remaining("Garen") == 30
        assert len(s.board) == BOARD_SLOTS

    def test_overlong_persisted_bench_rejected(self, make_unit):
        record = {"bench": [make_unit("Garen").to_dict()] * (BENCH_SIZE + 2)}
        with pytest.raises(ValueError):
            EconomyState.from_dict(record)

    def test_non_dict_rejected(self):
        with pytest.raises(ValueError):
            EconomyState.from_dict(["not", "a", "state"])
