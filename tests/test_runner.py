"""Tests for the session runner and bundled strategies."""

from unittest.mock import patch

import pytest

from reroll_sim.actions import BuyFromShop, BuyXP, Reroll, SellUnit, ToggleLock
from reroll_sim.enums import Container, GameMode, OverlapMode
from reroll_sim.presets import get_preset
from reroll_sim.runner import GreedyStrategy, RandomStrategy, run_batch, run_session
from reroll_sim.session import CUSTOM_DECK
from reroll_sim.state import EconomyState

CHEAP_TARGETS = {"Garen": 2, "Rell": 2}


class TestGreedyStrategy:
    def test_buys_missing_target(self, engine, offer):
        s = EconomyState(seed="g", targets=CHEAP_TARGETS)
        offer(s, 3, "Garen")
        action = GreedyStrategy().choose_action(s, engine.get_legal_actions(s))
        assert action == BuyFromShop(3)

    def test_ignores_other_offers(self, engine, offer):
        s = EconomyState(seed="g", targets=CHEAP_TARGETS, level=5)
        offer(s, 0, "Sivir")
        action = GreedyStrategy().choose_action(s, engine.get_legal_actions(s))
        assert action == Reroll()

    def test_levels_toward_needed_cost(self, engine):
        s = EconomyState(seed="g", targets={"Braum": 2})
        action = GreedyStrategy().choose_action(s, engine.get_legal_actions(s))
        assert action == BuyXP()

    def test_sells_non_target_when_bench_full(self, engine, place):
        s = EconomyState(seed="g", targets={"Braum": 2}, level=1)
        place(s, "board", 0, "Rell")
        for i, key in enumerate(["Garen", "Sivir", "Kennen", "Aatrox", "Ezreal",
                                 "Kayle", "Naafiri", "Malphite", "Syndra", "Gnar"]):
            place(s, "bench", i, key)
        action = GreedyStrategy().choose_action(s, engine.get_legal_actions(s))
        assert action == SellUnit(Container.BENCH, 0)

    def test_unlocks_when_stuck(self, engine):
        s = EconomyState(seed="g", targets=CHEAP_TARGETS, level=5, locked=True)
        action = GreedyStrategy().choose_action(s, engine.get_legal_actions(s))
        assert action == ToggleLock()

    def test_gives_up_when_broke(self, engine):
        s = EconomyState(seed="g", targets=CHEAP_TARGETS, level=5, gold=1)
        assert GreedyStrategy().choose_action(s, engine.get_legal_actions(s)) is None


class TestRunSession:
    def test_greedy_completes_cheap_targets(self):
        result = run_session("seed-1", GreedyStrategy(), targets=CHEAP_TARGETS, validate=True)
        assert result.completed
        assert result.deck == CUSTOM_DECK
        assert result.strategy == "GreedyStrategy"
        assert result.spent > 0

    def test_sessions_are_deterministic(self):
        a = run_session("same", GreedyStrategy(), targets=CHEAP_TARGETS)
        b = run_session("same", GreedyStrategy(), targets=CHEAP_TARGETS)
        assert a == b

    def test_standard_mode_stops_when_broke(self):
        result = run_session("poor", GreedyStrategy(), preset=get_preset("6 Duelist Udyr"),
                             mode=GameMode.STANDARD)
        assert result.completed or result.final_gold < 2
        assert result.deck == "6 Duelist Udyr"

    def test_random_strategy_respects_step_limit(self):
        result = run_session("rnd", RandomStrategy(seed=1), targets=CHEAP_TARGETS,
                             overlap_mode=OverlapMode.WITH, max_steps=150, validate=True)
        assert result.total_steps <= 150
        assert result.overlap_mode == "with"

    def test_on_step_callback(self):
        seen = []
        result = run_session("cb", GreedyStrategy(), targets=CHEAP_TARGETS, max_steps=20,
                             on_step=lambda state, action, n: seen.append(n))
        assert seen == list(range(result.total_steps))

    def test_no_targets_runs_to_limit(self):
        result = run_session("none", GreedyStrategy(), targets={}, max_steps=10)
        assert not result.completed
        assert result.total_steps == 10


class TestRunBatch:
    @pytest.mark.parametrize("n", [1, 3])
    def test_one_result_per_seed(self, n):
        seeds = [f"b{i}" for i in range(n)]
        results = run_batch(seeds, GreedyStrategy(), targets=CHEAP_TARGETS, max_steps=300)
        assert [r.seed for r in results] == seeds

    def test_validate_passed_to_each_session(self):
        with patch("reroll_sim.runner.run_session") as run:
            run_batch(["v0", "v1"], GreedyStrategy(), targets=CHEAP_TARGETS, validate=True)
        assert run.call_count == 2
        assert all(call.args[7] is True for call in run.call_args_list)

    def test_validated_batch_runs(self):
        results = run_batch(["v0"], GreedyStrategy(), targets=CHEAP_TARGETS, max_steps=100, validate=True)
        assert results[0].total_steps <= 100
