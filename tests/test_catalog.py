"""Tests for the static catalog and deck presets."""

import pytest

from reroll_sim.data import (
    PER_UNIT_POOL, ROSTER, SHOP_ODDS, UNIT_BY_KEY, UNITS_BY_COST, XP_REQ,
    get_unit, odds_for_level, pool_ceiling, xp_required,
)
from reroll_sim.presets import PRESETS, get_preset, validate_presets


class TestRoster:
    def test_roster_size_per_tier(self):
        sizes = {cost: len(units) for cost, units in UNITS_BY_COST.items()}
        assert sizes == {1: 14, 2: 13, 3: 13, 4: 13, 5: 8}

    def test_keys_are_unique(self):
        assert len(UNIT_BY_KEY) == len(ROSTER) == 61

    def test_every_unit_has_traits(self):
        assert all(u.traits for u in ROSTER)

    def test_get_unit_unknown_key_raises(self):
        with pytest.raises(KeyError):
            get_unit("Teemo")

    def test_catalog_order_preserved(self):
        assert [u.key for u in UNITS_BY_COST[5]][:3] == ["Zyra", "TwistedFate", "Braum"]


class TestTables:
    def test_odds_rows_sum_to_100(self):
        for level, row in SHOP_ODDS.items():
            assert sum(row) == 100, level

    def test_unknown_level_uses_level_3_odds(self):
        assert odds_for_level(0) == SHOP_ODDS[3]
        assert odds_for_level(42) == SHOP_ODDS[3]

    def test_level_10_is_terminal(self):
        assert xp_required(10) == 0
        assert all(XP_REQ[level] > 0 for level in range(1, 10))

    def test_pool_ceilings(self):
        assert [pool_ceiling(c) for c in range(1, 6)] == [30, 25, 18, 10, 9]
        assert pool_ceiling(7) == 0
        assert PER_UNIT_POOL[1] == 30


class TestPresets:
    def test_fifteen_presets(self):
        assert len(PRESETS) == 15

    def test_all_members_exist(self):
        assert validate_presets() == []

    def test_targets_default_to_two_stars(self):
        targets = get_preset("Star Guardian Jinx").targets()
        assert set(targets.values()) == {2}
        assert "Jinx" in targets

    def test_three_star_members(self):
        targets = get_preset("Crew Sniper Jhin").targets()
        assert targets["Jhin"] == 3
        assert targets["Gnar"] == 3
        assert targets["Jinx"] == 2

    def test_unknown_preset_raises(self):
        with pytest.raises(KeyError):
            get_preset("Nope")
