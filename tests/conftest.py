"""Shared pytest fixtures."""

import pytest

from reroll_sim.data import get_unit
from reroll_sim.engine import EconomyEngine
from reroll_sim.enums import COPY_WEIGHT, GameMode
from reroll_sim.rng import RNGState
from reroll_sim.state import EconomyState
from reroll_sim.units import UnitInstance


@pytest.fixture
def make_unit():
    """Factory for owned instances whose pool debt matches their rank."""
    def _make(key, rank=1, debt=None):
        if debt is None:
            debt = [key] * COPY_WEIGHT[rank]
        return UnitInstance(get_unit(key), rank, list(debt))
    return _make


@pytest.fixture
def engine():
    """Engine that checks pool and capacity invariants after every step."""
    return EconomyEngine(validate=True)


@pytest.fixture
def empty_state():
    """Standard-mode state with an empty shop, full pool and 100 gold."""
    return EconomyState(seed="test", rng=RNGState("test"), gold=100, level=3)


@pytest.fixture
def place(make_unit):
    """Put units into a state's containers and take their copies from its pool."""
    def _place(state, container, index, key, rank=1):
        unit = make_unit(key, rank)
        state.pool.consume(key, unit.copy_weight)
        getattr(state, container)[index] = unit
        return unit
    return _place


@pytest.fixture
def offer():
    """Put a rank-1 offer of ``key`` into a shop slot."""
    def _offer(state, slot, key):
        state.shop[slot] = UnitInstance(get_unit(key))
    return _offer


@pytest.fixture
def time_attack_state():
    return EconomyState(seed="ta", mode=GameMode.TIME_ATTACK, gold=0, level=3)
