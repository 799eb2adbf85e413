"""TFT-style shop/bench/board economy simulator — core package."""

__version__ = "0.1.0"

from .engine import EconomyEngine, Transition
from .state import EconomyState
from .shop import generate_shop
from .merge import resolve_merges, simulate_purchase
from .units import UnitInstance, sell_value
from .runner import run_session, run_batch, RandomStrategy, GreedyStrategy
from .session import SessionResult, targets_reached
