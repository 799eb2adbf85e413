"""Session runner — plays complete rolling sessions with pluggable strategies.

Provides:
- run_session(): single session with a strategy callback
- RandomStrategy: baseline random play
- GreedyStrategy: buys target units, levels toward the deck's costs, rerolls
- run_batch(): many seeds, same setup
"""

from __future__ import annotations

import logging
import random as _random
from typing import Callable, Optional, Protocol

from .actions import Action, BuyFromShop, BuyXP, PlaceFromBench, Reroll, SellUnit, ToggleLock
from .data import get_unit
from .engine import EconomyEngine
from .enums import Container, GameMode, OverlapMode
from .merge import max_rank
from .presets import DeckPreset
from .session import SessionResult, effective_targets, missing_targets, targets_reached
from .state import EconomyState

logger = logging.getLogger(__name__)

# Level a greedy player rolls at, by the highest cost it still needs
ROLL_LEVEL_BY_COST: dict[int, int] = {1: 5, 2: 6, 3: 7, 4: 8, 5: 9}


class Strategy(Protocol):
    """Protocol for session-playing strategies. Returning None gives up."""
    def choose_action(self, state: EconomyState, legal_actions: list[Action]) -> Optional[Action]:
        ...


class RandomStrategy:
    """Plays random legal actions."""

    def __init__(self, seed: int = 42):
        self._rng = _random.Random(seed)

    def choose_action(self, state: EconomyState, legal_actions: list[Action]) -> Optional[Action]:
        if not legal_actions:
            return None
        return self._rng.choice(legal_actions)


class GreedyStrategy:
    """Greedy roller: buy every missing target, never buy anything else.

    Fields target units to keep the bench open, sells surplus copies of
    finished targets, levels up to where the needed costs show up, then
    rerolls until done or broke.
    """

    def choose_action(self, state: EconomyState, legal_actions: list[Action]) -> Optional[Action]:
        targets = effective_targets(state)
        missing = missing_targets(state)
        legal = set(legal_actions)

        # Buy anything still needed
        for action in legal_actions:
            if isinstance(action, BuyFromShop) and state.shop[action.slot].key in missing:
                return action

        # Make room on the bench
        if state.bench_full:
            for i, u in enumerate(state.bench):
                if u is not None and u.key in targets and PlaceFromBench(i) in legal:
                    return PlaceFromBench(i)
            for i, u in enumerate(state.bench):
                if u is None:
                    continue
                done = u.key not in missing and max_rank(u.key, state.board, state.bench) > u.rank
                if u.key not in targets or done:
                    return SellUnit(Container.BENCH, i)

        # Level toward the most expensive unit still missing
        if missing:
            top_cost = max(get_unit(key).cost for key in missing)
            if state.level < ROLL_LEVEL_BY_COST.get(top_cost, 7) and BuyXP() in legal:
                return BuyXP()

        if Reroll() in legal:
            return Reroll()
        if state.locked:
            return ToggleLock()
        return None


def run_session(
    seed: str,
    strategy: Strategy,
    preset: Optional[DeckPreset] = None,
    targets: Optional[dict[str, int]] = None,
    mode: GameMode = GameMode.TIME_ATTACK,
    overlap_mode: OverlapMode = OverlapMode.NONE,
    max_steps: int = 2000,
    validate: bool = False,
    on_step: Optional[Callable[[EconomyState, Action, int], None]] = None,
) -> SessionResult:
    """Run one session until the targets are reached or the strategy gives up.

    Args:
        seed: Session seed for deterministic shops.
        strategy: Strategy that picks actions.
        preset: Deck preset providing targets and the deck name.
        targets: Explicit {unit key: rank} targets when no preset is given.
        mode: Standard gold balance or unlimited-gold time attack.
        overlap_mode: Pool contention from simulated opponents.
        max_steps: Safety limit to prevent infinite loops.
        validate: Check pool and capacity invariants after every step.
        on_step: Optional callback(state, action, step_num) for logging.

    Returns:
        SessionResult with final stats.
    """
    engine = EconomyEngine(validate=validate)
    state = engine.new_session(
        seed, preset=preset, targets=targets, mode=mode, overlap_mode=overlap_mode,
    )
    logger.info("Session %s started: deck=%s mode=%s overlap=%s",
                seed, state.deck_name or "(custom)", state.mode.value, state.overlap_mode.value)

    steps = 0
    while not targets_reached(state) and steps < max_steps:
        actions = engine.get_legal_actions(state)
        action = strategy.choose_action(state, actions)
        if action is None:
            break

        if on_step:
            on_step(state, action, steps)

        transition = engine.apply(state, action)
        steps += 1
        if not transition.accepted:
            logger.warning("Strategy chose a rejected action %s (%s)", action, transition.reason.value)
            break
        state = transition.state

    result = SessionResult.from_state(state, total_steps=steps, strategy=type(strategy).__name__)
    logger.info("Session %s finished: completed=%s steps=%d spent=%d rerolls=%d",
                seed, result.completed, steps, result.net_spent, result.reroll_count)
    return result


def run_batch(
    seeds: list[str],
    strategy: Strategy,
    preset: Optional[DeckPreset] = None,
    targets: Optional[dict[str, int]] = None,
    mode: GameMode = GameMode.TIME_ATTACK,
    overlap_mode: OverlapMode = OverlapMode.NONE,
    max_steps: int = 2000,
    validate: bool = False,
) -> list[SessionResult]:
    """Run multiple sessions and return results."""
    return [
        run_session(seed, strategy, preset, targets, mode, overlap_mode, max_steps, validate)
        for seed in seeds
    ]
