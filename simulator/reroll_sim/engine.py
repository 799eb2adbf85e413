"""Economy engine — state machine that drives a rolling session.

Accepts Actions, validates them, and returns new EconomyState.
Immutable: apply() and step() return a new state, never modify the input.
An intent that fails validation is a rejection, not an error: the original
state comes back untouched together with the reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .actions import (
    Action, Reroll, BuyXP, BuyFromShop, SellUnit, PlaceFromBench,
    ReturnToBench, MoveUnit, ToggleLock, AddGold, NudgeLevel,
)
from .data import (
    BENCH_SIZE, MAX_GOLD, MAX_LEVEL, MIN_LEVEL, REROLL_COST, START_GOLD,
    START_LEVEL, XP_COST, XP_PER_BUY, xp_required,
)
from .enums import Container, GameMode, OverlapMode, Rejection
from .merge import Promotion, preview_purchase, resolve_merges_detailed
from .pool import PoolInvariantError
from .presets import DeckPreset
from .shop import generate_shop, is_legal_offer, three_star_keys
from .state import EconomyState
from .units import Slots, UnitInstance, first_empty, sell_value

logger = logging.getLogger(__name__)


@dataclass
class Transition:
    """Result of applying one intent."""
    state: EconomyState
    accepted: bool = True
    reason: Optional[Rejection] = None
    promotions: list[Promotion] = field(default_factory=list)


def check_invariants(state: EconomyState) -> None:
    """Raise PoolInvariantError if the state breaks pool or capacity rules."""
    state.pool.check_conservation(state.board, state.bench)
    if state.board_count > state.level:
        raise PoolInvariantError(f"Board holds {state.board_count} units at level {state.level}")
    if len(state.bench) != BENCH_SIZE:
        raise PoolInvariantError(f"Bench has {len(state.bench)} slots")


class EconomyEngine:
    """Drives the shop/bench/board economy.

    With ``validate=True`` every accepted transition is checked against the
    pool and capacity invariants (slow, meant for tests and benchmarks).
    """

    def __init__(self, validate: bool = False):
        self.validate = validate

    # --- Session Creation ---

    def new_session(
        self,
        seed: str = "0",
        preset: Optional[DeckPreset] = None,
        targets: Optional[dict[str, int]] = None,
        mode: GameMode = GameMode.STANDARD,
        overlap_mode: OverlapMode = OverlapMode.NONE,
        gold: int = START_GOLD,
        level: int = START_LEVEL,
        refresh_shop_on_level_up: bool = False,
    ) -> EconomyState:
        """Create a fresh session with a full pool and a rolled shop."""
        deck_name = ""
        if preset is not None:
            targets = preset.targets()
            deck_name = preset.name
        state = EconomyState(
            seed=str(seed),
            deck_name=deck_name,
            mode=mode,
            overlap_mode=overlap_mode,
            gold=gold,
            level=level,
            targets=dict(targets or {}),
            refresh_shop_on_level_up=refresh_shop_on_level_up,
        )
        state.shop = self._roll_shop(state)
        return state

    # --- Core Interface ---

    def apply(self, state: EconomyState, action: Action) -> Transition:
        """Execute an action. Never modifies ``state``."""
        if isinstance(action, Reroll):
            result = self.reroll(state)
        elif isinstance(action, BuyXP):
            result = self.buy_xp(state)
        elif isinstance(action, BuyFromShop):
            result = self.buy_from_shop(state, action.slot)
        elif isinstance(action, SellUnit):
            result = self.sell_unit(state, action.container, action.index)
        elif isinstance(action, PlaceFromBench):
            result = self.place_from_bench(state, action.index)
        elif isinstance(action, ReturnToBench):
            result = self.return_to_bench(state, action.index)
        elif isinstance(action, MoveUnit):
            result = self.move_unit(state, action.src, action.src_index, action.dst, action.dst_index)
        elif isinstance(action, ToggleLock):
            result = self.toggle_lock(state)
        elif isinstance(action, AddGold):
            result = self.add_gold(state, action.amount)
        elif isinstance(action, NudgeLevel):
            result = self.nudge_level(state, action.delta)
        else:
            raise ValueError(f"Unknown action: {type(action).__name__}")

        if not result.accepted:
            logger.debug("Rejected %s: %s", action, result.reason.value)
        elif self.validate:
            check_invariants(result.state)
        return result

    def step(self, state: EconomyState, action: Action) -> EconomyState:
        """Execute an action and return the resulting state (the input on rejection)."""
        return self.apply(state, action).state

    def get_legal_actions(self, state: EconomyState) -> list[Action]:
        """Every purchase, sale, placement and shop action that would be accepted.

        Drag-and-drop moves and practice cheats are left out.
        """
        actions: list[Action] = []
        if self.reroll(state).accepted:
            actions.append(Reroll())
        if self.buy_xp(state).accepted:
            actions.append(BuyXP())
        for i, offer in enumerate(state.shop):
            if offer is not None and self.buy_from_shop(state, i).accepted:
                actions.append(BuyFromShop(i))
        for i, u in enumerate(state.bench):
            if u is not None:
                actions.append(SellUnit(Container.BENCH, i))
        for i, u in enumerate(state.board):
            if u is not None:
                actions.append(SellUnit(Container.BOARD, i))
        if not state.board_full:
            actions.extend(PlaceFromBench(i) for i, u in enumerate(state.bench) if u is not None)
        if not state.bench_full:
            actions.extend(ReturnToBench(i) for i, u in enumerate(state.board) if u is not None)
        actions.append(ToggleLock())
        return actions

    # --- Shop ---

    def reroll(self, state: EconomyState) -> Transition:
        if state.locked:
            return self._reject(state, Rejection.LOCKED)
        if not state.can_afford(REROLL_COST):
            return self._reject(state, Rejection.INSUFFICIENT_GOLD)

        s = state.copy()
        self._charge(s, REROLL_COST)
        s.reroll_count += 1
        s.shop = self._roll_shop(s)
        return Transition(s)

    def toggle_lock(self, state: EconomyState) -> Transition:
        s = state.copy()
        s.locked = not s.locked
        return Transition(s)

    def buy_from_shop(self, state: EconomyState, slot: int) -> Transition:
        """Buy the offer in ``slot``.

        With bench space the copy lands in the first empty bench slot. With a
        full bench the purchase only goes through if it merges: first a single
        copy is tried, then a pair together with a second offer of the same
        unit. Both copies are charged and both slots cleared in that case.
        """
        if not 0 <= slot < len(state.shop):
            return self._reject(state, Rejection.INVALID_SLOT)
        offer = state.shop[slot]
        if offer is None:
            return self._reject(state, Rejection.EMPTY_SLOT)
        if not state.can_afford(offer.cost):
            return self._reject(state, Rejection.INSUFFICIENT_GOLD)
        if state.pool.remaining(offer.key) < 1:
            return self._reject(state, Rejection.POOL_EXHAUSTED)
        if offer.key in three_star_keys(state.board, state.bench):
            return self._reject(state, Rejection.COMPLETED)

        if not state.bench_full:
            s = state.copy()
            debt = self._take_from_pool(s, offer.key, 1)
            s.bench[first_empty(s.bench)] = UnitInstance(offer.unit, 1, debt[0])
            s.board, s.bench, promotions = resolve_merges_detailed(s.board, s.bench)
            s.shop[slot] = None
            self._charge(s, offer.cost)
            return Transition(s, promotions=promotions)

        # Full bench: decide on a throwaway preview before touching pool or RNG
        slots = [slot]
        single = preview_purchase(offer.unit, state.board, state.bench, 1)
        if not (single.promotes and single.fits()):
            other = next(
                (i for i, o in enumerate(state.shop)
                 if i != slot and o is not None and o.key == offer.key),
                None,
            )
            if other is None:
                return self._reject(state, Rejection.NO_MERGE)
            if not state.can_afford(2 * offer.cost):
                return self._reject(state, Rejection.INSUFFICIENT_GOLD)
            if state.pool.remaining(offer.key) < 2:
                return self._reject(state, Rejection.POOL_EXHAUSTED)
            double = preview_purchase(offer.unit, state.board, state.bench, 2)
            if not (double.promotes and double.fits()):
                return self._reject(state, Rejection.NO_MERGE)
            slots.append(other)

        s = state.copy()
        debt = self._take_from_pool(s, offer.key, len(slots))
        result = preview_purchase(offer.unit, s.board, s.bench, len(slots), BENCH_SIZE, debt)
        s.board, s.bench = result.board, result.bench
        for i in slots:
            s.shop[i] = None
        self._charge(s, offer.cost * len(slots))
        return Transition(s, promotions=result.promotions)

    def sell_unit(self, state: EconomyState, container: Container, index: int) -> Transition:
        """Sell an owned unit and give its pool debt back."""
        container = Container(container)
        if not 0 <= index < len(self._slots(state, container)):
            return self._reject(state, Rejection.INVALID_SLOT)
        if self._slots(state, container)[index] is None:
            return self._reject(state, Rejection.EMPTY_SLOT)

        s = state.copy()
        slots = self._slots(s, container)
        unit = slots[index]
        value = sell_value(unit)
        s.pool.restore(unit.removed_identities)
        slots[index] = None
        if s.unlimited_gold:
            s.refunded += value
        else:
            s.gold = min(MAX_GOLD, s.gold + value)
        return Transition(s)

    # --- Experience ---

    def buy_xp(self, state: EconomyState) -> Transition:
        if state.level >= MAX_LEVEL:
            return self._reject(state, Rejection.MAX_LEVEL)
        if not state.can_afford(XP_COST):
            return self._reject(state, Rejection.INSUFFICIENT_GOLD)

        s = state.copy()
        self._charge(s, XP_COST)
        s.xp += XP_PER_BUY
        self._level_up(s)
        return Transition(s)

    def _level_up(self, s: EconomyState) -> None:
        """Spend banked XP on as many levels as it covers."""
        before = s.level
        while s.level < MAX_LEVEL and s.xp >= xp_required(s.level):
            s.xp -= xp_required(s.level)
            s.level += 1
        if s.level >= MAX_LEVEL:
            s.xp = 0
        if s.level != before:
            self._on_level_change(s)

    def _on_level_change(self, s: EconomyState) -> None:
        if s.refresh_shop_on_level_up and not s.locked:
            s.shop = self._roll_shop(s)

    # --- Placement ---

    def place_from_bench(self, state: EconomyState, index: int) -> Transition:
        if not 0 <= index < len(state.bench):
            return self._reject(state, Rejection.INVALID_SLOT)
        if state.bench[index] is None:
            return self._reject(state, Rejection.EMPTY_SLOT)
        if state.board_full:
            return self._reject(state, Rejection.BOARD_FULL)

        s = state.copy()
        s.board[first_empty(s.board)] = s.bench[index]
        s.bench[index] = None
        return self._settle(s)

    def return_to_bench(self, state: EconomyState, index: int) -> Transition:
        if not 0 <= index < len(state.board):
            return self._reject(state, Rejection.INVALID_SLOT)
        if state.board[index] is None:
            return self._reject(state, Rejection.EMPTY_SLOT)
        if state.bench_full:
            return self._reject(state, Rejection.BENCH_FULL)

        s = state.copy()
        s.bench[first_empty(s.bench)] = s.board[index]
        s.board[index] = None
        return self._settle(s)

    def move_unit(
        self,
        state: EconomyState,
        src: Container,
        src_index: int,
        dst: Container,
        dst_index: int,
    ) -> Transition:
        """Drag a unit onto a slot.

        Onto an empty slot the unit moves and merges resolve. Onto an occupied
        slot the two units swap places and nothing merges.
        """
        src, dst = Container(src), Container(dst)
        if not 0 <= src_index < len(self._slots(state, src)):
            return self._reject(state, Rejection.INVALID_SLOT)
        if not 0 <= dst_index < len(self._slots(state, dst)):
            return self._reject(state, Rejection.INVALID_SLOT)
        if self._slots(state, src)[src_index] is None:
            return self._reject(state, Rejection.EMPTY_SLOT)
        if src == dst and src_index == dst_index:
            return self._reject(state, Rejection.NO_CHANGE)

        target = self._slots(state, dst)[dst_index]
        if target is None and dst == Container.BOARD and src == Container.BENCH:
            if state.board_count >= state.level:
                return self._reject(state, Rejection.BOARD_FULL)

        s = state.copy()
        from_slots, to_slots = self._slots(s, src), self._slots(s, dst)
        moving = from_slots[src_index]
        if target is None:
            to_slots[dst_index] = moving
            from_slots[src_index] = None
            return self._settle(s)

        from_slots[src_index] = to_slots[dst_index]
        to_slots[dst_index] = moving
        return Transition(s)

    # --- Practice cheats ---

    def add_gold(self, state: EconomyState, amount: int) -> Transition:
        if state.unlimited_gold:
            return self._reject(state, Rejection.UNLIMITED_GOLD)
        s = state.copy()
        s.gold = max(0, min(MAX_GOLD, s.gold + amount))
        return Transition(s)

    def nudge_level(self, state: EconomyState, delta: int) -> Transition:
        level = max(MIN_LEVEL, min(MAX_LEVEL, state.level + delta))
        if level == state.level:
            return self._reject(state, Rejection.NO_CHANGE)
        if state.board_count > level:
            return self._reject(state, Rejection.BOARD_FULL)

        s = state.copy()
        s.level = level
        s.xp = 0
        self._on_level_change(s)
        return Transition(s)

    # --- Helpers ---

    @staticmethod
    def _slots(state: EconomyState, container: Container) -> Slots:
        return state.board if container == Container.BOARD else state.bench

    @staticmethod
    def _reject(state: EconomyState, reason: Rejection) -> Transition:
        return Transition(state, accepted=False, reason=reason)

    @staticmethod
    def _charge(s: EconomyState, amount: int) -> None:
        if not s.unlimited_gold:
            s.gold -= amount
        s.spent += amount

    @staticmethod
    def _settle(s: EconomyState) -> Transition:
        s.board, s.bench, promotions = resolve_merges_detailed(s.board, s.bench)
        return Transition(s, promotions=promotions)

    @staticmethod
    def _take_from_pool(s: EconomyState, key: str, quantity: int) -> list[list[str]]:
        return s.pool.take_for_purchase(
            key,
            quantity,
            s.overlap_mode,
            s.wanted,
            three_star_keys(s.board, s.bench),
            s.rng,
        )

    @staticmethod
    def _roll_shop(s: EconomyState) -> Slots:
        shop = generate_shop(s.level, s.board, s.bench, s.pool, s.rng)
        if not all(is_legal_offer(o, s.board, s.bench, s.pool) for o in shop):
            raise PoolInvariantError(f"Illegal shop row rolled: {shop}")
        return shop
