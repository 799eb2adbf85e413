"""Economy state — the complete, serializable state of a rolling session.

Designed for cheap copies (strategies branch on it) and full determinism:
the RNG travels with the state, so replaying the same intents from the
same seed reproduces every shop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .data import BENCH_SIZE, BOARD_SLOTS, SHOP_SIZE, START_GOLD, START_LEVEL, xp_required
from .enums import GameMode, OverlapMode
from .pool import UnitPool
from .rng import RNGState
from .units import (
    Slots, container_from_list, container_to_list, copy_container, empty_container,
    first_empty, occupancy,
)


@dataclass
class EconomyState:
    """All fields needed to resume a session from any point."""

    # Identity
    seed: str = ""
    deck_name: str = ""
    mode: GameMode = GameMode.STANDARD
    overlap_mode: OverlapMode = OverlapMode.NONE

    # RNG
    rng: Optional[RNGState] = None

    # Economy
    gold: int = START_GOLD
    level: int = START_LEVEL
    xp: int = 0
    locked: bool = False

    # Telemetry (monotonic)
    spent: int = 0
    refunded: int = 0         # sale proceeds while gold is unlimited
    reroll_count: int = 0

    # Containers
    board: Slots = field(default_factory=lambda: empty_container(BOARD_SLOTS))
    bench: Slots = field(default_factory=lambda: empty_container(BENCH_SIZE))
    shop: Slots = field(default_factory=lambda: empty_container(SHOP_SIZE))
    pool: UnitPool = field(default_factory=UnitPool.from_catalog)

    # Goals
    wanted: list[str] = field(default_factory=list)
    targets: dict[str, int] = field(default_factory=dict)

    # Options
    refresh_shop_on_level_up: bool = False

    def __post_init__(self):
        self.mode = GameMode(self.mode)
        self.overlap_mode = OverlapMode.parse(self.overlap_mode)
        if self.rng is None:
            self.rng = RNGState(self.seed)
        if not self.wanted and self.targets:
            self.wanted = list(self.targets)
        if not self.targets:
            self.targets = {key: 2 for key in self.wanted}
        for name, size in (("board", BOARD_SLOTS), ("bench", BENCH_SIZE), ("shop", SHOP_SIZE)):
            slots = list(getattr(self, name))
            if len(slots) > size:
                raise ValueError(f"{name} holds {len(slots)} slots, capacity is {size}")
            setattr(self, name, slots + [None] * (size - len(slots)))

    # --- Derived ---

    @property
    def board_count(self) -> int:
        return occupancy(self.board)

    @property
    def bench_count(self) -> int:
        return occupancy(self.bench)

    @property
    def bench_full(self) -> bool:
        return first_empty(self.bench) == -1

    @property
    def board_full(self) -> bool:
        """No more units may be fielded at the current level."""
        return self.board_count >= self.level or first_empty(self.board) == -1

    @property
    def xp_required(self) -> int:
        return xp_required(self.level)

    @property
    def unlimited_gold(self) -> bool:
        return self.mode.unlimited_gold

    @property
    def net_spent(self) -> int:
        """Spend with sale proceeds given back (the time attack score)."""
        return self.spent - self.refunded

    def can_afford(self, amount: int) -> bool:
        return self.unlimited_gold or self.gold >= amount

    # --- Copy / serialization ---

    def copy(self) -> "EconomyState":
        """Deep copy. Containers, pool and RNG are never shared with the original."""
        return EconomyState(
            seed=self.seed,
            deck_name=self.deck_name,
            mode=self.mode,
            overlap_mode=self.overlap_mode,
            rng=self.rng.copy() if self.rng else None,
            gold=self.gold,
            level=self.level,
            xp=self.xp,
            locked=self.locked,
            spent=self.spent,
            refunded=self.refunded,
            reroll_count=self.reroll_count,
            board=copy_container(self.board),
            bench=copy_container(self.bench),
            shop=copy_container(self.shop),
            pool=self.pool.copy(),
            wanted=list(self.wanted),
            targets=dict(self.targets),
            refresh_shop_on_level_up=self.refresh_shop_on_level_up,
        )

    def to_dict(self) -> dict:
        """Flat persisted record. Containers keep their slot positions."""
        return {
            "gold": self.gold,
            "level": self.level,
            "xp": self.xp,
            "shop": container_to_list(self.shop),
            "locked": self.locked,
            "bench": container_to_list(self.bench),
            "board": container_to_list(self.board),
            "pool": self.pool.to_dict(),
            "spent": self.spent,
            "rerollCount": self.reroll_count,
            "refunded": self.refunded,
            "mode": self.mode.value,
            "overlapMode": self.overlap_mode.value,
            "deck": self.deck_name,
            "wanted": list(self.wanted),
            "targets": dict(self.targets),
            "seed": self.seed,
            "rng": self.rng.get_state_dict() if self.rng else None,
            "refreshShopOnLevelUp": self.refresh_shop_on_level_up,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "EconomyState":
        if not isinstance(d, dict):
            raise ValueError(f"Expected a state record, got {type(d).__name__}")
        seed = str(d.get("seed", ""))
        rng_state = d.get("rng")
        return cls(
            seed=seed,
            deck_name=d.get("deck", ""),
            mode=GameMode(d.get("mode") or GameMode.STANDARD),
            overlap_mode=OverlapMode.parse(d.get("overlapMode")),
            rng=RNGState.from_state_dict(rng_state) if rng_state else RNGState(seed),
            gold=int(d.get("gold", START_GOLD)),
            level=int(d.get("level", START_LEVEL)),
            xp=int(d.get("xp", 0)),
            locked=bool(d.get("locked", False)),
            spent=int(d.get("spent", 0)),
            refunded=int(d.get("refunded", 0)),
            reroll_count=int(d.get("rerollCount", 0)),
            board=container_from_list(d.get("board"), BOARD_SLOTS),
            bench=container_from_list(d.get("bench"), BENCH_SIZE),
            shop=container_from_list(d.get("shop"), SHOP_SIZE),
            pool=UnitPool.from_dict(d.get("pool")),
            wanted=list(d.get("wanted") or []),
            targets={k: int(v) for k, v in (d.get("targets") or {}).items()},
            refresh_shop_on_level_up=bool(d.get("refreshShopOnLevelUp", False)),
        )
