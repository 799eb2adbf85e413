"""Session completion and the result record handed to the leaderboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .merge import max_rank
from .state import EconomyState

CUSTOM_DECK = "(custom)"


def effective_targets(state: EconomyState, targets: Optional[dict[str, int]] = None) -> dict[str, int]:
    """Explicit targets, else every wanted unit at 2 stars."""
    if targets:
        return dict(targets)
    if state.targets:
        return dict(state.targets)
    return {key: 2 for key in state.wanted}


def missing_targets(state: EconomyState, targets: Optional[dict[str, int]] = None) -> dict[str, int]:
    """Targets not reached yet, mapped to the rank currently held (0 if none)."""
    missing = {}
    for key, rank in effective_targets(state, targets).items():
        held = max_rank(key, state.board, state.bench)
        if held < (rank or 1):
            missing[key] = held
    return missing


def targets_reached(state: EconomyState, targets: Optional[dict[str, int]] = None) -> bool:
    """True once every target unit is held (board or bench) at its target rank.

    A session without any target never completes.
    """
    if not effective_targets(state, targets):
        return False
    return not missing_targets(state, targets)


@dataclass
class SessionResult:
    """Summary of a finished (or abandoned) session."""
    seed: str
    deck: str
    completed: bool
    spent: int
    refunded: int
    reroll_count: int
    total_steps: int
    final_level: int
    final_gold: int
    targets: dict[str, int] = field(default_factory=dict)
    overlap_mode: str = "none"
    strategy: str = ""

    @property
    def net_spent(self) -> int:
        return self.spent - self.refunded

    @classmethod
    def from_state(cls, state: EconomyState, total_steps: int = 0, strategy: str = "") -> "SessionResult":
        return cls(
            seed=state.seed,
            deck=state.deck_name or CUSTOM_DECK,
            completed=targets_reached(state),
            spent=state.spent,
            refunded=state.refunded,
            reroll_count=state.reroll_count,
            total_steps=total_steps,
            final_level=state.level,
            final_gold=state.gold,
            targets=effective_targets(state),
            overlap_mode=state.overlap_mode.value,
            strategy=strategy,
        )

    def to_payload(self, time_sec: float, date: Optional[datetime] = None) -> dict:
        """Leaderboard record: {deck, spent, rerollCount, timeSec, date, targets, overlapMode}."""
        date = date or datetime.now(timezone.utc)
        return {
            "deck": self.deck,
            "spent": self.net_spent,
            "rerollCount": self.reroll_count,
            "timeSec": time_sec,
            "date": date.isoformat(),
            "targets": dict(self.targets),
            "overlapMode": self.overlap_mode,
        }
