"""RNG system — seedable, per-key random streams.

Every consumer draws from its own named stream ("shop_tier", "shop_unit",
"overlap", ...), so adding draws in one place never shifts the sequence
seen by another. Same seed, same draws.
"""

from __future__ import annotations

import random
from typing import Sequence


class RNGState:
    """Manages per-key random streams, seeded from ``key + seed``."""

    def __init__(self, seed: str):
        self.seed = str(seed)
        self._streams: dict[str, random.Random] = {}

    def _stream(self, key: str) -> random.Random:
        if key not in self._streams:
            self._streams[key] = random.Random(f"{key}{self.seed}")
        return self._streams[key]

    def random(self, key: str) -> float:
        """Get the next value in [0, 1) for the given key."""
        return self._stream(key).random()

    def weighted_index(self, key: str, weights: Sequence[float]) -> int:
        """Cumulative-weight sampling over ``weights``.

        Zero-weight entries are never chosen. Raises ValueError when the
        weights sum to zero.
        """
        total = sum(weights)
        if total <= 0:
            raise ValueError("Cannot sample from all-zero weights")
        roll = self.random(key) * total
        acc = 0.0
        last = 0
        for i, w in enumerate(weights):
            if w <= 0:
                continue
            acc += w
            last = i
            if roll < acc:
                return i
        # Float rounding can leave roll == total
        return last

    def random_element(self, key: str, lst: Sequence):
        """Pick a uniformly random element from a sequence."""
        if not lst:
            raise ValueError("Cannot pick from empty list")
        idx = int(self.random(key) * len(lst))
        return lst[min(idx, len(lst) - 1)]

    def copy(self) -> "RNGState":
        """Deep copy, the copy continues the same sequences independently."""
        new = RNGState(self.seed)
        for key, stream in self._streams.items():
            clone = random.Random()
            clone.setstate(stream.getstate())
            new._streams[key] = clone
        return new

    def get_state_dict(self) -> dict:
        """Serialize for save/load (JSON-safe)."""
        states = {}
        for key, stream in self._streams.items():
            version, internal, gauss = stream.getstate()
            states[key] = [version, list(internal), gauss]
        return {"seed": self.seed, "states": states}

    @classmethod
    def from_state_dict(cls, d: dict) -> "RNGState":
        rng = cls(d["seed"])
        for key, (version, internal, gauss) in d.get("states", {}).items():
            stream = random.Random()
            stream.setstate((version, tuple(internal), gauss))
            rng._streams[key] = stream
        return rng
