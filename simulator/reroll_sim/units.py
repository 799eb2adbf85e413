"""Owned unit instances and the slot containers that hold them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from .data import UnitDef, get_unit
from .enums import COPY_WEIGHT, MAX_RANK


@dataclass
class UnitInstance:
    """A champion the player owns (or is offered) at a given star rank.

    ``removed_identities`` lists every pool entry burned to create this
    instance, including overlap side-burns and the debt of anything it
    absorbed in a merge. Selling restores exactly these entries.
    """
    unit: UnitDef
    rank: int = 1
    removed_identities: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not 1 <= self.rank <= MAX_RANK:
            raise ValueError(f"Rank out of range: {self.rank}")

    @property
    def key(self) -> str:
        return self.unit.key

    @property
    def cost(self) -> int:
        return self.unit.cost

    @property
    def copy_weight(self) -> int:
        """Pool copies this instance stands for: 1, 3 or 9."""
        return COPY_WEIGHT[self.rank]

    def copy(self) -> "UnitInstance":
        return UnitInstance(self.unit, self.rank, list(self.removed_identities))

    def to_dict(self) -> dict:
        return {
            "key": self.unit.key,
            "name": self.unit.name,
            "traits": list(self.unit.traits),
            "cost": self.unit.cost,
            "star": self.rank,
            "removedUnits": list(self.removed_identities),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "UnitInstance":
        if "key" not in d:
            raise ValueError(f"Unit record without key: {d!r}")
        return cls(
            unit=get_unit(d["key"]),
            rank=int(d.get("star") or 1),
            removed_identities=list(d.get("removedUnits") or []),
        )

    def display(self) -> str:
        return f"{self.unit.name}{'*' * self.rank}"

    def __repr__(self) -> str:
        return self.display()


def sell_value(instance: UnitInstance) -> int:
    """Gold returned for selling an instance.

    Cost-1 units refund 1/3/9. Everything else refunds cost x 1/3/9 minus one.
    """
    multiplier = COPY_WEIGHT[instance.rank]
    if instance.cost == 1:
        return multiplier
    return instance.cost * multiplier - 1


# ---------------------------------------------------------------------------
# Containers: fixed-length slot lists, None marks an empty slot
# ---------------------------------------------------------------------------

Slots = list[Optional[UnitInstance]]


def empty_container(size: int) -> Slots:
    return [None] * size


def copy_container(slots: Slots) -> Slots:
    return [u.copy() if u is not None else None for u in slots]


def first_empty(slots: Slots) -> int:
    """Index of the first empty slot, or -1 when full."""
    for i, u in enumerate(slots):
        if u is None:
            return i
    return -1


def occupancy(slots: Slots) -> int:
    return sum(1 for u in slots if u is not None)


def iter_units(*containers: Slots) -> Iterator[UnitInstance]:
    for slots in containers:
        for u in slots:
            if u is not None:
                yield u


def pack(slots: Slots, size: int) -> Slots:
    """Shift non-empty slots to the front and pad with empties to ``size``.

    Never drops a unit, so the result can be longer than ``size``.
    """
    packed: Slots = [u for u in slots if u is not None]
    packed.extend([None] * max(0, size - len(packed)))
    return packed


def container_to_list(slots: Slots) -> list[Optional[dict]]:
    return [u.to_dict() if u is not None else None for u in slots]


def container_from_list(items: Optional[list], size: int) -> Slots:
    slots: Slots = [UnitInstance.from_dict(d) if d else None for d in (items or [])]
    if len(slots) < size:
        slots.extend([None] * (size - len(slots)))
    return slots
