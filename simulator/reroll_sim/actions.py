"""Player intents accepted by the economy engine."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import Container


@dataclass(frozen=True)
class Action:
    """Base action type."""
    pass


@dataclass(frozen=True)
class Reroll(Action):
    """Pay to replace the whole shop row."""
    pass


@dataclass(frozen=True)
class BuyXP(Action):
    """Pay for experience toward the next level."""
    pass


@dataclass(frozen=True)
class BuyFromShop(Action):
    """Buy the offer in a shop slot."""
    slot: int


@dataclass(frozen=True)
class SellUnit(Action):
    """Sell an owned unit from the board or bench."""
    container: Container
    index: int

    def __post_init__(self):
        if not isinstance(self.container, Container):
            object.__setattr__(self, 'container', Container(self.container))


@dataclass(frozen=True)
class PlaceFromBench(Action):
    """Field a bench unit on the first free board slot."""
    index: int


@dataclass(frozen=True)
class ReturnToBench(Action):
    """Pull a board unit back to the first free bench slot."""
    index: int


@dataclass(frozen=True)
class MoveUnit(Action):
    """Drag a unit onto a slot. Empty target: move. Occupied target: swap."""
    src: Container
    src_index: int
    dst: Container
    dst_index: int

    def __post_init__(self):
        for name in ('src', 'dst'):
            value = getattr(self, name)
            if not isinstance(value, Container):
                object.__setattr__(self, name, Container(value))


@dataclass(frozen=True)
class ToggleLock(Action):
    """Freeze or unfreeze the current shop row."""
    pass


@dataclass(frozen=True)
class AddGold(Action):
    """Practice-mode cheat: add (or remove) gold."""
    amount: int


@dataclass(frozen=True)
class NudgeLevel(Action):
    """Practice-mode cheat: step the level up or down."""
    delta: int
