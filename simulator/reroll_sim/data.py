"""Game data catalog — unit roster, shared pool sizes, shop odds, XP table.

All static data for shop generation and economy simulation. Built once at
import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Economy constants
# ---------------------------------------------------------------------------

SHOP_SIZE = 5
BENCH_SIZE = 10
BOARD_ROWS = 4
BOARD_COLS = 7
BOARD_SLOTS = BOARD_ROWS * BOARD_COLS  # occupancy is capped by level, not by slots

MIN_LEVEL = 1
MAX_LEVEL = 10
START_LEVEL = 3

REROLL_COST = 2
XP_COST = 4
XP_PER_BUY = 4

MAX_GOLD = 10000
START_GOLD = 100  # standard mode only; time attack ignores the balance

STORAGE_KEY = "tft-reroll-bar-v1"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

# Copies of each unique unit in the shared pool, by cost tier
PER_UNIT_POOL: dict[int, int] = {
    1: 30,
    2: 25,
    3: 18,
    4: 10,
    5: 9,
}

# Percent weight of each cost tier (1..5) appearing in a shop slot, by level
SHOP_ODDS: dict[int, tuple[int, int, int, int, int]] = {
    1: (100, 0, 0, 0, 0),
    2: (100, 0, 0, 0, 0),
    3: (75, 25, 0, 0, 0),
    4: (55, 30, 15, 0, 0),
    5: (45, 33, 20, 2, 0),
    6: (30, 40, 25, 5, 0),
    7: (19, 30, 40, 10, 1),
    8: (17, 24, 32, 24, 3),
    9: (15, 18, 25, 30, 12),
    10: (5, 10, 20, 40, 25),
}

# XP needed to go from level N to N+1. Level 10 is terminal.
XP_REQ: dict[int, int] = {
    1: 2,
    2: 2,
    3: 6,
    4: 10,
    5: 20,
    6: 36,
    7: 48,
    8: 76,
    9: 84,
    10: 0,
}


@dataclass(frozen=True)
class UnitDef:
    """Static definition of a champion."""
    key: str
    name: str
    traits: tuple[str, ...]
    cost: int


# ---------------------------------------------------------------------------
# Roster: compact (key, name, traits) rows per cost tier.
# Order within a tier is the shop candidate order.
# ---------------------------------------------------------------------------

_ROSTER_RAW: dict[int, list[tuple[str, str, tuple[str, ...]]]] = {
    1: [
        ("Syndra", "Syndra", ("Crystal Gambit", "Star Guardian", "Prodigy")),
        ("Rell", "Rell", ("Star Guardian", "Bastion")),
        ("Gnar", "Gnar", ("Luchador", "Sniper")),
        ("Sivir", "Sivir", ("The Crew", "Sniper")),
        ("Kennen", "Kennen", ("Supreme Cells", "Protector", "Sorcerer")),
        ("Malphite", "Malphite", ("The Crew", "Protector")),
        ("Aatrox", "Aatrox", ("Mighty Mech", "Juggernaut", "Heavyweight")),
        ("Ezreal", "Ezreal", ("Battle Academia", "Prodigy")),
        ("Garen", "Garen", ("Battle Academia", "Bastion")),
        ("Kayle", "Kayle", ("Wraith", "Duelist")),
        ("Naafiri", "Naafiri", ("Soul Fighter", "Juggernaut")),
        ("Zac", "Zac", ("Wraith", "Heavyweight")),
        ("Lucian", "Lucian", ("Mighty Mech", "Sorcerer")),
        ("Kalista", "Kalista", ("Soul Fighter", "Executioner")),
    ],
    2: [
        ("Kobuko", "Kobuko", ("Mentor", "Heavyweight")),
        ("Janna", "Janna", ("Crystal Gambit", "Protector", "Strategist")),
        ("Xayah", "Xayah", ("Star Guardian", "Edgelord")),
        ("Vi", "Vi", ("Crystal Gambit", "Juggernaut")),
        ("Rakan", "Rakan", ("Battle Academia", "Protector")),
        ("Jhin", "Jhin", ("Wraith", "Sniper")),
        ("KaiSa", "Kai'Sa", ("Supreme Cells", "Duelist")),
        ("Gangplank", "Gangplank", ("Mighty Mech", "Duelist")),
        ("Shen", "Shen", ("The Crew", "Bastion", "Edgelord")),
        ("Lux", "Lux", ("Soul Fighter", "Sorcerer")),
        ("DrMundo", "Dr. Mundo", ("Luchador", "Juggernaut")),
        ("XinZhao", "Xin Zhao", ("Soul Fighter", "Bastion")),
        ("Katarina", "Katarina", ("Battle Academia", "Assassin")),
    ],
    3: [
        ("Neeko", "Neeko", ("Star Guardian", "Protector")),
        ("Ahri", "Ahri", ("Star Guardian", "Sorcerer")),
        ("Senna", "Senna", ("Mighty Mech", "Executioner")),
        ("Udyr", "Udyr", ("Mentor", "Juggernaut", "Duelist")),
        ("Swain", "Swain", ("Crystal Gambit", "Bastion", "Sorcerer")),
        ("Yasuo", "Yasuo", ("Mentor", "Edgelord")),
        ("Ziggs", "Ziggs", ("The Crew", "Strategist")),
        ("Malzahar", "Malzahar", ("Wraith", "Prodigy")),
        ("Darius", "Darius", ("Supreme Cells", "Heavyweight")),
        ("Viego", "Viego", ("Soul Fighter", "Duelist")),
        ("Caitlyn", "Caitlyn", ("Battle Academia", "Sniper")),
        ("Jayce", "Jayce", ("Battle Academia", "Heavyweight")),
        ("Lulu", "Lulu", ("Monster Trainer",)),
    ],
    4: [
        ("JarvanIV", "Jarvan IV", ("Mighty Mech", "Strategist")),
        ("Ryze", "Ryze", ("Mentor", "Executioner", "Strategist")),
        ("Jinx", "Jinx", ("Star Guardian", "Sniper")),
        ("KSante", "K'Sante", ("Wraith", "Protector")),
        ("Akali", "Akali", ("Supreme Cells", "Executioner")),
        ("Poppy", "Poppy", ("Star Guardian", "Heavyweight")),
        ("Ashe", "Ashe", ("Crystal Gambit", "Duelist")),
        ("Yuumi", "Yuumi", ("Battle Academia", "Prodigy")),
        ("Leona", "Leona", ("Battle Academia", "Bastion")),
        ("Sett", "Sett", ("Soul Fighter", "Juggernaut")),
        ("Volibear", "Volibear", ("Luchador", "Edgelord")),
        ("Karma", "Karma", ("Mighty Mech", "Sorcerer")),
        ("Samira", "Samira", ("Soul Fighter", "Edgelord")),
    ],
    5: [
        ("Zyra", "Zyra", ("Crystal Gambit", "Rosemother")),
        ("TwistedFate", "Twisted Fate", ("Rogue Captain", "The Crew")),
        ("Braum", "Braum", ("The Champ", "Luchador", "Bastion")),
        ("LeeSin", "Lee Sin", ("Stance Master",)),
        ("Varus", "Varus", ("Wraith", "Sniper")),
        ("Seraphine", "Seraphine", ("Star Guardian", "Prodigy")),
        ("Yone", "Yone", ("Mighty Mech", "Edgelord")),
        ("Gwen", "Gwen", ("Soul Fighter", "Sorcerer")),
    ],
}


def _build_roster() -> list[UnitDef]:
    units = []
    for cost in sorted(_ROSTER_RAW):
        for key, name, traits in _ROSTER_RAW[cost]:
            units.append(UnitDef(key=key, name=name, traits=traits, cost=cost))
    return units


ROSTER: list[UnitDef] = _build_roster()
UNIT_BY_KEY: dict[str, UnitDef] = {u.key: u for u in ROSTER}
UNITS_BY_COST: dict[int, list[UnitDef]] = {
    cost: [u for u in ROSTER if u.cost == cost] for cost in sorted(PER_UNIT_POOL)
}
COST_TIERS: tuple[int, ...] = tuple(sorted(PER_UNIT_POOL))


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_unit(key: str) -> UnitDef:
    """Look up a unit by key. Raises KeyError for unknown keys."""
    try:
        return UNIT_BY_KEY[key]
    except KeyError:
        raise KeyError(f"Unknown unit key: {key!r}") from None


def odds_for_level(level: int) -> tuple[int, int, int, int, int]:
    # Levels outside the table shop like level 3
    return SHOP_ODDS.get(level, SHOP_ODDS[3])


def xp_required(level: int) -> int:
    return XP_REQ.get(level, 0)


def pool_ceiling(cost: int) -> int:
    return PER_UNIT_POOL.get(cost, 0)
