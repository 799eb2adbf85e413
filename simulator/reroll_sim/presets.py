"""Target deck presets — the comps a player can choose to roll for."""

from __future__ import annotations

from dataclasses import dataclass, field

from .data import UNIT_BY_KEY


@dataclass(frozen=True)
class DeckPreset:
    """A named target composition.

    Every member is wanted at ``target_rank`` except those listed in
    ``three_stars``, which are wanted at rank 3.
    """
    name: str
    members: tuple[str, ...]
    target_rank: int = 2
    three_stars: frozenset[str] = field(default_factory=frozenset)

    def targets(self) -> dict[str, int]:
        return {
            key: 3 if key in self.three_stars else self.target_rank
            for key in self.members
        }


def _preset(name: str, members: list[str], three_stars: tuple[str, ...] = ()) -> DeckPreset:
    return DeckPreset(name=name, members=tuple(members), three_stars=frozenset(three_stars))


PRESETS: list[DeckPreset] = [
    _preset(
        "5 Battle Academia 5 Prodigy Yuumi",
        ["Garen", "Syndra", "Ezreal", "Rakan", "Malzahar", "Leona", "Yuumi", "KSante", "Seraphine"],
    ),
    _preset(
        "6 Duelist Udyr",
        ["Kayle", "Gangplank", "Viego", "Udyr", "Sett", "Ashe", "LeeSin", "Zyra"],
        ("Udyr",),
    ),
    _preset(
        "Star Guardian Jinx",
        ["Rell", "Syndra", "Xayah", "Kobuko", "Neeko", "Ahri", "Poppy", "Jinx", "Seraphine"],
    ),
    _preset(
        "Crew Sniper Jhin",
        ["Gnar", "Malphite", "Sivir", "Kennen", "Jhin", "Neeko", "Jinx", "KSante"],
        ("Malphite", "Kennen", "Sivir", "Gnar", "Jhin"),
    ),
    _preset(
        "4 Mentor Ryze Senna",
        ["Aatrox", "Kobuko", "Senna", "Yasuo", "Udyr", "Ryze", "JarvanIV", "LeeSin", "Zyra"],
        ("Yasuo", "Senna"),
    ),
    _preset(
        "4 Mentor 4 Supreme Cells",
        ["Kennen", "KaiSa", "Kobuko", "Darius", "Yasuo", "Udyr", "Ryze", "Akali", "JarvanIV"],
        ("Kobuko", "Darius", "KaiSa"),
    ),
    _preset(
        "8 Soul Fighter",
        ["Kalista", "Naafiri", "Lux", "XinZhao", "Viego", "Samira", "Sett", "Gwen"],
    ),
    _preset(
        "7 Battle Academia Caitlyn Jayce",
        ["Garen", "Ezreal", "Rakan", "Kobuko", "Jayce", "Caitlyn", "Leona", "Yuumi"],
        ("Caitlyn", "Jayce"),
    ),
    _preset(
        "6 Sorcerer Karma",
        ["Lucian", "Lux", "Swain", "Ahri", "Ryze", "JarvanIV", "Karma", "Gwen", "Braum"],
    ),
    _preset(
        "6 Juggernaut Kayle",
        ["Naafiri", "Aatrox", "Zac", "Kayle", "DrMundo", "Udyr", "Sett", "LeeSin", "Braum"],
        ("Zac", "Aatrox", "Kayle"),
    ),
    _preset(
        "7 Mighty Mech Yone",
        ["Lucian", "Aatrox", "Gangplank", "Senna", "Ryze", "JarvanIV", "Karma", "LeeSin", "Yone"],
    ),
    _preset(
        "High-value Varus",
        ["Gnar", "Janna", "Swain", "JarvanIV", "KSante", "Varus", "Braum", "Zyra", "TwistedFate"],
    ),
    _preset(
        "High-value Jinx",
        ["Gnar", "Rell", "Kobuko", "Neeko", "Poppy", "Jinx", "KSante", "Varus", "Braum"],
    ),
    _preset(
        "6 Protector Xayah",
        ["Malphite", "Kennen", "Rakan", "Xayah", "Janna", "Neeko", "Yasuo", "KSante"],
        ("Xayah", "Rakan"),
    ),
    _preset(
        "6 Edgelord Xayah Reroll",
        ["Rell", "Shen", "XinZhao", "Xayah", "Yasuo", "Volibear", "Samira", "Braum", "Yone"],
        ("Xayah",),
    ),
]

PRESET_BY_NAME: dict[str, DeckPreset] = {p.name: p for p in PRESETS}


def get_preset(name: str) -> DeckPreset:
    try:
        return PRESET_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown deck preset: {name!r}") from None


def validate_presets() -> list[str]:
    """Return the unknown unit keys referenced by any preset (empty when clean)."""
    missing = []
    for preset in PRESETS:
        for key in preset.members:
            if key not in UNIT_BY_KEY:
                missing.append(f"{preset.name}: {key}")
        for key in preset.three_stars:
            if key not in preset.members:
                missing.append(f"{preset.name}: {key} (3-star target not a member)")
    return missing
