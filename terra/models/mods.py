"""
Mods Algebra
============
Net mechanical effect of a selection: banned/granted spells, skill and item
grants, currency and level deltas.

Merging is a commutative monoid: set union for the id sets, per-key sums for
the grant maps, addition for the scalars, ``Mods.empty()`` as identity.
Nothing is clamped here; negative deltas are legal until the builder
produces final values.
"""

from typing import Dict, FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict, Field


def _sum_maps(a: Dict[int, int], b: Dict[int, int]) -> Dict[int, int]:
    out = dict(a)
    for key, delta in b.items():
        out[key] = out.get(key, 0) + delta
    return out


class Mods(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    spells_banned: FrozenSet[int] = Field(
        default_factory=frozenset,
        description="Spell ids the game server must refuse to this character.",
    )
    spells: FrozenSet[int] = Field(
        default_factory=frozenset, description="Innate spell ids granted."
    )
    skills: Dict[int, int] = Field(
        default_factory=dict, description="Skill id -> starting value delta."
    )
    items: Dict[int, int] = Field(
        default_factory=dict, description="Item id -> starting count delta."
    )
    money: int = 0
    level: int = 0

    @classmethod
    def empty(cls) -> "Mods":
        return cls()

    def merge(self, other: "Mods") -> "Mods":
        return Mods(
            spells_banned=self.spells_banned | other.spells_banned,
            spells=self.spells | other.spells,
            skills=_sum_maps(self.skills, other.skills),
            items=_sum_maps(self.items, other.items),
            money=self.money + other.money,
            level=self.level + other.level,
        )

    @classmethod
    def sum(cls, mods: Iterable["Mods"]) -> "Mods":
        total = cls.empty()
        for m in mods:
            total = total.merge(m)
        return total

    def is_empty(self) -> bool:
        return self == Mods.empty()


def merge(a: Mods, b: Mods) -> Mods:
    return a.merge(b)
