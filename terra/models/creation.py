"""
Selection input and the resolved creation record.
"""

from typing import Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from terra.models.entities import ArmorSet, Gender, WeaponSet

# Fixed order of the game server's starting-equipment column.
EQUIPMENT_SLOTS: Tuple[str, ...] = (
    "head",
    "neck",
    "shoulders",
    "body",
    "chest",
    "waist",
    "legs",
    "feet",
    "wrists",
    "hands",
    "finger1",
    "finger2",
    "trinket1",
    "trinket2",
    "back",
    "mainhand",
    "offhand",
    "ranged",
    "tabard",
    "bag1",
    "bag2",
    "bag3",
    "bag4",
)


def _nth(items: List[int], index: int) -> int:
    return items[index] if index < len(items) else 0


def build_equipment(
    armor: Optional[ArmorSet], weapon: Optional[WeaponSet]
) -> Tuple[int, ...]:
    """Lay the chosen loadouts out in slot order, 0 where nothing is equipped."""
    slots: Dict[str, int] = {name: 0 for name in EQUIPMENT_SLOTS}

    if armor is not None:
        for name in (
            "head",
            "neck",
            "shoulders",
            "body",
            "chest",
            "waist",
            "legs",
            "feet",
            "wrists",
            "hands",
            "back",
            "tabard",
        ):
            slots[name] = getattr(armor, name) or 0
        for i in range(2):
            slots[f"finger{i + 1}"] = _nth(armor.fingers, i)
            slots[f"trinket{i + 1}"] = _nth(armor.trinkets, i)
        for i in range(4):
            slots[f"bag{i + 1}"] = _nth(armor.bags, i)

    if weapon is not None:
        slots["mainhand"] = weapon.mainhand or 0
        slots["offhand"] = weapon.offhand or 0
        slots["ranged"] = weapon.ranged or 0

    return tuple(slots[name] for name in EQUIPMENT_SLOTS)


class Selection(BaseModel):
    """What the player picked in the character form."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    role: str
    race: str
    class_: str = Field(..., alias="class")
    armor: Optional[str] = None
    weapon: Optional[str] = None
    traits: FrozenSet[str] = Field(default_factory=frozenset)
    location: str

    name: str
    name_extra: Optional[str] = None
    description: str = Field("", description="Public character description.")
    comment: str = Field("", description="Notes visible to the game masters only.")
    wants_loadup: bool = Field(False, description="Player asks for an individual loadout.")
    hidden: bool = Field(False, description="Hide from the public character list.")

    @field_validator("armor", "weapon", "name_extra", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SelectionAudit(BaseModel):
    """The original selection ids, kept alongside the record for review."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    campaign: str
    role: str
    race: str
    class_: str = Field(..., alias="class")
    armor: Optional[str] = None
    weapon: Optional[str] = None
    traits: Tuple[str, ...] = ()
    location: str
    description: str = ""
    comment: str = ""
    wants_loadup: bool = False
    hidden: bool = False


class CreationData(BaseModel):
    """Fully resolved character, handed to the persistence layer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    locked: bool
    name: str
    name_extra: Optional[str] = None
    gender: Gender
    race: int = Field(..., description="Game-server race id.")
    class_: int = Field(..., alias="class", description="Game-server class id.")
    level: int
    max_level: int
    money: int = Field(..., ge=0)

    map: int
    zone: int
    position: Tuple[float, float, float]
    orientation: float

    equipment: Tuple[int, ...] = Field(
        ..., min_length=len(EQUIPMENT_SLOTS), max_length=len(EQUIPMENT_SLOTS)
    )
    spells_banned: FrozenSet[int] = Field(default_factory=frozenset)
    spells: FrozenSet[int] = Field(default_factory=frozenset)
    skills: Dict[int, int] = Field(default_factory=dict)
    items: Dict[int, int] = Field(default_factory=dict)

    audit: SelectionAudit
