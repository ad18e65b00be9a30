"""
Campaign and System models.

A System is the catalog: six id-keyed entity maps. A Campaign owns one fully
assembled System plus its roles, blocks and rule settings. Both are built once
at startup and only read afterwards.
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import ConfigDict, Field, model_validator

from terra.models.entities import (
    ArmorSet,
    CatalogModel,
    Class,
    Filter,
    Gender,
    Info,
    Location,
    Race,
    TagsField,
    Trait,
    WeaponSet,
)
from terra.models.mods import Mods
from terra.models.tags import TagStore

DEFAULT_LEVEL_FORMULA = "min(level_max, max(level_min, base + delta))"

# Selection field -> System attribute
SYSTEM_KINDS: Dict[str, str] = {
    "race": "races",
    "class": "classes",
    "armor": "armor_sets",
    "weapon": "weapon_sets",
    "traits": "traits",
    "location": "locations",
}


class System(CatalogModel):
    model_config = ConfigDict(populate_by_name=True)

    races: Dict[str, Race] = Field(default_factory=dict, alias="race")
    classes: Dict[str, Class] = Field(default_factory=dict, alias="class")
    armor_sets: Dict[str, ArmorSet] = Field(default_factory=dict, alias="armor")
    weapon_sets: Dict[str, WeaponSet] = Field(default_factory=dict, alias="weapon")
    traits: Dict[str, Trait] = Field(default_factory=dict, alias="trait")
    locations: Dict[str, Location] = Field(default_factory=dict, alias="location")

    def kind(self, field: str) -> Dict[str, Info]:
        return getattr(self, SYSTEM_KINDS[field])

    def merge_in(self, other: "System") -> "System":
        """
        Fill gaps from a less specific layer.

        Ids already present win outright; an entity is never combined
        field-by-field with its shadowed definition.
        """
        merged = {}
        for attr in SYSTEM_KINDS.values():
            ours: Dict[str, Info] = dict(getattr(self, attr))
            for key, value in getattr(other, attr).items():
                if key not in ours:
                    ours[key] = value
            merged[attr] = ours
        return System(**merged)

    def entities(self) -> Iterator[Tuple[str, str, Info]]:
        """Yield (kind, id, entity) for every entity in the catalog."""
        for field, attr in SYSTEM_KINDS.items():
            for entity_id, entity in getattr(self, attr).items():
                yield field, entity_id, entity

    def listing(self, field: str) -> List[Tuple[str, Info]]:
        """Entities of one kind in presentation order."""
        items = list(self.kind(field).items())
        if field in ("race", "class"):
            items.sort(key=lambda pair: pair[0])
        elif field == "traits":
            items.sort(key=lambda pair: (-pair[1].cost, pair[1].name))
        else:
            items.sort(key=lambda pair: pair[1].name)
        return items

    def size(self) -> int:
        return sum(len(getattr(self, attr)) for attr in SYSTEM_KINDS.values())


# =============================================================================
# ROLES
# =============================================================================


class RoleKind(str, Enum):
    FREE = "free"
    NORMAL = "normal"
    SPECIAL = "special"


class Role(CatalogModel):
    name: str
    description: Optional[str] = None
    kind: RoleKind = RoleKind.NORMAL
    limit: Optional[int] = Field(
        None, gt=0, description="How many characters may hold this role."
    )
    gender: Optional[Gender] = None
    provides: TagsField = Field(default_factory=TagStore)
    mods: Mods = Field(default_factory=Mods)

    # Overrides of the campaign rules; None falls back to CampaignRules
    level: Optional[int] = Field(None, ge=1, description="Base starting level.")
    level_max: Optional[int] = Field(None, ge=1)
    trait_limit: Optional[int] = Field(None, ge=0)
    trait_balance: Optional[int] = None

    # Restrictions on the rest of the build
    races: Filter = Field(default_factory=Filter)
    classes: Filter = Field(default_factory=Filter)
    armor: Filter = Field(default_factory=Filter)
    weapon: Filter = Field(default_factory=Filter)
    traits: Filter = Field(default_factory=Filter)
    locations: Filter = Field(default_factory=Filter)

    @model_validator(mode="after")
    def _level_range(self):
        if self.level is not None and self.level_max is not None and self.level > self.level_max:
            raise ValueError(f"level ({self.level}) exceeds level_max ({self.level_max})")
        return self

    @property
    def locked(self) -> bool:
        return self.kind != RoleKind.FREE

    def has_capacity(self, holders: int) -> bool:
        return self.limit is None or holders < self.limit


class Block(CatalogModel):
    id: str
    name: str
    description: Optional[str] = None
    roles: List[str] = Field(default_factory=list)


# =============================================================================
# CAMPAIGN
# =============================================================================


class CampaignRules(CatalogModel):
    trait_limit: Optional[int] = Field(
        None, ge=0, description="Maximum number of traits; None is unlimited."
    )
    trait_balance: Optional[int] = Field(
        None, description="Maximum total trait cost; None is unlimited."
    )
    default_tags: TagsField = Field(default_factory=TagStore)
    level_base: int = Field(1, ge=1)
    level_min: int = Field(1, ge=1)
    level_max: int = Field(80, ge=1)
    level_formula: str = DEFAULT_LEVEL_FORMULA
    name_alphabet: str = Field(
        "а-яё", description="Regex character-class body for character names."
    )

    @model_validator(mode="after")
    def _level_range(self):
        if self.level_min > self.level_max:
            raise ValueError(
                f"level_min ({self.level_min}) exceeds level_max ({self.level_max})"
            )
        return self

    def level_names(self, role: Optional[Role] = None, delta: int = 0) -> Dict[str, int]:
        """Names visible to the level formula, with the role's overrides applied."""
        base = self.level_base
        level_max = self.level_max
        if role is not None:
            if role.level is not None:
                base = role.level
            if role.level_max is not None:
                level_max = role.level_max
        return {
            "base": base,
            "delta": delta,
            "level_min": self.level_min,
            "level_max": level_max,
        }

    def trait_budget(self, role: Optional[Role] = None) -> Tuple[Optional[int], Optional[int]]:
        """(count limit, cost balance), the role's values winning when set."""
        limit, balance = self.trait_limit, self.trait_balance
        if role is not None:
            if role.trait_limit is not None:
                limit = role.trait_limit
            if role.trait_balance is not None:
                balance = role.trait_balance
        return limit, balance


class Campaign(CatalogModel):
    id: str
    name: str
    description: str = ""
    rules: CampaignRules = Field(default_factory=CampaignRules)
    system: System = Field(default_factory=System)
    blocks: List[Block] = Field(default_factory=list)
    roles: Dict[str, Role] = Field(default_factory=dict)

    def block_roles(self, block: Block) -> List[Tuple[str, Role]]:
        return [(rid, self.roles[rid]) for rid in block.roles if rid in self.roles]
