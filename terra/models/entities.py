"""
Catalog entity models.

Every selectable entity shares the ``Info`` capability set (name, description,
preview, requires, provides, mods) so listing and validation code can treat
them uniformly. Models are frozen and reject unknown fields, so malformed
campaign data fails when the catalog loads, not when a player submits a form.
"""

from enum import Enum
from typing import Annotated, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from terra.models.constraint import Constraint, parse_constraint
from terra.models.mods import Mods
from terra.models.tags import TagStore

ConstraintField = Annotated[Optional[Constraint], BeforeValidator(parse_constraint)]
TagsField = Annotated[TagStore, BeforeValidator(TagStore.coerce)]
ItemId = Annotated[int, Field(gt=0, lt=2**32)]


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def tag(self) -> str:
        return f"gender/{self.value}"


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )


class Filter(CatalogModel):
    """
    Id admissibility filter.

    Catalog shape: absent or "pass" lets everything through,
    {"allow": [...]} admits only the listed ids, {"deny": [...]} admits all
    but the listed ids.
    """

    allow: Optional[FrozenSet[str]] = None
    deny: Optional[FrozenSet[str]] = None

    @model_validator(mode="before")
    @classmethod
    def _read_pass(cls, data):
        if data is None or data == "pass":
            return {}
        return data

    @model_validator(mode="after")
    def _one_mode(self):
        if self.allow is not None and self.deny is not None:
            raise ValueError("filter cannot both allow and deny")
        return self

    @property
    def is_pass(self) -> bool:
        return self.allow is None and self.deny is None

    def check(self, entity_id: Optional[str]) -> bool:
        if self.allow is not None:
            return entity_id in self.allow
        if self.deny is not None:
            return entity_id not in self.deny
        return True


class Info(CatalogModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    preview: Optional[str] = Field(
        None, description="Asset path relative to the assets root."
    )
    requires: ConstraintField = None
    provides: TagsField = Field(default_factory=TagStore)
    mods: Mods = Field(default_factory=Mods)

    def requires_text(self) -> str:
        return str(self.requires) if self.requires is not None else ""

    def provides_text(self) -> str:
        return self.provides.to_text()


# =============================================================================
# ADMISSIBILITY
# =============================================================================


class Restricted(Info):
    """Entity that may be limited to one gender."""

    gender: Optional[Gender] = None

    def allows_gender(self, gender: Gender) -> bool:
        return self.gender is None or self.gender == gender

    def allows(self, gender: Gender, race_id: str, class_id: str) -> bool:
        return self.allows_gender(gender)


class Race(Restricted):
    game_id: int = Field(..., ge=0)
    name_female: Optional[str] = None
    classes: Filter = Field(default_factory=Filter)

    def allows(self, gender: Gender, race_id: str, class_id: str) -> bool:
        return self.allows_gender(gender) and self.classes.check(class_id)


class Class(Restricted):
    game_id: int = Field(..., ge=0)
    name_female: Optional[str] = None
    races: Filter = Field(default_factory=Filter)

    def allows(self, gender: Gender, race_id: str, class_id: str) -> bool:
        return self.allows_gender(gender) and self.races.check(race_id)


class Gated(Restricted):
    """Entity filtered by the chosen race and class."""

    races: Filter = Field(default_factory=Filter)
    classes: Filter = Field(default_factory=Filter)

    def allows(self, gender: Gender, race_id: str, class_id: str) -> bool:
        return (
            self.allows_gender(gender)
            and self.races.check(race_id)
            and self.classes.check(class_id)
        )


# =============================================================================
# LOADOUTS, TRAITS, LOCATIONS
# =============================================================================


class ArmorSet(Gated):
    head: Optional[ItemId] = None
    neck: Optional[ItemId] = None
    shoulders: Optional[ItemId] = None
    body: Optional[ItemId] = None
    chest: Optional[ItemId] = None
    waist: Optional[ItemId] = None
    legs: Optional[ItemId] = None
    feet: Optional[ItemId] = None
    wrists: Optional[ItemId] = None
    hands: Optional[ItemId] = None
    fingers: List[ItemId] = Field(default_factory=list, max_length=2)
    trinkets: List[ItemId] = Field(default_factory=list, max_length=2)
    back: Optional[ItemId] = None
    tabard: Optional[ItemId] = None
    bags: List[ItemId] = Field(default_factory=list, max_length=4)


class WeaponSet(Gated):
    mainhand: Optional[ItemId] = None
    offhand: Optional[ItemId] = None
    ranged: Optional[ItemId] = None


class Trait(Gated):
    cost: int = 0
    group: Optional[str] = Field(
        None, description="Grouping used by the form's trait budget widgets."
    )


class Location(Gated):
    map: int = Field(..., ge=0)
    zone: int = Field(..., ge=0)
    position: Tuple[float, float, float]
    orientation: float = 0.0
