from .campaign import (
    Block,
    Campaign,
    CampaignRules,
    Role,
    RoleKind,
    System,
)
from .constraint import (
    All,
    AnyOf,
    Compare,
    Constraint,
    Has,
    Not,
    TagRef,
    parse_constraint,
)
from .creation import (
    EQUIPMENT_SLOTS,
    CreationData,
    Selection,
    SelectionAudit,
    build_equipment,
)
from .entities import (
    ArmorSet,
    Class,
    Filter,
    Gender,
    Info,
    Location,
    Race,
    Trait,
    WeaponSet,
)
from .mods import Mods
from .tags import TagStore

__all__ = [
    # Catalog
    "Block",
    "Campaign",
    "CampaignRules",
    "Role",
    "RoleKind",
    "System",
    # Requirements
    "All",
    "AnyOf",
    "Compare",
    "Constraint",
    "Has",
    "Not",
    "TagRef",
    "parse_constraint",
    # Creation
    "EQUIPMENT_SLOTS",
    "CreationData",
    "Selection",
    "SelectionAudit",
    "build_equipment",
    # Entities
    "ArmorSet",
    "Class",
    "Filter",
    "Gender",
    "Info",
    "Location",
    "Race",
    "Trait",
    "WeaponSet",
    # Algebra
    "Mods",
    "TagStore",
]
