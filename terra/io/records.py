"""
Record Encoding
===============
Turns CreationData into the plain rows the persistence layer writes.

The game server reads a few columns in fixed text formats:
- equipment: 23 space-separated item ids in slot order, 0 for empty slots
- skill/item grants: "id value id value ..." sorted by id, values floored at 0
- spell sets: sorted space-separated ids
Empty collections are written as NULL (None), never as an empty string.
"""

from enum import IntFlag
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from terra.models.creation import EQUIPMENT_SLOTS, CreationData
from terra.models.entities import Gender

FORM_STATUS_PENDING = "pending"


class AtLoginFlags(IntFlag):
    RENAME = 0x001
    RESET_SPELLS = 0x002
    RESET_TALENTS = 0x004
    CUSTOMIZE = 0x008
    RESET_PET_TALENTS = 0x010
    FIRST_LOGIN = 0x020
    CHANGE_FACTION = 0x040
    CHANGE_RACE = 0x080
    RESURRECT = 0x100


GENDER_CODES = {Gender.MALE: 0, Gender.FEMALE: 1}


def encode_equipment(slots: Sequence[int]) -> str:
    if len(slots) != len(EQUIPMENT_SLOTS):
        raise ValueError(f"Expected {len(EQUIPMENT_SLOTS)} equipment slots, got {len(slots)}")
    return " ".join(str(item or 0) for item in slots)


def encode_grants(grants: Mapping[int, int]) -> Optional[str]:
    if not grants:
        return None
    return " ".join(f"{key} {max(value, 0)}" for key, value in sorted(grants.items()))


def encode_ids(ids: Iterable[int]) -> Optional[str]:
    ordered = sorted(ids)
    if not ordered:
        return None
    return " ".join(str(i) for i in ordered)


def at_login_flags(data: CreationData) -> AtLoginFlags:
    flags = AtLoginFlags.FIRST_LOGIN
    if not data.locked:
        flags |= AtLoginFlags.CUSTOMIZE
    return flags


def character_row(data: CreationData) -> Dict[str, Any]:
    """Row for the game server's characters table."""
    x, y, z = data.position
    return {
        "at_login": int(at_login_flags(data)),
        "name": data.name,
        "name_extra": data.name_extra,
        "gender": GENDER_CODES[data.gender],
        "race": data.race,
        "class": data.class_,
        "level": data.level,
        "max_level": data.max_level,
        "money": data.money,
        "map": data.map,
        "zone": data.zone,
        "position_x": x,
        "position_y": y,
        "position_z": z,
        "orientation": data.orientation,
        "banned_spells": encode_ids(data.spells_banned),
        "innate_spells": encode_ids(data.spells),
        "starting_skills": encode_grants(data.skills),
        "starting_equip": encode_equipment(data.equipment),
        "starting_items": encode_grants(data.items),
    }


def form_row(data: CreationData, campaign_id: Optional[str] = None) -> Dict[str, Any]:
    """Row for the review table that keeps the original selection."""
    audit = data.audit
    return {
        "campaign": campaign_id or audit.campaign,
        "role": audit.role,
        "race": audit.race,
        "class": audit.class_,
        "armor": audit.armor,
        "weapon": audit.weapon,
        "traits": " ".join(audit.traits),
        "location": audit.location,
        "description": audit.description,
        "comment": audit.comment,
        "wants_loadup": audit.wants_loadup,
        "hidden": audit.hidden,
        "status": FORM_STATUS_PENDING,
    }


def homebind_row(data: CreationData) -> Dict[str, Any]:
    """Row for the hearthstone binding, which starts at the spawn location."""
    x, y, z = data.position
    return {
        "map": data.map,
        "zone": data.zone,
        "position_x": x,
        "position_y": y,
        "position_z": z,
    }
