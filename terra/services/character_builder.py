"""
Character Builder
=================
Turns a player's selection into a fully resolved CreationData record.

Pipeline:
1. Normalize and check the names
2. Look up every selected id (role, race, class, armor, weapon, traits, location)
3. Check admissibility filters (gender, race/class gates, role filters)
4. Accumulate tags from everything selected
5. Check each entity's requirement against the complete tag store
6. Sum the mods
7. Derive level, money and equipment
8. Emit the record

Every rejection is an InvalidInput carrying the field to highlight. The
campaign is only read, so one loaded campaign can serve any number of
concurrent calls.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from terra.errors import FormulaError, InvalidInput
from terra.models.campaign import Campaign, Role
from terra.models.creation import (
    CreationData,
    Selection,
    SelectionAudit,
    build_equipment,
)
from terra.models.entities import Gender, Restricted
from terra.models.mods import Mods
from terra.models.tags import INT32_MAX, INT32_MIN, TagStore
from terra.rules.evaluator import check
from terra.rules.formula import evaluate_int
from terra.services.names import check_names, normalize_name, normalize_name_extra

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Picked:
    """One selected catalog entity and the form field it came from."""

    field: str
    entity_id: str
    entity: Restricted


# =============================================================================
# PUBLIC API
# =============================================================================


def resolve(
    campaign: Campaign,
    account_gender: Union[Gender, str],
    selection: Selection,
    role_holders: int = 0,
) -> CreationData:
    """
    Resolve a selection against a campaign.

    Args:
        campaign: Loaded campaign (catalog, roles, rules)
        account_gender: Gender of the character being created
        selection: The player's choices
        role_holders: How many characters already hold the selected role

    Raises:
        InvalidInput: with ``field`` naming the rejected form field
    """
    try:
        return _resolve(campaign, Gender(account_gender), selection, role_holders)
    except InvalidInput as e:
        logger.info(f"Rejected build in '{campaign.id}' on '{e.field}': {e.detail}")
        raise


def _resolve(
    campaign: Campaign, gender: Gender, selection: Selection, role_holders: int
) -> CreationData:
    rules = campaign.rules

    # 1. Names
    name = normalize_name(selection.name)
    name_extra = normalize_name_extra(selection.name_extra)
    check_names(name, name_extra, rules.name_alphabet)

    # 2. Lookup
    role = _lookup_role(campaign, selection.role, role_holders)
    picked = _lookup_entities(campaign, selection)
    _check_trait_budget(campaign, role, [p for p in picked if p.field == "traits"])

    # 3. Admissibility
    _check_role_filters(role, gender, picked)
    for p in picked:
        if not p.entity.allows(gender, selection.race, selection.class_):
            raise InvalidInput(p.field, f"'{p.entity_id}' is not available for this build")

    # 4. Tags
    contributions = [("role", role.provides)] + [(p.field, p.entity.provides) for p in picked]
    try:
        tags = TagStore.sum(
            [TagStore({gender.tag: 1}), rules.default_tags] + [c for _, c in contributions]
        )
    except ValueError as e:
        raise InvalidInput(_overflowing_field(contributions), str(e)) from e
    logger.debug(f"Accumulated tags: {tags.to_text()}")

    # 5. Requirements, against the final store
    for p in picked:
        if not check(p.entity.requires, tags):
            raise InvalidInput(
                f"{p.field}/condition",
                f"'{p.entity_id}' requires {p.entity.requires_text()}",
            )

    # 6. Mods
    mods = Mods.sum([role.mods] + [p.entity.mods for p in picked])

    # 7. Derived fields
    by_field = {p.field: p.entity for p in picked if p.field != "traits"}
    race, klass, location = by_field["race"], by_field["class"], by_field["location"]
    armor, weapon = by_field.get("armor"), by_field.get("weapon")

    try:
        level = compute_level(campaign, mods, role)
    except FormulaError as e:
        logger.error(f"Level formula of '{campaign.id}' failed for role '{selection.role}': {e}")
        raise InvalidInput("role", str(e)) from e

    data = CreationData(
        locked=role.locked,
        name=name,
        name_extra=name_extra,
        gender=gender,
        race=race.game_id,
        class_=klass.game_id,
        level=level,
        max_level=rules.level_names(role)["level_max"],
        money=max(0, mods.money),
        map=location.map,
        zone=location.zone,
        position=location.position,
        orientation=location.orientation,
        equipment=build_equipment(armor, weapon),
        spells_banned=mods.spells_banned,
        spells=mods.spells,
        skills=mods.skills,
        items=mods.items,
        audit=_audit(campaign, selection),
    )
    logger.info(
        f"Resolved '{data.name}' in '{campaign.id}' as role '{selection.role}' "
        f"(level {data.level}, locked={data.locked})"
    )
    return data


def compute_level(campaign: Campaign, mods: Mods, role: Optional[Role] = None) -> int:
    """
    Starting level from the campaign formula, always clamped into range.

    A role's own ``level`` and ``level_max`` replace the campaign's base
    level and maximum.
    """
    names = campaign.rules.level_names(role, mods.level)
    raw = evaluate_int(campaign.rules.level_formula, names)
    return min(max(raw, names["level_min"]), names["level_max"])


# =============================================================================
# PIPELINE STEPS
# =============================================================================


def _lookup_role(campaign: Campaign, role_id: str, role_holders: int) -> Role:
    role = campaign.roles.get(role_id)
    if role is None:
        raise InvalidInput("role", f"unknown role '{role_id}'")
    if not role.has_capacity(role_holders):
        raise InvalidInput("role", f"role '{role_id}' is full ({role.limit})")
    return role


def _lookup(campaign: Campaign, field: str, entity_id: str) -> Picked:
    entity = campaign.system.kind(field).get(entity_id)
    if entity is None:
        raise InvalidInput(field, f"unknown id '{entity_id}'")
    return Picked(field, entity_id, entity)


def _lookup_entities(campaign: Campaign, selection: Selection) -> List[Picked]:
    picked = [
        _lookup(campaign, "race", selection.race),
        _lookup(campaign, "class", selection.class_),
    ]
    if selection.armor is not None:
        picked.append(_lookup(campaign, "armor", selection.armor))
    if selection.weapon is not None:
        picked.append(_lookup(campaign, "weapon", selection.weapon))
    for trait_id in sorted(selection.traits):
        picked.append(_lookup(campaign, "traits", trait_id))
    picked.append(_lookup(campaign, "location", selection.location))
    return picked


def _check_trait_budget(campaign: Campaign, role: Role, traits: List[Picked]) -> None:
    limit, balance = campaign.rules.trait_budget(role)
    if limit is not None and len(traits) > limit:
        raise InvalidInput("traits", f"{len(traits)} traits over the limit of {limit}")
    if balance is not None:
        total = sum(p.entity.cost for p in traits)
        if total > balance:
            raise InvalidInput("traits", f"trait cost {total} over the balance of {balance}")


def _overflowing_field(contributions: List[Tuple[str, TagStore]]) -> str:
    """Field of the last contribution to a tag whose sum left the 32-bit range."""
    totals: Dict[str, int] = {}
    for _, provides in contributions:
        for name, weight in provides.items():
            totals[name] = totals.get(name, 0) + weight
    bad = {name for name, total in totals.items() if not INT32_MIN <= total <= INT32_MAX}
    culprit = "traits"
    for field, provides in contributions:
        if bad.intersection(provides):
            culprit = field
    return culprit


# Role filter attribute for each selection field
ROLE_FILTERS = {
    "race": "races",
    "class": "classes",
    "armor": "armor",
    "weapon": "weapon",
    "traits": "traits",
    "location": "locations",
}


def _check_role_filters(role: Role, gender: Gender, picked: List[Picked]) -> None:
    if role.gender is not None and role.gender != gender:
        raise InvalidInput("role", f"role is limited to {role.gender.value} characters")
    for p in picked:
        if not getattr(role, ROLE_FILTERS[p.field]).check(p.entity_id):
            raise InvalidInput(p.field, f"'{p.entity_id}' is not allowed for this role")


def _audit(campaign: Campaign, selection: Selection) -> SelectionAudit:
    return SelectionAudit(
        campaign=campaign.id,
        role=selection.role,
        race=selection.race,
        class_=selection.class_,
        armor=selection.armor,
        weapon=selection.weapon,
        traits=tuple(sorted(selection.traits)),
        location=selection.location,
        description=selection.description,
        comment=selection.comment,
        wants_loadup=selection.wants_loadup,
        hidden=selection.hidden,
    )
