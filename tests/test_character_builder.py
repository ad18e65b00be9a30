import logging

import pytest

from terra.errors import InvalidInput
from terra.models.campaign import CampaignRules
from terra.models.creation import EQUIPMENT_SLOTS
from terra.models.entities import Gender, Location, Trait
from terra.services.character_builder import resolve


def rejected_field(campaign, selection, gender=Gender.MALE, role_holders=0):
    with pytest.raises(InvalidInput) as excinfo:
        resolve(campaign, gender, selection, role_holders)
    return excinfo.value.field


def with_rules(campaign, **changes):
    rules = campaign.rules.model_dump()
    rules.update(changes)
    return campaign.model_copy(update={"rules": CampaignRules(**rules)})


def with_role(campaign, role_id, **changes):
    roles = dict(campaign.roles)
    roles[role_id] = roles[role_id].model_copy(update=changes)
    return campaign.model_copy(update={"roles": roles})


def with_entities(campaign, attr, **entities):
    system = campaign.system
    merged = {**getattr(system, attr), **entities}
    return campaign.model_copy(update={"system": system.model_copy(update={attr: merged})})


# =============================================================================
# SUCCESSFUL BUILDS
# =============================================================================


def test_role_provided_tag_satisfies_class_requirement(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection())

    assert data.name == "Arthur"
    assert data.race == 1
    assert data.class_ == 1
    assert data.gender == Gender.MALE
    assert data.locked is True
    assert data.money == 20
    assert data.level == 1
    assert data.max_level == 20
    assert (data.map, data.zone) == (0, 12)
    assert data.position == (-8949.95, -132.49, 83.53)
    assert data.orientation == 1.5
    assert data.skills == {43: 5}
    assert len(data.equipment) == len(EQUIPMENT_SLOTS)


def test_audit_keeps_original_ids(campaign, make_selection):
    selection = make_selection(
        armor="plate",
        traits=["rich", "brave"],
        description="Tall",
        comment="for gm",
        wants_loadup=True,
    )
    data = resolve(campaign, "male", selection)

    audit = data.audit
    assert audit.campaign == "test"
    assert audit.role == "army_guard"
    assert audit.class_ == "warrior"
    assert audit.armor == "plate"
    assert audit.weapon is None
    assert audit.traits == ("brave", "rich")
    assert audit.description == "Tall"
    assert audit.comment == "for gm"
    assert audit.wants_loadup is True
    assert audit.hidden is False


def test_equipment_follows_slot_order(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(armor="plate", weapon="sword"))
    slots = dict(zip(EQUIPMENT_SLOTS, data.equipment))

    assert slots["head"] == 100
    assert slots["finger1"] == 301
    assert slots["finger2"] == 302
    assert slots["mainhand"] == 200
    assert slots["offhand"] == 201
    assert slots["bag1"] == 0


def test_mods_sum_across_selection(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(traits=["rich", "brave"]))
    # role 20 + rich 100 + brave 10
    assert data.money == 130
    assert data.items == {6948: 1}


def test_money_floors_at_zero(campaign, make_selection):
    selection = make_selection(role="folk_peasant", **{"class": "mage"}, traits=["poor"])
    data = resolve(campaign, Gender.MALE, selection)
    assert data.money == 0


def test_level_delta_applies(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(traits=["veteran"]))
    assert data.level == 6


def test_level_clamped_to_campaign_range(campaign, make_selection):
    capped = with_rules(campaign, level_max=4)
    data = resolve(capped, Gender.MALE, make_selection(traits=["veteran"]))
    assert data.level == 4
    assert data.max_level == 4


def test_banned_spells_are_passed_through(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(traits=["outcast"]))
    assert data.spells == {5}
    assert data.spells_banned == {5}


def test_free_role_is_not_locked(campaign, make_selection):
    selection = make_selection(role="folk_peasant", **{"class": "mage"})
    data = resolve(campaign, Gender.MALE, selection)
    assert data.locked is False
    assert data.spells == {133}


def test_special_role_is_locked(campaign, make_selection):
    selection = make_selection(role="folk_hermit", **{"class": "mage"})
    assert resolve(campaign, Gender.MALE, selection).locked is True


def test_default_tags_seed_the_store(campaign, make_selection):
    generous = with_rules(campaign, default_tags={"strong": 1})
    data = resolve(generous, Gender.MALE, make_selection(role="folk_peasant"))
    assert data.class_ == 1


def test_gender_tag_is_seeded(campaign, make_selection):
    selection = make_selection(race="amazon")
    assert resolve(campaign, Gender.FEMALE, selection).race == 4
    assert rejected_field(campaign, selection, gender=Gender.MALE) == "race/condition"


def test_requirement_sees_tags_from_role(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(location="barracks"))
    assert data.zone == 1519


def test_name_extra_normalized(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(name="  arthur ", name_extra="  of   camelot "))
    assert data.name == "Arthur"
    assert data.name_extra == "of camelot"


def test_blank_name_extra_is_none(campaign, make_selection):
    data = resolve(campaign, Gender.MALE, make_selection(name_extra="   "))
    assert data.name_extra is None


# =============================================================================
# REJECTIONS
# =============================================================================


def test_missing_role_tag_fails_class_condition(campaign, make_selection):
    assert rejected_field(campaign, make_selection(role="folk_peasant")) == "class/condition"


def test_unknown_trait(campaign, make_selection):
    assert rejected_field(campaign, make_selection(traits=["brave", "nonexistent"])) == "traits"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"role": "nobody"}, "role"),
        ({"race": "dwarf"}, "race"),
        ({"class": "paladin"}, "class"),
        ({"armor": "leather"}, "armor"),
        ({"weapon": "axe"}, "weapon"),
        ({"location": "moon"}, "location"),
    ],
)
def test_unknown_ids(campaign, make_selection, overrides, field):
    assert rejected_field(campaign, make_selection(**overrides)) == field


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": "a"}, "name"),
        ({"name": "arthur1"}, "name"),
        ({"name": "arthur pendragon"}, "name"),
        ({"name": "abcdefghijklm"}, "name"),
        ({"name_extra": "the 2nd"}, "name_extra"),
        ({"name_extra": "x" * 21}, "name_extra"),
    ],
)
def test_invalid_names(campaign, make_selection, overrides, field):
    assert rejected_field(campaign, make_selection(**overrides)) == field


def test_role_at_capacity(campaign, make_selection):
    selection = make_selection()
    assert resolve(campaign, Gender.MALE, selection, role_holders=1).locked
    assert rejected_field(campaign, selection, role_holders=2) == "role"


def test_role_gender_restriction(campaign, make_selection):
    selection = make_selection(role="folk_matron", **{"class": "mage"})
    assert rejected_field(campaign, selection, gender=Gender.MALE) == "role"
    assert resolve(campaign, Gender.FEMALE, selection).gender == Gender.FEMALE


def test_role_filter_names_filtered_field(campaign, make_selection):
    assert rejected_field(campaign, make_selection(race="orc")) == "race"
    hermit = make_selection(role="folk_hermit", **{"class": "mage"}, traits=["rich"])
    assert rejected_field(campaign, hermit) == "traits"


def test_race_class_filter(campaign, make_selection):
    selection = make_selection(role="folk_peasant", race="orc", **{"class": "mage"})
    assert rejected_field(campaign, selection) == "race"


def test_armor_class_filter(campaign, make_selection):
    selection = make_selection(role="folk_peasant", **{"class": "mage"}, armor="plate")
    assert rejected_field(campaign, selection) == "armor"


def test_trait_gender_restriction(campaign, make_selection):
    assert rejected_field(campaign, make_selection(traits=["matriarch"])) == "traits"


def test_trait_condition(campaign, make_selection):
    selection = make_selection(role="folk_peasant", race="orc", **{"class": "warrior"}, traits=["noble"])
    generous = with_rules(campaign, default_tags={"strong": 1})
    assert rejected_field(generous, selection) == "traits/condition"


def test_location_condition(campaign, make_selection):
    generous = with_rules(campaign, default_tags={"strong": 1})
    selection = make_selection(role="folk_peasant", location="barracks")
    assert rejected_field(generous, selection) == "location/condition"


def test_trait_limit(campaign, make_selection):
    limited = with_rules(campaign, trait_balance=None)
    selection = make_selection(traits=["brave", "poor", "outcast", "veteran"])
    assert rejected_field(limited, selection) == "traits"


def test_trait_balance(campaign, make_selection):
    selection = make_selection(traits=["rich", "brave", "veteran"])
    assert rejected_field(campaign, selection) == "traits"


def test_rejection_is_logged(campaign, make_selection, caplog):
    with caplog.at_level(logging.INFO, logger="terra.services.character_builder"):
        rejected_field(campaign, make_selection(traits=["nonexistent"]))
    assert "traits" in caplog.text


# =============================================================================
# ROLE OVERRIDES
# =============================================================================


def test_role_level_overrides_campaign(campaign, make_selection):
    veteran_guard = with_role(campaign, "army_guard", level=10, level_max=12)

    data = resolve(veteran_guard, Gender.MALE, make_selection())
    assert data.level == 10
    assert data.max_level == 12

    data = resolve(veteran_guard, Gender.MALE, make_selection(traits=["veteran"]))
    assert data.level == 12


def test_role_without_overrides_uses_campaign_levels(campaign, make_selection):
    capped = with_role(campaign, "army_guard", level_max=12)
    data = resolve(capped, Gender.MALE, make_selection(role="folk_peasant", **{"class": "mage"}))
    assert data.max_level == 20


def test_role_trait_limit_overrides_campaign(campaign, make_selection):
    selection = make_selection(traits=["brave", "poor", "outcast", "veteran"])
    assert rejected_field(campaign, selection) == "traits"

    roomy = with_role(campaign, "army_guard", trait_limit=4)
    assert resolve(roomy, Gender.MALE, selection).level == 6

    strict = with_role(campaign, "army_guard", trait_limit=0)
    assert rejected_field(strict, make_selection(traits=["outcast"])) == "traits"


def test_role_trait_balance_overrides_campaign(campaign, make_selection):
    selection = make_selection(traits=["rich", "brave", "veteran"])
    generous = with_role(campaign, "army_guard", trait_balance=4)
    assert resolve(generous, Gender.MALE, selection).money == 130

    frugal = with_role(campaign, "army_guard", trait_balance=0)
    assert rejected_field(frugal, make_selection(traits=["brave"])) == "traits"


# =============================================================================
# ARITHMETIC LIMITS
# =============================================================================


def test_tag_overflow_across_traits_is_rejected(campaign, make_selection):
    huge = {"x": 2**31 - 1}
    giants = with_entities(
        campaign,
        "traits",
        giant=Trait(name="Giant", provides=huge),
        titan=Trait(name="Titan", provides=huge),
    )
    selection = make_selection(traits=["giant", "titan"])
    assert rejected_field(giants, selection) == "traits"

    # one of them alone stays in range
    assert resolve(giants, Gender.MALE, make_selection(traits=["giant"])).race == 1


def test_tag_underflow_names_last_contributor(campaign, make_selection):
    deep = with_entities(
        campaign,
        "locations",
        abyss=Location(
            name="Abyss", map=0, zone=1, position=(0, 0, 0), provides={"depth": -(2**31)}
        ),
    )
    guard_tags = campaign.roles["army_guard"].provides.add("depth", -1)
    deep = with_role(deep, "army_guard", provides=guard_tags)
    assert rejected_field(deep, make_selection(location="abyss")) == "location"


def test_level_formula_failure_rejects_role(campaign, make_selection, caplog):
    fragile = with_rules(
        campaign, level_formula="min(level_max, max(level_min, base + 10 // (delta + 1)))"
    )
    fragile = with_entities(fragile, "traits", cursed=Trait(name="Cursed", mods={"level": -1}))

    assert resolve(fragile, Gender.MALE, make_selection()).level == 11
    with caplog.at_level(logging.ERROR, logger="terra.services.character_builder"):
        assert rejected_field(fragile, make_selection(traits=["cursed"])) == "role"
    assert "Level formula" in caplog.text
