import json

import pytest

from terra.models.campaign import Block, Campaign, CampaignRules, Role, RoleKind, System
from terra.models.creation import Selection


@pytest.fixture
def system():
    return System.model_validate(
        {
            "race": {
                "human": {"name": "Human", "game_id": 1, "provides": ["race/human"]},
                "orc": {
                    "name": "Orc",
                    "game_id": 2,
                    "provides": ["race/orc"],
                    "classes": {"deny": ["mage"]},
                },
                "amazon": {"name": "Amazon", "game_id": 4, "requires": "gender/female"},
            },
            "class": {
                "warrior": {"name": "Warrior", "game_id": 1, "requires": "strong"},
                "mage": {"name": "Mage", "game_id": 8, "mods": {"spells": [133]}},
            },
            "armor": {
                "plate": {
                    "name": "Plate",
                    "head": 100,
                    "fingers": [301, 302],
                    "classes": {"allow": ["warrior"]},
                },
            },
            "weapon": {
                "sword": {"name": "Sword", "mainhand": 200, "offhand": 201},
            },
            "trait": {
                "brave": {"name": "Brave", "cost": 1, "mods": {"money": 10}},
                "rich": {"name": "Rich", "cost": 2, "mods": {"money": 100, "items": {"6948": 1}}},
                "poor": {"name": "Poor", "cost": -1, "mods": {"money": -50}},
                "veteran": {"name": "Veteran", "cost": 1, "mods": {"level": 5}},
                "outcast": {
                    "name": "Outcast",
                    "cost": 0,
                    "mods": {"spells": [5], "spells_banned": [5]},
                },
                "noble": {"name": "Noble", "cost": 1, "requires": ["not", "race/orc"]},
                "matriarch": {"name": "Matriarch", "gender": "female"},
            },
            "location": {
                "town": {
                    "name": "Town",
                    "map": 0,
                    "zone": 12,
                    "position": [-8949.95, -132.49, 83.53],
                    "orientation": 1.5,
                    "mods": {"skills": {"43": 5}},
                },
                "barracks": {
                    "name": "Barracks",
                    "map": 0,
                    "zone": 1519,
                    "position": [1.0, 2.0, 3.0],
                    "requires": ["==", "role/guard", 1],
                },
            },
        }
    )


@pytest.fixture
def rules():
    return CampaignRules(
        name_alphabet="a-z",
        trait_limit=3,
        trait_balance=3,
        level_base=1,
        level_min=1,
        level_max=20,
    )


@pytest.fixture
def roles():
    return {
        "army_guard": Role(
            name="Guard",
            limit=2,
            provides={"strong": 1, "role/guard": 1},
            mods={"money": 20},
            races={"deny": ["orc"]},
        ),
        "folk_peasant": Role(name="Peasant", kind=RoleKind.FREE),
        "folk_matron": Role(name="Matron", gender="female"),
        "folk_hermit": Role(name="Hermit", kind=RoleKind.SPECIAL, traits={"deny": ["rich"]}),
    }


@pytest.fixture
def campaign(system, rules, roles):
    return Campaign(
        id="test",
        name="Test Campaign",
        rules=rules,
        system=system,
        roles=roles,
        blocks=[
            Block(id="army", name="Army", roles=["army_guard"]),
            Block(id="folk", name="Folk", roles=["folk_peasant", "folk_matron", "folk_hermit"]),
        ],
    )


@pytest.fixture
def make_selection():
    def _make(**overrides):
        data = {
            "role": "army_guard",
            "race": "human",
            "class": "warrior",
            "location": "town",
            "name": "arthur",
        }
        data.update(overrides)
        return Selection.model_validate(data)

    return _make


@pytest.fixture
def write_json():
    def _write(path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _write
