"""
Catalog Loader
==============
Reads campaign data from disk into validated models.

Layout:
    <data>/shared/*.json                    base layer, shared by all campaigns
    <data>/campaigns/<id>/manifest.json     name, rules, role template, blocks
    <data>/campaigns/<id>/system.json       campaign layer (optional)
    <data>/campaigns/<id>/system/*.json     campaign layer, split (optional)
    <data>/campaigns/<id>/info.md           campaign description (optional)

Every failure is raised as CatalogError so a broken campaign stops startup.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import Field, ValidationError

from terra.catalog.assembly import merge_systems
from terra.errors import CatalogError
from terra.models.campaign import (
    Block,
    Campaign,
    CampaignRules,
    Role,
    RoleKind,
    System,
)
from terra.models.entities import CatalogModel, TagsField
from terra.models.mods import Mods
from terra.models.tags import TagStore
from terra.rules.formula import validate_formula

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def name_to_id(name: str) -> str:
    """
    Derive an id from a display name.

    Examples:
        "Town Guard" -> "town_guard"
        "Орден Света" -> "орден_света"
    """
    return re.sub(r"\W+", "_", name.strip().lower()).strip("_")


# =============================================================================
# MANIFEST SCHEMA
# =============================================================================


class RoleTemplate(CatalogModel):
    kind: RoleKind = RoleKind.NORMAL
    provides: TagsField = Field(default_factory=TagStore)
    mods: Mods = Field(default_factory=Mods)
    level: Optional[int] = Field(None, ge=1)
    level_max: Optional[int] = Field(None, ge=1)
    trait_limit: Optional[int] = Field(None, ge=0)
    trait_balance: Optional[int] = None


# Role settings a role inherits from the template when it leaves them unset
TEMPLATE_DEFAULTS = ("kind", "level", "level_max", "trait_limit", "trait_balance")


class RoleDef(Role):
    id: Optional[str] = None
    kind: Optional[RoleKind] = None


class BlockDef(CatalogModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    provides: TagsField = Field(default_factory=TagStore)
    mods: Mods = Field(default_factory=Mods)
    roles: List[RoleDef] = Field(default_factory=list)


class ManifestFile(CampaignRules):
    name: str
    description: Optional[str] = None
    role_template: RoleTemplate = Field(default_factory=RoleTemplate)
    blocks: List[BlockDef] = Field(default_factory=list)


# =============================================================================
# FILE HELPERS
# =============================================================================


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Malformed JSON in {path}: {e}") from e
    except OSError as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e


def load_system_file(path: PathLike) -> System:
    path = Path(path)
    data = _read_json(path)
    try:
        return System.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid system definition in {path}:\n{e}") from e


def _collect_files(path: Path) -> List[Path]:
    logger.debug(f"Looking at {path}")
    if path.is_dir():
        files: List[Path] = []
        for sub in sorted(path.iterdir()):
            files.extend(_collect_files(sub))
        return files
    if path.suffix == ".json":
        return [path]
    logger.debug(f"Skipping non-system file {path}")
    return []


def load_system(paths: Iterable[PathLike]) -> System:
    """
    Load and merge system files.

    Each path may be a file or a directory (walked in sorted order). Missing
    paths are skipped. Files met earlier win on duplicate ids.
    """
    layers: List[System] = []
    for raw in paths:
        path = Path(raw)
        if not path.exists():
            logger.debug(f"System path {path} does not exist, skipping")
            continue
        for file_path in _collect_files(path):
            layers.append(load_system_file(file_path))
    return merge_systems(*layers)


# =============================================================================
# CAMPAIGN
# =============================================================================


def _compile_roles(manifest: ManifestFile):
    blocks: List[Block] = []
    roles: Dict[str, Role] = {}
    template = manifest.role_template

    for block_def in manifest.blocks:
        block_id = block_def.id or name_to_id(block_def.name)
        role_ids: List[str] = []

        for role_def in block_def.roles:
            role_id = f"{block_id}_{role_def.id or name_to_id(role_def.name)}"
            if role_id in roles:
                raise CatalogError(f"Duplicate role id '{role_id}'")

            provides = (
                role_def.provides.merge(template.provides)
                .merge(block_def.provides)
                .add(f"block/{block_id}")
                .add(f"role/{role_id}")
            )
            mods = Mods.sum([role_def.mods, template.mods, block_def.mods])

            fields = {
                name: getattr(role_def, name)
                for name in Role.model_fields
                if name not in ("provides", "mods")
            }
            for name in TEMPLATE_DEFAULTS:
                if fields[name] is None:
                    fields[name] = getattr(template, name)
            try:
                role = Role(**fields, provides=provides, mods=mods)
            except ValidationError as e:
                raise CatalogError(f"Invalid role '{role_id}':\n{e}") from e
            if role.level_max is not None and role.level_max < manifest.level_min:
                raise CatalogError(
                    f"Role '{role_id}' level_max ({role.level_max}) is below "
                    f"the campaign level_min ({manifest.level_min})"
                )
            roles[role_id] = role
            role_ids.append(role_id)

        blocks.append(
            Block(
                id=block_id,
                name=block_def.name,
                description=block_def.description,
                roles=role_ids,
            )
        )

    return blocks, roles


def _delta_bounds(roles: List[Role], system: System) -> Tuple[int, int]:
    """Lowest and highest summed level delta any selection could produce."""
    role_levels = [r.mods.level for r in roles] or [0]
    low, high = min(role_levels), max(role_levels)
    for field in ("race", "class", "location", "armor", "weapon"):
        levels = [e.mods.level for e in system.kind(field).values()]
        if field in ("armor", "weapon"):
            levels.append(0)
        if levels:
            low += min(levels)
            high += max(levels)
    for trait in system.traits.values():
        low += min(trait.mods.level, 0)
        high += max(trait.mods.level, 0)
    return low, high


def level_samples(
    rules: CampaignRules, roles: Iterable[Role], system: System
) -> Iterator[Dict[str, int]]:
    """
    Formula inputs to check at load time: every base/level_max pair the
    roles produce, crossed with every delta the catalog can reach (and at
    least -level_max..level_max).
    """
    roles = list(roles)
    settings = {}
    for role in [None] + roles:
        names = rules.level_names(role)
        settings[(names["base"], names["level_max"])] = role

    low, high = _delta_bounds(roles, system)
    low = min(low, -rules.level_max)
    high = max(high, rules.level_max)
    for role in settings.values():
        for delta in range(low, high + 1):
            yield rules.level_names(role, delta)


def _check_previews(system: System, assets_path: Path) -> None:
    for kind, entity_id, info in system.entities():
        if not info.preview:
            continue
        if (assets_path / info.preview).exists():
            logger.debug(f"Found preview file {info.preview}")
        else:
            logger.warning(f"Missing preview file {info.preview} for {kind}/{entity_id}")


def load_campaign(
    data_path: PathLike,
    campaign_id: str,
    assets_path: Optional[PathLike] = None,
) -> Campaign:
    data_path = Path(data_path)
    campaign_path = data_path / "campaigns" / campaign_id
    if not campaign_path.is_dir():
        raise CatalogError(f"Campaign directory not found: {campaign_path}")

    logger.info(f"Loading campaign '{campaign_id}' from {campaign_path}")

    raw_manifest = _read_json(campaign_path / "manifest.json")
    try:
        manifest = ManifestFile.model_validate(raw_manifest)
    except ValidationError as e:
        raise CatalogError(f"Invalid manifest for campaign '{campaign_id}':\n{e}") from e

    system = load_system(
        [
            campaign_path / "system.json",
            campaign_path / "system",
            data_path / "shared",
        ]
    )

    if assets_path is not None:
        _check_previews(system, Path(assets_path))

    info_path = campaign_path / "info.md"
    if info_path.exists():
        description = info_path.read_text(encoding="utf-8")
    else:
        description = manifest.description or ""

    blocks, roles = _compile_roles(manifest)
    rules = CampaignRules(
        **{name: getattr(manifest, name) for name in CampaignRules.model_fields}
    )

    error = validate_formula(
        rules.level_formula, samples=level_samples(rules, roles.values(), system)
    )
    if error:
        raise CatalogError(f"Campaign '{campaign_id}' level_formula: {error}")

    campaign = Campaign(
        id=campaign_id,
        name=manifest.name,
        description=description,
        rules=rules,
        system=system,
        blocks=blocks,
        roles=roles,
    )
    logger.info(
        f"Campaign '{campaign_id}' ready: {system.size()} entities, "
        f"{len(roles)} roles in {len(blocks)} blocks"
    )
    return campaign
