import argparse
import json
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from terra.catalog.registry import CampaignRegistry
from terra.errors import CatalogError, InvalidInput
from terra.io.records import character_row, form_row
from terra.models.creation import Selection
from terra.models.entities import Gender
from terra.services.character_builder import resolve
from terra.settings import load_settings
from terra.utils.logger_config import setup_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Resolve a character selection against a campaign catalog."
    )
    parser.add_argument("campaign", help="Campaign id (directory under <data>/campaigns)")
    parser.add_argument("selection", help="Path to the selection JSON file")
    parser.add_argument(
        "--gender",
        choices=[g.value for g in Gender],
        default=Gender.MALE.value,
        help="Character gender (default: male)",
    )
    parser.add_argument(
        "--role-holders",
        type=int,
        default=0,
        help="Characters already holding the selected role",
    )
    return parser.parse_args(argv)


def bad_request(cause: str) -> int:
    print(json.dumps({"error": "bad_request", "cause": cause}, ensure_ascii=False))
    return 1


def run(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(settings.log_level)

    settings = settings.model_copy(update={"campaigns": [args.campaign]})
    try:
        registry = CampaignRegistry.load(settings)
    except CatalogError as e:
        print(f"Failed to load campaign: {e}", file=sys.stderr)
        return 2
    campaign = registry.get(args.campaign)

    try:
        with open(args.selection, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read selection {args.selection}: {e}", file=sys.stderr)
        return 2
    try:
        selection = Selection.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]["loc"]
        return bad_request(str(first[0]) if first else "selection")

    try:
        data = resolve(campaign, args.gender, selection, args.role_holders)
    except InvalidInput as e:
        return bad_request(e.field)

    output = {"character": character_row(data), "form": form_row(data, campaign.id)}
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    load_dotenv()
    sys.exit(run())
