from .assembly import merge_systems
from .loader import load_campaign, load_system, load_system_file, name_to_id
from .registry import CampaignRegistry, discover_campaigns

__all__ = [
    "merge_systems",
    "load_campaign",
    "load_system",
    "load_system_file",
    "name_to_id",
    "CampaignRegistry",
    "discover_campaigns",
]
