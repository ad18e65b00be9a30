"""
Campaign Registry
=================
The loaded campaigns, built once at startup and passed explicitly to whatever
resolves characters. Nothing in here is mutated after ``load`` returns.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from terra.catalog.loader import load_campaign
from terra.errors import CatalogError
from terra.models.campaign import Campaign
from terra.settings import Settings

logger = logging.getLogger(__name__)


def discover_campaigns(data_path: Path) -> List[str]:
    """Every directory under ``<data>/campaigns``, sorted."""
    root = Path(data_path) / "campaigns"
    if not root.is_dir():
        raise CatalogError(f"No campaigns directory under {data_path}")
    return sorted(p.name for p in root.iterdir() if p.is_dir())


class CampaignRegistry:
    def __init__(self, campaigns: Iterable[Campaign] = ()):
        self._campaigns: Dict[str, Campaign] = {}
        for campaign in campaigns:
            if campaign.id in self._campaigns:
                raise CatalogError(f"Campaign '{campaign.id}' registered twice")
            self._campaigns[campaign.id] = campaign

    @classmethod
    def load(cls, settings: Settings) -> "CampaignRegistry":
        ids = settings.campaigns
        if ids is None:
            ids = discover_campaigns(settings.data_path)
        logger.info(f"Loading {len(ids)} campaign(s) from {settings.data_path}")
        return cls(
            load_campaign(settings.data_path, campaign_id, settings.assets_path)
            for campaign_id in ids
        )

    def get(self, campaign_id: str) -> Campaign:
        try:
            return self._campaigns[campaign_id]
        except KeyError:
            raise KeyError(f"Unknown campaign: {campaign_id}") from None

    def find(self, campaign_id: str) -> Optional[Campaign]:
        return self._campaigns.get(campaign_id)

    def ids(self) -> List[str]:
        return list(self._campaigns)

    def __contains__(self, campaign_id: object) -> bool:
        return campaign_id in self._campaigns

    def __iter__(self) -> Iterator[Campaign]:
        return iter(self._campaigns.values())

    def __len__(self) -> int:
        return len(self._campaigns)
