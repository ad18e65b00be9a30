"""
Runtime settings read from the environment.

``load_dotenv()`` is called by the entry point, so values may also come
from a ``.env`` file in the working directory.
"""

import os
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_path: Path
    assets_path: Optional[Path] = None
    campaigns: Optional[List[str]] = None
    log_level: str = "INFO"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    data_path = env.get("TERRA_DATA_PATH")
    if not data_path:
        raise ValueError("TERRA_DATA_PATH environment variable not set.")

    assets_path = env.get("TERRA_ASSETS_PATH") or None

    campaigns = None
    raw_campaigns = env.get("TERRA_CAMPAIGNS")
    if raw_campaigns:
        campaigns = [c.strip() for c in raw_campaigns.split(",") if c.strip()]

    return Settings(
        data_path=data_path,
        assets_path=assets_path,
        campaigns=campaigns,
        log_level=env.get("TERRA_LOG_LEVEL") or "INFO",
    )
