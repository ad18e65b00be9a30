from pathlib import Path

import pytest

from terra.settings import load_settings


def test_data_path_required():
    with pytest.raises(ValueError, match="TERRA_DATA_PATH"):
        load_settings({})


def test_defaults():
    settings = load_settings({"TERRA_DATA_PATH": "/srv/terra"})
    assert settings.data_path == Path("/srv/terra")
    assert settings.assets_path is None
    assert settings.campaigns is None
    assert settings.log_level == "INFO"


def test_all_values():
    settings = load_settings(
        {
            "TERRA_DATA_PATH": "/srv/terra",
            "TERRA_ASSETS_PATH": "/srv/static",
            "TERRA_CAMPAIGNS": "frontier, , north ",
            "TERRA_LOG_LEVEL": "DEBUG",
        }
    )
    assert settings.assets_path == Path("/srv/static")
    assert settings.campaigns == ["frontier", "north"]
    assert settings.log_level == "DEBUG"


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("TERRA_DATA_PATH", "/from/env")
    monkeypatch.delenv("TERRA_CAMPAIGNS", raising=False)
    assert load_settings().data_path == Path("/from/env")
