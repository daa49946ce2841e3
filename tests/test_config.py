from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.business_timezone == "America/Mexico_City"
    assert settings.watch_catalog is True


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSINESS_TIMEZONE", "Europe/Madrid")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.business_timezone == "Europe/Madrid"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"business_timezone": "Nowhere/Special"},
        {"environment": "qa"},
        {"log_level": "chatty"},
        {"port": 0},
    ],
)
def test_invalid_settings_are_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
