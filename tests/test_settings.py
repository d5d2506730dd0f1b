from pathlib import Path

import pytest

from pricer.config.settings import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_defaults_derive_from_project_root(tmp_path, monkeypatch):
    for name in ("PRICER_CATALOGS_DIR", "PRICER_EXPORTS_DIR", "PRICER_COMPANY_NAME", "PRICER_MONEY_PLACES"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.load(tmp_path)

    assert settings.catalogs_dir == tmp_path / "data" / "catalogs"
    assert settings.exports_dir == tmp_path / "data" / "exports"
    assert settings.money_places == 2
    assert settings.default_company_name == ""


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICER_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("PRICER_CATALOGS_DIR", str(tmp_path / "cats"))
    monkeypatch.setenv("PRICER_COMPANY_NAME", "Acme Decks")
    monkeypatch.setenv("PRICER_MONEY_PLACES", "3")
    monkeypatch.setenv("PRICER_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.project_root == Path(tmp_path)
    assert settings.catalogs_dir == tmp_path / "cats"
    assert settings.default_company_name == "Acme Decks"
    assert settings.money_places == 3
    assert settings.log_level == "DEBUG"


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    reset_settings()
    assert get_settings() is not first
