from pathlib import Path

import pytest

from sora_engine.config import EngineSettings


def test_settings_load_defaults() -> None:
    settings = EngineSettings()
    assert settings.logging.level
    assert settings.cache.enabled
    assert settings.cache.max_entries >= 1


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SORA_CACHE__MAX_ENTRIES", "12")
    monkeypatch.setenv("SORA_LOGGING__JSON", "false")
    settings = EngineSettings()
    assert settings.cache.max_entries == 12
    assert settings.logging.json is False


def test_settings_from_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "engine.toml"
    config_path.write_text('[logging]\nlevel = "DEBUG"\n\n[cache]\nenabled = false\n')
    settings = EngineSettings.from_toml(config_path)
    assert settings.logging.level == "DEBUG"
    assert not settings.cache.enabled
