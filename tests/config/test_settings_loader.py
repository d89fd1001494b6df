from pathlib import Path

import pytest
import yaml

from finplan.config.settings import SettingsLoadError, load_settings, resolve_config_path


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(data, allow_unicode=False), encoding="utf-8")
    return path


def _shipped() -> dict:
    return yaml.safe_load(Path("config/settings.yaml").read_text(encoding="utf-8"))


def test_shipped_settings_load() -> None:
    settings = load_settings(Path("config/settings.yaml"))
    assert settings.proxy.route == "/api/plan"
    assert settings.proxy.model == "gemini-2.5-flash-preview-05-20"
    assert settings.bot.proxy_url.endswith(settings.proxy.route)
    assert settings.secrets.backend == "env"
    assert settings.logging.level == "INFO"


def test_settings_defaults_for_optional_sections(tmp_path: Path) -> None:
    settings = load_settings(_write(tmp_path, {"version": "1"}))
    assert settings.proxy.port == 8787
    assert settings.proxy.timeout_seconds == 30
    assert settings.bot.request_timeout_seconds == 60
    assert settings.secrets.service_name == "finplan"


def test_settings_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SettingsLoadError):
        load_settings(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    ("section", "key", "value"),
    [
        ("secrets", "backend", "vault"),
        ("proxy", "timeout_seconds", 0),
        ("proxy", "route", "api/plan"),
        ("proxy", "port", 70000),
        ("bot", "proxy_url", "ftp://example.test/plan"),
        ("logging", "level", "CHATTY"),
    ],
)
def test_settings_rejects_invalid_values(tmp_path: Path, section: str, key: str, value: object) -> None:
    data = _shipped()
    data[section][key] = value
    with pytest.raises(SettingsLoadError):
        load_settings(_write(tmp_path, data))


def test_resolve_config_path_prefers_cli_then_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FINPLAN_SETTINGS_PATH", str(tmp_path / "env.yaml"))
    assert resolve_config_path("cli.yaml", "FINPLAN_SETTINGS_PATH", "settings.yaml") == Path("cli.yaml")
    assert resolve_config_path(None, "FINPLAN_SETTINGS_PATH", "settings.yaml") == tmp_path / "env.yaml"

    monkeypatch.delenv("FINPLAN_SETTINGS_PATH")
    monkeypatch.setenv("FINPLAN_WORKSPACE_ROOT", str(tmp_path))
    assert resolve_config_path(None, "FINPLAN_SETTINGS_PATH", "settings.yaml") == tmp_path / "config" / "settings.yaml"
