"""Settings loader for finplan (config/settings.yaml)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Any, Optional
from urllib.parse import urlparse

import yaml

from finplan.adapters.gemini_http import DEFAULT_API_BASE_URL, DEFAULT_MODEL

SECRET_BACKENDS = {"env", "keychain"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ProxyConfig:
    host: str
    port: int
    route: str
    model: str
    api_base_url: str
    timeout_seconds: int


@dataclass(frozen=True)
class BotConfig:
    proxy_url: str
    request_timeout_seconds: int


@dataclass(frozen=True)
class SecretsConfig:
    backend: str
    service_name: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str


@dataclass(frozen=True)
class Settings:
    version: str
    proxy: ProxyConfig
    bot: BotConfig
    secrets: SecretsConfig
    logging: LoggingConfig


class SettingsLoadError(RuntimeError):
    """Raised when settings cannot be loaded."""


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise SettingsLoadError(f"missing required settings key: {key}")
    return data[key]


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"{key} must be an object")
    return value


def _positive_int(value: Any, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsLoadError(f"{key} must be an integer") from exc
    if number <= 0:
        raise SettingsLoadError(f"{key} must be > 0")
    return number


def _http_url(value: Any, key: str) -> str:
    url = str(value or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise SettingsLoadError(f"{key} must be an http(s) URL: {url!r}")
    return url


def load_settings(path: Path) -> Settings:
    if not path.exists():
        raise SettingsLoadError(f"settings file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsLoadError(f"settings file is not valid YAML: {path}") from exc
    if not isinstance(raw, dict):
        raise SettingsLoadError("settings root must be an object")

    proxy_raw = _section(raw, "proxy")
    bot_raw = _section(raw, "bot")
    secrets_raw = _section(raw, "secrets")
    logging_raw = _section(raw, "logging")

    route = str(proxy_raw.get("route", "/api/plan")).strip()
    if not route.startswith("/"):
        raise SettingsLoadError("proxy.route must start with '/'")

    model = str(proxy_raw.get("model", DEFAULT_MODEL)).strip()
    if not model:
        raise SettingsLoadError("proxy.model must not be empty")

    port = _positive_int(proxy_raw.get("port", 8787), "proxy.port")
    if port > 65535:
        raise SettingsLoadError("proxy.port must be <= 65535")

    backend = str(secrets_raw.get("backend", "env")).strip().lower()
    if backend not in SECRET_BACKENDS:
        raise SettingsLoadError(f"invalid secrets.backend: {backend}")

    service_name = str(secrets_raw.get("service_name", "finplan")).strip()
    if not service_name:
        raise SettingsLoadError("secrets.service_name must not be empty")

    level = str(logging_raw.get("level", "INFO")).strip().upper()
    if level not in LOG_LEVELS:
        raise SettingsLoadError(f"invalid logging.level: {level}")

    return Settings(
        version=str(_require(raw, "version")),
        proxy=ProxyConfig(
            host=str(proxy_raw.get("host", "127.0.0.1")).strip() or "127.0.0.1",
            port=port,
            route=route,
            model=model,
            api_base_url=_http_url(proxy_raw.get("api_base_url", DEFAULT_API_BASE_URL), "proxy.api_base_url"),
            timeout_seconds=_positive_int(proxy_raw.get("timeout_seconds", 30), "proxy.timeout_seconds"),
        ),
        bot=BotConfig(
            proxy_url=_http_url(bot_raw.get("proxy_url", "http://127.0.0.1:8787/api/plan"), "bot.proxy_url"),
            request_timeout_seconds=_positive_int(
                bot_raw.get("request_timeout_seconds", 60), "bot.request_timeout_seconds"
            ),
        ),
        secrets=SecretsConfig(backend=backend, service_name=service_name),
        logging=LoggingConfig(level=level),
    )


def workspace_root() -> Path:
    return Path(os.getenv("FINPLAN_WORKSPACE_ROOT", Path(__file__).resolve().parents[2]))


def resolve_config_path(cli_value: Optional[str], env_name: str, default_name: str) -> Path:
    raw = (cli_value or os.getenv(env_name, "")).strip()
    if raw:
        return Path(raw)
    return workspace_root() / "config" / default_name
