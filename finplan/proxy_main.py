"""finplan plan request proxy entrypoint (the only process holding the Gemini key)."""

from __future__ import annotations

import argparse
import logging

import uvicorn
from fastapi import FastAPI

from finplan.config.logging_setup import configure_logging
from finplan.config.secrets import load_proxy_secrets
from finplan.config.settings import Settings, SettingsLoadError, load_settings, resolve_config_path
from finplan.proxy.server import create_app
from finplan.proxy.service import PlanRequestProxy
from finplan.secrets.base import SecretStoreError


def build_app(settings: Settings) -> FastAPI:
    secrets = load_proxy_secrets(settings.secrets)
    proxy = PlanRequestProxy(
        api_key=secrets.gemini_api_key,
        model=settings.proxy.model,
        api_base_url=settings.proxy.api_base_url,
        timeout_seconds=settings.proxy.timeout_seconds,
    )
    return create_app(proxy, plan_route=settings.proxy.route)


def main() -> int:
    parser = argparse.ArgumentParser(description="finplan plan request proxy")
    parser.add_argument("--settings", help="Path to settings.yaml (default: config/settings.yaml)")
    parser.add_argument("--host", help="Bind host (overrides proxy.host)")
    parser.add_argument("--port", type=int, help="Bind port (overrides proxy.port)")
    args = parser.parse_args()

    settings_path = resolve_config_path(args.settings, "FINPLAN_SETTINGS_PATH", "settings.yaml")
    try:
        settings = load_settings(settings_path)
    except SettingsLoadError as exc:
        print(
            "Startup failed: settings are invalid.\n"
            f"- settings: {settings_path}\n"
            f"- detail: {exc}"
        )
        return 2

    configure_logging(settings.logging.level)
    host = args.host or settings.proxy.host
    port = args.port or settings.proxy.port
    logging.info(
        "starting proxy settings=%s host=%s port=%s route=%s model=%s",
        settings_path,
        host,
        port,
        settings.proxy.route,
        settings.proxy.model,
    )

    try:
        app = build_app(settings)
    except SecretStoreError as exc:
        logging.error("startup blocked by secret store: %s", exc)
        print(
            "Startup failed: secret store is unavailable.\n"
            f"- secret backend: {settings.secrets.backend}\n"
            f"- detail: {exc}"
        )
        return 2

    uvicorn.run(app, host=host, port=port, log_level=settings.logging.level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
