"""Secret accessor facade.

Accounts:
- gemini_api_key (proxy process only)
- telegram_bot_token (bot process only)
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from finplan.config.settings import SecretsConfig
from finplan.secrets.base import SecretStoreError, optional_secret, require_secret
from finplan.secrets.factory import create_secret_store

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotSecrets:
    telegram_bot_token: str


@dataclass(frozen=True)
class ProxySecrets:
    gemini_api_key: Optional[str]


def load_bot_secrets(config: SecretsConfig) -> BotSecrets:
    store = create_secret_store(backend=config.backend, service_name=config.service_name)
    return BotSecrets(telegram_bot_token=require_secret(store, "telegram_bot_token"))


def load_proxy_secrets(config: SecretsConfig) -> ProxySecrets:
    # A missing key does not block startup; each plan request reports it instead.
    store = create_secret_store(backend=config.backend, service_name=config.service_name)
    api_key = optional_secret(store, "gemini_api_key")
    if api_key is None:
        LOGGER.warning("gemini_api_key is not configured (backend=%s)", config.backend)
    return ProxySecrets(gemini_api_key=api_key)


__all__ = ["BotSecrets", "ProxySecrets", "load_bot_secrets", "load_proxy_secrets", "SecretStoreError"]
