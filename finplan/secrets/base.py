"""Secret store contract.

The Gemini API key and the Telegram bot token come from the process
environment or the OS credential store, never from the YAML config files.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class SecretStoreError(RuntimeError):
    """Raised when a secret is missing or its backend cannot be read."""


class SecretStore(ABC):
    backend_name = "unknown"

    @abstractmethod
    def get_secret(self, account: str) -> str:
        """Return the secret for ``account`` or raise SecretStoreError."""


def require_secret(store: SecretStore, account: str) -> str:
    value = store.get_secret(account)
    if not value:
        raise SecretStoreError(f"{store.backend_name} secret '{account}' is empty")
    return value


def optional_secret(store: SecretStore, account: str) -> Optional[str]:
    try:
        return store.get_secret(account) or None
    except SecretStoreError:
        return None
