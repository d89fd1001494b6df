"""Secret store factory based on configured backend."""

from __future__ import annotations

from finplan.secrets.base import SecretStore, SecretStoreError
from finplan.secrets.env_store import EnvSecretStore
from finplan.secrets.keychain_store import KeychainSecretStore


def create_secret_store(backend: str = "env", service_name: str = "finplan") -> SecretStore:
    kind = (backend or "").strip().lower()
    if kind == "env":
        return EnvSecretStore()
    if kind == "keychain":
        return KeychainSecretStore(service_name=service_name)
    raise SecretStoreError(f"unsupported secret backend: {backend} (supported: env, keychain)")
