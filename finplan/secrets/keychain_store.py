"""OS credential store adapter (macOS Keychain, Windows Credential Manager, Secret Service)."""

from __future__ import annotations

import importlib

from finplan.secrets.base import SecretStore, SecretStoreError


class KeychainSecretStore(SecretStore):
    backend_name = "keychain"

    def __init__(self, service_name: str) -> None:
        if not (service_name or "").strip():
            raise SecretStoreError("credential store service name must not be empty")
        self.service_name = service_name
        try:
            self._keyring = importlib.import_module("keyring")
        except Exception as exc:  # pragma: no cover - keyring is a declared dependency
            raise SecretStoreError("keyring package is required for the keychain backend") from exc

    def get_secret(self, account: str) -> str:
        try:
            value = self._keyring.get_password(self.service_name, account)
        except Exception as exc:
            raise SecretStoreError(
                f"failed to read '{account}' from credential store service '{self.service_name}'"
            ) from exc
        if not value:
            raise SecretStoreError(f"no '{account}' entry under credential store service '{self.service_name}'")
        return value
