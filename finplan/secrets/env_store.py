"""Environment variable secret adapter."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from finplan.secrets.base import SecretStore, SecretStoreError


class EnvSecretStore(SecretStore):
    """Reads account ``gemini_api_key`` from ``GEMINI_API_KEY`` and so on."""

    backend_name = "env"

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ if environ is not None else os.environ

    @staticmethod
    def variable_name(account: str) -> str:
        return account.strip().upper()

    def get_secret(self, account: str) -> str:
        name = self.variable_name(account)
        value = (self._environ.get(name) or "").strip()
        if not value:
            raise SecretStoreError(f"missing environment secret '{name}'")
        return value
