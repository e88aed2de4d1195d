"""Secret loading from Azure Key Vault or the environment."""

import os
import logging
from typing import Optional

from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

logger = logging.getLogger(__name__)

# Secret names shared by Key Vault and the environment fallback
POSTGRES_PASSWORD_SECRET = "POSTGRES-ADMIN-PASSWORD"
REDIS_PASSWORD_SECRET = "REDIS-PASSWORD"
OPENAI_API_KEY_SECRET = "AZURE-OPENAI-API-KEY"


class AKV:
    """Azure Key Vault client with pre-loaded secrets.

    Secrets are loaded once at startup and kept for the process lifetime.
    Uses DefaultAzureCredential (Azure CLI locally, Managed Identity in Azure).
    """

    def __init__(self, vault_name: Optional[str] = None):
        """Initialize Key Vault client.

        Args:
            vault_name: Key Vault name. Defaults to AZURE_KEYVAULT_NAME env var.
        """
        self.vault_name = vault_name or os.getenv("AZURE_KEYVAULT_NAME")
        if not self.vault_name:
            raise ValueError("vault_name required or set AZURE_KEYVAULT_NAME")

        self.vault_url = f"https://{self.vault_name}.vault.azure.net/"
        self._client = SecretClient(vault_url=self.vault_url, credential=DefaultAzureCredential())
        self._secrets: dict[str, str] = {}

    def load_secrets(self, names: list[str]) -> None:
        """Pre-load secrets, failing fast if any is missing or empty.

        Raises:
            ValueError: If any secret is not found or has no value
        """
        for name in names:
            try:
                secret = self._client.get_secret(name)
                if secret.value is None:
                    raise ValueError(f"Secret '{name}' has no value")
                self._secrets[name] = secret.value
                logger.info(f"Loaded secret: {name}")
            except Exception as e:
                raise ValueError(f"Failed to load secret '{name}': {e}") from e

    def get_secret(self, name: str) -> str:
        """Get a pre-loaded secret by name.

        Raises:
            KeyError: If secret was not pre-loaded
        """
        if name not in self._secrets:
            raise KeyError(f"Secret '{name}' not pre-loaded")
        return self._secrets[name]


class EnvSecrets:
    """Secret lookup backed by environment variables.

    `AZURE-OPENAI-API-KEY` is read from `AZURE_OPENAI_API_KEY`, and so on.
    Explicit overrides win over the environment.
    """

    def __init__(self, overrides: Optional[dict[str, str]] = None):
        self._overrides = {k: v for k, v in (overrides or {}).items() if v}

    def get_secret(self, name: str) -> str:
        if name in self._overrides:
            return self._overrides[name]
        return os.getenv(name.replace("-", "_"), "")
