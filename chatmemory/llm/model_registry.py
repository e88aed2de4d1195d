"""Model registry with centralized, typed model definitions.

This module provides:
- AzOpenAIEnvSettings: Environment-based Azure OpenAI settings
- ModelDefinition: Immutable model configuration dataclass
- ModelRegistry: Resolves model configurations with their API keys
"""

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class AzOpenAIEnvSettings(BaseSettings):
    """Azure OpenAI configuration from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    azure_openai_api_key: str = ""
    azure_openai_endpoint: str = ""
    azure_openai_deployment_name: str = ""


@dataclass(frozen=True)
class ModelDefinition:
    """Immutable model configuration."""

    name: str
    display_name: str
    deployment_name: str
    secret_name: str


GPT41 = ModelDefinition(
    name="gpt-4.1",
    display_name="GPT 4.1",
    deployment_name="gpt-4.1",
    secret_name="AZURE-OPENAI-API-KEY",
)

GPT41_MINI = ModelDefinition(
    name="gpt-4.1-mini",
    display_name="GPT 4.1 Mini",
    deployment_name="gpt-4.1-mini",
    secret_name="AZURE-OPENAI-API-KEY",
)

AVAILABLE_MODELS: list[ModelDefinition] = [GPT41, GPT41_MINI]

ModelName = Literal["gpt-4.1", "gpt-4.1-mini"]

DEFAULT_MODEL: ModelName = GPT41_MINI.name  # type: ignore[assignment]


@dataclass(frozen=True)
class ResolvedModelConfig:
    """Resolved model configuration with API credentials."""

    deployment_name: str
    endpoint: str
    api_key: str


class ModelRegistry:
    """Resolves model names to deployments and credentials.

    Build once in the app lifespan and store in app.state.
    """

    def __init__(
        self,
        secret_lookup: Callable[[str], str],
        endpoint: Optional[str] = None,
    ):
        """Initialize registry and load required secrets.

        Args:
            secret_lookup: Returns a secret value by name (Key Vault or env)
            endpoint: Azure OpenAI endpoint, defaults to AZURE_OPENAI_ENDPOINT
        """
        self.endpoint = endpoint or AzOpenAIEnvSettings().azure_openai_endpoint
        self._secrets: dict[str, str] = {}
        for model in AVAILABLE_MODELS:
            if model.secret_name not in self._secrets:
                self._secrets[model.secret_name] = secret_lookup(model.secret_name)
        self._models = {m.name: m for m in AVAILABLE_MODELS}

    def get(self, model_name: str) -> ResolvedModelConfig:
        """Get resolved model config by name.

        Raises:
            KeyError: If the model is not registered
        """
        model = self._models[model_name]
        return ResolvedModelConfig(
            deployment_name=model.deployment_name,
            endpoint=self.endpoint,
            api_key=self._secrets[model.secret_name],
        )
