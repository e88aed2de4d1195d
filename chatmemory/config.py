"""FastAPI application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from chatmemory.llm.model_registry import DEFAULT_MODEL

DEFAULT_PERSONALITY = "You are a helpful AI assistant. Be concise and clear in your responses."


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage mode: "postgres" or "memory" (process-local, for development)
    storage_mode: Literal["postgres", "memory"] = "postgres"

    # PostgreSQL configuration
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_admin_login: str = "postgres"
    postgres_password: str = ""
    postgres_database: str = "chat_memory"
    postgres_sslmode: str = "prefer"
    postgres_init_schema: bool = False

    # Redis persona cache (disabled when redis_host is empty)
    redis_host: Optional[str] = None
    redis_port: int = 6380
    redis_ssl: bool = True
    redis_password: str = ""
    redis_ttl_seconds: int = 1800

    # Azure Key Vault (secrets come from env when unset)
    key_vault_name: Optional[str] = None

    # Default model (from registry, can be overridden via env)
    default_model: str = DEFAULT_MODEL

    # Memory policy (counts are turns, both roles included)
    recent_history_window: int = 10
    max_messages_for_summary: int = 50
    summary_threshold: int = 40
    salient_extraction_interval: int = 5
    salient_extraction_window: int = 10
    summary_strategy: Literal["regenerate", "merge"] = "regenerate"
    fact_matching: Literal["exact", "normalized"] = "exact"
    default_persona: str = DEFAULT_PERSONALITY

    # Reply path only; background work is never timed out
    reply_timeout_seconds: Optional[float] = None

    # Number of background failures kept for /health
    background_failure_log_size: int = 100

    def get_postgres_connection_string(self, password: str) -> str:
        """Build PostgreSQL connection string.

        Args:
            password: PostgreSQL password (from env or Key Vault)

        Returns:
            PostgreSQL connection string
        """
        return (
            f"postgresql://{self.postgres_admin_login}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}"
            f"/{self.postgres_database}?sslmode={self.postgres_sslmode}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
