"""Infrastructure layer for external service integrations."""

from .base import StorageBackend
from .inmemory import InMemoryBackend
from .keyvault import AKV, EnvSecrets
from .postgresql import AsyncPostgreSQLBackend
from .redis import AsyncRedisPersonaCache

__all__ = [
    "AKV",
    "AsyncPostgreSQLBackend",
    "AsyncRedisPersonaCache",
    "EnvSecrets",
    "InMemoryBackend",
    "StorageBackend",
]
