"""FastAPI application for the chat memory API.

This module provides the main FastAPI application with:
- Lifespan management for store, cache and completion clients
- CORS middleware
- Route registration
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .dependencies import MemoryDep
from .infrastructure import (
    AKV,
    AsyncPostgreSQLBackend,
    AsyncRedisPersonaCache,
    EnvSecrets,
    InMemoryBackend,
    StorageBackend,
)
from .infrastructure.keyvault import (
    OPENAI_API_KEY_SECRET,
    POSTGRES_PASSWORD_SECRET,
    REDIS_PASSWORD_SECRET,
)
from .llm import ModelRegistry
from .memory import build_memory
from .routes import chat, memory, personality

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_secrets(app_settings: Settings):
    """Return a secret source: Key Vault when configured, else the environment."""
    if app_settings.key_vault_name:
        names = [POSTGRES_PASSWORD_SECRET, OPENAI_API_KEY_SECRET]
        if app_settings.redis_host:
            names.append(REDIS_PASSWORD_SECRET)
        akv = AKV(vault_name=app_settings.key_vault_name)
        akv.load_secrets(names)
        return akv

    return EnvSecrets(
        {
            POSTGRES_PASSWORD_SECRET: app_settings.postgres_password,
            REDIS_PASSWORD_SECRET: app_settings.redis_password,
        }
    )


async def create_backend(app_settings: Settings, secrets) -> StorageBackend:
    """Create the durable store selected by STORAGE_MODE."""
    if app_settings.storage_mode == "memory":
        logger.warning("Using in-memory storage; nothing survives a restart")
        return InMemoryBackend()

    backend = AsyncPostgreSQLBackend()
    await backend.connect(
        app_settings.get_postgres_connection_string(secrets.get_secret(POSTGRES_PASSWORD_SECRET))
    )
    if app_settings.postgres_init_schema:
        await backend.init_schema()
    return backend


async def create_persona_cache(app_settings: Settings, secrets) -> Optional[AsyncRedisPersonaCache]:
    """Connect the Redis persona cache, or return None when it is unavailable."""
    if not app_settings.redis_host:
        logger.info("Redis not configured, running without persona cache")
        return None

    cache = AsyncRedisPersonaCache()
    try:
        await cache.connect(
            redis_host=app_settings.redis_host,
            redis_password=secrets.get_secret(REDIS_PASSWORD_SECRET),
            redis_port=app_settings.redis_port,
            redis_ssl=app_settings.redis_ssl,
            redis_ttl=app_settings.redis_ttl_seconds,
        )
    except RuntimeError as e:
        logger.warning(f"Redis cache unavailable, continuing without cache: {e}")
        return None
    return cache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan for shared clients.

    Clients are constructed once here, stored on app.state and shared by
    every request. Pending memory maintenance is awaited on shutdown.
    """
    # Imported here so the API can be built without the agent SDK (tests)
    from .llm.agent_client import create_completion_service

    app_settings = get_settings()
    logger.info(f"Starting application with storage mode: {app_settings.storage_mode}")

    secrets = load_secrets(app_settings)
    backend = await create_backend(app_settings, secrets)
    persona_cache = await create_persona_cache(app_settings, secrets)

    registry = ModelRegistry(secrets.get_secret)
    completion = create_completion_service(registry, app_settings.default_model)

    app.state.memory = build_memory(backend, completion, app_settings, persona_cache)

    yield

    logger.info("Shutting down application")
    await app.state.memory.scheduler.drain()
    if persona_cache:
        await persona_cache.close()
    await backend.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Chat Memory API",
        description="Chat API with rolling conversation summaries and salient user facts",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat.router, prefix="/api", tags=["chat"])
    app.include_router(personality.router, prefix="/api", tags=["personality"])
    app.include_router(memory.router, prefix="/api", tags=["memory"])

    @app.get("/health")
    async def health_check(memory_components: MemoryDep):
        """Health check endpoint with background maintenance counters."""
        return {"status": "healthy", "background": memory_components.scheduler.stats()}

    return app


# Create the app instance
app = create_app()
