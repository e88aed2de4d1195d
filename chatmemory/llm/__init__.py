"""Completion service abstraction and model registry."""

from .base import CompletionService, ContextEntry, Prompt, Speaker
from .model_registry import DEFAULT_MODEL, ModelRegistry, ResolvedModelConfig

__all__ = [
    "CompletionService",
    "ContextEntry",
    "DEFAULT_MODEL",
    "ModelRegistry",
    "Prompt",
    "ResolvedModelConfig",
    "Speaker",
]
