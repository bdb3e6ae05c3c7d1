"""LLM provider registry and model-handle factories."""

from lazyshell.providers.model import ModelConfig
from lazyshell.providers.registry import (
    PROVIDERS,
    ProviderDescriptor,
    get_api_key_from_env,
    get_available_providers,
    get_provider,
    resolve,
)

__all__ = [
    "PROVIDERS",
    "ModelConfig",
    "ProviderDescriptor",
    "get_api_key_from_env",
    "get_available_providers",
    "get_provider",
    "resolve",
]
