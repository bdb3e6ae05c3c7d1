"""Model resolution: persisted configuration first, environment second."""

import logging
import os
from typing import Mapping, Optional

from lazyshell.core.configs import PersistedConfig
from lazyshell.exceptions import ConfigurationError, NoProviderAvailableError
from lazyshell.providers.model import ModelConfig
from lazyshell.providers.registry import PROVIDERS, resolve

logger = logging.getLogger(__name__)

# Providers tried by from_environment(), in order. The local provider
# needs no key and is only used when none of these is configured.
ENVIRONMENT_PRIORITY = ("groq", "google", "openrouter", "anthropic", "openai")
LOCAL_FALLBACK_PROVIDER = "ollama"


def supported_env_vars() -> list[str]:
    """Environment variables consulted by from_environment(), in order."""
    return [PROVIDERS[key].api_key_env_var for key in ENVIRONMENT_PRIORITY]


def from_persisted_config(
    config: PersistedConfig, environ: Optional[Mapping[str, str]] = None
) -> ModelConfig:
    """
    Resolve the model described by the persisted configuration.

    Raises:
        ConfigurationError: If the registry cannot resolve it.
    """
    return resolve(
        config.provider,
        model_id=config.model,
        base_url=config.base_url,
        api_key=config.api_key,
        environ=environ,
    )


def from_environment(environ: Optional[Mapping[str, str]] = None) -> ModelConfig:
    """
    Pick the first provider whose API key is present in the environment.

    Falls back to the local Ollama provider when no key is set.

    Raises:
        NoProviderAvailableError: If even the local provider cannot be built.
    """
    environ = os.environ if environ is None else environ

    for provider_key in ENVIRONMENT_PRIORITY:
        env_var = PROVIDERS[provider_key].api_key_env_var
        if environ.get(env_var):
            logger.debug(f"Using {provider_key} from {env_var}")
            return resolve(provider_key, environ=environ)

    try:
        return resolve(LOCAL_FALLBACK_PROVIDER, environ=environ)
    except ConfigurationError as e:
        raise NoProviderAvailableError(
            "No API key found. Please set one of "
            f"{', '.join(supported_env_vars())}, or set up Ollama/LM Studio. "
            f"({e})"
        ) from e


def resolve_model_config(
    config: Optional[PersistedConfig], environ: Optional[Mapping[str, str]] = None
) -> ModelConfig:
    """
    Resolve a model with the standard fallback chain.

    A missing config, or one the registry rejects, falls back to
    from_environment(). Resolution keeps no state, so the fallback starts
    clean.
    """
    if config is None:
        logger.info("No configuration found, resolving from environment")
        return from_environment(environ)

    try:
        return from_persisted_config(config, environ)
    except ConfigurationError as e:
        logger.warning(f"Configuration error: {e}")
        logger.warning(
            "Falling back to environment variables "
            f"({', '.join(supported_env_vars())})"
        )
        return from_environment(environ)
