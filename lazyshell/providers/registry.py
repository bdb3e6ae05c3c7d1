"""Provider registry.

A single lookup table maps each provider key to an immutable
``ProviderDescriptor``. Resolution reads credentials from an environment
mapping but never writes to it: keys reach the providers only as factory
arguments.
"""

import logging
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from lazyshell.exceptions import ConfigurationError
from lazyshell.providers import factories
from lazyshell.providers.model import ModelConfig, ModelFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderDescriptor:
    key: str
    name: str
    description: str
    default_model_id: str
    factory: ModelFactory
    api_key_env_var: Optional[str] = None
    base_url: Optional[str] = None
    supports_custom_base_url: bool = False
    max_retries: Optional[int] = None
    api_key_optional: bool = False

    @property
    def requires_api_key(self) -> bool:
        return self.api_key_env_var is not None and not self.api_key_optional


_DESCRIPTORS = (
    ProviderDescriptor(
        key="groq",
        name="Groq",
        description="Groq LLaMA models (fast inference)",
        api_key_env_var="GROQ_API_KEY",
        default_model_id="llama-3.3-70b-versatile",
        base_url="https://api.groq.com/openai/v1",
        factory=factories.build_groq_model,
    ),
    ProviderDescriptor(
        key="google",
        name="Google Gemini",
        description="Google AI Gemini models",
        api_key_env_var="GOOGLE_GENERATIVE_AI_API_KEY",
        default_model_id="gemini-2.0-flash-lite",
        factory=factories.build_google_model,
    ),
    ProviderDescriptor(
        key="openrouter",
        name="OpenRouter",
        description="OpenRouter API (multiple models)",
        api_key_env_var="OPENROUTER_API_KEY",
        default_model_id="google/gemini-2.0-flash-001",
        base_url="https://openrouter.ai/api/v1",
        factory=factories.build_openrouter_model,
    ),
    ProviderDescriptor(
        key="anthropic",
        name="Anthropic Claude",
        description="Anthropic Claude models",
        api_key_env_var="ANTHROPIC_API_KEY",
        default_model_id="claude-3-5-haiku-latest",
        factory=factories.build_anthropic_model,
    ),
    ProviderDescriptor(
        key="openai",
        name="OpenAI",
        description="OpenAI GPT models",
        api_key_env_var="OPENAI_API_KEY",
        default_model_id="gpt-4o-mini",
        factory=factories.build_openai_model,
    ),
    ProviderDescriptor(
        key="ollama",
        name="Ollama (Local)",
        description="Local Ollama instance",
        default_model_id="llama3.2",
        base_url="http://localhost:11434",
        max_retries=1,
        factory=factories.build_ollama_model,
    ),
    ProviderDescriptor(
        key="mistral",
        name="Mistral",
        description="Mistral models",
        api_key_env_var="MISTRAL_API_KEY",
        default_model_id="devstral-small-2505",
        base_url="https://api.mistral.ai/v1",
        factory=factories.build_mistral_model,
    ),
    ProviderDescriptor(
        key="lmstudio",
        name="LM Studio (Local)",
        description="Local LM Studio instance",
        default_model_id="deepseek/deepseek-r1-0528-qwen3-8b",
        base_url="http://localhost:1234/v1",
        supports_custom_base_url=True,
        max_retries=1,
        factory=factories.build_lmstudio_model,
    ),
    ProviderDescriptor(
        key="openaiCompatible",
        name="OpenAI Compatible",
        description="Any OpenAI-compatible API endpoint",
        api_key_env_var="OPENAI_COMPATIBLE_API_KEY",
        api_key_optional=True,
        default_model_id="gpt-3.5-turbo",
        base_url="http://localhost:8000/v1",
        supports_custom_base_url=True,
        max_retries=1,
        factory=factories.build_openai_compatible_model,
    ),
    ProviderDescriptor(
        key="deepinfra",
        name="DeepInfra",
        description="DeepInfra hosted open models",
        api_key_env_var="DEEPINFRA_API_TOKEN",
        default_model_id="Qwen/Qwen2.5-Coder-32B-Instruct",
        factory=factories.build_deepinfra_model,
    ),
)

PROVIDERS: Mapping[str, ProviderDescriptor] = MappingProxyType(
    {descriptor.key: descriptor for descriptor in _DESCRIPTORS}
)


def get_provider(provider_key: str) -> ProviderDescriptor:
    """
    Look up a provider descriptor.

    Raises:
        ConfigurationError: If the provider key is unknown.
    """
    descriptor = PROVIDERS.get(provider_key)
    if descriptor is None:
        supported = ", ".join(PROVIDERS)
        raise ConfigurationError(
            f"Unsupported provider '{provider_key}'. Supported: {supported}."
        )
    return descriptor


def get_available_providers() -> list[str]:
    """Return the supported provider keys in registry order."""
    return list(PROVIDERS)


def get_api_key_from_env(
    provider_key: str, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Return the provider's key from the environment, if it has one."""
    descriptor = get_provider(provider_key)
    if descriptor.api_key_env_var is None:
        return None
    environ = os.environ if environ is None else environ
    return environ.get(descriptor.api_key_env_var) or None


def resolve(
    provider_key: str,
    model_id: Optional[str] = None,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ModelConfig:
    """
    Resolve a provider key into a ready-to-use ModelConfig.

    Args:
        provider_key: Registry key (e.g. "groq", "ollama")
        model_id: Model identifier; the provider default when omitted
        base_url: Endpoint override; the provider default when omitted
        api_key: Explicit key; takes precedence over the environment
        environ: Environment mapping to read keys from (os.environ by default)

    Returns:
        ModelConfig with a freshly built model handle

    Raises:
        ConfigurationError: Unknown provider, missing required API key, or
            the provider SDK refused to build the model.
    """
    descriptor = get_provider(provider_key)

    final_model_id = model_id or descriptor.default_model_id
    final_base_url = base_url or descriptor.base_url
    final_api_key = api_key or get_api_key_from_env(provider_key, environ)

    if descriptor.requires_api_key and not final_api_key:
        raise ConfigurationError(
            f"{descriptor.name} API key is required. "
            f"Set {descriptor.api_key_env_var} or add it to the configuration."
        )

    try:
        handle = descriptor.factory(
            final_model_id,
            final_base_url,
            final_api_key,
            temperature=factories.DEFAULT_TEMPERATURE,
            max_retries=descriptor.max_retries,
        )
    except Exception as e:
        raise ConfigurationError(
            f"Could not initialise {descriptor.name} model '{final_model_id}': {e}"
        ) from e

    logger.debug(f"Resolved model {provider_key}/{final_model_id}")
    return ModelConfig(
        provider=provider_key,
        model_id=final_model_id,
        model_handle=handle,
        temperature=factories.DEFAULT_TEMPERATURE,
        max_retries=descriptor.max_retries,
    )
