"""Model-handle factories, one per provider.

Every factory shares the signature ``(model_id, base_url=None,
api_key=None)`` so the registry can dispatch without knowing which
arguments a provider actually needs. Temperature and retry count are
keyword-only extras: LangChain chat models take them at construction
time, which is how they reach the provider SDK.

Provider packages are imported inside each factory so that only the
selected provider's SDK is loaded.
"""

from typing import Any, Dict, Optional

DEFAULT_TEMPERATURE = 0.1

# Local OpenAI-compatible servers ignore the key, but the OpenAI client
# refuses to start without one.
LOCAL_PLACEHOLDER_KEY = "not-needed"


def _retry_kwargs(max_retries: Optional[int]) -> Dict[str, Any]:
    return {} if max_retries is None else {"max_retries": max_retries}


def _build_openai_style(
    model_id: str,
    base_url: Optional[str],
    api_key: Optional[str],
    temperature: float,
    max_retries: Optional[int],
):
    from langchain_openai import ChatOpenAI

    kwargs: Dict[str, Any] = {
        "model": model_id,
        "api_key": api_key or LOCAL_PLACEHOLDER_KEY,
        "temperature": temperature,
        **_retry_kwargs(max_retries),
    }
    if base_url:
        kwargs["base_url"] = base_url
    return ChatOpenAI(**kwargs)


def build_groq_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """Groq through its OpenAI-compatible endpoint."""
    return _build_openai_style(
        model_id,
        base_url or "https://api.groq.com/openai/v1",
        api_key,
        temperature,
        max_retries,
    )


def build_openrouter_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """OpenRouter through its OpenAI-compatible endpoint."""
    return _build_openai_style(
        model_id,
        base_url or "https://openrouter.ai/api/v1",
        api_key,
        temperature,
        max_retries,
    )


def build_openai_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """OpenAI. ``base_url`` is only honoured when explicitly given."""
    return _build_openai_style(model_id, base_url, api_key, temperature, max_retries)


def build_lmstudio_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """LM Studio local server. The API key is ignored."""
    return _build_openai_style(
        model_id,
        base_url or "http://localhost:1234/v1",
        None,
        temperature,
        max_retries,
    )


def build_openai_compatible_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """Any OpenAI-compatible endpoint; the key is optional."""
    return _build_openai_style(
        model_id,
        base_url or "http://localhost:8000/v1",
        api_key,
        temperature,
        max_retries,
    )


def build_google_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """
    Return a configured Gemini chat model.

    The Gemini client has no configurable endpoint, so ``base_url`` is
    ignored.
    """
    from langchain_google_genai import ChatGoogleGenerativeAI

    return ChatGoogleGenerativeAI(
        model=model_id,
        google_api_key=api_key,
        temperature=temperature,
        **_retry_kwargs(max_retries),
    )


def build_anthropic_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    from langchain_anthropic import ChatAnthropic

    kwargs: Dict[str, Any] = {
        "model": model_id,
        "api_key": api_key,
        "temperature": temperature,
        **_retry_kwargs(max_retries),
    }
    if base_url:
        kwargs["base_url"] = base_url
    return ChatAnthropic(**kwargs)


def build_mistral_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    from langchain_mistralai import ChatMistralAI

    kwargs: Dict[str, Any] = {
        "model": model_id,
        "api_key": api_key,
        "temperature": temperature,
        **_retry_kwargs(max_retries),
    }
    if base_url:
        kwargs["endpoint"] = base_url
    return ChatMistralAI(**kwargs)


def build_ollama_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    """
    Local Ollama instance.

    ChatOllama has no API key and no retry setting; both are ignored.
    """
    from langchain_ollama import ChatOllama

    kwargs: Dict[str, Any] = {"model": model_id, "temperature": temperature}
    if base_url:
        kwargs["base_url"] = base_url
    return ChatOllama(**kwargs)


def build_deepinfra_model(
    model_id: str,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_retries: Optional[int] = None,
):
    from langchain_community.chat_models import ChatDeepInfra

    return ChatDeepInfra(
        model=model_id,
        deepinfra_api_token=api_key,
        temperature=temperature,
    )
