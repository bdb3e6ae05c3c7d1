"""Configuration management for LazyShell.

Loads the user's settings from ~/.lazyshell/config.json and builds the
environment mapping used for provider resolution.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values, find_dotenv

from lazyshell import __version__
from lazyshell.providers.registry import PROVIDERS, get_api_key_from_env

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "LAZYSHELL_CONFIG_DIR"

# Providers that can run against a local server without credentials.
LOCAL_PROVIDERS = ("ollama", "lmstudio", "openaiCompatible")


def get_config_path() -> Path:
    """Return the config file path, honouring LAZYSHELL_CONFIG_DIR."""
    config_dir = os.environ.get(CONFIG_DIR_ENV)
    if config_dir:
        return Path(config_dir).expanduser() / "config.json"
    return Path.home() / ".lazyshell" / "config.json"


@dataclass
class PersistedConfig:
    provider: str
    api_key: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None
    version: str = __version__

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersistedConfig":
        """
        Build a config from its JSON form.

        Raises:
            ValueError: If ``provider`` is missing or not a known provider.
        """
        provider = data.get("provider")
        if not provider or provider not in PROVIDERS:
            raise ValueError(f"Invalid provider in config file: {provider!r}")
        return cls(
            provider=provider,
            api_key=data.get("apiKey") or None,
            model=data.get("model") or None,
            base_url=data.get("baseUrl") or None,
            version=str(data.get("version") or __version__),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"provider": self.provider}
        if self.api_key:
            data["apiKey"] = self.api_key
        if self.model:
            data["model"] = self.model
        if self.base_url:
            data["baseUrl"] = self.base_url
        data["version"] = self.version
        return data


def load_persisted_config(path: Optional[Path] = None) -> Optional[PersistedConfig]:
    """
    Load the persisted configuration.

    Returns None when the file is missing, is not valid JSON, or names a
    provider that is not in the registry. Callers treat None as "resolve
    from the environment".
    """
    path = path or get_config_path()
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Config file {path} does not contain a JSON object")
        return None

    try:
        return PersistedConfig.from_dict(data)
    except ValueError as e:
        logger.warning(str(e))
        return None


def save_persisted_config(config: PersistedConfig, path: Optional[Path] = None) -> bool:
    """
    Write the configuration as a whole.

    Returns:
        bool: True if the save succeeded, False otherwise
    """
    path = path or get_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to save config to {path}: {e}")
        return False
    return True


def validate_config(
    config: PersistedConfig, environ: Optional[Mapping[str, str]] = None
) -> bool:
    """
    Check whether a config is complete enough to use.

    Local providers need no API key; every other provider needs one,
    either in the file or in the environment.
    """
    if config.provider not in PROVIDERS:
        return False
    if config.provider in LOCAL_PROVIDERS:
        return True
    api_key = config.api_key or get_api_key_from_env(config.provider, environ)
    return bool(api_key and api_key.strip())


def load_environment(dotenv_path: Optional[Path] = None) -> Dict[str, str]:
    """
    Return the environment used for provider resolution.

    Values from a ``.env`` file are layered *under* the real environment.
    ``os.environ`` itself is left untouched.
    """
    values = dotenv_values(dotenv_path or find_dotenv(usecwd=True))
    merged = {key: value for key, value in values.items() if value is not None}
    merged.update(os.environ)
    return merged
