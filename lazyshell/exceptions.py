"""Error taxonomy for LazyShell.

Execution failures are not exceptions: they come back as
``CommandResult(success=False)`` so callers can branch on them.
"""


class LazyShellError(Exception):
    """Base class for all LazyShell errors."""


class ConfigurationError(LazyShellError, ValueError):
    """A ModelConfig could not be produced (unknown provider, missing key)."""


class NoProviderAvailableError(LazyShellError, RuntimeError):
    """No environment provider was found and the local fallback failed."""


class GenerationError(LazyShellError, RuntimeError):
    """Both structured and free-text generation failed."""
