from dataclasses import dataclass
from typing import Any, Callable, Optional

# (model_id, base_url, api_key) -> opaque chat model handle
ModelFactory = Callable[..., Any]


@dataclass
class ModelConfig:
    """
    A resolved model, ready to be passed to a generation call.

    ``model_handle`` is whatever the provider factory returned. It is only
    ever handed back to a generation call, never inspected.

    ``temperature`` and ``max_retries`` record what the factory built the
    handle with; they are informational. Generation calls use the handle
    as-is, so changing these fields on an existing config has no effect.
    Resolve a new config to change them.
    """

    provider: str
    model_id: str
    model_handle: Any
    temperature: Optional[float] = None
    max_retries: Optional[int] = None

    @property
    def label(self) -> str:
        return f"{self.provider}/{self.model_id}"
