"""Prompt building for command generation.

The system prompt is assembled from XML-tagged sections built from the
machine's SystemFacts.
"""

from lazyshell.prompts.prompt_components import ERROR_SENTINEL, is_error_sentinel
from lazyshell.prompts.retry_prompt import build_refine_prompt, build_retry_prompt
from lazyshell.prompts.system_prompt import (
    build_agent_system_prompt,
    build_system_prompt,
    get_agent_system_prompt,
    get_system_prompt,
)

__all__ = [
    "ERROR_SENTINEL",
    "build_agent_system_prompt",
    "build_refine_prompt",
    "build_retry_prompt",
    "build_system_prompt",
    "get_agent_system_prompt",
    "get_system_prompt",
    "is_error_sentinel",
]
