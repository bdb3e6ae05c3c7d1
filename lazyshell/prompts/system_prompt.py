"""System prompt assembly.

The prompt is a pure function of SystemFacts. The get_* helpers probe the
machine and build the prompt once per process; every generation call
reuses that string.
"""

from functools import lru_cache

from lazyshell.prompts.prompt_components import (
    build_agent_instructions,
    build_output_format,
    build_platform_notes,
    build_role,
    build_rules,
    build_safety,
    build_system_context,
)
from lazyshell.utils.detection import SystemFacts, collect_system_facts


def build_system_prompt(facts: SystemFacts) -> str:
    """
    Build the system prompt for command generation.

    Sections, in order:

    1. <role> - Role framing
    2. <system_context> - Machine facts
    3. <output_format> - Command only, no markdown or quoting
    4. <rules> - Pass-through, error sentinel, cross-platform, privileges
    5. <safety> - Care with destructive operations
    6. <platform_notes> - Only for the current platform

    Args:
        facts: Machine facts to embed

    Returns:
        Complete system prompt string
    """
    sections = [
        build_role(),
        build_system_context(facts),
        build_output_format(),
        build_rules(facts),
        build_safety(),
        build_platform_notes(facts),
    ]
    return "\n\n".join(section for section in sections if section)


def build_agent_system_prompt(facts: SystemFacts) -> str:
    """System prompt for agent mode: the base prompt plus safety fields."""
    return f"{build_system_prompt(facts)}\n\n{build_agent_instructions()}"


@lru_cache(maxsize=1)
def get_system_facts() -> SystemFacts:
    return collect_system_facts()


@lru_cache(maxsize=1)
def get_system_prompt() -> str:
    """Process-wide system prompt, computed on first use."""
    return build_system_prompt(get_system_facts())


@lru_cache(maxsize=1)
def get_agent_system_prompt() -> str:
    return build_agent_system_prompt(get_system_facts())
