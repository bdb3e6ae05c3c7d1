"""Core operations: model resolution, generation, execution and the agent."""

from lazyshell.core.agent import (
    AgentOptions,
    AgentResult,
    AgentState,
    CommandAgent,
    run_agent_command,
)
from lazyshell.core.command_executor import (
    CommandResult,
    execute_command,
    run_command_streaming,
)
from lazyshell.core.generator import (
    AgentCommand,
    Command,
    CommandWithExplanation,
    generate_agent_command,
    generate_command,
    generate_command_struct,
)
from lazyshell.core.resolver import (
    from_environment,
    from_persisted_config,
    resolve_model_config,
)

__all__ = [
    "AgentCommand",
    "AgentOptions",
    "AgentResult",
    "AgentState",
    "Command",
    "CommandAgent",
    "CommandResult",
    "CommandWithExplanation",
    "execute_command",
    "from_environment",
    "from_persisted_config",
    "generate_agent_command",
    "generate_command",
    "generate_command_struct",
    "resolve_model_config",
    "run_agent_command",
    "run_command_streaming",
]
