"""Command generation against a resolved model.

Structured generation asks the chat model for output matching a pydantic
schema. If that fails for any reason, the same request is repeated as
plain text and the trimmed reply is used as the command.
"""

import logging
from typing import Any, Optional, Type, Union

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from lazyshell.core.resolver import from_environment
from lazyshell.exceptions import GenerationError
from lazyshell.prompts.system_prompt import get_agent_system_prompt, get_system_prompt
from lazyshell.providers.model import ModelConfig

logger = logging.getLogger(__name__)


class Command(BaseModel):
    command: str = Field(
        description="The command to execute, without any formatting or markdown"
    )


class CommandWithExplanation(Command):
    explanation: str = Field(
        description="Brief explanation of what the command does and why it was chosen"
    )


class AgentCommand(CommandWithExplanation):
    safe: bool = Field(
        description="False if the command could damage data or the system, true otherwise"
    )
    reasoning: str = Field(description="Why the command was judged safe or unsafe")


def _messages(prompt: str, system_prompt: str) -> list:
    return [SystemMessage(content=system_prompt), HumanMessage(content=prompt)]


def _message_text(response: Any) -> str:
    """Extract text from a chat response; content may be a list of parts."""
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(str(part.get("text", "")))
            else:
                parts.append(str(part))
        return "\n".join(parts)
    return "" if content is None else str(content)


def _invoke_structured(
    model_config: ModelConfig, schema: Type[BaseModel], prompt: str, system_prompt: str
) -> BaseModel:
    structured = model_config.model_handle.with_structured_output(schema)
    result = structured.invoke(_messages(prompt, system_prompt))

    if result is None:
        raise GenerationError("Model returned no structured output")
    if isinstance(result, dict):
        return schema.model_validate(result)
    if not isinstance(result, schema):
        return schema.model_validate(result, from_attributes=True)
    return result


def generate_command(
    prompt: str,
    model_config: Optional[ModelConfig] = None,
    system_prompt: Optional[str] = None,
) -> str:
    """
    Generate a command as free text.

    Args:
        prompt: The user's natural-language request
        model_config: Resolved model (from the environment when omitted)
        system_prompt: System instruction (process-wide prompt when omitted)

    Returns:
        The model's reply with surrounding whitespace removed
    """
    model_config = model_config or from_environment()
    system_prompt = system_prompt or get_system_prompt()

    response = model_config.model_handle.invoke(_messages(prompt, system_prompt))
    return _message_text(response).strip()


def generate_command_struct(
    prompt: str,
    model_config: Optional[ModelConfig] = None,
    include_explanation: bool = True,
    system_prompt: Optional[str] = None,
) -> Union[Command, CommandWithExplanation]:
    """
    Generate a command with schema-validated output.

    Falls back to free-text generation if structured generation raises
    anything (parse failure, provider without structured output, network
    errors after the provider's own retries).

    Args:
        prompt: The user's natural-language request
        model_config: Resolved model (from the environment when omitted)
        include_explanation: Ask for an explanation alongside the command
        system_prompt: System instruction (process-wide prompt when omitted)

    Returns:
        Command or CommandWithExplanation. The fallback path always returns
        CommandWithExplanation with an empty explanation.

    Raises:
        GenerationError: If the free-text fallback fails too.
    """
    model_config = model_config or from_environment()
    system_prompt = system_prompt or get_system_prompt()
    schema = CommandWithExplanation if include_explanation else Command

    try:
        return _invoke_structured(model_config, schema, prompt, system_prompt)
    except Exception as e:
        logger.warning(
            f"Structured generation failed on {model_config.label} ({e}); "
            "falling back to free text"
        )

    try:
        text = generate_command(prompt, model_config, system_prompt)
    except Exception as e:
        raise GenerationError(f"Error generating command: {e}") from e

    return CommandWithExplanation(command=text, explanation="")


def generate_agent_command(
    prompt: str,
    model_config: ModelConfig,
    system_prompt: Optional[str] = None,
) -> AgentCommand:
    """
    Generate a command with a model-reported safety assessment.

    There is no free-text fallback: a plain string carries no safety
    verdict. Errors propagate to the agent, which records a failed
    iteration.
    """
    system_prompt = system_prompt or get_agent_system_prompt()
    return _invoke_structured(model_config, AgentCommand, prompt, system_prompt)
