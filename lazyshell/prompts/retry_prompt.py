"""User-prompt rewriting for retries and refinements."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lazyshell.core.command_executor import CommandResult


def build_retry_prompt(original_prompt: str, failed_command: str, result: "CommandResult") -> str:
    """
    Build the prompt for the next agent iteration.

    Always anchored to the original task, never to a previous retry
    prompt, so failure context does not pile up across iterations.
    """
    return f"""{original_prompt}

PREVIOUS ATTEMPT FAILED:
Command: {failed_command}
Exit Code: {result.exit_code}
Error Output: {result.stderr}
Standard Output: {result.stdout}

Please analyze the error and provide a corrected command. Consider:
1. What went wrong with the previous command?
2. Are there missing dependencies or prerequisites?
3. Is the syntax correct for the current system?
4. Are there permission issues?
5. Do we need a different approach?

Generate a fixed command that addresses the specific error encountered."""


def build_refine_prompt(previous_prompt: str, command: str, refinement: str) -> str:
    """Combine the previous request, its command and the user's refinement."""
    return (
        f"Former request: {previous_prompt}\n"
        f"Its command was: {command}\n"
        f"Refine it as follows: {refinement}"
    )
