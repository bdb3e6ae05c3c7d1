"""Autonomous agent: generate, gate on safety, execute, retry on failure.

The agent is an explicit state machine. The prompt sent to the model is
part of its state: it starts as the user's task and, after a failed
attempt, becomes a retry prompt built from that task and the failure.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional

from rich.prompt import Confirm

from lazyshell.core.command_executor import CommandResult, execute_command
from lazyshell.core.configs import PersistedConfig
from lazyshell.core.generator import AgentCommand, generate_agent_command
from lazyshell.core.resolver import resolve_model_config
from lazyshell.prompts.retry_prompt import build_retry_prompt
from lazyshell.providers.model import ModelConfig
from lazyshell.ui.output import UIManager

logger = logging.getLogger(__name__)

GENERATION_FAILED = "GENERATION_FAILED"

REASON_UNSAFE_BLOCKED = "Unsafe command blocked by safety mode"
REASON_UNSAFE_DECLINED = "User aborted unsafe command execution"
REASON_CANCELLED = "User cancelled execution"


class AgentState(Enum):
    GENERATING = "generating"
    SAFETY_GATE = "safety_gate"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = frozenset(
    {AgentState.SUCCEEDED, AgentState.ABORTED, AgentState.EXHAUSTED}
)


@dataclass
class AgentOptions:
    max_retries: int = 3
    interactive: bool = True
    safety_mode: bool = True

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")


@dataclass
class AgentResult:
    success: bool
    results: List[CommandResult] = field(default_factory=list)
    iterations: int = 0
    final_command: Optional[str] = None
    aborted: bool = False
    reason: Optional[str] = None


def confirm_with_user(message: str) -> bool:
    """Yes/no prompt; Ctrl-C or end of input counts as no."""
    try:
        return Confirm.ask(message, default=False)
    except (KeyboardInterrupt, EOFError):
        return False


class CommandAgent:
    """
    Runs one task to a terminal state.

    ``generate``, ``execute`` and ``confirm`` default to the real model
    call, subprocess execution and terminal prompt; pass replacements to
    drive the agent without any of them.
    """

    def __init__(
        self,
        model_config: ModelConfig,
        options: Optional[AgentOptions] = None,
        generate: Callable[[str, ModelConfig], AgentCommand] = generate_agent_command,
        execute: Callable[[str], CommandResult] = execute_command,
        confirm: Callable[[str], bool] = confirm_with_user,
        ui: Optional[UIManager] = None,
    ):
        self.model_config = model_config
        self.options = options or AgentOptions()
        self._generate = generate
        self._execute = execute
        self._confirm = confirm
        self.ui = ui or UIManager()

        self.state = AgentState.GENERATING
        self.iteration = 0
        self.original_prompt = ""
        self.current_prompt = ""
        self.candidate: Optional[AgentCommand] = None
        self.results: List[CommandResult] = []
        self.reason: Optional[str] = None
        self.final_command: Optional[str] = None

    def execute_task(self, prompt: str) -> AgentResult:
        """Drive the state machine from GENERATING to a terminal state."""
        self._reset(prompt)
        self.ui.info("Agent mode activated")
        self.ui.dim(f"Task: {prompt}")
        self.ui.dim(f"Max retries: {self.options.max_retries}")
        self.ui.dim(f"Safety mode: {'ON' if self.options.safety_mode else 'OFF'}")

        handlers = {
            AgentState.GENERATING: self._on_generating,
            AgentState.SAFETY_GATE: self._on_safety_gate,
            AgentState.CONFIRMING: self._on_confirming,
            AgentState.EXECUTING: self._on_executing,
            AgentState.RETRYING: self._on_retrying,
        }
        while self.state not in TERMINAL_STATES:
            previous = self.state
            self.state = handlers[self.state]()
            logger.debug(f"Agent {previous.value} -> {self.state.value}")

        result = AgentResult(
            success=self.state is AgentState.SUCCEEDED,
            results=list(self.results),
            iterations=self.iteration,
            final_command=self.final_command,
            aborted=self.state is AgentState.ABORTED,
            reason=self.reason,
        )
        if not result.success and not result.aborted:
            self._print_history()
        return result

    def _reset(self, prompt: str) -> None:
        self.state = AgentState.GENERATING
        self.iteration = 0
        self.original_prompt = prompt
        self.current_prompt = prompt
        self.candidate = None
        self.results = []
        self.reason = None
        self.final_command = None

    def _on_generating(self) -> AgentState:
        self.iteration += 1
        self.ui.warning(f"\nIteration {self.iteration}/{self.options.max_retries}")
        self.ui.dim("Generating command...")
        try:
            self.candidate = self._generate(self.current_prompt, self.model_config)
        except Exception as e:
            return self._record_failure(e)

        self.ui.command(f"Command: {self.candidate.command}")
        self.ui.dim(f"Explanation: {self.candidate.explanation}")
        self.ui.dim(f"Safety: {'SAFE' if self.candidate.safe else 'UNSAFE'}")
        self.ui.dim(f"Reasoning: {self.candidate.reasoning}")
        return AgentState.SAFETY_GATE

    def _on_safety_gate(self) -> AgentState:
        if not self.candidate.safe and self.options.safety_mode:
            self.ui.error("Command marked as unsafe in safety mode")
            if not self.options.interactive:
                return self._abort(REASON_UNSAFE_BLOCKED)
            if not self._confirm("Do you want to execute this potentially unsafe command?"):
                return self._abort(REASON_UNSAFE_DECLINED)
            return AgentState.EXECUTING

        if self.candidate.safe and self.options.interactive:
            return AgentState.CONFIRMING
        return AgentState.EXECUTING

    def _on_confirming(self) -> AgentState:
        if not self._confirm("Execute this command?"):
            return self._abort(REASON_CANCELLED)
        return AgentState.EXECUTING

    def _on_executing(self) -> AgentState:
        command = self.candidate.command
        self.ui.success("Executing command...")
        try:
            result = self._execute(command)
        except Exception as e:
            return self._record_failure(e)
        self.results.append(result)

        if result.success:
            self.ui.success("Command executed successfully")
            self.ui.output_block("Output", result.stdout)
            self.final_command = command
            return AgentState.SUCCEEDED

        self.ui.error(f"Command failed (exit code {result.exit_code})")
        self.ui.output_block("Error", result.stderr, "red")
        self.ui.output_block("Output", result.stdout, "yellow")
        return self._after_failure(command, result)

    def _on_retrying(self) -> AgentState:
        remaining = self.options.max_retries - self.iteration
        self.ui.warning(f"Attempting to fix command ({remaining} retries left)...")
        return AgentState.GENERATING

    def _after_failure(self, command: Optional[str], result: CommandResult) -> AgentState:
        if self.iteration >= self.options.max_retries:
            self.reason = f"Maximum retries ({self.options.max_retries}) exceeded"
            return AgentState.EXHAUSTED
        if command is not None:
            self.current_prompt = build_retry_prompt(self.original_prompt, command, result)
        return AgentState.RETRYING

    def _record_failure(self, error: Exception) -> AgentState:
        """Turn an exception inside an iteration into a failed result."""
        logger.debug("Agent iteration raised", exc_info=True)
        self.ui.error(f"Error during agent execution: {error}")
        result = CommandResult(
            success=False,
            stdout="",
            stderr=str(error),
            exit_code=1,
            command=GENERATION_FAILED,
        )
        self.results.append(result)
        # The prompt is left as is; there is no command to report back.
        return self._after_failure(None, result)

    def _abort(self, reason: str) -> AgentState:
        self.reason = reason
        return AgentState.ABORTED

    def _print_history(self) -> None:
        self.ui.heading("\nAttempt history:")
        for number, result in enumerate(self.results, start=1):
            self.ui.dim(f"{number}. [{result.exit_code}] {result.command}")
            last_line = result.stderr.strip().splitlines()[-1:] if result.stderr else []
            if last_line:
                self.ui.dim(f"   {last_line[0]}")


def run_agent_command(
    prompt: str,
    persisted_config: Optional[PersistedConfig],
    options: Optional[AgentOptions] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AgentResult:
    """
    Resolve a model and run one agent task.

    Resolution uses the persisted configuration with environment fallback.

    Raises:
        NoProviderAvailableError: If no provider can be resolved at all.
    """
    model_config = resolve_model_config(persisted_config, environ)
    agent = CommandAgent(model_config, options)
    return agent.execute_task(prompt)
