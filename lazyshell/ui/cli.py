"""Main CLI entry point - subcommand architecture."""

import logging
from typing import List, Mapping

import typer
from rich.prompt import Prompt

from lazyshell import __version__
from lazyshell.core.agent import AgentOptions, run_agent_command
from lazyshell.core.command_executor import run_command_streaming
from lazyshell.core.configs import load_environment, load_persisted_config
from lazyshell.core.generator import generate_command_struct
from lazyshell.core.resolver import resolve_model_config
from lazyshell.exceptions import LazyShellError
from lazyshell.prompts.prompt_components import is_error_sentinel
from lazyshell.prompts.retry_prompt import build_refine_prompt
from lazyshell.providers.model import ModelConfig
from lazyshell.ui.output import UIManager

logger = logging.getLogger(__name__)

CANCELLED_EXIT_CODE = 130

ACTIONS = {
    "e": "execute",
    "r": "refine",
    "c": "cancel",
}

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="LazyShell - turn plain-language requests into shell commands.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_model(ui: UIManager, environ: Mapping[str, str]) -> ModelConfig:
    """Resolve the model to use. Exits when no provider can be built."""
    try:
        model_config = resolve_model_config(load_persisted_config(), environ)
    except LazyShellError as e:
        ui.error(str(e))
        ui.dim("Run 'lazyshell config init' to set up a provider")
        raise typer.Exit(1)
    ui.info(f"Using model: {model_config.label}")
    return model_config


def _ask(message: str, **kwargs) -> str:
    """Prompt the user; Ctrl-C or end of input ends the process with 130."""
    try:
        return Prompt.ask(message, **kwargs)
    except (KeyboardInterrupt, EOFError):
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(CANCELLED_EXIT_CODE)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lazyshell {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """LazyShell - turn plain-language requests into shell commands."""


@app.command()
def run(
    prompt: List[str] = typer.Argument(..., help="What you want to do, in plain words"),
    no_explain: bool = typer.Option(False, "--no-explain", help="Skip the explanation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    Generate a command, then execute, refine or cancel it.

    Example: lazyshell run find all python files modified today
    """
    _configure_logging(verbose)
    ui = UIManager()
    model_config = _resolve_model(ui, load_environment())
    current_prompt = " ".join(prompt)

    while True:
        try:
            generated = generate_command_struct(
                current_prompt, model_config, include_explanation=not no_explain
            )
        except LazyShellError as e:
            ui.error(str(e))
            raise typer.Exit(1)

        command = generated.command.strip()
        if not command or is_error_sentinel(command):
            ui.error("Could not produce a command for this request.")
            ui.dim("Try rephrasing it with more detail.")
            raise typer.Exit(1)

        explanation = getattr(generated, "explanation", "")
        if explanation:
            ui.description(f"Explanation: {explanation}")
        ui.command(f"Command: {command}")

        choice = _ask("[e]xecute, [r]efine or [c]ancel", choices=list(ACTIONS), default="e")
        action = ACTIONS[choice]

        if action == "execute":
            raise typer.Exit(run_command_streaming(command))
        if action == "cancel":
            ui.warning("Command cancelled.")
            return

        refinement = _ask("How would you like to refine the command?")
        current_prompt = build_refine_prompt(current_prompt, command, refinement)


@app.command()
def agent(
    prompt: List[str] = typer.Argument(..., help="Task for the agent"),
    max_retries: int = typer.Option(3, "--max-retries", "-r", min=1, help="Attempts before giving up"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Run without confirmation prompts"),
    unsafe: bool = typer.Option(False, "--unsafe", help="Turn the safety gate off"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    Let the agent run the task, retrying with a corrected command on failure.

    Example: lazyshell agent create a python venv in .venv and install requests
    """
    _configure_logging(verbose)
    ui = UIManager()
    options = AgentOptions(max_retries=max_retries, interactive=not yes, safety_mode=not unsafe)

    try:
        result = run_agent_command(
            " ".join(prompt), load_persisted_config(), options, environ=load_environment()
        )
    except LazyShellError as e:
        ui.error(str(e))
        raise typer.Exit(1)

    if result.success:
        ui.success(f"Task completed in {result.iterations} iteration(s): {result.final_command}")
        return
    ui.error(f"Task failed: {result.reason}")
    raise typer.Exit(1)


@app.command()
def config(
    action: str = typer.Argument("show", help="Action: init, show, or path"),
) -> None:
    """
    Manage LazyShell configuration.

    Actions:
        init - Interactive configuration wizard
        show - Display current configuration
        path - Print the config file location
    """
    from lazyshell.ui.config_commands import handle_config

    handle_config(action)


def run_app() -> None:
    """Entry point for console script mapping."""
    app()


if __name__ == "__main__":
    run_app()
