"""Append executed commands to the user's shell history file."""

import logging
import os
import time
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

HISTORY_PATHS = {
    "zsh": "~/.zsh_history",
    "bash": "~/.bash_history",
    "fish": "~/.local/share/fish/fish_history",
}
DEFAULT_HISTORY_PATH = "~/.sh_history"


def history_shell(environ: Optional[Mapping[str, str]] = None) -> str:
    """Shell family from the basename of $SHELL ("" when unset)."""
    environ = os.environ if environ is None else environ
    return os.path.basename(environ.get("SHELL", ""))


def history_path(shell: str) -> Path:
    return Path(HISTORY_PATHS.get(shell, DEFAULT_HISTORY_PATH)).expanduser()


def format_history_entry(shell: str, command: str, timestamp: Optional[int] = None) -> str:
    """
    Format one history entry for the given shell.

    zsh uses its extended ``: <epoch>:0;<cmd>`` form, fish its YAML-like
    records; every other shell gets the plain command line.
    """
    timestamp = int(time.time()) if timestamp is None else timestamp
    if shell == "zsh":
        return f": {timestamp}:0;{command}\n"
    if shell == "fish":
        return f"- cmd: {command}\n  when: {timestamp}\n"
    return f"{command}\n"


def add_to_shell_history(command: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Append ``command`` to the history file of the user's shell.

    Never raises: a history write must not fail the command that was run.

    Returns:
        True if the entry was written
    """
    try:
        shell = history_shell(environ)
        path = history_path(shell)
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(format_history_entry(shell, command))
    except OSError as e:
        logger.debug(f"Could not append to shell history: {e}")
        return False
    return True
