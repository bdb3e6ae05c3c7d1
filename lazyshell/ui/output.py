"""
Colour-coded terminal output for the interactive loop and the agent.
"""

import os
import sys
from typing import Optional, TextIO


TEXT_COLOR_MAPPING = {
    "blue": "36;1",
    "yellow": "33;1",
    "pink": "38;5;200",
    "green": "32;1",
    "red": "31;1",
    "cyan": "96;1",
    "gray": "90",
}


def get_colored_text(text: str, color: str) -> str:
    """
    Get colored text.

    Args:
        text: The text to color
        color: The color to use

    Returns:
        Colored text string

    Raises:
        ValueError: If the specified color is not supported
    """
    if color not in TEXT_COLOR_MAPPING:
        raise ValueError(
            f"Unsupported color: {color}. Available colors: {', '.join(TEXT_COLOR_MAPPING.keys())}"
        )

    color_str = TEXT_COLOR_MAPPING[color]
    return f"\u001b[{color_str}m{text}\u001b[0m"


def get_bolded_text(text: str) -> str:
    """Get bolded text."""
    return f"\033[1m{text}\033[0m"


class UIManager:
    """Manages colored terminal output for LazyShell."""

    def __init__(self, stream: Optional[TextIO] = None, use_color: Optional[bool] = None):
        """
        Args:
            stream: Where to write (stdout by default)
            use_color: Force colours on or off; by default colours are used
                on a TTY unless NO_COLOR is set
        """
        self.stream = stream
        if use_color is None:
            target = stream or sys.stdout
            use_color = target.isatty() and "NO_COLOR" not in os.environ
        self.use_color = use_color

    def success(self, message: str) -> None:
        """Print success message in green."""
        self._print_colored(message, "green")

    def error(self, message: str) -> None:
        """Print error message in red."""
        self._print_colored(message, "red")

    def warning(self, message: str) -> None:
        """Print warning message in yellow."""
        self._print_colored(message, "yellow")

    def info(self, message: str) -> None:
        """Print info message in blue."""
        self._print_colored(message, "blue")

    def command(self, command: str) -> None:
        """Print command in cyan."""
        self._print_colored(command, "cyan")

    def description(self, text: str) -> None:
        """Print description text in pink."""
        self._print_colored(text, "pink")

    def dim(self, text: str) -> None:
        """Print dimmed text in gray."""
        self._print_colored(text, "gray")

    def heading(self, text: str) -> None:
        self.print_text(get_bolded_text(text) if self.use_color else text, end="\n")

    def output_block(self, label: str, text: str, color: str = "gray") -> None:
        """Print a labelled block of command output, skipping empty output."""
        if not text:
            return
        self._print_colored(f"{label}:", color)
        self.print_text(text.rstrip("\n"), end="\n")

    def _print_colored(self, text: str, color: str, end: str = "\n") -> None:
        if self.use_color:
            try:
                text = get_colored_text(text, color)
            except ValueError:
                pass
        self.print_text(text, end=end)

    def print_text(self, text: str, color: Optional[str] = None, end: str = "") -> None:
        """
        Print text with optional highlighting.

        Args:
            text: The text to print
            color: Optional color to use
            end: String to append at the end
        """
        if color:
            self._print_colored(text, color, end)
            return
        print(text, end=end, file=self.stream)
        if self.stream:
            self.stream.flush()
