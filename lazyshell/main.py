#!/usr/bin/env python3
"""
Main entry point for the Typer-based LazyShell CLI.

Delegates to lazyshell.ui.cli so the console script mapping stays stable.
"""

from lazyshell.ui.cli import run_app as lazyshell


if __name__ == "__main__":
    lazyshell()
