"""Utilities for LazyShell."""

from lazyshell.utils.detection import (
    HardwareInfo,
    SystemFacts,
    collect_system_facts,
    detect_shell,
)

__all__ = [
    "HardwareInfo",
    "SystemFacts",
    "collect_system_facts",
    "detect_shell",
]
