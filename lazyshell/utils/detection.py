"""
OS, shell and hardware detection.

Builds the SystemFacts record embedded in the system prompt. Every probe
is best effort: a failing probe yields None or an "Unknown" value, never
an exception.
"""

import os
import platform
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Probed in order; the first binary found wins.
PACKAGE_MANAGER_BINARIES = (
    ("brew", ("/usr/bin/brew",)),
    ("apt", ("/usr/bin/apt", "/usr/bin/apt-get")),
    ("dnf", ("/usr/bin/dnf",)),
    ("yum", ("/usr/bin/yum",)),
    ("yay", ("/usr/bin/yay",)),
    ("pacman", ("/usr/bin/pacman",)),
    ("zypper", ("/usr/bin/zypper",)),
    ("emerge", ("/usr/bin/emerge",)),
    ("apk", ("/usr/bin/apk",)),
    ("xbps", ("/usr/bin/xbps-install",)),
)

OS_RELEASE_PATH = Path("/etc/os-release")


@dataclass(frozen=True)
class HardwareInfo:
    cpu: str
    memory: str
    gpu: str


@dataclass(frozen=True)
class SystemFacts:
    """Machine facts that do not change during a run."""

    platform: str
    arch: str
    shell_name: str
    working_directory: str
    release: str = ""
    distro: Optional[str] = None
    package_manager: Optional[str] = None
    hardware: Optional[HardwareInfo] = None


def detect_platform() -> str:
    """
    Return the platform family: "linux", "darwin", "win32" or sys.platform.
    """
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def detect_distro(os_release: Path = OS_RELEASE_PATH) -> Optional[str]:
    """Return the NAME field of /etc/os-release, if readable."""
    try:
        text = os_release.read_text(encoding="utf-8")
    except OSError:
        return None
    match = re.search(r'^NAME="?(.+?)"?$', text, re.MULTILINE)
    return match.group(1) if match else None


def detect_package_manager() -> Optional[str]:
    """Detect the system package manager from well-known binary paths."""
    for name, paths in PACKAGE_MANAGER_BINARIES:
        if any(os.path.exists(path) for path in paths):
            return name
    return None


def detect_shell() -> str:
    """
    Auto-detect the user's shell.

    Returns:
        str: Shell name (zsh, bash, fish, ...); "powershell" on Windows and
            "unknown" when SHELL is not set.
    """
    if sys.platform == "win32":
        return "powershell"
    shell_path = os.environ.get("SHELL", "")
    return os.path.basename(shell_path) if shell_path else "unknown"


def _cpu_model() -> str:
    try:
        with open("/proc/cpuinfo", encoding="utf-8") as handle:
            for line in handle:
                if line.lower().startswith("model name"):
                    return line.split(":", 1)[1].strip()
    except OSError:
        pass
    return platform.processor() or "Unknown CPU"


def _total_memory() -> str:
    try:
        total = os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (ValueError, OSError, AttributeError):
        return "Unknown Memory"
    return f"{round(total / 1024 ** 3)} GB"


def _gpu_model() -> str:
    if shutil.which("nvidia-smi"):
        try:
            result = subprocess.run(
                ["nvidia-smi", "--query-gpu=name,memory.total", "--format=csv,noheader"],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (OSError, subprocess.SubprocessError):
            result = None
        if result is not None and result.returncode == 0 and result.stdout.strip():
            name, _, vram = result.stdout.strip().splitlines()[0].partition(",")
            return f"NVIDIA {name.strip()} ({vram.strip()} VRAM)" if vram else name.strip()
    return "GPU info unavailable"


def detect_hardware() -> HardwareInfo:
    """CPU model, total memory and GPU, with "Unknown" placeholders."""
    return HardwareInfo(cpu=_cpu_model(), memory=_total_memory(), gpu=_gpu_model())


def collect_system_facts() -> SystemFacts:
    """
    Probe the machine once.

    Distro, package manager and hardware are only probed on Linux.
    """
    system_platform = detect_platform()
    facts = dict(
        platform=system_platform,
        arch=platform.machine() or "unknown",
        shell_name=detect_shell(),
        working_directory=os.getcwd(),
        release=platform.release(),
    )
    if system_platform == "linux":
        facts.update(
            distro=detect_distro(),
            package_manager=detect_package_manager(),
            hardware=detect_hardware(),
        )
    return SystemFacts(**facts)
