"""Component builders for the structured system prompt.

Each function builds one XML-tagged section. All of them are pure
functions of their arguments.
"""

from lazyshell.utils.detection import SystemFacts

# Returned verbatim by the model when a request makes no sense.
ERROR_SENTINEL = "error"

LINUX_NOTES = """- Use GNU/Linux command variants and flags
- Leverage {package_manager} for installations
- Consider distribution-specific paths and conventions"""

DARWIN_NOTES = """- Use macOS/BSD command variants
- Consider Homebrew for package management
- Use macOS-specific paths and conventions"""

WINDOWS_NOTES = """- Use PowerShell/Windows command syntax
- Consider Windows-specific paths and conventions
- Use appropriate Windows tools and utilities"""


def privilege_prefix(platform: str) -> str:
    """The privilege-elevation idiom for a platform, as prose."""
    if platform == "win32":
        return "an elevated (Run as Administrator) PowerShell session"
    return "'sudo'"


def build_role() -> str:
    return """<role>
You are an expert system administrator and command-line specialist.
Your job is to turn the user's request into one shell command for their system.
</role>"""


def build_system_context(facts: SystemFacts) -> str:
    """
    Build <system_context> with the enumerated machine facts.

    Optional facts (distro, package manager, hardware) are only listed
    when known.
    """
    lines = [
        f"- Platform: {facts.platform}",
        f"- Architecture: {facts.arch}",
    ]
    if facts.release:
        lines.append(f"- Release: {facts.release}")
    if facts.hardware is not None:
        lines.extend(
            [
                "- Hardware:",
                f"  - CPU: {facts.hardware.cpu}",
                f"  - Memory: {facts.hardware.memory}",
                f"  - GPU: {facts.hardware.gpu}",
            ]
        )
    if facts.distro:
        lines.append(f"- Distribution: {facts.distro}")
    if facts.package_manager:
        lines.append(f"- Package Manager: {facts.package_manager}")
    lines.append(f"- Shell: {facts.shell_name}")
    lines.append(f"- Working Directory: {facts.working_directory}")

    body = "\n".join(lines)
    return f"<system_context>\n{body}\n</system_context>"


def build_output_format() -> str:
    return """<output_format>
- Return ONLY the command string, no markdown, code fences, quotes, or additional formatting
- Use platform-appropriate syntax and flags
- Prefer relative paths over absolute paths when possible
</output_format>"""


def build_rules(facts: SystemFacts) -> str:
    package_manager = facts.package_manager or "the system default package manager"
    return f"""<rules>
1. If the input is already a valid command for this system: return it unchanged
2. If the input is incoherent, ambiguous or not a request for a command: return exactly "{ERROR_SENTINEL}"
3. If the input is a command for another platform: adapt it to the equivalent syntax for this system
4. Prefix a command with {privilege_prefix(facts.platform)} ONLY when the operation requires elevated privileges
5. For package management: use {package_manager}
</rules>"""


def build_safety() -> str:
    return """<safety>
- Be careful with destructive operations (recursive deletion, formatting, overwriting files)
- Warn the user about commands that could damage the system rather than silently refusing
- Be cautious with file permission and ownership changes
- Validate that the requested operation is reasonable
</safety>"""


def build_platform_notes(facts: SystemFacts) -> str:
    """Adaptation notes for the current platform only; empty if unknown."""
    if facts.platform == "linux":
        notes = LINUX_NOTES.format(
            package_manager=facts.package_manager or "the available package manager"
        )
    elif facts.platform == "darwin":
        notes = DARWIN_NOTES
    elif facts.platform == "win32":
        notes = WINDOWS_NOTES
    else:
        return ""
    return f"<platform_notes>\n{notes}\n</platform_notes>"


def build_agent_instructions() -> str:
    return """<agent_mode>
You are running as an autonomous agent; your command may be executed without further review.
- "command": the command to run
- "explanation": what the command does and why it was chosen
- "safe": false if the command could delete data, change system configuration, or is otherwise risky; true otherwise
- "reasoning": why you judged the command safe or unsafe
If a previous attempt failed, fix the specific error instead of repeating the same command.
</agent_mode>"""


def is_error_sentinel(command: str) -> bool:
    """True when the model signalled an incoherent request."""
    return command.strip().strip("\"'").lower() == ERROR_SENTINEL
