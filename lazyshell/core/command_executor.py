"""Shell command execution.

Buffered commands run through the host shell in their own session, with
stdin detached and pagers disabled. Streaming commands stay attached to
the user's terminal so they can prompt (sudo) and receive Ctrl-C.

Failures of any kind (non-zero exit, timeout, too much output, launch
errors) come back as a CommandResult with ``success=False``; nothing
here raises for a failed command.
"""

import codecs
import logging
import os
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from lazyshell.core.history import add_to_shell_history

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30
MAX_BUFFER_BYTES = 1024 * 1024
TIMEOUT_EXIT_CODE = 124
LAUNCH_FAILURE_EXIT_CODE = 127
TIMEOUT_ENV = "LAZYSHELL_COMMAND_TIMEOUT_S"

_CHUNK_SIZE = 4096
# How long to wait for output pipes after the shell exits; background
# children may hold them open indefinitely.
_DRAIN_GRACE_S = 1.0

OutputCallback = Callable[[str], None]


@dataclass
class CommandResult:
    success: bool
    stdout: str
    stderr: str
    exit_code: int
    command: str


def get_command_timeout() -> float:
    """Execution timeout in seconds, overridable with LAZYSHELL_COMMAND_TIMEOUT_S."""
    value = os.environ.get(TIMEOUT_ENV, "").strip()
    if value:
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Ignoring invalid {TIMEOUT_ENV}={value!r}")
    return DEFAULT_TIMEOUT_S


def _get_no_pager_env() -> dict:
    """Copy of the environment with pagers disabled."""
    env = os.environ.copy()
    env.update(
        {
            "PAGER": "cat",
            "GIT_PAGER": "cat",
            "LESS": "",
            "MORE": "",
        }
    )
    return env


def _popen(
    command: str, shell_path: Optional[str], stdin, new_session: bool = False
) -> subprocess.Popen:
    kwargs = {
        "shell": True,
        "env": _get_no_pager_env(),
        "stdin": stdin,
        "stdout": subprocess.PIPE,
        "stderr": subprocess.PIPE,
    }
    if new_session and os.name == "posix":
        # Own process group, so a timeout can kill the whole pipeline.
        kwargs["start_new_session"] = True
    if shell_path:
        kwargs["executable"] = shell_path
    return subprocess.Popen(command, **kwargs)


def _kill_process_tree(process: subprocess.Popen) -> None:
    try:
        if os.name == "posix":
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except OSError:
        # Already exited.
        pass


def _normalise_exit_code(returncode: int) -> int:
    """Map "killed by signal N" (negative) to the shell's 128+N."""
    return 128 - returncode if returncode < 0 else returncode


class _OutputPump:
    """
    Drain a process's stdout and stderr on background threads.

    Chunks are decoded incrementally and forwarded to optional callbacks
    as they arrive. With a byte limit set, the pump stops buffering at the
    limit and calls ``on_overflow`` once.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        limit: Optional[int] = None,
        on_stdout: Optional[OutputCallback] = None,
        on_stderr: Optional[OutputCallback] = None,
        on_overflow: Optional[Callable[[], None]] = None,
    ):
        self.limit = limit
        self.on_overflow = on_overflow
        self.overflowed = False
        self._total = 0
        self._lock = threading.Lock()
        self._stdout: list[str] = []
        self._stderr: list[str] = []
        self._threads = [
            threading.Thread(
                target=self._drain,
                args=(process.stdout, self._stdout, on_stdout),
                daemon=True,
            ),
            threading.Thread(
                target=self._drain,
                args=(process.stderr, self._stderr, on_stderr),
                daemon=True,
            ),
        ]

    def start(self) -> None:
        for thread in self._threads:
            thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        for thread in self._threads:
            thread.join(timeout)

    @property
    def stdout(self) -> str:
        with self._lock:
            return "".join(self._stdout)

    @property
    def stderr(self) -> str:
        with self._lock:
            return "".join(self._stderr)

    def _accept(self, chunk: bytes) -> bytes:
        """Return the part of ``chunk`` that fits under the limit."""
        with self._lock:
            if self.limit is None:
                return chunk
            room = self.limit - self._total
            if len(chunk) <= room:
                self._total += len(chunk)
                return chunk
            self._total = self.limit
            first_overflow = not self.overflowed
            self.overflowed = True
        if first_overflow and self.on_overflow is not None:
            self.on_overflow()
        return chunk[: max(room, 0)]

    def _drain(self, stream, buffer: list, callback: Optional[OutputCallback]) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                chunk = stream.read1(_CHUNK_SIZE)
                if not chunk:
                    break
                if callback is not None:
                    callback(decoder.decode(chunk))
                    continue
                kept = self._accept(chunk)
                if kept:
                    text = decoder.decode(kept)
                    with self._lock:
                        buffer.append(text)
                if self.overflowed:
                    break
            tail = decoder.decode(b"", final=True)
            if tail:
                if callback is not None:
                    callback(tail)
                else:
                    with self._lock:
                        buffer.append(tail)
        except (OSError, ValueError) as e:
            logger.debug(f"Output stream closed early: {e}")
        finally:
            stream.close()


def execute_command(
    command: str,
    timeout: Optional[float] = None,
    max_buffer: int = MAX_BUFFER_BYTES,
    shell_path: Optional[str] = None,
) -> CommandResult:
    """
    Run a command and capture its output.

    Args:
        command: Shell command string, passed to the shell as-is
        timeout: Wall-clock limit in seconds (LAZYSHELL_COMMAND_TIMEOUT_S or 30)
        max_buffer: Limit on combined stdout+stderr bytes (1 MiB)
        shell_path: Shell executable to use instead of the system default

    Returns:
        CommandResult. Timeouts report exit code 124, launch failures 127,
        output overflow the command's code (or 1 if it was killed).

    The command is appended to the user's shell history whether or not it
    succeeds.
    """
    timeout = get_command_timeout() if timeout is None else timeout
    logger.debug(f"Executing: {command}")

    try:
        process = _popen(command, shell_path, stdin=subprocess.DEVNULL, new_session=True)
    except OSError as e:
        add_to_shell_history(command)
        return CommandResult(
            success=False,
            stdout="",
            stderr=f"Execution error: {e}",
            exit_code=LAUNCH_FAILURE_EXIT_CODE,
            command=command,
        )

    pump = _OutputPump(
        process, limit=max_buffer, on_overflow=lambda: _kill_process_tree(process)
    )
    pump.start()

    timed_out = False
    try:
        returncode = process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_process_tree(process)
        returncode = process.wait()
    pump.join(_DRAIN_GRACE_S)

    add_to_shell_history(command)

    stdout, stderr = pump.stdout, pump.stderr
    exit_code = _normalise_exit_code(returncode)

    if timed_out:
        message = f"Command timed out after {timeout:g}s"
        return CommandResult(
            success=False,
            stdout=stdout,
            stderr=f"{stderr}\n{message}" if stderr else message,
            exit_code=TIMEOUT_EXIT_CODE,
            command=command,
        )

    if pump.overflowed:
        message = f"maxBuffer exceeded ({max_buffer} bytes)"
        return CommandResult(
            success=False,
            stdout=stdout,
            stderr=f"{stderr}\n{message}" if stderr else message,
            exit_code=exit_code if exit_code > 0 and returncode > 0 else 1,
            command=command,
        )

    return CommandResult(
        success=exit_code == 0,
        stdout=stdout,
        stderr=stderr,
        exit_code=exit_code,
        command=command,
    )


def _write_to(stream) -> OutputCallback:
    def write(text: str) -> None:
        stream.write(text)
        stream.flush()

    return write


def run_command_streaming(
    command: str,
    on_stdout: Optional[OutputCallback] = None,
    on_stderr: Optional[OutputCallback] = None,
    shell_path: Optional[str] = None,
) -> int:
    """
    Run a command, forwarding its output as it arrives.

    The command shares the terminal, session and stdin of this process, so
    it can prompt the user and receives Ctrl-C directly. There is no
    timeout and nothing is buffered; completion is detected when the
    process exits.

    Returns:
        The command's exit code, best effort (127 if it could not start)
    """
    on_stdout = on_stdout or _write_to(sys.stdout)
    on_stderr = on_stderr or _write_to(sys.stderr)

    add_to_shell_history(command)
    try:
        process = _popen(command, shell_path, stdin=None)
    except OSError as e:
        on_stderr(f"Error: {e}\n")
        return LAUNCH_FAILURE_EXIT_CODE

    pump = _OutputPump(process, on_stdout=on_stdout, on_stderr=on_stderr)
    pump.start()
    try:
        returncode = process.wait()
    except KeyboardInterrupt:
        # The child got the same SIGINT; wait for it to finish handling it.
        returncode = process.wait()
    pump.join(_DRAIN_GRACE_S)
    return _normalise_exit_code(returncode)
