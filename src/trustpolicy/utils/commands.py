"""Command execution helpers for the platform preference and process tools."""
from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from typing import Any, Sequence

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 5

# Commands known to be slow to answer on busy machines, by program name
SLOW_COMMANDS = {
    "powershell": 20,
    "ps": 10,
}


class CommandTimeoutError(RuntimeError):
    """Raised when a command times out."""

    def __init__(self, command: Sequence[str], timeout: int) -> None:
        cmd_str = " ".join(shlex.quote(arg) for arg in command)
        super().__init__(f"Command timed out after {timeout}s: {cmd_str}")
        self.command = list(command)
        self.timeout = timeout
        self.cmd_str = cmd_str

    def __str__(self) -> str:
        return f"Command '{self.command[0]}' timed out after {self.timeout}s"


@dataclass
class CommandResult:
    """Container for command outputs."""

    stdout: str
    stderr: str
    returncode: int
    elapsed_time: float = 0.0
    command: Sequence[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def get_suggested_timeout(command: Sequence[str]) -> int:
    """Get suggested timeout for a command based on known slow commands."""
    if not command:
        return _DEFAULT_TIMEOUT
    name = os.path.basename(command[0].replace("\\", "/")).lower()
    if name.endswith(".exe"):
        name = name[:-4]
    return SLOW_COMMANDS.get(name, _DEFAULT_TIMEOUT)


def run_command(
    command: Sequence[str],
    *,
    timeout: int | None = None,
    raise_on_timeout: bool = True,
) -> CommandResult:
    """Execute a system command safely.

    Args:
        command: Command with arguments.
        timeout: Timeout in seconds. If None, auto-selects based on command.
        raise_on_timeout: If False, return empty result instead of raising.

    Returns:
        CommandResult with stdout, stderr, return code, and timing.

    Raises:
        CommandTimeoutError: If the command exceeds timeout (and raise_on_timeout=True).
        FileNotFoundError: If the command cannot be located.
    """
    if not command:
        raise ValueError("Command cannot be empty")

    if timeout is None:
        timeout = get_suggested_timeout(command)

    start_time = time.perf_counter()
    cmd_str = " ".join(shlex.quote(arg) for arg in command)

    try:
        logger.debug("Running command (timeout=%ds): %s", timeout, cmd_str)
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        elapsed = time.perf_counter() - start_time
        logger.error(
            "Command timed out after %.1fs (limit: %ds): %s",
            elapsed, timeout, cmd_str
        )
        if raise_on_timeout:
            raise CommandTimeoutError(command, timeout)
        return CommandResult(
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            returncode=-1,
            elapsed_time=elapsed,
            command=list(command),
        )
    except FileNotFoundError:
        logger.error("Command not found: %s", command[0])
        raise

    return CommandResult(
        stdout=completed.stdout.strip(),
        stderr=completed.stderr.strip(),
        returncode=completed.returncode,
        elapsed_time=time.perf_counter() - start_time,
        command=list(command),
    )


def run_command_graceful(
    command: Sequence[str],
    *,
    timeout: int | None = None,
    default_stdout: str = "",
    default_returncode: int = -1,
) -> CommandResult:
    """Execute a command with graceful fallback on any error.

    Returns:
        CommandResult, never raises exceptions.
    """
    try:
        return run_command(command, timeout=timeout, raise_on_timeout=False)
    except (FileNotFoundError, OSError) as exc:
        logger.debug("Command failed gracefully: %s - %s", command[0], exc)
        return CommandResult(
            stdout=default_stdout,
            stderr=str(exc),
            returncode=default_returncode,
            elapsed_time=0.0,
            command=list(command),
        )


def spawn_detached(executable: str, *args: str) -> int:
    """Start a process without waiting for it and return its pid.

    Raises:
        OSError: If the process cannot be started.
    """
    command = [executable, *args]
    logger.debug("Spawning: %s", " ".join(shlex.quote(arg) for arg in command))
    kwargs: dict[str, Any] = {}
    if os.name == "posix":
        kwargs["start_new_session"] = True
    process = subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        close_fds=True,
        **kwargs,
    )
    return process.pid
