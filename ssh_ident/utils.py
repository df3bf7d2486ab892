"""
ssh-ident Utilities

Subprocess, shell quoting and terminal helpers.
"""

import fcntl
import os
import subprocess
import termios
from typing import IO, List, Optional, Sequence

from ssh_ident.constants import SHELL, TTY_DEVICE
from ssh_ident.models.results import ExecutionResult


def escape_shell_arguments(argv: Sequence[str]) -> str:
    """
    Quote arguments for a POSIX shell.

    Each argument is wrapped in single quotes; embedded single quotes
    become '"'"' (close quote, quoted quote, reopen quote).
    """
    return " ".join("'" + arg.replace("'", "'\"'\"'") + "'" for arg in argv)


def source_agent_prefix(agent_file: str) -> str:
    """Shell snippet that silently sources an agent file."""
    return f". {escape_shell_arguments([agent_file])} >/dev/null 2>/dev/null; "


def run_command(
    cmd: List[str],
    stdin: Optional[IO] = None,
    stdout: Optional[IO] = None,
    capture: bool = True,
) -> ExecutionResult:
    """
    Run a command without a shell.

    Args:
        cmd: Argument vector
        stdin: File to connect to stdin (inherited when None)
        stdout: File to connect to stdout
        capture: Capture stdout when no file is given (inherit it otherwise)

    Returns:
        ExecutionResult (returncode 127 when the program does not exist)
    """
    if stdout is None and capture:
        stdout = subprocess.PIPE
    try:
        result = subprocess.run(
            cmd,
            stdin=stdin,
            stdout=stdout,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        return ExecutionResult(returncode=127, stderr=str(e), command=" ".join(cmd))

    return ExecutionResult(
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
        command=" ".join(cmd),
    )


def run_in_agent(
    agent_file: str,
    command: str,
    stdin: Optional[IO] = None,
    stdout: Optional[IO] = None,
    capture: bool = True,
) -> ExecutionResult:
    """Run a shell command with the agent file's environment sourced."""
    return run_command(
        [SHELL, "-c", source_agent_prefix(agent_file) + command],
        stdin=stdin,
        stdout=stdout,
        capture=capture,
    )


def get_session_tty() -> Optional[IO]:
    """
    Open the controlling terminal of the session.

    Returns:
        Open file on /dev/tty, or None without a controlling terminal
    """
    try:
        fd = open(TTY_DEVICE, "r+")
    except OSError:
        return None
    try:
        fcntl.ioctl(fd, termios.TIOCGPGRP, "  ")
    except OSError:
        fd.close()
        return None
    return fd


def is_executable(path: str) -> bool:
    """Check if path is a regular file we may execute."""
    return os.path.isfile(path) and os.access(path, os.X_OK)


def search_path(environ=None) -> List[str]:
    """Directories listed in $PATH, made absolute."""
    environ = os.environ if environ is None else environ
    return [
        os.path.abspath(os.path.expanduser(directory))
        for directory in environ.get("PATH", "").split(os.pathsep)
        if directory
    ]
