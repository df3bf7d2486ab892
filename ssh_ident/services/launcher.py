"""Launcher: locating the wrapped binary and handing the process over to it."""

import os
import re
import sys
from typing import List, NoReturn, Optional, Sequence

from ssh_ident.constants import (
    BATCH_MODE_BINARIES,
    BATCH_MODE_DISABLE_PATTERN,
    BATCH_MODE_ENABLE_PATTERN,
    TTY_DEVICE,
)
from ssh_ident.core.config_loader import IdentConfig
from ssh_ident.exceptions import BinaryNotFoundError, ExecError, LoopDetectedError
from ssh_ident.logger import IdentLogger
from ssh_ident import utils


def launch(path: str, args: Sequence[str]) -> NoReturn:
    """
    Replace the current process image.

    Returns only by raising ExecError when the program cannot be started.
    """
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execv(path, list(args))
    except OSError as e:
        raise ExecError(f"Could not run {path}", context=str(e))


def redirect_to_tty() -> bool:
    """
    Point sys.stdout and sys.stderr at the controlling terminal.

    File descriptors 1 and 2 are left alone, so the exec'd ssh keeps
    the caller's redirections.

    Returns:
        True if a terminal was available
    """
    try:
        fd = os.open(TTY_DEVICE, os.O_WRONLY | os.O_NOCTTY)
    except OSError:
        return False
    sys.stdout = os.fdopen(fd, "w", buffering=1)
    sys.stderr = sys.stdout
    return True


class Launcher:
    """Resolves the real ssh binary and pre-scans the command line."""

    def __init__(self, config: IdentConfig, logger: IdentLogger):
        self.config = config
        self.logger = logger

    def own_path(self, runtime_name: str) -> Optional[str]:
        """Absolute path this program was started from, if it can be found."""
        if os.path.dirname(runtime_name):
            return os.path.abspath(runtime_name)

        for directory in utils.search_path(self.config.environ):
            candidate = os.path.join(directory, runtime_name)
            if utils.is_executable(candidate):
                return candidate
        return None

    def autodetect_binary(self, argv: Sequence[str]) -> None:
        """
        Set BINARY_SSH unless it is already configured.

        Raises:
            BinaryNotFoundError: If neither argv[0]'s name nor ssh is found
        """
        if self.config.get("BINARY_SSH", required=False):
            return

        runtime_name = argv[0]
        binary_name = os.path.basename(runtime_name)

        binary_dir = self.config.get("BINARY_DIR", required=False)
        if binary_dir:
            binary_path = os.path.join(binary_dir, binary_name)
            if not utils.is_executable(binary_path):
                binary_path = os.path.join(binary_dir, "ssh")
            self.config.set("BINARY_SSH", binary_path)
            self.logger.debug(
                f"Will run '{binary_path}' as ssh binary - detected based on BINARY_DIR"
            )
            return

        own_path = self.own_path(runtime_name)
        if own_path is None:
            self.logger.warning(
                f"argv[0] ('{runtime_name}') could not be located. "
                "This may result in a loop with 'ssh-ident' trying to run itself."
            )
        own_dir = os.path.dirname(own_path) if own_path else ""

        search_path = [
            directory
            for directory in utils.search_path(self.config.environ)
            if directory != own_dir
        ]
        binary_path = self._find_in(search_path, binary_name) or self._find_in(
            search_path, "ssh"
        )
        if binary_path is None:
            raise BinaryNotFoundError(runtime_name)

        self.config.set("BINARY_SSH", binary_path)
        self.logger.debug(
            f"Will run '{binary_path}' as ssh binary - detected from argv[0] and $PATH"
        )

    @staticmethod
    def _find_in(directories: List[str], name: str) -> Optional[str]:
        for directory in directories:
            candidate = os.path.join(directory, name)
            if utils.is_executable(candidate):
                return candidate
        return None

    def check_for_loop(self, argv: Sequence[str]) -> None:
        """
        Refuse to exec ourselves.

        Raises:
            LoopDetectedError: If BINARY_SSH is this very program
        """
        binary = self.config.get("BINARY_SSH")
        own_path = self.own_path(argv[0])
        if own_path is None:
            return

        if os.path.realpath(binary) == os.path.realpath(own_path):
            raise LoopDetectedError(argv[0], binary)

    def parse_command_line(self, argv: Sequence[str]) -> None:
        """
        Detect BatchMode among ssh/scp options.

        '-o Opt' pairs are coalesced into '-oOpt' (on a copy, argv is
        passed through untouched) so both spellings match. The first
        BatchMode option found decides.
        """
        binary = os.path.basename(self.config.get("BINARY_SSH"))
        if binary not in BATCH_MODE_BINARIES:
            return

        enable = re.compile(BATCH_MODE_ENABLE_PATTERN, re.IGNORECASE)
        disable = re.compile(BATCH_MODE_DISABLE_PATTERN, re.IGNORECASE)

        scanned = list(argv)
        for index, arg in enumerate(scanned):
            if arg == "-o" and index + 1 < len(scanned):
                scanned[index + 1] = arg + scanned[index + 1]
            if enable.search(arg):
                self.config.set("SSH_BATCH_MODE", True)
                break
            if disable.search(arg):
                self.config.set("SSH_BATCH_MODE", False)
                break
