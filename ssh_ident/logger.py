"""
Logging system for ssh-ident
Provides leveled console output with an optional log file
"""

from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, Optional, TextIO, Union

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from ssh_ident.core.config_loader import IdentConfig


class LogLevel(IntEnum):
    """Ordered message severities (lower is more severe)"""

    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4

    @classmethod
    def parse(cls, value: Union[int, str, "LogLevel"]) -> "LogLevel":
        """
        Parse a verbosity setting

        Accepts 1-4, 'LOG_INFO'-style names and plain names like 'debug'.

        Raises:
            ValueError: If the value is not a known level
        """
        if isinstance(value, int):
            return cls(value)

        text = str(value).strip().upper()
        if text.isdigit():
            return cls(int(text))
        if text.startswith("LOG_"):
            text = text[len("LOG_"):]
        if text == "WARNING":
            text = "WARN"
        try:
            return cls[text]
        except KeyError:
            raise ValueError(f"unknown verbosity '{value}'")


class IdentLogger:
    """
    Prints diagnostics for one invocation
    - Honors VERBOSITY (error/warn/info/debug)
    - Silent in batch mode, so machine-parsed ssh output stays clean
    - Optionally appends every message to FILE_LOG
    """

    def __init__(
        self,
        config: "IdentConfig",
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            config: Resolved configuration (read on every call)
            console: Console for info/debug output
            error_console: Console for warnings and errors
        """
        self.config = config
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)
        self.log_file: Optional[TextIO] = None
        self.log_file_failed = False

    @property
    def verbosity(self) -> LogLevel:
        return LogLevel.parse(self.config.get("VERBOSITY"))

    @property
    def batch_mode(self) -> bool:
        return bool(self.config.get("SSH_BATCH_MODE", required=False))

    def should_print(self, level: LogLevel) -> bool:
        """Check if a message at this level reaches the console."""
        if self.batch_mode:
            return False
        return level <= self.verbosity

    def _write_file(self, message: str, level: LogLevel) -> None:
        if self.log_file_failed:
            return
        path = self.config.get("FILE_LOG", required=False)
        if not path:
            return

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            if self.log_file is None:
                self.log_file = open(path, "a", buffering=1)
            for line in message.splitlines() or [""]:
                self.log_file.write(f"[{timestamp}] [{level.name}] {line}\n")
        except OSError as e:
            # Console-only from here on; the log file never stops ssh
            self.log_file_failed = True
            self.log_file = None
            self.warning(f"Cannot write log file {path}: {e}")

    def log(self, message: str, level: LogLevel = LogLevel.INFO, style: str = "") -> None:
        """
        Log a message

        Args:
            message: Plain text message (not rich markup)
            level: Severity of the message
            style: Rich style for console output
        """
        self._write_file(message, level)

        if not self.should_print(level):
            return

        console = self.error_console if level <= LogLevel.WARN else self.console
        text = escape(message)
        console.print(f"[{style}]{text}[/{style}]" if style else text)

    def error(self, message: str) -> None:
        self.log(f"✗ {message}", LogLevel.ERROR, style="bold red")

    def warning(self, message: str) -> None:
        self.log(f"⚠ {message}", LogLevel.WARN, style="yellow")

    def info(self, message: str) -> None:
        self.log(message, LogLevel.INFO)

    def success(self, message: str) -> None:
        self.log(f"✓ {message}", LogLevel.INFO, style="dim")

    def debug(self, message: str) -> None:
        self.log(message, LogLevel.DEBUG, style="dim")

    def close(self) -> None:
        """Close log file"""
        if self.log_file:
            self.log_file.close()
            self.log_file = None
