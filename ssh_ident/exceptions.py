"""
ssh-ident Exception Hierarchy

Clean exception hierarchy for consistent error handling across the wrapper.
"""

from typing import Optional


class SshIdentError(Exception):
    """Base exception for all ssh-ident errors."""

    exit_code = 1

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(SshIdentError):
    """Raised when configuration is invalid or missing."""

    pass


class BinaryNotFoundError(SshIdentError):
    """Raised when no ssh binary to wrap can be located."""

    exit_code = 255

    def __init__(self, runtime_name: str):
        self.runtime_name = runtime_name
        message = (
            f"ssh-ident was invoked in place of the binary '{runtime_name}'. "
            "Neither this binary nor 'ssh' could be found in $PATH."
        )
        super().__init__(message, context="Set BINARY_SSH or BINARY_DIR")


class LoopDetectedError(SshIdentError):
    """Raised when the wrapped binary would be ssh-ident itself."""

    exit_code = 255

    def __init__(self, runtime_name: str, binary: str):
        self.runtime_name = runtime_name
        self.binary = binary
        message = (
            f"ssh-ident found '{binary}' as the next command to run. "
            f"Based on argv[0] ('{runtime_name}'), it seems like this will create a loop."
        )
        super().__init__(message, context="Set BINARY_SSH or BINARY_DIR")


class ExecError(SshIdentError):
    """Raised when the final exec of the wrapped binary fails."""

    pass
