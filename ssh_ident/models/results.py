"""
Result Models

Dataclass models for command outputs.
"""

from dataclasses import dataclass


@dataclass
class ExecutionResult:
    """Result of a command execution (ssh-add, ssh-keygen, ssh-agent)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"
