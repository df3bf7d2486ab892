"""
ssh-ident Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .keys import (
    KeyPair,
    AgentHandle,
)
from .results import ExecutionResult

__all__ = [
    # Keys
    "KeyPair",
    "AgentHandle",
    # Results
    "ExecutionResult",
]
