"""
Key and Agent Models

Dataclass models for key material and agent handles.
"""

import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class KeyPair:
    """Private/public key files sharing a base name."""

    base_name: str
    private_key: Optional[str] = None
    public_key: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """Check if both halves of the pair were found."""
        return self.private_key is not None and self.public_key is not None

    def assign(self, kind: str, path: str) -> None:
        """Store path in the 'priv' or 'pub' slot."""
        if kind == "pub":
            self.public_key = path
        else:
            self.private_key = path

    def __repr__(self) -> str:
        return f"KeyPair(priv={self.private_key}, pub={self.public_key})"


@dataclass
class AgentHandle:
    """Well-known file describing a per-identity, per-host ssh-agent."""

    agents_dir: Path
    identity: str
    hostname: str = ""

    def __post_init__(self):
        if not self.hostname:
            self.hostname = socket.gethostname()

    @property
    def path(self) -> Path:
        """Path of the agent file (agent-<identity>-<hostname>)."""
        return self.agents_dir / f"agent-{self.identity}-{self.hostname}"

    @property
    def is_readable(self) -> bool:
        """Check if the agent file exists and can be read."""
        try:
            with open(self.path, "r"):
                return True
        except OSError:
            return False

    def __repr__(self) -> str:
        return f"AgentHandle(identity={self.identity}, path={self.path})"
