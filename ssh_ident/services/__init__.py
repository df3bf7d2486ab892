"""
ssh-ident services: agent lifecycle and process launch.
"""

from .launcher import Launcher, launch, redirect_to_tty
from .agent_service import AgentService

__all__ = [
    "AgentService",
    "Launcher",
    "launch",
    "redirect_to_tty",
]
