"""ssh-ident: per-identity ssh-agent management for ssh and scp."""

__version__ = "1.0.0"
