"""Identity selection for an ssh-ident invocation"""

import os
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from ssh_ident.core.config_loader import IdentConfig
from ssh_ident.logger import IdentLogger


def find_identity_in_list(
    elements: Sequence[str], rules: Iterable[Tuple[str, str]]
) -> Optional[str]:
    """
    Return the identity of the first rule matching any element.

    Rules are tried in configured order; there is no best-match scoring.
    """
    for regex, identity in rules:
        pattern = re.compile(regex)
        if any(pattern.search(element) for element in elements):
            return identity
    return None


class IdentityMatcher:
    """Picks the identity from argv, then the working directory, then the default."""

    def __init__(self, config: IdentConfig, logger: IdentLogger):
        self.config = config
        self.logger = logger

    @staticmethod
    def path_variants(cwd: Optional[str] = None) -> List[str]:
        """Raw, absolute and symlink-free forms of the working directory."""
        raw = cwd or os.getcwd()
        return [raw, os.path.abspath(raw), os.path.realpath(raw)]

    def resolve(self, argv: Sequence[str], cwd: Optional[str] = None) -> str:
        """
        Determine the identity for this invocation.

        Args:
            argv: Command line (argv[0] included)
            cwd: Working directory (defaults to the process's)

        Returns:
            Identity name
        """
        identity = find_identity_in_list(argv, self.config.get("MATCH_ARGV"))
        if identity:
            self.logger.debug(f"Identity {identity} selected from command line")
            return identity

        identity = find_identity_in_list(
            self.path_variants(cwd), self.config.get("MATCH_PATH")
        )
        if identity:
            self.logger.debug(f"Identity {identity} selected from working directory")
            return identity

        identity = self.config.get("DEFAULT_IDENTITY")
        self.logger.debug(f"Using default identity {identity}")
        return identity
