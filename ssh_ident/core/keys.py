"""Discovery of key material and ssh client config per identity"""

import os
import re
from typing import Dict, List, Optional

from ssh_ident.constants import KEY_KINDS
from ssh_ident.core.config_loader import IdentConfig
from ssh_ident.logger import IdentLogger
from ssh_ident.models.keys import KeyPair


def classify_key_file(path: str):
    """
    Classify a key file as private or public.

    Returns:
        Tuple of (base name, 'priv' | 'pub'); the first classifier
        substring found in the path decides
    """
    for match, kind in KEY_KINDS:
        if match in path:
            return path.replace(match, ""), kind
    # KEY_KINDS ends with "" which always matches
    return path, "priv"


class KeyLocator:
    """Finds key pairs and ssh config files for an identity."""

    def __init__(self, config: IdentConfig, logger: IdentLogger):
        self.config = config
        self.logger = logger

    def identity_directory(self, identity: str) -> str:
        return os.path.join(self.config.get("DIR_IDENTITIES"), identity)

    def key_directories(self, identity: str) -> List[str]:
        """Directories scanned for keys, most specific first."""
        directories = [self.identity_directory(identity)]
        if identity == self.config.environ.get("USER"):
            directories.append(os.path.join(self.config.home, ".ssh"))
        return directories

    def find_keys(self, identity: str) -> Dict[str, KeyPair]:
        """
        Scan key directories for the identity.

        Args:
            identity: Identity name

        Returns:
            Mapping of base name to KeyPair (possibly partial)
        """
        directories = self.key_directories(identity)
        pattern = re.compile(self.config.get("PATTERN_KEYS"))
        found: Dict[str, KeyPair] = {}

        for directory in directories:
            if not os.path.isdir(directory):
                continue

            for name in sorted(os.listdir(directory)):
                key_path = os.path.join(directory, name)
                if not os.path.isfile(key_path) or not pattern.search(key_path):
                    continue

                base_name, kind = classify_key_file(key_path)
                found.setdefault(base_name, KeyPair(base_name)).assign(kind, key_path)

        if not found:
            self.logger.warning(
                f"no keys found for identity {identity} in:\n    "
                + "\n    ".join(directories)
            )
        else:
            self.logger.debug(f"Keys for identity {identity}: {list(found.values())}")

        return found

    def find_ssh_config(self, identity: str) -> Optional[str]:
        """
        Locate the identity's ssh client config.

        Returns:
            Path of the first matching file, or None
        """
        directory = self.identity_directory(identity)
        if not os.path.isdir(directory):
            return None

        pattern = re.compile(self.config.get("PATTERN_CONFIG"))
        for name in sorted(os.listdir(directory)):
            path = os.path.join(directory, name)
            if os.path.isfile(path) and pattern.search(path):
                self.logger.debug(f"Using ssh config {path}")
                return path
        return None
