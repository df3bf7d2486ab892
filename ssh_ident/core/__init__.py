"""
ssh-ident core: configuration, identity selection and key discovery.
"""

from .config_loader import IdentConfig, UserConfigSchema
from .identity import IdentityMatcher
from .keys import KeyLocator

__all__ = [
    "IdentConfig",
    "UserConfigSchema",
    "IdentityMatcher",
    "KeyLocator",
]
