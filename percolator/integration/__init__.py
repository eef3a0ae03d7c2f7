"""
Client configuration and auxiliary caches
"""

from .config import ClientConfig, load_config
from .token_meta import TokenMeta, TokenMetaCache

__all__ = [
    "ClientConfig",
    "load_config",
    "TokenMeta",
    "TokenMetaCache",
]
