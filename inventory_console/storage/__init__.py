"""
Storage

Persistance du bearer token:
- Un token par origine backend
- Pas de suivi d'expiration côté client
"""

from .interfaces import ITokenStore
from .token_store import (
    FileTokenStore,
    MemoryTokenStore,
    TokenStoreError,
    origin_of,
)

__all__ = [
    # Interfaces
    "ITokenStore",
    # Implementations
    "FileTokenStore",
    "MemoryTokenStore",
    "origin_of",
    # Exceptions
    "TokenStoreError",
]
