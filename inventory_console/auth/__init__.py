"""
Auth

Session et autorisations côté client:
- Session unique par modèle, modifiée par un seul point d'écriture
- Table immuable rôle → capacités, refus par défaut
- Liste de navigation filtrée par rôle
"""

from .interfaces import (
    # Enums
    Role,
    Capability,
    AuthState,
    # Data classes
    Session,
    SessionSnapshot,
    # Interfaces
    IPermissionChecker,
    ISessionModel,
)
from .permissions import (
    ROLE_PERMISSIONS,
    NAV_ITEMS,
    NavigationEntry,
    PermissionChecker,
    PermissionDeniedError,
)
from .session_model import SessionModel

__all__ = [
    # Enums
    "Role",
    "Capability",
    "AuthState",
    # Data classes
    "Session",
    "SessionSnapshot",
    "NavigationEntry",
    # Interfaces
    "IPermissionChecker",
    "ISessionModel",
    # Implementations
    "ROLE_PERMISSIONS",
    "NAV_ITEMS",
    "PermissionChecker",
    "SessionModel",
    # Exceptions
    "PermissionDeniedError",
]
