"""
Routing

Garde de navigation évaluée avant l'entrée dans une vue, et
emplacement courant réévalué à chaque transition de session.
"""

from .interfaces import (
    PUBLIC_PATHS,
    LOGIN_PATH,
    HOME_PATH,
    # Enums
    GuardAction,
    # Data classes
    GuardDecision,
    # Interfaces
    IRouteGuard,
)
from .route_guard import (
    RouteGuard,
    Navigator,
    normalize_path,
    # Exceptions
    NavigationLoopError,
)

__all__ = [
    "PUBLIC_PATHS",
    "LOGIN_PATH",
    "HOME_PATH",
    # Enums
    "GuardAction",
    # Data classes
    "GuardDecision",
    # Interfaces
    "IRouteGuard",
    # Implementations
    "RouteGuard",
    "Navigator",
    "normalize_path",
    # Exceptions
    "NavigationLoopError",
]
