"""
Client

Passerelle HTTP vers le backend d'inventaire:
- Bearer token joint à chaque requête quand il existe
- Réponses normalisées: corps JSON décodé ou ApiError / NetworkError
- Timeouts connexion/requête, surcharge par endpoint
- Token enregistré après login/inscription réussis
"""

from .interfaces import (
    # Enums
    TimeoutType,
    # Data classes
    TimeoutConfig,
    Pagination,
    ApiResponse,
    # Interfaces
    IApiClient,
    ITimeoutManager,
)
from .timeout_manager import (
    TimeoutManager,
    InvalidTimeoutError,
)
from .api_client import (
    ApiClient,
    compact_params,
    encode_query,
    # Exceptions
    ClientError,
    ApiError,
    NetworkError,
)

__all__ = [
    # Enums
    "TimeoutType",
    # Data classes
    "TimeoutConfig",
    "Pagination",
    "ApiResponse",
    # Interfaces
    "IApiClient",
    "ITimeoutManager",
    # Implementations
    "ApiClient",
    "TimeoutManager",
    "compact_params",
    "encode_query",
    # Exceptions
    "ClientError",
    "ApiError",
    "NetworkError",
    "InvalidTimeoutError",
]
