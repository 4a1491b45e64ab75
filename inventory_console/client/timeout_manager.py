"""
Client - Timeout Manager

Gestion centralisée des timeouts HTTP.

Limites: connexion 10 secondes max, requête 30 secondes max, avec
surcharge possible par endpoint (dans les mêmes limites).
"""

from typing import Dict, List, Optional

import httpx

from ..core.interfaces import ClientSettings
from .interfaces import ITimeoutManager, TimeoutConfig, TimeoutType


class InvalidTimeoutError(Exception):
    """Configuration timeout invalide."""

    pass


class TimeoutManager(ITimeoutManager):
    """
    Gestion centralisée des timeouts.

    Example:
        manager = TimeoutManager(TimeoutConfig(connection_timeout=5.0))
        manager.set_endpoint_timeout("/analytics/stock-aging", TimeoutConfig(request_timeout=30.0))
        timeout = manager.to_httpx("/analytics/stock-aging")
    """

    MAX_CONNECTION_TIMEOUT: float = 10.0
    MAX_REQUEST_TIMEOUT: float = 30.0

    def __init__(self, default_config: Optional[TimeoutConfig] = None) -> None:
        """
        Args:
            default_config: Configuration par défaut (optionnel)

        Raises:
            InvalidTimeoutError: Si la configuration par défaut est hors limites
        """
        self._default = default_config or TimeoutConfig()
        self._endpoint_configs: Dict[str, TimeoutConfig] = {}

        self._validate_config(self._default)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "TimeoutManager":
        """Construit le gestionnaire depuis la configuration client."""
        manager = cls(
            TimeoutConfig(
                connection_timeout=settings.connection_timeout,
                request_timeout=settings.request_timeout,
            )
        )
        for endpoint, request_timeout in settings.endpoint_timeouts.items():
            manager.set_endpoint_timeout(
                endpoint,
                TimeoutConfig(
                    connection_timeout=settings.connection_timeout,
                    request_timeout=request_timeout,
                ),
            )
        return manager

    def _validate_config(self, config: TimeoutConfig) -> None:
        """
        Valide une configuration complète.

        Raises:
            InvalidTimeoutError: Si configuration invalide
        """
        if config.connection_timeout <= 0:
            raise InvalidTimeoutError("connection_timeout must be positive")

        if config.connection_timeout > self.MAX_CONNECTION_TIMEOUT:
            raise InvalidTimeoutError(
                f"connection_timeout ({config.connection_timeout}s) exceeds "
                f"maximum ({self.MAX_CONNECTION_TIMEOUT}s)"
            )

        if config.request_timeout <= 0:
            raise InvalidTimeoutError("request_timeout must be positive")

        if config.request_timeout > self.MAX_REQUEST_TIMEOUT:
            raise InvalidTimeoutError(
                f"request_timeout ({config.request_timeout}s) exceeds "
                f"maximum ({self.MAX_REQUEST_TIMEOUT}s)"
            )

    def get_timeout(self, timeout_type: TimeoutType, endpoint: Optional[str] = None) -> float:
        """
        Retourne timeout configuré (endpoint-specific ou default).

        Args:
            timeout_type: Type de timeout demandé
            endpoint: Chemin d'API (query string ignorée)

        Returns:
            Valeur du timeout en secondes
        """
        config = self._config_for(endpoint)

        if timeout_type == TimeoutType.CONNECTION:
            return config.connection_timeout
        return config.request_timeout

    def set_endpoint_timeout(self, endpoint: str, config: TimeoutConfig) -> None:
        """
        Configure timeout spécifique par endpoint.

        Raises:
            ValueError: Si endpoint vide
            InvalidTimeoutError: Si configuration hors limites
        """
        if not endpoint or not endpoint.strip():
            raise ValueError("Endpoint cannot be empty")

        self._validate_config(config)
        self._endpoint_configs[self._normalize(endpoint)] = config

    def remove_endpoint_timeout(self, endpoint: str) -> bool:
        """Retire la configuration spécifique d'un endpoint."""
        return self._endpoint_configs.pop(self._normalize(endpoint), None) is not None

    def get_configured_endpoints(self) -> List[str]:
        return list(self._endpoint_configs.keys())

    def to_httpx(self, endpoint: Optional[str] = None) -> httpx.Timeout:
        """
        Convertit en httpx.Timeout.

        Le timeout requête s'applique à la lecture, à l'écriture et à
        l'attente d'une connexion du pool.
        """
        config = self._config_for(endpoint)
        return httpx.Timeout(config.request_timeout, connect=config.connection_timeout)

    def _config_for(self, endpoint: Optional[str]) -> TimeoutConfig:
        if endpoint:
            config = self._endpoint_configs.get(self._normalize(endpoint))
            if config is not None:
                return config
        return self._default

    @staticmethod
    def _normalize(endpoint: str) -> str:
        path = endpoint.strip().split("?", 1)[0]
        return "/" + path.strip("/")
