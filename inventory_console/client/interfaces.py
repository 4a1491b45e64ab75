"""
Client - Interfaces

Contrats du client HTTP vers le backend d'inventaire:
- Enveloppe de réponse { success, data, message, pagination }
- Timeouts connexion/requête, configurables par endpoint
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class TimeoutType(Enum):
    """Types de timeout supportés."""

    CONNECTION = "connection"
    REQUEST = "request"


@dataclass
class TimeoutConfig:
    """Configuration des timeouts (secondes)."""

    connection_timeout: float = 10.0
    request_timeout: float = 30.0


@dataclass(frozen=True)
class Pagination:
    """Pagination renvoyée par les listes du backend."""

    total: int = 0
    page: int = 1
    pages: int = 1

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "Pagination":
        if not payload:
            return cls()
        return cls(
            total=int(payload.get("total", 0) or 0),
            page=int(payload.get("page", 1) or 1),
            pages=int(payload.get("pages", 1) or 1),
        )


@dataclass(frozen=True)
class ApiResponse:
    """
    Enveloppe de réponse du backend.

    Attributes:
        success: Indicateur de succès renvoyé par le backend
        data: Charge utile (objet, liste...)
        message: Message lisible éventuel
        pagination: Présente pour les listes paginées
    """

    success: bool
    data: Any = None
    message: Optional[str] = None
    pagination: Optional[Pagination] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ApiResponse":
        if not isinstance(payload, dict):
            return cls(success=True, data=payload)

        pagination = payload.get("pagination")
        return cls(
            success=bool(payload.get("success", False)),
            data=payload.get("data"),
            message=payload.get("message"),
            pagination=Pagination.from_payload(pagination) if pagination else None,
        )


class ITimeoutManager(ABC):
    """Interface gestion timeouts."""

    @abstractmethod
    def get_timeout(self, timeout_type: TimeoutType, endpoint: Optional[str] = None) -> float:
        """
        Retourne timeout configuré.

        Args:
            timeout_type: Type de timeout
            endpoint: Chemin d'API optionnel pour config spécifique

        Returns:
            Valeur du timeout en secondes
        """
        pass

    @abstractmethod
    def set_endpoint_timeout(self, endpoint: str, config: TimeoutConfig) -> None:
        """Configure un timeout spécifique à un endpoint."""
        pass


class IApiClient(ABC):
    """Interface client HTTP authentifié."""

    @abstractmethod
    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Émet une requête et retourne le corps JSON décodé.

        Args:
            path: Chemin relatif à l'URL de base (ex: "/sku")
            method: Méthode HTTP
            body: Corps sérialisé en JSON
            headers: En-têtes additionnels (priment sur les défauts)
            params: Paramètres de query string

        Returns:
            Corps JSON décodé

        Raises:
            ApiError: Statut non-2xx ou success=false
            NetworkError: Requête non aboutie
        """
        pass

    @abstractmethod
    def get_token(self) -> Optional[str]:
        """Token courant (None si absent)."""
        pass

    @abstractmethod
    def set_token(self, token: str) -> None:
        """Enregistre le token."""
        pass

    @abstractmethod
    def remove_token(self) -> None:
        """Supprime le token."""
        pass
