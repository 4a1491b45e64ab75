"""
Storage - Interfaces

Persistance du credential (bearer token opaque) entre deux lancements.
Le token n'est jamais inspecté: pas de suivi d'expiration côté client,
l'invalidation n'est détectée que par un refus du backend.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ITokenStore(ABC):
    """Interface stockage du token."""

    @abstractmethod
    def get(self) -> Optional[str]:
        """
        Retourne le token stocké.

        Returns:
            Token, ou None si aucun
        """
        pass

    @abstractmethod
    def set(self, token: str) -> None:
        """
        Enregistre le token (remplace le précédent).

        Raises:
            TokenStoreError: Token vide ou écriture impossible
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Supprime le token. Sans effet si aucun token stocké."""
        pass
