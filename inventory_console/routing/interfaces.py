"""
Routing - Interfaces

Contrats de la garde de navigation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


PUBLIC_PATHS: Tuple[str, ...] = ("/login", "/register")
LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"


class GuardAction(Enum):
    """Issue d'une évaluation de la garde."""

    LOADING = "loading"  # session non résolue, vue suspendue
    REDIRECT = "redirect"
    ALLOW = "allow"


@dataclass(frozen=True)
class GuardDecision:
    """
    Décision de navigation.

    Attributes:
        action: LOADING, REDIRECT ou ALLOW
        path: Chemin évalué
        target: Destination si REDIRECT
        reason: Motif lisible
    """

    action: GuardAction
    path: str
    target: Optional[str] = None
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.action == GuardAction.ALLOW

    @property
    def is_redirect(self) -> bool:
        return self.action == GuardAction.REDIRECT


class IRouteGuard(ABC):
    """Interface garde de navigation."""

    @abstractmethod
    def evaluate(self, path: str) -> GuardDecision:
        """
        Évalue l'entrée dans une vue, avant tout rendu.

        Args:
            path: Chemin demandé

        Returns:
            GuardDecision
        """
        pass

    @abstractmethod
    def is_public(self, path: str) -> bool:
        pass
