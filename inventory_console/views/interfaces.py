"""
Views - Interfaces

Contrats des contrôleurs de vue.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..client.interfaces import Pagination


@dataclass
class ViewState:
    """
    État local d'une vue après chargement.

    Attributes:
        data: Collections chargées, par nom ("inventory", "warehouses"...)
        error: Message à afficher (refus d'accès ou échec backend)
        pagination: Pagination de la collection principale, si paginée
    """

    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    pagination: Optional[Pagination] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IView(ABC):
    """Interface contrôleur de vue."""

    path: str = ""

    @abstractmethod
    async def load(self, **filters: Any) -> ViewState:
        """
        Charge les données de la vue.

        Un refus d'accès ou un échec backend est rendu dans
        ViewState.error; aucune requête n'est émise en cas de refus.
        """
        pass
