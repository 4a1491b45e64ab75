"""
Views - Gate

Accès aux vues et aux actions privilégiées selon la session courante.

Chaque vue déclare les rôles qui peuvent l'atteindre; la garde de
navigation ne vérifie que l'authentification, le filtrage par rôle est
fait ici, à l'entrée de la vue et avant chaque action.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional

from ..auth.interfaces import CapabilitySpec, Role
from ..auth.permissions import NavigationEntry, PermissionChecker, PermissionDeniedError
from ..auth.session_model import SessionModel
from ..routing.route_guard import normalize_path


AUTHENTICATION_REQUIRED = "Authentication required."


class ViewAccessDeniedError(Exception):
    """
    Entrée refusée dans une vue.

    Attributes:
        path: Vue demandée
        message: Message affiché à l'utilisateur
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class ViewPolicy:
    """Rôles autorisés sur une vue et message de refus."""

    path: str
    roles: FrozenSet[Role]
    denied_message: str = "Access denied."


_ALL_ROLES = frozenset(Role)

VIEW_POLICIES: Mapping[str, ViewPolicy] = MappingProxyType(
    {
        policy.path: policy
        for policy in (
            ViewPolicy("/dashboard", _ALL_ROLES),
            ViewPolicy("/inventory", _ALL_ROLES),
            # Liste visible par tous, actions filtrées par capacité
            ViewPolicy("/sku", _ALL_ROLES),
            ViewPolicy(
                "/warehouses",
                frozenset({Role.OWNER}),
                "Access denied. Only owners can manage warehouses.",
            ),
            ViewPolicy("/transactions", _ALL_ROLES),
            ViewPolicy("/alerts", _ALL_ROLES),
            ViewPolicy(
                "/analytics",
                frozenset({Role.OWNER, Role.MANAGER}),
                "Access denied. Only owners and managers can view analytics.",
            ),
            ViewPolicy(
                "/users",
                frozenset({Role.OWNER}),
                "Access denied. Only owners can manage users.",
            ),
            ViewPolicy("/profile", _ALL_ROLES),
        )
    }
)


class ViewGate:
    """
    Contrôle d'accès aux vues.

    Example:
        gate = ViewGate(session)
        if not gate.can_access("/users"):
            print(gate.denial_message("/users"))
        gate.require_permission("canDeleteSKUs")
    """

    def __init__(
        self,
        session: SessionModel,
        policies: Optional[Mapping[str, ViewPolicy]] = None,
        permission_checker: Optional[PermissionChecker] = None,
    ) -> None:
        self._session = session
        self._policies = policies if policies is not None else VIEW_POLICIES
        self._permissions = permission_checker or PermissionChecker()

    @property
    def session(self) -> SessionModel:
        return self._session

    def policy_for(self, path: str) -> Optional[ViewPolicy]:
        return self._policies.get(normalize_path(path))

    def can_access(self, path: str) -> bool:
        """
        Vérifie l'accès à une vue.

        Returns:
            False si anonyme, vue inconnue ou rôle non autorisé
        """
        if not self._session.is_authenticated:
            return False
        policy = self.policy_for(path)
        if policy is None:
            return False
        return self._session.has_role(policy.roles)

    def denial_message(self, path: str) -> Optional[str]:
        """Message de refus, None si l'accès est accordé."""
        if self.can_access(path):
            return None
        if not self._session.is_authenticated:
            return AUTHENTICATION_REQUIRED
        policy = self.policy_for(path)
        return policy.denied_message if policy is not None else "Access denied."

    def require_access(self, path: str) -> None:
        """
        Raises:
            ViewAccessDeniedError: Accès refusé
        """
        message = self.denial_message(path)
        if message is not None:
            raise ViewAccessDeniedError(normalize_path(path), message)

    def require_permission(self, capability: CapabilitySpec) -> None:
        """
        Raises:
            PermissionDeniedError: Capacité absente pour la session courante
        """
        if not self._session.has_permission(capability):
            raise PermissionDeniedError(capability, self._current_role())

    def navigation(self) -> List[NavigationEntry]:
        """Entrées de navigation accessibles à la session courante."""
        return self._permissions.navigation_for(self._current_role())

    def _current_role(self) -> Optional[str]:
        user = self._session.user
        return user.role if user is not None and self._session.is_authenticated else None
