"""
Auth - Permissions

Table immuable rôle → capacités et liste de navigation.

Un rôle absent de la table, ou une capacité inconnue, est refusé.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Tuple

from .interfaces import Capability, CapabilitySpec, IPermissionChecker, Role


class PermissionDeniedError(Exception):
    """
    Action privilégiée tentée sans la capacité requise.

    Attributes:
        capability: Capacité manquante
        role: Rôle de la session (None si anonyme)
        reason: Précision éventuelle
    """

    def __init__(
        self, capability: CapabilitySpec, role: Optional[str] = None, reason: Optional[str] = None
    ) -> None:
        parsed = Capability.parse(capability)
        self.capability = parsed.value if parsed is not None else str(capability)
        self.role = role
        self.reason = reason
        message = f"Permission denied: {self.capability} (role={role})"
        super().__init__(f"{message}: {reason}" if reason else message)


ROLE_PERMISSIONS: Mapping[Role, FrozenSet[Capability]] = MappingProxyType(
    {
        Role.OWNER: frozenset(Capability),
        Role.MANAGER: frozenset(
            {
                Capability.MANAGE_SKUS,
                Capability.SET_INVENTORY,
                Capability.VIEW_ANALYTICS,
                Capability.VIEW_ALL_PAGES,
            }
        ),
        Role.STAFF: frozenset(),
    }
)


@dataclass(frozen=True)
class NavigationEntry:
    """Entrée de navigation: chemin, libellé et rôles autorisés."""

    path: str
    label: str
    roles: FrozenSet[Role]

    def allows(self, role: Optional[str]) -> bool:
        parsed = Role.parse(role)
        return parsed is not None and parsed in self.roles


_ALL_ROLES = frozenset(Role)
_OWNER_MANAGER = frozenset({Role.OWNER, Role.MANAGER})
_OWNER = frozenset({Role.OWNER})

NAV_ITEMS: Tuple[NavigationEntry, ...] = (
    NavigationEntry("/dashboard", "Dashboard", _ALL_ROLES),
    NavigationEntry("/inventory", "Inventory", _ALL_ROLES),
    NavigationEntry("/sku", "SKU Management", _OWNER_MANAGER),
    NavigationEntry("/warehouses", "Warehouses", _OWNER),
    NavigationEntry("/transactions", "Transactions", _ALL_ROLES),
    NavigationEntry("/alerts", "Alerts", _ALL_ROLES),
    NavigationEntry("/analytics", "Analytics", _OWNER_MANAGER),
    NavigationEntry("/users", "Users", _OWNER),
)


class PermissionChecker(IPermissionChecker):
    """
    Vérificateur de capacités par rôle.

    Example:
        checker = PermissionChecker()
        checker.has_permission("manager", "canViewAnalytics")  # True
        checker.has_permission("contractor", "canViewAnalytics")  # False
    """

    def __init__(self, table: Optional[Mapping[Role, FrozenSet[Capability]]] = None):
        self._table = table if table is not None else ROLE_PERMISSIONS

    def has_permission(self, role: Optional[str], capability: CapabilitySpec) -> bool:
        """
        Vérifie si le rôle dispose de la capacité.

        Args:
            role: Rôle brut de la session
            capability: Capacité (enum ou nom backend)

        Returns:
            True si accordée; False si rôle ou capacité inconnus
        """
        parsed_capability = Capability.parse(capability)
        if parsed_capability is None:
            return False
        return parsed_capability in self.capabilities_for(role)

    def capabilities_for(self, role: Optional[str]) -> FrozenSet[Capability]:
        parsed_role = Role.parse(role)
        if parsed_role is None:
            return frozenset()
        return self._table.get(parsed_role, frozenset())

    def permission_flags(self, role: Optional[str]) -> dict:
        """Drapeaux nommés {"canManageUsers": bool, ...} pour un rôle."""
        granted = self.capabilities_for(role)
        return {capability.value: capability in granted for capability in Capability}

    def navigation_for(self, role: Optional[str]) -> List[NavigationEntry]:
        """Entrées de navigation accessibles au rôle, dans l'ordre d'affichage."""
        return [entry for entry in NAV_ITEMS if entry.allows(role)]
