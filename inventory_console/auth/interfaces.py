"""
Auth - Interfaces

Définit les contrats de la session côté client et des autorisations.
Toute implémentation DOIT respecter ces interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Union


class Role(Enum):
    """Rôles connus du backend."""

    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Retourne le rôle correspondant, ou None si inconnu."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Capability(Enum):
    """Capacités nommées, chacune attribuée ou non à un rôle."""

    MANAGE_USERS = "canManageUsers"
    MANAGE_WAREHOUSES = "canManageWarehouses"
    MANAGE_SKUS = "canManageSKUs"
    DELETE_SKUS = "canDeleteSKUs"
    SET_INVENTORY = "canSetInventory"
    VIEW_ANALYTICS = "canViewAnalytics"
    VIEW_ALL_PAGES = "canViewAllPages"

    @classmethod
    def parse(cls, value: Any) -> Optional["Capability"]:
        """Accepte l'enum ou son nom backend ("canManageSKUs")."""
        if isinstance(value, Capability):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class AuthState(Enum):
    """États de la session côté client."""

    UNKNOWN = "unknown"  # avant la vérification de démarrage
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


RoleSpec = Union[str, Role, Iterable[Union[str, Role]]]
CapabilitySpec = Union[str, Capability]


# Champs backend (camelCase) → attributs Session
_USER_FIELDS: Dict[str, str] = {
    "_id": "user_id",
    "id": "user_id",
    "user_id": "user_id",
    "name": "name",
    "email": "email",
    "role": "role",
    "assignedWarehouse": "assigned_warehouse",
    "assigned_warehouse": "assigned_warehouse",
    "isActive": "is_active",
    "is_active": "is_active",
}


@dataclass(frozen=True)
class Session:
    """
    Identité de l'utilisateur connecté.

    Attributes:
        user_id: Identifiant backend (_id)
        name: Nom affiché
        email: Adresse email
        role: Rôle tel que renvoyé par le backend (peut être inconnu)
        assigned_warehouse: Entrepôt affecté (id ou objet), None si aucun
        is_active: Compte actif
        extra: Autres champs du document utilisateur, conservés tels quels
    """

    user_id: str
    name: str
    email: str
    role: str
    assigned_warehouse: Any = None
    is_active: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_user(cls, user: Any) -> "Session":
        """
        Construit la session depuis le document utilisateur du backend.

        Raises:
            ValueError: Document absent ou sans identifiant
        """
        if not isinstance(user, Mapping):
            raise ValueError("User document missing")

        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in user.items():
            attribute = _USER_FIELDS.get(key)
            if attribute is None:
                extra[key] = value
            elif attribute not in values:
                values[attribute] = value

        if not values.get("user_id"):
            raise ValueError("User document has no id")

        return cls(
            user_id=str(values["user_id"]),
            name=str(values.get("name") or ""),
            email=str(values.get("email") or ""),
            role=str(values.get("role") or ""),
            assigned_warehouse=values.get("assigned_warehouse"),
            is_active=bool(values.get("is_active", True)),
            extra=extra,
        )

    def merge(self, partial: Mapping[str, Any]) -> "Session":
        """Retourne une copie avec les champs de partial fusionnés."""
        changes: Dict[str, Any] = {}
        extra = dict(self.extra)
        for key, value in partial.items():
            attribute = _USER_FIELDS.get(key)
            if attribute is None:
                extra[key] = value
            elif attribute == "user_id":
                changes[attribute] = str(value)
            else:
                changes[attribute] = value
        return replace(self, extra=extra, **changes)

    def to_user(self) -> Dict[str, Any]:
        """Document utilisateur au format backend."""
        user = dict(self.extra)
        user.update(
            {
                "_id": self.user_id,
                "name": self.name,
                "email": self.email,
                "role": self.role,
                "assignedWarehouse": self.assigned_warehouse,
                "isActive": self.is_active,
            }
        )
        return user


@dataclass(frozen=True)
class SessionSnapshot:
    """État observable de la session à un instant donné."""

    state: AuthState
    session: Optional[Session]
    version: int

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED and self.session is not None

    @property
    def is_loading(self) -> bool:
        return self.state in (AuthState.UNKNOWN, AuthState.CHECKING)


SessionListener = Callable[[SessionSnapshot], None]


class IPermissionChecker(ABC):
    """Interface vérification des capacités par rôle."""

    @abstractmethod
    def has_permission(self, role: Optional[str], capability: CapabilitySpec) -> bool:
        """
        Vérifie si le rôle dispose de la capacité.

        Returns:
            False si rôle ou capacité inconnus
        """
        pass

    @abstractmethod
    def capabilities_for(self, role: Optional[str]) -> FrozenSet[Capability]:
        """Capacités accordées au rôle (vide si rôle inconnu)."""
        pass


class ISessionModel(ABC):
    """
    Interface du modèle de session.

    Cycle: UNKNOWN → CHECKING → AUTHENTICATED | ANONYMOUS
    """

    @abstractmethod
    async def check_auth(self) -> SessionSnapshot:
        """Vérification de démarrage; ne lève jamais pour un échec backend."""
        pass

    @abstractmethod
    async def login(self, email: str, password: str) -> SessionSnapshot:
        """
        Connexion.

        Raises:
            ApiError: Refus du backend (état inchangé)
            NetworkError: Backend injoignable (état inchangé)
        """
        pass

    @abstractmethod
    async def register(self, user_data: Mapping[str, Any]) -> SessionSnapshot:
        """Inscription; même contrat que login."""
        pass

    @abstractmethod
    def logout(self) -> SessionSnapshot:
        """Oublie token et session, sans appel backend."""
        pass

    @abstractmethod
    def update_user(self, partial: Mapping[str, Any]) -> Optional[Session]:
        """Fusionne des champs déjà persistés côté backend dans la session."""
        pass

    @abstractmethod
    def has_permission(self, capability: CapabilitySpec) -> bool:
        pass

    @abstractmethod
    def has_role(self, roles: RoleSpec) -> bool:
        pass
