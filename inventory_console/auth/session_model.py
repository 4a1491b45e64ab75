"""
Auth - Session Model

Session côté client: utilisateur courant, rôle, prédicats de permission.

La session est une cellule unique, modifiée uniquement par _apply().
Chaque opération prend un ticket croissant à son démarrage; un résultat
dont le ticket est antérieur à la dernière transition appliquée est
périmé et ignoré. La dernière opération démarrée l'emporte: un logout
pendant la vérification de démarrage n'est pas annulé par la réponse
tardive du profil.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..client.api_client import ApiClient, ApiError, ClientError
from ..logging.structured_logger import StructuredLogger
from .interfaces import (
    AuthState,
    CapabilitySpec,
    ISessionModel,
    Role,
    RoleSpec,
    Session,
    SessionListener,
    SessionSnapshot,
)
from .permissions import PermissionChecker


class SessionModel(ISessionModel):
    """
    Modèle de session.

    Example:
        session = SessionModel(api)
        await session.check_auth()
        if session.has_permission("canViewAnalytics"):
            ...
    """

    def __init__(
        self,
        api: ApiClient,
        permission_checker: Optional[PermissionChecker] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            api: Client HTTP (détient le token store)
            permission_checker: Table des capacités (défaut: ROLE_PERMISSIONS)
            logger: Logger structuré
        """
        self._api = api
        self._permissions = permission_checker or PermissionChecker()
        self._logger = logger or StructuredLogger("inventory_console.auth")

        self._state = AuthState.UNKNOWN
        self._session: Optional[Session] = None
        # Token de la session appliquée, restauré si une connexion périmée l'écrase
        self._credential: Optional[str] = None

        self._last_ticket = 0
        self._applied_ticket = 0
        self._listeners: List[SessionListener] = []

    # ══════════════════════════════════════════════════════════════════════
    # ÉTAT
    # ══════════════════════════════════════════════════════════════════════

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.AUTHENTICATED and self._session is not None

    @property
    def is_loading(self) -> bool:
        return self._state in (AuthState.UNKNOWN, AuthState.CHECKING)

    @property
    def version(self) -> int:
        return self._applied_ticket

    @property
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(self._state, self._session, self._applied_ticket)

    @property
    def permissions(self) -> Dict[str, bool]:
        """Drapeaux de capacité du rôle courant (tous False si anonyme)."""
        return self._permissions.permission_flags(self._role)

    @property
    def _role(self) -> Optional[str]:
        return self._session.role if self.is_authenticated else None

    def subscribe(self, listener: SessionListener) -> None:
        """Enregistre un observateur appelé à chaque transition."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    # ══════════════════════════════════════════════════════════════════════
    # PRÉDICATS
    # ══════════════════════════════════════════════════════════════════════

    def has_permission(self, capability: CapabilitySpec) -> bool:
        """
        Vérifie une capacité pour la session courante.

        Returns:
            False si anonyme, rôle inconnu ou capacité inconnue
        """
        return self._permissions.has_permission(self._role, capability)

    def has_role(self, roles: RoleSpec) -> bool:
        """
        Vérifie l'appartenance du rôle courant à un rôle ou une liste de rôles.

        Args:
            roles: "owner", Role.OWNER ou ["owner", "manager"]
        """
        role = self._role
        if not role:
            return False
        if isinstance(roles, (str, Role)):
            roles = [roles]
        return any(
            (candidate.value if isinstance(candidate, Role) else candidate) == role
            for candidate in roles
        )

    # ══════════════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ══════════════════════════════════════════════════════════════════════

    async def check_auth(self) -> SessionSnapshot:
        """
        Vérification de démarrage.

        Processus:
            1. Pas de token → ANONYMOUS
            2. Token → CHECKING, récupération du profil
            3. Profil valide → AUTHENTICATED, sinon token purgé et ANONYMOUS

        Les échecs backend sont journalisés, jamais propagés.
        """
        ticket = self._issue_ticket()
        token = self._api.get_token()

        if not token:
            self._apply(ticket, AuthState.ANONYMOUS, None)
            return self.snapshot

        self._apply(ticket, AuthState.CHECKING, None)

        session: Optional[Session] = None
        try:
            response = await self._api.get_profile()
            if response.get("success"):
                session = Session.from_user(response.get("data"))
            else:
                self._logger.warn("Profile check rejected", backend_message=response.get("message"))
        except ClientError as e:
            self._logger.warn("Profile check failed", error=str(e), error_type=type(e).__name__)
        except ValueError as e:
            self._logger.warn("Profile check returned an invalid user", error=str(e))

        if self._is_stale(ticket):
            self._logger.debug("Discarding stale profile check", ticket=ticket)
            return self.snapshot

        if session is None:
            self._api.remove_token()
            self._credential = None
            self._apply(ticket, AuthState.ANONYMOUS, None)
        else:
            self._credential = token
            self._apply(ticket, AuthState.AUTHENTICATED, session)
        return self.snapshot

    async def login(self, email: str, password: str) -> SessionSnapshot:
        """
        Connexion.

        Raises:
            ApiError: Refus du backend ou réponse sans utilisateur
            NetworkError: Backend injoignable
        """
        ticket = self._issue_ticket()
        response = await self._api.login(email, password)
        return self._complete_authentication(ticket, response, "login")

    async def register(self, user_data: Mapping[str, Any]) -> SessionSnapshot:
        """
        Inscription; connecte l'utilisateur créé.

        Raises:
            ApiError: Refus du backend ou réponse sans utilisateur
            NetworkError: Backend injoignable
        """
        ticket = self._issue_ticket()
        response = await self._api.register(user_data)
        return self._complete_authentication(ticket, response, "register")

    def logout(self) -> SessionSnapshot:
        """Oublie token et session, sans appel backend."""
        ticket = self._issue_ticket()
        self._api.logout()
        self._credential = None
        self._apply(ticket, AuthState.ANONYMOUS, None)
        self._logger.info("Logged out")
        return self.snapshot

    def update_user(self, partial: Mapping[str, Any]) -> Optional[Session]:
        """
        Fusionne des champs dans la session, sans aller-retour backend.

        Returns:
            Session mise à jour, None si aucune session active
        """
        if not self.is_authenticated:
            return None
        self._apply(self._applied_ticket, AuthState.AUTHENTICATED, self._session.merge(partial))
        return self._session

    # ══════════════════════════════════════════════════════════════════════
    # INTERNE
    # ══════════════════════════════════════════════════════════════════════

    def _complete_authentication(
        self, ticket: int, response: Mapping[str, Any], operation: str
    ) -> SessionSnapshot:
        data = response.get("data")
        token = data.get("token") if isinstance(data, Mapping) else None
        user = data.get("user") if isinstance(data, Mapping) else None

        if self._is_stale(ticket):
            # Le client a déjà enregistré le token de cette réponse
            self._restore_credential()
            self._logger.debug("Discarding stale authentication", operation=operation, ticket=ticket)
            return self.snapshot

        try:
            session = Session.from_user(user)
        except ValueError as e:
            self._restore_credential()
            self._logger.warn("Authentication response without user", operation=operation, error=str(e))
            raise ApiError(ApiClient.FALLBACK_MESSAGE, payload=dict(response)) from e

        if not token:
            self._restore_credential()
            self._logger.warn("Authentication response without token", operation=operation)
            raise ApiError(ApiClient.FALLBACK_MESSAGE, payload=dict(response))

        self._credential = token
        self._apply(ticket, AuthState.AUTHENTICATED, session)
        self._logger.info("Authenticated", operation=operation, role=session.role)
        return self.snapshot

    def _restore_credential(self) -> None:
        if self.is_authenticated and self._credential:
            self._api.set_token(self._credential)
        else:
            self._api.remove_token()

    def _issue_ticket(self) -> int:
        self._last_ticket += 1
        return self._last_ticket

    def _is_stale(self, ticket: int) -> bool:
        return ticket < self._applied_ticket

    def _apply(self, ticket: int, state: AuthState, session: Optional[Session]) -> bool:
        """
        Unique point d'écriture de la session.

        Returns:
            False si la transition est périmée (non appliquée)
        """
        if self._is_stale(ticket):
            return False

        previous = self._state
        self._applied_ticket = ticket
        self._state = state
        self._session = session
        self._logger.set_default_user(session.user_id if session else None)

        if previous != state:
            self._logger.debug("Session transition", previous=previous.value, state=state.value, version=ticket)

        snapshot = self.snapshot
        for listener in list(self._listeners):
            listener(snapshot)
        return True
